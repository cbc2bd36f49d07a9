# __init__.py


from .app import APP, VERSION
from .allele.core import unphase_gt, count_alleles, filter_loci, \
    counts_to_props
from .dar.contrast import make_contrasts
from .dar.core import dar, dar_to_frame
from .dar.feature import assign_feature_dar
from .dar.grange import flip_ranges
from .main import dar_wrapper
from .utils.vcf import format_genotypes, read_genotypes


__version__ = VERSION
