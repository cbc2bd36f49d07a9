# config.py - global configuration.


import sys

from .allele.core import DEFAULT_FILTER

COMMAND = "dar"


class Config:
    """Configuration.

    Attributes
    ----------
    See :func:`~.main.dar_wrapper()`.
    """
    def __init__(self):
        self.defaults = Defaults()
        self.argv = None

        # input and output files.
        self.vcf_fn = None
        self.group_fn = None
        self.feature_fn = None
        self.out_dir = None

        # genotypes and loci.
        self.region = None
        self.filter_expr = self.defaults.FILTER_EXPR

        # DAR.
        self.contrasts = None
        self.region_fixed = None
        self.region_loci = None

        # feature assignment.
        self.dar_val = self.defaults.DAR_VAL
        self.extend_edges = False

        # others.
        self.verbose = False
        self.debug_level = self.defaults.DEBUG

        # derived parameters.

        # contrast_list : list of str
        #   A list of contrast expressions extracted from `contrasts`.
        self.contrast_list = None

        # out_prefix_dar : str
        #   Prefix to the output DAR files.
        self.out_prefix_dar = "dar."

        # out_prefix_feature : str
        #   Prefix to the output files of features with DAR.
        self.out_prefix_feature = "feature_dar."

    def show(self, fp = None, prefix = ""):
        if fp is None:
            fp = sys.stdout

        s =  "%s\n" % prefix
        s += "%svcf_file = %s\n" % (prefix, self.vcf_fn)
        s += "%sgroup_file = %s\n" % (prefix, self.group_fn)
        s += "%sfeature_file = %s\n" % (prefix, self.feature_fn)
        s += "%sout_dir = %s\n" % (prefix, self.out_dir)
        s += "%s\n" % prefix

        s += "%sregion = %s\n" % (prefix, self.region)
        s += "%sfilter_expr = %s\n" % (prefix, self.filter_expr)
        s += "%s\n" % prefix

        s += "%scontrasts = %s\n" % (prefix, self.contrasts)
        s += "%sregion_fixed = %s\n" % (prefix, str(self.region_fixed))
        s += "%sregion_loci = %s\n" % (prefix, str(self.region_loci))
        s += "%s\n" % prefix

        s += "%sdar_val = %s\n" % (prefix, self.dar_val)
        s += "%sextend_edges = %s\n" % (prefix, self.extend_edges)
        s += "%s\n" % prefix

        s += "%sverbose = %s\n" % (prefix, self.verbose)
        s += "%sdebug_level = %d\n" % (prefix, self.debug_level)
        s += "%s\n" % prefix

        s += "%scontrast_list = %s\n" % (prefix, str(self.contrast_list))
        s += "%sout_prefix_dar = %s\n" % (prefix, self.out_prefix_dar)
        s += "%sout_prefix_feature = %s\n" % (prefix, self.out_prefix_feature)
        s += "%s\n" % prefix

        fp.write(s)

    def use_smoothing(self):
        return self.region_fixed is not None or self.region_loci is not None

    def use_features(self):
        return self.feature_fn is not None



class Defaults:
    def __init__(self):
        self.DEBUG = 0
        self.FILTER_EXPR = DEFAULT_FILTER
        self.DAR_VAL = "origin"
