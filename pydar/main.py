# main.py - cmdline interface and the DAR pipeline.


import getopt
import logging
import os
import re
import sys
import time

from logging import info, error
from .allele.core import count_alleles, filter_loci, counts_to_props
from .app import APP, VERSION
from .config import Config, COMMAND
from .dar.contrast import make_contrasts
from .dar.core import check_region, dar
from .dar.feature import assign_feature_dar
from .dar.grange import flip_ranges
from .io.base import load_features, load_groups, load_list_from_str, \
    save_dar
from .utils.base import assert_e, assert_n
from .utils.vcf import read_genotypes
from .utils.xlog import init_logging



def usage(fp = sys.stdout, conf = None):
    s =  "\n"
    s += "Version: %s\n" % VERSION
    s += "Usage:   %s %s <options>\n" % (APP, COMMAND)
    s += "\n"
    s += "Options:\n"
    s += "  -v, --vcf FILE         A VCF file containing genotypes (GT) of all samples.\n"
    s += "  -g, --groups FILE      A header-free TSV file, columns sample and group.\n"
    s += "  -c, --contrasts STR    Comma separated contrasts, e.g., \"wt-mut\".\n"
    s += "  -O, --outdir DIR       Output directory.\n"
    s += "  -h, --help             Print this message and exit.\n"
    s += "\n"
    s += "Optional arguments:\n"
    s += "  -f, --features FILE    A header-free TSV file listing features (chrom,\n"
    s += "                         start, end, feature) to assign DAR to [None]\n"
    s += "  -r, --region STR       Only use variants in region, e.g., chr1:1-1000;\n"
    s += "                         requires an indexed VCF [None]\n"
    s += "      --filter STR       Expression over count columns to keep loci [%s]\n" % conf.FILTER_EXPR
    s += "      --regionFixed INT  Window size (bp) for smoothing DAR [None]\n"
    s += "      --regionLoci INT   Number of loci (odd) for smoothing DAR [None]\n"
    s += "      --darVal STR       DAR value assigned to features, origin or region [%s]\n" % conf.DAR_VAL
    s += "      --extendEdges      If use, extend edge windows to chromosome ends.\n"
    s += "      --verbose          If use, show detailed logging information.\n"
    s += "  -D, --debug INT        Used by developer for debugging [%d]\n" % conf.DEBUG
    s += "\n"

    fp.write(s)


def main():
    if len(sys.argv) <= 1 or sys.argv[1] in ("-h", "--help"):
        usage(sys.stdout, Config().defaults)
        sys.exit(0)
    if sys.argv[1] in ("-V", "--version"):
        sys.stdout.write("%s\n" % VERSION)
        sys.exit(0)
    if sys.argv[1] != COMMAND:
        sys.stderr.write("invalid command '%s'.\n" % sys.argv[1])
        usage(sys.stderr, Config().defaults)
        sys.exit(1)
    ret = dar_main(sys.argv)
    sys.exit(0 if ret == 0 else 1)


def dar_main(argv):
    """Command-Line interface.

    Parameters
    ----------
    argv : list
        A list of cmdline parameters.

    Returns
    -------
    int
        0 if success, -1 otherwise [int]
    """
    conf = Config()

    if len(argv) <= 2:
        usage(sys.stdout, conf.defaults)
        sys.exit(0)

    conf.argv = argv.copy()

    try:
        opts, args = getopt.getopt(
            args = argv[2:],
            shortopts = "-v:-g:-c:-O:-f:-r:-h-D:",
            longopts = [
                "vcf=", "groups=", "contrasts=", "outdir=",
                "help",

                "features=", "region=", "filter=",
                "regionFixed=", "regionLoci=",
                "darVal=", "extendEdges",
                "verbose", "debug="
            ])
    except getopt.GetoptError as e:
        init_logging(stream = sys.stdout)
        error(str(e))
        return(-1)

    for op, val in opts:
        if len(op) > 2:
            op = op.lower()
        if op in   ("-v", "--vcf"): conf.vcf_fn = val
        elif op in ("-g", "--groups"): conf.group_fn = val
        elif op in ("-c", "--contrasts"): conf.contrasts = val
        elif op in ("-O", "--outdir"): conf.out_dir = val
        elif op in ("-h", "--help"): usage(sys.stdout, conf.defaults); sys.exit(0)

        elif op in ("-f", "--features"): conf.feature_fn = val
        elif op in ("-r", "--region"): conf.region = val
        elif op in (      "--filter"): conf.filter_expr = val
        elif op in (      "--regionfixed"): conf.region_fixed = val
        elif op in (      "--regionloci"): conf.region_loci = val
        elif op in (      "--darval"): conf.dar_val = val
        elif op in (      "--extendedges"): conf.extend_edges = True
        elif op in (      "--verbose"): conf.verbose = True
        elif op in ("-D", "--debug"): conf.debug_level = val

        else:
            error("invalid option: '%s'." % op)
            return(-1)

    try:
        for attr in ("region_fixed", "region_loci", "debug_level"):
            val = getattr(conf, attr)
            if isinstance(val, str):
                setattr(conf, attr, int(val))
    except ValueError:
        init_logging(stream = sys.stdout)
        error("invalid integer '%s' for `%s`." % (val, attr))
        return(-1)

    ret, res = dar_run(conf)
    return(ret)


def dar_wrapper(
    vcf_fn, group_fn, contrasts, out_dir,
    feature_fn = None,
    region = None,
    filter_expr = "n_called > n_missing",
    region_fixed = None, region_loci = None,
    dar_val = "origin", extend_edges = False,
    verbose = False, debug_level = 0
):
    """Wrapper for running the DAR pipeline.

    Parameters
    ----------
    vcf_fn : str
        A VCF file containing the genotypes ("GT" in its "FORMAT" field) of
        all samples.
    group_fn : str
        A header-free TSV file listing sample groups.
        Its first two columns are:
        - "sample" (str): sample ID, as in the VCF header.
        - "group" (str): group name.
    contrasts : str
        Comma separated contrast expressions, e.g., "wt-mut,wt-het".
    out_dir : str
        The output folder.
    feature_fn : str or None, default None
        A header-free TSV file listing target features.
        Its first four columns are "chrom", "start", "end" (1-based and
        inclusive), and "feature".
        `None` means not assigning DAR to features.
    region : str or None, default None
        Only use variants in this genomic region, e.g., "chr1:1-1000000".
        It requires an indexed BGZF VCF file.
    filter_expr : str, default "n_called > n_missing"
        Expression over the count columns to decide which loci to keep,
        applied to each group independently.
    region_fixed : int or None, default None
        Window size (bp) for smoothing DAR.
    region_loci : int or None, default None
        Number of loci (odd) for smoothing DAR.
        `region_fixed` takes precedence if both are specified.
    dar_val : {"origin", "region"}
        DAR value assigned to features.
        "region" flips the DAR ranges into smoothing windows before
        assignment, hence requires smoothing.
    extend_edges : bool, default False
        Whether to extend the edge windows to the chromosome ends when
        `dar_val` is "region".
    verbose : bool, default False
        Whether to show detailed logging information.
    debug_level : int, default 0
        The debugging level, used by developers.

    Returns
    -------
    int
        The return code. 0 if success, negative otherwise.
    dict
        The returned data and output files.
    """
    conf = Config()

    conf.vcf_fn = vcf_fn
    conf.group_fn = group_fn
    conf.contrasts = contrasts
    conf.out_dir = out_dir
    conf.feature_fn = feature_fn

    conf.region = region
    conf.filter_expr = filter_expr

    conf.region_fixed = region_fixed
    conf.region_loci = region_loci

    conf.dar_val = dar_val
    conf.extend_edges = extend_edges

    conf.verbose = verbose
    conf.debug_level = debug_level

    ret, res = dar_run(conf)
    return((ret, res))


def dar_core(conf):
    if prepare_config(conf) < 0:
        error("errcode -2")
        raise ValueError
    info("program configuration:")
    conf.show(fp = sys.stdout, prefix = "\t")
    os.makedirs(conf.out_dir, exist_ok = True)


    # load genotypes and groups.
    info("loading genotypes ...")
    gt = read_genotypes(conf.vcf_fn, unphase = True, region = conf.region)
    groups = load_groups(conf.group_fn)
    info("%d groups loaded: %s." % (len(groups), ", ".join(groups.keys())))


    # count alleles.
    info("counting alleles ...")
    counts = count_alleles(gt, groups, verbose = conf.verbose)
    counts = filter_loci(counts, conf.filter_expr, verbose = conf.verbose)
    for grp, df in counts.items():
        info("group '%s': %d loci kept after filtering." % (grp, df.shape[0]))
    props = counts_to_props(counts, verbose = conf.verbose)


    # calculate DAR.
    info("calculating DAR ...")
    contrasts = make_contrasts(*conf.contrast_list)
    dar_res = dar(
        props, contrasts,
        region_fixed = conf.region_fixed,
        region_loci = conf.region_loci,
        verbose = conf.verbose
    )

    dar_fns = {}
    for name, df in dar_res.items():
        fn = os.path.join(conf.out_dir,
            conf.out_prefix_dar + __name2file(name) + ".tsv")
        save_dar(df, fn)
        dar_fns[name] = fn
        info("DAR of contrast '%s' (%d loci) saved to '%s'." % \
            (name, df.shape[0], fn))


    # assign DAR to features.
    feature_fns = None
    if conf.use_features():
        info("assigning DAR to features ...")
        features = load_features(conf.feature_fn)
        ranges = dar_res
        if conf.dar_val == "region":
            ranges = flip_ranges(dar_res, extend_edges = conf.extend_edges)
        fet_res = assign_feature_dar(
            ranges, features,
            dar_val = conf.dar_val,
            verbose = conf.verbose
        )
        feature_fns = {}
        for name, df in fet_res.items():
            fn = os.path.join(conf.out_dir,
                conf.out_prefix_feature + __name2file(name) + ".tsv")
            save_dar(df, fn)
            feature_fns[name] = fn
            info("features of contrast '%s' saved to '%s'." % (name, fn))


    # construct return values.
    res = {
        # dar : dict of {str : pandas.DataFrame}
        #   DAR results of each contrast.
        "dar": dar_res,

        # dar_fns : dict of {str : str}
        #   Path to the DAR file of each contrast.
        "dar_fns": dar_fns,

        # feature_fns : dict of {str : str} or None
        #   Path to the file of features with DAR, of each contrast.
        "feature_fns": feature_fns
    }
    return(res)


def dar_run(conf):
    if conf.debug_level > 0 or conf.verbose:
        init_logging(stream = sys.stdout, ch_level = logging.DEBUG)
    else:
        init_logging(stream = sys.stdout)

    ret = -1
    res = None

    start_time = time.time()
    time_str = time.strftime(
        "%Y-%m-%d %H:%M:%S", time.localtime(start_time))
    info("start time: %s." % time_str)
    info("%s (VERSION %s)." % (APP, VERSION))

    try:
        res = dar_core(conf)
    except ValueError as e:
        error(str(e))
        error("Running program failed.")
        error("Quiting ...")
        ret = -1
    else:
        info("All Done!")
        ret = 0
    finally:
        end_time = time.time()
        time_str = time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(end_time))
        info("end time: %s" % time_str)
        info("time spent: %.2fs" % (end_time - start_time, ))

    return((ret, res))


def prepare_config(conf):
    """Check and prepare the configuration.

    Parameters
    ----------
    conf : config.Config
        The :class:`~config.Config` object.

    Returns
    -------
    int
        Return code. 0 if success, -1 otherwise.
    """
    for fn in (conf.vcf_fn, conf.group_fn):
        if fn is None or not os.path.exists(fn):
            error("file '%s' does not exist." % fn)
            return(-1)
    if conf.feature_fn is not None:
        assert_e(conf.feature_fn)
    if not conf.out_dir:
        error("out dir needed!")
        return(-1)

    if not conf.contrasts:
        error("contrasts needed!")
        return(-1)
    conf.contrast_list = load_list_from_str(conf.contrasts, sep = ",")
    assert_n(conf.contrast_list)

    # raise ValueError on invalid window parameters.
    check_region(conf.region_fixed, conf.region_loci)

    if conf.dar_val not in ("origin", "region"):
        error("invalid dar_val '%s'." % conf.dar_val)
        return(-1)
    if conf.use_features() and conf.dar_val == "region" and \
            not conf.use_smoothing():
        error("dar_val 'region' requires `region_fixed` or `region_loci`.")
        return(-1)

    return(0)


def __name2file(name):
    return re.sub(r"[^\w.+-]", "_", name)
