# core.py - core part of allele counting.


import ast
import numpy as np
import pandas as pd

from logging import error, info
from ..utils.allele import ALLELE_COUNT_COLUMNS, COUNT_COLUMNS, \
    PROP_COLUMNS, check_tables, gt2counts, get_locus_columns, \
    get_sample_columns
from ..utils.base import is_function
from ..utils.vcf import format_genotypes


# default predicate used to filter loci.
DEFAULT_FILTER = "n_called > n_missing"



def unphase_gt(gt):
    """Remove phasing information from genotype calls.

    Phased calls such as "0|1" are converted into unphased ones ("0/1") so
    that alleles can be counted regardless of the parental copy.

    Parameters
    ----------
    gt : pandas.DataFrame or numpy.ndarray
        A genotype table (locus columns are kept unchanged) or a *locus x
        sample* matrix of genotype calls.

    Returns
    -------
    pandas.DataFrame or numpy.ndarray
        A new object of the same type containing unphased calls.
    """
    if isinstance(gt, pd.DataFrame):
        df = gt.copy()
        for col in get_sample_columns(df):
            df[col] = df[col].map(__unphase)
        return(df)
    mtx = np.asarray(gt, dtype = object)
    return(np.vectorize(__unphase, otypes = [object])(mtx) \
        if mtx.size > 0 else mtx.copy())


def __unphase(x):
    return x.replace("|", "/") if isinstance(x, str) else x



def count_alleles(gt, groups, verbose = False):
    """Count alleles of each locus in every sample group.

    Parameters
    ----------
    gt : pandas.DataFrame
        The genotype table, see :func:`~..utils.vcf.format_genotypes()`.
    groups : dict of {str : list of str}
        Sample groups.
        Keys are group names and values are sample IDs, which should be
        present in the columns of `gt`.
    verbose : bool, default False
        Whether to show detailed logging information.

    Returns
    -------
    dict of {str : pandas.DataFrame}
        Allele counts of each group, in the order of `groups`.
        Every table has the locus columns of `gt`, followed by columns
        "n_called", "n_missing" and "n_0" to "n_3", in the same locus order
        as `gt`.
    """
    gt = format_genotypes(gt)
    __check_groups(groups, get_sample_columns(gt))

    samples = []
    for smps in groups.values():
        samples.extend([s for s in smps if s not in samples])
    smp_idx = {s:i for i, s in enumerate(samples)}
    n_loci = gt.shape[0]

    if verbose:
        info("counting alleles of %d loci in %d groups (%d samples) ..." % \
            (n_loci, len(groups), len(samples)))

    # map every unique call to its allele counts only once.
    values = gt[samples].to_numpy(dtype = object)
    codes, uniques = pd.factorize(values.ravel(), use_na_sentinel = True)
    try:
        ucnt = np.vstack([gt2counts(u) for u in uniques] + \
            [gt2counts(None)])     # code -1 points to the missing row.
    except ValueError as e:
        error(str(e))
        raise
    codes = codes.reshape(n_loci, len(samples))

    locus_df = gt[get_locus_columns(gt)]
    res = {}
    for grp, smps in groups.items():
        idx = [smp_idx[s] for s in smps]
        cnt = ucnt[codes[:, idx]].sum(axis = 1)
        n_missing = cnt[:, -1]
        df = locus_df.copy()
        df["n_called"] = len(smps) - n_missing
        df["n_missing"] = n_missing
        for i, col in enumerate(ALLELE_COUNT_COLUMNS):
            df[col] = cnt[:, i]
        res[grp] = df
        if verbose:
            info("group '%s': %d samples counted." % (grp, len(smps)))
    return(res)


def __check_groups(groups, samples):
    if not isinstance(groups, dict) or len(groups) <= 0:
        error("sample groups should be a non-empty dict.")
        raise ValueError
    samples = set(samples)
    for grp, smps in groups.items():
        if isinstance(smps, str) or len(smps) <= 0:
            error("group '%s' should be a non-empty list of sample IDs." % grp)
            raise ValueError
        if len(set(smps)) != len(smps):
            error("duplicate sample IDs in group '%s'." % grp)
            raise ValueError
        missing = [s for s in smps if s not in samples]
        if len(missing) > 0:
            error("samples %s of group '%s' not in the genotype table." % \
                (str(missing), grp))
            raise ValueError



def filter_loci(counts, expr = DEFAULT_FILTER, verbose = False):
    """Filter loci of every group based on their allele counts.

    Parameters
    ----------
    counts : dict of {str : pandas.DataFrame}
        Allele counts of each group, see :func:`count_alleles()`.
    expr : str or callable, default "n_called > n_missing"
        The predicate deciding which loci to keep.
        A str is a boolean expression over the count columns "n_called",
        "n_missing", "n_0", "n_1", "n_2" and "n_3", evaluated with
        `pandas.DataFrame.eval()`, e.g., "n_missing == 0".
        A callable takes one count table and returns a boolean mask.
    verbose : bool, default False
        Whether to show detailed logging information.

    Returns
    -------
    dict of {str : pandas.DataFrame}
        The filtered allele counts.
        The predicate is applied to each group independently, hence the
        groups may retain different loci.
    """
    check_tables(counts, COUNT_COLUMNS, "count")
    if not is_function(expr):
        __check_expr(expr)

    res = {}
    for grp, df in counts.items():
        if df.shape[0] <= 0:
            res[grp] = df.copy()
            continue
        mask = expr(df) if is_function(expr) else df.eval(expr)
        mask = np.asarray(mask)
        if mask.dtype != bool or mask.shape != (df.shape[0], ):
            error("filter expression should return one bool per locus.")
            raise ValueError
        res[grp] = df[mask].reset_index(drop = True)
        if verbose:
            info("group '%s': %d loci kept from %d old ones." % \
                (grp, res[grp].shape[0], df.shape[0]))
    return(res)


def __check_expr(expr):
    if not isinstance(expr, str) or len(expr.strip()) <= 0:
        error("filter expression should be a non-empty str or a function.")
        raise ValueError
    try:
        tree = ast.parse(expr.strip(), mode = "eval")
    except SyntaxError:
        error("invalid filter expression '%s'." % expr)
        raise ValueError
    names = set([n.id for n in ast.walk(tree) if isinstance(n, ast.Name)])
    unknown = names - set(COUNT_COLUMNS) - set(["True", "False"])
    if len(unknown) > 0:
        error("unknown columns %s in filter expression '%s'." % \
            (str(sorted(unknown)), expr))
        raise ValueError



def counts_to_props(counts, verbose = False):
    """Convert allele counts into allele proportions.

    Parameters
    ----------
    counts : dict of {str : pandas.DataFrame}
        Allele counts of each group, see :func:`count_alleles()`.
    verbose : bool, default False
        Whether to show detailed logging information.

    Returns
    -------
    dict of {str : pandas.DataFrame}
        Allele proportions of each group.
        The count columns are replaced by "p_0" to "p_3".
        Loci without any called allele are removed.
    """
    check_tables(counts, ALLELE_COUNT_COLUMNS, "count")

    res = {}
    for grp, df in counts.items():
        total = df[ALLELE_COUNT_COLUMNS].sum(axis = 1).to_numpy()
        keep = total > 0
        props = df.loc[keep, ALLELE_COUNT_COLUMNS].to_numpy(dtype = float) / \
            total[keep].reshape(-1, 1)
        new_df = df.loc[keep, get_locus_columns(df)].reset_index(drop = True)
        for i, col in enumerate(PROP_COLUMNS):
            new_df[col] = props[:, i]
        res[grp] = new_df
        if verbose and np.sum(~keep) > 0:
            info("group '%s': %d loci without called alleles removed." % \
                (grp, np.sum(~keep)))
    return(res)

