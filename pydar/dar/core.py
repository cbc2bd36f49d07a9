# core.py - core part of DAR calculation.


import numpy as np
import pandas as pd

from logging import error, info
from logging import warning as warn
from .contrast import check_contrast, format_contrasts, get_max_norm
from ..utils.allele import LOCUS_COLUMNS, LOCUS_KEY, PROP_COLUMNS, \
    check_tables, empty_locus_frame, get_locus_columns
from ..utils.base import is_odd


DAR_COLUMNS = ["dar_origin"]
REGION_COLUMNS = ["dar_region", "region_start", "region_end"]



def dar(
    props,
    contrasts,
    region_fixed = None,
    region_loci = None,
    smooth = None,
    verbose = False
):
    """Calculate Differential Allelic Representation (DAR).

    Parameters
    ----------
    props : dict of {str : pandas.DataFrame}
        Allele proportions of each group, see
        :func:`~..allele.core.counts_to_props()`.
    contrasts : dict or list of str
        The contrasts between groups, see
        :func:`~.contrast.format_contrasts()`.
    region_fixed : int or None, default None
        Size (bp) of the window centred on each locus, used to calculate the
        smoothed DAR "dar_region".
        It takes precedence over `region_loci` if both are specified.
    region_loci : int or None, default None
        Number of loci (an odd number) in the window centred on each locus,
        used to calculate the smoothed DAR "dar_region".
    smooth : bool or None, default None
        Whether to calculate "dar_region".
        If `None`, it is `True` when one of `region_fixed` and
        `region_loci` is specified.
    verbose : bool, default False
        Whether to show detailed logging information.

    Returns
    -------
    dict of {str : pandas.DataFrame}
        DAR results of each contrast.
        Every table lists the loci present in all groups of the contrast,
        sorted by "chrom" (in order of appearance) and "pos".
        Its columns are the locus columns, "dar_origin", and, when smoothing,
        "dar_region" plus the window range "region_start" and "region_end"
        (1-based, inclusive).
    """
    check_tables(props, PROP_COLUMNS, "proportion")
    contrasts = format_contrasts(contrasts)
    region = check_region(region_fixed, region_loci, smooth)

    res = {}
    for name, coefs in contrasts.items():
        coefs = check_contrast(name, coefs, list(props.keys()))
        if verbose:
            info("calculating DAR of contrast '%s' ..." % name)
        df = dar_contrast(props, coefs)
        if region is not None:
            df = dar_region(df, how = region[0], size = region[1])
        res[name] = df
        if verbose:
            info("contrast '%s': DAR of %d loci calculated." % \
                (name, df.shape[0]))
    return(res)


def check_region(region_fixed = None, region_loci = None, smooth = None):
    """Check the smoothing parameters.

    Returns
    -------
    tuple of (str, int) or None
        The smoothing method ("fixed" or "loci") and the window size;
        `None` if not smoothing.
    """
    if smooth is None:
        smooth = region_fixed is not None or region_loci is not None
    if not smooth:
        return(None)
    if region_fixed is None and region_loci is None:
        error("one of `region_fixed` and `region_loci` should be specified " \
            "for smoothing.")
        raise ValueError
    if region_fixed is not None:
        if region_loci is not None:
            warn("both `region_fixed` and `region_loci` specified; " \
                "use `region_fixed` (%s)." % str(region_fixed))
        if not isinstance(region_fixed, (int, np.integer)) or \
                isinstance(region_fixed, bool) or region_fixed < 1:
            error("`region_fixed` should be a positive int.")
            raise ValueError
        return(("fixed", int(region_fixed)))
    if not is_odd(region_loci) or region_loci < 1:
        error("`region_loci` should be a positive odd int.")
        raise ValueError
    return(("loci", int(region_loci)))



def dar_contrast(props, coefs):
    """Calculate the DAR of every locus shared by the groups of one contrast.

    Parameters
    ----------
    props : dict of {str : pandas.DataFrame}
        Allele proportions of each group.
    coefs : dict of {str : float}
        Non-zero coefficients of the groups in the contrast.

    Returns
    -------
    pandas.DataFrame
        The locus columns and "dar_origin".
    """
    groups = list(coefs.keys())
    locus_cols = get_locus_columns(props[groups[0]])
    for grp in groups:
        if props[grp].duplicated(LOCUS_KEY).any():
            error("duplicate loci in proportions of group '%s'." % grp)
            raise ValueError

    # inner join keeps the loci present in every group.
    merged = None
    for k, grp in enumerate(groups):
        cols = locus_cols if k == 0 else LOCUS_KEY
        df = props[grp][cols + PROP_COLUMNS].rename(
            columns = {c: "%d_%s" % (k, c) for c in PROP_COLUMNS})
        if merged is None:
            merged = df
        else:
            merged = merged.merge(df, how = "inner", on = LOCUS_KEY)

    diff = np.zeros((merged.shape[0], len(PROP_COLUMNS)), dtype = float)
    for k, grp in enumerate(groups):
        cols = ["%d_%s" % (k, c) for c in PROP_COLUMNS]
        diff += coefs[grp] * merged[cols].to_numpy(dtype = float)

    if merged.shape[0] <= 0:
        res = empty_locus_frame(locus_cols)
    else:
        res = merged[locus_cols].copy()
    res["dar_origin"] = np.linalg.norm(diff, axis = 1) / get_max_norm(coefs)
    res = sort_loci(res)
    return(res)


def sort_loci(df):
    """Sort loci by chromosome (in order of appearance) and position."""
    chroms = pd.unique(df["chrom"])
    chrom_idx = df["chrom"].map({c:i for i, c in enumerate(chroms)})
    order = np.lexsort((df["pos"].to_numpy(), chrom_idx.to_numpy()))
    return(df.iloc[order].reset_index(drop = True))



def dar_region(df, how, size):
    """Smooth DAR values across windows of neighbouring loci.

    Parameters
    ----------
    df : pandas.DataFrame
        DAR of one contrast with columns "chrom", "pos" and "dar_origin",
        sorted by "chrom" and "pos".
    how : {"fixed", "loci"}
        "fixed" - window of `size` bp centred on each locus, split evenly on
            each side of it.
        "loci" - window of `size` (odd) loci centred on each locus.
            Loci near the chromosome ends use the neighbours that exist.
    size : int
        Size of the window.

    Returns
    -------
    pandas.DataFrame
        A new object with extra columns "dar_region", "region_start" and
        "region_end".
    """
    res = df.copy()
    n = res.shape[0]
    dar_reg = np.zeros(n, dtype = float)
    reg_start = np.zeros(n, dtype = np.int64)
    reg_end = np.zeros(n, dtype = np.int64)

    for idx in __chrom_indices(res["chrom"].to_numpy()):
        pos = res["pos"].to_numpy()[idx]
        val = res["dar_origin"].to_numpy()[idx]
        csum = np.concatenate([[0.0], np.cumsum(val)])
        if how == "fixed":
            start = pos + (1 - size) // 2
            end = start + size - 1
            lo = np.searchsorted(pos, start, side = "left")
            hi = np.searchsorted(pos, end, side = "right")
            reg_start[idx] = np.maximum(start, 1)
            reg_end[idx] = end
        elif how == "loci":
            half = (size - 1) // 2
            i = np.arange(len(pos))
            lo = np.maximum(0, i - half)
            hi = np.minimum(len(pos), i + half + 1)
            reg_start[idx] = pos[lo]
            reg_end[idx] = pos[hi - 1]
        else:
            error("invalid smoothing method '%s'." % how)
            raise ValueError
        dar_reg[idx] = (csum[hi] - csum[lo]) / (hi - lo)

    res["dar_region"] = dar_reg
    res["region_start"] = reg_start
    res["region_end"] = reg_end
    return(res)


def __chrom_indices(chroms):
    """Row indices of each chromosome, assuming rows grouped by chrom."""
    if len(chroms) <= 0:
        return([])
    breaks = np.flatnonzero(chroms[1:] != chroms[:-1]) + 1
    return(np.split(np.arange(len(chroms)), breaks))



def dar_to_frame(dar_res):
    """Stack DAR results of all contrasts into one table.

    Parameters
    ----------
    dar_res : dict of {str : pandas.DataFrame}
        DAR results of each contrast, see :func:`dar()`.

    Returns
    -------
    pandas.DataFrame
        The stacked results, with an extra first column "contrast".
    """
    lst = []
    for name, df in dar_res.items():
        df = df.copy()
        df.insert(0, "contrast", name)
        lst.append(df)
    if len(lst) <= 0:
        return(pd.DataFrame(columns = ["contrast"] + LOCUS_COLUMNS[:2] + \
            DAR_COLUMNS))
    return(pd.concat(lst, ignore_index = True))
