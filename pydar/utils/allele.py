# allele.py - genotype calls and allele columns.


import numpy as np
import pandas as pd

from logging import error


# the largest supported allele index, i.e., REF plus up to 3 ALT alleles.
MAX_ALLELE_INDEX = 3

ALLELE_INDICES = list(range(MAX_ALLELE_INDEX + 1))

# columns identifying one locus in genotype, count, proportion and DAR tables.
LOCUS_COLUMNS = ["chrom", "pos", "id", "ref"]

# columns forming the locus key.
LOCUS_KEY = ["chrom", "pos"]

ALLELE_COUNT_COLUMNS = ["n_%d" % i for i in ALLELE_INDICES]
COUNT_COLUMNS = ["n_called", "n_missing"] + ALLELE_COUNT_COLUMNS
PROP_COLUMNS = ["p_%d" % i for i in ALLELE_INDICES]

MISSING_ALLELE = "."



def parse_gt(gt):
    """Parse one diploid genotype call.

    Parameters
    ----------
    gt : str or None
        The genotype call, e.g., "0/1", "1|2", "./." or ".".
        Non-string values (e.g., None or NaN) are treated as missing.

    Returns
    -------
    tuple of (int, int) or None
        The two allele indices, sorted; `None` if the call is missing,
        i.e., at least one of its alleles is ".".

    Raises
    ------
    ValueError
        If the call is not diploid, or has an allele index that is not an
        integer in [0, MAX_ALLELE_INDEX].
    """
    if not isinstance(gt, str):
        return(None)
    gt = gt.strip()
    if gt in ("", MISSING_ALLELE):
        return(None)
    alleles = gt.replace("|", "/").split("/")
    if len(alleles) != 2:
        raise ValueError("genotype '%s' is not diploid." % gt)
    if MISSING_ALLELE in alleles:
        return(None)
    idx = []
    for a in alleles:
        if not a.isdigit():
            raise ValueError("invalid allele '%s' in genotype '%s'." % \
                (a, gt))
        a = int(a)
        if a > MAX_ALLELE_INDEX:
            raise ValueError("allele index %d in genotype '%s' is out of " \
                "range [0, %d]." % (a, gt, MAX_ALLELE_INDEX))
        idx.append(a)
    return(tuple(sorted(idx)))


def gt2counts(gt):
    """Convert one genotype call into allele counts.

    Returns
    -------
    numpy.ndarray
        A vector of length `MAX_ALLELE_INDEX + 2`: the counts of each allele
        index, followed by the missing flag (1 if missing, 0 otherwise).
    """
    res = np.zeros(MAX_ALLELE_INDEX + 2, dtype = np.int64)
    idx = parse_gt(gt)
    if idx is None:
        res[-1] = 1
    else:
        for a in idx:
            res[a] += 1
    return(res)


def get_locus_columns(df):
    """Return the locus columns present in `df`, in canonical order."""
    return([c for c in LOCUS_COLUMNS if c in df.columns])


def get_sample_columns(df):
    """Return the sample columns of a genotype table."""
    return([c for c in df.columns if c not in LOCUS_COLUMNS])


def empty_locus_frame(columns):
    """Create an empty table with locus columns of proper dtypes."""
    df = pd.DataFrame({c: pd.Series(dtype = object) for c in columns})
    if "pos" in df.columns:
        df["pos"] = df["pos"].astype(np.int64)
    return(df)


def check_tables(tables, columns, name):
    """Check per-group tables are a dict of DataFrames with `columns`."""
    if not isinstance(tables, dict):
        error("%s tables should be a dict of DataFrames." % name)
        raise ValueError
    for grp, df in tables.items():
        if not isinstance(df, pd.DataFrame):
            error("%s table of group '%s' is not a DataFrame." % (name, grp))
            raise ValueError
        missing = [c for c in LOCUS_KEY + columns if c not in df.columns]
        if len(missing) > 0:
            error("columns %s missing in %s table of group '%s'." % \
                (str(missing), name, grp))
            raise ValueError
