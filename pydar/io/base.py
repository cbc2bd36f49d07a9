# base.py - basic input and output.


import numpy as np
import pandas as pd

from logging import error
from ..utils.grange import format_chrom, format_start, format_end



def load_list_from_str(s, sep = ","):
    """Split the string into a list.

    Parameters
    ----------
    s : str
        The string to be splitted.
    sep : str, default ","
        The delimiter.

    Returns
    -------
    list of str
        A list of strings extracted from `s`.
    """
    dat = [x.strip().strip('"').strip("'") for x in s.split(sep)]
    dat = [x for x in dat if len(x) > 0]
    return(dat)



def load_groups(fn, sep = "\t"):
    """Load sample groups from a header-free file.

    Parameters
    ----------
    fn : str
        Path to a header-free file whose first two columns are:
        - "sample" (str): sample ID, as in the VCF header.
        - "group" (str): group name.
    sep : str, default "\t"
        File delimiter.

    Returns
    -------
    dict of {str : list of str}
        Keys are group names (in order of appearance) and values are
        sample IDs.
    """
    df = pd.read_csv(fn, sep = sep, header = None, dtype = str)
    if df.shape[1] < 2:
        error("group file '%s' should have at least 2 columns." % fn)
        raise ValueError
    df.columns = ["sample", "group"] + list(df.columns[2:].astype(str))
    if df["sample"].duplicated().any():
        error("duplicate samples in group file '%s'." % fn)
        raise ValueError
    groups = {}
    for smp, grp in zip(df["sample"], df["group"]):
        groups.setdefault(grp, []).append(smp)
    return(groups)



def load_features(fn, sep = "\t"):
    """Load feature annotation from a header-free file.

    Parameters
    ----------
    fn : str
        Path to a a header-free file containing feature annotations, whose
        first four columns should be:
        - "chrom" (str): chromosome name of the feature.
        - "start" (int): start genomic position of the feature, 1-based and
          inclusive.
        - "end" (int): end genomic position of the feature, 1-based and
          inclusive.
        - "feature" (str): feature name.
    sep : str, default "\t"
        File delimiter.

    Returns
    -------
    pandas.DataFrame
        The loaded feature annotations, whose first four columns are "chrom",
        "start", "end", "feature".
    """
    df = pd.read_csv(fn, sep = sep, header = None, dtype = {0: str, 3: str})
    if df.shape[1] < 4:
        error("feature file '%s' should have at least 4 columns." % fn)
        raise ValueError
    df.columns = ["chrom", "start", "end", "feature"] + \
        list(df.columns[4:].astype(str))
    df["chrom"] = df["chrom"].map(format_chrom)
    df["start"] = df["start"].map(format_start).astype(np.int64)
    df["end"] = df["end"].map(format_end).astype(np.int64)
    return(df)


def save_multi_column_file(df, fn, sep = "\t", header = True):
    """Save data (with multiple columns) into file.

    Parameters
    ----------
    df : pandas.DataFrame
        The data object containing multiple columns.
    fn : str
        Path to the output file.
    sep : str, default "\t"
        File delimiter.
    header : bool, default True
        Whether to write the column names.

    Returns
    -------
    Void.
    """
    df.to_csv(fn, sep = sep, header = header, index = False, na_rep = "NA")


def save_dar(df, fn, sep = "\t"):
    """Save DAR results (or features with DAR) of one contrast into file."""
    return(save_multi_column_file(df, fn, sep = sep, header = True))
