# grange.py - genomic ranges of DAR results.


import numpy as np

from logging import error
from logging import warning as warn


# range columns of the two forms of DAR results.
# "origin" form: one point per locus ("pos"), the smoothing window is kept in
#   "region_start" and "region_end".
# "region" form: the smoothing window of each locus ("start" and "end"), the
#   origin locus is kept in "origin_pos".
ORIGIN_RANGE_COLUMNS = (["pos"], ["region_start", "region_end"])
REGION_RANGE_COLUMNS = (["start", "end"], ["origin_pos"])



def get_range_type(df):
    """Return the form of a DAR table, "origin" or "region"."""
    if "pos" in df.columns and "region_start" in df.columns and \
            "region_end" in df.columns:
        return("origin")
    if "start" in df.columns and "end" in df.columns and \
            "origin_pos" in df.columns:
        return("region")
    if "pos" in df.columns:
        return("origin")
    return(None)


def get_ranges(df):
    """Return the 1-based inclusive start and end of every row.

    Returns
    -------
    numpy.ndarray
        The start positions.
    numpy.ndarray
        The end positions.
    """
    if "start" in df.columns and "end" in df.columns:
        return((df["start"].to_numpy(dtype = np.int64),
                df["end"].to_numpy(dtype = np.int64)))
    pos = df["pos"].to_numpy(dtype = np.int64)
    return((pos, pos.copy()))



def flip_ranges(dar_res, extend_edges = False, seq_lengths = None):
    """Switch DAR results between origin and region ranges.

    Smoothed DAR values ("dar_region") are calculated over a window around
    every origin locus.
    This function converts the loci of DAR results into the windows used for
    smoothing, so that each range covers exactly the positions that
    contributed to its "dar_region", or converts the windows back into
    the origin loci.
    Flipping twice (without `extend_edges`) returns identical results.

    Parameters
    ----------
    dar_res : dict of {str : pandas.DataFrame}
        DAR results of each contrast with smoothed values, see
        :func:`~.core.dar()`, in either origin or region form.
    extend_edges : bool, default False
        When flipping into region form, whether to extend the first and
        last ranges of each chromosome to its start (position 1) and end,
        respectively, so that no position of the chromosome is left outside
        of all ranges.
    seq_lengths : dict of {str : int} or None, default None
        Chromosome lengths used by `extend_edges`.
        For chromosomes not listed, the end of the last range is the
        largest window end of that chromosome.

    Returns
    -------
    dict of {str : pandas.DataFrame}
        The flipped DAR results.
    """
    if not isinstance(dar_res, dict):
        error("DAR results should be a dict of DataFrames.")
        raise ValueError
    res = {}
    for name, df in dar_res.items():
        if "dar_region" not in df.columns:
            error("contrast '%s' has no 'dar_region'; " % name + \
                "calculate DAR with `region_fixed` or `region_loci` first.")
            raise ValueError
        range_type = get_range_type(df)
        if range_type == "origin" and "region_start" in df.columns:
            new_df = __swap_columns(df, ORIGIN_RANGE_COLUMNS,
                REGION_RANGE_COLUMNS, "origin")
            if extend_edges:
                new_df = __extend_edges(new_df, seq_lengths)
        elif range_type == "region":
            if extend_edges:
                warn("`extend_edges` is ignored when flipping to origin loci.")
            new_df = __swap_columns(df, REGION_RANGE_COLUMNS,
                ORIGIN_RANGE_COLUMNS, "region")
        else:
            error("contrast '%s' lacks the range columns to flip." % name)
            raise ValueError
        res[name] = new_df
    return(res)


def __swap_columns(df, old_cols, new_cols, old_type):
    """Swap range columns in place of the old ones."""
    (old_main, old_alt), (new_main, new_alt) = old_cols, new_cols
    if old_type == "origin":
        values = {
            "start": df["region_start"], "end": df["region_end"],
            "origin_pos": df["pos"]
        }
    else:
        values = {
            "pos": df["origin_pos"],
            "region_start": df["start"], "region_end": df["end"]
        }

    columns = []
    for col in df.columns:
        if col == old_main[0]:
            columns.extend(new_main)
        elif col == old_alt[0]:
            columns.extend(new_alt)
        elif col in old_main or col in old_alt:
            continue
        else:
            columns.append(col)

    new_df = df.copy()
    for col, v in values.items():
        new_df[col] = v.to_numpy()
    new_df = new_df[columns]
    return(new_df)


def __extend_edges(df, seq_lengths):
    new_df = df.copy()
    if new_df.shape[0] <= 0:
        return(new_df)
    start = new_df["start"].to_numpy().copy()
    end = new_df["end"].to_numpy().copy()
    origin = new_df["origin_pos"].to_numpy()
    chroms = new_df["chrom"].to_numpy()
    for chrom in np.unique(chroms):
        idx = np.flatnonzero(chroms == chrom)
        first = idx[np.argmin(origin[idx])]
        last = idx[np.argmax(origin[idx])]
        start[first] = 1
        if seq_lengths is not None and chrom in seq_lengths:
            end[last] = max(end[last], int(seq_lengths[chrom]))
        else:
            end[last] = np.max(end[idx])
    new_df["start"] = start
    new_df["end"] = end
    return(new_df)
