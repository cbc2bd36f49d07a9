# feature.py - assign DAR values to genomic features.


import numpy as np
import pandas as pd

from logging import error, info
from logging import warning as warn
from .grange import get_ranges
from ..utils.base import is_scalar_numeric
from ..utils.grange import RegionSet, ScoredRegion, format_chrom



def assign_feature_dar(
    dar_res,
    features,
    dar_val = "origin",
    fill = np.nan,
    verbose = False
):
    """Assign DAR values to genomic features.

    The DAR value of a feature is the mean DAR of all ranges (loci or
    smoothing windows) overlapping it.

    Parameters
    ----------
    dar_res : dict of {str : pandas.DataFrame}
        DAR results of each contrast, see :func:`~.core.dar()` and
        :func:`~.grange.flip_ranges()`.
        The origin form uses the loci ("pos") as ranges and the region form
        uses the smoothing windows ("start" and "end").
    features : pandas.DataFrame
        Target features, e.g., genes, with at least columns "chrom",
        "start" and "end" (1-based and inclusive).
        Other columns are kept as metadata.
    dar_val : {"origin", "region"}
        Which DAR value to assign, "dar_origin" or "dar_region".
        Generally "origin" should be used with DAR results in origin form
        and "region" with results in region form.
    fill : float, default numpy.nan
        The value assigned to features without overlapping ranges.
    verbose : bool, default False
        Whether to show detailed logging information.

    Returns
    -------
    dict of {str : pandas.DataFrame}
        Features of each contrast, in the same order as `features`, with
        an extra column "dar".
    """
    if dar_val not in ("origin", "region"):
        error("`dar_val` should be 'origin' or 'region', not '%s'." % \
            str(dar_val))
        raise ValueError
    if not isinstance(dar_res, dict):
        error("DAR results should be a dict of DataFrames.")
        raise ValueError
    __check_features(features)
    if not is_scalar_numeric(fill):
        error("`fill` should be a scalar numeric value.")
        raise ValueError

    col = "dar_" + dar_val
    res = {}
    for name, df in dar_res.items():
        if col not in df.columns:
            error("column '%s' missing in DAR results of contrast '%s'." % \
                (col, name))
            raise ValueError
        starts, ends = get_ranges(df)
        __check_dar_val(name, dar_val, starts, ends)

        rs = RegionSet()
        for chrom, s, e, score in zip(df["chrom"].to_numpy(), starts, ends,
                df[col].to_numpy(dtype = float)):
            if np.isnan(score):
                continue
            # region end is exclusive.
            rs.add(ScoredRegion(chrom, int(s), int(e) + 1, score))

        values = []
        n_hit = 0
        for chrom, s, e in zip(features["chrom"].to_numpy(),
                features["start"].to_numpy(), features["end"].to_numpy()):
            hits = rs.fetch(format_chrom(chrom), int(s), int(e) + 1)
            if len(hits) > 0:
                n_hit += 1
                values.append(np.mean([reg.score for reg in hits]))
            else:
                values.append(fill)

        fet = features.copy()
        fet["dar"] = pd.Series(values, index = fet.index, dtype = float)
        res[name] = fet
        if verbose:
            info("contrast '%s': %d/%d features overlap DAR ranges." % \
                (name, n_hit, fet.shape[0]))
    return(res)


def __check_features(features):
    if not isinstance(features, pd.DataFrame):
        error("features should be a DataFrame.")
        raise ValueError
    missing = [c for c in ("chrom", "start", "end") if c not in \
        features.columns]
    if len(missing) > 0:
        error("columns %s missing in features." % str(missing))
        raise ValueError
    if np.any(features["end"].to_numpy() < features["start"].to_numpy()):
        error("features with end smaller than start.")
        raise ValueError


def __check_dar_val(name, dar_val, starts, ends):
    if len(starts) <= 0:
        return
    is_point = np.all(starts == ends)
    if dar_val == "region" and is_point:
        warn("contrast '%s': assigning 'dar_region' to features while " \
            "the ranges are loci; consider `flip_ranges()` first." % name)
    elif dar_val == "origin" and not is_point:
        warn("contrast '%s': assigning 'dar_origin' to features while " \
            "the ranges are windows; consider `dar_val = \"region\"`." % name)
