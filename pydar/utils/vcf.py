# vcf.py - VCF file routine and genotype tables.


import gzip
import numpy as np
import pandas as pd
import pysam

from logging import error, info
from .allele import LOCUS_COLUMNS, MISSING_ALLELE, get_sample_columns
from .base import assert_e
from .grange import format_chrom, reg2str, str2tuple, REG_MAX_POS



def vcf_load(fn):
    """Load VCF file.

    Load the header and variants part of the VCF file.

    Parameters
    ----------
    fn : str
        Path to the VCF file.

    Returns
    -------
    variants : pandas.DataFrame
        The variants part of the VCF.
        Its column names are determined by the last line of the
        `header` part.
    header : list of str
        The header part of the VCF.
        One line (without tailing line separator) per element in the list.
    """
    fp = None
    if fn.lower().endswith(".gz") or fn.lower().endswith(".bgz"):
        fp = gzip.open(fn, "rt")
    else:
        fp = open(fn, "r")

    header = []
    pre_line = None
    for line in fp:
        if not line or line[0] != "#":
            break
        pre_line = line
        header.append(line.rstrip())

    fp.close()

    if not pre_line or len(pre_line) <= 6 or pre_line[:6] != "#CHROM":
        error("invalid VCF header in '%s'." % fn)
        raise IOError

    columns = pre_line.strip()[1:].split("\t")
    try:
        variants = pd.read_csv(fn, sep = "\t", header = None, comment = "#",
                        dtype = {0: str}, compression = "gzip" if \
                        fn.lower().endswith((".gz", ".bgz")) else None)
    except pd.errors.EmptyDataError:
        variants = pd.DataFrame(columns = columns)
    variants.columns = columns

    return((variants, header))



def read_genotypes(fn, unphase = True, region = None):
    """Read genotypes from a VCF file into a genotype table.

    Parameters
    ----------
    fn : str
        Path to the VCF file, plain or gzip/BGZF compressed.
    unphase : bool, default True
        Whether to remove the phasing information from the genotype calls.
        This is required if proceeding with DAR analysis.
    region : str or None, default None
        A genomic region, e.g., "chr1:1001-2000", to restrict the loaded
        variants to.
        It requires a BGZF compressed VCF file with an index (".tbi" or
        ".csi").
        `None` means loading the whole file.

    Returns
    -------
    pandas.DataFrame
        The genotype table.
        Its first four columns are "chrom", "pos", "id" and "ref", extracted
        from the CHROM, POS, ID and REF fields of the VCF, followed by one
        column of "GT" calls per sample.
    """
    from ..allele.core import unphase_gt

    assert_e(fn)
    if not isinstance(unphase, bool):
        error("`unphase` should be a bool.")
        raise ValueError

    if region is None:
        gt = __read_gt_pandas(fn)
    else:
        gt = __read_gt_pysam(fn, region)
    info("%d loci and %d samples loaded from '%s'." % \
        (gt.shape[0], len(get_sample_columns(gt)), fn))

    if unphase:
        gt = unphase_gt(gt)
    return(gt)


def __read_gt_pandas(fn):
    variants, header = vcf_load(fn)
    for col in ("CHROM", "POS", "ID", "REF", "FORMAT"):
        if col not in variants.columns:
            error("column '%s' missing in VCF '%s'." % (col, fn))
            raise ValueError
    samples = list(variants.columns[variants.columns.get_loc("FORMAT") + 1:])

    gt = pd.DataFrame({
        "chrom": variants["CHROM"].astype(str).map(format_chrom),
        "pos": variants["POS"].astype(np.int64),
        "id": variants["ID"].astype(str),
        "ref": variants["REF"].astype(str)
    })
    gt_idx = [__get_gt_index(f) for f in variants["FORMAT"].astype(str)]
    if np.any(np.array(gt_idx) < 0):
        error("'GT' field missing in FORMAT of VCF '%s'." % fn)
        raise ValueError

    calls = {}
    for smp in samples:
        values = variants[smp].astype(str).to_numpy()
        calls[smp] = [__extract_field(v, i) for v, i in zip(values, gt_idx)]
    gt = pd.concat([gt, pd.DataFrame(calls, index = gt.index)], axis = 1)
    return(gt)


def __read_gt_pysam(fn, region):
    res = str2tuple(region)
    if res is None:
        error("invalid region '%s'." % region)
        raise ValueError
    chrom, start, end = res
    start = 1 if start is None else start
    info("fetching variants in region '%s' ..." % reg2str(chrom, start,
        REG_MAX_POS if end is None else end))

    with pysam.VariantFile(fn) as vcf:
        samples = list(vcf.header.samples)
        contig = chrom
        if contig not in vcf.header.contigs:
            alt = "chr" + chrom if not chrom.startswith("chr") else chrom[3:]
            contig = alt if alt in vcf.header.contigs else chrom

        rows = []
        for rec in vcf.fetch(contig, start - 1, end):
            row = [format_chrom(rec.chrom), rec.pos,
                "." if rec.id is None else rec.id, rec.ref]
            for smp in samples:
                call = rec.samples[smp]
                alleles = call.get("GT")
                if alleles is None:
                    row.append(MISSING_ALLELE)
                    continue
                sep = "|" if call.phased else "/"
                row.append(sep.join([MISSING_ALLELE if a is None else str(a) \
                    for a in alleles]))
            rows.append(row)

    gt = pd.DataFrame(rows, columns = LOCUS_COLUMNS + samples)
    gt["pos"] = gt["pos"].astype(np.int64)
    return(gt)


def __get_gt_index(fmt):
    fields = fmt.split(":")
    return fields.index("GT") if "GT" in fields else -1


def __extract_field(value, idx):
    fields = value.split(":")
    if idx >= len(fields):
        return(MISSING_ALLELE)
    return(fields[idx])



def format_genotypes(gt, loci = None, samples = None):
    """Convert genotype calls into the canonical genotype table.

    Parameters
    ----------
    gt : pandas.DataFrame or numpy.ndarray
        Either a genotype table already containing the "chrom" and "pos"
        columns (and optionally "id" and "ref"), or a *locus x sample*
        matrix/DataFrame of genotype calls.
    loci : pandas.DataFrame or None, default None
        Locus annotations, with at least columns "chrom" and "pos".
        Required when `gt` does not contain the locus columns; its rows
        should match the rows of `gt`.
    samples : list of str or None, default None
        Sample IDs for the columns of a matrix `gt`.
        If `None`, the column names of a DataFrame `gt` are used, or
        "Sample0", "Sample1", ... for a numpy matrix.

    Returns
    -------
    pandas.DataFrame
        The genotype table, a new object whose columns are the locus columns
        followed by the sample columns.
    """
    if isinstance(gt, pd.DataFrame) and "chrom" in gt.columns and \
            "pos" in gt.columns:
        df = gt.copy()
    else:
        if loci is None:
            error("locus annotations are required for a genotype matrix.")
            raise ValueError
        for col in ("chrom", "pos"):
            if col not in loci.columns:
                error("column '%s' missing in locus annotations." % col)
                raise ValueError
        mtx = gt.to_numpy() if isinstance(gt, pd.DataFrame) else np.asarray(gt)
        if mtx.ndim != 2 or mtx.shape[0] != loci.shape[0]:
            error("genotype matrix of shape %s does not match %d loci." % \
                (str(mtx.shape), loci.shape[0]))
            raise ValueError
        if samples is None:
            if isinstance(gt, pd.DataFrame):
                samples = [str(s) for s in gt.columns]
            else:
                samples = ["Sample%d" % i for i in range(mtx.shape[1])]
        if len(samples) != mtx.shape[1]:
            error("%d sample IDs for %d genotype columns." % \
                (len(samples), mtx.shape[1]))
            raise ValueError
        df = loci[[c for c in LOCUS_COLUMNS if c in loci.columns]].copy()
        df = df.reset_index(drop = True)
        df = pd.concat(
            [df, pd.DataFrame(mtx, columns = samples, dtype = object)],
            axis = 1)

    df["chrom"] = df["chrom"].astype(str).map(format_chrom)
    df["pos"] = df["pos"].astype(np.int64)
    locus_cols = [c for c in LOCUS_COLUMNS if c in df.columns]
    sample_cols = get_sample_columns(df)
    if len(set(sample_cols)) != len(sample_cols):
        error("duplicate sample IDs in genotype table.")
        raise ValueError
    df = df[locus_cols + sample_cols].reset_index(drop = True)
    return(df)
