"""Pytest fixtures for pydar tests."""

import logging
from pathlib import Path

import pandas as pd
import pytest


# Genotypes of 6 samples at 6 loci.
# - 1:100  group1 all REF, group2 all ALT -> DAR 1
# - 1:200  all heterozygous (some phased) -> DAR 0
# - 1:300  one missing call in group1 -> DAR 0.25
# - 1:400  multi-allelic (indices up to 3)
# - 1:500  group1 all missing
# - 2:150  one missing call in group2 -> DAR 0
GENOTYPES = [
    ["1", 100, "rs1", "A", "0/0", "0/0", "0/0", "1/1", "1/1", "1/1"],
    ["1", 200, "rs2", "C", "0/1", "1|0", "0|1", "0/1", "0/1", "1/0"],
    ["1", 300, "rs3", "G", "0/0", "0/1", "./.", "0/0", "0/0", "0/0"],
    ["1", 400, "rs4", "T", "1/2", "2/2", "0/2", "0/3", "3/3", "0/0"],
    ["1", 500, "rs5", "A", "./.", ".", "./.", "0/1", "0/1", "0/1"],
    ["2", 150, "rs6", "C", "0|0", "0/0", "0/0", "0/0", "0/0", "./."],
]
SAMPLES = ["s1", "s2", "s3", "s4", "s5", "s6"]


@pytest.fixture
def genotypes() -> pd.DataFrame:
    """Genotype table with locus columns and one column per sample."""
    return pd.DataFrame(
        GENOTYPES, columns = ["chrom", "pos", "id", "ref"] + SAMPLES)


@pytest.fixture
def groups() -> dict[str, list[str]]:
    """Two groups of three samples each."""
    return {"group1": ["s1", "s2", "s3"], "group2": ["s4", "s5", "s6"]}


@pytest.fixture
def vcf_file(tmp_path: Path) -> Path:
    """Plain VCF file containing the genotypes above, with extra DP field."""
    lines = [
        "##fileformat=VCFv4.2",
        "##contig=<ID=chr1,length=1000>",
        "##contig=<ID=chr2,length=800>",
        '##FORMAT=<ID=GT,Number=1,Type=String,Description="Genotype">',
        '##FORMAT=<ID=DP,Number=1,Type=Integer,Description="Depth">',
        "\t".join(["#CHROM", "POS", "ID", "REF", "ALT", "QUAL", "FILTER",
            "INFO", "FORMAT"] + SAMPLES),
    ]
    for chrom, pos, rid, ref, *calls in GENOTYPES:
        alt = "A,C,G" if pos == 400 else "T"
        lines.append("\t".join(["chr" + chrom, str(pos), rid, ref, alt, ".",
            "PASS", ".", "GT:DP"] + ["%s:10" % c for c in calls]))
    fn = tmp_path / "test.vcf"
    fn.write_text("\n".join(lines) + "\n")
    return fn


@pytest.fixture
def group_file(tmp_path: Path, groups: dict[str, list[str]]) -> Path:
    """Header-free TSV file of sample groups."""
    fn = tmp_path / "groups.tsv"
    rows = ["%s\t%s" % (s, g) for g, smps in groups.items() for s in smps]
    fn.write_text("\n".join(rows) + "\n")
    return fn


@pytest.fixture
def feature_file(tmp_path: Path) -> Path:
    """Header-free TSV file of features."""
    fn = tmp_path / "features.tsv"
    fn.write_text(
        "chr1\t50\t150\tgeneA\n"
        "chr1\t150\t450\tgeneB\n"
        "chr3\t1\t1000\tgeneC\n"
    )
    return fn


@pytest.fixture
def restore_logging():
    """Restore the root logger after tests configuring logging."""
    logger = logging.getLogger()
    handlers = list(logger.handlers)
    level = logger.level
    yield
    for h in list(logger.handlers):
        if h not in handlers:
            logger.removeHandler(h)
    for h in handlers:
        if h not in logger.handlers:
            logger.addHandler(h)
    logger.setLevel(level)
