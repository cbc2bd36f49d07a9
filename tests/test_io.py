"""Tests for input and output files."""

from pathlib import Path

import pandas as pd
import pysam
import pytest

from pydar.io.base import load_features, load_groups, load_list_from_str, \
    save_dar
from pydar.utils.vcf import read_genotypes, vcf_load


SAMPLES = ["s1", "s2", "s3", "s4", "s5", "s6"]


class TestLoadList:
    """Tests for load_list_from_str function."""

    def test_split(self) -> None:
        """Test blanks, quotes and empty items are removed."""
        assert load_list_from_str(' "a-b", c-d ,') == ["a-b", "c-d"]


class TestLoadGroups:
    """Tests for load_groups function."""

    def test_load(self, group_file: Path) -> None:
        """Test groups in order of appearance."""
        groups = load_groups(str(group_file))
        assert groups == {"group1": ["s1", "s2", "s3"],
            "group2": ["s4", "s5", "s6"]}
        assert list(groups.keys()) == ["group1", "group2"]

    def test_duplicate_sample(self, tmp_path: Path) -> None:
        """Test a sample listed twice raises."""
        fn = tmp_path / "dup.tsv"
        fn.write_text("s1\ta\ns1\tb\n")
        with pytest.raises(ValueError):
            load_groups(str(fn))

    def test_one_column(self, tmp_path: Path) -> None:
        """Test a file without the group column raises."""
        fn = tmp_path / "one.tsv"
        fn.write_text("s1\ns2\n")
        with pytest.raises(ValueError):
            load_groups(str(fn))


class TestLoadFeatures:
    """Tests for load_features function."""

    def test_load(self, feature_file: Path) -> None:
        """Test column names and chromosome formatting."""
        df = load_features(str(feature_file))
        assert df.columns.tolist() == ["chrom", "start", "end", "feature"]
        assert df["chrom"].tolist() == ["1", "1", "3"]
        assert df["start"].tolist() == [50, 150, 1]
        assert df["end"].tolist() == [150, 450, 1000]
        assert df["feature"].tolist() == ["geneA", "geneB", "geneC"]


class TestSaveDar:
    """Tests for save_dar function."""

    def test_na(self, tmp_path: Path) -> None:
        """Test missing values are written as NA."""
        fn = tmp_path / "out.tsv"
        save_dar(pd.DataFrame({"feature": ["g1", "g2"],
            "dar": [0.5, float("nan")]}), str(fn))
        assert fn.read_text().splitlines() == \
            ["feature\tdar", "g1\t0.5", "g2\tNA"]


class TestReadGenotypes:
    """Tests for reading genotypes from VCF files."""

    def test_vcf_load(self, vcf_file: Path) -> None:
        """Test header and variants of a VCF."""
        variants, header = vcf_load(str(vcf_file))
        assert header[-1].startswith("#CHROM")
        assert variants.shape == (6, 9 + len(SAMPLES))
        assert variants["CHROM"].tolist()[0] == "chr1"

    def test_unphased(self, vcf_file: Path) -> None:
        """Test the genotype table of a plain VCF."""
        gt = read_genotypes(str(vcf_file))
        assert gt.columns.tolist() == ["chrom", "pos", "id", "ref"] + SAMPLES
        assert gt["chrom"].tolist() == ["1"] * 5 + ["2"]
        assert gt["pos"].tolist() == [100, 200, 300, 400, 500, 150]
        assert gt.loc[1, "s2"] == "1/0"
        assert gt.loc[2, "s3"] == "./."
        assert gt.loc[4, "s2"] == "."

    def test_phased(self, vcf_file: Path) -> None:
        """Test phasing is kept on request."""
        gt = read_genotypes(str(vcf_file), unphase = False)
        assert gt.loc[1, "s2"] == "1|0"

    def test_region(self, vcf_file: Path) -> None:
        """Test restricting genotypes to a region of an indexed VCF."""
        fn = pysam.tabix_index(str(vcf_file), preset = "vcf", force = True)
        gt = read_genotypes(fn, region = "chr1:150-450")
        assert gt.columns.tolist() == ["chrom", "pos", "id", "ref"] + SAMPLES
        assert gt["chrom"].tolist() == ["1", "1", "1"]
        assert gt["pos"].tolist() == [200, 300, 400]
        assert gt.loc[0, "s2"] == "1/0"
        assert gt.loc[1, "s3"] == "./."

        gt = read_genotypes(fn, region = "2")
        assert gt["pos"].tolist() == [150]

    def test_region_closes_file(self, vcf_file: Path, monkeypatch) -> None:
        """Test the VCF is closed when fetching variants fails."""
        real_cls = pysam.VariantFile
        opened = []

        class BrokenVariantFile:
            def __init__(self, fn):
                self.vcf = real_cls(fn)
                self.header = self.vcf.header
                self.closed = False
                opened.append(self)

            def __enter__(self):
                return self

            def __exit__(self, *args):
                self.vcf.close()
                self.closed = True
                return False

            def fetch(self, *args):
                raise ValueError("broken index")

        monkeypatch.setattr(pysam, "VariantFile", BrokenVariantFile)
        with pytest.raises(ValueError):
            read_genotypes(str(vcf_file), region = "chr1:1-1000")
        assert len(opened) == 1
        assert opened[0].closed

    def test_missing_file(self, tmp_path: Path) -> None:
        """Test a missing VCF raises."""
        with pytest.raises(AssertionError):
            read_genotypes(str(tmp_path / "none.vcf"))
