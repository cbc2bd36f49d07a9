"""End-to-end tests of the DAR pipeline and its command line."""

import os
import sys
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

from pydar.main import dar_main, dar_wrapper, main


pytestmark = pytest.mark.usefixtures("restore_logging")


class TestDarWrapper:
    """Tests for dar_wrapper function."""

    def test_origin(self, vcf_file: Path, group_file: Path,
            tmp_path: Path) -> None:
        """Test DAR of every locus written per contrast."""
        out_dir = tmp_path / "out"
        ret, res = dar_wrapper(str(vcf_file), str(group_file),
            "group1-group2, group2-group1", str(out_dir))
        assert ret == 0
        assert list(res["dar"].keys()) == ["group1-group2", "group2-group1"]
        assert res["feature_fns"] is None

        fn = res["dar_fns"]["group1-group2"]
        assert os.path.basename(fn) == "dar.group1-group2.tsv"
        df = pd.read_csv(fn, sep = "\t", dtype = {"chrom": str})
        assert df.columns.tolist() == ["chrom", "pos", "id", "ref",
            "dar_origin"]
        assert df["pos"].tolist() == [100, 200, 300, 400, 150]
        assert df["dar_origin"].tolist() == pytest.approx(
            [1.0, 0.0, 0.25, (5 / 12) ** 0.5, 0.0])

    def test_features(self, vcf_file: Path, group_file: Path,
            feature_file: Path, tmp_path: Path) -> None:
        """Test smoothed DAR assigned to features."""
        out_dir = tmp_path / "out"
        ret, res = dar_wrapper(str(vcf_file), str(group_file),
            "group1-group2", str(out_dir),
            feature_fn = str(feature_file),
            region_loci = 3, dar_val = "region", extend_edges = True)
        assert ret == 0
        df = res["dar"]["group1-group2"]
        assert "dar_region" in df.columns

        fn = res["feature_fns"]["group1-group2"]
        assert os.path.basename(fn) == "feature_dar.group1-group2.tsv"
        fet = pd.read_csv(fn, sep = "\t", dtype = {"chrom": str})
        assert fet["feature"].tolist() == ["geneA", "geneB", "geneC"]
        assert fet["dar"].tolist()[0] == pytest.approx((0.5 + 1.25 / 3) / 2)
        assert np.isnan(fet["dar"].tolist()[2])

    def test_filter(self, vcf_file: Path, group_file: Path,
            tmp_path: Path) -> None:
        """Test a custom locus filter."""
        ret, res = dar_wrapper(str(vcf_file), str(group_file),
            "group1-group2", str(tmp_path / "out"),
            filter_expr = "n_missing == 0")
        assert ret == 0
        assert res["dar"]["group1-group2"]["pos"].tolist() == [100, 200, 400]

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"contrasts": "group1-group3"},
            {"contrasts": ""},
            {"region_loci": 4},
            {"dar_val": "both"},
            {"dar_val": "region"},
            {"filter_expr": "n_foo > 1"},
        ],
    )
    def test_invalid(self, vcf_file: Path, group_file: Path,
            feature_file: Path, tmp_path: Path, kwargs: dict) -> None:
        """Test invalid settings fail with a negative return code."""
        params = dict(
            vcf_fn = str(vcf_file), group_fn = str(group_file),
            contrasts = "group1-group2", out_dir = str(tmp_path / "out"),
            feature_fn = str(feature_file)
        )
        params.update(kwargs)
        ret, res = dar_wrapper(**params)
        assert ret < 0
        assert res is None

    def test_missing_vcf(self, group_file: Path, tmp_path: Path) -> None:
        """Test a missing VCF fails."""
        ret, res = dar_wrapper(str(tmp_path / "none.vcf"), str(group_file),
            "group1-group2", str(tmp_path / "out"))
        assert ret < 0


class TestCommandLine:
    """Tests for the command line interface."""

    def test_dar_main(self, vcf_file: Path, group_file: Path,
            feature_file: Path, tmp_path: Path) -> None:
        """Test the dar command with long and short options."""
        out_dir = tmp_path / "out"
        ret = dar_main(["pydar", "dar",
            "-v", str(vcf_file), "-g", str(group_file),
            "-c", "group1-group2", "-O", str(out_dir),
            "-f", str(feature_file),
            "--regionLoci", "3", "--darVal", "region", "--extendEdges"])
        assert ret == 0
        assert (out_dir / "dar.group1-group2.tsv").exists()
        assert (out_dir / "feature_dar.group1-group2.tsv").exists()

    def test_bad_option(self, tmp_path: Path) -> None:
        """Test an unknown option fails."""
        assert dar_main(["pydar", "dar", "--foo", "1"]) < 0

    @pytest.mark.parametrize(
        "opt,val",
        [("--regionLoci", "three"), ("--regionFixed", "1e3"), ("-D", "x")],
    )
    def test_bad_integer(self, vcf_file: Path, group_file: Path,
            tmp_path: Path, opt: str, val: str) -> None:
        """Test a non-integer window size fails with a return code."""
        ret = dar_main(["pydar", "dar",
            "-v", str(vcf_file), "-g", str(group_file),
            "-c", "group1-group2", "-O", str(tmp_path / "out"), opt, val])
        assert ret < 0
        assert not (tmp_path / "out").exists()

    def test_version(self, monkeypatch, capsys) -> None:
        """Test printing the version."""
        monkeypatch.setattr(sys, "argv", ["pydar", "--version"])
        with pytest.raises(SystemExit) as e:
            main()
        assert e.value.code == 0
        assert capsys.readouterr().out.strip() != ""

    def test_unknown_command(self, monkeypatch) -> None:
        """Test an unknown sub-command exits with an error."""
        monkeypatch.setattr(sys, "argv", ["pydar", "count"])
        with pytest.raises(SystemExit) as e:
            main()
        assert e.value.code == 1
