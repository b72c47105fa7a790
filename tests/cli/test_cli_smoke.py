from __future__ import annotations

from pathlib import Path

import pandas as pd
import yaml
from typer.testing import CliRunner

from penguinflow.cli.main import app


def test_cli_version_flag() -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert "penguinflow" in result.stdout


def test_cli_clean(tmp_path: Path, raw_csv: Path) -> None:
    runner = CliRunner()
    out = tmp_path / "clean.csv"
    result = runner.invoke(app, ["clean", "--data", str(raw_csv), "--out", str(out)])
    assert result.exit_code == 0, result.stdout
    assert "Wrote 120 rows" in result.stdout
    assert len(pd.read_csv(out)) == 120


def test_cli_run_smoke(tmp_path: Path, raw_csv: Path) -> None:
    runner = CliRunner()
    outdir = tmp_path / "derived"
    result = runner.invoke(
        app,
        [
            "run",
            "--data",
            str(raw_csv),
            "--clean-out",
            str(tmp_path / "clean.csv"),
            "--outdir",
            str(outdir),
            "--transform",
            "always",
        ],
    )
    assert result.exit_code == 0, result.stdout
    assert "Analysis complete" in result.stdout
    assert "Box-Cox lambda" in result.stdout
    assert (outdir / "tables" / "anova.csv").exists()
    assert (outdir / "figures" / "results_boxplot.svg").exists()


def test_cli_run_bad_alpha_fails(tmp_path: Path, raw_csv: Path) -> None:
    runner = CliRunner()
    result = runner.invoke(
        app, ["run", "--data", str(raw_csv), "--outdir", str(tmp_path / "out"), "--alpha", "2"]
    )
    assert result.exit_code == 1


def test_cli_config_show() -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["config", "show"])
    assert result.exit_code == 0
    shown = yaml.safe_load(result.stdout)
    assert shown["response"] == "body_mass_g"
    assert shown["viz"]["fig_format"] == "svg"


def test_cli_config_validate(tmp_path: Path) -> None:
    runner = CliRunner()
    good = tmp_path / "good.yaml"
    good.write_text("alpha: 0.01\ntransform: never\n", encoding="utf-8")
    bad = tmp_path / "bad.yaml"
    bad.write_text("alpha: 0.01\nunknown_key: 1\n", encoding="utf-8")

    assert runner.invoke(app, ["config", "validate", str(good)]).exit_code == 0
    assert runner.invoke(app, ["config", "validate", str(bad)]).exit_code == 1
