"""Main CLI entrypoint using Typer."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer

from penguinflow import __version__
from penguinflow.cli.config import config_app

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="penguinflow",
    help="Reproducible morphometric analysis of the Palmer penguins dataset.",
    add_completion=False,
)

app.add_typer(config_app, name="config")

# Logging setup
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        typer.echo(f"penguinflow {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
):
    """penguinflow: penguin morphometrics, from raw table to ANOVA and Tukey HSD."""
    pass


@app.command("run")
def run_cmd(
    config_path: Optional[Path] = typer.Option(
        None, "--config", exists=True, dir_okay=False, help="YAML file with AnalysisConfig keys"
    ),
    data: Optional[Path] = typer.Option(
        None, "--data", help="Raw data file (.csv, .parquet). Default: data/penguins_raw.csv"
    ),
    clean_out: Optional[Path] = typer.Option(
        None, "--clean-out", help="Where to write the cleaned table. Default: data/penguins_clean.csv"
    ),
    outdir: Optional[Path] = typer.Option(None, "--outdir", help="Output directory. Default: derived"),
    response: Optional[str] = typer.Option(None, "--response", help="Response column (cleaned name)"),
    group_col: Optional[str] = typer.Option(None, "--group-col", help="Grouping column (cleaned name)"),
    alpha: Optional[float] = typer.Option(None, "--alpha", help="Significance threshold"),
    transform: Optional[str] = typer.Option(
        None, "--transform", help="Box-Cox policy: auto, always, never"
    ),
):
    """
    Run the complete analysis.

    Cleans the raw table, plots distributions, fits response ~ group, checks
    residual normality and variance homogeneity, applies Box-Cox when needed,
    then runs a one-way ANOVA and Tukey HSD and writes figures and tables.

    With no options, reads data/penguins_raw.csv and writes to derived/.

    Examples:
        penguinflow run

        penguinflow run --response flipper_length_mm --alpha 0.01

        penguinflow run --config analysis.yaml --outdir results
    """
    from penguinflow.stats import run_analysis, load_config

    try:
        config = load_config(
            config_path,
            raw_data_path=data,
            clean_data_path=clean_out,
            outdir=outdir,
            response=response,
            group_col=group_col,
            alpha=alpha,
            transform=transform,
        )

        typer.echo(f"Running analysis on {config.raw_data_path}...")
        result = run_analysis(config)

        anova = result.anova
        typer.secho("\n✓ Analysis complete!", fg=typer.colors.GREEN)
        typer.echo(f"  Cleaned data: {config.clean_data_path}")
        if result.transform.applied:
            typer.echo(f"  Box-Cox lambda: {result.transform.boxcox.lmbda:.4f}")
        else:
            typer.echo("  Box-Cox: not applied")
        typer.echo(
            f"  ANOVA: F({anova['group'].df}, {anova['residual'].df}) = "
            f"{anova['group'].statistic:.4g}, p = {anova['group'].p_value:.4g}"
        )
        typer.echo(f"  Tukey HSD: {sum(c.reject for c in result.comparisons)}/{len(result.comparisons)} pairs differ")
        for name, path in result.figures.items():
            typer.echo(f"  Figure ({name}): {path}")
        typer.echo(f"  Tables: {config.tables_dir}")

    except Exception as e:
        typer.secho(f"\n✗ Analysis failed: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)


@app.command("clean")
def clean_cmd(
    data: Path = typer.Option(Path("data/penguins_raw.csv"), "--data", help="Raw data file"),
    out: Path = typer.Option(Path("data/penguins_clean.csv"), "--out", help="Cleaned output file"),
):
    """
    Clean the raw table and write the analysis-ready copy.

    Example:
        penguinflow clean --data data/penguins_raw.csv --out data/penguins_clean.csv
    """
    from penguinflow.stats import clean_dataset, AnalysisConfig

    try:
        clean = clean_dataset(AnalysisConfig(raw_data_path=data, clean_data_path=out))
        typer.secho(f"✓ Wrote {len(clean)} rows to {out}", fg=typer.colors.GREEN)
    except Exception as e:
        typer.secho(f"✗ Cleaning failed: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
