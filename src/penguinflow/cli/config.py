"""Configuration helper commands: print defaults and validate YAML files."""

from __future__ import annotations

from pathlib import Path

import typer
import yaml

from penguinflow.stats.config import AnalysisConfig, load_config

config_app = typer.Typer(
    name="config",
    help="Inspect and validate penguinflow analysis configs.",
    add_completion=False,
)


@config_app.command("show")
def config_show():
    """Print the default analysis configuration as YAML."""
    typer.echo(yaml.safe_dump(AnalysisConfig().to_dict(), sort_keys=False, default_flow_style=False))


@config_app.command("validate")
def config_validate(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="YAML config file"),
):
    """Validate a YAML config file and print the resolved configuration."""
    try:
        config = load_config(path)
    except (ValueError, TypeError) as e:
        typer.secho(f"✗ Invalid config: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    typer.secho(f"✓ {path} is valid", fg=typer.colors.GREEN)
    typer.echo(yaml.safe_dump(config.to_dict(), sort_keys=False, default_flow_style=False))
