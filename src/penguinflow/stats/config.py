"""Configuration dataclasses for the analysis pipeline."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, asdict, fields
from pathlib import Path
from typing import Optional, Tuple, Dict, Any

from penguinflow.yaml_utils import load_yaml

logger = logging.getLogger(__name__)

TRANSFORM_MODES = ("auto", "always", "never")
VECTOR_FORMATS = ("svg", "pdf", "eps")


@dataclass
class VizConfig:
    """Configuration for figures.

    Attributes:
        fig_format: Vector file format for all figures (svg, pdf, eps)
        fig_width: Figure width in inches
        fig_height: Figure height in inches
        fig_dpi: Figure DPI (affects rasterized elements only)
        point_size: Jitter point size
        alpha_points: Jitter point transparency
        jitter: Horizontal jitter amount for individual points
        violin_name: File stem for the exploratory violin plot
        boxplot_name: File stem for the results box plot
        profile_name: File stem for the Box-Cox profile plot
    """

    fig_format: str = "svg"
    fig_width: float = 6.0
    fig_height: float = 4.5
    fig_dpi: int = 160
    point_size: float = 4.0
    alpha_points: float = 0.6
    jitter: float = 0.2
    violin_name: str = "exploratory_violin"
    boxplot_name: str = "results_boxplot"
    profile_name: str = "boxcox_profile"

    def __post_init__(self):
        """Validate configuration."""
        self.fig_format = self.fig_format.lower().lstrip(".")
        if self.fig_format not in VECTOR_FORMATS:
            raise ValueError(f"fig_format must be one of {VECTOR_FORMATS}, got {self.fig_format}")

        if not 0 <= self.alpha_points <= 1:
            raise ValueError(f"alpha_points must be in [0, 1], got {self.alpha_points}")

        if self.jitter < 0:
            raise ValueError(f"jitter must be >= 0, got {self.jitter}")


@dataclass
class AnalysisConfig:
    """Configuration for the full analysis run.

    Every field has a default, so ``AnalysisConfig()`` describes the fixed
    single run: raw data at ``data/penguins_raw.csv``, cleaned copy at
    ``data/penguins_clean.csv``, outputs under ``derived/``.

    Attributes:
        raw_data_path: Path to the raw input table
        clean_data_path: Where the cleaned table is written for auditability
        outdir: Output directory for figures and tables
        response: Continuous response column (cleaned name)
        group_col: Categorical grouping column (cleaned name)
        alpha: Significance threshold for diagnostics and post-hoc (default: 0.05)
        transform: Box-Cox policy: "auto" (when assumptions fail), "always", "never"
        lambda_bounds: Search interval for the Box-Cox lambda
        lambda_grid_points: Number of lambda values on the profile grid
        levene_center: Center for Levene's test ("median" = Brown-Forsythe, "mean", "trimmed")
        precision: Significant digits for formatted statistics and p-values
        viz: Figure configuration
    """

    raw_data_path: Path = Path("data/penguins_raw.csv")
    clean_data_path: Path = Path("data/penguins_clean.csv")
    outdir: Path = Path("derived")
    response: str = "body_mass_g"
    group_col: str = "species"
    alpha: float = 0.05
    transform: str = "auto"
    lambda_bounds: Tuple[float, float] = (-2.0, 2.0)
    lambda_grid_points: int = 81
    levene_center: str = "median"
    precision: int = 4
    viz: VizConfig = field(default_factory=VizConfig)

    def __post_init__(self):
        """Validate configuration."""
        self.raw_data_path = Path(self.raw_data_path)
        self.clean_data_path = Path(self.clean_data_path)
        self.outdir = Path(self.outdir)
        self.lambda_bounds = tuple(float(b) for b in self.lambda_bounds)

        if isinstance(self.viz, dict):
            self.viz = VizConfig(**self.viz)

        if self.alpha <= 0 or self.alpha >= 1:
            raise ValueError(f"Alpha must be in (0, 1), got {self.alpha}")

        if self.transform not in TRANSFORM_MODES:
            raise ValueError(f"transform must be one of {TRANSFORM_MODES}, got {self.transform}")

        if len(self.lambda_bounds) != 2 or self.lambda_bounds[0] >= self.lambda_bounds[1]:
            raise ValueError(f"lambda_bounds must be (low, high) with low < high, got {self.lambda_bounds}")

        if self.lambda_grid_points < 3:
            raise ValueError(f"lambda_grid_points must be >= 3, got {self.lambda_grid_points}")

        if self.levene_center not in ("median", "mean", "trimmed"):
            raise ValueError(f"levene_center must be median, mean or trimmed, got {self.levene_center}")

        if self.precision < 1:
            raise ValueError(f"precision must be >= 1, got {self.precision}")

        if self.response == self.group_col:
            raise ValueError("response and group_col must be different columns")

    @property
    def figures_dir(self) -> Path:
        return self.outdir / "figures"

    @property
    def tables_dir(self) -> Path:
        return self.outdir / "tables"

    def figure_path(self, stem: str) -> Path:
        """Path of a figure file in the configured vector format."""
        return self.figures_dir / f"{stem}.{self.viz.fig_format}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dict with Path objects as strings."""
        d = asdict(self)
        for key, value in d.items():
            if isinstance(value, Path):
                d[key] = str(value)
        d["lambda_bounds"] = list(self.lambda_bounds)
        return d


def load_config(path: Optional[Path] = None, **overrides: Any) -> AnalysisConfig:
    """Build an AnalysisConfig from an optional YAML file plus overrides.

    Args:
        path: Optional YAML file with AnalysisConfig keys (``viz`` may be a nested mapping)
        **overrides: Field values that take precedence; ``None`` values are ignored

    Returns:
        Validated AnalysisConfig

    Raises:
        ValueError: If the YAML contains unknown keys
    """
    payload: Dict[str, Any] = {}
    if path is not None:
        payload = load_yaml(Path(path))
        if not isinstance(payload, dict):
            raise ValueError(f"Config file {path} must contain a mapping, got {type(payload).__name__}")
        logger.info(f"Loaded configuration from {path}")

    payload.update({k: v for k, v in overrides.items() if v is not None})

    known = {f.name for f in fields(AnalysisConfig)}
    unknown = sorted(set(payload) - known)
    if unknown:
        raise ValueError(f"Unknown configuration keys: {unknown}")

    return AnalysisConfig(**payload)
