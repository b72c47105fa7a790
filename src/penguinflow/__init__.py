"""
penguinflow: reproducible morphometric analysis of the Palmer penguins dataset.

This package provides:
- Loading and cleaning of the raw penguins table
- Linear model fitting with residual diagnostics (Shapiro-Wilk, Levene)
- Box-Cox correction of the response with a profile-likelihood search
- One-way ANOVA and Tukey HSD post-hoc comparisons
- Exploratory and results figures, publication tables and a CLI
"""

__version__ = "0.1.0"

from penguinflow.errors import PenguinflowError, SchemaError, ModelFitError, TransformError
from penguinflow.stats.config import AnalysisConfig, VizConfig
from penguinflow.stats.api import run_analysis

__all__ = [
    "__version__",
    "PenguinflowError",
    "SchemaError",
    "ModelFitError",
    "TransformError",
    "AnalysisConfig",
    "VizConfig",
    "run_analysis",
]
