"""Statistics subsystem: model fitting, diagnostics, Box-Cox, ANOVA, Tukey HSD, figures.

Public API:
-----------
from penguinflow.stats import run_analysis, AnalysisConfig

# Fixed single run (data/penguins_raw.csv -> derived/)
result = run_analysis()

# Custom response and threshold
result = run_analysis(response="flipper_length_mm", alpha=0.01)
print(result.anova.to_frame())
"""

from penguinflow.stats.api import run_analysis, clean_dataset, AnalysisResult
from penguinflow.stats.config import AnalysisConfig, VizConfig, load_config

__all__ = [
    "run_analysis",
    "clean_dataset",
    "AnalysisResult",
    "AnalysisConfig",
    "VizConfig",
    "load_config",
]
