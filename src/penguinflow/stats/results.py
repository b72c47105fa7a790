"""Immutable result records produced by the analysis stages."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

import numpy as np
import pandas as pd


@dataclass(frozen=True)
class TestResult:
    """A single test statistic with its p-value."""

    __test__ = False  # not a pytest class

    name: str
    statistic: float
    p_value: float

    def is_significant(self, alpha: float) -> bool:
        """True when p < alpha (NaN p-values are never significant)."""
        return bool(np.isfinite(self.p_value) and self.p_value < alpha)


@dataclass(frozen=True)
class AssumptionReport:
    """Residual diagnostics for one fitted model."""

    normality: TestResult
    homogeneity: TestResult
    alpha: float
    stage: str = "raw"

    @property
    def normality_violated(self) -> bool:
        return self.normality.is_significant(self.alpha)

    @property
    def variance_violated(self) -> bool:
        return self.homogeneity.is_significant(self.alpha)

    @property
    def violated(self) -> bool:
        return self.normality_violated or self.variance_violated


@dataclass(frozen=True)
class BoxCoxResult:
    """Outcome of the Box-Cox profile-likelihood search.

    Attributes:
        lmbda: Selected lambda (maximizer of the profile log-likelihood)
        llf_max: Profile log-likelihood at ``lmbda``
        ci_low: Lower bound of the 95% likelihood-ratio interval for lambda
        ci_high: Upper bound of the 95% likelihood-ratio interval for lambda
        grid: Lambda values on the evaluation grid
        llf_grid: Profile log-likelihood at each grid value
        bounds: Search interval
    """

    lmbda: float
    llf_max: float
    ci_low: float
    ci_high: float
    grid: Tuple[float, ...]
    llf_grid: Tuple[float, ...]
    bounds: Tuple[float, float]


@dataclass(frozen=True)
class AnovaRow:
    """One term of an ANOVA table; ``statistic``/``p_value`` are NaN for the residual row."""

    term: str
    df: int
    sum_sq: float
    mean_sq: float
    statistic: float
    p_value: float


@dataclass(frozen=True)
class AnovaTable:
    """One-way ANOVA summary keyed by term ("group", "residual")."""

    response: str
    group_col: str
    rows: Tuple[AnovaRow, ...]
    ss_total: float
    n_obs: int
    k_groups: int

    def __getitem__(self, term: str) -> AnovaRow:
        for row in self.rows:
            if row.term == term:
                return row
        raise KeyError(term)

    @property
    def terms(self) -> Tuple[str, ...]:
        return tuple(row.term for row in self.rows)

    @property
    def f_test(self) -> TestResult:
        group = self["group"]
        return TestResult(name="F", statistic=group.statistic, p_value=group.p_value)

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            [
                {
                    "term": r.term,
                    "df": r.df,
                    "sum_sq": r.sum_sq,
                    "mean_sq": r.mean_sq,
                    "statistic": r.statistic,
                    "p_value": r.p_value,
                }
                for r in self.rows
            ],
            columns=["term", "df", "sum_sq", "mean_sq", "statistic", "p_value"],
        )


@dataclass(frozen=True)
class PairwiseComparison:
    """Tukey HSD result for one unordered pair; ``mean_diff`` is mean(group2) - mean(group1)."""

    group1: str
    group2: str
    mean_diff: float
    ci_low: float
    ci_high: float
    p_adj: float
    reject: bool


@dataclass(frozen=True)
class TransformSummary:
    """Record of whether and how the response was transformed."""

    applied: bool
    reason: str
    source_column: str
    column: str
    boxcox: Optional[BoxCoxResult] = None
    n_dropped_nonfinite: int = 0

    def as_dict(self) -> Dict[str, object]:
        return {
            "transform_applied": self.applied,
            "transform_reason": self.reason,
            "analysed_column": self.column,
            "boxcox_lambda": self.boxcox.lmbda if self.boxcox else np.nan,
            "boxcox_lambda_ci_low": self.boxcox.ci_low if self.boxcox else np.nan,
            "boxcox_lambda_ci_high": self.boxcox.ci_high if self.boxcox else np.nan,
            "n_dropped_nonfinite": self.n_dropped_nonfinite,
        }
