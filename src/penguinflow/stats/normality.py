"""Residual diagnostics: Shapiro-Wilk normality and Levene variance homogeneity."""

from __future__ import annotations

import logging
from typing import List, Tuple

import numpy as np
import pandas as pd
from scipy import stats

from penguinflow.stats.results import AssumptionReport, TestResult

logger = logging.getLogger(__name__)


def shapiro_safe(x: np.ndarray) -> Tuple[float, float, int]:
    """Perform Shapiro-Wilk test with safe handling.

    Args:
        x: Array of values

    Returns:
        Tuple of (W_statistic, p_value, n_valid)

    Notes:
        - Returns (nan, nan, n) if n < 3 or constant values
        - Subsamples to 5000 if n > 5000 (SciPy accuracy recommendation)
    """
    x = np.asarray(x, dtype=float)
    x = x[np.isfinite(x)]
    n = len(x)

    # Need at least 3 observations
    if n < 3:
        return np.nan, np.nan, n

    if np.allclose(np.nanstd(x), 0.0):
        return np.nan, np.nan, n

    if n > 5000:
        rng = np.random.default_rng(0)
        x = rng.choice(x, size=5000, replace=False)
        n = 5000

    W, p = stats.shapiro(x)
    return float(W), float(p), int(n)


def levene_safe(values: np.ndarray, groups: np.ndarray, center: str = "median") -> Tuple[float, float]:
    """Perform Levene's test across groups.

    Args:
        values: Values (typically model residuals)
        groups: Group label per value
        center: "median" (Brown-Forsythe), "mean" or "trimmed"

    Returns:
        Tuple of (statistic, p_value); (nan, nan) when fewer than 2 groups
        have at least 2 finite values
    """
    values = np.asarray(values, dtype=float)
    groups = np.asarray(groups)
    mask = np.isfinite(values)

    samples = []
    for g in sorted(pd.unique(groups[mask])):
        x = values[mask & (groups == g)]
        if len(x) >= 2:
            samples.append(x)

    if len(samples) < 2:
        return np.nan, np.nan

    stat, p = stats.levene(*samples, center=center)
    return float(stat), float(p)


def check_assumptions(
    residuals: np.ndarray,
    groups: np.ndarray,
    alpha: float = 0.05,
    center: str = "median",
    stage: str = "raw",
) -> AssumptionReport:
    """Run both residual diagnostics.

    Args:
        residuals: Model residuals
        groups: Group label per residual
        alpha: Threshold below which an assumption is considered violated
        center: Center for Levene's test
        stage: Label for the model being checked ("raw", "transformed")

    Returns:
        AssumptionReport
    """
    W, p_w, n = shapiro_safe(residuals)
    lev, p_lev = levene_safe(residuals, groups, center=center)

    levene_name = "Levene (Brown-Forsythe)" if center == "median" else f"Levene ({center})"
    report = AssumptionReport(
        normality=TestResult(name="Shapiro-Wilk", statistic=W, p_value=p_w),
        homogeneity=TestResult(name=levene_name, statistic=lev, p_value=p_lev),
        alpha=alpha,
        stage=stage,
    )

    logger.info(
        f"[{stage}] Shapiro-Wilk W={W:.4f}, p={p_w:.4g} (n={n}); "
        f"{levene_name} F={lev:.4f}, p={p_lev:.4g}"
    )
    if report.normality_violated:
        logger.info(f"[{stage}] Residuals deviate from normality at alpha={alpha}")
    if report.variance_violated:
        logger.info(f"[{stage}] Group variances differ at alpha={alpha}")

    return report


def check_normality_by_group(
    values: np.ndarray, groups: np.ndarray, stage: str = "raw"
) -> pd.DataFrame:
    """Shapiro-Wilk within each group.

    Args:
        values: Values (typically residuals)
        groups: Group label per value
        stage: Label for the model being checked

    Returns:
        DataFrame with columns: stage, group, n, test, W, p_value
    """
    values = np.asarray(values, dtype=float)
    groups = np.asarray(groups)

    rows: List[dict] = []
    for g in sorted(pd.unique(groups)):
        W, p, n = shapiro_safe(values[groups == g])
        rows.append(
            {"stage": stage, "group": str(g), "n": n, "test": "Shapiro-Wilk", "W": W, "p_value": p}
        )

    return pd.DataFrame(rows, columns=["stage", "group", "n", "test", "W", "p_value"])
