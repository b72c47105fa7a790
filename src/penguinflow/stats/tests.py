"""Inferential tests: one-way ANOVA and Tukey HSD post-hoc comparisons."""

from __future__ import annotations

import logging
from typing import Optional, Tuple

import numpy as np
import pandas as pd
from scipy import stats
from statsmodels.stats.multicomp import pairwise_tukeyhsd

from penguinflow.errors import ModelFitError
from penguinflow.stats.models import check_model_inputs
from penguinflow.stats.results import AnovaRow, AnovaTable, PairwiseComparison

logger = logging.getLogger(__name__)


def anova_oneway(df: pd.DataFrame, response: str, group_col: str) -> AnovaTable:
    """Perform one-way ANOVA.

    The total sum of squares is partitioned into between-group and residual
    components; F = MS_group / MS_residual with (k - 1, n - k) degrees of freedom.

    Args:
        df: Dataframe with response and group columns (already filtered to finite values)
        response: Response column name
        group_col: Grouping column name

    Returns:
        AnovaTable keyed by "group" and "residual"

    Raises:
        SchemaError: If a column is missing
        ModelFitError: If fewer than 2 groups, a group has < 2 rows, or the
            response is not finite
    """
    check_model_inputs(df, response, group_col)

    y = df[response].to_numpy(dtype=float)
    g = df[group_col].astype(str).to_numpy()

    n = len(y)
    levels = sorted(pd.unique(g))
    k = len(levels)

    grand_mean = float(np.mean(y))
    ss_group = 0.0
    ss_resid = 0.0
    for level in levels:
        y_g = y[g == level]
        mean_g = float(np.mean(y_g))
        ss_group += len(y_g) * (mean_g - grand_mean) ** 2
        ss_resid += float(np.sum((y_g - mean_g) ** 2))
    ss_total = float(np.sum((y - grand_mean) ** 2))

    df_group = k - 1
    df_resid = n - k
    if df_resid <= 0:
        raise ModelFitError(f"No residual degrees of freedom (n={n}, k={k})")

    ms_group = ss_group / df_group
    ms_resid = ss_resid / df_resid

    with np.errstate(divide="ignore", invalid="ignore"):
        F = ms_group / ms_resid if ms_resid > 0 else np.inf
    p = float(stats.f.sf(F, df_group, df_resid)) if np.isfinite(F) else 0.0

    logger.info(f"ANOVA {response} ~ {group_col}: F({df_group}, {df_resid}) = {F:.4f}, p = {p:.4g}")

    return AnovaTable(
        response=response,
        group_col=group_col,
        rows=(
            AnovaRow("group", df_group, ss_group, ms_group, float(F), p),
            AnovaRow("residual", df_resid, ss_resid, ms_resid, np.nan, np.nan),
        ),
        ss_total=ss_total,
        n_obs=n,
        k_groups=k,
    )


def tukey_hsd(
    df: pd.DataFrame,
    response: str,
    group_col: str,
    alpha: float = 0.05,
    anova: Optional[AnovaTable] = None,
) -> Tuple[PairwiseComparison, ...]:
    """Perform Tukey HSD post-hoc test.

    Args:
        df: Dataframe with response and group columns
        response: Response column name
        group_col: Grouping column name
        alpha: Family-wise significance level (CI level is 1 - alpha)
        anova: Optional ANOVA table for the same data; checked for consistency

    Returns:
        One PairwiseComparison per unordered pair, sorted by (group1, group2).
        ``mean_diff`` is mean(group2) - mean(group1).

    Raises:
        ModelFitError: If the data cannot support the comparison
        ValueError: If ``anova`` was computed on different data
    """
    check_model_inputs(df, response, group_col)

    y = df[response].to_numpy(dtype=float)
    g = df[group_col].astype(str).to_numpy()

    if anova is not None:
        if anova.response != response or anova.n_obs != len(y):
            raise ValueError(
                f"ANOVA table ({anova.response}, n={anova.n_obs}) does not match "
                f"post-hoc data ({response}, n={len(y)})"
            )

    tuk = pairwise_tukeyhsd(endog=y, groups=g, alpha=alpha)

    labels = [str(x) for x in tuk.groupsunique]
    idx1, idx2 = np.triu_indices(len(labels), 1)
    confint = np.asarray(tuk.confint, dtype=float)

    rows = []
    for m, (i, j) in enumerate(zip(idx1, idx2)):
        rows.append(
            PairwiseComparison(
                group1=labels[i],
                group2=labels[j],
                mean_diff=float(tuk.meandiffs[m]),
                ci_low=float(confint[m, 0]),
                ci_high=float(confint[m, 1]),
                p_adj=float(tuk.pvalues[m]),
                reject=bool(tuk.reject[m]),
            )
        )

    rows.sort(key=lambda r: (r.group1, r.group2))
    n_sig = sum(r.reject for r in rows)
    logger.info(f"Tukey HSD: {n_sig}/{len(rows)} pairs differ at alpha={alpha}")
    return tuple(rows)
