"""Ordinary least-squares fit of a response on a grouping factor."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Tuple

import numpy as np
import pandas as pd
import statsmodels.formula.api as smf

from penguinflow.data.validation import validate_columns
from penguinflow.errors import ModelFitError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FittedModel:
    """Result of ``response ~ C(group)``.

    Attributes:
        response: Response column name
        group_col: Grouping column name
        params: Coefficient estimates (intercept + per-group offsets)
        residuals: Per-observation residuals
        fitted: Per-observation fitted values
        exog: Design matrix used for the fit
        groups: Group label of each observation
        n_obs: Number of observations
        df_resid: Residual degrees of freedom
        llf: Log-likelihood of the fit
    """

    response: str
    group_col: str
    params: pd.Series
    residuals: np.ndarray
    fitted: np.ndarray
    exog: np.ndarray
    groups: np.ndarray
    n_obs: int
    df_resid: float
    llf: float

    @property
    def group_levels(self) -> Tuple[str, ...]:
        return tuple(sorted(pd.unique(self.groups)))


def check_model_inputs(df: pd.DataFrame, response: str, group_col: str) -> None:
    """Raise if a one-way model of ``response`` on ``group_col`` is undefined.

    Args:
        df: Input dataframe
        response: Response column name
        group_col: Grouping column name

    Raises:
        SchemaError: If a column is missing
        ModelFitError: If the response has non-finite values, a group label is
            missing, fewer than 2 groups exist, or a group has fewer than 2 rows
    """
    validate_columns(df, [response, group_col])

    y = pd.to_numeric(df[response], errors="coerce").to_numpy(dtype=float)
    if not np.all(np.isfinite(y)):
        n_bad = int((~np.isfinite(y)).sum())
        raise ModelFitError(f"Response '{response}' contains {n_bad} non-finite values")

    if df[group_col].isna().any():
        raise ModelFitError(f"Grouping column '{group_col}' contains missing labels")

    counts = df[group_col].astype(str).value_counts()
    if len(counts) < 2:
        raise ModelFitError(f"At least 2 groups required, found {len(counts)}")

    small = counts[counts < 2]
    if len(small) > 0:
        raise ModelFitError(f"Groups with fewer than 2 observations: {small.to_dict()}")


def fit_group_model(df: pd.DataFrame, response: str, group_col: str) -> FittedModel:
    """Fit OLS ``response ~ C(group_col)``.

    Args:
        df: Input dataframe (not modified)
        response: Response column name
        group_col: Grouping column name

    Returns:
        FittedModel

    Raises:
        SchemaError: If a column is missing
        ModelFitError: If the model is undefined for the data
    """
    check_model_inputs(df, response, group_col)

    data = pd.DataFrame(
        {
            "y": df[response].astype(float).to_numpy(),
            "g": df[group_col].astype(str).to_numpy(),
        }
    )
    result = smf.ols("y ~ C(g)", data=data).fit()

    params = result.params.rename(
        lambda name: name.replace("C(g)", f"C({group_col})")
    )

    logger.info(
        f"Fitted {response} ~ C({group_col}): n={int(result.nobs)}, "
        f"groups={data['g'].nunique()}, R²={result.rsquared:.4f}"
    )

    return FittedModel(
        response=response,
        group_col=group_col,
        params=params,
        residuals=np.asarray(result.resid, dtype=float),
        fitted=np.asarray(result.fittedvalues, dtype=float),
        exog=np.asarray(result.model.exog, dtype=float),
        groups=data["g"].to_numpy(),
        n_obs=int(result.nobs),
        df_resid=float(result.df_resid),
        llf=float(result.llf),
    )
