"""Box-Cox power transformation of the response.

The lambda search maximizes the profile log-likelihood of the fitted linear
model over a bounded interval::

    llf(lambda) = -n/2 * log(RSS(lambda) / n) + (lambda - 1) * sum(log y)

where RSS(lambda) is the residual sum of squares after regressing the
transformed response on the model's design matrix. A bounded Brent search
finds the optimum; a fixed grid over the same interval is evaluated for the
profile plot and to guard against a multimodal profile.
"""

from __future__ import annotations

import logging
from typing import Tuple

import numpy as np
import pandas as pd
from scipy import optimize, stats

from penguinflow.data.validation import drop_nonfinite, validate_columns
from penguinflow.errors import TransformError
from penguinflow.stats.models import FittedModel
from penguinflow.stats.results import AssumptionReport, BoxCoxResult, TransformSummary

logger = logging.getLogger(__name__)

LAMBDA_ZERO_TOL = 1e-12
LAMBDA_XATOL = 1e-8
CI_LEVEL = 0.95


def _require_positive(y: np.ndarray) -> np.ndarray:
    y = np.asarray(y, dtype=float)
    if not np.all(np.isfinite(y)):
        raise TransformError("Box-Cox input contains non-finite values")
    if np.any(y <= 0):
        n_bad = int((y <= 0).sum())
        raise TransformError(
            f"Box-Cox requires a strictly positive response; found {n_bad} values <= 0 "
            f"(min={y.min():.6g})"
        )
    return y


def boxcox_transform(y: np.ndarray, lmbda: float) -> np.ndarray:
    """Apply the Box-Cox transform.

    Args:
        y: Strictly positive values
        lmbda: Power parameter; ``log(y)`` is used when lambda is 0

    Returns:
        ``(y**lambda - 1) / lambda`` (or ``log(y)``)

    Raises:
        TransformError: If any value is non-positive or non-finite
    """
    y = _require_positive(y)
    log_y = np.log(y)
    if abs(lmbda) < LAMBDA_ZERO_TOL:
        return log_y
    return np.expm1(lmbda * log_y) / lmbda


def profile_loglik(y: np.ndarray, exog: np.ndarray, lmbda: float) -> float:
    """Profile log-likelihood of a linear model for the Box-Cox transformed response.

    Args:
        y: Strictly positive response
        exog: Design matrix (n x p)
        lmbda: Power parameter

    Returns:
        Log-likelihood up to an additive constant; ``-inf`` for a perfect fit
    """
    y = _require_positive(y)
    z = boxcox_transform(y, lmbda)
    beta, *_ = np.linalg.lstsq(exog, z, rcond=None)
    rss = float(np.sum((z - exog @ beta) ** 2))
    n = len(y)
    if not np.isfinite(rss) or rss <= 0:
        return -np.inf
    return -0.5 * n * np.log(rss / n) + (lmbda - 1.0) * float(np.sum(np.log(y)))


def _ci_bound(objective, cutoff: float, best: float, edge: float) -> float:
    """Where the profile drops below ``cutoff`` between ``best`` and ``edge``; ``edge`` if it never does."""
    if objective(edge) >= cutoff:
        return edge
    a, b = sorted((best, edge))
    return float(optimize.brentq(lambda lm: objective(lm) - cutoff, a, b))


def boxcox_profile(
    y: np.ndarray,
    model: FittedModel,
    bounds: Tuple[float, float] = (-2.0, 2.0),
    grid_points: int = 81,
) -> BoxCoxResult:
    """Select lambda by maximizing the model's profile log-likelihood.

    Args:
        y: Untransformed response, aligned with the model's observations
        model: Model fitted on ``y``; its design matrix is reused for every lambda
        bounds: Search interval for lambda
        grid_points: Number of evenly spaced lambda values to evaluate for the profile

    Returns:
        BoxCoxResult with the selected lambda, its 95% interval and the profile grid

    Raises:
        TransformError: If ``y`` is not strictly positive
        ValueError: If ``y`` does not match the model's observation count
    """
    y = _require_positive(y)
    if len(y) != model.n_obs:
        raise ValueError(f"Response has {len(y)} values but the model has {model.n_obs} observations")

    lo, hi = float(bounds[0]), float(bounds[1])
    exog = model.exog

    def objective(lm: float) -> float:
        return profile_loglik(y, exog, lm)

    grid = np.linspace(lo, hi, grid_points)
    llf_grid = np.array([objective(lm) for lm in grid])

    res = optimize.minimize_scalar(
        lambda lm: -objective(lm), bounds=(lo, hi), method="bounded", options={"xatol": LAMBDA_XATOL}
    )
    best, llf_best = float(res.x), float(-res.fun)

    # Brent can settle on a local optimum; refine around the best grid point instead
    i = int(np.argmax(llf_grid))
    if llf_grid[i] > llf_best + 1e-9:
        left, right = grid[max(i - 1, 0)], grid[min(i + 1, len(grid) - 1)]
        res = optimize.minimize_scalar(
            lambda lm: -objective(lm), bounds=(left, right), method="bounded", options={"xatol": LAMBDA_XATOL}
        )
        best, llf_best = float(res.x), float(-res.fun)
        if llf_grid[i] > llf_best:
            best, llf_best = float(grid[i]), float(llf_grid[i])

    cutoff = llf_best - stats.chi2.ppf(CI_LEVEL, df=1) / 2.0
    ci_low = _ci_bound(objective, cutoff, best, lo)
    ci_high = _ci_bound(objective, cutoff, best, hi)

    logger.info(
        f"Box-Cox lambda={best:.4f} (95% CI {ci_low:.4f} to {ci_high:.4f}), "
        f"profile llf={llf_best:.4f}, search bounds=({lo}, {hi})"
    )
    if np.isclose(best, lo) or np.isclose(best, hi):
        logger.warning(f"Box-Cox lambda {best:.4f} is at the edge of the search interval ({lo}, {hi})")

    return BoxCoxResult(
        lmbda=best,
        llf_max=llf_best,
        ci_low=float(ci_low),
        ci_high=float(ci_high),
        grid=tuple(float(g) for g in grid),
        llf_grid=tuple(float(v) for v in llf_grid),
        bounds=(lo, hi),
    )


def apply_boxcox(df: pd.DataFrame, column: str, lmbda: float, new_column: str | None = None) -> pd.DataFrame:
    """Return a copy of ``df`` with the transformed response appended.

    Args:
        df: Input dataframe (not modified)
        column: Response column
        lmbda: Box-Cox parameter
        new_column: Name of the appended column (default: ``<column>_boxcox``)

    Returns:
        New dataframe with the extra column

    Raises:
        TransformError: If the response has non-positive values
    """
    validate_columns(df, [column])
    new_column = new_column or f"{column}_boxcox"
    out = df.copy()
    out[new_column] = boxcox_transform(out[column].to_numpy(dtype=float), lmbda)
    return out


def should_transform(report: AssumptionReport, mode: str = "auto") -> Tuple[bool, str]:
    """Decide whether to transform the response.

    Args:
        report: Diagnostics on the untransformed model
        mode: "auto" (transform when an assumption is violated), "always", "never"

    Returns:
        Tuple of (transform?, reason)
    """
    if mode == "always":
        return True, "forced by configuration"
    if mode == "never":
        return False, "disabled by configuration"
    if mode != "auto":
        raise ValueError(f"Unknown transform mode: {mode}")

    reasons = []
    if report.normality_violated:
        reasons.append(f"non-normal residuals ({report.normality.name} p={report.normality.p_value:.4g})")
    if report.variance_violated:
        reasons.append(f"unequal variances ({report.homogeneity.name} p={report.homogeneity.p_value:.4g})")

    if reasons:
        return True, "; ".join(reasons)
    return False, f"assumptions met at alpha={report.alpha}"


def transform_response(
    df: pd.DataFrame,
    model: FittedModel,
    report: AssumptionReport,
    mode: str = "auto",
    bounds: Tuple[float, float] = (-2.0, 2.0),
    grid_points: int = 81,
) -> Tuple[pd.DataFrame, TransformSummary]:
    """Transform the response when required and drop non-finite results.

    ``df`` must be the exact table ``model`` was fitted on.

    Args:
        df: Modeled dataframe (not modified)
        model: Model fitted on ``df``
        report: Diagnostics on ``model``
        mode: Transform policy (see :func:`should_transform`)
        bounds: Lambda search interval
        grid_points: Profile grid size

    Returns:
        Tuple of (dataframe to analyse, TransformSummary). When no transform is
        applied the dataframe is returned unchanged and the analysed column is the
        original response.
    """
    apply, reason = should_transform(report, mode)
    if not apply:
        logger.info(f"No transformation: {reason}")
        return df, TransformSummary(
            applied=False, reason=reason, source_column=model.response, column=model.response
        )

    logger.info(f"Applying Box-Cox transformation: {reason}")
    y = df[model.response].to_numpy(dtype=float)
    bc = boxcox_profile(y, model, bounds=bounds, grid_points=grid_points)

    new_column = f"{model.response}_boxcox"
    out = apply_boxcox(df, model.response, bc.lmbda, new_column=new_column)
    out, n_dropped = drop_nonfinite(out, new_column)

    return out, TransformSummary(
        applied=True,
        reason=reason,
        source_column=model.response,
        column=new_column,
        boxcox=bc,
        n_dropped_nonfinite=n_dropped,
    )
