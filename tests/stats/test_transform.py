"""Tests for the Box-Cox transformation."""

import numpy as np
import pandas as pd
import pytest

from penguinflow.errors import TransformError
from penguinflow.stats.models import fit_group_model
from penguinflow.stats.results import AssumptionReport, TestResult
from penguinflow.stats.transform import (
    apply_boxcox,
    boxcox_profile,
    boxcox_transform,
    profile_loglik,
    should_transform,
    transform_response,
)


def _report(p_norm, p_var, alpha=0.05):
    return AssumptionReport(
        normality=TestResult("Shapiro-Wilk", 0.9, p_norm),
        homogeneity=TestResult("Levene (Brown-Forsythe)", 1.0, p_var),
        alpha=alpha,
    )


@pytest.fixture
def skewed_df():
    """Log-normal groups: a log transform makes the residuals normal."""
    rng = np.random.default_rng(11)
    return pd.DataFrame(
        {
            "group": np.repeat(["A", "B", "C"], 60),
            "value": np.exp(
                np.concatenate(
                    [rng.normal(1.0, 0.5, 60), rng.normal(1.5, 0.5, 60), rng.normal(2.0, 0.5, 60)]
                )
            ),
        }
    )


def test_boxcox_lambda_one_is_shift():
    """Test lambda = 1 gives y - 1."""
    y = np.array([1.0, 2.5, 10.0])
    np.testing.assert_allclose(boxcox_transform(y, 1.0), y - 1.0)


def test_boxcox_lambda_zero_is_log():
    """Test lambda = 0 gives log(y)."""
    y = np.array([0.5, 1.0, 20.0])
    np.testing.assert_allclose(boxcox_transform(y, 0.0), np.log(y))


def test_boxcox_continuous_at_zero():
    """Test the transform approaches log(y) as lambda approaches 0."""
    y = np.array([0.5, 3.0, 40.0])
    np.testing.assert_allclose(boxcox_transform(y, 1e-9), np.log(y), rtol=1e-6)


@pytest.mark.parametrize("bad", [0.0, -1.0, np.nan])
def test_boxcox_rejects_nonpositive(bad):
    """Test non-positive or non-finite input raises instead of producing NaN."""
    with pytest.raises(TransformError):
        boxcox_transform(np.array([1.0, 2.0, bad]), 0.5)


def test_profile_recovers_log_scale(skewed_df):
    """Test the selected lambda is near 0 for log-normal data."""
    model = fit_group_model(skewed_df, "value", "group")

    bc = boxcox_profile(skewed_df["value"].to_numpy(), model)

    assert -2.0 <= bc.lmbda <= 2.0
    assert abs(bc.lmbda) < 0.5
    assert bc.ci_low <= bc.lmbda <= bc.ci_high
    assert len(bc.grid) == 81
    assert bc.llf_max >= max(bc.llf_grid) - 1e-9


def test_profile_maximum_matches_loglik(skewed_df):
    """Test llf_max is the profile log-likelihood at the selected lambda."""
    model = fit_group_model(skewed_df, "value", "group")
    y = skewed_df["value"].to_numpy()

    bc = boxcox_profile(y, model)

    assert bc.llf_max == pytest.approx(profile_loglik(y, model.exog, bc.lmbda))


def test_profile_respects_bounds(skewed_df):
    """Test the search never leaves the configured interval."""
    model = fit_group_model(skewed_df, "value", "group")

    bc = boxcox_profile(skewed_df["value"].to_numpy(), model, bounds=(0.5, 1.5), grid_points=11)

    assert 0.5 <= bc.lmbda <= 1.5
    assert bc.bounds == (0.5, 1.5)
    assert len(bc.grid) == 11


def test_profile_length_mismatch(skewed_df):
    """Test the response must align with the model."""
    model = fit_group_model(skewed_df, "value", "group")

    with pytest.raises(ValueError, match="observations"):
        boxcox_profile(skewed_df["value"].to_numpy()[:-1], model)


def test_apply_boxcox_adds_column():
    """Test apply_boxcox returns a copy with a new column."""
    df = pd.DataFrame({"y": [1.0, np.e, np.e**2]})

    out = apply_boxcox(df, "y", 0.0)

    assert "y_boxcox" not in df.columns
    np.testing.assert_allclose(out["y_boxcox"], [0.0, 1.0, 2.0])


def test_should_transform_modes():
    """Test the transform decision for each mode."""
    ok = _report(0.5, 0.5)
    non_normal = _report(0.001, 0.5)
    unequal = _report(0.5, 0.001)

    assert should_transform(ok, "auto")[0] is False
    assert should_transform(non_normal, "auto")[0] is True
    assert should_transform(unequal, "auto")[0] is True
    assert should_transform(ok, "always")[0] is True
    assert should_transform(non_normal, "never")[0] is False
    with pytest.raises(ValueError):
        should_transform(ok, "sometimes")


def test_transform_response_applied(skewed_df):
    """Test a forced transform adds the Box-Cox column and summary."""
    model = fit_group_model(skewed_df, "value", "group")

    out, summary = transform_response(skewed_df, model, _report(0.5, 0.5), mode="always")

    assert summary.applied
    assert summary.column == "value_boxcox"
    assert summary.source_column == "value"
    assert summary.boxcox is not None
    assert summary.n_dropped_nonfinite == 0
    assert np.isfinite(out["value_boxcox"]).all()
    assert len(out) == len(skewed_df)


def test_transform_response_skipped(three_group_df):
    """Test no transform leaves the data untouched."""
    model = fit_group_model(three_group_df, "value", "group")

    out, summary = transform_response(three_group_df, model, _report(0.5, 0.5), mode="auto")

    assert not summary.applied
    assert summary.column == "value"
    assert summary.boxcox is None
    assert out is three_group_df


def test_transform_response_nonpositive_is_fatal():
    """Test a non-positive response cannot be silently transformed."""
    df = pd.DataFrame({"group": ["A", "A", "B", "B"], "value": [1.0, 2.0, 0.0, 3.0]})
    model = fit_group_model(df, "value", "group")

    with pytest.raises(TransformError, match="strictly positive"):
        transform_response(df, model, _report(0.001, 0.5), mode="auto")
