"""Tests for the one-way linear model fit."""

import numpy as np
import pandas as pd
import pytest

from penguinflow.errors import ModelFitError, SchemaError
from penguinflow.stats.models import fit_group_model


def test_fit_group_model_coefficients(three_group_df):
    """Test intercept is the first group's mean and offsets are mean differences."""
    model = fit_group_model(three_group_df, "value", "group")
    means = three_group_df.groupby("group")["value"].mean()

    assert model.n_obs == 150
    assert model.df_resid == pytest.approx(147)
    assert model.params["Intercept"] == pytest.approx(means["A"])
    assert model.params["C(group)[T.B]"] == pytest.approx(means["B"] - means["A"])
    assert model.params["C(group)[T.C]"] == pytest.approx(means["C"] - means["A"])
    assert model.group_levels == ("A", "B", "C")


def test_fit_group_model_residuals_sum_to_zero_per_group(three_group_df):
    """Test residuals are centered within each group."""
    model = fit_group_model(three_group_df, "value", "group")

    for g in ("A", "B", "C"):
        assert model.residuals[model.groups == g].sum() == pytest.approx(0.0, abs=1e-8)
    np.testing.assert_allclose(model.fitted + model.residuals, three_group_df["value"].to_numpy())


def test_fit_group_model_rejects_singleton_group():
    """Test a group with one observation is an error."""
    df = pd.DataFrame({"g": ["A", "A", "B"], "y": [1.0, 2.0, 3.0]})

    with pytest.raises(ModelFitError, match="fewer than 2 observations"):
        fit_group_model(df, "y", "g")


def test_fit_group_model_rejects_nonfinite_response():
    """Test non-finite responses are an error."""
    df = pd.DataFrame({"g": ["A", "A", "B", "B"], "y": [1.0, np.nan, 3.0, 4.0]})

    with pytest.raises(ModelFitError, match="non-finite"):
        fit_group_model(df, "y", "g")


def test_fit_group_model_rejects_single_group():
    """Test at least two groups are required."""
    df = pd.DataFrame({"g": ["A"] * 4, "y": [1.0, 2.0, 3.0, 4.0]})

    with pytest.raises(ModelFitError, match="At least 2 groups"):
        fit_group_model(df, "y", "g")


def test_fit_group_model_missing_column():
    """Test a missing column is a schema error."""
    df = pd.DataFrame({"g": ["A", "B"], "y": [1.0, 2.0]})

    with pytest.raises(SchemaError):
        fit_group_model(df, "mass", "g")
