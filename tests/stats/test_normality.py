"""Tests for residual diagnostics."""

import numpy as np
import pytest

from penguinflow.stats.normality import (
    shapiro_safe,
    levene_safe,
    check_assumptions,
    check_normality_by_group,
)


def test_shapiro_safe_normal_data():
    """Test Shapiro-Wilk on normally distributed data."""
    rng = np.random.default_rng(42)
    x = rng.normal(0, 1, 50)

    W, p, n = shapiro_safe(x)

    assert n == 50
    assert 0 <= W <= 1
    assert 0 <= p <= 1


def test_shapiro_safe_insufficient_data():
    """Test Shapiro-Wilk with insufficient data."""
    W, p, n = shapiro_safe(np.array([1.0, 2.0]))

    assert n == 2
    assert np.isnan(W)
    assert np.isnan(p)


def test_shapiro_safe_constant_data():
    """Test Shapiro-Wilk with constant data."""
    W, p, n = shapiro_safe(np.array([5.0, 5.0, 5.0, 5.0]))

    assert n == 4
    assert np.isnan(W)


def test_shapiro_safe_handles_nan():
    """Test Shapiro-Wilk handles NaN values."""
    W, p, n = shapiro_safe(np.array([1.0, 2.0, np.nan, 3.0, 4.0, 5.0]))

    assert n == 5


def test_levene_detects_unequal_variances():
    """Test Levene rejects for very different spreads."""
    rng = np.random.default_rng(0)
    values = np.concatenate([rng.normal(0, 1, 100), rng.normal(0, 10, 100)])
    groups = np.array(["A"] * 100 + ["B"] * 100)

    stat, p = levene_safe(values, groups)

    assert stat > 0
    assert p < 0.001


def test_levene_needs_two_groups():
    """Test Levene returns NaN with a single usable group."""
    stat, p = levene_safe(np.array([1.0, 2.0, 3.0]), np.array(["A", "A", "B"]))

    assert np.isnan(stat)
    assert np.isnan(p)


def test_check_assumptions_normal_residuals():
    """Test well-behaved residuals pass both diagnostics."""
    rng = np.random.default_rng(1)
    residuals = rng.normal(0, 1, 150)
    groups = np.repeat(["A", "B", "C"], 50)

    report = check_assumptions(residuals, groups, alpha=0.05)

    assert report.normality.name == "Shapiro-Wilk"
    assert report.homogeneity.name == "Levene (Brown-Forsythe)"
    assert report.stage == "raw"
    assert report.normality_violated == (report.normality.p_value < 0.05)


def test_check_assumptions_flags_skewed_residuals():
    """Test strongly skewed residuals violate normality."""
    rng = np.random.default_rng(2)
    residuals = rng.exponential(1.0, 150) - 1.0
    groups = np.repeat(["A", "B", "C"], 50)

    report = check_assumptions(residuals, groups, alpha=0.05)

    assert report.normality_violated
    assert report.violated


def test_alpha_is_a_parameter():
    """Test the violation threshold follows alpha."""
    rng = np.random.default_rng(3)
    residuals = rng.exponential(1.0, 60) - 1.0
    groups = np.repeat(["A", "B"], 30)

    strict = check_assumptions(residuals, groups, alpha=1e-300)

    assert not strict.normality_violated


def test_check_normality_by_group():
    """Test per-group Shapiro-Wilk rows."""
    rng = np.random.default_rng(4)
    values = rng.normal(0, 1, 60)
    groups = np.repeat(["B", "A"], 30)

    out = check_normality_by_group(values, groups, stage="transformed")

    assert out["group"].tolist() == ["A", "B"]
    assert (out["n"] == 30).all()
    assert (out["stage"] == "transformed").all()
