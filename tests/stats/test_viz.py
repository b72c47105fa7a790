"""Tests for figure generation."""

import numpy as np
import pytest

from penguinflow.stats.config import VizConfig
from penguinflow.stats.models import fit_group_model
from penguinflow.stats.tests import tukey_hsd
from penguinflow.stats.transform import boxcox_profile
from penguinflow.stats.viz import (
    axis_label,
    choose_colors,
    significance_stars,
    plot_violin_jitter,
    plot_boxplot_significance,
    plot_boxcox_profile,
)


def test_axis_label():
    """Test readable labels from column names."""
    assert axis_label("body_mass_g") == "Body mass (g)"
    assert axis_label("culmen_length_mm") == "Culmen length (mm)"
    assert axis_label("species") == "Species"
    assert axis_label("body_mass_g_boxcox") == "Box-Cox transformed body mass (g)"


def test_significance_stars():
    """Test star thresholds."""
    assert significance_stars(0.0001) == "***"
    assert significance_stars(0.005) == "**"
    assert significance_stars(0.03) == "*"
    assert significance_stars(0.2) == "ns"
    assert significance_stars(np.nan) == "ns"


def test_choose_colors_known_and_unknown():
    """Test species keep their colors and other groups get distinct ones."""
    colors = choose_colors(["Adelie", "X", "Y"])

    assert set(colors) == {"Adelie", "X", "Y"}
    assert colors["X"] != colors["Y"]


def test_plot_violin_jitter_writes_svg(three_group_df, tmp_path):
    """Test the violin plot is written in the configured vector format."""
    out = plot_violin_jitter(
        three_group_df, "value", "group", tmp_path / "figs" / "violin.svg", VizConfig()
    )

    assert out.exists()
    assert out.read_text().lstrip().startswith("<?xml")


def test_plot_boxplot_significance(three_group_df, tmp_path):
    """Test the box plot with significance brackets."""
    comparisons = tukey_hsd(three_group_df, "value", "group")

    out = plot_boxplot_significance(
        three_group_df, "value", "group", comparisons, tmp_path / "box.pdf", VizConfig(fig_format="pdf")
    )

    assert out.exists()
    assert out.read_bytes().startswith(b"%PDF")


def test_plot_boxcox_profile(three_group_df, tmp_path):
    """Test the profile likelihood plot."""
    model = fit_group_model(three_group_df, "value", "group")
    bc = boxcox_profile(three_group_df["value"].to_numpy(), model, grid_points=21)

    out = plot_boxcox_profile(bc, tmp_path / "profile.svg", VizConfig())

    assert out.exists()


def test_viz_config_rejects_raster_format():
    """Test only vector formats are accepted."""
    with pytest.raises(ValueError, match="fig_format"):
        VizConfig(fig_format="png")
