"""Figures: exploratory violin plot, results box plot, Box-Cox profile."""

from __future__ import annotations

import logging
import warnings
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
import matplotlib.colors as mcolors
import seaborn as sns
from scipy import stats as sp_stats

from penguinflow.data.validation import validate_columns
from penguinflow.stats.config import VizConfig
from penguinflow.stats.results import BoxCoxResult, PairwiseComparison

logger = logging.getLogger(__name__)

# Suppress seaborn/pandas FutureWarnings
warnings.filterwarnings("ignore", category=FutureWarning, module="seaborn")
warnings.filterwarnings("ignore", category=FutureWarning, module="pandas")

SPECIES_COLORS = {
    "Adelie": "darkorange",
    "Chinstrap": "purple",
    "Gentoo": "darkcyan",
}

_UNITS = {"mm": "mm", "g": "g", "kg": "kg", "cm": "cm"}


def choose_colors(groups: Sequence[str]) -> Dict[str, tuple]:
    """Map groups to colors.

    Known penguin species keep their conventional colors; any other group
    takes the next tab10 color.

    Args:
        groups: Group labels

    Returns:
        Dictionary mapping group label to RGBA tuple
    """
    cmap = plt.get_cmap("tab10")
    colors = {}
    j = 0
    for g in groups:
        if g in SPECIES_COLORS:
            colors[g] = mcolors.to_rgba(SPECIES_COLORS[g])
        else:
            colors[g] = cmap(j % cmap.N)
            j += 1
    return colors


def axis_label(column: str) -> str:
    """Readable axis label from a snake_case column, e.g. body_mass_g -> Body mass (g)."""
    transformed = column.endswith("_boxcox")
    base = column[: -len("_boxcox")] if transformed else column
    parts = base.split("_")
    unit = None
    if len(parts) > 1 and parts[-1] in _UNITS:
        unit = _UNITS[parts.pop()]
    text = " ".join(parts)
    text = text[:1].upper() + text[1:]
    if unit:
        text = f"{text} ({unit})"
    if transformed:
        text = f"Box-Cox transformed {text[:1].lower() + text[1:]}"
    return text


def significance_stars(p: float) -> str:
    """Conventional star label for a p-value."""
    if not np.isfinite(p):
        return "ns"
    if p < 0.001:
        return "***"
    if p < 0.01:
        return "**"
    if p < 0.05:
        return "*"
    return "ns"


def _plot_frame(df: pd.DataFrame, response: str, group_col: str, order: Optional[List[str]]):
    validate_columns(df, [response, group_col])
    data = df[[group_col, response]].dropna().copy()
    data[group_col] = data[group_col].astype(str)
    if order is None:
        order = sorted(data[group_col].unique())
    return data, list(order)


def _save(fig, out_path: Path, config: VizConfig) -> Path:
    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(out_path, format=config.fig_format)
    plt.close(fig)
    logger.info(f"Wrote figure {out_path}")
    return out_path


def plot_violin_jitter(
    df: pd.DataFrame,
    response: str,
    group_col: str,
    out_path: Path,
    config: VizConfig,
    order: Optional[List[str]] = None,
) -> Path:
    """Violin outline plus jittered individual points per group.

    Args:
        df: Input dataframe
        response: Continuous column on the y axis
        group_col: Grouping column on the x axis
        out_path: Destination file (vector format from ``config``)
        config: VizConfig object
        order: Optional group order (default: sorted labels)

    Returns:
        Path to the written figure
    """
    data, order = _plot_frame(df, response, group_col, order)
    colors = choose_colors(order)

    fig, ax = plt.subplots(figsize=(config.fig_width, config.fig_height), dpi=config.fig_dpi)

    sns.violinplot(
        data=data,
        x=group_col,
        y=response,
        order=order,
        hue=group_col,
        hue_order=order,
        palette=colors,
        inner=None,
        linewidth=1.2,
        legend=False,
        ax=ax,
    )

    # Outline only: move the fill color onto the edge
    for coll in ax.collections:
        coll.set_edgecolor(coll.get_facecolor())
        coll.set_facecolor("none")

    sns.stripplot(
        data=data,
        x=group_col,
        y=response,
        order=order,
        hue=group_col,
        hue_order=order,
        palette=colors,
        jitter=config.jitter,
        size=config.point_size,
        alpha=config.alpha_points,
        legend=False,
        ax=ax,
    )

    ax.set_xlabel(axis_label(group_col))
    ax.set_ylabel(axis_label(response))
    ax.set_title(f"{axis_label(response)} by {group_col}")
    ax.grid(axis="y", alpha=0.2)
    fig.tight_layout()

    return _save(fig, out_path, config)


def plot_boxplot_significance(
    df: pd.DataFrame,
    response: str,
    group_col: str,
    comparisons: Sequence[PairwiseComparison],
    out_path: Path,
    config: VizConfig,
    alpha: float = 0.05,
    order: Optional[List[str]] = None,
) -> Path:
    """Box-and-whisker plot per group with brackets for significant pairs.

    Args:
        df: Input dataframe (typically the transformed, filtered table)
        response: Continuous column on the y axis
        group_col: Grouping column on the x axis
        comparisons: Tukey HSD results for the same data
        out_path: Destination file
        config: VizConfig object
        alpha: Pairs with ``p_adj < alpha`` get a bracket
        order: Optional group order (default: sorted labels)

    Returns:
        Path to the written figure
    """
    data, order = _plot_frame(df, response, group_col, order)
    colors = choose_colors(order)
    pos = {g: i for i, g in enumerate(order)}

    fig, ax = plt.subplots(figsize=(config.fig_width, config.fig_height), dpi=config.fig_dpi)

    sns.boxplot(
        data=data,
        x=group_col,
        y=response,
        order=order,
        hue=group_col,
        hue_order=order,
        palette=colors,
        width=0.6,
        fliersize=0,
        legend=False,
        ax=ax,
    )

    sns.stripplot(
        data=data,
        x=group_col,
        y=response,
        order=order,
        color="black",
        size=config.point_size * 0.75,
        alpha=config.alpha_points * 0.6,
        jitter=config.jitter,
        ax=ax,
    )

    sig = [
        c for c in comparisons
        if c.group1 in pos and c.group2 in pos and np.isfinite(c.p_adj) and c.p_adj < alpha
    ]
    sig.sort(key=lambda c: (abs(pos[c.group2] - pos[c.group1]), pos[c.group1]))

    y_min, y_max = float(data[response].min()), float(data[response].max())
    step = 0.08 * ((y_max - y_min) or 1.0)

    for level, c in enumerate(sig, start=1):
        x1, x2 = sorted((pos[c.group1], pos[c.group2]))
        h = y_max + step * level
        ax.plot([x1, x1, x2, x2], [h - step * 0.25, h, h, h - step * 0.25], lw=1.0, color="black")
        ax.text((x1 + x2) / 2, h, significance_stars(c.p_adj), ha="center", va="bottom", fontsize=10)

    ax.set_ylim(top=y_max + step * (len(sig) + 1))
    ax.set_xlabel(axis_label(group_col))
    ax.set_ylabel(axis_label(response))
    ax.set_title(f"Box & Whisker: {axis_label(response)} (Tukey HSD, alpha={alpha})")
    ax.grid(axis="y", alpha=0.2)
    fig.tight_layout()

    return _save(fig, out_path, config)


def plot_boxcox_profile(bc: BoxCoxResult, out_path: Path, config: VizConfig) -> Path:
    """Profile log-likelihood over lambda with the selected value and 95% interval.

    Args:
        bc: Result of :func:`penguinflow.stats.transform.boxcox_profile`
        out_path: Destination file
        config: VizConfig object

    Returns:
        Path to the written figure
    """
    grid = np.asarray(bc.grid)
    llf = np.asarray(bc.llf_grid)
    finite = np.isfinite(llf)
    cutoff = bc.llf_max - sp_stats.chi2.ppf(0.95, df=1) / 2.0

    fig, ax = plt.subplots(figsize=(config.fig_width, config.fig_height), dpi=config.fig_dpi)

    ax.plot(grid[finite], llf[finite], color="black", lw=1.2)
    ax.axhline(cutoff, color="gray", lw=1, ls=":")
    ax.axvline(bc.lmbda, color="#d62728", lw=1.2, label=f"λ = {bc.lmbda:.3f}")
    ax.axvline(bc.ci_low, color="gray", lw=1, ls="--", label="95% CI")
    ax.axvline(bc.ci_high, color="gray", lw=1, ls="--")

    ax.set_xlabel("λ")
    ax.set_ylabel("Profile log-likelihood")
    ax.set_title("Box-Cox profile likelihood")
    ax.legend(frameon=True, fontsize=8)
    fig.tight_layout()

    return _save(fig, out_path, config)
