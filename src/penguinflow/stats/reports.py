"""Build and format the reported result tables."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
import pandas as pd

from penguinflow import __version__
from penguinflow.stats.results import AnovaTable, AssumptionReport, PairwiseComparison

logger = logging.getLogger(__name__)

DIAGNOSTICS_COLUMNS = ["stage", "test", "statistic", "p_value", "alpha", "violated"]
ANOVA_COLUMNS = ["term", "df", "sum_sq", "mean_sq", "statistic", "p_value"]
TUKEY_COLUMNS = ["group1", "group2", "mean_diff", "ci_low", "ci_high", "p_adj", "reject"]
DESCRIPTIVE_COLUMNS = ["group", "n", "n_missing", "mean", "sd", "median", "q25", "q75", "iqr"]

PVALUE_COLUMNS = ("p_value", "p_adj")


def build_diagnostics_table(reports: Sequence[AssumptionReport]) -> pd.DataFrame:
    """Residual diagnostics, one row per (stage, test).

    Returns:
        DataFrame with columns: stage, test, statistic, p_value, alpha, violated
    """
    rows = []
    for rep in reports:
        for result, violated in (
            (rep.normality, rep.normality_violated),
            (rep.homogeneity, rep.variance_violated),
        ):
            rows.append(
                {
                    "stage": rep.stage,
                    "test": result.name,
                    "statistic": result.statistic,
                    "p_value": result.p_value,
                    "alpha": rep.alpha,
                    "violated": violated,
                }
            )
    return pd.DataFrame(rows, columns=DIAGNOSTICS_COLUMNS)


def build_anova_table(anova: AnovaTable) -> pd.DataFrame:
    """ANOVA summary with columns: term, df, sum_sq, mean_sq, statistic, p_value."""
    return anova.to_frame()[ANOVA_COLUMNS]


def build_tukey_table(comparisons: Sequence[PairwiseComparison]) -> pd.DataFrame:
    """Tukey HSD comparisons with columns: group1, group2, mean_diff, ci_low, ci_high, p_adj, reject."""
    rows = [
        {
            "group1": c.group1,
            "group2": c.group2,
            "mean_diff": c.mean_diff,
            "ci_low": c.ci_low,
            "ci_high": c.ci_high,
            "p_adj": c.p_adj,
            "reject": c.reject,
        }
        for c in comparisons
    ]
    return pd.DataFrame(rows, columns=TUKEY_COLUMNS)


def build_descriptives_by_group(df: pd.DataFrame, response: str, group_col: str) -> pd.DataFrame:
    """Compute descriptive statistics per group for a response.

    Returns:
        DataFrame with columns: group, n, n_missing, mean, sd, median, q25, q75, iqr
    """
    rows = []
    for g in sorted(df[group_col].dropna().astype(str).unique()):
        x = df.loc[df[group_col].astype(str) == g, response]
        x_valid = x.dropna()
        n_valid = len(x_valid)

        if n_valid > 0:
            q25 = float(np.percentile(x_valid, 25))
            q75 = float(np.percentile(x_valid, 75))
            row = {
                "mean": float(np.mean(x_valid)),
                "sd": float(np.std(x_valid, ddof=1)) if n_valid > 1 else np.nan,
                "median": float(np.median(x_valid)),
                "q25": q25,
                "q75": q75,
                "iqr": q75 - q25,
            }
        else:
            row = dict.fromkeys(["mean", "sd", "median", "q25", "q75", "iqr"], np.nan)

        rows.append({"group": g, "n": n_valid, "n_missing": len(x) - n_valid, **row})

    return pd.DataFrame(rows, columns=DESCRIPTIVE_COLUMNS)


def build_run_manifest(
    raw_data_path: Path,
    clean_data_path: Path,
    response: str,
    group_col: str,
    alpha: float,
    group_counts: Dict[str, int],
    extra: Optional[Dict[str, Any]] = None,
) -> pd.DataFrame:
    """Build run manifest sheet.

    Returns:
        DataFrame with columns: parameter, value
    """
    rows = [
        {"parameter": "raw_dataset", "value": str(Path(raw_data_path).name)},
        {"parameter": "clean_dataset", "value": str(clean_data_path)},
        {"parameter": "response", "value": response},
        {"parameter": "group_column", "value": group_col},
        {"parameter": "timestamp", "value": datetime.now().strftime("%Y-%m-%d %H:%M:%S")},
        {"parameter": "alpha", "value": alpha},
        {"parameter": "package_version", "value": __version__},
        {"parameter": "n_groups", "value": len(group_counts)},
        {"parameter": "groups_order", "value": ", ".join(sorted(group_counts))},
    ]

    for grp in sorted(group_counts):
        rows.append({"parameter": f"n_{grp}", "value": group_counts[grp]})

    for key, value in (extra or {}).items():
        rows.append({"parameter": key, "value": value})

    return pd.DataFrame(rows, columns=["parameter", "value"])


def format_number(x: Any, precision: int = 4) -> str:
    """Format a statistic with ``precision`` significant digits."""
    if x is None or (isinstance(x, float) and np.isnan(x)):
        return "NA"
    if isinstance(x, (bool, np.bool_)):
        return str(bool(x))
    if isinstance(x, (int, np.integer)):
        return str(int(x))
    try:
        val = float(x)
    except (TypeError, ValueError):
        return str(x)
    if np.isnan(val):
        return "NA"
    if np.isinf(val):
        return "Inf" if val > 0 else "-Inf"
    return f"{val:.{precision}g}"


def format_pvalue(p: Any, precision: int = 4, alpha: float = 0.05) -> str:
    """Format a p-value with at least ``precision`` significant digits.

    Significant digits (not decimal places) are used and values are never
    clamped, e.g. 3.2e-80 -> "3.2e-80". When rounding would put the shown
    value on ``alpha`` or on the other side of it, digits are added until it
    does not: 0.049996 -> "0.049996", never "0.05".
    """
    text = format_number(p, precision)
    try:
        val = float(p)
    except (TypeError, ValueError):
        return text
    if isinstance(p, (bool, np.bool_)) or not np.isfinite(val) or val == alpha:
        return text

    digits = precision
    while digits < 17:
        shown = float(text)
        if shown != alpha and (shown < alpha) == (val < alpha):
            break
        digits += 1
        text = format_number(val, digits)
    return text


def format_table(df: pd.DataFrame, precision: int = 4, alpha: float = 0.05) -> pd.DataFrame:
    """Return a string-typed copy of a result table under the fixed formatting policy."""
    out = pd.DataFrame(index=df.index)
    for col in df.columns:
        if col in PVALUE_COLUMNS:
            out[col] = df[col].map(lambda v: format_pvalue(v, precision, alpha))
        elif pd.api.types.is_integer_dtype(df[col]) or pd.api.types.is_bool_dtype(df[col]):
            out[col] = df[col].astype(str)
        else:
            out[col] = df[col].map(lambda v: format_number(v, precision))
    return out


def render_text_tables(tables: Dict[str, pd.DataFrame], precision: int = 4, alpha: float = 0.05) -> str:
    """Render named tables as aligned plain text; p-values never round onto or across ``alpha``."""
    blocks: List[str] = []
    for title, df in tables.items():
        body = format_table(df, precision, alpha).to_string(index=False) if not df.empty else "(empty)"
        blocks.append(f"{title}\n{'=' * len(title)}\n{body}\n")
    return "\n".join(blocks)


def write_tables(
    outdir: Path,
    tables: Dict[str, pd.DataFrame],
    precision: int = 4,
    alpha: float = 0.05,
) -> Dict[str, Path]:
    """Write each table as CSV (unrounded) plus one formatted ``tables.txt``.

    Args:
        outdir: Output directory
        tables: Mapping of table name -> DataFrame
        precision: Significant digits for the text rendering
        alpha: Significance threshold the text rendering must not blur

    Returns:
        Mapping of table name -> CSV path, plus "text" -> tables.txt
    """
    outdir = Path(outdir)
    outdir.mkdir(parents=True, exist_ok=True)

    paths: Dict[str, Path] = {}
    for name, df in tables.items():
        path = outdir / f"{name}.csv"
        df.to_csv(path, index=False)
        paths[name] = path

    text_path = outdir / "tables.txt"
    text_path.write_text(render_text_tables(tables, precision, alpha), encoding="utf-8")
    paths["text"] = text_path

    logger.info(f"Wrote {len(tables)} tables to {outdir}")
    return paths
