"""Excel workbook generation with publication-ready formatting."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Any

import pandas as pd

PVALUE_COLUMNS = ("p_value", "p_adj")
DECIMAL_COLUMNS = (
    "statistic",
    "sum_sq",
    "mean_sq",
    "mean_diff",
    "ci_low",
    "ci_high",
    "mean",
    "sd",
    "median",
    "q25",
    "q75",
    "iqr",
    "W",
)


def autosize_column(ws: Any, df: pd.DataFrame, col_idx: int, col_name: str, min_width: int = 12, max_width: int = 50):
    """Set column width based on content.

    Args:
        ws: xlsxwriter worksheet object
        df: DataFrame with data
        col_idx: Column index (0-based)
        col_name: Column name
        min_width: Minimum column width
        max_width: Maximum column width
    """
    header_len = len(str(col_name))
    content_len = int(df[col_name].map(lambda v: len(str(v))).max()) if len(df) > 0 else 0
    width = max(min_width, min(max_width, max(header_len, content_len) + 2))
    ws.set_column(col_idx, col_idx, width)


def create_formats(workbook: Any) -> Dict[str, Any]:
    """Create xlsxwriter format objects.

    Args:
        workbook: xlsxwriter Workbook object

    Returns:
        Dictionary of format objects
    """
    return {
        "pvalue": workbook.add_format({"num_format": "0.000E+00"}),
        "decimal4": workbook.add_format({"num_format": "0.0000"}),
        "sig_highlight": workbook.add_format({"bg_color": "#FFEB9C", "font_color": "#9C5700"}),
    }


def write_sheet_with_formatting(
    writer: pd.ExcelWriter,
    df: pd.DataFrame,
    sheet_name: str,
    formats: Dict[str, Any],
    alpha: float | None = None,
):
    """Write a DataFrame to Excel with formatting.

    Cells keep full precision; only the display format is set. When ``alpha``
    is given, p-values below it are highlighted.

    Args:
        writer: pandas ExcelWriter object (xlsxwriter engine)
        df: DataFrame to write
        sheet_name: Name of sheet
        formats: Dictionary of xlsxwriter format objects
        alpha: Optional significance threshold for highlighting
    """
    if df.empty:
        return

    df.to_excel(writer, sheet_name=sheet_name, index=False)
    ws = writer.sheets[sheet_name]

    ws.freeze_panes(1, 0)
    ws.autofilter(0, 0, len(df), len(df.columns) - 1)

    for col_idx, col_name in enumerate(df.columns):
        autosize_column(ws, df, col_idx, col_name)
        if col_name in PVALUE_COLUMNS:
            ws.set_column(col_idx, col_idx, None, formats["pvalue"])
            if alpha is not None:
                ws.conditional_format(
                    1,
                    col_idx,
                    len(df),
                    col_idx,
                    {"type": "cell", "criteria": "<", "value": alpha, "format": formats["sig_highlight"]},
                )
        elif col_name in DECIMAL_COLUMNS:
            ws.set_column(col_idx, col_idx, None, formats["decimal4"])


def write_results_workbook(
    outdir: Path,
    sheets: Dict[str, pd.DataFrame],
    alpha: float | None = None,
    filename: str = "analysis_tables.xlsx",
) -> Path:
    """Write all result tables to one workbook, one sheet per table.

    Args:
        outdir: Output directory
        sheets: Mapping of sheet name -> DataFrame (names truncated to 31 chars)
        alpha: Optional significance threshold for p-value highlighting
        filename: Workbook file name

    Returns:
        Path to created workbook
    """
    outdir = Path(outdir)
    outdir.mkdir(parents=True, exist_ok=True)
    out_xlsx = outdir / filename

    with pd.ExcelWriter(out_xlsx, engine="xlsxwriter") as writer:
        formats = create_formats(writer.book)
        for name, df in sheets.items():
            write_sheet_with_formatting(writer, df, name[:31], formats, alpha=alpha)

    return out_xlsx
