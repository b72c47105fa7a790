"""Data validation utilities for penguinflow."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Dict, Any, Tuple

import numpy as np
import pandas as pd

from penguinflow.errors import SchemaError

logger = logging.getLogger(__name__)


def validate_columns(df: pd.DataFrame, required: Iterable[str]) -> None:
    """
    Validate that required columns exist in DataFrame.

    Parameters
    ----------
    df : pd.DataFrame
        Input dataframe
    required : Iterable[str]
        Column names that must be present

    Raises
    ------
    SchemaError
        If any required column is missing
    """
    available = set(df.columns)
    missing = [c for c in required if c not in available]
    if missing:
        raise SchemaError(
            f"Expected columns not found: {missing}. Available: {sorted(available)[:20]}"
        )


def _finite_mask(series: pd.Series) -> pd.Series:
    """Boolean mask of usable values (non-missing, and finite when numeric)."""
    mask = series.notna()
    if pd.api.types.is_numeric_dtype(series):
        mask &= np.isfinite(series.astype(float))
    return mask


def select_complete(df: pd.DataFrame, columns: List[str]) -> pd.DataFrame:
    """
    Keep only rows with usable values for the analysed columns.

    Parameters
    ----------
    df : pd.DataFrame
        Input dataframe (not modified)
    columns : List[str]
        Columns under analysis

    Returns
    -------
    pd.DataFrame
        Copy restricted to the requested columns' complete rows; index reset

    Raises
    ------
    SchemaError
        If a requested column is missing
    """
    validate_columns(df, columns)

    mask = pd.Series(True, index=df.index)
    for col in columns:
        mask &= _finite_mask(df[col])

    n_dropped = int((~mask).sum())
    if n_dropped:
        logger.info(f"Excluded {n_dropped} rows with missing values in {columns}")

    return df.loc[mask].reset_index(drop=True)


def drop_nonfinite(df: pd.DataFrame, column: str) -> Tuple[pd.DataFrame, int]:
    """
    Drop rows whose value in ``column`` is NaN or infinite.

    Parameters
    ----------
    df : pd.DataFrame
        Input dataframe (not modified)
    column : str
        Numeric column to check

    Returns
    -------
    Tuple[pd.DataFrame, int]
        Filtered copy (index reset) and the number of dropped rows
    """
    validate_columns(df, [column])

    values = pd.to_numeric(df[column], errors="coerce").to_numpy(dtype=float)
    mask = np.isfinite(values)
    n_dropped = int((~mask).sum())

    if n_dropped:
        logger.warning(f"Dropped {n_dropped} rows with non-finite values in '{column}'")

    return df.loc[mask].reset_index(drop=True), n_dropped


def generate_missingness_report(
    df: pd.DataFrame,
    columns: Optional[List[str]] = None,
) -> Dict[str, Any]:
    """
    Generate a report on missing values in the dataset.

    Parameters
    ----------
    df : pd.DataFrame
        Input dataframe
    columns : List[str], optional
        Columns to check; if None, checks all columns

    Returns
    -------
    Dict[str, Any]
        Report containing:
        - total_missing: total count of missing values
        - missing_counts: dict of {column: count} for columns with missing values
        - missing_pct: dict of {column: percentage}
        - rows_with_missing: number of rows with any missing value
    """
    df_check = df[columns] if columns is not None else df

    missing_counts = df_check.isna().sum()
    cols_with_missing = missing_counts[missing_counts > 0]

    n_rows = max(len(df_check), 1)
    missing_pct = (cols_with_missing / n_rows * 100).round(2)
    rows_with_missing = int(df_check.isna().any(axis=1).sum())

    return {
        "total_missing": int(missing_counts.sum()),
        "missing_counts": {k: int(v) for k, v in cols_with_missing.items()},
        "missing_pct": missing_pct.to_dict(),
        "rows_with_missing": rows_with_missing,
        "rows_with_missing_pct": round(rows_with_missing / n_rows * 100, 2),
    }
