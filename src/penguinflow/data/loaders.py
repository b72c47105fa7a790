"""Table loading and saving for penguinflow.

Supports CSV files and, when PyArrow is installed, single Parquet files.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import pandas as pd

from penguinflow.data.spec import DataFormat

logger = logging.getLogger(__name__)

# Flag to track PyArrow availability
_PYARROW_AVAILABLE: Optional[bool] = None


def validate_parquet_available() -> None:
    """
    Check if PyArrow is available for Parquet operations.

    Raises
    ------
    ImportError
        If PyArrow is not installed with helpful installation message
    """
    global _PYARROW_AVAILABLE

    if _PYARROW_AVAILABLE is None:
        try:
            import pyarrow  # noqa: F401

            _PYARROW_AVAILABLE = True
        except ImportError:
            _PYARROW_AVAILABLE = False

    if not _PYARROW_AVAILABLE:
        raise ImportError(
            "PyArrow is required for Parquet support but is not installed.\n"
            "Install with: pip install penguinflow[parquet] or pip install pyarrow"
        )


def infer_format(path: Path) -> DataFormat:
    """
    Infer data format from file path.

    Parameters
    ----------
    path : Path
        Path to data file

    Returns
    -------
    DataFormat
        Inferred format (csv or parquet)
    """
    return DataFormat.from_path(path)


def load_table(path: Path) -> pd.DataFrame:
    """
    Load a raw table from file.

    No cleaning or type coercion is applied; use
    :func:`penguinflow.data.cleaning.clean_penguins` for that.

    Parameters
    ----------
    path : Path
        Path to a .csv or .parquet file

    Returns
    -------
    pd.DataFrame
        Loaded data

    Raises
    ------
    FileNotFoundError
        If the file does not exist
    ValueError
        If the format cannot be inferred

    Examples
    --------
    >>> df = load_table(Path("data/penguins_raw.csv"))
    """
    path = Path(path)
    fmt = infer_format(path)

    if not path.exists():
        raise FileNotFoundError(f"Data path not found: {path}")

    logger.info(f"Loading table from {path} (format: {fmt.value})")

    if fmt == DataFormat.CSV:
        df = _load_csv(path)
    else:
        validate_parquet_available()
        df = _load_parquet(path)

    logger.info(f"Loaded {len(df)} rows, {len(df.columns)} columns")
    return df


def save_table(df: pd.DataFrame, path: Path) -> Path:
    """
    Write a table in the format implied by its suffix.

    Parent directories are created as needed.

    Parameters
    ----------
    df : pd.DataFrame
        Table to write
    path : Path
        Destination (.csv or .parquet)

    Returns
    -------
    Path
        The written path
    """
    path = Path(path)
    fmt = infer_format(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    if fmt == DataFormat.CSV:
        df.to_csv(path, index=False)
    else:
        validate_parquet_available()
        df.to_parquet(path, index=False)

    logger.info(f"Wrote {len(df)} rows to {path}")
    return path


def _load_csv(path: Path) -> pd.DataFrame:
    """Load CSV file."""
    return pd.read_csv(path)


def _load_parquet(path: Path) -> pd.DataFrame:
    """Load single Parquet file."""
    import pyarrow.parquet as pq

    table = pq.read_table(path)
    return table.to_pandas()
