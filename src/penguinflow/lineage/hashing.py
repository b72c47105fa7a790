"""Data hashing utilities for lineage tracking."""

from __future__ import annotations

import hashlib
import logging
from datetime import datetime
from pathlib import Path

import pandas as pd

logger = logging.getLogger(__name__)


def compute_file_hash(
    file_path: Path,
    algorithm: str = "sha256",
    chunk_size: int = 8192,
) -> str:
    """
    Compute cryptographic hash of a file.

    Parameters
    ----------
    file_path : Path
        Path to file
    algorithm : str
        Hash algorithm (sha256, sha1, md5)
    chunk_size : int
        Size of chunks for reading file

    Returns
    -------
    hash_hex : str
        Hexadecimal hash digest
    """
    hasher = hashlib.new(algorithm)

    with open(file_path, "rb") as f:
        while chunk := f.read(chunk_size):
            hasher.update(chunk)

    return hasher.hexdigest()


def compute_dataframe_hash(
    df: pd.DataFrame,
    algorithm: str = "sha256",
    canonical: bool = True,
) -> str:
    """
    Compute hash of a pandas DataFrame's content.

    Parameters
    ----------
    df : pd.DataFrame
        Input dataframe
    algorithm : str
        Hash algorithm
    canonical : bool
        If True, sort columns so column order does not change the hash

    Returns
    -------
    hash_hex : str
        Hexadecimal hash digest
    """
    hasher = hashlib.new(algorithm)

    if canonical:
        df = df.sort_index(axis=1)

    hasher.update(",".join(map(str, df.columns)).encode("utf-8"))
    row_hashes = pd.util.hash_pandas_object(df, index=False)
    hasher.update(row_hashes.to_numpy().tobytes())

    return hasher.hexdigest()


def get_file_metadata(file_path: Path) -> dict:
    """
    Get metadata about a file.

    Parameters
    ----------
    file_path : Path
        Path to file

    Returns
    -------
    metadata : dict
        path, size_bytes, modified (ISO timestamp) and sha256
    """
    file_path = Path(file_path)
    stat = file_path.stat()

    return {
        "path": str(file_path),
        "size_bytes": stat.st_size,
        "modified": datetime.fromtimestamp(stat.st_mtime).isoformat(),
        "sha256": compute_file_hash(file_path),
    }
