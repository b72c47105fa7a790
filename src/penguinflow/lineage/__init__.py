"""Lineage tracking (file and table hashes) for analysis runs."""

from penguinflow.lineage.hashing import (
    compute_file_hash,
    compute_dataframe_hash,
    get_file_metadata,
)

__all__ = [
    "compute_file_hash",
    "compute_dataframe_hash",
    "get_file_metadata",
]
