"""
Data loading and cleaning layer for penguinflow.

Example usage:
    from penguinflow.data import load_table, clean_penguins, save_table

    raw = load_table(Path("data/penguins_raw.csv"))
    clean = clean_penguins(raw)
    save_table(clean, Path("data/penguins_clean.csv"))
"""

from penguinflow.data.spec import DataFormat, PENGUIN_REQUIRED_COLUMNS
from penguinflow.data.loaders import (
    load_table,
    save_table,
    infer_format,
    validate_parquet_available,
)
from penguinflow.data.cleaning import (
    clean_column_names,
    remove_empty,
    shorten_species,
    normalize_sex,
    clean_penguins,
)
from penguinflow.data.validation import (
    validate_columns,
    select_complete,
    drop_nonfinite,
    generate_missingness_report,
)

__all__ = [
    # Types
    "DataFormat",
    "PENGUIN_REQUIRED_COLUMNS",
    # Loaders
    "load_table",
    "save_table",
    "infer_format",
    "validate_parquet_available",
    # Cleaning
    "clean_column_names",
    "remove_empty",
    "shorten_species",
    "normalize_sex",
    "clean_penguins",
    # Validation
    "validate_columns",
    "select_complete",
    "drop_nonfinite",
    "generate_missingness_report",
]
