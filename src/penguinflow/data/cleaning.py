"""Cleaning of the raw penguins table into the analysis schema."""

from __future__ import annotations

import logging
import re
import unicodedata
from typing import List

import numpy as np
import pandas as pd

from penguinflow.data.spec import (
    PENGUIN_REQUIRED_COLUMNS,
    SPECIES_SHORT_NAMES,
    SEX_LABELS,
    DROP_COLUMN_PREFIXES,
    DROP_COLUMNS,
)
from penguinflow.data.validation import validate_columns

logger = logging.getLogger(__name__)

MEASUREMENT_COLUMNS = ("culmen_length_mm", "culmen_depth_mm", "flipper_length_mm", "body_mass_g")

_CAMEL_LOWER_UPPER = re.compile(r"([a-z0-9])([A-Z])")
_CAMEL_ACRONYM = re.compile(r"([A-Z]+)([A-Z][a-z])")
_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def _snake_case(name: str) -> str:
    s = unicodedata.normalize("NFKD", str(name)).encode("ascii", "ignore").decode("ascii")
    s = s.replace("%", " percent ").replace("#", " number ")
    s = _CAMEL_ACRONYM.sub(r"\1_\2", s)
    s = _CAMEL_LOWER_UPPER.sub(r"\1_\2", s)
    s = _NON_ALNUM.sub("_", s.lower()).strip("_")
    return s or "x"


def clean_column_names(columns: List[str]) -> List[str]:
    """
    Normalize column names to lowercase snake_case.

    camelCase is split, any run of non-alphanumeric characters becomes a
    single underscore, and duplicates get ``_2``, ``_3`` suffixes.

    Parameters
    ----------
    columns : List[str]
        Original column names

    Returns
    -------
    List[str]
        Normalized names, same order

    Examples
    --------
    >>> clean_column_names(["studyName", "Culmen Length (mm)", "Delta 15 N (o/oo)"])
    ['study_name', 'culmen_length_mm', 'delta_15_n_o_oo']
    """
    seen: dict = {}
    out = []
    for col in columns:
        base = _snake_case(col)
        count = seen.get(base, 0) + 1
        seen[base] = count
        out.append(base if count == 1 else f"{base}_{count}")
    return out


def remove_empty(df: pd.DataFrame, keep: tuple = ()) -> pd.DataFrame:
    """
    Drop rows and columns that are entirely missing.

    Parameters
    ----------
    df : pd.DataFrame
        Input dataframe (not modified)
    keep : tuple
        Columns never dropped even when empty

    Returns
    -------
    pd.DataFrame
        Copy without empty rows/columns
    """
    empty_cols = [c for c in df.columns if df[c].isna().all() and c not in keep]
    out = df.drop(columns=empty_cols)
    empty_rows = out.isna().all(axis=1)

    if empty_cols:
        logger.info(f"Removed {len(empty_cols)} empty columns: {empty_cols}")
    if empty_rows.any():
        logger.info(f"Removed {int(empty_rows.sum())} empty rows")

    return out.loc[~empty_rows].copy()


def _short_species(label):
    if pd.isna(label):
        return np.nan
    key = str(label).strip().lower()
    if key in SPECIES_SHORT_NAMES:
        return SPECIES_SHORT_NAMES[key]
    for short in SPECIES_SHORT_NAMES.values():
        if key == short.lower():
            return short
    return key.split()[0].title() if key else np.nan


def shorten_species(species: pd.Series) -> pd.Series:
    """Map long species names to short canonical labels (Adelie, Chinstrap, Gentoo)."""
    return species.map(_short_species)


def _normal_sex(label):
    if pd.isna(label):
        return np.nan
    return SEX_LABELS.get(str(label).strip().lower(), np.nan)


def normalize_sex(sex: pd.Series) -> pd.Series:
    """Lowercase sex labels; unrecognized codes (e.g. ``"."``) become missing."""
    return sex.map(_normal_sex)


def clean_penguins(df: pd.DataFrame) -> pd.DataFrame:
    """
    Clean a raw penguins table into the analysis schema.

    Steps:
    1. Normalize column names to snake_case
    2. Drop ``comments`` and ``delta*`` columns
    3. Check the required columns are present
    4. Remove empty rows/columns
    5. Shorten species names and normalize sex labels
    6. Coerce measurement columns to float

    The function is idempotent: cleaning an already-clean table returns an
    equal table.

    Parameters
    ----------
    df : pd.DataFrame
        Raw table (not modified)

    Returns
    -------
    pd.DataFrame
        Cleaned copy with a fresh RangeIndex

    Raises
    ------
    SchemaError
        If an expected source column is absent
    """
    out = df.copy()
    out.columns = clean_column_names(list(out.columns))

    drop = [
        c
        for c in out.columns
        if c in DROP_COLUMNS or any(c.startswith(p) for p in DROP_COLUMN_PREFIXES)
    ]
    out = out.drop(columns=drop)

    validate_columns(out, PENGUIN_REQUIRED_COLUMNS)

    out = remove_empty(out, keep=PENGUIN_REQUIRED_COLUMNS)
    out["species"] = shorten_species(out["species"])
    out["sex"] = normalize_sex(out["sex"]).astype(object)

    for col in MEASUREMENT_COLUMNS:
        out[col] = pd.to_numeric(out[col], errors="coerce").astype(float)

    out = out.reset_index(drop=True)
    logger.info(
        f"Cleaned table: {len(out)} rows, {len(out.columns)} columns; "
        f"species: {sorted(out['species'].dropna().unique().tolist())}"
    )
    return out
