"""Table format and schema constants for penguinflow data loading."""

from __future__ import annotations

from enum import Enum
from pathlib import Path


class DataFormat(str, Enum):
    """Supported table formats."""

    CSV = "csv"
    PARQUET = "parquet"

    @classmethod
    def from_path(cls, path: Path) -> DataFormat:
        """
        Infer format from path.

        Parameters
        ----------
        path : Path
            Path to data file

        Returns
        -------
        DataFormat
            Inferred format

        Raises
        ------
        ValueError
            If format cannot be inferred
        """
        suffix = Path(path).suffix.lower()
        if suffix == ".csv":
            return cls.CSV
        elif suffix == ".parquet":
            return cls.PARQUET
        else:
            raise ValueError(
                f"Cannot infer data format from path: {path}. Expected a .csv or .parquet file."
            )


# Columns that must be present once names are normalized
PENGUIN_REQUIRED_COLUMNS = (
    "species",
    "sex",
    "culmen_length_mm",
    "culmen_depth_mm",
    "flipper_length_mm",
    "body_mass_g",
)

# Long species names in penguins_raw -> short canonical labels
SPECIES_SHORT_NAMES = {
    "adelie penguin (pygoscelis adeliae)": "Adelie",
    "chinstrap penguin (pygoscelis antarctica)": "Chinstrap",
    "gentoo penguin (pygoscelis papua)": "Gentoo",
}

SEX_LABELS = {"male": "male", "female": "female"}

# Column prefixes/names removed by the cleaner
DROP_COLUMN_PREFIXES = ("delta",)
DROP_COLUMNS = ("comments",)
