"""Pytest configuration and fixtures."""

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest

from penguinflow.stats.config import AnalysisConfig

RAW_SPECIES = {
    "Adelie": ("Adelie Penguin (Pygoscelis adeliae)", 3700.0, 450.0, 38.8),
    "Chinstrap": ("Chinstrap penguin (Pygoscelis antarctica)", 3730.0, 380.0, 48.8),
    "Gentoo": ("Gentoo penguin (Pygoscelis papua)", 5080.0, 500.0, 47.5),
}


@pytest.fixture
def raw_penguins_df():
    """Synthetic table with the penguins_raw schema, including messy rows."""
    rng = np.random.default_rng(42)
    n_per_species = 40
    records = []
    sample = 1

    for short, (long_name, mass_mu, mass_sd, culmen_mu) in RAW_SPECIES.items():
        for i in range(n_per_species):
            records.append(
                {
                    "studyName": "PAL0708",
                    "Sample Number": sample,
                    "Species": long_name,
                    "Region": "Anvers",
                    "Island": "Biscoe",
                    "Stage": "Adult, 1 Egg Stage",
                    "Individual ID": f"N{sample}A1",
                    "Clutch Completion": "Yes",
                    "Date Egg": "2007-11-11",
                    "Culmen Length (mm)": round(rng.normal(culmen_mu, 2.5), 1),
                    "Culmen Depth (mm)": round(rng.normal(17.0, 1.5), 1),
                    "Flipper Length (mm)": float(round(rng.normal(200, 10))),
                    "Body Mass (g)": float(round(rng.normal(mass_mu, mass_sd) / 25) * 25),
                    "Sex": "MALE" if i % 2 == 0 else "FEMALE",
                    "Delta 15 N (o/oo)": rng.normal(8.7, 0.5),
                    "Delta 13 C (o/oo)": rng.normal(-25.7, 0.7),
                    "Comments": None,
                }
            )
            sample += 1

    df = pd.DataFrame(records)
    # Messy rows: unknown sex code, missing measurements, fully empty row
    df.loc[3, "Sex"] = "."
    df.loc[5, ["Culmen Length (mm)", "Culmen Depth (mm)", "Flipper Length (mm)", "Body Mass (g)"]] = np.nan
    df.loc[5, "Sex"] = np.nan
    df.loc[5, "Comments"] = "Adult not sampled."
    empty = pd.DataFrame([{c: np.nan for c in df.columns}])
    return pd.concat([df, empty], ignore_index=True)


@pytest.fixture
def raw_csv(tmp_path, raw_penguins_df):
    """Write the raw table to CSV."""
    path = tmp_path / "data" / "penguins_raw.csv"
    path.parent.mkdir()
    raw_penguins_df.to_csv(path, index=False)
    return path


@pytest.fixture
def three_group_df():
    """Three normal groups with means 30, 40, 50 (sd 2, n=50 each)."""
    rng = np.random.default_rng(7)
    frames = [
        pd.DataFrame({"group": label, "value": rng.normal(mu, 2.0, 50)})
        for label, mu in (("A", 30.0), ("B", 40.0), ("C", 50.0))
    ]
    return pd.concat(frames, ignore_index=True)


@pytest.fixture
def analysis_config(tmp_path, raw_csv):
    """AnalysisConfig pointing every path into tmp_path."""
    return AnalysisConfig(
        raw_data_path=raw_csv,
        clean_data_path=tmp_path / "data" / "penguins_clean.csv",
        outdir=tmp_path / "derived",
    )
