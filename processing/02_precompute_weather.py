"""
02_precompute_weather.py
------------------------
Pre-computes the yearly temperature and monthly rainfall summaries
from the hourly historical weather file so the dashboard does not
need to load the full file at runtime.

Input:
    data/raw/tor_urban_Weatherfile_Historical.csv

Outputs (small, suitable for git):
    data/processed/annual_temperature.csv — year, temp (°C)
    data/processed/seasonal_rainfall.csv  — period, month, avg_rain (mm)

Run from project root (after `pip install -e .`):
    python processing/02_precompute_weather.py
"""

import os

import pandas as pd

from utils.constants import RAINFALL_SPLIT_YEAR, WEATHER_COLUMNS
from utils.helpers import check_required_columns
from utils.weather import annual_mean_temperature, seasonal_rainfall

WEATHER_PATH = os.path.join("data", "raw", "tor_urban_Weatherfile_Historical.csv")
OUT_DIR      = os.path.join("data", "processed")


def build_outputs(weather_path: str, out_dir: str) -> dict:
    """
    Summarise the weather file at weather_path into out_dir.
    Returns the written DataFrames keyed by file stem.

    Raises:
        FileNotFoundError: weather_path does not exist.
        ValueError:        a required column is missing.
    """
    if not os.path.exists(weather_path):
        raise FileNotFoundError(
            f"{weather_path} not found. "
            "Save the historical weather file to data/raw/."
        )

    print("Loading weather file...")
    weather = pd.read_csv(weather_path, low_memory=False)
    print(f"  {len(weather):,} records")

    missing = check_required_columns(weather, WEATHER_COLUMNS, "weather file")
    if missing:
        raise ValueError(f"Weather file is missing columns: {missing}")

    os.makedirs(out_dir, exist_ok=True)

    # ── 1. Mean temperature per year ─────────────────────────────
    print("  Building annual_temperature.csv...")
    annual = annual_mean_temperature(weather)
    annual.to_csv(os.path.join(out_dir, "annual_temperature.csv"), index=False)
    print(f"    ✓ {len(annual)} years")

    # ── 2. Mean rainfall per month, before/after the split year ──
    print("  Building seasonal_rainfall.csv...")
    rain = seasonal_rainfall(weather, RAINFALL_SPLIT_YEAR)
    rain.to_csv(os.path.join(out_dir, "seasonal_rainfall.csv"), index=False)
    print(f"    ✓ {len(rain)} rows across {rain['period'].nunique()} periods")

    return {"annual_temperature": annual, "seasonal_rainfall": rain}


def main():
    print("02_precompute_weather.py")
    print("=" * 50)
    build_outputs(WEATHER_PATH, OUT_DIR)
    print(f"\n✓ Weather summaries written to {OUT_DIR}")


if __name__ == "__main__":
    main()
