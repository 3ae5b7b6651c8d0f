"""
utils/weather.py
----------------
Aggregations of the hourly Toronto urban weather file used by the
temperature trend and seasonal shift pages.

Expected columns (see WEATHER_COLUMNS):
    YEAR     – calendar year
    MONTH    – 1..12
    TEMP_K   – air temperature in Kelvin
    RAIN_Mm  – rainfall in millimetres

Values that fail to parse as numbers are ignored by the means rather
than treated as zero.
"""

import pandas as pd

from utils.constants import KELVIN_TO_CELSIUS, RAINFALL_SPLIT_YEAR


def kelvin_to_celsius(values: pd.Series) -> pd.Series:
    """Apply the Kelvin → Celsius unit conversion to a Series."""
    return values * KELVIN_TO_CELSIUS.scale + KELVIN_TO_CELSIUS.offset


def annual_mean_temperature(df: pd.DataFrame) -> pd.DataFrame:
    """
    Mean temperature in °C for each year.

    Returns:
        DataFrame with columns year (int) and temp (float), sorted by year.
    """
    data = pd.DataFrame({
        "year": pd.to_numeric(df["YEAR"], errors="coerce"),
        "temp": kelvin_to_celsius(pd.to_numeric(df["TEMP_K"], errors="coerce")),
    }).dropna(subset=["year"])
    data["year"] = data["year"].astype(int)

    return (
        data.groupby("year")["temp"]
        .mean()
        .dropna()
        .reset_index()
        .sort_values("year", ignore_index=True)
    )


def temperature_axis_range(annual: pd.DataFrame, padding: float = 1.0) -> tuple:
    """y-axis range for the trend chart: one degree either side of the data."""
    return (
        float(annual["temp"].min()) - padding,
        float(annual["temp"].max()) + padding,
    )


def rainfall_period_labels(years: pd.Series, split_year: int = RAINFALL_SPLIT_YEAR) -> tuple:
    """
    Labels for the two comparison periods, e.g. ('1991-2005', '2006-2021').

    Each label is clamped to the years present; a period with no
    years at all gets None.
    """
    first, last = int(years.min()), int(years.max())
    early = f"{first}-{min(split_year, last)}" if first <= split_year else None
    late  = f"{max(split_year + 1, first)}-{last}" if last > split_year else None
    return early, late


def seasonal_rainfall(df: pd.DataFrame, split_year: int = RAINFALL_SPLIT_YEAR) -> pd.DataFrame:
    """
    Mean rainfall per month for the period up to and including
    split_year and for the period after it.

    Returns:
        DataFrame with columns period, month, avg_rain. The earlier
        period's rows come first, months ascending within each period.
    """
    data = pd.DataFrame({
        "year":  pd.to_numeric(df["YEAR"], errors="coerce"),
        "month": pd.to_numeric(df["MONTH"], errors="coerce"),
        "rain":  pd.to_numeric(df["RAIN_Mm"], errors="coerce"),
    }).dropna(subset=["year", "month"])
    if data.empty:
        return pd.DataFrame(columns=["period", "month", "avg_rain"])
    data["month"] = data["month"].astype(int)

    early, late = rainfall_period_labels(data["year"], split_year)
    data["period"] = data["year"].le(split_year).map({True: early, False: late})

    result = (
        data.groupby(["period", "month"])["rain"]
        .mean()
        .dropna()
        .reset_index()
        .rename(columns={"rain": "avg_rain"})
    )
    periods = [p for p in (early, late) if p is not None]
    result["period"] = pd.Categorical(result["period"], categories=periods, ordered=True)
    result = result.sort_values(["period", "month"], ignore_index=True)
    result["period"] = result["period"].astype(str)
    return result
