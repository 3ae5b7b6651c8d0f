"""
utils/data_loaders.py
---------------------
All data loading functions for the dashboard.
Every function is decorated with @st.cache_data or @st.cache_resource
so that data is only read from disk once per session.

A failed load shows st.error() and stops the page. Because the
exception leaves the cached function before it returns, Streamlit
stores nothing for that call and no partial aggregation is ever
served; fixing the file and rerunning builds a fresh result.
"""

import json
import os
from typing import NamedTuple

import pandas as pd
import streamlit as st

from utils.aggregator import AggregationError, AggregationResult, aggregate
from utils.constants import CITY_MAXIMA_FIELDS, METRICS
from utils.features import (
    FeatureSchemaError,
    check_feature_schema,
    features_from_geojson,
    features_to_geojson,
    read_geojson,
)

# ── Paths ─────────────────────────────────────────────────────────
GEOJSON_PATH = os.path.join("data", "data.geojson")
_PROCESSED   = os.path.join("data", "processed")


def _path(filename: str) -> str:
    return os.path.join(_PROCESSED, filename)


class HeatData(NamedTuple):
    features: list
    geojson:  dict
    result:   AggregationResult


# ── Dissemination areas ───────────────────────────────────────────

@st.cache_resource
def load_heat_data() -> HeatData:
    """
    Load the dissemination-area GeoJSON and aggregate every metric.
    The returned HeatData is shared across reruns, not copied.
    """
    try:
        document = read_geojson(GEOJSON_PATH)
        features = features_from_geojson(document)
    except FileNotFoundError:
        st.error(
            f"{GEOJSON_PATH} not found. "
            "Place the dissemination-area GeoJSON at data/data.geojson."
        )
        st.stop()
    except (json.JSONDecodeError, FeatureSchemaError) as e:
        st.error(f"Could not parse {GEOJSON_PATH}: {e}")
        st.stop()
    except Exception as e:
        st.error(f"Could not load dissemination areas: {e}")
        st.stop()

    problems = check_feature_schema(features, METRICS)
    if problems:
        summary = ", ".join(f"{name} ({n:,} features)" for name, n in problems.items())
        st.error(
            f"{GEOJSON_PATH} is missing numeric values for: {summary}. "
            "Run processing/01_summarise_features.py for details."
        )
        st.stop()

    try:
        result = aggregate(features, METRICS, CITY_MAXIMA_FIELDS)
    except AggregationError as e:
        st.error(f"Could not aggregate dissemination areas: {e}")
        st.stop()

    return HeatData(features, features_to_geojson(features), result)


# ── Weather summaries ─────────────────────────────────────────────

@st.cache_data
def load_weather_summary() -> dict:
    """
    Returns a dict of DataFrames used by the weather pages.

    Keys:
        annual   – annual_temperature.csv (year, temp)
        rainfall – seasonal_rainfall.csv (period, month, avg_rain)
    """
    files = {
        "annual":   "annual_temperature.csv",
        "rainfall": "seasonal_rainfall.csv",
    }

    result  = {}
    missing = []

    for key, filename in files.items():
        try:
            result[key] = pd.read_csv(_path(filename))
        except FileNotFoundError:
            missing.append(filename)
        except Exception as e:
            st.error(f"Could not load {filename}: {e}")
            st.stop()

    if missing:
        st.error(
            f"Weather summary files not found: {', '.join(missing)}. "
            "Run processing/02_precompute_weather.py first."
        )
        st.stop()

    return result
