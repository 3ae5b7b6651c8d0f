"""
utils/helpers.py
----------------
Small general-purpose helper functions used across sections.
These are pure Python with no Streamlit or Plotly dependencies
so they can also be used safely inside processing scripts.

Import example:
    from utils.helpers import get_feature, census_bar_rows, fmt_count
"""

import pandas as pd

from utils.aggregator import as_number
from utils.constants import CENSUS_BARS


# ── Feature helpers ───────────────────────────────────────────────

def get_feature(features: list, dauid: str | None):
    """
    Return the feature whose DAUID matches *dauid*.

    Returns None rather than raising if the DAUID is absent, so
    callers can guard with a simple `if feature is not None` check.
    """
    if dauid is None:
        return None
    dauid = str(dauid)
    for feature in features:
        if feature.dauid == dauid:
            return feature
    return None


def clicked_dauid(event) -> str | None:
    """DAUID of the first selected polygon in a plotly_chart selection event."""
    points = (event or {}).get("selection", {}).get("points", [])
    if not points or points[0].get("location") is None:
        return None
    return str(points[0]["location"])


def select_clicked(state, event) -> bool:
    """
    Make the clicked polygon the active area.

    Any click wins over the current active area, including one set by
    a search. Returns True when state["active_dauid"] changed.
    """
    clicked = clicked_dauid(event)
    if clicked is None or clicked == state.get("active_dauid"):
        return False
    state["active_dauid"] = clicked
    return True


# ── Census bar helpers ────────────────────────────────────────────

def bar_fraction(value, maximum) -> float:
    """
    Fraction of the bar to fill: value / maximum, capped at 1.

    A missing value counts as 0 and a zero or missing maximum as 1,
    so the result is always within [0, 1].
    """
    value   = as_number(value) or 0.0
    maximum = as_number(maximum) or 1.0
    return max(0.0, min(value / maximum, 1.0))


def census_bar_rows(feature, city_maxima: dict) -> list[dict]:
    """
    Build the rows of the info panel bar chart for one feature.

    Each row has keys label, value, max, fraction and text. Missing
    census values are shown as 0, matching the city maxima policy.

    Args:
        feature:     Feature with census properties.
        city_maxima: Output of compute_city_maxima().
    """
    rows = []
    for bar in CENSUS_BARS:
        value   = as_number(feature.properties.get(bar["field"])) or 0.0
        maximum = bar["fixed_max"] or city_maxima.get(bar["field"], 0)
        rows.append({
            "label":    bar["label"],
            "value":    value,
            "max":      maximum,
            "fraction": bar_fraction(value, maximum),
            "text":     bar["fmt"].format(value),
        })
    return rows


# ── Formatting helpers ────────────────────────────────────────────

def fmt_count(value: float | int) -> str:
    """Format a number with thousands separator."""
    return f"{int(value):,}"


def fmt_value(value: float, decimals: int = 2) -> str:
    """Format a legend endpoint to a fixed number of decimal places."""
    return f"{value:.{decimals}f}"


# ── Validation helpers ────────────────────────────────────────────

def check_required_columns(
    df: pd.DataFrame,
    required: list[str],
    label: str = "DataFrame",
) -> list[str]:
    """
    Check that all required columns are present.

    Returns a list of missing column names (empty list if all present).
    Useful for giving clear error messages in processing scripts.

    Args:
        df:       DataFrame to check.
        required: List of expected column names.
        label:    Human-readable name for the DataFrame, used in messages.

    Returns:
        List of missing column names.
    """
    missing = [c for c in required if c not in df.columns]
    if missing:
        print(f"  WARNING [{label}]: missing columns: {missing}")
    return missing
