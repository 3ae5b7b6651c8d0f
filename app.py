import streamlit as st

st.set_page_config(
    page_title="Toronto Urban Heat",
    page_icon="🌡️",
    layout="wide"
)

from sections import heat_contours, heat_map, seasonal_shift, temperature_trend  # noqa: E402

# ── Navigation ────────────────────────────────────────────────────

PAGES = {
    "Heat Map":          heat_map.render,
    "Heat Contours":     heat_contours.render,
    "Temperature Trend": temperature_trend.render,
    "Seasonal Shift":    seasonal_shift.render,
}

st.sidebar.title("Toronto Urban Heat")
section = st.sidebar.radio("Navigate", list(PAGES))

PAGES[section]()
