"""
sections/heat_map.py
--------------------
'Heat Map' section — choropleth of the selected heat metric across
Toronto dissemination areas, with location search and a census info
panel for the active area.

The active area is kept in st.session_state['active_dauid'] and is set
either by clicking a polygon or by a successful search.
"""

import streamlit as st

from utils.charts import census_bar_chart, choropleth_map, legend_html
from utils.constants import (
    CHART_CONFIG,
    DEFAULT_METRIC,
    METRICS,
    SEARCH_RESULT_ZOOM,
    TORONTO_MAP_CENTRE,
    TORONTO_MAP_ZOOM,
)
from utils.data_loaders import load_heat_data
from utils.geo import GeocodingError, locate_feature, search_location
from utils.helpers import census_bar_rows, get_feature, select_clicked

_VIEW_DEFAULTS = {
    "active_dauid": None,
    "map_version":  0,
    "map_center":   TORONTO_MAP_CENTRE,
    "map_zoom":     TORONTO_MAP_ZOOM,
}


def _init_state():
    for key, value in _VIEW_DEFAULTS.items():
        st.session_state.setdefault(key, value)


def _reset_map_selection():
    # A fresh chart key drops the selection the old chart was holding.
    st.session_state["map_version"] += 1


def render():
    st.title("Toronto Urban Heat")
    st.markdown("""
    Heat exposure, tree canopy, paved surface and access to cooling and
    hospitals for every census dissemination area in Toronto. Pick a layer,
    click an area or search an address to see its census profile.
    """)

    _init_state()
    data = load_heat_data()

    keys = list(METRICS)
    metric_key = st.selectbox(
        "Layer",
        keys,
        index=keys.index(DEFAULT_METRIC),
        format_func=lambda k: METRICS[k].label,
        key="metric_key",
    )

    _render_search(data.features)

    col_map, col_info = st.columns([3, 1])
    with col_map:
        _render_map(data, metric_key)
    with col_info:
        st.markdown(
            legend_html(METRICS[metric_key], data.result.extents[metric_key]),
            unsafe_allow_html=True,
        )
        if st.button("Reset view"):
            st.session_state["map_center"] = TORONTO_MAP_CENTRE
            st.session_state["map_zoom"]   = TORONTO_MAP_ZOOM
            _reset_map_selection()
            st.rerun()
        st.divider()
        _render_info_panel(data)

    st.caption("""
    Source: Statistics Canada 2016 Census dissemination areas |
    Basemap © OpenStreetMap contributors | Search by Nominatim.
    Access layers are 1 / mean distance, so higher means closer.
    """)


# ── Sub-renderers ─────────────────────────────────────────────────

def _render_search(features):
    with st.form("search", clear_on_submit=False, border=False):
        col_q, col_go = st.columns([4, 1])
        query = col_q.text_input(
            "Search a Toronto address",
            placeholder="e.g. 100 Queen St W",
            label_visibility="collapsed",
        )
        submitted = col_go.form_submit_button("Search")

    if not submitted or not query.strip():
        return

    try:
        coords = search_location(query)
    except GeocodingError as e:
        st.error(f"Error searching location. {e}")
        return

    if coords is None:
        st.warning("No location found within Toronto. Try a different query.")
        return

    lat, lon = coords
    st.session_state["map_center"] = {"lat": lat, "lon": lon}
    st.session_state["map_zoom"]   = SEARCH_RESULT_ZOOM

    feature = locate_feature(features, lat, lon)
    if feature is None:
        st.warning("Coordinates not in any dissemination area. Possibly outside the city boundary?")
        return
    st.session_state["active_dauid"] = feature.dauid
    _reset_map_selection()


def _render_map(data, metric_key):
    fig = choropleth_map(
        data.geojson,
        data.result,
        metric_key,
        highlight=st.session_state["active_dauid"],
        center=st.session_state["map_center"],
        zoom=st.session_state["map_zoom"],
    )
    event = st.plotly_chart(
        fig,
        use_container_width=True,
        config={**CHART_CONFIG, "scrollZoom": True},
        on_select="rerun",
        selection_mode="points",
        key=f"heat_map_{st.session_state['map_version']}",
    )

    if select_clicked(st.session_state, event):
        st.rerun()


def _render_info_panel(data):
    feature = get_feature(data.features, st.session_state["active_dauid"])
    if feature is None:
        st.info("Click an area or search an address to see its census profile.")
        return

    st.markdown(f"### DAUID: {feature.dauid}")
    for key, metric in METRICS.items():
        value = data.result.value_of(key, feature.dauid)
        st.markdown(f"**{metric.label}:** {value:,.2f}")

    st.markdown("Census data:")
    rows = census_bar_rows(feature, data.result.city_maxima)
    st.plotly_chart(census_bar_chart(rows), use_container_width=True, config=CHART_CONFIG)
