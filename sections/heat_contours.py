"""
sections/heat_contours.py
-------------------------
'Heat Contours' section — each dissemination area's centroid is
projected to metres and dropped into a coarse grid, then drawn as
filled contours. Cells take the value of the last area that landed
in them and empty cells are 0, so the picture is a presentation aid
rather than an interpolated surface.
"""

import streamlit as st

from utils.aggregator import count_out_of_bounds, rasterize_to_grid
from utils.charts import heat_contour_chart
from utils.constants import CHART_CONFIG, DEFAULT_METRIC, METRICS
from utils.data_loaders import load_heat_data
from utils.geo import grid_shape, project_points
from utils.helpers import fmt_count


@st.cache_data
def _projected_points(metric_key: str) -> list:
    return project_points(load_heat_data().features, METRICS[metric_key])


def render():
    st.title("Heat Contours")
    st.markdown("""
    A coarse contour view of the same layers. Larger cells smooth the
    picture out; smaller cells leave gaps where no area centroid falls.
    """)

    keys = list(METRICS)
    col1, col2 = st.columns(2)
    metric_key = col1.selectbox(
        "Layer",
        keys,
        index=keys.index(DEFAULT_METRIC),
        format_func=lambda k: METRICS[k].label,
        key="contour_metric_key",
    )
    cell_size = col2.slider("Cell size (m)", min_value=250, max_value=3000, value=1000, step=250)

    points = _projected_points(metric_key)
    grid_width, grid_height = grid_shape(cell_size)
    grid    = rasterize_to_grid(points, cell_size, grid_width, grid_height)
    dropped = count_out_of_bounds(points, cell_size, grid_width, grid_height)

    fig = heat_contour_chart(grid, cell_size, METRICS[metric_key])
    st.plotly_chart(fig, use_container_width=True, config=CHART_CONFIG)

    st.caption(
        f"{fmt_count(len(points))} area centroids on a "
        f"{grid_width}×{grid_height} grid; {fmt_count(dropped)} outside the "
        "Toronto bounding box were left out."
    )
