"""
utils/charts.py
---------------
Shared chart helpers used across dashboard sections.
Figure builders return a Plotly figure object; the colour-domain
helpers return plain numbers so they can be tested without a figure.

Import example:
    from utils.charts import choropleth_map, colour_domain, apply_base_layout
"""

import calendar

import numpy as np
import pandas as pd
import plotly.colors as pc
import plotly.graph_objects as go
from plotly.exceptions import PlotlyError

from utils.aggregator import AggregationResult, Extent, MetricDefinition
from utils.constants import (
    AXIS_DEFAULTS,
    BASE_LAYOUT,
    FALLBACK_COLOUR_SCHEME,
    LEGEND_TOP,
    MAP_STYLE,
    RAINFALL_PERIOD_COLOURS,
    TORONTO_MAP_CENTRE,
    TORONTO_MAP_ZOOM,
)
from utils.helpers import fmt_value


# ── Layout helpers ────────────────────────────────────────────────

def apply_base_layout(fig: go.Figure, height: int = 420, **kwargs) -> go.Figure:
    """
    Apply the standard transparent background and drag/spike
    settings to a figure. Additional layout kwargs are passed through
    so callers can override individual properties.

    Usage:
        fig = apply_base_layout(fig, height=360, hovermode='y')
    """
    layout = {**BASE_LAYOUT, "height": height, **kwargs}
    fig.update_layout(**layout)
    return fig


def style_xaxis(fig: go.Figure, show_labels: bool = False, **kwargs) -> go.Figure:
    """Apply standard x-axis defaults. Labels hidden by default."""
    props = {**AXIS_DEFAULTS, "showticklabels": show_labels, **kwargs}
    fig.update_xaxes(**props)
    return fig


def style_yaxis(fig: go.Figure, title: str = "", **kwargs) -> go.Figure:
    """Apply standard y-axis defaults."""
    props = {**AXIS_DEFAULTS, "title": title, **kwargs}
    fig.update_yaxes(**props)
    return fig


# ── Colour domain ─────────────────────────────────────────────────

def resolve_colour_scheme(name: str) -> list:
    """
    Return the Plotly colour scale for *name*, falling back to
    FALLBACK_COLOUR_SCHEME for names Plotly does not know.
    """
    try:
        return pc.get_colorscale(name)
    except PlotlyError:
        return pc.get_colorscale(FALLBACK_COLOUR_SCHEME)


def colour_domain(extent: Extent) -> tuple:
    """
    (zmin, zmax) for a colour scale built from *extent*.

    A degenerate extent is widened to (min, min + 1) so every feature
    is drawn in the low-end colour instead of dividing by a zero-width
    domain.
    """
    lo, hi = float(extent.min), float(extent.max)
    if lo == hi:
        return lo, lo + 1.0
    return lo, hi


def normalise(value: float, extent: Extent) -> float:
    """Position of value within extent, clipped to [0, 1]. 0 when degenerate."""
    lo, hi = extent
    if lo == hi:
        return 0.0
    return float(min(max((value - lo) / (hi - lo), 0.0), 1.0))


def legend_colours(metric: MetricDefinition, extent: Extent) -> tuple:
    """Colours at the low and high ends of the legend gradient."""
    scale = resolve_colour_scheme(metric.colour_scheme)
    high = normalise(extent.max, extent)
    low_colour, high_colour = pc.sample_colorscale(scale, [0.0, high])
    return low_colour, high_colour


def legend_html(metric: MetricDefinition, extent: Extent) -> str:
    """Small gradient legend with the extent endpoints to 2 dp."""
    low_colour, high_colour = legend_colours(metric, extent)
    return f"""
    <div style="font-weight:600;margin-bottom:4px;">{metric.label}</div>
    <div style="width:220px;height:10px;margin-bottom:4px;
                background:linear-gradient(to right, {low_colour}, {high_colour});"></div>
    <div style="width:220px;display:flex;justify-content:space-between;">
        <span>{fmt_value(extent.min)}</span><span>{fmt_value(extent.max)}</span>
    </div>
    """


# ── Map ───────────────────────────────────────────────────────────

def choropleth_map(
    geojson: dict,
    result: AggregationResult,
    metric_key: str,
    highlight: str | None = None,
    center: dict | None = None,
    zoom: float = TORONTO_MAP_ZOOM,
    height: int = 620,
) -> go.Figure:
    """
    Choropleth of one metric over the dissemination areas.

    Args:
        geojson:    FeatureCollection whose properties.DAUID are strings
                    (see utils.features.features_to_geojson).
        result:     AggregationResult for the same features.
        metric_key: Key into result.metrics.
        highlight:  DAUID to outline as the active feature.
        center:     Map centre {'lat', 'lon'}; defaults to Toronto.
    """
    metric = result.metrics[metric_key]
    zmin, zmax = colour_domain(result.extents[metric_key])

    fig = go.Figure()
    fig.add_trace(go.Choroplethmap(
        geojson=geojson,
        featureidkey="properties.DAUID",
        locations=list(result.feature_ids),
        z=list(result.values[metric_key]),
        zmin=zmin,
        zmax=zmax,
        colorscale=resolve_colour_scheme(metric.colour_scheme),
        marker_opacity=0.5,
        marker_line_width=0.5,
        marker_line_color="#333",
        colorbar=dict(title=metric.label, thickness=12),
        hovertemplate="<b>DAUID %{location}</b><br>%{z:.2f}<extra></extra>",
    ))

    if highlight is not None and highlight in result.feature_ids:
        fig.add_trace(go.Choroplethmap(
            geojson=geojson,
            featureidkey="properties.DAUID",
            locations=[highlight],
            z=[0],
            colorscale=[[0, "rgba(0,0,0,0)"], [1, "rgba(0,0,0,0)"]],
            showscale=False,
            marker_line_width=2,
            marker_line_color="#000",
            hoverinfo="skip",
        ))

    fig.update_layout(
        map_style=MAP_STYLE,
        map_center=center or TORONTO_MAP_CENTRE,
        map_zoom=zoom,
        paper_bgcolor="rgba(0,0,0,0)",
        margin=dict(l=0, r=0, t=0, b=0),
        height=height,
    )
    return fig


# ── Reusable chart builders ───────────────────────────────────────

def census_bar_chart(rows: list[dict], height: int = 240) -> go.Figure:
    """
    Horizontal bars of census values scaled to the city maximum.
    Each row comes from utils.helpers.census_bar_rows().
    """
    labels = [r["label"] for r in rows]
    fig = go.Figure()
    fig.add_trace(go.Bar(
        x=[r["fraction"] * 100 for r in rows],
        y=labels,
        orientation="h",
        text=[r["text"] for r in rows],
        textposition="outside",
        marker=dict(color="steelblue"),
        hovertemplate="<b>%{y}</b><br>%{text}<extra></extra>",
    ))
    fig = apply_base_layout(fig, height=height, hovermode="y", margin=dict(l=10, r=40, t=10, b=10))
    fig = style_xaxis(fig, show_labels=False, range=[0, 115])
    fig = style_yaxis(fig, autorange="reversed", categoryorder="array", categoryarray=labels)
    return fig


def time_series_chart(
    traces: list[dict],
    height: int = 420,
    y_title: str = "",
    x_title: str = "",
    show_x_labels: bool = True,
) -> go.Figure:
    """
    Build a multi-trace line figure.

    Each item in `traces` is a dict with keys:
        x, y       – data arrays
        name       – legend label
        color      – line colour
        width      – line width (default 2)
        dash       – line dash style (default 'solid')
        shape      – line shape, e.g. 'spline' (default 'linear')
        hover      – hovertemplate string (optional)
    """
    fig = go.Figure()

    for t in traces:
        scatter_kwargs = dict(
            x=t["x"],
            y=t["y"],
            name=t.get("name", ""),
            mode="lines",
            line=dict(
                color=t.get("color", "#95a5a6"),
                width=t.get("width", 2),
                dash=t.get("dash", "solid"),
                shape=t.get("shape", "linear"),
            ),
            showlegend=t.get("name") is not None,
        )
        if "hover" in t:
            scatter_kwargs["hovertemplate"] = t["hover"]

        fig.add_trace(go.Scatter(**scatter_kwargs))

    fig = apply_base_layout(fig, height=height, legend=LEGEND_TOP)
    fig = style_xaxis(fig, show_labels=show_x_labels, title=x_title)
    fig = style_yaxis(fig, title=y_title)

    return fig


# ── Specific reusable figures ─────────────────────────────────────

def temperature_trend_chart(annual: pd.DataFrame, y_range: tuple) -> go.Figure:
    """Smoothed line of mean annual temperature in °C."""
    fig = time_series_chart(
        traces=[{
            "x":     annual["year"],
            "y":     annual["temp"],
            "name":  None,
            "color": "steelblue",
            "shape": "spline",
            "hover": "%{x}<br>%{y:.2f} °C<extra></extra>",
        }],
        height=420,
        x_title="Year",
        y_title="Temp °C",
    )
    fig.update_xaxes(tickformat="d", nticks=10)
    fig.update_yaxes(range=list(y_range))
    return fig


def seasonal_rainfall_chart(rain: pd.DataFrame, height: int = 460) -> go.Figure:
    """Grouped monthly bars of mean rainfall, one colour per period."""
    fig = go.Figure()
    periods = list(dict.fromkeys(rain["period"]))
    for period, colour in zip(periods, RAINFALL_PERIOD_COLOURS):
        subset = rain[rain["period"] == period]
        fig.add_trace(go.Bar(
            x=[calendar.month_abbr[m] for m in subset["month"]],
            y=subset["avg_rain"],
            name=period,
            marker_color=colour,
            hovertemplate="%{x} " + period + "<br>%{y:.3f} mm<extra></extra>",
        ))

    fig = apply_base_layout(fig, height=height, barmode="group", hovermode="x", legend=LEGEND_TOP)
    fig = style_xaxis(
        fig, show_labels=True, tickangle=-45,
        categoryorder="array", categoryarray=list(calendar.month_abbr)[1:],
    )
    fig = style_yaxis(fig, title="Mean rainfall (mm)", rangemode="tozero")
    return fig


def heat_contour_chart(
    grid: np.ndarray,
    cell_size: float,
    metric: MetricDefinition,
    height: int = 560,
) -> go.Figure:
    """Filled contours of a rasterized grid; axes are metres from the SW corner."""
    fig = go.Figure(data=go.Contour(
        z=grid,
        x0=cell_size / 2, dx=cell_size,
        y0=cell_size / 2, dy=cell_size,
        colorscale=resolve_colour_scheme(metric.colour_scheme),
        colorbar=dict(title=metric.label, thickness=12),
        hovertemplate="%{z:.2f}<extra></extra>",
    ))
    fig = apply_base_layout(fig, height=height, hovermode="closest")
    fig = style_xaxis(fig, show_labels=True, title="metres east")
    fig = style_yaxis(fig, title="metres north", scaleanchor="x")
    return fig
