"""
utils/constants.py
------------------
Shared constants used across the dashboard sections and the
processing scripts. Import from here rather than defining locally.

The metric catalogue below is static configuration: each entry names
the GeoJSON property it reads, the transform applied to it and the
Plotly colour scale used on the map. Adding a metric here is enough
for it to appear in the map dropdown.
"""

from utils.aggregator import MetricDefinition

# ── Metric catalogue ──────────────────────────────────────────────
METRICS = {
    "exposure": MetricDefinition(
        key="exposure",
        label="Heat Exposure (°C Days)",
        field="degree_days_20",
        colour_scheme="Oranges",
    ),
    "canopy": MetricDefinition(
        key="canopy",
        label="Tree Canopy (%)",
        field="canopy_percent",
        colour_scheme="Greens",
    ),
    "impervious": MetricDefinition(
        key="impervious",
        label="Impervious Surface (%)",
        field="impervious_percent",
        colour_scheme="Greys",
    ),
    "coolAccess": MetricDefinition(
        key="coolAccess",
        label="Access to Cooling (Higher=Better)",
        field="cool_mean",
        kind="inverse_distance",
        colour_scheme="Blues",
    ),
    "hospitalAccess": MetricDefinition(
        key="hospitalAccess",
        label="Access to Hospitals (Higher=Better)",
        field="hospital_mean",
        kind="inverse_distance",
        colour_scheme="Purples",
    ),
}

DEFAULT_METRIC = "exposure"
FALLBACK_COLOUR_SCHEME = "Viridis"

# ── Census bar panel ──────────────────────────────────────────────
# Fields whose city-wide maximum is computed once per data load.
CITY_MAXIMA_FIELDS = [
    "population_2016",
    "pop_density_km2",
    "median_income",
    "unemployment_rate",
]

# fixed_max overrides the city maximum (unemployment is shown out of 100).
CENSUS_BARS = [
    {"field": "population_2016",   "label": "Population (2016)",      "fmt": "{:,.0f}", "fixed_max": None},
    {"field": "pop_density_km2",   "label": "Pop. Density (per km²)", "fmt": "{:.1f}",  "fixed_max": None},
    {"field": "median_income",     "label": "Median Income ($)",      "fmt": "{:,.0f}", "fixed_max": None},
    {"field": "unemployment_rate", "label": "Unemployment Rate (%)",  "fmt": "{:.1f}",  "fixed_max": 100},
]

# ── Weather file ──────────────────────────────────────────────────
KELVIN_OFFSET = -273.15

KELVIN_TO_CELSIUS = MetricDefinition(
    key="temp_c",
    label="Temp °C",
    field="TEMP_K",
    kind="unit_conversion",
    offset=KELVIN_OFFSET,
)

WEATHER_COLUMNS = ["YEAR", "MONTH", "TEMP_K", "RAIN_Mm"]

# Years up to and including this one form the earlier rainfall period.
RAINFALL_SPLIT_YEAR = 2005

RAINFALL_PERIOD_COLOURS = ["#88c0d0", "#5e81ac"]

# ── Plotly chart config ───────────────────────────────────────────
CHART_CONFIG = {'displayModeBar': False, 'scrollZoom': False}

# ── Map defaults ──────────────────────────────────────────────────
TORONTO_MAP_CENTRE = {'lat': 43.7, 'lon': -79.38}
TORONTO_MAP_ZOOM   = 10
SEARCH_RESULT_ZOOM = 13
MAP_STYLE          = 'open-street-map'

# west, north, east, south: Nominatim viewbox order.
TORONTO_BBOX = (-79.639319, 43.855401, -79.115408, 43.407521)

# ── Geocoding ─────────────────────────────────────────────────────
NOMINATIM_URL     = "https://nominatim.openstreetmap.org/search"
NOMINATIM_TIMEOUT = 10
USER_AGENT        = "toronto-heat-dashboard/0.1"

# Approximate metres per degree of latitude, used for planar projection.
METRES_PER_DEGREE = 111_320

# ── Shared layout defaults applied to all Plotly figures ─────────
BASE_LAYOUT = dict(
    plot_bgcolor='rgba(0,0,0,0)',
    paper_bgcolor='rgba(0,0,0,0)',
    dragmode=False,
    hovermode='x unified',
)

AXIS_DEFAULTS = dict(
    showspikes=False,
    gridcolor='rgba(128,128,128,0.15)',
)

LEGEND_TOP = dict(
    orientation='h',
    yanchor='bottom',
    y=1.02,
)
