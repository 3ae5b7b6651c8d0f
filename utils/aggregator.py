"""
utils/aggregator.py
-------------------
Turns a loaded feature collection into the numbers the map needs:
the derived value of each feature for a metric, the (min, max) extent
used as the colour scale domain, and the city-wide maxima used to
normalise the census bars in the info panel.

Pure Python + numpy, no Streamlit or Plotly, so the same functions
run inside processing scripts and tests.

Import example:
    from utils.aggregator import aggregate, compute_extent
"""

import math
import numbers
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Mapping, NamedTuple

import numpy as np

# Smallest distance used by inverse-distance metrics.
EPSILON = 1e-6

TRANSFORM_KINDS = ("direct", "inverse_distance", "unit_conversion")


# ── Errors ────────────────────────────────────────────────────────

class AggregationError(Exception):
    """Base class for aggregator failures."""


class MissingFieldError(AggregationError, KeyError):
    """A metric references a property that is absent or not numeric."""

    def __init__(self, field_name: str, feature_id=None):
        self.field = field_name
        self.feature_id = feature_id
        where = f" on feature {feature_id}" if feature_id is not None else ""
        super().__init__(f"'{field_name}' missing or non-numeric{where}")

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return self.args[0]


class EmptyCollectionError(AggregationError, ValueError):
    """An extent or aggregation was requested over zero features."""


class OutOfBoundsError(AggregationError, IndexError):
    """A projected point falls outside the rasterization grid."""


# ── Types ─────────────────────────────────────────────────────────

@dataclass(frozen=True)
class MetricDefinition:
    """
    Static description of one map layer.

    kind:
        direct            – the property value itself
        inverse_distance  – 1 / max(value, EPSILON); higher means closer
        unit_conversion   – value * scale + offset

    default is used in place of a missing or non-numeric property.
    When it is None (the normal case) a missing property raises
    MissingFieldError rather than being coerced.
    """
    key: str
    label: str
    field: str
    kind: str = "direct"
    colour_scheme: str = "Viridis"
    default: float | None = None
    scale: float = 1.0
    offset: float = 0.0

    def __post_init__(self):
        if self.kind not in TRANSFORM_KINDS:
            raise ValueError(
                f"Unknown transform kind '{self.kind}' for metric '{self.key}'. "
                f"Expected one of {TRANSFORM_KINDS}."
            )


class Extent(NamedTuple):
    min: float
    max: float

    @property
    def is_degenerate(self) -> bool:
        """True when every feature has the same value."""
        return self.min == self.max


@dataclass(frozen=True)
class AggregationResult:
    """
    Everything derived from one data load. Built by aggregate() and
    never mutated; a reload builds a new one.

    values maps metric key → per-feature values in feature order.
    """
    feature_ids: tuple
    metrics: Mapping[str, MetricDefinition]
    values: Mapping[str, tuple]
    extents: Mapping[str, Extent]
    city_maxima: Mapping[str, float]

    def value_of(self, metric_key: str, dauid: str) -> float:
        return self.values[metric_key][self.feature_ids.index(dauid)]


# ── Property access ───────────────────────────────────────────────

def _properties(feature) -> Mapping:
    """Accept a Feature, a GeoJSON feature dict, or a flat mapping."""
    props = getattr(feature, "properties", None)
    if props is not None:
        return props
    if isinstance(feature, Mapping) and isinstance(feature.get("properties"), Mapping):
        return feature["properties"]
    return feature


def _feature_id(feature):
    dauid = getattr(feature, "dauid", None)
    if dauid is not None:
        return dauid
    return _properties(feature).get("DAUID")


def as_number(value) -> float | None:
    """
    Return value as a finite float, or None if it is missing,
    non-numeric, boolean, NaN or infinite.
    """
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return None
    value = float(value)
    return value if math.isfinite(value) else None


# ── Operations ────────────────────────────────────────────────────

def compute_value(feature, metric: MetricDefinition) -> float:
    """
    Apply metric's transform to one feature.

    Raises:
        MissingFieldError: the property is absent or non-numeric and
                           the metric has no default.
    """
    raw = as_number(_properties(feature).get(metric.field))
    if raw is None:
        if metric.default is None:
            raise MissingFieldError(metric.field, _feature_id(feature))
        raw = float(metric.default)

    if metric.kind == "inverse_distance":
        return 1.0 / max(raw, EPSILON)
    if metric.kind == "unit_conversion":
        return raw * metric.scale + metric.offset
    return raw


def compute_extent(features: Iterable, metric: MetricDefinition) -> Extent:
    """
    Minimum and maximum of compute_value across the collection.

    A feature with a missing field is never skipped: the
    MissingFieldError propagates so the colour domain cannot silently
    exclude it. min == max is a valid result.

    Raises:
        EmptyCollectionError: features is empty.
        MissingFieldError:    any feature lacks the metric's field.
    """
    values = [compute_value(f, metric) for f in features]
    if not values:
        raise EmptyCollectionError(
            f"Cannot compute the extent of '{metric.key}' over zero features."
        )
    return Extent(min(values), max(values))


def compute_city_maxima(features: Iterable, field_names: Iterable[str]) -> dict:
    """
    Per-field maximum across the collection for the census bars.

    Missing or non-numeric values count as 0, and every requested
    field appears in the result (0 if no feature has it).
    """
    maxima = {name: 0.0 for name in field_names}
    for feature in features:
        props = _properties(feature)
        for name in maxima:
            value = as_number(props.get(name)) or 0.0
            if value > maxima[name]:
                maxima[name] = value
    return maxima


def aggregate(
    features,
    metrics: Mapping[str, MetricDefinition],
    maxima_fields: Iterable[str],
) -> AggregationResult:
    """
    Build the AggregationResult for one loaded collection.

    Raises EmptyCollectionError rather than returning a degenerate
    result when nothing was loaded.
    """
    features = list(features)
    if not features:
        raise EmptyCollectionError("No features loaded; nothing to aggregate.")

    values  = {}
    extents = {}
    for key, metric in metrics.items():
        vals = tuple(compute_value(f, metric) for f in features)
        values[key]  = vals
        extents[key] = Extent(min(vals), max(vals))

    return AggregationResult(
        feature_ids=tuple(str(_feature_id(f)) for f in features),
        metrics=MappingProxyType(dict(metrics)),
        values=MappingProxyType(values),
        extents=MappingProxyType(extents),
        city_maxima=MappingProxyType(compute_city_maxima(features, maxima_fields)),
    )


# ── Rasterization ─────────────────────────────────────────────────

def grid_cell(
    x: float,
    y: float,
    cell_size: float,
    grid_width: int,
    grid_height: int,
    origin: tuple = (0.0, 0.0),
) -> tuple:
    """
    Return the (row, col) of the cell containing (x, y).

    Raises:
        OutOfBoundsError: the point lies outside the grid.
    """
    if not (math.isfinite(x) and math.isfinite(y)):
        raise OutOfBoundsError(f"({x}, {y}) is not a finite coordinate")
    col = math.floor((x - origin[0]) / cell_size)
    row = math.floor((y - origin[1]) / cell_size)
    if not (0 <= col < grid_width and 0 <= row < grid_height):
        raise OutOfBoundsError(f"({x}, {y}) falls outside the {grid_width}x{grid_height} grid")
    return row, col


def rasterize_to_grid(
    points: Iterable,
    cell_size: float,
    grid_width: int,
    grid_height: int,
    origin: tuple = (0.0, 0.0),
) -> np.ndarray:
    """
    Coarse nearest-cell rasterization of (x, y, value) samples.

    Each point overwrites the cell it falls in, so the last point
    written to a cell wins (no averaging). Cells with no point stay 0
    and points outside the grid are dropped.

    Returns:
        float array of shape (grid_height, grid_width), indexed [row, col].
    """
    if cell_size <= 0:
        raise ValueError(f"cell_size must be positive, got {cell_size}")
    if grid_width <= 0 or grid_height <= 0:
        raise ValueError(
            f"Grid dimensions must be positive, got {grid_width}x{grid_height}"
        )

    grid = np.zeros((grid_height, grid_width), dtype=float)
    for x, y, value in points:
        try:
            row, col = grid_cell(x, y, cell_size, grid_width, grid_height, origin)
        except OutOfBoundsError:
            continue
        grid[row, col] = value
    return grid


def count_out_of_bounds(
    points: Iterable,
    cell_size: float,
    grid_width: int,
    grid_height: int,
    origin: tuple = (0.0, 0.0),
) -> int:
    """Number of points rasterize_to_grid would drop."""
    dropped = 0
    for x, y, _ in points:
        try:
            grid_cell(x, y, cell_size, grid_width, grid_height, origin)
        except OutOfBoundsError:
            dropped += 1
    return dropped
