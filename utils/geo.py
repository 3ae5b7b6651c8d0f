"""
utils/geo.py
------------
Location search and geometry helpers.

search_location() resolves free text to a coordinate with the
OpenStreetMap Nominatim search API, restricted to the Toronto
bounding box. locate_feature() finds the dissemination area that
contains a coordinate. project_points() turns feature centroids into
planar (x, y, value) samples for the contour page.

Import example:
    from utils.geo import search_location, locate_feature
"""

import math

import requests
from shapely.geometry import Point, shape

from utils.aggregator import MetricDefinition, compute_value
from utils.constants import (
    METRES_PER_DEGREE,
    NOMINATIM_TIMEOUT,
    NOMINATIM_URL,
    TORONTO_BBOX,
    USER_AGENT,
)


class GeocodingError(Exception):
    """The search service could not be reached or returned garbage."""


# ── Search ────────────────────────────────────────────────────────

def search_location(query: str, session=None) -> tuple | None:
    """
    Resolve *query* to (lat, lon) using the first Nominatim result
    inside the Toronto bounding box.

    Returns None for a blank query (no request is made) or when the
    service finds nothing.

    Args:
        query:   Free-text address or place name.
        session: Object with a requests-style get(); defaults to the
                 requests module. Tests pass a stub here.

    Raises:
        GeocodingError: network failure, HTTP error status, or a
                        response that is not a list of results.
    """
    query = (query or "").strip()
    if not query:
        return None

    http = session or requests
    params = {
        "format":       "json",
        "limit":        5,
        "countrycodes": "ca",
        "viewbox":      ",".join(str(v) for v in TORONTO_BBOX),
        "bounded":      1,
        "q":            query,
    }
    try:
        response = http.get(
            NOMINATIM_URL,
            params=params,
            headers={"User-Agent": USER_AGENT},
            timeout=NOMINATIM_TIMEOUT,
        )
        response.raise_for_status()
        results = response.json()
    except (requests.RequestException, ValueError) as e:
        raise GeocodingError(f"Location search failed: {e}") from e

    if not isinstance(results, list):
        raise GeocodingError(f"Unexpected search response: {results!r}")
    if not results:
        return None

    try:
        return float(results[0]["lat"]), float(results[0]["lon"])
    except (KeyError, TypeError, ValueError) as e:
        raise GeocodingError(f"Search result has no usable coordinate: {results[0]!r}") from e


# ── Point in polygon ──────────────────────────────────────────────

def locate_feature(features: list, lat: float, lon: float):
    """
    Return the first feature whose polygon contains (lat, lon),
    boundary included, or None if the point is outside every feature.
    Features without geometry are skipped.
    """
    point = Point(lon, lat)
    for feature in features:
        if not feature.geometry:
            continue
        if shape(feature.geometry).intersects(point):
            return feature
    return None


def feature_centroid(feature) -> tuple | None:
    """(lat, lon) of the feature's centroid, or None without geometry."""
    if not feature.geometry:
        return None
    centroid = shape(feature.geometry).centroid
    if centroid.is_empty:
        return None
    return centroid.y, centroid.x


# ── Planar projection ─────────────────────────────────────────────

def _bbox_origin() -> tuple:
    west, north, east, south = TORONTO_BBOX
    return west, south


def bbox_size_metres(metres_per_degree: float = METRES_PER_DEGREE) -> tuple:
    """Width and height of the Toronto bounding box in metres."""
    west, north, east, south = TORONTO_BBOX
    lat0 = (north + south) / 2
    width  = (east - west) * metres_per_degree * math.cos(math.radians(lat0))
    height = (north - south) * metres_per_degree
    return width, height


def grid_shape(cell_size: float) -> tuple:
    """(grid_width, grid_height) in cells covering the bounding box."""
    width, height = bbox_size_metres()
    return math.ceil(width / cell_size), math.ceil(height / cell_size)


def project_points(
    features: list,
    metric: MetricDefinition,
    metres_per_degree: float = METRES_PER_DEGREE,
) -> list[tuple]:
    """
    Equirectangular projection of feature centroids into metres east
    and north of the bounding box's south-west corner, paired with the
    metric value.

    Features without geometry are skipped. A missing metric field
    raises MissingFieldError as it does for the map.

    Returns:
        List of (x, y, value) tuples.
    """
    west, south = _bbox_origin()
    _, north, _, _ = TORONTO_BBOX
    cos_lat = math.cos(math.radians((north + south) / 2))

    points = []
    for feature in features:
        centroid = feature_centroid(feature)
        if centroid is None:
            continue
        lat, lon = centroid
        x = (lon - west) * metres_per_degree * cos_lat
        y = (lat - south) * metres_per_degree
        points.append((x, y, compute_value(feature, metric)))
    return points
