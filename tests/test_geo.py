"""
tests/test_geo.py
-----------------
Location search against a stubbed HTTP session, point-in-polygon
lookup and the planar projection used by the contour page.

Run with:
    pytest tests/test_geo.py -v
"""

import math

import pytest
import requests

from utils.aggregator import MetricDefinition, MissingFieldError
from utils.constants import METRES_PER_DEGREE, NOMINATIM_URL, TORONTO_BBOX
from utils.features import Feature
from utils.geo import (
    GeocodingError,
    bbox_size_metres,
    feature_centroid,
    grid_shape,
    locate_feature,
    project_points,
    search_location,
)

WEST, NORTH, EAST, SOUTH = TORONTO_BBOX


def square(lon: float, lat: float, size: float = 0.01) -> dict:
    return {
        "type": "Polygon",
        "coordinates": [[
            [lon, lat], [lon + size, lat], [lon + size, lat + size],
            [lon, lat + size], [lon, lat],
        ]],
    }


# ── Stub HTTP session ─────────────────────────────────────────────

class StubResponse:
    def __init__(self, payload, status_ok=True):
        self.payload = payload
        self.status_ok = status_ok

    def raise_for_status(self):
        if not self.status_ok:
            raise requests.HTTPError("503 Service Unavailable")

    def json(self):
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload


class StubSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def get(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if self.error is not None:
            raise self.error
        return self.response


# ══════════════════════════════════════════════════════════════════
# search_location
# ══════════════════════════════════════════════════════════════════

class TestSearchLocation:

    def test_first_result_used(self):
        session = StubSession(StubResponse([
            {"lat": "43.6532", "lon": "-79.3832"},
            {"lat": "43.7", "lon": "-79.4"},
        ]))
        assert search_location("City Hall", session=session) == (43.6532, -79.3832)

    def test_request_bounded_to_toronto(self):
        session = StubSession(StubResponse([]))
        search_location("  Union Station ", session=session)
        [(url, kwargs)] = session.calls
        params = kwargs["params"]
        assert url == NOMINATIM_URL
        assert params["q"] == "Union Station"
        assert params["bounded"] == 1
        assert params["countrycodes"] == "ca"
        assert params["viewbox"] == "-79.639319,43.855401,-79.115408,43.407521"
        assert kwargs["timeout"] > 0
        assert "User-Agent" in kwargs["headers"]

    def test_no_results(self):
        assert search_location("nowhere", session=StubSession(StubResponse([]))) is None

    @pytest.mark.parametrize("query", ["", "   ", None])
    def test_blank_query_makes_no_request(self, query):
        session = StubSession(StubResponse([]))
        assert search_location(query, session=session) is None
        assert session.calls == []

    def test_network_error_wrapped(self):
        session = StubSession(error=requests.ConnectionError("offline"))
        with pytest.raises(GeocodingError):
            search_location("Queen St", session=session)

    def test_http_error_wrapped(self):
        session = StubSession(StubResponse([], status_ok=False))
        with pytest.raises(GeocodingError):
            search_location("Queen St", session=session)

    def test_invalid_json_wrapped(self):
        session = StubSession(StubResponse(ValueError("not json")))
        with pytest.raises(GeocodingError):
            search_location("Queen St", session=session)

    def test_unexpected_payload(self):
        session = StubSession(StubResponse({"error": "rate limited"}))
        with pytest.raises(GeocodingError):
            search_location("Queen St", session=session)

    def test_result_without_coordinates(self):
        session = StubSession(StubResponse([{"display_name": "?"}]))
        with pytest.raises(GeocodingError):
            search_location("Queen St", session=session)


# ══════════════════════════════════════════════════════════════════
# Point in polygon
# ══════════════════════════════════════════════════════════════════

class TestLocateFeature:

    @pytest.fixture
    def features(self):
        return [
            Feature("no-geometry", {}),
            Feature("a", {}, square(-79.40, 43.65)),
            Feature("b", {}, square(-79.39, 43.65)),
        ]

    def test_point_inside(self, features):
        assert locate_feature(features, 43.655, -79.385).dauid == "b"

    def test_point_on_shared_boundary_takes_first(self, features):
        assert locate_feature(features, 43.655, -79.40 + 0.01).dauid == "a"

    def test_point_outside(self, features):
        assert locate_feature(features, 43.9, -79.0) is None

    def test_centroid(self, features):
        lat, lon = feature_centroid(features[1])
        assert lat == pytest.approx(43.655)
        assert lon == pytest.approx(-79.395)
        assert feature_centroid(features[0]) is None


# ══════════════════════════════════════════════════════════════════
# Projection
# ══════════════════════════════════════════════════════════════════

class TestProjection:

    METRIC = MetricDefinition(key="exposure", label="Heat", field="degree_days_20")

    def test_project_relative_to_south_west_corner(self):
        feature = Feature("1", {"degree_days_20": 9.0}, square(WEST, SOUTH, size=0.02))
        [(x, y, value)] = project_points([feature], self.METRIC)
        cos_lat = math.cos(math.radians((NORTH + SOUTH) / 2))
        assert x == pytest.approx(0.01 * METRES_PER_DEGREE * cos_lat)
        assert y == pytest.approx(0.01 * METRES_PER_DEGREE)
        assert value == 9.0

    def test_features_without_geometry_skipped(self):
        assert project_points([Feature("1", {"degree_days_20": 1})], self.METRIC) == []

    def test_missing_metric_field_raises(self):
        feature = Feature("1", {}, square(WEST, SOUTH))
        with pytest.raises(MissingFieldError):
            project_points([feature], self.METRIC)

    def test_grid_shape_covers_bbox(self):
        width, height = bbox_size_metres()
        grid_width, grid_height = grid_shape(1000)
        assert grid_width * 1000 >= width > (grid_width - 1) * 1000
        assert grid_height * 1000 >= height > (grid_height - 1) * 1000
