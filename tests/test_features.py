"""
tests/test_features.py
----------------------
GeoJSON parsing and the load-time schema check.

Run with:
    pytest tests/test_features.py -v
"""

import json

import pytest

from utils.aggregator import MetricDefinition
from utils.constants import METRICS
from utils.features import (
    Feature,
    FeatureSchemaError,
    check_feature_schema,
    features_from_geojson,
    features_to_geojson,
    metric_fields,
    read_geojson,
)

SQUARE = {
    "type": "Polygon",
    "coordinates": [[[0, 0], [1, 0], [1, 1], [0, 1], [0, 0]]],
}


def collection(*features) -> dict:
    return {"type": "FeatureCollection", "features": list(features)}


def raw_feature(props, geometry=SQUARE, **extra) -> dict:
    return {"type": "Feature", "properties": props, "geometry": geometry, **extra}


# ══════════════════════════════════════════════════════════════════
# Parsing
# ══════════════════════════════════════════════════════════════════

class TestFeaturesFromGeojson:

    def test_parses_dauid_and_properties(self):
        doc = collection(raw_feature({"DAUID": "35200001", "canopy_percent": 12.5}))
        [feature] = features_from_geojson(doc)
        assert feature.dauid == "35200001"
        assert feature.get("canopy_percent") == 12.5
        assert feature.geometry == SQUARE

    def test_integer_dauid_stringified(self):
        [feature] = features_from_geojson(collection(raw_feature({"DAUID": 35200002})))
        assert feature.dauid == "35200002"

    def test_falls_back_to_feature_id(self):
        [feature] = features_from_geojson(collection(raw_feature({}, id=17)))
        assert feature.dauid == "17"

    def test_missing_identifier_raises(self):
        with pytest.raises(FeatureSchemaError):
            features_from_geojson(collection(raw_feature({"canopy_percent": 1})))

    def test_not_a_feature_collection(self):
        with pytest.raises(FeatureSchemaError):
            features_from_geojson({"type": "Feature", "properties": {}})

    def test_empty_collection(self):
        assert features_from_geojson(collection()) == []

    def test_properties_are_read_only(self):
        [feature] = features_from_geojson(collection(raw_feature({"DAUID": "1"})))
        with pytest.raises(TypeError):
            feature.properties["DAUID"] = "2"

    def test_null_properties(self):
        [feature] = features_from_geojson(collection(raw_feature(None, id="a")))
        assert feature.dauid == "a"
        assert dict(feature.properties) == {}

    def test_round_trip_for_map(self):
        features = features_from_geojson(collection(raw_feature({"DAUID": 5, "x": 1})))
        doc = features_to_geojson(features)
        assert doc["type"] == "FeatureCollection"
        assert doc["features"][0]["properties"] == {"DAUID": "5", "x": 1}

    def test_read_geojson(self, tmp_path):
        path = tmp_path / "data.geojson"
        path.write_text(json.dumps(collection(raw_feature({"DAUID": "1"}))), encoding="utf-8")
        assert read_geojson(str(path))["type"] == "FeatureCollection"

    def test_read_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_geojson(str(tmp_path / "nope.geojson"))


# ══════════════════════════════════════════════════════════════════
# Schema check
# ══════════════════════════════════════════════════════════════════

class TestSchemaCheck:

    def test_metric_fields_in_catalogue_order(self):
        assert metric_fields(METRICS) == [
            "degree_days_20",
            "canopy_percent",
            "impervious_percent",
            "cool_mean",
            "hospital_mean",
        ]

    def test_complete_features_have_no_problems(self):
        props = {m.field: 1.0 for m in METRICS.values()}
        features = [Feature("1", props), Feature("2", props)]
        assert check_feature_schema(features, METRICS) == {}

    def test_counts_missing_and_non_numeric(self, capsys):
        good = {m.field: 1.0 for m in METRICS.values()}
        features = [
            Feature("1", good),
            Feature("2", {**good, "cool_mean": None}),
            Feature("3", {k: v for k, v in good.items() if k != "cool_mean"}),
            Feature("4", {**good, "canopy_percent": "high"}),
        ]
        problems = check_feature_schema(features, METRICS)
        assert problems == {"cool_mean": 2, "canopy_percent": 1}
        assert "WARNING [features]" in capsys.readouterr().out

    def test_fields_with_default_are_not_reported(self):
        metrics = {
            "a": MetricDefinition(key="a", label="A", field="a"),
            "b": MetricDefinition(key="b", label="B", field="b", default=0.0),
        }
        problems = check_feature_schema([Feature("1", {})], metrics)
        assert problems == {"a": 1}, "a metric with a default never fails to aggregate"
