"""
utils/features.py
-----------------
Typed view of the dissemination-area GeoJSON.

Features are parsed once when the file is loaded and are read-only
afterwards. check_feature_schema() runs at the same point so that a
property missing from the file is reported once at load time rather
than discovered feature by feature while drawing the map.

Import example:
    from utils.features import read_geojson, features_from_geojson
"""

import json
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Mapping

from utils.aggregator import MetricDefinition, as_number


class FeatureSchemaError(ValueError):
    """The document is not a FeatureCollection of identifiable features."""


@dataclass(frozen=True)
class Feature:
    dauid: str
    properties: Mapping
    geometry: dict | None = None

    def get(self, name: str, default=None):
        return self.properties.get(name, default)


def _dauid(raw: dict, index: int) -> str:
    props = raw.get("properties") or {}
    dauid = props.get("DAUID", raw.get("id"))
    if dauid is None:
        raise FeatureSchemaError(
            f"Feature {index} has no DAUID property and no id. "
            "Every dissemination area needs an identifier."
        )
    # DAUIDs arrive as either strings or integers depending on the export
    return str(dauid)


def features_from_geojson(document: dict) -> list[Feature]:
    """
    Convert a parsed GeoJSON FeatureCollection into Feature records.

    Raises:
        FeatureSchemaError: document is not a FeatureCollection, or a
                            feature has no identifier.
    """
    if not isinstance(document, dict) or document.get("type") != "FeatureCollection":
        raise FeatureSchemaError("Expected a GeoJSON FeatureCollection.")

    features = []
    for i, raw in enumerate(document.get("features") or []):
        features.append(Feature(
            dauid=_dauid(raw, i),
            properties=MappingProxyType(dict(raw.get("properties") or {})),
            geometry=raw.get("geometry"),
        ))
    return features


def features_to_geojson(features: Iterable[Feature]) -> dict:
    """
    FeatureCollection for the map, with DAUID written back as a string
    so it matches the locations list built from Feature.dauid.
    """
    return {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "properties": {**f.properties, "DAUID": f.dauid},
                "geometry": f.geometry,
            }
            for f in features
        ],
    }


def read_geojson(path: str) -> dict:
    """Read and parse a GeoJSON file. Errors from open/json propagate."""
    with open(path, encoding="utf-8") as fh:
        return json.load(fh)


def metric_fields(metrics: Mapping[str, MetricDefinition]) -> list[str]:
    """Every property name the metric catalogue reads, in catalogue order."""
    fields = []
    for metric in metrics.values():
        if metric.field not in fields:
            fields.append(metric.field)
    return fields


def check_feature_schema(
    features: Iterable[Feature],
    metrics: Mapping[str, MetricDefinition],
) -> dict:
    """
    Count, per metric field, the features where it is missing or
    non-numeric. Fields without problems are left out, so an empty
    dict means the collection is safe to aggregate.

    Metrics with a default are skipped since they never fail.
    """
    strict = metric_fields({k: m for k, m in metrics.items() if m.default is None})
    problems = {}
    for feature in features:
        for name in strict:
            if as_number(feature.properties.get(name)) is None:
                problems[name] = problems.get(name, 0) + 1

    if problems:
        print(f"  WARNING [features]: missing or non-numeric fields: {problems}")
    return problems
