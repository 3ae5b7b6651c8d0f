"""
01_summarise_features.py
------------------------
Reads the dissemination-area GeoJSON, checks that every metric field
is present and numeric, and writes the extent of each map layer and
the city-wide census maxima as small CSVs for review.

Input:
    data/data.geojson

Outputs:
    data/processed/metric_extents.csv — metric, label, field, kind, min, max
    data/processed/city_maxima.csv    — field, max

Run from project root (after `pip install -e .`):
    python processing/01_summarise_features.py
"""

import os

import pandas as pd

from utils.aggregator import aggregate
from utils.constants import CITY_MAXIMA_FIELDS, METRICS
from utils.features import check_feature_schema, features_from_geojson, read_geojson

GEOJSON_PATH = os.path.join("data", "data.geojson")
OUT_DIR      = os.path.join("data", "processed")


def build_outputs(geojson_path: str, out_dir: str) -> dict:
    """
    Aggregate the GeoJSON at geojson_path and write both CSVs to
    out_dir. Returns the written DataFrames keyed by file stem.

    Raises:
        FileNotFoundError: geojson_path does not exist.
        ValueError:        a metric field is missing or non-numeric
                           on some features.
    """
    if not os.path.exists(geojson_path):
        raise FileNotFoundError(
            f"{geojson_path} not found. "
            "Place the dissemination-area GeoJSON at data/data.geojson."
        )

    print("Loading features...")
    features = features_from_geojson(read_geojson(geojson_path))
    print(f"  {len(features):,} dissemination areas")

    problems = check_feature_schema(features, METRICS)
    if problems:
        raise ValueError(
            f"Metric fields missing or non-numeric: {problems}. "
            "Fix the GeoJSON export before running the dashboard."
        )

    result = aggregate(features, METRICS, CITY_MAXIMA_FIELDS)

    os.makedirs(out_dir, exist_ok=True)

    # ── 1. Extent of every map layer ─────────────────────────────
    print("  Building metric_extents.csv...")
    extents = pd.DataFrame([
        {
            "metric": key,
            "label":  metric.label,
            "field":  metric.field,
            "kind":   metric.kind,
            "min":    result.extents[key].min,
            "max":    result.extents[key].max,
        }
        for key, metric in result.metrics.items()
    ])
    extents.to_csv(os.path.join(out_dir, "metric_extents.csv"), index=False)
    print(f"    ✓ {len(extents)} metrics")

    # ── 2. City maxima for the census bars ───────────────────────
    print("  Building city_maxima.csv...")
    maxima = pd.DataFrame(
        list(result.city_maxima.items()), columns=["field", "max"]
    )
    maxima.to_csv(os.path.join(out_dir, "city_maxima.csv"), index=False)
    print(f"    ✓ {len(maxima)} fields")

    degenerate = [k for k, e in result.extents.items() if e.is_degenerate]
    if degenerate:
        print(f"  WARNING - constant-valued layers (single colour on the map): {degenerate}")

    return {"metric_extents": extents, "city_maxima": maxima}


def main():
    print("01_summarise_features.py")
    print("=" * 50)
    build_outputs(GEOJSON_PATH, OUT_DIR)
    print(f"\n✓ Feature summaries written to {OUT_DIR}")


if __name__ == "__main__":
    main()
