"""
tests/test_data_loaders.py
--------------------------
Failure handling of the cached dashboard loaders: a bad or missing file
shows an error and stops the page without caching a result.

st.error and st.stop are replaced with recorders so the loaders can run
outside a Streamlit session.

Run with:
    pytest tests/test_data_loaders.py -v
"""

import json

import pandas as pd
import pytest
import streamlit as st

import utils.data_loaders as data_loaders
from utils.constants import METRICS

SQUARE = {
    "type": "Polygon",
    "coordinates": [[[0, 0], [1, 0], [1, 1], [0, 1], [0, 0]]],
}


class PageStopped(Exception):
    pass


def write_geojson(path, features):
    path.write_text(
        json.dumps({"type": "FeatureCollection", "features": features}),
        encoding="utf-8",
    )


def area(dauid, **overrides) -> dict:
    props = {"DAUID": dauid, **{m.field: 1.0 for m in METRICS.values()}, **overrides}
    return {"type": "Feature", "properties": props, "geometry": SQUARE}


@pytest.fixture
def errors(monkeypatch):
    """Collects st.error messages; st.stop raises PageStopped."""
    shown = []

    def fake_stop():
        raise PageStopped()

    monkeypatch.setattr(st, "error", lambda msg, *a, **kw: shown.append(msg))
    monkeypatch.setattr(st, "stop", fake_stop)
    data_loaders.load_heat_data.clear()
    data_loaders.load_weather_summary.clear()
    yield shown
    data_loaders.load_heat_data.clear()
    data_loaders.load_weather_summary.clear()


# ══════════════════════════════════════════════════════════════════
# Dissemination areas
# ══════════════════════════════════════════════════════════════════

class TestLoadHeatData:

    def test_missing_file_shows_error_and_stops(self, tmp_path, monkeypatch, errors):
        monkeypatch.setattr(data_loaders, "GEOJSON_PATH", str(tmp_path / "data.geojson"))
        with pytest.raises(PageStopped):
            data_loaders.load_heat_data()
        assert len(errors) == 1
        assert "not found" in errors[0]

    def test_unparseable_file(self, tmp_path, monkeypatch, errors):
        path = tmp_path / "data.geojson"
        path.write_text("{not json", encoding="utf-8")
        monkeypatch.setattr(data_loaders, "GEOJSON_PATH", str(path))
        with pytest.raises(PageStopped):
            data_loaders.load_heat_data()
        assert "Could not parse" in errors[0]

    def test_schema_failure_names_field(self, tmp_path, monkeypatch, errors):
        path = tmp_path / "data.geojson"
        write_geojson(path, [area("1"), area("2", cool_mean=None)])
        monkeypatch.setattr(data_loaders, "GEOJSON_PATH", str(path))
        with pytest.raises(PageStopped):
            data_loaders.load_heat_data()
        assert "cool_mean" in errors[0]

    def test_failure_is_not_cached(self, tmp_path, monkeypatch, errors):
        path = tmp_path / "data.geojson"
        monkeypatch.setattr(data_loaders, "GEOJSON_PATH", str(path))
        with pytest.raises(PageStopped):
            data_loaders.load_heat_data()

        write_geojson(path, [area("1"), area("2", degree_days_20=5.0)])
        data = data_loaders.load_heat_data()
        assert data.result.feature_ids == ("1", "2")
        assert tuple(data.result.extents["exposure"]) == (1.0, 5.0)
        assert len(errors) == 1, "the successful reload should show no error"


# ══════════════════════════════════════════════════════════════════
# Weather summaries
# ══════════════════════════════════════════════════════════════════

class TestLoadWeatherSummary:

    def test_missing_files_point_to_script(self, tmp_path, monkeypatch, errors):
        monkeypatch.setattr(data_loaders, "_PROCESSED", str(tmp_path))
        with pytest.raises(PageStopped):
            data_loaders.load_weather_summary()
        assert "02_precompute_weather.py" in errors[0]
        assert "annual_temperature.csv" in errors[0]

    def test_loads_both_tables(self, tmp_path, monkeypatch, errors):
        pd.DataFrame({"year": [2000], "temp": [7.5]}).to_csv(
            tmp_path / "annual_temperature.csv", index=False
        )
        pd.DataFrame({"period": ["1991-2005"], "month": [1], "avg_rain": [0.1]}).to_csv(
            tmp_path / "seasonal_rainfall.csv", index=False
        )
        monkeypatch.setattr(data_loaders, "_PROCESSED", str(tmp_path))
        summary = data_loaders.load_weather_summary()
        assert set(summary) == {"annual", "rainfall"}
        assert summary["annual"]["temp"].tolist() == [7.5]
        assert errors == []
