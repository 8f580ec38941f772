"""Tests for GeoJSON layer loading and attribute tables."""

import json

import pytest

from saferoute.utils import attribute_table, load_layers, rain_classes


def feature(props):
    return {"type": "Feature", "properties": props, "geometry": None}


@pytest.fixture
def data_dir(tmp_path, hazard_geojson):
    (tmp_path / "flood.json").write_text(json.dumps(hazard_geojson))
    (tmp_path / "rain.json").write_text(json.dumps({
        "type": "FeatureCollection",
        "features": [feature({"Rain_Max": v, "Rain_Min": 0}) for v in (400, 500, 600, 700, 800)],
    }))
    (tmp_path / "soil_new.json").write_text("not json")
    return tmp_path


class TestLayers:
    def test_optional_layers_are_skipped(self, data_dir):
        layers = load_layers(data_dir)

        assert set(layers) == {"flood", "rain"}

    def test_missing_flood_layer_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_layers(tmp_path)

    def test_attribute_table(self, data_dir):
        rain = load_layers(data_dir)["rain"]
        table = attribute_table(rain, ("Rain_Max", "Rain_Min"), limit=3)

        assert table["columns"] == ["Rain_Max", "Rain_Min"]
        assert table["rows"] == [[400, 0], [500, 0], [600, 0]]
        assert table["total"] == 5
        assert table["truncated"] is True

    def test_rain_classes(self, data_dir):
        rain = load_layers(data_dir)["rain"]
        assert rain_classes(rain) == [1, 2, 3, 4, 5]

    def test_rain_classes_flat_and_invalid(self):
        geojson = {"features": [feature({"Rain_Max": 5}), feature({"Rain_Max": "x"}), feature({})]}
        assert rain_classes(geojson) == [3, 3, 3]
