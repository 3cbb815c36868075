import json

import yaml

from junction_alert.__main__ import main
from junction_alert.cache import get_cached_intersections
from junction_alert.geometry import destination
from junction_alert.settings import get_settings
from junction_alert.storage import JsonFileStore

from tests.helpers import LAT0, LON0, star_roads


def _features_file(tmp_path):
    path = tmp_path / "roads.geojson"
    path.write_text(json.dumps({"type": "FeatureCollection", "features": star_roads()}))
    return path


def test_settings_update(tmp_path, capsys):
    store_path = tmp_path / "store.json"
    assert main(["--store", str(store_path), "settings", "--set", "notify_distance=35", "--set", "accessibility_mode=true"]) == 0
    printed = yaml.safe_load(capsys.readouterr().out)
    assert printed["notify_distance"] == 35.0
    settings = get_settings(JsonFileStore(store_path))
    assert settings.notify_distance == 35.0
    assert settings.accessibility_mode is True


def test_settings_rejects_malformed_pair(tmp_path):
    assert main(["--store", str(tmp_path / "store.json"), "settings", "--set", "notify_distance"]) == 2


def test_scan_then_check(tmp_path, capsys):
    store_path = tmp_path / "store.json"
    map_path = tmp_path / "map.html"
    lon, lat = destination(LON0, LAT0, 10.0, 45.0)
    code = main([
        "--store", str(store_path), "scan",
        "--features", str(_features_file(tmp_path)),
        "--lat", str(lat), "--lon", str(lon),
        "--map", str(map_path),
    ])
    assert code == 0
    summary = yaml.safe_load(capsys.readouterr().out)
    assert summary["status"] == "ok"
    assert summary["roads"] == 3
    assert len(summary["points"]) == 1
    assert summary["points"][0]["branching"] is True
    assert map_path.exists()
    assert len(get_cached_intersections(JsonFileStore(store_path))) == 1

    assert main(["--store", str(store_path), "check", "--lat", str(LAT0), "--lon", str(LON0)]) == 0
    assert yaml.safe_load(capsys.readouterr().out) == {"alerted": True}
    assert main(["--store", str(store_path), "check", "--lat", str(LAT0), "--lon", str(LON0)]) == 0
    assert yaml.safe_load(capsys.readouterr().out) == {"alerted": False}
