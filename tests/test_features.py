import pytest

from junction_alert.features import is_crosswalk, is_signal, region_around, select_features
from junction_alert.geometry import distance_m

from tests.helpers import LAT0, LON0, multi_road, node, road


def test_select_splits_roads_crosswalks_and_signals():
    features = [
        road([(0, 0), (1, 1)], cls="primary"),
        road([(0, 1), (1, 0)], cls="service"),
        multi_road([[(0, 0), (1, 0)], [(1, 0), (2, 0)]], cls="minor"),
        node(0.5, 0.5, crossing="marked"),
        node(0.5, 0.6, highway="crossing"),
        node(0.5, 0.7, highway="traffic_signals"),
        node(0.5, 0.8, traffic_signals="yes"),
        node(0.5, 0.9, highway="bus_stop"),
    ]
    sel = select_features(features)
    assert [f["properties"]["class"] for f in sel.roads] == ["primary", "minor"]
    assert len(sel.crosswalks) == 2
    assert len(sel.signals) == 2


def test_select_accepts_feature_collection_and_empty_input():
    fc = {"type": "FeatureCollection", "features": [road([(0, 0), (1, 1)])]}
    assert len(select_features(fc).roads) == 1
    empty = select_features([])
    assert empty.roads == [] and empty.crosswalks == [] and empty.signals == []


def test_road_class_on_point_geometry_is_not_a_road():
    feature = node(0, 0, **{"class": "primary"})
    assert select_features([feature]).roads == []


def test_sets_are_disjoint():
    crossing_way = road([(0, 0), (0, 1)], cls="path")
    crossing_way["properties"]["crossing"] = "marked"
    signal_crossing = node(0, 0, highway="traffic_signals", crossing="marked")
    sel = select_features([crossing_way, signal_crossing])
    assert sel.roads == []
    assert len(sel.crosswalks) == 2
    assert sel.signals == []
    assert is_crosswalk(signal_crossing) and is_signal(signal_crossing)


def test_features_without_geometry_are_skipped():
    assert select_features([{"properties": {"class": "primary"}}, None]).roads == []


def test_region_around_is_centered_on_user():
    west, south, east, north = region_around(LON0, LAT0, 250.0)
    assert west < LON0 < east and south < LAT0 < north
    assert distance_m((LON0, LAT0), (LON0, north)) == pytest.approx(250.0, abs=0.01)
    assert distance_m((LON0, LAT0), (east, LAT0)) == pytest.approx(250.0, abs=0.5)
