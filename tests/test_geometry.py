import pytest

from junction_alert.geometry import (
    bearing,
    coordinate_key,
    destination,
    distance_m,
    feature_coordinates,
    line_intersections,
    line_length_km,
    make_line,
    make_point,
    nearest_point_on_line,
    point_to_line_distance_m,
    quantize,
    simplify_line,
    within_m,
)

from tests.helpers import LAT0, LON0


def test_distance_one_degree_latitude_at_equator():
    assert distance_m((0.0, 0.0), (0.0, 1.0)) == pytest.approx(110574, rel=1e-3)


def test_distance_accepts_points_and_tuples():
    a = make_point(LON0, LAT0)
    b = destination(LON0, LAT0, 15.0, 45.0)
    assert distance_m(a, b) == pytest.approx(15.0, abs=1e-3)


def test_line_length_km():
    end = destination(LON0, LAT0, 1000.0, 0.0)
    line = make_line([(LON0, LAT0), end])
    assert line_length_km(line) == pytest.approx(1.0, abs=1e-4)


@pytest.mark.parametrize("bearing_deg", [0.0, 45.0, 90.0, 180.0, 270.0, 315.0])
def test_bearing_matches_destination(bearing_deg):
    target = destination(LON0, LAT0, 50.0, bearing_deg)
    result = bearing((LON0, LAT0), target)
    assert 0.0 <= result < 360.0
    diff = abs((result - bearing_deg + 180.0) % 360.0 - 180.0)
    assert diff < 0.5


def test_crossing_lines_intersect_once():
    a = make_line([(0, 0), (2, 2)])
    b = make_line([(0, 2), (2, 0)])
    assert line_intersections(a, b) == [(1.0, 1.0)]


def test_parallel_lines_do_not_intersect():
    a = make_line([(0, 0), (2, 0)])
    b = make_line([(0, 1), (2, 1)])
    assert line_intersections(a, b) == []


def test_collinear_overlap_yields_endpoints():
    a = make_line([(0, 0), (2, 0)])
    b = make_line([(1, 0), (3, 0)])
    assert sorted(line_intersections(a, b)) == [(1.0, 0.0), (2.0, 0.0)]


def test_zigzag_crosses_straight_line_several_times():
    straight = make_line([(0, 0), (4, 0)])
    zigzag = make_line([(0, 1), (1, -1), (2, 1), (3, -1)])
    assert len(line_intersections(straight, zigzag)) == 3


def test_simplify_low_fidelity_drops_small_wiggles():
    line = make_line([(0, 0), (1, 0.00001), (2, -0.00001), (3, 0)])
    simplified = simplify_line(line, 0.0005)
    assert list(simplified.coords) == [(0.0, 0.0), (3.0, 0.0)]


def test_nearest_point_and_point_to_line_distance():
    line = make_line([(LON0 - 0.001, LAT0), (LON0 + 0.001, LAT0)])
    north = destination(LON0, LAT0, 20.0, 0.0)
    nearest = nearest_point_on_line(line, north)
    assert nearest.x == pytest.approx(LON0)
    assert point_to_line_distance_m(north, line) == pytest.approx(20.0, abs=0.05)


def test_feature_coordinates_handles_geometry_types():
    assert feature_coordinates({"type": "Point", "coordinates": [1, 2]}) == [(1.0, 2.0)]
    assert feature_coordinates({"type": "LineString", "coordinates": [[0, 0], [1, 1]]}) == [(0.0, 0.0), (1.0, 1.0)]
    multi = {"type": "MultiLineString", "coordinates": [[[0, 0], [1, 1]], [[2, 2], [3, 3]]]}
    assert len(feature_coordinates(multi)) == 4
    poly = {"type": "Polygon", "coordinates": [[[0, 0], [1, 0], [1, 1], [0, 0]]]}
    assert len(feature_coordinates(poly)) == 4
    assert feature_coordinates(None) == []
    assert feature_coordinates({"type": "Unknown", "coordinates": []}) == []


def test_quantize_and_coordinate_key():
    assert quantize(-122.4194123, 37.7749876, 5) == (-122.41941, 37.77499)
    assert coordinate_key(-122.4194123, 37.7749876, 5) == "-122.41941,37.77499"


def test_within_m():
    near = destination(LON0, LAT0, 4.0, 120.0)
    far = destination(LON0, LAT0, 6.0, 120.0)
    assert within_m((LON0, LAT0), near, 5.0)
    assert not within_m((LON0, LAT0), far, 5.0)
    assert not within_m((LON0, LAT0), (LON0 + 1.0, LAT0), 5.0)


def test_within_m_is_strict_at_boundary():
    other = destination(LON0, LAT0, 5.0, 45.0)
    gap = distance_m((LON0, LAT0), other)
    assert not within_m((LON0, LAT0), other, gap)
    assert within_m((LON0, LAT0), other, gap + 1e-6)
    assert not within_m((LON0, LAT0), (LON0, LAT0), 0.0)
