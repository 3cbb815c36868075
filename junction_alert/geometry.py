"""Thin wrappers over shapely/geopy primitives.

Coordinates are always (lon, lat) in WGS84. Shapely works on them as planar
degrees (intersection, simplification, projection onto a line); every
distance is geodesic on the WGS84 ellipsoid via geopy.
"""
import logging

import numpy as np
from geopy.distance import geodesic
from shapely.errors import GEOSException
from shapely.geometry import LineString, Point

logger = logging.getLogger(__name__)


def make_point(lon: float, lat: float) -> Point:
    return Point(float(lon), float(lat))


def make_line(coords) -> LineString:
    return LineString([(float(c[0]), float(c[1])) for c in coords])


def _lonlat(p):
    if isinstance(p, Point):
        return (p.x, p.y)
    return (float(p[0]), float(p[1]))


def distance_m(a, b) -> float:
    """Geodesic distance in meters between two (lon, lat) points."""
    lon1, lat1 = _lonlat(a)
    lon2, lat2 = _lonlat(b)
    return geodesic((lat1, lon1), (lat2, lon2)).meters


def line_length_km(line: LineString) -> float:
    coords = list(line.coords)
    total = 0.0
    for p, q in zip(coords[:-1], coords[1:]):
        total += geodesic((p[1], p[0]), (q[1], q[0])).kilometers
    return total


# Purpose: Initial bearing from one coordinate to another on the sphere.
# Inputs:
# - a, b ((lon, lat) or Point): Start and end coordinates.
# Outputs:
# - float: Bearing in degrees normalized to [0, 360).
def bearing(a, b) -> float:
    lon1, lat1 = np.radians(_lonlat(a))
    lon2, lat2 = np.radians(_lonlat(b))
    dlon = lon2 - lon1
    y = np.sin(dlon) * np.cos(lat2)
    x = np.cos(lat1) * np.sin(lat2) - np.sin(lat1) * np.cos(lat2) * np.cos(dlon)
    return float(np.degrees(np.arctan2(y, x)) % 360.0)


def destination(lon: float, lat: float, distance: float, bearing_deg: float):
    """Coordinate reached after travelling `distance` meters along `bearing_deg`."""
    dest = geodesic(meters=distance).destination((lat, lon), bearing=bearing_deg)
    return (dest.longitude, dest.latitude)


# Purpose: Douglas-Peucker simplification of a line in degree units.
# Inputs:
# - line (LineString): Line to simplify.
# - tolerance (float): Tolerance in degrees.
# - high_quality (bool): Preserve topology (slower). False is the low-fidelity mode.
# Outputs:
# - LineString: Simplified line; the input itself if simplification fails.
def simplify_line(line: LineString, tolerance: float, high_quality: bool = False) -> LineString:
    try:
        simplified = line.simplify(tolerance, preserve_topology=high_quality)
    except GEOSException as e:
        logger.debug(f"simplify failed; keeping original line: {e}")
        return line
    if simplified.is_empty or not isinstance(simplified, LineString):
        return line
    return simplified


def _intersection_coords(geom) -> list:
    if geom is None or geom.is_empty:
        return []
    if isinstance(geom, Point):
        return [(float(geom.x), float(geom.y))]
    if isinstance(geom, LineString):
        # Collinear overlap: the shared piece contributes its endpoints.
        coords = list(geom.coords)
        ends = [coords[0], coords[-1]]
        if ends[0] == ends[1]:
            ends = ends[:1]
        return [(float(c[0]), float(c[1])) for c in ends]
    out = []
    for part in getattr(geom, "geoms", []):
        out.extend(_intersection_coords(part))
    return out


# Purpose: All intersection coordinates between two lines.
# Inputs:
# - a (LineString), b (LineString): Lines in (lon, lat) degrees.
# Outputs:
# - list[tuple[float, float]]: Intersection coordinates. Empty when the lines do not
#   meet or the geometry engine fails on the pair.
def line_intersections(a: LineString, b: LineString) -> list:
    if a is None or b is None or a.is_empty or b.is_empty:
        return []
    try:
        inter = a.intersection(b)
    except GEOSException as e:
        logger.debug(f"line intersection failed; skipping pair: {e}")
        return []
    return _intersection_coords(inter)


def nearest_point_on_line(line: LineString, pt) -> Point:
    pt = make_point(*_lonlat(pt))
    return line.interpolate(line.project(pt))


def point_to_line_distance_m(pt, line: LineString) -> float:
    return distance_m(pt, nearest_point_on_line(line, pt))


# Purpose: Enumerate every vertex coordinate of a GeoJSON geometry mapping.
# Inputs:
# - geometry (dict): GeoJSON geometry ({'type': ..., 'coordinates': ...}).
# Outputs:
# - list[tuple[float, float]]: (lon, lat) vertices; empty for missing/unknown geometry.
def feature_coordinates(geometry) -> list:
    if not geometry:
        return []
    gtype = geometry.get("type")
    coords = geometry.get("coordinates")
    if gtype == "GeometryCollection":
        out = []
        for g in geometry.get("geometries", []):
            out.extend(feature_coordinates(g))
        return out
    if coords is None:
        return []
    depth = {
        "Point": 0, "MultiPoint": 1, "LineString": 1,
        "MultiLineString": 2, "Polygon": 2, "MultiPolygon": 3,
    }.get(gtype)
    if depth is None:
        return []
    items = [coords]
    for _ in range(depth):
        items = [c for group in items for c in group]
    return [(float(c[0]), float(c[1])) for c in items if len(c) >= 2]


def quantize(lon: float, lat: float, digits: int) -> tuple:
    return (round(float(lon), digits), round(float(lat), digits))


def coordinate_key(lon: float, lat: float, digits: int) -> str:
    """String key for a coordinate rounded to `digits` decimals."""
    return f"{float(lon):.{digits}f},{float(lat):.{digits}f}"


# Purpose: Distance test with a cheap degree-space rejection before the geodesic solve.
# Inputs:
# - a, b ((lon, lat) or Point): Coordinates.
# - tolerance (float): Distance in meters.
# Outputs:
# - bool: True when the geodesic distance is strictly less than `tolerance`, so a
#   point exactly on the boundary is outside.
def within_m(a, b, tolerance: float) -> bool:
    lon1, lat1 = _lonlat(a)
    lon2, lat2 = _lonlat(b)
    if abs(lat1 - lat2) * 110000.0 > tolerance:
        return False
    dlon = abs(lon1 - lon2)
    dlon = min(dlon, 360.0 - dlon)
    cos_lat = np.cos(np.radians(max(abs(lat1), abs(lat2))))
    if dlon * 110000.0 * cos_lat > tolerance:
        return False
    return distance_m(a, b) < tolerance
