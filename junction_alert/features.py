import logging
from dataclasses import dataclass, field

from .config import CONFIG
from .geometry import destination

logger = logging.getLogger(__name__)

ROAD_CLASSES = frozenset(CONFIG["selector"]["road_classes"])
LINE_TYPES = ("LineString", "MultiLineString")


@dataclass
class FeatureSelection:
    """Road, crosswalk and signal features picked out of one region query.

    A road's position in ``roads`` is its source index for the run.
    """
    roads: list = field(default_factory=list)
    crosswalks: list = field(default_factory=list)
    signals: list = field(default_factory=list)


def _props(feature) -> dict:
    return feature.get("properties") or {}


def is_crosswalk(feature) -> bool:
    p = _props(feature)
    return p.get("crossing") == "marked" or p.get("highway") == "crossing"


def is_signal(feature) -> bool:
    p = _props(feature)
    return p.get("highway") == "traffic_signals" or p.get("traffic_signals") == "yes"


def is_road(feature, road_classes=None) -> bool:
    road_classes = road_classes or ROAD_CLASSES
    geom = feature.get("geometry") or {}
    return _props(feature).get("class") in road_classes and geom.get("type") in LINE_TYPES


# Purpose: Split a raw feature collection into the three disjoint interest sets.
# Inputs:
# - features (Iterable[dict]): GeoJSON-like features (or a FeatureCollection dict).
# - road_classes (Iterable[str] | None): Allowed road 'class' values; defaults to config.
# Outputs:
# - FeatureSelection: Input order preserved. Crosswalk tags win over signal tags,
#   and both win over the road class, so a feature lands in at most one list.
def select_features(features, road_classes=None) -> FeatureSelection:
    if isinstance(features, dict):
        features = features.get("features", [])
    road_classes = frozenset(road_classes) if road_classes else ROAD_CLASSES
    selection = FeatureSelection()
    for f in features or []:
        if not f or not f.get("geometry"):
            continue
        if is_crosswalk(f):
            selection.crosswalks.append(f)
        elif is_signal(f):
            selection.signals.append(f)
        elif is_road(f, road_classes):
            selection.roads.append(f)
    logger.debug(
        f"Selected roads={len(selection.roads)} crosswalks={len(selection.crosswalks)} "
        f"signals={len(selection.signals)}"
    )
    return selection


# Purpose: Build the query rectangle around the user.
# Inputs:
# - lon (float), lat (float): User position.
# - half_size_m (float | None): Distance in meters from the user to each edge.
# Outputs:
# - tuple[float, float, float, float]: (west, south, east, north) in degrees.
def region_around(lon: float, lat: float, half_size_m: float = None) -> tuple:
    half = float(half_size_m if half_size_m is not None else CONFIG["query"]["half_size_m"])
    north = destination(lon, lat, half, 0.0)[1]
    east = destination(lon, lat, half, 90.0)[0]
    south = destination(lon, lat, half, 180.0)[1]
    west = destination(lon, lat, half, 270.0)[0]
    return (west, south, east, north)
