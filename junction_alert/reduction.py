import logging
from dataclasses import dataclass

from shapely.errors import GEOSException
from shapely.geometry import LineString

from .config import CONFIG
from .geometry import line_length_km, make_line, simplify_line
from .logging_utils import log_step

logger = logging.getLogger(__name__)

REDUCTION = CONFIG["reduction"]


@dataclass
class LineItem:
    """One atomic line plus the index of the road feature it came from.

    Items sharing a source_index are pieces of the same physical road.
    """
    line: LineString
    source_index: int


def _to_lines(geometry) -> list:
    geometry = geometry or {}
    gtype = geometry.get("type")
    coords = geometry.get("coordinates") or []
    if gtype == "LineString":
        parts = [coords]
    elif gtype == "MultiLineString":
        parts = coords
    else:
        parts = []
    lines = []
    for part in parts:
        if not part or len(part) < 2:
            continue
        try:
            lines.append(make_line(part))
        except (GEOSException, ValueError, TypeError, IndexError) as e:
            logger.debug(f"Unreadable road part skipped: {e}")
    return lines


# Purpose: Explode road features into one LineItem per LineString component.
# Inputs:
# - roads (list[dict]): Road features in selector order.
# Outputs:
# - list[LineItem]: Multi-line parts share their parent's source_index.
def explode_roads(roads) -> list:
    items = []
    for idx, feature in enumerate(roads):
        for line in _to_lines(feature.get("geometry")):
            items.append(LineItem(line=line, source_index=idx))
    return items


# Purpose: Bound the working set entering the quadratic intersection stage.
# Algorithm:
# - More than max_features road features: overload, return None (skip this cycle).
# - More than max_lines items: keep the longest max_lines (geodesic km, stable on ties)
#   and simplify each in low-fidelity mode.
# Inputs:
# - roads (list[dict]): Road features from the selector.
# - max_features (int), max_lines (int), tolerance (float): Limits; default to config.
# Outputs:
# - list[LineItem] | None: Items to intersect, or None when the cycle must be skipped.
def reduce_lines(roads, max_features: int = None, max_lines: int = None, tolerance: float = None):
    max_features = int(max_features if max_features is not None else REDUCTION["max_features"])
    max_lines = int(max_lines if max_lines is not None else REDUCTION["max_lines"])
    tolerance = float(tolerance if tolerance is not None else REDUCTION["simplify_tolerance"])

    if len(roads) > max_features:
        logger.warning(f"Too many road features ({len(roads)} > {max_features}); skipping this cycle.")
        return None

    items = explode_roads(roads)
    if len(items) <= max_lines:
        return items

    with log_step(f"Reduce {len(items)} lines to {max_lines}"):
        ranked = sorted(range(len(items)), key=lambda i: line_length_km(items[i].line), reverse=True)
        # back to feature order so downstream tie-breaks follow the input
        kept = [items[i] for i in sorted(ranked[:max_lines])]
        reduced = [LineItem(line=simplify_line(it.line, tolerance), source_index=it.source_index) for it in kept]
    logger.info(f"Line reduction: {len(items)} → {len(reduced)} items (tolerance={tolerance})")
    return reduced
