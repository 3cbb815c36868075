import logging

logger = logging.getLogger(__name__)

CACHE_KEY = "cached_intersections"


def _as_point(p) -> dict:
    if isinstance(p, dict):
        return {"type": "Point", "coordinates": [float(p["coordinates"][0]), float(p["coordinates"][1])]}
    if hasattr(p, "lon"):
        return {"type": "Point", "coordinates": [float(p.lon), float(p.lat)]}
    return {"type": "Point", "coordinates": [float(p[0]), float(p[1])]}


def save_intersections(store, points) -> bool:
    """Replace the cached point list. Accepts GeoJSON Points, ClassifiedPoints or (lon, lat)."""
    try:
        store.set_item(CACHE_KEY, [_as_point(p) for p in points])
        return True
    except (OSError, ValueError, TypeError, KeyError) as e:
        logger.error(f"Failed to save intersections: {e}")
        return False


def get_cached_intersections(store) -> list:
    try:
        raw = store.get_item(CACHE_KEY)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to load intersections: {e}")
        return []
    if not raw:
        return []
    if not isinstance(raw, list):
        logger.error(f"Cached intersections are not a list: {type(raw).__name__}")
        return []
    out = []
    for item in raw:
        coords = item.get("coordinates") if isinstance(item, dict) else None
        try:
            out.append({"type": "Point", "coordinates": [float(coords[0]), float(coords[1])]})
        except (ValueError, TypeError, IndexError, KeyError) as e:
            logger.debug(f"Skipping malformed cached point {item!r}: {e}")
    return out
