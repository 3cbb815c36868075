import json
import logging
from pathlib import Path

import geopandas as gpd
import osmnx as ox
from shapely.geometry import box, mapping, shape

logger = logging.getLogger(__name__)

OSM_TAGS = {
    "highway": True,
    "crossing": ["marked", "uncontrolled", "traffic_signals", "zebra"],
}

# OSM highway value → vector-tile road class
HIGHWAY_CLASS = {
    "motorway": "motorway", "motorway_link": "motorway",
    "trunk": "trunk", "trunk_link": "trunk",
    "primary": "primary", "primary_link": "primary",
    "secondary": "secondary", "secondary_link": "secondary",
    "tertiary": "tertiary", "tertiary_link": "tertiary",
    "residential": "residential", "living_street": "street",
    "unclassified": "minor", "road": "minor",
    "pedestrian": "pedestrian",
    "footway": "path", "path": "path", "cycleway": "path", "steps": "path", "bridleway": "path",
    "service": "service", "track": "track",
}

PASSTHROUGH_TAGS = ("highway", "crossing", "traffic_signals", "name")


def _tag(row, name):
    value = row.get(name) if hasattr(row, "get") else None
    return value if isinstance(value, str) and value != "" else None


# Purpose: Convert an OSM feature GeoDataFrame into tile-style GeoJSON features.
# Inputs:
# - gdf (GeoDataFrame): Output of osmnx.features_from_bbox (WGS84).
# Outputs:
# - list[dict]: Features with 'geometry' and 'properties' ('class' derived from 'highway').
def to_tile_features(gdf: gpd.GeoDataFrame) -> list:
    if gdf is None or gdf.empty:
        return []
    features = []
    for _, row in gdf.iterrows():
        geom = row.geometry
        if geom is None or geom.is_empty:
            continue
        props = {k: _tag(row, k) for k in PASSTHROUGH_TAGS if _tag(row, k) is not None}
        if _tag(row, "crossing") == "traffic_signals":
            props["traffic_signals"] = "yes"
        road_class = HIGHWAY_CLASS.get(_tag(row, "highway") or "")
        if road_class:
            props["class"] = road_class
        features.append({"type": "Feature", "geometry": mapping(geom), "properties": props})
    return features


class OsmFeatureProvider:
    """Region queries against OpenStreetMap through osmnx (Overpass)."""

    def __init__(self, tags: dict = None):
        self.tags = tags or OSM_TAGS

    def query_features(self, region) -> list:
        west, south, east, north = region
        assert east > west and north > south, "Region must satisfy east>west and north>south"
        try:
            gdf = ox.features_from_bbox(bbox=(west, south, east, north), tags=self.tags)
        except ox._errors.InsufficientResponseError:
            logger.info("No OSM features in region.")
            return []
        if gdf.crs is None:
            gdf.set_crs("EPSG:4326", inplace=True)
        clipped = gpd.clip(gdf.to_crs("EPSG:4326"), box(west, south, east, north)).sort_index()
        features = to_tile_features(clipped)
        logger.info(f"Fetched {len(gdf)} OSM features, {len(features)} after clipping.")
        return features


class GeoJsonFeatureProvider:
    """Region queries over a local GeoJSON FeatureCollection (offline runs, fixtures)."""

    def __init__(self, path):
        self.path = Path(path)
        if not self.path.exists():
            logger.warning(f"File {self.path} does not exist. Serving no features.")
            self.features = []
        else:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            self.features = data.get("features", []) if isinstance(data, dict) else list(data)
            logger.info(f"Loaded {self.path} with {len(self.features)} features.")

    def query_features(self, region) -> list:
        clip_box = box(*region)
        out = []
        for f in self.features:
            try:
                if shape(f["geometry"]).intersects(clip_box):
                    out.append(f)
            except (KeyError, ValueError, TypeError, AttributeError):
                continue
        return out
