"""Pairwise intersection, deduplication and junction classification.

One run of :func:`detect_intersections` turns the reduced line items into
classified points:

1. intersect every pair of items from different source roads,
2. bucket the raw solutions by rounded coordinate, keeping the (i, j) pairs,
3. greedily dedupe the bucket coordinates (first seen wins),
4. mark a kept point as branching when the buckets around it involve at least
   ``min_branch_sources`` distinct source roads,
5. flag crosswalk and traffic-signal proximity.

Pair order is i ascending then j ascending, so for a fixed input order the
output (including dedup tie-breaks) is deterministic.
"""
import logging
from dataclasses import asdict, dataclass, field

import numpy as np

from .config import CONFIG
from .geometry import (
    bearing,
    distance_m,
    feature_coordinates,
    line_intersections,
    make_point,
    point_to_line_distance_m,
    quantize,
    within_m,
)
from .logging_utils import log_step

logger = logging.getLogger(__name__)

ENGINE = CONFIG["engine"]

# Arm length sampled along a road when counting approach directions (degrees, ~11 m)
ARM_DEG = 0.0001
MIN_ARM_M = 0.5


@dataclass
class Bucket:
    lon: float
    lat: float
    pairs: set = field(default_factory=set)


@dataclass
class ClassifiedPoint:
    lon: float
    lat: float
    crosswalk: bool = False
    signalized: bool = False
    type: str = "intersection"
    branching: bool = False
    sources: tuple = ()
    directions: int = 0

    @property
    def coords(self) -> tuple:
        return (self.lon, self.lat)

    def to_dict(self) -> dict:
        out = asdict(self)
        out["sources"] = list(self.sources)
        return out


@dataclass
class DetectionResult:
    points: list = field(default_factory=list)
    branching: list = field(default_factory=list)
    raw_count: int = 0


# Purpose: Intersect every pair of line items from different source roads and bucket the solutions.
# Inputs:
# - items (list[LineItem]): Reduced line items.
# - digits (int | None): Rounding precision of the bucket key; defaults to config.
# Outputs:
# - dict[tuple, Bucket]: Insertion-ordered map from rounded coordinate to the first raw
#   coordinate seen there plus every contributing (i, j) pair.
def collect_buckets(items, digits: int = None) -> dict:
    digits = int(digits if digits is not None else ENGINE["bucket_digits"])
    buckets = {}
    n = len(items)
    for i in range(n):
        a = items[i]
        for j in range(i + 1, n):
            b = items[j]
            if a.source_index == b.source_index:
                continue
            for lon, lat in line_intersections(a.line, b.line):
                key = quantize(lon, lat, digits)
                bucket = buckets.get(key)
                if bucket is None:
                    bucket = buckets[key] = Bucket(lon=lon, lat=lat)
                bucket.pairs.add((i, j))
    return buckets


def dedup_points(coords, tolerance_m: float = None) -> list:
    """Greedy first-seen-wins dedupe: keep a point only if no kept point is within tolerance."""
    tolerance_m = float(tolerance_m if tolerance_m is not None else ENGINE["dedup_tolerance_m"])
    kept = []
    for c in coords:
        if not any(within_m(c, k, tolerance_m) for k in kept):
            kept.append(c)
    return kept


# Purpose: Distinct source roads meeting around a point.
# Inputs:
# - point ((lon, lat)): Deduplicated point.
# - buckets (dict[tuple, Bucket]): Output of collect_buckets.
# - items (list[LineItem]): The items the bucket pairs index into.
# - tolerance_m (float | None): Radius for gathering buckets; defaults to the dedup tolerance.
# Outputs:
# - set[int]: Union of source indices over every pair in every bucket within tolerance.
def branch_sources(point, buckets, items, tolerance_m: float = None) -> set:
    tolerance_m = float(tolerance_m if tolerance_m is not None else ENGINE["dedup_tolerance_m"])
    sources = set()
    for bucket in buckets.values():
        if not within_m(point, (bucket.lon, bucket.lat), tolerance_m):
            continue
        for i, j in bucket.pairs:
            sources.add(items[i].source_index)
            sources.add(items[j].source_index)
    return sources


def _near_any(point, coords, tolerance_m: float) -> bool:
    return any(within_m(point, c, tolerance_m) for c in coords)


def count_directions(point, items, line_tolerance_m: float = None, bin_deg: float = None) -> int:
    """Number of distinct bearing bins of the road arms leaving `point`."""
    line_tolerance_m = float(line_tolerance_m if line_tolerance_m is not None else ENGINE["direction_line_tolerance_m"])
    bin_deg = float(bin_deg if bin_deg is not None else ENGINE["direction_bin_deg"])
    pt = make_point(*point)
    cos_lat = max(float(np.cos(np.radians(pt.y))), 0.01)
    planar_cutoff = 1.5 * line_tolerance_m / (111320.0 * cos_lat)
    bins = set()
    for it in items:
        line = it.line
        if line.distance(pt) > planar_cutoff:
            continue
        if point_to_line_distance_m(pt, line) > line_tolerance_m:
            continue
        d = line.project(pt)
        for arm_d in (d - ARM_DEG, d + ARM_DEG):
            arm = line.interpolate(min(max(arm_d, 0.0), line.length))
            if distance_m(pt, arm) < MIN_ARM_M:
                continue
            bins.add(int(bearing(pt, arm) // bin_deg))
    return len(bins)


# Purpose: Full detection run over one reduced working set.
# Inputs:
# - items (list[LineItem]): Output of reduce_lines.
# - crosswalks (list[dict]): Crosswalk features from the selector.
# - signals (list[dict]): Traffic-signal features from the selector.
# - dedup_tolerance_m, proximity_tolerance_m, min_branch_sources: Overrides for config values.
# Outputs:
# - DetectionResult: All classified points and the branching subset, both in dedup order.
def detect_intersections(
    items,
    crosswalks=(),
    signals=(),
    dedup_tolerance_m: float = None,
    proximity_tolerance_m: float = None,
    min_branch_sources: int = None,
) -> DetectionResult:
    dedup_tolerance_m = float(dedup_tolerance_m if dedup_tolerance_m is not None else ENGINE["dedup_tolerance_m"])
    proximity_tolerance_m = float(proximity_tolerance_m if proximity_tolerance_m is not None else ENGINE["proximity_tolerance_m"])
    min_branch_sources = int(min_branch_sources if min_branch_sources is not None else ENGINE["min_branch_sources"])

    with log_step(f"Pairwise intersections ({len(items)} lines)"):
        buckets = collect_buckets(items)
    raw = [(b.lon, b.lat) for b in buckets.values()]

    with log_step(f"Dedupe {len(raw)} raw points"):
        kept = dedup_points(raw, dedup_tolerance_m)

    crosswalk_coords = [c for f in crosswalks for c in feature_coordinates(f.get("geometry"))]
    signal_coords = [c for f in signals for c in feature_coordinates(f.get("geometry"))]

    points = []
    with log_step(f"Classify {len(kept)} points"):
        for lon, lat in kept:
            sources = branch_sources((lon, lat), buckets, items, dedup_tolerance_m)
            crosswalk = _near_any((lon, lat), crosswalk_coords, proximity_tolerance_m)
            signalized = _near_any((lon, lat), signal_coords, proximity_tolerance_m)
            points.append(
                ClassifiedPoint(
                    lon=lon,
                    lat=lat,
                    crosswalk=crosswalk,
                    signalized=signalized,
                    type="crosswalk" if crosswalk else "intersection",
                    branching=len(sources) >= min_branch_sources,
                    sources=tuple(sorted(sources)),
                    directions=count_directions((lon, lat), items),
                )
            )

    branching = [p for p in points if p.branching]
    logger.debug(f"raw={len(raw)} deduped={len(points)} branching={len(branching)}")
    return DetectionResult(points=points, branching=branching, raw_count=len(raw))
