import logging
import time
from dataclasses import dataclass, field

from .alerts import LoggingAlertSink
from .cache import save_intersections
from .config import CONFIG
from .engine import detect_intersections
from .features import region_around, select_features
from .logging_utils import log_step
from .notifier import check_proximity_and_notify
from .reduction import reduce_lines
from .scheduler import RunScheduler
from .settings import get_settings

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    region: tuple
    roads: int = 0
    lines: int = 0
    points: list = field(default_factory=list)
    branching: list = field(default_factory=list)
    alerted: bool = False


class IntersectionPipeline:
    """Foreground detection loop driven by location updates.

    `provider` is anything with ``query_features(region) -> list[dict]`` where
    region is (west, south, east, north). Cache, settings and alert state all
    go through `store`.
    """

    def __init__(self, provider, store, alerts=None, scheduler=None, half_size_m: float = None):
        self.provider = provider
        self.store = store
        self.alerts = alerts or LoggingAlertSink()
        self.scheduler = scheduler or RunScheduler()
        self.half_size_m = float(half_size_m if half_size_m is not None else CONFIG["query"]["half_size_m"])
        self.last_notification_time = 0.0
        self.last_result = None

    def on_map_ready(self):
        self.scheduler.mark_ready()

    # Purpose: Run one detection cycle for a location update, if the scheduler allows it.
    # Inputs:
    # - lon (float), lat (float): User position.
    # - now (float | None): Epoch seconds used for the alert cooldown.
    # Outputs:
    # - PipelineResult | None: None when the run was gated, overloaded or failed;
    #   the cache is only written by completed runs.
    def on_location(self, lon: float, lat: float, now: float = None):
        if not self.scheduler.try_start():
            return None
        region = region_around(lon, lat, self.half_size_m)

        try:
            with log_step("Query features"):
                features = self.provider.query_features(region)
        except Exception as e:
            logger.warning(f"Feature query failed; skipping cycle: {e}")
            return None

        selection = select_features(features)
        items = reduce_lines(selection.roads)
        if items is None:
            return None

        try:
            detection = detect_intersections(items, selection.crosswalks, selection.signals)
        except Exception as e:
            logger.error(f"Intersection detection failed; skipping cycle: {e}")
            return None

        result = PipelineResult(
            region=region,
            roads=len(selection.roads),
            lines=len(items),
            points=detection.points,
            branching=detection.branching,
        )
        save_intersections(self.store, detection.branching)

        settings = get_settings(self.store)
        now = time.time() if now is None else now
        try:
            new_time = check_proximity_and_notify(
                (lon, lat), detection.points, self.last_notification_time, settings, self.alerts, now=now
            )
        except Exception as e:
            logger.warning(f"Foreground alert skipped: {e}")
            new_time = self.last_notification_time
        result.alerted = new_time != self.last_notification_time
        self.last_notification_time = new_time

        logger.info(f"roads={result.roads} detected={len(result.points)} branching={len(result.branching)}")
        self.last_result = result
        return result
