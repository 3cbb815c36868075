import logging
import time
from enum import Enum

from .config import CONFIG

logger = logging.getLogger(__name__)


class SchedulerState(Enum):
    IDLE = "idle"
    COOLING = "cooling"


class RunScheduler:
    """Gate for the detection pipeline.

    A run may start only once the map surface is ready and at least
    ``min_interval_s`` has passed since the previous run started. Requests
    that arrive too early are dropped, never queued.
    """

    def __init__(self, min_interval_s: float = None, clock=time.monotonic):
        self.min_interval_s = float(min_interval_s if min_interval_s is not None else CONFIG["scheduler"]["min_interval_s"])
        self.clock = clock
        self.ready = False
        self.last_start = None

    def mark_ready(self):
        self.ready = True

    @property
    def state(self) -> SchedulerState:
        if self.last_start is None:
            return SchedulerState.IDLE
        if self.clock() - self.last_start > self.min_interval_s:
            return SchedulerState.IDLE
        return SchedulerState.COOLING

    def try_start(self) -> bool:
        if not self.ready:
            logger.debug("Run request dropped: map not ready")
            return False
        if self.state is SchedulerState.COOLING:
            logger.debug("Run request dropped: cooling down")
            return False
        self.last_start = self.clock()
        return True
