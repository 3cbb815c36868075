import logging
import time
from contextlib import contextmanager

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"

logger = logging.getLogger("junction_alert")


def setup_logging(level="INFO"):
    logging.basicConfig(level=getattr(logging, str(level).upper(), logging.INFO), format=LOG_FORMAT)


@contextmanager
# Purpose: Context manager to log the start and end of a processing step with elapsed time.
# Inputs:
# - label (str): Human readable step label to include in log messages.
# Outputs:
# - None. Produces DEBUG log lines when entering and leaving the context.
def log_step(label: str):
    """Log start/end and wall time of a processing step."""
    logger.debug(f"[START] {label}")
    t0 = time.perf_counter()
    try:
        yield
    finally:
        dt = time.perf_counter() - t0
        logger.debug(f"[END]   {label} in {dt:.2f}s")
