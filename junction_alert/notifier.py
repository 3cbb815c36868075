"""Proximity alerts for classified intersection points.

Two independent paths share nothing in memory:

* the foreground check runs after every pipeline run against the freshly
  classified points and only enforces a global cooldown;
* the background monitor runs on bare location updates against the cached
  points and suppresses repeats through a persisted notified-set.
"""
import logging
import time
from dataclasses import dataclass, field

from .alerts import LoggingAlertSink
from .cache import get_cached_intersections
from .config import CONFIG
from .geometry import coordinate_key, distance_m
from .settings import get_settings

logger = logging.getLogger(__name__)

NOTIFIER = CONFIG["notifier"]
NOTIFIED_KEY = "notified_intersections"

PATTERN_SIGNALIZED_CROSSWALK = [0, 200, 100, 200]
PATTERN_CROSSWALK = [0, 400]
PATTERN_INTERSECTION = [0, 100]
STRENGTH_PATTERNS = {1: [0, 100], 2: [0, 200], 3: [0, 300]}

BACKGROUND_TITLE = "Approaching Intersection"
BACKGROUND_BODY = "Watch for cross traffic."
BACKGROUND_SPEECH = "Approaching an intersection. Please be alert."


def _get(point, name, default=None):
    if isinstance(point, dict):
        return point.get(name, default)
    return getattr(point, name, default)


def point_coords(point) -> tuple:
    """(lon, lat) of a ClassifiedPoint, a {'lon','lat'} dict or a GeoJSON Point."""
    if isinstance(point, dict) and "coordinates" in point:
        return (float(point["coordinates"][0]), float(point["coordinates"][1]))
    return (float(_get(point, "lon")), float(_get(point, "lat")))


def points_in_range(user, points, notify_distance: float) -> list:
    return [p for p in points if distance_m(user, point_coords(p)) <= notify_distance]


# Purpose: Alert wording and vibration pattern for one point.
# Inputs:
# - point (ClassifiedPoint | dict): Point with optional 'crosswalk'/'signalized' flags.
# - distance (float): Distance from the user in meters.
# Outputs:
# - tuple[str, str, list[int]]: (title, body, vibration pattern).
def alert_content(point, distance: float) -> tuple:
    crosswalk = bool(_get(point, "crosswalk", False))
    signalized = bool(_get(point, "signalized", False))
    title = "Approaching Crosswalk" if crosswalk else "Approaching Intersection"
    what = "a crosswalk" if crosswalk else "an intersection"
    advice = "Watch for traffic signals." if signalized else "Please proceed with caution."
    body = f"You are {round(distance)}m from {what}. {advice}"
    if crosswalk and signalized:
        pattern = PATTERN_SIGNALIZED_CROSSWALK
    elif crosswalk:
        pattern = PATTERN_CROSSWALK
    else:
        pattern = PATTERN_INTERSECTION
    return title, body, list(pattern)


# Purpose: Foreground proximity check with a global cooldown.
# Inputs:
# - user ((lon, lat)): User position.
# - points (list): Classified points in priority order.
# - last_notification_time (float): Epoch seconds of the previous alert (0 if none).
# - settings (UserSettings): Current user settings.
# - alerts (AlertSink): Delivery target.
# - now (float | None): Epoch seconds; defaults to time.time().
# - cooldown_s (float | None): Minimum gap between alerts; defaults to config.
# Outputs:
# - float: `now` when an alert fired, otherwise last_notification_time unchanged.
def check_proximity_and_notify(user, points, last_notification_time: float, settings, alerts,
                               now: float = None, cooldown_s: float = None) -> float:
    now = time.time() if now is None else float(now)
    cooldown_s = float(cooldown_s if cooldown_s is not None else NOTIFIER["cooldown_s"])
    if now - last_notification_time < cooldown_s:
        return last_notification_time
    if not settings.enabled:
        return last_notification_time

    for point in points:
        distance = distance_m(user, point_coords(point))
        if distance > settings.notify_distance:
            continue
        title, body, pattern = alert_content(point, distance)
        alerts.notify(title, body, sound=settings.sound_enabled, data={"type": _get(point, "type", "intersection")})
        if settings.vibration_enabled:
            alerts.vibrate(pattern)
        if settings.accessibility_mode and settings.voice_prompts:
            alerts.speak(body)
        logger.info(f"Alerted for {title.lower()} at {distance:.1f} m")
        return now
    return last_notification_time


@dataclass
class NotificationState:
    """Coordinate keys already alerted on, plus when the last alert fired."""
    notified: set = field(default_factory=set)
    last_alert_at: float = 0.0

    def to_dict(self) -> dict:
        return {"notified": sorted(self.notified), "last_alert_at": self.last_alert_at}

    @classmethod
    def from_dict(cls, data) -> "NotificationState":
        if not data:
            return cls()
        return cls(notified=set(data.get("notified", [])), last_alert_at=float(data.get("last_alert_at", 0.0)))


def load_notification_state(store) -> NotificationState:
    try:
        return NotificationState.from_dict(store.get_item(NOTIFIED_KEY))
    except (OSError, ValueError, TypeError, AttributeError) as e:
        logger.error(f"Failed to load notified set: {e}")
        return NotificationState()


def save_notification_state(store, state: NotificationState) -> bool:
    try:
        store.set_item(NOTIFIED_KEY, state.to_dict())
        return True
    except (OSError, ValueError, TypeError) as e:
        logger.error(f"Failed to save notified set: {e}")
        return False


class BackgroundProximityMonitor:
    """Location-update handler working only from persisted state.

    Cached points, settings and the notified-set are all read from `store`
    on every update, so this can run in a separate process from the
    pipeline that fills the cache.
    """

    def __init__(self, store, alerts=None, reset_distance_m: float = None, key_digits: int = None):
        self.store = store
        self.alerts = alerts or LoggingAlertSink()
        self.reset_distance_m = float(reset_distance_m if reset_distance_m is not None else NOTIFIER["reset_distance_m"])
        self.key_digits = int(key_digits if key_digits is not None else NOTIFIER["key_digits"])

    def _fire(self, settings) -> None:
        self.alerts.notify(BACKGROUND_TITLE, BACKGROUND_BODY, sound=settings.sound_enabled)
        if settings.vibration_enabled:
            self.alerts.vibrate(list(STRENGTH_PATTERNS.get(settings.vibration_strength, STRENGTH_PATTERNS[2])))
        if settings.voice_prompts:
            self.alerts.speak(BACKGROUND_SPEECH)

    # Purpose: Handle one location update.
    # Inputs:
    # - lon (float), lat (float): User position.
    # - now (float | None): Epoch seconds recorded as last_alert_at when an alert fires.
    # Outputs:
    # - bool: True when an alert fired. At most one alert per update.
    def process_location_update(self, lon: float, lat: float, now: float = None) -> bool:
        now = time.time() if now is None else float(now)
        points = get_cached_intersections(self.store)
        settings = get_settings(self.store)
        state = load_notification_state(self.store)

        # points still in alert range stay notified
        reset_beyond = max(self.reset_distance_m, settings.notify_distance)
        changed = False
        fired = False
        for point in points:
            plon, plat = point_coords(point)
            key = coordinate_key(plon, plat, self.key_digits)
            distance = distance_m((lon, lat), (plon, plat))
            if distance > reset_beyond and key in state.notified:
                state.notified.discard(key)
                changed = True
                continue
            if distance <= settings.notify_distance and key not in state.notified and settings.enabled:
                self._fire(settings)
                state.notified.add(key)
                state.last_alert_at = now
                changed = True
                fired = True
                logger.info(f"Background alert for {key} at {distance:.1f} m")
                break

        if changed:
            save_notification_state(self.store, state)
        return fired
