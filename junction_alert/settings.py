import logging
from dataclasses import asdict, dataclass, fields

logger = logging.getLogger(__name__)

SETTINGS_KEY = "notification_settings"


@dataclass
class UserSettings:
    enabled: bool = True
    accessibility_mode: bool = False
    notify_distance: float = 20.0
    vibration_enabled: bool = True
    sound_enabled: bool = True
    voice_prompts: bool = True
    vibration_strength: int = 2

    def to_dict(self) -> dict:
        return asdict(self)


DEFAULT_SETTINGS = UserSettings()
_FIELDS = {f.name for f in fields(UserSettings)}


def _from_mapping(values: dict) -> UserSettings:
    merged = {**asdict(DEFAULT_SETTINGS), **{k: v for k, v in (values or {}).items() if k in _FIELDS}}
    merged["notify_distance"] = float(merged["notify_distance"])
    merged["vibration_strength"] = min(3, max(1, int(merged["vibration_strength"])))
    return UserSettings(**merged)


def get_settings(store) -> UserSettings:
    """Stored settings merged over the defaults; defaults on any read failure."""
    try:
        stored = store.get_item(SETTINGS_KEY)
        return _from_mapping(stored) if stored else UserSettings()
    except (OSError, ValueError, TypeError, AttributeError) as e:
        logger.error(f"Failed to load settings: {e}")
        return UserSettings()


# Purpose: Merge a partial update into the stored settings and persist the result.
# Inputs:
# - store (KeyValueStore): Settings storage.
# - **changes: Any UserSettings fields; unknown names are ignored.
# Outputs:
# - UserSettings: The updated settings, or the defaults when saving failed.
def update_settings(store, **changes) -> UserSettings:
    try:
        current = get_settings(store)
        updated = _from_mapping({**current.to_dict(), **changes})
        store.set_item(SETTINGS_KEY, updated.to_dict())
        return updated
    except (OSError, ValueError, TypeError) as e:
        logger.error(f"Failed to save settings: {e}")
        return UserSettings()


def get_voice_prompt_enabled(store) -> bool:
    return bool(get_settings(store).voice_prompts)
