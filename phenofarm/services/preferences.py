# phenofarm/services/preferences.py
from phenofarm.utils.errors import ValidationError
from phenofarm.utils.storage import KeyValueStorage

VIEW_MODE_KEYS = ("productViewMode", "strainViewMode")
VIEW_MODES = ("card", "list")
DEFAULT_VIEW_MODE = "card"


def _check_key(key: str) -> None:
    if key not in VIEW_MODE_KEYS:
        raise ValidationError(f"Unknown preference: {key}", field="key")


def get_view_mode(storage: KeyValueStorage, key: str) -> str:
    _check_key(key)
    value = storage.get(key)
    # Stored as a bare string, not JSON; anything unexpected reads as the default
    return value if value in VIEW_MODES else DEFAULT_VIEW_MODE


def set_view_mode(storage: KeyValueStorage, key: str, mode: str) -> str:
    _check_key(key)
    if mode not in VIEW_MODES:
        raise ValidationError(f"View mode must be one of: {', '.join(VIEW_MODES)}", field="mode")
    storage.set(key, mode)
    return mode
