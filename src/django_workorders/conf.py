"""Configuration helpers for django-workorders."""

from decimal import Decimal
from functools import lru_cache

from django.conf import settings
from django.utils.module_loading import import_string

from .exceptions import HandlerLoadError


def get_setting(name: str, default=None):
    """Get a setting with WORKORDERS_ prefix."""
    return getattr(settings, f"WORKORDERS_{name}", default)


def gps_thresholds() -> tuple[Decimal, Decimal]:
    """Return (high, low) accuracy cut-offs in meters."""
    high = get_setting("GPS_HIGH_ACCURACY_METERS", 10)
    low = get_setting("GPS_LOW_ACCURACY_METERS", 50)
    return Decimal(str(high)), Decimal(str(low))


def capture_checklists() -> bool:
    return bool(get_setting("CAPTURE_CHECKLISTS", True))


@lru_cache(maxsize=32)
def load_handler(dotted_path: str):
    """
    Import a callable from a dotted path.

    Raises HandlerLoadError for bad paths and non-callables.
    """
    try:
        handler = import_string(dotted_path)
    except ImportError as e:
        raise HandlerLoadError(dotted_path, str(e))

    if not callable(handler):
        raise HandlerLoadError(dotted_path, "Not callable")

    return handler


def get_role_resolver():
    """Return the configured ``user -> role`` callable, or None."""
    path = get_setting("ROLE_RESOLVER")
    if not path:
        return None
    return load_handler(path)


def clear_handler_cache():
    """Clear the handler loading cache. Useful for testing."""
    load_handler.cache_clear()
