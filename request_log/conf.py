"""Settings for the request log.

Read from the ``REQUEST_LOG`` Django setting, a dict keyed by property name::

    REQUEST_LOG = {
        'request.log.pathForAction': 'Web.',
        'request.log.maskParams': 'password|cvv|cardNumber|card.cvv|card.number',
    }

Missing or empty values fall back to the defaults. Bad values never raise.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Any, FrozenSet, Mapping, Optional

logger = logging.getLogger(__name__)

PATH_FOR_ACTION_KEY = 'request.log.pathForAction'
MASK_PARAMS_KEY = 'request.log.maskParams'

DEFAULT_PATH_FOR_ACTION = 'Web.'
DEFAULT_MASK_PARAMS = 'password|cvv|cardNumber|card.cvv|card.number'


def parse_mask_params(value: Any) -> FrozenSet[str]:
    """
    Turn a configured mask list into lower-cased substrings.

    Accepts a pipe-delimited string or a list/tuple of terms. Any other value
    is treated as one literal term.
    """
    if value is None or (isinstance(value, (str, list, tuple)) and not value):
        value = DEFAULT_MASK_PARAMS

    if isinstance(value, str):
        terms = value.split('|')
    elif isinstance(value, (list, tuple, set, frozenset)):
        terms = [str(term) for term in value]
    else:
        terms = [str(value)]

    return frozenset(term.strip().lower() for term in terms if term.strip())


@dataclass(frozen=True)
class RequestLogSettings:
    """Immutable snapshot of the request log configuration."""

    path_for_action: str = DEFAULT_PATH_FOR_ACTION
    mask_params: FrozenSet[str] = parse_mask_params(DEFAULT_MASK_PARAMS)


def load_settings(source: Optional[Mapping[str, Any]] = None) -> RequestLogSettings:
    """Build settings from a property mapping (defaults for anything missing)."""
    if not source:
        return RequestLogSettings()

    path_for_action = source.get(PATH_FOR_ACTION_KEY)
    if not path_for_action:
        path_for_action = DEFAULT_PATH_FOR_ACTION

    return RequestLogSettings(
        path_for_action=str(path_for_action),
        mask_params=parse_mask_params(source.get(MASK_PARAMS_KEY)),
    )


# Current snapshot, swapped whole on reload
_settings: Optional[RequestLogSettings] = None
_lock = threading.Lock()


def _read_django_settings() -> Optional[Mapping[str, Any]]:
    from django.conf import settings

    source = getattr(settings, 'REQUEST_LOG', None)
    if source is not None and not isinstance(source, Mapping):
        logger.warning(f"REQUEST_LOG must be a dict, got {type(source).__name__}; using defaults")
        return None
    return source


def reload_settings() -> RequestLogSettings:
    """Re-read the Django settings and replace the current snapshot."""
    global _settings
    loaded = load_settings(_read_django_settings())
    with _lock:
        _settings = loaded
    logger.debug(
        f"Request log settings loaded: pathForAction={loaded.path_for_action!r}, "
        f"{len(loaded.mask_params)} mask rules"
    )
    return loaded


def get_settings() -> RequestLogSettings:
    """Get the current settings, loading them on first use."""
    current = _settings
    if current is None:
        current = reload_settings()
    return current
