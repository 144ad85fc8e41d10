"""Request parameters for the log line, with sensitive values masked."""

import logging
from typing import Callable, Dict, FrozenSet, Iterable, List, Mapping, Optional

from request_log.conf import get_settings

logger = logging.getLogger(__name__)

# Framework-internal fields, matched exactly
SKIP_PARAMS: FrozenSet[str] = frozenset({
    'action',
    'controller',
    'authenticityToken',
    'csrfmiddlewaretoken',
    'x-http-method-override',
    'body',
})

MASK = '*'


def must_mask(name: str, mask_params: Iterable[str]) -> bool:
    """Case-insensitive substring match against the mask rules."""
    lowered = name.lower()
    return any(rule in lowered for rule in mask_params)


def format_value(values: List[str]) -> str:
    if len(values) == 1:
        return values[0]
    return '[' + ', '.join(values) + ']'


def _add_params(params: Dict[str, List[str]], read: Callable[[], Iterable]) -> None:
    try:
        for name, values in read():
            params.setdefault(name, []).extend(values)
    except Exception:
        logger.warning("Failed to parse request params", exc_info=True)


def collect_params(request, view_kwargs: Optional[Mapping] = None) -> Dict[str, List[str]]:
    """
    Gather query, form and URL route parameters in that order.

    A name seen in several places keeps its first position and accumulates
    all values. Never raises: a source that cannot be read (e.g. a broken
    body) logs a warning and is skipped, the others are still collected.
    """
    params: Dict[str, List[str]] = {}
    _add_params(params, lambda: request.GET.lists())
    _add_params(params, lambda: request.POST.lists())
    _add_params(params, lambda: ((name, [str(value)]) for name, value in (view_kwargs or {}).items()))
    return params


def _extract_params_unsafe(params: Mapping[str, List[str]], skip: FrozenSet[str], mask: Iterable[str]) -> str:
    parts = []
    for name, values in params.items():
        if name in skip:
            continue
        value = MASK if must_mask(name, mask) else format_value(values)
        parts.append(f"\t{name}={value}")
    return ''.join(parts).strip()


def extract_params(context, skip: FrozenSet[str] = SKIP_PARAMS, mask: Optional[Iterable[str]] = None) -> str:
    """
    Serialize ``context.params`` into tab-separated ``name=value`` tokens.

    Args:
        context: RequestContext whose params are logged
        skip: Names never logged
        mask: Mask rules (lower-cased substrings); defaults to the configured ones

    Returns:
        The parameter block, or "" if anything about the params is malformed
    """
    try:
        if mask is None:
            mask = get_settings().mask_params
        return _extract_params_unsafe(context.params, skip, mask)
    except Exception:
        logger.warning("Failed to parse request params", exc_info=True)
        return ''
