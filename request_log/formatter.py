"""Assembly of the single request log line."""

import logging
from typing import Iterable, Optional

from request_log.conf import get_settings
from request_log.outcome import Outcome, classify
from request_log.params import extract_params
from request_log.utils.request_context import RequestContext, now

logger = logging.getLogger("request")


def elapsed(context: RequestContext, now_ns: Optional[int] = None) -> str:
    """``" <N> ms"`` since the request started, or "" without a start time."""
    if context.start_time is None:
        return ""
    end = now() if now_ns is None else now_ns
    return f" {(end - context.start_time) // 1_000_000} ms"


def log_path(context: RequestContext, path_for_action: str) -> str:
    """
    The URL path for unresolved or web-routed requests, else the action.

    Actions under ``path_for_action`` (e.g. static file serving) are
    more readable as the path that was asked for.
    """
    if not context.action or context.action.startswith(path_for_action):
        return context.path
    return context.action


def format_line(
    context: RequestContext,
    outcome: Optional[Outcome],
    path_for_action: Optional[str] = None,
    mask: Optional[Iterable[str]] = None,
    now_ns: Optional[int] = None,
) -> str:
    if path_for_action is None:
        path_for_action = get_settings().path_for_action
    custom = f" {context.custom_data}" if context.custom_data is not None else ""

    return (
        f"{log_path(context, path_for_action)} {context.remote_address} {context.session_label}{custom}"
        f" {context.method} {extract_params(context, mask=mask)}"
        f" -> {classify(outcome)}{elapsed(context, now_ns)}"
    )


def log_request_info(context: RequestContext) -> None:
    """Write the line for ``context`` to the ``request`` logger."""
    logger.info(format_line(context, context.outcome))
