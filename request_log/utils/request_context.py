"""Request context utilities for correlation and timing."""

import random
import threading
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from asgiref.local import Local

if TYPE_CHECKING:
    from request_log.outcome import Outcome
    from request_log.utils.worker_label import WorkerLabel

# Follows the request across sync_to_async threads and is private to each task
_request_context = Local()

# Attribute used to attach the context to the HttpRequest
CONTEXT_ATTR = 'request_log_context'

NO_SESSION = 'no-session'


class RequestIdGenerator:
    """
    Thread-safe request id source.

    Ids look like ``"a3f-17"``: a per-process hex prefix and a counter that
    starts at 1 and wraps back to 1 after ``max_value``.
    """

    def __init__(self, prefix: Optional[str] = None, start: int = 1, max_value: int = 2 ** 31 - 1):
        self.prefix = prefix if prefix is not None else f"{random.randrange(0x1000):03x}"
        self.start = start
        self.max_value = max_value
        self._next = start
        self._lock = threading.Lock()

    def next_id(self) -> str:
        with self._lock:
            value = self._next
            self._next = value + 1 if value < self.max_value else self.start
        return f"{self.prefix}-{value}"


# Module-level singleton, one prefix per process
_generator = RequestIdGenerator()


def get_request_id_generator() -> RequestIdGenerator:
    return _generator


@dataclass
class RequestContext:
    """Everything the request log line needs, owned by one request."""

    request_id: str
    path: str
    method: str
    remote_address: str
    start_time: Optional[int] = None
    action: Optional[str] = None
    session_id: Optional[str] = None
    params: Dict[str, List[str]] = field(default_factory=dict)
    route_params: Dict[str, Any] = field(default_factory=dict, repr=False)
    custom_data: Optional[str] = None
    outcome: Optional['Outcome'] = None
    pending: bool = False
    # Set by the post-render callback of template responses
    render_millis: Optional[int] = field(default=None, repr=False)
    class_based_view: bool = field(default=False, repr=False)
    worker_label: Optional['WorkerLabel'] = field(default=None, repr=False, compare=False)
    # Executor thread running a sync view under ASGI
    view_label: Optional['WorkerLabel'] = field(default=None, repr=False, compare=False)

    @property
    def is_suspended(self) -> bool:
        """True while the request waits for a continuation and has no result."""
        return self.pending and self.outcome is None

    @property
    def session_label(self) -> str:
        return self.session_id or NO_SESSION


def now() -> int:
    """Monotonic clock reading in nanoseconds."""
    return time.monotonic_ns()


def attach_context(request, context: RequestContext) -> RequestContext:
    setattr(request, CONTEXT_ATTR, context)
    return context


def get_context(request) -> Optional[RequestContext]:
    """Return the context attached to ``request``, if any."""
    return getattr(request, CONTEXT_ATTR, None)


def set_custom_data(request, data: Optional[str]) -> None:
    """
    Attach free-form text to the request's log line.

    Views call this to add e.g. an order number after the session id.
    """
    context = get_context(request)
    if context is not None:
        context.custom_data = data


def set_request_id(request_id: str) -> None:
    """Store request ID in request-local storage."""
    _request_context.request_id = request_id


def get_request_id() -> Optional[str]:
    """Retrieve current request ID from request-local storage."""
    return getattr(_request_context, 'request_id', None)


def clear_request_context() -> None:
    """Clear the request-local context."""
    if hasattr(_request_context, 'request_id'):
        delattr(_request_context, 'request_id')
