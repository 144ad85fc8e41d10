"""Diagnostic naming of the worker (thread or asyncio task) handling a request."""

import asyncio
import logging
import threading
from typing import Optional

from request_log.utils.request_context import NO_SESSION

logger = logging.getLogger(__name__)


def original_name(name: str) -> str:
    """Strip any request decoration: everything from the first space on."""
    i = name.find(' ')
    return name if i == -1 else name[:i]


def _current_task() -> Optional[asyncio.Task]:
    try:
        return asyncio.current_task()
    except RuntimeError:
        return None


class WorkerLabel:
    """
    Scope that decorates the current worker's name for the length of a request.

    The worker is captured on construction: the running asyncio task when
    called from a coroutine, otherwise the current thread. Leaving the scope
    always puts the undecorated name back, even if the handler raised::

        with WorkerLabel() as label:
            label.apply(action, request_id, remote_address, session_id)
            response = handler(request)
    """

    def __init__(self, task: Optional[asyncio.Task] = None, thread: Optional[threading.Thread] = None):
        if task is None and thread is None:
            task = _current_task()
            if task is None:
                thread = threading.current_thread()
        self._task = task
        self._thread = thread
        self.original = original_name(self._get_name())

    def _get_name(self) -> str:
        if self._task is not None:
            return self._task.get_name()
        return self._thread.name

    def _set_name(self, name: str) -> None:
        if self._task is not None:
            self._task.set_name(name)
        else:
            self._thread.name = name

    def is_current(self) -> bool:
        """True when called from the worker this label decorates."""
        if self._task is not None:
            return _current_task() is self._task
        return self._thread is threading.current_thread()

    def apply(self, action, request_id: str, remote_address: str, session_id: Optional[str] = None) -> str:
        label = f"{self.original} {action} [{request_id}] ({remote_address} {session_id or NO_SESSION})"
        self._set_name(label)
        return label

    def restore(self) -> None:
        self._set_name(self.original)

    def __enter__(self) -> 'WorkerLabel':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            self.restore()
        except Exception:
            logger.exception("Failed to restore worker name")


def restore_thread_name(thread: Optional[threading.Thread] = None) -> str:
    """Undecorate ``thread`` (default: current thread) and return its name."""
    thread = thread or threading.current_thread()
    thread.name = original_name(thread.name)
    return thread.name
