"""
Request log pipeline.

Lifecycle hooks, in the order the framework fires them:

1. on_configuration_read()   - app ready / settings changed
2. on_request_start()        - request routed, context created
3. before_action_invocation()- view resolved, worker label applied
4. on_action_result()        - view produced a response or raised
5. on_invocation_finally()   - always; logs unless the request is suspended

A suspended request (``suspend()``) logs nothing in step 5; the line is
written by ``resume()`` once the continuation has a result.
"""

import logging
from typing import Mapping, Optional

from request_log.conf import RequestLogSettings, reload_settings
from request_log.formatter import log_request_info
from request_log.outcome import Outcome
from request_log.params import collect_params
from request_log.utils.request_context import (
    RequestContext,
    RequestIdGenerator,
    attach_context,
    clear_request_context,
    get_context,
    get_request_id_generator,
    now,
    set_request_id,
)
from request_log.utils.worker_label import WorkerLabel

logger = logging.getLogger(__name__)


def session_id(request) -> Optional[str]:
    session = getattr(request, 'session', None)
    if session is None:
        return None
    return getattr(session, 'session_key', None)


class RequestLogPipeline:
    """Drives one RequestContext per request from arrival to its log line."""

    def __init__(self, id_generator: Optional[RequestIdGenerator] = None):
        self.id_generator = id_generator or get_request_id_generator()

    def on_configuration_read(self) -> RequestLogSettings:
        settings = reload_settings()
        logger.info(f"Request log masking {len(settings.mask_params)} parameter patterns")
        return settings

    def on_request_start(self, request, label: Optional[WorkerLabel] = None) -> RequestContext:
        context = RequestContext(
            request_id=self.id_generator.next_id(),
            path=request.path,
            method=request.method,
            remote_address=request.META.get('REMOTE_ADDR') or '',
            start_time=now(),
            session_id=session_id(request),
            worker_label=label,
        )
        set_request_id(context.request_id)
        return attach_context(request, context)

    def before_action_invocation(self, request, action: str, route_params: Optional[Mapping] = None) -> Optional[RequestContext]:
        context = get_context(request)
        if context is None:
            return None
        context.action = action
        context.route_params = dict(route_params or {})
        context.session_id = session_id(request)
        if context.worker_label is not None:
            try:
                labels = [context.worker_label]
                if not context.worker_label.is_current():
                    context.view_label = WorkerLabel()
                    labels.append(context.view_label)
                for label in labels:
                    label.apply(action, context.request_id, context.remote_address, context.session_id)
            except Exception:
                logger.exception("Failed to label worker")
        return context

    def on_action_result(self, request, outcome: Outcome) -> None:
        context = get_context(request)
        if context is not None:
            context.outcome = outcome

    def on_template_response(self, request, response) -> None:
        """Time the rendering of a template response."""
        context = get_context(request)
        if context is None:
            return
        started = now()

        def record_render_time(rendered):
            context.render_millis = (now() - started) // 1_000_000

        response.add_post_render_callback(record_render_time)

    def suspend(self, request) -> None:
        """Park the request: the current invocation will not log."""
        context = get_context(request)
        if context is not None:
            context.pending = True
            context.outcome = None

    def resume(self, request, outcome: Optional[Outcome]) -> bool:
        """Continuation finished: record its result and log the request."""
        context = get_context(request)
        if context is None or not context.pending:
            return False
        context.pending = False
        context.outcome = outcome
        set_request_id(context.request_id)
        try:
            self.log(request, context)
        finally:
            clear_request_context()
        return True

    def on_invocation_finally(self, request) -> bool:
        """
        Log the request unless it is suspended.

        Returns:
            True if a line was written
        """
        context = get_context(request)
        if context is None:
            return False
        if context.view_label is not None:
            try:
                context.view_label.restore()
            except Exception:
                logger.exception("Failed to restore worker name")
            context.view_label = None
        try:
            if context.is_suspended:
                return False
            self.log(request, context)
            return True
        finally:
            clear_request_context()

    def log(self, request, context: RequestContext) -> None:
        context.pending = False
        # The session may have been created by the view
        context.session_id = session_id(request) or context.session_id
        context.params = collect_params(request, context.route_params)
        try:
            log_request_info(context)
        except Exception:
            logger.exception(f"Failed to log request {context.request_id}")


_pipeline: Optional[RequestLogPipeline] = None


def get_pipeline() -> RequestLogPipeline:
    """Get or create the process-wide pipeline."""
    global _pipeline
    if _pipeline is None:
        _pipeline = RequestLogPipeline()
    return _pipeline


def suspend(request) -> None:
    get_pipeline().suspend(request)


def resume(request, outcome: Optional[Outcome]) -> bool:
    return get_pipeline().resume(request, outcome)
