"""Request log middleware: one line per handled request on the ``request`` logger."""

from typing import Callable

from asgiref.sync import iscoroutinefunction, markcoroutinefunction
from django.http import FileResponse, HttpRequest, HttpResponse, StreamingHttpResponse

from request_log.outcome import Outcome
from request_log.pipeline import RequestLogPipeline, get_pipeline
from request_log.utils.request_context import get_context
from request_log.utils.worker_label import WorkerLabel


def view_action(view_func) -> str:
    """Dotted name of the view, e.g. ``shop.views.OrderDetail``."""
    target = getattr(view_func, 'view_class', None) or view_func
    module = getattr(target, '__module__', None) or ''
    name = getattr(target, '__qualname__', None) or type(target).__name__
    return f"{module}.{name}" if module else name


class RequestLogMiddleware:
    """
    Middleware that writes the request log line.

    Logs:
    - Path (or resolved view) and client address
    - Session key and custom data set by the view
    - Method and request parameters, sensitive ones masked
    - Outcome summary (redirect, template, file, error, ...)
    - Elapsed time

    While the view runs, the worker thread (or task, under ASGI) is renamed
    to carry the view, request id and client, and is restored afterwards.
    Streaming responses are logged when their content has been sent.

    Place it after SessionMiddleware so the session key is available.
    """

    sync_capable = True
    async_capable = True

    def __init__(self, get_response: Callable, pipeline: RequestLogPipeline = None):
        self.get_response = get_response
        self.pipeline = pipeline or get_pipeline()
        self.async_mode = iscoroutinefunction(get_response)
        if self.async_mode:
            markcoroutinefunction(self)

    def __call__(self, request: HttpRequest) -> HttpResponse:
        if self.async_mode:
            return self.__acall__(request)

        with WorkerLabel() as label:
            self.pipeline.on_request_start(request, label)
            try:
                response = self.get_response(request)
                self._record_response(request, response)
                return response
            finally:
                self.pipeline.on_invocation_finally(request)

    async def __acall__(self, request: HttpRequest) -> HttpResponse:
        with WorkerLabel() as label:
            self.pipeline.on_request_start(request, label)
            try:
                response = await self.get_response(request)
                self._record_response(request, response)
                return response
            finally:
                self.pipeline.on_invocation_finally(request)

    def process_view(self, request, view_func, view_args, view_kwargs):
        context = self.pipeline.before_action_invocation(request, view_action(view_func), view_kwargs)
        if context is not None:
            context.class_based_view = hasattr(view_func, 'view_class')
        return None

    def process_template_response(self, request, response):
        self.pipeline.on_template_response(request, response)
        return response

    def process_exception(self, request, exception):
        self.pipeline.on_action_result(request, Outcome.from_exception(exception))
        return None

    def _record_response(self, request, response) -> None:
        context = get_context(request)
        # An exception recorded by process_exception wins over the error page built from it
        if context is None or context.outcome is not None:
            return
        # Suspended by the view: resume() supplies the outcome
        if context.pending:
            return

        if isinstance(response, StreamingHttpResponse) and not isinstance(response, FileResponse):
            self.pipeline.suspend(request)
            self._resume_when_sent(request, response)
            return

        outcome = Outcome.from_response(response, context.render_millis, context.class_based_view)
        self.pipeline.on_action_result(request, outcome)

    def _resume_when_sent(self, request, response: StreamingHttpResponse) -> None:
        pipeline = self.pipeline
        stream = response.streaming_content

        if response.is_async:
            async def content():
                try:
                    async for chunk in stream:
                        yield chunk
                finally:
                    pipeline.resume(request, Outcome.from_response(response))
        else:
            def content():
                try:
                    yield from stream
                finally:
                    pipeline.resume(request, Outcome.from_response(response))

        response.streaming_content = content()
