"""Outcome of a handled request and its one-word-ish summary for the log line."""

import os
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from django.http import FileResponse
from django.http.response import HttpResponseRedirectBase
from django.template.response import SimpleTemplateResponse

RENDER_ERROR = "RenderError"


class OutcomeKind(Enum):
    """Classification of request results."""
    REDIRECT = "redirect"
    RENDERED_TEMPLATE = "rendered_template"
    RENDERED_VIEW = "rendered_view"
    BINARY_PAYLOAD = "binary_payload"
    ERROR = "error"
    OTHER = "other"


@dataclass(frozen=True)
class Outcome:
    """Terminal result of a request. Only the fields of its kind are set."""

    kind: OutcomeKind
    type_name: str
    url: str = ""
    name: str = ""
    render_millis: int = 0
    file_name: str = ""
    content_type: str = ""
    message: str = ""

    @classmethod
    def redirect(cls, url: str, type_name: str = "Redirect") -> 'Outcome':
        return cls(OutcomeKind.REDIRECT, type_name, url=url)

    @classmethod
    def rendered_template(cls, name: str, render_millis: int = 0) -> 'Outcome':
        return cls(OutcomeKind.RENDERED_TEMPLATE, "RenderTemplate", name=name, render_millis=render_millis)

    @classmethod
    def rendered_view(cls, name: str, render_millis: int = 0) -> 'Outcome':
        return cls(OutcomeKind.RENDERED_VIEW, "RenderView", name=name, render_millis=render_millis)

    @classmethod
    def binary(cls, type_name: str, file_name: Optional[str] = None, content_type: Optional[str] = None) -> 'Outcome':
        return cls(OutcomeKind.BINARY_PAYLOAD, type_name, file_name=file_name or "", content_type=content_type or "")

    @classmethod
    def error(cls, type_name: str, message: Optional[str]) -> 'Outcome':
        return cls(OutcomeKind.ERROR, type_name, message="" if message is None else str(message))

    @classmethod
    def other(cls, type_name: str) -> 'Outcome':
        return cls(OutcomeKind.OTHER, type_name)

    @classmethod
    def from_exception(cls, exc: BaseException) -> 'Outcome':
        return cls.error(type(exc).__name__, str(exc))

    @classmethod
    def from_response(cls, response, render_millis: Optional[int] = None, class_based_view: bool = False) -> 'Outcome':
        """
        Build the outcome for a Django response.

        Args:
            response: The HttpResponse returned through the middleware
            render_millis: Measured template render time, if any
            class_based_view: Whether the response came from a class-based view

        Returns:
            Outcome of the matching kind
        """
        type_name = type(response).__name__

        if isinstance(response, HttpResponseRedirectBase):
            return cls.redirect(response.url, type_name)

        if isinstance(response, SimpleTemplateResponse):
            name = _template_name(response.template_name)
            if class_based_view:
                return cls.rendered_view(name, render_millis or 0)
            return cls.rendered_template(name, render_millis or 0)

        if isinstance(response, FileResponse):
            return cls.binary(type_name, _file_name(response), response.get("Content-Type"))

        if response.status_code >= 500:
            return cls.error(type_name, response.reason_phrase)

        return cls.other(type_name)


def _template_name(template) -> str:
    if isinstance(template, (list, tuple)):
        template = template[0] if template else ""
    if isinstance(template, str):
        return template
    # Template object: use where it was loaded from
    origin = getattr(template, "origin", None)
    return getattr(origin, "template_name", None) or getattr(origin, "name", None) or ""


def _file_name(response: FileResponse) -> str:
    if response.filename:
        return os.path.basename(response.filename)
    name = getattr(getattr(response, "file_to_stream", None), "name", None)
    return os.path.basename(name) if isinstance(name, str) else ""


def classify(outcome: Optional[Outcome]) -> str:
    """Summarize an outcome for the log line; ``None`` means rendering failed."""
    if outcome is None:
        return RENDER_ERROR

    kind = outcome.kind
    if kind is OutcomeKind.REDIRECT:
        return f"{outcome.type_name} {outcome.url}"
    if kind is OutcomeKind.RENDERED_TEMPLATE:
        return f"RenderTemplate {outcome.name} {outcome.render_millis} ms"
    if kind is OutcomeKind.RENDERED_VIEW:
        return f"RenderView {outcome.name} {outcome.render_millis} ms"
    if kind is OutcomeKind.BINARY_PAYLOAD:
        return " ".join(part for part in (outcome.type_name, outcome.file_name, outcome.content_type) if part)
    if kind is OutcomeKind.ERROR:
        return f'{outcome.type_name} "{outcome.message}"'
    return outcome.type_name
