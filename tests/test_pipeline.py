"""Tests for the request lifecycle hooks."""
import logging
import threading

import pytest
from django.test import RequestFactory

from request_log.outcome import Outcome
from request_log.pipeline import RequestLogPipeline, session_id
from request_log.utils.request_context import RequestIdGenerator, get_context, get_request_id
from request_log.utils.worker_label import WorkerLabel


@pytest.fixture
def pipeline():
    return RequestLogPipeline(RequestIdGenerator(prefix="abc"))


def _request(path="/orders/7/", **kwargs):
    return RequestFactory().get(path, REMOTE_ADDR="10.0.0.1", **kwargs)


# ── Request start ─────────────────────────────────────────────────

def test_request_start_builds_context(pipeline):
    request = _request("/orders/7/?q=1")
    context = pipeline.on_request_start(request)
    assert get_context(request) is context
    assert context.request_id == "abc-1"
    assert context.path == "/orders/7/"
    assert context.method == "GET"
    assert context.remote_address == "10.0.0.1"
    assert context.start_time is not None
    assert get_request_id() == "abc-1"
    pipeline.on_invocation_finally(request)
    assert get_request_id() is None


def test_ids_increase_per_request(pipeline):
    ids = [pipeline.on_request_start(_request()).request_id for _ in range(3)]
    assert ids == ["abc-1", "abc-2", "abc-3"]


def test_before_action_invocation_labels_worker(pipeline):
    thread = threading.Thread(target=lambda: None, name="pool-1")
    request = _request()
    pipeline.on_request_start(request, WorkerLabel(thread=thread))
    context = pipeline.before_action_invocation(request, "shop.views.order_detail", {"order_id": 7})
    assert context.action == "shop.views.order_detail"
    assert context.route_params == {"order_id": 7}
    assert thread.name == "pool-1 shop.views.order_detail [abc-1] (10.0.0.1 no-session)"
    pipeline.on_invocation_finally(request)


def test_view_thread_labelled_when_not_the_request_worker(pipeline):
    current = threading.current_thread()
    saved = current.name
    current.name = "executor-0"
    try:
        request = _request()
        pipeline.on_request_start(request, WorkerLabel(thread=threading.Thread(name="loop")))
        pipeline.before_action_invocation(request, "shop.views.index")
        assert current.name == "executor-0 shop.views.index [abc-1] (10.0.0.1 no-session)"

        pipeline.on_invocation_finally(request)
        assert current.name == "executor-0"
        assert get_context(request).view_label is None
    finally:
        current.name = saved


def test_before_action_invocation_without_context(pipeline):
    assert pipeline.before_action_invocation(_request(), "shop.views.index") is None


# ── Completion ────────────────────────────────────────────────────

def test_completed_request_logs_one_line(pipeline, request_lines):
    request = _request("/orders/7/?q=1&password=secret")
    pipeline.on_request_start(request)
    pipeline.before_action_invocation(request, "shop.views.order_detail", {"order_id": 7})
    pipeline.on_action_result(request, Outcome.other("HttpResponse"))
    assert pipeline.on_invocation_finally(request) is True

    lines = request_lines()
    assert len(lines) == 1
    assert lines[0].startswith(
        "shop.views.order_detail 10.0.0.1 no-session GET q=1\tpassword=*\torder_id=7 -> HttpResponse "
    )
    assert lines[0].endswith(" ms")


def test_missing_outcome_logs_render_error(pipeline, request_lines):
    request = _request("/")
    pipeline.on_request_start(request)
    pipeline.before_action_invocation(request, "Web.index")
    pipeline.on_invocation_finally(request)
    [line] = request_lines()
    assert line.startswith("/ 10.0.0.1 no-session GET  -> RenderError ")


def test_request_without_context_is_not_logged(pipeline, request_lines):
    assert pipeline.on_invocation_finally(_request()) is False
    assert request_lines() == []


def test_custom_data_in_line(pipeline, request_lines):
    from request_log import set_custom_data
    request = _request("/checkout/")
    pipeline.on_request_start(request)
    pipeline.before_action_invocation(request, "shop.views.checkout")
    set_custom_data(request, "order=7")
    pipeline.on_action_result(request, Outcome.redirect("/orders/7/", "HttpResponseRedirect"))
    pipeline.on_invocation_finally(request)
    [line] = request_lines()
    assert line.startswith("shop.views.checkout 10.0.0.1 no-session order=7 GET  -> HttpResponseRedirect /orders/7/")


def test_formatter_failure_does_not_propagate(pipeline, request_lines, caplog, monkeypatch):
    def explode(context):
        raise RuntimeError("formatter broke")
    monkeypatch.setattr("request_log.pipeline.log_request_info", explode)

    request = _request()
    pipeline.on_request_start(request)
    assert pipeline.on_invocation_finally(request) is True
    assert request_lines() == []
    assert "Failed to log request abc-1" in caplog.text


# ── Suspension ────────────────────────────────────────────────────

def test_suspended_request_is_not_logged(pipeline, request_lines):
    request = _request()
    pipeline.on_request_start(request)
    pipeline.before_action_invocation(request, "shop.views.export")
    pipeline.suspend(request)
    assert pipeline.on_invocation_finally(request) is False
    assert request_lines() == []
    # Context survives for the continuation
    assert get_context(request).is_suspended


def test_resume_logs_with_real_outcome(pipeline, request_lines):
    request = _request()
    pipeline.on_request_start(request)
    pipeline.before_action_invocation(request, "shop.views.export")
    pipeline.suspend(request)
    pipeline.on_invocation_finally(request)

    assert pipeline.resume(request, Outcome.binary("FileResponse", "export.csv", "text/csv")) is True
    [line] = request_lines()
    assert "-> FileResponse export.csv text/csv " in line
    assert not get_context(request).pending


def test_resume_only_once(pipeline, request_lines):
    request = _request()
    pipeline.on_request_start(request)
    pipeline.suspend(request)
    pipeline.on_invocation_finally(request)
    assert pipeline.resume(request, Outcome.other("HttpResponse")) is True
    assert pipeline.resume(request, Outcome.other("HttpResponse")) is False
    assert len(request_lines()) == 1


def test_resume_of_unsuspended_request_is_ignored(pipeline, request_lines):
    request = _request()
    pipeline.on_request_start(request)
    pipeline.on_action_result(request, Outcome.other("HttpResponse"))
    pipeline.on_invocation_finally(request)
    assert pipeline.resume(request, Outcome.other("HttpResponse")) is False
    assert len(request_lines()) == 1


def test_pending_with_outcome_is_logged(pipeline, request_lines):
    request = _request()
    pipeline.on_request_start(request)
    pipeline.suspend(request)
    pipeline.on_action_result(request, Outcome.other("HttpResponse"))
    assert pipeline.on_invocation_finally(request) is True
    assert len(request_lines()) == 1


# ── Session ───────────────────────────────────────────────────────

def test_session_id_from_request():
    class Session:
        session_key = "k3y"

    request = _request()
    assert session_id(request) is None
    request.session = Session()
    assert session_id(request) == "k3y"


def test_configuration_read_reloads_settings(pipeline, caplog):
    with caplog.at_level(logging.INFO, logger="request_log.pipeline"):
        settings = pipeline.on_configuration_read()
    assert "password" in settings.mask_params
    assert "Request log masking 5 parameter patterns" in caplog.text
