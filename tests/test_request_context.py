"""Tests for request ids and the per-request context."""
import asyncio
import re
import threading

import pytest
from asgiref.sync import sync_to_async
from django.test import RequestFactory

from request_log.utils.request_context import (
    NO_SESSION,
    RequestContext,
    RequestIdGenerator,
    attach_context,
    clear_request_context,
    get_context,
    get_request_id,
    get_request_id_generator,
    set_custom_data,
    set_request_id,
)


# ── Request id generator ──────────────────────────────────────────

def test_ids_start_at_one():
    gen = RequestIdGenerator(prefix="abc")
    assert gen.next_id() == "abc-1"
    assert gen.next_id() == "abc-2"
    assert gen.next_id() == "abc-3"


def test_default_prefix_is_three_hex_digits():
    gen = RequestIdGenerator()
    assert re.fullmatch(r"[0-9a-f]{3}", gen.prefix)
    assert gen.next_id().startswith(gen.prefix + "-")


def test_counter_wraps_silently():
    gen = RequestIdGenerator(prefix="p", max_value=3)
    ids = [gen.next_id() for _ in range(5)]
    assert ids == ["p-1", "p-2", "p-3", "p-1", "p-2"]


def test_module_generator_shares_prefix():
    first = get_request_id_generator().next_id()
    second = get_request_id_generator().next_id()
    assert first.split("-")[0] == second.split("-")[0]
    assert first != second


def test_concurrent_ids_are_unique():
    """N threads each taking ids must never see a duplicate or lose an increment."""
    gen = RequestIdGenerator(prefix="t")
    per_thread = 500
    threads = 8
    results = []
    results_lock = threading.Lock()
    start = threading.Barrier(threads)

    def worker():
        start.wait()
        local = [gen.next_id() for _ in range(per_thread)]
        with results_lock:
            results.extend(local)

    pool = [threading.Thread(target=worker) for _ in range(threads)]
    for t in pool:
        t.start()
    for t in pool:
        t.join()

    assert len(results) == per_thread * threads
    assert len(set(results)) == per_thread * threads
    counters = sorted(int(r.split("-")[1]) for r in results)
    assert counters == list(range(1, per_thread * threads + 1))


# ── Context ───────────────────────────────────────────────────────

def _context(**kwargs):
    defaults = dict(request_id="abc-1", path="/", method="GET", remote_address="10.0.0.1")
    defaults.update(kwargs)
    return RequestContext(**defaults)


def test_context_attached_to_request():
    request = RequestFactory().get("/")
    assert get_context(request) is None
    context = attach_context(request, _context())
    assert get_context(request) is context


def test_set_custom_data():
    request = RequestFactory().get("/")
    attach_context(request, _context())
    set_custom_data(request, "order=7")
    assert get_context(request).custom_data == "order=7"


def test_set_custom_data_without_context_is_ignored():
    request = RequestFactory().get("/")
    set_custom_data(request, "order=7")
    assert get_context(request) is None


def test_session_label():
    assert _context().session_label == NO_SESSION
    assert _context(session_id="s3ss10n").session_label == "s3ss10n"


@pytest.mark.parametrize("pending, has_outcome, suspended", [
    (False, False, False),
    (False, True, False),
    (True, False, True),
    (True, True, False),
])
def test_is_suspended(pending, has_outcome, suspended):
    from request_log.outcome import Outcome
    context = _context(pending=pending, outcome=Outcome.other("HttpResponse") if has_outcome else None)
    assert context.is_suspended is suspended


# ── Request-local request id ──────────────────────────────────────

def test_request_id_not_shared_with_other_threads():
    set_request_id("abc-9")
    assert get_request_id() == "abc-9"

    seen = []
    t = threading.Thread(target=lambda: seen.append(get_request_id()))
    t.start()
    t.join()
    assert seen == [None]

    clear_request_context()
    assert get_request_id() is None


def test_request_id_private_to_each_task():
    async def handle(request_id):
        set_request_id(request_id)
        await asyncio.sleep(0)
        return get_request_id()

    async def main():
        return await asyncio.gather(handle("abc-1"), handle("abc-2"))

    assert asyncio.run(main()) == ["abc-1", "abc-2"]


def test_request_id_follows_sync_to_async():
    async def main():
        set_request_id("abc-3")
        try:
            return await sync_to_async(get_request_id)()
        finally:
            clear_request_context()

    assert asyncio.run(main()) == "abc-3"
