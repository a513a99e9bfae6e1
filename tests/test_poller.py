from __future__ import annotations

import asyncio

import httpx
import pytest

from poller import ModePoller, next_deadline
from state import UNKNOWN, ConfigTarget, SessionStore
from utils import EXCLUSIVE, PIPEWIRE, wait_for


@pytest.mark.asyncio
async def test_poll_once_success(backend, transport):
    backend.set("currentmode", PIPEWIRE)
    store = SessionStore()
    mode = await ModePoller(transport, store).poll_once()
    assert mode == ConfigTarget("pipewire", "PipeWire")
    assert store.state.current == mode
    assert store.state.status == ""


@pytest.mark.asyncio
async def test_poll_once_failure_sets_unknown(backend, transport):
    backend.set("currentmode", httpx.Response(503, json={"error": "mpd down"}))
    store = SessionStore()
    assert await ModePoller(transport, store).poll_once() is None
    assert store.state.current == UNKNOWN
    assert store.state.status == "Error fetching mode: mpd down"


@pytest.mark.asyncio
async def test_malformed_mode_is_a_failure(backend, transport):
    backend.set("currentmode", ["pipewire"])
    store = SessionStore()
    assert await ModePoller(transport, store).poll_once() is None
    assert store.state.current == UNKNOWN


@pytest.mark.asyncio
async def test_schedule_survives_failures(backend, transport):
    backend.set(
        "currentmode",
        PIPEWIRE,
        httpx.ConnectError("refused"),
        EXCLUSIVE,
    )
    store = SessionStore()
    poller = ModePoller(transport, store, interval=0.01)
    poller.start()
    try:
        await wait_for(lambda: backend.count("currentmode") >= 3)
        await wait_for(lambda: store.state.current.key == "exclusive")
        assert poller.running
    finally:
        poller.cancel()


@pytest.mark.asyncio
async def test_first_poll_is_immediate(backend, transport):
    backend.set("currentmode", PIPEWIRE)
    store = SessionStore()
    poller = ModePoller(transport, store, interval=60)
    poller.start()
    try:
        await wait_for(lambda: store.state.current.key == "pipewire", timeout=1.0)
    finally:
        poller.cancel()


@pytest.mark.asyncio
async def test_cancel_is_effective_once(backend, transport):
    backend.set("currentmode", PIPEWIRE)
    poller = ModePoller(transport, SessionStore(), interval=0.01)
    task = poller.start()

    assert poller.cancel()
    assert not poller.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    assert not poller.running
    with pytest.raises(RuntimeError):
        poller.start()


@pytest.mark.asyncio
async def test_in_flight_poll_is_discarded_after_cancel(backend, transport):
    backend.set("currentmode", PIPEWIRE)
    gate = backend.gate("currentmode")
    store = SessionStore()
    poller = ModePoller(transport, store)

    pending = asyncio.create_task(poller.poll_once())
    await backend.arrived["currentmode"].wait()
    poller.cancel()
    gate.set()

    assert await pending is None
    assert store.state.current.key == ""


@pytest.mark.asyncio
async def test_schedule_survives_observer_error(backend, transport):
    backend.set("currentmode", PIPEWIRE, EXCLUSIVE)
    store = SessionStore()
    failures = []

    def flaky_render(state):
        if not failures:
            failures.append(state)
            raise RuntimeError("render failed once")

    store.add_observer(flaky_render)
    poller = ModePoller(transport, store, interval=0.01)
    poller.start()
    try:
        await wait_for(lambda: backend.count("currentmode") >= 3)
        await wait_for(lambda: store.state.current.key == "exclusive")
        assert poller.running
        assert len(failures) == 1
    finally:
        poller.cancel()


def test_next_deadline_keeps_fixed_cadence():
    # a fast request keeps the next poll one interval after the previous one
    assert next_deadline(100.0, 100.3, 5.0) == 105.0
    # a slow request does not push the schedule back
    assert next_deadline(100.0, 104.9, 5.0) == 105.0
    # missed ticks are skipped, staying aligned to the original cadence
    assert next_deadline(100.0, 112.0, 5.0) == 115.0
    assert next_deadline(100.0, 110.0, 5.0) == 110.0
