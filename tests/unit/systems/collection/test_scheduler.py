"""
Unit tests for the TaskScheduler.

Tests completeness, failure isolation, the concurrency bound, pacing,
and the single-probe boundary shared with the consistency analyzer.
"""

from __future__ import annotations

import asyncio
import threading
import time

import pytest

from envprint.systems.collection.registry import ProbeRegistry
from envprint.systems.collection.scheduler import (
    TaskScheduler,
    default_concurrency,
    describe_error,
    run_probe,
    run_probes,
)
from envprint.systems.collection.types import ProbeRegistration, ProbeStatus


# ─── Fixtures ─────────────────────────────────────────────────────


def _raises_x():
    raise RuntimeError("x")


class _InFlightTracker:
    """Builds async probes that record how many of them overlap."""

    def __init__(self, delay_s: float = 0.01) -> None:
        self.current = 0
        self.peak = 0
        self._delay_s = delay_s

    def probe(self, value):
        async def _run():
            self.current += 1
            self.peak = max(self.peak, self.current)
            await asyncio.sleep(self._delay_s)
            self.current -= 1
            return value

        return _run


# ─── Tests: run_probe ─────────────────────────────────────────────


@pytest.mark.asyncio
async def test_run_probe_success():
    outcome = await run_probe(lambda: {"a": 1})
    assert outcome.status == ProbeStatus.SUCCESS
    assert outcome.value == {"a": 1}
    assert outcome.duration_ms >= 0


@pytest.mark.asyncio
async def test_run_probe_none_is_skipped():
    outcome = await run_probe(lambda: None)
    assert outcome.status == ProbeStatus.SKIPPED
    assert outcome.value is None
    assert outcome.error is None


@pytest.mark.asyncio
async def test_run_probe_sync_raise_is_error():
    outcome = await run_probe(_raises_x)
    assert outcome.status == ProbeStatus.ERROR
    assert outcome.error == "x"


@pytest.mark.asyncio
async def test_run_probe_async_raise_is_error():
    async def _rejects():
        await asyncio.sleep(0)
        raise ValueError("rejected")

    outcome = await run_probe(_rejects)
    assert outcome.status == ProbeStatus.ERROR
    assert outcome.error == "rejected"


@pytest.mark.asyncio
async def test_run_probe_falsy_values_succeed():
    for value in (0, False, "", []):
        outcome = await run_probe(lambda v=value: v)
        assert outcome.status == ProbeStatus.SUCCESS


@pytest.mark.asyncio
async def test_run_probe_offloads_sync_probe():
    caller = threading.get_ident()
    outcome = await run_probe(threading.get_ident, offload_sync=True)
    assert outcome.status == ProbeStatus.SUCCESS
    assert outcome.value != caller


def test_describe_error_falls_back_to_type_name():
    assert describe_error(KeyError()) == "KeyError"
    assert describe_error(ValueError("")) == "ValueError"
    assert describe_error(RuntimeError("boom")) == "boom"


@pytest.mark.asyncio
async def test_run_probe_own_cancellation_is_error():
    async def _cancels_itself():
        await asyncio.sleep(0)
        raise asyncio.CancelledError()

    outcome = await run_probe(_cancels_itself)
    assert outcome.status == ProbeStatus.ERROR
    assert outcome.error == "CancelledError"


# ─── Tests: Completeness & isolation ──────────────────────────────


@pytest.mark.asyncio
async def test_isolation_example():
    registry = ProbeRegistry({"a": lambda: 1, "b": _raises_x, "c": lambda: None})
    outcomes = await TaskScheduler(concurrency=2, pace_ms=0).run(registry)

    assert list(outcomes) == ["a", "b", "c"]
    assert outcomes["a"].status == ProbeStatus.SUCCESS and outcomes["a"].value == 1
    assert outcomes["b"].status == ProbeStatus.ERROR and outcomes["b"].error == "x"
    assert outcomes["c"].status == ProbeStatus.SKIPPED


@pytest.mark.asyncio
async def test_completeness_when_everything_fails():
    registry = ProbeRegistry({f"p{i}": _raises_x for i in range(9)})
    outcomes = await TaskScheduler(concurrency=3, pace_ms=0).run(registry)

    assert len(outcomes) == 9
    assert all(o.status == ProbeStatus.ERROR for o in outcomes.values())


@pytest.mark.asyncio
async def test_empty_registry_returns_empty_mapping():
    assert await TaskScheduler(concurrency=2).run(ProbeRegistry()) == {}


@pytest.mark.asyncio
async def test_duplicate_registrations_raise_before_running():
    calls: list[str] = []

    def _probe():
        calls.append("ran")
        return 1

    items = [ProbeRegistration("a", _probe), ProbeRegistration("a", _probe)]
    with pytest.raises(ValueError, match="more than once"):
        await TaskScheduler(concurrency=1, pace_ms=0).run(items)
    assert calls == []


@pytest.mark.asyncio
async def test_failure_does_not_delay_siblings():
    async def _slow_fail():
        await asyncio.sleep(0.05)
        raise RuntimeError("late")

    async def _fast():
        return "fast"

    registry = ProbeRegistry({"slow": _slow_fail, "fast": _fast})
    outcomes = await TaskScheduler(concurrency=2, pace_ms=0).run(registry)

    assert outcomes["fast"].duration_ms < outcomes["slow"].duration_ms
    assert outcomes["slow"].error == "late"


@pytest.mark.asyncio
async def test_self_cancelling_probe_does_not_abort_run():
    async def _cancels_itself():
        raise asyncio.CancelledError()

    registry = ProbeRegistry({"a": _cancels_itself, "b": lambda: 1})
    outcomes = await TaskScheduler(concurrency=2, pace_ms=0).run(registry)

    assert outcomes["a"].status == ProbeStatus.ERROR
    assert outcomes["b"].status == ProbeStatus.SUCCESS and outcomes["b"].value == 1


@pytest.mark.asyncio
async def test_cancelling_the_run_propagates():
    async def _slow():
        await asyncio.sleep(5)
        return "late"

    task = asyncio.create_task(
        TaskScheduler(concurrency=1, pace_ms=0).run(ProbeRegistry({"slow": _slow}))
    )
    await asyncio.sleep(0.01)
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task


# ─── Tests: Concurrency bound ─────────────────────────────────────


@pytest.mark.asyncio
async def test_concurrency_bound_respected():
    tracker = _InFlightTracker()
    registry = ProbeRegistry({f"p{i}": tracker.probe(i) for i in range(10)})

    outcomes = await TaskScheduler(concurrency=3, pace_ms=0).run(registry)

    assert len(outcomes) == 10
    assert tracker.peak <= 3
    assert tracker.peak >= 2


@pytest.mark.asyncio
async def test_concurrency_one_is_sequential():
    tracker = _InFlightTracker()
    registry = ProbeRegistry({f"p{i}": tracker.probe(i) for i in range(4)})

    await TaskScheduler(concurrency=1, pace_ms=0).run(registry)

    assert tracker.peak == 1


@pytest.mark.asyncio
async def test_workers_capped_by_probe_count():
    tracker = _InFlightTracker()
    registry = ProbeRegistry({"only": tracker.probe("v")})

    outcomes = await TaskScheduler(concurrency=4, pace_ms=0).run(registry)

    assert outcomes["only"].value == "v"
    assert tracker.peak == 1


def test_invalid_configuration_raises():
    with pytest.raises(ValueError, match="concurrency"):
        TaskScheduler(concurrency=0)
    with pytest.raises(ValueError, match="pace_ms"):
        TaskScheduler(concurrency=1, pace_ms=-1)


def test_default_concurrency_within_bounds():
    assert 1 <= default_concurrency() <= 4
    assert 1 <= TaskScheduler().concurrency <= 4


# ─── Tests: Pacing ────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_pacing_between_probes_on_one_worker():
    registry = ProbeRegistry({f"p{i}": (lambda i=i: i) for i in range(3)})

    start = time.perf_counter()
    await TaskScheduler(concurrency=1, pace_ms=30).run(registry)
    elapsed_ms = (time.perf_counter() - start) * 1000

    # Two pauses: none after the last probe.
    assert elapsed_ms >= 55


@pytest.mark.asyncio
async def test_no_pause_after_last_probe():
    registry = ProbeRegistry({"only": lambda: 1})

    start = time.perf_counter()
    await TaskScheduler(concurrency=1, pace_ms=500).run(registry)
    elapsed_ms = (time.perf_counter() - start) * 1000

    assert elapsed_ms < 400


@pytest.mark.asyncio
async def test_run_probes_shorthand():
    outcomes = await run_probes([ProbeRegistration("a", lambda: "v")], concurrency=1, pace_ms=0)
    assert outcomes["a"].value == "v"
