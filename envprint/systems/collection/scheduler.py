"""
envprint — Task Scheduler

Runs every registered probe exactly once under bounded, cooperative
concurrency and returns one Outcome per probe name.

Execution model:
  - A fixed pool of ``min(concurrency, len(probes))`` asyncio workers pulls
    probes from a shared cursor. At most ``concurrency`` probes are in flight
    at any instant.
  - After settling a probe, a worker pauses for ``pace_ms`` before taking its
    next probe so a long run does not monopolise the event loop. The pause is
    skipped once no probe remains to be taken.
  - Every probe runs inside the single-probe boundary (``run_probe``). An
    exception there becomes an ERROR outcome and never reaches a sibling
    probe, the worker, or the caller.

There is no cancellation, timeout, or retry. A probe that needs a time bound
must race its own work against a timer and settle on expiry; until it does,
it occupies one worker.

Completion order is not guaranteed. Only the completeness of the returned
mapping and per-probe isolation are.
"""

from __future__ import annotations

import asyncio
import inspect
import os
import time
from collections.abc import Iterable

import structlog

from envprint.systems.collection.registry import ProbeRegistry, ensure_unique
from envprint.systems.collection.types import Outcome, Probe, ProbeRegistration, ProbeStatus

logger = structlog.get_logger()

DEFAULT_PACE_MS = 12.0
MAX_DEFAULT_CONCURRENCY = 4


def default_concurrency() -> int:
    """Half the host's logical cores, clamped to 1–4. Two when the count is unknown."""
    cores = os.cpu_count()
    if not cores:
        return 2
    return min(MAX_DEFAULT_CONCURRENCY, max(1, cores // 2))


def describe_error(exc: BaseException) -> str:
    """Human-readable cause for an ERROR outcome."""
    return str(exc) or type(exc).__name__


def _being_cancelled() -> bool:
    task = asyncio.current_task()
    return task is not None and task.cancelling() > 0


async def run_probe(probe: Probe, *, offload_sync: bool = False) -> Outcome:
    """
    Run a single probe and settle it into an Outcome.

    This is the isolation boundary: whatever the probe does (return a value,
    return None, raise synchronously, or reject asynchronously), the caller
    receives an Outcome. Duration covers dispatch to settlement.

    A CancelledError raised by the probe itself is a failure like any other.
    It is re-raised only when the task running the probe is being cancelled.
    """
    start = time.perf_counter()
    try:
        if offload_sync and not inspect.iscoroutinefunction(probe):
            value = await asyncio.to_thread(probe)
        else:
            value = probe()
        if inspect.isawaitable(value):
            value = await value
    except (asyncio.CancelledError, Exception) as exc:
        if isinstance(exc, asyncio.CancelledError) and _being_cancelled():
            raise
        return Outcome.failed(
            describe_error(exc),
            duration_ms=(time.perf_counter() - start) * 1000,
        )

    duration_ms = (time.perf_counter() - start) * 1000
    if value is None:
        return Outcome.skipped(duration_ms=duration_ms)
    return Outcome.succeeded(value, duration_ms=duration_ms)


class TaskScheduler:
    """
    Bounded-concurrency runner for a probe set.

    Stateless between runs. One scheduler may be reused for any number of
    runs, sequentially or concurrently.
    """

    def __init__(
        self,
        concurrency: int | None = None,
        pace_ms: float = DEFAULT_PACE_MS,
        *,
        offload_sync_probes: bool = False,
    ) -> None:
        resolved = default_concurrency() if concurrency is None else concurrency
        if resolved < 1:
            raise ValueError(f"concurrency must be >= 1, got {resolved}")
        if pace_ms < 0:
            raise ValueError(f"pace_ms must be >= 0, got {pace_ms}")
        self._concurrency = resolved
        self._pace_ms = pace_ms
        self._offload_sync = offload_sync_probes
        self._logger = logger.bind(system="collection.scheduler")

    @property
    def concurrency(self) -> int:
        return self._concurrency

    @property
    def pace_ms(self) -> float:
        return self._pace_ms

    async def run(
        self,
        registrations: ProbeRegistry | Iterable[ProbeRegistration],
    ) -> dict[str, Outcome]:
        """
        Execute every registration once and return ``{name: Outcome}``.

        The result has exactly one entry per registration regardless of how
        many probes fail. Raises ValueError only for duplicate names, before
        any probe has started.
        """
        if isinstance(registrations, ProbeRegistry):
            items = registrations.registrations()
        else:
            items = ensure_unique(registrations)

        outcomes: dict[str, Outcome] = {}
        if not items:
            return outcomes

        cursor = 0
        pace_s = self._pace_ms / 1000
        worker_count = min(self._concurrency, len(items))

        self._logger.debug(
            "scheduler_start",
            probes=len(items),
            workers=worker_count,
            pace_ms=self._pace_ms,
        )

        async def worker(worker_index: int) -> None:
            nonlocal cursor
            while cursor < len(items):
                registration = items[cursor]
                cursor += 1

                outcome = await run_probe(registration.probe, offload_sync=self._offload_sync)
                outcomes[registration.name] = outcome

                if outcome.status == ProbeStatus.ERROR:
                    self._logger.debug(
                        "probe_failed",
                        probe=registration.name,
                        worker=worker_index,
                        error=(outcome.error or "")[:200],
                    )

                if cursor < len(items) and pace_s > 0:
                    await asyncio.sleep(pace_s)

        await asyncio.gather(*(worker(i) for i in range(worker_count)))

        # Preserve registration order in the returned mapping.
        return {registration.name: outcomes[registration.name] for registration in items}

    def __repr__(self) -> str:
        return f"<TaskScheduler concurrency={self._concurrency} pace_ms={self._pace_ms}>"


async def run_probes(
    registrations: ProbeRegistry | Iterable[ProbeRegistration],
    concurrency: int | None = None,
    pace_ms: float = DEFAULT_PACE_MS,
) -> dict[str, Outcome]:
    """Functional shorthand for ``TaskScheduler(concurrency, pace_ms).run(registrations)``."""
    return await TaskScheduler(concurrency, pace_ms).run(registrations)
