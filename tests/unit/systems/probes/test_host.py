"""
Smoke tests for the host probe set.

These run against the real interpreter, so they assert shapes rather than
values: every probe either abstains or produces a value its Dataset slot
accepts.
"""

from __future__ import annotations

import math

import pytest

from envprint.primitives.signals import ScreenFrameSignal
from envprint.probes.host import (
    HOST_PROBES,
    default_registry,
    probe_architecture,
    probe_math,
    probe_timezone,
)
from envprint.probes.screen_frame import ScreenFrameCache
from envprint.systems.collection.scheduler import TaskScheduler
from envprint.systems.collection.types import ProbeStatus
from envprint.systems.dataset.aggregator import aggregate, coerce_slot
from envprint.systems.dataset.types import PROBE_SLOTS


def test_every_host_probe_names_a_slot():
    assert set(HOST_PROBES) <= set(PROBE_SLOTS)


@pytest.mark.parametrize("name", sorted(HOST_PROBES))
def test_host_probe_value_fits_slot(name):
    value = HOST_PROBES[name]()
    if value is not None:
        coerce_slot(name, value)


def test_math_probe_reports_true_constants():
    value = probe_math()
    assert value["constants"]["pi"] == math.pi
    assert value["constants"]["e"] == math.e
    assert len(value["hash"]) == 64


def test_math_probe_hash_is_stable():
    assert probe_math()["hash"] == probe_math()["hash"]


def test_architecture_is_pointer_width():
    assert probe_architecture() in (32, 64)


def test_timezone_offset_within_real_range():
    value = probe_timezone()
    if value is not None:
        assert abs(value["timezone_offset"]) <= 840


def test_default_registry_contents():
    registry = default_registry()
    assert registry.names() == list(HOST_PROBES)
    assert "screen_frame" not in registry


def test_default_registry_with_frame_reader():
    cache = ScreenFrameCache()
    registry = default_registry(cache, frame_reader=lambda: ScreenFrameSignal(bottom=40))
    assert "screen_frame" in registry


@pytest.mark.asyncio
async def test_host_registry_runs_without_errors():
    cache = ScreenFrameCache()
    registry = default_registry(cache, frame_reader=lambda: ScreenFrameSignal(bottom=40))

    outcomes = await TaskScheduler(concurrency=2, pace_ms=0).run(registry)
    dataset = aggregate(outcomes)

    assert all(o.status != ProbeStatus.ERROR for o in outcomes.values())
    assert dataset.math is not None
    assert dataset.architecture in (32, 64)
    assert dataset.screen_frame == ScreenFrameSignal(bottom=40)
    assert cache.get() == ScreenFrameSignal(bottom=40)
