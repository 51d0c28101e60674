"""
Unit tests for the collection ProbeRegistry.

Tests registration, ordering, lookup, and programming-error handling.
"""

from __future__ import annotations

import pytest

from envprint.systems.collection.registry import ProbeRegistry, ensure_unique
from envprint.systems.collection.types import ProbeRegistration


def _one() -> int:
    return 1


def _two() -> int:
    return 2


# ─── Tests: Registration ──────────────────────────────────────────


def test_register_and_get():
    registry = ProbeRegistry()
    registry.register("one", _one)

    assert registry.get("one") is _one
    assert "one" in registry
    assert len(registry) == 1


def test_register_duplicate_raises():
    registry = ProbeRegistry()
    registry.register("one", _one)
    with pytest.raises(ValueError, match="already registered"):
        registry.register("one", _two)


def test_register_empty_name_raises():
    registry = ProbeRegistry()
    with pytest.raises(ValueError, match="has no name"):
        registry.register("", _one)


def test_register_non_callable_raises():
    registry = ProbeRegistry()
    with pytest.raises(ValueError, match="not callable"):
        registry.register("value", 42)  # type: ignore[arg-type]


def test_constructor_mapping_registers_in_order():
    registry = ProbeRegistry({"b": _two, "a": _one})
    assert registry.names() == ["b", "a"]


def test_get_unknown_returns_none():
    assert ProbeRegistry().get("missing") is None


# ─── Tests: Snapshots ─────────────────────────────────────────────


def test_registrations_snapshot():
    registry = ProbeRegistry({"one": _one, "two": _two})
    snapshot = registry.registrations()

    assert [r.name for r in snapshot] == ["one", "two"]
    assert snapshot[0].probe is _one

    registry.register("three", _one)
    assert len(snapshot) == 2


def test_iteration_yields_registrations():
    registry = ProbeRegistry({"one": _one})
    assert list(registry) == [ProbeRegistration(name="one", probe=_one)]


def test_ensure_unique_passes_through():
    items = [ProbeRegistration("a", _one), ProbeRegistration("b", _two)]
    assert ensure_unique(iter(items)) == items


def test_ensure_unique_rejects_duplicates():
    items = [ProbeRegistration("a", _one), ProbeRegistration("a", _two)]
    with pytest.raises(ValueError, match="more than once"):
        ensure_unique(items)
