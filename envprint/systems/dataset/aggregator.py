"""
envprint — Outcome Aggregator

Folds a named outcome set into the typed Dataset.

The fold is pure and total: for every known slot, copy the value of the
matching SUCCESS outcome; otherwise leave the slot absent. Outcome names
that match no slot are ignored here (they remain visible in the raw outcome
map carried by the Result).

A SUCCESS value that does not fit its slot's schema cannot be represented in
the typed Dataset. The slot is left absent and the mismatch is logged; the
aggregator never raises.
"""

from __future__ import annotations

from collections.abc import Mapping
from functools import lru_cache
from typing import Any

import structlog
from pydantic import TypeAdapter, ValidationError

from envprint.systems.collection.types import Outcome, ProbeStatus
from envprint.systems.dataset.types import DATASET_SLOTS, Dataset

logger = structlog.get_logger().bind(system="dataset.aggregator")


@lru_cache(maxsize=None)
def _slot_adapter(slot: str) -> TypeAdapter[Any]:
    return TypeAdapter(Dataset.model_fields[slot].annotation)


def _sort_key(item: Any) -> tuple[str, str]:
    return (type(item).__name__, repr(item))


def canonicalise(value: Any) -> Any:
    """
    Replace sets in a raw probe value with sorted lists.

    Iteration order of a set depends on the interpreter's hash seed, so a set
    would otherwise reach the Dataset in a different order in every process.
    """
    if isinstance(value, (set, frozenset)):
        return sorted((canonicalise(item) for item in value), key=_sort_key)
    if isinstance(value, Mapping):
        return {key: canonicalise(item) for key, item in value.items()}
    if isinstance(value, list):
        return [canonicalise(item) for item in value]
    if isinstance(value, tuple):
        return tuple(canonicalise(item) for item in value)
    return value


def coerce_slot(slot: str, value: Any) -> Any:
    """
    Validate a raw probe value against a slot's type.

    Raises KeyError for an unknown slot and pydantic.ValidationError for a
    value that does not conform.
    """
    if slot not in Dataset.model_fields:
        raise KeyError(slot)
    return _slot_adapter(slot).validate_python(canonicalise(value))


def aggregate(outcomes: Mapping[str, Outcome]) -> Dataset:
    """Build the Dataset from every SUCCESS outcome whose name is a known slot."""
    slots: dict[str, Any] = {}
    for slot in DATASET_SLOTS:
        outcome = outcomes.get(slot)
        if outcome is None or outcome.status != ProbeStatus.SUCCESS:
            continue
        try:
            slots[slot] = coerce_slot(slot, outcome.value)
        except ValidationError as exc:
            logger.warning(
                "slot_value_rejected",
                slot=slot,
                errors=exc.error_count(),
                detail=str(exc)[:200],
            )
    return Dataset(**slots)


def unknown_outcomes(outcomes: Mapping[str, Outcome]) -> list[str]:
    """Outcome names that have no Dataset slot."""
    return [name for name in outcomes if name not in Dataset.model_fields]
