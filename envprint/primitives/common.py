"""
envprint — Common Primitives

Shared base classes and utilities used across all systems.
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict
from ulid import ULID


def new_id() -> str:
    """Generate a new ULID string. Time-sortable, globally unique."""
    return str(ULID())


def utc_now() -> datetime:
    """Current UTC time, timezone-aware."""
    return datetime.now(timezone.utc)


# ─── Base Models ──────────────────────────────────────────────────


class EnvprintBaseModel(BaseModel):
    """Base model for all envprint primitives."""

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)


class FrozenModel(EnvprintBaseModel):
    """Immutable value object. Signals and outcomes are never mutated after creation."""

    model_config = ConfigDict(populate_by_name=True, from_attributes=True, frozen=True)
