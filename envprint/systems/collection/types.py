"""
envprint — Collection Types

Design notes:
- An Outcome is the record of running one probe exactly once. Its status is
  the tag of a three-state union: the probe produced a value (SUCCESS),
  deliberately abstained by returning None (SKIPPED), or raised (ERROR).
  Construct outcomes through the classmethods so the tag and payload can
  never disagree.
- Outcomes are frozen. The scheduler creates them; everything downstream only
  reads them.
"""

from __future__ import annotations

import enum
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from pydantic import Field, model_validator

from envprint.primitives.common import FrozenModel

# A probe is a zero-argument callable, sync or async, returning a value or None.
Probe = Callable[[], "Awaitable[Any] | Any"]


class ProbeStatus(enum.StrEnum):
    SUCCESS = "success"
    ERROR = "error"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class ProbeRegistration:
    """A named probe. Immutable for the duration of a run."""

    name: str
    probe: Probe


class Outcome(FrozenModel):
    """The recorded result of running one probe once."""

    status: ProbeStatus
    value: Any = None
    error: str | None = None
    duration_ms: float = Field(default=0.0, ge=0.0)

    @model_validator(mode="after")
    def _check_tag(self) -> Outcome:
        if self.status == ProbeStatus.SUCCESS and self.value is None:
            raise ValueError("A successful outcome must carry a value")
        if self.status != ProbeStatus.SUCCESS and self.value is not None:
            raise ValueError(f"A {self.status.value} outcome cannot carry a value")
        if self.status == ProbeStatus.ERROR and not self.error:
            raise ValueError("An error outcome must carry an error message")
        return self

    @classmethod
    def succeeded(cls, value: Any, duration_ms: float = 0.0) -> Outcome:
        return cls(status=ProbeStatus.SUCCESS, value=value, duration_ms=duration_ms)

    @classmethod
    def skipped(cls, duration_ms: float = 0.0) -> Outcome:
        return cls(status=ProbeStatus.SKIPPED, duration_ms=duration_ms)

    @classmethod
    def failed(cls, error: str, duration_ms: float = 0.0) -> Outcome:
        return cls(status=ProbeStatus.ERROR, error=error, duration_ms=duration_ms)

    @property
    def ok(self) -> bool:
        return self.status == ProbeStatus.SUCCESS


class Coverage(FrozenModel):
    """Fraction of attempted (non-abstaining) probes that succeeded."""

    ratio: float = Field(ge=0.0, le=1.0)
    successful: int = Field(ge=0)
    failed: int = Field(ge=0)
    skipped: int = Field(ge=0)

    @property
    def attempted(self) -> int:
        return self.successful + self.failed
