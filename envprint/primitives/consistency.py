"""
envprint — Consistency Primitives

The findings and report produced by the consistency analyzer. They live in
primitives because the report is itself a Dataset slot: the dataset schema
and the analyzer both depend on it.
"""

from __future__ import annotations

from pydantic import Field, field_serializer

from envprint.primitives.common import FrozenModel


class ConsistencyFinding(FrozenModel):
    """The verdict of one catalogued rule against one Dataset."""

    flag: str
    category: str = ""
    weight: int = Field(gt=0)
    triggered: bool = False
    explanation: str = ""


class ConsistencyReport(FrozenModel):
    """
    Weighted summary of every rule evaluated for a run.

    trust_score is 0–100, higher is more trustworthy. explanations hold the
    messages of triggered rules in catalog order.
    """

    triggered_flags: frozenset[str] = Field(default_factory=frozenset)
    findings_count: int = Field(default=0, ge=0)
    trust_score: int = Field(default=100, ge=0, le=100)
    explanations: list[str] = Field(default_factory=list)
    findings: list[ConsistencyFinding] = Field(default_factory=list)
    digest: str = ""

    @field_serializer("triggered_flags")
    def _serialize_flags(self, flags: frozenset[str]) -> list[str]:
        # Sets have no stable order; sort so serialised reports hash identically.
        return sorted(flags)

    def is_triggered(self, flag: str) -> bool:
        return flag in self.triggered_flags
