"""
envprint — Consistency Analyzer

Runs every catalogued rule against a Dataset and folds the verdicts into a
ConsistencyReport with a weighted 0–100 trust score.

Scoring:
  triggered_weight = Σ weight(flag) over triggered flags
  max_weight       = Σ weight table + DEFAULT_WEIGHT per triggered flag
                     that the table does not know
  trust_score      = clamp(round_half_up(100 × (1 − triggered / max)), 0, 100)

The denominator is the table sum, not the sum over rules evaluated, so the
score means the same thing whichever rules actually had evidence to look at.
An empty Dataset triggers nothing and scores 100.
"""

from __future__ import annotations

import hashlib
import json
import math
from collections.abc import Sequence

import structlog

from envprint.config import ConsistencyConfig
from envprint.primitives.consistency import ConsistencyFinding, ConsistencyReport
from envprint.systems.consistency.rules import (
    DEFAULT_WEIGHT,
    RULE_CATALOG,
    RULE_WEIGHTS,
    ConsistencyRule,
)
from envprint.systems.dataset.types import Dataset

logger = structlog.get_logger().bind(system="consistency.analyzer")


def compute_trust_score(triggered_weight: int, max_weight: int) -> int:
    if max_weight <= 0:
        return 100
    raw = 100.0 * (1.0 - triggered_weight / max_weight)
    return max(0, min(100, math.floor(raw + 0.5)))


def report_digest(report: ConsistencyReport) -> str:
    """SHA-256 over the canonical JSON of the report's verdict fields."""
    canonical = json.dumps(
        {
            "triggered_flags": sorted(report.triggered_flags),
            "findings_count": report.findings_count,
            "trust_score": report.trust_score,
            "explanations": report.explanations,
        },
        sort_keys=True,
        separators=(",", ":"),
    )
    return hashlib.sha256(canonical.encode()).hexdigest()


class ConsistencyAnalyzer:
    """
    Evaluates the rule catalog (plus any extra rules) against Datasets.

    The analyzer is stateless between calls; construct once and reuse.
    """

    def __init__(
        self,
        config: ConsistencyConfig | None = None,
        extra_rules: Sequence[ConsistencyRule] = (),
    ) -> None:
        self._config = config or ConsistencyConfig()
        self._rules: tuple[ConsistencyRule, ...] = (*RULE_CATALOG, *extra_rules)

        seen: set[str] = set()
        for rule in self._rules:
            if rule.flag in seen:
                raise ValueError(f"Consistency rule '{rule.flag}' defined more than once")
            seen.add(rule.flag)

        table = dict(RULE_WEIGHTS)
        for rule in extra_rules:
            if rule.weight is not None:
                table[rule.flag] = rule.weight
        table.update(self._config.weight_overrides)
        for flag, weight in table.items():
            if weight <= 0:
                raise ValueError(f"Weight for '{flag}' must be positive, got {weight}")
        self._weights = table
        self._logger = logger

    @property
    def rules(self) -> tuple[ConsistencyRule, ...]:
        return self._rules

    @property
    def weights(self) -> dict[str, int]:
        return dict(self._weights)

    def weight_of(self, flag: str) -> int:
        return self._weights.get(flag, DEFAULT_WEIGHT)

    def analyze(self, dataset: Dataset) -> ConsistencyReport:
        findings: list[ConsistencyFinding] = []
        explanations: list[str] = []
        triggered: set[str] = set()

        for rule in self._rules:
            explanation = rule.check(dataset, self._config)
            fired = explanation is not None
            findings.append(
                ConsistencyFinding(
                    flag=rule.flag,
                    category=str(rule.category),
                    weight=self.weight_of(rule.flag),
                    triggered=fired,
                    explanation=explanation or "",
                )
            )
            if fired:
                triggered.add(rule.flag)
                explanations.append(explanation)

        triggered_weight = sum(self.weight_of(flag) for flag in triggered)
        unknown = sum(1 for flag in triggered if flag not in self._weights)
        max_weight = sum(self._weights.values()) + DEFAULT_WEIGHT * unknown
        score = compute_trust_score(triggered_weight, max_weight)

        report = ConsistencyReport(
            triggered_flags=frozenset(triggered),
            findings_count=len(triggered),
            trust_score=score,
            explanations=explanations,
            findings=findings,
        )
        report = report.model_copy(update={"digest": report_digest(report)})

        self._logger.debug(
            "consistency_analyzed",
            findings=len(triggered),
            trust_score=score,
            triggered_weight=triggered_weight,
            max_weight=max_weight,
        )
        return report


def analyze(dataset: Dataset, config: ConsistencyConfig | None = None) -> ConsistencyReport:
    """One-shot analysis with the default catalog."""
    return ConsistencyAnalyzer(config).analyze(dataset)
