"""
envprint — Consistency (Cross-Signal Anomaly Detection)

Public interface:
  ConsistencyAnalyzer  — evaluates the rule catalog against a Dataset
  ConsistencyRule      — a named, weighted heuristic
  RULE_CATALOG         — the built-in rules, in report order
  RULE_WEIGHTS         — severity table used as the scoring denominator
"""

from envprint.systems.consistency.analyzer import (
    ConsistencyAnalyzer,
    analyze,
    compute_trust_score,
)
from envprint.systems.consistency.rules import (
    DEFAULT_WEIGHT,
    RULE_CATALOG,
    RULE_WEIGHTS,
    TOTAL_RULE_WEIGHT,
    ConsistencyRule,
    RuleCategory,
)

__all__ = [
    "DEFAULT_WEIGHT",
    "RULE_CATALOG",
    "RULE_WEIGHTS",
    "TOTAL_RULE_WEIGHT",
    "ConsistencyAnalyzer",
    "ConsistencyRule",
    "RuleCategory",
    "analyze",
    "compute_trust_score",
]
