"""
envprint — Coverage Calculator

Coverage is the fraction of attempted probes that succeeded. Probes that
abstained (SKIPPED) are excluded from both sides of the ratio: a signal that
does not apply to this environment neither penalises nor inflates the score.
"""

from __future__ import annotations

from collections.abc import Mapping

from envprint.systems.collection.types import Coverage, Outcome, ProbeStatus


def calculate_coverage(outcomes: Mapping[str, Outcome]) -> Coverage:
    successful = failed = skipped = 0
    for outcome in outcomes.values():
        if outcome.status == ProbeStatus.SUCCESS:
            successful += 1
        elif outcome.status == ProbeStatus.ERROR:
            failed += 1
        else:
            skipped += 1

    considered = successful + failed
    ratio = successful / considered if considered else 0.0
    return Coverage(ratio=ratio, successful=successful, failed=failed, skipped=skipped)
