"""
envprint — Collection (Probe Orchestration)

Collection runs an arbitrary set of named probes with bounded concurrency and
per-probe failure isolation, and records one Outcome per probe.

Public interface:
  ProbeRegistry       — name-unique registry of probes
  TaskScheduler       — runs a registry, returns {name: Outcome}
  Outcome             — status / value / error / duration of one probe run
  calculate_coverage  — success ratio over a set of outcomes
"""

from envprint.systems.collection.coverage import calculate_coverage
from envprint.systems.collection.registry import ProbeRegistry
from envprint.systems.collection.scheduler import TaskScheduler, run_probe
from envprint.systems.collection.types import Coverage, Outcome, ProbeRegistration, ProbeStatus

__all__ = [
    "Coverage",
    "Outcome",
    "ProbeRegistration",
    "ProbeRegistry",
    "ProbeStatus",
    "TaskScheduler",
    "calculate_coverage",
    "run_probe",
]
