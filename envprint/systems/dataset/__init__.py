"""
envprint — Dataset (Outcome Aggregation)

Public interface:
  Dataset     — closed, typed record with one optional slot per known probe
  aggregate   — fold {name: Outcome} into a Dataset
"""

from envprint.systems.dataset.aggregator import aggregate, coerce_slot
from envprint.systems.dataset.types import CONSISTENCY_SLOT, DATASET_SLOTS, PROBE_SLOTS, Dataset

__all__ = [
    "CONSISTENCY_SLOT",
    "DATASET_SLOTS",
    "PROBE_SLOTS",
    "Dataset",
    "aggregate",
    "coerce_slot",
]
