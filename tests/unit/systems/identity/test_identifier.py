"""
Unit tests for the identifier generator.

Tests determinism, sensitivity to slot changes, independence from
construction order, and the base-62 encoding.
"""

from __future__ import annotations

import json
import os
import subprocess
import sys
import textwrap
from pathlib import Path

import pytest

from envprint.primitives.consistency import ConsistencyReport
from envprint.primitives.signals import ScreenSignal, TimezoneSignal
from envprint.systems.collection.types import Outcome
from envprint.systems.dataset.aggregator import aggregate
from envprint.systems.dataset.types import Dataset
from envprint.systems.identity.identifier import (
    BASE62_ALPHABET,
    base62_encode,
    canonical_payload,
    identify,
)


def _dataset(**overrides) -> Dataset:
    base = {
        "platform": "Linux",
        "hardware_concurrency": 8,
        "timezone": TimezoneSignal(timezone="Europe/Berlin", timezone_offset=-60),
        "screen": ScreenSignal(width=2560, height=1440, avail_width=2560, avail_height=1400),
    }
    base.update(overrides)
    return Dataset(**base)


# ─── Tests: base62 ────────────────────────────────────────────────


class TestBase62:
    def test_known_values(self):
        assert base62_encode(0) == "0"
        assert base62_encode(9) == "9"
        assert base62_encode(10) == "A"
        assert base62_encode(61) == "z"
        assert base62_encode(62) == "10"
        assert base62_encode(62 * 62) == "100"

    def test_negative_rejected(self):
        with pytest.raises(ValueError):
            base62_encode(-1)

    def test_alphabet_is_url_safe(self):
        assert len(BASE62_ALPHABET) == 62
        assert BASE62_ALPHABET.isalnum()


# ─── Tests: identify ──────────────────────────────────────────────


class TestIdentify:
    def test_deterministic(self):
        assert identify(_dataset()) == identify(_dataset())

    def test_output_is_base62(self):
        identifier = identify(_dataset())
        assert identifier
        assert set(identifier) <= set(BASE62_ALPHABET)
        # 128 bits fit in at most 22 base-62 digits
        assert len(identifier) <= 22

    def test_sensitive_to_any_slot(self):
        reference = identify(_dataset())
        assert identify(_dataset(platform="Darwin")) != reference
        assert identify(_dataset(hardware_concurrency=4)) != reference
        assert identify(_dataset(vendor="Google Inc.")) != reference
        assert (
            identify(_dataset(timezone=TimezoneSignal(timezone="Europe/Berlin", timezone_offset=-120)))
            != reference
        )

    def test_independent_of_outcome_order(self):
        outcomes = {
            "platform": Outcome.succeeded("Linux"),
            "hardware_concurrency": Outcome.succeeded(8),
            "vendor": Outcome.succeeded("Google Inc."),
        }
        reversed_outcomes = dict(reversed(list(outcomes.items())))
        assert identify(aggregate(outcomes)) == identify(aggregate(reversed_outcomes))

    def test_empty_dataset_has_identifier(self):
        assert identify(Dataset()) == identify(Dataset())

    def test_consistency_slot_contributes(self):
        plain = _dataset()
        with_report = plain.model_copy(update={"consistency": ConsistencyReport(trust_score=80)})
        assert identify(plain) != identify(with_report)


# ─── Tests: canonical payload ─────────────────────────────────────


def test_canonical_payload_is_sorted_and_compact():
    payload = canonical_payload(_dataset())
    decoded = json.loads(payload)

    assert list(decoded) == sorted(decoded)
    assert b" " not in payload
    assert "vendor" not in decoded


def test_canonical_payload_sorts_flag_sets():
    report = ConsistencyReport(triggered_flags=frozenset({"b_flag", "a_flag"}), findings_count=2)
    decoded = json.loads(canonical_payload(Dataset(consistency=report)))
    assert decoded["consistency"]["triggered_flags"] == ["a_flag", "b_flag"]


# ─── Tests: cross-process stability ───────────────────────────────

_REPO_ROOT = Path(__file__).resolve().parents[4]

_IDENTIFY_WITH_SETS = textwrap.dedent("""
    from envprint.systems.collection.types import Outcome
    from envprint.systems.dataset.aggregator import aggregate
    from envprint.systems.identity.identifier import identify

    extensions = {f"EXT_ext_{i}" for i in range(32)}
    dataset = aggregate({
        "platform": Outcome.succeeded("Linux"),
        "vendor_flavors": Outcome.succeeded({"chrome", "brave", "edge", "opera"}),
        "webgl": Outcome.succeeded({
            "vendor": "Mesa",
            "renderer": "llvmpipe",
            "parameters": {"extensions": extensions},
        }),
    })
    assert dataset.webgl is not None
    print(identify(dataset))
""")


def _identify_in_subprocess(hash_seed: str) -> str:
    env = {**os.environ, "PYTHONHASHSEED": hash_seed, "PYTHONPATH": str(_REPO_ROOT)}
    completed = subprocess.run(
        [sys.executable, "-c", _IDENTIFY_WITH_SETS],
        env=env,
        capture_output=True,
        text=True,
        check=True,
    )
    return completed.stdout.strip()


def test_identifier_independent_of_hash_seed():
    first = _identify_in_subprocess("1")
    second = _identify_in_subprocess("2")

    assert first
    assert first == second
