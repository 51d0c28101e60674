"""
envprint — Identifier Generator

Derives a compact, stable identifier from a Dataset.

The Dataset is dumped in JSON mode with absent slots omitted, serialised
with sorted keys and compact separators, hashed with SHA-256 and the first
128 bits of the digest encoded in base 62. Equal Datasets always yield equal
identifiers; any slot change yields a different one with overwhelming
probability. The identifier is not a security boundary.
"""

from __future__ import annotations

import hashlib
import json

from envprint.systems.dataset.types import Dataset

BASE62_ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"
IDENTIFIER_BITS = 128


def base62_encode(value: int) -> str:
    if value < 0:
        raise ValueError(f"base62_encode expects a non-negative integer, got {value}")
    if value == 0:
        return BASE62_ALPHABET[0]
    digits: list[str] = []
    while value:
        value, remainder = divmod(value, 62)
        digits.append(BASE62_ALPHABET[remainder])
    return "".join(reversed(digits))


def canonical_payload(dataset: Dataset) -> bytes:
    """Canonical byte form of a Dataset: sorted keys, no whitespace, no absent slots."""
    data = dataset.model_dump(mode="json", exclude_none=True)
    return json.dumps(data, sort_keys=True, separators=(",", ":"), ensure_ascii=False).encode()


def identify(dataset: Dataset) -> str:
    digest = hashlib.sha256(canonical_payload(dataset)).digest()
    truncated = int.from_bytes(digest[: IDENTIFIER_BITS // 8], "big")
    return base62_encode(truncated)
