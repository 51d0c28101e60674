"""
envprint — Identity

Public interface:
  identify           — Dataset → stable base-62 identifier
  canonical_payload  — the exact bytes that are hashed
  base62_encode      — integer → base-62 string
"""

from envprint.systems.identity.identifier import base62_encode, canonical_payload, identify

__all__ = ["base62_encode", "canonical_payload", "identify"]
