"""
envprint — Configuration System

All configuration is Pydantic-validated and loaded from:
1. An optional YAML file (defaults)
2. Environment variables (overrides)

Every tunable parameter of the engine lives here. The consistency thresholds
are heuristic tuning choices, not compatibility requirements. Retune them
freely, but keep the relative ordering of rule severities.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# ─── Sub-configs ──────────────────────────────────────────────────


class CollectionConfig(BaseModel):
    # None → derived from the host's core count, clamped to 1–4
    concurrency: int | None = Field(default=None, ge=1)
    # Pause between consecutive probes on the same worker
    pace_ms: float = Field(default=12.0, ge=0.0)
    # Run plain (non-async) probes in worker threads instead of on the loop
    offload_sync_probes: bool = False


class ConsistencyConfig(BaseModel):
    # Geometry
    min_device_pixel_ratio: float = 0.5
    max_device_pixel_ratio: float = 5.0
    # Capability
    suspicious_core_counts: list[int] = Field(default_factory=lambda: [0, 1])
    max_plausible_cores: int = 128
    # Enumeration
    min_font_count: int = 5
    max_font_count: int = 500
    # Time / locale. UTC+14 is the furthest real offset
    max_timezone_offset_minutes: int = 840
    # Rendering channel
    min_canvas_hash_length: int = 10
    min_canvas_data_url_length: int = 100
    # Audio
    standard_sample_rates: list[int] = Field(default_factory=lambda: [44_100, 48_000, 96_000])
    # Tamper
    math_constant_tolerance: float = 1e-4
    # Aggregated privacy tooling
    benign_resistance_signals: list[str] = Field(
        default_factory=lambda: [
            "device_events_blocked",
            "battery_missing",
            "notification_missing",
            "permissions_inconsistent",
            "connection_rtt_zero",
            "navigator_inconsistent",
            "screen_inconsistent",
            "window_size_inconsistent",
        ]
    )
    privacy_signals_with_tool_flag: int = 4
    privacy_signals_regardless: int = 8
    # Per-flag weight overrides, e.g. {"canvas_blocked": 2}
    weight_overrides: dict[str, int] = Field(default_factory=dict)


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: str = "console"  # "console" | "json"


# ─── Root Configuration ──────────────────────────────────────────


class EnvprintConfig(BaseSettings):
    """
    Root configuration. Loads from YAML, overridable by env vars.
    """

    model_config = SettingsConfigDict(
        env_prefix="ENVPRINT_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    collection: CollectionConfig = Field(default_factory=CollectionConfig)
    consistency: ConsistencyConfig = Field(default_factory=ConsistencyConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override into base."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_config(config_path: str | Path | None = None) -> EnvprintConfig:
    """
    Load configuration from a YAML file, then apply environment variable overrides.
    """
    raw: dict[str, Any] = {}

    if config_path:
        path = Path(config_path)
        if path.exists():
            with open(path) as f:
                raw = yaml.safe_load(f) or {}

    overrides: dict[str, Any] = {}
    if concurrency := os.environ.get("ENVPRINT_CONCURRENCY"):
        overrides.setdefault("collection", {})["concurrency"] = int(concurrency)
    if pace := os.environ.get("ENVPRINT_PACE_MS"):
        overrides.setdefault("collection", {})["pace_ms"] = float(pace)
    if level := os.environ.get("ENVPRINT_LOG_LEVEL"):
        overrides.setdefault("logging", {})["level"] = level
    if fmt := os.environ.get("ENVPRINT_LOG_FORMAT"):
        overrides.setdefault("logging", {})["format"] = fmt

    return EnvprintConfig(**_deep_merge(raw, overrides))
