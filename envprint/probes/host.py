"""
envprint — Host Probes

A default probe set for a Python host. Each probe reads one facet of the
running environment through the standard library and returns a value shaped
for its Dataset slot, or None when the facet is not observable here (the
scheduler records that as SKIPPED).

Probes are plain callables; they are cheap enough to run inline on the loop.
"""

from __future__ import annotations

import hashlib
import json
import locale
import math
import os
import platform
import struct
import time
from datetime import datetime
from typing import Any

from envprint.probes.screen_frame import FrameReader, ScreenFrameCache, ScreenFrameProbe
from envprint.systems.collection.registry import ProbeRegistry


def probe_platform() -> str | None:
    return platform.system() or None


def probe_hardware_concurrency() -> int | None:
    return os.cpu_count()


def probe_architecture() -> int:
    # Pointer width in bits
    return struct.calcsize("P") * 8


def probe_os_cpu() -> str | None:
    machine = platform.machine()
    if not machine:
        return None
    return f"{platform.system()} {machine}".strip()


def probe_cpu_class() -> str | None:
    return platform.processor() or None


def _current_locale() -> str | None:
    try:
        name = locale.getlocale()[0]
    except ValueError:
        return None
    if not name or name == "C":
        return None
    return name.replace("_", "-")


def _zone_name() -> str | None:
    if tz := os.environ.get("TZ"):
        return tz.lstrip(":")
    try:
        target = os.path.realpath("/etc/localtime")
    except OSError:
        target = ""
    marker = "zoneinfo/"
    if marker in target:
        return target.split(marker, 1)[1]
    return time.tzname[0] or None


def probe_timezone() -> dict[str, Any] | None:
    now = datetime.now().astimezone()
    offset = now.utcoffset()
    name = _zone_name()
    if offset is None or name is None:
        return None
    return {
        "timezone": name,
        # Minutes west of UTC
        "timezone_offset": -int(offset.total_seconds() // 60),
        "locale": _current_locale() or "",
    }


def probe_date_time_locale() -> str | None:
    return _current_locale()


def probe_languages() -> list[list[str]] | None:
    """Preferred languages, most preferred first; None when the host declares none."""
    languages: list[str] = []
    if preference := os.environ.get("LANGUAGE"):
        languages.extend(part.replace("_", "-") for part in preference.split(":") if part)
    current = _current_locale()
    if current and current not in languages:
        languages.append(current)
    if not languages:
        return None
    return [languages]


def probe_math() -> dict[str, Any]:
    data = {
        "acos": math.acos(0.123124234234234242),
        "acosh": math.acosh(1e308),
        "asin": math.asin(0.123124234234234242),
        "asinh": math.asinh(1),
        "atan": math.atan(0.5),
        "atanh": math.atanh(0.5),
        "cbrt": math.copysign(abs(100) ** (1 / 3), 100),
        "cos": math.cos(21 * math.log(10)),
        "cosh": math.cosh(1),
        "exp": math.exp(1),
        "expm1": math.expm1(1),
        "log1p": math.log1p(10),
        "sin": math.sin(-1e300),
        "sinh": math.sinh(1),
        "tan": math.tan(-1e300),
        "tanh": math.tanh(1),
    }
    constants = {
        "pi": math.pi,
        "e": math.e,
        "ln10": math.log(10),
        "ln2": math.log(2),
        "log10e": math.log10(math.e),
        "log2e": math.log2(math.e),
        "sqrt1_2": math.sqrt(0.5),
        "sqrt2": math.sqrt(2),
    }
    canonical = json.dumps(data, sort_keys=True, separators=(",", ":"))
    return {
        "hash": hashlib.sha256(canonical.encode()).hexdigest(),
        "data": data,
        "constants": constants,
    }


def probe_device_memory() -> float | None:
    """Physical memory in GiB, where the host exposes it."""
    if not hasattr(os, "sysconf"):
        return None
    try:
        pages = os.sysconf("SC_PHYS_PAGES")
        page_size = os.sysconf("SC_PAGE_SIZE")
    except (ValueError, OSError):
        return None
    if pages <= 0 or page_size <= 0:
        return None
    return round(pages * page_size / 2**30, 2)


HOST_PROBES = {
    "platform": probe_platform,
    "hardware_concurrency": probe_hardware_concurrency,
    "architecture": probe_architecture,
    "os_cpu": probe_os_cpu,
    "cpu_class": probe_cpu_class,
    "timezone": probe_timezone,
    "date_time_locale": probe_date_time_locale,
    "languages": probe_languages,
    "math": probe_math,
    "device_memory": probe_device_memory,
}


def default_registry(
    screen_frame_cache: ScreenFrameCache | None = None,
    frame_reader: FrameReader | None = None,
) -> ProbeRegistry:
    """
    Registry of the host probes.

    The environment-frame probe is included only when the embedder supplies a
    frame reader; a Python host has no screen of its own.
    """
    registry = ProbeRegistry(HOST_PROBES)
    if frame_reader is not None:
        registry.register(
            "screen_frame",
            ScreenFrameProbe(frame_reader, screen_frame_cache or ScreenFrameCache()),
        )
    return registry
