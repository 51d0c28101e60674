"""
envprint — Consistency Rule Catalog

Each rule is an independent boolean heuristic over the Dataset that looks for
a contradiction between signals, something a genuine environment would not
report. A rule returns a human-readable explanation when it fires and None
otherwise.

Rules only fire on observed evidence. When a rule's inputs are absent from
the Dataset the rule stays silent, so an empty Dataset triggers nothing.

Severity weights live in RULE_WEIGHTS, not in the rules, so the scoring
denominator is a sum over one table. Relative ordering of the categories:

  tamper, privacy tooling         5
  time/locale impossibility       4   (graphics vendor disagreement: 4)
  identity, rendering blocked     3   (zero screen/window, no peripherals: 3)
  geometry, capability, audio     2
  enumeration, generic graphics   1–2
"""

from __future__ import annotations

import enum
import math
from collections.abc import Callable
from dataclasses import dataclass

from envprint.config import ConsistencyConfig
from envprint.systems.dataset.types import Dataset

DEFAULT_WEIGHT = 1


class RuleCategory(enum.StrEnum):
    GEOMETRY = "geometry"
    IDENTITY = "identity"
    CAPABILITY = "capability"
    ENUMERATION = "enumeration"
    GRAPHICS = "graphics"
    TIME = "time"
    TAMPER = "tamper"
    RENDERING = "rendering"
    AUDIO = "audio"
    PRIVACY = "privacy"


RuleCheck = Callable[[Dataset, ConsistencyConfig], "str | None"]


@dataclass(frozen=True)
class ConsistencyRule:
    """
    A named heuristic.

    weight=None means "use the weight table"; a rule that is in neither the
    table nor carries its own weight scores DEFAULT_WEIGHT.
    """

    flag: str
    category: RuleCategory
    check: RuleCheck
    weight: int | None = None


# ─── User-agent helpers ───────────────────────────────────────────

_MOBILE_MARKERS = ("mobile", "android", "iphone", "ipad", "ipod")
_GENERIC_WEBGL_VENDORS = frozenset({"google inc.", "google inc. (google)", "webkit", "mozilla"})
_GENERIC_WEBGL_RENDERERS = frozenset({"angle", "webkit webgl", "mozilla"})
_UTC_ZONES = frozenset({"UTC", "Etc/UTC", "Etc/GMT", "GMT"})

# OS families that legitimately appear together (UA family, platform family).
_COMPATIBLE_FAMILIES = frozenset({
    ("android", "linux"),
    ("ios", "mac"),  # iPadOS reports a desktop Mac platform
    ("mac", "ios"),
    ("cros", "linux"),
})


def is_mobile_user_agent(user_agent: str) -> bool:
    ua = user_agent.lower()
    return any(marker in ua for marker in _MOBILE_MARKERS)


def user_agent_os_family(user_agent: str) -> str | None:
    ua = user_agent.lower()
    if "windows" in ua or "win64" in ua or "win32" in ua:
        return "win"
    if "iphone" in ua or "ipad" in ua or "ipod" in ua:
        return "ios"
    if "android" in ua:
        return "android"
    if "macintosh" in ua or "mac os x" in ua:
        return "mac"
    if "cros" in ua:
        return "cros"
    if "linux" in ua or "x11" in ua:
        return "linux"
    return None


def platform_os_family(platform: str) -> str | None:
    plat = platform.lower()
    if plat.startswith("win"):
        return "win"
    if plat in ("iphone", "ipad", "ipod"):
        return "ios"
    if plat.startswith("mac"):
        return "mac"
    if "android" in plat:
        return "android"
    if "linux" in plat or "x11" in plat:
        return "linux"
    return None


# ─── Geometry ─────────────────────────────────────────────────────


def _screen_dimensions_zero(data: Dataset, config: ConsistencyConfig) -> str | None:
    if data.screen and (data.screen.width == 0 or data.screen.height == 0):
        return "Screen dimensions are zero (possible headless environment)"
    return None


def _avail_size_exceeds_screen(data: Dataset, config: ConsistencyConfig) -> str | None:
    screen = data.screen
    if screen and (screen.avail_width > screen.width or screen.avail_height > screen.height):
        return "Available screen size exceeds total screen size"
    return None


def _window_dimensions_zero(data: Dataset, config: ConsistencyConfig) -> str | None:
    if data.window and (data.window.outer_width == 0 or data.window.outer_height == 0):
        return "Window dimensions are zero"
    return None


def _outer_smaller_than_inner(data: Dataset, config: ConsistencyConfig) -> str | None:
    window = data.window
    if window and (
        window.outer_width < window.inner_width or window.outer_height < window.inner_height
    ):
        return "Outer window size is smaller than inner (impossible)"
    return None


def _suspicious_pixel_ratio(data: Dataset, config: ConsistencyConfig) -> str | None:
    if data.screen is None:
        return None
    ratio = data.screen.device_pixel_ratio
    if ratio < config.min_device_pixel_ratio or ratio > config.max_device_pixel_ratio:
        return f"Unusual device pixel ratio: {ratio}"
    return None


# ─── Identity & capability ────────────────────────────────────────


def _user_agent_platform_mismatch(data: Dataset, config: ConsistencyConfig) -> str | None:
    nav = data.navigator
    if nav is None:
        return None
    ua_family = user_agent_os_family(nav.user_agent)
    plat_family = platform_os_family(nav.platform)
    if ua_family is None or plat_family is None or ua_family == plat_family:
        return None
    if (ua_family, plat_family) in _COMPATIBLE_FAMILIES:
        return None
    return f"User agent ({nav.user_agent}) doesn't match platform ({nav.platform})"


def _mobile_without_touch(data: Dataset, config: ConsistencyConfig) -> str | None:
    if data.navigator is None or data.touch_support is None:
        return None
    if is_mobile_user_agent(data.navigator.user_agent) and data.touch_support.max_touch_points == 0:
        return "Mobile user agent but no touch support"
    return None


def _empty_languages(data: Dataset, config: ConsistencyConfig) -> str | None:
    if data.languages is None:
        return None
    if not any(language for group in data.languages for language in group):
        return "Language list is empty"
    return None


def _suspicious_hardware_concurrency(data: Dataset, config: ConsistencyConfig) -> str | None:
    cores = data.hardware_concurrency
    if cores is None:
        return None
    if cores in config.suspicious_core_counts or cores > config.max_plausible_cores:
        return f"Unusual hardware concurrency: {cores}"
    return None


def _missing_plugins(data: Dataset, config: ConsistencyConfig) -> str | None:
    if data.navigator is None or data.plugins is None:
        return None
    if not is_mobile_user_agent(data.navigator.user_agent) and len(data.plugins) == 0:
        return "Desktop environment reported zero plugins after enumeration"
    return None


def _no_media_devices(data: Dataset, config: ConsistencyConfig) -> str | None:
    if data.navigator is None or data.media is None:
        return None
    counts = data.media.device_count
    if (
        not is_mobile_user_agent(data.navigator.user_agent)
        and counts.audio_input == 0
        and counts.video_input == 0
    ):
        return "Desktop environment with no media input devices detected"
    return None


# ─── Graphics ─────────────────────────────────────────────────────


def _generic_webgl(data: Dataset, config: ConsistencyConfig) -> str | None:
    gl = data.webgl
    if gl is None:
        return None
    generic = (
        gl.vendor.lower() in _GENERIC_WEBGL_VENDORS
        and gl.renderer.lower() in _GENERIC_WEBGL_RENDERERS
    )
    if generic and not (gl.unmasked_vendor and gl.unmasked_renderer):
        return f"WebGL exposes only generic identifiers ({gl.vendor} / {gl.renderer})"
    return None


def _webgl_vendor_mismatch(data: Dataset, config: ConsistencyConfig) -> str | None:
    gl = data.webgl
    if gl is None or not (gl.unmasked_vendor and gl.unmasked_renderer and gl.vendor):
        return None
    masked = gl.vendor.lower()
    if masked in _GENERIC_WEBGL_VENDORS:
        return None
    if masked not in gl.unmasked_vendor.lower():
        return (
            f"WebGL vendor mismatch between masked ({gl.vendor}) "
            f"and unmasked ({gl.unmasked_vendor}) values"
        )
    return None


# ─── Time & locale ────────────────────────────────────────────────


def _timezone_spoofed(data: Dataset, config: ConsistencyConfig) -> str | None:
    tz = data.timezone
    if tz and tz.timezone in _UTC_ZONES and tz.timezone_offset != 0:
        return f"Time zone is {tz.timezone} but offset is {tz.timezone_offset} minutes"
    return None


def _impossible_timezone_offset(data: Dataset, config: ConsistencyConfig) -> str | None:
    tz = data.timezone
    if tz and abs(tz.timezone_offset) > config.max_timezone_offset_minutes:
        return f"Impossible time zone offset: {tz.timezone_offset}"
    return None


# ─── Rendering channel ────────────────────────────────────────────


def _suspicious_canvas_hash(data: Dataset, config: ConsistencyConfig) -> str | None:
    if data.canvas and len(data.canvas.hash) < config.min_canvas_hash_length:
        return "Canvas hash is too short or missing"
    return None


def _canvas_blocked(data: Dataset, config: ConsistencyConfig) -> str | None:
    canvas = data.canvas
    if canvas and canvas.data_url and len(canvas.data_url) < config.min_canvas_data_url_length:
        return "Canvas appears to be blocked (data URL too short)"
    return None


# ─── Audio ────────────────────────────────────────────────────────


def _unusual_audio_sample_rate(data: Dataset, config: ConsistencyConfig) -> str | None:
    if data.audio and data.audio.sample_rate not in config.standard_sample_rates:
        return f"Unusual audio sample rate: {data.audio.sample_rate}"
    return None


# ─── Tamper ───────────────────────────────────────────────────────


def _math_constants_modified(data: Dataset, config: ConsistencyConfig) -> str | None:
    if data.math is None or data.math.constants is None:
        return None
    constants = data.math.constants
    tolerance = config.math_constant_tolerance
    if abs(constants.pi - math.pi) > tolerance or abs(constants.e - math.e) > tolerance:
        return "Math constants appear to be modified"
    return None


# ─── Enumeration ──────────────────────────────────────────────────


def _too_few_fonts(data: Dataset, config: ConsistencyConfig) -> str | None:
    if data.fonts and data.fonts.count < config.min_font_count:
        return f"Unusually low font count: {data.fonts.count}"
    return None


def _too_many_fonts(data: Dataset, config: ConsistencyConfig) -> str | None:
    if data.fonts and data.fonts.count > config.max_font_count:
        return f"Unusually high font count: {data.fonts.count}"
    return None


# ─── Privacy tooling ──────────────────────────────────────────────


def meaningful_resistance_signals(data: Dataset, config: ConsistencyConfig) -> int:
    """Triggered resistance detections minus those on the benign allow-list."""
    if data.resistance is None:
        return 0
    benign = set(config.benign_resistance_signals)
    benign_count = sum(
        1 for key, hit in data.resistance.detections.items() if hit and key in benign
    )
    return max(0, data.resistance.total_detections - benign_count)


def _privacy_tools_detected(data: Dataset, config: ConsistencyConfig) -> str | None:
    if data.resistance is None:
        return None
    meaningful = meaningful_resistance_signals(data, config)
    flagged = data.resistance.privacy_tool_detected
    if (flagged and meaningful >= config.privacy_signals_with_tool_flag) or (
        meaningful >= config.privacy_signals_regardless
    ):
        return f"Privacy tooling indicators detected ({meaningful} strong signals)"
    return None


# ─── Catalog ──────────────────────────────────────────────────────

RULE_WEIGHTS: dict[str, int] = {
    "screen_dimensions_zero": 3,
    "avail_size_exceeds_screen": 2,
    "window_dimensions_zero": 3,
    "outer_smaller_than_inner": 2,
    "suspicious_pixel_ratio": 2,
    "user_agent_platform_mismatch": 3,
    "mobile_without_touch": 2,
    "empty_languages": 1,
    "suspicious_hardware_concurrency": 2,
    "missing_plugins": 1,
    "generic_webgl": 1,
    "webgl_vendor_mismatch": 4,
    "timezone_spoofed": 4,
    "impossible_timezone_offset": 4,
    "suspicious_canvas_hash": 3,
    "canvas_blocked": 3,
    "unusual_audio_sample_rate": 2,
    "math_constants_modified": 5,
    "no_media_devices": 3,
    "too_few_fonts": 2,
    "too_many_fonts": 2,
    "privacy_tools_detected": 5,
}

TOTAL_RULE_WEIGHT = sum(RULE_WEIGHTS.values())

# Declaration order is the order of explanations in a report.
RULE_CATALOG: tuple[ConsistencyRule, ...] = (
    ConsistencyRule("screen_dimensions_zero", RuleCategory.GEOMETRY, _screen_dimensions_zero),
    ConsistencyRule("avail_size_exceeds_screen", RuleCategory.GEOMETRY, _avail_size_exceeds_screen),
    ConsistencyRule("window_dimensions_zero", RuleCategory.GEOMETRY, _window_dimensions_zero),
    ConsistencyRule("outer_smaller_than_inner", RuleCategory.GEOMETRY, _outer_smaller_than_inner),
    ConsistencyRule("suspicious_pixel_ratio", RuleCategory.GEOMETRY, _suspicious_pixel_ratio),
    ConsistencyRule(
        "user_agent_platform_mismatch", RuleCategory.IDENTITY, _user_agent_platform_mismatch
    ),
    ConsistencyRule("mobile_without_touch", RuleCategory.CAPABILITY, _mobile_without_touch),
    ConsistencyRule("empty_languages", RuleCategory.ENUMERATION, _empty_languages),
    ConsistencyRule(
        "suspicious_hardware_concurrency",
        RuleCategory.CAPABILITY,
        _suspicious_hardware_concurrency,
    ),
    ConsistencyRule("missing_plugins", RuleCategory.ENUMERATION, _missing_plugins),
    ConsistencyRule("generic_webgl", RuleCategory.GRAPHICS, _generic_webgl),
    ConsistencyRule("webgl_vendor_mismatch", RuleCategory.GRAPHICS, _webgl_vendor_mismatch),
    ConsistencyRule("timezone_spoofed", RuleCategory.TIME, _timezone_spoofed),
    ConsistencyRule("impossible_timezone_offset", RuleCategory.TIME, _impossible_timezone_offset),
    ConsistencyRule("suspicious_canvas_hash", RuleCategory.RENDERING, _suspicious_canvas_hash),
    ConsistencyRule("canvas_blocked", RuleCategory.RENDERING, _canvas_blocked),
    ConsistencyRule("unusual_audio_sample_rate", RuleCategory.AUDIO, _unusual_audio_sample_rate),
    ConsistencyRule("math_constants_modified", RuleCategory.TAMPER, _math_constants_modified),
    ConsistencyRule("no_media_devices", RuleCategory.CAPABILITY, _no_media_devices),
    ConsistencyRule("too_few_fonts", RuleCategory.ENUMERATION, _too_few_fonts),
    ConsistencyRule("too_many_fonts", RuleCategory.ENUMERATION, _too_many_fonts),
    ConsistencyRule("privacy_tools_detected", RuleCategory.PRIVACY, _privacy_tools_detected),
)
