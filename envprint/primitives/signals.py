"""
envprint — Signal Value Types

The typed values that individual probes report. Each model is the schema of
one Dataset slot. Probes may return either an instance of the model or a
plain mapping with the same keys; the aggregator validates both.

Models are frozen: a signal is an observation, and observations do not change
after they are recorded.

Free-form maps (WebGL parameters, locale details, element properties) hold
JSON values only, so every Dataset has one canonical serialised form.
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field, JsonValue

from envprint.primitives.common import FrozenModel

# ─── Rendering ────────────────────────────────────────────────────


class CanvasSignal(FrozenModel):
    hash: str = ""
    data_url: str | None = None


class WebGLSignal(FrozenModel):
    vendor: str = ""
    renderer: str = ""
    version: str = ""
    shading_language_version: str = ""
    unmasked_vendor: str | None = None
    unmasked_renderer: str | None = None
    parameters: dict[str, JsonValue] | None = None


class HashedSeriesSignal(FrozenModel):
    """A digest plus the raw numeric series it was computed from."""

    hash: str
    data: list[float] = Field(default_factory=list)


class SVGSignal(HashedSeriesSignal):
    supported: bool = True


class DomRectSignal(FrozenModel):
    hash: str
    measurements: list[float] = Field(default_factory=list)
    dom_rect_support: bool = False
    dom_rect_read_only_support: bool = False
    range_rect_support: bool = False


class CSSSignal(FrozenModel):
    hash: str
    styles: dict[str, str] = Field(default_factory=dict)
    system_fonts: dict[str, str] = Field(default_factory=dict)


class Orientation(FrozenModel):
    portrait: bool = False
    landscape: bool = False


class CSSMediaSignal(FrozenModel):
    hash: str
    media_query_matches: dict[str, bool] = Field(default_factory=dict)
    pixel_ratio_matches: dict[str, bool] = Field(default_factory=dict)
    orientation: Orientation = Field(default_factory=Orientation)
    screen_size_matches: dict[str, bool] = Field(default_factory=dict)


# ─── Navigator & identity ─────────────────────────────────────────


class ConnectionInfo(FrozenModel):
    effective_type: str | None = None
    rtt: float | None = None
    downlink: float | None = None
    save_data: bool | None = None


class NavigatorSignal(FrozenModel):
    user_agent: str = ""
    app_version: str = ""
    app_name: str = ""
    language: str = ""
    platform: str = ""
    product: str = ""
    product_sub: str = ""
    cookie_enabled: bool = False
    do_not_track: str | None = None
    on_line: bool = True
    webdriver: bool | None = None
    connection: ConnectionInfo | None = None


class PluginMimeType(FrozenModel):
    type: str
    suffixes: str = ""


class PluginSignal(FrozenModel):
    name: str
    description: str = ""
    mime_types: list[PluginMimeType] = Field(default_factory=list)


class MimeTypeEntry(FrozenModel):
    type: str
    description: str = ""
    suffixes: str = ""


class MimeTypesSignal(FrozenModel):
    hash: str
    count: int = 0
    types: list[MimeTypeEntry] = Field(default_factory=list)


class TouchSupportSignal(FrozenModel):
    max_touch_points: int = 0
    touch_event: bool = False
    touch_start: bool = False


# ─── Screen & window geometry ─────────────────────────────────────


class ScreenSignal(FrozenModel):
    width: int
    height: int
    avail_width: int
    avail_height: int
    color_depth: int = 24
    pixel_depth: int = 24
    device_pixel_ratio: float = 1.0


class WindowSignal(FrozenModel):
    """Outer (chrome included) and inner (viewport) window dimensions."""

    outer_width: int
    outer_height: int
    inner_width: int
    inner_height: int


class ScreenFrameSignal(FrozenModel):
    """Margins between the full screen and the available area, per edge."""

    top: float | None = None
    right: float | None = None
    bottom: float | None = None
    left: float | None = None

    @property
    def is_degenerate(self) -> bool:
        """True when every edge is zero or unknown; the reading carries no information."""
        return not any((self.top, self.right, self.bottom, self.left))


# ─── Fonts & preferences ──────────────────────────────────────────


class FontsSignal(FrozenModel):
    available: list[str] = Field(default_factory=list)
    count: int = 0


class DomBlockerSignal(FrozenModel):
    detected: list[str] = Field(default_factory=list)


class FontPreferencesSignal(FrozenModel):
    serif: str | float | None = None
    sans_serif: str | float | None = None
    monospace: str | float | None = None


class ForcedColorsSignal(FrozenModel):
    active: bool = False


ColorGamut = Literal["srgb", "p3", "rec2020"]
ContrastPreference = Literal["more", "less", "custom", "no-preference"]
MotionPreference = Literal["reduce", "no-preference"]
HDRStatus = Literal["high", "standard"]


# ─── Locale & time ────────────────────────────────────────────────


class TimezoneSignal(FrozenModel):
    """
    Time zone observation.

    ``timezone_offset`` follows the minutes-west-of-UTC convention: a zone
    ahead of UTC reports a negative offset (UTC+2 → -120).
    """

    timezone: str
    timezone_offset: int = 0
    locale: str = ""
    calendar: str | None = None
    numbering_system: str | None = None
    currency: str | None = None
    locales: dict[str, JsonValue] | None = None


# ─── Audio & media ────────────────────────────────────────────────


class AudioSignal(FrozenModel):
    hash: str = ""
    sample_rate: int
    state: str = ""
    max_channel_count: int = 0
    number_of_inputs: int = 0
    number_of_outputs: int = 0
    channel_count: int = 0
    channel_count_mode: str = ""
    channel_interpretation: str = ""


class AudioBaseLatencySignal(FrozenModel):
    supported: bool = False
    base_latency: float | None = None
    output_latency: float | None = None
    sample_rate: int | None = None


class DeviceCount(FrozenModel):
    audio_input: int = 0
    audio_output: int = 0
    video_input: int = 0


class MediaDevice(FrozenModel):
    kind: str
    label: str = ""
    group_id: str = ""


class MediaDevicesSignal(FrozenModel):
    device_count: DeviceCount = Field(default_factory=DeviceCount)
    devices: list[MediaDevice] = Field(default_factory=list)


class Voice(FrozenModel):
    name: str
    lang: str = ""
    local_service: bool = False
    default: bool = False
    voice_uri: str = ""


class VoicesSignal(FrozenModel):
    count: int = 0
    voices: list[Voice] = Field(default_factory=list)
    default_voice: str | None = None


class ApplePaySignal(FrozenModel):
    is_supported: bool = False
    can_make_payments: bool | None = None
    supported_versions: list[int] | None = None


# ─── Runtime internals ────────────────────────────────────────────


class MathConstants(FrozenModel):
    pi: float
    e: float
    ln10: float | None = None
    ln2: float | None = None
    log10e: float | None = None
    log2e: float | None = None
    sqrt1_2: float | None = None
    sqrt2: float | None = None


class MathSignal(FrozenModel):
    hash: str = ""
    data: dict[str, float] = Field(default_factory=dict)
    constants: MathConstants | None = None


class HTMLElementSignal(FrozenModel):
    hash: str
    prototype_props_count: int = 0
    properties: dict[str, JsonValue] = Field(default_factory=dict)
    methods: list[str] = Field(default_factory=list)
    shadow_dom_support: bool = False
    custom_elements_support: bool = False


class ConsoleErrorsSignal(FrozenModel):
    hash: str
    console_methods: list[str] = Field(default_factory=list)
    error_proto_props: int = 0
    stack_depth: int = 0
    error_patterns: list[str] = Field(default_factory=list)


class ContentWindowSignal(FrozenModel):
    hash: str
    window_props_count: int = 0
    properties: dict[str, bool] = Field(default_factory=dict)
    methods: dict[str, bool] = Field(default_factory=dict)
    has_document: bool = False
    document_props_count: int = 0


class ResistanceSignal(FrozenModel):
    """
    The environment's own anti-fingerprinting / automation detections.

    ``total_detections`` counts every triggered entry of ``detections``;
    ``privacy_tool_detected`` is the sub-system's own verdict.
    """

    detections: dict[str, bool] = Field(default_factory=dict)
    total_detections: int = 0
    privacy_tool_detected: bool = False


# ─── Network & workers ────────────────────────────────────────────


class IceServerSupport(FrozenModel):
    stun_supported: bool = False
    turn_supported: bool = False


class IceCandidates(FrozenModel):
    local: list[str] = Field(default_factory=list)
    public: list[str] = Field(default_factory=list)
    ipv4: list[str] = Field(default_factory=list)
    ipv6: list[str] = Field(default_factory=list)


class WebRTCSignal(FrozenModel):
    hash: str
    supported: bool = False
    ice_servers: IceServerSupport = Field(default_factory=IceServerSupport)
    candidates: IceCandidates = Field(default_factory=IceCandidates)
    connection: dict[str, str] = Field(default_factory=dict)
    capabilities: dict[str, list[str]] = Field(default_factory=dict)
    media_devices: bool = False
    get_user_media_supported: bool = False
    rtc_peer_connection_supported: bool = False
    data_channel_supported: bool = False


class ServiceWorkerSignal(FrozenModel):
    hash: str
    supported: bool = False
    controller: bool = False
    ready: bool = False
    script_url: str | None = None
    scope: str | None = None
    state: str | None = None
    features: dict[str, bool] = Field(default_factory=dict)
    permissions: dict[str, str] | None = None
