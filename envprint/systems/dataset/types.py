"""
envprint — Dataset

The canonical, typed aggregation of every successful probe value for one run.

The Dataset is a closed schema: one optional field per known probe name. A
field is present iff the probe of the same name succeeded with a value that
conforms to the field's type. Adding a probe to the system means adding a
field here. The aggregator discovers slots from this model, so it stays
exhaustive without further changes.

The ``consistency`` slot is filled in a second pass, after the analyzer has
run against the Dataset built from every other probe.
"""

from __future__ import annotations

from pydantic import ConfigDict

from envprint.primitives.common import FrozenModel
from envprint.primitives.consistency import ConsistencyReport
from envprint.primitives.signals import (
    ApplePaySignal,
    AudioBaseLatencySignal,
    AudioSignal,
    CanvasSignal,
    ColorGamut,
    ConsoleErrorsSignal,
    ContentWindowSignal,
    ContrastPreference,
    CSSMediaSignal,
    CSSSignal,
    DomBlockerSignal,
    DomRectSignal,
    FontPreferencesSignal,
    FontsSignal,
    ForcedColorsSignal,
    HashedSeriesSignal,
    HDRStatus,
    HTMLElementSignal,
    MathSignal,
    MediaDevicesSignal,
    MimeTypesSignal,
    MotionPreference,
    NavigatorSignal,
    PluginSignal,
    ResistanceSignal,
    ScreenFrameSignal,
    ScreenSignal,
    ServiceWorkerSignal,
    SVGSignal,
    TimezoneSignal,
    TouchSupportSignal,
    VoicesSignal,
    WebGLSignal,
    WebRTCSignal,
    WindowSignal,
)

CONSISTENCY_SLOT = "consistency"


class Dataset(FrozenModel):
    """One optional slot per known probe. Absent means the probe did not succeed."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    # Rendering
    canvas: CanvasSignal | None = None
    webgl: WebGLSignal | None = None
    client_rects: HashedSeriesSignal | None = None
    svg: SVGSignal | None = None
    text_metrics: HashedSeriesSignal | None = None
    dom_rect: DomRectSignal | None = None
    css: CSSSignal | None = None
    css_media: CSSMediaSignal | None = None

    # Navigator & identity
    navigator: NavigatorSignal | None = None
    platform: str | None = None
    vendor: str | None = None
    vendor_flavors: list[str] | None = None
    os_cpu: str | None = None
    cpu_class: str | None = None
    plugins: list[PluginSignal] | None = None
    mime_types: MimeTypesSignal | None = None
    touch_support: TouchSupportSignal | None = None

    # Hardware
    device_memory: float | None = None
    hardware_concurrency: int | None = None
    architecture: int | None = None

    # Screen & window geometry
    screen: ScreenSignal | None = None
    screen_frame: ScreenFrameSignal | None = None
    screen_resolution: tuple[int | None, int | None] | None = None
    window: WindowSignal | None = None
    color_depth: int | None = None
    monochrome: int | None = None

    # Preferences
    color_gamut: ColorGamut | None = None
    inverted_colors: bool | None = None
    contrast: ContrastPreference | None = None
    forced_colors: ForcedColorsSignal | None = None
    reduced_motion: MotionPreference | None = None
    reduced_transparency: MotionPreference | None = None
    hdr: HDRStatus | None = None

    # Fonts
    fonts: FontsSignal | None = None
    font_preferences: FontPreferencesSignal | None = None
    dom_blockers: DomBlockerSignal | None = None

    # Locale & time
    languages: list[list[str]] | None = None
    timezone: TimezoneSignal | None = None
    date_time_locale: str | int | None = None

    # Audio & media
    audio: AudioSignal | None = None
    audio_base_latency: AudioBaseLatencySignal | None = None
    media: MediaDevicesSignal | None = None
    voices: VoicesSignal | None = None
    apple_pay: ApplePaySignal | None = None

    # Runtime internals
    math: MathSignal | None = None
    html_element: HTMLElementSignal | None = None
    console_errors: ConsoleErrorsSignal | None = None
    content_window: ContentWindowSignal | None = None
    resistance: ResistanceSignal | None = None

    # Storage & capabilities
    session_storage: bool | None = None
    local_storage: bool | None = None
    indexed_db: bool | None = None
    open_database: bool | None = None
    cookies_enabled: bool | None = None
    pdf_viewer_enabled: bool | None = None
    private_click_measurement: str | None = None

    # Network & workers
    webrtc: WebRTCSignal | None = None
    service_worker: ServiceWorkerSignal | None = None

    # Second pass
    consistency: ConsistencyReport | None = None

    def present_slots(self) -> list[str]:
        """Names of the slots that hold a value, in declaration order."""
        return [name for name in type(self).model_fields if getattr(self, name) is not None]

    def is_empty(self) -> bool:
        return not self.present_slots()


# Every slot name, in declaration order. The consistency slot is last.
DATASET_SLOTS: tuple[str, ...] = tuple(Dataset.model_fields)

# Slots filled directly by registered probes (everything but the second pass).
PROBE_SLOTS: tuple[str, ...] = tuple(s for s in DATASET_SLOTS if s != CONSISTENCY_SLOT)
