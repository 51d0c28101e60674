"""
envprint — Environment-Frame Probe

Some environments report an all-zero screen frame while a window is being
moved or resized (or after a fullscreen transition) even though the real
frame is non-empty. The probe keeps the last informative reading in a
caller-owned ScreenFrameCache and falls back to it when a degenerate reading
comes in.

The cache is the only shared mutable state in the engine. Concurrent writes
are last-write-wins; each write replaces the whole reading.
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable
from typing import Any

import structlog

from envprint.primitives.signals import ScreenFrameSignal

logger = structlog.get_logger().bind(system="probes.screen_frame")

FrameReader = Callable[[], "ScreenFrameSignal | Awaitable[ScreenFrameSignal | None] | None"]


class ScreenFrameCache:
    """Last-known-good screen frame reading."""

    def __init__(self, initial: ScreenFrameSignal | None = None) -> None:
        self._frame = initial

    def get(self) -> ScreenFrameSignal | None:
        return self._frame

    def remember(self, frame: ScreenFrameSignal) -> None:
        self._frame = frame

    def clear(self) -> None:
        self._frame = None

    def __repr__(self) -> str:
        return f"ScreenFrameCache({self._frame!r})"


class ScreenFrameProbe:
    """
    Callable probe around a raw frame reader.

    - informative reading   → remembered and returned
    - degenerate reading    → the cached reading if one exists, else the
                              degenerate reading itself
    - reader returns None   → None (the scheduler records SKIPPED)
    """

    def __init__(self, read_frame: FrameReader, cache: ScreenFrameCache) -> None:
        self._read_frame = read_frame
        self._cache = cache

    @property
    def cache(self) -> ScreenFrameCache:
        return self._cache

    async def __call__(self) -> dict[str, Any] | None:
        reading = self._read_frame()
        if inspect.isawaitable(reading):
            reading = await reading
        if reading is None:
            return None

        if not reading.is_degenerate:
            self._cache.remember(reading)
            return reading.model_dump()

        cached = self._cache.get()
        if cached is not None:
            logger.debug("screen_frame_cache_hit", cached=cached.model_dump())
            return cached.model_dump()
        return reading.model_dump()
