"""Millisecond <-> frame conversion.

Clip timing is stored in milliseconds; the engine works in whole frames.
Start frames round down and end frames round up, so a clip always covers
every frame it touches. A tiny epsilon absorbs float drift (e.g. 33.333...
ms frames) so that a value sitting on a frame boundary is not pushed to
the neighbouring frame.
"""

import math

DEFAULT_FPS = 30

# Drift tolerance in frames.
FRAME_EPSILON = 1e-6


def _safe_fps(fps: float) -> float:
    return fps if fps and fps > 0 else DEFAULT_FPS


def ms_to_frame(ms: float, fps: float) -> float:
    """Convert milliseconds to a fractional frame position."""
    return (ms or 0) * _safe_fps(fps) / 1000


def ms_to_frame_floor(ms: float, fps: float) -> int:
    """Frame containing the given millisecond (used for clip starts)."""
    return math.floor(ms_to_frame(ms, fps) + FRAME_EPSILON)


def ms_to_frame_ceil(ms: float, fps: float) -> int:
    """First frame at or after the given millisecond (used for clip ends)."""
    return math.ceil(ms_to_frame(ms, fps) - FRAME_EPSILON)


def frame_to_ms(frame: float, fps: float) -> float:
    """Convert a frame index (or frame count) to milliseconds."""
    return frame / _safe_fps(fps) * 1000


def frame_duration_ms(fps: float) -> float:
    """Duration of one frame in milliseconds."""
    return 1000 / _safe_fps(fps)
