"""Timeline input records — clips and the recordings they point at.

Both are owned by the project model outside this package; the engine only
reads them. Missing optional fields are normalized by the helper functions
below instead of at construction time, so partially filled records coming
from older projects still lay out.
"""

from collections.abc import Mapping
from dataclasses import dataclass


# ── Source types ─────────────────────────────────────────────────

SOURCE_VIDEO = "video"
SOURCE_IMAGE = "image"
SOURCE_GENERATED = "generated"

VALID_SOURCE_TYPES = {SOURCE_VIDEO, SOURCE_IMAGE, SOURCE_GENERATED}

# Recordings that carry decodable pixels of their own.
VISUAL_SOURCE_TYPES = {SOURCE_VIDEO, SOURCE_IMAGE}


@dataclass(frozen=True)
class Recording:
    """A media source: a screen recording, a still image, or generated content."""

    id: str
    source_type: str = SOURCE_VIDEO
    width: int = 0
    height: int = 0

    @property
    def is_visual(self) -> bool:
        return self.source_type in VISUAL_SOURCE_TYPES


@dataclass(frozen=True)
class Clip:
    """Placement of a recording on the timeline.

    Times are milliseconds. ``source_in``/``source_out`` trim the recording;
    ``source_out`` may be omitted and is then derived from the duration and
    playback rate.
    """

    id: str
    recording_id: str
    start_time: float
    duration: float
    source_in: float = 0.0
    source_out: float | None = None
    playback_rate: float = 1.0
    transition_in: str | None = None
    transition_out: str | None = None
    intro_fade_ms: float | None = None
    outro_fade_ms: float | None = None


# ── Normalizing accessors ────────────────────────────────────────


def clip_end_time(clip: Clip) -> float:
    """Timeline end of the clip in ms (exclusive)."""
    return clip.start_time + clip.duration


def clip_playback_rate(clip: Clip) -> float:
    """Playback rate, treating missing or non-positive values as 1x."""
    rate = clip.playback_rate
    if not rate or rate <= 0:
        return 1.0
    return rate


def clip_source_in(clip: Clip) -> float:
    return clip.source_in or 0.0


def clip_source_out(clip: Clip) -> float:
    """Source end in ms, derived from duration * rate when not set."""
    if clip.source_out is not None:
        return clip.source_out
    return clip_source_in(clip) + clip.duration * clip_playback_rate(clip)


def index_recordings(recordings) -> dict[str, Recording]:
    """Normalize a recordings mapping or iterable into a dict keyed by id."""
    if not recordings:
        return {}
    if isinstance(recordings, Mapping):
        return recordings
    return {rec.id: rec for rec in recordings}
