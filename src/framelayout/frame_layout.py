"""Frame layout builder — clips in, frame-indexed layout items out.

Each clip becomes one FrameLayoutItem with integer frame bounds. Items are
built from the clip's own duration (not the next clip's start), so tracks
may overlap and several items can be active on the same frame.

Grouping:
  Consecutive clips from the same recording that play back as one
  continuous stretch share a ``group_id``. A renderer keeps one decoder
  alive per group, so the id is derived from (recording, group start
  frame) instead of the clip id: trimming or splitting inside a group
  keeps the id stable. Two clips are contiguous when all of these hold:
    - same recording,
    - timeline gap <= 1 frame, or <= one frame duration + 1ms,
    - source gap <= 50ms,
    - no transition on the joining edge,
    - same playback rate (within 1e-6), unless rate checking is disabled.

Persisted video state:
  Generated recordings (title cards, blank clips) have no pixels of their
  own. Each generated item is linked to the nearest preceding visual item
  so the renderer can keep showing that video underneath. When the
  overlay starts at or past the end of the visual item the background is
  frozen on its last frame.

The builder never raises: empty input gives an empty layout, clips with
unknown recordings are laid out but not linked, zero-length clips still
get one frame.
"""

from dataclasses import dataclass

from .clips import (
    Clip,
    Recording,
    SOURCE_GENERATED,
    clip_end_time,
    clip_playback_rate,
    clip_source_in,
    clip_source_out,
    index_recordings,
)
from .layout_index import EMPTY_LAYOUT, FrameLayout
from .timing import (
    DEFAULT_FPS,
    frame_duration_ms,
    frame_to_ms,
    ms_to_frame_ceil,
    ms_to_frame_floor,
)


# ── Grouping constants ───────────────────────────────────────────

MAX_SOURCE_GAP_MS = 50
PLAYBACK_RATE_TOLERANCE = 1e-6

TRACK_VIDEO = "video"
TRACK_WEBCAM = "webcam"

GROUP_PREFIXES = {TRACK_VIDEO: "group", TRACK_WEBCAM: "webcam-group"}


# ── Records ──────────────────────────────────────────────────────


@dataclass(frozen=True, eq=False)
class PersistedVideoState:
    """The visual item a generated overlay renders on top of."""

    recording: Recording
    clip: Clip
    layout_item: "FrameLayoutItem"
    base_source_time_ms: float
    is_frozen: bool


@dataclass(frozen=True, eq=False)
class FrameLayoutItem:
    clip: Clip
    start_frame: int
    end_frame: int  # exclusive
    duration_frames: int
    group_id: str
    group_start_frame: int
    group_start_source_in: float
    group_duration: int
    persisted_video_state: PersistedVideoState | None = None


# ── Helpers ──────────────────────────────────────────────────────


def calculate_clip_frames(clip: Clip, fps: float) -> tuple[int, int, int]:
    """Return (start_frame, end_frame, duration_frames) for a clip.

    The end is rounded up and clamped so every clip covers at least one
    frame.
    """
    start_frame = ms_to_frame_floor(clip.start_time, fps)
    end_frame = max(start_frame + 1, ms_to_frame_ceil(clip_end_time(clip), fps))
    return start_frame, end_frame, end_frame - start_frame


def is_contiguous(
    last_clip: Clip | None,
    clip: Clip,
    start_frame: int,
    last_end_frame: int,
    fps: float,
    check_playback_rate: bool = True,
) -> bool:
    """Whether ``clip`` continues the group that ``last_clip`` belongs to."""
    if last_clip is None or last_clip.recording_id != clip.recording_id:
        return False

    gap_frames = abs(start_frame - last_end_frame)
    gap_ms = abs(clip.start_time - clip_end_time(last_clip))
    # One frame of slack plus 1ms of float drift.
    timeline_contiguous = gap_frames <= 1 or gap_ms <= frame_duration_ms(fps) + 1

    source_gap = abs(clip_source_out(last_clip) - clip_source_in(clip))
    has_transition = bool(last_clip.transition_out) or bool(clip.transition_in)

    same_rate = True
    if check_playback_rate:
        same_rate = abs(
            clip_playback_rate(last_clip) - clip_playback_rate(clip)
        ) < PLAYBACK_RATE_TOLERANCE

    return (
        timeline_contiguous
        and source_gap <= MAX_SOURCE_GAP_MS
        and not has_transition
        and same_rate
    )


def make_group_id(track_type: str, recording_id: str, start_frame: int) -> str:
    prefix = GROUP_PREFIXES.get(track_type, "group")
    return f"{prefix}-{recording_id}-{start_frame}"


def _persisted_state_for(
    start_frame: int,
    visual_item: FrameLayoutItem,
    visual_recording: Recording,
    fps: float,
) -> PersistedVideoState:
    """Link a generated item starting at ``start_frame`` to a visual item."""
    visual_clip = visual_item.clip
    is_past_end = start_frame >= visual_item.end_frame

    if is_past_end:
        # Hold the last decodable frame of the background.
        base_source_time_ms = clip_source_out(visual_clip) - 1
    else:
        offset_ms = frame_to_ms(start_frame - visual_item.start_frame, fps)
        base_source_time_ms = (
            clip_source_in(visual_clip) + offset_ms * clip_playback_rate(visual_clip)
        )

    return PersistedVideoState(
        recording=visual_recording,
        clip=visual_clip,
        layout_item=visual_item,
        base_source_time_ms=base_source_time_ms,
        is_frozen=is_past_end,
    )


# ── Builder ──────────────────────────────────────────────────────


def build_frame_layout(
    clips,
    fps: float,
    recordings=None,
    *,
    track_type: str = TRACK_VIDEO,
    sort_clips: bool = False,
    check_playback_rate: bool = True,
) -> FrameLayout:
    """Build a frame-accurate layout for a track.

    The algorithm makes two passes over the clips:
      1. Compute frame bounds and walk the clips left to right, opening a
         new group whenever contiguity breaks. Group durations are known
         once each group closes.
      2. Create the immutable items in order, tracking the last visual
         item so generated items can link to it.

    Args:
        clips: Clips in timeline order (or any order with sort_clips=True).
        fps: Frames per second. Non-positive values fall back to 30.
        recordings: Mapping of recording id -> Recording, or an iterable of
            Recordings. Only used to link generated items.
        track_type: "video" or "webcam"; selects the group id prefix.
        sort_clips: Sort clips by start time before laying them out.
        check_playback_rate: Break groups on playback rate changes.

    Returns:
        FrameLayout (empty if there are no clips).
    """
    if not clips:
        return EMPTY_LAYOUT

    ordered = sorted(clips, key=lambda c: c.start_time) if sort_clips else list(clips)
    recordings_by_id = index_recordings(recordings)

    # ── Pass 1: frames and group assignment ──
    planned = []  # (clip, start, end, duration, group_index)
    groups = []   # [group_id, group_start_frame, group_start_source_in, group_end_frame]
    last_clip = None
    last_end_frame = -1

    for clip in ordered:
        start_frame, end_frame, duration_frames = calculate_clip_frames(clip, fps)

        if not is_contiguous(
            last_clip, clip, start_frame, last_end_frame, fps, check_playback_rate,
        ):
            groups.append([
                make_group_id(track_type, clip.recording_id, start_frame),
                start_frame,
                clip_source_in(clip),
                end_frame,
            ])

        group = groups[-1]
        group[3] = end_frame
        planned.append((clip, start_frame, end_frame, duration_frames, len(groups) - 1))

        last_clip = clip
        last_end_frame = end_frame

    # ── Pass 2: items and persisted video state ──
    items = []
    last_visual_item = None
    last_visual_recording = None

    for clip, start_frame, end_frame, duration_frames, group_index in planned:
        group_id, group_start_frame, group_start_source_in, group_end_frame = groups[group_index]

        persisted = None
        recording = recordings_by_id.get(clip.recording_id)
        if (
            recording is not None
            and recording.source_type == SOURCE_GENERATED
            and last_visual_item is not None
        ):
            persisted = _persisted_state_for(
                start_frame, last_visual_item, last_visual_recording, fps,
            )

        item = FrameLayoutItem(
            clip=clip,
            start_frame=start_frame,
            end_frame=end_frame,
            duration_frames=duration_frames,
            group_id=group_id,
            group_start_frame=group_start_frame,
            group_start_source_in=group_start_source_in,
            group_duration=group_end_frame - group_start_frame,
            persisted_video_state=persisted,
        )
        items.append(item)

        if recording is not None and recording.is_visual:
            last_visual_item = item
            last_visual_recording = recording

    return FrameLayout(items)


def build_webcam_frame_layout(clips, fps: float) -> FrameLayout:
    """Build a webcam track layout.

    Webcam clips may arrive in any order and never carry generated
    content, so they are sorted and not linked to recordings.
    """
    return build_frame_layout(clips, fps, track_type=TRACK_WEBCAM, sort_clips=True)


# ── Layout queries that need no index ────────────────────────────


def get_timeline_duration_in_frames(layout) -> int:
    """Total timeline length: the furthest end frame of any item."""
    if not layout:
        return 0
    return max(item.end_frame for item in layout)


def get_webcam_video_start_from(frame: int, item: FrameLayoutItem, fps: float) -> float:
    """Source time (seconds) a group's decoder should be at for ``frame``."""
    safe_fps = fps if fps > 0 else DEFAULT_FPS
    local_frame = max(0, frame - item.group_start_frame)
    rate = clip_playback_rate(item.clip)
    return item.group_start_source_in / 1000 + (local_frame / safe_fps) * rate
