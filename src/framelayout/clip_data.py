"""Active clip data — which source time a layout item shows at frame N."""

from dataclasses import dataclass

from .active_items import find_active_frame_layout_index
from .clips import (
    Clip,
    Recording,
    SOURCE_GENERATED,
    clip_playback_rate,
    clip_source_in,
    index_recordings,
)
from .timing import frame_duration_ms, frame_to_ms


@dataclass(frozen=True, eq=False)
class ActiveClipData:
    clip: Clip
    recording: Recording
    source_time_ms: float
    layout_item: object = None


def resolve_clip_data_for_layout_item(frame: int, item, fps: float, recordings) -> ActiveClipData | None:
    """Resolve clip data for a specific item at ``frame``.

    Elapsed frames are clamped to the item. The item's last frame maps to
    ``duration - one frame`` so playback reaches the true end of the clip
    even when frame rounding falls short. Returns None if the clip's
    recording is unknown.
    """
    clip = item.clip
    recording = index_recordings(recordings).get(clip.recording_id)
    if recording is None:
        return None

    elapsed_raw = frame - item.start_frame
    last_elapsed = item.duration_frames - 1
    is_last_frame = elapsed_raw >= last_elapsed
    elapsed_frames = max(0, min(elapsed_raw, last_elapsed))

    if is_last_frame:
        elapsed_ms = max(0.0, clip.duration - frame_duration_ms(fps))
    else:
        elapsed_ms = frame_to_ms(elapsed_frames, fps)

    source_time_ms = clip_source_in(clip) + elapsed_ms * clip_playback_rate(clip)
    return ActiveClipData(
        clip=clip,
        recording=recording,
        source_time_ms=source_time_ms,
        layout_item=item,
    )


def get_active_clip_data_at_frame(layout, frame: int, fps: float, recordings) -> ActiveClipData | None:
    """Clip data for the single active item at ``frame`` (None if empty)."""
    if not layout:
        return None
    index = find_active_frame_layout_index(layout, frame)
    if index < 0:
        return None
    return resolve_clip_data_for_layout_item(frame, layout[index], fps, recordings)


def resolve_effective_clip_data(clip_data: ActiveClipData | None, frame: int, fps: float) -> ActiveClipData | None:
    """Swap a generated overlay for the visual item it renders on top of.

    Generated recordings have no pixels, so the layout geometry and source
    time come from the persisted visual item. A frozen background stays on
    its base time; otherwise it keeps advancing with the overlay.
    """
    if clip_data is None or clip_data.recording.source_type != SOURCE_GENERATED:
        return clip_data

    item = clip_data.layout_item
    persisted = getattr(item, "persisted_video_state", None)
    if persisted is None:
        return clip_data

    source_time_ms = persisted.base_source_time_ms
    if not persisted.is_frozen:
        elapsed_ms = frame_to_ms(max(0, frame - item.start_frame), fps)
        source_time_ms += elapsed_ms * clip_playback_rate(persisted.clip)

    return ActiveClipData(
        clip=persisted.clip,
        recording=persisted.recording,
        source_time_ms=source_time_ms,
        layout_item=persisted.layout_item,
    )
