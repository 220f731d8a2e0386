"""Visible layout — the set of items a renderer should keep mounted.

Export (``is_rendering``) renders every frame exactly once, so only the
items active at the frame are returned. Interactive playback adds
padding so cuts never flicker:
  - the held previous / next neighbour from the boundary state,
  - items ending exactly at the current frame (closes a one-frame gap),
  - the item before any item starting at the current frame,
  - items that ended or will start within a small safety window
    (max(2, round(fps * 0.12)) frames).

The result is de-duplicated by group (one decoder per group), sorted by
start frame and capped to a maximum number of video-backed items, evicting
the ones whose start is farthest from the current frame. When the group
sequence is unchanged from the previous result, the previous object is
returned as-is so the renderer can skip remounting.
"""

from .active_items import (
    GAP_POLICY_HOLD_NEAREST,
    find_active_frame_layout_index,
    find_active_frame_layout_items,
    find_active_webcam_item,
)
from .clips import SOURCE_VIDEO, index_recordings
from .layout_index import get_layout_index


MAX_VIDEO_ITEMS = 3
SAFETY_WINDOW_SECONDS = 0.12
MIN_SAFETY_WINDOW_FRAMES = 2

# Webcam premount window.
WEBCAM_OVERLAP_SECONDS = 0.35
MIN_WEBCAM_OVERLAP_FRAMES = 8


def _fade_frames(fade_ms, fps: float) -> int:
    return round((fade_ms / 1000) * fps)


def _fade_neighbours(layout, active_items, current_frame: int, fps: float) -> list:
    """Neighbours that are still visible through an intro/outro fade."""
    index = get_layout_index(layout)
    extra = []
    for item in active_items:
        clip = item.clip
        if clip.intro_fade_ms and current_frame < item.start_frame + _fade_frames(clip.intro_fade_ms, fps):
            extra.extend(index.items_by_end_frame.get(item.start_frame, ())[:1])
        if clip.outro_fade_ms and current_frame >= item.end_frame - _fade_frames(clip.outro_fade_ms, fps):
            starting = index.indices_by_start_frame.get(item.end_frame, ())
            extra.extend(layout[i] for i in starting[:1])
    return extra


def _padding_items(layout, current_frame: int, fps: float) -> list:
    """One-frame and safety-window neighbours for interactive playback."""
    index = get_layout_index(layout)
    items = []

    items.extend(index.items_by_end_frame.get(current_frame, ()))

    for i in index.indices_by_start_frame.get(current_frame, ()):
        if i > 0:
            items.append(layout[i - 1])

    hold_frames = max(MIN_SAFETY_WINDOW_FRAMES, round(fps * SAFETY_WINDOW_SECONDS))
    for f in range(current_frame - hold_frames, current_frame + 1):
        items.extend(index.items_by_end_frame.get(f, ()))
    for f in range(current_frame, current_frame + hold_frames + 1):
        items.extend(layout[i] for i in index.indices_by_start_frame.get(f, ()))

    return items


def _dedupe_by_group(items) -> list:
    seen = {}
    for item in items:
        if item.group_id not in seen:
            seen[item.group_id] = item
    return sorted(seen.values(), key=lambda item: item.start_frame)


def cap_video_items(items, current_frame: int, recordings=None, max_video_items=MAX_VIDEO_ITEMS, keep=None) -> list:
    """Limit how many video-backed items stay mounted.

    Items whose recording is a video (or unknown) compete for the slots;
    those with the smallest |start_frame - current_frame| are kept. ``keep``
    is never evicted. Non-video items (images, generated) always pass.
    Input order is preserved.
    """
    if max_video_items is None:
        return list(items)

    recordings_by_id = index_recordings(recordings)

    def _is_video(item):
        rec = recordings_by_id.get(item.clip.recording_id)
        return rec is None or rec.source_type == SOURCE_VIDEO

    video_items = [item for item in items if _is_video(item)]
    if len(video_items) <= max_video_items:
        return list(items)

    ranked = sorted(
        video_items,
        key=lambda item: (
            item is not keep,
            abs(item.start_frame - current_frame),
            item.start_frame,
        ),
    )
    kept = {id(item) for item in ranked[:max_video_items]}
    return [item for item in items if not _is_video(item) or id(item) in kept]


def get_visible_frame_layout(
    layout,
    current_frame: int,
    fps: float,
    is_rendering: bool,
    *,
    prev_item=None,
    next_item=None,
    should_hold_prev_frame: bool = False,
    should_hold_next_frame: bool = False,
    is_near_boundary_end: bool = False,
    previous=None,
    recordings=None,
    max_video_items: int | None = MAX_VIDEO_ITEMS,
    supports_fades: bool = False,
    gap_policy: str = GAP_POLICY_HOLD_NEAREST,
):
    """Items the renderer should mount at ``current_frame``.

    Args:
        layout: FrameLayout (or any start-ordered sequence of items).
        current_frame: Timeline frame.
        fps: Frames per second.
        is_rendering: Export mode; returns strictly the active items.
        prev_item, next_item: Neighbours from boundary navigation.
        should_hold_prev_frame, should_hold_next_frame, is_near_boundary_end:
            Flags from BoundaryOverlapState.
        previous: The previous result. Returned unchanged when the group
            sequence matches.
        recordings: Recordings mapping/iterable, used by the video cap.
        max_video_items: Cap on mounted video-backed items (None = no cap).
        supports_fades: In export mode, also return neighbours visible
            through a clip's intro/outro fade.
        gap_policy: Forwarded to find_active_frame_layout_items.

    Returns:
        Tuple of FrameLayoutItems sorted by start frame (or ``previous``).
    """
    if not layout:
        return previous if previous is not None and len(previous) == 0 else ()

    active_items = find_active_frame_layout_items(layout, current_frame, gap_policy)
    items = list(active_items)

    if is_rendering:
        if supports_fades:
            items.extend(_fade_neighbours(layout, active_items, current_frame, fps))
    else:
        if should_hold_prev_frame and prev_item is not None:
            items.append(prev_item)
        if (is_near_boundary_end or should_hold_next_frame) and next_item is not None:
            items.append(next_item)
        items.extend(_padding_items(layout, current_frame, fps))

    items = _dedupe_by_group(items)

    primary_index = find_active_frame_layout_index(layout, current_frame)
    primary = layout[primary_index] if primary_index >= 0 else None
    items = cap_video_items(items, current_frame, recordings, max_video_items, keep=primary)

    result = tuple(items)
    if previous is not None and [i.group_id for i in previous] == [i.group_id for i in result]:
        return previous
    return result


class VisibleLayoutResolver:
    """Caller-owned resolver that remembers its previous result.

    Keeps array identity stable across frames whose visible groups do not
    change. Call reset() when the layout is replaced wholesale.
    """

    def __init__(self, max_video_items: int | None = MAX_VIDEO_ITEMS, supports_fades: bool = False):
        self.max_video_items = max_video_items
        self.supports_fades = supports_fades
        self._previous = None

    @property
    def previous(self):
        return self._previous

    def reset(self) -> None:
        self._previous = None

    def resolve(
        self,
        layout,
        current_frame: int,
        fps: float,
        is_rendering: bool,
        boundary_state=None,
        prev_item=None,
        next_item=None,
        recordings=None,
    ):
        hold_prev = hold_next = near_end = False
        if boundary_state is not None:
            hold_prev = boundary_state.should_hold_prev_frame
            hold_next = boundary_state.should_hold_next_frame
            near_end = boundary_state.is_near_boundary_end

        result = get_visible_frame_layout(
            layout,
            current_frame,
            fps,
            is_rendering,
            prev_item=prev_item,
            next_item=next_item,
            should_hold_prev_frame=hold_prev,
            should_hold_next_frame=hold_next,
            is_near_boundary_end=near_end,
            previous=self._previous,
            recordings=recordings,
            max_video_items=self.max_video_items,
            supports_fades=self.supports_fades,
        )
        # An empty result never replaces a useful previous one.
        if result:
            self._previous = result
        return result


# ── Webcam visibility ────────────────────────────────────────────


def get_visible_webcam_frame_layout(layout, current_frame: int, fps: float, is_rendering: bool) -> list:
    """Webcam items to mount: active items plus premount/hold neighbours."""
    if not layout:
        return []

    active = [item for item in layout if item.start_frame <= current_frame < item.end_frame]
    if is_rendering:
        return active

    overlap_frames = max(MIN_WEBCAM_OVERLAP_FRAMES, round(fps * WEBCAM_OVERLAP_SECONDS))
    result = list(active)
    seen = {item.clip.id for item in active}

    for item in layout:
        if item.clip.id in seen:
            continue
        near_start = item.start_frame - overlap_frames <= current_frame < item.start_frame
        near_end = item.end_frame <= current_frame < item.end_frame + overlap_frames
        if near_start or near_end:
            result.append(item)
            seen.add(item.clip.id)

    return result


def get_visible_webcam_groups(layout, current_frame: int, buffer_frames: int = 0) -> list[dict]:
    """Webcam groups visible around ``current_frame``.

    Returns a list of dicts with group_id, items and active_item (the
    active item within the group, or None when the frame is inside the
    buffer but not inside the group).
    """
    if not layout:
        return []

    groups = {}
    for item in layout:
        groups.setdefault(item.group_id, []).append(item)

    result = []
    for group_id, items in groups.items():
        group_start = min(item.start_frame for item in items)
        group_end = max(item.end_frame for item in items)
        if group_start - buffer_frames <= current_frame < group_end + buffer_frames:
            result.append({
                "group_id": group_id,
                "items": items,
                "active_item": find_active_webcam_item(items, current_frame),
            })
    return result
