"""Active-item queries — which layout items cover frame N.

Two entry points:
  - find_active_frame_layout_index: the single "best" item, used for
    clip data and boundary navigation.
  - find_active_frame_layout_items: every item covering the frame, needed
    because tracks overlap (background video under a foreground clip).

Both are O(log n + k) against the layout's index.

Gap policy:
  Returning nothing while the user scrubs through a gap would render a
  black frame. Under the default "hold_nearest" policy the queries never
  come back empty for a non-empty layout: before the first item they
  return the first item, past the end they return the last, and inside a
  gap they hold the item that ended most recently. "none" disables the
  hold so genuine timeline gaps can be detected.
"""

from .clips import index_recordings
from .layout_index import get_layout_index, lower_bound_gt, upper_bound_le


GAP_POLICY_HOLD_NEAREST = "hold_nearest"
GAP_POLICY_NONE = "none"

VALID_GAP_POLICIES = {GAP_POLICY_HOLD_NEAREST, GAP_POLICY_NONE}


def find_active_frame_layout_index(layout, frame: int) -> int:
    """Index of the item that should be considered active at ``frame``.

    - An item whose start_frame equals ``frame`` wins (the new clip wins
      ties at a cut point).
    - Otherwise the item whose range contains ``frame``.
    - In a gap, the item that just ended is held.
    - Out of range, the nearest item.

    Returns -1 only for an empty layout.
    """
    if not layout:
        return -1

    last_index = len(layout) - 1
    if frame <= layout[0].start_frame:
        return 0
    if frame >= layout[last_index].end_frame:
        return last_index

    start_frames = get_layout_index(layout).start_frames
    candidate = max(0, min(last_index, upper_bound_le(start_frames, frame)))
    item = layout[candidate]

    if item.start_frame == frame:
        return candidate
    if candidate + 1 <= last_index and layout[candidate + 1].start_frame == frame:
        return candidate + 1

    if item.start_frame <= frame < item.end_frame:
        return candidate

    # Between two clips: hold the one that ended.
    if (
        frame >= item.end_frame
        and candidate + 1 <= last_index
        and frame < layout[candidate + 1].start_frame
    ):
        return candidate

    if frame < item.start_frame:
        return max(0, candidate - 1)
    return min(last_index, candidate + 1)


def find_active_frame_layout_items(
    layout,
    frame: int,
    gap_policy: str = GAP_POLICY_HOLD_NEAREST,
) -> list:
    """All items whose [start_frame, end_frame) contains ``frame``.

    Algorithm:
      1. Fast paths for frames past the end or before the first start.
      2. limit = rightmost item with start_frame <= frame.
      3. start = first item whose running max end exceeds frame. Every
         item before it has already ended, so the expired prefix is
         skipped in O(log n).
      4. Scan [start, limit] keeping items with frame < end_frame.
      5. Apply the gap policy if nothing matched.

    At the very first start frame every item starting there is returned,
    not just ``layout[0]``, so stacked tracks mount together from frame 0.
    """
    if not layout:
        return []

    hold = gap_policy == GAP_POLICY_HOLD_NEAREST

    last_item = layout[-1]
    if frame >= last_item.end_frame:
        return [last_item] if hold else []

    index = get_layout_index(layout)
    limit_index = upper_bound_le(index.start_frames, frame)

    if limit_index < 0:
        return [layout[0]] if hold else []

    start_index = lower_bound_gt(index.max_end_prefix, frame)

    result = [
        layout[i]
        for i in range(start_index, limit_index + 1)
        if frame < layout[i].end_frame
    ]

    if not result and hold:
        return [layout[limit_index]]
    return result


# ── Navigation helpers ───────────────────────────────────────────


def get_layout_item(layout, index: int):
    """Item at ``index`` or None when out of range."""
    if 0 <= index < len(layout):
        return layout[index]
    return None


def get_prev_layout_item(layout, index: int):
    return get_layout_item(layout, index - 1) if index > 0 else None


def get_next_layout_item(layout, index: int):
    return get_layout_item(layout, index + 1) if index >= 0 else None


def find_visual_layout_neighbors(layout, recordings, frame: int):
    """Active, previous and next *visual* items around ``frame``.

    Generated items are skipped: boundary handling should be driven by the
    clips that actually hold decoders. Unknown recordings count as visual.
    Any of the three may be None.

    Returns:
        (active_visual, prev_visual, next_visual)
    """
    if not layout:
        return None, None, None

    recordings_by_id = index_recordings(recordings)

    def _is_visual(item):
        rec = recordings_by_id.get(item.clip.recording_id)
        return rec is None or rec.is_visual

    active_index = find_active_frame_layout_index(layout, frame)

    active_visual = None
    active_visual_index = active_index
    # Latest start wins: a foreground clip beats the background under it.
    for item in find_active_frame_layout_items(layout, frame):
        if _is_visual(item) and (
            active_visual is None or item.start_frame > active_visual.start_frame
        ):
            active_visual = item
    if active_visual is not None:
        starting = get_layout_index(layout).indices_by_start_frame
        for i in starting.get(active_visual.start_frame, ()):
            if layout[i] is active_visual:
                active_visual_index = i
                break

    prev_visual = None
    for i in range(active_visual_index - 1, -1, -1):
        if _is_visual(layout[i]):
            prev_visual = layout[i]
            break

    next_visual = None
    for i in range(active_visual_index + 1, len(layout)):
        if _is_visual(layout[i]):
            next_visual = layout[i]
            break

    return active_visual, prev_visual, next_visual


# ── Webcam selection ─────────────────────────────────────────────


def find_active_webcam_item(layout, frame: int):
    """Active webcam item at ``frame``, or None.

    Webcam tracks may overlap. Items starting exactly at ``frame`` win
    (the last one in layout order); otherwise the covering item with the
    latest start wins. There is no gap hold for webcams: an uncovered
    frame shows no webcam.
    """
    if not layout:
        return None

    index = get_layout_index(layout)

    boundary = index.indices_by_start_frame.get(frame)
    if boundary:
        return layout[boundary[-1]]

    limit_index = upper_bound_le(index.start_frames, frame)
    if limit_index < 0:
        return None

    # Sorted by start, so the first covering item scanning backwards has
    # the latest start; stop once starts drop below a found candidate.
    candidate = None
    for i in range(limit_index, -1, -1):
        item = layout[i]
        if candidate is not None and item.start_frame < candidate.start_frame:
            break
        if item.start_frame <= frame < item.end_frame:
            if candidate is None or item.start_frame >= candidate.start_frame:
                candidate = item
    return candidate
