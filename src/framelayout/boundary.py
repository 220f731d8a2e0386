"""Boundary overlap — keep neighbours mounted around a cut.

During interactive playback the renderer premounts the next clip and
holds the previous one for a short window around each cut, so decoders
are warm when the cut happens and no frame flickers. Export renders each
frame exactly once and needs none of this, so everything is off while
rendering.
"""

from dataclasses import dataclass


# Premount window in seconds. High-resolution sources get a shorter window
# to limit how many large decoders are alive at once.
OVERLAP_SECONDS = 0.5
OVERLAP_SECONDS_HIGH_RES = 0.35
MIN_OVERLAP_FRAMES = 8

HIGH_RES_WIDTH = 1920
HIGH_RES_HEIGHT = 1080


@dataclass(frozen=True)
class BoundaryOverlapState:
    is_near_boundary_start: bool = False
    is_near_boundary_end: bool = False
    should_hold_prev_frame: bool = False
    should_hold_next_frame: bool = False
    overlap_frames: int = 0


def compute_overlap_frames(
    fps: float,
    source_width: int = HIGH_RES_WIDTH,
    source_height: int = HIGH_RES_HEIGHT,
) -> int:
    """Overlap window in frames: max(8, round(fps * seconds))."""
    is_high_res = source_width > HIGH_RES_WIDTH or source_height > HIGH_RES_HEIGHT
    seconds = OVERLAP_SECONDS_HIGH_RES if is_high_res else OVERLAP_SECONDS
    return max(MIN_OVERLAP_FRAMES, round(fps * seconds))


def get_boundary_overlap_state(
    current_frame: int,
    fps: float,
    is_rendering: bool,
    active_item=None,
    prev_item=None,
    next_item=None,
    source_width: int | None = None,
    source_height: int | None = None,
) -> BoundaryOverlapState:
    """Compute which neighbours should stay mounted at ``current_frame``.

    Args:
        current_frame: Timeline frame being shown.
        fps: Frames per second.
        is_rendering: True during export; disables all overlap.
        active_item: Item active at the frame, or None in a gap.
        prev_item: Item before the active one (or before the gap).
        next_item: Item after the active one (or after the gap).
        source_width, source_height: Source resolution, defaults to 1080p.

    Returns:
        BoundaryOverlapState.
    """
    if is_rendering:
        return BoundaryOverlapState()

    overlap_frames = compute_overlap_frames(
        fps,
        source_width or HIGH_RES_WIDTH,
        source_height or HIGH_RES_HEIGHT,
    )

    is_near_start = (
        prev_item is not None
        and active_item is not None
        and active_item.start_frame <= current_frame < active_item.start_frame + overlap_frames
    )

    is_near_end = (
        active_item is not None
        and next_item is not None
        and current_frame >= active_item.start_frame + active_item.duration_frames - overlap_frames
    )

    hold_prev = is_near_start
    hold_next = False

    # In a gap: hold whichever neighbour is closer, so scrubbing in either
    # direction never shows an empty canvas. Ties go to the previous item.
    if active_item is None and (prev_item is not None or next_item is not None):
        dist_to_prev = (
            current_frame - prev_item.end_frame if prev_item is not None else float("inf")
        )
        dist_to_next = (
            next_item.start_frame - current_frame if next_item is not None else float("inf")
        )
        if prev_item is not None and (next_item is None or dist_to_prev <= dist_to_next):
            hold_prev = True
        elif next_item is not None:
            hold_next = True

    return BoundaryOverlapState(
        is_near_boundary_start=is_near_start,
        is_near_boundary_end=is_near_end,
        should_hold_prev_frame=hold_prev,
        should_hold_next_frame=hold_next,
        overlap_frames=overlap_frames,
    )
