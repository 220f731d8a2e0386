"""Frame layout container and its lookup index.

A ``FrameLayout`` is an immutable, start-ordered tuple of layout items. It
owns a ``LayoutIndex`` that is built on first use and reused by every
later query against the same layout. Editing the timeline produces a new
``FrameLayout`` (and therefore a new index), so the index can never go
stale: invalidation happens by construction.

Index contents:
  - start_frames: start frame of each item, parallel to layout order.
  - max_end_prefix: running maximum of end frames. Monotonic, so a binary
    search can skip every item that has already ended.
  - indices_by_start_frame: frame -> indices of items starting there.
  - items_by_end_frame: frame -> items ending (exclusive) there.
"""

from bisect import bisect_right
from dataclasses import dataclass, field
from functools import cached_property


@dataclass(frozen=True)
class LayoutIndex:
    start_frames: list[int] = field(default_factory=list)
    max_end_prefix: list[int] = field(default_factory=list)
    indices_by_start_frame: dict[int, list[int]] = field(default_factory=dict)
    items_by_end_frame: dict[int, list] = field(default_factory=dict)


def build_layout_index(items) -> LayoutIndex:
    """Build the index in a single O(n) pass over the items."""
    start_frames = []
    max_end_prefix = []
    indices_by_start_frame = {}
    items_by_end_frame = {}

    running_max_end = None
    for i, item in enumerate(items):
        start_frames.append(item.start_frame)

        if running_max_end is None or item.end_frame > running_max_end:
            running_max_end = item.end_frame
        max_end_prefix.append(running_max_end)

        indices_by_start_frame.setdefault(item.start_frame, []).append(i)
        items_by_end_frame.setdefault(item.end_frame, []).append(item)

    return LayoutIndex(
        start_frames=start_frames,
        max_end_prefix=max_end_prefix,
        indices_by_start_frame=indices_by_start_frame,
        items_by_end_frame=items_by_end_frame,
    )


class FrameLayout(tuple):
    """Immutable sequence of FrameLayoutItems that carries its own index."""

    @cached_property
    def index(self) -> LayoutIndex:
        return build_layout_index(self)

    def __repr__(self):
        return f"FrameLayout({len(self)} items)"


EMPTY_LAYOUT = FrameLayout()


def get_layout_index(layout) -> LayoutIndex:
    """Return the index for a layout.

    FrameLayouts memoize their index. Any other sequence (a plain list, a
    slice) is indexed on the fly: lists are mutable and cannot be weakly
    referenced, so caching them would risk serving a stale index.
    """
    if isinstance(layout, FrameLayout):
        return layout.index
    return build_layout_index(layout)


# ── Binary search helpers ────────────────────────────────────────


def upper_bound_le(sorted_values: list, value) -> int:
    """Rightmost index with sorted_values[i] <= value, or -1 if none."""
    return bisect_right(sorted_values, value) - 1


def lower_bound_gt(sorted_values: list, value) -> int:
    """Leftmost index with sorted_values[i] > value, or len() if none."""
    return bisect_right(sorted_values, value)
