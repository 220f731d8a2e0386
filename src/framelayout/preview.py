"""Wireframe preview rendering.

Draws a FrameSnapshot as a flat diagram so layout decisions can be checked
without decoding any media:

  ┌─────────────────────────────────────┐
  │  c2  src 1234ms  group-r1-30        │  ← active clip label
  │     ┌───────────────────────┐       │
  │     │   video rectangle     │       │  ← colored by recording
  │     └───────────────────────┘       │
  │ ▇▇▇▇▇▇▇▇▇▇|▇▇▇▇▇▇      ▇▇▇▇▇▇▇▇      │  ← timeline strip + playhead
  └─────────────────────────────────────┘

Single frames are returned as numpy arrays (h, w, 3) uint8; a whole
timeline becomes a moviepy VideoClip built from a frame function.
"""

from pathlib import Path

import numpy as np
from PIL import Image, ImageDraw
from moviepy import VideoClip

from .common import draw_label, load_font
from .timing import ms_to_frame_floor


# ── Constants ────────────────────────────────────────────────────

RECORDING_COLORS = [
    (70, 130, 180),   # steel blue
    (200, 110, 60),   # orange
    (90, 160, 90),    # green
    (150, 90, 170),   # purple
    (190, 170, 60),   # gold
    (60, 160, 160),   # teal
]

MOCKUP_BODY_COLOR = (45, 45, 48)
SCREEN_COLOR = (0, 0, 0)
TEXT_COLOR = (230, 230, 228)
MUTED_COLOR = (120, 120, 118)
PLAYHEAD_COLOR = (230, 60, 60)

_REF_H = 1080
_REF_LABEL_FONT = (26, 10)
_REF_STRIP_H = (36, 10)
_REF_MARGIN = (16, 4)


def _scaled(ref_and_floor: tuple[int, int], h: int) -> int:
    ref_val, floor = ref_and_floor
    return max(floor, round(ref_val * h / _REF_H))


def recording_color(recording_id: str, recording_ids) -> tuple[int, int, int]:
    """Stable color for a recording, by its position in sorted id order."""
    ordered = sorted(recording_ids)
    if recording_id not in ordered:
        return MUTED_COLOR
    return RECORDING_COLORS[ordered.index(recording_id) % len(RECORDING_COLORS)]


# ── Frame rendering ──────────────────────────────────────────────


def _draw_video(draw, snapshot, fill) -> None:
    layout = snapshot.layout
    position = snapshot.mockup.position

    if snapshot.mockup.enabled and position is not None:
        if position.screen_width <= 0 or position.screen_height <= 0:
            return
        draw.rounded_rectangle(
            [(position.mockup_x, position.mockup_y),
             (position.mockup_x + position.mockup_width - 1,
              position.mockup_y + position.mockup_height - 1)],
            radius=max(1, position.screen_corner_radius + 4),
            fill=MOCKUP_BODY_COLOR,
        )
        screen_box = [
            (position.screen_x, position.screen_y),
            (position.screen_x + position.screen_width - 1,
             position.screen_y + position.screen_height - 1),
        ]
        draw.rounded_rectangle(screen_box, radius=position.screen_corner_radius, fill=SCREEN_COLOR)

        # Cover fit overflows the screen; clip to it.
        left = max(position.video_x, position.screen_x)
        top = max(position.video_y, position.screen_y)
        right = min(position.video_x + position.video_width, position.screen_x + position.screen_width)
        bottom = min(position.video_y + position.video_height, position.screen_y + position.screen_height)
        if right > left and bottom > top:
            draw.rounded_rectangle(
                [(left, top), (right - 1, bottom - 1)],
                radius=position.screen_corner_radius,
                fill=fill,
            )
        return

    if layout.draw_width <= 0 or layout.draw_height <= 0:
        return
    draw.rounded_rectangle(
        [(layout.offset_x, layout.offset_y),
         (layout.offset_x + layout.draw_width - 1, layout.offset_y + layout.draw_height - 1)],
        radius=round(layout.corner_radius),
        fill=fill,
    )


def _draw_timeline_strip(draw, layout, current_frame, duration_frames, visible, w, h, colors) -> int:
    """Draw the item strip along the bottom edge; return its top y."""
    strip_h = _scaled(_REF_STRIP_H, h)
    top = h - strip_h
    if not layout or duration_frames <= 0:
        return top

    visible_groups = {item.group_id for item in visible}
    px_per_frame = w / duration_frames

    for item in layout:
        x0 = round(item.start_frame * px_per_frame)
        x1 = max(x0 + 1, round(item.end_frame * px_per_frame) - 1)
        color = colors(item.clip.recording_id)
        if item.group_id not in visible_groups:
            color = tuple(c // 3 for c in color)
        draw.rectangle([(x0, top + 2), (x1, h - 3)], fill=color)

    playhead_x = min(w - 1, round(current_frame * px_per_frame))
    draw.line([(playhead_x, top), (playhead_x, h - 1)], fill=PLAYHEAD_COLOR, width=2)
    return top


def render_snapshot_frame(
    snapshot,
    size: tuple[int, int],
    canvas_color: tuple[int, int, int] = (26, 26, 26),
    layout=None,
    duration_frames: int = 0,
    recording_ids=(),
) -> np.ndarray:
    """Render a wireframe of a FrameSnapshot.

    Args:
        snapshot: FrameSnapshot to draw.
        size: (width, height) of the output frame.
        canvas_color: Background RGB.
        layout: Optional FrameLayout; draws the timeline strip when given.
        duration_frames: Timeline length for the strip.
        recording_ids: All recording ids, for stable per-recording colors.

    Returns:
        numpy array of shape (h, w, 3), dtype uint8.
    """
    w, h = size
    img = Image.new("RGB", (w, h), canvas_color)
    draw = ImageDraw.Draw(img)

    def _color(recording_id):
        return recording_color(recording_id, recording_ids)

    clip_data = snapshot.active_clip_data
    fill = _color(clip_data.recording.id) if clip_data is not None else MUTED_COLOR
    _draw_video(draw, snapshot, fill)

    _draw_timeline_strip(
        draw, layout, snapshot.current_frame, duration_frames,
        snapshot.renderable_items, w, h, _color,
    )

    # Labels.
    font = load_font(_scaled(_REF_LABEL_FONT, h))
    margin = _scaled(_REF_MARGIN, h)
    y = margin
    if clip_data is not None:
        group = clip_data.layout_item.group_id if clip_data.layout_item is not None else "-"
        y += draw_label(
            img,
            f"{clip_data.clip.id}  src {clip_data.source_time_ms:.0f}ms  {group}",
            (margin, y), font, TEXT_COLOR, max_width=w - 2 * margin,
        ) + margin // 2
    y += draw_label(
        img,
        f"frame {snapshot.current_frame}  mounted {len(snapshot.renderable_items)}",
        (margin, y), font, MUTED_COLOR, max_width=w - 2 * margin,
    ) + margin // 2
    if snapshot.transforms.combined:
        draw_label(img, snapshot.transforms.combined, (margin, y), font, MUTED_COLOR,
                   max_width=w - 2 * margin)

    return np.array(img)


def save_preview_image(frame: np.ndarray, output_path: str | Path) -> None:
    Path(output_path).parent.mkdir(parents=True, exist_ok=True)
    Image.fromarray(frame).save(str(output_path))


# ── Timeline rendering ───────────────────────────────────────────


def build_preview_clip(session, size: tuple[int, int], canvas_color=(26, 26, 26), is_rendering: bool = True) -> VideoClip:
    """Build a moviepy clip that renders the session's timeline frame by frame.

    Snapshots are computed in export mode by default, so each frame shows
    exactly the items an export would mount.
    """
    fps = session.fps
    duration_frames = session.duration_frames
    recording_ids = list(session.recordings)

    def _frame_function(t):
        frame = min(max(0, duration_frames - 1), ms_to_frame_floor(t * 1000, fps))
        snapshot = session.snapshot(frame, size, is_rendering=is_rendering)
        return render_snapshot_frame(
            snapshot, size, canvas_color,
            layout=session.layout,
            duration_frames=duration_frames,
            recording_ids=recording_ids,
        )

    duration = max(1, duration_frames) / fps
    return VideoClip(frame_function=_frame_function, duration=duration).with_fps(fps)


def export_preview_video(clip: VideoClip, output_path: str | Path, fps: float, quiet: bool = False) -> None:
    """Write a preview clip to mp4 with standard encoding settings."""
    Path(output_path).parent.mkdir(parents=True, exist_ok=True)
    clip.write_videofile(
        str(output_path),
        fps=fps,
        codec="libx264",
        audio=False,
        preset="medium",
        ffmpeg_params=["-crf", "20", "-pix_fmt", "yuv420p"],
        logger=None if quiet else "bar",
    )
