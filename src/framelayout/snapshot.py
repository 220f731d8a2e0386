"""Frame snapshot — the complete geometry and render state for one frame.

Consolidates every "where is this pixel" calculation into a single pure
pass so the video, cursor and overlay layers all read the same numbers:

  1. Layout: scale factor, padding, video rectangle, optional mockup.
  2. Transforms: crop, zoom and 3D screen strings plus the crop clip path.
  3. High-res scale: draw size / source size.

Geometry is designed at a 1920x1080 reference and scaled by
``min(width / 1920, height / 1080)``. The snapshot also carries the
frame's active clip data, boundary state and renderable items untouched,
so one object describes everything a renderer needs.
"""

from dataclasses import dataclass, field

from .geometry import MockupPosition, calculate_mockup_position, calculate_video_position
from .transforms import (
    apply_corner_radius,
    calculate_crop_transform,
    combine_crop_and_zoom_transforms,
    get_crop_transform_string,
    get_zoom_transform_string,
)


REFERENCE_WIDTH = 1920
REFERENCE_HEIGHT = 1080

DEFAULT_BACKGROUND = {
    "padding": 60,
    "corner_radius": 15,
    "shadow_intensity": 85,
}


# ── Records ──────────────────────────────────────────────────────


@dataclass(frozen=True)
class SnapshotLayout:
    draw_width: int
    draw_height: int
    offset_x: int
    offset_y: int
    padding: float
    padding_scaled: float
    scale_factor: float
    corner_radius: float
    shadow_intensity: float
    active_source_width: float
    active_source_height: float


@dataclass(frozen=True)
class SnapshotMockup:
    enabled: bool = False
    data: dict | None = None
    position: MockupPosition | None = None


@dataclass(frozen=True)
class SnapshotTransforms:
    crop: str = ""
    zoom: str = ""
    screen_3d: str = ""
    combined: str = ""
    clip_path: str | None = None


@dataclass(frozen=True)
class FrameSnapshot:
    layout: SnapshotLayout
    mockup: SnapshotMockup
    transforms: SnapshotTransforms
    high_res_scale: tuple[float, float]
    zoom_transform: object = None
    velocity: tuple[float, float] = (0.0, 0.0)
    active_clip_data: object = None
    boundary_state: object = None
    renderable_items: tuple = field(default_factory=tuple)
    current_frame: int = 0


# ── Calculation ──────────────────────────────────────────────────


def _background_value(background: dict | None, key: str):
    if background and background.get(key) is not None:
        return background[key]
    return DEFAULT_BACKGROUND[key]


def calculate_frame_snapshot(
    composition_width: float,
    composition_height: float,
    video_width: float,
    video_height: float,
    *,
    source_width: float | None = None,
    source_height: float | None = None,
    recording_width: float | None = None,
    recording_height: float | None = None,
    background: dict | None = None,
    crop=None,
    zoom=None,
    screen_transform: str = "",
    is_editing_crop: bool = False,
    active_clip_data=None,
    boundary_state=None,
    renderable_items=(),
    current_frame: int = 0,
) -> FrameSnapshot:
    """Calculate the render state for one frame.

    Args:
        composition_width, composition_height: Output canvas size.
        video_width, video_height: Fallback source size.
        source_width, source_height: Size of the decoded source video.
        recording_width, recording_height: Size of the active recording;
            preferred over the source and fallback sizes.
        background: Dict with padding, corner_radius, shadow_intensity and
            an optional mockup dict ({enabled, device | custom}). Missing
            keys use DEFAULT_BACKGROUND.
        crop: CropRegion or {x, y, width, height} in 0-1 units, or None.
        zoom: ZoomTransform or dict, or None.
        screen_transform: Precomputed 3D screen transform string.
        is_editing_crop: While the crop editor is open the full frame is
            shown, so crop, zoom and 3D strings are blanked.
        active_clip_data, boundary_state, renderable_items, current_frame:
            Carried through to the snapshot unchanged.

    Returns:
        FrameSnapshot.
    """
    # ── Step 1: layout ──
    scale_factor = min(
        composition_width / REFERENCE_WIDTH,
        composition_height / REFERENCE_HEIGHT,
    )

    padding = _background_value(background, "padding")
    padding_scaled = padding * scale_factor
    corner_radius = _background_value(background, "corner_radius") * scale_factor
    shadow_intensity = _background_value(background, "shadow_intensity")

    mockup_data = (background or {}).get("mockup")
    mockup_enabled = bool(mockup_data and mockup_data.get("enabled"))

    active_w = recording_width or source_width or video_width
    active_h = recording_height or source_height or video_height

    video_pos = calculate_video_position(
        composition_width, composition_height, active_w, active_h, padding_scaled,
    )
    draw_w = round(video_pos.width)
    draw_h = round(video_pos.height)

    mockup_position = None
    if mockup_enabled:
        mockup_position = calculate_mockup_position(
            composition_width, composition_height, mockup_data,
            active_w, active_h, padding_scaled,
        )

    # ── Step 2: transforms ──
    if mockup_position is not None:
        crop_base_w, crop_base_h = mockup_position.video_width, mockup_position.video_height
    else:
        crop_base_w, crop_base_h = draw_w, draw_h

    crop_transform = calculate_crop_transform(
        None if is_editing_crop else crop, crop_base_w, crop_base_h,
    )
    crop_str = get_crop_transform_string(crop_transform)
    clip_path = crop_transform.clip_path
    if crop_transform.is_active:
        clip_path = apply_corner_radius(clip_path, corner_radius, crop_transform.scale)

    zoom_str = get_zoom_transform_string(zoom)
    zoom_crop = combine_crop_and_zoom_transforms(crop_str, zoom_str)
    if screen_transform:
        combined = f"{screen_transform} {zoom_crop}".strip()
    else:
        combined = zoom_crop

    if is_editing_crop:
        transforms = SnapshotTransforms(clip_path=clip_path)
    else:
        transforms = SnapshotTransforms(
            crop=crop_str,
            zoom=zoom_str,
            screen_3d=screen_transform,
            combined=combined,
            clip_path=clip_path,
        )

    # ── Step 3: high-res scale ──
    high_res_x = draw_w / active_w if active_w > 0 else 1.0
    high_res_y = draw_h / active_h if active_h > 0 else 1.0

    return FrameSnapshot(
        layout=SnapshotLayout(
            draw_width=draw_w,
            draw_height=draw_h,
            offset_x=round(video_pos.x),
            offset_y=round(video_pos.y),
            padding=padding,
            padding_scaled=padding_scaled,
            scale_factor=scale_factor,
            corner_radius=corner_radius,
            shadow_intensity=shadow_intensity,
            active_source_width=active_w,
            active_source_height=active_h,
        ),
        mockup=SnapshotMockup(
            enabled=mockup_enabled,
            data=mockup_data,
            position=mockup_position,
        ),
        transforms=transforms,
        high_res_scale=(high_res_x, high_res_y),
        zoom_transform=None if is_editing_crop else zoom,
        active_clip_data=active_clip_data,
        boundary_state=boundary_state,
        renderable_items=tuple(renderable_items),
        current_frame=current_frame,
    )


def video_to_composition_coords(video_x: float, video_y: float, snapshot: FrameSnapshot) -> tuple[float, float]:
    """Map a point in source video pixels to composition pixels.

    Used to pin overlays (e.g. the cursor) to the video. Goes through the
    mockup's video rectangle when a mockup is shown.
    """
    layout = snapshot.layout
    nx = video_x / layout.active_source_width if layout.active_source_width > 0 else 0.0
    ny = video_y / layout.active_source_height if layout.active_source_height > 0 else 0.0

    position = snapshot.mockup.position
    if snapshot.mockup.enabled and position is not None:
        return (
            position.video_x + nx * position.video_width,
            position.video_y + ny * position.video_height,
        )

    return (
        layout.offset_x + nx * layout.draw_width,
        layout.offset_y + ny * layout.draw_height,
    )
