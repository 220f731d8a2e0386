"""CSS-style transform strings for crop, zoom and the 3D screen tilt.

The renderer applies the combined transform to the video element with a
centered transform origin:

    combined = "<screen 3D> <zoom> <crop>"

Crop regions are normalized (0-1) rectangles of the video. Cropping scales
the video so the region fills the draw area, translates the region's
center to the draw area's center and hides everything else with an
``inset()`` clip path.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class CropRegion:
    x: float = 0.0
    y: float = 0.0
    width: float = 1.0
    height: float = 1.0

    @property
    def is_full_frame(self) -> bool:
        return self.x <= 0 and self.y <= 0 and self.width >= 1 and self.height >= 1


@dataclass(frozen=True)
class CropTransform:
    scale: float = 1.0
    translate_x: float = 0.0
    translate_y: float = 0.0
    clip_path: str | None = None
    is_active: bool = False


@dataclass(frozen=True)
class ZoomTransform:
    """Camera zoom at a frame.

    ``scale_compensation_*`` keep the zoom focus pinned while scaling
    around the center; ``pan_*`` is the camera offset. All in pixels.
    """

    scale: float = 1.0
    pan_x: float = 0.0
    pan_y: float = 0.0
    scale_compensation_x: float = 0.0
    scale_compensation_y: float = 0.0


NO_CROP = CropTransform()


def _num(value: float, digits: int) -> str:
    """Format a number for a transform string, without trailing zeros."""
    rounded = round(value, digits) + 0.0
    if rounded.is_integer():
        return str(int(rounded))
    return repr(rounded)


def _clamp01(value: float) -> float:
    return min(1.0, max(0.0, value))


def normalize_crop(crop) -> CropRegion | None:
    """Coerce a crop dict/CropRegion into a clamped CropRegion.

    Returns None for a missing, empty or degenerate region.
    """
    if crop is None:
        return None
    if isinstance(crop, dict):
        crop = CropRegion(
            x=crop.get("x", 0.0),
            y=crop.get("y", 0.0),
            width=crop.get("width", 1.0),
            height=crop.get("height", 1.0),
        )

    x = _clamp01(crop.x)
    y = _clamp01(crop.y)
    width = min(_clamp01(crop.width), 1.0 - x)
    height = min(_clamp01(crop.height), 1.0 - y)
    if width <= 0 or height <= 0:
        return None
    return CropRegion(x, y, width, height)


def calculate_crop_transform(crop, base_width: float, base_height: float) -> CropTransform:
    """Transform that makes ``crop`` fill a ``base_width`` x ``base_height`` area."""
    region = normalize_crop(crop)
    if region is None or region.is_full_frame or base_width <= 0 or base_height <= 0:
        return NO_CROP

    scale = min(1 / region.width, 1 / region.height)

    region_cx = (region.x + region.width / 2) * base_width
    region_cy = (region.y + region.height / 2) * base_height
    translate_x = -(region_cx - base_width / 2) * scale
    translate_y = -(region_cy - base_height / 2) * scale

    top = region.y * 100
    right = (1 - region.x - region.width) * 100
    bottom = (1 - region.y - region.height) * 100
    left = region.x * 100
    clip_path = (
        f"inset({_num(top, 3)}% {_num(right, 3)}% "
        f"{_num(bottom, 3)}% {_num(left, 3)}%)"
    )

    return CropTransform(
        scale=scale,
        translate_x=translate_x,
        translate_y=translate_y,
        clip_path=clip_path,
        is_active=True,
    )


def get_crop_transform_string(transform: CropTransform) -> str:
    if not transform.is_active:
        return ""
    return (
        f"translate({_num(transform.translate_x, 3)}px, {_num(transform.translate_y, 3)}px) "
        f"scale({_num(transform.scale, 4)})"
    )


def apply_corner_radius(clip_path: str | None, corner_radius: float, scale: float) -> str | None:
    """Round the corners of an ``inset()`` clip path.

    The radius is divided by the crop scale because the clip path is
    applied before the element is scaled up.
    """
    if not clip_path or corner_radius <= 0 or scale <= 0:
        return clip_path
    return f"{clip_path[:-1]} round {_num(corner_radius / scale, 3)}px)"


def get_zoom_transform_string(zoom: ZoomTransform | dict | None) -> str:
    """``translate3d(..) scale3d(..)`` for a zoom, or "" for no zoom."""
    if zoom is None:
        return ""
    if isinstance(zoom, dict):
        zoom = ZoomTransform(**zoom)

    tx = zoom.scale_compensation_x + zoom.pan_x
    ty = zoom.scale_compensation_y + zoom.pan_y
    if zoom.scale == 1 and tx == 0 and ty == 0:
        return ""

    scale = _num(zoom.scale, 4)
    return (
        f"translate3d({_num(tx, 3)}px, {_num(ty, 3)}px, 0) "
        f"scale3d({scale}, {scale}, 1)"
    )


def get_screen_transform_string(
    rotate_x: float = 0.0,
    rotate_y: float = 0.0,
    perspective: float = 1200,
) -> str:
    """3D tilt of the whole screen, or "" when flat."""
    if not rotate_x and not rotate_y:
        return ""
    return (
        f"perspective({_num(perspective, 3)}px) "
        f"rotateX({_num(rotate_x, 3)}deg) rotateY({_num(rotate_y, 3)}deg)"
    )


def combine_crop_and_zoom_transforms(crop_str: str, zoom_str: str) -> str:
    """Zoom applies on top of the crop: ``"<zoom> <crop>"``."""
    return " ".join(part for part in (zoom_str, crop_str) if part)
