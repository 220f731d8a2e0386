"""Placement geometry — where the video (and device mockup) sits on the canvas.

All coordinates are canvas pixels with a top-left origin.

Plain layout:
  ┌──────────────────────────────┐
  │            padding           │
  │   ┌──────────────────────┐   │
  │   │  video, aspect-fit   │   │  ← centered inside the padded area
  │   └──────────────────────┘   │
  └──────────────────────────────┘

Mockup layout: the device frame is aspect-fit into the padded area and
centered. The video then fills the device's screen region (cover fit),
so phones never show letterboxing inside the bezel.
"""

from dataclasses import dataclass


# ── Device presets ───────────────────────────────────────────────
# Native mockup size and screen region (x, y, width, height, corner radius)
# in mockup pixels.

@dataclass(frozen=True)
class ScreenRegion:
    x: float
    y: float
    width: float
    height: float
    corner_radius: float = 0


@dataclass(frozen=True)
class DeviceMockup:
    id: str
    display_name: str
    device_type: str
    width: float
    height: float
    screen: ScreenRegion


DEVICE_MOCKUPS = {
    m.id: m for m in [
        DeviceMockup("iphone-15-pro", "iPhone 15 Pro", "iphone", 430, 880,
                     ScreenRegion(18, 18, 393, 852, 55)),
        DeviceMockup("iphone-15-pro-max", "iPhone 15 Pro Max", "iphone", 468, 956,
                     ScreenRegion(18, 18, 430, 932, 60)),
        DeviceMockup("iphone-14-pro", "iPhone 14 Pro", "iphone", 430, 880,
                     ScreenRegion(18, 18, 393, 852, 55)),
        DeviceMockup("iphone-se", "iPhone SE", "iphone", 396, 776,
                     ScreenRegion(20, 100, 375, 667, 0)),
        DeviceMockup("ipad-pro-11", 'iPad Pro 11"', "ipad", 870, 1220,
                     ScreenRegion(30, 30, 834, 1194, 18)),
        DeviceMockup("ipad-pro-13", 'iPad Pro 13"', "ipad", 1066, 1412,
                     ScreenRegion(30, 30, 1024, 1366, 20)),
        DeviceMockup("ipad-air", "iPad Air", "ipad", 870, 1220,
                     ScreenRegion(30, 30, 820, 1180, 18)),
    ]
}

VALID_DEVICES = set(DEVICE_MOCKUPS)
DEFAULT_DEVICE = "iphone-15-pro"


def resolve_mockup_metadata(mockup: dict | None) -> DeviceMockup | None:
    """Resolve mockup config to device metadata.

    ``mockup`` is the background's mockup dict. A ``custom`` entry
    (width/height/screen) takes precedence over the ``device`` preset.
    Unknown devices resolve to None.
    """
    if not mockup:
        return None

    custom = mockup.get("custom")
    if custom:
        screen = custom.get("screen", {})
        return DeviceMockup(
            id="custom",
            display_name=custom.get("name", "Custom"),
            device_type="custom",
            width=custom["width"],
            height=custom["height"],
            screen=ScreenRegion(
                screen.get("x", 0),
                screen.get("y", 0),
                screen.get("width", custom["width"]),
                screen.get("height", custom["height"]),
                screen.get("corner_radius", 0),
            ),
        )

    return DEVICE_MOCKUPS.get(mockup.get("device", DEFAULT_DEVICE))


# ── Result records ───────────────────────────────────────────────


@dataclass(frozen=True)
class VideoPosition:
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class MockupPosition:
    mockup_x: int
    mockup_y: int
    mockup_width: int
    mockup_height: int
    screen_x: int
    screen_y: int
    screen_width: int
    screen_height: int
    screen_corner_radius: int
    video_x: int
    video_y: int
    video_width: int
    video_height: int
    mockup_scale: float


# ── Fitting ──────────────────────────────────────────────────────


def _aspect(width: float, height: float) -> float:
    return width / height if height > 0 else 0.0


def calculate_video_position(
    canvas_width: float,
    canvas_height: float,
    video_width: float,
    video_height: float,
    padding: float = 60,
) -> VideoPosition:
    """Aspect-fit the video inside the padded canvas, centered.

    Returns unrounded values; callers round once at the end. Degenerate
    sizes give a zero-sized rectangle at the canvas center.
    """
    available_w = max(0.0, canvas_width - padding * 2)
    available_h = max(0.0, canvas_height - padding * 2)

    if video_width <= 0 or video_height <= 0 or available_w <= 0 or available_h <= 0:
        return VideoPosition(canvas_width / 2, canvas_height / 2, 0.0, 0.0)

    video_aspect = _aspect(video_width, video_height)
    if video_aspect > _aspect(available_w, available_h):
        draw_w = available_w
        draw_h = available_w / video_aspect
    else:
        draw_h = available_h
        draw_w = available_h * video_aspect

    return VideoPosition(
        x=(canvas_width - draw_w) / 2,
        y=(canvas_height - draw_h) / 2,
        width=draw_w,
        height=draw_h,
    )


def calculate_video_fit(
    screen_width: float,
    screen_height: float,
    video_width: float,
    video_height: float,
) -> VideoPosition:
    """Cover-fit the video into a screen region (relative to the screen)."""
    if screen_width <= 0 or screen_height <= 0 or video_width <= 0 or video_height <= 0:
        return VideoPosition(0.0, 0.0, float(max(0, screen_width)), float(max(0, screen_height)))

    video_aspect = _aspect(video_width, video_height)
    if video_aspect > _aspect(screen_width, screen_height):
        height = screen_height
        width = screen_height * video_aspect
    else:
        width = screen_width
        height = screen_width / video_aspect

    return VideoPosition(
        x=(screen_width - width) / 2,
        y=(screen_height - height) / 2,
        width=width,
        height=height,
    )


def calculate_mockup_position(
    canvas_width: float,
    canvas_height: float,
    mockup: dict | None,
    video_width: float,
    video_height: float,
    padding: float = 60,
) -> MockupPosition | None:
    """Place a device mockup and its video on the canvas.

    Returns None when the mockup does not resolve to a known device or the
    padded area is empty.
    """
    metadata = resolve_mockup_metadata(mockup)
    if metadata is None or metadata.width <= 0 or metadata.height <= 0:
        return None

    available_w = canvas_width - padding * 2
    available_h = canvas_height - padding * 2
    if available_w <= 0 or available_h <= 0:
        return None

    if _aspect(metadata.width, metadata.height) > _aspect(available_w, available_h):
        scale = available_w / metadata.width
    else:
        scale = available_h / metadata.height

    mockup_w = round(metadata.width * scale)
    mockup_h = round(metadata.height * scale)
    mockup_x = round((canvas_width - metadata.width * scale) / 2)
    mockup_y = round((canvas_height - metadata.height * scale) / 2)

    # Round each edge, not the size, so adjacent edges never drift apart.
    screen = metadata.screen
    left = mockup_x + round(screen.x * scale)
    top = mockup_y + round(screen.y * scale)
    right = mockup_x + round((screen.x + screen.width) * scale)
    bottom = mockup_y + round((screen.y + screen.height) * scale)
    screen_w = max(0, right - left)
    screen_h = max(0, bottom - top)

    fit = calculate_video_fit(screen_w, screen_h, video_width, video_height)

    return MockupPosition(
        mockup_x=mockup_x,
        mockup_y=mockup_y,
        mockup_width=mockup_w,
        mockup_height=mockup_h,
        screen_x=left,
        screen_y=top,
        screen_width=screen_w,
        screen_height=screen_h,
        screen_corner_radius=round(screen.corner_radius * scale),
        video_x=left + round(fit.x),
        video_y=top + round(fit.y),
        video_width=round(fit.width),
        video_height=round(fit.height),
        mockup_scale=scale,
    )


def is_point_in_screen(x: float, y: float, position: MockupPosition) -> bool:
    return (
        position.screen_x <= x <= position.screen_x + position.screen_width
        and position.screen_y <= y <= position.screen_y + position.screen_height
    )
