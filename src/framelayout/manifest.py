"""Timeline manifest loader.

Parses a YAML timeline description into engine records (Recording, Clip)
plus the render settings the snapshot needs.

Timeline manifest schema:
  video:
    fps: 30
    resolution: [1920, 1080]
    background: "#1A1A1A"         # optional canvas color
  paths:
    media: "/path/to/media"
  recordings:
    - id: screen
      source_type: video          # video | image | generated
      width: 1920
      height: 1080
      path: "${media}/screen.mp4" # optional, checked by validate_media_paths
  clips:
    - id: c1
      recording_id: screen
      start_time: 0               # ms
      duration: 1000              # ms
      source_in: 0                # optional, ms
      source_out: 1000            # optional, ms
      playback_rate: 1.0          # optional
      transition_in: null         # optional
      transition_out: null        # optional
      intro_fade_ms: 0            # optional
      outro_fade_ms: 0            # optional
  background:                     # optional
    padding: 60
    corner_radius: 15
    shadow_intensity: 85
    mockup: {enabled: true, device: iphone-15-pro}
  crop: {x: 0.1, y: 0.1, width: 0.8, height: 0.8}       # optional
  zoom: {scale: 1.5, pan_x: 0, pan_y: 0}                # optional
  screen: {rotate_x: 0, rotate_y: 10, perspective: 1200} # optional
  engine:                         # optional
    sort_clips: false
    check_playback_rate: true
    max_video_items: 3
    supports_fades: false

The engine tolerates clips that point at unknown recordings; the manifest
does not, since that is always an authoring mistake.
"""

from pathlib import Path

import yaml

from .clips import Clip, Recording, SOURCE_GENERATED, SOURCE_VIDEO, VALID_SOURCE_TYPES
from .common import parse_hex_color, resolve_path_vars
from .geometry import VALID_DEVICES
from .transforms import CropRegion, ZoomTransform, get_screen_transform_string
from .visible_layout import MAX_VIDEO_ITEMS


DEFAULT_CANVAS_COLOR = "#1A1A1A"

ENGINE_DEFAULTS = {
    "sort_clips": False,
    "check_playback_rate": True,
    "max_video_items": MAX_VIDEO_ITEMS,
    "supports_fades": False,
}

_OPTIONAL_CLIP_NUMBERS = ("source_in", "source_out", "intro_fade_ms", "outro_fade_ms")


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


# ── Manifest loading ──────────────────────────────────────────────


def load_timeline_manifest(manifest_path: str | Path) -> dict:
    """Load, validate, and normalize a timeline manifest.

    Processing pipeline:
      1. Parse YAML.
      2. Validate video settings; resolution as tuple, background as RGB.
      3. Resolve ${path} variables in recording paths.
      4. Build Recording and Clip records, validating every field.
      5. Normalize background, crop, zoom, screen and engine settings.

    Args:
        manifest_path: Path to the YAML manifest file.

    Returns:
        Config dict with keys: video, recordings (id -> Recording),
        media (id -> path), clips (list of Clip), background, crop, zoom,
        screen_transform, engine.

    Raises:
        ValueError: Missing/invalid fields, duplicate ids, unknown recordings.
        FileNotFoundError: Missing manifest file.
    """
    manifest_path = Path(manifest_path)
    if not manifest_path.exists():
        raise FileNotFoundError(f"Manifest not found: {manifest_path}")

    with open(manifest_path) as f:
        raw = yaml.safe_load(f)

    if not isinstance(raw, dict):
        raise ValueError("Timeline manifest: expected a mapping at the top level")

    config = {"video": _parse_video(raw)}

    # Path variables for ${name} substitution.
    paths = raw.get("paths", {}) or {}

    recordings, media = _parse_recordings(raw.get("recordings"), paths)
    config["recordings"] = recordings
    config["media"] = media
    config["clips"] = _parse_clips(raw.get("clips"), recordings)
    config["background"] = _parse_background(raw.get("background"))
    config["crop"] = _parse_crop(raw.get("crop"))
    config["zoom"] = _parse_zoom(raw.get("zoom"))
    config["screen_transform"] = _parse_screen(raw.get("screen"))
    config["engine"] = _parse_engine(raw.get("engine"))
    return config


def _parse_video(raw: dict) -> dict:
    if "video" not in raw:
        raise ValueError("Timeline manifest: missing required 'video' section")

    video = dict(raw["video"] or {})
    fps = video.get("fps")
    if not _is_number(fps) or fps <= 0:
        raise ValueError(f"Timeline manifest: video.fps must be > 0, got {fps!r}")

    resolution = video.get("resolution")
    if (
        not isinstance(resolution, (list, tuple))
        or len(resolution) != 2
        or not all(isinstance(v, int) and v > 0 for v in resolution)
    ):
        raise ValueError(
            f"Timeline manifest: video.resolution must be [width, height], got {resolution!r}"
        )
    video["resolution"] = tuple(resolution)
    video["background"] = parse_hex_color(video.get("background", DEFAULT_CANVAS_COLOR))
    return video


def _parse_recordings(entries, paths: dict) -> tuple[dict, dict]:
    if not entries:
        raise ValueError("Timeline manifest: at least one recording is required")

    recordings = {}
    media = {}
    for i, entry in enumerate(entries):
        prefix = f"Recording {i}"
        if "id" not in entry:
            raise ValueError(f"{prefix}: missing required field 'id'")
        rec_id = str(entry["id"])
        prefix = f"Recording {i} ({rec_id})"
        if rec_id in recordings:
            raise ValueError(f"{prefix}: duplicate id '{rec_id}'")

        source_type = entry.get("source_type", SOURCE_VIDEO)
        if source_type not in VALID_SOURCE_TYPES:
            raise ValueError(
                f"{prefix}: invalid source_type '{source_type}'. "
                f"Valid: {sorted(VALID_SOURCE_TYPES)}"
            )

        for key in ("width", "height"):
            value = entry.get(key, 0)
            if not isinstance(value, int) or value < 0:
                raise ValueError(f"{prefix}: {key} must be a non-negative integer, got {value!r}")

        path = entry.get("path")
        if path is not None:
            if source_type == SOURCE_GENERATED:
                raise ValueError(f"{prefix}: generated recordings have no 'path'")
            media[rec_id] = resolve_path_vars(str(path), paths)

        recordings[rec_id] = Recording(
            id=rec_id,
            source_type=source_type,
            width=entry.get("width", 0),
            height=entry.get("height", 0),
        )

    return recordings, media


def _parse_clips(entries, recordings: dict) -> list[Clip]:
    if not entries:
        raise ValueError("Timeline manifest: at least one clip is required")

    clips = []
    seen = set()
    for i, entry in enumerate(entries):
        prefix = f"Clip {i}"
        for key in ("id", "recording_id", "start_time", "duration"):
            if key not in entry:
                raise ValueError(f"{prefix}: missing required field '{key}'")

        clip_id = str(entry["id"])
        prefix = f"Clip {i} ({clip_id})"
        if clip_id in seen:
            raise ValueError(f"{prefix}: duplicate id '{clip_id}'")
        seen.add(clip_id)

        recording_id = str(entry["recording_id"])
        if recording_id not in recordings:
            raise ValueError(f"{prefix}: unknown recording_id '{recording_id}'")

        start_time = entry["start_time"]
        if not _is_number(start_time) or start_time < 0:
            raise ValueError(f"{prefix}: start_time must be >= 0, got {start_time!r}")

        duration = entry["duration"]
        if not _is_number(duration) or duration <= 0:
            raise ValueError(f"{prefix}: duration must be > 0, got {duration!r}")

        for key in _OPTIONAL_CLIP_NUMBERS:
            value = entry.get(key)
            if value is not None and (not _is_number(value) or value < 0):
                raise ValueError(f"{prefix}: {key} must be >= 0, got {value!r}")

        source_in = entry.get("source_in") or 0
        source_out = entry.get("source_out")
        if source_out is not None and source_out < source_in:
            raise ValueError(
                f"{prefix}: source_out ({source_out}) is before source_in ({source_in})"
            )

        rate = entry.get("playback_rate", 1.0)
        if not _is_number(rate) or rate <= 0:
            raise ValueError(f"{prefix}: playback_rate must be > 0, got {rate!r}")

        clips.append(Clip(
            id=clip_id,
            recording_id=recording_id,
            start_time=start_time,
            duration=duration,
            source_in=source_in,
            source_out=source_out,
            playback_rate=rate,
            transition_in=entry.get("transition_in"),
            transition_out=entry.get("transition_out"),
            intro_fade_ms=entry.get("intro_fade_ms"),
            outro_fade_ms=entry.get("outro_fade_ms"),
        ))

    return clips


def _parse_background(background) -> dict | None:
    if background is None:
        return None

    prefix = "Background"
    for key in ("padding", "corner_radius"):
        value = background.get(key)
        if value is not None and (not _is_number(value) or value < 0):
            raise ValueError(f"{prefix}: {key} must be >= 0, got {value!r}")

    shadow = background.get("shadow_intensity")
    if shadow is not None and (not _is_number(shadow) or not 0 <= shadow <= 100):
        raise ValueError(f"{prefix}: shadow_intensity must be in [0, 100], got {shadow!r}")

    mockup = background.get("mockup")
    if mockup is not None:
        if not isinstance(mockup, dict):
            raise ValueError(f"{prefix}: 'mockup' must be a mapping")
        custom = mockup.get("custom")
        if custom is not None:
            for key in ("width", "height"):
                if not _is_number(custom.get(key)) or custom[key] <= 0:
                    raise ValueError(f"{prefix}: mockup.custom.{key} must be > 0")
        else:
            device = mockup.get("device")
            if device is not None and device not in VALID_DEVICES:
                raise ValueError(
                    f"{prefix}: unknown mockup device '{device}'. "
                    f"Valid: {sorted(VALID_DEVICES)}"
                )

    return dict(background)


def _parse_crop(crop) -> CropRegion | None:
    if crop is None:
        return None

    values = {}
    for key, default in (("x", 0.0), ("y", 0.0), ("width", 1.0), ("height", 1.0)):
        value = crop.get(key, default)
        if not _is_number(value) or not 0 <= value <= 1:
            raise ValueError(f"Crop: {key} must be in [0, 1], got {value!r}")
        values[key] = value

    if values["width"] <= 0 or values["height"] <= 0:
        raise ValueError("Crop: width and height must be > 0")
    if values["x"] + values["width"] > 1 or values["y"] + values["height"] > 1:
        raise ValueError("Crop: region extends past the frame")
    return CropRegion(**values)


def _parse_zoom(zoom) -> ZoomTransform | None:
    if zoom is None:
        return None

    scale = zoom.get("scale", 1.0)
    if not _is_number(scale) or scale <= 0:
        raise ValueError(f"Zoom: scale must be > 0, got {scale!r}")

    for key in ("pan_x", "pan_y"):
        if not _is_number(zoom.get(key, 0)):
            raise ValueError(f"Zoom: {key} must be a number, got {zoom[key]!r}")

    return ZoomTransform(
        scale=scale,
        pan_x=zoom.get("pan_x", 0),
        pan_y=zoom.get("pan_y", 0),
    )


def _parse_screen(screen) -> str:
    if screen is None:
        return ""

    for key in ("rotate_x", "rotate_y", "perspective"):
        value = screen.get(key)
        if value is not None and not _is_number(value):
            raise ValueError(f"Screen: {key} must be a number, got {value!r}")

    perspective = screen.get("perspective")
    if perspective is None:
        perspective = 1200
    if perspective <= 0:
        raise ValueError(f"Screen: perspective must be > 0, got {perspective!r}")

    return get_screen_transform_string(
        screen.get("rotate_x") or 0,
        screen.get("rotate_y") or 0,
        perspective,
    )


def _parse_engine(engine) -> dict:
    result = dict(ENGINE_DEFAULTS)
    if engine is None:
        return result

    unknown = set(engine) - set(ENGINE_DEFAULTS)
    if unknown:
        raise ValueError(
            f"Engine: unknown option(s) {sorted(unknown)}. "
            f"Valid: {sorted(ENGINE_DEFAULTS)}"
        )

    for key in ("sort_clips", "check_playback_rate", "supports_fades"):
        if key in engine and not isinstance(engine[key], bool):
            raise ValueError(f"Engine: {key} must be true or false, got {engine[key]!r}")

    max_items = engine.get("max_video_items", MAX_VIDEO_ITEMS)
    if max_items is not None and (not isinstance(max_items, int) or max_items < 1):
        raise ValueError(f"Engine: max_video_items must be >= 1 or null, got {max_items!r}")

    result.update(engine)
    return result


def validate_media_paths(config: dict) -> None:
    """Check that every recording path exists on disk.

    Raises:
        FileNotFoundError: Lists all missing files.
    """
    missing = []
    for rec_id, path in config["media"].items():
        if not Path(path).exists():
            missing.append(f"{rec_id}: {path}")

    if missing:
        msg = f"Missing {len(missing)} media file(s):\n"
        for p in missing:
            msg += f"  - {p}\n"
        raise FileNotFoundError(msg)
