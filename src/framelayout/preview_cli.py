"""CLI for wireframe previews — one frame as an image or the whole timeline.

Usage:
    # Single frame
    framelayout preview --manifest timeline.yaml --output frame.png --frame 45

    # Whole timeline
    framelayout preview --manifest timeline.yaml --output timeline.mp4 [--scale 0.5]
"""

import argparse
from pathlib import Path

from .manifest import load_timeline_manifest
from .preview import (
    build_preview_clip,
    export_preview_video,
    render_snapshot_frame,
    save_preview_image,
)
from .session import TimelineSession


IMAGE_SUFFIXES = {".png", ".jpg", ".jpeg"}
VIDEO_SUFFIXES = {".mp4"}


def main(args=None):
    parser = argparse.ArgumentParser(
        description="Render a wireframe preview of a timeline manifest.",
    )
    parser.add_argument(
        "--manifest", required=True,
        help="Path to YAML timeline manifest",
    )
    parser.add_argument(
        "--output", required=True,
        help="Output path: .png/.jpg for one frame, .mp4 for the timeline",
    )
    parser.add_argument(
        "--frame", type=int, default=None,
        help="Timeline frame to render (image output)",
    )
    parser.add_argument(
        "--scale", type=float, default=1.0,
        help="Output size as a fraction of the manifest resolution",
    )
    parser.add_argument(
        "--interactive", action="store_true",
        help="Resolve frames in interactive mode (premount/hold padding)",
    )
    parser.add_argument(
        "--quiet", action="store_true",
        help="Suppress the encoder progress bar",
    )
    parsed = parser.parse_args(args)

    suffix = Path(parsed.output).suffix.lower()
    if suffix not in IMAGE_SUFFIXES | VIDEO_SUFFIXES:
        parser.error(
            f"Unsupported output type '{suffix}'. "
            f"Valid: {sorted(IMAGE_SUFFIXES | VIDEO_SUFFIXES)}"
        )
    if suffix in IMAGE_SUFFIXES and parsed.frame is None:
        parser.error("Image output requires --frame")
    if suffix in VIDEO_SUFFIXES and parsed.frame is not None:
        parser.error("--frame cannot be used with video output")
    if parsed.scale <= 0:
        parser.error("--scale must be > 0")

    config = load_timeline_manifest(parsed.manifest)
    session = TimelineSession.from_config(config)

    width, height = config["video"]["resolution"]
    # Even dimensions keep yuv420p encoders happy.
    size = (
        max(2, round(width * parsed.scale) // 2 * 2),
        max(2, round(height * parsed.scale) // 2 * 2),
    )
    canvas_color = config["video"]["background"]
    is_rendering = not parsed.interactive

    if suffix in IMAGE_SUFFIXES:
        snapshot = session.snapshot(parsed.frame, size, is_rendering=is_rendering)
        frame = render_snapshot_frame(
            snapshot, size, canvas_color,
            layout=session.layout,
            duration_frames=session.duration_frames,
            recording_ids=list(session.recordings),
        )
        save_preview_image(frame, parsed.output)
        print(f"Frame {parsed.frame} ({size[0]}x{size[1]}) -> {parsed.output}")
        return

    fps = session.fps
    print(
        f"Rendering {session.duration_frames} frames at {fps}fps "
        f"({size[0]}x{size[1]})"
    )
    clip = build_preview_clip(session, size, canvas_color, is_rendering=is_rendering)
    export_preview_video(clip, parsed.output, fps, quiet=parsed.quiet)
    print(f"Done: {parsed.output}")


if __name__ == "__main__":
    main()
