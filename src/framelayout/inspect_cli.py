"""CLI for inspecting a timeline — layout table or a single frame snapshot.

Usage:
    # Layout table
    framelayout inspect --manifest timeline.yaml

    # Snapshot at a frame (interactive playback unless --rendering)
    framelayout inspect --manifest timeline.yaml --frame 45 [--rendering] [--json]

    # Check that every recording file exists
    framelayout inspect --manifest timeline.yaml --validate
"""

import argparse
import json
from dataclasses import asdict

from .frame_layout import get_timeline_duration_in_frames
from .manifest import load_timeline_manifest, validate_media_paths
from .session import TimelineSession


def format_layout_table(layout, fps) -> list[str]:
    """One line per layout item plus a summary line."""
    groups = {item.group_id for item in layout}
    lines = [
        f"Timeline: {len(layout)} clips, {len(groups)} groups, "
        f"{get_timeline_duration_in_frames(layout)} frames @ {fps}fps"
    ]
    for i, item in enumerate(layout):
        line = (
            f"  [{i:>3}] {item.clip.id:<12} frames {item.start_frame:>6}-{item.end_frame:<6} "
            f"({item.duration_frames:>5})  {item.group_id}"
        )
        persisted = item.persisted_video_state
        if persisted is not None:
            state = "frozen" if persisted.is_frozen else "live"
            line += f"  over {persisted.clip.id} ({state} @ {persisted.base_source_time_ms:.0f}ms)"
        lines.append(line)
    return lines


def snapshot_to_dict(snapshot) -> dict:
    """JSON-ready summary of a FrameSnapshot."""
    clip_data = snapshot.active_clip_data
    active = None
    if clip_data is not None:
        active = {
            "clip_id": clip_data.clip.id,
            "recording_id": clip_data.recording.id,
            "source_time_ms": clip_data.source_time_ms,
            "group_id": clip_data.layout_item.group_id if clip_data.layout_item is not None else None,
        }

    position = snapshot.mockup.position
    return {
        "frame": snapshot.current_frame,
        "active": active,
        "renderable": [item.group_id for item in snapshot.renderable_items],
        "boundary": asdict(snapshot.boundary_state) if snapshot.boundary_state is not None else None,
        "layout": asdict(snapshot.layout),
        "mockup": {
            "enabled": snapshot.mockup.enabled,
            "position": asdict(position) if position is not None else None,
        },
        "transforms": asdict(snapshot.transforms),
        "high_res_scale": list(snapshot.high_res_scale),
    }


def _print_snapshot(summary: dict) -> None:
    print(f"Frame {summary['frame']}")
    active = summary["active"]
    if active is None:
        print("  active:      (none)")
    else:
        print(
            f"  active:      {active['clip_id']} ({active['recording_id']}) "
            f"src {active['source_time_ms']:.1f}ms  {active['group_id']}"
        )
    print(f"  renderable:  {', '.join(summary['renderable']) or '(none)'}")

    layout = summary["layout"]
    print(
        f"  video:       {layout['draw_width']}x{layout['draw_height']} "
        f"at ({layout['offset_x']}, {layout['offset_y']})  scale {layout['scale_factor']:.3f}"
    )
    position = summary["mockup"]["position"]
    if position is not None:
        print(
            f"  mockup:      {position['mockup_width']}x{position['mockup_height']} "
            f"at ({position['mockup_x']}, {position['mockup_y']}), screen "
            f"{position['screen_width']}x{position['screen_height']}"
        )
    boundary = summary["boundary"]
    if boundary is not None:
        flags = [k for k, v in boundary.items() if v is True]
        print(f"  boundary:    {', '.join(flags) or '-'} (overlap {boundary['overlap_frames']})")
    transforms = summary["transforms"]
    if transforms["combined"]:
        print(f"  transform:   {transforms['combined']}")
    if transforms["clip_path"]:
        print(f"  clip-path:   {transforms['clip_path']}")


def main(args=None):
    parser = argparse.ArgumentParser(
        description="Inspect a timeline manifest's frame layout.",
    )
    parser.add_argument(
        "--manifest", required=True,
        help="Path to YAML timeline manifest",
    )
    parser.add_argument(
        "--frame", type=int, default=None,
        help="Show the frame snapshot at this timeline frame",
    )
    parser.add_argument(
        "--rendering", action="store_true",
        help="Resolve the frame in export mode (no premount/hold padding)",
    )
    parser.add_argument(
        "--json", action="store_true",
        help="Print the snapshot as JSON (requires --frame)",
    )
    parser.add_argument(
        "--validate", action="store_true",
        help="Validate manifest and media paths only",
    )
    parsed = parser.parse_args(args)

    if parsed.json and parsed.frame is None:
        parser.error("--json requires --frame")
    if parsed.frame is not None and parsed.frame < 0:
        parser.error("--frame must be >= 0")

    config = load_timeline_manifest(parsed.manifest)

    if parsed.validate:
        validate_media_paths(config)
        print(
            f"Timeline manifest valid: {len(config['recordings'])} recordings, "
            f"{len(config['clips'])} clips"
        )
        print("All paths verified.")
        return

    session = TimelineSession.from_config(config)

    if parsed.frame is None:
        for line in format_layout_table(session.layout, session.fps):
            print(line)
        return

    snapshot = session.snapshot(
        parsed.frame, config["video"]["resolution"], is_rendering=parsed.rendering,
    )
    summary = snapshot_to_dict(snapshot)
    if parsed.json:
        print(json.dumps(summary, indent=2))
    else:
        _print_snapshot(summary)


if __name__ == "__main__":
    main()
