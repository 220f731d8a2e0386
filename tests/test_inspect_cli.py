"""Tests for the inspect subcommand."""

import json

import pytest

from conftest import timeline_manifest_dict
from framelayout.inspect_cli import format_layout_table, main, snapshot_to_dict
from framelayout.manifest import load_timeline_manifest
from framelayout.session import TimelineSession


@pytest.fixture
def session(manifest_file):
    return TimelineSession.from_config(load_timeline_manifest(manifest_file))


class TestFormatLayoutTable:
    def test_summary_line(self, session):
        lines = format_layout_table(session.layout, session.fps)
        assert lines[0] == "Timeline: 3 clips, 3 groups, 90 frames @ 30fps"
        assert len(lines) == 4

    def test_generated_item_shows_background(self, session):
        lines = format_layout_table(session.layout, session.fps)
        assert "t1" in lines[2]
        assert "over c1 (frozen @ 999ms)" in lines[2]
        assert "over" not in lines[1]

    def test_empty_layout(self):
        assert format_layout_table([], 30) == ["Timeline: 0 clips, 0 groups, 0 frames @ 30fps"]


class TestSnapshotToDict:
    def test_keys(self, session):
        summary = snapshot_to_dict(session.snapshot(50, (1920, 1080), is_rendering=True))
        assert set(summary) == {
            "frame", "active", "renderable", "boundary",
            "layout", "mockup", "transforms", "high_res_scale",
        }
        assert summary["active"]["clip_id"] == "c2"
        assert summary["active"]["recording_id"] == "r2"
        assert len(summary["renderable"]) == 1
        assert summary["layout"]["draw_width"] == 1707
        assert summary["mockup"] == {"enabled": False, "position": None}

    def test_json_serializable(self, session):
        summary = snapshot_to_dict(session.snapshot(20, (1920, 1080)))
        assert json.loads(json.dumps(summary))["boundary"]["is_near_boundary_end"] is True


class TestInspectMain:
    def test_layout_table(self, manifest_file, capsys):
        main(["--manifest", str(manifest_file)])
        out = capsys.readouterr().out
        assert out.startswith("Timeline: 3 clips")
        assert "c2" in out

    def test_frame_text(self, manifest_file, capsys):
        main(["--manifest", str(manifest_file), "--frame", "50", "--rendering"])
        out = capsys.readouterr().out
        assert out.startswith("Frame 50")
        assert "active:      c2 (r2)" in out
        assert "video:       1707x960 at (107, 60)" in out

    def test_frame_json(self, manifest_file, capsys):
        main(["--manifest", str(manifest_file), "--frame", "35", "--json"])
        summary = json.loads(capsys.readouterr().out)
        assert summary["frame"] == 35
        assert summary["active"]["clip_id"] == "c1"
        assert summary["active"]["source_time_ms"] == 999

    def test_json_requires_frame(self, manifest_file):
        with pytest.raises(SystemExit):
            main(["--manifest", str(manifest_file), "--json"])

    def test_negative_frame(self, manifest_file):
        with pytest.raises(SystemExit):
            main(["--manifest", str(manifest_file), "--frame", "-1"])

    def test_invalid_manifest_raises(self, write_manifest):
        content = timeline_manifest_dict()
        content["clips"][0]["duration"] = 0
        with pytest.raises(ValueError, match="duration must be > 0"):
            main(["--manifest", str(write_manifest(content))])

    def test_validate_ok(self, tmp_path, write_manifest, capsys):
        (tmp_path / "screen.mp4").write_bytes(b"")
        (tmp_path / "demo.mp4").write_bytes(b"")
        path = write_manifest(timeline_manifest_dict(tmp_path))
        main(["--manifest", str(path), "--validate"])
        out = capsys.readouterr().out
        assert "Timeline manifest valid: 3 recordings, 3 clips" in out
        assert "All paths verified." in out

    def test_validate_missing_media(self, tmp_path, write_manifest):
        path = write_manifest(timeline_manifest_dict(tmp_path))
        with pytest.raises(FileNotFoundError, match="Missing 2 media file"):
            main(["--manifest", str(path), "--validate"])
