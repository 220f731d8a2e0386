"""Tests for TimelineSession: the engine wired end to end."""

import pytest

from conftest import timeline_manifest_dict
from framelayout.clips import Clip
from framelayout.manifest import load_timeline_manifest
from framelayout.session import TimelineSession


@pytest.fixture
def session(manifest_file):
    return TimelineSession.from_config(load_timeline_manifest(manifest_file))


class TestFromConfig:
    def test_layout_built(self, session):
        assert [item.clip.id for item in session.layout] == ["c1", "t1", "c2"]
        assert session.duration_frames == 90
        assert session.fps == 30

    def test_engine_settings(self, write_manifest):
        content = timeline_manifest_dict()
        content["engine"] = {"max_video_items": 1, "supports_fades": True}
        session = TimelineSession.from_config(load_timeline_manifest(write_manifest(content)))
        assert session.resolver.max_video_items == 1
        assert session.resolver.supports_fades


class TestSnapshot:
    def test_video_frame(self, session):
        snap = session.snapshot(50, (1920, 1080), is_rendering=True)
        data = snap.active_clip_data
        assert data.clip.id == "c2"
        assert data.source_time_ms == pytest.approx(2000 + 5 * 1000 / 30)
        assert snap.layout.active_source_width == 1280
        assert [item.clip.id for item in snap.renderable_items] == ["c2"]
        assert snap.current_frame == 50

    def test_generated_frame_uses_frozen_background(self, session):
        snap = session.snapshot(35, (1920, 1080), is_rendering=True)
        data = snap.active_clip_data
        assert data.clip.id == "c1"
        assert data.source_time_ms == 999
        assert snap.layout.active_source_width == 1920

    def test_rendering_has_no_boundary_holds(self, session):
        snap = session.snapshot(46, (1920, 1080), is_rendering=True)
        assert not snap.boundary_state.should_hold_prev_frame
        assert snap.boundary_state.overlap_frames == 0

    def test_interactive_boundary_state(self, session):
        snap = session.snapshot(20, (1920, 1080))
        assert snap.boundary_state.is_near_boundary_end
        assert snap.boundary_state.overlap_frames == 15

    def test_composition_size(self, session):
        snap = session.snapshot(10, (960, 540), is_rendering=True)
        assert snap.layout.scale_factor == 0.5
        assert (snap.layout.draw_width, snap.layout.draw_height) == (853, 480)

    def test_past_end_holds_last_item(self, session):
        snap = session.snapshot(500, (1920, 1080), is_rendering=True)
        assert [item.clip.id for item in snap.renderable_items] == ["c2"]
        assert snap.active_clip_data.clip.id == "c2"


class TestIdentityStability:
    def test_consecutive_frames_share_items(self, session):
        first = session.snapshot(10, (1920, 1080))
        second = session.snapshot(11, (1920, 1080))
        assert second.renderable_items is first.renderable_items

    def test_replace_clips_resets(self, session):
        first = session.snapshot(10, (1920, 1080))
        session.replace_clips([Clip("c1", "r1", 0, 1000)])
        second = session.snapshot(10, (1920, 1080))
        assert second.renderable_items is not first.renderable_items
        assert session.duration_frames == 30
