"""Tests for the frame layout builder."""

import dataclasses

import pytest

from framelayout.clips import Clip
from framelayout.frame_layout import (
    build_frame_layout,
    build_webcam_frame_layout,
    calculate_clip_frames,
    get_timeline_duration_in_frames,
    get_webcam_video_start_from,
    is_contiguous,
)
from framelayout.layout_index import EMPTY_LAYOUT, FrameLayout


def _clip(clip_id, recording_id="r1", start=0, duration=1000, **kwargs):
    return Clip(clip_id, recording_id, start, duration, **kwargs)


class TestCalculateClipFrames:
    def test_bounds(self):
        assert calculate_clip_frames(_clip("a", start=1000, duration=500), 30) == (30, 45, 15)

    def test_zero_duration_gets_one_frame(self):
        assert calculate_clip_frames(_clip("a", duration=0), 30) == (0, 1, 1)

    def test_partial_end_frame_rounds_up(self):
        start, end, _ = calculate_clip_frames(_clip("a", start=0, duration=1010), 30)
        assert (start, end) == (0, 31)


class TestBuildFrameLayout:
    def test_empty_input(self, recordings):
        assert len(build_frame_layout([], 30, recordings)) == 0
        assert build_frame_layout(None, 30, recordings) is EMPTY_LAYOUT

    def test_returns_frame_layout(self, recordings):
        layout = build_frame_layout([_clip("a")], 30, recordings)
        assert isinstance(layout, FrameLayout)
        assert layout[0].clip.id == "a"

    def test_end_after_start(self, recordings):
        clips = [_clip("a", duration=1), _clip("b", start=40, duration=0), _clip("c", start=100, duration=5000)]
        for item in build_frame_layout(clips, 30, recordings):
            assert item.end_frame > item.start_frame
            assert item.duration_frames == item.end_frame - item.start_frame

    def test_items_are_immutable(self, recordings):
        item = build_frame_layout([_clip("a")], 30, recordings)[0]
        with pytest.raises(dataclasses.FrozenInstanceError):
            item.start_frame = 5

    def test_sort_clips(self, recordings):
        clips = [_clip("late", start=2000), _clip("early", start=0)]
        layout = build_frame_layout(clips, 30, recordings, sort_clips=True)
        assert [item.clip.id for item in layout] == ["early", "late"]

    def test_input_order_kept_without_sort(self, recordings):
        clips = [_clip("late", start=2000), _clip("early", start=0)]
        layout = build_frame_layout(clips, 30, recordings)
        assert [item.clip.id for item in layout] == ["late", "early"]


class TestGrouping:
    def test_contiguous_clips_share_group(self, recordings):
        a = _clip("a", start=0, duration=1000, source_in=0)
        b = _clip("b", start=1000, duration=2000, source_in=1000)
        layout = build_frame_layout([a, b], 30, recordings)

        assert layout[0].group_id == layout[1].group_id == "group-r1-0"
        assert layout[0].group_duration == 90
        assert layout[1].group_duration == 90
        assert layout[1].group_start_frame == 0
        assert layout[1].group_start_source_in == 0

    def test_playback_rate_change_breaks_group(self, recordings):
        a = _clip("a", start=0, duration=1000, source_in=0)
        b = _clip("b", start=1000, duration=2000, source_in=1000, playback_rate=2.0)
        layout = build_frame_layout([a, b], 30, recordings)

        assert layout[0].group_id != layout[1].group_id
        assert layout[0].group_duration == 30
        assert layout[1].group_id == "group-r1-30"
        assert layout[1].group_duration == 60
        assert layout[1].group_start_source_in == 1000

    def test_rate_check_can_be_disabled(self, recordings):
        a = _clip("a", start=0, duration=1000, source_in=0)
        b = _clip("b", start=1000, duration=2000, source_in=1000, playback_rate=2.0)
        layout = build_frame_layout([a, b], 30, recordings, check_playback_rate=False)
        assert layout[0].group_id == layout[1].group_id

    def test_source_gap_breaks_group(self, recordings):
        a = _clip("a", start=0, duration=1000, source_in=0)
        b = _clip("b", start=1000, duration=1000, source_in=1100)
        layout = build_frame_layout([a, b], 30, recordings)
        assert layout[0].group_id != layout[1].group_id

    def test_small_source_gap_keeps_group(self, recordings):
        a = _clip("a", start=0, duration=1000, source_in=0)
        b = _clip("b", start=1000, duration=1000, source_in=1040)
        layout = build_frame_layout([a, b], 30, recordings)
        assert layout[0].group_id == layout[1].group_id

    def test_transition_breaks_group(self, recordings):
        a = _clip("a", start=0, duration=1000, transition_out="crossfade")
        b = _clip("b", start=1000, duration=1000, source_in=1000)
        layout = build_frame_layout([a, b], 30, recordings)
        assert layout[0].group_id != layout[1].group_id

    def test_recording_change_breaks_group(self, recordings):
        a = _clip("a", start=0, duration=1000)
        b = _clip("b", recording_id="r2", start=1000, duration=1000, source_in=1000)
        layout = build_frame_layout([a, b], 30, recordings)
        assert layout[1].group_id == "group-r2-30"

    def test_timeline_gap_breaks_group(self, recordings):
        a = _clip("a", start=0, duration=1000)
        b = _clip("b", start=1100, duration=1000, source_in=1000)
        layout = build_frame_layout([a, b], 30, recordings)
        assert layout[0].group_id != layout[1].group_id

    def test_group_id_stable_when_splitting(self, recordings):
        whole = build_frame_layout([_clip("a", duration=3000)], 30, recordings)
        split = build_frame_layout(
            [_clip("a1", duration=1500), _clip("a2", start=1500, duration=1500, source_in=1500)],
            30, recordings,
        )
        assert whole[0].group_id == split[0].group_id == split[1].group_id
        assert whole[0].group_duration == split[1].group_duration


class TestIsContiguous:
    def test_no_previous_clip(self):
        assert not is_contiguous(None, _clip("a"), 0, -1, 30)

    def test_one_frame_slack(self):
        a = _clip("a", start=0, duration=1000)
        b = _clip("b", start=1033, duration=1000, source_in=1000)
        assert is_contiguous(a, b, 30, 30, 30)


class TestPersistedVideoState:
    def test_overlay_past_visual_end_is_frozen(self, recordings):
        visual = _clip("v", start=0, duration=2500)
        overlay = _clip("title", recording_id="gen", start=2500, duration=1000)
        layout = build_frame_layout([visual, overlay], 30, recordings)

        assert layout[0].end_frame == 75
        state = layout[1].persisted_video_state
        assert state is not None
        assert state.is_frozen
        assert state.base_source_time_ms == 2499
        assert state.layout_item is layout[0]
        assert state.recording is recordings["r1"]

    def test_overlay_inside_visual_tracks_source_time(self, recordings):
        visual = _clip("v", start=0, duration=3000, source_in=500, playback_rate=2.0)
        overlay = _clip("title", recording_id="gen", start=1000, duration=500)
        layout = build_frame_layout([visual, overlay], 30, recordings)

        state = layout[1].persisted_video_state
        assert not state.is_frozen
        assert state.base_source_time_ms == pytest.approx(2500)

    def test_overlay_without_visual_has_no_state(self, recordings):
        overlay = _clip("title", recording_id="gen", start=0, duration=500)
        layout = build_frame_layout([overlay], 30, recordings)
        assert layout[0].persisted_video_state is None

    def test_unknown_recording_is_not_an_anchor(self, recordings):
        ghost = _clip("ghost", recording_id="missing", start=0, duration=1000)
        overlay = _clip("title", recording_id="gen", start=1000, duration=500)
        layout = build_frame_layout([ghost, overlay], 30, recordings)
        assert len(layout) == 2
        assert layout[0].persisted_video_state is None
        assert layout[1].persisted_video_state is None

    def test_image_is_an_anchor(self, recordings):
        still = _clip("still", recording_id="img", start=0, duration=1000)
        overlay = _clip("title", recording_id="gen", start=500, duration=500)
        layout = build_frame_layout([still, overlay], 30, recordings)
        assert layout[1].persisted_video_state.clip is still

    def test_visual_items_have_no_state(self, recordings):
        layout = build_frame_layout([_clip("a")], 30, recordings)
        assert layout[0].persisted_video_state is None


class TestWebcamLayout:
    def test_sorted_with_webcam_prefix(self):
        clips = [_clip("w2", recording_id="cam", start=1000), _clip("w1", recording_id="cam", start=0)]
        layout = build_webcam_frame_layout(clips, 30)
        assert [item.clip.id for item in layout] == ["w1", "w2"]
        assert layout[0].group_id.startswith("webcam-group-cam-")

    def test_no_persisted_state(self):
        layout = build_webcam_frame_layout([_clip("w1", recording_id="cam")], 30)
        assert layout[0].persisted_video_state is None


class TestLayoutQueries:
    def test_timeline_duration(self, recordings):
        clips = [_clip("a", duration=3000), _clip("b", recording_id="r2", start=1000, duration=500)]
        assert get_timeline_duration_in_frames(build_frame_layout(clips, 30, recordings)) == 90

    def test_timeline_duration_empty(self):
        assert get_timeline_duration_in_frames([]) == 0

    def test_webcam_video_start_from(self):
        layout = build_webcam_frame_layout(
            [_clip("w", recording_id="cam", start=1000, duration=3000, source_in=2000)], 30,
        )
        item = layout[0]
        assert get_webcam_video_start_from(60, item, 30) == pytest.approx(3.0)

    def test_webcam_video_start_from_before_group(self):
        layout = build_webcam_frame_layout(
            [_clip("w", recording_id="cam", start=1000, duration=3000, source_in=2000)], 30,
        )
        assert get_webcam_video_start_from(0, layout[0], 30) == pytest.approx(2.0)
