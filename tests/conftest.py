"""Shared test fixtures for framelayout tests."""

import pytest
import yaml

from framelayout.clips import Recording


@pytest.fixture
def recordings():
    """Two screen recordings, a still image and a generated source."""
    return {
        "r1": Recording("r1", "video", 1920, 1080),
        "r2": Recording("r2", "video", 1280, 720),
        "img": Recording("img", "image", 800, 600),
        "gen": Recording("gen", "generated"),
    }


def timeline_manifest_dict(media_dir=None) -> dict:
    """A small valid timeline: r1 (0-1s), title card (1-1.5s), r2 (1.5-3s)."""
    media = str(media_dir) if media_dir is not None else "/tmp/framelayout-media"
    return {
        "video": {"fps": 30, "resolution": [1920, 1080], "background": "#1A1A1A"},
        "paths": {"media": media},
        "recordings": [
            {"id": "r1", "source_type": "video", "width": 1920, "height": 1080,
             "path": "${media}/screen.mp4"},
            {"id": "r2", "source_type": "video", "width": 1280, "height": 720,
             "path": "${media}/demo.mp4"},
            {"id": "title", "source_type": "generated"},
        ],
        "clips": [
            {"id": "c1", "recording_id": "r1", "start_time": 0, "duration": 1000},
            {"id": "t1", "recording_id": "title", "start_time": 1000, "duration": 500},
            {"id": "c2", "recording_id": "r2", "start_time": 1500, "duration": 1500,
             "source_in": 2000},
        ],
        "background": {"padding": 60, "corner_radius": 15, "shadow_intensity": 85},
    }


@pytest.fixture
def write_manifest(tmp_path):
    """Write a manifest dict to tmp_path and return its path."""
    def _write(content: dict, name: str = "timeline.yaml"):
        path = tmp_path / name
        path.write_text(yaml.dump(content))
        return path
    return _write


@pytest.fixture
def manifest_file(write_manifest):
    return write_manifest(timeline_manifest_dict())


@pytest.fixture
def timeline_dict():
    """Fresh copy of the standard timeline manifest dict, safe to mutate."""
    return timeline_manifest_dict()
