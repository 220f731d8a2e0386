"""Timeline session — one owner for a timeline's layout and per-frame state.

Wires the engine together for a caller that asks "what do I draw at frame
N?" frame after frame:

    clips ─► build_frame_layout ─► FrameLayout (+ index)
                                      │
    frame ─► find_visual_layout_neighbors ─► get_boundary_overlap_state
          ─► VisibleLayoutResolver ─► renderable items
          ─► get_active_clip_data_at_frame ─► resolve_effective_clip_data
          ─► calculate_frame_snapshot ─► FrameSnapshot

The session owns the previous renderable items, so identity stability
holds across successive snapshot() calls and is reset whenever the clips
are replaced.
"""

from .boundary import get_boundary_overlap_state
from .clip_data import get_active_clip_data_at_frame, resolve_effective_clip_data
from .active_items import find_visual_layout_neighbors
from .clips import index_recordings
from .frame_layout import build_frame_layout, get_timeline_duration_in_frames
from .snapshot import calculate_frame_snapshot
from .visible_layout import MAX_VIDEO_ITEMS, VisibleLayoutResolver


class TimelineSession:
    def __init__(
        self,
        clips,
        recordings,
        fps: float,
        video_width: int,
        video_height: int,
        *,
        background: dict | None = None,
        crop=None,
        zoom=None,
        screen_transform: str = "",
        sort_clips: bool = False,
        check_playback_rate: bool = True,
        max_video_items: int | None = MAX_VIDEO_ITEMS,
        supports_fades: bool = False,
    ):
        self.recordings = index_recordings(recordings)
        self.fps = fps
        self.video_width = video_width
        self.video_height = video_height
        self.background = background
        self.crop = crop
        self.zoom = zoom
        self.screen_transform = screen_transform
        self.sort_clips = sort_clips
        self.check_playback_rate = check_playback_rate
        self.resolver = VisibleLayoutResolver(max_video_items, supports_fades)
        self.layout = None
        self.replace_clips(clips)

    @classmethod
    def from_config(cls, config: dict) -> "TimelineSession":
        """Session for a config returned by load_timeline_manifest."""
        engine = config["engine"]
        width, height = config["video"]["resolution"]
        return cls(
            config["clips"],
            config["recordings"],
            config["video"]["fps"],
            width,
            height,
            background=config["background"],
            crop=config["crop"],
            zoom=config["zoom"],
            screen_transform=config["screen_transform"],
            sort_clips=engine["sort_clips"],
            check_playback_rate=engine["check_playback_rate"],
            max_video_items=engine["max_video_items"],
            supports_fades=engine["supports_fades"],
        )

    @property
    def duration_frames(self) -> int:
        return get_timeline_duration_in_frames(self.layout)

    def replace_clips(self, clips) -> None:
        """Rebuild the layout from a new clip list and drop stability state."""
        self.layout = build_frame_layout(
            clips,
            self.fps,
            self.recordings,
            sort_clips=self.sort_clips,
            check_playback_rate=self.check_playback_rate,
        )
        self.resolver.reset()

    def snapshot(
        self,
        frame: int,
        composition_size: tuple[int, int],
        is_rendering: bool = False,
        *,
        is_editing_crop: bool = False,
        zoom=None,
    ):
        """Compute the FrameSnapshot for ``frame``.

        ``zoom`` overrides the session zoom for this frame (e.g. from a
        precomputed camera path).
        """
        active_visual, prev_visual, next_visual = find_visual_layout_neighbors(
            self.layout, self.recordings, frame,
        )

        active_data = get_active_clip_data_at_frame(self.layout, frame, self.fps, self.recordings)
        effective_data = resolve_effective_clip_data(active_data, frame, self.fps)
        recording = effective_data.recording if effective_data is not None else None

        source_w = recording.width if recording is not None else None
        source_h = recording.height if recording is not None else None

        boundary_state = get_boundary_overlap_state(
            frame,
            self.fps,
            is_rendering,
            active_item=active_visual,
            prev_item=prev_visual,
            next_item=next_visual,
            source_width=source_w,
            source_height=source_h,
        )

        renderable = self.resolver.resolve(
            self.layout,
            frame,
            self.fps,
            is_rendering,
            boundary_state=boundary_state,
            prev_item=prev_visual,
            next_item=next_visual,
            recordings=self.recordings,
        )

        composition_width, composition_height = composition_size
        return calculate_frame_snapshot(
            composition_width,
            composition_height,
            self.video_width,
            self.video_height,
            recording_width=source_w,
            recording_height=source_h,
            background=self.background,
            crop=self.crop,
            zoom=zoom if zoom is not None else self.zoom,
            screen_transform=self.screen_transform,
            is_editing_crop=is_editing_crop,
            active_clip_data=effective_data,
            boundary_state=boundary_state,
            renderable_items=renderable,
            current_frame=frame,
        )
