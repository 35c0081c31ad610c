"""Tests for the moviepy bridge and still frames."""

import numpy as np
import pytest
from PIL import Image

from clipanimate.clip import Rect
from clipanimate.common import Color
from clipanimate.preview import frame_at_time, render_array, render_still, to_videoclip
from clipanimate.timeline import Abs, TimelineBuilder
from clipanimate.video import Video


def _moving_box(settings):
    video = Video(settings)
    video.push_clip(Rect(
        position=TimelineBuilder()
        .keyframe(Abs(0), "linear", (-10.0, 0.0))
        .keyframe(Abs(9), "linear", (10.0, 0.0)),
        size=(4.0, 4.0),
        color=Color.rgb8(0, 255, 0),
    ))
    return video


class TestFrameAtTime:
    def test_maps_to_frame_in_progress(self, tiny_settings):
        video = Video(tiny_settings)
        assert frame_at_time(video, 0.0) == 0
        assert frame_at_time(video, 0.35) == 3
        assert frame_at_time(video, 0.3) == 3

    def test_clamps_to_last_frame(self, tiny_settings):
        video = Video(tiny_settings)
        assert frame_at_time(video, 5.0) == 9
        assert frame_at_time(video, -1.0) == 0


class TestToVideoClip:
    def test_duration_and_fps(self, tiny_settings):
        clip = to_videoclip(_moving_box(tiny_settings))
        assert clip.duration == pytest.approx(1.0)
        assert clip.fps == 10

    def test_frames_are_rgb(self, tiny_settings):
        clip = to_videoclip(_moving_box(tiny_settings))
        frame = clip.get_frame(0)
        assert frame.shape == (18, 32, 3)

    def test_matches_direct_render(self, tiny_settings):
        video = _moving_box(tiny_settings)
        clip = to_videoclip(video)
        expected = render_array(video, 5)[:, :, :3]
        np.testing.assert_array_equal(clip.get_frame(0.5), expected)


class TestRenderStill:
    def test_writes_png(self, tiny_settings, tmp_path):
        out = render_still(_moving_box(tiny_settings), 0, tmp_path / "still.png")
        img = np.array(Image.open(out))
        assert img.shape == (18, 32, 4)
        # Box starts 10px left of center.
        assert tuple(img[9, 6]) == (0, 255, 0, 255)

    def test_out_of_range_raises(self, tiny_settings, tmp_path):
        with pytest.raises(ValueError, match="out of range"):
            render_still(_moving_box(tiny_settings), 10, tmp_path / "still.png")
