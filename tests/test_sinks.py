"""Tests for frame sinks.

FFmpegSink tests encode real files with the ffmpeg binary bundled by
imageio-ffmpeg and probe them with moviepy.
"""

import dataclasses

import numpy as np
import pytest
from moviepy import VideoFileClip
from PIL import Image

from clipanimate.clip import Rect
from clipanimate.common import Color
from clipanimate.errors import ExportSinkError
from clipanimate.sinks import (
    FFmpegSink,
    MemorySink,
    PNGSequenceSink,
    incomplete_path,
    quick_export,
)
from clipanimate.video import Video, VideoSettings


def _red_box_video(settings):
    video = Video(settings)
    video.push_clip(Rect(size=(16.0, 8.0), color=Color.rgb8(255, 0, 0)))
    return video


class TestMemorySink:
    def test_records_frames(self, tiny_settings):
        sink = MemorySink()
        _red_box_video(tiny_settings).export(sink, logger=None)
        assert sink.settings is tiny_settings
        assert len(sink.frames) == 10
        assert all(len(f) == 32 * 18 * 4 for f in sink.frames)
        assert sink.ended

    def test_push_before_begin_raises(self):
        with pytest.raises(ExportSinkError, match="before begin"):
            MemorySink().push_frame(True, b"")

    def test_begin_twice_raises(self, tiny_settings):
        sink = MemorySink()
        sink.begin(tiny_settings)
        with pytest.raises(ExportSinkError, match="more than once"):
            sink.begin(tiny_settings)

    def test_push_after_end_raises(self, tiny_settings):
        sink = MemorySink()
        sink.begin(tiny_settings)
        sink.end()
        with pytest.raises(ExportSinkError, match="after end"):
            sink.push_frame(True, b"")


class TestPNGSequenceSink:
    def test_writes_one_png_per_frame(self, tiny_settings, tmp_path):
        out = tmp_path / "frames"
        _red_box_video(tiny_settings).export(PNGSequenceSink(out), logger=None)
        files = sorted(out.glob("frame-*.png"))
        assert len(files) == 10
        assert files[0].name == "frame-000000.png"

    def test_png_content(self, tiny_settings, tmp_path):
        out = tmp_path / "frames"
        _red_box_video(tiny_settings).export(PNGSequenceSink(out), logger=None)
        img = np.array(Image.open(out / "frame-000000.png"))
        assert img.shape == (18, 32, 4)
        assert tuple(img[9, 16]) == (255, 0, 0, 255)
        assert tuple(img[0, 0]) == (0, 0, 0, 255)

    def test_abort_leaves_marker(self, tmp_path, tiny_settings):
        sink = PNGSequenceSink(tmp_path / "frames")
        sink.begin(tiny_settings)
        sink.abort()
        assert (tmp_path / "frames" / "INCOMPLETE").exists()

    def test_reexport_replaces_longer_sequence(self, tiny_settings, tmp_path):
        out = tmp_path / "frames"
        _red_box_video(tiny_settings).export(PNGSequenceSink(out), logger=None)
        shorter = dataclasses.replace(tiny_settings, duration=0.5)
        _red_box_video(shorter).export(PNGSequenceSink(out), logger=None)
        files = sorted(out.glob("frame-*.png"))
        assert [f.name for f in files] == [f"frame-{i:06d}.png" for i in range(5)]

    def test_successful_export_clears_old_marker(self, tiny_settings, tmp_path):
        out = tmp_path / "frames"
        out.mkdir()
        (out / "INCOMPLETE").write_text("export aborted after 3 frames\n")
        _red_box_video(tiny_settings).export(PNGSequenceSink(out), logger=None)
        assert not (out / "INCOMPLETE").exists()
        assert len(list(out.glob("frame-*.png"))) == 10

    def test_begin_keeps_unrelated_files(self, tiny_settings, tmp_path):
        out = tmp_path / "frames"
        out.mkdir()
        (out / "notes.txt").write_text("keep me")
        PNGSequenceSink(out).begin(tiny_settings)
        assert (out / "notes.txt").read_text() == "keep me"

    def test_push_after_end_raises(self, tiny_settings, tmp_path):
        sink = PNGSequenceSink(tmp_path / "frames")
        sink.begin(tiny_settings)
        sink.end()
        with pytest.raises(ExportSinkError, match="after end"):
            sink.push_frame(True, bytes(32 * 18 * 4))
        assert sink.frames_written == 0

    def test_end_before_begin_raises(self, tmp_path):
        with pytest.raises(ExportSinkError, match="before begin"):
            PNGSequenceSink(tmp_path / "frames").end()


class TestFFmpegSink:
    def test_encodes_mp4(self, tmp_path):
        settings = VideoSettings(fps=10, resolution=(64, 48), duration=1.0)
        out = tmp_path / "nested" / "out.mp4"
        sink = FFmpegSink(out)
        _red_box_video(settings).export(sink, logger=None)
        assert out.exists()
        assert sink.frames_written == 10
        with VideoFileClip(str(out)) as clip:
            assert abs(clip.duration - 1.0) < 0.2
            assert tuple(clip.size) == (64, 48)

    def test_odd_resolution_is_padded(self, tmp_path):
        settings = VideoSettings(fps=10, resolution=(33, 17), duration=0.5)
        out = tmp_path / "odd.mp4"
        _red_box_video(settings).export(FFmpegSink(out), logger=None)
        assert out.exists()

    def test_push_before_begin_raises(self, tmp_path):
        with pytest.raises(ExportSinkError, match="before begin"):
            FFmpegSink(tmp_path / "x.mp4").push_frame(True, b"")

    def test_wrong_frame_size_raises(self, tmp_path, tiny_settings):
        sink = FFmpegSink(tmp_path / "x.mp4")
        sink.begin(tiny_settings)
        try:
            with pytest.raises(ExportSinkError, match="expected"):
                sink.push_frame(True, b"\x00" * 10)
        finally:
            sink.abort()

    def test_begin_twice_raises(self, tmp_path, tiny_settings):
        sink = FFmpegSink(tmp_path / "x.mp4")
        sink.begin(tiny_settings)
        try:
            with pytest.raises(ExportSinkError, match="more than once"):
                sink.begin(tiny_settings)
        finally:
            sink.abort()

    def test_abort_removes_final_name(self, tmp_path, tiny_settings):
        out = tmp_path / "partial.mp4"
        sink = FFmpegSink(out)
        sink.begin(tiny_settings)
        sink.push_frame(True, bytes(32 * 18 * 4))
        sink.abort()
        assert not out.exists()


class TestQuickExport:
    def test_mp4(self, tmp_path):
        sink = quick_export(tmp_path / "out.mp4")
        assert isinstance(sink, FFmpegSink)
        assert sink.codec == "libx264"

    def test_webm_uses_vp9(self, tmp_path):
        assert quick_export(tmp_path / "out.webm").codec == "libvpx-vp9"

    def test_directory_is_png_sequence(self, tmp_path):
        assert isinstance(quick_export(tmp_path / "frames"), PNGSequenceSink)

    def test_codec_override(self, tmp_path):
        assert quick_export(tmp_path / "out.mp4", codec="h264_nvenc").codec == "h264_nvenc"

    def test_unsupported_extension_raises(self, tmp_path):
        with pytest.raises(ValueError, match="Unsupported output format"):
            quick_export(tmp_path / "out.gif")


class TestIncompletePath:
    def test_inserts_marker_before_suffix(self):
        assert incomplete_path("/tmp/clip.mp4").name == "clip.incomplete.mp4"
