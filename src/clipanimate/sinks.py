"""Frame sinks — where exported frames go.

A sink receives exactly one begin(settings), then one push_frame(keyframe,
data) per frame in presentation order (data is width * height * 4 RGBA8
bytes), then one end(). Sinks may also provide abort(), which the export
loop calls when it fails part-way so the partial output is flagged as
incomplete rather than left looking finished.

Sinks:
  - FFmpegSink: pipes raw RGBA into ffmpeg (binary from imageio-ffmpeg)
    and encodes an mp4/mov/mkv/webm.
  - PNGSequenceSink: one PNG per frame in a directory.
  - MemorySink: keeps everything in memory (tests, previews).
"""

import subprocess
import tempfile
from pathlib import Path
from typing import Protocol

import imageio_ffmpeg
from PIL import Image

from .errors import ExportSinkError

_FFMPEG = imageio_ffmpeg.get_ffmpeg_exe()

VIDEO_EXTENSIONS = {".mp4", ".mov", ".mkv", ".webm"}


class FrameSink(Protocol):
    def begin(self, settings) -> None: ...

    def push_frame(self, keyframe: bool, data: bytes) -> None: ...

    def end(self) -> None: ...


def _codec_params(codec, crf):
    """Return ffmpeg quality params for the given codec name."""
    if codec == "h264_nvenc":
        return ["-cq", str(crf), "-pix_fmt", "yuv420p"]
    if codec == "libvpx-vp9":
        return ["-crf", str(crf), "-b:v", "0", "-pix_fmt", "yuv420p"]
    return ["-crf", str(crf), "-pix_fmt", "yuv420p"]


def incomplete_path(path: str | Path) -> Path:
    """Where a partial output is moved: clip.mp4 -> clip.incomplete.mp4."""
    p = Path(path)
    return p.with_name(f"{p.stem}.incomplete{p.suffix}")


class FFmpegSink:
    """Encode frames to a video file through an ffmpeg subprocess."""

    def __init__(self, output: str | Path, codec: str = "libx264", crf: int = 20):
        self.output = Path(output)
        self.codec = codec
        self.crf = crf
        self.frames_written = 0
        self._proc = None
        self._stderr = None
        self._frame_size = None
        self._finished = False

    def _command(self, settings) -> list[str]:
        w, h = settings.resolution
        return [
            _FFMPEG, "-y",
            "-f", "rawvideo",
            "-vcodec", "rawvideo",
            "-s", f"{w}x{h}",
            "-pix_fmt", "rgba",
            "-r", f"{settings.fps}",
            "-i", "pipe:0",
            "-an",
            # yuv420p needs even dimensions.
            "-vf", "pad=ceil(iw/2)*2:ceil(ih/2)*2",
            "-c:v", self.codec,
            *_codec_params(self.codec, self.crf),
            str(self.output),
        ]

    def begin(self, settings) -> None:
        if self._proc is not None or self._finished:
            raise ExportSinkError("FFmpegSink.begin() called more than once")
        self.output.parent.mkdir(parents=True, exist_ok=True)
        w, h = settings.resolution
        self._frame_size = w * h * 4
        self._stderr = tempfile.TemporaryFile()
        self._proc = subprocess.Popen(
            self._command(settings),
            stdin=subprocess.PIPE,
            stdout=subprocess.DEVNULL,
            stderr=self._stderr,
        )

    def push_frame(self, keyframe: bool, data: bytes) -> None:
        if self._proc is None:
            raise ExportSinkError("FFmpegSink.push_frame() called before begin()")
        if len(data) != self._frame_size:
            raise ExportSinkError(
                f"Frame has {len(data)} bytes, expected {self._frame_size}",
                frames_written=self.frames_written,
            )
        try:
            self._proc.stdin.write(data)
        except (BrokenPipeError, OSError) as e:
            raise ExportSinkError(
                f"ffmpeg stopped accepting frames: {self._stderr_tail()}",
                frames_written=self.frames_written,
            ) from e
        self.frames_written += 1

    def end(self) -> None:
        if self._proc is None:
            raise ExportSinkError("FFmpegSink.end() called before begin()")
        try:
            self._proc.stdin.close()
        except (BrokenPipeError, OSError):
            pass  # ffmpeg already exited; its return code says why.
        code = self._proc.wait()
        if code != 0:
            raise ExportSinkError(
                f"ffmpeg exited with code {code}: {self._stderr_tail()}",
                frames_written=self.frames_written,
            )
        self._close()

    def abort(self) -> None:
        """Stop ffmpeg and move the partial file to its .incomplete name."""
        if self._proc is not None and self._proc.poll() is None:
            self._proc.kill()
            self._proc.wait()
        self._close()
        if self.output.exists():
            self.output.replace(incomplete_path(self.output))

    def _close(self) -> None:
        self._proc = None
        self._finished = True
        if self._stderr is not None:
            self._stderr.close()
            self._stderr = None

    def _stderr_tail(self, limit: int = 500) -> str:
        if self._stderr is None:
            return ""
        self._stderr.seek(0)
        return self._stderr.read().decode(errors="replace")[-limit:]


class PNGSequenceSink:
    """Write each frame as frame-NNNNNN.png into a directory.

    begin() removes frames and the INCOMPLETE marker left by an earlier
    export into the same directory. Other files are left alone.
    """

    MARKER = "INCOMPLETE"

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)
        self.frames_written = 0
        self._resolution = None
        self._ended = False

    def frame_path(self, index: int) -> Path:
        return self.directory / f"frame-{index:06d}.png"

    def begin(self, settings) -> None:
        if self._resolution is not None:
            raise ExportSinkError("PNGSequenceSink.begin() called more than once")
        self.directory.mkdir(parents=True, exist_ok=True)
        for stale in self.directory.glob("frame-*.png"):
            stale.unlink()
        (self.directory / self.MARKER).unlink(missing_ok=True)
        self._resolution = settings.resolution

    def push_frame(self, keyframe: bool, data: bytes) -> None:
        if self._resolution is None:
            raise ExportSinkError("PNGSequenceSink.push_frame() called before begin()")
        if self._ended:
            raise ExportSinkError("PNGSequenceSink.push_frame() called after end()")
        img = Image.frombytes("RGBA", self._resolution, data)
        img.save(self.frame_path(self.frames_written))
        self.frames_written += 1

    def end(self) -> None:
        if self._resolution is None:
            raise ExportSinkError("PNGSequenceSink.end() called before begin()")
        self._ended = True

    def abort(self) -> None:
        """Leave an INCOMPLETE marker next to the frames written so far."""
        if self.directory.exists():
            (self.directory / self.MARKER).write_text(
                f"export aborted after {self.frames_written} frames\n"
            )


class MemorySink:
    """Keep frames in memory and record the call sequence."""

    def __init__(self):
        self.settings = None
        self.frames = []
        self.keyframes = []
        self.ended = False
        self.aborted = False

    def begin(self, settings) -> None:
        if self.settings is not None:
            raise ExportSinkError("MemorySink.begin() called more than once")
        self.settings = settings

    def push_frame(self, keyframe: bool, data: bytes) -> None:
        if self.settings is None:
            raise ExportSinkError("MemorySink.push_frame() called before begin()")
        if self.ended:
            raise ExportSinkError("MemorySink.push_frame() called after end()")
        self.keyframes.append(keyframe)
        self.frames.append(bytes(data))

    def end(self) -> None:
        if self.settings is None:
            raise ExportSinkError("MemorySink.end() called before begin()")
        self.ended = True

    def abort(self) -> None:
        self.aborted = True


def quick_export(output: str | Path, **kwargs) -> FrameSink:
    """Pick a sink from the output path.

    Video extensions (.mp4, .mov, .mkv, .webm) get an FFmpegSink, a path
    without an extension is treated as a PNG sequence directory.
    """
    path = Path(output)
    suffix = path.suffix.lower()
    if suffix in VIDEO_EXTENSIONS:
        if suffix == ".webm":
            kwargs.setdefault("codec", "libvpx-vp9")
        return FFmpegSink(path, **kwargs)
    if suffix == "":
        return PNGSequenceSink(path)
    raise ValueError(
        f"Unsupported output format '{suffix}' for {output}. "
        f"Valid: {sorted(VIDEO_EXTENSIONS)} or a directory for PNG frames"
    )
