"""Video — the clip collection and the per-frame render dispatch loop.

The Video owns its clips for its whole lifetime and drives export frame by
frame, strictly in order:

  1. Pick the clips active at this frame.
  2. Evaluate each active clip at its local frame (frame - clip.start).
     With workers > 1 clips are evaluated in a thread pool; the results
     are joined in clip order before anything is submitted.
  3. Group the instances into batches: consecutive clips with the same
     shape share one batch, so insertion order is also paint order.
  4. Submit the batches to the renderer and push the resulting RGBA frame
     to the sink before frame + 1 is evaluated.

Errors are never swallowed. Schedules are validated before the sink is
opened. A failing renderer raises RenderSubmissionError, a failing sink
ExportSinkError; in both cases the sink's abort() (if it has one) is
called so a partial output is never mistaken for a finished one.
"""

import datetime
from concurrent.futures import ThreadPoolExecutor
from contextlib import nullcontext
from dataclasses import dataclass

import proglog

from .common import Color
from .errors import ExportError, ExportSinkError, RenderSubmissionError
from .instance import Batch
from .render import RasterRenderer
from .sinks import FrameSink


@dataclass(frozen=True)
class VideoSettings:
    fps: float = 60.0
    resolution: tuple[int, int] = (1920, 1080)
    duration: float = 30.0  # seconds (a timedelta is accepted too)
    background_color: Color = Color.rgb8(0x17, 0x17, 0x17)

    def __post_init__(self):
        if isinstance(self.duration, datetime.timedelta):
            object.__setattr__(self, "duration", self.duration.total_seconds())
        object.__setattr__(self, "resolution", tuple(self.resolution))
        if self.fps <= 0:
            raise ValueError(f"fps must be positive, got {self.fps!r}")
        if self.duration < 0:
            raise ValueError(f"duration must be >= 0, got {self.duration!r}")
        if len(self.resolution) != 2 or min(self.resolution) <= 0:
            raise ValueError(f"resolution must be (width, height) > 0, got {self.resolution!r}")

    @property
    def total_frames(self) -> int:
        return round(self.duration * self.fps)

    def to_frame(self, seconds: float) -> int:
        return round(seconds * self.fps)


class Video:
    """An ordered set of clips rendered against shared settings."""

    def __init__(self, settings: VideoSettings | None = None):
        self.settings = settings or VideoSettings()
        self._clips = []

    @property
    def clips(self) -> tuple:
        return tuple(self._clips)

    @property
    def total_frames(self) -> int:
        return self.settings.total_frames

    def push_clip(self, clip):
        """Append a clip (painted over every clip pushed before it)."""
        clip.schedule.validate(self.total_frames)
        self._clips.append(clip)
        return clip

    def validate(self) -> None:
        """Check every clip schedule against the video length."""
        for clip in self._clips:
            clip.schedule.validate(self.total_frames)

    # ── Per-frame evaluation ─────────────────────────────────────

    def active_clips(self, frame: int) -> list:
        return [clip for clip in self._clips if clip.is_active(frame)]

    def frame_batches(self, frame: int, pool: ThreadPoolExecutor | None = None) -> list[Batch]:
        """Evaluate all active clips at this frame and batch their instances."""
        active = self.active_clips(frame)
        if pool is not None and len(active) > 1:
            # map() yields in submission order, which keeps batching stable.
            instances = list(pool.map(lambda clip: clip.instance_at(frame), active))
        else:
            instances = [clip.instance_at(frame) for clip in active]

        batches = []
        for clip, instance in zip(active, instances):
            if not batches or batches[-1].shape != clip.shape:
                batches.append(Batch(clip.shape))
            batches[-1].instances.append(instance)
        return batches

    def render_frame(self, renderer, frame: int, pool: ThreadPoolExecutor | None = None) -> bytes:
        """Evaluate and submit one frame, returning its RGBA8 bytes."""
        batches = self.frame_batches(frame, pool)
        try:
            return renderer.render(batches)
        except Exception as e:
            raise RenderSubmissionError(
                f"Renderer rejected frame {frame}: {e}", frame=frame,
            ) from e

    def frames(self, renderer=None, workers: int = 1):
        """Yield (frame, rgba_bytes) for every frame in order."""
        self.validate()
        renderer = renderer or RasterRenderer.for_settings(self.settings)
        with _pool(workers) as pool:
            for frame in range(self.total_frames):
                yield frame, self.render_frame(renderer, frame, pool)

    # ── Export ───────────────────────────────────────────────────

    def export(
        self,
        sink: FrameSink,
        renderer=None,
        workers: int = 1,
        logger="bar",
        keyframe_interval: int | None = None,
    ) -> int:
        """Render every frame into the sink. Returns the number of frames written.

        Args:
            sink: Frame sink (begin / push_frame / end, optional abort).
            renderer: Defaults to a RasterRenderer for the video settings.
            workers: Threads used to evaluate clips within a frame.
            logger: "bar" for a progress bar, None for silence, or a
                proglog logger.
            keyframe_interval: Flag every Nth frame as a keyframe for the
                sink. None flags every frame.
        """
        self.validate()
        if keyframe_interval is not None and keyframe_interval < 1:
            raise ValueError(
                f"keyframe_interval must be >= 1 or None, got {keyframe_interval!r}"
            )
        renderer = renderer or RasterRenderer.for_settings(self.settings)
        logger = proglog.default_bar_logger(logger)
        total = self.total_frames

        try:
            sink.begin(self.settings)
        except ExportError:
            raise
        except Exception as e:
            raise ExportSinkError(f"Sink failed to begin: {e}") from e

        written = 0
        try:
            with _pool(workers) as pool:
                for frame in logger.iter_bar(frame=range(total)):
                    data = self.render_frame(renderer, frame, pool)
                    keyframe = keyframe_interval is None or frame % keyframe_interval == 0
                    try:
                        sink.push_frame(keyframe, data)
                    except Exception as e:
                        raise ExportSinkError(
                            f"Sink rejected frame {frame}: {e}", frame=frame,
                        ) from e
                    written += 1
            try:
                sink.end()
            except Exception as e:
                raise ExportSinkError(f"Sink failed to finalize: {e}") from e
        except Exception as e:
            if isinstance(e, ExportError):
                e.frames_written = written
            abort = getattr(sink, "abort", None)
            if abort is not None:
                abort()
            raise

        return written


def _pool(workers: int):
    if workers > 1:
        return ThreadPoolExecutor(max_workers=workers)
    return nullcontext(None)
