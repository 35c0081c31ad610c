"""Clips — scheduled visual elements that own their animated properties.

Every clip has a Schedule (start frame, optional end frame) and turns its
timelines into an Instance for a given clip-local frame. Animation is
authored relative to the clip's own start: at video frame f the clip's
timelines are evaluated at f - start.

Clip is the extension point. A new kind of visual only needs a `shape`
key (what the renderer batches and draws on) and an evaluate() method;
scheduling comes from the base class.
"""

import math
from dataclasses import dataclass

from .common import WHITE
from .errors import SchedulingError
from .instance import Instance, transform
from .timeline import animated


@dataclass(frozen=True)
class Schedule:
    """Active frame range [start, end). end=None runs until the video ends."""
    start: int = 0
    end: int | None = None

    @classmethod
    def from_seconds(cls, start: float, end: float | None, fps: float) -> "Schedule":
        """Convert second timestamps to frames. end=None or inf is unbounded."""
        start_frame = round(start * fps)
        if end is None or math.isinf(end):
            return cls(start_frame, None)
        return cls(start_frame, round(end * fps))

    @property
    def unbounded(self) -> bool:
        return self.end is None

    def resolved_end(self, total_frames: int) -> int:
        return total_frames if self.end is None else self.end

    def is_active(self, frame: int) -> bool:
        if frame < self.start:
            return False
        return self.end is None or frame < self.end

    def local_frame(self, frame: int) -> int:
        return frame - self.start

    def validate(self, total_frames: int) -> None:
        """Raise SchedulingError if the range is impossible for this video."""
        if self.start < 0:
            raise SchedulingError(f"Clip start must be >= 0, got {self.start}")
        end = self.resolved_end(total_frames)
        if end < self.start:
            what = "video end" if self.end is None else "end"
            raise SchedulingError(
                f"Clip {what} (frame {end}) is before its start (frame {self.start})"
            )


class Clip:
    """Base class for anything the video can schedule and draw."""

    shape: str = ""

    def __init__(self, start: int = 0, end: int | None = None, label: str | None = None):
        self.schedule = Schedule(start, end)
        self.label = label

    @property
    def start(self) -> int:
        return self.schedule.start

    @property
    def end(self) -> int | None:
        return self.schedule.end

    def is_active(self, frame: int) -> bool:
        return self.schedule.is_active(frame)

    def local_frame(self, frame: int) -> int:
        return self.schedule.local_frame(frame)

    def evaluate(self, local_frame: int) -> Instance:
        raise NotImplementedError

    def instance_at(self, frame: int) -> Instance:
        """Evaluate the clip at a video frame (caller checks is_active)."""
        return self.evaluate(self.local_frame(frame))

    def __repr__(self) -> str:
        name = f" {self.label!r}" if self.label else ""
        return f"<{type(self).__name__}{name} frames {self.start}..{self.end}>"


class Shape(Clip):
    """A filled shape with animated position, size and color.

    Each property accepts a Timeline, an unbuilt TimelineBuilder, or a plain
    value (held for the whole clip).
    """

    def __init__(
        self,
        position=(0.0, 0.0),
        size=(100.0, 100.0),
        color=WHITE,
        start: int = 0,
        end: int | None = None,
        label: str | None = None,
    ):
        super().__init__(start, end, label)
        self.position = animated(position)
        self.size = animated(size)
        self.color = animated(color)

    def evaluate(self, local_frame: int) -> Instance:
        return Instance(
            matrix=transform(
                self.position.evaluate(local_frame),
                self.size.evaluate(local_frame),
            ),
            color=self.color.evaluate(local_frame),
        )


class Rect(Shape):
    """Axis-aligned rectangle, optionally with rounded corners.

    radius is a fraction of the shorter side (0.2 = 20%), matching how
    corner rounding is authored: it scales with the rectangle.
    """

    shape = "rect"

    def __init__(self, *args, radius=0.0, **kwargs):
        super().__init__(*args, **kwargs)
        self.radius = animated(radius)

    def evaluate(self, local_frame: int) -> Instance:
        base = super().evaluate(local_frame)
        return Instance(
            matrix=base.matrix,
            color=base.color,
            radius=self.radius.evaluate(local_frame),
        )


class Ellipse(Shape):
    """Ellipse inscribed in the clip's size box."""

    shape = "ellipse"
