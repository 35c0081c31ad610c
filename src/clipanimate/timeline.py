"""Keyframe timelines — sparse samples of one property, evaluated per frame.

A Timeline is an immutable, strictly frame-ordered tuple of keyframes. It is
built once (usually by TimelineBuilder) and then only read, so evaluating it
from several threads at once is safe.

Evaluation at frame f:
  - f at or before the first keyframe: the first value (no extrapolation).
  - f at or after the last keyframe: the last value (held indefinitely).
  - otherwise the bracketing pair k_i.frame <= f < k_{i+1}.frame is found
    by binary search, local progress t is eased with the *destination*
    keyframe's easing, and the values are blended with lerp().

Two keyframes on the same frame are rejected when the timeline is built,
so the bracketing pair is always unique.

Builder addressing:
  - Abs(x): keyframe at x.
  - Rel(dx): keyframe dx after the previous keyframe (never first).
  - hold(n): repeat the previous value for n more frames.
With TimelineBuilder(fps=...) the amounts are seconds, otherwise frames.
"""

from bisect import bisect_right
from dataclasses import dataclass
from typing import Any, Callable

from .easing import get_easing, linear
from .errors import InvalidTimeline
from .interpolate import lerp


@dataclass(frozen=True)
class Keyframe:
    frame: int
    easing: Callable[[float], float]
    value: Any


@dataclass(frozen=True)
class Abs:
    """Absolute keyframe placement."""
    at: float


@dataclass(frozen=True)
class Rel:
    """Placement relative to the previous keyframe."""
    after: float


class Timeline:
    """Ordered keyframes for a single animated property."""

    __slots__ = ("_keyframes", "_frames")

    def __init__(self, keyframes):
        keyframes = tuple(keyframes)
        if not keyframes:
            raise InvalidTimeline("Timeline requires at least one keyframe")

        prev = None
        for i, kf in enumerate(keyframes):
            if kf.frame < 0:
                raise InvalidTimeline(
                    f"Keyframe {i}: frame must be >= 0, got {kf.frame}"
                )
            if prev is not None and kf.frame <= prev:
                raise InvalidTimeline(
                    f"Keyframe {i}: frame {kf.frame} is not after the "
                    f"previous keyframe's frame {prev}"
                )
            prev = kf.frame

        self._keyframes = keyframes
        self._frames = [kf.frame for kf in keyframes]

    @property
    def keyframes(self) -> tuple[Keyframe, ...]:
        return self._keyframes

    @property
    def start_frame(self) -> int:
        return self._frames[0]

    @property
    def end_frame(self) -> int:
        return self._frames[-1]

    def __len__(self) -> int:
        return len(self._keyframes)

    def __repr__(self) -> str:
        return f"Timeline({list(self._keyframes)!r})"

    def evaluate(self, frame: int):
        """Return the property value at the given (clip-local) frame."""
        keyframes = self._keyframes
        first = keyframes[0]
        if frame <= first.frame:
            return first.value
        last = keyframes[-1]
        if frame >= last.frame:
            return last.value

        i = bisect_right(self._frames, frame) - 1
        a = keyframes[i]
        b = keyframes[i + 1]
        t = (frame - a.frame) / (b.frame - a.frame)
        return lerp(a.value, b.value, b.easing(t))


def constant(value) -> Timeline:
    """A single-keyframe timeline: the value never changes."""
    return Timeline([Keyframe(0, linear, value)])


def animated(value) -> Timeline:
    """Coerce a property argument to a Timeline.

    Accepts a Timeline (returned as is), an unbuilt TimelineBuilder (built),
    or a plain value (wrapped with constant()).
    """
    if isinstance(value, Timeline):
        return value
    if isinstance(value, TimelineBuilder):
        return value.build()
    return constant(value)


class TimelineBuilder:
    """Staging area that accumulates keyframes and produces a Timeline.

    Methods return the builder, so keyframes can be chained:

        TimelineBuilder(fps=60)
            .keyframe(Abs(0.0), "linear", Color.rgba8(0xDA, 0, 0x37, 0))
            .keyframe(Rel(0.3), "out_quadratic", Color.rgb8(0xDA, 0, 0x37))
            .hold(0.3)
            .keyframe(Rel(0.3), "in_quadratic", Color.rgb8(0, 0xDA, 0x37))
            .build()

    Frame resolution and validation happen in build(); the builder cannot
    be reused afterwards.
    """

    def __init__(self, fps: float | None = None):
        if fps is not None and fps <= 0:
            raise ValueError(f"fps must be positive, got {fps!r}")
        self.fps = fps
        self._entries = []
        self._built = False

    def keyframe(self, timing, easing, value) -> "TimelineBuilder":
        self._check_open()
        if not isinstance(timing, (Abs, Rel)):
            raise TypeError(
                f"Keyframe timing must be Abs or Rel, got {type(timing).__name__}"
            )
        self._entries.append(("keyframe", timing, get_easing(easing), value))
        return self

    def hold(self, duration) -> "TimelineBuilder":
        self._check_open()
        self._entries.append(("hold", duration, None, None))
        return self

    def build(self) -> Timeline:
        self._check_open()
        self._built = True

        if not self._entries:
            raise InvalidTimeline("Timeline requires at least one keyframe")

        keyframes = []
        for i, (kind, timing, easing, value) in enumerate(self._entries):
            if not keyframes:
                if kind == "hold":
                    raise InvalidTimeline(
                        f"Entry {i}: hold() needs a previous keyframe"
                    )
                if isinstance(timing, Rel):
                    raise InvalidTimeline(
                        f"Entry {i}: the first keyframe must use Abs, not Rel"
                    )

            if kind == "hold":
                prev = keyframes[-1]
                frame = prev.frame + self._to_frames(timing, i)
                easing, value = linear, prev.value
            elif isinstance(timing, Abs):
                frame = self._to_frames(timing.at, i)
            else:
                frame = keyframes[-1].frame + self._to_frames(timing.after, i)

            if frame < 0:
                raise InvalidTimeline(f"Entry {i}: frame must be >= 0, got {frame}")
            if keyframes and frame <= keyframes[-1].frame:
                raise InvalidTimeline(
                    f"Entry {i}: resolved frame {frame} is not after the "
                    f"previous keyframe's frame {keyframes[-1].frame}"
                )
            keyframes.append(Keyframe(frame, easing, value))

        return Timeline(keyframes)

    def _to_frames(self, amount, index: int) -> int:
        if self.fps is not None:
            return round(amount * self.fps)
        if isinstance(amount, float):
            if not amount.is_integer():
                raise InvalidTimeline(
                    f"Entry {index}: frame offsets must be whole numbers "
                    f"without fps, got {amount}"
                )
            return int(amount)
        return amount

    def _check_open(self) -> None:
        if self._built:
            raise InvalidTimeline("TimelineBuilder was already consumed by build()")
