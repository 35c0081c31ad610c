"""Easing functions — remap normalized progress t in [0, 1] to eased progress.

Every easing here returns exactly 0.0 at t=0 and exactly 1.0 at t=1.
Intermediate values may leave [0, 1]: the "back" family overshoots on
purpose and callers must not clamp the result.

Naming follows the in/out/in_out convention:
  - in_*:     slow start, fast finish.
  - out_*:    fast start, slow finish.
  - in_out_*: slow at both ends, symmetric around t=0.5.

Easings are referenced from manifests by name (see EASINGS / get_easing)
and from Python by function value.
"""

import functools
import math


# Overshoot constants for the back family (Penner's 10% overshoot).
BACK_C1 = 1.70158
BACK_C2 = BACK_C1 * 1.525
BACK_C3 = BACK_C1 + 1


def _pinned(fn):
    """Force exact endpoints on easings whose formula rounds near 0 or 1."""
    @functools.wraps(fn)
    def wrapper(t: float) -> float:
        if t <= 0.0:
            return 0.0 if t == 0.0 else fn(t)
        if t >= 1.0:
            return 1.0 if t == 1.0 else fn(t)
        return fn(t)
    return wrapper


def linear(t: float) -> float:
    return t


# ── Polynomial ────────────────────────────────────────────────────

def in_quadratic(t: float) -> float:
    return t * t


def out_quadratic(t: float) -> float:
    return 1 - (1 - t) ** 2


def in_out_quadratic(t: float) -> float:
    if t < 0.5:
        return 2 * t * t
    return 1 - (-2 * t + 2) ** 2 / 2


def in_cubic(t: float) -> float:
    return t ** 3


def out_cubic(t: float) -> float:
    return 1 - (1 - t) ** 3


def in_out_cubic(t: float) -> float:
    if t < 0.5:
        return 4 * t ** 3
    return 1 - (-2 * t + 2) ** 3 / 2


def in_quartic(t: float) -> float:
    return t ** 4


def out_quartic(t: float) -> float:
    return 1 - (1 - t) ** 4


def in_out_quartic(t: float) -> float:
    if t < 0.5:
        return 8 * t ** 4
    return 1 - (-2 * t + 2) ** 4 / 2


def in_quintic(t: float) -> float:
    return t ** 5


def out_quintic(t: float) -> float:
    return 1 - (1 - t) ** 5


def in_out_quintic(t: float) -> float:
    if t < 0.5:
        return 16 * t ** 5
    return 1 - (-2 * t + 2) ** 5 / 2


# ── Exponential ───────────────────────────────────────────────────

@_pinned
def in_exponential(t: float) -> float:
    return 2 ** (10 * t - 10)


@_pinned
def out_exponential(t: float) -> float:
    return 1 - 2 ** (-10 * t)


@_pinned
def in_out_exponential(t: float) -> float:
    if t < 0.5:
        return 2 ** (20 * t - 10) / 2
    return (2 - 2 ** (-20 * t + 10)) / 2


# ── Sine / circular ───────────────────────────────────────────────

@_pinned
def in_sine(t: float) -> float:
    return 1 - math.cos(t * math.pi / 2)


@_pinned
def out_sine(t: float) -> float:
    return math.sin(t * math.pi / 2)


@_pinned
def in_out_sine(t: float) -> float:
    return -(math.cos(math.pi * t) - 1) / 2


@_pinned
def in_circular(t: float) -> float:
    return 1 - math.sqrt(1 - t * t)


@_pinned
def out_circular(t: float) -> float:
    return math.sqrt(1 - (t - 1) ** 2)


@_pinned
def in_out_circular(t: float) -> float:
    if t < 0.5:
        return (1 - math.sqrt(1 - (2 * t) ** 2)) / 2
    return (math.sqrt(1 - (-2 * t + 2) ** 2) + 1) / 2


# ── Back (overshoot) ──────────────────────────────────────────────

@_pinned
def in_back(t: float) -> float:
    return BACK_C3 * t ** 3 - BACK_C1 * t ** 2


@_pinned
def out_back(t: float) -> float:
    return 1 + BACK_C3 * (t - 1) ** 3 + BACK_C1 * (t - 1) ** 2


@_pinned
def in_out_back(t: float) -> float:
    if t < 0.5:
        return ((2 * t) ** 2 * ((BACK_C2 + 1) * 2 * t - BACK_C2)) / 2
    return ((2 * t - 2) ** 2 * ((BACK_C2 + 1) * (2 * t - 2) + BACK_C2) + 2) / 2


# ── Cubic bezier ──────────────────────────────────────────────────

def cubic_bezier(x1: float, y1: float, x2: float, y2: float):
    """Build an easing from a CSS-style cubic bezier (0,0)-(x1,y1)-(x2,y2)-(1,1).

    x1 and x2 must lie in [0, 1] so the curve is a function of time; y1 and
    y2 are free, which allows overshoot.

    The curve's x(s) is inverted with a few Newton steps, falling back to
    bisection where the derivative is too flat.
    """
    if not (0.0 <= x1 <= 1.0 and 0.0 <= x2 <= 1.0):
        raise ValueError(
            f"cubic_bezier x control points must be in [0, 1], got {x1}, {x2}"
        )

    def _curve(s, p1, p2):
        return 3 * (1 - s) ** 2 * s * p1 + 3 * (1 - s) * s ** 2 * p2 + s ** 3

    def _slope(s, p1, p2):
        return (
            3 * (1 - s) ** 2 * p1
            + 6 * (1 - s) * s * (p2 - p1)
            + 3 * s ** 2 * (1 - p2)
        )

    def _solve_s(t):
        s = t
        for _ in range(8):
            err = _curve(s, x1, x2) - t
            if abs(err) < 1e-7:
                return s
            d = _slope(s, x1, x2)
            if abs(d) < 1e-6:
                break
            s -= err / d
        lo, hi = 0.0, 1.0
        s = t
        for _ in range(50):
            x = _curve(s, x1, x2)
            if abs(x - t) < 1e-7:
                break
            if x < t:
                lo = s
            else:
                hi = s
            s = (lo + hi) / 2
        return s

    @_pinned
    def bezier(t: float) -> float:
        return _curve(_solve_s(t), y1, y2)

    bezier.__name__ = f"cubic_bezier({x1}, {y1}, {x2}, {y2})"
    return bezier


# ── Name registry ─────────────────────────────────────────────────

EASINGS = {
    fn.__name__: fn
    for fn in (
        linear,
        in_quadratic, out_quadratic, in_out_quadratic,
        in_cubic, out_cubic, in_out_cubic,
        in_quartic, out_quartic, in_out_quartic,
        in_quintic, out_quintic, in_out_quintic,
        in_exponential, out_exponential, in_out_exponential,
        in_sine, out_sine, in_out_sine,
        in_circular, out_circular, in_out_circular,
        in_back, out_back, in_out_back,
    )
}


def get_easing(easing):
    """Resolve an easing given by name or already as a function.

    Names are case-insensitive and accept '-' in place of '_'
    (e.g. "Out-Quadratic" -> out_quadratic).
    """
    if callable(easing):
        return easing
    if isinstance(easing, str):
        key = easing.strip().lower().replace("-", "_")
        if key in EASINGS:
            return EASINGS[key]
    raise ValueError(
        f"Unknown easing: {easing!r}. Valid: {sorted(EASINGS)}"
    )
