"""Interpolation between two property values at an eased progress.

Supported value types:
  - int / float: a + (b - a) * t.
  - tuples (plain or named, e.g. Color, positions, sizes): componentwise,
    the result keeps the type of the first operand.
  - any object with a lerp(other, t) method: delegated, so user-defined
    property types can be animated without touching this module.

t is the *eased* progress. It is never clamped: t < 0 or t > 1 extrapolates
linearly, which is what makes overshoot easings visible.
"""

from numbers import Real


def lerp(a, b, t: float):
    """Blend a toward b by t."""
    if isinstance(a, Real) and isinstance(b, Real):
        return a + (b - a) * t

    if isinstance(a, tuple) and isinstance(b, tuple):
        if len(a) != len(b):
            raise ValueError(
                f"Cannot interpolate tuples of different lengths: "
                f"{len(a)} and {len(b)}"
            )
        values = [lerp(x, y, t) for x, y in zip(a, b)]
        # Named tuples (Color) rebuild through _make, plain tuples directly.
        if hasattr(a, "_make"):
            return a._make(values)
        return tuple(values)

    if hasattr(a, "lerp"):
        return a.lerp(b, t)

    raise TypeError(
        f"Cannot interpolate values of type {type(a).__name__} "
        f"and {type(b).__name__}"
    )
