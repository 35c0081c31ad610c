"""clipanimate.common — shared color utilities.

Contains: the Color value type used by every animated color property,
hex parsing, and palette resolution for manifests.
"""

from typing import NamedTuple


class Color(NamedTuple):
    """Linear RGBA color, each channel a float in [0, 1].

    Channels are independent floats: interpolation is componentwise with
    no gamma correction, and values outside [0, 1] are allowed while
    animating (overshoot easings) and only clamped in to_rgba8().
    """

    r: float
    g: float
    b: float
    a: float = 1.0

    @classmethod
    def rgb8(cls, r: int, g: int, b: int) -> "Color":
        return cls(r / 255, g / 255, b / 255, 1.0)

    @classmethod
    def rgba8(cls, r: int, g: int, b: int, a: int) -> "Color":
        return cls(r / 255, g / 255, b / 255, a / 255)

    @classmethod
    def from_hex(cls, hex_str: str) -> "Color":
        return cls.rgba8(*parse_hex_color(hex_str))

    def to_rgba8(self) -> tuple[int, int, int, int]:
        """Clamp to [0, 1] and convert to 8-bit channels."""
        return tuple(round(min(1.0, max(0.0, c)) * 255) for c in self)


WHITE = Color(1.0, 1.0, 1.0, 1.0)
BLACK = Color(0.0, 0.0, 0.0, 1.0)
TRANSPARENT = Color(0.0, 0.0, 0.0, 0.0)


# ── Hex parsing ────────────────────────────────────────────────────

def _is_hex(value: str) -> bool:
    digits = value.lstrip("#")
    return len(digits) in (6, 8) and all(
        c in "0123456789abcdefABCDEF" for c in digits
    )


def parse_hex_color(hex_str: str) -> tuple[int, int, int, int]:
    """Convert '#RRGGBB', '#RRGGBBAA' (or without '#') to an (R, G, B, A) tuple.

    Alpha defaults to 255 when the string has only six digits.
    """
    if not _is_hex(hex_str):
        raise ValueError(f"Invalid hex color: '{hex_str}'")
    hex_str = hex_str.lstrip("#")
    r, g, b = (int(hex_str[i:i + 2], 16) for i in (0, 2, 4))
    a = int(hex_str[6:8], 16) if len(hex_str) == 8 else 255
    return (r, g, b, a)


# ── Palette resolution ─────────────────────────────────────────────

def resolve_color(value, palette: dict[str, Color]) -> Color:
    """Resolve a color reference — palette key, inline hex, or byte list.

    Palette keys are tried first. Strings that look like hex are parsed
    inline. Lists of 3 or 4 ints are treated as 8-bit RGB(A). Anything
    else raises ValueError.
    """
    if isinstance(value, Color):
        return value
    if isinstance(value, str):
        if value in palette:
            return palette[value]
        if _is_hex(value):
            return Color.from_hex(value)
        raise ValueError(
            f"Unknown color: '{value}'. Not in palette and not a hex value."
        )
    if isinstance(value, (list, tuple)) and len(value) in (3, 4):
        if all(isinstance(c, int) and 0 <= c <= 255 for c in value):
            if len(value) == 3:
                return Color.rgb8(*value)
            return Color.rgba8(*value)
    raise ValueError(f"Unknown color: {value!r}")
