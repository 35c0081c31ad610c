"""Software renderer — rasterizes batched instances into RGBA8 frames.

The renderer is the only shared mutable resource of the frame loop: it owns
the canvas it draws into and accepts one submission at a time. Submissions
are serialized with a lock so a caller cannot interleave two frames.

Coordinate mapping: instances live in scene space (origin at the frame
center, y up, one unit per pixel). Pixel space has its origin at the
top-left with y down:

    px = x + width / 2
    py = height / 2 - y

Shapes are drawn per instance with Pillow onto a transparent layer that is
alpha-composited over the frame, so semi-transparent colors blend with what
is already painted. Paint order follows batch order, then instance order.
"""

import math
import threading
from typing import Protocol

import numpy as np
from PIL import Image, ImageDraw

from .common import Color
from .instance import Batch, Instance


class Renderer(Protocol):
    def render(self, batches: list[Batch]) -> bytes:
        """Draw one frame and return width * height * 4 RGBA bytes."""
        ...


def to_array(data: bytes, resolution: tuple[int, int]) -> np.ndarray:
    """View an RGBA8 frame buffer as an (h, w, 4) uint8 array."""
    w, h = resolution
    return np.frombuffer(data, dtype=np.uint8).reshape(h, w, 4)


class RasterRenderer:
    """Pillow/numpy renderer for rect and ellipse batches."""

    def __init__(self, resolution: tuple[int, int], background: Color):
        self.resolution = tuple(resolution)
        self.background = background
        self._lock = threading.Lock()
        self._drawers = {
            "rect": self._draw_rect,
            "ellipse": self._draw_ellipse,
        }

    @classmethod
    def for_settings(cls, settings) -> "RasterRenderer":
        return cls(settings.resolution, settings.background_color)

    def render(self, batches: list[Batch]) -> bytes:
        with self._lock:
            frame = Image.new("RGBA", self.resolution, self.background.to_rgba8())
            for batch in batches:
                drawer = self._drawers.get(batch.shape)
                if drawer is None:
                    raise ValueError(f"Renderer has no drawer for shape '{batch.shape}'")
                layer = None
                for instance in batch.instances:
                    # Drawing into a layer replaces pixels instead of blending,
                    # so a translucent instance gets a layer of its own.
                    translucent = instance.color.a < 1.0
                    if translucent and layer is not None:
                        frame.alpha_composite(layer)
                        layer = None
                    if layer is None:
                        layer = Image.new("RGBA", self.resolution, (0, 0, 0, 0))
                        draw = ImageDraw.Draw(layer)
                    drawer(draw, instance)
                    if translucent:
                        frame.alpha_composite(layer)
                        layer = None
                if layer is not None:
                    frame.alpha_composite(layer)
            return frame.tobytes()

    def add_drawer(self, shape: str, drawer) -> None:
        """Register drawer(draw: ImageDraw, instance) for a custom clip shape."""
        self._drawers[shape] = drawer

    # ── Drawing ──────────────────────────────────────────────────

    def _pixel_box(self, instance: Instance) -> tuple[int, int, int, int] | None:
        """Inclusive pixel box (x0, y0, x1, y1) covered by the instance, or None.

        Edges snap to the nearest pixel boundary. Pillow fills both ends of
        a box, so the far edge is pulled in by one: a 10x10 shape covers
        exactly 10x10 pixels.
        """
        w, h = self.resolution
        corners = instance.corners()
        xs = corners[:, 0] + w / 2
        ys = h / 2 - corners[:, 1]
        x0, x1 = _snap(xs.min()), _snap(xs.max())
        y0, y1 = _snap(ys.min()), _snap(ys.max())
        if x1 <= x0 or y1 <= y0:
            return None
        return (x0, y0, x1 - 1, y1 - 1)

    def _draw_rect(self, draw: ImageDraw.ImageDraw, instance: Instance) -> None:
        box = self._pixel_box(instance)
        if box is None:
            return
        x0, y0, x1, y1 = box
        fill = instance.color.to_rgba8()
        short_side = min(x1 - x0 + 1, y1 - y0 + 1)
        radius = min(max(0.0, instance.radius) * short_side, short_side / 2)
        if radius >= 0.5:
            draw.rounded_rectangle(box, radius=radius, fill=fill)
        else:
            draw.rectangle(box, fill=fill)

    def _draw_ellipse(self, draw: ImageDraw.ImageDraw, instance: Instance) -> None:
        box = self._pixel_box(instance)
        if box is None:
            return
        draw.ellipse(box, fill=instance.color.to_rgba8())


def _snap(coord) -> int:
    """Round a pixel-space coordinate to the nearest pixel boundary, half up."""
    return math.floor(float(coord) + 0.5)
