"""Per-frame draw instances and shape batches.

An Instance is one active clip's evaluated state for one frame: a 3x3
affine matrix that maps the unit shape (the square [-0.5, 0.5]^2) into
scene space, plus a color and a style scalar (corner radius). Scene space
has its origin at the frame center with y pointing up.

Instances are produced fresh every frame and consumed by the renderer
straight away. Batches group the instances that share a shape so the
renderer can draw them together.
"""

from dataclasses import dataclass, field

import numpy as np

from .common import Color


def transform(position: tuple[float, float], size: tuple[float, float]) -> np.ndarray:
    """Return translate(position) @ scale(size) as a 3x3 matrix."""
    x, y = position
    w, h = size
    return np.array(
        [
            [w, 0.0, x],
            [0.0, h, y],
            [0.0, 0.0, 1.0],
        ],
        dtype=np.float64,
    )


@dataclass(frozen=True)
class Instance:
    matrix: np.ndarray
    color: Color
    radius: float = 0.0

    def corners(self) -> np.ndarray:
        """Scene-space corners of the unit square, shape (4, 2).

        Order: bottom-left, bottom-right, top-left, top-right.
        """
        unit = np.array(
            [[-0.5, -0.5, 1.0], [0.5, -0.5, 1.0], [-0.5, 0.5, 1.0], [0.5, 0.5, 1.0]]
        )
        return (unit @ self.matrix.T)[:, :2]


@dataclass
class Batch:
    """All of one frame's instances that share a shape."""
    shape: str
    instances: list[Instance] = field(default_factory=list)
