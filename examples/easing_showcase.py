#!/usr/bin/env python3
"""Render one rounded square per easing function, racing left to right and back.

Usage:
    python examples/easing_showcase.py                # writes easing.mp4
    python examples/easing_showcase.py frames/        # PNG sequence instead
"""

import sys

from clipanimate.clip import Rect
from clipanimate.common import Color
from clipanimate.sinks import quick_export
from clipanimate.timeline import Abs, TimelineBuilder
from clipanimate.video import Video, VideoSettings

EASINGS = [
    "linear",
    "in_quadratic",
    "in_cubic",
    "in_quartic",
    "in_quintic",
    "in_exponential",
    "out_quadratic",
    "out_cubic",
    "out_quartic",
    "out_quintic",
    "out_exponential",
    "in_back",
    "out_back",
    "in_out_back",
]

ACCENT = Color.rgb8(0xDA, 0x00, 0x37)


def build_video() -> Video:
    settings = VideoSettings(duration=5.0)
    video = Video(settings)

    rect_size = 600.0 / len(EASINGS)
    separation = 800.0 / len(EASINGS)
    left = -820.0 + rect_size * 0.5
    right = 820.0 - rect_size * 0.5

    for i, easing in enumerate(EASINGS):
        y = 400.0 - separation * i + rect_size * 0.5
        position = (
            TimelineBuilder(fps=settings.fps)
            .keyframe(Abs(0.0), "linear", (left, y))
            .keyframe(Abs(2.0), easing, (right, y))
            .hold(0.5)
            .keyframe(Abs(4.5), easing, (left, y))
        )
        video.push_clip(Rect(
            position=position,
            size=(rect_size, rect_size),
            color=ACCENT,
            radius=0.2,
            label=easing,
        ))
    return video


def main():
    output = sys.argv[1] if len(sys.argv) > 1 else "easing.mp4"
    video = build_video()
    written = video.export(quick_export(output))
    print(f"Wrote {written} frames to {output}")


if __name__ == "__main__":
    main()
