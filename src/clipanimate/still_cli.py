"""CLI for single-frame renders — quick layout checks without encoding.

Usage:
    clipanimate still --manifest scene.yaml --frame 120 --output frame.png
    clipanimate still --manifest scene.yaml --time 2.5 --output frame.png
"""

import argparse

from .manifest import load_video
from .preview import frame_at_time, render_still


def main(args=None):
    parser = argparse.ArgumentParser(
        description="Render one frame of a scene manifest to PNG.",
    )
    parser.add_argument(
        "--manifest", required=True,
        help="Path to YAML scene manifest",
    )
    parser.add_argument(
        "--output", required=True,
        help="Output PNG path",
    )
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument(
        "--frame", type=int,
        help="Frame index (0-based)",
    )
    group.add_argument(
        "--time", type=float,
        help="Time in seconds (converted to the frame showing at that time)",
    )
    parsed = parser.parse_args(args)

    video = load_video(parsed.manifest)
    if parsed.frame is not None:
        frame = parsed.frame
    else:
        frame = frame_at_time(video, parsed.time)

    out = render_still(video, frame, parsed.output)
    print(f"Frame {frame} -> {out}")


if __name__ == "__main__":
    main()
