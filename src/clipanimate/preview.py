"""moviepy bridge and still frames.

to_videoclip() wraps a Video as a moviepy VideoClip, which is how an
animation is previewed (clip.preview(), clip.show(t)) or combined with
ordinary footage in a CompositeVideoClip. moviepy asks for frames by time
in any order; evaluation is frame-indexed and pure, so every time maps to
the frame it falls in and the result does not depend on request order.
"""

from pathlib import Path

import numpy as np
from PIL import Image
from moviepy import VideoClip

from .render import RasterRenderer, to_array


def frame_at_time(video, t: float) -> int:
    """Map a time in seconds to the frame showing at that time."""
    last = max(0, video.total_frames - 1)
    return min(max(0, int(t * video.settings.fps + 1e-9)), last)


def render_array(video, frame: int, renderer=None) -> np.ndarray:
    """Render one frame as an (h, w, 4) RGBA array."""
    renderer = renderer or RasterRenderer.for_settings(video.settings)
    video.validate()
    data = video.render_frame(renderer, frame)
    return to_array(data, video.settings.resolution)


def to_videoclip(video, renderer=None) -> VideoClip:
    """Wrap the video as a moviepy clip (RGB, same duration and fps)."""
    video.validate()
    renderer = renderer or RasterRenderer.for_settings(video.settings)
    resolution = video.settings.resolution

    def _frame(t):
        data = video.render_frame(renderer, frame_at_time(video, t))
        return to_array(data, resolution)[:, :, :3]

    fps = video.settings.fps
    clip = VideoClip(_frame, duration=video.total_frames / fps)
    return clip.with_fps(fps)


def render_still(video, frame: int, output: str | Path, renderer=None) -> Path:
    """Render a single frame to a PNG file."""
    if not 0 <= frame < max(1, video.total_frames):
        raise ValueError(
            f"Frame {frame} out of range (video has {video.total_frames} frames)"
        )
    output = Path(output)
    output.parent.mkdir(parents=True, exist_ok=True)
    Image.fromarray(render_array(video, frame, renderer)).save(output)
    return output
