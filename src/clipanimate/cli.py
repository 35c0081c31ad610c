"""CLI for rendering a scene manifest.

Reads a YAML manifest, validates it (timelines and clip schedules are
checked before any frame is drawn), and exports every frame through a sink
chosen from the output path.

Usage:
    # Encode to mp4
    python -m clipanimate.cli --manifest scene.yaml --output out.mp4

    # PNG sequence (output without extension = directory)
    python -m clipanimate.cli --manifest scene.yaml --output frames/

    # First 2 seconds only, clips evaluated on 4 threads
    python -m clipanimate.cli --manifest scene.yaml --output out.mp4 \
        --preview-duration 2 --workers 4

    # Validate only (no rendering)
    python -m clipanimate.cli --manifest scene.yaml --validate
"""

import argparse
import dataclasses
import time

from .errors import ExportError
from .manifest import build_video, load_manifest
from .sinks import quick_export


def render(
    manifest_path: str,
    output_path: str,
    preview_duration: float | None = None,
    workers: int = 1,
    codec: str | None = None,
    quiet: bool = False,
) -> int:
    """Load manifest, build the video, export it. Returns frames written.

    Args:
        manifest_path: Path to YAML manifest.
        output_path: Video file (.mp4/.mov/.mkv/.webm) or PNG directory.
        preview_duration: If set, cap the export to this many seconds.
        workers: Threads used to evaluate clips within each frame.
        codec: ffmpeg video codec override (e.g. h264_nvenc).
        quiet: Suppress the progress bar.
    """
    config = load_manifest(manifest_path)
    settings = config["video"]
    if preview_duration and preview_duration < settings.duration:
        settings = dataclasses.replace(settings, duration=preview_duration)
        # Clips starting after the cut can never show up.
        clips = [
            c for c in config["clips"]
            if c["schedule"].start <= settings.total_frames
        ]
        config = {**config, "video": settings, "clips": clips}

    video = build_video(config)
    w, h = settings.resolution
    print(
        f"Rendering {len(video.clips)} clips, {video.total_frames} frames "
        f"({w}x{h}, {settings.fps:g}fps)"
    )
    print(f"Writing to: {output_path}")

    sink_kwargs = {"codec": codec} if codec else {}
    sink = quick_export(output_path, **sink_kwargs)

    t0 = time.monotonic()
    try:
        written = video.export(
            sink, workers=workers, logger=None if quiet else "bar",
        )
    except ExportError as e:
        print(f"\nExport INCOMPLETE after {e.frames_written} frames: {e}", flush=True)
        raise
    elapsed = time.monotonic() - t0
    print(f"\nDone: {output_path} — {written} frames, {elapsed:.1f}s wall")
    return written


def main(args=None):
    parser = argparse.ArgumentParser(
        description="Render a YAML scene manifest to video or PNG frames.",
    )
    parser.add_argument(
        "--manifest", required=True,
        help="Path to YAML scene manifest",
    )
    parser.add_argument(
        "--output",
        help="Output video path, or a directory for PNG frames",
    )
    parser.add_argument(
        "--workers", type=int, default=1,
        help="Threads for evaluating clips within a frame (default: 1)",
    )
    parser.add_argument(
        "--preview-duration", type=float, default=None,
        help="Cap the export to N seconds for fast iteration",
    )
    parser.add_argument(
        "--gpu", action="store_true",
        help="Use GPU encoding (h264_nvenc). Default is CPU (libx264).",
    )
    parser.add_argument(
        "--quiet", action="store_true",
        help="Suppress the progress bar",
    )
    parser.add_argument(
        "--validate", action="store_true",
        help="Validate manifest only — build timelines and schedules, don't render",
    )
    args = parser.parse_args(args)

    if args.validate:
        config = load_manifest(args.manifest)
        video = build_video(config)
        settings = config["video"]
        print(
            f"Manifest valid: {len(video.clips)} clips, "
            f"{video.total_frames} frames at {settings.fps:g}fps"
        )
        for i, clip in enumerate(video.clips):
            end = "end" if clip.end is None else clip.end
            tag = f" [{clip.label}]" if clip.label else ""
            print(f"  {i}: {clip.shape}{tag} — frames {clip.start}..{end}")
        return

    if not args.output:
        parser.error("--output is required (unless using --validate)")

    if args.workers < 1:
        parser.error("--workers must be >= 1")

    render(
        args.manifest, args.output,
        preview_duration=args.preview_duration,
        workers=args.workers,
        codec="h264_nvenc" if args.gpu else None,
        quiet=args.quiet,
    )


if __name__ == "__main__":
    main()
