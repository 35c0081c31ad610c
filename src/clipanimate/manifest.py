"""Scene manifest loader.

Parses YAML scene manifests, converts colors, validates clip shapes and
their properties, and builds every keyframe timeline up front, so a bad
manifest fails at load time and never part-way through an export.

Schema:
  video:
    fps: 60                    # default 60
    resolution: [1920, 1080]   # default 1920x1080
    duration: 5                # seconds, required
    background: "#171717"      # hex or palette key, default #171717
  colors:                      # optional palette, name -> hex
    accent: "#DA0037"
  clips:
    - shape: rect              # rect | ellipse
      label: box               # optional, unique
      start: 1.0               # seconds, default 0
      end: 5.0                 # seconds, omitted/null = until video end
      position: [-300, 0]      # constant value ...
      size:                    # ... or a keyframe list
        keyframes:
          - {at: 0, value: [0, 1080]}
          - {after: 0.9, ease: out_exponential, value: [1920, 1080]}
          - {hold: 0.5}

Keyframe times (at / after / hold) are seconds relative to the clip start.
Colors are hex strings ('#RRGGBB' or '#RRGGBBAA'), palette keys, or lists
of 8-bit channels. Rect corner radius is a fraction of the shorter side.
"""

from pathlib import Path

import yaml

from .clip import Ellipse, Rect, Schedule
from .common import Color, resolve_color
from .easing import get_easing
from .errors import InvalidTimeline
from .timeline import Abs, Rel, TimelineBuilder, constant
from .video import Video, VideoSettings


# ── Valid shapes and their properties ──────────────────────────────

CLIP_TYPES = {"rect": Rect, "ellipse": Ellipse}

VALID_SHAPES = set(CLIP_TYPES)

SHAPE_PROPERTIES = {
    "rect": {"position", "size", "color", "radius"},
    "ellipse": {"position", "size", "color"},
}

CLIP_FIELDS = {"shape", "label", "start", "end"}

KEYFRAME_TIMINGS = ("at", "after", "hold")

DEFAULT_BACKGROUND = Color.rgb8(0x17, 0x17, 0x17)


# ── Manifest loading ──────────────────────────────────────────────


def load_manifest(manifest_path: str | Path) -> dict:
    """Load, validate, and normalize a scene manifest.

    Processing pipeline:
      1. Parse YAML.
      2. Parse colors.* into Color values.
      3. Build VideoSettings (background may reference the palette).
      4. For each clip: validate shape, schedule, label and properties,
         and build one Timeline per property.

    Args:
        manifest_path: Path to the YAML manifest file.

    Returns:
        {"video": VideoSettings, "colors": {name: Color},
         "clips": [{"shape", "label", "schedule", "properties"}]}

    Raises:
        ValueError: Invalid shape, field, color, easing or keyframe list
            (InvalidTimeline and SchedulingError are ValueErrors too).
        FileNotFoundError: Missing manifest file.
    """
    with open(manifest_path) as f:
        raw = yaml.safe_load(f) or {}

    config = {}

    # Colors first: the background and clip colors may reference them.
    colors = {}
    for key, value in (raw.get("colors") or {}).items():
        try:
            colors[key] = resolve_color(value, {})
        except ValueError as e:
            raise ValueError(f"colors.{key}: {e}") from None
    config["colors"] = colors

    config["video"] = _parse_video(raw.get("video"), colors)
    fps = config["video"].fps
    total_frames = config["video"].total_frames

    clips = []
    labels_seen = {}
    for i, clip in enumerate(raw.get("clips") or []):
        if not isinstance(clip, dict):
            raise ValueError(f"Clip {i}: must be a mapping")
        shape = clip.get("shape")
        if shape not in VALID_SHAPES:
            raise ValueError(
                f"Clip {i}: Unknown shape '{shape}'. Valid: {sorted(VALID_SHAPES)}"
            )
        prefix = f"Clip {i} ({shape})"

        unknown = set(clip) - CLIP_FIELDS - SHAPE_PROPERTIES[shape]
        if unknown:
            raise ValueError(
                f"{prefix}: unknown field(s) {sorted(unknown)}. "
                f"Valid: {sorted(CLIP_FIELDS | SHAPE_PROPERTIES[shape])}"
            )

        # Optional label: must be unique across clips.
        label = clip.get("label")
        if label is not None:
            if not isinstance(label, str) or not label.strip():
                raise ValueError(f"{prefix}: 'label' must be a non-empty string")
            if label in labels_seen:
                raise ValueError(
                    f"{prefix}: duplicate label '{label}' "
                    f"(also used by clip {labels_seen[label]})"
                )
            labels_seen[label] = i

        schedule = _parse_schedule(clip, fps, prefix)
        try:
            schedule.validate(total_frames)
        except ValueError as e:
            raise type(e)(f"{prefix}: {e}") from None

        properties = {}
        for name in sorted(SHAPE_PROPERTIES[shape]):
            if name in clip:
                properties[name] = _parse_property(
                    clip[name], name, fps, colors, f"{prefix}, {name}",
                )

        clips.append({
            "shape": shape,
            "label": label,
            "schedule": schedule,
            "properties": properties,
        })
    config["clips"] = clips

    return config


def build_video(config: dict) -> Video:
    """Instantiate a Video from a config returned by load_manifest()."""
    video = Video(config["video"])
    for clip in config["clips"]:
        cls = CLIP_TYPES[clip["shape"]]
        video.push_clip(cls(
            start=clip["schedule"].start,
            end=clip["schedule"].end,
            label=clip["label"],
            **clip["properties"],
        ))
    return video


def load_video(manifest_path: str | Path) -> Video:
    """load_manifest() + build_video()."""
    return build_video(load_manifest(manifest_path))


# ── Section parsers ───────────────────────────────────────────────


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _parse_video(video: dict | None, colors: dict) -> VideoSettings:
    """Validate the video block and convert it to VideoSettings."""
    if not isinstance(video, dict):
        raise ValueError("Manifest: missing required 'video' section")
    if "duration" not in video:
        raise ValueError("Manifest: video.duration is required")

    duration = video["duration"]
    if not _is_number(duration) or duration <= 0:
        raise ValueError(
            f"Manifest: video.duration must be a positive number, got {duration!r}"
        )

    fps = video.get("fps", 60)
    if not _is_number(fps) or fps <= 0:
        raise ValueError(f"Manifest: video.fps must be a positive number, got {fps!r}")

    resolution = video.get("resolution", [1920, 1080])
    if (
        not isinstance(resolution, (list, tuple))
        or len(resolution) != 2
        or not all(isinstance(v, int) and v > 0 for v in resolution)
    ):
        raise ValueError(
            f"Manifest: video.resolution must be [width, height], got {resolution!r}"
        )

    background = DEFAULT_BACKGROUND
    if video.get("background") is not None:
        try:
            background = resolve_color(video["background"], colors)
        except ValueError as e:
            raise ValueError(f"Manifest: video.background: {e}") from None

    return VideoSettings(
        fps=float(fps),
        resolution=tuple(resolution),
        duration=float(duration),
        background_color=background,
    )


def _parse_schedule(clip: dict, fps: float, prefix: str) -> Schedule:
    start = clip.get("start", 0)
    if not _is_number(start) or start < 0:
        raise ValueError(f"{prefix}: start must be a number >= 0, got {start!r}")
    end = clip.get("end")
    if end is not None and not _is_number(end):
        raise ValueError(f"{prefix}: end must be a number or null, got {end!r}")
    return Schedule.from_seconds(start, end, fps)


def _parse_value(value, name: str, colors: dict, prefix: str):
    """Convert a raw YAML value to the property's Python type."""
    if name == "color":
        try:
            return resolve_color(value, colors)
        except ValueError as e:
            raise ValueError(f"{prefix}: {e}") from None

    if name == "radius":
        if not _is_number(value):
            raise ValueError(f"{prefix}: radius must be a number, got {value!r}")
        return float(value)

    # position / size
    if (
        not isinstance(value, (list, tuple))
        or len(value) != 2
        or not all(_is_number(v) for v in value)
    ):
        raise ValueError(f"{prefix}: must be a pair of numbers [x, y], got {value!r}")
    return (float(value[0]), float(value[1]))


def _parse_property(raw, name: str, fps: float, colors: dict, prefix: str):
    """Build the Timeline for one property (constant or keyframed)."""
    if not (isinstance(raw, dict) and "keyframes" in raw):
        return constant(_parse_value(raw, name, colors, prefix))

    keyframes = raw["keyframes"]
    if not isinstance(keyframes, list) or not keyframes:
        raise InvalidTimeline(f"{prefix}: 'keyframes' must be a non-empty list")

    builder = TimelineBuilder(fps=fps)
    for j, kf in enumerate(keyframes):
        kf_prefix = f"{prefix}, keyframe {j}"
        if not isinstance(kf, dict):
            raise ValueError(f"{kf_prefix}: must be a mapping")

        timings = [key for key in KEYFRAME_TIMINGS if key in kf]
        if len(timings) != 1:
            raise ValueError(
                f"{kf_prefix}: needs exactly one of {list(KEYFRAME_TIMINGS)}, "
                f"got {timings or 'none'}"
            )
        timing = timings[0]
        amount = kf[timing]
        if not _is_number(amount):
            raise ValueError(f"{kf_prefix}: '{timing}' must be a number, got {amount!r}")

        if timing == "hold":
            builder.hold(amount)
            continue

        if "value" not in kf:
            raise ValueError(f"{kf_prefix}: missing 'value'")
        try:
            easing = get_easing(kf.get("ease", "linear"))
        except ValueError as e:
            raise ValueError(f"{kf_prefix}: {e}") from None

        position = Abs(amount) if timing == "at" else Rel(amount)
        builder.keyframe(position, easing, _parse_value(kf["value"], name, colors, kf_prefix))

    try:
        return builder.build()
    except InvalidTimeline as e:
        raise InvalidTimeline(f"{prefix}: {e}") from None
