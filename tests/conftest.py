"""Shared test fixtures for clipanimate tests."""

import pytest
import yaml

from clipanimate.common import Color
from clipanimate.video import VideoSettings


@pytest.fixture
def tiny_settings():
    """A 32x18, 10fps, 1-second video — fast enough to render every frame."""
    return VideoSettings(
        fps=10,
        resolution=(32, 18),
        duration=1.0,
        background_color=Color.rgb8(0, 0, 0),
    )


@pytest.fixture
def write_manifest(tmp_path):
    """Return a function that writes a manifest dict to YAML and returns its path."""
    def _write(content: dict, name: str = "scene.yaml") -> str:
        path = tmp_path / name
        with open(path, "w") as f:
            yaml.dump(content, f)
        return str(path)
    return _write
