"""
Pytest configuration and fixtures shared by all test suites.
"""

import base64
import io

import pytest
from PIL import Image

from shared.config import Settings


def make_image_bytes(width: int = 64, height: int = 48, color=(200, 120, 40), fmt: str = "PNG") -> bytes:
    """Encode a solid-colour image."""
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def test_settings(tmp_path):
    """Settings rooted in a per-test temp directory, with no retry delays."""
    return Settings(
        environment="test",
        temp_root=tmp_path / "temp",
        legacy_video_dir=tmp_path / "videos",
        asset_retry_base_delay=0.0,
        retention_seconds=3600,
        sweep_interval_seconds=1800,
    )


@pytest.fixture
def work_dir(tmp_path):
    """An empty job workspace."""
    path = tmp_path / "temp" / "job123"
    path.mkdir(parents=True)
    return path


@pytest.fixture
def png_bytes():
    return make_image_bytes()


@pytest.fixture
def png_data_uri(png_bytes):
    return "data:image/png;base64," + base64.b64encode(png_bytes).decode("ascii")


@pytest.fixture
def mp3_data_uri():
    # Not a playable track; the resolver only decodes and stores it
    return "data:audio/mpeg;base64," + base64.b64encode(b"ID3" + b"\x00" * 256).decode("ascii")
