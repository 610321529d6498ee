"""
Tests for configuration loading.
"""

from pathlib import Path

import pytest

from shared.config import Settings
from shared.errors import ConfigError


def test_defaults():
    """Test documented defaults."""
    settings = Settings(_env_file=None)

    assert settings.output_mode == "html-package"
    assert settings.retention_seconds == 3600
    assert settings.sweep_interval_seconds == 1800
    assert settings.asset_fetch_concurrency == 1
    assert settings.min_scene_duration == 2.0
    assert settings.default_scene_duration == 4.0
    assert settings.resolution == "1920x1080"
    assert settings.temp_root == Path("temp")


def test_env_file(test_env_file):
    """Test values are read from a .env file."""
    settings = Settings(_env_file=test_env_file)

    assert settings.log_level == "DEBUG"
    assert settings.output_mode == "video-encode"
    assert settings.retention_seconds == 120
    assert settings.asset_fetch_concurrency == 4


def test_env_vars_case_insensitive(monkeypatch):
    monkeypatch.setenv("video_fps", "30")
    monkeypatch.setenv("FFMPEG_PATH", "/opt/ffmpeg/bin/ffmpeg")

    settings = Settings(_env_file=None)

    assert settings.video_fps == 30
    assert settings.ffmpeg_path == "/opt/ffmpeg/bin/ffmpeg"


@pytest.mark.parametrize(
    "field,value",
    [
        ("retention_seconds", 0),
        ("min_scene_duration", -1),
        ("video_width", 0),
        ("asset_fetch_concurrency", 0),
    ],
)
def test_rejects_non_positive(field, value):
    with pytest.raises(ConfigError):
        Settings(_env_file=None, **{field: value})


def test_rejects_bad_frontend_url():
    with pytest.raises(ConfigError):
        Settings(_env_file=None, frontend_url="localhost:3000")
