"""
Pytest configuration and fixtures for API Gateway tests.
"""

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from api_gateway.main import create_app
from modules.compositor.ffmpeg import FfmpegRunner
from shared.errors import EncodeError


class FakeFfmpegRunner(FfmpegRunner):
    """Writes a fixed payload to the output path instead of encoding."""

    payload = bytes(range(256)) * 8

    def __init__(self, fail: bool = False):
        super().__init__("ffmpeg")
        self.fail = fail
        self.calls = []

    def is_available(self) -> bool:
        return True

    async def run(self, args):
        self.calls.append(list(args))
        if self.fail:
            raise EncodeError("ffmpeg failed with exit code 1: Invalid data", code="FFMPEG_FAILED")
        Path(args[-1]).write_bytes(self.payload)


@pytest.fixture
def fake_runner():
    return FakeFfmpegRunner()


@pytest.fixture
def app(test_settings, fake_runner):
    """App wired with test settings and a fake encoder."""
    application = create_app(test_settings)
    application.state.ffmpeg_runner = fake_runner
    video = application.state.render_service.strategies.select("video-encode")
    video.compositor.runner = fake_runner
    return application


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def scene_payload(png_data_uri, mp3_data_uri):
    """Build a camelCase scene as the story generator sends it."""
    def build(number: int, **overrides) -> dict:
        scene = {
            "sceneNumber": number,
            "description": f"Scene {number} description",
            "mood": "peaceful",
            "environment": "indoor",
            "durationSeconds": 4,
            "image": {"url": png_data_uri},
            "audio": {"url": mp3_data_uri},
        }
        scene.update(overrides)
        return scene
    return build
