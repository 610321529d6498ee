"""
Tests for API Gateway routes.

Tests endpoints with FastAPI TestClient.
"""

import zipfile
from io import BytesIO

import pytest

from shared.errors import PackagingError


def render(client, scenes, **extra):
    return client.post("/api/v1/render", json={"title": "Test Story", "scenes": scenes, **extra})


def workspaces(test_settings):
    return sorted(p.name for p in test_settings.temp_root.iterdir())


def test_root_endpoint(client):
    """Test root endpoint."""
    response = client.get("/")
    assert response.status_code == 200
    assert response.headers["X-Request-ID"]


def test_health_endpoint(client):
    """Test health endpoint."""
    response = client.get("/api/v1/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["output_mode"] == "html-package"
    assert data["ffmpeg"] == "available"
    assert data["temp"]["entries"] == 0
    assert data["retention_seconds"] == 3600


class TestRenderPackage:
    """Default html-package output."""

    def test_render_and_download_round_trip(self, client, scene_payload, test_settings):
        response = render(client, [scene_payload(n) for n in (1, 2, 3)])

        assert response.status_code == 200
        data = response.json()
        artifact_id = data["artifactId"]
        assert data["format"] == "archive"
        assert data["sceneCount"] == 3
        assert data["totalDurationSeconds"] == 12
        assert data["resolution"] == "1920x1080"
        assert data["temporary"] is True
        assert data["downloadUrl"] == f"/api/v1/artifacts/{artifact_id}/download"
        assert data["viewUrl"] == f"/api/v1/artifacts/{artifact_id}/view"
        assert data["stats"]["counters"]["assets.inline"] == 6
        assert data["sizeBytes"] > 0

        download = client.get(data["downloadUrl"])
        assert download.status_code == 200
        assert download.headers["content-type"] == "application/zip"
        assert f"story_{artifact_id}.zip" in download.headers["content-disposition"]
        with zipfile.ZipFile(BytesIO(download.content)) as zf:
            assert "index.html" in zf.namelist()

    def test_workspace_kept_until_retention(self, client, scene_payload, test_settings, app):
        data = render(client, [scene_payload(1)]).json()

        assert workspaces(test_settings) == [data["artifactId"]]
        assert app.state.workspaces.pending_deletions == 1

    def test_view_serves_presentation(self, client, scene_payload):
        data = render(client, [scene_payload(1)]).json()

        response = client.get(data["viewUrl"])
        assert response.status_code == 200
        assert "text/html" in response.headers["content-type"]
        assert "Test Story" in response.text

    def test_stream_serves_preview(self, client, scene_payload):
        data = render(client, [scene_payload(1)]).json()

        response = client.get(data["streamUrl"])
        assert response.status_code == 200
        assert response.headers["content-type"] == "image/jpeg"

    def test_stream_redirects_without_preview(self, client, scene_payload, test_settings):
        data = render(client, [scene_payload(1)]).json()
        (test_settings.temp_root / data["artifactId"] / "preview.jpg").unlink()

        response = client.get(data["streamUrl"], follow_redirects=False)
        assert response.status_code == 302
        assert response.headers["location"].endswith(data["downloadUrl"])


class TestRenderVideo:
    """video-encode output through the fake encoder."""

    def test_range_request(self, client, scene_payload, fake_runner):
        data = render(client, [scene_payload(1), scene_payload(2)], outputMode="video-encode").json()
        size = len(fake_runner.payload)

        assert data["format"] == "video"
        assert data["viewUrl"] is None

        response = client.get(data["streamUrl"], headers={"Range": "bytes=0-99"})
        assert response.status_code == 206
        assert len(response.content) == 100
        assert response.content == fake_runner.payload[:100]
        assert response.headers["content-range"] == f"bytes 0-99/{size}"
        assert response.headers["accept-ranges"] == "bytes"

    def test_narration_and_ambient_are_mixed(self, client, scene_payload, fake_runner, mp3_data_uri):
        scenes = [
            scene_payload(1, ambient={"url": mp3_data_uri, "volume": 0.3}),
            scene_payload(2),
        ]

        response = render(client, scenes, outputMode="video-encode")

        assert response.status_code == 200
        args = fake_runner.calls[0]
        filter_complex = args[args.index("-filter_complex") + 1]
        assert "[3:a]volume=volume=0.3[amb1]" in filter_complex
        assert "[2:a][amb1][4:a]amix=inputs=3:duration=longest[aout]" in filter_complex
        assert args[args.index("-c:a") + 1] == "aac"

    def test_malformed_narration_url_degrades(self, client, scene_payload, fake_runner):
        response = render(client, [scene_payload(1, audio={"url": "http://[::1"})], outputMode="video-encode")

        assert response.status_code == 200
        assert response.json()["stats"]["counters"]["assets.failed"] == 1
        assert "-c:a" not in fake_runner.calls[0]

    def test_full_stream_without_range(self, client, scene_payload, fake_runner):
        data = render(client, [scene_payload(1)], outputMode="video-encode").json()

        response = client.get(data["streamUrl"])
        assert response.status_code == 200
        assert response.content == fake_runner.payload
        assert response.headers["content-type"] == "video/mp4"

    def test_unsatisfiable_range(self, client, scene_payload, fake_runner):
        data = render(client, [scene_payload(1)], outputMode="video-encode").json()
        size = len(fake_runner.payload)

        response = client.get(data["streamUrl"], headers={"Range": f"bytes={size}-"})
        assert response.status_code == 416
        assert response.headers["content-range"] == f"bytes */{size}"

    def test_view_missing_for_video(self, client, scene_payload):
        data = render(client, [scene_payload(1)], outputMode="video-encode").json()

        response = client.get(f"/api/v1/artifacts/{data['artifactId']}/view")
        assert response.status_code == 404

    def test_encode_failure_cleans_up(self, client, scene_payload, fake_runner, test_settings):
        fake_runner.fail = True

        response = render(client, [scene_payload(1)], outputMode="video-encode")

        assert response.status_code == 500
        body = response.json()
        assert body["stage"] == "compositor"
        assert body["code"] == "FFMPEG_FAILED"
        assert body["retryable"] is False
        assert workspaces(test_settings) == []


class TestRenderErrors:
    """Rejected and failed jobs."""

    def test_missing_image_rejected(self, client, scene_payload, test_settings):
        scene = scene_payload(1, image=None)

        response = render(client, [scene])

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "INVALID_SCENES"
        assert body["stage"] == "validation"
        assert "Scene 1 missing image URL" in body["error"]
        assert workspaces(test_settings) == []

    def test_empty_scene_list(self, client):
        response = render(client, [])
        assert response.status_code == 400

    def test_no_resolvable_images(self, client, scene_payload, test_settings):
        scene = scene_payload(1, image={"url": "data:image/png;base64,"})

        response = render(client, [scene])

        assert response.status_code == 400
        assert response.json()["code"] == "NO_RESOLVABLE_IMAGES"
        assert workspaces(test_settings) == []

    def test_packaging_failure_cleans_up(self, client, scene_payload, test_settings, app, monkeypatch):
        packager = app.state.render_service.strategies.select("html-package").packager

        def broken(*args, **kwargs):
            raise PackagingError("disk full")

        monkeypatch.setattr(packager, "package", broken)

        response = render(client, [scene_payload(1)])

        assert response.status_code == 500
        assert response.json()["stage"] == "packager"
        assert workspaces(test_settings) == []


class TestArtifactLookup:

    @pytest.mark.parametrize("suffix", ["download", "stream", "view"])
    def test_unknown_artifact(self, client, suffix):
        response = client.get(f"/api/v1/artifacts/does-not-exist/{suffix}")
        assert response.status_code == 404
        assert response.json()["code"] == "ARTIFACT_NOT_FOUND"

    def test_invalid_artifact_id(self, client):
        response = client.get("/api/v1/artifacts/bad.id/download")
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_ARTIFACT_ID"

    def test_legacy_video(self, client, test_settings):
        test_settings.legacy_video_dir.mkdir(parents=True)
        (test_settings.legacy_video_dir / "story_legacy1.mp4").write_bytes(b"x" * 300)

        response = client.get("/api/v1/artifacts/legacy1/stream", headers={"Range": "bytes=-50"})

        assert response.status_code == 206
        assert response.headers["content-range"] == "bytes 250-299/300"
