"""
Unit tests for the presentation packager.
"""

import io
import zipfile
from pathlib import Path

import pytest
from PIL import Image

from modules.packager.archive import create_archive
from modules.packager.packager import PresentationPackager
from modules.packager.preview import create_preview, fit_within
from shared.errors import PackagingError
from shared.models.scene import PreparedScene
from shared.stats import InMemoryStatsCollector


def make_image_bytes(width: int = 64, height: int = 48) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), (90, 140, 200)).save(buffer, format="PNG")
    return buffer.getvalue()


def prepared(work_dir: Path, index: int, *, image: bool = True, audio: bool = False, **fields) -> PreparedScene:
    image_path = audio_path = None
    if image:
        image_path = work_dir / f"scene_{index}_image.png"
        image_path.write_bytes(make_image_bytes(width=400, height=300))
    if audio:
        audio_path = work_dir / f"scene_{index}_audio.mp3"
        audio_path.write_bytes(b"ID3" + b"\x00" * 64)
    fields.setdefault("description", f"Scene {index} description")
    return PreparedScene(
        index=index,
        duration_seconds=fields.pop("duration_seconds", 4.0),
        image_path=image_path,
        audio_path=audio_path,
        **fields,
    )


class TestPackage:
    """Full packaging runs."""

    def test_three_peaceful_indoor_scenes(self, test_settings, work_dir):
        scenes = [
            prepared(work_dir, i, environment="indoor", mood="peaceful")
            for i in (1, 2, 3)
        ]
        archive = work_dir / "story_job123.zip"

        result = PresentationPackager(test_settings).package(scenes, "Quiet Evening", work_dir, archive)

        assert result == archive
        assert sorted(p.name for p in work_dir.glob("scene_?.jpg")) == ["scene_1.jpg", "scene_2.jpg", "scene_3.jpg"]
        html = (work_dir / "index.html").read_text()
        assert html.count('class="slide"') == 3
        assert "Quiet Evening" in html

        preview = work_dir / "preview.jpg"
        assert preview.stat().st_size > 0
        with Image.open(preview) as image:
            assert image.size == (320, 180)

        assert archive.stat().st_size > 0
        with zipfile.ZipFile(archive) as zf:
            names = zf.namelist()
        assert "index.html" in names
        assert {"styles.css", "script.js", "preview.jpg", "scene_1.jpg"} <= set(names)
        assert archive.name not in names

    def test_slide_attributes(self, test_settings, work_dir):
        scenes = [
            prepared(work_dir, 1, audio=True, duration_seconds=5.5),
            prepared(work_dir, 2, description=None, narration_text="Narrated only"),
        ]
        PresentationPackager(test_settings).package(scenes, "Story", work_dir, work_dir / "out.zip")

        html = (work_dir / "index.html").read_text()
        assert 'data-audio="scene_1_narration.mp3"' in html
        assert 'data-duration="5.5"' in html
        assert 'data-duration="4"' in html
        assert "Narrated only" in html
        assert (work_dir / "scene_1_narration.mp3").exists()

    def test_caption_is_escaped(self, test_settings, work_dir):
        scenes = [prepared(work_dir, 1, description="<script>alert(1)</script>")]
        PresentationPackager(test_settings).package(scenes, "A & B", work_dir, work_dir / "out.zip")

        html = (work_dir / "index.html").read_text()
        assert "<script>alert(1)</script>" not in html
        assert "&lt;script&gt;" in html
        assert "A &amp; B" in html

    def test_missing_image_keeps_slide(self, test_settings, work_dir):
        scenes = [prepared(work_dir, 1), prepared(work_dir, 2, image=False)]
        PresentationPackager(test_settings).package(scenes, "Story", work_dir, work_dir / "out.zip")

        html = (work_dir / "index.html").read_text()
        assert html.count('class="slide"') == 2
        assert not (work_dir / "scene_2.jpg").exists()

    def test_stats_recorded(self, test_settings, work_dir):
        stats = InMemoryStatsCollector()
        PresentationPackager(test_settings).package(
            [prepared(work_dir, 1)], "Story", work_dir, work_dir / "out.zip", stats
        )

        assert stats.counters["packager.slides"] == 1
        assert "packager" in stats.timings

    def test_truncated_image_is_copied_raw(self, test_settings, work_dir):
        buffer = io.BytesIO()
        Image.linear_gradient("L").convert("RGB").save(buffer, format="JPEG")
        damaged = buffer.getvalue()[: len(buffer.getvalue()) // 2]
        scene = prepared(work_dir, 1)
        scene.image_path.write_bytes(damaged)

        archive = PresentationPackager(test_settings).package([scene], "Story", work_dir, work_dir / "out.zip")

        assert (work_dir / "scene_1.jpg").read_bytes() == damaged
        assert (work_dir / "preview.jpg").stat().st_size > 0
        assert archive.exists()

    def test_oversized_image_is_copied_raw(self, test_settings, work_dir, monkeypatch):
        scenes = [prepared(work_dir, 1)]
        original = scenes[0].image_path.read_bytes()
        monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 1000)

        PresentationPackager(test_settings).package(scenes, "Story", work_dir, work_dir / "out.zip")

        assert (work_dir / "scene_1.jpg").read_bytes() == original
        with zipfile.ZipFile(work_dir / "out.zip") as zf:
            assert "scene_1.jpg" in zf.namelist()


class TestPreview:
    """Preview rendering and its fallback."""

    def test_fit_within_letterboxes(self):
        assert fit_within((400, 300), (320, 180)) == (40, 0, 240, 180)
        assert fit_within((1600, 400), (320, 180)) == (0, 50, 320, 80)

    def test_missing_image_uses_placeholder(self, work_dir):
        path = create_preview(None, work_dir)

        assert path == work_dir / "preview.jpg"
        assert path.stat().st_size > 0

    def test_corrupt_image_uses_placeholder(self, work_dir):
        broken = work_dir / "scene_1_image.jpg"
        broken.write_bytes(b"not an image")

        path = create_preview(broken, work_dir, (160, 90))

        with Image.open(path) as image:
            assert image.size == (160, 90)

    def test_oversized_image_uses_placeholder(self, work_dir, monkeypatch):
        source = work_dir / "scene_1_image.png"
        source.write_bytes(make_image_bytes(width=400, height=300))
        monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 1000)

        path = create_preview(source, work_dir)

        assert path == work_dir / "preview.jpg"
        assert path.stat().st_size > 0

    def test_unwritable_output_does_not_raise(self, tmp_path):
        assert create_preview(None, tmp_path / "missing-dir") is None


class TestArchive:
    """Zip creation."""

    def test_archive_is_deflated(self, work_dir):
        (work_dir / "index.html").write_text("<html>" + "x" * 5000 + "</html>")
        archive = create_archive(work_dir, work_dir / "out.zip")

        with zipfile.ZipFile(archive) as zf:
            info = zf.getinfo("index.html")
        assert info.compress_type == zipfile.ZIP_DEFLATED
        assert info.compress_size < info.file_size

    def test_unwritable_destination(self, work_dir, tmp_path):
        with pytest.raises(PackagingError):
            create_archive(work_dir, tmp_path / "no" / "such" / "dir.zip")
