"""
Presentation packaging.

Alternate output path: a static slideshow (index.html, styles.css, script.js)
with normalized per-scene media and a preview image, zipped into one archive.
"""

import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from jinja2 import Environment, FileSystemLoader, TemplateError, select_autoescape
from PIL import Image

from shared.config import Settings, settings as default_settings
from shared.errors import PackagingError
from shared.logging import get_logger
from shared.models.scene import PreparedScene
from shared.stats import NullStatsCollector, StatsCollector

from modules.packager.archive import create_archive
from modules.packager.preview import create_preview

logger = get_logger("packager")

TEMPLATE_DIR = Path(__file__).parent / "templates"
STATIC_FILES = ("styles.css", "script.js")


@dataclass
class Slide:
    """One slide entry of the presentation document."""

    image: Optional[str]
    audio: Optional[str]
    caption: str
    duration: float


def slide_image_name(index: int) -> str:
    return f"scene_{index}.jpg"


def slide_audio_name(index: int, suffix: str = ".mp3") -> str:
    return f"scene_{index}_narration{suffix}"


class PresentationPackager:
    """Builds the interactive presentation archive for a job."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or default_settings
        self.env = Environment(
            loader=FileSystemLoader(str(TEMPLATE_DIR)),
            autoescape=select_autoescape(["html", "j2"]),
        )

    def package(
        self,
        scenes: Sequence[PreparedScene],
        title: str,
        work_dir: Path,
        archive_path: Path,
        stats: Optional[StatsCollector] = None
    ) -> Path:
        """
        Build the presentation in `work_dir` and archive it to `archive_path`.

        Args:
            scenes: Prepared scenes in presentation order
            title: Story title shown in the page header
            work_dir: Job workspace
            archive_path: Destination zip (normally inside the workspace)
            stats: Request-scoped stats collector

        Returns:
            Path of the archive

        Raises:
            PackagingError: If any document, media copy or the archive fails
        """
        stats = stats or NullStatsCollector()

        with stats.timer("packager"):
            slides = self.prepare_slides(scenes, work_dir)
            self.write_documents(slides, title, work_dir)

            first_image = next((s.image_path for s in scenes if s.has_image()), None)
            size = (self.settings.preview_width, self.settings.preview_height)
            if create_preview(first_image, work_dir, size) is None:
                stats.incr("packager.preview_failed")

            create_archive(work_dir, archive_path)

        stats.incr("packager.slides", len(slides))
        logger.info(f"Packaged {len(slides)} slides into {archive_path.name}")
        return archive_path

    def prepare_slides(self, scenes: Sequence[PreparedScene], work_dir: Path) -> List[Slide]:
        """Copy media to normalized slide names and describe each slide."""
        slides = []
        for scene in scenes:
            image_name = None
            if scene.has_image():
                image_name = slide_image_name(scene.index)
                self._normalize_image(scene.image_path, work_dir / image_name)

            audio_name = None
            if scene.has_audio():
                audio_name = slide_audio_name(scene.index, scene.audio_path.suffix or ".mp3")
                self._copy(scene.audio_path, work_dir / audio_name)

            slides.append(Slide(
                image=image_name,
                audio=audio_name,
                caption=scene.caption,
                duration=scene.duration_seconds,
            ))
        return slides

    def write_documents(self, slides: Sequence[Slide], title: str, work_dir: Path) -> None:
        try:
            html = self.env.get_template("index.html.j2").render(title=title, slides=slides)
            (work_dir / "index.html").write_text(html, encoding="utf-8")
            for name in STATIC_FILES:
                shutil.copyfile(TEMPLATE_DIR / name, work_dir / name)
        except (TemplateError, OSError) as e:
            raise PackagingError(f"Could not write presentation documents: {e}") from e

    def _normalize_image(self, source: Path, target: Path) -> None:
        # Slides are always JPEG; undecodable sources are copied as-is
        try:
            with Image.open(source) as image:
                rgb = image.convert("RGB")
        except (OSError, ValueError, Image.DecompressionBombError) as e:
            logger.warning(f"Could not re-encode {source.name}, copying raw bytes: {e}")
            self._copy(source, target)
            return

        try:
            rgb.save(target, "JPEG", quality=92)
        except OSError as e:
            raise PackagingError(f"Could not write {target.name}: {e}") from e

    def _copy(self, source: Path, target: Path) -> None:
        try:
            shutil.copyfile(source, target)
        except OSError as e:
            raise PackagingError(f"Could not copy {source.name}: {e}") from e
