"""
Output strategies.

One interface over the two mutually exclusive output paths: an encoded video
or a packaged HTML presentation.
"""

import asyncio
from pathlib import Path
from typing import Dict, Optional, Sequence

from shared.errors import ConfigError
from shared.models.artifact import ArtifactFormat, artifact_filename
from shared.models.scene import PreparedScene
from shared.stats import StatsCollector

from modules.compositor.compositor import VideoCompositor
from modules.packager.packager import PresentationPackager


class OutputStrategy:
    """Produces the artifact file for a job inside its workspace."""

    mode: str = ""
    format: ArtifactFormat

    async def render(
        self,
        scenes: Sequence[PreparedScene],
        title: str,
        work_dir: Path,
        artifact_id: str,
        stats: StatsCollector
    ) -> Path:
        raise NotImplementedError

    def output_path(self, work_dir: Path, artifact_id: str) -> Path:
        return work_dir / artifact_filename(artifact_id, self.format)


class VideoEncodeStrategy(OutputStrategy):
    mode = "video-encode"
    format = ArtifactFormat.VIDEO

    def __init__(self, compositor: VideoCompositor):
        self.compositor = compositor

    async def render(self, scenes, title, work_dir, artifact_id, stats) -> Path:
        return await self.compositor.compose(scenes, self.output_path(work_dir, artifact_id), stats)


class HtmlPackageStrategy(OutputStrategy):
    mode = "html-package"
    format = ArtifactFormat.ARCHIVE

    def __init__(self, packager: PresentationPackager):
        self.packager = packager

    async def render(self, scenes, title, work_dir, artifact_id, stats) -> Path:
        # Pillow and zipfile are blocking; keep them off the event loop
        return await asyncio.to_thread(
            self.packager.package, scenes, title, work_dir, self.output_path(work_dir, artifact_id), stats
        )


class StrategyRegistry:
    """Maps output mode names to strategies, with a configured default."""

    def __init__(self, strategies: Sequence[OutputStrategy], default_mode: str):
        self._strategies: Dict[str, OutputStrategy] = {s.mode: s for s in strategies}
        if default_mode not in self._strategies:
            raise ConfigError(f"Unknown default output mode: {default_mode}")
        self.default_mode = default_mode

    def select(self, mode: Optional[str] = None) -> OutputStrategy:
        """Strategy for `mode`, or the default when not given."""
        return self._strategies[mode or self.default_mode]
