"""
Render orchestration.

Runs one job end to end: validate, allocate a workspace, resolve assets, hand the
prepared scenes to the selected output strategy and register the artifact.
"""

import asyncio
from typing import Optional

from shared.config import Settings
from shared.errors import PipelineError
from shared.logging import get_logger, set_job_id
from shared.models.artifact import Artifact, ArtifactFormat, RenderRequest, RenderResult
from shared.stats import NullStatsCollector, StatsCollector
from shared.validation import ensure_renderable, validate_scenes

from modules.asset_resolver.resolver import AssetResolver
from modules.lifecycle.manager import WorkspaceManager
from api_gateway.services.output_strategy import StrategyRegistry

logger = get_logger(__name__)

DEFAULT_TITLE = "Generated Story"
API_PREFIX = "/api/v1"


def artifact_urls(artifact_id: str, fmt: ArtifactFormat) -> dict:
    base = f"{API_PREFIX}/artifacts/{artifact_id}"
    return {
        "download_url": f"{base}/download",
        "stream_url": f"{base}/stream",
        "view_url": f"{base}/view" if fmt == ArtifactFormat.ARCHIVE else None,
    }


class RenderService:
    """Pipeline entry point; every collaborator is injected."""

    def __init__(
        self,
        settings: Settings,
        workspaces: WorkspaceManager,
        resolver: AssetResolver,
        strategies: StrategyRegistry
    ):
        self.settings = settings
        self.workspaces = workspaces
        self.resolver = resolver
        self.strategies = strategies

    async def render(self, request: RenderRequest, stats: Optional[StatsCollector] = None) -> RenderResult:
        """
        Execute a render job.

        On any failure the workspace is deleted before the error propagates, so
        callers never see a partial artifact. On success the workspace is
        scheduled for deletion after the retention window.

        Args:
            request: Title, scenes and optional output mode override
            stats: Request-scoped stats collector

        Returns:
            RenderResult describing the registered artifact

        Raises:
            ValidationError: Bad input, or no scene image could be resolved
            PipelineError: A fatal stage failure (stage named on the error)
        """
        stats = stats or NullStatsCollector()
        validate_scenes(request.scenes, self.settings.max_inline_asset_mb)

        strategy = self.strategies.select(request.output_mode)
        title = (request.title or "").strip() or DEFAULT_TITLE
        job_id, work_dir = self.workspaces.allocate()
        set_job_id(job_id)

        try:
            logger.info(
                f"Render started: {len(request.scenes)} scenes, mode {strategy.mode}",
                extra={"job_id": job_id, "mode": strategy.mode}
            )
            prepared = await self.resolver.resolve(request.scenes, work_dir, stats)
            ensure_renderable(prepared, job_id=job_id)

            path = await strategy.render(prepared, title, work_dir, job_id, stats)
        except PipelineError as e:
            if e.job_id is None:
                e.job_id = job_id
            logger.error(
                f"Render failed at stage {e.stage or 'unknown'}: {e.message}",
                exc_info=True,
                extra={"job_id": job_id, "stage": e.stage}
            )
            self.workspaces.delete(job_id)
            raise
        except Exception:
            logger.error("Render failed unexpectedly", exc_info=True, extra={"job_id": job_id})
            self.workspaces.delete(job_id)
            raise
        except asyncio.CancelledError:
            logger.warning("Render cancelled", extra={"job_id": job_id})
            self.workspaces.delete(job_id)
            raise
        finally:
            set_job_id(None)

        artifact = Artifact(
            id=job_id,
            title=title,
            format=strategy.format,
            size_bytes=path.stat().st_size,
            storage_path=path,
            temporary=True,
        )
        self.workspaces.schedule_deletion(job_id)
        stats.incr("render.completed")

        logger.info(
            f"Render completed: {artifact.format.value} {artifact.size_bytes} bytes",
            extra={"job_id": job_id}
        )

        return RenderResult(
            artifact_id=artifact.id,
            title=artifact.title,
            total_duration_seconds=round(sum(scene.duration_seconds for scene in prepared), 3),
            scene_count=len(prepared),
            format=artifact.format,
            resolution=self.settings.resolution,
            size_bytes=artifact.size_bytes,
            temporary=artifact.temporary,
            created_at=artifact.created_at,
            stats=stats.snapshot(),
            **artifact_urls(artifact.id, artifact.format),
        )
