"""
Render endpoint.

Runs the render pipeline synchronously and returns the artifact contract.
"""

from fastapi import APIRouter, Depends

from shared.logging import get_logger
from shared.models.artifact import RenderRequest, RenderResult
from shared.stats import StatsCollector
from api_gateway.dependencies import get_render_service, get_stats
from api_gateway.orchestrator import RenderService

logger = get_logger(__name__)

router = APIRouter()


@router.post("/render", response_model=RenderResult, response_model_by_alias=True)
async def render_story(
    request: RenderRequest,
    service: RenderService = Depends(get_render_service),
    stats: StatsCollector = Depends(get_stats)
):
    """
    Render a story into a video or a packaged presentation.

    Args:
        request: Title, scenes and optional output mode
        service: Render service from app state
        stats: Per-request stats collector

    Returns:
        Artifact contract with download, stream and view URLs
    """
    return await service.render(request, stats)
