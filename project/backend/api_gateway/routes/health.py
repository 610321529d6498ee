"""
Health check endpoint.

Reports temp storage usage, encoder availability and lifecycle settings.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from shared.config import Settings
from shared.logging import get_logger
from modules.compositor.ffmpeg import FfmpegRunner
from modules.lifecycle.manager import WorkspaceManager
from api_gateway.dependencies import get_ffmpeg_runner, get_settings, get_workspaces

logger = get_logger(__name__)

router = APIRouter()


@router.get("/health")
async def health_check(
    settings: Settings = Depends(get_settings),
    workspaces: WorkspaceManager = Depends(get_workspaces),
    runner: FfmpegRunner = Depends(get_ffmpeg_runner)
):
    """
    Health check endpoint.

    The service is degraded, not down, without ffmpeg: only the video-encode
    output mode needs it.

    Returns:
        Health status with storage and encoder checks
    """
    issues = []

    try:
        temp = workspaces.usage()
    except OSError as e:
        logger.warning(f"Could not read temp root usage: {e}")
        temp = {"entries": 0, "bytes": 0}
        issues.append("temp storage unreadable")

    ffmpeg_available = runner.is_available()
    if not ffmpeg_available and settings.output_mode == "video-encode":
        issues.append("ffmpeg not available")

    response = {
        "status": "healthy" if not issues else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "output_mode": settings.output_mode,
        "ffmpeg": "available" if ffmpeg_available else "missing",
        "temp": {
            "root": str(workspaces.temp_root),
            "entries": temp["entries"],
            "bytes": temp["bytes"],
            "pending_deletions": workspaces.pending_deletions,
        },
        "retention_seconds": settings.retention_seconds,
        "sweep_interval_seconds": settings.sweep_interval_seconds,
    }

    if issues:
        response["issues"] = issues

    return response
