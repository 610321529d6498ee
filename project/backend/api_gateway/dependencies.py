"""
FastAPI dependencies.

Collaborators are built once by the app factory and stored on `app.state`;
these accessors hand them to route handlers.
"""

from fastapi import Request

from shared.config import Settings
from shared.stats import InMemoryStatsCollector, StatsCollector

from modules.compositor.ffmpeg import FfmpegRunner
from modules.delivery.store import ArtifactStore
from modules.lifecycle.manager import WorkspaceManager
from api_gateway.orchestrator import RenderService


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_render_service(request: Request) -> RenderService:
    return request.app.state.render_service


def get_artifact_store(request: Request) -> ArtifactStore:
    return request.app.state.artifact_store


def get_workspaces(request: Request) -> WorkspaceManager:
    return request.app.state.workspaces


def get_ffmpeg_runner(request: Request) -> FfmpegRunner:
    return request.app.state.ffmpeg_runner


def get_stats() -> StatsCollector:
    """A fresh collector per request."""
    return InMemoryStatsCollector()
