"""
FastAPI application entry point.

App factory wiring every pipeline collaborator, plus CORS, request IDs,
error mapping and route registration.
"""

import uuid
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from shared.config import Settings, settings as default_settings
from shared.errors import ArtifactNotFoundError, PipelineError, RetryableError, ValidationError
from shared.logging import configure_logging, get_logger

from modules.asset_resolver.resolver import AssetResolver
from modules.compositor.compositor import VideoCompositor
from modules.compositor.ffmpeg import FfmpegRunner
from modules.delivery.store import ArtifactStore
from modules.lifecycle.manager import WorkspaceManager
from modules.packager.packager import PresentationPackager
from api_gateway.orchestrator import RenderService
from api_gateway.services.output_strategy import HtmlPackageStrategy, StrategyRegistry, VideoEncodeStrategy

logger = get_logger(__name__)


def error_payload(request: Request, exc: PipelineError, code: str, retryable: bool = False) -> dict:
    return {
        "error": exc.message,
        "code": exc.code or code,
        "stage": exc.stage,
        "retryable": retryable,
        "request_id": getattr(request.state, "request_id", None),
    }


def build_state(app: FastAPI, settings: Settings) -> None:
    """Construct the pipeline collaborators and store them on app.state."""
    runner = FfmpegRunner(settings.ffmpeg_path)
    workspaces = WorkspaceManager(
        settings.temp_root,
        retention_seconds=settings.retention_seconds,
        sweep_interval_seconds=settings.sweep_interval_seconds,
    )
    strategies = StrategyRegistry(
        [
            VideoEncodeStrategy(VideoCompositor(settings, runner)),
            HtmlPackageStrategy(PresentationPackager(settings)),
        ],
        default_mode=settings.output_mode,
    )

    app.state.settings = settings
    app.state.ffmpeg_runner = runner
    app.state.workspaces = workspaces
    app.state.artifact_store = ArtifactStore(settings.temp_root, settings.legacy_video_dir)
    app.state.render_service = RenderService(
        settings,
        workspaces=workspaces,
        resolver=AssetResolver(settings),
        strategies=strategies,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    if settings.environment != "test":
        configure_logging(settings.log_level)

    workspaces: WorkspaceManager = app.state.workspaces
    workspaces.start()
    logger.info(
        "Render service started",
        extra={"output_mode": settings.output_mode, "temp_root": str(workspaces.temp_root)}
    )
    try:
        yield
    finally:
        await workspaces.stop()
        logger.info("Render service stopped")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Settings to run with (defaults to the environment-loaded singleton)

    Returns:
        Configured FastAPI app
    """
    settings = settings or default_settings

    app = FastAPI(
        title="Story Render Service",
        description="Turns scene sequences into videos or interactive presentations",
        version="1.0.0",
        lifespan=lifespan,
    )
    build_state(app, settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Range"],
        expose_headers=["Content-Range", "Accept-Ranges", "Content-Length", "X-Request-ID"],
        allow_credentials=True,
        max_age=3600
    )

    @app.middleware("http")
    async def add_request_id(request: Request, call_next):
        """Add unique request ID to each request."""
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        logger.info(
            "Request started",
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path
            }
        )

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id

        return response

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        """Handle validation errors."""
        return JSONResponse(status_code=400, content=error_payload(request, exc, "VALIDATION_ERROR"))

    @app.exception_handler(ArtifactNotFoundError)
    async def not_found_error_handler(request: Request, exc: ArtifactNotFoundError):
        """Handle unknown or expired artifacts."""
        return JSONResponse(status_code=404, content=error_payload(request, exc, "ARTIFACT_NOT_FOUND"))

    @app.exception_handler(RetryableError)
    async def retryable_error_handler(request: Request, exc: RetryableError):
        """Handle retryable errors."""
        return JSONResponse(status_code=500, content=error_payload(request, exc, "RETRYABLE_ERROR", retryable=True))

    @app.exception_handler(PipelineError)
    async def pipeline_error_handler(request: Request, exc: PipelineError):
        """Handle fatal pipeline stage errors."""
        return JSONResponse(status_code=500, content=error_payload(request, exc, "STAGE_FAILURE"))

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected errors."""
        logger.error(
            "Unhandled exception",
            exc_info=exc,
            extra={"request_id": getattr(request.state, "request_id", None)}
        )
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal server error",
                "code": "INTERNAL_ERROR",
                "stage": None,
                "retryable": False,
                "request_id": getattr(request.state, "request_id", None)
            }
        )

    from api_gateway.routes import artifacts, health, render

    app.include_router(render.router, prefix="/api/v1", tags=["render"])
    app.include_router(artifacts.router, prefix="/api/v1", tags=["artifacts"])
    app.include_router(health.router, prefix="/api/v1", tags=["health"])

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "message": "Story Render Service",
            "version": "1.0.0",
            "output_mode": settings.output_mode,
        }

    return app


app = create_app()
