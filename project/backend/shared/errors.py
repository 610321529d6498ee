"""
Error handling.

Custom exception classes for consistent error handling across the render pipeline.
"""

from typing import Optional


class PipelineError(Exception):
    """Base exception for all pipeline errors."""

    stage: Optional[str] = None

    def __init__(
        self,
        message: str,
        job_id: Optional[str] = None,
        code: Optional[str] = None,
        stage: Optional[str] = None
    ):
        """
        Initialize pipeline error.

        Args:
            message: Error message
            job_id: Optional job ID associated with the error
            code: Optional error code for categorization
            stage: Optional name of the pipeline stage that failed
        """
        self.message = message
        self.job_id = job_id
        self.code = code
        if stage is not None:
            self.stage = stage
        super().__init__(self.message)


class ConfigError(PipelineError):
    """Configuration errors (missing env vars, invalid settings)."""
    pass


class ValidationError(PipelineError):
    """Input validation errors, raised before the pipeline starts."""
    stage = "validation"


class RetryableError(PipelineError):
    """Error that can be retried."""
    pass


class AssetDownloadError(PipelineError):
    """A single asset could not be fetched or decoded (non-fatal)."""
    stage = "asset_resolver"


class EncodeError(PipelineError):
    """Encode graph or encoder failures (fatal)."""
    stage = "compositor"


class PackagingError(PipelineError):
    """Presentation packaging failures (fatal)."""
    stage = "packager"


class ArtifactNotFoundError(PipelineError):
    """No artifact exists for the requested id in any storage layout."""
    stage = "delivery"

    def __init__(self, artifact_id: str, message: Optional[str] = None):
        self.artifact_id = artifact_id
        super().__init__(
            message or f"Artifact {artifact_id} not found or expired",
            job_id=artifact_id,
            code="ARTIFACT_NOT_FOUND"
        )


__all__ = [
    "PipelineError",
    "ConfigError",
    "ValidationError",
    "RetryableError",
    "AssetDownloadError",
    "EncodeError",
    "PackagingError",
    "ArtifactNotFoundError",
]
