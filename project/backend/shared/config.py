"""
Configuration management.

Centralized environment variable management and validation.
"""

from pathlib import Path
from typing import Literal
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from shared.errors import ConfigError

OutputMode = Literal["video-encode", "html-package"]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,  # Allow case-insensitive env var matching
        extra="ignore"
    )

    # Environment
    environment: Literal["development", "staging", "production", "test"] = "development"

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Frontend configuration
    frontend_url: str = "http://localhost:3000"  # Frontend domain for CORS

    # Storage layout
    temp_root: Path = Path("temp")
    legacy_video_dir: Path = Path("videos")

    # Output selection
    output_mode: OutputMode = "html-package"

    # Workspace lifecycle
    retention_seconds: float = 3600.0  # 1 hour
    sweep_interval_seconds: float = 1800.0  # 30 minutes

    # Asset acquisition
    asset_timeout_seconds: float = 30.0
    asset_max_attempts: int = 3
    asset_retry_base_delay: float = 1.0
    asset_fetch_concurrency: int = 1  # 1 = sequential
    max_inline_asset_mb: int = 5

    # Scene timing
    min_scene_duration: float = 2.0
    default_scene_duration: float = 4.0

    # Encoder
    ffmpeg_path: str = "ffmpeg"
    video_width: int = 1920
    video_height: int = 1080
    video_fps: int = 60
    video_crf: int = 23
    video_preset: str = "medium"
    pad_color: str = "black"
    pixel_format: str = "yuv420p"
    audio_bitrate: str = "128k"

    # Preview image
    preview_width: int = 320
    preview_height: int = 180

    @field_validator("frontend_url")
    @classmethod
    def validate_frontend_url(cls, v: str) -> str:
        """Validate frontend URL format."""
        if not v.startswith(("http://", "https://")):
            raise ConfigError("FRONTEND_URL must be a valid HTTP/HTTPS URL")
        return v

    @field_validator(
        "retention_seconds",
        "sweep_interval_seconds",
        "asset_timeout_seconds",
        "min_scene_duration",
        "default_scene_duration",
    )
    @classmethod
    def validate_positive_seconds(cls, v: float) -> float:
        """Durations and intervals must be positive."""
        if v <= 0:
            raise ConfigError(f"Duration settings must be positive, got {v}")
        return v

    @field_validator(
        "video_width",
        "video_height",
        "video_fps",
        "preview_width",
        "preview_height",
        "asset_max_attempts",
        "asset_fetch_concurrency",
        "max_inline_asset_mb",
    )
    @classmethod
    def validate_positive_int(cls, v: int) -> int:
        """Dimensions, rates and counts must be positive."""
        if v <= 0:
            raise ConfigError(f"Numeric settings must be positive, got {v}")
        return v

    @property
    def resolution(self) -> str:
        """Output resolution as WIDTHxHEIGHT."""
        return f"{self.video_width}x{self.video_height}"


# Singleton instance
try:
    settings = Settings()
except Exception as e:
    # Re-raise as ConfigError for consistency
    if isinstance(e, ConfigError):
        raise
    raise ConfigError(f"Failed to load configuration: {str(e)}") from e
