"""
Artifact models.

The deliverable produced by a render job and the output contract returned to callers.
"""

from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from shared.models.scene import SceneDescriptor

MEDIA_TYPES = {
    "video": "video/mp4",
    "archive": "application/zip",
}


class ArtifactFormat(str, Enum):
    VIDEO = "video"
    ARCHIVE = "archive"

    @property
    def media_type(self) -> str:
        return MEDIA_TYPES[self.value]

    @property
    def extension(self) -> str:
        return ".mp4" if self is ArtifactFormat.VIDEO else ".zip"


def artifact_filename(artifact_id: str, fmt: ArtifactFormat) -> str:
    """Canonical file name of an artifact inside its workspace."""
    return f"story_{artifact_id}{fmt.extension}"


class Artifact(BaseModel):
    """A finished deliverable. Immutable once registered."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    format: ArtifactFormat
    size_bytes: int
    storage_path: Path
    temporary: bool = True
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ArtifactFile(BaseModel):
    """An artifact located on disk by the delivery resolver."""

    model_config = ConfigDict(frozen=True)

    artifact_id: str
    path: Path
    filename: str
    size_bytes: int
    format: ArtifactFormat
    temporary: bool

    @property
    def media_type(self) -> str:
        return self.format.media_type

    @property
    def preview_path(self) -> Path:
        return self.path.parent / "preview.jpg"


class RenderRequest(BaseModel):
    """Body of a render request."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: Optional[str] = None
    scenes: List[SceneDescriptor] = Field(default_factory=list)
    output_mode: Optional[Literal["video-encode", "html-package"]] = None


class RenderResult(BaseModel):
    """Output artifact contract, serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    artifact_id: str
    title: str
    total_duration_seconds: float
    scene_count: int
    download_url: str
    stream_url: str
    view_url: Optional[str] = None
    format: ArtifactFormat
    resolution: str
    size_bytes: int
    temporary: bool = True
    created_at: datetime
    stats: dict = Field(default_factory=dict)
