"""
Scene models.

Input scene descriptors produced by the generation collaborators, and the prepared
scenes the asset resolver hands to the compositor and packager.
"""

from pathlib import Path
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ImageRef(BaseModel):
    """Reference to a generated scene image (remote URL or data URI)."""

    url: Optional[str] = Field(default=None, validation_alias=AliasChoices("url", "imageUrl", "image_url"))


class AudioRef(BaseModel):
    """Reference to a narration track."""

    url: Optional[str] = Field(default=None, validation_alias=AliasChoices("url", "audioUrl", "audio_url"))
    duration_seconds: Optional[float] = Field(
        default=None,
        validation_alias=AliasChoices("durationSeconds", "duration", "duration_seconds")
    )


class AmbientRef(BaseModel):
    """Reference to an ambient sound bed."""

    url: Optional[str] = Field(default=None, validation_alias=AliasChoices("url", "ambientUrl", "ambient_url"))
    volume: Optional[float] = None


class SceneDescriptor(BaseModel):
    """One narrative beat: text, mood/time/environment tags and media references."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    scene_number: Optional[int] = None
    description: Optional[str] = None
    narration_text: Optional[str] = None
    characters: List[str] = Field(default_factory=list)
    setting: Optional[str] = None
    mood: Optional[str] = None
    time_of_day: Optional[str] = None
    weather: Optional[str] = None
    environment: Optional[str] = None
    sound_context: Optional[str] = None
    duration_seconds: Optional[float] = Field(
        default=None,
        validation_alias=AliasChoices("durationSeconds", "duration", "duration_seconds")
    )
    image: Optional[ImageRef] = None
    image_url: Optional[str] = None  # legacy top-level image reference
    audio: Optional[AudioRef] = None
    ambient: Optional[AmbientRef] = None

    @property
    def image_reference(self) -> Optional[str]:
        if self.image and self.image.url:
            return self.image.url
        return self.image_url

    @property
    def audio_reference(self) -> Optional[str]:
        return self.audio.url if self.audio else None

    @property
    def ambient_reference(self) -> Optional[str]:
        return self.ambient.url if self.ambient else None

    @property
    def caption(self) -> str:
        """Text shown with the scene: description, falling back to narration."""
        return self.description or self.narration_text or ""


class PreparedScene(SceneDescriptor):
    """
    A scene descriptor with its media resolved into the job workspace.

    Any path may be None when the asset failed to download or decode.
    `duration_seconds` is the effective, clamped on-screen duration.
    """

    index: int
    image_path: Optional[Path] = None
    audio_path: Optional[Path] = None
    ambient_path: Optional[Path] = None
    duration_seconds: float

    @classmethod
    def from_descriptor(
        cls,
        scene: SceneDescriptor,
        index: int,
        duration_seconds: float,
        image_path: Optional[Path] = None,
        audio_path: Optional[Path] = None,
        ambient_path: Optional[Path] = None,
    ) -> "PreparedScene":
        data = scene.model_dump(exclude={"duration_seconds"})
        return cls(
            **data,
            index=index,
            duration_seconds=duration_seconds,
            image_path=image_path,
            audio_path=audio_path,
            ambient_path=ambient_path,
        )

    def has_image(self) -> bool:
        return self.image_path is not None and self.image_path.exists()

    def has_audio(self) -> bool:
        return self.audio_path is not None and self.audio_path.exists()

    def has_ambient(self) -> bool:
        return self.ambient_path is not None and self.ambient_path.exists()
