"""
Data models for the render pipeline.

This module exports all Pydantic models used across pipeline modules.
"""

from .scene import SceneDescriptor, PreparedScene, ImageRef, AudioRef, AmbientRef
from .transition import TransitionDescriptor, TransitionType, Easing
from .artifact import (
    Artifact,
    ArtifactFile,
    ArtifactFormat,
    RenderRequest,
    RenderResult,
    artifact_filename,
)

__all__ = [
    # Scene models
    "SceneDescriptor",
    "PreparedScene",
    "ImageRef",
    "AudioRef",
    "AmbientRef",
    # Transition models
    "TransitionDescriptor",
    "TransitionType",
    "Easing",
    # Artifact models
    "Artifact",
    "ArtifactFile",
    "ArtifactFormat",
    "RenderRequest",
    "RenderResult",
    "artifact_filename",
]
