"""
Transition models.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict


class TransitionType(str, Enum):
    FADE = "fade"
    FADEBLACK = "fadeblack"
    FADEWHITE = "fadewhite"
    DISSOLVE = "dissolve"
    SLIDEUP = "slideup"
    SLIDEDOWN = "slidedown"
    SLIDERIGHT = "slideright"
    WIPELEFT = "wipeleft"
    WIPERIGHT = "wiperight"
    CIRCLECROP = "circlecrop"


class Easing(str, Enum):
    IN = "in"
    OUT = "out"
    INOUT = "inout"
    LINEAR = "linear"


class TransitionDescriptor(BaseModel):
    """Visual joint between two adjacent scenes. Computed on demand, never persisted."""

    model_config = ConfigDict(frozen=True)

    type: TransitionType
    duration_seconds: float
    easing: Easing
