"""
Validation utilities.

Input validation run before a render job is allowed to start.
"""

import re
from typing import List, Optional, Sequence

from shared.errors import ValidationError
from shared.models.scene import PreparedScene, SceneDescriptor

ARTIFACT_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


def is_inline_reference(reference: str) -> bool:
    """Whether a media reference is an inline data URI."""
    return reference.startswith("data:")


def is_remote_reference(reference: str) -> bool:
    """Whether a media reference is an http(s) URL."""
    return reference.startswith(("http://", "https://"))


def validate_file_size(
    file_size_bytes: int,
    max_size_bytes: int
) -> None:
    """
    Validate file size.

    Args:
        file_size_bytes: File size in bytes
        max_size_bytes: Maximum allowed size in bytes

    Raises:
        ValidationError: If file size exceeds maximum
    """
    if file_size_bytes < 0:
        raise ValidationError("File size cannot be negative")

    if file_size_bytes > max_size_bytes:
        max_size_mb = max_size_bytes / (1024 * 1024)
        file_size_mb = file_size_bytes / (1024 * 1024)
        raise ValidationError(
            f"File size ({file_size_mb:.2f} MB) exceeds maximum "
            f"of {max_size_mb:.2f} MB"
        )


def validate_media_reference(reference: str, label: str, max_inline_mb: int) -> None:
    """
    Validate one media reference.

    Args:
        reference: Remote URL or data URI
        label: Human-readable location used in error messages
        max_inline_mb: Size cap for inline blobs

    Raises:
        ValidationError: If the reference has an unsupported format or is too large
    """
    if is_remote_reference(reference):
        return
    if not is_inline_reference(reference):
        raise ValidationError(f"{label} has invalid URL format")

    # base64 is ~33% larger than the binary it encodes
    payload = reference.split(",", 1)[-1]
    estimated_size = (len(payload) * 3) // 4
    try:
        validate_file_size(estimated_size, max_inline_mb * 1024 * 1024)
    except ValidationError as e:
        raise ValidationError(f"{label}: {e.message}") from e


def validate_scenes(scenes: Optional[Sequence[SceneDescriptor]], max_inline_mb: int = 5) -> None:
    """
    Validate the scene list of a render request.

    Every scene needs an image reference and a description. Audio and ambient
    references are optional but must be well formed when present.

    Args:
        scenes: Scene descriptors in presentation order
        max_inline_mb: Size cap for inline blobs

    Raises:
        ValidationError: Listing every problem found
    """
    if not scenes:
        raise ValidationError("Valid scenes are required: provide a non-empty array of scene objects")

    errors: List[str] = []
    for position, scene in enumerate(scenes, start=1):
        label = f"Scene {scene.scene_number or position}"

        image_reference = scene.image_reference
        if not image_reference:
            errors.append(f"{label} missing image URL")
        else:
            try:
                validate_media_reference(image_reference, f"{label} image", max_inline_mb)
            except ValidationError as e:
                errors.append(e.message)

        if not scene.caption.strip():
            errors.append(f"{label} missing description")

        for kind, reference in (("audio", scene.audio_reference), ("ambient", scene.ambient_reference)):
            if not reference:
                continue
            try:
                validate_media_reference(reference, f"{label} {kind}", max_inline_mb)
            except ValidationError as e:
                errors.append(e.message)

    if errors:
        raise ValidationError("; ".join(errors), code="INVALID_SCENES")


def ensure_renderable(prepared: Sequence[PreparedScene], job_id: Optional[str] = None) -> None:
    """
    Fail when no scene ended up with a usable image after asset resolution.

    Raises:
        ValidationError: If zero images were resolved
    """
    if not any(scene.has_image() for scene in prepared):
        raise ValidationError(
            "No scene images could be resolved; nothing to render",
            job_id=job_id,
            code="NO_RESOLVABLE_IMAGES"
        )


def validate_artifact_id(artifact_id: str) -> str:
    """
    Validate an artifact id taken from a URL path.

    Raises:
        ValidationError: If the id could escape the storage root
    """
    if not artifact_id or not ARTIFACT_ID_PATTERN.match(artifact_id):
        raise ValidationError("Invalid artifact ID", code="INVALID_ARTIFACT_ID")
    return artifact_id
