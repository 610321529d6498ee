"""
Media reference utilities.

Parse data URIs and pick file extensions for downloaded assets.
"""

import base64
import binascii
import mimetypes
import re
from pathlib import PurePosixPath
from typing import Tuple
from urllib.parse import unquote_to_bytes, urlparse

from shared.errors import AssetDownloadError

DATA_URI_PATTERN = re.compile(r"^data:(?P<mime>[^;,]*)(?P<params>(;[^;,]*)*?)(?P<b64>;base64)?,(?P<payload>.*)$", re.DOTALL)

DEFAULT_EXTENSIONS = {
    "image": ".jpg",
    "audio": ".mp3",
    "ambient": ".mp3",
}

# mimetypes returns odd first choices for a few common types
PREFERRED_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
    "image/gif": ".gif",
    "image/svg+xml": ".svg",
    "audio/mpeg": ".mp3",
    "audio/mp3": ".mp3",
    "audio/wav": ".wav",
    "audio/x-wav": ".wav",
    "audio/ogg": ".ogg",
    "audio/aac": ".aac",
    "audio/mp4": ".m4a",
}

KNOWN_SUFFIXES = frozenset(PREFERRED_EXTENSIONS.values()) | {".jpeg", ".flac", ".opus"}


def decode_data_uri(reference: str) -> Tuple[str, bytes]:
    """
    Decode an inline data URI.

    Args:
        reference: data:<mime>[;base64],<payload>

    Returns:
        (mime type, decoded bytes)

    Raises:
        AssetDownloadError: If the URI is malformed or the payload can't be decoded
    """
    match = DATA_URI_PATTERN.match(reference)
    if not match:
        raise AssetDownloadError("Malformed data URI")

    mime = (match.group("mime") or "application/octet-stream").lower()
    payload = match.group("payload")
    try:
        if match.group("b64"):
            data = base64.b64decode(payload, validate=False)
        else:
            data = unquote_to_bytes(payload)
    except (binascii.Error, ValueError) as e:
        raise AssetDownloadError(f"Invalid base64 payload: {e}") from e

    if not data:
        raise AssetDownloadError("Data URI payload is empty")
    return mime, data


def extension_for_mime(mime: str, kind: str) -> str:
    """File extension for a mime type, falling back to the kind's default."""
    if mime in PREFERRED_EXTENSIONS:
        return PREFERRED_EXTENSIONS[mime]
    guessed = mimetypes.guess_extension(mime) if mime else None
    return guessed or DEFAULT_EXTENSIONS[kind]


def extension_for_url(url: str, kind: str) -> str:
    """File extension taken from a URL path, falling back to the kind's default."""
    try:
        suffix = PurePosixPath(urlparse(url).path).suffix.lower()
    except ValueError:
        return DEFAULT_EXTENSIONS[kind]
    if suffix in KNOWN_SUFFIXES:
        return ".jpg" if suffix == ".jpeg" else suffix
    return DEFAULT_EXTENSIONS[kind]


def scene_asset_name(index: int, kind: str, extension: str) -> str:
    """Workspace file name for one scene asset, e.g. scene_1_image.jpg."""
    return f"scene_{index}_{kind}{extension}"
