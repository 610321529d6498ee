"""
Artifact endpoints.

Download, byte-range streaming and in-browser viewing of finished artifacts.
"""

from pathlib import Path as FilePath
from typing import Iterator, Optional

from fastapi import APIRouter, Depends, Header, Path, Request
from fastapi.responses import FileResponse, RedirectResponse, Response, StreamingResponse

from shared.logging import get_logger
from shared.models.artifact import ArtifactFormat
from modules.delivery.ranges import RangeNotSatisfiable, parse_range
from modules.delivery.store import ArtifactStore
from api_gateway.dependencies import get_artifact_store

logger = get_logger(__name__)

router = APIRouter()

CHUNK_SIZE = 64 * 1024


def iter_file(path: FilePath, start: int, length: int) -> Iterator[bytes]:
    """Yield `length` bytes of `path` starting at `start`."""
    with open(path, "rb") as f:
        f.seek(start)
        remaining = length
        while remaining > 0:
            chunk = f.read(min(CHUNK_SIZE, remaining))
            if not chunk:
                break
            remaining -= len(chunk)
            yield chunk


@router.get("/artifacts/{artifact_id}/download")
async def download_artifact(
    artifact_id: str = Path(...),
    store: ArtifactStore = Depends(get_artifact_store)
):
    """
    Download the artifact file as an attachment.

    Returns:
        The zip or mp4 with a Content-Disposition filename
    """
    artifact = store.resolve(artifact_id)
    logger.info("Artifact download", extra={"artifact_id": artifact_id, "format": artifact.format.value})
    return FileResponse(
        artifact.path,
        media_type=artifact.media_type,
        filename=artifact.filename,
    )


@router.get("/artifacts/{artifact_id}/stream")
async def stream_artifact(
    request: Request,
    artifact_id: str = Path(...),
    range_header: Optional[str] = Header(None, alias="range"),
    store: ArtifactStore = Depends(get_artifact_store)
):
    """
    Stream an artifact.

    Videos honour single byte ranges (206 with Content-Range). Archives have no
    playable stream: their preview image is served instead, or the client is
    redirected to the download when there is no preview.
    """
    artifact = store.resolve(artifact_id)

    if artifact.format == ArtifactFormat.ARCHIVE:
        if artifact.preview_path.is_file():
            return FileResponse(artifact.preview_path, media_type="image/jpeg")
        download_url = request.url_for("download_artifact", artifact_id=artifact_id)
        return RedirectResponse(url=str(download_url), status_code=302)

    size = artifact.size_bytes
    try:
        byte_range = parse_range(range_header, size)
    except RangeNotSatisfiable:
        return Response(status_code=416, headers={"Content-Range": f"bytes */{size}"})

    if byte_range is None:
        return StreamingResponse(
            iter_file(artifact.path, 0, size),
            media_type=artifact.media_type,
            headers={"Content-Length": str(size), "Accept-Ranges": "bytes"},
        )

    return StreamingResponse(
        iter_file(artifact.path, byte_range.start, byte_range.length),
        status_code=206,
        media_type=artifact.media_type,
        headers={
            "Content-Range": byte_range.content_range,
            "Content-Length": str(byte_range.length),
            "Accept-Ranges": "bytes",
        },
    )


@router.get("/artifacts/{artifact_id}/view")
async def view_artifact(
    artifact_id: str = Path(...),
    store: ArtifactStore = Depends(get_artifact_store)
):
    """Serve the packaged presentation's index document."""
    return FileResponse(store.presentation(artifact_id), media_type="text/html")
