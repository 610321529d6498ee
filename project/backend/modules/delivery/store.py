"""
Artifact lookup across storage layouts.
"""

from pathlib import Path
from typing import List, Tuple

from shared.errors import ArtifactNotFoundError
from shared.logging import get_logger
from shared.models.artifact import ArtifactFile, ArtifactFormat, artifact_filename
from shared.validation import validate_artifact_id

logger = get_logger("delivery")

INDEX_DOCUMENT = "index.html"


class ArtifactStore:
    """
    Resolves artifact ids to files.

    Layouts, in priority order:
        1. {temp_root}/{id}/story_{id}.zip   (packaged presentation)
        2. {temp_root}/{id}/story_{id}.mp4   (encoded video)
        3. {legacy_dir}/story_{id}.mp4       (flat permanent store)
    """

    def __init__(self, temp_root: Path, legacy_dir: Path):
        self.temp_root = Path(temp_root)
        self.legacy_dir = Path(legacy_dir)

    def candidates(self, artifact_id: str) -> List[Tuple[Path, ArtifactFormat, bool]]:
        workspace = self.temp_root / artifact_id
        return [
            (workspace / artifact_filename(artifact_id, ArtifactFormat.ARCHIVE), ArtifactFormat.ARCHIVE, True),
            (workspace / artifact_filename(artifact_id, ArtifactFormat.VIDEO), ArtifactFormat.VIDEO, True),
            (self.legacy_dir / artifact_filename(artifact_id, ArtifactFormat.VIDEO), ArtifactFormat.VIDEO, False),
        ]

    def resolve(self, artifact_id: str) -> ArtifactFile:
        """
        Find the artifact file for an id.

        Raises:
            ValidationError: If the id is malformed
            ArtifactNotFoundError: If no layout holds the artifact
        """
        validate_artifact_id(artifact_id)

        for path, fmt, temporary in self.candidates(artifact_id):
            if path.is_file():
                return ArtifactFile(
                    artifact_id=artifact_id,
                    path=path,
                    filename=path.name,
                    size_bytes=path.stat().st_size,
                    format=fmt,
                    temporary=temporary,
                )

        logger.info(f"Artifact {artifact_id} not found in any layout")
        raise ArtifactNotFoundError(artifact_id)

    def presentation(self, artifact_id: str) -> Path:
        """
        Root document of a packaged presentation.

        Raises:
            ValidationError: If the id is malformed
            ArtifactNotFoundError: If the workspace holds no presentation
        """
        validate_artifact_id(artifact_id)
        path = self.temp_root / artifact_id / INDEX_DOCUMENT
        if not path.is_file():
            raise ArtifactNotFoundError(artifact_id, f"Presentation {artifact_id} not found or expired")
        return path
