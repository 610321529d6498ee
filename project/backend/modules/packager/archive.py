"""
Workspace archiving.
"""

import zipfile
from pathlib import Path

from shared.errors import PackagingError
from shared.logging import get_logger

logger = get_logger("packager")

COMPRESS_LEVEL = 9


def create_archive(source_dir: Path, archive_path: Path) -> Path:
    """
    Zip every file under `source_dir` (paths relative to it) at maximum compression.

    The archive itself is skipped when it lives inside `source_dir`.

    Raises:
        PackagingError: If the archive can't be written
    """
    try:
        with zipfile.ZipFile(archive_path, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=COMPRESS_LEVEL) as zf:
            for path in sorted(source_dir.rglob("*")):
                if not path.is_file() or path.resolve() == archive_path.resolve():
                    continue
                zf.write(path, path.relative_to(source_dir).as_posix())
    except (OSError, zipfile.BadZipFile) as e:
        archive_path.unlink(missing_ok=True)
        raise PackagingError(f"Could not create archive {archive_path.name}: {e}") from e

    logger.info(f"Archive created: {archive_path.name} ({archive_path.stat().st_size} bytes)")
    return archive_path
