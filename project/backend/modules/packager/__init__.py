"""
Presentation Packager Module.

Builds a self-contained HTML slideshow with a preview image and zips it.
"""

from modules.packager.archive import create_archive
from modules.packager.packager import PresentationPackager
from modules.packager.preview import PREVIEW_FILENAME, create_preview

__all__ = [
    "PresentationPackager",
    "create_archive",
    "create_preview",
    "PREVIEW_FILENAME",
]
