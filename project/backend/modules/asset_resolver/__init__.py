"""
Asset Resolver Module.

Fetches and decodes per-scene media references into the job workspace.
"""

from modules.asset_resolver.resolver import AssetResolver
from shared.errors import AssetDownloadError

__all__ = [
    "AssetResolver",
    "AssetDownloadError",
]
