"""
Asset resolution.

Turn scene descriptors into prepared scenes whose media lives in the job workspace.
A failed asset degrades its scene (the path becomes None) but never aborts the job.
"""

import asyncio
from pathlib import Path
from typing import List, Optional, Sequence

import httpx

from shared.config import Settings, settings as default_settings
from shared.errors import AssetDownloadError, RetryableError
from shared.logging import get_logger
from shared.models.scene import PreparedScene, SceneDescriptor
from shared.retry import retry_with_backoff
from shared.stats import NullStatsCollector, StatsCollector
from shared.validation import is_inline_reference, is_remote_reference

from modules.asset_resolver.utils import (
    decode_data_uri,
    extension_for_mime,
    extension_for_url,
    scene_asset_name,
)

logger = get_logger("asset_resolver")

CHUNK_SIZE = 64 * 1024


class AssetResolver:
    """Fetches or decodes every media reference of a job, in scene order."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[httpx.AsyncClient] = None
    ):
        """
        Args:
            settings: Service settings (timeouts, retry policy, concurrency)
            client: Shared HTTP client; one is created per resolve() call when omitted
        """
        self.settings = settings or default_settings
        self._client = client

    async def resolve(
        self,
        scenes: Sequence[SceneDescriptor],
        work_dir: Path,
        stats: Optional[StatsCollector] = None
    ) -> List[PreparedScene]:
        """
        Resolve all scenes into the workspace.

        Scenes are fetched `asset_fetch_concurrency` at a time (1 = strictly
        sequential). The result is index-stable: element i always corresponds to
        scenes[i], whatever order the fetches finish in.

        Args:
            scenes: Scene descriptors in presentation order
            work_dir: Job workspace directory
            stats: Request-scoped stats collector

        Returns:
            Prepared scenes in input order
        """
        stats = stats or NullStatsCollector()
        semaphore = asyncio.Semaphore(self.settings.asset_fetch_concurrency)

        async def prepare(position: int, scene: SceneDescriptor, client: httpx.AsyncClient) -> PreparedScene:
            async with semaphore:
                logger.info(f"Preparing assets for scene {position}/{len(scenes)}")
                return await self._prepare_scene(scene, position, work_dir, client, stats)

        with stats.timer("asset_resolver"):
            if self._client is not None:
                return list(await asyncio.gather(
                    *(prepare(i, scene, self._client) for i, scene in enumerate(scenes, start=1))
                ))

            async with httpx.AsyncClient(
                timeout=self.settings.asset_timeout_seconds,
                follow_redirects=True
            ) as client:
                return list(await asyncio.gather(
                    *(prepare(i, scene, client) for i, scene in enumerate(scenes, start=1))
                ))

    async def _prepare_scene(
        self,
        scene: SceneDescriptor,
        index: int,
        work_dir: Path,
        client: httpx.AsyncClient,
        stats: StatsCollector
    ) -> PreparedScene:
        image_path = await self.fetch_asset(scene.image_reference, work_dir, index, "image", client, stats)
        audio_path = await self.fetch_asset(scene.audio_reference, work_dir, index, "audio", client, stats)
        ambient_path = await self.fetch_asset(scene.ambient_reference, work_dir, index, "ambient", client, stats)

        requested = scene.duration_seconds or self.settings.default_scene_duration
        duration = max(self.settings.min_scene_duration, requested)

        return PreparedScene.from_descriptor(
            scene,
            index=index,
            duration_seconds=duration,
            image_path=image_path,
            audio_path=audio_path,
            ambient_path=ambient_path,
        )

    async def fetch_asset(
        self,
        reference: Optional[str],
        work_dir: Path,
        index: int,
        kind: str,
        client: httpx.AsyncClient,
        stats: StatsCollector
    ) -> Optional[Path]:
        """
        Materialize one media reference as a workspace file.

        Returns:
            Local path, or None when there is no reference or it could not be resolved
        """
        if not reference:
            return None

        try:
            if is_inline_reference(reference):
                path = self.decode_inline(reference, work_dir, index, kind)
                stats.incr("assets.inline")
            elif is_remote_reference(reference):
                path = await self.download_remote(reference, work_dir, index, kind, client)
                stats.incr("assets.downloaded")
            else:
                raise AssetDownloadError(f"Unsupported reference scheme for scene {index} {kind}")
            return path
        except AssetDownloadError as e:
            stats.incr("assets.failed")
            logger.warning(
                f"Failed to resolve scene {index} {kind}: {e.message}",
                extra={"scene_index": index, "kind": kind}
            )
            return None

    def decode_inline(self, reference: str, work_dir: Path, index: int, kind: str) -> Path:
        """
        Decode an inline data URI straight into the workspace.

        Raises:
            AssetDownloadError: If the URI can't be decoded or written
        """
        mime, data = decode_data_uri(reference)
        path = work_dir / scene_asset_name(index, kind, extension_for_mime(mime, kind))
        try:
            path.write_bytes(data)
        except OSError as e:
            raise AssetDownloadError(f"Could not write {path.name}: {e}") from e
        return path

    async def download_remote(
        self,
        url: str,
        work_dir: Path,
        index: int,
        kind: str,
        client: httpx.AsyncClient
    ) -> Path:
        """
        Stream a remote asset to disk, retrying transient failures.

        Raises:
            AssetDownloadError: On a client error or once retries are exhausted
        """
        path = work_dir / scene_asset_name(index, kind, extension_for_url(url, kind))
        fetch = retry_with_backoff(
            max_attempts=self.settings.asset_max_attempts,
            base_delay=self.settings.asset_retry_base_delay
        )(self._stream_to_file)

        try:
            await fetch(client, url, path)
        except RetryableError as e:
            path.unlink(missing_ok=True)
            raise AssetDownloadError(f"Download failed after retries: {e.message}") from e
        except AssetDownloadError:
            path.unlink(missing_ok=True)
            raise
        return path

    async def _stream_to_file(self, client: httpx.AsyncClient, url: str, path: Path) -> None:
        try:
            async with client.stream("GET", url, timeout=self.settings.asset_timeout_seconds) as response:
                if response.status_code == 429 or response.status_code >= 500:
                    raise RetryableError(f"HTTP {response.status_code} from {url}")
                if response.status_code >= 400:
                    raise AssetDownloadError(f"HTTP {response.status_code} from {url}")

                written = 0
                with open(path, "wb") as f:
                    async for chunk in response.aiter_bytes(CHUNK_SIZE):
                        f.write(chunk)
                        written += len(chunk)
        except (httpx.InvalidURL, ValueError) as e:
            raise AssetDownloadError(f"Invalid URL {url!r}: {e}") from e
        except httpx.HTTPError as e:
            raise RetryableError(f"{type(e).__name__}: {e}") from e
        except OSError as e:
            raise AssetDownloadError(f"Could not write {path.name}: {e}") from e

        if written == 0:
            raise AssetDownloadError(f"Empty response body from {url}")
