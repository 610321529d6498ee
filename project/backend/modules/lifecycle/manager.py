"""
Workspace lifecycle.

Per-job working directories under a shared temp root: allocated at job start,
deleted after a retention window (or immediately on failure), and swept
periodically as a backstop for deletions that never fired.
"""

import asyncio
import shutil
import time
import uuid
from pathlib import Path
from typing import Dict, Optional, Tuple

from shared.logging import get_logger

logger = get_logger("lifecycle")


class WorkspaceManager:
    """Owns every job workspace under `temp_root`."""

    def __init__(
        self,
        temp_root: Path,
        retention_seconds: float = 3600.0,
        sweep_interval_seconds: float = 1800.0
    ):
        self.temp_root = Path(temp_root)
        self.retention_seconds = retention_seconds
        self.sweep_interval_seconds = sweep_interval_seconds
        self._timers: Dict[str, asyncio.TimerHandle] = {}
        self._sweep_task: Optional[asyncio.Task] = None

    def allocate(self, job_id: Optional[str] = None) -> Tuple[str, Path]:
        """
        Create a fresh workspace.

        Returns:
            (job_id, workspace path)
        """
        job_id = job_id or uuid.uuid4().hex
        path = self.temp_root / job_id
        path.mkdir(parents=True, exist_ok=False)
        logger.info(f"Allocated workspace {path}", extra={"job_id": job_id})
        return job_id, path

    @property
    def pending_deletions(self) -> int:
        return len(self._timers)

    def schedule_deletion(self, job_id: str, delay: Optional[float] = None) -> None:
        """Delete the workspace after `delay` seconds (default: the retention window)."""
        delay = self.retention_seconds if delay is None else delay
        loop = asyncio.get_running_loop()

        existing = self._timers.pop(job_id, None)
        if existing is not None:
            existing.cancel()

        self._timers[job_id] = loop.call_later(delay, self._expire, job_id)
        logger.info(f"Workspace {job_id} scheduled for deletion in {delay:.0f}s", extra={"job_id": job_id})

    def _expire(self, job_id: str) -> None:
        self._timers.pop(job_id, None)
        self.delete(job_id)

    def delete(self, job_id: str) -> bool:
        """
        Delete a workspace now, cancelling any pending deferred deletion.

        Never raises; failures are logged.

        Returns:
            True if something was removed
        """
        timer = self._timers.pop(job_id, None)
        if timer is not None:
            timer.cancel()
        return self._remove(self.temp_root / job_id)

    def _remove(self, path: Path) -> bool:
        try:
            if path.is_dir() and not path.is_symlink():
                shutil.rmtree(path)
            elif path.exists() or path.is_symlink():
                path.unlink()
            else:
                return False
        except OSError as e:
            logger.error(f"Failed to delete {path}: {e}")
            return False
        logger.info(f"Deleted workspace {path.name}")
        return True

    def sweep(self, now: Optional[float] = None) -> int:
        """
        Delete every temp-root entry older than the retention window.

        Returns:
            Number of entries removed
        """
        now = time.time() if now is None else now
        if not self.temp_root.is_dir():
            return 0

        removed = 0
        try:
            entries = list(self.temp_root.iterdir())
        except OSError as e:
            logger.error(f"Sweep could not list {self.temp_root}: {e}")
            return 0

        for entry in entries:
            try:
                age = now - entry.lstat().st_mtime
            except OSError:
                continue
            if age <= self.retention_seconds:
                continue
            if entry.name in self._timers:
                self._timers.pop(entry.name).cancel()
            if self._remove(entry):
                removed += 1

        if removed:
            logger.info(f"Sweep removed {removed} expired workspace(s)")
        return removed

    def usage(self) -> Dict[str, int]:
        """Entry count and total bytes under the temp root."""
        if not self.temp_root.is_dir():
            return {"entries": 0, "bytes": 0}
        entries = 0
        total = 0
        for entry in self.temp_root.iterdir():
            entries += 1
            for path in ([entry] if entry.is_file() else entry.rglob("*")):
                try:
                    if path.is_file():
                        total += path.stat().st_size
                except OSError:
                    continue
        return {"entries": entries, "bytes": total}

    async def _sweep_forever(self) -> None:
        while True:
            await asyncio.sleep(self.sweep_interval_seconds)
            self.sweep()

    def start(self) -> None:
        """Run one sweep now and start the periodic sweep."""
        self.temp_root.mkdir(parents=True, exist_ok=True)
        self.sweep()
        if self._sweep_task is None or self._sweep_task.done():
            self._sweep_task = asyncio.get_running_loop().create_task(self._sweep_forever())
        logger.info(
            f"Workspace sweep every {self.sweep_interval_seconds:.0f}s, "
            f"retention {self.retention_seconds:.0f}s"
        )

    async def stop(self) -> None:
        """Stop the periodic sweep and cancel pending deferred deletions."""
        if self._sweep_task is not None:
            self._sweep_task.cancel()
            try:
                await self._sweep_task
            except asyncio.CancelledError:
                pass
            self._sweep_task = None

        for timer in self._timers.values():
            timer.cancel()
        self._timers.clear()
