"""
Unit tests for the workspace manager.
"""

import asyncio
import os
import time

import pytest

from modules.lifecycle.manager import WorkspaceManager


@pytest.fixture
def manager(tmp_path):
    return WorkspaceManager(tmp_path / "temp", retention_seconds=3600, sweep_interval_seconds=1800)


def age(path, seconds: float) -> None:
    past = time.time() - seconds
    os.utime(path, (past, past))


class TestAllocate:

    def test_allocates_unique_workspaces(self, manager):
        first_id, first = manager.allocate()
        second_id, second = manager.allocate()

        assert first_id != second_id
        assert first.is_dir() and second.is_dir()
        assert first.parent == manager.temp_root

    def test_explicit_id(self, manager):
        job_id, path = manager.allocate("job-1")
        assert job_id == "job-1"
        assert path == manager.temp_root / "job-1"


class TestDelete:

    def test_delete_is_idempotent(self, manager):
        job_id, path = manager.allocate()
        (path / "file.txt").write_text("x")

        assert manager.delete(job_id) is True
        assert not path.exists()
        assert manager.delete(job_id) is False

    @pytest.mark.asyncio
    async def test_scheduled_deletion_fires(self, manager):
        job_id, path = manager.allocate()
        manager.schedule_deletion(job_id, delay=0.01)
        assert manager.pending_deletions == 1

        await asyncio.sleep(0.05)

        assert not path.exists()
        assert manager.pending_deletions == 0

    @pytest.mark.asyncio
    async def test_immediate_delete_cancels_timer(self, manager):
        job_id, path = manager.allocate()
        manager.schedule_deletion(job_id, delay=0.01)

        manager.delete(job_id)
        assert manager.pending_deletions == 0

        # Recreated after deletion: the cancelled timer must not remove it again
        path.mkdir()
        await asyncio.sleep(0.05)
        assert path.exists()

    @pytest.mark.asyncio
    async def test_stop_cancels_pending_deletions(self, manager):
        job_id, path = manager.allocate()
        manager.schedule_deletion(job_id, delay=0.01)

        await manager.stop()
        await asyncio.sleep(0.05)

        assert path.exists()
        assert manager.pending_deletions == 0


class TestSweep:

    def test_sweep_removes_only_expired(self, manager):
        _, old = manager.allocate("old")
        _, fresh = manager.allocate("fresh")
        age(old, 7200)

        assert manager.sweep() == 1
        assert not old.exists()
        assert fresh.exists()

    def test_sweep_twice_does_not_raise(self, manager):
        _, old = manager.allocate("old")
        age(old, 7200)

        assert manager.sweep() == 1
        assert manager.sweep() == 0

    def test_sweep_missing_root(self, tmp_path):
        assert WorkspaceManager(tmp_path / "nowhere").sweep() == 0

    def test_sweep_removes_stray_files(self, manager):
        manager.temp_root.mkdir(parents=True)
        stray = manager.temp_root / "leftover.zip"
        stray.write_bytes(b"zip")
        age(stray, 7200)

        assert manager.sweep() == 1
        assert not stray.exists()

    def test_usage(self, manager):
        _, path = manager.allocate()
        (path / "a.bin").write_bytes(b"x" * 10)
        (path / "b.bin").write_bytes(b"x" * 5)

        assert manager.usage() == {"entries": 1, "bytes": 15}

    @pytest.mark.asyncio
    async def test_start_sweeps_immediately(self, manager):
        _, old = manager.allocate("old")
        age(old, 7200)

        manager.start()
        try:
            assert not old.exists()
        finally:
            await manager.stop()
