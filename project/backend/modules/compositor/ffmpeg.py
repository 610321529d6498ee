"""
ffmpeg process runner.
"""

import asyncio
import shutil
from typing import List, Sequence

from shared.errors import EncodeError
from shared.logging import get_logger

logger = get_logger("compositor")

STDERR_TAIL_LINES = 20


class FfmpegRunner:
    """Runs ffmpeg as a subprocess, raising EncodeError on any failure."""

    def __init__(self, ffmpeg_path: str = "ffmpeg"):
        self.ffmpeg_path = ffmpeg_path

    def is_available(self) -> bool:
        return shutil.which(self.ffmpeg_path) is not None

    async def run(self, args: Sequence[str]) -> None:
        """
        Run ffmpeg with the given arguments.

        Args:
            args: Arguments after the binary name

        Raises:
            EncodeError: If the binary is missing or exits non-zero
        """
        cmd: List[str] = [self.ffmpeg_path, "-hide_banner", "-loglevel", "error", "-nostats"] + list(args)
        logger.debug("ffmpeg: " + " ".join(a if " " not in a else f"'{a}'" for a in cmd))

        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as e:
            raise EncodeError(f"ffmpeg binary not found: {self.ffmpeg_path}", code="FFMPEG_MISSING") from e

        _, stderr = await proc.communicate()
        if proc.returncode != 0:
            tail = stderr.decode("utf-8", errors="replace").splitlines()[-STDERR_TAIL_LINES:]
            for line in tail:
                logger.error(f"ffmpeg: {line}")
            detail = tail[-1] if tail else "no output"
            raise EncodeError(
                f"ffmpeg failed with exit code {proc.returncode}: {detail}",
                code="FFMPEG_FAILED"
            )
