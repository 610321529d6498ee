"""
HTTP byte-range parsing.

Only single ranges are honoured: `bytes=a-b`, `bytes=a-` and suffix `bytes=-n`.
"""

import re
from dataclasses import dataclass
from typing import Optional

RANGE_PATTERN = re.compile(r"^\s*bytes\s*=\s*(\d*)\s*-\s*(\d*)\s*$", re.IGNORECASE)


class RangeNotSatisfiable(Exception):
    """The requested range lies entirely outside the file."""

    def __init__(self, size: int):
        self.size = size
        super().__init__(f"Range not satisfiable for {size} bytes")


@dataclass(frozen=True)
class ByteRange:
    start: int
    end: int  # inclusive
    size: int

    @property
    def length(self) -> int:
        return self.end - self.start + 1

    @property
    def content_range(self) -> str:
        return f"bytes {self.start}-{self.end}/{self.size}"


def parse_range(header: Optional[str], size: int) -> Optional[ByteRange]:
    """
    Parse a Range header against a file of `size` bytes.

    Returns:
        ByteRange, or None when there is no usable header (serve the full body)

    Raises:
        RangeNotSatisfiable: If the range starts past the end of the file
    """
    if not header:
        return None

    match = RANGE_PATTERN.match(header)
    if not match:
        return None

    first, last = match.groups()
    if not first and not last:
        return None

    if not first:
        suffix = int(last)
        if suffix == 0 or size == 0:
            raise RangeNotSatisfiable(size)
        return ByteRange(start=max(0, size - suffix), end=size - 1, size=size)

    start = int(first)
    if start >= size:
        raise RangeNotSatisfiable(size)

    end = int(last) if last else size - 1
    if end < start:
        return None
    return ByteRange(start=start, end=min(end, size - 1), size=size)
