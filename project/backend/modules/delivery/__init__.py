"""
Artifact Delivery Module.

Locates finished artifacts and parses byte-range requests for streaming.
"""

from modules.delivery.ranges import ByteRange, RangeNotSatisfiable, parse_range
from modules.delivery.store import ArtifactStore

__all__ = [
    "ArtifactStore",
    "ByteRange",
    "RangeNotSatisfiable",
    "parse_range",
]
