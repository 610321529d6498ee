"""
Video Compositor Module.

Encodes prepared scenes into a single H.264/AAC MP4 via ffmpeg.
"""

from modules.compositor.compositor import EncodePlan, VideoCompositor
from modules.compositor.ffmpeg import FfmpegRunner
from modules.compositor.graph import FilterGraph, FilterNode

__all__ = [
    "VideoCompositor",
    "EncodePlan",
    "FfmpegRunner",
    "FilterGraph",
    "FilterNode",
]
