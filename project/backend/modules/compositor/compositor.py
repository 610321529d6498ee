"""
Video composition.

Turns prepared scenes into a single MP4: each image becomes a still clip held
for its duration plus the following transition, clips are normalized to the
output frame and concatenated, and narration and ambient tracks are mixed.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence

from shared.config import Settings, settings as default_settings
from shared.errors import EncodeError
from shared.logging import get_logger
from shared.models.scene import PreparedScene
from shared.stats import NullStatsCollector, StatsCollector

from modules.compositor.ffmpeg import FfmpegRunner
from modules.compositor.graph import FilterGraph, input_stream
from modules.transitions.selector import transition_after

logger = get_logger("compositor")

VIDEO_OUT = "vout"
AUDIO_OUT = "aout"


@dataclass
class EncodeInput:
    path: Path
    options: List[str] = field(default_factory=list)


@dataclass
class EncodePlan:
    """Everything needed for one ffmpeg invocation."""

    inputs: List[EncodeInput]
    graph: FilterGraph
    video_label: str
    audio_label: Optional[str]
    output_path: Path
    clip_durations: List[float]

    @property
    def has_audio(self) -> bool:
        return self.audio_label is not None

    def to_args(self, settings: Settings) -> List[str]:
        args: List[str] = []
        for item in self.inputs:
            args.extend(item.options)
            args.extend(["-i", str(item.path)])

        args.extend(["-filter_complex", self.graph.serialize()])
        args.extend(["-map", f"[{self.video_label}]"])
        if self.audio_label:
            args.extend(["-map", f"[{self.audio_label}]"])

        args.extend([
            "-c:v", "libx264",
            "-pix_fmt", settings.pixel_format,
            "-r", str(settings.video_fps),
            "-preset", settings.video_preset,
            "-crf", str(settings.video_crf),
            "-movflags", "+faststart",
        ])
        if self.audio_label:
            args.extend(["-c:a", "aac", "-b:a", settings.audio_bitrate])

        args.extend(["-y", str(self.output_path)])
        return args


class VideoCompositor:
    """Builds and runs the encode graph for a job."""

    def __init__(self, settings: Optional[Settings] = None, runner: Optional[FfmpegRunner] = None):
        self.settings = settings or default_settings
        self.runner = runner or FfmpegRunner(self.settings.ffmpeg_path)

    def build_plan(self, scenes: Sequence[PreparedScene], output_path: Path) -> EncodePlan:
        """
        Build the structured encode plan.

        Scenes without a resolved image are skipped. The transition after each
        visual scene is chosen against the next scene in the full list and only
        extends the clip; no transition effect is rendered.

        Raises:
            EncodeError: If no scene has an image
        """
        visual = [(position, scene) for position, scene in enumerate(scenes) if scene.has_image()]
        if not visual:
            raise EncodeError("No scene images available to encode", code="NO_IMAGES")

        s = self.settings
        graph = FilterGraph()
        inputs: List[EncodeInput] = []
        clip_labels: List[str] = []
        clip_durations: List[float] = []

        for clip_index, (position, scene) in enumerate(visual):
            transition = transition_after(scenes, position)
            hold = scene.duration_seconds + (transition.duration_seconds if transition else 0.0)
            clip_durations.append(hold)

            inputs.append(EncodeInput(scene.image_path, ["-loop", "1", "-t", f"{hold:g}"]))
            source = input_stream(len(inputs) - 1, "v")
            graph.scale(source, f"s{clip_index}", s.video_width, s.video_height)
            graph.pad(f"s{clip_index}", f"p{clip_index}", s.video_width, s.video_height, s.pad_color)
            graph.normalize(f"p{clip_index}", f"v{clip_index}", s.pixel_format)
            clip_labels.append(f"v{clip_index}")

        if len(clip_labels) > 1:
            graph.concat(clip_labels, VIDEO_OUT)
            video_label = VIDEO_OUT
        else:
            video_label = clip_labels[0]

        tracks: List[str] = []
        for scene in scenes:
            if scene.has_audio():
                inputs.append(EncodeInput(scene.audio_path))
                tracks.append(input_stream(len(inputs) - 1, "a"))
            if scene.has_ambient():
                inputs.append(EncodeInput(scene.ambient_path))
                track = input_stream(len(inputs) - 1, "a")
                level = scene.ambient.volume if scene.ambient else None
                if level is not None:
                    label = f"amb{scene.index}"
                    graph.volume(track, label, level)
                    track = label
                tracks.append(track)

        audio_label = None
        if tracks:
            graph.mix(tracks, AUDIO_OUT)
            audio_label = AUDIO_OUT

        return EncodePlan(
            inputs=inputs,
            graph=graph,
            video_label=video_label,
            audio_label=audio_label,
            output_path=output_path,
            clip_durations=clip_durations,
        )

    async def compose(
        self,
        scenes: Sequence[PreparedScene],
        output_path: Path,
        stats: Optional[StatsCollector] = None
    ) -> Path:
        """
        Encode the scenes into `output_path`.

        Returns:
            Path of the encoded MP4

        Raises:
            EncodeError: If there is nothing to encode or the encoder fails
        """
        stats = stats or NullStatsCollector()
        plan = self.build_plan(scenes, output_path)
        logger.info(
            f"Encoding {len(plan.clip_durations)} clips "
            f"({sum(plan.clip_durations):.1f}s, audio={plan.has_audio})",
            extra={"output": str(output_path)}
        )

        with stats.timer("compositor"):
            await self.runner.run(plan.to_args(self.settings))

        if not output_path.exists() or output_path.stat().st_size == 0:
            raise EncodeError(f"Encoder produced no output at {output_path.name}", code="EMPTY_OUTPUT")

        stats.incr("compositor.clips", len(plan.clip_durations))
        logger.info(f"Encoded {output_path.name} ({output_path.stat().st_size} bytes)")
        return output_path
