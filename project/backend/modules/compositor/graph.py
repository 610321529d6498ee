"""
Filter graph model.

The encode graph is built as data (nodes connected by named streams) and only
turned into ffmpeg's `-filter_complex` syntax at the very end, so it can be
inspected and tested without running the encoder.
"""

from dataclasses import dataclass, field
from typing import List, Tuple

from shared.errors import EncodeError


def input_stream(input_index: int, kind: str = "v") -> str:
    """Label of a raw input pad, e.g. `0:v`."""
    return f"{input_index}:{kind}"


def _is_input_stream(label: str) -> bool:
    head, _, kind = label.partition(":")
    return head.isdigit() and kind in ("v", "a")


@dataclass(frozen=True)
class FilterNode:
    """One filter: name, ordered options, and its input/output stream labels."""

    name: str
    inputs: Tuple[str, ...]
    outputs: Tuple[str, ...]
    options: Tuple[Tuple[str, str], ...] = ()

    def serialize(self) -> str:
        filter_text = self.name
        if self.options:
            filter_text += "=" + ":".join(f"{key}={value}" for key, value in self.options)
        ins = "".join(f"[{label}]" for label in self.inputs)
        outs = "".join(f"[{label}]" for label in self.outputs)
        return f"{ins}{filter_text}{outs}"


@dataclass
class FilterGraph:
    """Ordered collection of filter nodes."""

    nodes: List[FilterNode] = field(default_factory=list)

    def add(self, name: str, sources, targets, **options) -> FilterNode:
        """Append a filter. Keyword arguments become its options, in order."""
        node = FilterNode(
            name=name,
            inputs=tuple(sources),
            outputs=tuple(targets),
            options=tuple((key, str(value)) for key, value in options.items()),
        )
        self.nodes.append(node)
        return node

    def scale(self, source: str, target: str, width: int, height: int) -> FilterNode:
        """Fit inside width x height, keeping the aspect ratio."""
        return self.add(
            "scale", [source], [target],
            w=width, h=height, force_original_aspect_ratio="decrease",
        )

    def pad(self, source: str, target: str, width: int, height: int, color: str) -> FilterNode:
        """Letterbox to exactly width x height, centred."""
        return self.add(
            "pad", [source], [target],
            w=width, h=height, x="(ow-iw)/2", y="(oh-ih)/2", color=color,
        )

    def normalize(self, source: str, target: str, pixel_format: str) -> FilterNode:
        """Square pixels and a common pixel format, so clips can be concatenated."""
        intermediate = f"{target}n"
        self.add("setsar", [source], [intermediate], sar=1)
        return self.add("format", [intermediate], [target], pix_fmts=pixel_format)

    def concat(self, sources: List[str], target: str) -> FilterNode:
        return self.add("concat", sources, [target], n=len(sources), v=1, a=0)

    def volume(self, source: str, target: str, level: float) -> FilterNode:
        return self.add("volume", [source], [target], volume=level)

    def mix(self, sources: List[str], target: str) -> FilterNode:
        """Mix tracks into one stream lasting as long as the longest input."""
        return self.add("amix", sources, [target], inputs=len(sources), duration="longest")

    @property
    def produced(self) -> List[str]:
        return [label for node in self.nodes for label in node.outputs]

    def validate(self) -> None:
        """
        Check the graph is wired consistently.

        Raises:
            EncodeError: On duplicate outputs or an input consumed before it is produced
        """
        seen = set()
        for node in self.nodes:
            for label in node.inputs:
                if not _is_input_stream(label) and label not in seen:
                    raise EncodeError(f"Filter '{node.name}' consumes unknown stream [{label}]")
            for label in node.outputs:
                if label in seen:
                    raise EncodeError(f"Stream [{label}] is produced twice")
                seen.add(label)

    def serialize(self) -> str:
        """Render as a `-filter_complex` argument."""
        self.validate()
        return ";".join(node.serialize() for node in self.nodes)
