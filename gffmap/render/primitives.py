"""
Draw primitives emitted by the render pipeline.

Coordinates are plot-local surface units: x grows to the right, y grows
downwards from the top of the first lane.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from gffmap.models.genomic import Feature, Strand

MAX_ARROW_HEAD = 20.0
ARROW_HEAD_FRACTION = 0.2


class PrimitiveKind(Enum):
    ARROW = "arrow"
    BLOCK = "block"
    LINE = "line"


@dataclass(frozen=True)
class DrawPrimitive:
    """One shape to draw, tagged with the arena index of its source feature."""
    kind: PrimitiveKind
    feature_index: int
    role: str
    lane: int
    x: float
    y: float
    width: float
    height: float
    points: Tuple[Tuple[float, float], ...] = ()

    def contains(self, px, py):
        """Bounding-box hit test. Lines are not hittable."""
        if self.kind is PrimitiveKind.LINE:
            return False
        return self.x <= px <= self.x + self.width and self.y <= py <= self.y + self.height


def gene_arrow(feature: Feature, lane, x, y_center, width, height):
    """
    Build a directional arrow for a gene-level feature.

    Forward genes point right, reverse genes point left; unstranded and
    unknown-strand genes are drawn as a plain box.
    """
    head = min(MAX_ARROW_HEAD, width * ARROW_HEAD_FRACTION)
    top = y_center - height / 2
    bottom = y_center + height / 2

    if feature.strand is Strand.FORWARD:
        points = (
            (x, top),
            (x + width - head, top),
            (x + width, y_center),
            (x + width - head, bottom),
            (x, bottom),
        )
    elif feature.strand is Strand.REVERSE:
        points = (
            (x + head, top),
            (x + width, top),
            (x + width, bottom),
            (x + head, bottom),
            (x, y_center),
        )
    else:
        points = ((x, top), (x + width, top), (x + width, bottom), (x, bottom))

    return DrawPrimitive(PrimitiveKind.ARROW, feature.index, feature.type, lane,
                         x, top, width, height, points)


def feature_block(feature: Feature, lane, x, y_center, width, height):
    return DrawPrimitive(PrimitiveKind.BLOCK, feature.index, feature.type, lane,
                         x, y_center - height / 2, width, height)


def intron_line(transcript: Feature, lane, x1, x2, y_center):
    """Connecting line between two exons, attributed to their transcript."""
    return DrawPrimitive(PrimitiveKind.LINE, transcript.index, 'intron', lane,
                         x1, y_center, x2 - x1, 0.0, ((x1, y_center), (x2, y_center)))
