"""
Hover and pinned feature details.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional

from gffmap.models.genomic import Feature


@dataclass(frozen=True)
class DisplayPayload:
    """Details shown for a hovered or pinned feature."""
    feature_index: int
    name: str
    type: str
    seqid: str
    start: int
    end: int
    length: int
    strand: str
    source: Optional[str] = None
    score: Optional[float] = None
    phase: Optional[int] = None
    attributes: Dict[str, str] = field(default_factory=dict)

    def summary_lines(self):
        """Plain-text lines describing the feature."""
        lines = [
            self.name,
            f"Type: {self.type}",
            f"Length: {self.length:,} bp",
            f"Position: {self.seqid}:{self.start:,} - {self.end:,} bp",
            f"Strand: {self.strand}",
        ]
        if self.source:
            lines.append(f"Source: {self.source}")
        if self.score is not None:
            lines.append(f"Score: {self.score}")
        if self.phase is not None:
            lines.append(f"Phase: {self.phase}")
        if self.attributes:
            lines.append("Attributes:")
            lines.extend(f"  {key}: {value}" for key, value in self.attributes.items())
        return lines


def describe_feature(feature: Feature) -> DisplayPayload:
    return DisplayPayload(
        feature_index=feature.index,
        name=feature.display_name,
        type=feature.type,
        seqid=feature.seqid,
        start=feature.start,
        end=feature.end,
        length=feature.length,
        strand=feature.strand.value,
        source=feature.source if feature.source and feature.source != '.' else None,
        score=feature.score,
        phase=feature.phase,
        attributes=dict(feature.attributes),
    )


class SelectionState:
    """
    Transient hover payload plus a pinned payload.

    A pinned payload survives hover changes until it is dismissed; while one
    is pinned it is what gets displayed.
    """

    def __init__(self):
        self.hover: Optional[DisplayPayload] = None
        self.pinned: Optional[DisplayPayload] = None

    @property
    def displayed(self) -> Optional[DisplayPayload]:
        return self.pinned or self.hover

    @property
    def is_pinned(self) -> bool:
        return self.pinned is not None

    def show_hover(self, payload: Optional[DisplayPayload]):
        self.hover = payload

    def clear_hover(self):
        self.hover = None

    def pin(self, payload: DisplayPayload):
        self.pinned = payload
        self.hover = payload

    def dismiss(self):
        self.pinned = None
        self.hover = None
