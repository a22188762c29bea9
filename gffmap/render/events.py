"""
Pointer and wheel input events consumed by the render pipeline.
"""

from dataclasses import dataclass
from enum import Enum


class EventKind(Enum):
    DOWN = "down"
    MOVE = "move"
    UP = "up"
    WHEEL = "wheel"
    LEAVE = "leave"


# Wheel delta units, as reported by browsers and mapped by the surface adapter
DELTA_PIXEL = 0
DELTA_LINE = 1
DELTA_PAGE = 2


@dataclass(frozen=True)
class PointerEvent:
    """Input event in plot-local surface units (origin at the top-left of the plot area)."""
    kind: EventKind
    x: float = 0.0
    y: float = 0.0
    delta_y: float = 0.0
    delta_mode: int = DELTA_PIXEL
    ctrl: bool = False
