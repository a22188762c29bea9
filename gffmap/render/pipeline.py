"""
Viewport render pipeline: turns lanes of features into draw primitives for
the current transform, and owns all interaction state.
"""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

import numpy as np

from gffmap.config import BrowserConfig
from gffmap.models.genomic import Feature
from gffmap.render.events import EventKind, PointerEvent
from gffmap.render.primitives import DrawPrimitive, feature_block, gene_arrow, intron_line
from gffmap.render.scheduler import RedrawThrottle
from gffmap.render.selection import SelectionState, describe_feature
from gffmap.render.viewport import Transform, ViewportState, wheel_zoom_factor

# Shape heights as a fraction of the lane height
GENE_HEIGHT = 0.3
BLOCK_HEIGHTS = {
    'exon': 0.3,
    'CDS': 0.4,
    'five_prime_UTR': 0.25,
    'three_prime_UTR': 0.25,
}
DEFAULT_BLOCK_HEIGHT = 0.2


class Visibility(Enum):
    """Render state of a root feature within one frame."""
    INVISIBLE = "invisible"
    VISIBLE_CULLED_CHILDREN = "visible-culled-children"
    VISIBLE_FULL = "visible-full"


@dataclass
class Frame:
    """Result of one redraw."""
    transform: Transform
    window: Tuple[float, float]
    padded_window: Tuple[float, float]
    primitives: List[DrawPrimitive] = field(default_factory=list)
    states: Dict[int, Visibility] = field(default_factory=dict)
    rendered_features: int = 0
    limit_reached: bool = False
    elapsed_ms: float = 0.0
    timestamp: float = 0.0

    def state_of(self, feature: Feature) -> Visibility:
        return self.states.get(feature.index, Visibility.INVISIBLE)

    def primitives_for(self, feature: Feature) -> List[DrawPrimitive]:
        return [p for p in self.primitives if p.feature_index == feature.index]


class _PrimitiveBuffer:
    """Collects primitives up to a hard cap; truncated is set once anything is dropped."""

    def __init__(self, cap):
        self.cap = cap
        self.items = []
        self.truncated = False

    @property
    def full(self):
        return len(self.items) >= self.cap

    def add(self, primitive):
        if self.full:
            self.truncated = True
            return False
        self.items.append(primitive)
        return True


class RenderPipeline:
    """
    Render pipeline for one loaded model.

    All mutation of the transform and the selection goes through
    handle_event(), resize() and tick(). Redraws triggered by transform
    changes are throttled; the most recent frame is kept on `frame`.
    """

    def __init__(self, model, width=None, height=None, config: Optional[BrowserConfig] = None, clock=None):
        self.config = config or BrowserConfig()
        self.model = model
        self.result = model.result
        self.tracks = model.tracks
        width = self.config.surface_width if width is None else width
        height = self.config.surface_height if height is None else height

        self.viewport = ViewportState(self.result.extent, width, height, self.config)
        self.throttle = RedrawThrottle(self.config.throttle_interval_ms, clock)
        self.selection = SelectionState()
        self.frame: Optional[Frame] = None

        # Lanes are fixed for the lifetime of the model, so their spans are
        # converted to arrays once for vectorised culling.
        self._lane_spans = [
            (np.array([f.start for f in track.features], dtype=np.int64),
             np.array([f.end for f in track.features], dtype=np.int64))
            for track in self.tracks
        ]

        self._gene_types = frozenset(self.config.gene_types)
        self._transcript_types = frozenset(self.config.transcript_types)
        self._block_rank = {t: i for i, t in enumerate(self.config.block_types)}

    @property
    def total_height(self):
        return max(self.viewport.height, len(self.tracks) * self.config.lane_height)

    def lane_center(self, lane):
        return lane * self.config.lane_height + self.config.lane_height / 2

    # Rendering

    def render(self, transform: Optional[Transform] = None, now=None) -> Frame:
        """Draw every lane for the given transform (default: current) and keep the frame."""
        update_start = time.perf_counter()
        transform = transform or self.viewport.transform
        scale = self.viewport.scale_for(transform)
        window = self.viewport.window_for(transform)
        lo, hi = self.viewport.padded_window(transform=transform)

        buffer = _PrimitiveBuffer(self.config.max_primitives)
        states = {}

        for lane, (track, (starts, ends)) in enumerate(zip(self.tracks, self._lane_spans)):
            if buffer.truncated:
                break
            visible = np.flatnonzero((ends >= lo) & (starts <= hi))
            for i in visible:
                if buffer.full:
                    buffer.truncated = True
                    break
                root = track.features[i]
                state = self._render_tree(buffer, root, lane, scale, lo, hi)
                if state is not Visibility.INVISIBLE:
                    states[root.index] = state

        elapsed = (time.perf_counter() - update_start) * 1000.0
        frame = Frame(
            transform=transform,
            window=window,
            padded_window=(lo, hi),
            primitives=buffer.items,
            states=states,
            rendered_features=len(states),
            limit_reached=buffer.truncated,
            elapsed_ms=elapsed,
            timestamp=self.throttle.clock() if now is None else now,
        )
        self.frame = frame

        limit = ' (LIMIT REACHED)' if frame.limit_reached else ''
        logging.debug(f"Rendered {frame.rendered_features} features ({len(frame.primitives)} primitives) "
                      f"in {elapsed:.1f}ms (viewport: {round(window[0])}-{round(window[1])} bp){limit}")
        return frame

    def _width_px(self, feature, scale):
        return scale(feature.end + 1) - scale(feature.start)

    def _render_tree(self, buffer, root, lane, scale, lo, hi) -> Visibility:
        """Draw a root and its visible descendants with an explicit stack walk."""
        min_px = self.config.min_feature_px
        if root.end < lo or root.start > hi or self._width_px(root, scale) < min_px:
            return Visibility.INVISIBLE

        culled = False
        y = self.lane_center(lane)
        stack = [root.index]

        while stack:
            if buffer.full:
                buffer.truncated = True
                break
            feature = self.result.features[stack.pop()]

            if feature.end < lo or feature.start > hi:
                continue
            width = self._width_px(feature, scale)
            if width < min_px:
                culled = True
                continue
            x = scale(feature.start)

            if feature.type in self._gene_types:
                buffer.add(gene_arrow(feature, lane, x, y, width, self.config.lane_height * GENE_HEIGHT))
                children = feature.children
            elif feature.type in self._transcript_types:
                # Transcripts have no body of their own: introns, then blocks
                self._render_introns(buffer, feature, lane, scale, lo, hi, y)
                children = self._ordered_transcript_children(feature)
            else:
                fraction = BLOCK_HEIGHTS.get(feature.type, DEFAULT_BLOCK_HEIGHT)
                buffer.add(feature_block(feature, lane, x, y, width, self.config.lane_height * fraction))
                children = feature.children

            stack.extend(reversed(children))

        # Anything the cap cut off counts as culled
        if culled or buffer.truncated:
            return Visibility.VISIBLE_CULLED_CHILDREN
        return Visibility.VISIBLE_FULL

    def _ordered_transcript_children(self, transcript):
        """Children ordered so exons are drawn first and coding blocks on top."""
        unranked = len(self._block_rank)
        return sorted(
            transcript.children,
            key=lambda i: self._block_rank.get(self.result.features[i].type, unranked),
        )

    def _render_introns(self, buffer, transcript, lane, scale, lo, hi, y):
        exons = sorted(
            (c for c in self.result.children_of(transcript) if c.type == 'exon'),
            key=lambda e: e.start,
        )
        for left, right in zip(exons, exons[1:]):
            # Skip introns outside the padded window
            if right.start < lo or left.end > hi:
                continue
            x1 = scale(left.end + 1)
            x2 = scale(right.start)
            if x2 <= x1:
                continue
            if not buffer.add(intron_line(transcript, lane, x1, x2, y)):
                return

    # Interaction

    def handle_event(self, event: PointerEvent) -> Optional[Frame]:
        """
        Apply one input event.

        Returns:
            The new Frame if a redraw ran immediately, otherwise None
        """
        viewport = self.viewport

        if event.kind is EventKind.WHEEL:
            viewport.zoom_about(wheel_zoom_factor(event.delta_y, event.delta_mode, event.ctrl), event.x)
            return self._request_redraw()

        if event.kind is EventKind.DOWN:
            feature = self.hit_test(event.x, event.y)
            if feature is not None:
                self.selection.pin(describe_feature(feature))
            else:
                self.selection.dismiss()
            viewport.begin_drag(event.x)
            return None

        if event.kind is EventKind.MOVE:
            if viewport.dragging:
                before = viewport.transform
                if viewport.drag_to(event.x) != before:
                    return self._request_redraw()
                return None
            feature = self.hit_test(event.x, event.y)
            self.selection.show_hover(describe_feature(feature) if feature is not None else None)
            return None

        if event.kind is EventKind.UP:
            viewport.end_drag()
            return None

        if event.kind is EventKind.LEAVE:
            viewport.end_drag()
            self.selection.clear_hover()
            return None

        raise ValueError(f"Unsupported event kind: {event.kind}")

    def _request_redraw(self) -> Optional[Frame]:
        now = self.throttle.clock()
        transform = self.throttle.submit(self.viewport.transform, now)
        if transform is None:
            return None
        return self._redraw(transform, now)

    def _redraw(self, transform, now):
        frame = self.render(transform, now)
        self.viewport.mark_applied(now)
        return frame

    def tick(self, now=None) -> Optional[Frame]:
        """Run the deferred redraw if it is due."""
        now = self.throttle.clock() if now is None else now
        transform = self.throttle.poll(now)
        if transform is None:
            return None
        return self._redraw(transform, now)

    def resize(self, width, height) -> Frame:
        """Resize the draw surface and redraw straight away."""
        self.viewport.resize(width, height)
        return self._redraw_now()

    def zoom_to(self, start, end) -> Frame:
        """Jump straight to a region, bypassing the throttle."""
        self.viewport.zoom_to(start, end)
        return self._redraw_now()

    def _redraw_now(self) -> Frame:
        """Redraw outside the throttle, dropping any pending redraw and restarting its interval."""
        now = self.throttle.clock()
        self.throttle.cancel()
        self.throttle.mark_applied(now)
        return self._redraw(self.viewport.transform, now)

    def hit_test(self, x, y) -> Optional[Feature]:
        """Topmost feature drawn at (x, y) in the last frame."""
        if self.frame is None:
            return None
        for primitive in reversed(self.frame.primitives):
            if primitive.contains(x, y):
                return self.result.features[primitive.feature_index]
        return None
