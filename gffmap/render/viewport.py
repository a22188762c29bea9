"""
Zoom/pan transform and the visible coordinate window it implies.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from gffmap.config import BrowserConfig
from gffmap.models.genomic import Extent
from gffmap.render.events import DELTA_LINE, DELTA_PIXEL


class LinearScale:
    """Linear map from a genomic domain to a pixel range."""

    def __init__(self, domain: Tuple[float, float], range_: Tuple[float, float]):
        self.domain = domain
        self.range = range_

    def __call__(self, value):
        d0, d1 = self.domain
        r0, r1 = self.range
        return r0 + (value - d0) * (r1 - r0) / (d1 - d0)

    def invert(self, px):
        d0, d1 = self.domain
        r0, r1 = self.range
        return d0 + (px - r0) * (d1 - d0) / (r1 - r0)

    @property
    def units_per_px(self):
        return (self.domain[1] - self.domain[0]) / (self.range[1] - self.range[0])


@dataclass(frozen=True)
class Transform:
    """Horizontal zoom/pan: screen x = k * base_x + x."""
    k: float = 1.0
    x: float = 0.0

    def apply_x(self, px):
        return px * self.k + self.x

    def invert_x(self, px):
        return (px - self.x) / self.k

    def rescale(self, scale: LinearScale) -> LinearScale:
        r0, r1 = scale.range
        return LinearScale((scale.invert(self.invert_x(r0)), scale.invert(self.invert_x(r1))), scale.range)


def wheel_zoom_factor(delta_y, delta_mode=DELTA_PIXEL, ctrl=False):
    """Zoom factor for a wheel event; negative delta_y zooms in."""
    if delta_mode == DELTA_PIXEL:
        unit = 0.002
    elif delta_mode == DELTA_LINE:
        unit = 0.05
    else:
        unit = 1.0
    return 2 ** (-delta_y * unit * (10 if ctrl else 1))


class ViewportState:
    """
    Current transform over the loaded region and the window it shows.

    All transform changes are clamped to the zoom limits and constrained so
    the view never scrolls past either end of the region. The visible window
    is recomputed on every change.
    """

    def __init__(self, extent: Extent, width: float, height: float, config: Optional[BrowserConfig] = None):
        self.config = config or BrowserConfig()
        self.extent = extent
        self.width = max(float(width), 1.0)
        self.height = float(height)
        self.base_scale = LinearScale((extent.start, extent.end + 1), (0.0, self.width))
        self.min_zoom = self.config.min_zoom
        self.max_zoom = self.config.max_zoom_for(extent.size)
        self.transform = Transform()
        self.window = (0.0, 0.0)
        self.last_applied = float('-inf')
        self._drag_origin = None
        self.set_transform(self.min_zoom, 0.0)

    @property
    def zoom_limits(self):
        return self.min_zoom, self.max_zoom

    @property
    def dragging(self):
        return self._drag_origin is not None

    def scale_for(self, transform: Optional[Transform] = None) -> LinearScale:
        return (transform or self.transform).rescale(self.base_scale)

    @property
    def scale(self) -> LinearScale:
        return self.scale_for(self.transform)

    def window_for(self, transform: Optional[Transform] = None):
        scale = self.scale_for(transform)
        return scale.invert(0.0), scale.invert(self.width)

    def padded_window(self, padding: Optional[float] = None, transform: Optional[Transform] = None):
        """Visible window expanded by a fraction of its width on each side."""
        padding = self.config.viewport_padding if padding is None else padding
        v0, v1 = self.window_for(transform) if transform else self.window
        pad = (v1 - v0) * padding
        return v0 - pad, v1 + pad

    def px_per_base(self, transform: Optional[Transform] = None):
        return 1.0 / self.scale_for(transform).units_per_px

    def set_transform(self, k, x) -> Transform:
        k = min(max(k, self.min_zoom), self.max_zoom)
        x = min(0.0, max(self.width * (1 - k), x))
        self.transform = Transform(k, x)
        self.window = self.window_for(self.transform)
        return self.transform

    def zoom_about(self, factor, anchor_px) -> Transform:
        """Scale by factor keeping the coordinate under anchor_px in place."""
        k = min(max(self.transform.k * factor, self.min_zoom), self.max_zoom)
        x = anchor_px - (anchor_px - self.transform.x) * k / self.transform.k
        return self.set_transform(k, x)

    def pan_by(self, dx) -> Transform:
        return self.set_transform(self.transform.k, self.transform.x + dx)

    def begin_drag(self, px):
        self._drag_origin = (px, self.transform.x)

    def drag_to(self, px) -> Transform:
        origin_px, origin_x = self._drag_origin
        return self.set_transform(self.transform.k, origin_x + (px - origin_px))

    def end_drag(self):
        self._drag_origin = None

    def zoom_to(self, start, end) -> Transform:
        """Show the 1-based inclusive region [start, end] as closely as the limits allow."""
        span = max(end + 1 - start, 1)
        k = (self.base_scale.domain[1] - self.base_scale.domain[0]) / span
        k = min(max(k, self.min_zoom), self.max_zoom)
        return self.set_transform(k, -k * self.base_scale(start))

    def resize(self, width, height) -> Transform:
        """Change the surface size, keeping the left edge of the window in place."""
        left = self.window[0]
        self.width = max(float(width), 1.0)
        self.height = float(height)
        self.base_scale = LinearScale(self.base_scale.domain, (0.0, self.width))
        k = self.transform.k
        return self.set_transform(k, -k * self.base_scale(left))

    def mark_applied(self, timestamp):
        self.last_applied = max(self.last_applied, timestamp)
