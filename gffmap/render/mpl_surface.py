"""
Matplotlib draw surface for render frames.

Frames are drawn in plot pixel space (x to the right, y downwards) and the
axes are labelled with genomic positions and lane names.
"""

import logging

from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.collections import LineCollection, PolyCollection
from matplotlib.figure import Figure
from matplotlib.ticker import FixedLocator, FuncFormatter, MaxNLocator

from gffmap.config import BrowserConfig
from gffmap.render.events import DELTA_PIXEL, EventKind, PointerEvent
from gffmap.render.pipeline import RenderPipeline
from gffmap.render.primitives import PrimitiveKind

FEATURE_COLORS = {
    'gene': '#3b82f6',
    'exon': '#a855f7',
    'CDS': '#f59e0b',
    'intron': '#6b7280',
}
DEFAULT_COLOR = '#10b981'

# Plot margins in pixels (top, right, bottom, left)
MARGINS = (40, 40, 60, 80)

# Wheel distance in pixels for one scroll step
SCROLL_STEP_PX = 100.0

TIMER_INTERVAL_MS = 16


def _color(role):
    return FEATURE_COLORS.get(role, DEFAULT_COLOR)


class MatplotlibSurface:
    """Draws frames from a RenderPipeline onto a matplotlib Axes."""

    def __init__(self, ax):
        self.ax = ax

    def draw(self, frame, pipeline):
        ax = self.ax
        ax.clear()

        polygons, fills = [], []
        lines = []
        for primitive in frame.primitives:
            if primitive.kind is PrimitiveKind.LINE:
                lines.append(primitive.points)
            elif primitive.kind is PrimitiveKind.ARROW:
                polygons.append(primitive.points)
                fills.append(_color('gene'))
            else:
                x, y = primitive.x, primitive.y
                w, h = max(1.0, primitive.width), primitive.height
                polygons.append(((x, y), (x + w, y), (x + w, y + h), (x, y + h)))
                fills.append(_color(primitive.role))

        # Introns go underneath the blocks
        if lines:
            ax.add_collection(LineCollection(lines, colors=_color('intron'), linewidths=2, zorder=1))
        if polygons:
            ax.add_collection(PolyCollection(polygons, facecolors=fills, edgecolors='white',
                                             linewidths=0.5, zorder=2))

        ax.set_xlim(0, pipeline.viewport.width)
        ax.set_ylim(pipeline.total_height, 0)

        scale = pipeline.viewport.scale_for(frame.transform)
        ax.xaxis.set_major_locator(MaxNLocator(10))
        ax.xaxis.set_major_formatter(FuncFormatter(lambda px, _pos: f"{scale.invert(px):,.0f}"))

        centers = [pipeline.lane_center(i) for i in range(len(pipeline.tracks))]
        ax.yaxis.set_major_locator(FixedLocator(centers))
        ax.set_yticklabels([track.label for track in pipeline.tracks])

        ax.set_xlabel('Genomic Position (bp)')
        ax.set_ylabel('Features')
        if frame.limit_reached:
            ax.set_title('Feature limit reached; zoom in to see everything', fontsize=9)


def _layout(width, height, lanes, lane_height):
    """Figure size and axes rectangle for a surface of width x height pixels."""
    top, right, bottom, left = MARGINS
    plot_width = max(width - left - right, 1)
    plot_height = max(height - top - bottom, lanes * lane_height, 1)
    fig_height = plot_height + top + bottom
    rect = [left / width, bottom / fig_height, plot_width / width, plot_height / fig_height]
    return plot_width, plot_height, fig_height, rect


def save_snapshot(model, output_file, region=None, width=None, height=None, config=None, dpi=100):
    """
    Render one frame of a model to an image file.

    Args:
        model: BrowserModel to draw
        output_file: Image path; the format follows the extension
        region: Optional (start, end) to zoom to, default is the whole extent
        width, height: Surface size in pixels (defaults from config)
        config: Optional BrowserConfig
        dpi: Output resolution

    Returns:
        The rendered Frame
    """
    config = config or BrowserConfig()
    width = width or config.surface_width
    height = height or config.surface_height

    plot_width, plot_height, fig_height, rect = _layout(width, height, len(model.tracks), config.lane_height)

    fig = Figure(figsize=(width / dpi, fig_height / dpi), dpi=dpi)
    FigureCanvasAgg(fig)
    ax = fig.add_axes(rect)

    pipeline = RenderPipeline(model, plot_width, plot_height, config)
    frame = pipeline.zoom_to(*region) if region else pipeline.render()
    MatplotlibSurface(ax).draw(frame, pipeline)

    fig.savefig(output_file, dpi=dpi)
    logging.info(f"Saved snapshot of {frame.window[0]:,.0f}-{frame.window[1]:,.0f} bp "
                 f"({len(frame.primitives)} primitives) to {output_file}")
    return frame


class InteractiveBrowser:
    """
    Interactive window: mouse wheel zooms, dragging pans, hovering previews a
    feature and clicking pins it.
    """

    def __init__(self, model, config=None, figure=None):
        self.config = config or BrowserConfig()
        if figure is None:
            import matplotlib.pyplot as plt
            figure = plt.figure(figsize=(self.config.surface_width / 100, self.config.surface_height / 100))
        self.fig = figure

        top, right, bottom, left = MARGINS
        fig_width, fig_height = self.fig.get_size_inches() * self.fig.dpi
        self.ax = self.fig.add_axes([left / fig_width, bottom / fig_height,
                                     1 - (left + right) / fig_width, 1 - (top + bottom) / fig_height])
        self.surface = MatplotlibSurface(self.ax)

        bbox = self.ax.get_window_extent()
        self.pipeline = RenderPipeline(model, bbox.width, bbox.height, self.config)
        self.info_text = self.fig.text(0.01, 0.99, '', va='top', ha='left', fontsize=8, family='monospace')

        canvas = self.fig.canvas
        self._connections = [
            canvas.mpl_connect('button_press_event', self.on_press),
            canvas.mpl_connect('button_release_event', self.on_release),
            canvas.mpl_connect('motion_notify_event', self.on_motion),
            canvas.mpl_connect('scroll_event', self.on_scroll),
            canvas.mpl_connect('axes_leave_event', self.on_leave),
            canvas.mpl_connect('resize_event', self.on_resize),
        ]
        self.timer = canvas.new_timer(interval=TIMER_INTERVAL_MS)
        self.timer.add_callback(self.on_timer)

        self._refresh(self.pipeline.render())

    def _in_axes(self, event):
        return event.inaxes is self.ax and event.xdata is not None

    def on_press(self, event):
        if not self._in_axes(event):
            return
        self._refresh(self.pipeline.handle_event(PointerEvent(EventKind.DOWN, event.xdata, event.ydata)))

    def on_release(self, event):
        self.pipeline.handle_event(PointerEvent(EventKind.UP))

    def on_motion(self, event):
        if not self._in_axes(event):
            return
        self._refresh(self.pipeline.handle_event(PointerEvent(EventKind.MOVE, event.xdata, event.ydata)))

    def on_scroll(self, event):
        if not self._in_axes(event):
            return
        wheel = PointerEvent(EventKind.WHEEL, event.xdata, event.ydata,
                             delta_y=-event.step * SCROLL_STEP_PX, delta_mode=DELTA_PIXEL)
        self._refresh(self.pipeline.handle_event(wheel))

    def on_leave(self, event):
        self._refresh(self.pipeline.handle_event(PointerEvent(EventKind.LEAVE)))

    def on_resize(self, event):
        bbox = self.ax.get_window_extent()
        self._refresh(self.pipeline.resize(bbox.width, bbox.height))

    def on_timer(self):
        self._refresh(self.pipeline.tick())

    def _refresh(self, frame=None):
        if frame is not None:
            self.surface.draw(frame, self.pipeline)
        payload = self.pipeline.selection.displayed
        text = '\n'.join(payload.summary_lines()) if payload else ''
        if payload is not None and self.pipeline.selection.is_pinned:
            text += '\n(click background to close)'
        self.info_text.set_text(text)
        self.fig.canvas.draw_idle()

    def show(self):
        import matplotlib.pyplot as plt
        self.timer.start()
        plt.show()
