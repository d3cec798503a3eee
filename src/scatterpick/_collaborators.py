# Peer components of the scatter chart: scales, colors, tooltip, rugs, legend
# and brush.  None of them receives events from the point-picking core except
# the tooltip.

from collections.abc import Sequence
from contextlib import suppress
import copy
import re

from matplotlib.widgets import RectangleSelector
import numpy as np

from . import _data


_default_tooltip_kwargs = dict(
    bbox=dict(
        boxstyle="round,pad=.5",
        fc="white",
        alpha=.8,
        ec="k",
    ),
    arrowprops=dict(
        arrowstyle="->",
        connectionstyle="arc3",
        shrinkB=0,
        ec="k",
    ),
)
_default_tooltip_offset = 15  # points
_default_brush_kwargs = dict(
    useblit=True,
    button=[1],
    minspanx=5,
    minspany=5,
    spancoords="pixels",
)
_legend_glyphs = {
    "circle": "\N{BLACK CIRCLE}",
    "square": "\N{BLACK SQUARE}",
    "line": "\N{BOX DRAWINGS HEAVY HORIZONTAL}",
}


def axes_scales(axes):
    """
    Return the ``(x_scale, y_scale)`` pair mapping data values to pixels.

    Both scales are derived from ``axes.transData`` and hence assume a
    separable (rectilinear) projection.
    """

    def x_scale(xs):
        xs = np.asarray(xs, float).reshape(-1)
        return axes.transData.transform(
            np.column_stack([xs, np.full(len(xs), axes.get_ylim()[0])]))[:, 0]

    def y_scale(ys):
        ys = np.asarray(ys, float).reshape(-1)
        return axes.transData.transform(
            np.column_stack([np.full(len(ys), axes.get_xlim()[0]), ys]))[:, 1]

    return x_scale, y_scale


def make_colors(colors=None):
    """
    Return a function mapping a series index to a color.

    *colors* may be None (property cycle colors ``"C0"``, ``"C1"``, ...), a
    sequence of colors (cycled), or such a function already.
    """
    if colors is None:
        return lambda i: f"C{i}"
    if callable(colors):
        return colors
    if isinstance(colors, Sequence) and not isinstance(colors, str):
        if not len(colors):
            raise ValueError("At least one color is required")
        colors = [*colors]
        return lambda i: colors[i % len(colors)]
    raise TypeError(f"Invalid colors: {colors!r}")


def _is_public_label(label):
    return bool(label) and re.match("[^_]", label) is not None


class Tooltip:
    """
    An annotation describing the highlighted point.

    The text consists of an optional header (legend glyph and series label)
    followed by the ``x`` and ``y`` values formatted by the axes.
    """

    def __init__(self, axes, labels=None, **annotation_kwargs):
        self.axes = axes
        self.labels = labels
        self.legend_object_type = None
        self._annotation = axes.annotate(
            "", xy=(0, 0),
            xytext=(_default_tooltip_offset, _default_tooltip_offset),
            textcoords="offset points",
            visible=False,
            zorder=np.inf,
            annotation_clip=False,
            **{**copy.deepcopy(_default_tooltip_kwargs),
               **annotation_kwargs})

    @property
    def annotation(self):
        """The underlying `matplotlib.text.Annotation`."""
        return self._annotation

    @property
    def visible(self):
        return self._annotation.get_visible()

    @property
    def text(self):
        return self._annotation.get_text()

    def format(self, handle):
        """Compute the text describing *handle*."""
        x, y = handle.target
        label = (self.labels[handle.series]
                 if self.labels is not None
                 and handle.series < len(self.labels) else None)
        header = " ".join(filter(None, [
            _legend_glyphs.get(self.legend_object_type),
            label if _is_public_label(label) else None]))
        # format_xdata does not always return a str.
        text = (f"x={str(self.axes.format_xdata(x)).rstrip()}\n"
                f"y={str(self.axes.format_ydata(y)).rstrip()}")
        return f"{header}\n{text}" if header else text

    def update(self, legend_object_type=None, data=None):
        """
        Set the legend glyph type and/or show the tooltip for the first
        `PointHandle` in *data*.
        """
        if legend_object_type is not None:
            self.legend_object_type = legend_object_type
        if not data:
            return
        handle = data[0]
        ann = self._annotation
        ann.xy = handle.target
        ann.set_text(self.format(handle))
        # Point towards the center of the axes so that the box stays inside.
        fx, fy = self.axes.transAxes.inverted().transform(
            self.axes.transData.transform(handle.target))
        sx = -1 if fx > .5 else 1
        sy = -1 if fy > .5 else 1
        ann.set(position=(sx * _default_tooltip_offset,
                          sy * _default_tooltip_offset),
                horizontalalignment={-1: "right", 1: "left"}[sx],
                verticalalignment={-1: "top", 1: "bottom"}[sy],
                visible=True)
        bbox_patch = ann.get_bbox_patch()
        if bbox_patch is not None:
            bbox_patch.set_edgecolor(handle.style["color"])

    def hide(self):
        self._annotation.set_visible(False)

    def remove(self):
        with suppress(ValueError):
            self._annotation.remove()


class Rug:
    """Marginal ticks along one axis, one color per series."""

    def __init__(self, axes, accessor, colors, data, *,
                 orientation="horizontal", tick_length=8, **line_kwargs):
        if orientation not in ["horizontal", "vertical"]:
            raise ValueError(f"Invalid rug orientation: {orientation!r}")
        self.axes = axes
        self.accessor = accessor
        self.colors = colors
        self.data = data
        self.orientation = orientation
        self.tick_length = tick_length
        self.line_kwargs = line_kwargs
        self.lines = []

    def mount(self):
        """(Re)draw the ticks."""
        self.remove()
        for i, records in enumerate(self.data):
            values = np.array([
                _data.as_number(self.accessor(record),
                                f"point {j} of series {i}")
                for j, record in enumerate(records)], float)
            zeros = np.zeros_like(values)
            if self.orientation == "horizontal":
                xy = (values, zeros)
                transform = self.axes.get_xaxis_transform()
                marker = "|"
            else:
                xy = (zeros, values)
                transform = self.axes.get_yaxis_transform()
                marker = "_"
            line, = self.axes.plot(
                *xy, transform=transform, linestyle="none", marker=marker,
                markersize=self.tick_length, color=self.colors(i),
                clip_on=False, label=f"_rug{i}", **self.line_kwargs)
            self.lines.append(line)
        return self.lines

    def remove(self):
        for line in self.lines:
            with suppress(ValueError):
                line.remove()
        self.lines = []


class Brush:
    """
    Rectangle selection reporting ``(x0, x1), (y0, y1)`` data extents to
    *on_select*.
    """

    def __init__(self, axes, on_select, **selector_kwargs):
        self.axes = axes
        self._on_select_cb = on_select
        # The selector's hidden artists must not feed autoscaling.
        datalim = axes.dataLim.frozen()
        self.selector = RectangleSelector(
            axes, self._on_select,
            **{**_default_brush_kwargs, **selector_kwargs})
        axes.dataLim.set(datalim)

    def _on_select(self, eclick, erelease):
        x0, x1 = sorted([eclick.xdata, erelease.xdata])
        y0, y1 = sorted([eclick.ydata, erelease.ydata])
        self._on_select_cb((x0, x1), (y0, y1))

    def remove(self):
        self.selector.set_active(False)
        self.selector.disconnect_events()
        for artist in self.selector.artists:
            with suppress(ValueError):
                artist.remove()


def mount_legend(axes, artists):
    """
    Add a legend for the series whose artists carry a public label; return
    it, or None if there is no such series.
    """
    labeled = [artist for artist in artists
               if _is_public_label(artist.get_label())]
    if not labeled:
        return None
    return axes.legend(handles=labeled)
