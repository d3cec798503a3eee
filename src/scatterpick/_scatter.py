from contextlib import suppress
from functools import partial
import logging
import sys

from . import _data
from ._collaborators import (
    Brush, Rug, Tooltip, axes_scales, make_colors, mount_legend)
from ._index import CoordinateIndex, LeaveEvent
from ._registry import PointRegistry
from ._state import ActivePoint


_log = logging.getLogger(__name__)

_default_size = 3.  # A float: ints are positions.
_default_stroke_width = 1
_legend_object = "circle"


def _view_fingerprint(axes):
    return (tuple(axes.bbox.bounds), tuple(axes.viewLim.bounds),
            axes.get_xscale(), axes.get_yscale())


class ScatterChart:
    """
    An interactive scatter plot highlighting the point nearest to the mouse.

    Attributes
    ----------
    axes : Axes
        The axes the chart is drawn on.
    registry : PointRegistry
        The rendered points.
    index : CoordinateIndex
        The nearest-point index over the rendered points.
    tooltip : Optional[Tooltip]
        The tooltip, if enabled.
    """

    def __init__(self,
                 axes,
                 data,
                 *,
                 x_accessor="x",
                 y_accessor="y",
                 size_accessor=None,
                 x_rug=False,
                 y_rug=False,
                 colors=None,
                 labels=None,
                 tooltip=True,
                 brush=False,
                 marker=False,
                 dim_opacity=.3,
                 emphasis_opacity=1.,
                 stroke_width=_default_stroke_width,
                 tooltip_kwargs=None,
                 rug_kwargs=None):
        """
        Construct and draw a scatter chart.

        Parameters
        ----------

        axes : Axes
            The axes to draw on.

        data : List
            Either a sequence of records, or a sequence of series, each a
            sequence of records.  Records may be of any type understood by
            the accessors.

        x_accessor, y_accessor : Union[str, int, Callable], default: "x", "y"
            Field name, position, or function extracting the coordinates of a
            record.

        size_accessor : Union[str, int, float, Callable], optional
            Field name, position, or function extracting the radius (in
            points) of a record, or a constant float radius; defaults to 3.
            As for the other accessors, an int is a position: pass ``5.``,
            not ``5``, for a constant radius of 5.

        x_rug, y_rug : bool, default: False
            Whether to draw marginal rugs along the x and y axes.

        colors : Union[List, Callable], optional
            Series colors, either as a list (cycled) or as a function of the
            series index.  Defaults to the property cycle.

        labels : List[str], optional
            Series labels, used by the legend and the tooltip.  Labels
            starting with an underscore are hidden.

        tooltip : bool, default: True
            Whether to annotate the highlighted point.

        brush : bool, default: False
            Whether dragging a rectangle zooms into it.

        marker : bool, default: False
            Whether to draw a marker following the pointer's nearest point.

        dim_opacity, emphasis_opacity : float, default: 0.3, 1
            Fill opacity of normal and highlighted points.

        stroke_width : float, default: 1
            Width of the point outlines.

        tooltip_kwargs : dict, optional
            Keyword arguments passed to the tooltip's `annotate
            <matplotlib.axes.Axes.annotate>` call.

        rug_kwargs : dict, optional
            Keyword arguments passed to the `Rug`\\s.
        """
        self.axes = axes
        self.x_accessor = _data.make_accessor(x_accessor)
        self.y_accessor = _data.make_accessor(y_accessor)
        self.size_accessor = _data.make_accessor(
            size_accessor, default=_data.make_accessor(_default_size))
        self.colors = make_colors(colors)
        self.labels = [*labels] if labels is not None else None
        self.x_rug = x_rug
        self.y_rug = y_rug
        self.dim_opacity = dim_opacity
        self.emphasis_opacity = emphasis_opacity
        self.stroke_width = stroke_width
        self.rug_kwargs = rug_kwargs if rug_kwargs is not None else {}
        self._brush_enabled = brush
        self._marker = marker

        self.tooltip = (
            Tooltip(axes, self.labels,
                    **(tooltip_kwargs if tooltip_kwargs is not None else {}))
            if tooltip else None)
        self.registry = PointRegistry(
            axes, self.x_accessor, self.y_accessor, self.labels)
        self.index = None
        self.rugs = []
        self.legend = None
        self.brush = None
        self._active = ActivePoint(
            self.registry, self.tooltip,
            dim_opacity=dim_opacity, emphasis_opacity=emphasis_opacity)
        self._callbacks = {"highlight": [], "leave": []}
        self._disconnectors = []
        self._fingerprint = None

        # Canvas callbacks only hold weak references.  Create a reference
        # cycle with the axes instead, so that the chart lives as long as them.
        vars(axes).setdefault(
            f"_{__class__.__name__}__keep_alive", []).append(self)

        self._data = _data.normalize_series(data)
        self.redraw()

    @property
    def data(self):
        """The normalized data, as a list of series."""
        return self._data

    def set_data(self, data):
        """Replace the data and redraw."""
        self._data = _data.normalize_series(data)
        self.redraw()

    @property
    def active(self):
        """The `ActiveState` of the highlighted point."""
        return self._active.state

    @property
    def handles(self):
        r"""The nested `PointHandle`\s."""
        return self.registry.handles

    def _style_for(self, record, i):
        return dict(radius=self.size_accessor(record),
                    color=self.colors(i),
                    fill_opacity=self.dim_opacity,
                    stroke_width=self.stroke_width)

    def _unmount(self):
        for disconnector in self._disconnectors:
            disconnector()
        self._disconnectors = []
        if self.index is not None:
            self.index.remove()
            self.index = None
        for rug in self.rugs:
            rug.remove()
        self.rugs = []
        if self.legend is not None:
            with suppress(ValueError):
                self.legend.remove()
            self.legend = None
        if self.brush is not None:
            self.brush.remove()
            self.brush = None
        if not self.active.idle:
            # The previous handles are going away; never restyle them.
            self._active.reset()
            for cb in self._callbacks["leave"]:
                cb(None)
        self.registry.remove()

    def redraw(self):
        """Rebuild the whole chart from the current data."""
        self._unmount()
        self.mount_rugs(self.x_rug, self.y_rug)
        if self.tooltip is not None:
            self.tooltip.update(legend_object_type=_legend_object)
            self.tooltip.hide()
        self.registry.mount(self._data, self._style_for)
        self.mount_index()
        self.legend = mount_legend(self.axes, self.registry.artists)
        if self._brush_enabled:
            self.brush = Brush(self.axes, self._on_brush)
        canvas = self.axes.figure.canvas
        self._disconnectors = [
            partial(canvas.mpl_disconnect,
                    canvas.mpl_connect("draw_event", self._on_draw))]
        _log.debug("Redrew %d series", len(self._data))
        self.axes.figure.canvas.draw_idle()

    def mount_rugs(self, x_rug, y_rug):
        """Mount new rugs along the requested axes."""
        for enabled, accessor, orientation in [
                (x_rug, self.x_accessor, "horizontal"),
                (y_rug, self.y_accessor, "vertical")]:
            if enabled:
                rug = Rug(self.axes, accessor, self.colors, self._data,
                          orientation=orientation, **self.rug_kwargs)
                rug.mount()
                self.rugs.append(rug)

    def mount_index(self):
        """Build a new coordinate index and route its events."""
        # Apply pending autoscaling before reading the transforms.
        self.axes.viewLim
        self.index = CoordinateIndex.build(
            self._data, self.x_accessor, self.y_accessor,
            *axes_scales(self.axes))
        self.index.connect("point", self._on_index_event)
        self.index.connect("leave", self._on_index_event)
        self.index.mount_to(self.axes, marker=self._marker)
        self._fingerprint = _view_fingerprint(self.axes)

    def reindex(self):
        """
        Rebuild the coordinate index after the view changed.

        The active point, if any, is released first.
        """
        if self.index is None:
            return
        self.index.remove()
        self.index = None
        if not self.active.idle:
            self._on_index_event(LeaveEvent())
        self.mount_index()

    def _on_draw(self, event):
        if (self.index is not None
                and _view_fingerprint(self.axes) != self._fingerprint):
            _log.debug("View changed; rebuilding the coordinate index")
            self.reindex()

    def _on_brush(self, xlim, ylim):
        self.axes.set(xlim=xlim, ylim=ylim)
        self.axes.figure.canvas.draw_idle()

    def _on_index_event(self, event):
        tr = self._active.handle(event)
        if not tr.restyle:
            return
        if tr.state.idle:
            for cb in self._callbacks["leave"]:
                cb(None)
        else:
            handle = self.registry[tr.state]
            for cb in self._callbacks["highlight"]:
                cb(handle)
        self.axes.figure.canvas.draw_idle()

    def connect(self, event, func=None):
        """
        Connect a callback to a chart event; return the callback.

        - callbacks connected to the ``"highlight"`` event are called with the
          newly highlighted `PointHandle`;
        - callbacks connected to the ``"leave"`` event are called with None
          when no point is highlighted anymore.

        This method can also be used as a decorator::

            @chart.connect("highlight")
            def on_highlight(handle):
                ...
        """
        if event not in self._callbacks:
            raise ValueError(f"{event!r} is not a valid chart event")
        if func is None:
            return partial(self.connect, event)
        self._callbacks[event].append(func)
        return func

    def disconnect(self, event, cb):
        """Disconnect a previously connected callback."""
        try:
            self._callbacks[event].remove(cb)
        except KeyError:
            raise ValueError(f"{event!r} is not a valid chart event")
        except ValueError:
            raise ValueError(f"Callback {cb} is not registered to {event}")

    def remove(self):
        """
        Remove the chart from its axes.

        Disconnect all callbacks, and allow the chart to be garbage collected.
        """
        self._unmount()
        if self.tooltip is not None:
            self.tooltip.remove()
        with suppress(ValueError):
            vars(self.axes).get(
                f"_{__class__.__name__}__keep_alive", []).remove(self)
        self.axes.figure.canvas.draw_idle()


def scatter(data, ax=None, **kwargs):
    """
    Create a `ScatterChart` for *data*.

    Parameters
    ----------

    data : List
        A sequence of records, or a sequence of series of records.

    ax : Optional[Axes]
        The axes to draw on.  Defaults to the current axes of
        :mod:`~matplotlib.pyplot`, which only works when relying on pyplot.

    **kwargs
        Keyword arguments are passed to the `ScatterChart` constructor.
    """
    if ax is None:
        # Do not import pyplot ourselves to avoid forcing the backend.
        plt = sys.modules.get("matplotlib.pyplot")
        if plt is None:
            raise ValueError(
                "No axes given, and matplotlib.pyplot is not in use")
        ax = plt.gca()
    return ScatterChart(ax, data, **kwargs)
