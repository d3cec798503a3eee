from collections import namedtuple
from functools import partial
import logging
import warnings

from matplotlib.lines import Line2D
from matplotlib.transforms import IdentityTransform
from matplotlib.tri import Triangulation
import numpy as np

from . import _data


_log = logging.getLogger(__name__)


PointEvent = namedtuple("PointEvent", "series index")
PointEvent.__doc__ = """
    Emitted on each pointer move inside the plotting area.

    Carries the ``(series, index)`` pair of the point nearest to the pointer.
"""
LeaveEvent = namedtuple("LeaveEvent", "")
LeaveEvent.__doc__ = """Emitted when the pointer exits the plotting area."""

_default_marker_kwargs = dict(
    marker="o",
    markersize=6,
    markerfacecolor="none",
    markeredgecolor="k",
    markeredgewidth=1,
)


class CoordinateIndex:
    """
    Nearest-point lookup over the pixel positions of nested series.

    The indexed positions never change; build a new index whenever the data
    or the mapping from data to pixels changes.  Queries only update a cache
    of the vertex the next triangulation walk starts from, which never
    affects their results.

    Points are stored flat, series after series, so that comparing flat
    indices is the same as comparing ``(series, index)`` pairs
    lexicographically; ties between equidistant points are resolved in favor
    of the lowest flat index.
    """

    brute_force_threshold = 32

    def __init__(self, xy, offsets, *, brute_force_threshold=None):
        """
        Construct an index from flat pixel positions.

        Parameters
        ----------

        xy : array-like, shape (N, 2)
            Pixel positions of all points, series after series.

        offsets : array-like of int
            Flat index at which each series starts, followed by N.

        brute_force_threshold : int, optional
            Below this many distinct positions, queries scan all points
            instead of walking the triangulation.
        """
        self._xy = np.asarray(xy, float).reshape((-1, 2))
        self._offsets = np.asarray(offsets, int)
        if (len(self._offsets) == 0 or self._offsets[0] != 0
                or self._offsets[-1] != len(self._xy)
                or (np.diff(self._offsets) < 0).any()):
            raise ValueError(
                f"Offsets {self._offsets.tolist()} do not partition "
                f"{len(self._xy)} points")
        if not np.isfinite(self._xy).all():
            bad = int(np.flatnonzero(~np.isfinite(self._xy).all(axis=1))[0])
            raise ValueError(
                "Non-finite pixel position {} for point {} of series {}"
                .format(tuple(self._xy[bad]), *self.point_for(bad)[::-1]))
        if brute_force_threshold is not None:
            self.brute_force_threshold = brute_force_threshold
        self._callbacks = {"point": [], "leave": []}
        self._disconnectors = []
        self._axes = None
        self._marker = None
        self._inside = False
        self._tri = None
        self._build_triangulation()

    @classmethod
    def build(cls, points, x_accessor, y_accessor, x_scale, y_scale,
              **kwargs):
        """
        Build an index over nested series of records.

        The pixel position of a record ``r`` is
        ``(x_scale(x_accessor(r)), y_scale(y_accessor(r)))``; the scales are
        applied to whole arrays of values at once.
        """
        xs, ys, offsets = _data.coordinates(points, x_accessor, y_accessor)
        xy = np.column_stack([
            np.asarray(x_scale(xs), float).reshape(-1),
            np.asarray(y_scale(ys), float).reshape(-1)])
        return cls(xy, offsets, **kwargs)

    def _build_triangulation(self):
        # Coincident points would be dropped by qhull; keep one vertex per
        # position, answering with the lowest flat index.
        self._vertices, self._vertex_flat = (
            np.unique(self._xy, axis=0, return_index=True)
            if len(self._xy) else (np.empty((0, 2)), np.empty(0, int)))
        n = len(self._vertices)
        if n < max(self.brute_force_threshold, 3):
            _log.debug("Indexing %d points by brute force", len(self._xy))
            return
        try:
            tri = Triangulation(*self._vertices.T)
            trifinder = tri.get_trifinder()
        except (RuntimeError, ValueError) as exc:
            warnings.warn(
                f"Cannot triangulate {n} points ({exc}); falling back to a "
                f"linear scan")
            return
        edges = tri.edges
        pairs = np.concatenate([edges, edges[:, ::-1]])
        pairs = pairs[np.lexsort(pairs.T[::-1])]
        self._indptr = np.searchsorted(pairs[:, 0], np.arange(n + 1))
        self._neighbors = pairs[:, 1]
        # qhull may leave nearly-coincident points out of every triangle.
        self._isolated = np.flatnonzero(np.diff(self._indptr) == 0)
        self._tri = tri
        self._trifinder = trifinder
        self._start = int(tri.triangles[0, 0])
        _log.debug("Triangulated %d points into %d triangles",
                   n, len(tri.triangles))

    def __len__(self):
        return len(self._xy)

    @property
    def series_lengths(self):
        """The number of points in each series."""
        return tuple(np.diff(self._offsets).tolist())

    @property
    def triangulated(self):
        """Whether queries walk a Delaunay triangulation."""
        return self._tri is not None

    def point_for(self, flat):
        """Convert a flat point index into a ``(series, index)`` pair."""
        series = int(np.searchsorted(self._offsets, flat, side="right")) - 1
        return series, int(flat - self._offsets[series])

    def _sqdist(self, idxs, x, y):
        pts = self._vertices[idxs]
        return (pts[..., 0] - x) ** 2 + (pts[..., 1] - y) ** 2

    def _nearest_flat(self, x, y):
        if self._tri is None:
            d2 = (self._xy[:, 0] - x) ** 2 + (self._xy[:, 1] - y) ** 2
            return int(d2.argmin())  # First minimum, i.e. the lowest index.
        tri_idx = int(self._trifinder([x], [y])[0])
        if tri_idx >= 0:
            corners = self._tri.triangles[tri_idx]
            cur = int(corners[self._sqdist(corners, x, y).argmin()])
        else:
            cur = self._start
        d2 = self._sqdist(cur, x, y)
        # Greedy walk; on a Delaunay triangulation the only local minimum of
        # the distance is the global one.
        while True:
            nbrs = self._neighbors[self._indptr[cur]:self._indptr[cur + 1]]
            nd2 = self._sqdist(nbrs, x, y)
            k = nd2.argmin()
            if nd2[k] >= d2:
                break
            cur, d2 = int(nbrs[k]), nd2[k]
        if len(self._isolated):
            iso_d2 = self._sqdist(self._isolated, x, y)
            if iso_d2.min() < d2:
                cur, d2 = int(self._isolated[iso_d2.argmin()]), iso_d2.min()
        self._start = cur
        # Equidistant vertices are chained by Delaunay edges, but only up to
        # rounding: walk through near ties, then keep the exact minimum.
        limit = d2 * (1 + 1e-12) + 1e-12
        near = {cur: float(d2)}
        stack = [cur]
        while stack:
            u = stack.pop()
            nbrs = self._neighbors[self._indptr[u]:self._indptr[u + 1]]
            nd2 = self._sqdist(nbrs, x, y)
            close = nd2 <= limit
            for w, dw in zip(nbrs[close].tolist(), nd2[close].tolist()):
                if w not in near:
                    near[w] = dw
                    stack.append(w)
        if len(self._isolated):
            iso_d2 = self._sqdist(self._isolated, x, y)
            close = iso_d2 <= limit
            near.update(zip(self._isolated[close].tolist(),
                            iso_d2[close].tolist()))
        best = min(near.values())
        tied = [v for v, dv in near.items() if dv == best]
        return int(self._vertex_flat[tied].min())

    def nearest(self, x, y):
        """
        Return the ``(series, index)`` pair of the point closest to pixel
        position ``(x, y)``, or None if the index is empty.
        """
        if not len(self._xy):
            return None
        return self.point_for(self._nearest_flat(x, y))

    def target(self, series, index):
        """Return the pixel position of a point."""
        return tuple(self._xy[self._offsets[series] + index])

    def connect(self, event, func=None):
        """
        Connect a callback to an index event; return the callback.

        Callbacks connected to ``"point"`` receive a `PointEvent` on every
        pointer move inside the plotting area; callbacks connected to
        ``"leave"`` receive a `LeaveEvent` when the pointer exits it.

        This method can also be used as a decorator.
        """
        if event not in self._callbacks:
            raise ValueError(f"{event!r} is not a valid index event")
        if func is None:
            return partial(self.connect, event)
        self._callbacks[event].append(func)
        return func

    def disconnect(self, event, func):
        """Disconnect a previously connected callback."""
        try:
            self._callbacks[event].remove(func)
        except KeyError:
            raise ValueError(f"{event!r} is not a valid index event")
        except ValueError:
            raise ValueError(f"Callback {func} is not registered to {event}")

    def _emit(self, event, payload):
        for cb in self._callbacks[event]:
            cb(payload)

    def mount_to(self, axes, *, marker=False, marker_kwargs=None):
        """
        Track the pointer over *axes*.

        If *marker* is set, a marker follows the last resolved point.
        """
        if self._axes is not None:
            raise RuntimeError("Index is already mounted")
        self._axes = axes
        canvas = axes.figure.canvas
        self._disconnectors = [
            partial(canvas.mpl_disconnect, canvas.mpl_connect(*pair))
            for pair in [("motion_notify_event", self._on_motion_notify),
                         ("figure_leave_event", self._on_figure_leave)]]
        if marker:
            self._marker = Line2D(
                [], [], transform=IdentityTransform(), visible=False,
                **{**_default_marker_kwargs, **(marker_kwargs or {})})
            # Not `add_line`, which would feed the data limits.
            axes.add_artist(self._marker)

    def remove(self):
        """Stop tracking the pointer and remove the marker, if any."""
        for disconnector in self._disconnectors:
            disconnector()
        self._disconnectors = []
        if self._marker is not None:
            self._marker.remove()
            self._marker = None
        self._axes = None
        self._inside = False

    def _on_motion_notify(self, event):
        axes = self._axes
        if event.canvas is axes.figure.canvas and axes.contains(event)[0]:
            if not len(self._xy):
                return
            self._inside = True
            series, index = self.nearest(event.x, event.y)
            if self._marker is not None:
                x, y = self.target(series, index)
                self._marker.set_data([x], [y])
                self._marker.set_visible(True)
                axes.figure.canvas.draw_idle()
            self._emit("point", PointEvent(series, index))
        else:
            self._leave()

    def _on_figure_leave(self, event):
        self._leave()

    def _leave(self):
        if not self._inside:
            return
        self._inside = False
        if self._marker is not None:
            self._marker.set_visible(False)
            self._axes.figure.canvas.draw_idle()
        self._emit("leave", LeaveEvent())
