import logging

from matplotlib.colors import to_rgba
import numpy as np

from . import _data


_log = logging.getLogger(__name__)

_style_keys = ("radius", "color", "fill_opacity", "stroke_width")


class _SeriesArtist:
    """Per-point style arrays backing the `PathCollection` of one series."""

    def __init__(self, axes, xs, ys, styles, label):
        self.facecolors = np.array(
            [to_rgba(style["color"], style["fill_opacity"])
             for style in styles]).reshape((-1, 4))
        self.edgecolors = np.array(
            [to_rgba(style["color"]) for style in styles]).reshape((-1, 4))
        self.sizes = np.array(
            [(2 * style["radius"]) ** 2 for style in styles], float)
        self.linewidths = np.array(
            [style["stroke_width"] for style in styles], float)
        self.collection = (
            axes.scatter(xs, ys, s=self.sizes, facecolors=self.facecolors,
                         edgecolors=self.edgecolors,
                         linewidths=self.linewidths, label=label)
            if len(styles) else axes.scatter([], [], label=label))

    def restyle(self, j, style, changed):
        coll = self.collection
        if {"color", "fill_opacity"} & changed:
            self.facecolors[j] = to_rgba(style["color"], style["fill_opacity"])
            coll.set_facecolor(self.facecolors)
        if "color" in changed:
            self.edgecolors[j] = to_rgba(style["color"])
            coll.set_edgecolor(self.edgecolors)
        if "radius" in changed:
            self.sizes[j] = (2 * style["radius"]) ** 2
            coll.set_sizes(self.sizes)
        if "stroke_width" in changed:
            self.linewidths[j] = style["stroke_width"]
            coll.set_linewidth(self.linewidths)


class PointHandle:
    """
    A rendered data point.

    Attributes
    ----------
    series : int
        Index of the series the point belongs to.
    index : int
        Index of the point within its series.
    data
        The record the point was rendered from.
    target : Tuple[float, float]
        The data coordinates of the point.
    """

    def __init__(self, series, index, data, target, artist, style):
        self.series = series
        self.index = index
        self.data = data
        self.target = target
        self._artist = artist
        self._style = style

    def __repr__(self):
        return (f"<{type(self).__name__}(series={self.series}, "
                f"index={self.index}, data={self.data!r})>")

    @property
    def style(self):
        """A copy of the current visual attributes."""
        return dict(self._style)

    @property
    def artist(self):
        """The `PathCollection` drawing the point's series."""
        return self._artist.collection

    def update(self, **style):
        """
        Update some of the visual attributes.

        Valid keys are ``radius`` (in points), ``color``, ``fill_opacity``
        and ``stroke_width``.  Return whether anything changed.
        """
        unknown = {*style} - {*_style_keys}
        if unknown:
            raise ValueError("Unknown style key(s): {}".format(
                ", ".join(sorted(unknown))))
        changed = {k for k, v in style.items() if self._style[k] != v}
        if not changed:
            return False
        self._style.update(style)
        self._artist.restyle(self.index, self._style, changed)
        return True


class PointRegistry:
    """
    The rendered points of all series, addressable by ``(series, index)``.
    """

    def __init__(self, axes, x_accessor, y_accessor, labels=None):
        self.axes = axes
        self._x_accessor = x_accessor
        self._y_accessor = y_accessor
        self._labels = labels
        self._artists = []
        self._handles = []

    def mount(self, series, style_for):
        """
        Render *series* and return the nested `PointHandle`\\s.

        *style_for* is called as ``style_for(record, series_index)`` and must
        return all of ``radius``, ``color``, ``fill_opacity`` and
        ``stroke_width``.  Previously mounted points are removed first.
        """
        self.remove()
        for i, records in enumerate(series):
            xs, ys, _ = _data.coordinates(
                [records], self._x_accessor, self._y_accessor)
            styles = []
            for record in records:
                style = dict(style_for(record, i))
                missing = {*_style_keys} - {*style}
                if missing:
                    raise ValueError("Missing style key(s): {}".format(
                        ", ".join(sorted(missing))))
                style["radius"] = _data.as_number(
                    style["radius"], f"the size of {record!r}")
                styles.append(style)
            label = (self._labels[i]
                     if self._labels is not None and i < len(self._labels)
                     else f"_series{i}")
            artist = _SeriesArtist(self.axes, xs, ys, styles, label)
            self._artists.append(artist)
            self._handles.append([
                PointHandle(i, j, record, (x, y), artist, style)
                for j, (record, x, y, style)
                in enumerate(zip(records, xs.tolist(), ys.tolist(), styles))])
        _log.debug("Mounted %d series (%d points)",
                   len(self._handles), sum(self.shape))
        return self.handles

    def remove(self):
        """Detach all points from the axes."""
        for artist in self._artists:
            artist.collection.remove()
        self._artists = []
        self._handles = []

    @property
    def handles(self):
        r"""The nested lists of `PointHandle`\s, one list per series."""
        return [[*handles] for handles in self._handles]

    @property
    def artists(self):
        r"""The `PathCollection`\s, one per series."""
        return [artist.collection for artist in self._artists]

    @property
    def shape(self):
        """The number of points in each series."""
        return tuple(len(handles) for handles in self._handles)

    def __iter__(self):
        for handles in self._handles:
            yield from handles

    def __getitem__(self, key):
        series, index = key
        if not (0 <= series < len(self._handles)
                and 0 <= index < len(self._handles[series])):
            raise IndexError(
                f"Point ({series}, {index}) does not exist in a registry of "
                f"shape {self.shape}; the coordinate index is out of sync")
        return self._handles[series][index]
