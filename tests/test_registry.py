from matplotlib import pyplot as plt
from matplotlib.colors import to_rgba
import numpy as np
from numpy.testing import assert_allclose
import pytest

from scatterpick import PointRegistry, make_accessor


@pytest.fixture
def ax():
    fig = plt.figure(1)
    ax = fig.add_subplot(111)
    try:
        yield ax
    finally:
        plt.close(fig)


def _style_for(record, i):
    return dict(radius=record.get("r", 3), color=["red", "blue"][i],
                fill_opacity=.3, stroke_width=1)


_data = [[{"x": 0, "y": 0}, {"x": 1, "y": 2, "r": 5}], [{"x": 3, "y": 4}]]


@pytest.fixture
def registry(ax):
    registry = PointRegistry(
        ax, make_accessor("x"), make_accessor("y"), labels=["a"])
    registry.mount(_data, _style_for)
    return registry


def test_mount(ax, registry):
    assert registry.shape == (2, 1)
    handles = registry.handles
    assert [[h.data for h in hs] for hs in handles] == _data
    assert [(h.series, h.index) for h in registry] == [(0, 0), (0, 1), (1, 0)]
    assert registry[0, 1].target == (1, 2)
    assert registry[0, 1].style == dict(
        radius=5, color="red", fill_opacity=.3, stroke_width=1)
    coll0, coll1 = registry.artists
    assert coll0.get_label() == "a"
    assert coll1.get_label() == "_series1"
    assert_allclose(coll0.get_offsets(), [[0, 0], [1, 2]])
    assert_allclose(coll0.get_sizes(), [36, 100])
    assert_allclose(coll0.get_facecolors(), [to_rgba("red", .3)] * 2)
    assert all(coll in ax.collections for coll in registry.artists)


def test_update(registry):
    handle = registry[0, 1]
    coll = handle.artist
    assert handle.update(fill_opacity=1)
    assert_allclose(coll.get_facecolors(),
                    [to_rgba("red", .3), to_rgba("red", 1)])
    assert handle.update(radius=1, stroke_width=2, color="green")
    assert_allclose(coll.get_sizes(), [36, 4])
    assert_allclose(coll.get_linewidths(), [1, 2])
    assert_allclose(coll.get_edgecolors(),
                    [to_rgba("red"), to_rgba("green")])
    assert_allclose(coll.get_facecolors()[1], to_rgba("green", 1))
    # Other points keep their style.
    assert registry[0, 0].style["fill_opacity"] == .3


def test_update_is_idempotent(registry):
    handle = registry[1, 0]
    handle.update(fill_opacity=1)
    handle.artist.stale = False
    assert not handle.update(fill_opacity=1)
    assert not handle.update()
    assert not handle.artist.stale


def test_update_unknown_key(registry):
    with pytest.raises(ValueError, match="Unknown style key"):
        registry[0, 0].update(opacity=1)


def test_out_of_range(registry):
    for key in [(-1, 0), (0, -1), (2, 0), (1, 1)]:
        with pytest.raises(IndexError):
            registry[key]


def test_remount_replaces(ax, registry):
    old = registry.artists
    registry.mount([[{"x": 5, "y": 5}]], _style_for)
    assert registry.shape == (1,)
    assert not any(coll in ax.collections for coll in old)
    assert len(ax.collections) == 1
    registry.remove()
    assert registry.shape == ()
    assert not ax.collections


def test_empty_series(ax):
    registry = PointRegistry(ax, make_accessor("x"), make_accessor("y"))
    registry.mount([[], [{"x": 0, "y": 0}]], _style_for)
    assert registry.shape == (0, 1)
    assert len(ax.collections) == 2


def test_missing_style_key(ax):
    registry = PointRegistry(ax, make_accessor("x"), make_accessor("y"))
    with pytest.raises(ValueError, match="Missing style key"):
        registry.mount([[{"x": 0, "y": 0}]], lambda record, i: {})


def test_non_numeric_radius(ax):
    registry = PointRegistry(ax, make_accessor("x"), make_accessor("y"))
    with pytest.raises(TypeError):
        registry.mount([[{"x": 0, "y": 0}]],
                       lambda record, i: {**_style_for(record, i),
                                          "radius": "big"})
