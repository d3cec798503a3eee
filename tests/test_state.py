from matplotlib import pyplot as plt
import pytest

from scatterpick import (
    IDLE, ActivePoint, ActiveState, LeaveEvent, PointEvent, PointRegistry,
    make_accessor, transition)


@pytest.fixture
def ax():
    fig = plt.figure(1)
    ax = fig.add_subplot(111)
    try:
        yield ax
    finally:
        plt.close(fig)


class RecordingTooltip:
    def __init__(self):
        self.calls = []

    def update(self, legend_object_type=None, data=None):
        self.calls.append(("update", [handle.data for handle in data]))

    def hide(self):
        self.calls.append(("hide",))


def _style_for(record, i):
    return dict(radius=3, color=f"C{i}", fill_opacity=.3, stroke_width=1)


@pytest.fixture
def registry(ax):
    registry = PointRegistry(ax, make_accessor("x"), make_accessor("y"))
    registry.mount(
        [[{"x": 0, "y": 0}, {"x": 10, "y": 10}], [{"x": 0, "y": 10}]],
        _style_for)
    return registry


def _emphasized(registry):
    return [(handle.series, handle.index) for handle in registry
            if handle.style["fill_opacity"] == 1]


@pytest.mark.parametrize("pair", [(-1, 0), (0, -1), (-2, -2), (3, -5)])
def test_half_set_state_is_rejected(pair):
    with pytest.raises(ValueError):
        ActiveState(*pair)


def test_idle():
    assert IDLE == ActiveState() == (-1, -1)
    assert IDLE.idle
    assert not ActiveState(0, 0).idle


def test_transition_from_idle():
    tr = transition(PointEvent(1, 2), IDLE)
    assert tr.state == (1, 2)
    assert tr.restyle == [((1, 2), {"fill_opacity": 1.})]
    assert tr.tooltip == "show"


def test_transition_between_points():
    tr = transition(PointEvent(1, 0), ActiveState(0, 0), dim=.2, emphasis=.9)
    assert tr.state == (1, 0)
    assert tr.restyle == [((0, 0), {"fill_opacity": .2}),
                          ((1, 0), {"fill_opacity": .9})]
    assert tr.tooltip == "show"


def test_transition_same_point_is_noop():
    state = ActiveState(0, 1)
    tr = transition(PointEvent(0, 1), state)
    assert tr.state is state
    assert tr.restyle == []
    assert tr.tooltip is None


def test_transition_leave():
    tr = transition(LeaveEvent(), ActiveState(0, 1))
    assert tr.state is IDLE
    assert tr.restyle == [((0, 1), {"fill_opacity": .3})]
    assert tr.tooltip == "hide"
    tr = transition(LeaveEvent(), IDLE)
    assert (tr.state, tr.restyle, tr.tooltip) == (IDLE, [], None)


def test_transition_unknown_event():
    with pytest.raises(TypeError):
        transition(object(), IDLE)


def test_scenario(registry):
    tooltip = RecordingTooltip()
    active = ActivePoint(registry, tooltip)
    active.handle(PointEvent(0, 0))
    assert active.state == (0, 0)
    assert _emphasized(registry) == [(0, 0)]
    assert tooltip.calls == [("update", [{"x": 0, "y": 0}])]
    # Straight to the other series, without passing through idle.
    active.handle(PointEvent(1, 0))
    assert active.state == (1, 0)
    assert _emphasized(registry) == [(1, 0)]
    assert registry[0, 0].style["fill_opacity"] == .3
    active.handle(LeaveEvent())
    assert active.state == IDLE
    assert _emphasized(registry) == []
    assert tooltip.calls[-1] == ("hide",)


def test_repeated_events_are_idempotent(registry):
    tooltip = RecordingTooltip()
    active = ActivePoint(registry, tooltip)
    active.handle(PointEvent(0, 1))
    collection = registry[0, 1].artist
    collection.stale = False
    for _ in range(3):
        assert active.handle(PointEvent(0, 1)).restyle == []
    assert not collection.stale
    assert len(tooltip.calls) == 1
    for _ in range(3):
        active.handle(LeaveEvent())
    assert tooltip.calls.count(("hide",)) == 1


def test_without_tooltip(registry):
    active = ActivePoint(registry)
    active.handle(PointEvent(0, 1))
    active.handle(LeaveEvent())
    assert _emphasized(registry) == []


def test_custom_opacities(registry):
    active = ActivePoint(registry, dim_opacity=.3, emphasis_opacity=.8)
    active.handle(PointEvent(0, 0))
    assert registry[0, 0].style["fill_opacity"] == .8


@pytest.mark.parametrize("event", [PointEvent(2, 0), PointEvent(0, 2)])
def test_desync_fails_loudly(registry, event):
    tooltip = RecordingTooltip()
    active = ActivePoint(registry, tooltip)
    active.handle(PointEvent(0, 0))
    with pytest.raises(IndexError, match="out of sync"):
        active.handle(event)
    # Nothing was touched.
    assert active.state == (0, 0)
    assert _emphasized(registry) == [(0, 0)]
    assert len(tooltip.calls) == 1


def test_reset(registry):
    active = ActivePoint(registry)
    active.handle(PointEvent(0, 0))
    active.reset()
    assert active.state == IDLE
    assert _emphasized(registry) == [(0, 0)]
