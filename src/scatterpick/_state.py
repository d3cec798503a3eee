"""
The single-active-point state machine.

Transitions are computed by the pure `transition` function, which only
describes which points to restyle and what to do with the tooltip;
`ActivePoint` applies them.
"""

from collections import namedtuple
import functools
import logging

from ._index import LeaveEvent, PointEvent


_log = logging.getLogger(__name__)


class ActiveState(namedtuple("ActiveState", "series index")):
    """
    The highlighted ``(series, index)`` pair, or `IDLE` as ``(-1, -1)``.

    A half-set pair is rejected.
    """

    __slots__ = ()

    def __new__(cls, series=-1, index=-1):
        if (series == -1) != (index == -1) or min(series, index) < -1:
            raise ValueError(
                f"Invalid active point ({series}, {index}): both indices must "
                f"be non-negative, or both -1")
        return super().__new__(cls, series, index)

    @property
    def idle(self):
        return self.series == -1


IDLE = ActiveState()

Transition = namedtuple("Transition", "state restyle tooltip")
Transition.__doc__ = """
    The outcome of feeding an event to the state machine.
"""
Transition.state.__doc__ = (
    "The new `ActiveState`.")
Transition.restyle.__doc__ = (
    "List of ``((series, index), style)`` pairs to apply, in order.")
Transition.tooltip.__doc__ = (
    'None, "show" or "hide".')


@functools.singledispatch
def transition(event, state, *, dim=.3, emphasis=1.):
    """
    Compute the `Transition` triggered by *event* in *state*.

    This is a single-dispatch function; implementations for the index events
    follow.
    """
    raise TypeError(f"Unsupported event: {event!r}")


@transition.register(PointEvent)
def _(event, state, *, dim=.3, emphasis=1.):
    new = ActiveState(event.series, event.index)
    if new == state:
        return Transition(state, [], None)
    restyle = []
    if not state.idle:
        restyle.append((tuple(state), {"fill_opacity": dim}))
    restyle.append((tuple(new), {"fill_opacity": emphasis}))
    return Transition(new, restyle, "show")


@transition.register(LeaveEvent)
def _(event, state, *, dim=.3, emphasis=1.):
    if state.idle:
        return Transition(state, [], None)
    return Transition(IDLE, [(tuple(state), {"fill_opacity": dim})], "hide")


class ActivePoint:
    """Apply state-machine transitions to a `PointRegistry` and a tooltip."""

    def __init__(self, registry, tooltip=None, *,
                 dim_opacity=.3, emphasis_opacity=1.):
        self.registry = registry
        self.tooltip = tooltip
        self.dim_opacity = dim_opacity
        self.emphasis_opacity = emphasis_opacity
        self._state = IDLE

    @property
    def state(self):
        """The current `ActiveState`."""
        return self._state

    def handle(self, event):
        """Process an index event; return the applied `Transition`."""
        tr = transition(event, self._state,
                        dim=self.dim_opacity, emphasis=self.emphasis_opacity)
        # Resolve everything first so that a desync leaves no half-applied
        # transition behind.
        targets = [(self.registry[key], style) for key, style in tr.restyle]
        for handle, style in targets:
            handle.update(**style)
        self._state = tr.state
        if tr.restyle:
            _log.debug("Active point: %s", tuple(tr.state))
        if self.tooltip is not None:
            if tr.tooltip == "show":
                self.tooltip.update(data=[self.registry[tr.state]])
            elif tr.tooltip == "hide":
                self.tooltip.hide()
        return tr

    def reset(self):
        """Forget the active point without restyling it."""
        self._state = IDLE
