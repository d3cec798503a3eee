try:
    import importlib.metadata as _im
    __version__ = _im.version("scatterpick")
except ImportError:
    __version__ = "0+unknown"

from ._collaborators import Brush, Rug, Tooltip, axes_scales, make_colors
from ._data import make_accessor, normalize_series
from ._index import CoordinateIndex, LeaveEvent, PointEvent
from ._registry import PointHandle, PointRegistry
from ._scatter import ScatterChart, scatter
from ._state import IDLE, ActivePoint, ActiveState, Transition, transition


__all__ = ["ScatterChart", "scatter", "CoordinateIndex", "PointEvent",
           "LeaveEvent", "PointRegistry", "PointHandle", "ActiveState",
           "IDLE", "ActivePoint", "Transition", "transition",
           "normalize_series", "make_accessor", "Tooltip", "Rug", "Brush",
           "axes_scales", "make_colors"]
