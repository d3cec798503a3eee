from collections.abc import Iterable, Sequence
import logging
from numbers import Real
import operator

import numpy as np


_log = logging.getLogger(__name__)


def _is_series(obj):
    """
    Return whether *obj* is a series container rather than a record.

    Tuples are records (e.g. ``(x, y)`` pairs or namedtuples), as are mappings,
    numpy rows and any other object.
    """
    return (isinstance(obj, Sequence)
            and not isinstance(obj, (str, bytes, tuple)))


def normalize_series(data):
    """
    Normalize *data* into a list of series, each a list of records.

    A flat sequence of records is wrapped into a single series; a sequence of
    series is copied as is.  Mixing records and series at the same level, or
    nesting series one level deeper, raises `ValueError`.
    """
    if isinstance(data, (str, bytes)) or not isinstance(data, Iterable):
        raise TypeError(
            f"Expected a sequence of records or of series, not {data!r}")
    entries = [*data]
    kinds = {_is_series(entry) for entry in entries}
    if kinds == {True, False}:
        raise ValueError(
            "Cannot mix records and series at the same level; got "
            + ", ".join(sorted({type(entry).__name__ for entry in entries})))
    if kinds != {True}:  # Flat (or empty) input.
        _log.debug("Wrapping %d flat records into one series", len(entries))
        return [entries]
    series = [[*entry] for entry in entries]
    for i, records in enumerate(series):
        for j, record in enumerate(records):
            if _is_series(record):
                raise ValueError(
                    f"Record {j} of series {i} is itself a series "
                    f"({type(record).__name__}); only one level of nesting "
                    f"is supported")
    return series


def make_accessor(key, default=None):
    """
    Turn *key* into a function of a record.

    *key* may be a callable (returned as is), a field name or position (item
    lookup), a real number (constant accessor), or None (return *default*).
    """
    if key is None:
        return default
    if callable(key):
        return key
    if isinstance(key, (str, int)) and not isinstance(key, bool):
        return operator.itemgetter(key)
    if isinstance(key, Real):
        return lambda record: key
    raise TypeError(f"Invalid accessor: {key!r}")


def as_number(value, where):
    if isinstance(value, Real):  # Includes numpy scalars.
        return float(value)
    raise TypeError(f"Accessor returned non-numeric {value!r} for {where}")


def coordinates(series, x_accessor, y_accessor):
    """
    Evaluate the accessors over all records of all *series*.

    Return flat float arrays ``xs``, ``ys`` and the ``offsets`` at which each
    series starts (with a final entry equal to the total point count).
    """
    xs = []
    ys = []
    offsets = [0]
    for i, records in enumerate(series):
        for j, record in enumerate(records):
            where = f"point {j} of series {i}"
            xs.append(as_number(x_accessor(record), where))
            ys.append(as_number(y_accessor(record), where))
        offsets.append(offsets[-1] + len(records))
    return (np.asarray(xs, float), np.asarray(ys, float),
            np.asarray(offsets, int))
