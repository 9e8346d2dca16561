"""Interval frame configuration.

An interval frame is a timestamp quantized to the temporal resolution of a
tile, counted from the Unix epoch in UTC. Frames are fractional so callers
decide how to round; the decoder uses ``math.ceil``.
"""
import numbers
from dataclasses import dataclass
from typing import Callable

import pandas as pd

from .errors import UnknownIntervalError

MS_PER_HOUR = 60 * 60 * 1000
MS_PER_DAY = 24 * MS_PER_HOUR


def to_millis(value) -> float:
    """Convert a timestamp to milliseconds since the epoch.

    Parameters
    ----------
    value : int, float, str or datetime-like
        Numbers are taken as milliseconds already; anything else is parsed
        with pandas and treated as UTC when naive.

    Returns
    -------
    float
        Milliseconds since 1970-01-01T00:00:00Z.
    """
    if isinstance(value, numbers.Real):
        return float(value)
    dtm = pd.to_datetime(value, utc=True)
    return (dtm - pd.Timestamp(0, tz="UTC")) / pd.Timedelta(1, "ms")


def _fixed(step_ms):
    def frame(timestamp):
        return to_millis(timestamp) / step_ms
    return frame


def _month_frame(timestamp):
    dtm = pd.to_datetime(round(to_millis(timestamp)), unit="ms", utc=True)
    month_start = dtm.normalize().replace(day=1)
    elapsed = (dtm - month_start) / pd.Timedelta(dtm.days_in_month, "D")
    return (dtm.year - 1970) * 12 + (dtm.month - 1) + elapsed


def _year_frame(timestamp):
    dtm = pd.to_datetime(round(to_millis(timestamp)), unit="ms", utc=True)
    year_start = dtm.normalize().replace(month=1, day=1)
    days = 366 if dtm.is_leap_year else 365
    return (dtm.year - 1970) + (dtm - year_start) / pd.Timedelta(days, "D")


@dataclass(frozen=True)
class IntervalConfig:
    """Temporal resolution of a tile.

    Attributes
    ----------
    id : str
        Interval identifier, e.g. ``"DAY"``.
    get_interval_frame : callable
        Maps a millisecond timestamp to a fractional frame number.
    """
    id: str
    get_interval_frame: Callable[[float], float]


CONFIG_BY_INTERVAL = {
    "HOUR": IntervalConfig("HOUR", _fixed(MS_PER_HOUR)),
    "DAY": IntervalConfig("DAY", _fixed(MS_PER_DAY)),
    "10DAYS": IntervalConfig("10DAYS", _fixed(10 * MS_PER_DAY)),
    "MONTH": IntervalConfig("MONTH", _month_frame),
    "YEAR": IntervalConfig("YEAR", _year_frame),
}


def get_interval_config(interval) -> IntervalConfig:
    """Look up the configuration of an interval, case-insensitively.

    Raises
    ------
    UnknownIntervalError
        If ``interval`` is not one of ``CONFIG_BY_INTERVAL``.
    """
    if isinstance(interval, IntervalConfig):
        return interval
    key = str(interval).upper()
    if key not in CONFIG_BY_INTERVAL:
        raise UnknownIntervalError(
            f"Unknown interval {interval!r}, expected one of {sorted(CONFIG_BY_INTERVAL)}")
    return CONFIG_BY_INTERVAL[key]


def get_interval_frame(timestamp, interval) -> float:
    """Return the fractional interval frame of ``timestamp``."""
    return get_interval_config(interval).get_interval_frame(timestamp)
