"""Decode options for 4wings tiles."""
import math
from dataclasses import dataclass, field, fields
from typing import Optional, Sequence, Tuple

from . import config
from .constants import FRAMINGS
from .intervals import get_interval_config, to_millis

# Option names used by the JavaScript loaders
CAMEL_CASE_KEYS = {
    "buffersLength": "buffers_length",
    "minFrame": "min_frame",
    "maxFrame": "max_frame",
    "noDataValue": "no_data_value",
    "scaleValue": "scale_value",
    "offsetValue": "offset_value",
    "maxWorkers": "max_workers",
}


@dataclass
class FourwingsOptions:
    """Framing metadata needed to decode one tile.

    Fields left as ``None`` are filled from :mod:`fourwings.config`.

    Attributes
    ----------
    buffers_length : sequence of int
        Cumulative end offset of each sublayer buffer in the payload.
    cols, rows : int
        Grid dimensions, passed through to the result.
    min_frame, max_frame : float or datetime-like
        Bounds of the requested time window, in epoch milliseconds.
    interval : str
        Temporal resolution, one of ``intervals.CONFIG_BY_INTERVAL``.
    sublayers : int
        Number of values per frame in a cell record.
    framing : str, optional
        ``"raw"`` for bare packed varints, ``"protobuf"`` for buffers wrapped
        in a protobuf message.
    no_data_value, scale_value, offset_value : optional
        Sentinel and linear transform of raw samples.
    max_workers : int, optional
        Threads used to decode sublayer buffers.
    """
    buffers_length: Sequence[int] = field(default_factory=tuple)
    cols: int = 0
    rows: int = 0
    min_frame: float = 0
    max_frame: float = 0
    interval: str = "DAY"
    sublayers: int = 1
    framing: Optional[str] = None
    no_data_value: Optional[int] = None
    scale_value: Optional[float] = None
    offset_value: Optional[float] = None
    max_workers: Optional[int] = None

    def __post_init__(self):
        for name in ("framing", "no_data_value", "scale_value",
                     "offset_value", "max_workers"):
            if getattr(self, name) is None:
                setattr(self, name, config.get(name))
        if self.buffers_length is None:
            self.buffers_length = ()
        self.buffers_length = tuple(int(n) for n in self.buffers_length)
        self.min_frame = to_millis(self.min_frame)
        self.max_frame = to_millis(self.max_frame)
        self.sublayers = int(self.sublayers)
        self.max_workers = int(self.max_workers)
        if self.sublayers < 1:
            raise ValueError(f"sublayers must be >= 1, got {self.sublayers}")
        if self.framing not in FRAMINGS:
            raise ValueError(f"framing must be one of {FRAMINGS}, got {self.framing!r}")
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {self.max_workers}")
        if self.max_frame < self.min_frame:
            raise ValueError(
                f"max_frame ({self.max_frame}) precedes min_frame ({self.min_frame})")
        get_interval_config(self.interval)

    @classmethod
    def from_mapping(cls, mapping):
        """Build options from a dict, as passed to the JavaScript loaders.

        Accepts camelCase keys and an optional nested ``"fourwings"`` entry.
        Unknown keys are ignored.
        """
        mapping = mapping or {}
        mapping = dict(mapping.get("fourwings") or mapping)
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in mapping.items():
            key = CAMEL_CASE_KEYS.get(key, key)
            if key in known:
                kwargs[key] = value
        return cls(**kwargs)

    def frame_window(self) -> Tuple[int, int]:
        """Return ``(tile_min_interval_frame, tile_max_interval_frame)``."""
        interval = get_interval_config(self.interval)
        return (math.ceil(interval.get_interval_frame(self.min_frame)),
                math.ceil(interval.get_interval_frame(self.max_frame)))
