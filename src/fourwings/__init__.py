"""Decoder for 4wings gridded timeseries tiles.

A 4wings tile packs, for each sublayer, the sparse timeseries of every
populated grid cell as a stream of varints. ``parse_fourwings`` turns the
payload into a ``DecodeResult`` of per-cell frame arrays.
"""

__version__ = "0.1.0"

from .constants import NO_DATA_VALUE, OFFSET_VALUE, SCALE_VALUE
from .errors import (FourwingsDecodeError, MalformedStreamError,
                     NegativeFrameSpanError, SegmentOutOfRangeError,
                     ShortRecordError, UnknownIntervalError)
from .intervals import CONFIG_BY_INTERVAL, get_interval_frame
from .options import FourwingsOptions
from .parse import DecodeResult, parse_fourwings
from .timeseries import CellTimeseriesBuilder, DecodedCell, get_cell_timeseries
from .loader import FourwingsLoader

__all__ = [
    "__version__",
    "NO_DATA_VALUE", "OFFSET_VALUE", "SCALE_VALUE",
    "FourwingsDecodeError", "MalformedStreamError", "NegativeFrameSpanError",
    "SegmentOutOfRangeError", "ShortRecordError", "UnknownIntervalError",
    "CONFIG_BY_INTERVAL", "get_interval_frame",
    "FourwingsOptions",
    "DecodeResult", "parse_fourwings",
    "CellTimeseriesBuilder", "DecodedCell", "get_cell_timeseries",
    "FourwingsLoader",
]
