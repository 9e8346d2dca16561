"""Decode 4wings tiles.

A tile payload is the concatenation of one buffer per sublayer. Each buffer
holds packed varints describing sparse cell timeseries, see
:mod:`fourwings.timeseries`.
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import List

import numpy as np
import xarray as xr

from .constants import PROTOBUF_FRAMING
from .options import FourwingsOptions
from .segments import split_buffers
from .timeseries import DecodedCell, get_cell_timeseries
from .varint import read_packed_field, read_packed_varints

logger = logging.getLogger(__name__)


@dataclass
class DecodeResult:
    """Cells decoded from one tile.

    Attributes
    ----------
    cols, rows : int
        Grid dimensions, as given in the options.
    indexes : list of int
        Cell indexes in first-seen order.
    cells : list of DecodedCell
        Decoded cells, parallel to ``indexes``.
    tile_min_frame, tile_max_frame : int
        Interval frame window covered by every frame array.
    sublayer_count : int
        Number of slots per cell.
    """
    cols: int
    rows: int
    indexes: List[int] = field(default_factory=list)
    cells: List[DecodedCell] = field(default_factory=list)
    tile_min_frame: int = 0
    tile_max_frame: int = 0
    sublayer_count: int = 0

    def __len__(self):
        return len(self.cells)

    def to_dict(self):
        """Return the result as plain Python types."""
        return {
            "cols": self.cols,
            "rows": self.rows,
            "indexes": list(self.indexes),
            "cells": [cell.to_list() for cell in self.cells],
        }

    def to_dataarray(self) -> xr.DataArray:
        """Return a dense ``(cell, sublayer, frame)`` array, NaN where empty.

        The ``frame`` coordinate holds absolute interval frames.
        """
        frames = np.arange(self.tile_min_frame, self.tile_max_frame)
        data = np.full((len(self.cells), self.sublayer_count, len(frames)), np.nan)
        for i, cell in enumerate(self.cells):
            for s, series in enumerate(cell):
                if series is not None:
                    data[i, s] = series
        return xr.DataArray(
            data,
            dims=("cell", "sublayer", "frame"),
            coords={
                "cell": np.asarray(self.indexes, dtype=np.int64),
                "sublayer": np.arange(self.sublayer_count),
                "frame": frames,
            },
            name="value",
            attrs={"cols": self.cols, "rows": self.rows},
        )

    def to_dataframe(self):
        """Return populated samples as a long ``pandas.DataFrame``.

        Columns are ``cell``, ``sublayer``, ``frame`` and ``value``.
        """
        return (self.to_dataarray()
                .to_dataframe()
                .dropna(subset=["value"])
                .reset_index()[["cell", "sublayer", "frame", "value"]])


def decode_segment(segment, framing):
    """Decode one sublayer buffer to its integer stream."""
    if framing == PROTOBUF_FRAMING:
        return read_packed_field(segment)
    return read_packed_varints(segment)


def decode_segments(segments, framing, max_workers=1):
    """Decode every sublayer buffer, keeping sublayer order.

    Parameters
    ----------
    segments : list of memoryview
        Sublayer buffers as returned by ``split_buffers``.
    framing : str
        ``"raw"`` or ``"protobuf"``.
    max_workers : int, optional
        Threads to decode with. 1 decodes sequentially.

    Returns
    -------
    list of numpy.ndarray
        One integer stream per segment.
    """
    if max_workers <= 1 or len(segments) <= 1:
        return [decode_segment(segment, framing) for segment in segments]
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        return list(executor.map(lambda segment: decode_segment(segment, framing),
                                 segments))


def parse_fourwings(payload, options) -> DecodeResult:
    """Decode a 4wings tile payload.

    Parameters
    ----------
    payload : bytes, bytearray or memoryview
        Concatenated sublayer buffers. Not modified.
    options : FourwingsOptions or dict
        Framing metadata. A dict is converted with
        ``FourwingsOptions.from_mapping``.

    Returns
    -------
    DecodeResult
        Decoded cells. Empty when ``options.buffers_length`` is empty.

    Raises
    ------
    FourwingsDecodeError
        If the payload is corrupt. No partial result is returned.
    """
    if not isinstance(options, FourwingsOptions):
        options = FourwingsOptions.from_mapping(options)
    tile_min_frame, tile_max_frame = options.frame_window()
    result = DecodeResult(
        cols=options.cols,
        rows=options.rows,
        tile_min_frame=tile_min_frame,
        tile_max_frame=tile_max_frame,
        sublayer_count=len(options.buffers_length),
    )
    if not options.buffers_length:
        logger.debug("Empty buffer length table, no data in tile")
        return result

    segments = split_buffers(payload, options.buffers_length)
    streams = decode_segments(segments, options.framing, options.max_workers)
    result.cells, result.indexes = get_cell_timeseries(streams, options)
    logger.debug(f"Decoded {len(result.cells)} cells from {len(streams)} sublayers")
    return result
