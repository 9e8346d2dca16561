"""Cell timeseries reconstruction.

Every sublayer stream is a flat sequence of cell records::

    [cell_index, start_frame, end_frame, v0, v1, ..., vk-1]

with ``k = (end_frame - start_frame + 1) * sublayers``. Records have no
fixed stride, so the cursor jumps by the size of each record once its end
frame is known. Values in stream ``s`` always land in sublayer slot ``s``
of their cell, at frame offset ``start_frame - tile_min + j // sublayers``.
"""
import logging

import numpy as np

from .constants import (CELL_END_INDEX, CELL_NUM_INDEX, CELL_START_INDEX,
                        CELL_VALUES_START_INDEX, NO_DATA_VALUE, OFFSET_VALUE,
                        SCALE_VALUE)
from .errors import NegativeFrameSpanError, ShortRecordError

logger = logging.getLogger(__name__)


class DecodedCell:
    """Timeseries of one grid cell, one slot per sublayer.

    A slot is ``None`` until a sample is written to it, then a float array
    covering the tile's frame window with ``NaN`` for missing samples.
    """

    def __init__(self, index, sublayer_count):
        self.index = index
        self.sublayers = [None] * sublayer_count

    def __getitem__(self, sublayer):
        return self.sublayers[sublayer]

    def __len__(self):
        return len(self.sublayers)

    def __iter__(self):
        return iter(self.sublayers)

    def __repr__(self):
        populated = [i for i, s in enumerate(self.sublayers) if s is not None]
        return f"DecodedCell(index={self.index}, populated={populated})"

    def is_populated(self, sublayer):
        return self.sublayers[sublayer] is not None

    def to_list(self):
        """Return the slots as nested lists, with ``None`` for missing samples."""
        return [None if series is None
                else [None if np.isnan(v) else float(v) for v in series]
                for series in self.sublayers]


class CellTimeseriesBuilder:
    """Accumulate decoded cells across the sublayer streams of one tile.

    Parameters
    ----------
    stream_count : int
        Number of sublayer streams, i.e. slots per cell.
    sublayers : int
        Values per covered frame in a record.
    tile_min_frame, tile_max_frame : int
        Interval frame window of the tile. Frame arrays have
        ``tile_max_frame - tile_min_frame`` entries.
    no_data_value : int, optional
        Raw value marking a missing sample.
    scale, offset : float, optional
        Linear transform applied to raw samples.

    Attributes
    ----------
    cells : list of DecodedCell
        Cells in first-seen order.
    indexes : list of int
        Cell indexes parallel to ``cells``.
    dropped : int
        Samples that fell outside the frame window.
    """

    def __init__(self, stream_count, sublayers, tile_min_frame, tile_max_frame,
                 no_data_value=NO_DATA_VALUE, scale=SCALE_VALUE, offset=OFFSET_VALUE):
        self.stream_count = stream_count
        self.sublayers = sublayers
        self.tile_min_frame = tile_min_frame
        self.frame_count = max(tile_max_frame - tile_min_frame, 0)
        self.no_data_value = no_data_value
        self.scale = scale
        self.offset = offset
        self.cells = []
        self.indexes = []
        self.dropped = 0
        self._by_index = {}

    def cell(self, cell_index):
        """Return the cell for ``cell_index``, appending it if new."""
        cell = self._by_index.get(cell_index)
        if cell is None:
            cell = DecodedCell(cell_index, self.stream_count)
            self._by_index[cell_index] = cell
            self.cells.append(cell)
            self.indexes.append(cell_index)
        return cell

    def add_stream(self, sublayer_index, stream):
        """Walk one sublayer stream and merge its records.

        Raises
        ------
        ShortRecordError
            If a record header or value block runs past the stream end.
        NegativeFrameSpanError
            If a record's end frame precedes its start frame.
        """
        stream = np.asarray(stream, dtype=np.uint64)
        size = len(stream)
        pos = 0
        records = 0
        while pos < size:
            values_start = pos + CELL_VALUES_START_INDEX
            if values_start > size:
                raise ShortRecordError(
                    f"Sublayer {sublayer_index}: record header at {pos} "
                    f"truncated, stream has {size} values")
            cell_index = int(stream[pos + CELL_NUM_INDEX])
            start_frame = int(stream[pos + CELL_START_INDEX])
            end_frame = int(stream[pos + CELL_END_INDEX])
            if end_frame < start_frame:
                raise NegativeFrameSpanError(
                    f"Sublayer {sublayer_index}: cell {cell_index} at {pos} "
                    f"ends at frame {end_frame} before {start_frame}")
            values_end = values_start + (end_frame - start_frame + 1) * self.sublayers
            if values_end > size:
                raise ShortRecordError(
                    f"Sublayer {sublayer_index}: cell {cell_index} at {pos} "
                    f"needs {values_end} values, stream has {size}")
            cell = self.cell(cell_index)
            raw = stream[values_start:values_end]
            if (start_frame - self.tile_min_frame >= self.frame_count
                    or end_frame < self.tile_min_frame):
                outside = int((raw != self.no_data_value).sum())
                self.dropped += outside
                logger.debug(f"Cell {cell_index}: record at {pos} outside frame "
                             f"window, {outside} samples dropped")
            else:
                self._write(cell, sublayer_index, start_frame, raw)
            pos = values_end
            records += 1
        logger.debug(f"Sublayer {sublayer_index}: {records} records, {size} values")

    def _write(self, cell, sublayer_index, start_frame, raw):
        present = raw != self.no_data_value
        if not present.any():
            return
        series = cell.sublayers[sublayer_index]
        if series is None:
            series = np.full(self.frame_count, np.nan)
            cell.sublayers[sublayer_index] = series

        offsets = (start_frame - self.tile_min_frame
                   + np.arange(len(raw)) // self.sublayers)[present]
        values = raw[present].astype(np.float64) * self.scale + self.offset

        inside = (offsets >= 0) & (offsets < self.frame_count)
        if not inside.all():
            outside = int((~inside).sum())
            self.dropped += outside
            logger.debug(f"Cell {cell.index}: {outside} samples outside frame window")
            offsets, values = offsets[inside], values[inside]

        if self.sublayers > 1:
            # Keep the last sample written to each frame
            _, first_reversed = np.unique(offsets[::-1], return_index=True)
            last = len(offsets) - 1 - first_reversed
            offsets, values = offsets[last], values[last]
        series[offsets] = values

    def build(self):
        """Return ``(cells, indexes)`` in first-seen order."""
        if self.dropped:
            logger.debug(f"{self.dropped} samples dropped outside the frame window")
        return self.cells, self.indexes


def get_cell_timeseries(streams, options):
    """Rebuild the per-cell timeseries of a tile from its sublayer streams.

    Parameters
    ----------
    streams : list of array-like
        One decoded integer stream per sublayer, in sublayer order.
    options : FourwingsOptions
        Frame window, interval, sublayer count and value transform.

    Returns
    -------
    tuple of list
        (cells, indexes) where ``indexes[i]`` is the cell index of
        ``cells[i]``, in first-seen order across streams.
    """
    if len(streams) != options.sublayers:
        logger.warning(f"{len(streams)} sublayer streams for "
                       f"sublayers={options.sublayers}")
    tile_min_frame, tile_max_frame = options.frame_window()
    builder = CellTimeseriesBuilder(
        len(streams), options.sublayers, tile_min_frame, tile_max_frame,
        no_data_value=options.no_data_value,
        scale=options.scale_value,
        offset=options.offset_value,
    )
    for sublayer_index, stream in enumerate(streams):
        builder.add_stream(sublayer_index, stream)
    return builder.build()
