"""Tests for the fourwings.timeseries module."""

import numpy as np
import pytest

from fourwings.constants import NO_DATA_VALUE
from fourwings.errors import NegativeFrameSpanError, ShortRecordError
from fourwings.options import FourwingsOptions
from fourwings.timeseries import (CellTimeseriesBuilder, DecodedCell,
                                  get_cell_timeseries)

from conftest import encode_records


class TestDecodedCell:
    """Tests for the DecodedCell class."""

    def test_slots_start_empty(self):
        """A new cell should have one empty slot per sublayer."""
        cell = DecodedCell(4, 3)
        assert cell.index == 4
        assert len(cell) == 3
        assert list(cell) == [None, None, None]
        assert not cell.is_populated(0)

    def test_to_list_maps_nan_to_none(self):
        """Missing samples should surface as None."""
        cell = DecodedCell(1, 2)
        cell.sublayers[0] = np.array([1.0, np.nan])
        assert cell.to_list() == [[1.0, None], None]


class TestCellTimeseriesBuilder:
    """Tests for the CellTimeseriesBuilder class."""

    def test_single_cell_with_missing_sample(self, single_cell_stream):
        """The sentinel should leave a gap in the frame array."""
        builder = CellTimeseriesBuilder(1, 1, 0, 3)
        builder.add_stream(0, single_cell_stream)
        cells, indexes = builder.build()
        assert indexes == [1]
        assert cells[0].to_list() == [[5, None, 7]]

    def test_sentinel_is_never_written(self):
        """A sentinel should not be stored as zero or as its raw value."""
        builder = CellTimeseriesBuilder(1, 1, 0, 2)
        builder.add_stream(0, encode_records([(3, 0, 1, [NO_DATA_VALUE, 9])]))
        series = builder.cells[0][0]
        assert np.isnan(series[0])
        assert series[1] == 9

    def test_only_sentinels_keep_slot_empty(self):
        """A record with only sentinels should create the cell but not the slot."""
        builder = CellTimeseriesBuilder(1, 1, 0, 3)
        builder.add_stream(0, encode_records([(3, 0, 1, [NO_DATA_VALUE] * 2)]))
        assert builder.indexes == [3]
        assert builder.cells[0][0] is None

    def test_frame_offset_relative_to_tile_min(self):
        """Frames should be placed relative to the tile's first frame."""
        builder = CellTimeseriesBuilder(1, 1, 5, 9)
        builder.add_stream(0, encode_records([(2, 6, 7, [1, 2])]))
        assert builder.cells[0].to_list() == [[None, 1, 2, None]]

    def test_variable_record_lengths(self):
        """The cursor should jump by each record's own length."""
        stream = encode_records([
            (1, 0, 2, [1, 2, 3]),
            (2, 1, 1, [4]),
            (3, 0, 0, [5]),
        ])
        builder = CellTimeseriesBuilder(1, 1, 0, 3)
        builder.add_stream(0, stream)
        cells, indexes = builder.build()
        assert indexes == [1, 2, 3]
        assert cells[0].to_list() == [[1, 2, 3]]
        assert cells[1].to_list() == [[None, 4, None]]
        assert cells[2].to_list() == [[5, None, None]]

    def test_two_sublayers_same_order(self, two_sublayer_streams):
        """Cells repeated across sublayers should merge into one cell each."""
        builder = CellTimeseriesBuilder(2, 2, 0, 3)
        for s, stream in enumerate(two_sublayer_streams):
            builder.add_stream(s, stream)
        cells, indexes = builder.build()
        assert indexes == [10, 20]
        assert cells[0].to_list() == [[1, 2, None], [4, 5, None]]
        assert cells[1].to_list() == [[None, 3, None], [None, 6, None]]

    def test_two_sublayers_different_order(self):
        """Cells should merge by index even when sublayer orders differ."""
        builder = CellTimeseriesBuilder(2, 1, 0, 1)
        builder.add_stream(0, encode_records([(10, 0, 0, [1]), (20, 0, 0, [2])]))
        builder.add_stream(1, encode_records([(20, 0, 0, [3]), (10, 0, 0, [4])]))
        cells, indexes = builder.build()
        assert indexes == [10, 20]
        assert cells[0].to_list() == [[1], [4]]
        assert cells[1].to_list() == [[2], [3]]

    def test_new_cell_in_later_sublayer(self):
        """A cell first seen in a later sublayer should be appended last."""
        builder = CellTimeseriesBuilder(2, 1, 0, 1)
        builder.add_stream(0, encode_records([(10, 0, 0, [1])]))
        builder.add_stream(1, encode_records([(30, 0, 0, [2]), (10, 0, 0, [3])]))
        cells, indexes = builder.build()
        assert indexes == [10, 30]
        assert cells[1].to_list() == [None, [2]]

    def test_last_sample_wins_within_frame(self):
        """Several samples for one frame should keep the last non-sentinel."""
        builder = CellTimeseriesBuilder(1, 3, 0, 1)
        builder.add_stream(0, encode_records([(1, 0, 0, [7, 8, NO_DATA_VALUE])]))
        assert builder.cells[0].to_list() == [[8]]

    def test_scale_and_offset(self):
        """Raw samples should be transformed with scale and offset."""
        builder = CellTimeseriesBuilder(1, 1, 0, 2, scale=0.5, offset=1)
        builder.add_stream(0, encode_records([(1, 0, 1, [4, 10])]))
        assert builder.cells[0].to_list() == [[3.0, 6.0]]

    def test_custom_sentinel(self):
        """The sentinel value should be configurable."""
        builder = CellTimeseriesBuilder(1, 1, 0, 2, no_data_value=0)
        builder.add_stream(0, encode_records([(1, 0, 1, [0, 3])]))
        assert builder.cells[0].to_list() == [[None, 3]]

    def test_samples_outside_window_dropped(self):
        """Samples past the frame window should be dropped and counted."""
        builder = CellTimeseriesBuilder(1, 1, 0, 2)
        builder.add_stream(0, encode_records([(1, 1, 3, [1, 2, 3])]))
        assert builder.cells[0].to_list() == [[None, 1]]
        assert builder.dropped == 2

    def test_record_far_past_window_dropped(self):
        """A start frame beyond int64 should drop the record, not overflow."""
        builder = CellTimeseriesBuilder(1, 1, 0, 3)
        builder.add_stream(0, encode_records([(1, 2**63, 2**63, [5]),
                                              (2, 0, 0, [6])]))
        assert builder.indexes == [1, 2]
        assert builder.cells[0][0] is None
        assert builder.cells[1].to_list() == [[6, None, None]]
        assert builder.dropped == 1

    def test_record_before_window_dropped(self):
        """A record ending before the window should be dropped whole."""
        builder = CellTimeseriesBuilder(1, 1, 10, 12)
        builder.add_stream(0, encode_records([(1, 2, 4, [1, NO_DATA_VALUE, 3])]))
        assert builder.cells[0][0] is None
        assert builder.dropped == 2

    def test_frame_arrays_have_window_length(self):
        """Allocated arrays should cover exactly the frame window."""
        builder = CellTimeseriesBuilder(1, 1, 10, 17)
        builder.add_stream(0, encode_records([(1, 12, 12, [1])]))
        assert builder.cells[0][0].shape == (7,)

    def test_empty_stream(self):
        """An empty stream should add no cells."""
        builder = CellTimeseriesBuilder(1, 1, 0, 3)
        builder.add_stream(0, [])
        assert builder.build() == ([], [])

    def test_short_value_block_raises(self):
        """A value block past the stream end should raise ShortRecordError."""
        stream = encode_records([(1, 0, 0, [1])]) + [2, 0, 2, 5, 5]
        builder = CellTimeseriesBuilder(1, 1, 0, 3)
        with pytest.raises(ShortRecordError):
            builder.add_stream(0, stream)

    def test_truncated_header_raises(self):
        """A record cut inside its header should raise ShortRecordError."""
        builder = CellTimeseriesBuilder(1, 1, 0, 3)
        with pytest.raises(ShortRecordError):
            builder.add_stream(0, [1, 0])

    def test_negative_frame_span_raises(self):
        """An end frame before the start frame should raise NegativeFrameSpanError."""
        builder = CellTimeseriesBuilder(1, 1, 0, 3)
        with pytest.raises(NegativeFrameSpanError):
            builder.add_stream(0, [1, 3, 2, 5])


class TestGetCellTimeseries:
    """Tests for the get_cell_timeseries function."""

    def test_uses_options_window(self, single_cell_stream, day_window):
        """The frame window should come from the options interval."""
        options = FourwingsOptions(sublayers=1, **day_window)
        cells, indexes = get_cell_timeseries([single_cell_stream], options)
        assert indexes == [1]
        assert cells[0].to_list() == [[5, None, 7]]

    def test_indexes_unique(self, two_sublayer_streams, day_window):
        """Indexes should hold each distinct cell exactly once."""
        options = FourwingsOptions(sublayers=2, **day_window)
        cells, indexes = get_cell_timeseries(two_sublayer_streams, options)
        assert len(indexes) == len(set(indexes)) == 2
        assert [cell.index for cell in cells] == indexes

    def test_warns_on_stream_count_mismatch(self, single_cell_stream, day_window, caplog):
        """A stream count differing from sublayers should be logged."""
        options = FourwingsOptions(sublayers=2, **day_window)
        stream = encode_records([(1, 0, 0, [1, 2])])
        with caplog.at_level("WARNING"):
            get_cell_timeseries([stream], options)
        assert "sublayer streams" in caplog.text
