"""Shared pytest fixtures for fourwings tests."""

import tempfile
from pathlib import Path

import pytest

from fourwings.constants import NO_DATA_VALUE

MS_PER_DAY = 24 * 60 * 60 * 1000


def encode_varint(value):
    """Encode one unsigned integer as a varint."""
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def encode_stream(values):
    """Encode integers back to back."""
    return b"".join(encode_varint(v) for v in values)


def encode_records(records):
    """Flatten (cell, start, end, values) records into a stream."""
    stream = []
    for cell, start, end, values in records:
        stream.extend([cell, start, end, *values])
    return stream


def wrap_protobuf(packed, field=1):
    """Wrap packed bytes as a length-delimited protobuf field."""
    return encode_varint((field << 3) | 2) + encode_varint(len(packed)) + packed


def make_payload(streams, framing="raw"):
    """Build a tile payload and its cumulative length table."""
    buffers = []
    for stream in streams:
        packed = encode_stream(stream)
        buffers.append(wrap_protobuf(packed) if framing == "protobuf" else packed)
    lengths = []
    total = 0
    for buf in buffers:
        total += len(buf)
        lengths.append(total)
    return b"".join(buffers), lengths


@pytest.fixture
def temp_dir():
    """Provide a temporary directory that is cleaned up after the test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def single_cell_stream():
    """One cell covering frames 0-2 with a missing middle sample."""
    return encode_records([(1, 0, 2, [5, NO_DATA_VALUE, 7])])


@pytest.fixture
def two_sublayer_streams():
    """Two sublayers listing cells 10 and 20 in the same order."""
    return [
        encode_records([(10, 0, 1, [1, NO_DATA_VALUE, 2, NO_DATA_VALUE]),
                        (20, 1, 1, [3, NO_DATA_VALUE])]),
        encode_records([(10, 0, 1, [NO_DATA_VALUE, 4, NO_DATA_VALUE, 5]),
                        (20, 1, 1, [NO_DATA_VALUE, 6])]),
    ]


@pytest.fixture
def day_window():
    """Options for a three day window starting at the epoch."""
    return {
        "cols": 4,
        "rows": 3,
        "min_frame": 0,
        "max_frame": 3 * MS_PER_DAY,
        "interval": "DAY",
    }
