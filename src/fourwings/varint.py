"""Packed varint reader.

Each integer is stored as one or more bytes. The low 7 bits of every byte
carry payload, least significant group first, and the high bit is set on
every byte except the last one of an integer.
"""
import logging

import numpy as np

from .constants import PACKED_FIELD_NUMBER
from .errors import MalformedStreamError

logger = logging.getLogger(__name__)

# 10 groups of 7 bits cover a full uint64
MAX_VARINT_BYTES = 10

WIRE_VARINT = 0
WIRE_FIXED64 = 1
WIRE_LENGTH_DELIMITED = 2
WIRE_FIXED32 = 5


def _read_varint(buf, pos):
    """Read a single varint starting at ``pos``.

    Returns
    -------
    tuple of int
        (value, position of the next byte).
    """
    result = 0
    shift = 0
    start = pos
    end = len(buf)
    while True:
        if pos >= end:
            raise MalformedStreamError(
                f"Truncated varint starting at byte {start} of {end}")
        if pos - start >= MAX_VARINT_BYTES:
            raise MalformedStreamError(
                f"Varint starting at byte {start} exceeds {MAX_VARINT_BYTES} bytes")
        b = buf[pos]
        pos += 1
        result |= (b & 0x7F) << shift
        if (b & 0x80) == 0:
            if result >> 64:
                raise MalformedStreamError(
                    f"Varint starting at byte {start} does not fit in 64 bits")
            return result, pos
        shift += 7


def read_packed_varints(buffer) -> np.ndarray:
    """Decode a whole buffer of back to back varints.

    Parameters
    ----------
    buffer : bytes, bytearray or memoryview
        Encoded integers. The whole buffer is consumed.

    Returns
    -------
    numpy.ndarray
        The decoded integers as ``uint64``, in stream order.

    Raises
    ------
    MalformedStreamError
        If the buffer ends inside an integer or an integer overflows 64 bits.
    """
    buf = memoryview(buffer).cast("B")
    values = []
    pos = 0
    end = len(buf)
    while pos < end:
        value, pos = _read_varint(buf, pos)
        values.append(value)
    return np.array(values, dtype=np.uint64)


def read_packed_field(buffer, field=PACKED_FIELD_NUMBER) -> np.ndarray:
    """Decode the packed repeated varint field of a protobuf message.

    Sublayer buffers served by the 4wings API are protobuf messages whose
    first field holds the packed cell records. Other fields are skipped.
    When the field is repeated, the first occurrence is returned.

    Parameters
    ----------
    buffer : bytes, bytearray or memoryview
        Protobuf encoded message.
    field : int, optional
        Field number holding the packed integers, by default 1.

    Returns
    -------
    numpy.ndarray
        The decoded integers as ``uint64``. Empty if the field is absent.

    Raises
    ------
    MalformedStreamError
        On truncated tags, lengths or payloads, or unsupported wire types.
    """
    buf = memoryview(buffer).cast("B")
    pos = 0
    end = len(buf)
    while pos < end:
        tag, pos = _read_varint(buf, pos)
        number = tag >> 3
        wire_type = tag & 0x07
        if wire_type == WIRE_LENGTH_DELIMITED:
            length, pos = _read_varint(buf, pos)
            if pos + length > end:
                raise MalformedStreamError(
                    f"Field {number} declares {length} bytes at byte {pos}, "
                    f"only {end - pos} left")
            if number == field:
                return read_packed_varints(buf[pos:pos + length])
            pos += length
        elif wire_type == WIRE_VARINT:
            value, pos = _read_varint(buf, pos)
            if number == field:
                return np.array([value], dtype=np.uint64)
        elif wire_type == WIRE_FIXED64:
            pos += 8
        elif wire_type == WIRE_FIXED32:
            pos += 4
        else:
            raise MalformedStreamError(
                f"Unsupported wire type {wire_type} for field {number}")
        if pos > end:
            raise MalformedStreamError(f"Field {number} truncated at byte {end}")
    logger.debug(f"Field {field} not present in {end} byte message")
    return np.array([], dtype=np.uint64)
