"""Split a concatenated tile payload into per-sublayer buffers."""
import logging

from .constants import LAST_SEGMENT_PADDING
from .errors import SegmentOutOfRangeError

logger = logging.getLogger(__name__)


def segment_bounds(buffers_length, payload_size):
    """Compute the ``[start, end)`` byte range of every sublayer segment.

    Segment ``i`` starts where segment ``i - 1`` ends (0 for the first one)
    and ends at ``buffers_length[i]``. The last segment is extended by
    ``LAST_SEGMENT_PADDING`` bytes, clamped to the payload size.

    Parameters
    ----------
    buffers_length : sequence of int
        Cumulative end offset of each segment.
    payload_size : int
        Size of the payload in bytes.

    Returns
    -------
    list of tuple of int
        One (start, end) pair per segment.

    Raises
    ------
    SegmentOutOfRangeError
        If an offset is negative, decreases, or exceeds the payload size.
    """
    bounds = []
    last = len(buffers_length) - 1
    for index, length in enumerate(buffers_length):
        start = 0 if index == 0 else int(buffers_length[index - 1])
        end = int(length)
        if end < start or start < 0:
            raise SegmentOutOfRangeError(
                f"Segment {index} has decreasing bounds [{start}, {end})")
        if end > payload_size:
            raise SegmentOutOfRangeError(
                f"Segment {index} ends at byte {end}, payload has {payload_size}")
        if index == last:
            end = min(end + LAST_SEGMENT_PADDING, payload_size)
        bounds.append((start, end))
    return bounds


def split_buffers(payload, buffers_length):
    """Split ``payload`` into read-only views, one per sublayer.

    Parameters
    ----------
    payload : bytes, bytearray or memoryview
        Concatenated sublayer buffers.
    buffers_length : sequence of int
        Cumulative end offset of each segment.

    Returns
    -------
    list of memoryview
        Read-only views into ``payload``; no bytes are copied.
    """
    view = memoryview(payload).cast("B").toreadonly()
    segments = []
    for index, (start, end) in enumerate(segment_bounds(buffers_length, len(view))):
        logger.debug(f"Segment {index}: bytes [{start}, {end})")
        segments.append(view[start:end])
    return segments
