"""Exceptions raised while decoding 4wings tiles.

Every decode failure is fatal for the tile being decoded: a corrupt tile
yields no cells rather than a partially populated result.
"""


class FourwingsDecodeError(ValueError):
    """Base class for all tile decoding failures."""


class MalformedStreamError(FourwingsDecodeError):
    """A packed integer is truncated or longer than 64 bits."""


class SegmentOutOfRangeError(FourwingsDecodeError):
    """The buffer length table points outside the payload."""


class ShortRecordError(FourwingsDecodeError):
    """A cell record reads past the end of its integer stream."""


class NegativeFrameSpanError(FourwingsDecodeError):
    """A cell record ends before it starts."""


class UnknownIntervalError(KeyError):
    """No interval configuration exists for the requested identifier."""
