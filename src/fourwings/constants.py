"""Constants of the 4wings tile format."""

# Raw value reserved for "no sample" (2**32 - 1)
NO_DATA_VALUE = 4294967295
SCALE_VALUE = 1
OFFSET_VALUE = 0

# Positions inside a cell record: [cell, start, end, values...]
CELL_NUM_INDEX = 0
CELL_START_INDEX = 1
CELL_END_INDEX = 2
CELL_VALUES_START_INDEX = 3

# The encoder's length table leaves the final byte of the last segment out
LAST_SEGMENT_PADDING = 1

RAW_FRAMING = "raw"
PROTOBUF_FRAMING = "protobuf"
FRAMINGS = (RAW_FRAMING, PROTOBUF_FRAMING)

# Protobuf field carrying the packed integers of one sublayer
PACKED_FIELD_NUMBER = 1
