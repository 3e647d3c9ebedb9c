BITS_PER_PASS = 4
BIN_COUNT = 1 << BITS_PER_PASS
DIGIT_MASK = BIN_COUNT - 1
KEY_BITS = 32
PASS_COUNT = KEY_BITS // BITS_PER_PASS
ELEMENTS_PER_THREAD = 4

WORKGROUP_SIZE = 256
MIN_WORKGROUP_SIZE = BIN_COUNT
# Scatter packs four 8-bit lane counters into one u32
MAX_WORKGROUP_SIZE = 256

HIERARCHY_LEVELS = 1
MAX_BUFFER_BYTES = 1 << 31

UINT32_MAX = 0xFFFFFFFF
PREVIEW_LENGTH = 300
