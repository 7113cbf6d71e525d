"""Layout of hadock MVIS archives.

Raw .dat captures start with a 4-byte magic and a reserved header, followed by
64-byte frames tagged with a 15-bit counter or a control sentinel.
"""

# Archive file header: [Magic(4) | Reserved(12)] = 16 bytes
MAGIC_ARCHIVE = b"MMA "
HEADER_SKIP_LEN = 12
FILE_HEADER_LEN = len(MAGIC_ARCHIVE) + HEADER_SKIP_LEN

# Frame: [Tag(2) | Body(62)] = 64 bytes
FRAME_LEN = 64
TAG_FMT = ">H"
TAG_LEN = 2
PAYLOAD_LEN = FRAME_LEN - TAG_LEN

# New-file frame: [Tag(2) | Size(4) | Name(58)]
NEW_FILE_FMT = ">HI"
NEW_FILE_HEADER_LEN = 6
NAME_LEN = FRAME_LEN - NEW_FILE_HEADER_LEN

# Sentinel tags
TAG_IDLE = 0xFFFE
TAG_NEW_FILE = 0xFFFF

# Sequence counters wrap in a 15-bit space
COUNTER_LIMIT = 32 << 10
COUNTER_MASK = COUNTER_LIMIT - 1

# Deltas above this are treated as a counter reset, not a gap
DEFAULT_MAX_GAP = COUNTER_LIMIT // 2

# Largest declared size rebuilt in memory; bigger files are streamed
MAX_BUFFERED_SIZE = 256 << 20

# Archives flagged as bad by the acquisition chain
BAD_SUFFIX = ".bad"

# Program identity written to metadata descriptors
PROGRAM = "mvis2list"
VERSION = "0.1.0"
BUILD_TIME = "2018-12-03 07:50:00"
