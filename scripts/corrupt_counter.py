import struct
import sys
from pathlib import Path

from mvis_core.protocol import FILE_HEADER_LEN, FRAME_LEN, TAG_FMT, TAG_IDLE, TAG_NEW_FILE

# Outside the 15-bit counter space but not a sentinel
BAD_COUNTER = 0x8001


def main():
    if len(sys.argv) not in (2, 3):
        print("Usage: corrupt_counter.py <archive> [nth data frame]")
        raise SystemExit(2)

    p = Path(sys.argv[1])
    nth = int(sys.argv[2]) if len(sys.argv) == 3 else 0
    b = bytearray(p.read_bytes())

    seen = 0
    for off in range(FILE_HEADER_LEN, len(b) - FRAME_LEN + 1, FRAME_LEN):
        (tag,) = struct.unpack_from(TAG_FMT, b, off)
        if tag in (TAG_IDLE, TAG_NEW_FILE):
            continue
        if seen == nth:
            struct.pack_into(TAG_FMT, b, off, BAD_COUNTER)
            p.write_bytes(bytes(b))
            print(f"Corrupted counter {tag} at offset {off} in {p}")
            return
        seen += 1

    print(f"No data frame #{nth} in {p}")
    raise SystemExit(2)


if __name__ == "__main__":
    main()
