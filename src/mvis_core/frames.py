"""MVIS frame decoding and encoding."""
from __future__ import annotations

import struct
from dataclasses import dataclass

from mvis_core.errors import FormatError
from mvis_core.protocol import (
    COUNTER_LIMIT,
    FRAME_LEN,
    NAME_LEN,
    NEW_FILE_FMT,
    NEW_FILE_HEADER_LEN,
    PAYLOAD_LEN,
    TAG_FMT,
    TAG_IDLE,
    TAG_LEN,
    TAG_NEW_FILE,
)


@dataclass(frozen=True)
class Frame:
    """One fixed-size archive record.

    The tag is either a data counter (0-32767) or one of the two sentinels.
    Accessors for the new-file fields are only meaningful on new-file frames.
    """

    raw: bytes

    @classmethod
    def decode(cls, raw: bytes) -> "Frame":
        if len(raw) != FRAME_LEN:
            raise FormatError(f"frame must be {FRAME_LEN} bytes (found {len(raw)})")
        return cls(bytes(raw))

    @property
    def tag(self) -> int:
        return struct.unpack_from(TAG_FMT, self.raw)[0]

    @property
    def is_idle(self) -> bool:
        return self.tag == TAG_IDLE

    @property
    def is_new_file(self) -> bool:
        return self.tag == TAG_NEW_FILE

    @property
    def is_data(self) -> bool:
        return not (self.is_idle or self.is_new_file)

    @property
    def counter(self) -> int:
        return self.tag

    @property
    def payload(self) -> bytes:
        return self.raw[TAG_LEN:]

    @property
    def declared_size(self) -> int:
        return struct.unpack_from(NEW_FILE_FMT, self.raw)[1]

    @property
    def name(self) -> str:
        return self.raw[NEW_FILE_HEADER_LEN:].strip(b"\x00").decode("utf-8", "replace")


def encode_data_frame(counter: int, payload: bytes) -> bytes:
    """Build a data frame, null padding a short payload."""
    if not 0 <= counter < COUNTER_LIMIT:
        raise FormatError(f"invalid sequence counter ({counter})")
    if len(payload) > PAYLOAD_LEN:
        raise FormatError(f"payload exceeds {PAYLOAD_LEN} bytes ({len(payload)})")
    return struct.pack(TAG_FMT, counter) + payload.ljust(PAYLOAD_LEN, b"\x00")


def encode_raw_frame(tag: int, payload: bytes = b"") -> bytes:
    """Build a frame with an arbitrary tag (no counter range check)."""
    if len(payload) > PAYLOAD_LEN:
        raise FormatError(f"payload exceeds {PAYLOAD_LEN} bytes ({len(payload)})")
    return struct.pack(TAG_FMT, tag) + payload.ljust(PAYLOAD_LEN, b"\x00")


def encode_new_file_frame(name: str, size: int) -> bytes:
    encoded = name.encode("utf-8")
    if len(encoded) > NAME_LEN:
        raise FormatError(f"file name exceeds {NAME_LEN} bytes: {name}")
    return struct.pack(NEW_FILE_FMT, TAG_NEW_FILE, size) + encoded.ljust(NAME_LEN, b"\x00")


def encode_idle_frame() -> bytes:
    return encode_raw_frame(TAG_IDLE)
