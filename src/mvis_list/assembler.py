"""Logical file reconstruction from sequence-numbered data frames.

A FileAssembler owns one output file. Frames are placed according to their
counter delta; frames lost in transit leave gaps occupied by the fill byte.
Two layouts implement the gap policy:

- BufferedLayout keeps a pre-sized, pre-filled buffer and writes each payload
  at its absolute block offset. Gaps need no bookkeeping. Blocks ahead of
  the first received one count as missing. Declared sizes above
  MAX_BUFFERED_SIZE fall back to streaming.
- StreamingLayout appends payloads and moves the cursor forward over gaps,
  seeking when the sink allows it.
"""
from __future__ import annotations

import hashlib
import io
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import BinaryIO

from mvis_core.errors import FormatError
from mvis_core.frames import Frame
from mvis_core.protocol import DEFAULT_MAX_GAP, MAX_BUFFERED_SIZE, PAYLOAD_LEN
from mvis_core.sequence import is_valid_counter, missing_between
from mvis_list.metadata import write_descriptor

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class AssemblyStats:
    name: str
    path: str
    size: int
    blocks: int
    bytes: int
    missing: int
    anomalies: int
    md5: str
    extent: int


class BufferedLayout:
    """Pre-sized in-memory image of the output, flushed on close."""

    def __init__(self, sink: BinaryIO, size: int, fill: int | None):
        self.sink = sink
        self.size = size
        self.fill = fill
        # bytearray() is zero-initialised, so "no fill" skips the fill pass
        if fill is None:
            self.buf = bytearray(size)
        else:
            self.buf = bytearray([fill]) * size
        self.overflowed = False

    @property
    def extent(self) -> int:
        return len(self.buf)

    def place(self, index: int, missing: int, data: bytes) -> bytes:
        offset = index * PAYLOAD_LEN
        if offset < self.size:
            # Last block of the file: the tail past the declared size is padding
            data = data[: self.size - offset]
        end = offset + len(data)
        if end > len(self.buf):
            self.overflowed = True
            self.buf.extend(bytes([self.fill or 0]) * (end - len(self.buf)))
        self.buf[offset:end] = data
        return data

    def close(self) -> None:
        self.sink.write(self.buf)


class StreamingLayout:
    """Append-only output; gaps advance the cursor by whole payloads."""

    def __init__(self, sink: BinaryIO, fill: int | None):
        self.sink = sink
        self.fill = fill
        self._pos = 0
        self.overflowed = False
        try:
            self._seekable = sink.seekable()
        except (AttributeError, ValueError):
            self._seekable = False

    @property
    def extent(self) -> int:
        return self._pos

    def place(self, index: int, missing: int, data: bytes) -> bytes:
        if missing:
            self._skip(missing * PAYLOAD_LEN)
        self.sink.write(data)
        self._pos += len(data)
        return data

    def _skip(self, n: int) -> None:
        # A hole reads back as zeros; anything else has to be written out
        if self._seekable and not self.fill:
            self.sink.seek(n, io.SEEK_CUR)
        else:
            self.sink.write(bytes([self.fill or 0]) * n)
        self._pos += n

    def close(self) -> None:
        # Seeking past the end does not extend the file until the next write
        pass


class FileAssembler:
    """Reconstructs one logical file from the data frames routed to it."""

    def __init__(
        self,
        name: str,
        size: int,
        sink: BinaryIO,
        path: str = "",
        fill: int | None = 0x20,
        text: bool = False,
        streaming: bool = False,
        max_gap: int = DEFAULT_MAX_GAP,
        close_sink: bool = True,
        logger: logging.Logger | None = None,
    ):
        self.name = name
        self.size = size
        self.path = path or name
        self.text = text
        self.max_gap = max_gap
        self.log = logger or log

        self._sink = sink
        self._close_sink = close_sink
        if not streaming and size > MAX_BUFFERED_SIZE:
            self.log.warning(
                "%s: declared size %d exceeds buffer limit, streaming instead", name, size
            )
            streaming = True
        if streaming:
            self.layout = StreamingLayout(sink, fill)
        else:
            self.layout = BufferedLayout(sink, size, fill)
        self.digest = hashlib.md5()

        self.last: int | None = None
        self.index = 0
        self.blocks = 0
        self.bytes = 0
        self.missing = 0
        self.anomalies = 0
        self.stats: AssemblyStats | None = None
        self._warned_overflow = False

    def write(self, frame: Frame) -> int:
        counter = frame.counter
        if not is_valid_counter(counter):
            raise FormatError(f"invalid sequence counter ({counter})")
        if counter == self.last:
            return 0

        missing = missing_between(self.last, counter, self.max_gap)
        if self.last is None:
            index = counter
            if counter and isinstance(self.layout, BufferedLayout):
                # Blocks ahead of the first one stay at the fill byte
                self.missing += counter
                self.log.warning("missing blocks (%s): %d before first block", self.name, counter)
        elif missing is None:
            self.anomalies += 1
            self.log.warning(
                "counter reset (%s): %d -> %d, resynchronizing", self.name, self.last, counter
            )
            missing = 0
            index = self.index + 1
        else:
            index = self.index + missing + 1
            if missing:
                self.missing += missing
                self.log.warning(
                    "missing blocks (%s): %d (%d - %d)", self.name, missing, self.last, counter
                )
        self.last, self.index = counter, index

        data = frame.payload
        if self.text:
            data = data.rstrip(b"\x00")

        data = self.layout.place(index, missing, data)
        if self.layout.overflowed and not self._warned_overflow:
            self._warned_overflow = True
            self.log.warning("%s: block %d written beyond declared size (%d bytes)", self.name, index, self.size)

        self.digest.update(data)
        self.blocks += 1
        self.bytes += len(data)
        return len(data)

    def close(self) -> AssemblyStats:
        """Flush the output and seal the checksum."""
        if self.stats is not None:
            return self.stats
        try:
            self.layout.close()
            self._sink.flush()
        finally:
            self._release()
        self.stats = AssemblyStats(
            name=self.name,
            path=self.path,
            size=self.size,
            blocks=self.blocks,
            bytes=self.bytes,
            missing=self.missing,
            anomalies=self.anomalies,
            md5=self.digest.hexdigest(),
            extent=self.layout.extent,
        )
        return self.stats

    def abort(self) -> None:
        """Stop the file where it is: blocks so far are kept, no stats are sealed."""
        if self.stats is not None or self._sink.closed:
            return
        try:
            self.layout.close()
            self._sink.flush()
        finally:
            self._release()

    def _release(self) -> None:
        if self._close_sink and not self._sink.closed:
            self._sink.close()

    def write_metadata(self, when: datetime | None = None) -> Path:
        """Write the XML descriptor next to the output file."""
        return write_descriptor(self.close(), when=when)
