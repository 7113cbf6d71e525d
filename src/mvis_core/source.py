from __future__ import annotations

import logging
from pathlib import Path
from typing import BinaryIO, Iterator, Sequence

from mvis_core.errors import FormatError
from mvis_core.frames import Frame
from mvis_core.protocol import FRAME_LEN, HEADER_SKIP_LEN, MAGIC_ARCHIVE

log = logging.getLogger(__name__)


class FrameSource:
    """One raw archive file: magic check, header skip, then 64-byte frames."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._f: BinaryIO | None = open(self.path, "rb")
        try:
            self._check_header()
        except BaseException:
            self.close()
            raise

    def _check_header(self) -> None:
        magic = self._f.read(len(MAGIC_ARCHIVE))
        if magic != MAGIC_ARCHIVE:
            raise FormatError(f"{self.path}: expected magic {MAGIC_ARCHIVE!r} (found: {magic!r})")
        skipped = self._f.read(HEADER_SKIP_LEN)
        if len(skipped) != HEADER_SKIP_LEN:
            raise FormatError(f"{self.path}: truncated archive header")

    def read_frame(self) -> Frame | None:
        """Next frame, or None once the file is exhausted."""
        if self._f is None:
            return None
        offset = self._f.tell()
        raw = self._f.read(FRAME_LEN)

        # Clean EOF
        if len(raw) == 0:
            return None

        # Torn frame
        if len(raw) < FRAME_LEN:
            raise FormatError(f"{self.path}: truncated frame at offset {offset} ({len(raw)} bytes)")

        return Frame(raw)

    def close(self) -> None:
        if self._f is not None:
            self._f.close()
            self._f = None

    def __enter__(self) -> "FrameSource":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class MultiFileStream:
    """An ordered archive file set read as one continuous frame stream.

    Idle frames and file boundaries are consumed without producing a frame:
    ``read_frame`` returns None for them and the caller retries until
    ``exhausted`` is set. Iterating the stream hides the retries.
    """

    def __init__(self, paths: Sequence[str | Path], logger: logging.Logger | None = None):
        self.log = logger or log
        self._pending = [Path(p) for p in paths]
        self._source: FrameSource | None = None
        self.current_path: Path | None = None
        self.frames_read = 0
        self.idle_frames = 0
        self.files_opened = 0
        self._advance()

    @property
    def exhausted(self) -> bool:
        return self._source is None and not self._pending

    def _advance(self) -> None:
        if self._source is not None:
            self._source.close()
            self._source = None
        if not self._pending:
            return
        path = self._pending.pop(0)
        self._source = FrameSource(path)
        self.current_path = path
        self.files_opened += 1
        self.log.debug("reading %s", path)

    def read_frame(self) -> Frame | None:
        if self._source is None:
            return None

        frame = self._source.read_frame()
        if frame is None:
            self._advance()
            return None

        if frame.is_idle:
            self.idle_frames += 1
            return None

        self.frames_read += 1
        return frame

    def __iter__(self) -> Iterator[Frame]:
        while not self.exhausted:
            frame = self.read_frame()
            if frame is not None:
                yield frame

    def close(self) -> None:
        if self._source is not None:
            self._source.close()
            self._source = None
        self._pending.clear()

    def __enter__(self) -> "MultiFileStream":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
