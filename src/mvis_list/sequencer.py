"""Routing of the frame stream to per-file assemblers."""
from __future__ import annotations

import enum
import logging
import sys
from pathlib import Path
from typing import Callable, Iterable

from mvis_core.errors import FormatError
from mvis_core.frames import Frame
from mvis_core.protocol import PAYLOAD_LEN
from mvis_list.assembler import AssemblyStats, FileAssembler
from mvis_list.config import RunOptions

log = logging.getLogger(__name__)

AssemblerFactory = Callable[[str, int], FileAssembler]


class State(enum.Enum):
    IDLE = "idle"
    WRITING = "writing"


class FrameSequencer:
    """Two-state machine splitting the stream into logical files.

    A new-file sentinel finalizes the active assembler, if any, and opens the
    next one. Data frames go to the active assembler; without one they are
    dropped. A bad counter aborts only the active file.
    """

    def __init__(
        self,
        factory: AssemblerFactory,
        on_finalize: Callable[[FileAssembler], None] | None = None,
        text: bool = False,
        logger: logging.Logger | None = None,
    ):
        self.factory = factory
        self.on_finalize = on_finalize
        self.text = text
        self.log = logger or log

        self.state = State.IDLE
        self.current: FileAssembler | None = None
        self.completed: list[AssemblyStats] = []
        self.aborted: list[str] = []
        self.dropped_frames = 0

    def feed(self, frame: Frame) -> None:
        if frame.is_idle:
            return
        if frame.is_new_file:
            self._start(frame.name, frame.declared_size)
            return

        if self.state is State.IDLE:
            self.dropped_frames += 1
            self.log.debug("dropping block %d: no file opened", frame.counter)
            return

        try:
            self.current.write(frame)
        except FormatError as e:
            self.log.error("error when writing %s: %s", self.current.path, e)
            self.current.abort()
            self.aborted.append(self.current.path)
            self.current = None
            self.state = State.IDLE

    def finish(self) -> list[AssemblyStats]:
        self._finalize()
        if self.dropped_frames:
            self.log.warning("%d blocks dropped outside of any file", self.dropped_frames)
        return self.completed

    def run(self, frames: Iterable[Frame]) -> list[AssemblyStats]:
        try:
            for frame in frames:
                self.feed(frame)
        except BaseException:
            if self.current is not None:
                self.current.abort()
            raise
        return self.finish()

    def _start(self, name: str, size: int) -> None:
        self._finalize()
        kind = "text" if self.text else "binary"
        self.log.info("==> %s (%s file, %d bytes, %d blocks)", name, kind, size, size // PAYLOAD_LEN)
        try:
            self.current = self.factory(name, size)
        except FormatError as e:
            self.log.error("skipping %s: %s", name, e)
            self.aborted.append(name)
            return
        self.state = State.WRITING

    def _finalize(self) -> None:
        if self.current is None:
            return
        current, self.current = self.current, None
        self.state = State.IDLE
        self.completed.append(current.close())
        if self.on_finalize is not None:
            self.on_finalize(current)


def output_path(datadir: str | Path, name: str) -> Path:
    """Place ``name`` under ``datadir``; names escaping it are rejected."""
    base = Path(datadir).resolve()
    out = (base / name.lstrip("/\\")).resolve()
    if base not in out.parents:
        raise FormatError(f"file name outside output directory: {name!r}")
    return out


def build_sequencer(options: RunOptions, logger: logging.Logger | None = None) -> FrameSequencer:
    """Wire assemblers and descriptor emission according to ``options``.

    Text mode always streams: trimmed blocks are concatenated, not placed at
    fixed offsets.
    """
    logger = logger or log

    def factory(name: str, size: int) -> FileAssembler:
        common = dict(
            fill=options.fill_byte,
            text=options.text,
            max_gap=options.max_gap,
            logger=logger,
        )
        if options.to_stdout:
            return FileAssembler(
                name, size, sys.stdout.buffer, path=name, streaming=True, close_sink=False, **common
            )
        out = output_path(options.datadir, name)
        out.parent.mkdir(parents=True, exist_ok=True)
        return FileAssembler(
            name, size, open(out, "wb"), path=str(out),
            streaming=options.streaming or options.text, **common
        )

    def emit(assembler: FileAssembler) -> None:
        if options.to_stdout:
            logger.info("%s: no descriptor for standard output", assembler.name)
            return
        assembler.write_metadata()

    return FrameSequencer(factory, on_finalize=emit if options.meta else None, text=options.text, logger=logger)
