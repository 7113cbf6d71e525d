"""Read-only block report over an archive frame stream."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable

import click

from mvis_core.protocol import DEFAULT_MAX_GAP, FRAME_LEN
from mvis_core.sequence import is_valid_counter, missing_between
from mvis_core.source import MultiFileStream

log = logging.getLogger(__name__)


@dataclass
class ReportSummary:
    blocks: int = 0
    missing: int = 0
    invalid: int = 0
    resets: int = 0
    size: int = 0
    files: list[tuple[str, int]] = field(default_factory=list)

    def line(self) -> str:
        return f"{self.blocks} blocks ({self.missing} missing), {self.size >> 10}KB"


class DiagnosticsReporter:
    """Applies the reconstruction gap rule without writing any output.

    With ``list_blocks`` every file header and data block is printed. With
    ``collect`` one row per frame is kept for export.
    """

    def __init__(
        self,
        list_blocks: bool = False,
        collect: bool = False,
        max_gap: int = DEFAULT_MAX_GAP,
        echo: Callable[[str], None] = click.echo,
        logger: logging.Logger | None = None,
    ):
        self.list_blocks = list_blocks
        self.collect = collect
        self.max_gap = max_gap
        self.echo = echo
        self.log = logger or log
        self.rows: list[dict] = []

    def run(self, stream: MultiFileStream) -> ReportSummary:
        summary = ReportSummary()
        name = ""
        prev: int | None = None

        for frame in stream:
            summary.size += FRAME_LEN
            archive = str(stream.current_path) if stream.current_path else ""

            if frame.is_new_file:
                name, size = frame.name, frame.declared_size
                summary.files.append((name, size))
                prev = None
                if self.list_blocks:
                    self.echo(f"{name} ({size} bytes)")
                continue

            summary.blocks += 1
            counter = frame.counter
            if not is_valid_counter(counter):
                summary.invalid += 1
                self.log.warning("invalid sequence counter (%s): %d", name, counter)
                self._row(archive, name, counter, 0, "INVALID")
                continue

            missing = missing_between(prev, counter, self.max_gap)
            status = "OK"
            if missing is None:
                summary.resets += 1
                self.log.warning("counter reset (%s): %d -> %d", name, prev, counter)
                missing, status = 0, "RESET"
            elif missing:
                self.log.warning("missing blocks (%s): %d (%d - %d)", name, missing, prev, counter)
                summary.missing += missing
                status = "GAP"
            elif counter == prev:
                status = "DUPLICATE"
            prev = counter

            self._row(archive, name, counter, missing, status)
            if self.list_blocks:
                self.echo(f"{counter:5d} ({frame.raw[:2].hex()}): {frame.payload.hex()}")

        self.echo(summary.line())
        return summary

    def _row(self, archive: str, name: str, counter: int, missing: int, status: str) -> None:
        if not self.collect:
            return
        self.rows.append(
            {
                "archive": archive,
                "file": name,
                "counter": counter,
                "missing_before": missing,
                "status": status,
            }
        )
