"""Run options for the reconstruction pipeline."""
from __future__ import annotations

from dataclasses import dataclass

from mvis_core.protocol import DEFAULT_MAX_GAP

# Destination meaning "concatenate payloads to standard output"
STDOUT = "-"

FILL_BYTES: dict[str, int | None] = {
    "space": 0x20,
    "null": 0x00,
    "none": None,
}


@dataclass
class RunOptions:
    datadir: str = STDOUT
    meta: bool = False
    text: bool = False
    fill: str = "space"
    streaming: bool = False
    max_gap: int = DEFAULT_MAX_GAP

    @property
    def to_stdout(self) -> bool:
        return self.datadir == STDOUT

    @property
    def fill_byte(self) -> int | None:
        return FILL_BYTES[self.fill]
