"""Raw archive writer used by the simulator and the tests."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable

from mvis_core.protocol import HEADER_SKIP_LEN, MAGIC_ARCHIVE


def write_archive(path: str | Path, frames: Iterable[bytes], header: bytes | None = None) -> Path:
    """Write a raw archive: magic, a 12-byte header region, then the frames."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if header is None:
        header = bytes(HEADER_SKIP_LEN)
    with open(path, "wb") as f:
        f.write(MAGIC_ARCHIVE)
        f.write(header)
        for frame in frames:
            f.write(frame)
        f.flush()
        os.fsync(f.fileno())
    return path
