"""Archive selection: retransmission dedup and batch UPI resolution."""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable, Iterator

from mvis_core.errors import FormatError
from mvis_core.protocol import BAD_SUFFIX

log = logging.getLogger(__name__)

# Archive basenames start with a 5-character channel prefix before the UPI
UPI_OFFSET = 5


def upi_prefix(path: str) -> str:
    """Everything before the final underscore-delimited segment."""
    ix = path.rfind("_")
    if ix < 0:
        raise FormatError(f"invalid filename: {path}")
    return path[:ix]


def group_archives(
    paths: Iterable[str | Path],
    keep_bad: bool = False,
    logger: logging.Logger | None = None,
) -> tuple[str, ...]:
    """Ordered archive set keeping only the latest retransmission per UPI prefix.

    Paths are sorted; consecutive paths sharing a prefix are successive
    retransmissions of one acquisition window and only the last one survives.
    """
    logger = logger or log
    ordered = sorted({str(p) for p in paths})
    if not keep_bad:
        ordered = [p for p in ordered if not p.endswith(BAD_SUFFIX)]

    selected: list[str] = []
    prefix: str | None = None
    for p in ordered:
        current = upi_prefix(p)
        if selected and current == prefix:
            logger.debug("superseded retransmission: %s", selected[-1])
            selected[-1] = p
        else:
            selected.append(p)
        prefix = current

    if not selected:
        raise FormatError("no valid files provided")
    return tuple(selected)


def read_upi_list(path: str | Path) -> list[str]:
    """UPIs listed one per line; blank lines and '#' comments are skipped."""
    upis: list[str] = []
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            line = line.rstrip("\r\n")
            if not line or line.startswith("#"):
                continue
            upis.append(line)
    if not upis:
        raise FormatError("no upi provided")
    return upis


def walk_archives(base: str | Path, upis: Iterable[str]) -> Iterator[str]:
    """Lazily yield archive paths under ``base`` matching one of ``upis``.

    Traversal is sorted so that the files of one matched UPI arrive
    contiguously. Once a UPI matched, following paths containing it are
    yielded without re-matching.
    """
    wanted = sorted(upis)
    prefix = ""
    for root, dirs, files in os.walk(base):
        dirs.sort()
        for name in sorted(files):
            if name.endswith(BAD_SUFFIX):
                continue
            p = os.path.join(root, name)
            if not wanted or (prefix and prefix in p):
                yield p
                continue
            prefix = ""
            for upi in wanted:
                if name[UPI_OFFSET:].startswith(upi):
                    prefix = upi
                    yield p
                    break
