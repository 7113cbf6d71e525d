"""XML descriptors for reconstructed MVIS files."""
from __future__ import annotations

import xml.etree.ElementTree as ET
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING

from mvis_core.protocol import BUILD_TIME, PROGRAM, VERSION

if TYPE_CHECKING:
    from mvis_list.assembler import AssemblyStats

DESCRIPTOR_SUFFIX = ".xml"


def _timestamp(when: datetime | None) -> str:
    if when is None:
        when = datetime.now(timezone.utc)
    return when.replace(microsecond=0).isoformat().replace("+00:00", "Z")


def descriptor(stats: AssemblyStats, when: datetime | None = None) -> ET.Element:
    root = ET.Element("mvis", {"program": PROGRAM, "version": VERSION, "build": BUILD_TIME})
    fields = [
        ("time", _timestamp(when)),
        ("filename", stats.path),
        ("md5", stats.md5),
        ("size", stats.size),
        ("blocks", stats.blocks),
        ("bytes", stats.bytes),
        ("missing", stats.missing),
    ]
    for tag, value in fields:
        ET.SubElement(root, tag).text = str(value)
    return root


def write_descriptor(stats: AssemblyStats, when: datetime | None = None) -> Path:
    """Write ``<output>.xml``; a partially written descriptor is removed."""
    out = Path(stats.path + DESCRIPTOR_SUFFIX)
    tree = ET.ElementTree(descriptor(stats, when))
    ET.indent(tree, space="  ")
    try:
        tree.write(out, encoding="utf-8", xml_declaration=True)
    except Exception:
        out.unlink(missing_ok=True)
        raise
    return out
