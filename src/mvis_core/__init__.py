"""MVIS Core - archive protocol, frame stream and archive selection."""
from .errors import FormatError
from .frames import Frame
from .grouping import group_archives
from .source import FrameSource, MultiFileStream

__all__ = ["FormatError", "Frame", "FrameSource", "MultiFileStream", "group_archives"]
