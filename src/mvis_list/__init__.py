"""MVIS List - reassembly of logical files from archive frames."""
from .assembler import AssemblyStats, FileAssembler
from .config import RunOptions
from .sequencer import FrameSequencer, build_sequencer

__all__ = ["AssemblyStats", "FileAssembler", "FrameSequencer", "RunOptions", "build_sequencer"]
