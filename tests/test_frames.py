import pytest

from mvis_core.archive import write_archive
from mvis_core.errors import FormatError
from mvis_core.frames import (
    Frame,
    encode_data_frame,
    encode_idle_frame,
    encode_new_file_frame,
    encode_raw_frame,
)
from mvis_core.protocol import FRAME_LEN, PAYLOAD_LEN
from mvis_core.sequence import counter_diff, missing_between
from mvis_core.source import FrameSource, MultiFileStream


def test_new_file_frame_fields():
    f = Frame.decode(encode_new_file_frame("listing/X.lst", 124))
    assert f.is_new_file and not f.is_data
    assert f.declared_size == 124
    assert f.name == "listing/X.lst"


def test_data_and_idle_frames():
    f = Frame.decode(encode_data_frame(7, b"abc"))
    assert f.is_data
    assert f.counter == 7
    assert len(f.payload) == PAYLOAD_LEN
    assert f.payload.rstrip(b"\x00") == b"abc"
    assert Frame.decode(encode_idle_frame()).is_idle


def test_encoders_reject_oversized_input():
    with pytest.raises(FormatError):
        encode_data_frame(1, b"x" * (PAYLOAD_LEN + 1))
    with pytest.raises(FormatError):
        encode_data_frame(32768, b"")
    with pytest.raises(FormatError):
        encode_new_file_frame("n" * 59, 0)


def test_counter_arithmetic_wraps():
    assert counter_diff(0, 32767) == 1
    assert missing_between(32767, 0) == 0
    assert missing_between(10, 13) == 2
    assert missing_between(10, 10) == 0
    assert missing_between(None, 500) == 0
    # Backward jump is a reset, not a 32k gap
    assert missing_between(101, 5) is None


def test_bad_magic_is_format_error(tmp_path):
    p = tmp_path / "x_001.dat"
    p.write_bytes(b"NOPE" + bytes(12) + encode_idle_frame())
    with pytest.raises(FormatError, match="expected magic"):
        FrameSource(p)


def test_truncated_header_is_format_error(tmp_path):
    p = tmp_path / "x_001.dat"
    p.write_bytes(b"MMA " + bytes(5))
    with pytest.raises(FormatError):
        FrameSource(p)


def test_torn_frame_is_format_error(tmp_path):
    p = write_archive(tmp_path / "x_001.dat", [encode_data_frame(0, b"a")])
    with open(p, "ab") as f:
        f.write(b"\x00" * 10)

    with FrameSource(p) as src:
        assert src.read_frame().counter == 0
        with pytest.raises(FormatError, match="truncated frame"):
            src.read_frame()


def test_empty_archive_reads_nothing(tmp_path):
    p = write_archive(tmp_path / "x_001.dat", [])
    with FrameSource(p) as src:
        assert src.read_frame() is None


def test_stream_chains_files_and_hides_idle(tmp_path):
    a = write_archive(tmp_path / "a_001.dat", [
        encode_new_file_frame("X", 124),
        encode_idle_frame(),
        encode_data_frame(0, b"A" * PAYLOAD_LEN),
    ])
    b = write_archive(tmp_path / "b_001.dat", [
        encode_idle_frame(),
        encode_idle_frame(),
        encode_data_frame(1, b"B" * PAYLOAD_LEN),
    ])

    with MultiFileStream([a, b]) as stream:
        frames = list(stream)
        assert stream.exhausted
        assert stream.files_opened == 2
        assert stream.idle_frames == 3
        assert stream.frames_read == 3

    assert [f.tag for f in frames] == [0xFFFF, 0, 1]
    assert all(len(f.raw) == FRAME_LEN for f in frames)


def test_stream_read_frame_zero_progress(tmp_path):
    a = write_archive(tmp_path / "a_001.dat", [encode_idle_frame(), encode_data_frame(3, b"")])
    stream = MultiFileStream([a])
    assert stream.read_frame() is None
    assert stream.read_frame().counter == 3
    # End of the last file
    assert stream.read_frame() is None
    assert stream.exhausted
    assert stream.read_frame() is None


def test_raw_frame_with_out_of_range_tag_is_data():
    f = Frame.decode(encode_raw_frame(0x8001))
    assert f.is_data
    assert f.counter == 0x8001
