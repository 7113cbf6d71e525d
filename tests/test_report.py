import pandas as pd

from mvis_core.archive import write_archive
from mvis_core.frames import encode_data_frame, encode_idle_frame, encode_new_file_frame, encode_raw_frame
from mvis_core.protocol import PAYLOAD_LEN
from mvis_core.source import MultiFileStream
from mvis_report.export import export_blocks
from mvis_report.report import DiagnosticsReporter

A = b"A" * PAYLOAD_LEN
B = b"B" * PAYLOAD_LEN


def report(paths, **kw):
    lines = []
    reporter = DiagnosticsReporter(echo=lines.append, **kw)
    with MultiFileStream(paths) as stream:
        summary = reporter.run(stream)
    return summary, lines, reporter


def test_report_counts_missing_blocks(tmp_path):
    a = write_archive(tmp_path / "a_001.dat", [
        encode_new_file_frame("X", 124),
        encode_idle_frame(),
        encode_data_frame(0, A),
        encode_data_frame(2, B),
    ])
    b = write_archive(tmp_path / "b_001.dat", [
        encode_new_file_frame("Y", 62 * 3),
        encode_data_frame(7, A),
        encode_idle_frame(),
        encode_data_frame(8, A),
        encode_data_frame(12, A),
    ])

    summary, lines, _ = report([a, b])

    assert summary.blocks == 5
    assert summary.missing == 1 + 3
    assert summary.files == [("X", 124), ("Y", 186)]
    assert summary.size == 7 * 64
    assert lines == ["5 blocks (4 missing), 0KB"]


def test_listing_shows_headers_and_blocks_but_not_idle(tmp_path):
    a = write_archive(tmp_path / "a_001.dat", [
        encode_new_file_frame("X", 124),
        encode_idle_frame(),
        encode_data_frame(0, A),
        encode_idle_frame(),
        encode_data_frame(1, B),
    ])

    _, lines, _ = report([a], list_blocks=True)

    assert lines[0] == "X (124 bytes)"
    assert lines[1] == "    0 (0000): " + A.hex()
    assert lines[2] == "    1 (0001): " + B.hex()
    assert lines[3] == "2 blocks (0 missing), 0KB"
    assert len(lines) == 4


def test_counter_resets_on_new_file(tmp_path):
    a = write_archive(tmp_path / "a_001.dat", [
        encode_new_file_frame("X", 124),
        encode_data_frame(40, A),
        encode_new_file_frame("Y", 124),
        encode_data_frame(0, A),
        encode_data_frame(1, A),
    ])

    summary, _, _ = report([a])
    assert summary.missing == 0


def test_rows_exported_to_parquet(tmp_path):
    a = write_archive(tmp_path / "a_001.dat", [
        encode_new_file_frame("X", 124),
        encode_data_frame(0, A),
        encode_data_frame(0, A),
        encode_data_frame(3, B),
        encode_raw_frame(0x9000, B),
    ])

    summary, _, reporter = report([a], collect=True)
    assert summary.invalid == 1

    out = tmp_path / "listing" / "blocks.parquet"
    assert export_blocks(reporter.rows, out)

    df = pd.read_parquet(out)
    assert list(df.columns) == ["archive", "file", "counter", "missing_before", "status"]
    assert df["status"].tolist() == ["OK", "DUPLICATE", "GAP", "INVALID"]
    assert df["missing_before"].tolist() == [0, 0, 2, 0]
    assert set(df["archive"]) == {str(a)}
    assert set(df["file"]) == {"X"}


def test_empty_listing_not_exported(tmp_path):
    out = tmp_path / "blocks.parquet"
    assert not export_blocks([], out)
    assert not out.exists()
