"""mvis2list - MVIS archive frames to listing files."""
from __future__ import annotations

import logging
from typing import Sequence

import click

from mvis_core.grouping import group_archives, read_upi_list, walk_archives
from mvis_core.logs import setup_logging
from mvis_core.protocol import BUILD_TIME, PROGRAM, VERSION
from mvis_core.source import MultiFileStream
from mvis_list.assembler import AssemblyStats
from mvis_list.config import FILL_BYTES, STDOUT, RunOptions
from mvis_list.sequencer import build_sequencer
from mvis_report.report import DiagnosticsReporter, ReportSummary

EPILOG = """\b
Examples:

\b
# read dat files and write listing files under /tmp without metadata
$ mvis2list --datadir /tmp /var/hdk/51/2018/23/30/*dat

\b
# paths from find, XML descriptors next to the listing files
$ find /var/hdk/51/2018 -type f -name '*dat' | mvis2list --datadir /tmp --meta

\b
# same, but write the listings to stdout
$ find /var/hdk/51/2018/23/30 -type f -name '*dat' | mvis2list --datadir -

\b
# run with a list of UPI in a flat file
$ mvis2list --datadir /tmp --meta --fill null --batch /storage/archives/ ~/upi-285.txt
"""


def resolve_archives(paths: Sequence[str], batch: bool, keep: bool, logger: logging.Logger) -> tuple[str, ...]:
    """Turn the command-line inputs into the ordered archive set."""
    if batch:
        if not paths or len(paths) > 2:
            raise click.UsageError("--batch expects BASE_DIR [UPI_FILE]")
        upis = read_upi_list(paths[1]) if len(paths) == 2 else []
        candidates = list(walk_archives(paths[0], upis))
        logger.debug("%d archives matched under %s", len(candidates), paths[0])
        return group_archives(candidates, keep_bad=keep, logger=logger)

    if not paths:
        stdin = click.get_text_stream("stdin")
        paths = [line.strip() for line in stdin if line.strip()]
    return group_archives(paths, keep_bad=keep, logger=logger)


def dump_files(archives: Sequence[str], options: RunOptions, logger: logging.Logger) -> list[AssemblyStats]:
    sequencer = build_sequencer(options, logger=logger)
    with MultiFileStream(archives, logger=logger) as stream:
        results = sequencer.run(stream)
    for stats in results:
        logger.debug(
            "%s: %d blocks, %d bytes, %d missing, md5 %s",
            stats.path, stats.blocks, stats.bytes, stats.missing, stats.md5,
        )
    for name in sequencer.aborted:
        logger.warning("%s: aborted, output left incomplete", name)
    return results


def list_blocks(archives: Sequence[str], list_all: bool, logger: logging.Logger) -> ReportSummary:
    reporter = DiagnosticsReporter(list_blocks=list_all, logger=logger)
    with MultiFileStream(archives, logger=logger) as stream:
        return reporter.run(stream)


@click.command(epilog=EPILOG)
@click.argument("paths", nargs=-1)
@click.option("--datadir", default=STDOUT, show_default=True, envvar="MVIS_DATADIR",
              help='Base directory where listing files are written ("-" for stdout)')
@click.option("--keep", is_flag=True, help="Keep content of bad files when creating listing")
@click.option("--meta", is_flag=True, help="Create XML metadata file next to listing files")
@click.option("--list", "list_all", is_flag=True, help="Print the list of blocks")
@click.option("--report", is_flag=True, help="Print a report on available blocks")
@click.option("--text", is_flag=True, help="Strip trailing null bytes from blocks before writing")
@click.option("--batch", is_flag=True, help="PATHS are a base directory and a file of UPIs")
@click.option("--fill", type=click.Choice(sorted(FILL_BYTES)), default="space", show_default=True,
              help="Byte used for missing blocks")
@click.option("--streaming", is_flag=True, help="Seek over missing blocks instead of buffering the file")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging")
@click.version_option(VERSION, prog_name=PROGRAM, message=f"%(prog)s-%(version)s ({BUILD_TIME})")
def main(paths, datadir, keep, meta, list_all, report, text, batch, fill, streaming, verbose) -> None:
    """Transform MVIS data from archive files to MVIS listing files."""
    logger = setup_logging(verbose)
    try:
        archives = resolve_archives(paths, batch, keep, logger)
        if list_all or report:
            list_blocks(archives, list_all and not report, logger)
            return
        options = RunOptions(datadir=datadir, meta=meta, text=text, fill=fill, streaming=streaming)
        dump_files(archives, options, logger)
    except (ValueError, OSError) as e:
        # Fail closed with a single-line reason.
        click.echo(f"FATAL: {e}", err=True)
        raise SystemExit(1)


if __name__ == "__main__":
    main()
