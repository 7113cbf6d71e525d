from pathlib import Path

import click

from mvis_core.grouping import group_archives
from mvis_core.logs import setup_logging
from mvis_core.source import MultiFileStream
from .export import export_blocks
from .report import DiagnosticsReporter


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Debug logging")
@click.pass_context
def main(ctx, verbose):
    ctx.obj = setup_logging(verbose)


@main.command("blocks")
@click.argument("paths", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.option("--keep", is_flag=True, help="Keep content of bad files")
@click.option("--list", "list_blocks", is_flag=True, help="Print every block")
@click.option("--parquet", type=click.Path(dir_okay=False, path_type=Path), help="Export the block listing")
@click.pass_obj
def blocks_cmd(logger, paths, keep, list_blocks, parquet):
    try:
        archives = group_archives(paths, keep_bad=keep, logger=logger)
        reporter = DiagnosticsReporter(list_blocks=list_blocks, collect=parquet is not None, logger=logger)
        with MultiFileStream(archives, logger=logger) as stream:
            reporter.run(stream)
        if parquet is not None and export_blocks(reporter.rows, parquet):
            logger.info("block listing written to %s", parquet)
    except (ValueError, OSError) as e:
        click.echo(f"FATAL: {e}", err=True)
        raise SystemExit(1)


if __name__ == "__main__":
    main()
