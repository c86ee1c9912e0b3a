# Author: PB
# Maintainer: PB
# Original date: 2026.10.19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ------
# src/pdu/cli/commands/du.py

"""du command: walk paths and print their sizes."""

from pathlib import Path
from typing import List, Optional

import typer
from loguru import logger
from pydantic import ValidationError

from pdu import __version__
from pdu.config import load_options
from pdu.logging.setup import setup_logging
from pdu.report.aggregate import summarize
from pdu.report.format import SizeUnit, render
from pdu.walker import WalkSetupError, start_walk


def print_version(is_version: bool) -> None:
    """Eager --version callback: print the installed version and exit."""
    if not is_version:
        return
    typer.echo(f"pdu {__version__}")
    raise typer.Exit()


def main(
    paths: List[str] = typer.Argument(..., help="Files or directories to measure"),
    follow_symlinks: bool = typer.Option(False, "--follow-symlinks", "-L", help="Follow symlinks"),
    show_all: bool = typer.Option(False, "--all", "-a", help="Show all files & dirs"),
    one_filesystem: bool = typer.Option(False, "--one-file-system", "-x", help="Skip directories on other filesystems"),
    jobs: Optional[int] = typer.Option(None, "--jobs", "-j", min=1, help="Number of walker threads"),
    human: bool = typer.Option(False, "--human-size", "-h", help="Show size in human readable form"),
    kilo: bool = typer.Option(False, "--kilo-byte", "-k", help="Show size in kilo bytes"),
    byte: bool = typer.Option(False, "--byte", "-b", help="Show size in bytes (default)"),
    total: bool = typer.Option(False, "--total", "-t", help="Show total size"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="TOML file with a [walk] table"),
    _version: bool = typer.Option(
        False, "--version", "-V", help="Show version and exit.",
        callback=print_version, is_eager=True,
    ),
):
    """Summarize disk usage of each PATH, recursively for directories."""
    setup_logging(verbose=verbose)

    # Explicit flags override the config file; unset flags defer to it
    try:
        options = load_options(
            config,
            follow_symlinks=follow_symlinks or None,
            show_all=show_all or None,
            one_filesystem=one_filesystem or None,
            concurrency=jobs,
        )
    except (FileNotFoundError, TypeError, ValidationError) as e:
        logger.error(f"Invalid configuration: {e}")
        raise typer.Exit(code=1)

    if human:
        unit = SizeUnit.HUMAN
    elif kilo:
        unit = SizeUnit.KILO
    else:
        unit = SizeUnit.BYTE

    try:
        walk = start_walk(paths, options)
    except WalkSetupError as e:
        logger.error(str(e))
        raise typer.Exit(code=1)

    summary = summarize(paths, walk)

    for line in render(summary.rows(options.show_all), unit,
                       total=summary.grand_total if total else None):
        typer.echo(line)

    for error in summary.errors:
        logger.error(str(error))
    if summary.errors:
        raise typer.Exit(code=1)
