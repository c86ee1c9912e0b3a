# Author: PB
# Maintainer: PB
# Original date: 2026.10.19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ------
# src/pdu/cli/main.py

"""Main CLI entry point for pdu."""

import typer

from pdu.cli.commands.du import main as du_command

app = typer.Typer(
    name="pdu",
    help="Disk utilization calculator (parallel edition)",
    no_args_is_help=True,
    add_completion=False,
)

app.command("du", help="Summarize disk usage of each PATH")(du_command)


if __name__ == "__main__":
    app()
