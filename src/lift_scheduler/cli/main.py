"""
CLI entry point using Typer.

Provides commands for running a strength programme:
- init: Create the data directory
- import-programme / add-workout: Load programmes and custom workouts
- activate / list / status / delete-programme: Choose, inspect and remove programmes
- next-workout: Show prescribed weights for the next workout
- log-workout: Log a completed workout (records, 1RM updates, progress)
- records / maxes / set-max / e1rm: Personal records and 1RM estimates
"""

import logging
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler

from .app import app
from .commands import programmes, records, workouts  # noqa: F401  (registers commands)


@app.callback()
def main_callback(
    verbose: Annotated[
        int,
        typer.Option("--verbose", "-v", count=True, help="More log output (-v info, -vv debug)"),
    ] = 0,
) -> None:
    """
    Strength-training programme runner.
    """
    level = {0: logging.WARNING, 1: logging.INFO}.get(verbose, logging.DEBUG)
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


if __name__ == "__main__":
    app()
