"""Command-line interface for the fourwings decoder.

This module provides CLI commands to inspect 4wings tiles using the Typer
framework.
"""
import json
import logging
from pathlib import Path
from typing import Optional

import typer

from . import config
from .errors import FourwingsDecodeError, UnknownIntervalError
from .intervals import get_interval_frame
from .loader import FourwingsLoader
from .options import FourwingsOptions

app = typer.Typer(help="Decode 4wings gridded timeseries tiles.")


def _timestamp(value):
    """Return epoch milliseconds as a number, dates as strings."""
    try:
        return float(value)
    except ValueError:
        return value


def _setup(env, verbose):
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING,
                        format="%(asctime)s %(name)s %(levelname)s: %(message)s")
    if env != "DEFAULT":
        config.change_env(env)


@app.command()
def decode(
    tile: Path = typer.Argument(..., exists=True, dir_okay=False,
                                help="Tile payload file."),
    buffers_length: str = typer.Option(
        "", help="Comma separated cumulative sublayer buffer lengths."),
    cols: int = typer.Option(0, help="Grid columns."),
    rows: int = typer.Option(0, help="Grid rows."),
    min_frame: str = typer.Option("0", help="Window start, epoch ms or date."),
    max_frame: str = typer.Option("0", help="Window end, epoch ms or date."),
    interval: str = typer.Option("DAY", help="Temporal resolution."),
    sublayers: int = typer.Option(1, help="Values per frame in a record."),
    framing: Optional[str] = typer.Option(None, help="'raw' or 'protobuf'."),
    env: str = typer.Option("DEFAULT", help="Dynaconf environment."),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """Decode a tile and print a JSON summary of its cells."""
    _setup(env, verbose)
    try:
        lengths = [int(n) for n in buffers_length.split(",") if n.strip()]
        options = FourwingsOptions(
            buffers_length=lengths, cols=cols, rows=rows,
            min_frame=_timestamp(min_frame), max_frame=_timestamp(max_frame),
            interval=interval, sublayers=sublayers, framing=framing,
        )
        result = FourwingsLoader.parse_file(tile, options)
    except (FourwingsDecodeError, UnknownIntervalError) as err:
        typer.echo(f"Error: {err}", err=True)
        raise typer.Exit(code=1)
    except ValueError as err:
        typer.echo(f"Invalid options: {err}", err=True)
        raise typer.Exit(code=1)

    summary = {
        "cols": result.cols,
        "rows": result.rows,
        "frames": [result.tile_min_frame, result.tile_max_frame],
        "cells": len(result.cells),
        "indexes": result.indexes,
        "populated_sublayers": sum(
            cell.is_populated(s) for cell in result.cells for s in range(len(cell))),
    }
    typer.echo(json.dumps(summary))


@app.command()
def frame(
    timestamp: str = typer.Argument(..., help="Epoch ms or date."),
    interval: str = typer.Option("DAY", help="Temporal resolution."),
):
    """Print the interval frame of a timestamp."""
    try:
        value = get_interval_frame(_timestamp(timestamp), interval)
    except UnknownIntervalError as err:
        typer.echo(f"Error: {err}", err=True)
        raise typer.Exit(code=1)
    typer.echo(value)


if __name__ == "__main__":
    app()
