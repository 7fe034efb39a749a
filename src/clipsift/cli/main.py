"""clipsift CLI entry point.

A thin developer front end over ``ContentClassifier``: it classifies one
capture at a time and prints what a clipboard host would store for it.
"""

from __future__ import annotations

import importlib.metadata
from typing import Annotated

import typer

from clipsift.cli.classify import classify_cmd, decode_cmd
from clipsift.cli.init import init_cmd

_HELP = """Classify clipboard captures and extract the values inside them.

  clipsift classify TEXT        Primary type, metadata document and extracted items.
  clipsift classify --file F    Same, for a file (or pipe the capture on stdin).
  clipsift decode TEXT          Show the percent-encoding / base64 layers peeled off.
  clipsift init [--project]     Write ~/.clipsift/config.yaml (and ./clipsift.yaml).
"""


def _installed_version() -> str:
    try:
        return importlib.metadata.version("clipsift")
    except importlib.metadata.PackageNotFoundError:
        return "dev"


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"clipsift {_installed_version()}")
        raise typer.Exit()


app = typer.Typer(name="clipsift", help=_HELP, add_completion=False)


@app.callback()
def main_callback(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = False,
) -> None:
    """Classify clipboard captures and extract the values inside them."""


app.command("classify")(classify_cmd)
app.command("decode")(decode_cmd)
app.command("init")(init_cmd)


@app.command("version")
def version_cmd() -> None:
    """Show the installed clipsift version."""
    typer.echo(f"clipsift {_installed_version()}")


if __name__ == "__main__":
    app()
