"""clipsift classify / decode: inspect engine output for a piece of text.

Input resolution for ``classify``:
  TEXT argument      → classified as given
  --file PATH        → file contents (UTF-8, invalid bytes replaced)
  neither            → stdin, when something is piped in
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from clipsift.cli.errors import (
    err_config_invalid,
    err_file_not_found,
    err_file_unreadable,
    err_input_conflict,
    err_input_missing,
    warn_nothing_decoded,
)
from clipsift.config import ClipsiftConfig, ConfigError, load_config
from clipsift.encoding import EncodingResolver
from clipsift.models import ClassificationOutput, ContentType

console = Console()
err_console = Console(stderr=True)


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _load_cfg(global_config: Path | None) -> ClipsiftConfig:
    try:
        return load_config(global_config_path=global_config)
    except ConfigError as exc:
        console.print(err_config_invalid(str(exc)))
        raise typer.Exit(1) from exc


def _read_input(text: str | None, file: Path | None) -> str:
    if text is not None and file is not None:
        console.print(err_input_conflict())
        raise typer.Exit(1)
    if text is not None:
        return text
    if file is not None:
        if not file.is_file():
            console.print(err_file_not_found(str(file)))
            raise typer.Exit(1)
        try:
            return file.read_bytes().decode("utf-8", errors="replace")
        except OSError as exc:
            console.print(err_file_unreadable(str(file), exc.strerror or str(exc)))
            raise typer.Exit(1) from exc
    if sys.stdin is not None and not sys.stdin.isatty():
        piped = sys.stdin.read()
        if piped.strip():
            return piped
    console.print(err_input_missing())
    raise typer.Exit(1)


def _output_dict(output: ClassificationOutput, dropped: bool) -> dict[str, Any]:
    return {
        "primaryType": output.primary_type.value,
        "confidence": round(output.confidence, 4),
        "metadata": json.loads(output.metadata) if output.metadata else {},
        "splitEntries": [
            {"content": s.content, "contentType": s.content_type.value, "metadata": json.loads(s.metadata)}
            for s in output.split_entries
        ],
        "extractedItems": [
            {"content": i.content, "contentType": i.content_type.value} for i in output.extracted_items
        ],
        "decoded": output.decoded.decoded if output.decoded is not None else None,
        "dropped": dropped,
    }


# ---------------------------------------------------------------------------
# classify
# ---------------------------------------------------------------------------


def classify_cmd(
    text: Annotated[
        str | None,
        typer.Argument(help="Text to classify. Reads stdin when omitted."),
    ] = None,
    file: Annotated[
        Path | None,
        typer.Option("--file", "-f", help="Read the text to classify from a file."),
    ] = None,
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print the classification as JSON."),
    ] = False,
    no_extract: Annotated[
        bool,
        typer.Option("--no-extract", help="Keep only the primary family; no extracted items."),
    ] = False,
    skip_api_keys: Annotated[
        bool,
        typer.Option("--skip-api-keys", help="Drop captures whose primary type is apiKey."),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug logging on stderr."),
    ] = False,
    global_config: Annotated[
        Path | None,
        typer.Option("--global-config", hidden=True, help="Override ~/.clipsift/config.yaml (for testing)."),
    ] = None,
) -> None:
    """Classify text and show its primary type, metadata and extracted items."""
    _configure_logging(verbose)
    cfg = _load_cfg(global_config)
    if no_extract:
        cfg.capture.extract_content = False
    if skip_api_keys:
        cfg.capture.skip_api_keys = True

    content = _read_input(text, file)
    classifier = cfg.build_classifier()
    output = classifier.classify(content, extract_content=cfg.capture.extract_content)
    dropped = cfg.capture.skip_api_keys and output.primary_type is ContentType.API_KEY

    if as_json:
        typer.echo(json.dumps(_output_dict(output, dropped), ensure_ascii=False, indent=2))
        return

    if dropped:
        console.print("[yellow]⚠[/]  Primary type is apiKey; capture dropped (skip_api_keys).")
        return

    _print_summary(output)
    if output.split_entries:
        _print_split(output)
    else:
        _print_values(classifier.codec, output)


def _print_summary(output: ClassificationOutput) -> None:
    lines = [
        f"Primary type:  [bold]{output.primary_type.value}[/]",
        f"Confidence:    {output.confidence:.2f}",
    ]
    if output.decoded is not None:
        chain = " → ".join(output.decoded.encodings)
        lines.append(f"Decoded via:   {chain}")
    console.print(Panel("\n".join(lines), title="[bold]Classification[/]", expand=False))


def _print_split(output: ClassificationOutput) -> None:
    table = Table(title=f"Split entries ({len(output.split_entries)})", show_header=True)
    table.add_column("Content")
    table.add_column("Type", style="cyan")
    for entry in output.split_entries:
        table.add_row(escape(entry.content), entry.content_type.value)
    console.print(table)


def _print_values(codec: Any, output: ClassificationOutput) -> None:
    values = codec.extract_all(output.metadata)
    if values:
        table = Table(title="Detected values", show_header=True)
        table.add_column("Family", style="cyan")
        table.add_column("Value")
        for value in values:
            table.add_row(value.type.value, escape(value.display_value))
        console.print(table)
    if output.extracted_items:
        console.print(f"[dim]{len(output.extracted_items)} child record(s) would be extracted.[/]")


# ---------------------------------------------------------------------------
# decode
# ---------------------------------------------------------------------------


def decode_cmd(
    text: Annotated[
        str,
        typer.Argument(help="Text to decode (percent-encoding and base64, nested)."),
    ],
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug logging on stderr."),
    ] = False,
    global_config: Annotated[
        Path | None,
        typer.Option("--global-config", hidden=True, help="Override ~/.clipsift/config.yaml (for testing)."),
    ] = None,
) -> None:
    """Peel encoding layers off TEXT and show each step."""
    _configure_logging(verbose)
    cfg = _load_cfg(global_config)
    resolver = EncodingResolver(
        max_rounds=cfg.encoding.max_rounds,
        min_printable_ratio=cfg.encoding.min_printable_ratio,
    )
    result = resolver.resolve(text)

    if not result.changed:
        console.print(warn_nothing_decoded())
        console.print(result.decoded, markup=False, highlight=False)
        return

    table = Table(title=f"Decode chain ({result.rounds} step(s))", show_header=True)
    table.add_column("#", justify="right")
    table.add_column("Encoding", style="cyan")
    table.add_column("Result")
    for i, step in enumerate(result.steps, start=1):
        table.add_row(str(i), step.encoding, escape(step.after))
    console.print(table)
    console.print(f"Confidence: {result.confidence:.2f}")
    console.print(result.decoded, markup=False, highlight=False)
