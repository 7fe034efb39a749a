"""clipsift rich error messages.

Every error shown to the user states what went wrong and the exact action
that fixes it.

Usage:
    from clipsift.cli.errors import err_input_missing
    console.print(err_input_missing())
    raise typer.Exit(1)
"""

from __future__ import annotations


def err_input_missing() -> str:
    """No TEXT argument, no --file and nothing piped on stdin."""
    return (
        "[red]Error:[/] Nothing to classify.\n"
        "  Pass the text as an argument, use --file, or pipe it in:\n"
        "    echo 'user@example.com' | clipsift classify"
    )


def err_input_conflict() -> str:
    """Both TEXT and --file were given."""
    return (
        "[red]Error:[/] Pass either TEXT or --file, not both.\n"
        "  Run:  clipsift classify --help"
    )


def err_file_not_found(path: str) -> str:
    """--file points to a missing file."""
    return (
        f"[red]Error:[/] File not found: '{path}'\n"
        "  Check the path and try again."
    )


def err_file_unreadable(path: str, reason: str) -> str:
    """--file exists but could not be read."""
    return (
        f"[red]Error:[/] Could not read '{path}': {reason}\n"
        "  Check the file permissions."
    )


def err_config_invalid(detail: str) -> str:
    """clipsift.yaml or ~/.clipsift/config.yaml holds an invalid value."""
    return (
        f"[red]Error:[/] Invalid configuration.\n"
        f"  {detail}\n"
        "  Fix the value in clipsift.yaml or ~/.clipsift/config.yaml.\n"
        "  Run:  clipsift init  to write a default global config."
    )


def warn_nothing_decoded() -> str:
    """clipsift decode found no encoding layer."""
    return (
        "[yellow]⚠[/] No percent-encoding or base64 layer found.\n"
        "  The input is shown unchanged."
    )
