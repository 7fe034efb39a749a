"""clipsift init: write the default global configuration.

Creates:
  ~/.clipsift/config.yaml   global defaults (created once, mode 0o600)
  ./clipsift.yaml           per-project overrides (only with --project)
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from clipsift.config import ensure_global_config

console = Console()

_PROJECT_CONFIG_NAME = "clipsift.yaml"
_PROJECT_TEMPLATE = (
    "# clipsift per-project overrides; any key from ~/.clipsift/config.yaml may be set here.\n"
    "capture:\n"
    "  extract_content: true\n"
    "  skip_api_keys: false\n"
)


def init_cmd(
    project: Annotated[
        bool,
        typer.Option("--project", help="Also write ./clipsift.yaml for per-project overrides."),
    ] = False,
    global_config: Annotated[
        Path | None,
        typer.Option("--global-config", hidden=True, help="Override ~/.clipsift/config.yaml (for testing)."),
    ] = None,
) -> None:
    """Create the global clipsift configuration if it does not exist."""
    existed = (global_config or Path.home() / ".clipsift" / "config.yaml").exists()
    cfg_path = ensure_global_config(global_config)
    if existed:
        console.print(f"  [dim]•[/] {cfg_path} already exists (left unchanged)")
    else:
        console.print(f"  [green]✓[/] {cfg_path} (global config)")

    if project:
        project_path = Path.cwd() / _PROJECT_CONFIG_NAME
        if project_path.exists():
            console.print(f"  [dim]•[/] {project_path} already exists (left unchanged)")
        else:
            project_path.write_text(_PROJECT_TEMPLATE, encoding="utf-8")
            console.print(f"  [green]✓[/] {project_path}")

    console.print("\nNext steps:")
    console.print("  clipsift classify 'user@example.com'   (classify text)")
    console.print("  clipsift decode 'aGVsbG8gd29ybGQ='     (inspect an encoded value)")
