"""Tests for clipsift init."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml
from typer.testing import CliRunner

from clipsift.cli.main import app

runner = CliRunner()


def _run_init(tmp_path: Path, *extra: str):
    global_cfg = tmp_path / "home" / ".clipsift" / "config.yaml"
    return runner.invoke(app, ["init", "--global-config", str(global_cfg), *extra]), global_cfg


def test_init_writes_global_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    result, global_cfg = _run_init(tmp_path)

    assert result.exit_code == 0, result.output
    assert global_cfg.exists()
    assert "global config" in result.output
    assert "Next steps" in result.output
    assert not (tmp_path / "clipsift.yaml").exists()


def test_init_is_idempotent(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    _run_init(tmp_path)
    result, _ = _run_init(tmp_path)
    assert result.exit_code == 0
    assert "already exists" in result.output


def test_init_project_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    result, _ = _run_init(tmp_path, "--project")

    assert result.exit_code == 0, result.output
    data = yaml.safe_load((tmp_path / "clipsift.yaml").read_text(encoding="utf-8"))
    assert data["capture"]["extract_content"] is True
