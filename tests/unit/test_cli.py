"""Tests for CLI commands using Click's CliRunner."""

from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner

from boardgate.cli import main


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path: Path):
    for var in ("BOARDGATE_POLICY", "BOARDGATE_ADMIN_CODE", "BOARDGATE_WEB_PORT"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))


def test_main_help():
    runner = CliRunner()
    result = runner.invoke(main, ["--help"])
    assert result.exit_code == 0
    assert "BoardGate" in result.output
    assert "serve" in result.output
    assert "limits" in result.output


def test_main_version():
    runner = CliRunner()
    result = runner.invoke(main, ["--version"])
    assert result.exit_code == 0
    assert "0.1.0" in result.output


def test_serve_help():
    runner = CliRunner()
    result = runner.invoke(main, ["serve", "--help"])
    assert result.exit_code == 0
    assert "--port" in result.output
    assert "--no-audit" in result.output


def test_limits_with_defaults():
    runner = CliRunner()
    result = runner.invoke(main, ["limits"])
    assert result.exit_code == 0
    assert "default" in result.output
    assert "Hard limit above" in result.output
    assert "unset" in result.output


def test_limits_reads_policy_file(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("BOARDGATE_ADMIN_CODE", "4242")
    path = tmp_path / "strict.yaml"
    path.write_text("name: strict\nreset:\n  cooldown: 45\n")

    runner = CliRunner()
    result = runner.invoke(main, ["--policy", str(path), "limits"])
    assert result.exit_code == 0
    assert "strict" in result.output
    assert "45s" in result.output
    assert "unset" not in result.output


def test_invalid_policy_exits_with_usage_code(tmp_path: Path):
    path = tmp_path / "broken.yaml"
    path.write_text("admission:\n  thresholds:\n    warn: 99\n")

    runner = CliRunner()
    result = runner.invoke(main, ["--policy", str(path), "limits"])
    assert result.exit_code == 2
    assert "Invalid policy" in result.output


def test_mistyped_policy_section_exits_with_usage_code(tmp_path: Path):
    path = tmp_path / "typo.yaml"
    path.write_text("admission:\n  thresholds: 5\n")

    runner = CliRunner()
    result = runner.invoke(main, ["--policy", str(path), "limits"])
    assert result.exit_code == 2
    assert "admission.thresholds" in result.output
    assert not isinstance(result.exception, AttributeError)
