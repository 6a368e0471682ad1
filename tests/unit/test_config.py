"""Tests for environment-driven configuration."""

from __future__ import annotations

from pathlib import Path

import pytest

from boardgate.config import BoardGateConfig

_VARS = (
    "BOARDGATE_WEB_HOST",
    "BOARDGATE_WEB_PORT",
    "BOARDGATE_ADMIN_CODE",
    "BOARDGATE_AUDIT",
    "BOARDGATE_POLICY",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path: Path):
    for var in _VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))


def test_defaults(tmp_path: Path):
    config = BoardGateConfig.load()
    assert config.web_host == "127.0.0.1"
    assert config.web_port == 8470
    assert config.admin_code is None
    assert config.audit_enabled
    assert config.policy_path is None
    assert config.audit_db_path == tmp_path / "data" / "boardgate" / "boardgate.db"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("BOARDGATE_WEB_HOST", "0.0.0.0")
    monkeypatch.setenv("BOARDGATE_WEB_PORT", "9000")
    monkeypatch.setenv("BOARDGATE_ADMIN_CODE", "777")
    monkeypatch.setenv("BOARDGATE_AUDIT", "false")

    config = BoardGateConfig.load()
    assert config.web_host == "0.0.0.0"
    assert config.web_port == 9000
    assert config.admin_code == 777
    assert not config.audit_enabled


def test_non_numeric_admin_code_is_rejected(monkeypatch):
    monkeypatch.setenv("BOARDGATE_ADMIN_CODE", "hunter2")
    with pytest.raises(ValueError, match="numeric"):
        BoardGateConfig.load()


def test_policy_file_in_config_dir_is_picked_up(tmp_path: Path):
    config_dir = tmp_path / "config" / "boardgate"
    config_dir.mkdir(parents=True)
    (config_dir / "policy.yaml").write_text("name: local\n")

    config = BoardGateConfig.load()
    assert config.resolve_policy().name == "local"


def test_env_admin_code_overrides_policy_file(tmp_path: Path, monkeypatch):
    path = tmp_path / "p.yaml"
    path.write_text("name: p\nauth:\n  admin_code: 1\n")
    monkeypatch.setenv("BOARDGATE_POLICY", str(path))
    monkeypatch.setenv("BOARDGATE_ADMIN_CODE", "2")

    policy = BoardGateConfig.load().resolve_policy()
    assert policy.name == "p"
    assert policy.auth.admin_code == 2
