"""Global configuration — XDG paths, env vars, defaults."""

from __future__ import annotations

import dataclasses
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from boardgate.policy.loader import load_policy, validate_policy
from boardgate.policy.models import BoardPolicy

logger = logging.getLogger(__name__)


def _default_data_dir() -> Path:
    xdg = os.environ.get("XDG_DATA_HOME")
    if xdg:
        return Path(xdg) / "boardgate"
    return Path.home() / ".local" / "share" / "boardgate"


def _default_config_dir() -> Path:
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "boardgate"
    return Path.home() / ".config" / "boardgate"


@dataclass
class BoardGateConfig:
    """Application-wide configuration."""

    data_dir: Path = field(default_factory=_default_data_dir)
    config_dir: Path = field(default_factory=_default_config_dir)
    policy_path: Path | None = None
    web_host: str = "127.0.0.1"
    web_port: int = 8470
    admin_code: int | None = None
    audit_enabled: bool = True
    verbose: bool = False

    @classmethod
    def load(cls) -> BoardGateConfig:
        """Load config from environment variables with XDG defaults."""
        config = cls()

        env_host = os.environ.get("BOARDGATE_WEB_HOST")
        if env_host:
            config.web_host = env_host

        env_port = os.environ.get("BOARDGATE_WEB_PORT")
        if env_port:
            config.web_port = int(env_port)

        env_code = os.environ.get("BOARDGATE_ADMIN_CODE")
        if env_code:
            try:
                config.admin_code = int(env_code)
            except ValueError:
                raise ValueError("BOARDGATE_ADMIN_CODE must be numeric") from None

        env_audit = os.environ.get("BOARDGATE_AUDIT")
        if env_audit is not None:
            config.audit_enabled = env_audit.strip().lower() not in ("0", "false", "no")

        env_policy = os.environ.get("BOARDGATE_POLICY")
        if env_policy:
            config.policy_path = Path(env_policy)
        else:
            default_policy = config.config_dir / "policy.yaml"
            if default_policy.is_file():
                config.policy_path = default_policy

        return config

    @property
    def audit_db_path(self) -> Path:
        return self.data_dir / "boardgate.db"

    def resolve_policy(self) -> BoardPolicy:
        """Build the effective policy: file limits, then the env admin code."""
        policy = load_policy(self.policy_path) if self.policy_path else BoardPolicy()
        if self.admin_code is not None:
            policy = dataclasses.replace(
                policy,
                auth=dataclasses.replace(policy.auth, admin_code=self.admin_code),
            )
        validate_policy(policy)
        logger.debug("Effective policy: %s", policy.name)
        return policy
