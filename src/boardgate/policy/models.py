"""Policy data models — immutable limits shared by every gate."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class AdmissionPolicy:
    """Rate thresholds and escalation knobs for drawing submissions.

    Thresholds are events per short window; durations are seconds.
    """

    warn_rate: int = 25
    throttle_rate: int = 40
    pause_rate: int = 55
    hard_rate: int = 70
    short_window: float = 1.0
    long_window: float = 10.0
    long_window_cap: int = 250
    violation_memory: float = 60.0
    violation_spacing: float = 1.0
    max_violations: int = 5
    short_pause: float = 3.0
    long_pause: float = 5.0


@dataclass(frozen=True)
class AuthPolicy:
    """Brute-force limits for privileged authentication."""

    backoff_schedule: tuple[float, ...] = (2.0, 5.0, 30.0, 300.0)
    max_failures: int = 3
    tracking_window: float = 600.0
    block_duration: float = 600.0
    admin_code: int | None = None


@dataclass(frozen=True)
class ResetPolicy:
    """Cooldown on the shared clear action."""

    cooldown: float = 300.0


@dataclass(frozen=True)
class BoardPolicy:
    """A complete set of limits."""

    name: str = "default"
    admission: AdmissionPolicy = field(default_factory=AdmissionPolicy)
    auth: AuthPolicy = field(default_factory=AuthPolicy)
    reset: ResetPolicy = field(default_factory=ResetPolicy)
    sweep_interval: float = 60.0
    description: str = ""
