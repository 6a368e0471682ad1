"""Admission data models — tiers and per-event decisions."""

from __future__ import annotations

import enum
from dataclasses import dataclass


class Tier(enum.Enum):
    """Outcome class assigned to an inbound event, least to most severe."""

    ALLOW = "allow"
    WARN = "warn"
    THROTTLE = "throttle"
    PAUSE = "pause"
    DISCONNECT = "disconnect"

    @property
    def severity(self) -> int:
        return _SEVERITY[self]


_SEVERITY = {tier: rank for rank, tier in enumerate(Tier)}


@dataclass(frozen=True)
class Decision:
    """Result of admitting one event."""

    tier: Tier
    forward: bool
    rate: int = 0
    violation_count: int = 0
    pause_seconds: float = 0.0
    notice: bool = False
    violation_recorded: bool = False
    bypassed: bool = False
