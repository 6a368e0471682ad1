"""Outbound channel and action handler protocols."""

from __future__ import annotations

from typing import Any, Protocol

from boardgate.admission.models import Decision

POLICY_VIOLATION_CLOSE_CODE = 1008


class ChannelClosed(Exception):
    """Raised by a channel whose transport can no longer accept frames."""


class Channel(Protocol):
    """Per-connection outbound side of the transport."""

    def send(self, event: str, data: Any = None) -> None:
        """Queue one outbound frame. Must not block."""
        ...

    def close(self, code: int = POLICY_VIOLATION_CLOSE_CODE, reason: str = "") -> None:
        """Close the transport after queued frames are flushed."""
        ...


class ActionHandler(Protocol):
    """Protocol for side effects of an admission decision."""

    def execute(self, channel: Channel, decision: Decision) -> bool:
        """Execute the action. Returns True if the action was delivered."""
        ...
