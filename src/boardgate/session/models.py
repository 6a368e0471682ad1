"""Session data models — live connections and their ephemeral rate state."""

from __future__ import annotations

import time
import uuid
from collections import deque
from dataclasses import dataclass, field

from boardgate.actions.base import Channel
from boardgate.admission.ledger import ViolationLedger


@dataclass
class SessionRecord:
    """Per-connection rate windows, violation ledger and pause deadline."""

    ledger: ViolationLedger
    short_window: deque[float] = field(default_factory=deque)
    long_window: deque[float] = field(default_factory=deque)
    paused_until: float | None = None
    event_count: int = 0
    warned: bool = False


@dataclass
class Connection:
    """A live transport session.

    ``privileged`` is connection-scoped: a second connection declaring the
    same identity starts unprivileged and must authenticate on its own.
    """

    channel: Channel
    record: SessionRecord
    identity: str | None = None
    color: str | None = None
    privileged: bool = False
    connected_at: float = field(default_factory=time.time)
    id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])


@dataclass
class EnforcementRecord:
    """An enforcement outcome worth keeping after the connection is gone."""

    kind: str
    connection_id: str
    identity: str = ""
    detail: str = ""
    violation_count: int = 0
    timestamp: float = field(default_factory=time.time)
    id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
