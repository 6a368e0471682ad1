"""Session registry — owns one record per live connection."""

from __future__ import annotations

import logging
from collections.abc import Iterator

from boardgate.actions.base import Channel
from boardgate.admission.ledger import ViolationLedger
from boardgate.session.models import Connection, SessionRecord

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Creates records on connect and destroys them on disconnect.

    Rate-violation history lives and dies with the record; a reconnect
    always starts from a clean slate.
    """

    def __init__(self, violation_memory: float) -> None:
        self._violation_memory = violation_memory
        self._connections: dict[str, Connection] = {}

    def open(self, channel: Channel) -> Connection:
        record = SessionRecord(ledger=ViolationLedger(self._violation_memory))
        conn = Connection(channel=channel, record=record)
        self._connections[conn.id] = conn
        logger.info("Session opened: %s (%d live)", conn.id, len(self._connections))
        return conn

    def get(self, connection_id: str) -> Connection | None:
        return self._connections.get(connection_id)

    def close(self, connection_id: str) -> Connection | None:
        """Tear down a session. Returns the removed connection, if any."""
        conn = self._connections.pop(connection_id, None)
        if conn is not None:
            logger.info(
                "Session closed: %s (%d live)", connection_id, len(self._connections)
            )
        return conn

    def __iter__(self) -> Iterator[Connection]:
        # Copy so broadcasts may tear down dead sessions mid-iteration
        return iter(list(self._connections.values()))

    def __len__(self) -> int:
        return len(self._connections)

    def __contains__(self, connection_id: object) -> bool:
        return connection_id in self._connections
