"""Lock coordinator — global drawing/reset lock owned by privileged connections."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from boardgate.session.models import Connection

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LockState:
    drawing_locked: bool = False
    reset_locked: bool = False

    def to_payload(self) -> dict:
        return {"drawingLocked": self.drawing_locked, "resetLocked": self.reset_locked}


class LockCoordinator:
    """Single-writer-wins pair of flags, toggled together.

    ``on_change`` runs synchronously inside every accepted toggle so the
    broadcast is part of the same step as the mutation.
    """

    def __init__(self, on_change: Callable[[LockState], None] | None = None) -> None:
        self._state = LockState()
        self._on_change = on_change

    @property
    def state(self) -> LockState:
        return self._state

    def toggle(self, conn: Connection, locked: bool) -> bool:
        """Set both flags. Unprivileged callers are ignored without a reply."""
        if not conn.privileged:
            logger.info("Unauthorized lock toggle ignored from %s", conn.id)
            return False
        self._state = LockState(drawing_locked=locked, reset_locked=locked)
        logger.warning("Board lock set to %s by %s", locked, conn.identity or conn.id)
        if self._on_change:
            self._on_change(self._state)
        return True

    def drawing_allowed(self, conn: Connection) -> bool:
        return conn.privileged or not self._state.drawing_locked

    def reset_allowed(self, conn: Connection) -> bool:
        return conn.privileged or not self._state.reset_locked
