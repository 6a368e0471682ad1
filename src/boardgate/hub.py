"""Board hub — routes inbound frames through the gates and fans out results."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from typing import Any

from boardgate.actions.base import Channel, ChannelClosed
from boardgate.actions.disconnect import DisconnectAction
from boardgate.actions.warn import WarnAction
from boardgate.admission.controller import AdmissionController
from boardgate.admission.models import Decision, Tier
from boardgate.auth.guard import AuthGuard, AuthOutcome, AuthResult
from boardgate.board.cooldown import ResetCooldownTracker
from boardgate.board.lock import LockCoordinator, LockState
from boardgate.board.palette import assign_color
from boardgate.board.strokes import StrokeStore
from boardgate.policy.models import BoardPolicy
from boardgate.protocol import (
    ASSIGNED_COLOR,
    AUTHENTICATION_RESULT,
    DECLARE_IDENTITY,
    FULL_STATE_SNAPSHOT,
    LOCK_STATE_BROADCAST,
    REQUEST_AUTHENTICATION,
    REQUEST_RESET,
    RESET_BROADCAST,
    RESET_COOLDOWN,
    RESET_REJECTED,
    SEGMENT_BROADCAST,
    SUBMIT_DRAWING_SEGMENT,
    TOGGLE_LOCK,
    AuthRequest,
    DeclareIdentity,
    DrawingSegment,
    LockToggle,
    MalformedRequest,
    ResetRequest,
    parse_frame,
    parse_payload,
)
from boardgate.session.models import Connection, EnforcementRecord
from boardgate.session.registry import SessionRegistry

logger = logging.getLogger(__name__)


class BoardHub:
    """Owns every state store and processes each frame to completion.

    ``dispatch`` never awaits and never raises on client input; outbound
    frames go to non-blocking channels, so a decision and all of its
    broadcasts happen in one step relative to every other frame.
    """

    def __init__(
        self,
        policy: BoardPolicy | None = None,
        strokes: StrokeStore | None = None,
        clock: Callable[[], float] = time.monotonic,
        on_enforcement: Callable[[EnforcementRecord], None] | None = None,
    ) -> None:
        self.policy = policy or BoardPolicy()
        self.strokes = strokes if strokes is not None else StrokeStore()
        self.registry = SessionRegistry(self.policy.admission.violation_memory)
        self.admission = AdmissionController(self.policy.admission, clock=clock)
        self.auth = AuthGuard(
            self.policy.auth, clock=clock, sweep_interval=self.policy.sweep_interval
        )
        self.cooldowns = ResetCooldownTracker(
            self.policy.reset.cooldown,
            sweep_interval=self.policy.sweep_interval,
            clock=clock,
        )
        self.lock = LockCoordinator(on_change=self._broadcast_lock)
        self._warn = WarnAction(self.policy.admission)
        self._disconnect = DisconnectAction()
        self._on_enforcement = on_enforcement
        self._mutex = threading.RLock()
        self._handlers: dict[str, Callable[[Connection, Any], None]] = {
            DECLARE_IDENTITY: self._on_declare_identity,
            SUBMIT_DRAWING_SEGMENT: self._on_segment,
            REQUEST_AUTHENTICATION: self._on_authentication,
            TOGGLE_LOCK: self._on_toggle_lock,
            REQUEST_RESET: self._on_reset,
        }

    @property
    def lock_state(self) -> LockState:
        return self.lock.state

    def connect(self, channel: Channel) -> Connection:
        """Register a new connection and send it the current board."""
        with self._mutex:
            conn = self.registry.open(channel)
            self._send(conn, FULL_STATE_SNAPSHOT, self.strokes.snapshot())
            self._send(conn, LOCK_STATE_BROADCAST, self.lock.state.to_payload())
            return conn

    def disconnect(self, connection_id: str) -> None:
        with self._mutex:
            self.registry.close(connection_id)

    def dispatch(self, connection_id: str, raw: str | bytes) -> None:
        """Process one raw inbound frame."""
        with self._mutex:
            conn = self.registry.get(connection_id)
            if conn is None:
                logger.debug("Frame for closed session %s dropped", connection_id)
                return
            try:
                event_type, payload = parse_frame(raw)
            except MalformedRequest as e:
                self._reject_malformed(conn, e)
                return
            self._handlers[event_type](conn, payload)

    def handle(self, connection_id: str, event_type: str, data: Any = None) -> None:
        """Process an already-decoded event."""
        with self._mutex:
            conn = self.registry.get(connection_id)
            if conn is None:
                return
            try:
                payload = parse_payload(event_type, data)
            except MalformedRequest as e:
                self._reject_malformed(conn, e)
                return
            self._handlers[event_type](conn, payload)

    # --- Handlers ---

    def _on_declare_identity(self, conn: Connection, msg: DeclareIdentity) -> None:
        if conn.identity is not None and conn.identity != msg.identity:
            if conn.privileged:
                logger.warning(
                    "Privilege revoked on %s: identity changed from %s to %s",
                    conn.id,
                    conn.identity,
                    msg.identity,
                )
            conn.privileged = False
        conn.identity = msg.identity
        conn.color = assign_color(msg.color)
        self._send(conn, ASSIGNED_COLOR, conn.color)
        logger.info("Client identified: %s with color %s", conn.identity, conn.color)

    def _on_segment(self, conn: Connection, segment: DrawingSegment) -> None:
        decision = self.admission.evaluate(conn)
        self._apply(conn, decision)
        if not decision.forward:
            return
        if not self.lock.drawing_allowed(conn):
            logger.debug("Drawing blocked for non-admin %s", conn.id)
            return
        data = segment.model_dump()
        self.strokes.append(data)
        self._broadcast(SEGMENT_BROADCAST, data, exclude=conn.id)

    def _on_authentication(self, conn: Connection, req: AuthRequest) -> None:
        result = self.auth.attempt(req.identity, req.code)
        if result.success:
            conn.privileged = True
            self._record("auth_granted", conn, identity=req.identity)
        elif result.block_started:
            self._record("auth_block", conn, identity=req.identity)
        self._send(conn, AUTHENTICATION_RESULT, result.to_payload())

    def _on_toggle_lock(self, conn: Connection, msg: LockToggle) -> None:
        if self.lock.toggle(conn, msg.locked):
            self._record("lock_toggle", conn, detail=f"locked={msg.locked}")

    def _on_reset(self, conn: Connection, req: ResetRequest) -> None:
        identity = conn.identity or req.identity
        if not identity:
            self._send(conn, RESET_REJECTED, {"reason": "Invalid client identity"})
            return
        if not self.lock.reset_allowed(conn):
            self._send(conn, RESET_REJECTED, {"reason": "Reset is locked by admin"})
            logger.info("Reset blocked for non-admin %s", conn.id)
            return
        verdict = self.cooldowns.admit(identity, privileged=conn.privileged)
        if not verdict.admitted:
            self._send(
                conn, RESET_COOLDOWN, {"remainingSeconds": verdict.remaining_seconds}
            )
            return

        cleared = self.strokes.clear()
        self._broadcast(RESET_BROADCAST)
        who = "admin" if conn.privileged else "user"
        logger.warning("Canvas reset by %s %s (%d segments)", who, identity, cleared)
        self._record("reset", conn, identity=identity, detail=f"by {who}")

    # --- Side effects ---

    def _apply(self, conn: Connection, decision: Decision) -> None:
        if decision.violation_recorded:
            self._record(
                "violation",
                conn,
                detail=f"{decision.rate} events/window",
                violation_count=decision.violation_count,
            )
        if decision.tier is Tier.DISCONNECT:
            self._disconnect.execute(conn.channel, decision)
            self.registry.close(conn.id)
            self._record(
                "disconnect", conn, violation_count=decision.violation_count
            )
        elif decision.notice and not self._warn.execute(conn.channel, decision):
            logger.warning("Dropping dead session %s (warning failed)", conn.id)
            self.registry.close(conn.id)

    def _reject_malformed(self, conn: Connection, error: MalformedRequest) -> None:
        logger.info("Malformed request from %s: %s", conn.id, error)
        if error.event_type == REQUEST_AUTHENTICATION:
            result = AuthResult(AuthOutcome.MALFORMED)
            self._send(conn, AUTHENTICATION_RESULT, result.to_payload())

    def _broadcast_lock(self, state: LockState) -> None:
        self._broadcast(LOCK_STATE_BROADCAST, state.to_payload())

    def _broadcast(self, event: str, data: Any = None, exclude: str | None = None) -> None:
        for conn in self.registry:
            if conn.id != exclude:
                self._send(conn, event, data)

    def _send(self, conn: Connection, event: str, data: Any = None) -> None:
        try:
            conn.channel.send(event, data)
        except ChannelClosed:
            logger.warning("Dropping dead session %s (send failed)", conn.id)
            self.registry.close(conn.id)

    def _record(
        self,
        kind: str,
        conn: Connection,
        identity: str | None = None,
        detail: str = "",
        violation_count: int = 0,
    ) -> None:
        if self._on_enforcement is None:
            return
        self._on_enforcement(
            EnforcementRecord(
                kind=kind,
                connection_id=conn.id,
                identity=identity or conn.identity or "",
                detail=detail,
                violation_count=violation_count,
            )
        )
