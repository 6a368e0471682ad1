"""Admission controller — hot path, classifies every drawing submission."""

from __future__ import annotations

import logging
import time
from collections import deque
from collections.abc import Callable

from boardgate.admission.models import Decision, Tier
from boardgate.policy.models import AdmissionPolicy
from boardgate.session.models import Connection

logger = logging.getLogger(__name__)


class AdmissionController:
    """Sliding-window rate admission with escalating consequences.

    Every event is stamped into the session's windows before it is
    classified, so dropped events still count toward the measured rate.
    Pauses are stored deadlines compared lazily on the next event.
    """

    def __init__(
        self,
        policy: AdmissionPolicy,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.policy = policy
        self._clock = clock

    def classify(self, rate: int, long_count: int = 0) -> Tier:
        """Most severe tier a measured rate qualifies for.

        DISCONNECT here means hard excess; whether the connection is
        actually dropped depends on the violation ledger.
        """
        p = self.policy
        if rate > p.hard_rate:
            return Tier.DISCONNECT
        if rate > p.pause_rate:
            return Tier.PAUSE
        if rate > p.throttle_rate or long_count > p.long_window_cap:
            return Tier.THROTTLE
        if rate > p.warn_rate:
            return Tier.WARN
        return Tier.ALLOW

    def evaluate(self, conn: Connection) -> Decision:
        if conn.privileged:
            return Decision(tier=Tier.ALLOW, forward=True, bypassed=True)

        now = self._clock()
        rec = conn.record
        rec.event_count += 1
        rate = _stamp(rec.short_window, now, self.policy.short_window)
        long_count = _stamp(rec.long_window, now, self.policy.long_window)
        band = self.classify(rate, long_count)

        if rec.paused_until is not None:
            if now < rec.paused_until:
                return self._while_paused(conn, band, rate, now)
            rec.paused_until = None
            logger.info("Pause expired for %s", conn.id)

        if band is Tier.ALLOW:
            rec.warned = False
            return Decision(tier=Tier.ALLOW, forward=True, rate=rate)

        if band is Tier.WARN:
            if rec.warned:
                return Decision(tier=Tier.WARN, forward=True, rate=rate)
            rec.warned = True
            logger.info("Slow-down notice for %s at %d events/window", conn.id, rate)
            return Decision(
                tier=Tier.WARN,
                forward=False,
                rate=rate,
                violation_count=rec.ledger.count(now),
                notice=True,
            )

        if band is Tier.THROTTLE:
            forward = rec.event_count % 2 == 0
            logger.debug(
                "Throttling %s at %d events/window (forward=%s)", conn.id, rate, forward
            )
            return Decision(tier=Tier.THROTTLE, forward=forward, rate=rate)

        return self._escalate(conn, band, rate, now)

    def _while_paused(
        self, conn: Connection, band: Tier, rate: int, now: float
    ) -> Decision:
        rec = conn.record
        remaining = rec.paused_until - now if rec.paused_until is not None else 0.0
        if band is Tier.DISCONNECT and self._can_record(conn, now):
            count = rec.ledger.record(now)
            logger.warning(
                "Violation %d/%d from %s while paused (%d events/window)",
                count,
                self.policy.max_violations,
                conn.id,
                rate,
            )
            if count >= self.policy.max_violations:
                return self._disconnect(conn, rate, count)
            return Decision(
                tier=Tier.PAUSE,
                forward=False,
                rate=rate,
                violation_count=count,
                pause_seconds=remaining,
                violation_recorded=True,
            )
        return Decision(
            tier=Tier.PAUSE,
            forward=False,
            rate=rate,
            violation_count=rec.ledger.count(now),
            pause_seconds=remaining,
        )

    def _escalate(self, conn: Connection, band: Tier, rate: int, now: float) -> Decision:
        rec = conn.record
        if not self._can_record(conn, now):
            return Decision(
                tier=Tier.PAUSE,
                forward=False,
                rate=rate,
                violation_count=rec.ledger.count(now),
            )

        count = rec.ledger.record(now)
        logger.warning(
            "Violation %d/%d from %s (%s tier, %d events/window)",
            count,
            self.policy.max_violations,
            conn.id,
            band.value,
            rate,
        )

        if band is Tier.DISCONNECT and count >= self.policy.max_violations:
            return self._disconnect(conn, rate, count)

        # The first violation a session ever records is informational only
        if rec.ledger.is_first_ever or (band is Tier.PAUSE and count < 2):
            return Decision(
                tier=Tier.PAUSE,
                forward=False,
                rate=rate,
                violation_count=count,
                violation_recorded=True,
            )

        pause = (
            self.policy.long_pause if band is Tier.DISCONNECT else self.policy.short_pause
        )
        rec.paused_until = now + pause
        logger.warning("Pausing %s for %.1fs", conn.id, pause)
        return Decision(
            tier=Tier.PAUSE,
            forward=False,
            rate=rate,
            violation_count=count,
            pause_seconds=pause,
            notice=True,
            violation_recorded=True,
        )

    def _disconnect(self, conn: Connection, rate: int, count: int) -> Decision:
        logger.critical(
            "DISCONNECTING %s (identity=%s) after %d violations at %d events/window",
            conn.id,
            conn.identity or "<undeclared>",
            count,
            rate,
        )
        return Decision(
            tier=Tier.DISCONNECT,
            forward=False,
            rate=rate,
            violation_count=count,
            violation_recorded=True,
        )

    def _can_record(self, conn: Connection, now: float) -> bool:
        last = conn.record.ledger.last()
        return last is None or now - last >= self.policy.violation_spacing


def _stamp(window: deque[float], now: float, size: float) -> int:
    window.append(now)
    while window and now - window[0] >= size:
        window.popleft()
    return len(window)
