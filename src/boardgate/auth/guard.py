"""Authentication guard — brute-force-hardened gate to privileged status."""

from __future__ import annotations

import enum
import hmac
import logging
import math
import time
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, field

from boardgate.policy.models import AuthPolicy

logger = logging.getLogger(__name__)

FAILURE_MESSAGE = "Admin code invalid or temporarily blocked"
SUCCESS_MESSAGE = "Admin authentication successful"


class AuthOutcome(enum.Enum):
    """Why an attempt ended the way it did. Never sent to the client."""

    GRANTED = "granted"
    DENIED = "denied"
    RATE_LIMITED = "rate_limited"
    BLOCKED = "blocked"
    MALFORMED = "malformed"


@dataclass
class AttemptRecord:
    """Per-identity attempt history; survives reconnects."""

    last_attempt: float | None = None
    failures: deque[float] = field(default_factory=deque)
    blocked_until: float | None = None


@dataclass(frozen=True)
class AuthResult:
    outcome: AuthOutcome
    remaining_seconds: int | None = None
    block_started: bool = False

    @property
    def success(self) -> bool:
        return self.outcome is AuthOutcome.GRANTED

    def to_payload(self) -> dict:
        """Client-facing form. Every failure reads the same."""
        if self.success:
            return {"success": True, "message": SUCCESS_MESSAGE}
        payload: dict = {"success": False, "message": FAILURE_MESSAGE}
        if self.remaining_seconds is not None:
            payload["remainingSeconds"] = self.remaining_seconds
        return payload


class AuthGuard:
    """Backoff, lockout and amnesty keyed by persistent identity.

    Elevation itself is the caller's business: a granted result says the
    code matched, and only the requesting connection should be elevated.
    """

    def __init__(
        self,
        policy: AuthPolicy,
        clock: Callable[[], float] = time.monotonic,
        sweep_interval: float = 60.0,
    ) -> None:
        self.policy = policy
        self._clock = clock
        self._records: dict[str, AttemptRecord] = {}
        self._sweep_interval = sweep_interval
        self._next_sweep = clock() + sweep_interval
        if policy.admin_code is None:
            logger.warning("No admin code configured; authentication cannot succeed")

    def attempt(self, identity: object, code: object) -> AuthResult:
        if (
            not isinstance(identity, str)
            or not identity
            or not isinstance(code, int)
            or isinstance(code, bool)
        ):
            logger.info("Malformed authentication payload rejected")
            return AuthResult(AuthOutcome.MALFORMED)

        now = self._clock()
        self._maybe_sweep(now)
        record = self._records.setdefault(identity, AttemptRecord())

        if record.blocked_until is not None:
            if now < record.blocked_until:
                remaining = _ceil_seconds(record.blocked_until - now)
                logger.info(
                    "Blocked admin attempt from %s: %ds remaining", identity, remaining
                )
                return AuthResult(AuthOutcome.BLOCKED, remaining_seconds=remaining)
            # Amnesty is total once a block expires
            record.blocked_until = None
            record.failures.clear()

        required = self.required_delay(identity, now)
        if record.last_attempt is not None:
            elapsed = now - record.last_attempt
            if elapsed < required:
                remaining = _ceil_seconds(required - elapsed)
                logger.info(
                    "Rate limit for %s: %ds remaining", identity, remaining
                )
                return AuthResult(AuthOutcome.RATE_LIMITED, remaining_seconds=remaining)

        record.last_attempt = now

        if self._matches(code):
            record.failures.clear()
            record.blocked_until = None
            logger.warning("Admin authentication granted for %s", identity)
            return AuthResult(AuthOutcome.GRANTED)

        record.failures.append(now)
        _prune(record.failures, now, self.policy.tracking_window)
        failures = len(record.failures)
        if failures >= self.policy.max_failures:
            record.blocked_until = now + self.policy.block_duration
            logger.warning(
                "Identity %s blocked for %ds after %d failed attempts",
                identity,
                _ceil_seconds(self.policy.block_duration),
                failures,
            )
            return AuthResult(AuthOutcome.DENIED, block_started=True)

        logger.info(
            "Failed admin attempt from %s (%d recent failures)", identity, failures
        )
        return AuthResult(AuthOutcome.DENIED)

    def required_delay(self, identity: str, now: float | None = None) -> float:
        """Minimum gap before the next attempt, from recent failures."""
        now = self._clock() if now is None else now
        record = self._records.get(identity)
        recent = 0
        if record is not None:
            _prune(record.failures, now, self.policy.tracking_window)
            recent = len(record.failures)
        schedule = self.policy.backoff_schedule
        return schedule[min(recent, len(schedule) - 1)]

    def record_for(self, identity: str) -> AttemptRecord | None:
        return self._records.get(identity)

    def sweep(self, now: float | None = None) -> int:
        """Drop records that can no longer influence a decision."""
        now = self._clock() if now is None else now
        horizon = self.policy.backoff_schedule[-1]
        stale = []
        for identity, record in self._records.items():
            if record.blocked_until is not None and now < record.blocked_until:
                continue
            if record.blocked_until is None:
                _prune(record.failures, now, self.policy.tracking_window)
                if record.failures:
                    continue
            if record.last_attempt is not None and now - record.last_attempt < horizon:
                continue
            stale.append(identity)
        for identity in stale:
            del self._records[identity]
        if stale:
            logger.debug("Swept %d stale authentication records", len(stale))
        return len(stale)

    def __len__(self) -> int:
        return len(self._records)

    def _maybe_sweep(self, now: float) -> None:
        if now >= self._next_sweep:
            self.sweep(now)
            self._next_sweep = now + self._sweep_interval

    def _matches(self, code: int) -> bool:
        secret = self.policy.admin_code
        if secret is None:
            return False
        return hmac.compare_digest(str(code).encode(), str(secret).encode())


def _prune(stamps: deque[float], now: float, window: float) -> None:
    while stamps and now - stamps[0] >= window:
        stamps.popleft()


def _ceil_seconds(seconds: float) -> int:
    return max(1, math.ceil(seconds))
