"""Reset cooldown tracker — per-identity gate on clearing the board."""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CooldownVerdict:
    admitted: bool
    remaining_seconds: int = 0


class ResetCooldownTracker:
    """Last-reset stamps keyed by identity.

    Stamps older than the cooldown cannot reject anything, so they are
    swept lazily at most once per ``sweep_interval``.
    """

    def __init__(
        self,
        cooldown: float,
        sweep_interval: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.cooldown = cooldown
        self._clock = clock
        self._last_reset: dict[str, float] = {}
        self._sweep_interval = sweep_interval
        self._next_sweep = clock() + sweep_interval

    def admit(self, identity: str, privileged: bool = False) -> CooldownVerdict:
        if privileged:
            return CooldownVerdict(admitted=True)

        now = self._clock()
        if now >= self._next_sweep:
            self.sweep(now)
            self._next_sweep = now + self._sweep_interval

        last = self._last_reset.get(identity)
        if last is not None:
            elapsed = now - last
            if elapsed < self.cooldown:
                remaining = max(1, math.ceil(self.cooldown - elapsed))
                logger.info(
                    "Reset cooldown active for %s: %ds remaining", identity, remaining
                )
                return CooldownVerdict(admitted=False, remaining_seconds=remaining)

        self._last_reset[identity] = now
        return CooldownVerdict(admitted=True)

    def sweep(self, now: float | None = None) -> int:
        now = self._clock() if now is None else now
        stale = [i for i, t in self._last_reset.items() if now - t >= self.cooldown]
        for identity in stale:
            del self._last_reset[identity]
        return len(stale)

    def __len__(self) -> int:
        return len(self._last_reset)
