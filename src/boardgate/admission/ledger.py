"""Violation ledger — decaying per-session record of serious rate excess."""

from __future__ import annotations

from collections import deque


class ViolationLedger:
    """Append-only timestamp sequence pruned to its memory window on read.

    The surviving entry count is the authoritative violation count.
    ``total_recorded`` never decays, which is how the controller tells a
    session's first-ever violation apart from the first one after decay.
    """

    def __init__(self, memory: float) -> None:
        self._memory = memory
        self._stamps: deque[float] = deque()
        self.total_recorded = 0

    def record(self, now: float) -> int:
        """Append a violation at ``now`` and return the surviving count."""
        self._stamps.append(now)
        self.total_recorded += 1
        return self.count(now)

    def count(self, now: float) -> int:
        self._prune(now)
        return len(self._stamps)

    def last(self) -> float | None:
        return self._stamps[-1] if self._stamps else None

    @property
    def is_first_ever(self) -> bool:
        """True when exactly one violation has ever been recorded."""
        return self.total_recorded == 1

    def _prune(self, now: float) -> None:
        stamps = self._stamps
        while stamps and now - stamps[0] >= self._memory:
            stamps.popleft()
