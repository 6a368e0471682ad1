"""In-memory stroke list shared by every connection."""

from __future__ import annotations


class StrokeStore:
    """Append-only list of accepted segments, cleared by resets."""

    def __init__(self) -> None:
        self._segments: list[dict] = []

    def append(self, segment: dict) -> None:
        self._segments.append(segment)

    def clear(self) -> int:
        count = len(self._segments)
        self._segments = []
        return count

    def snapshot(self) -> list[dict]:
        return list(self._segments)

    def __len__(self) -> int:
        return len(self._segments)
