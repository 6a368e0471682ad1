"""Repository classes for async CRUD operations on SQLite."""

from __future__ import annotations

import aiosqlite

from boardgate.session.models import EnforcementRecord


class EnforcementRepo:
    """Append and query enforcement outcomes."""

    def __init__(self, db: aiosqlite.Connection) -> None:
        self._db = db

    async def create(self, record: EnforcementRecord) -> None:
        await self._db.execute(
            "INSERT INTO enforcement_events "
            "(id, kind, connection_id, identity, detail, "
            "violation_count, timestamp) "
            "VALUES (?, ?, ?, ?, ?, ?, ?)",
            (
                record.id,
                record.kind,
                record.connection_id,
                record.identity,
                record.detail,
                record.violation_count,
                record.timestamp,
            ),
        )
        await self._db.commit()

    async def list_recent(self, limit: int = 50, offset: int = 0) -> list[dict]:
        cursor = await self._db.execute(
            "SELECT * FROM enforcement_events "
            "ORDER BY timestamp DESC LIMIT ? OFFSET ?",
            (limit, offset),
        )
        return [dict(row) async for row in cursor]

    async def list_by_identity(self, identity: str) -> list[dict]:
        cursor = await self._db.execute(
            "SELECT * FROM enforcement_events WHERE identity = ? ORDER BY timestamp",
            (identity,),
        )
        return [dict(row) async for row in cursor]

    async def count_by_kind(self) -> dict[str, int]:
        cursor = await self._db.execute(
            "SELECT kind, COUNT(*) AS n FROM enforcement_events GROUP BY kind"
        )
        return {row["kind"]: row["n"] async for row in cursor}
