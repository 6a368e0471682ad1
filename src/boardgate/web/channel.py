"""Queue-backed outbound channel bridging the sync hub to an async socket."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from fastapi import WebSocket, WebSocketDisconnect

from boardgate.actions.base import POLICY_VIOLATION_CLOSE_CODE, ChannelClosed
from boardgate.protocol import encode_frame

logger = logging.getLogger(__name__)

MAX_PENDING_FRAMES = 1024


class QueueChannel:
    """Non-blocking ``send``/``close`` for the hub; ``pump`` does the I/O.

    A client that falls ``max_pending`` frames behind is closed rather than
    buffered without bound.
    """

    def __init__(self, max_pending: int = MAX_PENDING_FRAMES) -> None:
        self._queue: asyncio.Queue[str | None] = asyncio.Queue()
        self._max_pending = max_pending
        self.closed = False
        self.close_code: int | None = None
        self.close_reason = ""

    def send(self, event: str, data: Any = None) -> None:
        if self.closed:
            raise ChannelClosed("channel closed")
        if self._queue.qsize() >= self._max_pending:
            self.close(POLICY_VIOLATION_CLOSE_CODE, "outbound backlog")
            raise ChannelClosed("outbound backlog exceeded")
        self._queue.put_nowait(encode_frame(event, data))

    def close(self, code: int = POLICY_VIOLATION_CLOSE_CODE, reason: str = "") -> None:
        if self.closed:
            return
        self.closed = True
        self.close_code = code
        self.close_reason = reason
        self._queue.put_nowait(None)

    def pending(self) -> int:
        return self._queue.qsize()

    async def pump(self, websocket: WebSocket) -> None:
        """Write queued frames until closed, then close the socket."""
        try:
            while True:
                frame = await self._queue.get()
                if frame is None:
                    break
                await websocket.send_text(frame)
            await websocket.close(
                code=self.close_code or POLICY_VIOLATION_CLOSE_CODE,
                reason=self.close_reason,
            )
        except WebSocketDisconnect:
            logger.debug("Client went away while frames were pending")
            self.closed = True
