"""WebSocket endpoint carrying the shared whiteboard stream."""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, WebSocket

from boardgate.hub import BoardHub
from boardgate.web.channel import QueueChannel

logger = logging.getLogger(__name__)

router = APIRouter(tags=["live"])


@router.websocket("/ws")
async def board_ws(websocket: WebSocket):
    """Feed inbound frames to the hub one at a time; a writer task drains replies."""
    await websocket.accept()

    hub: BoardHub = websocket.app.state.hub
    channel = QueueChannel()
    conn = hub.connect(channel)
    writer = asyncio.create_task(channel.pump(websocket))

    client_gone = False
    try:
        while not channel.closed:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                client_gone = True
                break
            raw = message.get("text")
            if raw is None:
                raw = message.get("bytes") or b""
            hub.dispatch(conn.id, raw)
    finally:
        hub.disconnect(conn.id)
        if client_gone or not channel.closed:
            writer.cancel()

    results = await asyncio.gather(writer, return_exceptions=True)
    for result in results:
        if isinstance(result, Exception):
            logger.debug("Writer for %s ended with %r", conn.id, result)
