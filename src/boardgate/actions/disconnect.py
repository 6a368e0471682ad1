"""Disconnect action — terminate a connection for hard abuse."""

from __future__ import annotations

import logging

from boardgate.actions.base import POLICY_VIOLATION_CLOSE_CODE, Channel, ChannelClosed
from boardgate.admission.models import Decision
from boardgate.protocol import RATE_LIMIT_DISCONNECT

logger = logging.getLogger(__name__)

DISCONNECT_MESSAGE = "Disconnected for repeated rate limit violations."


class DisconnectAction:
    """Notifies the client, then closes its transport.

    Tearing down the session record is the caller's job; this only deals
    with the wire.
    """

    def execute(self, channel: Channel, decision: Decision) -> bool:
        delivered = True
        try:
            channel.send(
                RATE_LIMIT_DISCONNECT,
                {
                    "message": DISCONNECT_MESSAGE,
                    "violationCount": decision.violation_count,
                },
            )
        except ChannelClosed:
            delivered = False
        try:
            channel.close(POLICY_VIOLATION_CLOSE_CODE, "rate limit")
        except ChannelClosed:
            logger.debug("Channel already closed before forced disconnect")
        return delivered
