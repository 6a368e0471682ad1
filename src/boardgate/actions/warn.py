"""Warn action — tell a client it is being slowed down or paused."""

from __future__ import annotations

import logging
import math

from boardgate.actions.base import Channel, ChannelClosed
from boardgate.admission.models import Decision
from boardgate.policy.models import AdmissionPolicy
from boardgate.protocol import RATE_LIMIT_WARNING

logger = logging.getLogger(__name__)

SLOW_DOWN_MESSAGE = "You are drawing too fast. Please slow down."


class WarnAction:
    """Sends ``rate-limit-warning`` for notices and timed pauses."""

    def __init__(self, policy: AdmissionPolicy) -> None:
        self._max_violations = policy.max_violations

    def execute(self, channel: Channel, decision: Decision) -> bool:
        pause_seconds = math.ceil(decision.pause_seconds)
        if pause_seconds:
            message = (
                f"Rate limit exceeded. Drawing paused for {pause_seconds} seconds."
            )
        else:
            message = SLOW_DOWN_MESSAGE
        try:
            channel.send(
                RATE_LIMIT_WARNING,
                {
                    "message": message,
                    "violationCount": decision.violation_count,
                    "maxViolations": self._max_violations,
                    "pauseSeconds": pause_seconds,
                },
            )
        except ChannelClosed:
            logger.debug("Warning not delivered: channel already closed")
            return False
        return True
