"""Shared test fixtures."""

from __future__ import annotations

from typing import Any

import pytest

from boardgate.actions.base import ChannelClosed
from boardgate.policy.models import AdmissionPolicy, AuthPolicy, BoardPolicy, ResetPolicy

ADMIN_CODE = 19931993


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingChannel:
    """Channel that keeps every outbound frame in memory."""

    def __init__(self) -> None:
        self.frames: list[tuple[str, Any]] = []
        self.closed = False
        self.close_code: int | None = None

    def send(self, event: str, data: Any = None) -> None:
        if self.closed:
            raise ChannelClosed("closed")
        self.frames.append((event, data))

    def close(self, code: int = 1008, reason: str = "") -> None:
        self.closed = True
        self.close_code = code

    def of_type(self, event: str) -> list[Any]:
        return [data for name, data in self.frames if name == event]

    def clear(self) -> None:
        self.frames.clear()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def channel() -> RecordingChannel:
    return RecordingChannel()


@pytest.fixture
def make_channel():
    return RecordingChannel


@pytest.fixture
def admission_policy() -> AdmissionPolicy:
    return AdmissionPolicy()


@pytest.fixture
def auth_policy() -> AuthPolicy:
    return AuthPolicy(admin_code=ADMIN_CODE)


@pytest.fixture
def board_policy(auth_policy: AuthPolicy) -> BoardPolicy:
    return BoardPolicy(
        name="test",
        admission=AdmissionPolicy(),
        auth=auth_policy,
        reset=ResetPolicy(cooldown=300.0),
    )


@pytest.fixture
def admin_code() -> int:
    return ADMIN_CODE
