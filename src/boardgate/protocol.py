"""Wire protocol — JSON frames and pydantic models for inbound payloads."""

from __future__ import annotations

import json
from typing import Any

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictInt,
    ValidationError,
)

# Inbound
DECLARE_IDENTITY = "declare-identity"
SUBMIT_DRAWING_SEGMENT = "submit-drawing-segment"
REQUEST_AUTHENTICATION = "request-authentication"
TOGGLE_LOCK = "toggle-lock"
REQUEST_RESET = "request-reset"

# Outbound
ASSIGNED_COLOR = "assigned-color"
FULL_STATE_SNAPSHOT = "full-state-snapshot"
SEGMENT_BROADCAST = "segment-broadcast"
LOCK_STATE_BROADCAST = "lock-state-broadcast"
RESET_BROADCAST = "reset-broadcast"
AUTHENTICATION_RESULT = "authentication-result"
RATE_LIMIT_WARNING = "rate-limit-warning"
RATE_LIMIT_DISCONNECT = "rate-limit-disconnect"
RESET_COOLDOWN = "reset-cooldown"
RESET_REJECTED = "reset-rejected"

_IDENTITY_ALIASES = AliasChoices("identity", "clientId")


class MalformedRequest(ValueError):
    """An inbound frame that cannot be interpreted.

    ``event_type`` is set when the envelope parsed but the payload did not.
    """

    def __init__(self, reason: str, event_type: str | None = None) -> None:
        super().__init__(reason)
        self.event_type = event_type


class _Inbound(BaseModel):
    model_config = ConfigDict(
        extra="ignore", str_strip_whitespace=True, allow_inf_nan=False
    )


class Frame(BaseModel):
    type: str = Field(min_length=1, max_length=64)
    data: Any = None


class DeclareIdentity(_Inbound):
    identity: str = Field(min_length=1, max_length=128, validation_alias=_IDENTITY_ALIASES)
    color: str | None = Field(default=None, max_length=32)


class DrawingSegment(_Inbound):
    x0: float
    y0: float
    x1: float
    y1: float
    color: str = Field(min_length=1, max_length=32)
    timestamp: float | None = None


class AuthRequest(_Inbound):
    code: StrictInt
    identity: str = Field(min_length=1, max_length=128, validation_alias=_IDENTITY_ALIASES)


class LockToggle(_Inbound):
    locked: StrictBool


class ResetRequest(_Inbound):
    identity: str | None = Field(
        default=None, max_length=128, validation_alias=_IDENTITY_ALIASES
    )


_PAYLOADS: dict[str, type[_Inbound]] = {
    DECLARE_IDENTITY: DeclareIdentity,
    SUBMIT_DRAWING_SEGMENT: DrawingSegment,
    REQUEST_AUTHENTICATION: AuthRequest,
    TOGGLE_LOCK: LockToggle,
    REQUEST_RESET: ResetRequest,
}


def parse_frame(raw: str | bytes) -> tuple[str, _Inbound]:
    """Decode one inbound frame into its event type and validated payload."""
    try:
        frame = Frame.model_validate_json(raw)
    except ValidationError as e:
        raise MalformedRequest(f"bad envelope: {e.error_count()} error(s)") from e
    return frame.type, parse_payload(frame.type, frame.data)


def parse_payload(event_type: str, data: Any) -> _Inbound:
    model = _PAYLOADS.get(event_type)
    if model is None:
        raise MalformedRequest(f"unknown event type {event_type!r}")

    # toggle-lock carries the bare new state; reset may carry nothing
    if event_type == TOGGLE_LOCK and not isinstance(data, dict):
        data = {"locked": data}
    elif event_type == REQUEST_RESET and data is None:
        data = {}

    if not isinstance(data, dict):
        raise MalformedRequest(f"{event_type} payload must be an object", event_type)
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise MalformedRequest(
            f"invalid {event_type} payload: {e.error_count()} error(s)", event_type
        ) from e


def encode_frame(event: str, data: Any = None) -> str:
    return json.dumps({"type": event, "data": data})
