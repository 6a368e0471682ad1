"""Tests for frame parsing and payload validation."""

from __future__ import annotations

import json

import pytest

from boardgate.protocol import (
    REQUEST_AUTHENTICATION,
    AuthRequest,
    DeclareIdentity,
    DrawingSegment,
    LockToggle,
    MalformedRequest,
    ResetRequest,
    encode_frame,
    parse_frame,
    parse_payload,
)


def _frame(event: str, data) -> str:
    return json.dumps({"type": event, "data": data})


def test_parse_drawing_segment():
    event, payload = parse_frame(
        _frame(
            "submit-drawing-segment",
            {"x0": 1, "y0": 2.5, "x1": 3, "y1": 4, "color": "#FF6B6B", "timestamp": 17},
        )
    )
    assert event == "submit-drawing-segment"
    assert isinstance(payload, DrawingSegment)
    assert payload.y0 == 2.5
    assert payload.model_dump()["color"] == "#FF6B6B"


def test_identity_accepts_client_id_alias():
    _, payload = parse_frame(_frame("declare-identity", {"clientId": "c1", "color": "#000000"}))
    assert isinstance(payload, DeclareIdentity)
    assert payload.identity == "c1"


def test_toggle_lock_accepts_bare_boolean():
    _, payload = parse_frame(_frame("toggle-lock", True))
    assert isinstance(payload, LockToggle)
    assert payload.locked is True


def test_toggle_lock_rejects_non_boolean():
    with pytest.raises(MalformedRequest):
        parse_frame(_frame("toggle-lock", "yes"))


def test_reset_without_payload():
    _, payload = parse_frame(json.dumps({"type": "request-reset"}))
    assert isinstance(payload, ResetRequest)
    assert payload.identity is None


def test_auth_code_must_be_an_integer():
    with pytest.raises(MalformedRequest) as exc:
        parse_frame(_frame("request-authentication", {"code": "1234", "identity": "a"}))
    assert exc.value.event_type == REQUEST_AUTHENTICATION

    with pytest.raises(MalformedRequest):
        parse_payload("request-authentication", {"code": True, "identity": "a"})

    payload = parse_payload("request-authentication", {"code": 1234, "clientId": "a"})
    assert isinstance(payload, AuthRequest)
    assert payload.code == 1234


def test_missing_identity_is_malformed():
    with pytest.raises(MalformedRequest):
        parse_payload("request-authentication", {"code": 1})
    with pytest.raises(MalformedRequest):
        parse_payload("declare-identity", {"identity": "   "})


@pytest.mark.parametrize(
    "raw",
    [
        "not json",
        "[]",
        json.dumps({"data": {}}),
        json.dumps({"type": "fly-away", "data": {}}),
        _frame("submit-drawing-segment", {"x0": 1}),
        _frame("submit-drawing-segment", [1, 2, 3]),
    ],
)
def test_bad_frames_raise_malformed(raw: str):
    with pytest.raises(MalformedRequest):
        parse_frame(raw)


def test_envelope_errors_carry_no_event_type():
    with pytest.raises(MalformedRequest) as exc:
        parse_frame("{")
    assert exc.value.event_type is None


def test_encode_frame():
    assert json.loads(encode_frame("reset-broadcast")) == {
        "type": "reset-broadcast",
        "data": None,
    }


@pytest.mark.parametrize("field", ["x0", "y0", "x1", "y1", "timestamp"])
def test_overflowing_numbers_are_malformed(field: str):
    values = {"x0": "1", "y0": "2", "x1": "3", "y1": "4", "timestamp": "5"}
    values[field] = "1e999"
    body = ", ".join(f'"{k}": {v}' for k, v in values.items())
    raw = '{"type": "submit-drawing-segment", "data": {%s, "color": "#000000"}}' % body

    with pytest.raises(MalformedRequest) as exc:
        parse_frame(raw)
    assert exc.value.event_type == "submit-drawing-segment"


@pytest.mark.parametrize("field", ["x0", "y0", "x1", "y1", "timestamp"])
@pytest.mark.parametrize("value", [float("inf"), float("-inf"), float("nan")])
def test_non_finite_numbers_are_malformed(field: str, value: float):
    data = {"x0": 1, "y0": 2, "x1": 3, "y1": 4, "color": "#000000", "timestamp": 5}
    data[field] = value
    with pytest.raises(MalformedRequest):
        parse_payload("submit-drawing-segment", data)
