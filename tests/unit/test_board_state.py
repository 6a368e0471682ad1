"""Tests for the lock coordinator, reset cooldowns and stroke store."""

from __future__ import annotations

from unittest.mock import MagicMock

from boardgate.admission.ledger import ViolationLedger
from boardgate.board.cooldown import ResetCooldownTracker
from boardgate.board.lock import LockCoordinator, LockState
from boardgate.board.palette import PALETTE, assign_color
from boardgate.board.strokes import StrokeStore
from boardgate.session.models import Connection, SessionRecord


def _make_conn(privileged: bool = False) -> Connection:
    return Connection(
        channel=MagicMock(),
        record=SessionRecord(ledger=ViolationLedger(60.0)),
        privileged=privileged,
    )


def test_unprivileged_toggle_is_silently_ignored():
    seen: list[LockState] = []
    lock = LockCoordinator(on_change=seen.append)

    assert lock.toggle(_make_conn(), True) is False
    assert lock.state == LockState()
    assert seen == []


def test_toggling_twice_restores_state_and_broadcasts_each_time():
    seen: list[LockState] = []
    lock = LockCoordinator(on_change=seen.append)
    admin = _make_conn(privileged=True)
    original = lock.state

    lock.toggle(admin, True)
    assert lock.state == LockState(drawing_locked=True, reset_locked=True)
    lock.toggle(admin, False)

    assert lock.state == original
    assert seen == [
        LockState(drawing_locked=True, reset_locked=True),
        LockState(drawing_locked=False, reset_locked=False),
    ]


def test_lock_gates_only_unprivileged_connections():
    lock = LockCoordinator()
    admin = _make_conn(privileged=True)
    user = _make_conn()
    lock.toggle(admin, True)

    assert not lock.drawing_allowed(user)
    assert not lock.reset_allowed(user)
    assert lock.drawing_allowed(admin)
    assert lock.reset_allowed(admin)


def test_lock_payload_shape():
    assert LockState(True, False).to_payload() == {
        "drawingLocked": True,
        "resetLocked": False,
    }


def test_cooldown_window_is_half_open(clock):
    tracker = ResetCooldownTracker(cooldown=300.0, clock=clock)

    assert tracker.admit("ann").admitted
    verdict = tracker.admit("ann")
    assert not verdict.admitted
    assert verdict.remaining_seconds == 300

    clock.advance(299.5)
    verdict = tracker.admit("ann")
    assert not verdict.admitted
    assert verdict.remaining_seconds == 1

    clock.advance(0.5)
    assert tracker.admit("ann").admitted


def test_rejected_reset_does_not_restamp(clock):
    tracker = ResetCooldownTracker(cooldown=300.0, clock=clock)
    tracker.admit("ann")
    clock.advance(100.0)
    tracker.admit("ann")
    clock.advance(200.0)
    assert tracker.admit("ann").admitted


def test_privileged_reset_bypasses_and_does_not_stamp(clock):
    tracker = ResetCooldownTracker(cooldown=300.0, clock=clock)
    for _ in range(3):
        assert tracker.admit("root", privileged=True).admitted
    assert len(tracker) == 0
    assert tracker.admit("root").admitted


def test_cooldown_sweep_evicts_expired_stamps(clock):
    tracker = ResetCooldownTracker(cooldown=300.0, sweep_interval=60.0, clock=clock)
    for name in ("a", "b", "c"):
        tracker.admit(name)
    clock.advance(200.0)
    tracker.admit("d")
    assert len(tracker) == 4

    clock.advance(150.0)
    # The next admission triggers the lazy sweep
    tracker.admit("e")
    assert len(tracker) == 2


def test_stroke_store_append_snapshot_clear():
    store = StrokeStore()
    store.append({"x0": 1})
    snapshot = store.snapshot()
    snapshot.clear()

    assert len(store) == 1
    assert store.clear() == 1
    assert store.snapshot() == []


def test_assign_color_keeps_valid_hex_and_falls_back():
    assert assign_color("#a1b2c3") == "#A1B2C3"
    assert assign_color("red") in PALETTE
    assert assign_color(None) in PALETTE
