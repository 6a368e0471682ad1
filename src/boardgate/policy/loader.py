"""Load and validate BoardPolicy objects from YAML files."""

from __future__ import annotations

from pathlib import Path

import yaml

from boardgate.policy.models import (
    AdmissionPolicy,
    AuthPolicy,
    BoardPolicy,
    ResetPolicy,
)


def load_policy(path: str | Path) -> BoardPolicy:
    """Load a policy from a YAML file path."""
    text = Path(path).read_text(encoding="utf-8")
    return load_policy_from_string(text)


def load_policy_from_string(text: str) -> BoardPolicy:
    """Parse a YAML string into a validated BoardPolicy."""
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ValueError(f"Policy YAML could not be parsed: {e}") from e
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError("Policy YAML must be a mapping")
    return _build_policy(data)


def _build_policy(data: dict) -> BoardPolicy:
    admission = _parse_admission(_section(data, "admission"))
    auth = _parse_auth(_section(data, "auth"))
    reset = ResetPolicy(
        cooldown=_number(
            _section(data, "reset"), "cooldown", ResetPolicy.cooldown, float, "reset"
        ),
    )
    policy = BoardPolicy(
        name=data.get("name", "unnamed"),
        admission=admission,
        auth=auth,
        reset=reset,
        sweep_interval=_number(data, "sweep_interval", BoardPolicy.sweep_interval, float),
        description=data.get("description", ""),
    )
    validate_policy(policy)
    return policy


def _section(data: dict, key: str, where: str = "") -> dict:
    section = data.get(key) or {}
    if not isinstance(section, dict):
        raise ValueError(f"Policy section '{where}{key}' must be a mapping")
    return section


def _number(raw: dict, key: str, default, cast, where: str = ""):
    """Read ``key`` as an int or float; YAML typos become ValueError."""
    value = raw.get(key, default)
    label = f"{where}.{key}" if where else key
    if value is None or isinstance(value, bool):
        raise ValueError(f"Policy key '{label}' must be a number (got {value!r})")
    try:
        return cast(value)
    except (TypeError, ValueError):
        raise ValueError(
            f"Policy key '{label}' must be a number (got {value!r})"
        ) from None


def _parse_admission(raw: dict) -> AdmissionPolicy:
    defaults = AdmissionPolicy()
    thresholds = _section(raw, "thresholds", "admission.")
    windows = _section(raw, "windows", "admission.")
    pauses = _section(raw, "pauses", "admission.")
    t, w, p, a = (
        "admission.thresholds",
        "admission.windows",
        "admission.pauses",
        "admission",
    )
    return AdmissionPolicy(
        warn_rate=_number(thresholds, "warn", defaults.warn_rate, int, t),
        throttle_rate=_number(thresholds, "throttle", defaults.throttle_rate, int, t),
        pause_rate=_number(thresholds, "pause", defaults.pause_rate, int, t),
        hard_rate=_number(thresholds, "hard", defaults.hard_rate, int, t),
        short_window=_number(windows, "short", defaults.short_window, float, w),
        long_window=_number(windows, "long", defaults.long_window, float, w),
        long_window_cap=_number(raw, "long_window_cap", defaults.long_window_cap, int, a),
        violation_memory=_number(
            raw, "violation_memory", defaults.violation_memory, float, a
        ),
        violation_spacing=_number(
            raw, "violation_spacing", defaults.violation_spacing, float, a
        ),
        max_violations=_number(raw, "max_violations", defaults.max_violations, int, a),
        short_pause=_number(pauses, "short", defaults.short_pause, float, p),
        long_pause=_number(pauses, "long", defaults.long_pause, float, p),
    )


def _parse_auth(raw: dict) -> AuthPolicy:
    defaults = AuthPolicy()
    schedule_raw = raw.get("backoff_schedule", defaults.backoff_schedule)
    if isinstance(schedule_raw, (int, float)) and not isinstance(schedule_raw, bool):
        schedule_raw = (schedule_raw,)
    if not isinstance(schedule_raw, (list, tuple)):
        raise ValueError("Policy key 'auth.backoff_schedule' must be a list of seconds")
    schedule = tuple(
        _number({"backoff_schedule": s}, "backoff_schedule", None, float, "auth")
        for s in schedule_raw
    )
    code = raw.get("admin_code")
    return AuthPolicy(
        backoff_schedule=schedule,
        max_failures=_number(raw, "max_failures", defaults.max_failures, int, "auth"),
        tracking_window=_number(
            raw, "tracking_window", defaults.tracking_window, float, "auth"
        ),
        block_duration=_number(
            raw, "block_duration", defaults.block_duration, float, "auth"
        ),
        admin_code=(
            _number(raw, "admin_code", None, int, "auth") if code is not None else None
        ),
    )


def validate_policy(policy: BoardPolicy) -> None:
    """Raise ValueError if the limits cannot drive a consistent escalation."""
    adm = policy.admission
    rates = (adm.warn_rate, adm.throttle_rate, adm.pause_rate, adm.hard_rate)
    if any(r <= 0 for r in rates):
        raise ValueError("Rate thresholds must be positive")
    if any(lo >= hi for lo, hi in zip(rates, rates[1:])):
        raise ValueError(f"Rate thresholds must be strictly ascending: {rates}")

    durations = {
        "windows.short": adm.short_window,
        "windows.long": adm.long_window,
        "violation_memory": adm.violation_memory,
        "pauses.short": adm.short_pause,
        "pauses.long": adm.long_pause,
        "auth.tracking_window": policy.auth.tracking_window,
        "auth.block_duration": policy.auth.block_duration,
        "reset.cooldown": policy.reset.cooldown,
        "sweep_interval": policy.sweep_interval,
    }
    for key, value in durations.items():
        if value <= 0:
            raise ValueError(f"{key} must be positive (got {value})")
    if adm.violation_spacing < 0:
        raise ValueError("violation_spacing must not be negative")
    if adm.long_window <= adm.short_window:
        raise ValueError("windows.long must be longer than windows.short")
    if adm.long_window_cap <= 0:
        raise ValueError("long_window_cap must be positive")
    if adm.max_violations < 2:
        raise ValueError("max_violations must be at least 2")

    schedule = policy.auth.backoff_schedule
    if not schedule:
        raise ValueError("auth.backoff_schedule must not be empty")
    if schedule[0] < 0:
        raise ValueError("auth.backoff_schedule entries must not be negative")
    if any(lo >= hi for lo, hi in zip(schedule, schedule[1:])):
        raise ValueError(f"auth.backoff_schedule must strictly increase: {schedule}")
    if policy.auth.max_failures < 1:
        raise ValueError("auth.max_failures must be at least 1")
