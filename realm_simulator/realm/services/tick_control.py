from __future__ import annotations

import json
from typing import Any, Dict, Optional

from django.utils import timezone

from . import configuration as config_service

FREEZE_STATE_KEY = "tick_freeze_state"
LAST_TICK_KEY = "tick_last_run"
LAST_AP_REFRESH_KEY = "ap_last_refresh"

_DEFAULT_STATE: Dict[str, Any] = {
    "frozen": False,
    "toggled_at": None,
    "actor": None,
    "reason": None,
}


def _load_json(key: str) -> Dict[str, Any]:
    raw = config_service.get_value(key, "")
    if not raw:
        return {}
    try:
        payload = json.loads(raw)
    except (TypeError, ValueError):
        return {}
    return payload if isinstance(payload, dict) else {}


def _load_state() -> Dict[str, Any]:
    state = dict(_DEFAULT_STATE)
    state.update(_load_json(FREEZE_STATE_KEY))
    return state


def _persist_state(state: Dict[str, Any]) -> None:
    clean = {key: state.get(key) for key in _DEFAULT_STATE}
    config_service.set_value(FREEZE_STATE_KEY, json.dumps(clean))


def describe_state() -> Dict[str, Any]:
    """Return the current freeze toggle metadata."""
    return _load_state()


def is_frozen() -> bool:
    """True when scheduled tick resolution is explicitly paused."""
    return bool(_load_state().get("frozen"))


def freeze(*, actor: Optional[str] = None, reason: Optional[str] = None) -> Dict[str, Any]:
    state = _load_state()
    state.update(
        {
            "frozen": True,
            "toggled_at": timezone.now().isoformat(),
            "actor": actor,
            "reason": reason,
        }
    )
    _persist_state(state)
    return describe_state()


def unfreeze(*, actor: Optional[str] = None, note: Optional[str] = None) -> Dict[str, Any]:
    state = _load_state()
    state.update(
        {
            "frozen": False,
            "toggled_at": timezone.now().isoformat(),
            "actor": actor,
            "reason": note,
        }
    )
    _persist_state(state)
    return describe_state()


def toggle(*, actor: Optional[str] = None, reason: Optional[str] = None) -> Dict[str, Any]:
    """Flip the freeze flag."""
    if is_frozen():
        return unfreeze(actor=actor, note=reason)
    return freeze(actor=actor, reason=reason)


def state_label() -> str:
    return "FROZEN" if is_frozen() else "LIVE"


def record_tick_run(tick_number: int, *, origin: str) -> None:
    """Persist a breadcrumb for the most recent tick execution."""
    payload = {
        "tick_number": int(tick_number),
        "origin": origin,
        "recorded_at": timezone.now().isoformat(),
    }
    config_service.set_value(LAST_TICK_KEY, json.dumps(payload))


def last_tick_run() -> Dict[str, Any]:
    return _load_json(LAST_TICK_KEY)


def record_ap_refresh(refreshed: int, *, origin: str) -> None:
    payload = {
        "refreshed": int(refreshed),
        "origin": origin,
        "recorded_at": timezone.now().isoformat(),
    }
    config_service.set_value(LAST_AP_REFRESH_KEY, json.dumps(payload))


def last_ap_refresh() -> Dict[str, Any]:
    return _load_json(LAST_AP_REFRESH_KEY)
