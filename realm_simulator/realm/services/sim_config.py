"""Load and expose simulation configuration from TOML sources."""
from __future__ import annotations

import hashlib
import json
import os
import tomllib
from pathlib import Path
from typing import Any, Dict

PROJECT_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_CONFIG_PATH = PROJECT_ROOT / "config" / "simulation.toml"

_CONFIG_CACHE: Dict[str, Any] | None = None
_CONFIG_PATH: Path | None = None
_CONFIG_MTIME: float | None = None


def _resolve_path() -> Path:
    raw_path = os.getenv("SIM_CONFIG_PATH")
    if raw_path:
        candidate = Path(raw_path).expanduser()
        if candidate.is_file():
            return candidate
        # relative paths resolve inside the project even before the file exists
        return (PROJECT_ROOT / candidate).resolve()
    return DEFAULT_CONFIG_PATH


def _read_toml(path: Path) -> Dict[str, Any]:
    with path.open("rb") as handle:
        data = tomllib.load(handle)
    if not isinstance(data, dict):
        raise ValueError(f"Simulation config {path} must define a table at top level")
    return data


def _default_config() -> Dict[str, Any]:
    return {
        "version": 1,
        "scheduler": {
            "tick_interval_seconds": 120,
            "ap_refresh_interval_seconds": 3600,
            "jitter_seconds": 0,
            "startup_delay_seconds": 5,
            "min_tick_gap_seconds": 30,
        },
        "actions": {
            "costs": {
                "move": 1,
                "attack": 2,
                "defend": 1,
                "scout": 1,
                "found": 3,
                "invest": 2,
                "diplomacy": 1,
            },
        },
        "economy": {
            "max_action_points": 10,
            "farm_bonus": 2,
            "mine_bonus": 2,
            "starting_resources": {"grain": 10, "stone": 10, "gold": 5, "knowledge": 3},
        },
        "advisors": {
            "mood_window": 5,
            "low_ap_threshold": 3,
            "loyalty_step": 5,
            "starting_loyalty": 50,
        },
        "onboarding": {
            "spawn_range": 100,
            "reveal_radius": 3,
            "starter_units": ["spearman", "scout", "builder"],
        },
    }


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    result: Dict[str, Any] = {}
    keys = set(base) | set(override)
    for key in keys:
        if key in override:
            ov = override[key]
            bv = base.get(key)
            if isinstance(bv, dict) and isinstance(ov, dict):
                result[key] = _deep_merge(bv, ov)
            else:
                result[key] = ov
        else:
            result[key] = base[key]
    return result


def load_config(*, force: bool = False) -> Dict[str, Any]:
    """Return the merged simulation configuration."""
    global _CONFIG_CACHE, _CONFIG_PATH, _CONFIG_MTIME
    cfg_path = _resolve_path()
    must_reload = force or _CONFIG_CACHE is None or _CONFIG_PATH != cfg_path
    if not must_reload and cfg_path.exists():
        if _CONFIG_MTIME != cfg_path.stat().st_mtime:
            must_reload = True
    if not must_reload:
        return dict(_CONFIG_CACHE)  # type: ignore[arg-type]

    override: Dict[str, Any] = {}
    if cfg_path.exists():
        override = _read_toml(cfg_path)
        _CONFIG_MTIME = cfg_path.stat().st_mtime
    else:
        _CONFIG_MTIME = None
    merged = _deep_merge(_default_config(), override)
    _CONFIG_CACHE = merged
    _CONFIG_PATH = cfg_path
    return dict(merged)


def config_path() -> Path:
    return _CONFIG_PATH or _resolve_path()


def scheduler_settings() -> Dict[str, Any]:
    return dict(load_config().get("scheduler", {}))


def action_costs() -> Dict[str, int]:
    actions = load_config().get("actions", {})
    return {str(k): int(v) for k, v in dict(actions.get("costs", {})).items()}


def economy_settings() -> Dict[str, Any]:
    return dict(load_config().get("economy", {}))


def advisor_settings() -> Dict[str, Any]:
    return dict(load_config().get("advisors", {}))


def onboarding_settings() -> Dict[str, Any]:
    return dict(load_config().get("onboarding", {}))


def fingerprint() -> Dict[str, Any]:
    cfg = load_config()
    serialised = json.dumps(cfg, sort_keys=True, separators=(",", ":")).encode("utf-8")
    sha1 = hashlib.sha1(serialised).hexdigest()
    return {
        "path": str(config_path()),
        "sha1": sha1,
        "version": cfg.get("version", 0),
    }


def snapshot() -> Dict[str, Any]:
    """Return a lightweight snapshot describing the active configuration."""
    cfg = load_config()
    return {
        "path": str(config_path()),
        "version": cfg.get("version", 0),
        "fingerprint": fingerprint()["sha1"],
        "scheduler": scheduler_settings(),
        "costs": action_costs(),
    }


def clear_cache() -> None:
    """Reset cached configuration to force a reload on next access."""
    global _CONFIG_CACHE, _CONFIG_MTIME, _CONFIG_PATH
    _CONFIG_CACHE = None
    _CONFIG_MTIME = None
    _CONFIG_PATH = None
