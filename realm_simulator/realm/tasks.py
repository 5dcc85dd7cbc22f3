from __future__ import annotations

import random
import time
from datetime import timedelta
from typing import Any, Dict

from celery import shared_task
from celery.utils.log import get_task_logger
from django.conf import settings
from django.core.management import call_command
from django.utils import timezone

from realm.services import players as player_service
from realm.services import resolver, sim_config, tick_control

logger = get_task_logger(__name__)


def _scheduler_config() -> Dict[str, Any]:
    cfg = sim_config.scheduler_settings()
    return {
        "interval": float(cfg.get("tick_interval_seconds", getattr(settings, "SIM_TICK_INTERVAL_SECONDS", 120))),
        "jitter": float(cfg.get("jitter_seconds", getattr(settings, "SIM_TICK_JITTER_SECONDS", 0))),
        "min_gap": float(cfg.get("min_tick_gap_seconds", 0)),
    }


def _too_soon(min_gap: float) -> bool:
    if min_gap <= 0:
        return False
    record = resolver.last_tick()
    if record is None:
        return False
    return timezone.now() - record.resolved_at < timedelta(seconds=min_gap)


@shared_task(bind=True, name="realm.tasks.run_scheduled_tick")
def run_scheduled_tick(self, expected_tick: int | None = None) -> dict[str, Any]:
    """Resolve the next tick from Celery beat.

    Beat never passes ``expected_tick``, so a redelivered message is held back
    only by ``min_tick_gap_seconds``; once the gap has passed it resolves the
    following tick.  The sole tick-number gates are the unique ``TickRecord``
    claim and ``expected_tick`` (``run_tick --expect-tick``).
    """
    scheduler_cfg = _scheduler_config()
    jitter = max(0.0, scheduler_cfg.get("jitter", 0.0))
    if jitter:
        delay = random.uniform(0.0, jitter)
        logger.debug("Applying scheduler jitter delay of %.2fs", delay)
        time.sleep(delay)

    if tick_control.is_frozen():
        logger.info("Tick skipped: %s", tick_control.state_label())
        return {"skipped": tick_control.state_label()}

    if _too_soon(scheduler_cfg["min_gap"]):
        logger.info("Tick skipped: last tick is younger than %.0fs", scheduler_cfg["min_gap"])
        return {"skipped": "too-soon"}

    command_kwargs: Dict[str, Any] = {"origin": "celery"}
    if expected_tick is not None:
        command_kwargs["expect_tick"] = int(expected_tick)
    logger.info("Triggering tick resolution via Celery (kwargs=%s)", command_kwargs)
    call_command("run_tick", **command_kwargs)
    return {"status": "ok", "last_run": tick_control.last_tick_run()}


@shared_task(bind=True, name="realm.tasks.refresh_action_points")
def refresh_action_points(self) -> dict[str, Any]:
    """Refill action points for every active player."""
    refreshed = player_service.refresh_action_points()
    tick_control.record_ap_refresh(refreshed, origin="celery")
    return {"status": "ok", "refreshed": refreshed}
