from __future__ import annotations

import os

from celery import Celery
from celery.schedules import schedule

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "realm_simulator.settings")

app = Celery("realm_simulator")
app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()


def _build_beat_schedule() -> dict[str, dict[str, object]]:
    """Construct the Celery beat schedule using the dynamic sim config."""

    from django.conf import settings
    from realm.services import sim_config

    scheduler_cfg = sim_config.scheduler_settings()
    tick_interval = float(
        scheduler_cfg.get("tick_interval_seconds", getattr(settings, "SIM_TICK_INTERVAL_SECONDS", 120))
    )
    ap_interval = float(
        scheduler_cfg.get(
            "ap_refresh_interval_seconds",
            getattr(settings, "SIM_AP_REFRESH_INTERVAL_SECONDS", 3600),
        )
    )
    routes = getattr(settings, "CELERY_TASK_ROUTES", {}) or {}
    tick_queue = routes.get("realm.tasks.run_scheduled_tick", {}).get("queue", "ticks")
    ap_queue = routes.get("realm.tasks.refresh_action_points", {}).get("queue", "ticks")
    return {
        "realm.tick": {
            "task": "realm.tasks.run_scheduled_tick",
            "schedule": schedule(max(10.0, tick_interval)),
            "options": {"queue": tick_queue},
        },
        "realm.ap-refresh": {
            "task": "realm.tasks.refresh_action_points",
            "schedule": schedule(max(60.0, ap_interval)),
            "options": {"queue": ap_queue},
        },
    }


@app.on_after_finalize.connect
def _install_beat_schedule(sender: Celery, **kwargs: object) -> None:
    sender.conf.beat_schedule = _build_beat_schedule()


__all__ = ("app",)
