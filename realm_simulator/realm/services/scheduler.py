from __future__ import annotations

import logging
import os
import random
import threading
import time
from typing import Any, Dict, Optional

from django.conf import settings
from django.core.management import call_command

from . import sim_config, tick_control

logger = logging.getLogger(__name__)


class PeriodicJob:
    """Daemon thread that runs a management command on a fixed period."""

    def __init__(
        self,
        *,
        name: str,
        command: str,
        interval: float,
        jitter: float = 0.0,
        startup_delay: float = 0.0,
        pausable: bool = False,
        command_kwargs: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.name = name
        self.command = command
        self.interval = max(5.0, float(interval))
        self.jitter = max(0.0, float(jitter))
        self.startup_delay = max(0.0, float(startup_delay))
        self.pausable = pausable
        self.command_kwargs = dict(command_kwargs or {})
        self._thread: Optional[threading.Thread] = None
        self._stop = threading.Event()

    @property
    def running(self) -> bool:
        return bool(self._thread and self._thread.is_alive())

    def start(self) -> None:
        if self.running:
            return
        logger.info(
            "Starting %s job (interval=%ss, jitter=%ss, startup_delay=%ss)",
            self.name,
            self.interval,
            self.jitter,
            self.startup_delay,
        )
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name=f"realm-{self.name}", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread:
            self._thread.join(timeout)

    def run_once(self) -> bool:
        """Execute the command a single time. Returns False when paused."""
        if self.pausable and tick_control.is_frozen():
            logger.info("%s job paused (freeze=%s)", self.name, tick_control.state_label())
            return False
        try:
            call_command(self.command, **self.command_kwargs)
        except Exception:  # noqa: BLE001
            logger.exception("%s job failed to execute %s", self.name, self.command)
        return True

    def _run(self) -> None:
        if self.startup_delay:
            logger.debug("%s job sleeping for startup delay %.2fs", self.name, self.startup_delay)
            if self._stop.wait(self.startup_delay):
                return
        while not self._stop.is_set():
            cycle_start = time.monotonic()
            if not self.run_once():
                if self._stop.wait(min(self.interval, 30.0)):
                    return
                continue
            sleep_for = self._next_delay(cycle_start)
            logger.debug("%s job sleeping for %.2fs", self.name, sleep_for)
            if self._stop.wait(sleep_for):
                break

    def _next_delay(self, cycle_start: float) -> float:
        raw_delay = self.interval + random.uniform(-self.jitter, self.jitter)
        raw_delay = max(5.0, raw_delay)
        elapsed = time.monotonic() - cycle_start
        return max(2.0, raw_delay - elapsed)


class RealmScheduler:
    """Drives tick resolution and AP refresh on independent periods."""

    def __init__(self, *, tick_interval: float, ap_interval: float, jitter: float, startup_delay: float) -> None:
        self.tick_job = PeriodicJob(
            name="tick",
            command="run_tick",
            interval=tick_interval,
            jitter=jitter,
            startup_delay=startup_delay,
            pausable=True,
            command_kwargs={"origin": "scheduler"},
        )
        self.ap_job = PeriodicJob(
            name="ap-refresh",
            command="refresh_ap",
            interval=ap_interval,
            startup_delay=startup_delay,
            command_kwargs={"origin": "scheduler"},
        )

    @property
    def jobs(self) -> tuple[PeriodicJob, PeriodicJob]:
        return self.tick_job, self.ap_job

    def start(self) -> None:
        for job in self.jobs:
            job.start()

    def stop(self) -> None:
        for job in self.jobs:
            job.stop()

    def join(self, timeout: Optional[float] = None) -> None:
        for job in self.jobs:
            job.join(timeout)


_scheduler_lock = threading.Lock()
_scheduler: Optional[RealmScheduler] = None


def get_scheduler() -> RealmScheduler:
    global _scheduler
    with _scheduler_lock:
        if _scheduler is None:
            cfg = sim_config.scheduler_settings()
            _scheduler = RealmScheduler(
                tick_interval=cfg.get("tick_interval_seconds", getattr(settings, "SIM_TICK_INTERVAL_SECONDS", 120)),
                ap_interval=cfg.get(
                    "ap_refresh_interval_seconds",
                    getattr(settings, "SIM_AP_REFRESH_INTERVAL_SECONDS", 3600),
                ),
                jitter=cfg.get("jitter_seconds", getattr(settings, "SIM_TICK_JITTER_SECONDS", 0)),
                startup_delay=cfg.get(
                    "startup_delay_seconds",
                    getattr(settings, "SIM_TICK_STARTUP_DELAY_SECONDS", 5),
                ),
            )
        return _scheduler


def should_start_scheduler() -> bool:
    env_switch = os.environ.get("REALM_AUTO_TICKS", "1").lower()
    if env_switch in {"0", "off", "false", "no"}:
        return False
    return getattr(settings, "ENABLE_AUTO_TICKS", True)
