from __future__ import annotations

from django.core.management.base import BaseCommand, CommandError

from realm.services.scheduler import get_scheduler, should_start_scheduler


class Command(BaseCommand):
    help = "Run the in-process tick and AP refresh scheduler until interrupted."

    def add_arguments(self, parser) -> None:  # pragma: no cover - CLI wiring
        parser.add_argument("--once", action="store_true", help="Run each job a single time and exit.")

    def handle(self, *args, **options) -> None:
        if not should_start_scheduler():
            raise CommandError("Automatic ticks are disabled (ENABLE_AUTO_TICKS / REALM_AUTO_TICKS).")
        scheduler = get_scheduler()
        if options.get("once"):
            for job in scheduler.jobs:
                ran = job.run_once()
                self.stdout.write(f"{job.name}: {'ran' if ran else 'paused'}")
            return
        scheduler.start()
        self.stdout.write(self.style.SUCCESS("Scheduler running; press Ctrl+C to stop."))
        try:
            scheduler.join()
        except KeyboardInterrupt:
            self.stdout.write("Stopping scheduler...")
        finally:
            scheduler.stop()
            scheduler.join(timeout=5.0)
