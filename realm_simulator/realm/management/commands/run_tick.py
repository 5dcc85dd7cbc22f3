from __future__ import annotations

from django.core.management.base import BaseCommand, CommandError

from realm.services import resolver, tick_control


class Command(BaseCommand):
    help = "Resolve every queued action into the next simulation tick."

    def add_arguments(self, parser) -> None:  # pragma: no cover - CLI wiring
        parser.add_argument("--force", action="store_true", help="Run even when tick resolution is frozen.")
        parser.add_argument("--origin", default=None, help="Optional label stored with this tick execution.")
        parser.add_argument(
            "--expect-tick",
            dest="expect_tick",
            type=int,
            default=None,
            help="Only resolve if this is the next tick number; otherwise do nothing.",
        )

    def handle(self, *args, **options) -> None:
        origin = (options.get("origin") or "").strip()
        force = bool(options.get("force"))
        if not origin:
            origin = "manual-override" if force else "manual"
        if tick_control.is_frozen() and not force:
            self.stdout.write(
                self.style.WARNING(
                    f"Tick resolution frozen ({tick_control.state_label()}); aborting. Use --force to override."
                )
            )
            return

        expected = options.get("expect_tick")
        if expected is not None and expected < 1:
            raise CommandError("--expect-tick must be a positive tick number")

        report = resolver.resolve_tick(expected_tick=expected, origin=origin)
        if report.status == resolver.STATUS_STALE:
            self.stdout.write(
                self.style.WARNING(f"Tick {expected} is not next (next is {report.tick_number}); nothing done.")
            )
            return
        if report.status == resolver.STATUS_DUPLICATE:
            self.stdout.write(self.style.WARNING(f"Tick {report.tick_number} was already resolved elsewhere."))
            return

        tick_control.record_tick_run(report.tick_number, origin=origin)
        self.stdout.write(
            self.style.SUCCESS(
                f"Tick {report.tick_number} resolved: {report.processed} processed, "
                f"{report.skipped} skipped, {len(report.yields)} players paid"
            )
        )
