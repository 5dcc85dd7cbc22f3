from __future__ import annotations

from django.core.management.base import BaseCommand

from realm.services import players as player_service
from realm.services import tick_control


class Command(BaseCommand):
    help = "Refill action points for every player that is not defeated."

    def add_arguments(self, parser) -> None:  # pragma: no cover - CLI wiring
        parser.add_argument("--origin", default="manual", help="Label stored with this refresh.")

    def handle(self, *args, **options) -> None:
        refreshed = player_service.refresh_action_points()
        tick_control.record_ap_refresh(refreshed, origin=options.get("origin") or "manual")
        self.stdout.write(self.style.SUCCESS(f"Refreshed action points for {refreshed} players"))
