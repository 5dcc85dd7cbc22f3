from __future__ import annotations

import random

from django.core.management.base import BaseCommand, CommandError

from realm.models import Advisor
from realm.services import players as player_service


class Command(BaseCommand):
    help = "Create a player with starting resources, units and an optional advisor."

    def add_arguments(self, parser) -> None:  # pragma: no cover - CLI wiring
        parser.add_argument("user_id")
        parser.add_argument("--leader", required=True, help="Leader name.")
        parser.add_argument("--civ", required=True, help="Civilization name.")
        parser.add_argument("--description", default="", help="Civilization description.")
        parser.add_argument("--bonus", default="", help="Civilization bonus text.")
        parser.add_argument("--q", type=int, default=None, help="Start q (random when omitted).")
        parser.add_argument("--r", type=int, default=None, help="Start r (random when omitted).")
        parser.add_argument("--seed", type=int, default=None, help="Seed for spawn point and unit names.")
        parser.add_argument("--advisor", default=None, help="Advisor name; no advisor when omitted.")
        parser.add_argument(
            "--archetype",
            default=Advisor.ARCHETYPE_STRATEGIST,
            choices=[choice for choice, _ in Advisor.ARCHETYPE_CHOICES],
        )

    def handle(self, *args, **options) -> None:
        start = None
        if (options.get("q") is None) != (options.get("r") is None):
            raise CommandError("--q and --r must be given together")
        if options.get("q") is not None:
            start = (options["q"], options["r"])
        advisor = None
        if options.get("advisor"):
            advisor = {"name": options["advisor"], "archetype": options["archetype"]}
        existing = player_service.get_player(options["user_id"])
        player = player_service.onboard_player(
            options["user_id"],
            options["leader"],
            options["civ"],
            civ_description=options.get("description") or "",
            civ_bonus=options.get("bonus") or "",
            start=start,
            advisor=advisor,
            rng=random.Random(options["seed"]) if options.get("seed") is not None else None,
        )
        if existing is not None:
            self.stdout.write(self.style.WARNING(f"Player {player.user_id} already exists (#{player.pk})"))
            return
        self.stdout.write(
            self.style.SUCCESS(
                f"Onboarded {player.leader_name} of {player.civ_name} at ({player.start_q},{player.start_r})"
            )
        )
