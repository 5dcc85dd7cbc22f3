from __future__ import annotations

import logging
import random
from datetime import datetime, timedelta
from typing import Any, Optional

from django.conf import settings
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from realm.models import Advisor, Player, Tile, Unit

from . import actions as action_service
from . import advisors as advisor_service
from . import sim_config
from . import tiles as tile_service
from . import units as unit_service

logger = logging.getLogger(__name__)

PLAYER_COLORS = (
    "#e63946",
    "#2a9d8f",
    "#e9c46a",
    "#6a4c93",
    "#f4a261",
    "#264653",
    "#a8dadc",
    "#457b9d",
)


def ap_refresh_interval() -> timedelta:
    scheduler_cfg = sim_config.scheduler_settings()
    seconds = scheduler_cfg.get(
        "ap_refresh_interval_seconds",
        getattr(settings, "SIM_AP_REFRESH_INTERVAL_SECONDS", 3600),
    )
    return timedelta(seconds=max(1, int(seconds)))


def get_player(user_id: str) -> Optional[Player]:
    return Player.objects.filter(user_id=user_id).first()


def _spawn_point(rng: random.Random, spawn_range: int) -> tuple[int, int]:
    spawn_range = max(0, int(spawn_range))
    if spawn_range == 0:
        return 0, 0
    return rng.randrange(-spawn_range, spawn_range), rng.randrange(-spawn_range, spawn_range)


@transaction.atomic
def onboard_player(
    user_id: str,
    leader_name: str,
    civ_name: str,
    *,
    civ_description: str = "",
    civ_bonus: str = "",
    start: Optional[tuple[int, int]] = None,
    advisor: Optional[dict[str, Any]] = None,
    rng: random.Random | None = None,
) -> Player:
    """Create a player with starting stock, units and revealed surroundings.

    Calling it again for a known ``user_id`` returns the existing player
    untouched.
    """
    existing = get_player(user_id)
    if existing is not None:
        return existing

    rng = rng or random.Random()
    economy = sim_config.economy_settings()
    onboarding = sim_config.onboarding_settings()
    stock = dict(economy.get("starting_resources", {}))
    max_ap = int(economy.get("max_action_points", 10))
    if start is None:
        start = _spawn_point(rng, onboarding.get("spawn_range", 100))

    color = PLAYER_COLORS[Player.objects.count() % len(PLAYER_COLORS)]
    player = Player.objects.create(
        user_id=user_id,
        leader_name=leader_name,
        civ_name=civ_name,
        civ_description=civ_description,
        civ_bonus=civ_bonus,
        color=color,
        grain=int(stock.get("grain", 0)),
        stone=int(stock.get("stone", 0)),
        gold=int(stock.get("gold", 0)),
        knowledge=int(stock.get("knowledge", 0)),
        action_points=max_ap,
        max_action_points=max_ap,
        ap_resets_at=timezone.now() + ap_refresh_interval(),
        start_q=start[0],
        start_r=start[1],
    )
    tile_service.reveal_radius(player, start, int(onboarding.get("reveal_radius", 3)))
    for unit_type in onboarding.get("starter_units", []):
        unit_service.spawn_unit(player, str(unit_type), start[0], start[1], rng=rng)
    if advisor:
        options = dict(advisor)
        advisor_service.create_advisor(
            player,
            name=options.pop("name", f"Advisor to {leader_name}"),
            archetype=options.pop("archetype", Advisor.ARCHETYPE_STRATEGIST),
            **options,
        )
    logger.info("Onboarded player %s (%s) at %s", player.pk, civ_name, start)
    return player


def refresh_action_points(*, now: Optional[datetime] = None) -> int:
    """Refill every non-defeated player's AP to the cap. Safe to repeat."""
    now = now or timezone.now()
    refreshed = Player.objects.exclude(status=Player.STATUS_DEFEATED).update(
        action_points=F("max_action_points"),
        ap_resets_at=now + ap_refresh_interval(),
    )
    logger.info("Refreshed action points for %s players", refreshed)
    return refreshed


@transaction.atomic
def restart_player(player: Player) -> None:
    """Wipe the player from the world so they can onboard again."""
    Tile.objects.filter(owner=player).update(
        owner=None,
        improvement=Tile.IMPROVEMENT_NONE,
        fortified_by=None,
    )
    action_service.cancel_all_actions(player)
    Unit.objects.filter(owner=player).delete()
    Advisor.objects.filter(player=player).delete()
    logger.info("Restarting player %s (%s)", player.pk, player.user_id)
    player.delete()


def territory_count(player: Player) -> int:
    return tile_service.territory_count(player)
