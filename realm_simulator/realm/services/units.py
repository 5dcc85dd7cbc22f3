from __future__ import annotations

import logging
import random
from typing import Optional

from django.db.models import QuerySet

from realm.models import Player, Unit
from realm.simulation import hexgrid
from realm.simulation.hexgrid import Hex
from realm.simulation.worldgen import generate

from . import tiles as tile_service

logger = logging.getLogger(__name__)

# hp (= max hp), atk, def, mov
UNIT_STATS: dict[str, tuple[int, int, int, int]] = {
    Unit.TYPE_SPEARMAN: (20, 3, 3, 2),
    Unit.TYPE_ARCHER: (15, 5, 1, 2),
    Unit.TYPE_CAVALRY: (20, 4, 2, 4),
    Unit.TYPE_SIEGE: (25, 7, 1, 1),
    Unit.TYPE_BUILDER: (10, 1, 1, 2),
    Unit.TYPE_SCOUT: (12, 2, 1, 4),
}

UNIT_NAMES: dict[str, tuple[str, ...]] = {
    Unit.TYPE_SPEARMAN: ("Gilgamesh's Guard", "Warrior of Ur", "Spear of Ashur"),
    Unit.TYPE_ARCHER: ("Eye of Ishtar", "Arrow of Nippur", "Hunter of Nineveh"),
    Unit.TYPE_CAVALRY: ("Rider of Akkad", "Horseman of Babylon", "Swift Lance"),
    Unit.TYPE_SIEGE: ("Ram of the Gates", "Siege Engine", "Tower of Destruction"),
    Unit.TYPE_BUILDER: ("Builder of Ur", "Mason of Nippur", "Craftsman"),
    Unit.TYPE_SCOUT: ("Scout of the Wasteland", "Eyes of the King", "Desert Wanderer"),
}


def spawn_unit(
    owner: Player,
    unit_type: str,
    q: int,
    r: int,
    *,
    name: Optional[str] = None,
    rng: random.Random | None = None,
) -> Unit:
    if unit_type not in UNIT_STATS:
        raise ValueError(f"Unknown unit type: {unit_type}")
    rng = rng or random
    hp, atk, defense, mov = UNIT_STATS[unit_type]
    unit = Unit.objects.create(
        owner=owner,
        unit_type=unit_type,
        name=name or rng.choice(UNIT_NAMES[unit_type]),
        q=q,
        r=r,
        hp=hp,
        max_hp=hp,
        atk=atk,
        defense=defense,
        mov=mov,
    )
    logger.debug("Spawned %s for player %s at (%s,%s)", unit_type, owner.pk, q, r)
    return unit


def live_units_at(q: int, r: int) -> QuerySet[Unit]:
    return Unit.objects.filter(q=q, r=r).exclude(status=Unit.STATUS_DEAD).order_by("id")


def query_units(
    *,
    owner: Optional[Player] = None,
    q: Optional[int] = None,
    r: Optional[int] = None,
    include_dead: bool = False,
) -> QuerySet[Unit]:
    qs = Unit.objects.all()
    if owner is not None:
        qs = qs.filter(owner=owner)
    if q is not None:
        qs = qs.filter(q=q)
    if r is not None:
        qs = qs.filter(r=r)
    if not include_dead:
        qs = qs.exclude(status=Unit.STATUS_DEAD)
    return qs.order_by("id")


def reachable_hexes(unit: Unit) -> list[Hex]:
    """Hexes the unit could move to: discovered by its owner and passable."""
    visible = tile_service.discovered_coords(unit.owner)

    def can_enter(coord: Hex) -> bool:
        return coord in visible and generate(*coord).passable

    return hexgrid.reachable((unit.q, unit.r), unit.mov, can_enter)


def attackable_hexes(unit: Unit) -> list[Hex]:
    """Adjacent visible hexes holding at least one live enemy unit."""
    visible = tile_service.discovered_coords(unit.owner)
    around = hexgrid.neighbors((unit.q, unit.r))
    occupied = {
        (q, r)
        for q, r in Unit.objects.filter(
            q__in=[c[0] for c in around],
            r__in=[c[1] for c in around],
        )
        .exclude(status=Unit.STATUS_DEAD)
        .exclude(owner=unit.owner)
        .values_list("q", "r")
    }

    def is_target(coord: Hex) -> bool:
        return coord in visible and coord in occupied

    return hexgrid.attackable((unit.q, unit.r), is_target)
