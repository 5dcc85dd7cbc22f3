"""Lazy tile materialization and per-player visibility."""
from __future__ import annotations

import logging
from typing import Iterable, Optional

from django.db import IntegrityError, transaction
from django.db.models import Q

from realm.models import Player, Tile
from realm.simulation.hexgrid import Hex, hexes_in_radius
from realm.simulation.worldgen import generate

logger = logging.getLogger(__name__)


def _blueprint_fields(q: int, r: int) -> dict:
    blueprint = generate(q, r)
    return {
        "terrain": blueprint.terrain,
        "yield_grain": blueprint.base_yield.grain,
        "yield_stone": blueprint.base_yield.stone,
        "yield_gold": blueprint.base_yield.gold,
        "yield_knowledge": blueprint.base_yield.knowledge,
        "hidden_resource": blueprint.hidden_resource or "",
        "hidden_amount": blueprint.hidden_amount,
    }


def get_tile(q: int, r: int) -> Optional[Tile]:
    return Tile.objects.filter(q=q, r=r).first()


def get_or_create_tile(q: int, r: int) -> Tile:
    """Return the tile at ``(q, r)``, generating it on first access."""
    try:
        with transaction.atomic():
            tile, _ = Tile.objects.get_or_create(q=q, r=r, defaults=_blueprint_fields(q, r))
    except IntegrityError:
        # lost a creation race; the row exists now
        tile = Tile.objects.get(q=q, r=r)
    return tile


def _bounding_box(coords: list[Hex]) -> Q:
    qs = [c[0] for c in coords]
    rs = [c[1] for c in coords]
    return Q(q__gte=min(qs), q__lte=max(qs), r__gte=min(rs), r__lte=max(rs))


def ensure_tiles(coords: Iterable[Hex]) -> dict[Hex, Tile]:
    """Materialize every coordinate in ``coords`` and return them keyed by ``(q, r)``."""
    wanted = list(dict.fromkeys(coords))
    if not wanted:
        return {}
    wanted_set = set(wanted)
    existing = {
        (t.q, t.r): t
        for t in Tile.objects.filter(_bounding_box(wanted))
        if (t.q, t.r) in wanted_set
    }
    missing = [coord for coord in wanted if coord not in existing]
    if missing:
        Tile.objects.bulk_create(
            [Tile(q=q, r=r, **_blueprint_fields(q, r)) for q, r in missing],
            ignore_conflicts=True,
        )
        missing_set = set(missing)
        for tile in Tile.objects.filter(_bounding_box(missing)):
            if (tile.q, tile.r) in missing_set:
                existing[(tile.q, tile.r)] = tile
        logger.debug("Materialized %s tiles", len(missing))
    return {coord: existing[coord] for coord in wanted}


def tiles_in_radius(center: Hex, radius: int) -> list[Tile]:
    coords = hexes_in_radius(center, radius)
    return list(ensure_tiles(coords).values())


def reveal_tiles(player: Player, coords: Iterable[Hex]) -> int:
    """Add ``player`` to the discovered set of every tile in ``coords``."""
    tiles = ensure_tiles(coords)
    if not tiles:
        return 0
    through = Tile.discovered_by.through
    through.objects.bulk_create(
        [through(tile_id=tile.pk, player_id=player.pk) for tile in tiles.values()],
        ignore_conflicts=True,
    )
    return len(tiles)


def reveal_radius(player: Player, center: Hex, radius: int) -> int:
    return reveal_tiles(player, hexes_in_radius(center, radius))


def discovered_coords(player: Player) -> set[Hex]:
    return set(player.discovered_tiles.values_list("q", "r"))


def is_discovered(player: Player, q: int, r: int) -> bool:
    return Tile.discovered_by.through.objects.filter(
        player_id=player.pk, tile__q=q, tile__r=r
    ).exists()


def survey_tile(player: Player, tile: Tile) -> bool:
    """Mark ``tile`` surveyed by ``player`` and reveal its deposit.

    Returns False when the player had already surveyed it.
    """
    if tile.surveyed_by.filter(pk=player.pk).exists():
        return False
    tile.surveyed_by.add(player)
    if not tile.hidden_revealed:
        tile.hidden_revealed = True
        tile.save(update_fields=["hidden_revealed"])
    return True


def territory_count(player: Player) -> int:
    return Tile.objects.filter(owner=player).count()
