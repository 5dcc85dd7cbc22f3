from __future__ import annotations

import logging
from typing import Optional

from realm.models import Event, Tile, Unit
from realm.simulation.combat import compute_exchange

from . import events as event_service
from . import tiles as tile_service
from .units import live_units_at

logger = logging.getLogger(__name__)

OUTCOME_NO_TARGET = "no_target"


def select_defender(attacker: Unit, q: int, r: int) -> Optional[Unit]:
    """First live unit on the tile not owned by the attacker, lowest id first."""
    return live_units_at(q, r).exclude(owner_id=attacker.owner_id).first()


def _apply_hp(unit: Unit, hp: int) -> None:
    unit.hp = hp
    fields = ["hp"]
    if hp <= 0:
        unit.status = Unit.STATUS_DEAD
        fields.append("status")
    unit.save(update_fields=fields)


def _release_fortification(tile: Tile, fallen: Unit, attacker: Unit) -> bool:
    if tile.fortified_by_id != fallen.pk:
        return False
    if live_units_at(tile.q, tile.r).exclude(owner_id=attacker.owner_id).exists():
        return False
    tile.fortified_by = None
    tile.owner = None
    tile.save(update_fields=["fortified_by", "owner"])
    return True


def resolve_attack(tick_number: int, attacker: Unit, q: int, r: int) -> Event:
    """Run one attack exchange against the tile at ``(q, r)`` and log it."""
    defender = select_defender(attacker, q, r)
    if defender is None:
        return event_service.record_event(
            tick_number,
            "attack",
            OUTCOME_NO_TARGET,
            actor=attacker.owner,
            q=q,
            r=r,
            details={"attacker_id": attacker.pk},
        )

    tile = tile_service.get_or_create_tile(q, r)
    exchange = compute_exchange(
        attacker_atk=attacker.atk,
        attacker_hp=attacker.hp,
        defender_def=defender.defense,
        defender_hp=defender.hp,
        fortified=defender.status == Unit.STATUS_FORTIFIED,
        on_fortress=tile.improvement == Tile.IMPROVEMENT_FORTRESS,
    )
    _apply_hp(defender, exchange.defender_hp)
    _apply_hp(attacker, exchange.attacker_hp)

    released = False
    if exchange.defender_dead:
        released = _release_fortification(tile, defender, attacker)

    details = exchange.as_details()
    details.update(
        {
            "attacker_id": attacker.pk,
            "defender_id": defender.pk,
            "tile_released": released,
        }
    )
    logger.info(
        "Tick %s: unit %s attacked unit %s at (%s,%s) -> %s",
        tick_number,
        attacker.pk,
        defender.pk,
        q,
        r,
        exchange.outcome,
    )
    return event_service.record_event(
        tick_number,
        "attack",
        exchange.outcome,
        actor=attacker.owner,
        target_player=defender.owner,
        q=q,
        r=r,
        details=details,
    )
