"""Tick resolution: the only place gameplay state is mutated in bulk.

One pass claims the next tick number, dispatches every queued action in
priority order, pays out territory yields and refreshes advisor moods.  The
whole pass runs in a single transaction and the tick record row is inserted
first, so a duplicate trigger for the same tick fails on the unique
constraint and leaves no partial effects behind.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, Optional, Sequence

from django.db import IntegrityError, transaction
from django.utils import timezone

from realm.models import Event, PendingAction, Player, Tile, TickRecord, Unit
from realm.simulation.resources import ResourceBundle
from realm.simulation.worldgen import (
    TERRAIN_DESERT,
    TERRAIN_FOREST,
    TERRAIN_MOUNTAIN,
    TERRAIN_PLAINS,
    TERRAIN_RIVER,
)

from . import advisors as advisor_service
from . import combat as combat_service
from . import events as event_service
from . import sim_config
from . import tiles as tile_service

logger = logging.getLogger(__name__)

ACTION_PRIORITY: tuple[str, ...] = (
    PendingAction.TYPE_DEFEND,
    PendingAction.TYPE_FOUND,
    PendingAction.TYPE_MOVE,
    PendingAction.TYPE_SCOUT,
    PendingAction.TYPE_INVEST,
    PendingAction.TYPE_ATTACK,
    PendingAction.TYPE_DIPLOMACY,
)
_UNKNOWN_PRIORITY = len(ACTION_PRIORITY)

STATUS_RESOLVED = "resolved"
STATUS_DUPLICATE = "duplicate"
STATUS_STALE = "stale"

OUTCOME_SUCCESS = "success"
OUTCOME_NO_TARGET = "no_target"
OUTCOME_ALREADY_OWNED = "already_owned"
OUTCOME_NOT_OWNED = "not_owned"
OUTCOME_NO_CHANGE = "no_change"
OUTCOME_UNSUPPORTED = "unsupported"
OUTCOME_FAILED = "failed"

FARM_TERRAIN = frozenset({TERRAIN_PLAINS, TERRAIN_RIVER, TERRAIN_FOREST})
MINE_TERRAIN = frozenset({TERRAIN_MOUNTAIN, TERRAIN_DESERT})


@dataclass
class TickReport:
    """Summary of one resolution attempt."""

    tick_number: int
    status: str
    processed: int = 0
    skipped: int = 0
    yields: Dict[int, Dict[str, int]] = field(default_factory=dict)
    mood_changes: Dict[int, tuple[str, str]] = field(default_factory=dict)

    @property
    def applied(self) -> bool:
        return self.status == STATUS_RESOLVED

    def as_dict(self) -> Dict[str, object]:
        return {
            "tick_number": self.tick_number,
            "status": self.status,
            "processed": self.processed,
            "skipped": self.skipped,
            "yields": {str(pid): dict(bundle) for pid, bundle in self.yields.items()},
            "mood_changes": {str(pid): list(change) for pid, change in self.mood_changes.items()},
        }


def priority_of(action_type: str) -> int:
    try:
        return ACTION_PRIORITY.index(action_type)
    except ValueError:
        return _UNKNOWN_PRIORITY


def order_actions(actions: Iterable[PendingAction]) -> list[PendingAction]:
    """Stable sort by type priority; input order breaks ties."""
    return sorted(actions, key=lambda action: priority_of(action.action_type))


def last_tick() -> Optional[TickRecord]:
    return TickRecord.objects.order_by("-tick_number").first()


def next_tick_number() -> int:
    record = last_tick()
    return 1 if record is None else record.tick_number + 1


# --------------------------------------------------------------------------
# Handlers
# --------------------------------------------------------------------------


def _target_or_position(action: PendingAction, unit: Optional[Unit]) -> Optional[tuple[int, int]]:
    if action.has_target:
        return action.target_q, action.target_r
    if unit is not None:
        return unit.q, unit.r
    return None


def _handle_defend(tick: int, action: PendingAction, unit: Unit) -> Event:
    unit.status = Unit.STATUS_FORTIFIED
    unit.save(update_fields=["status"])
    tile = tile_service.get_or_create_tile(unit.q, unit.r)
    tile.fortified_by = unit
    claimed = tile.owner_id is None
    if claimed:
        tile.owner = action.player
    tile.save(update_fields=["fortified_by", "owner"])
    return event_service.record_event(
        tick,
        "fortify",
        OUTCOME_SUCCESS,
        actor=action.player,
        q=unit.q,
        r=unit.r,
        details={"unit_id": unit.pk, "claimed": claimed},
    )


def _handle_found(tick: int, action: PendingAction, unit: Unit) -> Event:
    q, r = _target_or_position(action, unit)  # type: ignore[misc]
    tile = tile_service.get_or_create_tile(q, r)
    if tile.owner_id is not None:
        return event_service.record_event(
            tick,
            "found",
            OUTCOME_ALREADY_OWNED,
            actor=action.player,
            target_player=tile.owner,
            q=q,
            r=r,
        )
    tile.owner = action.player
    tile.improvement = Tile.IMPROVEMENT_SETTLEMENT
    tile.hidden_revealed = True
    tile.save(update_fields=["owner", "improvement", "hidden_revealed"])
    return event_service.record_event(
        tick,
        "found",
        OUTCOME_SUCCESS,
        actor=action.player,
        q=q,
        r=r,
        details={"hidden_resource": tile.hidden_resource, "hidden_amount": tile.hidden_amount},
    )


def _handle_move(tick: int, action: PendingAction, unit: Unit) -> Event:
    if not action.has_target:
        return event_service.record_event(
            tick, "move", OUTCOME_NO_TARGET, actor=action.player, q=unit.q, r=unit.r
        )
    origin = (unit.q, unit.r)
    unit.q = action.target_q
    unit.r = action.target_r
    unit.status = Unit.STATUS_IDLE
    unit.save(update_fields=["q", "r", "status"])
    revealed = tile_service.reveal_radius(action.player, (unit.q, unit.r), 1)
    return event_service.record_event(
        tick,
        "move",
        OUTCOME_SUCCESS,
        actor=action.player,
        q=unit.q,
        r=unit.r,
        details={"unit_id": unit.pk, "from": list(origin), "revealed": revealed},
    )


def _handle_scout(tick: int, action: PendingAction, unit: Unit) -> Event:
    player = action.player
    tiles = tile_service.tiles_in_radius((unit.q, unit.r), 2)
    tile_service.reveal_tiles(player, [(tile.q, tile.r) for tile in tiles])
    surveyed: list[list[int]] = []
    for tile in tiles:
        if tile.owner_id == player.pk and tile_service.survey_tile(player, tile):
            surveyed.append([tile.q, tile.r])
    return event_service.record_event(
        tick,
        "scout",
        OUTCOME_SUCCESS,
        actor=player,
        q=unit.q,
        r=unit.r,
        details={"revealed": len(tiles), "surveyed": surveyed},
    )


def _handle_invest(tick: int, action: PendingAction, unit: Unit) -> Event:
    q, r = _target_or_position(action, unit)  # type: ignore[misc]
    tile = tile_service.get_or_create_tile(q, r)
    if tile.owner_id != action.player_id:
        return event_service.record_event(
            tick, "invest", OUTCOME_NOT_OWNED, actor=action.player, q=q, r=r
        )
    improvement = tile.improvement
    if tile.terrain in FARM_TERRAIN:
        improvement = Tile.IMPROVEMENT_FARM
    elif tile.terrain in MINE_TERRAIN:
        improvement = Tile.IMPROVEMENT_MINE
    if improvement == tile.improvement:
        return event_service.record_event(
            tick, "invest", OUTCOME_NO_CHANGE, actor=action.player, q=q, r=r
        )
    previous = tile.improvement
    tile.improvement = improvement
    tile.save(update_fields=["improvement"])
    return event_service.record_event(
        tick,
        "invest",
        OUTCOME_SUCCESS,
        actor=action.player,
        q=q,
        r=r,
        details={"improvement": improvement, "previous": previous},
    )


def _handle_attack(tick: int, action: PendingAction, unit: Unit) -> Event:
    if not action.has_target:
        return event_service.record_event(
            tick, "attack", OUTCOME_NO_TARGET, actor=action.player, q=unit.q, r=unit.r
        )
    return combat_service.resolve_attack(tick, unit, action.target_q, action.target_r)


def _handle_diplomacy(tick: int, action: PendingAction, unit: Optional[Unit]) -> Event:
    return event_service.record_event(
        tick,
        "diplomacy",
        action.diplomacy_type or "proposal",
        actor=action.player,
        target_player=action.target_player,
        q=action.target_q,
        r=action.target_r,
        details={"diplomacy_type": action.diplomacy_type or "proposal"},
    )


def _handle_unsupported(tick: int, action: PendingAction, unit: Optional[Unit]) -> Event:
    logger.warning("Tick %s: no handler for action type %r (#%s)", tick, action.action_type, action.pk)
    return event_service.record_event(
        tick,
        action.action_type[:20],
        OUTCOME_UNSUPPORTED,
        actor=action.player,
        q=action.target_q,
        r=action.target_r,
        details={"action_id": action.pk},
    )


HANDLERS: Dict[str, Callable[[int, PendingAction, Optional[Unit]], Event]] = {
    PendingAction.TYPE_DEFEND: _handle_defend,
    PendingAction.TYPE_FOUND: _handle_found,
    PendingAction.TYPE_MOVE: _handle_move,
    PendingAction.TYPE_SCOUT: _handle_scout,
    PendingAction.TYPE_INVEST: _handle_invest,
    PendingAction.TYPE_ATTACK: _handle_attack,
    PendingAction.TYPE_DIPLOMACY: _handle_diplomacy,
}

UNIT_REQUIRED = frozenset(HANDLERS) - {PendingAction.TYPE_DIPLOMACY}


# --------------------------------------------------------------------------
# Aggregation
# --------------------------------------------------------------------------


def tile_yield(tile: Tile, *, farm_bonus: int = 2, mine_bonus: int = 2) -> ResourceBundle:
    total = tile.base_yield
    if tile.improvement == Tile.IMPROVEMENT_FARM and tile.terrain != TERRAIN_MOUNTAIN:
        total = total + ResourceBundle(grain=farm_bonus)
    if tile.improvement == Tile.IMPROVEMENT_MINE and tile.terrain in MINE_TERRAIN:
        total = total + ResourceBundle(stone=mine_bonus)
    return total + tile.revealed_bonus


def compute_yields(tiles: Iterable[Tile], *, farm_bonus: int = 2, mine_bonus: int = 2) -> Dict[int, ResourceBundle]:
    """Sum the yield of every owned tile per owner id."""
    totals: Dict[int, ResourceBundle] = {}
    for tile in tiles:
        if tile.owner_id is None:
            continue
        bundle = tile_yield(tile, farm_bonus=farm_bonus, mine_bonus=mine_bonus)
        totals[tile.owner_id] = totals.get(tile.owner_id, ResourceBundle()) + bundle
    return totals


def _distribute_yields() -> Dict[int, Dict[str, int]]:
    economy = sim_config.economy_settings()
    totals = compute_yields(
        Tile.objects.filter(owner__isnull=False).only(
            "owner",
            "terrain",
            "improvement",
            "yield_grain",
            "yield_stone",
            "yield_gold",
            "yield_knowledge",
            "hidden_resource",
            "hidden_amount",
            "hidden_revealed",
        ),
        farm_bonus=int(economy.get("farm_bonus", 2)),
        mine_bonus=int(economy.get("mine_bonus", 2)),
    )
    paid: Dict[int, Dict[str, int]] = {}
    if not totals:
        return paid
    owners = Player.objects.select_for_update().filter(pk__in=list(totals)).exclude(
        status=Player.STATUS_DEFEATED
    )
    for player in owners:
        bundle = totals[player.pk]
        player.apply_resources(bundle)
        paid[player.pk] = bundle.as_dict()
    return paid


def _refresh_moods() -> Dict[int, tuple[str, str]]:
    changes: Dict[int, tuple[str, str]] = {}
    players = (
        Player.objects.exclude(status=Player.STATUS_DEFEATED)
        .filter(advisor__isnull=False)
        .select_related("advisor")
    )
    for player in players:
        change = advisor_service.refresh_mood(player)
        if change is not None:
            changes[player.pk] = change
    return changes


# --------------------------------------------------------------------------
# Orchestration
# --------------------------------------------------------------------------


def _load_unit(action: PendingAction) -> Optional[Unit]:
    if action.unit_id is None:
        return None
    return Unit.objects.filter(pk=action.unit_id).first()


def _skip_reason(action: PendingAction, unit: Optional[Unit]) -> Optional[str]:
    if action.player.is_defeated:
        return "player_defeated"
    if unit is not None and not unit.is_alive:
        return "unit_dead"
    if unit is None and (action.unit_id is not None or action.action_type in UNIT_REQUIRED):
        return "unit_missing"
    return None


def _close(action: PendingAction, status: str, tick: int) -> None:
    action.status = status
    action.resolved_tick = tick
    action.resolved_at = timezone.now()
    action.save(update_fields=["status", "resolved_tick", "resolved_at"])


def _apply(tick: int, action: PendingAction, unit: Optional[Unit]) -> None:
    """Run the handler for ``action`` inside its own savepoint.

    A handler that raises has its partial writes rolled back and is logged as
    a ``failed`` event, so one bad action cannot stall the tick.
    """
    handler = HANDLERS.get(action.action_type, _handle_unsupported)
    try:
        with transaction.atomic():
            handler(tick, action, unit)
    except Exception as exc:  # noqa: BLE001
        logger.exception("Tick %s: action #%s (%s) failed", tick, action.pk, action.action_type)
        event_service.record_event(
            tick,
            action.action_type[:20],
            OUTCOME_FAILED,
            actor=action.player,
            details={"action_id": action.pk, "error": exc.__class__.__name__},
        )


def dispatch(tick: int, actions: Sequence[PendingAction]) -> tuple[int, int]:
    """Apply ``actions`` in priority order. Returns ``(processed, skipped)``."""
    processed = skipped = 0
    for action in order_actions(actions):
        unit = _load_unit(action)
        reason = _skip_reason(action, unit)
        if reason is not None:
            logger.info("Tick %s: skipping action #%s (%s)", tick, action.pk, reason)
            _close(action, PendingAction.STATUS_CANCELLED, tick)
            skipped += 1
            continue
        _apply(tick, action, unit)
        _close(action, PendingAction.STATUS_RESOLVED, tick)
        processed += 1
    return processed, skipped


def _resolve_pass(tick_number: int, origin: str) -> TickReport:
    try:
        with transaction.atomic():
            record = TickRecord.objects.create(tick_number=tick_number, origin=origin[:40])
    except IntegrityError:
        logger.warning("Tick %s already claimed; skipping duplicate trigger (%s)", tick_number, origin)
        return TickReport(tick_number=tick_number, status=STATUS_DUPLICATE)

    queued = list(
        PendingAction.objects.select_for_update()
        .filter(status=PendingAction.STATUS_QUEUED)
        .select_related("player")
        .order_by("submitted_at", "id")
    )
    processed, skipped = dispatch(tick_number, queued)
    yields = _distribute_yields()
    mood_changes = _refresh_moods()

    record.actions_processed = processed
    record.actions_skipped = skipped
    record.resolved_at = timezone.now()
    record.save(update_fields=["actions_processed", "actions_skipped", "resolved_at"])
    return TickReport(
        tick_number=tick_number,
        status=STATUS_RESOLVED,
        processed=processed,
        skipped=skipped,
        yields=yields,
        mood_changes=mood_changes,
    )


def resolve_tick(*, expected_tick: Optional[int] = None, origin: str = "manual") -> TickReport:
    """Resolve the next tick.

    When ``expected_tick`` is given and does not match the next tick number the
    call is a no-op reporting ``stale``.  A failing action is contained by
    ``_apply``; any other exception raised during the pass rolls back every
    mutation, leaving the same tick number and queue for the next try.
    """
    with transaction.atomic():
        tick_number = next_tick_number()
        if expected_tick is not None and expected_tick != tick_number:
            logger.info(
                "Tick trigger for %s ignored; next tick is %s (%s)",
                expected_tick,
                tick_number,
                origin,
            )
            return TickReport(tick_number=tick_number, status=STATUS_STALE)
        report = _resolve_pass(tick_number, origin)
    if report.applied:
        logger.info(
            "Resolved tick %s: processed=%s skipped=%s origin=%s",
            report.tick_number,
            report.processed,
            report.skipped,
            origin,
        )
    return report
