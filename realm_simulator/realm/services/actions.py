"""Admission control for queued player actions.

Submission deducts the action-point cost with a conditional UPDATE so two
concurrent submissions can never spend the same points; cancellation flips
the status with a conditional UPDATE first, so a refund happens at most once.
"""
from __future__ import annotations

import logging
from typing import Optional

from django.db import transaction
from django.db.models import F
from django.db.models.functions import Least
from django.utils import timezone

from realm.models import PendingAction, Player, Unit

from . import sim_config

logger = logging.getLogger(__name__)

UNITLESS_TYPES = frozenset({PendingAction.TYPE_DIPLOMACY})
FALLBACK_COST = 1
# IntegerField bounds shared by every supported backend
COORD_MIN = -(2**31)
COORD_MAX = 2**31 - 1


class ActionValidationError(Exception):
    """Raised when a submission or cancellation is refused. Nothing is mutated."""

    code = "invalid_action"

    def __init__(self, message: str, *, code: Optional[str] = None) -> None:
        super().__init__(message)
        if code is not None:
            self.code = code


class InsufficientBudget(ActionValidationError):
    code = "insufficient_budget"


class UnitUnavailable(ActionValidationError):
    code = "unit_unavailable"


class ActionNotCancellable(ActionValidationError):
    code = "not_cancellable"


def action_cost(action_type: str) -> int:
    return int(sim_config.action_costs().get(action_type, FALLBACK_COST))


def _check_unit(player: Player, unit: Optional[Unit], action_type: str) -> Optional[Unit]:
    if unit is None:
        if action_type in PendingAction.KNOWN_TYPES and action_type not in UNITLESS_TYPES:
            raise UnitUnavailable(f"A unit is required for {action_type}")
        return None
    current = Unit.objects.filter(pk=unit.pk).first()
    if current is None:
        raise UnitUnavailable("Unit not found")
    if current.owner_id != player.pk:
        raise UnitUnavailable("Unit is not owned by this player")
    if not current.is_alive:
        raise UnitUnavailable("Unit is dead")
    return current


def _check_target(target: Optional[tuple[int, int]]) -> tuple[Optional[int], Optional[int]]:
    if target is None:
        return None, None
    q, r = (int(value) for value in target)
    if not (COORD_MIN <= q <= COORD_MAX and COORD_MIN <= r <= COORD_MAX):
        raise ActionValidationError(f"Target ({q},{r}) is off the map", code="invalid_target")
    return q, r


def submit_action(
    player: Player,
    action_type: str,
    *,
    unit: Optional[Unit] = None,
    target: Optional[tuple[int, int]] = None,
    cost: Optional[int] = None,
    target_player: Optional[Player] = None,
    diplomacy_type: str = "",
) -> PendingAction:
    """Queue an action after deducting its cost from the player's budget."""
    action_type = (action_type or "").strip().lower()
    if not action_type:
        raise ActionValidationError("Action type is required", code="invalid_type")
    if cost is None:
        cost = action_cost(action_type)
    if cost < 0:
        raise ActionValidationError("Cost cannot be negative", code="invalid_cost")
    if player.is_defeated:
        raise ActionValidationError("Defeated players cannot act", code="player_defeated")
    target_q, target_r = _check_target(target)
    checked_unit = _check_unit(player, unit, action_type)

    with transaction.atomic():
        deducted = Player.objects.filter(pk=player.pk, action_points__gte=cost).update(
            action_points=F("action_points") - cost
        )
        if not deducted:
            raise InsufficientBudget(f"Action needs {cost} AP")
        action = PendingAction.objects.create(
            player=player,
            unit=checked_unit,
            action_type=action_type,
            target_q=target_q,
            target_r=target_r,
            cost=cost,
            target_player=target_player,
            diplomacy_type=diplomacy_type or "",
            submitted_at=timezone.now(),
        )
    player.refresh_from_db(fields=["action_points"])
    logger.debug("Queued %s #%s for player %s (cost=%s)", action_type, action.pk, player.pk, cost)
    return action


def cancel_action(action_id: int, player: Player) -> PendingAction:
    """Cancel a queued action and refund its cost, capped at the AP ceiling."""
    with transaction.atomic():
        action = PendingAction.objects.filter(pk=action_id).first()
        if action is None or action.player_id != player.pk:
            raise ActionNotCancellable("Action not found")
        flipped = PendingAction.objects.filter(
            pk=action_id,
            player=player,
            status=PendingAction.STATUS_QUEUED,
        ).update(status=PendingAction.STATUS_CANCELLED)
        if not flipped:
            raise ActionNotCancellable(f"Action is {action.status}")
        Player.objects.filter(pk=player.pk).update(
            action_points=Least(F("action_points") + action.cost, F("max_action_points"))
        )
    action.refresh_from_db()
    player.refresh_from_db(fields=["action_points"])
    logger.debug("Cancelled action #%s for player %s", action_id, player.pk)
    return action


def queued_actions(player: Player) -> list[PendingAction]:
    return list(
        PendingAction.objects.filter(player=player, status=PendingAction.STATUS_QUEUED)
        .order_by("submitted_at", "id")
    )


def cancel_all_actions(player: Player) -> int:
    """Cancel every queued action of ``player`` without refunding."""
    return PendingAction.objects.filter(
        player=player,
        status=PendingAction.STATUS_QUEUED,
    ).update(status=PendingAction.STATUS_CANCELLED)
