from __future__ import annotations

from typing import Any, Optional

from django.db.models import Q, QuerySet

from realm.models import Event, Player


def record_event(
    tick_number: int,
    event_type: str,
    outcome: str,
    *,
    actor: Optional[Player] = None,
    target_player: Optional[Player] = None,
    q: Optional[int] = None,
    r: Optional[int] = None,
    details: Optional[dict[str, Any]] = None,
    narrative: str = "",
) -> Event:
    return Event.objects.create(
        tick_number=tick_number,
        event_type=event_type,
        outcome=outcome,
        actor=actor,
        target_player=target_player,
        q=q,
        r=r,
        details=details or {},
        narrative=narrative,
    )


def recent_events_for_player(player: Player, limit: int = 10) -> list[Event]:
    """Events where ``player`` is actor or target, newest first."""
    return list(
        Event.objects.filter(Q(actor=player) | Q(target_player=player))
        .order_by("-timestamp", "-id")[: max(0, limit)]
    )


def recent_events(limit: int = 20) -> list[Event]:
    return list(Event.objects.order_by("-timestamp", "-id")[: max(0, limit)])


def events_for_tick(tick_number: int) -> QuerySet[Event]:
    return Event.objects.filter(tick_number=tick_number).order_by("id")
