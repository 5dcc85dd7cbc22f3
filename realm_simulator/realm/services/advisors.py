"""Advisor lifecycle, loyalty and per-tick mood updates."""
from __future__ import annotations

import logging
from typing import Any, Optional

from realm.models import Advisor, Player
from realm.simulation.moods import MOODS, EventSignal, derive_mood

from . import events as event_service
from . import sim_config

logger = logging.getLogger(__name__)

TRAIT_FIELDS = ("aggression", "caution", "mysticism", "verbosity", "bluntness")
TEXT_FIELDS = ("title", "speech_style", "catchphrase", "favored_strategy", "backstory")


def _clamp(value: int, lower: int, upper: int) -> int:
    return max(lower, min(upper, value))


def create_advisor(
    player: Player,
    *,
    name: str,
    archetype: str = Advisor.ARCHETYPE_STRATEGIST,
    **attrs: Any,
) -> Advisor:
    valid_archetypes = {choice for choice, _ in Advisor.ARCHETYPE_CHOICES}
    if archetype not in valid_archetypes:
        raise ValueError(f"Unknown advisor archetype: {archetype}")
    unknown = set(attrs) - set(TRAIT_FIELDS) - set(TEXT_FIELDS)
    if unknown:
        raise ValueError(f"Unknown advisor attributes: {sorted(unknown)}")
    fields: dict[str, Any] = {}
    for trait in TRAIT_FIELDS:
        if trait in attrs:
            fields[trait] = _clamp(int(attrs[trait]), 0, 10)
    for text in TEXT_FIELDS:
        if text in attrs:
            fields[text] = str(attrs[text] or "")
    starting_loyalty = int(sim_config.advisor_settings().get("starting_loyalty", 50))
    return Advisor.objects.create(
        player=player,
        name=name,
        archetype=archetype,
        mood="confident",
        loyalty=_clamp(starting_loyalty, 0, 100),
        **fields,
    )


def set_mood(advisor: Advisor, mood: str) -> bool:
    """Persist ``mood`` if it differs from the stored one."""
    if mood not in MOODS:
        raise ValueError(f"Unknown advisor mood: {mood}")
    if advisor.mood == mood:
        return False
    advisor.mood = mood
    advisor.save(update_fields=["mood", "updated_at"])
    return True


def _adjust_loyalty(advisor: Advisor, delta: int) -> int:
    advisor.loyalty = _clamp(advisor.loyalty + delta, 0, 100)
    advisor.save(update_fields=["loyalty", "updated_at"])
    return advisor.loyalty


def _loyalty_step() -> int:
    return int(sim_config.advisor_settings().get("loyalty_step", 5))


def increment_loyalty(advisor: Advisor, step: Optional[int] = None) -> int:
    return _adjust_loyalty(advisor, abs(step if step is not None else _loyalty_step()))


def decrement_loyalty(advisor: Advisor, step: Optional[int] = None) -> int:
    return _adjust_loyalty(advisor, -abs(step if step is not None else _loyalty_step()))


def refresh_mood(player: Player) -> Optional[tuple[str, str]]:
    """Recompute the advisor mood from the recent event window.

    Returns ``(old, new)`` when the stored mood changed, otherwise None.
    """
    try:
        advisor = player.advisor
    except Advisor.DoesNotExist:
        return None
    cfg = sim_config.advisor_settings()
    window = int(cfg.get("mood_window", 5))
    threshold = int(cfg.get("low_ap_threshold", 3))
    signals = [
        EventSignal(
            event_type=event.event_type,
            outcome=event.outcome,
            actor_id=event.actor_id,
            target_id=event.target_player_id,
        )
        for event in event_service.recent_events_for_player(player, limit=window)
    ]
    previous = advisor.mood
    mood = derive_mood(
        player.pk,
        signals,
        player.action_points,
        window=window,
        low_ap_threshold=threshold,
    )
    if not set_mood(advisor, mood):
        return None
    logger.info("Advisor %s mood %s -> %s", advisor.pk, previous, mood)
    return previous, mood
