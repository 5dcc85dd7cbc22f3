"""Advisor mood derivation from a player's recent event window."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from .combat import ATTACKER_LOSS_OUTCOMES, KILL_OUTCOMES

MOOD_CONFIDENT = "confident"
MOOD_WORRIED = "worried"
MOOD_DESPERATE = "desperate"
MOOD_TRIUMPHANT = "triumphant"
MOOD_SUSPICIOUS = "suspicious"
MOOD_MOURNING = "mourning"

MOODS = (
    MOOD_CONFIDENT,
    MOOD_WORRIED,
    MOOD_DESPERATE,
    MOOD_TRIUMPHANT,
    MOOD_SUSPICIOUS,
    MOOD_MOURNING,
)

DEFAULT_WINDOW = 5
DEFAULT_LOW_AP_THRESHOLD = 3


@dataclass(frozen=True)
class EventSignal:
    """The slice of an event the mood machine looks at."""

    event_type: str
    outcome: str
    actor_id: Optional[int]
    target_id: Optional[int]


def _is_victory(signal: EventSignal, player_id: int) -> bool:
    return (
        signal.event_type == "attack"
        and signal.actor_id == player_id
        and signal.outcome in KILL_OUTCOMES
    )


def _is_loss(signal: EventSignal, player_id: int) -> bool:
    if signal.event_type != "attack":
        return False
    if signal.target_id == player_id and signal.outcome in KILL_OUTCOMES:
        return True
    return signal.actor_id == player_id and signal.outcome in ATTACKER_LOSS_OUTCOMES


def derive_mood(
    player_id: int,
    signals: Iterable[EventSignal],
    action_points: int,
    *,
    window: int = DEFAULT_WINDOW,
    low_ap_threshold: int = DEFAULT_LOW_AP_THRESHOLD,
) -> str:
    """Victory beats loss, loss beats a low AP budget, otherwise confident."""
    recent = list(signals)[: max(0, window)]
    if any(_is_victory(sig, player_id) for sig in recent):
        return MOOD_TRIUMPHANT
    if any(_is_loss(sig, player_id) for sig in recent):
        return MOOD_MOURNING
    if action_points < low_ap_threshold:
        return MOOD_WORRIED
    return MOOD_CONFIDENT
