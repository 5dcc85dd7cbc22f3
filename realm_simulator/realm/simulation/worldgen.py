"""Coordinate-seeded terrain generation.

Every value here is a pure function of ``(q, r)``: the same coordinate always
produces the same terrain, base yield and hidden deposit, so tiles can be
materialized lazily in any order.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from .resources import ResourceBundle

TERRAIN_PLAINS = "plains"
TERRAIN_DESERT = "desert"
TERRAIN_MOUNTAIN = "mountain"
TERRAIN_FOREST = "forest"
TERRAIN_RIVER = "river"
TERRAIN_SEA = "sea"

TERRAINS = (
    TERRAIN_PLAINS,
    TERRAIN_DESERT,
    TERRAIN_MOUNTAIN,
    TERRAIN_FOREST,
    TERRAIN_RIVER,
    TERRAIN_SEA,
)

IMPASSABLE_TERRAIN = frozenset({TERRAIN_SEA, TERRAIN_MOUNTAIN})

SALT_TERRAIN = 1
SALT_HIDDEN = 2
SALT_AMOUNT = 3

_FNV_OFFSET = 2166136261
_FNV_PRIME = 16777619
_MASK = 0xFFFFFFFF
_COORD_SHIFT = 10000

# Cumulative upper bounds, checked in order.
_TERRAIN_BANDS = (
    (0.05, TERRAIN_SEA),
    (0.15, TERRAIN_RIVER),
    (0.30, TERRAIN_MOUNTAIN),
    (0.45, TERRAIN_FOREST),
    (0.65, TERRAIN_DESERT),
)

# (upper bound, resource kind, max amount); below the first bound there is none.
_HIDDEN_NONE_BELOW = 0.40
_HIDDEN_BANDS = (
    (0.65, "grain", 5),
    (0.85, "stone", 5),
    (0.95, "gold", 3),
    (1.00, "knowledge", 3),
)

BASE_YIELDS: dict[str, ResourceBundle] = {
    TERRAIN_PLAINS: ResourceBundle(grain=2),
    TERRAIN_DESERT: ResourceBundle(stone=1, gold=1),
    TERRAIN_MOUNTAIN: ResourceBundle(stone=3),
    TERRAIN_FOREST: ResourceBundle(grain=1, stone=1),
    TERRAIN_RIVER: ResourceBundle(grain=1, gold=2),
    TERRAIN_SEA: ResourceBundle(gold=1, knowledge=1),
}


@dataclass(frozen=True)
class TileBlueprint:
    """Immutable generated attributes of a coordinate."""

    q: int
    r: int
    terrain: str
    base_yield: ResourceBundle
    hidden_resource: Optional[str]
    hidden_amount: int

    @property
    def passable(self) -> bool:
        return self.terrain not in IMPASSABLE_TERRAIN


def _mix(h: int, value: int) -> int:
    h ^= value & _MASK
    return (h * _FNV_PRIME) & _MASK


def seeded_random(q: int, r: int, salt: int) -> float:
    """Return a deterministic float in [0, 1) for the coordinate and salt."""
    h = _FNV_OFFSET
    h = _mix(h, q + _COORD_SHIFT)
    h = _mix(h, r + _COORD_SHIFT)
    h = _mix(h, salt)
    return h / 4294967296


def terrain_for(q: int, r: int) -> str:
    roll = seeded_random(q, r, SALT_TERRAIN)
    for bound, terrain in _TERRAIN_BANDS:
        if roll < bound:
            return terrain
    return TERRAIN_PLAINS


def hidden_resource_for(q: int, r: int) -> tuple[Optional[str], int]:
    roll = seeded_random(q, r, SALT_HIDDEN)
    if roll < _HIDDEN_NONE_BELOW:
        return None, 0
    amount_roll = seeded_random(q, r, SALT_AMOUNT)
    for bound, kind, ceiling in _HIDDEN_BANDS:
        if roll < bound:
            return kind, math.floor(amount_roll * ceiling) + 1
    return None, 0


def generate(q: int, r: int) -> TileBlueprint:
    terrain = terrain_for(q, r)
    hidden, amount = hidden_resource_for(q, r)
    return TileBlueprint(
        q=q,
        r=r,
        terrain=terrain,
        base_yield=BASE_YIELDS[terrain],
        hidden_resource=hidden,
        hidden_amount=amount,
    )
