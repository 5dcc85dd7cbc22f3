"""Axial hex-grid geometry."""
from __future__ import annotations

from collections import deque
from typing import Callable

Hex = tuple[int, int]

HEX_DIRECTIONS: tuple[Hex, ...] = (
    (1, 0),
    (1, -1),
    (0, -1),
    (-1, 0),
    (-1, 1),
    (0, 1),
)


def distance(a: Hex, b: Hex) -> int:
    dq = a[0] - b[0]
    dr = a[1] - b[1]
    return max(abs(dq), abs(dr), abs(dq + dr))


def neighbors(center: Hex) -> list[Hex]:
    q, r = center
    return [(q + dq, r + dr) for dq, dr in HEX_DIRECTIONS]


def hexes_in_radius(center: Hex, radius: int) -> list[Hex]:
    """Every hex within ``radius`` steps of ``center``, center included.

    The result always has ``3N^2 + 3N + 1`` entries.
    """
    if radius < 0:
        return []
    cq, cr = center
    result: list[Hex] = []
    for dq in range(-radius, radius + 1):
        lo = max(-radius, -dq - radius)
        hi = min(radius, -dq + radius)
        for dr in range(lo, hi + 1):
            result.append((cq + dq, cr + dr))
    return result


def reachable(start: Hex, max_range: int, can_enter: Callable[[Hex], bool]) -> list[Hex]:
    """Bounded breadth-first search from ``start``.

    ``can_enter`` decides whether a hex may be stepped onto; it should reject
    hexes the mover cannot see and impassable terrain.  The start hex itself is
    not part of the result.
    """
    if max_range <= 0:
        return []
    seen = {start}
    frontier: deque[tuple[Hex, int]] = deque([(start, 0)])
    result: list[Hex] = []
    while frontier:
        current, steps = frontier.popleft()
        if steps >= max_range:
            continue
        for nxt in neighbors(current):
            if nxt in seen:
                continue
            seen.add(nxt)
            if not can_enter(nxt):
                continue
            result.append(nxt)
            frontier.append((nxt, steps + 1))
    return result


def attackable(start: Hex, is_target: Callable[[Hex], bool]) -> list[Hex]:
    """Adjacent hexes for which ``is_target`` holds."""
    return [hex_ for hex_ in neighbors(start) if is_target(hex_)]

