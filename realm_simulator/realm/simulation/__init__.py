"""Pure simulation helpers with no database access."""

from .combat import CombatExchange, compute_exchange
from .hexgrid import attackable, distance, hexes_in_radius, neighbors, reachable
from .moods import EventSignal, derive_mood
from .resources import ResourceBundle
from .worldgen import TileBlueprint, generate

__all__ = [
    "CombatExchange",
    "EventSignal",
    "ResourceBundle",
    "TileBlueprint",
    "attackable",
    "compute_exchange",
    "derive_mood",
    "distance",
    "generate",
    "hexes_in_radius",
    "neighbors",
    "reachable",
]
