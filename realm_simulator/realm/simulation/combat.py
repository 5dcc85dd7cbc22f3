from __future__ import annotations

from dataclasses import dataclass

FORTIFY_BONUS = 2
FORTRESS_BONUS = 2

OUTCOME_DAMAGE = "damage_dealt"
OUTCOME_DEFENDER_KILLED = "defender_killed"
OUTCOME_ATTACKER_KILLED = "attacker_killed"
OUTCOME_BOTH_KILLED = "both_killed"

KILL_OUTCOMES = frozenset({OUTCOME_DEFENDER_KILLED, OUTCOME_BOTH_KILLED})
ATTACKER_LOSS_OUTCOMES = frozenset({OUTCOME_ATTACKER_KILLED, OUTCOME_BOTH_KILLED})


@dataclass(frozen=True)
class CombatExchange:
    """Result of one simultaneous attack/counter-attack exchange."""

    effective_defense: int
    damage_to_defender: int
    damage_to_attacker: int
    attacker_hp: int
    defender_hp: int

    @property
    def attacker_dead(self) -> bool:
        return self.attacker_hp <= 0

    @property
    def defender_dead(self) -> bool:
        return self.defender_hp <= 0

    @property
    def outcome(self) -> str:
        if self.attacker_dead and self.defender_dead:
            return OUTCOME_BOTH_KILLED
        if self.defender_dead:
            return OUTCOME_DEFENDER_KILLED
        if self.attacker_dead:
            return OUTCOME_ATTACKER_KILLED
        return OUTCOME_DAMAGE

    def as_details(self) -> dict[str, int]:
        return {
            "effective_defense": self.effective_defense,
            "damage_to_defender": self.damage_to_defender,
            "damage_to_attacker": self.damage_to_attacker,
            "attacker_hp": self.attacker_hp,
            "defender_hp": self.defender_hp,
        }


def effective_defense(defense: int, *, fortified: bool, on_fortress: bool) -> int:
    value = defense
    if fortified:
        value += FORTIFY_BONUS
    if on_fortress:
        value += FORTRESS_BONUS
    return value


def compute_exchange(
    *,
    attacker_atk: int,
    attacker_hp: int,
    defender_def: int,
    defender_hp: int,
    fortified: bool = False,
    on_fortress: bool = False,
) -> CombatExchange:
    eff = effective_defense(defender_def, fortified=fortified, on_fortress=on_fortress)
    to_defender = max(1, attacker_atk - eff)
    to_attacker = max(0, eff - attacker_atk)
    return CombatExchange(
        effective_defense=eff,
        damage_to_defender=to_defender,
        damage_to_attacker=to_attacker,
        attacker_hp=max(0, attacker_hp - to_attacker),
        defender_hp=max(0, defender_hp - to_defender),
    )
