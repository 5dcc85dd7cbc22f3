from __future__ import annotations

from dataclasses import dataclass, fields

RESOURCE_KINDS = ("grain", "stone", "gold", "knowledge")


@dataclass(frozen=True)
class ResourceBundle:
    """Fixed four-field resource vector used for yields and deltas."""

    grain: int = 0
    stone: int = 0
    gold: int = 0
    knowledge: int = 0

    def __add__(self, other: "ResourceBundle") -> "ResourceBundle":
        if not isinstance(other, ResourceBundle):
            return NotImplemented
        return ResourceBundle(
            grain=self.grain + other.grain,
            stone=self.stone + other.stone,
            gold=self.gold + other.gold,
            knowledge=self.knowledge + other.knowledge,
        )

    def floored(self) -> "ResourceBundle":
        return ResourceBundle(
            grain=max(0, self.grain),
            stone=max(0, self.stone),
            gold=max(0, self.gold),
            knowledge=max(0, self.knowledge),
        )

    def is_empty(self) -> bool:
        return not any(getattr(self, f.name) for f in fields(self))

    def as_dict(self) -> dict[str, int]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def single(cls, kind: str, amount: int) -> "ResourceBundle":
        if kind == "grain":
            return cls(grain=amount)
        if kind == "stone":
            return cls(stone=amount)
        if kind == "gold":
            return cls(gold=amount)
        if kind == "knowledge":
            return cls(knowledge=amount)
        raise ValueError(f"Unknown resource kind: {kind}")


EMPTY = ResourceBundle()
