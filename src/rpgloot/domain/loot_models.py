"""Value objects produced by loot rolls and loot assembly."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from rpgloot.core.types import RarityKey


@dataclass(frozen=True, slots=True)
class LootRollResult:
    """Outcome of rolling a single loot entry."""

    dropped: bool
    rarity: RarityKey | None = None
    quantity: int | None = None
    drop_chance: float = 0.0
    level_scaling: float = 1.0


@dataclass(frozen=True, slots=True)
class LootItem:
    id: str
    rarity: RarityKey
    quantity: int


@dataclass(slots=True)
class LootPayload:
    """Gold and items awarded for one combat or exploration event."""

    gold: int = 0
    items: List[LootItem] = field(default_factory=list)
    experience: int = 0

    @property
    def is_empty(self) -> bool:
        return self.gold <= 0 and not self.items

    def to_dict(self) -> dict[str, object]:
        return {
            "gold": self.gold,
            "experience": self.experience,
            "items": [
                {"id": item.id, "rarity": item.rarity, "quantity": item.quantity}
                for item in self.items
            ],
        }
