"""Loot table definition structures."""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Tuple, Union

from rpgloot.domain.rarity import DEFAULT_RARITY_WEIGHTS


@dataclass(frozen=True, slots=True)
class ExplicitItems:
    """Concrete item ids listed directly on the entry."""

    items: Tuple[str, ...]


@dataclass(frozen=True, slots=True)
class CategoryUnion:
    """Abstract tags whose pools are merged before selection."""

    tags: Tuple[str, ...]


@dataclass(frozen=True, slots=True)
class CategoryTag:
    """A single abstract tag mapped to one pool."""

    tag: str


@dataclass(frozen=True, slots=True)
class NoSource:
    """Entry names nothing resolvable."""


LootSource = Union[ExplicitItems, CategoryUnion, CategoryTag, NoSource]


@dataclass(frozen=True, slots=True)
class LootEntryDef:
    """A single drop entry in a monster or area loot table."""

    drop_chance: float
    rarity_weights: Mapping[str, float] = field(default_factory=lambda: DEFAULT_RARITY_WEIGHTS)
    quantity_range: Tuple[int, int] = (1, 1)
    item_type: str | None = None
    equipment_types: Tuple[str, ...] = ()
    items: Tuple[str, ...] = ()
    exploration_types: Tuple[str, ...] = ()

    @property
    def source(self) -> LootSource:
        """Return the authoritative source: items > equipment_types > item_type."""
        if self.items:
            return ExplicitItems(tuple(self.items))
        if self.equipment_types:
            return CategoryUnion(tuple(self.equipment_types))
        if self.item_type:
            return CategoryTag(self.item_type)
        return NoSource()

    def allows_exploration(self, exploration_type: str) -> bool:
        return not self.exploration_types or exploration_type in self.exploration_types


@dataclass(frozen=True, slots=True)
class LootTableDef:
    """Loot configuration for a monster or an explorable area."""

    id: str
    level: int
    drops: Tuple[LootEntryDef, ...]
    gold_range: Tuple[int, int] | None = None
    gold_multiplier: float = 1.0


@dataclass(frozen=True, slots=True)
class ExplorationModifierDef:
    """Reward modifiers applied by an exploration style."""

    id: str
    drop_chance_multiplier: float = 1.0
    gold_multiplier: float = 1.0
    rarity_bonus: float = 0.0
    description: str = ""


def freeze_weights(weights: Mapping[str, float]) -> Mapping[str, float]:
    """Return a read-only copy of a rarity weight mapping."""
    return MappingProxyType(dict(weights))
