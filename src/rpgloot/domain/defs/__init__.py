"""Domain definition exports."""

from .loot_def import (
    CategoryTag,
    CategoryUnion,
    ExplicitItems,
    ExplorationModifierDef,
    LootEntryDef,
    LootSource,
    LootTableDef,
    NoSource,
    freeze_weights,
)

__all__ = [
    "CategoryTag",
    "CategoryUnion",
    "ExplicitItems",
    "ExplorationModifierDef",
    "LootEntryDef",
    "LootSource",
    "LootTableDef",
    "NoSource",
    "freeze_weights",
]
