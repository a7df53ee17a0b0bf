"""Repository exports."""

from .equipment_categories_repo import EquipmentCategoriesRepository
from .exploration_modifiers_repo import DEFAULT_EXPLORATION_TYPE, ExplorationModifiersRepository
from .loot_tables_repo import AreaLootRepository, LootTableParser, MonsterLootRepository

__all__ = [
    "AreaLootRepository",
    "DEFAULT_EXPLORATION_TYPE",
    "EquipmentCategoriesRepository",
    "ExplorationModifiersRepository",
    "LootTableParser",
    "MonsterLootRepository",
]
