"""Service layer exports."""

from .equipment_resolver import EquipmentResolver
from .errors import LootServiceError, LootSourceNotFoundError, UnknownExplorationTypeError
from .loot_service import LootService, calculate_experience_reward

__all__ = [
    "EquipmentResolver",
    "LootService",
    "LootServiceError",
    "LootSourceNotFoundError",
    "UnknownExplorationTypeError",
    "calculate_experience_reward",
]
