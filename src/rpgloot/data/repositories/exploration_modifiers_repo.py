"""Repository for exploration type reward modifiers."""
from __future__ import annotations

from typing import Dict

from rpgloot.data.errors import DataValidationError
from rpgloot.data.repositories.base import RepositoryBase
from rpgloot.domain.defs import ExplorationModifierDef

DEFAULT_EXPLORATION_TYPE = "standard"


class ExplorationModifiersRepository(RepositoryBase[ExplorationModifierDef]):
    """Loads and validates exploration modifier definitions."""

    def __init__(self, base_path=None) -> None:
        super().__init__("exploration_modifiers.json", base_path)

    def _build(self, raw: dict[str, object]) -> Dict[str, ExplorationModifierDef]:
        modifiers: Dict[str, ExplorationModifierDef] = {}
        for raw_id, payload in raw.items():
            context = f"exploration type '{raw_id}'"
            data = self._require_mapping(payload, context)
            drop_mult = self._require_float(
                data.get("dropChanceMultiplier", 1.0), f"{context} dropChanceMultiplier"
            )
            gold_mult = self._require_float(data.get("goldMultiplier", 1.0), f"{context} goldMultiplier")
            if drop_mult < 0 or gold_mult < 0:
                raise DataValidationError(f"{context} multipliers must not be negative.")
            rarity_bonus = self._require_float(data.get("rarityBonus", 0.0), f"{context} rarityBonus")
            if not (-1.0 <= rarity_bonus <= 1.0):
                raise DataValidationError(f"{context} rarityBonus must be between -1 and 1.")
            description = self._require_str(data.get("description", ""), f"{context} description")
            modifiers[raw_id] = ExplorationModifierDef(
                id=raw_id,
                drop_chance_multiplier=drop_mult,
                gold_multiplier=gold_mult,
                rarity_bonus=rarity_bonus,
                description=description,
            )
        if DEFAULT_EXPLORATION_TYPE not in modifiers:
            raise DataValidationError(
                f"exploration_modifiers.json must define '{DEFAULT_EXPLORATION_TYPE}'."
            )
        return modifiers

    def get_or_default(self, exploration_type: str) -> ExplorationModifierDef:
        return self.find(exploration_type) or self.get(DEFAULT_EXPLORATION_TYPE)
