"""Repositories for monster and area loot tables."""
from __future__ import annotations

import logging
import math
from typing import Collection, Dict, List, Mapping, Sequence, Tuple

from rpgloot.data.errors import DataReferenceError, DataValidationError
from rpgloot.data.repositories.base import RepositoryBase
from rpgloot.domain.defs import LootEntryDef, LootTableDef, freeze_weights
from rpgloot.domain.rarity import DEFAULT_RARITY_WEIGHTS, is_rarity

logger = logging.getLogger(__name__)


class LootTableParser(RepositoryBase[LootTableDef]):
    """Shared parsing for loot table records.

    Records use the camelCase keys of the game data files. A record may hold
    the table directly or wrap it in ``lootTable``.
    """

    level_key = "level"

    def _build(self, raw: dict[str, object]) -> Dict[str, LootTableDef]:
        tables: Dict[str, LootTableDef] = {}
        for raw_id, payload in raw.items():
            if not isinstance(raw_id, str) or not raw_id.strip():
                raise DataValidationError(f"{self._filename} ids must be non-empty strings.")
            tables[raw_id] = self.parse_table(raw_id, payload, f"{self._filename}['{raw_id}']")
        return tables

    def check_references(
        self,
        category_tags: Collection[str],
        exploration_types: Collection[str],
    ) -> None:
        """Raise DataReferenceError if a table names an undefined tag or exploration type."""
        for table in self.all():
            for index, entry in enumerate(table.drops):
                context = f"{self._filename}['{table.id}'].drops[{index}]"
                tags = list(entry.equipment_types)
                if entry.item_type:
                    tags.append(entry.item_type)
                for tag in tags:
                    if tag not in category_tags:
                        raise DataReferenceError(f"{context} references unknown equipment tag '{tag}'.")
                for exploration_type in entry.exploration_types:
                    if exploration_type not in exploration_types:
                        raise DataReferenceError(
                            f"{context} references unknown exploration type '{exploration_type}'."
                        )

    @classmethod
    def parse_table(cls, table_id: str, payload: object, context: str) -> LootTableDef:
        record = cls._require_mapping(payload, context)
        if "lootTable" in record:
            context = f"{context}.lootTable"
            record = cls._require_mapping(record["lootTable"], context)

        level = cls._parse_level(record, context)
        gold_range = cls._parse_gold_range(record.get("goldRange"), f"{context}.goldRange")
        gold_multiplier = cls._parse_gold_multiplier(record.get("areaBonus"), f"{context}.areaBonus")
        drop_entries = cls._require_list(record.get("drops", []), f"{context}.drops")
        drops: List[LootEntryDef] = []
        for index, drop_entry in enumerate(drop_entries):
            drops.append(cls.parse_entry(drop_entry, f"{context}.drops[{index}]"))
        return LootTableDef(
            id=table_id,
            level=level,
            drops=tuple(drops),
            gold_range=gold_range,
            gold_multiplier=gold_multiplier,
        )

    @classmethod
    def parse_entry(cls, payload: object, context: str) -> LootEntryDef:
        drop_map = cls._require_mapping(payload, context)
        chance = cls._require_float(drop_map.get("dropChance"), f"{context}.dropChance")
        if not (0.0 <= chance <= 1.0):
            raise DataValidationError(f"{context}.dropChance must be between 0 and 1.")

        item_type = drop_map.get("itemType")
        if item_type is not None:
            item_type = cls._require_str(item_type, f"{context}.itemType")
        equipment_types = tuple(
            cls._require_str_list(drop_map.get("equipmentTypes"), f"{context}.equipmentTypes")
        )
        items = tuple(cls._require_str_list(drop_map.get("items"), f"{context}.items"))
        if not (item_type or equipment_types or items):
            raise DataValidationError(
                f"{context} must define items, equipmentTypes or itemType."
            )
        exploration_types = tuple(
            cls._require_str_list(drop_map.get("explorationTypes"), f"{context}.explorationTypes")
        )

        return LootEntryDef(
            drop_chance=chance,
            rarity_weights=cls._parse_rarity_weights(
                drop_map.get("rarityWeights"), f"{context}.rarityWeights"
            ),
            quantity_range=cls._parse_quantity_range(
                drop_map.get("quantityRange"), f"{context}.quantityRange"
            ),
            item_type=item_type,
            equipment_types=equipment_types,
            items=items,
            exploration_types=exploration_types,
        )

    @classmethod
    def _parse_level(cls, record: dict[str, object], context: str) -> int:
        for key in (cls.level_key, "level", "recommendedLevel"):
            if key in record:
                return cls._require_int(record[key], f"{context}.{key}")
        return 1

    @classmethod
    def _parse_gold_range(cls, value: object, context: str) -> Tuple[int, int] | None:
        if value is None:
            return None
        bounds = cls._require_list(value, context)
        if len(bounds) != 2:
            raise DataValidationError(f"{context} must contain exactly two values.")
        low = cls._require_int(bounds[0], f"{context}[0]")
        high = cls._require_int(bounds[1], f"{context}[1]")
        if low < 0 or high < low:
            raise DataValidationError(f"{context} range invalid.")
        return low, high

    @classmethod
    def _parse_gold_multiplier(cls, value: object, context: str) -> float:
        if value is None:
            return 1.0
        bonus = cls._require_mapping(value, context)
        if "goldMultiplier" not in bonus:
            return 1.0
        multiplier = cls._require_float(bonus["goldMultiplier"], f"{context}.goldMultiplier")
        if multiplier < 0:
            raise DataValidationError(f"{context}.goldMultiplier must not be negative.")
        return multiplier

    @classmethod
    def _parse_rarity_weights(cls, value: object, context: str) -> Mapping[str, float]:
        if value is None:
            return DEFAULT_RARITY_WEIGHTS
        raw_weights = cls._require_mapping(value, context)
        weights: Dict[str, float] = {}
        for key, raw_weight in raw_weights.items():
            if not is_rarity(key):
                raise DataValidationError(f"{context} has unknown rarity '{key}'.")
            weight = cls._require_float(raw_weight, f"{context}.{key}")
            if weight < 0:
                raise DataValidationError(f"{context}.{key} must not be negative.")
            weights[key] = weight
        if not any(weight > 0 for weight in weights.values()):
            raise DataValidationError(f"{context} must contain a positive weight.")
        return freeze_weights(weights)

    @classmethod
    def _parse_quantity_range(cls, value: object, context: str) -> Tuple[int, int]:
        if value is None:
            return 1, 1
        bounds = cls._require_list(value, context)
        if len(bounds) != 2:
            raise DataValidationError(f"{context} must contain exactly two values.")
        min_qty = cls._require_int(bounds[0], f"{context}[0]")
        max_qty = cls._require_int(bounds[1], f"{context}[1]")
        if min_qty <= 0 or max_qty < min_qty:
            raise DataValidationError(f"{context} quantity range invalid.")
        return min_qty, max_qty

    @classmethod
    def parse_inline_table(cls, table_id: str, payload: Mapping[str, object]) -> LootTableDef:
        """Build a table from a caller-supplied record, repairing what it can.

        Tuples and read-only mappings are accepted, ranges are repaired and
        clamped, and entries without a usable source are skipped one by one.
        Raises DataValidationError only when ``lootTable`` is not a mapping.
        """
        record: Mapping[str, object] = payload
        if "lootTable" in record:
            inner = record["lootTable"]
            if not isinstance(inner, Mapping):
                raise DataValidationError(f"inline table '{table_id}' lootTable must be a mapping.")
            record = inner

        level = 1
        for key in (cls.level_key, "level", "recommendedLevel"):
            if _is_number(record.get(key)):
                level = int(record[key])
                break

        gold_range = None
        bounds = _number_pair(record.get("goldRange"))
        if bounds is not None:
            low = max(0, bounds[0])
            gold_range = (low, max(low, bounds[1]))

        gold_multiplier = 1.0
        area_bonus = record.get("areaBonus")
        if isinstance(area_bonus, Mapping) and _is_number(area_bonus.get("goldMultiplier")):
            gold_multiplier = max(0.0, float(area_bonus["goldMultiplier"]))

        drops: List[LootEntryDef] = []
        raw_drops = record.get("drops")
        if not _is_sequence(raw_drops):
            raw_drops = ()
        for index, raw_entry in enumerate(raw_drops):
            entry = cls._parse_inline_entry(raw_entry)
            if entry is None:
                logger.debug("Skipping unusable entry %d of inline table '%s'", index, table_id)
                continue
            drops.append(entry)

        return LootTableDef(
            id=table_id,
            level=level,
            drops=tuple(drops),
            gold_range=gold_range,
            gold_multiplier=gold_multiplier,
        )

    @classmethod
    def _parse_inline_entry(cls, payload: object) -> LootEntryDef | None:
        if not isinstance(payload, Mapping):
            return None
        item_type = payload.get("itemType")
        if not isinstance(item_type, str) or not item_type:
            item_type = None
        equipment_types = _str_tuple(payload.get("equipmentTypes"))
        items = _str_tuple(payload.get("items"))
        if not (item_type or equipment_types or items):
            return None

        chance = payload.get("dropChance")
        drop_chance = min(1.0, max(0.0, float(chance))) if _is_number(chance) else 0.0

        rarity_weights: Mapping[str, float] = DEFAULT_RARITY_WEIGHTS
        raw_weights = payload.get("rarityWeights")
        if isinstance(raw_weights, Mapping):
            weights = {
                key: float(weight)
                for key, weight in raw_weights.items()
                if is_rarity(key) and _is_number(weight) and weight >= 0
            }
            if any(weight > 0 for weight in weights.values()):
                rarity_weights = freeze_weights(weights)

        quantity_range = (1, 1)
        bounds = _number_pair(payload.get("quantityRange"))
        if bounds is not None:
            low = max(1, bounds[0])
            quantity_range = (low, max(low, bounds[1]))

        return LootEntryDef(
            drop_chance=drop_chance,
            rarity_weights=rarity_weights,
            quantity_range=quantity_range,
            item_type=item_type,
            equipment_types=equipment_types,
            items=items,
            exploration_types=_str_tuple(payload.get("explorationTypes")),
        )


def _is_number(value: object) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def _is_sequence(value: object) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes))


def _number_pair(value: object) -> Tuple[int, int] | None:
    if not _is_sequence(value) or len(value) != 2:
        return None
    if not all(_is_number(bound) for bound in value):
        return None
    return int(value[0]), int(value[1])


def _str_tuple(value: object) -> Tuple[str, ...]:
    if not _is_sequence(value):
        return ()
    return tuple(item for item in value if isinstance(item, str) and item)


class MonsterLootRepository(LootTableParser):
    """Loads monster loot tables keyed by monster id."""

    level_key = "level"

    def __init__(self, base_path=None) -> None:
        super().__init__("monster_loot.json", base_path)


class AreaLootRepository(LootTableParser):
    """Loads area exploration loot tables keyed by area id."""

    level_key = "recommendedLevel"

    def __init__(self, base_path=None) -> None:
        super().__init__("area_loot.json", base_path)
