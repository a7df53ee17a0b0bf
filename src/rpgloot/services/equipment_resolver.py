"""Resolve loot entries that name abstract equipment tags into concrete item ids."""
from __future__ import annotations

import logging
from typing import Dict, Mapping, Sequence, Tuple

from rpgloot.core.rng import RNG
from rpgloot.data.repositories import EquipmentCategoriesRepository
from rpgloot.domain.defs import (
    CategoryTag,
    CategoryUnion,
    ExplicitItems,
    LootEntryDef,
    LootSource,
    NoSource,
)

logger = logging.getLogger(__name__)


class EquipmentResolver:
    """Maps loot entries onto concrete item ids.

    Priority is items > equipment types > item type. Resolution never raises;
    anything unresolvable yields None.
    """

    def __init__(
        self,
        *,
        categories_repo: EquipmentCategoriesRepository | None = None,
        categories: Mapping[str, Sequence[str]] | None = None,
    ) -> None:
        if categories is not None:
            self._categories: Mapping[str, Tuple[str, ...]] | None = {
                tag: tuple(pool) for tag, pool in categories.items()
            }
        else:
            self._categories = None
        self._categories_repo = categories_repo or EquipmentCategoriesRepository()

    @property
    def categories(self) -> Mapping[str, Tuple[str, ...]]:
        if self._categories is None:
            self._categories = self._categories_repo.as_mapping()
        return self._categories

    def pool_for(self, tag: str) -> Tuple[str, ...]:
        """Return the concrete pool for ``tag`` (empty when unknown)."""
        return self.categories.get(tag, ())

    def resolve_concrete_item_id(self, entry: object, rng: RNG) -> str | None:
        source = source_of(entry)
        if isinstance(source, ExplicitItems):
            return rng.choice(source.items)
        if isinstance(source, CategoryUnion):
            candidates = self._union_pools(source.tags)
            if not candidates:
                logger.debug("No items mapped for equipment types %s", list(source.tags))
                return None
            return rng.choice(candidates)
        if isinstance(source, CategoryTag):
            pool = self.pool_for(source.tag)
            if not pool:
                logger.debug("No items mapped for item type '%s'", source.tag)
                return None
            return rng.choice(pool)
        return None

    def _union_pools(self, tags: Sequence[str]) -> Tuple[str, ...]:
        seen: Dict[str, None] = {}
        for tag in tags:
            for item_id in self.pool_for(tag):
                seen.setdefault(item_id, None)
        return tuple(seen)


def source_of(entry: object) -> LootSource:
    """Return the authoritative loot source for a definition or raw record."""
    if isinstance(entry, LootEntryDef):
        return entry.source
    if not isinstance(entry, Mapping):
        return NoSource()
    items = _string_tuple(entry.get("items"))
    if items:
        return ExplicitItems(items)
    equipment_types = _string_tuple(entry.get("equipmentTypes", entry.get("equipment_types")))
    if equipment_types:
        return CategoryUnion(equipment_types)
    item_type = entry.get("itemType", entry.get("item_type"))
    if isinstance(item_type, str) and item_type:
        return CategoryTag(item_type)
    return NoSource()


def _string_tuple(value: object) -> Tuple[str, ...]:
    if not isinstance(value, (list, tuple)):
        return ()
    return tuple(item for item in value if isinstance(item, str) and item)
