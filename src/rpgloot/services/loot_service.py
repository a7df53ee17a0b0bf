"""Loot assembly for monster defeats and area exploration."""
from __future__ import annotations

import logging
import time
from dataclasses import replace
from typing import Mapping

from rpgloot.core.rng import RNG
from rpgloot.core.types import LootSourceKind
from rpgloot.data.errors import DataValidationError
from rpgloot.data.repositories import (
    DEFAULT_EXPLORATION_TYPE,
    AreaLootRepository,
    ExplorationModifiersRepository,
    LootTableParser,
    MonsterLootRepository,
)
from rpgloot.domain.defs import ExplorationModifierDef, LootEntryDef, LootTableDef, freeze_weights
from rpgloot.domain.loot_models import LootItem, LootPayload
from rpgloot.domain.loot_rolls import roll_for_loot
from rpgloot.domain.rarity import apply_rarity_bonus
from rpgloot.services.equipment_resolver import EquipmentResolver
from rpgloot.services.errors import LootSourceNotFoundError, UnknownExplorationTypeError

logger = logging.getLogger(__name__)

SLOW_GENERATION_MS = 50.0

# Gold formula used when a table has no explicit goldRange.
BASE_GOLD = 10
GOLD_PER_LEVEL = 5
GOLD_VARIANCE = 0.3
GOLD_OVERLEVEL_BONUS = 0.1

# Experience reward for monsters.
BASE_EXPERIENCE = 50
EXPERIENCE_PER_LEVEL = 10
EXPERIENCE_PENALTY_PER_LEVEL = 0.1
MIN_EXPERIENCE_FACTOR = 0.1

_NEUTRAL_EXPLORATION = ExplorationModifierDef(id=DEFAULT_EXPLORATION_TYPE)


class LootService:
    """Builds loot payloads from monster and area loot tables."""

    def __init__(
        self,
        *,
        monster_loot_repo: MonsterLootRepository | None = None,
        area_loot_repo: AreaLootRepository | None = None,
        exploration_repo: ExplorationModifiersRepository | None = None,
        resolver: EquipmentResolver | None = None,
        rng: RNG | None = None,
    ) -> None:
        self._monster_loot_repo = monster_loot_repo or MonsterLootRepository()
        self._area_loot_repo = area_loot_repo or AreaLootRepository()
        self._exploration_repo = exploration_repo or ExplorationModifiersRepository()
        self._resolver = resolver or EquipmentResolver()
        self._rng = rng or RNG()

    @property
    def resolver(self) -> EquipmentResolver:
        return self._resolver

    def generate_monster_loot(
        self,
        monster_ref: object,
        player_level: int,
        area_ref: object = None,
        *,
        rng: RNG | None = None,
        strict: bool = False,
    ) -> LootPayload:
        """Roll the loot for one defeated monster.

        ``monster_ref`` is a monster id, a LootTableDef or a raw loot table
        record. Unknown monsters give an empty payload unless ``strict``.
        ``area_ref`` names the area the fight happened in, resolved the same
        way; its ``areaBonus.goldMultiplier`` applies to the monster gold.
        """
        rng = rng or self._rng
        started = time.perf_counter()
        table = self._lookup(self._monster_loot_repo, monster_ref, "monster", strict)
        if table is None:
            return LootPayload()
        area_gold_multiplier = 1.0
        if area_ref is not None:
            area = self._lookup(self._area_loot_repo, area_ref, "area", strict)
            if area is not None:
                area_gold_multiplier = area.gold_multiplier

        payload = self.build_payload(
            table,
            player_level,
            rng=rng,
            experience=calculate_experience_reward(table.level, player_level),
            area_gold_multiplier=area_gold_multiplier,
        )
        _warn_if_slow(started, f"monster '{table.id}'", area_ref)
        return payload

    def generate_area_loot(
        self,
        area_ref: object,
        player_level: int,
        exploration_type: str = DEFAULT_EXPLORATION_TYPE,
        *,
        rng: RNG | None = None,
        strict: bool = False,
    ) -> LootPayload:
        """Roll the loot for one exploration of an area."""
        rng = rng or self._rng
        started = time.perf_counter()
        table = self._lookup(self._area_loot_repo, area_ref, "area", strict)
        if table is None:
            return LootPayload()

        exploration = self.exploration_modifier(exploration_type, strict=strict)
        payload = self.build_payload(table, player_level, rng=rng, exploration=exploration)
        _warn_if_slow(started, f"area '{table.id}' ({exploration.id})", None)
        return payload

    def exploration_modifier(self, exploration_type: str, *, strict: bool = False) -> ExplorationModifierDef:
        modifier = self._exploration_repo.find(exploration_type) if isinstance(exploration_type, str) else None
        if modifier is not None:
            return modifier
        if strict:
            raise UnknownExplorationTypeError(f"Unknown exploration type '{exploration_type}'.")
        logger.debug("Unknown exploration type %r, using standard", exploration_type)
        return self._exploration_repo.get_or_default(DEFAULT_EXPLORATION_TYPE)

    def build_payload(
        self,
        table: LootTableDef,
        player_level: int,
        *,
        rng: RNG,
        exploration: ExplorationModifierDef | None = None,
        experience: int = 0,
        area_gold_multiplier: float = 1.0,
    ) -> LootPayload:
        """Assemble gold and items for an already-loaded loot table."""
        exploration = exploration or _NEUTRAL_EXPLORATION
        items: list[LootItem] = []
        for entry in table.drops:
            if not entry.allows_exploration(exploration.id):
                continue
            adjusted = _apply_exploration(entry, exploration)
            result = roll_for_loot(adjusted, player_level, table.level, rng)
            if not result.dropped:
                continue
            item_id = self._resolver.resolve_concrete_item_id(entry, rng)
            if item_id is None:
                logger.debug("Dropping unresolved loot entry in '%s': %s", table.id, entry)
                continue
            assert result.rarity is not None and result.quantity is not None
            items.append(LootItem(id=item_id, rarity=result.rarity, quantity=result.quantity))

        gold = roll_gold(table, player_level, rng)
        gold *= exploration.gold_multiplier * area_gold_multiplier
        return LootPayload(gold=max(0, round(gold)), items=items, experience=experience)

    def _lookup(
        self, repo: LootTableParser, ref: object, kind: LootSourceKind, strict: bool
    ) -> LootTableDef | None:
        if isinstance(ref, LootTableDef):
            return ref
        if isinstance(ref, Mapping):
            table_id = ref.get("id") if isinstance(ref.get("id"), str) else f"inline_{kind}"
            try:
                return repo.parse_inline_table(table_id, ref)
            except DataValidationError as exc:
                if strict:
                    raise LootSourceNotFoundError(f"Invalid {kind} loot table: {exc}") from exc
                logger.warning("Ignoring invalid %s loot table: %s", kind, exc)
                return None
        table = repo.find(ref) if isinstance(ref, str) else None
        if table is None:
            if strict:
                raise LootSourceNotFoundError(f"No loot table for {kind} {ref!r}.")
            logger.debug("No loot table for %s %r", kind, ref)
        return table


def roll_gold(table: LootTableDef, player_level: int, rng: RNG) -> float:
    """Return the unrounded gold for ``table`` including its area multiplier."""
    if table.gold_range is not None:
        low, high = table.gold_range
        base = float(rng.randint(low, max(low, high)))
    else:
        level = max(1, table.level)
        base_gold = BASE_GOLD + level * GOLD_PER_LEVEL
        level_bonus = max(0.0, (player_level - level) * GOLD_OVERLEVEL_BONUS)
        variance = 1.0 + (rng.random() - 0.5) * GOLD_VARIANCE
        base = max(1.0, base_gold * (1.0 + level_bonus) * variance)
    return base * table.gold_multiplier


def calculate_experience_reward(content_level: int, player_level: int) -> int:
    base = BASE_EXPERIENCE + content_level * EXPERIENCE_PER_LEVEL
    factor = max(MIN_EXPERIENCE_FACTOR, 1.0 - (player_level - content_level) * EXPERIENCE_PENALTY_PER_LEVEL)
    return max(0, round(base * factor))


def _apply_exploration(entry: LootEntryDef, exploration: ExplorationModifierDef) -> LootEntryDef:
    if exploration.drop_chance_multiplier == 1.0 and not exploration.rarity_bonus:
        return entry
    return replace(
        entry,
        drop_chance=min(1.0, entry.drop_chance * exploration.drop_chance_multiplier),
        rarity_weights=freeze_weights(apply_rarity_bonus(entry.rarity_weights, exploration.rarity_bonus)),
    )


def _warn_if_slow(started: float, label: str, area_ref: object) -> None:
    elapsed_ms = (time.perf_counter() - started) * 1000.0
    if elapsed_ms > SLOW_GENERATION_MS:
        logger.warning("Loot generation took %.2fms for %s (area=%r)", elapsed_ms, label, area_ref)
