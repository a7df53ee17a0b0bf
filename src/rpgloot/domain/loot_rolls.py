"""Rarity rolls and single-entry loot rolls."""
from __future__ import annotations

import math
from typing import List, Mapping

from rpgloot.core.rng import RNG
from rpgloot.core.types import RarityKey
from rpgloot.domain.defs import LootEntryDef
from rpgloot.domain.level_scaling import calculate_level_scaling
from rpgloot.domain.loot_models import LootRollResult
from rpgloot.domain.rarity import RARITY_ORDER, rarity_index

# Weight of tier i is multiplied by scaling ** (i * RARITY_SCALING_EXPONENT).
RARITY_SCALING_EXPONENT = 0.5


def roll_for_rarity(
    rarity_weights: Mapping[str, float],
    player_level: int,
    content_level: int,
    rng: RNG,
) -> RarityKey:
    """Draw one rarity key from ``rarity_weights`` under level scaling.

    Only known tiers with a positive weight take part. Raises ValueError
    when none qualifies.
    """
    scaling = calculate_level_scaling(player_level - content_level, player_level, content_level)
    adjusted = scale_rarity_weights(rarity_weights, scaling)
    if not adjusted:
        raise ValueError(f"No positive rarity weight in {dict(rarity_weights)!r}.")
    keys = list(adjusted.keys())
    return rng.weighted_choice(keys, [adjusted[key] for key in keys])


def scale_rarity_weights(rarity_weights: Mapping[str, float], scaling: float) -> dict[str, float]:
    """Return the positive, scaled weights of known tiers in canonical order."""
    adjusted: dict[str, float] = {}
    for key in RARITY_ORDER:
        weight = rarity_weights.get(key)
        if not _is_positive(weight):
            continue
        factor = scaling ** (rarity_index(key) * RARITY_SCALING_EXPONENT)
        adjusted[key] = float(weight) * factor
    return adjusted


def roll_for_loot(
    entry: LootEntryDef,
    player_level: int,
    content_level: int,
    rng: RNG,
) -> LootRollResult:
    """Decide whether ``entry`` drops, then its rarity and quantity."""
    scaling = calculate_level_scaling(player_level - content_level, player_level, content_level)
    drop_chance = adjusted_drop_chance(entry.drop_chance, scaling)
    if rng.random() >= drop_chance:
        return LootRollResult(dropped=False, drop_chance=drop_chance, level_scaling=scaling)

    rarity = roll_for_rarity(entry.rarity_weights, player_level, content_level, rng)
    quantity = roll_quantity(entry.quantity_range, rng)
    return LootRollResult(
        dropped=True,
        rarity=rarity,
        quantity=quantity,
        drop_chance=drop_chance,
        level_scaling=scaling,
    )


def adjusted_drop_chance(base_chance: float, scaling: float) -> float:
    if not _is_number(base_chance):
        return 0.0
    return max(0.0, min(1.0, base_chance * scaling))


def roll_quantity(quantity_range: object, rng: RNG) -> int:
    """Draw an integer quantity, repairing degenerate ranges."""
    low, high = _normalize_range(quantity_range)
    return rng.randint(low, high)


def _normalize_range(quantity_range: object) -> tuple[int, int]:
    values: List[int] = []
    if isinstance(quantity_range, (list, tuple)):
        values = [int(value) for value in quantity_range[:2] if _is_number(value)]
    if not values:
        return 1, 1
    low = max(1, values[0])
    high = max(low, values[-1])
    return low, high


def _is_number(value: object) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def _is_positive(value: object) -> bool:
    return _is_number(value) and value > 0
