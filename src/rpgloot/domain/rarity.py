"""Rarity tier table and weight helpers."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Mapping, Tuple

logger = logging.getLogger(__name__)

RARITY_ORDER: Tuple[str, ...] = ("common", "uncommon", "rare", "epic", "legendary")


@dataclass(frozen=True, slots=True)
class RarityTier:
    """Static configuration for a single rarity tier."""

    key: str
    name: str
    drop_rate: float
    value_multiplier: float
    quality_range: Tuple[float, float]


RARITY_TIERS: Mapping[str, RarityTier] = MappingProxyType(
    {
        "common": RarityTier("common", "Common", 0.65, 1.0, (0.8, 1.2)),
        "uncommon": RarityTier("uncommon", "Uncommon", 0.25, 2.0, (0.9, 1.4)),
        "rare": RarityTier("rare", "Rare", 0.08, 4.0, (1.0, 1.6)),
        "epic": RarityTier("epic", "Epic", 0.018, 8.0, (1.2, 2.0)),
        "legendary": RarityTier("legendary", "Legendary", 0.002, 20.0, (1.5, 3.0)),
    }
)

DEFAULT_RARITY_WEIGHTS: Mapping[str, float] = MappingProxyType(
    {key: tier.drop_rate for key, tier in RARITY_TIERS.items()}
)

_RARITY_INDEX: Mapping[str, int] = MappingProxyType(
    {key: index for index, key in enumerate(RARITY_ORDER)}
)


def get_rarity_tier(key: str) -> RarityTier:
    """Return the tier for ``key`` or raise KeyError."""
    return RARITY_TIERS[key]


def is_rarity(key: object) -> bool:
    return isinstance(key, str) and key in _RARITY_INDEX


def rarity_index(key: str) -> int:
    """Return the 0-based position of ``key`` in the canonical order."""
    return _RARITY_INDEX[key]


def iter_tiers() -> Tuple[RarityTier, ...]:
    """Return all tiers in canonical order (common first)."""
    return tuple(RARITY_TIERS[key] for key in RARITY_ORDER)


def validate_rarity_tiers() -> bool:
    """Check the tier table invariants, logging any anomaly.

    Returns False if drop rates are not strictly decreasing or value
    multipliers not strictly increasing. A drop-rate total away from 1.0 is
    only reported.
    """
    tiers = iter_tiers()
    valid = True
    for lower, higher in zip(tiers, tiers[1:]):
        if not lower.drop_rate > higher.drop_rate:
            logger.error("Drop rate of %s must exceed %s.", lower.key, higher.key)
            valid = False
        if not lower.value_multiplier < higher.value_multiplier:
            logger.error("Value multiplier of %s must be below %s.", lower.key, higher.key)
            valid = False
    total = sum(tier.drop_rate for tier in tiers)
    if abs(total - 1.0) > 0.001:
        logger.warning("Rarity tier drop rates do not sum to 1.0: %.4f", total)
    return valid


def apply_rarity_bonus(weights: Mapping[str, float], rarity_bonus: float) -> Dict[str, float]:
    """Shift a weight mapping toward higher (bonus > 0) or lower (bonus < 0) tiers.

    Weight multipliers grow with the tier position, so a positive bonus never
    lowers a higher tier relative to a lower one. Unknown keys pass through
    unchanged and weights never drop below zero.
    """
    adjusted = dict(weights)
    if not rarity_bonus:
        return adjusted
    top = len(RARITY_ORDER) - 1
    for key, weight in weights.items():
        if key not in _RARITY_INDEX:
            continue
        index = _RARITY_INDEX[key]
        if rarity_bonus > 0:
            multiplier = 1.0 + rarity_bonus * (index + 1) * 0.5
        else:
            multiplier = 1.0 + abs(rarity_bonus) * (top - index + 1) * 0.3
        adjusted[key] = max(0.0, weight * multiplier)
    return adjusted
