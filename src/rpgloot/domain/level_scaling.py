"""Level-difference scaling for drop chances and rarity rolls."""
from __future__ import annotations

import math

# Level difference is player level minus content level.
# - Overleveled players decay toward the floor and never reach zero.
# - Underleveled players approach the ceiling and never exceed double.
# - Content at or above the player's level earns a small tier bonus that
#   fades once the player clearly outgrows it.
MIN_SCALING = 0.1
MAX_SCALING = 2.0
OVERLEVEL_DECAY = 0.12
UNDERLEVEL_GROWTH = 0.1

CONTENT_TIER_BONUS = 1.05
CONTENT_TIER_PENALTY = 0.95
BONUS_RATIO_LIMIT = 1.3
PENALTY_RATIO_START = 1.9


def calculate_level_scaling(
    level_difference: int,
    player_level: int | None = None,
    content_level: int | None = None,
) -> float:
    """Return a multiplier in [0.1, 2.0] for the given level difference.

    Called with only ``level_difference`` this is the legacy curve: 1.0 for
    equal levels. With both absolute levels the content tier bonus is
    applied, so equal levels give 1.05.
    """
    difference = _as_number(level_difference)
    if difference > 0:
        scaling = MIN_SCALING + (1.0 - MIN_SCALING) * math.exp(-OVERLEVEL_DECAY * difference)
    elif difference < 0:
        scaling = MAX_SCALING - (MAX_SCALING - 1.0) * math.exp(UNDERLEVEL_GROWTH * difference)
    else:
        scaling = 1.0

    if player_level is not None and content_level is not None:
        scaling *= content_tier_bonus(player_level, content_level)

    return _clamp(scaling)


def content_tier_bonus(player_level: int, content_level: int) -> float:
    """Return the small bonus for engaging level-appropriate content.

    Non-increasing in the player/content level ratio: 1.05 up to 1.3x,
    fading linearly to 0.95 at 1.9x and beyond.
    """
    ratio = _as_number(player_level) / max(1.0, _as_number(content_level))
    if ratio <= BONUS_RATIO_LIMIT:
        return CONTENT_TIER_BONUS
    if ratio >= PENALTY_RATIO_START:
        return CONTENT_TIER_PENALTY
    progress = (ratio - BONUS_RATIO_LIMIT) / (PENALTY_RATIO_START - BONUS_RATIO_LIMIT)
    return CONTENT_TIER_BONUS - progress * (CONTENT_TIER_BONUS - CONTENT_TIER_PENALTY)


def _as_number(value: object) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    if math.isnan(value):
        return 0.0
    return float(value)


def _clamp(value: float) -> float:
    if math.isnan(value):
        return 1.0
    return max(MIN_SCALING, min(MAX_SCALING, value))
