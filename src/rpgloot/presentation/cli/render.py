"""Shared CLI rendering helpers."""
from __future__ import annotations

from collections import Counter
from typing import Iterable, Sequence

from rpgloot.domain.loot_models import LootPayload
from rpgloot.domain.rarity import RARITY_ORDER, get_rarity_tier


def format_payload(payload: LootPayload) -> list[str]:
    """Render one payload as display lines."""
    lines = [f"Gold: {payload.gold}"]
    if payload.experience:
        lines.append(f"Experience: {payload.experience}")
    if not payload.items:
        lines.append("Items: none")
        return lines
    lines.append("Items:")
    for item in payload.items:
        tier = get_rarity_tier(item.rarity)
        lines.append(f"- {item.id} x{item.quantity} [{tier.name}]")
    return lines


def format_summary(payloads: Sequence[LootPayload]) -> list[str]:
    """Render aggregate statistics for a batch of payloads."""
    count = len(payloads)
    if count == 0:
        return ["No samples."]
    total_gold = sum(payload.gold for payload in payloads)
    rewarded = sum(1 for payload in payloads if not payload.is_empty)
    rarity_counts: Counter[str] = Counter(
        item.rarity for payload in payloads for item in payload.items
    )
    item_count = sum(rarity_counts.values())
    lines = [
        f"Samples: {count}",
        f"Rewarded: {rewarded / count:.1%}",
        f"Average gold: {total_gold / count:.1f}",
        f"Items per sample: {item_count / count:.2f}",
    ]
    lines.extend(_rarity_lines(rarity_counts, item_count))
    return lines


def _rarity_lines(counts: Counter[str], total: int) -> Iterable[str]:
    for key in RARITY_ORDER:
        if not counts.get(key):
            continue
        yield f"  {get_rarity_tier(key).name}: {counts[key]} ({counts[key] / total:.1%})"
