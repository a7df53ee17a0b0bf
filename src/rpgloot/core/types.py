"""Shared type aliases for the core and domain layers."""
from typing import Literal

RarityKey = Literal["common", "uncommon", "rare", "epic", "legendary"]
LootSourceKind = Literal["monster", "area"]

__all__ = ["LootSourceKind", "RarityKey"]
