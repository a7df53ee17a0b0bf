"""Loot generation engine: rarity tiers, level scaling and loot assembly."""

__version__ = "0.1.0"
