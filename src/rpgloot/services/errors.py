"""Service-layer exceptions."""


class LootServiceError(Exception):
    """Base exception for loot generation failures requested as hard errors."""


class LootSourceNotFoundError(LootServiceError):
    """Raised in strict mode when a monster or area has no loot table."""


class UnknownExplorationTypeError(LootServiceError):
    """Raised in strict mode when an exploration type is not defined."""
