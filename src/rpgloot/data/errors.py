"""Exceptions raised while loading loot definition files."""


class DataError(Exception):
    """Base exception for loot definition problems."""


class DataLoadError(DataError):
    """A definition file is missing, unreadable or not valid JSON."""


class DataValidationError(DataError):
    """A loot table, category map or exploration record is malformed."""


class DataReferenceError(DataError):
    """A loot entry names an equipment tag or exploration type that is not defined."""
