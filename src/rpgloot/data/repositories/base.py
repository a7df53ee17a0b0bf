"""Lazy, cached loading of one JSON definition file."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Generic, TypeVar

from rpgloot.data.errors import DataValidationError
from rpgloot.data.json_loader import load_json
from rpgloot.data import paths

T = TypeVar("T")

logger = logging.getLogger(__name__)


class RepositoryBase(Generic[T]):
    """Reads ``filename`` once on first access and keeps the built definitions.

    Subclasses implement ``_build`` to turn the top-level JSON object into
    typed records keyed by id.
    """

    def __init__(self, filename: str, base_path: Path | str | None = None) -> None:
        self._filename = filename
        self._base_path = Path(base_path) if base_path is not None else None
        self._definitions: Dict[str, T] | None = None

    @property
    def file_path(self) -> Path:
        return paths.get_definitions_path(self._base_path) / self._filename

    def _load_raw(self) -> dict[str, object]:
        raw = load_json(self.file_path)
        if not isinstance(raw, dict):
            raise DataValidationError(
                f"{self._filename} must hold a JSON object keyed by id, got {type(raw).__name__}."
            )
        return raw

    def _build(self, raw: dict[str, object]) -> Dict[str, T]:
        raise NotImplementedError

    def _ensure_loaded(self) -> None:
        if self._definitions is not None:
            return
        self._definitions = self._build(self._load_raw())
        logger.debug("Loaded %d records from %s", len(self._definitions), self.file_path)

    def get(self, def_id: str) -> T:
        """Return a definition by id or raise KeyError."""
        self._ensure_loaded()
        assert self._definitions is not None
        if def_id not in self._definitions:
            raise KeyError(f"{def_id!r} is not defined in {self._filename}")
        return self._definitions[def_id]

    def find(self, def_id: str) -> T | None:
        """Return a definition by id, or None when it is not defined."""
        self._ensure_loaded()
        assert self._definitions is not None
        return self._definitions.get(def_id)

    def all(self) -> list[T]:
        """Return every record, ordered by id."""
        self._ensure_loaded()
        assert self._definitions is not None
        return [self._definitions[key] for key in sorted(self._definitions.keys())]

    def ids(self) -> list[str]:
        self._ensure_loaded()
        assert self._definitions is not None
        return sorted(self._definitions.keys())

    @staticmethod
    def _require_mapping(value: object, context: str) -> dict[str, object]:
        if not isinstance(value, dict):
            raise DataValidationError(f"{context} must be an object/dict.")
        return value

    @staticmethod
    def _require_list(value: object, context: str) -> list[object]:
        if not isinstance(value, list):
            raise DataValidationError(f"{context} must be a list.")
        return value

    @staticmethod
    def _require_str(value: object, context: str) -> str:
        if not isinstance(value, str):
            raise DataValidationError(f"{context} must be a string.")
        return value

    @staticmethod
    def _require_str_list(value: object, context: str) -> list[str]:
        if value is None:
            return []
        if not isinstance(value, list):
            raise DataValidationError(f"{context} must be a list.")
        result: list[str] = []
        for entry in value:
            if not isinstance(entry, str):
                raise DataValidationError(f"{context} entries must be strings.")
            result.append(entry)
        return result

    @staticmethod
    def _require_int(value: object, context: str) -> int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise DataValidationError(f"{context} must be an integer.")
        return value

    @staticmethod
    def _require_float(value: object, context: str) -> float:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise DataValidationError(f"{context} must be a number.")
        return float(value)
