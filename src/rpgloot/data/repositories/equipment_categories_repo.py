"""Repository for abstract equipment tags and their concrete item pools."""
from __future__ import annotations

from types import MappingProxyType
from typing import Dict, Mapping, Tuple

from rpgloot.data.errors import DataValidationError
from rpgloot.data.repositories.base import RepositoryBase


class EquipmentCategoriesRepository(RepositoryBase[Tuple[str, ...]]):
    """Loads the equipment category map.

    The file maps each abstract tag to a list of concrete item ids. Empty
    lists are allowed and resolve to no match.
    """

    def __init__(self, base_path=None) -> None:
        super().__init__("equipment_categories.json", base_path)
        self._frozen: Mapping[str, Tuple[str, ...]] | None = None

    def _build(self, raw: dict[str, object]) -> Dict[str, Tuple[str, ...]]:
        categories: Dict[str, Tuple[str, ...]] = {}
        for raw_tag, payload in raw.items():
            if not isinstance(raw_tag, str) or not raw_tag.strip():
                raise DataValidationError("Equipment category tags must be non-empty strings.")
            if raw_tag.lower() != raw_tag:
                raise DataValidationError(f"Equipment category '{raw_tag}' must be lowercase.")
            categories[raw_tag] = tuple(
                self._require_str_list(payload, f"equipment category '{raw_tag}'")
            )
        return categories

    def as_mapping(self) -> Mapping[str, Tuple[str, ...]]:
        """Return the whole map as a read-only view."""
        if self._frozen is None:
            self._ensure_loaded()
            assert self._definitions is not None
            self._frozen = MappingProxyType(self._definitions)
        return self._frozen
