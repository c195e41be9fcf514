"""Lookup table resolution with brand-scoped precedence."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from loguru import logger

from ..models.lookup import LookupCategory, LookupEntry
from ..utils.text_normalization import is_missing, to_text


LookupKey = tuple[str, str, str | None]


def _category_name(category: LookupCategory | str) -> str:
    return category.value if isinstance(category, LookupCategory) else str(category)


class LookupResolver:
    """Resolve source values to marketplace values for one run.

    Built once from the active lookup entries and read-only afterwards, so a
    resolver can be shared by every worker of a run.
    """

    def __init__(self, entries: Iterable[LookupEntry] = ()) -> None:
        self._entries: dict[LookupKey, str] = {}
        targets: dict[str, set[str]] = {}

        for entry in entries:
            if not entry.is_active:
                continue
            source = entry.source_value.strip()
            brand = entry.brand.strip() if entry.brand else None
            key = (entry.category, source, brand)
            if key in self._entries:
                logger.warning(
                    f"Duplicate lookup entry for {key}; keeping "
                    f"'{self._entries[key]}', ignoring '{entry.target_value}'"
                )
                continue
            self._entries[key] = entry.target_value
            targets.setdefault(entry.category, set()).add(entry.target_value.strip())

        self._targets = {category: frozenset(values) for category, values in targets.items()}
        logger.debug(f"Lookup resolver indexed {len(self._entries)} entries")

    def __len__(self) -> int:
        return len(self._entries)

    def resolve(
        self, category: LookupCategory | str, source_value: Any, brand: Any = None
    ) -> str | None:
        """Map a source value, preferring the brand's own entry over the generic one.

        Args:
            category: Lookup category, e.g. ``color_map``
            source_value: Value from the record; trimmed before matching
            brand: Record brand, or None for generic-only resolution

        Returns:
            Target value, or None when no active entry matches
        """
        if is_missing(source_value):
            return None
        name = _category_name(category)
        source = to_text(source_value).strip()

        if not is_missing(brand):
            scoped = self._entries.get((name, source, to_text(brand).strip()))
            if scoped is not None:
                return scoped
        return self._entries.get((name, source, None))

    def targets(self, category: LookupCategory | str) -> frozenset[str]:
        """Active target values of a category (used by `lookup` rules)."""
        return self._targets.get(_category_name(category), frozenset())
