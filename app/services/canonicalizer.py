"""
Ingredient name canonicalization.

Builds two lookups from the master table:
- name index:  normalized canonical name -> canonical name (as written in the CSV)
- alias index: normalized alias          -> canonical name

Both are first-wins on collision. The name index is always consulted first so
an ingredient's own name is never shadowed by another ingredient's alias.
"""

import logging
from typing import Any, Iterable, Optional, Sequence

from app.services.rows import Row, key_value, pick_column, split_aliases
from app.services.text_normalizer import normalize

logger = logging.getLogger(__name__)

DEFAULT_KEY_COLUMNS = ("ingredient_name", "ingredient", "food", "item", "name")
DEFAULT_ALIAS_COLUMNS = ("aliases", "alias", "also_known_as")


class IngredientCanonicalizer:
    """Resolves free-form ingredient names to canonical master-table names."""

    def __init__(
        self,
        key_columns: Sequence[str] = DEFAULT_KEY_COLUMNS,
        alias_columns: Sequence[str] = DEFAULT_ALIAS_COLUMNS,
    ):
        self.key_columns = tuple(key_columns)
        self.alias_columns = tuple(alias_columns)
        self.name_index: dict[str, str] = {}
        self.alias_index: dict[str, str] = {}

    def build_indexes(self, master_rows: Iterable[Row]) -> None:
        """
        Rebuild both indexes from the master table.

        Always starts from empty indexes. Rows without a key value are
        skipped; a missing or malformed alias field just means no aliases
        for that row.

        Args:
            master_rows: Master table rows, blank rows already removed
        """
        self.name_index.clear()
        self.alias_index.clear()

        skipped = 0
        for row in master_rows:
            canonical_name = key_value(row, self.key_columns)
            if not canonical_name:
                skipped += 1
                continue

            name_key = normalize(canonical_name)
            if name_key:
                self.name_index.setdefault(name_key, canonical_name)

            alias_field = pick_column(row, self.alias_columns)
            if alias_field:
                for alias in split_aliases(alias_field[1]):
                    self.alias_index.setdefault(alias, canonical_name)

        logger.info(
            "Built ingredient indexes: %d names, %d aliases (%d rows without a name)",
            len(self.name_index),
            len(self.alias_index),
            skipped,
        )

    def resolve_canonical(self, name_or_alias: Any) -> Optional[str]:
        """
        Look up the canonical name for a name or alias.

        Returns:
            Canonical name, or None if neither index knows it
        """
        key = normalize(name_or_alias)
        if not key:
            return None
        if key in self.name_index:
            return self.name_index[key]
        return self.alias_index.get(key)

    def resolve_or_identity(self, name: Any) -> str:
        """Canonical name if known, otherwise the trimmed input itself."""
        return self.resolve_canonical(name) or ("" if name is None else str(name).strip())

    def canonicalize_list(self, names: Any) -> list[str]:
        """
        Canonicalize a list of ingredient names.

        Unknown names fall back to their trimmed literal so they still take
        part in filtering. Duplicates are dropped, first-seen order is kept.
        Anything other than a list or tuple is treated as an empty list.
        """
        if not isinstance(names, (list, tuple)):
            return []

        resolved = (self.resolve_or_identity(name) for name in names)
        return list(dict.fromkeys(name for name in resolved if name))

    def find_in_text(self, text: Any) -> list[str]:
        """
        Canonical names whose name or alias appears in free text.

        A phrase counts when its normalized form occurs in the normalized text
        with a space (or the text edge) on both sides. Canonical names are
        scanned before aliases; the result keeps first-found order.
        """
        if not isinstance(text, str) or not text:
            return []

        haystack = f" {normalize(text)} "
        found: dict[str, None] = {}

        for name_key, canonical_name in self.name_index.items():
            if f" {name_key} " in haystack:
                found.setdefault(canonical_name)

        for alias_key, canonical_name in self.alias_index.items():
            if f" {alias_key} " in haystack:
                found.setdefault(canonical_name)

        return list(found)
