"""Filtering of auxiliary reference tables down to a set of canonical ingredients."""

import re
from typing import AbstractSet, Any, Iterable

from app.services.canonicalizer import IngredientCanonicalizer
from app.services.rows import Row, cell_text, key_value

# Column headers produced by spreadsheets/pandas for unlabeled columns
_PHANTOM_INDEX_COLUMN = re.compile(r"^_+\d*$")
_UNNAMED_COLUMN = re.compile(r"^unnamed", re.IGNORECASE)
_NUMBERED_COLUMN = re.compile(r"^column\d+$", re.IGNORECASE)


def is_display_column(name: Any) -> bool:
    """False for empty or auto-generated column names (_1, Unnamed: 2, Column3)."""
    if name is None:
        return False
    stripped = str(name).strip()
    if not stripped:
        return False
    return not (
        _PHANTOM_INDEX_COLUMN.match(stripped)
        or _UNNAMED_COLUMN.match(stripped)
        or _NUMBERED_COLUMN.match(stripped)
    )


def choose_display_columns(rows: Iterable[Row]) -> list[str]:
    """
    Infer the column list to display for a set of rows.

    Rows may carry different columns; the result is their union in order of
    first appearance, minus auto-generated headers and columns that are blank
    in every row.
    """
    rows = list(rows)
    columns: dict[str, None] = {}
    for row in rows:
        for column in row:
            columns.setdefault(column)

    return [
        column
        for column in columns
        if is_display_column(column)
        and any(cell_text(row.get(column)).strip() for row in rows)
    ]


class TableFilter:
    """Selects the rows of a reference table that describe target ingredients."""

    def __init__(self, canonicalizer: IngredientCanonicalizer):
        self.canonicalizer = canonicalizer

    def row_identity(self, row: Row) -> str:
        """Canonical identity of a row's ingredient, "" if the row has no key."""
        name = key_value(row, self.canonicalizer.key_columns)
        if not name:
            return ""
        return self.canonicalizer.resolve_or_identity(name)

    def filter_rows(self, table_rows: Iterable[Row], targets: AbstractSet[str]) -> list[Row]:
        """
        Keep rows whose ingredient resolves to a member of targets.

        Row keys go through the same resolve-or-identity rule as the target
        list, so an unknown ingredient still matches itself. Input order is
        preserved. An empty target set excludes nothing.

        Args:
            table_rows: Rows of one auxiliary table
            targets: Canonical ingredient names to keep

        Returns:
            New list of matching rows
        """
        if not targets:
            return list(table_rows)

        matched = []
        for row in table_rows:
            identity = self.row_identity(row)
            if identity and identity in targets:
                matched.append(row)
        return matched
