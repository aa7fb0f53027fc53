"""Helpers for reference-table rows (string-keyed records parsed from CSV)."""

import re
from typing import Iterable, Optional, Sequence

from app.services.text_normalizer import normalize

Row = dict[str, Optional[str]]

_ALIAS_SEPARATORS = re.compile(r"[;,]")


def cell_text(value) -> str:
    """Cell value as a string, None becomes ""."""
    return "" if value is None else str(value)


def is_blank_row(row: Row) -> bool:
    """True if every cell is empty or whitespace-only."""
    return not any(cell_text(v).strip() for v in row.values())


def drop_blank_rows(rows: Optional[Iterable[Row]]) -> list[Row]:
    """Remove rows with no meaningful cell, keeping order."""
    return [row for row in (rows or []) if not is_blank_row(row)]


def pick_column(row: Row, candidates: Sequence[str]) -> Optional[tuple[str, str]]:
    """
    Find the first candidate column present in the row.

    Candidates are tried in priority order and matched case-insensitively
    against the row's column names. Returns (column_name, value) using the
    row's own spelling of the column, or None if no candidate is present.
    """
    columns = list(row.keys())
    for candidate in candidates:
        wanted = candidate.lower()
        for column in columns:
            if column.lower() == wanted:
                return column, cell_text(row[column])
    return None


def key_value(row: Row, key_columns: Sequence[str]) -> str:
    """Trimmed ingredient name from the row's key column, "" if missing."""
    picked = pick_column(row, key_columns)
    return picked[1].strip() if picked else ""


def split_aliases(value: Optional[str]) -> list[str]:
    """Split a comma/semicolon alias list into normalized, non-empty tokens."""
    if not value:
        return []
    tokens = (normalize(token) for token in _ALIAS_SEPARATORS.split(value))
    return [token for token in tokens if token]
