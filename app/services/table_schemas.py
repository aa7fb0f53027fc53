"""
Pydantic models for filtered reference tables.

TablesResult is what the render entry point hands to the presentation layer
(HTML fragment, JSON API, CLI).
"""

from typing import Optional

from pydantic import BaseModel, Field


class FilteredTable(BaseModel):
    name: str  # nutrition|cognitive|diet|microbiome
    title: str
    columns: list[str] = []
    rows: list[dict[str, str]] = []


class TablesResult(BaseModel):
    ingredients: list[str] = []
    tables: list[FilteredTable] = []
    status: Optional[str] = None
    status_detail: Optional[str] = None
    error: Optional[str] = None

    @property
    def has_matches(self) -> bool:
        return any(table.rows for table in self.tables)


# --- API request/response bodies ---


class RenderTablesRequest(BaseModel):
    ingredients: list[str] = []


class DeriveIngredientsRequest(BaseModel):
    text: str = Field(default="", max_length=50_000)


class DeriveIngredientsResponse(BaseModel):
    ingredients: list[str]
