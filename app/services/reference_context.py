"""
Session object holding the loaded reference tables and ingredient indexes.

The host builds one ReferenceContext and passes it around. Reference data is
loaded once: the first caller starts a single load task and every concurrent
caller awaits that same task. After a successful load the tables and indexes
are read-only.
"""

import asyncio
import logging
from typing import Any, Optional, Sequence

from app.config import Settings, settings
from app.services.canonicalizer import (
    DEFAULT_ALIAS_COLUMNS,
    DEFAULT_KEY_COLUMNS,
    IngredientCanonicalizer,
)
from app.services.data_provider import (
    CsvReferenceProvider,
    ReferenceDataError,
    ReferenceDataProvider,
)
from app.services.rows import Row, cell_text, drop_blank_rows
from app.services.table_filter import TableFilter, choose_display_columns
from app.services.table_schemas import FilteredTable, TablesResult

logger = logging.getLogger(__name__)

MASTER_TABLE = "master"

# (resource name, display title), in render order
AUXILIARY_TABLES = (
    ("nutrition", "Nutrition"),
    ("cognitive", "Cognitive Benefits"),
    ("diet", "Diet Compatibility"),
    ("microbiome", "Gut Health / Microbiome Support"),
)

NO_INGREDIENTS_NOTE = "Tables will appear after ingredients are detected or selected."
NO_MATCHES_NOTE = "No matching rows were found for the selected ingredients."


class ReferenceDataNotLoadedError(RuntimeError):
    """Raised when a synchronous lookup runs before ensure_loaded() finished."""

    pass


class ReferenceContext:
    """Owns reference tables, ingredient indexes and the filtering entry points."""

    def __init__(
        self,
        provider: ReferenceDataProvider,
        key_columns: Sequence[str] = DEFAULT_KEY_COLUMNS,
        alias_columns: Sequence[str] = DEFAULT_ALIAS_COLUMNS,
        render_when_no_ingredients: bool = True,
    ):
        self.provider = provider
        self.canonicalizer = IngredientCanonicalizer(key_columns, alias_columns)
        self.table_filter = TableFilter(self.canonicalizer)
        self.render_when_no_ingredients = render_when_no_ingredients

        self.master_rows: list[Row] = []
        self.tables: dict[str, list[Row]] = {}
        self._loaded = False
        self._load_task: Optional[asyncio.Task] = None

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    async def ensure_loaded(self) -> None:
        """
        Load reference data once.

        Concurrent callers share one in-flight task. The task is shielded so a
        cancelled caller does not abort the load for the others. A failed load
        is forgotten, so a later call starts a fresh attempt.

        Raises:
            ReferenceDataError: If any reference table cannot be loaded
        """
        if self._loaded:
            return
        if self._load_task is None:
            self._load_task = asyncio.ensure_future(self._load())
        await asyncio.shield(self._load_task)

    async def _load(self) -> None:
        logger.info("Loading reference tables")
        try:
            master_rows = drop_blank_rows(await self.provider.load_table(MASTER_TABLE))
            self.canonicalizer.build_indexes(master_rows)

            tables = {}
            for name, _title in AUXILIARY_TABLES:
                tables[name] = drop_blank_rows(await self.provider.load_table(name))
                logger.debug("Reference table %s: %d rows", name, len(tables[name]))
        except Exception:
            self._load_task = None
            raise

        self.master_rows = master_rows
        self.tables = tables
        self._loaded = True
        logger.info(
            "Reference tables loaded: %d master rows, %s",
            len(master_rows),
            ", ".join(f"{name}={len(rows)}" for name, rows in tables.items()),
        )

    def _require_loaded(self) -> None:
        if not self._loaded:
            raise ReferenceDataNotLoadedError(
                "Reference data not loaded; await ensure_loaded() first"
            )

    async def render_tables(self, ingredient_names: Any) -> TablesResult:
        """
        Main entry point: load if needed, then filter every table.

        A load failure is returned as TablesResult.error instead of raised.
        """
        try:
            await self.ensure_loaded()
        except ReferenceDataError as e:
            logger.exception("Failed to load reference tables")
            return TablesResult(error=f"Error rendering tables: {e}")

        return self.filter_tables(ingredient_names)

    def filter_tables(self, ingredient_names: Any) -> TablesResult:
        """
        Filter every auxiliary table to the given ingredients.

        Args:
            ingredient_names: Names or aliases as supplied by the host

        Returns:
            TablesResult with one FilteredTable per auxiliary table
        """
        self._require_loaded()

        targets = self.canonicalizer.canonicalize_list(ingredient_names)
        target_set = set(targets)

        if not target_set and not self.render_when_no_ingredients:
            return TablesResult(status=NO_INGREDIENTS_NOTE)

        tables = [
            self._build_table(name, title, self.table_filter.filter_rows(self.tables[name], target_set))
            for name, title in AUXILIARY_TABLES
        ]
        result = TablesResult(ingredients=targets, tables=tables)

        if targets:
            result.status = f"Showing tables for: {', '.join(targets)}"
            if not result.has_matches:
                result.status_detail = NO_MATCHES_NOTE

        logger.debug(
            "Filtered tables for %s: %s",
            targets,
            {table.name: len(table.rows) for table in tables},
        )
        return result

    @staticmethod
    def _build_table(name: str, title: str, rows: list[Row]) -> FilteredTable:
        return FilteredTable(
            name=name,
            title=title,
            columns=choose_display_columns(rows),
            rows=[{column: cell_text(value) for column, value in row.items()} for row in rows],
        )

    def derive_ingredients_from_recipe(self, text: Any) -> list[str]:
        """Canonical names of known ingredients mentioned in free text."""
        self._require_loaded()
        return self.canonicalizer.find_in_text(text)


def build_reference_context(config: Settings) -> ReferenceContext:
    """Create a CSV-backed context from settings."""
    provider = CsvReferenceProvider(
        location=config.reference_data_location,
        table_files=config.table_files(),
        encodings=config.csv_encodings,
    )
    return ReferenceContext(
        provider,
        key_columns=config.key_columns,
        alias_columns=config.alias_columns,
        render_when_no_ingredients=config.render_when_no_ingredients,
    )


reference_context = build_reference_context(settings)
