"""
Reference data providers.

A provider supplies the five reference tables (master, nutrition, cognitive,
diet, microbiome) as lists of string-keyed rows. CSV dialect handling is
delegated to pandas.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Mapping, Sequence

import pandas as pd

from app.services.rows import Row

logger = logging.getLogger(__name__)

REFERENCE_TABLE_NAMES = ("master", "nutrition", "cognitive", "diet", "microbiome")


class ReferenceDataError(Exception):
    """Raised when a reference table cannot be loaded."""

    pass


class ReferenceDataProvider(ABC):
    """
    Abstract source of reference tables.

    Lets the app read CSVs from disk or a URL while tests and embedding
    hosts pass rows they already have in memory.
    """

    @abstractmethod
    async def load_table(self, name: str) -> list[Row]:
        """
        Load one reference table by resource name.

        Raises:
            ReferenceDataError: If the table is unknown or cannot be read
        """
        pass


class CsvReferenceProvider(ReferenceDataProvider):
    """Reads reference tables from CSV files in a directory or under a base URL."""

    def __init__(
        self,
        location: str,
        table_files: Mapping[str, str],
        encodings: Sequence[str] = ("utf-8", "latin-1"),
    ):
        self.location = location
        self.table_files = dict(table_files)
        self.encodings = tuple(encodings) or ("utf-8",)

    def _is_remote(self) -> bool:
        return self.location.startswith(("http://", "https://"))

    def source_for(self, name: str) -> str:
        """
        Resolve a table name to a file path or URL.

        Raises:
            ReferenceDataError: If no file is configured for the name
        """
        file_name = self.table_files.get(name)
        if not file_name:
            raise ReferenceDataError(f"Unknown reference table: {name}")

        if self._is_remote():
            return f"{self.location.rstrip('/')}/{file_name}"
        return str(Path(self.location) / file_name)

    def _read_csv(self, source: str) -> list[Row]:
        """Parse a CSV into row dicts, trying each configured encoding."""
        last_error = None
        for encoding in self.encodings:
            try:
                frame = pd.read_csv(
                    source,
                    dtype=str,
                    keep_default_na=False,
                    na_filter=False,
                    skip_blank_lines=True,
                    encoding=encoding,
                )
            except UnicodeDecodeError as e:
                last_error = e
                logger.warning("Could not decode %s as %s, trying next encoding", source, encoding)
                continue
            except pd.errors.EmptyDataError:
                logger.warning("Reference table %s is empty", source)
                return []
            except (OSError, ValueError) as e:
                raise ReferenceDataError(f"Could not read {source}: {e}") from e

            return frame.to_dict(orient="records")

        raise ReferenceDataError(
            f"Could not decode {source} with any of {list(self.encodings)}"
        ) from last_error

    async def load_table(self, name: str) -> list[Row]:
        source = self.source_for(name)
        rows = await asyncio.to_thread(self._read_csv, source)
        logger.debug("Loaded %d rows from %s", len(rows), source)
        return rows


class InMemoryReferenceProvider(ReferenceDataProvider):
    """Serves already-parsed rows, keyed by table name."""

    def __init__(self, tables: Mapping[str, Sequence[Row]]):
        self.tables = {name: list(rows) for name, rows in tables.items()}

    async def load_table(self, name: str) -> list[Row]:
        if name not in self.tables:
            raise ReferenceDataError(f"Reference table not available: {name}")
        return [dict(row) for row in self.tables[name]]
