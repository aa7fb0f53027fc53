"""
Test configuration and fixtures for the reference tables service.

- In-memory provider and ReferenceContext fixtures (loaded and unloaded)
- TestClient with the reference context dependency overridden
"""

import asyncio
from typing import Generator

import pytest
from fastapi.testclient import TestClient

from app.api.tables import get_reference_context
from app.main import app
from app.services.canonicalizer import IngredientCanonicalizer
from app.services.data_provider import InMemoryReferenceProvider
from app.services.reference_context import ReferenceContext
from tests.factories import create_master_rows, create_reference_tables


# =============================================================================
# Core Fixtures
# =============================================================================


@pytest.fixture
def master_rows():
    return create_master_rows()


@pytest.fixture
def canonicalizer(master_rows) -> IngredientCanonicalizer:
    """Canonicalizer with indexes built from the default master table."""
    canon = IngredientCanonicalizer()
    canon.build_indexes(master_rows)
    return canon


@pytest.fixture
def reference_tables():
    return create_reference_tables()


@pytest.fixture
def provider(reference_tables) -> InMemoryReferenceProvider:
    return InMemoryReferenceProvider(reference_tables)


@pytest.fixture
def context(provider) -> ReferenceContext:
    """Context that has not loaded its reference data yet."""
    return ReferenceContext(provider)


@pytest.fixture
def loaded_context(context) -> ReferenceContext:
    """Context with reference data already loaded."""
    asyncio.run(context.ensure_loaded())
    return context


# =============================================================================
# Client Fixtures
# =============================================================================


@pytest.fixture
def client(context) -> Generator[TestClient, None, None]:
    """
    TestClient wired to an in-memory reference context.

    Not used as a context manager, so the startup preload does not run and
    the first request triggers the load.
    """
    app.dependency_overrides[get_reference_context] = lambda: context
    yield TestClient(app)
    app.dependency_overrides.clear()
