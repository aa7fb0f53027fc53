import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.api import tables
from app.config import settings
from app.services.data_provider import ReferenceDataError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Warm the reference tables so the first request doesn't pay for the load."""
    if settings.preload_reference_data:
        context = app.dependency_overrides.get(
            tables.get_reference_context, tables.get_reference_context
        )()
        try:
            await context.ensure_loaded()
        except ReferenceDataError as e:
            # Not fatal: the next request retries the load
            logger.warning("Reference data preload failed: %s", e)
    yield


app = FastAPI(title="BrainPreserve Tables", version="0.1.0", lifespan=lifespan)

app.include_router(tables.router)


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
