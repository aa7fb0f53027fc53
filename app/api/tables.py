"""API endpoints for ingredient-filtered reference tables."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import HTMLResponse, JSONResponse

from app.services.data_provider import ReferenceDataError
from app.services.reference_context import ReferenceContext, reference_context
from app.services.table_renderer import table_renderer
from app.services.table_schemas import (
    DeriveIngredientsRequest,
    DeriveIngredientsResponse,
    RenderTablesRequest,
    TablesResult,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tables", tags=["tables"])


def get_reference_context() -> ReferenceContext:
    """Dependency returning the process-wide reference context."""
    return reference_context


@router.post("", response_model=TablesResult)
async def render_tables(
    body: RenderTablesRequest,
    context: ReferenceContext = Depends(get_reference_context),
):
    """
    Filter every reference table to the supplied ingredients.

    Returns: TablesResult JSON (503 with error set if reference data failed to load)
    """
    result = await context.render_tables(body.ingredients)
    if result.error:
        return JSONResponse(status_code=503, content=result.model_dump())
    return result


@router.post("/html", response_class=HTMLResponse)
async def render_tables_html(
    body: RenderTablesRequest,
    context: ReferenceContext = Depends(get_reference_context),
):
    """HTML fragment with the filtered tables, for swapping into a page."""
    result = await context.render_tables(body.ingredients)
    status_code = 503 if result.error else 200
    return HTMLResponse(content=table_renderer.render(result), status_code=status_code)


@router.post("/ingredients/derive", response_model=DeriveIngredientsResponse)
async def derive_ingredients(
    body: DeriveIngredientsRequest,
    context: ReferenceContext = Depends(get_reference_context),
):
    """Find known ingredients (by name or alias) mentioned in recipe text."""
    try:
        await context.ensure_loaded()
    except ReferenceDataError as e:
        logger.warning("Reference data unavailable for ingredient detection: %s", e)
        raise HTTPException(status_code=503, detail=f"Reference data unavailable: {e}")

    return DeriveIngredientsResponse(
        ingredients=context.derive_ingredients_from_recipe(body.text)
    )
