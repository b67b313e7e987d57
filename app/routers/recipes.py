# =============================================================================
# app/routers/recipes.py - Recipe Endpoints
# =============================================================================
# CRUD for the recipe catalog, the random pick used by the spin wheel, and
# reading recipes from uploaded photos.
#
# The database client and the OpenAI client are synchronous, so their calls
# run in a worker thread.
# =============================================================================

import asyncio
import logging
from functools import lru_cache
from typing import Annotated

from fastapi import APIRouter, Depends, File, Path, Response, UploadFile, status

from agents.models.extracted_recipe import ExtractedRecipe
from agents.recipe_extractor import RecipeExtractorAgent
from app.auth import AuthUser, get_current_user
from app.config import settings
from app.exceptions import RecipeExtractionError
from core.models.recipe import RecipeCreate, RecipeResponse, RecipeSummary, RecipeUpdate
from core.services.recipe_service import RecipeService

logger = logging.getLogger(__name__)

router = APIRouter()

RecipeId = Annotated[int, Path(description="Recipe id", ge=1)]


@lru_cache
def get_recipe_extractor() -> RecipeExtractorAgent:
    """Shared extractor (one OpenAI client per process)."""
    return RecipeExtractorAgent()


async def _extract(file: UploadFile, extractor: RecipeExtractorAgent) -> ExtractedRecipe:
    # One byte past the limit is enough for the size check to reject it
    image_bytes = await file.read(settings.max_image_size_bytes + 1)
    result = await asyncio.to_thread(
        extractor.extract_from_image, image_bytes, file.content_type
    )
    if not result.success:
        raise RecipeExtractionError(result.error_message or "Extraction failed", file.filename)
    return result.recipe


# =============================================================================
# Catalog
# =============================================================================

@router.get("", response_model=list[RecipeSummary])
async def list_recipes(
    user: AuthUser = Depends(get_current_user),
) -> list[RecipeSummary]:
    """List all recipes (summary fields only)."""
    return await asyncio.to_thread(RecipeService.list_recipes)


@router.get("/random", response_model=RecipeSummary)
async def random_recipe(
    user: AuthUser = Depends(get_current_user),
) -> RecipeSummary:
    """
    Pick a random recipe.

    Raises:
        404: If the catalog is empty
    """
    return await asyncio.to_thread(RecipeService.random_recipe)


@router.get("/{recipe_id}", response_model=RecipeResponse)
async def get_recipe(
    recipe_id: RecipeId,
    user: AuthUser = Depends(get_current_user),
) -> RecipeResponse:
    """
    Get a recipe with ingredients and instructions.

    Raises:
        404: If the recipe doesn't exist
    """
    return await asyncio.to_thread(RecipeService.get_recipe, recipe_id)


@router.post("", response_model=RecipeResponse, status_code=status.HTTP_201_CREATED)
async def create_recipe(
    recipe: RecipeCreate,
    user: AuthUser = Depends(get_current_user),
) -> RecipeResponse:
    """Create a recipe."""
    created = await asyncio.to_thread(RecipeService.create_recipe, recipe)
    logger.info(f"Recipe {created.id} created by {user.email or 'anonymous'}")
    return created


@router.patch("/{recipe_id}", response_model=RecipeResponse)
async def update_recipe(
    recipe_id: RecipeId,
    update: RecipeUpdate,
    user: AuthUser = Depends(get_current_user),
) -> RecipeResponse:
    """
    Update some fields of a recipe.

    Raises:
        404: If the recipe doesn't exist
    """
    return await asyncio.to_thread(RecipeService.update_recipe, recipe_id, update)


@router.delete("/{recipe_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_recipe(
    recipe_id: RecipeId,
    user: AuthUser = Depends(get_current_user),
) -> Response:
    """
    Delete a recipe.

    Raises:
        404: If the recipe doesn't exist
    """
    await asyncio.to_thread(RecipeService.delete_recipe, recipe_id)
    logger.info(f"Recipe {recipe_id} deleted by {user.email or 'anonymous'}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# =============================================================================
# Image Extraction
# =============================================================================

@router.post("/extract", response_model=ExtractedRecipe)
async def extract_recipe(
    file: UploadFile = File(..., description="Photo of a recipe (JPEG, PNG or WebP)"),
    extractor: RecipeExtractorAgent = Depends(get_recipe_extractor),
    user: AuthUser = Depends(get_current_user),
) -> ExtractedRecipe:
    """
    Read a recipe from a photo without saving it.

    The client can review and edit the result before POST /recipes.

    Raises:
        422: If no recipe could be extracted
    """
    return await _extract(file, extractor)


@router.post("/import", response_model=RecipeResponse, status_code=status.HTTP_201_CREATED)
async def import_recipe(
    file: UploadFile = File(..., description="Photo of a recipe (JPEG, PNG or WebP)"),
    extractor: RecipeExtractorAgent = Depends(get_recipe_extractor),
    user: AuthUser = Depends(get_current_user),
) -> RecipeResponse:
    """
    Read a recipe from a photo and save it.

    Raises:
        422: If no recipe could be extracted
    """
    extracted = await _extract(file, extractor)
    return await asyncio.to_thread(RecipeService.create_from_extraction, extracted)
