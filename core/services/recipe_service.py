# =============================================================================
# core/services/recipe_service.py - Recipe Business Logic
# =============================================================================
# Handles recipe CRUD operations, the random pick for the spin wheel, and
# saving recipes read from images.
# Separates HTTP concerns from database/business logic.
# =============================================================================

import logging
import random

from lib.supabase_client import SupabaseClient, SupabaseClientError
from core.models.recipe import (
    DESCRIPTION_MAX_LENGTH,
    SUMMARY_COLUMNS,
    TITLE_MAX_LENGTH,
    RecipeCreate,
    RecipeResponse,
    RecipeSummary,
    RecipeUpdate,
)
from agents.models.extracted_recipe import ExtractedRecipe
from app.exceptions import CatalogEmptyError, RecipeNotFoundError, RecipeStoreError

logger = logging.getLogger(__name__)


def _store_error(e: SupabaseClientError) -> RecipeStoreError:
    logger.error(f"Recipe store error: {e}")
    return RecipeStoreError(e.message, code=e.code)


def _at_least(value: int | None, minimum: int) -> int | None:
    return value if value is not None and value >= minimum else None


class RecipeService:
    """
    Service for recipe catalog operations.

    Provides a clean interface between API routes and database.
    """

    @staticmethod
    def list_recipes() -> list[RecipeSummary]:
        """
        List every recipe in id order.

        Raises:
            RecipeStoreError: If the database query fails
        """
        try:
            rows = SupabaseClient.fetch_recipes(SUMMARY_COLUMNS)
        except SupabaseClientError as e:
            raise _store_error(e)

        return [RecipeSummary.from_row(row) for row in rows]

    @staticmethod
    def get_recipe(recipe_id: int) -> RecipeResponse:
        """
        Get a full recipe by ID.

        Raises:
            RecipeNotFoundError: If no recipe has this id
            RecipeStoreError: If the database query fails
        """
        try:
            row = SupabaseClient.fetch_recipe(recipe_id)
        except SupabaseClientError as e:
            raise _store_error(e)

        if not row:
            raise RecipeNotFoundError(recipe_id)

        return RecipeResponse.from_row(row)

    @staticmethod
    def random_recipe() -> RecipeSummary:
        """
        Pick one recipe at random (the "spin the wheel" feature).

        Raises:
            CatalogEmptyError: If there are no recipes
            RecipeStoreError: If the database query fails
        """
        recipes = RecipeService.list_recipes()
        if not recipes:
            raise CatalogEmptyError()

        return random.choice(recipes)

    @staticmethod
    def create_recipe(recipe: RecipeCreate) -> RecipeResponse:
        """
        Create a recipe.

        Returns:
            The stored recipe with its generated id

        Raises:
            RecipeStoreError: If the insert fails
        """
        try:
            row = SupabaseClient.insert_recipe(recipe.to_row())
        except SupabaseClientError as e:
            raise _store_error(e)

        return RecipeResponse.from_row(row)

    @staticmethod
    def update_recipe(recipe_id: int, update: RecipeUpdate) -> RecipeResponse:
        """
        Apply a partial update.

        An empty update just returns the current recipe.

        Raises:
            RecipeNotFoundError: If no recipe has this id
            RecipeStoreError: If the update fails
        """
        data = update.to_row()
        if not data:
            return RecipeService.get_recipe(recipe_id)

        try:
            row = SupabaseClient.update_recipe(recipe_id, data)
        except SupabaseClientError as e:
            raise _store_error(e)

        if not row:
            raise RecipeNotFoundError(recipe_id)

        return RecipeResponse.from_row(row)

    @staticmethod
    def delete_recipe(recipe_id: int) -> None:
        """
        Delete a recipe.

        Raises:
            RecipeNotFoundError: If no recipe has this id
            RecipeStoreError: If the delete fails
        """
        try:
            deleted = SupabaseClient.delete_recipe(recipe_id)
        except SupabaseClientError as e:
            raise _store_error(e)

        if not deleted:
            raise RecipeNotFoundError(recipe_id)

    @staticmethod
    def create_from_extraction(extracted: ExtractedRecipe) -> RecipeResponse:
        """
        Save a recipe read from an image.

        Cook time minutes are kept as cook_time_minutes and rendered into the
        display string ("30 minutes"). Values the catalog can't store are
        trimmed: long text is cut to the column limit, negative times and
        non-positive servings are dropped.
        """
        cook_minutes = _at_least(extracted.cook_time, 0)
        recipe = RecipeCreate(
            title=extracted.title[:TITLE_MAX_LENGTH],
            description=(extracted.description or "")[:DESCRIPTION_MAX_LENGTH],
            ingredients=extracted.ingredients,
            instructions=extracted.instructions,
            prep_time=_at_least(extracted.prep_time, 0),
            cook_time=extracted.cook_time_display if cook_minutes is not None else "",
            cook_time_minutes=cook_minutes,
            servings=_at_least(extracted.servings, 1),
        )
        created = RecipeService.create_recipe(recipe)
        logger.info(f"Imported recipe {created.id} from image: {created.title}")
        return created
