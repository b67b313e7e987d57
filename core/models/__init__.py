# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - recipe.py: Recipe CRUD schemas and the list-view summary
#
# These models define the "contract" between API and clients.
# =============================================================================

from .recipe import (
    SUMMARY_COLUMNS,
    RecipeCreate,
    RecipeResponse,
    RecipeSummary,
    RecipeUpdate,
)

__all__ = [
    "SUMMARY_COLUMNS",
    "RecipeCreate",
    "RecipeResponse",
    "RecipeSummary",
    "RecipeUpdate",
]
