# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .recipe_service import RecipeService

__all__ = [
    "RecipeService",
]
