# =============================================================================
# agents/ - AI Agent Definitions
# =============================================================================
# This package contains the AI agents used by the API:
# - recipe_extractor.py: Reads a recipe photo into structured fields
#
# Models:
# - models/extracted_recipe.py: ExtractedRecipe / RecipeExtractionResult
#
# Prompts:
# - prompts/recipe_extractor_system.py: System prompt for the extractor
# =============================================================================

from agents.recipe_extractor import RecipeExtractorAgent
from agents.models.extracted_recipe import (
    ExtractedRecipe,
    RecipeExtractionResult,
)

__all__ = [
    # Agent
    "RecipeExtractorAgent",
    # Models
    "ExtractedRecipe",
    "RecipeExtractionResult",
]
