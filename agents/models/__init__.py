# =============================================================================
# agents/models/ - Agent Output Schemas
# =============================================================================
# Pydantic models that define what each agent produces:
# - extracted_recipe.py: ExtractedRecipe / RecipeExtractionResult
#   (RecipeExtractorAgent -> recipe routes contract)
# =============================================================================

from agents.models.extracted_recipe import (
    ExtractedRecipe,
    RecipeExtractionResult,
)

__all__ = [
    "ExtractedRecipe",
    "RecipeExtractionResult",
]
