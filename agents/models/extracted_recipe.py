# =============================================================================
# agents/models/extracted_recipe.py - Recipe Extraction Schemas
# =============================================================================
# Output contract of the RecipeExtractorAgent:
# - ExtractedRecipe: the structured recipe read off a photo
# - RecipeExtractionResult: success flag plus recipe or error message
#
# The model replies in camelCase (prepTime, cookTime); both spellings are
# accepted. Times are whole minutes.
#
# Example:
#   result = agent.extract_from_image(image_bytes, "image/jpeg")
#   if result.success:
#       print(result.recipe.title)
#   else:
#       print(result.error_message)
# =============================================================================

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ExtractedRecipe(BaseModel):
    """
    Recipe fields read from an image by the vision model.

    Any field the model could not find comes back as null; lists default
    to empty.
    """
    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(
        default="",
        description="Recipe name (empty means extraction failed)"
    )

    description: str | None = Field(
        default=None,
        description="Brief description or subtitle"
    )

    ingredients: list[str] = Field(
        default_factory=list,
        description="Ingredient lines"
    )

    instructions: list[str] = Field(
        default_factory=list,
        description="Instruction steps in order"
    )

    prep_time: int | None = Field(
        default=None,
        alias="prepTime",
        description="Preparation time in minutes"
    )

    cook_time: int | None = Field(
        default=None,
        alias="cookTime",
        description="Cooking time in minutes"
    )

    servings: int | None = Field(
        default=None,
        description="Number of servings"
    )

    @field_validator("title", mode="before")
    @classmethod
    def _title_or_empty(cls, value: Any) -> Any:
        if value is None:
            return ""
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("ingredients", "instructions", mode="before")
    @classmethod
    def _list_or_empty(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, list):
            return [str(item).strip() for item in value if item is not None and str(item).strip()]
        return value

    @property
    def cook_time_display(self) -> str:
        """Cook time as shown on recipe cards ("30 minutes")."""
        if self.cook_time is None:
            return ""
        return f"{self.cook_time} minutes"


class RecipeExtractionResult(BaseModel):
    """
    Result of RecipeExtractorAgent.extract_from_image().

    Exactly one of recipe / error_message is set.
    """

    success: bool = Field(
        ...,
        description="Whether a recipe was extracted"
    )

    error_message: str | None = Field(
        default=None,
        description="Why extraction failed (if success=False)"
    )

    recipe: ExtractedRecipe | None = Field(
        default=None,
        description="Extracted recipe (if success=True)"
    )

    @classmethod
    def succeeded(cls, recipe: ExtractedRecipe) -> RecipeExtractionResult:
        return cls(success=True, recipe=recipe)

    @classmethod
    def failed(cls, error_message: str) -> RecipeExtractionResult:
        return cls(success=False, error_message=error_message)
