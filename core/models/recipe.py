# =============================================================================
# core/models/recipe.py - Recipe Schemas
# =============================================================================
# These models define the API contract for recipe operations:
# - RecipeCreate: Input for creating a recipe
# - RecipeUpdate: Partial update (only the fields that were sent)
# - RecipeResponse: Full recipe returned by GET /recipes/{id}
# - RecipeSummary: Card-sized view returned by GET /recipes
#
# Storage layout (table `recipes`): ingredients and instructions are stored
# as newline-separated text and exposed as lists. Conversion happens here,
# in to_row() / from_row(), and nowhere else.
# =============================================================================

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from lib.utils import join_lines, split_lines

# Columns needed for the list view
SUMMARY_COLUMNS = "id, title, description, cook_time, difficulty, image_url"

LIST_FIELDS = ("ingredients", "instructions")

TITLE_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 1000


def _row_lists_to_text(data: dict[str, Any]) -> dict[str, Any]:
    row = dict(data)
    for field in LIST_FIELDS:
        if field in row:
            row[field] = join_lines(row[field])
    return row


class RecipeBase(BaseModel):
    """Fields shared by create and response models."""

    # Display name, the only required field
    title: str = Field(
        ...,
        min_length=1,
        max_length=TITLE_MAX_LENGTH,
        description="Recipe name"
    )

    description: str = Field(
        default="",
        max_length=DESCRIPTION_MAX_LENGTH,
        description="Short description or subtitle"
    )

    ingredients: list[str] = Field(
        default_factory=list,
        description="Ingredient lines, e.g. '2 cups flour'"
    )

    instructions: list[str] = Field(
        default_factory=list,
        description="Instruction steps in order"
    )

    prep_time: int | None = Field(
        default=None,
        ge=0,
        description="Preparation time in minutes"
    )

    # Free text shown on recipe cards ("20 minutes", "1 hr 15")
    cook_time: str = Field(
        default="",
        max_length=50,
        description="Cooking time as displayed"
    )

    cook_time_minutes: int | None = Field(
        default=None,
        ge=0,
        description="Cooking time in minutes"
    )

    servings: int | None = Field(
        default=None,
        ge=1,
        description="Number of servings"
    )

    difficulty: str = Field(
        default="",
        max_length=20,
        description="Difficulty label (Easy, Medium, Hard)"
    )

    image_url: str = Field(
        default="",
        description="URL of the recipe photo"
    )


class RecipeCreate(RecipeBase):
    """
    Schema for creating a recipe.

    Example:
        {
            "title": "Caesar Salad",
            "ingredients": ["1 romaine heart", "croutons"],
            "instructions": ["Tear the lettuce", "Toss with dressing"],
            "cook_time": "15 minutes",
            "difficulty": "Easy"
        }
    """

    def to_row(self) -> dict[str, Any]:
        """Convert to a `recipes` table row (without id/timestamps)."""
        return _row_lists_to_text(self.model_dump())


class RecipeUpdate(BaseModel):
    """
    Schema for a partial recipe update.

    Only fields present in the request body are written.
    """
    title: str | None = Field(default=None, min_length=1, max_length=TITLE_MAX_LENGTH)
    description: str | None = Field(default=None, max_length=DESCRIPTION_MAX_LENGTH)
    ingredients: list[str] | None = None
    instructions: list[str] | None = None
    prep_time: int | None = Field(default=None, ge=0)
    cook_time: str | None = Field(default=None, max_length=50)
    cook_time_minutes: int | None = Field(default=None, ge=0)
    servings: int | None = Field(default=None, ge=1)
    difficulty: str | None = Field(default=None, max_length=20)
    image_url: str | None = None

    def to_row(self) -> dict[str, Any]:
        """Convert the fields that were set to a partial table row."""
        return _row_lists_to_text(self.model_dump(exclude_unset=True))


class RecipeResponse(RecipeBase):
    """
    Full recipe returned to clients.

    Returned by:
    - GET /recipes/{id}
    - POST /recipes, PATCH /recipes/{id}, POST /recipes/import
    """
    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="Recipe id")
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "RecipeResponse":
        """Build from a `recipes` table row."""
        data = {key: value for key, value in row.items() if value is not None}
        for field in LIST_FIELDS:
            data[field] = split_lines(row.get(field))
        return cls(**data)


class RecipeSummary(BaseModel):
    """Card-sized recipe used by list views and the spin wheel."""
    id: int
    title: str
    description: str = ""
    cook_time: str = ""
    difficulty: str = ""
    image_url: str = ""

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "RecipeSummary":
        return cls(**{key: value for key, value in row.items() if value is not None})
