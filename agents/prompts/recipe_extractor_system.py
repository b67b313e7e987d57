# =============================================================================
# agents/prompts/recipe_extractor_system.py - Recipe Extractor System Prompt
# =============================================================================
# System prompt for the RecipeExtractorAgent.
#
# The extractor reads a photo of a recipe (cookbook page, recipe card,
# screenshot) and returns a single JSON object matching ExtractedRecipe.
#
# Usage:
#   messages = [
#       {"role": "system", "content": RECIPE_EXTRACTOR_SYSTEM_PROMPT},
#       {"role": "user", "content": build_extraction_user_content(data_url)},
#   ]
# =============================================================================

from __future__ import annotations

RECIPE_EXTRACTOR_SYSTEM_PROMPT = """
<role>
You are a recipe extraction expert. Analyze the provided recipe image and extract all information into a structured JSON format.
</role>

<fields>
- title: The recipe name
- description: A brief description or subtitle if available
- ingredients: Array of ingredient strings (e.g., "2 cups flour", "1 tsp salt")
- instructions: Array of instruction steps as separate strings
- prepTime: Preparation time in minutes (extract from text like "Prep: 15 min")
- cookTime: Cooking time in minutes (extract from text like "Cook: 30 min")
- servings: Number of servings (extract from text like "Serves 4")
</fields>

<rules>
If any field is not clearly visible or mentioned in the image, use null for that field.
Convert hours to minutes ("1 hr 15 min" -> 75).
Keep ingredient quantities and units exactly as written.
</rules>

<output_format>
Respond with ONLY valid JSON in this exact format:
{
  "title": "Recipe Name",
  "description": "Brief description",
  "ingredients": ["ingredient 1", "ingredient 2"],
  "instructions": ["step 1", "step 2"],
  "prepTime": 15,
  "cookTime": 30,
  "servings": 4
}
</output_format>
""".strip()

EXTRACTION_USER_TEXT = "Please extract the recipe information from this image:"


def build_extraction_user_content(image_data_url: str) -> list[dict]:
    """
    Build the multi-part user message: instruction text plus the image.

    Args:
        image_data_url: data:<content-type>;base64,<payload>

    Returns:
        Content parts for the Chat Completions API
    """
    return [
        {"type": "text", "text": EXTRACTION_USER_TEXT},
        {"type": "image_url", "image_url": {"url": image_data_url}},
    ]
