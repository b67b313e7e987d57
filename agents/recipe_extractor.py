# =============================================================================
# agents/recipe_extractor.py - Recipe Extractor Agent
# =============================================================================
# Turns a photo of a recipe into a structured ExtractedRecipe using an
# OpenAI vision model.
#
# The extractor's job:
# 1. Validate the upload (present, size limit, content type)
# 2. Send the image as a base64 data URL with the extraction prompt
# 3. Parse the JSON reply into an ExtractedRecipe
#
# It never raises: every failure comes back as a RecipeExtractionResult with
# success=False and a message the UI can show.
#
# Usage:
#   from agents.recipe_extractor import RecipeExtractorAgent
#   agent = RecipeExtractorAgent()
#   result = agent.extract_from_image(image_bytes, "image/jpeg")
# =============================================================================

from __future__ import annotations

import base64
import json
import logging
import re

from openai import OpenAI

from app.config import settings
from agents.models.extracted_recipe import ExtractedRecipe, RecipeExtractionResult
from agents.prompts.recipe_extractor_system import (
    RECIPE_EXTRACTOR_SYSTEM_PROMPT,
    build_extraction_user_content,
)

# Set up logging for this module
logger = logging.getLogger(__name__)

NO_IMAGE_MESSAGE = "No image file provided"
EXTRACTION_FAILED_MESSAGE = "Failed to extract recipe information from image"

# ```json ... ``` wrapper some models add despite the JSON response format
_CODE_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL | re.IGNORECASE)


def strip_code_fence(text: str) -> str:
    """Remove a surrounding Markdown code fence, if any."""
    text = text.strip()
    match = _CODE_FENCE.match(text)
    if match:
        return match.group(1)
    return text


def to_data_url(image_bytes: bytes, content_type: str) -> str:
    """Encode image bytes as a data URL for the vision API."""
    encoded = base64.b64encode(image_bytes).decode("ascii")
    return f"data:{content_type};base64,{encoded}"


class RecipeExtractorAgent:
    """
    Extracts recipes from images with an OpenAI vision model.

    Example:
        agent = RecipeExtractorAgent()
        result = agent.extract_from_image(photo_bytes, "image/png")
        if result.success:
            print(result.recipe.title)

    Attributes:
        model: OpenAI model to use (default from settings)
        temperature: Generation temperature (default 0.2 for consistency)
        max_tokens: Upper bound on the reply length
        max_image_bytes: Largest accepted upload
        allowed_content_types: Accepted image MIME types
    """

    def __init__(
        self,
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        client: OpenAI | None = None,
    ):
        """
        Initialize the extractor.

        Args:
            model: OpenAI model ID (default: settings.OPENAI_VISION_MODEL)
            temperature: Generation temperature (default: settings.EXTRACTION_TEMPERATURE)
            max_tokens: Reply token limit (default: settings.EXTRACTION_MAX_TOKENS)
            client: Preconfigured OpenAI client (default: built from OPENAI_API_KEY)
        """
        self.client = client or OpenAI(api_key=settings.OPENAI_API_KEY)
        self.model = model or settings.OPENAI_VISION_MODEL
        self.temperature = temperature if temperature is not None else settings.EXTRACTION_TEMPERATURE
        self.max_tokens = max_tokens or settings.EXTRACTION_MAX_TOKENS
        self.max_image_bytes = settings.max_image_size_bytes
        self.allowed_content_types = settings.allowed_image_types_list

        logger.info(f"RecipeExtractorAgent initialized with model={self.model}, temp={self.temperature}")

    # -------------------------------------------------------------------------
    # Main Entry Point
    # -------------------------------------------------------------------------

    def extract_from_image(
        self,
        image_bytes: bytes | None,
        content_type: str | None,
    ) -> RecipeExtractionResult:
        """
        Extract a recipe from an uploaded image.

        Args:
            image_bytes: Raw image content
            content_type: MIME type reported by the upload

        Returns:
            RecipeExtractionResult (success=False with a message on any error)
        """
        error = self._validate(image_bytes, content_type)
        if error:
            logger.info(f"Rejected image upload: {error}")
            return RecipeExtractionResult.failed(error)

        content_type = content_type.lower()
        logger.info(f"Extracting recipe from image using {self.model}. Image size: {len(image_bytes)} bytes")

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                response_format={"type": "json_object"},
                messages=[
                    {"role": "system", "content": RECIPE_EXTRACTOR_SYSTEM_PROMPT},
                    {
                        "role": "user",
                        "content": build_extraction_user_content(
                            to_data_url(image_bytes, content_type)
                        ),
                    },
                ],
            )

            response_text = response.choices[0].message.content or ""
            logger.info(f"Received response from OpenAI: {response_text[:200]}")

            recipe = self._parse_response(response_text)

        except Exception as e:
            logger.error(f"Error extracting recipe from image: {e}", exc_info=True)
            return RecipeExtractionResult.failed(f"Error processing image: {e}")

        if recipe is None or not recipe.title:
            return RecipeExtractionResult.failed(EXTRACTION_FAILED_MESSAGE)

        logger.info(f"Extracted recipe '{recipe.title}' with {len(recipe.ingredients)} ingredients")
        return RecipeExtractionResult.succeeded(recipe)

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def _validate(self, image_bytes: bytes | None, content_type: str | None) -> str | None:
        """Return an error message for an unacceptable upload, else None."""
        if not image_bytes:
            return NO_IMAGE_MESSAGE

        if len(image_bytes) > self.max_image_bytes:
            max_mb = self.max_image_bytes // 1024 // 1024
            return f"Image file size exceeds maximum allowed size of {max_mb}MB"

        if not content_type or content_type.lower() not in self.allowed_content_types:
            return f"Invalid file type. Allowed types: {', '.join(self.allowed_content_types)}"

        return None

    # -------------------------------------------------------------------------
    # Response Parsing
    # -------------------------------------------------------------------------

    def _parse_response(self, response_text: str) -> ExtractedRecipe | None:
        """
        Parse the model reply into an ExtractedRecipe.

        Returns None when the reply is JSON null. Raises on invalid JSON or
        a payload that does not match the schema.
        """
        data = json.loads(strip_code_fence(response_text))
        if data is None:
            return None
        return ExtractedRecipe.model_validate(data)
