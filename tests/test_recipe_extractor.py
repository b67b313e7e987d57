# =============================================================================
# tests/test_recipe_extractor.py - Recipe Extractor Agent Tests
# =============================================================================
# This module contains tests for:
# - Upload validation (empty, too large, wrong type)
# - The request sent to OpenAI (model, temperature, image data URL)
# - Parsing replies (plain JSON, fenced JSON, empty title, bad JSON)
#
# Tests use mocked OpenAI responses to avoid API costs.
# =============================================================================

from __future__ import annotations

import base64
import json
from unittest.mock import MagicMock

import pytest

from agents.models.extracted_recipe import ExtractedRecipe
from agents.recipe_extractor import RecipeExtractorAgent, strip_code_fence

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


def mock_openai_reply(content: str | None) -> MagicMock:
    """OpenAI client whose chat completion returns `content`."""
    client = MagicMock()
    response = MagicMock()
    response.choices = [MagicMock()]
    response.choices[0].message.content = content
    client.chat.completions.create.return_value = response
    return client


@pytest.fixture
def recipe_json():
    return json.dumps({
        "title": "Pancakes",
        "description": "Fluffy breakfast pancakes",
        "ingredients": ["1 cup flour", "1 egg", "1 cup milk"],
        "instructions": ["Mix", "Cook on a hot griddle"],
        "prepTime": 10,
        "cookTime": 15,
        "servings": 4,
    })


# =============================================================================
# Validation Tests
# =============================================================================

class TestValidation:
    """Uploads rejected before any API call."""

    def test_empty_image(self):
        client = mock_openai_reply("{}")
        result = RecipeExtractorAgent(client=client).extract_from_image(b"", "image/png")

        assert not result.success
        assert result.error_message == "No image file provided"
        client.chat.completions.create.assert_not_called()

    def test_missing_image(self):
        result = RecipeExtractorAgent(client=mock_openai_reply("{}")).extract_from_image(None, "image/png")
        assert result.error_message == "No image file provided"

    def test_image_too_large(self):
        client = mock_openai_reply("{}")
        too_big = b"\x00" * (10 * 1024 * 1024 + 1)
        result = RecipeExtractorAgent(client=client).extract_from_image(too_big, "image/jpeg")

        assert not result.success
        assert "10MB" in result.error_message
        client.chat.completions.create.assert_not_called()

    def test_unsupported_content_type(self):
        client = mock_openai_reply("{}")
        result = RecipeExtractorAgent(client=client).extract_from_image(PNG_BYTES, "application/pdf")

        assert not result.success
        assert result.error_message.startswith("Invalid file type")
        assert "image/webp" in result.error_message
        client.chat.completions.create.assert_not_called()

    def test_content_type_is_case_insensitive(self, recipe_json):
        result = RecipeExtractorAgent(client=mock_openai_reply(recipe_json)).extract_from_image(
            PNG_BYTES, "IMAGE/PNG"
        )
        assert result.success


# =============================================================================
# Extraction Tests
# =============================================================================

class TestExtraction:
    """Calls to OpenAI and reply parsing."""

    def test_successful_extraction(self, recipe_json):
        agent = RecipeExtractorAgent(client=mock_openai_reply(recipe_json))
        result = agent.extract_from_image(PNG_BYTES, "image/png")

        assert result.success
        assert result.error_message is None
        assert result.recipe.title == "Pancakes"
        assert result.recipe.ingredients == ["1 cup flour", "1 egg", "1 cup milk"]
        assert result.recipe.prep_time == 10
        assert result.recipe.cook_time == 15
        assert result.recipe.servings == 4

    def test_request_parameters(self, recipe_json):
        client = mock_openai_reply(recipe_json)
        agent = RecipeExtractorAgent(client=client, model="gpt-4o")
        agent.extract_from_image(PNG_BYTES, "image/png")

        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4o"
        assert kwargs["temperature"] == 0.2
        assert kwargs["max_tokens"] == 2000
        assert kwargs["response_format"] == {"type": "json_object"}

        system, user = kwargs["messages"]
        assert system["role"] == "system"
        assert "prepTime" in system["content"]

        image_part = user["content"][1]
        expected_url = "data:image/png;base64," + base64.b64encode(PNG_BYTES).decode()
        assert image_part["image_url"]["url"] == expected_url

    def test_fenced_json_reply(self, recipe_json):
        reply = f"```json\n{recipe_json}\n```"
        result = RecipeExtractorAgent(client=mock_openai_reply(reply)).extract_from_image(
            PNG_BYTES, "image/png"
        )

        assert result.success
        assert result.recipe.title == "Pancakes"

    def test_missing_title_is_failure(self):
        reply = json.dumps({"title": None, "ingredients": ["1 egg"]})
        result = RecipeExtractorAgent(client=mock_openai_reply(reply)).extract_from_image(
            PNG_BYTES, "image/png"
        )

        assert not result.success
        assert result.error_message == "Failed to extract recipe information from image"

    def test_null_reply_is_failure(self):
        result = RecipeExtractorAgent(client=mock_openai_reply("null")).extract_from_image(
            PNG_BYTES, "image/png"
        )
        assert result.error_message == "Failed to extract recipe information from image"

    def test_invalid_json_is_failure(self):
        result = RecipeExtractorAgent(client=mock_openai_reply("I can't read this")).extract_from_image(
            PNG_BYTES, "image/png"
        )

        assert not result.success
        assert result.error_message.startswith("Error processing image:")

    def test_api_error_is_failure(self):
        client = MagicMock()
        client.chat.completions.create.side_effect = RuntimeError("rate limited")
        result = RecipeExtractorAgent(client=client).extract_from_image(PNG_BYTES, "image/png")

        assert not result.success
        assert result.error_message == "Error processing image: rate limited"


# =============================================================================
# Model Tests
# =============================================================================

class TestExtractedRecipe:
    """ExtractedRecipe parsing rules."""

    def test_accepts_snake_case(self):
        recipe = ExtractedRecipe(title="Soup", prep_time=5, cook_time=30)
        assert recipe.prep_time == 5
        assert recipe.cook_time == 30

    def test_null_lists_become_empty(self):
        recipe = ExtractedRecipe.model_validate({"title": "Soup", "ingredients": None, "instructions": None})
        assert recipe.ingredients == []
        assert recipe.instructions == []

    def test_cook_time_display(self):
        assert ExtractedRecipe(title="Soup", cook_time=30).cook_time_display == "30 minutes"
        assert ExtractedRecipe(title="Soup").cook_time_display == ""

    def test_strip_code_fence(self):
        assert strip_code_fence('```\n{"a": 1}\n```') == '{"a": 1}'
        assert strip_code_fence('{"a": 1}') == '{"a": 1}'
