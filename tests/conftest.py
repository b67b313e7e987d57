# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - Provides request/principal/token helpers for the access gate tests
# =============================================================================

import os

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("OPENAI_API_KEY", "test-openai-key")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("JWT_SECRET_KEY", "test-jwt-secret-key-0123456789")
os.environ.setdefault("ALLOW_UNAUTHENTICATED", "false")
os.environ.setdefault("SECRET_STORE_ENABLED", "false")
os.environ.setdefault("APPROVED_EMAILS", "")

import pytest

from app.auth.tokens import TokenService
from tests.helpers import TEST_SECRET, FakeClock


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def token_service():
    """Token service with a fixed secret."""
    return TokenService(secret_key=TEST_SECRET)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sample_recipe_row():
    """A `recipes` row as PostgREST returns it."""
    return {
        "id": 1,
        "title": "Classic Spaghetti Carbonara",
        "description": "A traditional Italian pasta dish with eggs, cheese, and pancetta",
        "ingredients": "200g spaghetti\n100g pancetta\n2 eggs",
        "instructions": "Boil the pasta\nFry the pancetta\nMix with eggs",
        "prep_time": 10,
        "cook_time": "20 minutes",
        "cook_time_minutes": 20,
        "servings": 2,
        "difficulty": "Medium",
        "image_url": "/api/placeholder/300/200",
        "created_at": "2025-01-01T00:00:00+00:00",
        "updated_at": "2025-01-01T00:00:00+00:00",
    }
