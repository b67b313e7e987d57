#!/usr/bin/env python3
# =============================================================================
# scripts/seed_recipes.py - Seed the Recipe Catalog
# =============================================================================
# Inserts the starter recipes into an empty `recipes` table.
# Does nothing if the table already has rows.
#
# Usage:
#   python scripts/seed_recipes.py
# =============================================================================

import logging
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv
load_dotenv()

from core.models.recipe import RecipeCreate
from lib.supabase_client import SupabaseClient, SupabaseClientError

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
logger = logging.getLogger("seed_recipes")

PLACEHOLDER_IMAGE = "/api/placeholder/300/200"

SEED_RECIPES = [
    RecipeCreate(
        title="Classic Spaghetti Carbonara",
        description="A traditional Italian pasta dish with eggs, cheese, and pancetta",
        cook_time="20 minutes",
        difficulty="Medium",
        image_url=PLACEHOLDER_IMAGE,
    ),
    RecipeCreate(
        title="Chicken Tikka Masala",
        description="Creamy and flavorful Indian curry with tender chicken pieces",
        cook_time="45 minutes",
        difficulty="Medium",
        image_url=PLACEHOLDER_IMAGE,
    ),
    RecipeCreate(
        title="Chocolate Chip Cookies",
        description="Soft and chewy homemade cookies with chocolate chips",
        cook_time="25 minutes",
        difficulty="Easy",
        image_url=PLACEHOLDER_IMAGE,
    ),
    RecipeCreate(
        title="Caesar Salad",
        description="Fresh romaine lettuce with homemade caesar dressing and croutons",
        cook_time="15 minutes",
        difficulty="Easy",
        image_url=PLACEHOLDER_IMAGE,
    ),
]


def seed() -> int:
    """
    Insert the starter recipes if the catalog is empty.

    Returns:
        Number of recipes inserted
    """
    existing = SupabaseClient.count_recipes()
    if existing:
        logger.info(f"Catalog already has {existing} recipes, nothing to seed")
        return 0

    for recipe in SEED_RECIPES:
        SupabaseClient.insert_recipe(recipe.to_row())

    logger.info(f"Seeded {len(SEED_RECIPES)} recipes")
    return len(SEED_RECIPES)


if __name__ == "__main__":
    try:
        seed()
    except SupabaseClientError as e:
        logger.error(str(e))
        sys.exit(1)
