# =============================================================================
# lib/supabase_client.py - Supabase Client Wrapper
# =============================================================================
# This module provides a typed wrapper for Supabase database operations.
# It implements the singleton pattern to reuse a single client connection
# and provides specialized methods for:
# - Recipe rows (the `recipes` table)
# - Vault secrets (the approved-email list lives in `vault.decrypted_secrets`)
#
# All methods return plain dicts/strings; conversion to API models happens in
# core/models/recipe.py.
#
# Usage:
#   from lib.supabase_client import SupabaseClient
#   rows = SupabaseClient.fetch_recipes()
# =============================================================================

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from supabase import create_client, Client

from app.config import settings
from lib.utils import ApplicationError

# Set up logging for this module
logger = logging.getLogger(__name__)

RECIPES_TABLE = "recipes"

# PostgREST code returned by .single() when no row matches
NO_ROWS_CODE = "PGRST116"


class SupabaseClientError(ApplicationError):
    """
    Error during Supabase operations.

    Provides actionable error messages following the principle:
    "Errors should tell HOW to fix, not just WHAT failed."
    """

    def __init__(
        self,
        message: str,
        code: str = "SUPABASE_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code=code, suggestion=suggestion, details=details)

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f" Suggestion: {self.suggestion}"
        return result


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class SupabaseClient:
    """
    Typed wrapper for Supabase database operations.

    Implements singleton pattern - one client instance is shared across
    the application. All methods are class methods for easy access without
    instantiation.

    Example:
        recipes = SupabaseClient.fetch_recipes()
        recipe = SupabaseClient.fetch_recipe(3)
        raw = SupabaseClient.fetch_secret("approved-users")
    """

    _instance: Client | None = None

    @classmethod
    def get_client(cls) -> Client:
        """
        Get or create the singleton Supabase client.

        Uses service_role key which bypasses Row Level Security (RLS).
        This is appropriate for server-side operations.

        Returns:
            Client: Supabase client instance

        Raises:
            SupabaseClientError: If client creation fails
        """
        if cls._instance is None:
            try:
                cls._instance = create_client(
                    settings.SUPABASE_URL,
                    settings.SUPABASE_SERVICE_KEY
                )
                logger.info("Supabase client initialized successfully")
            except Exception as e:
                raise SupabaseClientError(
                    message=f"Failed to create Supabase client: {e}",
                    code="CLIENT_INIT_FAILED",
                    suggestion="Check SUPABASE_URL and SUPABASE_SERVICE_KEY in your .env file"
                )
        return cls._instance

    # -------------------------------------------------------------------------
    # Recipes
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_recipes(cls, columns: str = "*") -> list[dict[str, Any]]:
        """
        Fetch all recipes ordered by id.

        Args:
            columns: PostgREST select expression (list views pass a subset)

        Returns:
            List of recipe row dicts

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()

        try:
            response = (
                client.table(RECIPES_TABLE)
                .select(columns)
                .order("id")
                .execute()
            )
            rows = response.data or []
            logger.debug(f"Fetched {len(rows)} recipes")
            return rows

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch recipes: {e}",
                code="FETCH_RECIPES_FAILED",
                suggestion="Check that the recipes table exists and is accessible",
            )

    @classmethod
    def fetch_recipe(cls, recipe_id: int) -> dict[str, Any] | None:
        """
        Fetch a single recipe by ID.

        Returns:
            Recipe row dict, or None if not found

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()

        try:
            response = (
                client.table(RECIPES_TABLE)
                .select("*")
                .eq("id", recipe_id)
                .single()
                .execute()
            )
            return response.data

        except Exception as e:
            if NO_ROWS_CODE in str(e):
                return None
            raise SupabaseClientError(
                message=f"Failed to fetch recipe: {e}",
                code="FETCH_RECIPE_FAILED",
                suggestion="Check that the recipe_id exists",
                details={"recipe_id": recipe_id}
            )

    @classmethod
    def insert_recipe(cls, data: dict[str, Any]) -> dict[str, Any]:
        """
        Insert a recipe row.

        created_at/updated_at are stamped here so callers never have to.

        Returns:
            The inserted row (including its generated id)

        Raises:
            SupabaseClientError: If the insert fails or returns nothing
        """
        client = cls.get_client()
        now = _utc_now()
        row = {**data, "created_at": now, "updated_at": now}

        try:
            response = client.table(RECIPES_TABLE).insert(row).execute()
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to insert recipe: {e}",
                code="INSERT_RECIPE_FAILED",
                suggestion="Check the recipe fields against the recipes table schema",
                details={"title": data.get("title")}
            )

        if not response.data:
            raise SupabaseClientError(
                message="Insert returned no data",
                code="INSERT_RECIPE_FAILED",
                suggestion="Check that the service key can write to the recipes table",
            )

        recipe = response.data[0]
        logger.info(f"Inserted recipe {recipe.get('id')}: {recipe.get('title')}")
        return recipe

    @classmethod
    def update_recipe(cls, recipe_id: int, data: dict[str, Any]) -> dict[str, Any] | None:
        """
        Update a recipe row and bump updated_at.

        Returns:
            The updated row, or None if no row has this id

        Raises:
            SupabaseClientError: If the update fails
        """
        client = cls.get_client()
        row = {**data, "updated_at": _utc_now()}

        try:
            response = (
                client.table(RECIPES_TABLE)
                .update(row)
                .eq("id", recipe_id)
                .execute()
            )
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to update recipe: {e}",
                code="UPDATE_RECIPE_FAILED",
                suggestion="Check the recipe fields against the recipes table schema",
                details={"recipe_id": recipe_id}
            )

        if not response.data:
            return None

        logger.info(f"Updated recipe {recipe_id}")
        return response.data[0]

    @classmethod
    def delete_recipe(cls, recipe_id: int) -> bool:
        """
        Delete a recipe row.

        Returns:
            True if a row was deleted, False if no row has this id

        Raises:
            SupabaseClientError: If the delete fails
        """
        client = cls.get_client()

        try:
            response = (
                client.table(RECIPES_TABLE)
                .delete()
                .eq("id", recipe_id)
                .execute()
            )
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to delete recipe: {e}",
                code="DELETE_RECIPE_FAILED",
                details={"recipe_id": recipe_id}
            )

        deleted = bool(response.data)
        if deleted:
            logger.info(f"Deleted recipe {recipe_id}")
        return deleted

    @classmethod
    def count_recipes(cls) -> int:
        """Count recipe rows (used by the seed script and readiness check)."""
        client = cls.get_client()

        try:
            response = (
                client.table(RECIPES_TABLE)
                .select("id", count="exact")
                .limit(1)
                .execute()
            )
            return response.count or 0

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to count recipes: {e}",
                code="COUNT_RECIPES_FAILED",
                suggestion="Check that the recipes table exists and is accessible",
            )

    # -------------------------------------------------------------------------
    # Vault Secrets
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_secret(cls, name: str) -> str | None:
        """
        Read a decrypted secret from Supabase Vault.

        Args:
            name: Vault secret name

        Returns:
            The decrypted secret value, or None if no secret has this name

        Raises:
            SupabaseClientError: If the vault query fails
        """
        client = cls.get_client()

        try:
            response = (
                client.schema("vault")
                .table("decrypted_secrets")
                .select("decrypted_secret")
                .eq("name", name)
                .limit(1)
                .execute()
            )

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to read secret '{name}': {e}",
                code="FETCH_SECRET_FAILED",
                suggestion="Expose the vault schema to the API or check the service key",
                details={"secret_name": name}
            )

        rows = response.data or []
        if not rows:
            return None
        return rows[0].get("decrypted_secret")
