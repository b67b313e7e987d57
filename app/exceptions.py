# =============================================================================
# app/exceptions.py - Custom Exception Handlers
# =============================================================================
# Centralized exception handling for the API.
# Errors should tell HOW to fix, not just WHAT failed.
#
# Access gate rejections (401/403) are not exceptions: the gate middleware
# answers those directly, see app/auth/gate.py.
# =============================================================================

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse


class RecipeCatalogException(Exception):
    """
    Base exception for the Recipe Catalog API.

    All custom exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "RECIPE_CATALOG_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "detail": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Recipe Exceptions
# =============================================================================

class RecipeNotFoundError(RecipeCatalogException):
    """Raised when a recipe ID doesn't exist."""

    def __init__(self, recipe_id: int):
        super().__init__(
            message=f"Recipe not found: {recipe_id}",
            code="RECIPE_NOT_FOUND",
            status_code=404,
            suggestion="Check that the recipe id is correct and the recipe hasn't been deleted",
            details={"recipe_id": recipe_id}
        )


class CatalogEmptyError(RecipeCatalogException):
    """Raised when an operation needs at least one recipe."""

    def __init__(self):
        super().__init__(
            message="The recipe catalog is empty",
            code="CATALOG_EMPTY",
            status_code=404,
            suggestion="Add a recipe with POST /api/recipes or run scripts/seed_recipes.py",
        )


class RecipeStoreError(RecipeCatalogException):
    """Raised when the recipe database cannot be reached or rejects a query."""

    def __init__(self, error: str, code: str = "RECIPE_STORE_ERROR"):
        super().__init__(
            message=f"Recipe storage is unavailable: {error}",
            code=code,
            status_code=503,
            suggestion="Try again later or contact support if the issue persists",
            details={"error": error}
        )


# =============================================================================
# Image Extraction Exceptions
# =============================================================================

class RecipeExtractionError(RecipeCatalogException):
    """Raised when a recipe could not be read from an uploaded image."""

    def __init__(self, error: str, filename: str | None = None):
        super().__init__(
            message=error,
            code="RECIPE_EXTRACTION_FAILED",
            status_code=422,
            suggestion="Upload a clear JPEG, PNG or WebP photo of a single recipe",
            details={"filename": filename} if filename else None
        )


# =============================================================================
# Token Issuance Exceptions
# =============================================================================

class PrincipalMissingError(RecipeCatalogException):
    """Raised when /api/auth/token is called without the platform principal."""

    def __init__(self, header_name: str):
        super().__init__(
            message="Authentication required",
            code="PRINCIPAL_MISSING",
            status_code=401,
            suggestion=f"Sign in through the hosting platform so it sends the {header_name} header",
        )


class InvalidPrincipalError(RecipeCatalogException):
    """Raised when the platform principal header cannot be decoded."""

    def __init__(self, error: str):
        super().__init__(
            message="Invalid authentication header format",
            code="INVALID_PRINCIPAL",
            status_code=400,
            suggestion="The principal header must be base64-encoded JSON",
            details={"error": error}
        )


class PrincipalEmailMissingError(RecipeCatalogException):
    """Raised when the principal decodes but carries no email."""

    def __init__(self):
        super().__init__(
            message="Could not extract email from authentication principal",
            code="PRINCIPAL_EMAIL_MISSING",
            status_code=400,
            suggestion="Use an identity provider that shares the user's email address",
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def recipe_catalog_exception_handler(
    request: Request,
    exc: RecipeCatalogException
) -> JSONResponse:
    """
    Convert RecipeCatalogException to JSON response.

    Returns structured error with:
    - detail: Human-readable message
    - code: Machine-readable error code
    - suggestion: How to fix (if available)
    - details: Additional context
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )
