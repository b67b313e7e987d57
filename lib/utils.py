# =============================================================================
# lib/utils.py - Shared Utilities
# =============================================================================
# Common utilities used across the application.
# =============================================================================

from typing import Any


# =============================================================================
# Text Utilities
# =============================================================================

def normalize_email(value: str | None) -> str | None:
    """
    Normalize an email address for comparisons.

    Emails are compared case-insensitively everywhere in the app, so both
    sides of a comparison go through this function.

    Args:
        value: Raw email (may be None or blank)

    Returns:
        Stripped, lower-cased email, or None if nothing is left

    Example:
        normalize_email("  Jane@Example.com ")  # "jane@example.com"
        normalize_email("")  # None
    """
    if value is None:
        return None
    normalized = value.strip().lower()
    return normalized or None


def split_lines(value: str | None) -> list[str]:
    """
    Split newline-separated text into non-empty, stripped lines.

    Example:
        split_lines("2 eggs\\n\\n100g flour ")  # ["2 eggs", "100g flour"]
    """
    if not value:
        return []
    return [line.strip() for line in value.splitlines() if line.strip()]


def join_lines(values: list[str] | None) -> str:
    """Inverse of split_lines: drop blank entries and join with newlines."""
    return "\n".join(item.strip() for item in values or [] if item and item.strip())


# =============================================================================
# Base Error Class
# =============================================================================

class ApplicationError(Exception):
    """
    Base error class for application-specific errors.

    Provides actionable error messages following the principle:
    "Errors should tell HOW to fix, not just WHAT failed."

    Attributes:
        code: Error code for categorization
        message: Human-readable error message
        suggestion: Actionable suggestion for fixing the error
        details: Additional context for debugging

    Example:
        class MyServiceError(ApplicationError):
            def __init__(self, message: str, **kwargs):
                super().__init__(message, code="MY_SERVICE_ERROR", **kwargs)
    """

    def __init__(
        self,
        message: str,
        code: str = "APPLICATION_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f"\n  Suggestion: {self.suggestion}"
        return result

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for API responses."""
        return {
            "code": self.code,
            "message": self.message,
            "suggestion": self.suggestion,
            "details": self.details,
        }
