# recipe_matcher/errors.py
"""
Error taxonomy for the matching core.

Every error carries the HTTP status the API layer answers with; handlers in
main.py render them as ``{"error": message}``.
"""
from typing import Optional


class RecipeMatcherError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInputError(RecipeMatcherError):
    """Missing or malformed request fields."""

    status_code = 400


class DegenerateScoreError(InvalidInputError):
    """Scoring against an empty recipe ingredient list."""


class InvalidFilterError(RecipeMatcherError):
    """Candidate retrieval invoked without a selector."""

    status_code = 400


class UnauthenticatedError(RecipeMatcherError):
    status_code = 401


class StorageError(RecipeMatcherError):
    """A read from the pantry or recipe store failed."""

    status_code = 500

    def __init__(
        self, message: str, operation: Optional[str] = None, cause: Optional[BaseException] = None
    ):
        super().__init__(message)
        self.operation = operation
        self.cause = cause


class SupabaseClientNotInitialized(StorageError):
    """Raised when the supabase client is not available at runtime."""

    def __init__(self, msg: str, operation: Optional[str] = None):
        super().__init__(msg, operation=operation)
