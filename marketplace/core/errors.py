"""
Domain errors and their HTTP mapping.
Services raise these; handlers registered in main.py turn them into JSON responses.
"""

from typing import Any


class MarketplaceError(Exception):
    """Base exception for the marketplace backend."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_body(self) -> dict[str, Any]:
        return {"message": self.message}


class ValidationError(MarketplaceError):
    """Malformed or out-of-range input. Carries every violated field."""

    status_code = 400
    default_message = "Validation failed"

    def __init__(self, errors: list[dict[str, str]], message: str | None = None):
        super().__init__(message)
        self.errors = errors

    @classmethod
    def single(cls, field: str, message: str) -> "ValidationError":
        return cls([{"field": field, "message": message}])

    def to_body(self) -> dict[str, Any]:
        return {"message": self.message, "errors": self.errors}


class AuthenticationError(MarketplaceError):
    status_code = 401
    default_message = "Not authenticated"


class AuthorizationError(MarketplaceError):
    status_code = 403
    default_message = "You are not authorized to modify this product"


class NotFoundError(MarketplaceError):
    status_code = 404
    default_message = "Not found"


class TooManyFilesError(MarketplaceError):
    status_code = 400
    default_message = "Too many files"


class PayloadTooLargeError(MarketplaceError):
    status_code = 413
    default_message = "File too large"


class DependencyError(MarketplaceError):
    """Backing store unreachable or write failed. Never shown verbatim to callers."""

    status_code = 500
