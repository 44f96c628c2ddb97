"""Exceptions raised by the URL shortener core.

Validation errors subclass ValueError so callers that only care about bad
input can keep catching ValueError.
"""


class ShortenerError(Exception):
    """Base class for URL shortener errors."""


class ValidationError(ShortenerError, ValueError):
    """Raised when a submitted URL is rejected."""


class EmptyURLError(ValidationError):
    """Raised when no URL was submitted."""

    def __init__(self, message: str = "URL is required"):
        super().__init__(message)


class InvalidURLError(ValidationError):
    """Raised when the input is not an absolute http(s) URL."""

    def __init__(self, message: str = "please provide a valid URL"):
        super().__init__(message)


class AlreadyExistsError(ShortenerError):
    """Raised by a store when the short code is already taken."""

    def __init__(self, code: str):
        super().__init__(f"Short code '{code}' already exists")
        self.code = code


class GenerationExhaustedError(ShortenerError):
    """Raised when no free short code could be produced."""


class NotFoundError(ShortenerError):
    """Raised when a short code does not resolve to a link."""

    def __init__(self, code: str):
        super().__init__(f"Short code '{code}' not found")
        self.code = code


class StoreError(ShortenerError):
    """Raised when the backing store fails (I/O, connectivity)."""
