"""Recon-specific exception hierarchy.

Every error carries the HTTP status and the machine-readable ``error``
string the API layer renders, so route handlers can let these propagate
and rely on the app-level exception handlers for formatting.
"""

from __future__ import annotations

from typing import Any


class ReconError(Exception):
    """Base exception for all engine errors.

    Attributes:
        status_code: HTTP status the API layer maps this error to.
        error: Short machine-readable error label.
    """

    status_code: int = 500
    error: str = "Internal error"

    def __init__(self, message: str = "", *, error: str | None = None) -> None:
        if error is not None:
            self.error = error
        super().__init__(message or self.error)

    @property
    def message(self) -> str:
        return str(self)


class ValidationFailedError(ReconError):
    """Raised when a request is malformed: bad shape, file type/size, or missing inputs.

    Attributes:
        details: Structured detail entries, e.g. ``{"message": ..., "files": [...]}``.
    """

    status_code = 400
    error = "Validation failed"

    def __init__(self, message: str, *, details: list[dict[str, Any]] | None = None) -> None:
        super().__init__(message)
        self.details = details if details is not None else [{"message": message}]


class NotFoundError(ReconError):
    """Raised when a collection or comparison id does not exist."""

    status_code = 404
    error = "Not found"


class CollectionNotFoundError(NotFoundError):
    error = "Collection not found"

    def __init__(self, collection_id: int) -> None:
        self.collection_id = collection_id
        super().__init__(f"Collection {collection_id} does not exist")


class ComparisonNotFoundError(NotFoundError):
    error = "Comparison not found"

    def __init__(self, comparison_id: int) -> None:
        self.comparison_id = comparison_id
        super().__init__(f"Comparison {comparison_id} does not exist")


class DuplicateCollectionError(ReconError):
    """Raised when a collection name violates the storage uniqueness constraint."""

    status_code = 409
    error = "A collection with this name already exists"

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Collection name {name!r} is already taken")


class ConfigurationError(ReconError):
    """Raised when a required setting (e.g. an external API credential) is missing."""

    status_code = 500


class ParseError(ReconError):
    """Raised by the file parser when a whole document cannot be read."""

    status_code = 500
    error = "Failed to parse file"


class ThreadFetchError(ReconError):
    """Raised when the root post of a social thread cannot be fetched.

    The upstream HTTP status is passed through to the caller.
    """

    error = "Failed to fetch tweet"

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        super().__init__(message)


class AuthenticationError(ReconError):
    """Raised when an engine route is called without an API key."""

    status_code = 401
    error = "Unauthorized"


class PermissionDeniedError(ReconError):
    """Raised when the supplied API key is not recognised."""

    status_code = 403
    error = "Forbidden"
