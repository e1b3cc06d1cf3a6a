# app/core/exceptions.py

"""
Application error types that are not plain `HTTPException`s.

Authentication and permission failures are raised directly as `HTTPException`
(401/403) from the guards in `app.core.dependencies`. The types here come from the
storage layer and the import pipeline, which must not depend on FastAPI, and
are translated to HTTP responses by the routers or the handlers in `app.main`.
"""

from typing import Any, List, Optional


class StorageError(Exception):
    """Base class for persistence failures."""


class NotFoundError(StorageError):
    """Raised by `update_*` storage operations when no row matches the id."""

    def __init__(self, entity: str, id: Any):
        self.entity = entity
        self.id = id
        super().__init__(f"{entity} not found")


class ValidationError(Exception):
    """
    Malformed or missing input detected outside of request-body parsing
    (e.g. an unreadable import file). Mapped to 400.
    """

    def __init__(self, message: str, errors: Optional[List[Any]] = None):
        self.message = message
        self.errors = errors or []
        super().__init__(message)


class ConflictError(StorageError):
    """A write violated a uniqueness or foreign-key constraint. Mapped to 400."""
