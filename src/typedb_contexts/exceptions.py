"""Exceptions raised by the context lifecycle controller."""

from typing import Iterable


class ContextError(Exception):
    """Base class for context lifecycle errors."""


class ContextNotFoundError(ContextError):
    """Requested context name is absent from the catalog."""

    def __init__(self, name: str, available: Iterable[str] = ()):
        self.name = name
        self.available = list(available)
        super().__init__(
            f"Context not found: {name}. "
            f"Available contexts: {', '.join(self.available) or 'none'}"
        )


class NoContextLoadedError(ContextError):
    """Reset requested while no context is current."""

    def __init__(self, message: str = "No context loaded to reset"):
        super().__init__(message)


class DatabaseOperationFailed(ContextError):
    """
    A database collaborator call failed while creating, populating or
    activating a context database.

    str() of this error is the underlying message, unchanged, so that it
    matches what the controller records as its last error.
    """

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        database: str | None = None,
    ):
        self.message = message
        self.operation = operation
        self.database = database
        super().__init__(message)


class SeedStatementWarning(ContextError):
    """
    A single seed statement failed.

    Raised and caught inside the controller's seed loop; it is logged and
    counted, never propagated to the caller.
    """

    def __init__(self, statement: str, cause: BaseException):
        self.statement = statement
        self.cause = cause
        super().__init__(f"Seed statement failed: {cause}")
