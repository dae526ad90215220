# progress/exceptions.py
"""Errors raised by the progress stores."""


class ProgressError(Exception):
    """Base exception for progress store operations."""


class ValidationFailure(ProgressError):
    """Input rejected before any mutation; correctable by the client."""


class InvalidIdentity(ValidationFailure):
    """Malformed or out-of-range word identity."""


class InvalidUpdate(ValidationFailure):
    """Flag update payload has unknown names or non-boolean values."""


class InvalidInput(ValidationFailure):
    """Payload has the wrong shape or type."""


class PersistenceFailure(ProgressError):
    """Durable document could not be written."""

    def __init__(self, path, cause: Exception) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"failed to save {path.name}")
