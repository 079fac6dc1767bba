# This project was developed with assistance from AI tools.
"""Typed failures raised by the application services.

Routes never build error responses for these themselves: ``main.py`` maps
each class to an RFC 7807 response with the matching HTTP status.
"""


class ApplicationValidationError(ValueError):
    """Malformed or policy-violating input (room math, tariffs, uploads)."""


class StateConflictError(Exception):
    """The application is not in the status the requested action needs."""

    def __init__(self, message: str, current_status: str | None = None):
        super().__init__(message)
        self.current_status = current_status


class ActionNotPermittedError(Exception):
    """The caller's role may not perform the requested action."""


class IncompleteDocumentsError(Exception):
    """Documents still await verification."""

    def __init__(self, message: str, pending_count: int = 0, pending_files: list[str] | None = None):
        super().__init__(message)
        self.pending_count = pending_count
        self.pending_files = pending_files or []


class ApplicationNotFoundError(LookupError):
    """No application with the given id is visible to the caller."""


class NumberAllocationError(RuntimeError):
    """Every candidate application number collided with an existing one."""
