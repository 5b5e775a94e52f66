"""Exception types shared by the model, backend and merge subsystems."""

from __future__ import annotations


class SlmergeError(Exception):
    """Base class for every error raised by slmerge."""


class ConfigurationError(SlmergeError, ValueError):
    """Invalid input detected before any model was touched.

    Raised for unresolvable model references, source paths outside the source
    root, malformed model documents and invalid config files.
    """


class CollaboratorError(SlmergeError):
    """Wraps a failed backend operation with context.

    Mutations committed before the failure are left in place.
    """

    def __init__(
        self, operation: str, path: str, cause: Exception | str | None = None
    ) -> None:
        self.operation = operation
        self.path = path
        msg = f"{operation} failed for '{path}'"
        if cause is not None:
            msg += f": {cause}"
        super().__init__(msg)
        if isinstance(cause, Exception):
            self.__cause__ = cause
