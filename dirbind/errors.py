"""Error types.

Directory providers raise `NamingFault` subclasses. Callers of the naming
client only ever see `DirectoryError` (and its subclasses), which keeps the
attempted name and the provider's original exception as `cause`.
"""

from __future__ import annotations

from typing import Any


class NamingFault(Exception):
    """Native failure reported by a directory provider."""

    def __init__(self, message: str, name: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.name = name


class NameNotFound(NamingFault):
    """Nothing is bound at the requested name."""


class NameAlreadyBound(NamingFault):
    pass


class NotAContext(NamingFault):
    """An intermediate segment resolved to a plain value, not a context."""


class InvalidNameError(NamingFault):
    pass


class DirectoryError(Exception):
    """Uniform error raised by the naming client."""

    def __init__(self, message: str, name: Any = None, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.name = name
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        if self.name is None:
            return self.message
        return f"{self.message} [{self.name}]"


class NameParseError(DirectoryError):
    pass


class IntermediateLookupError(DirectoryError):
    pass


class IntermediateCreateError(DirectoryError):
    pass


class LeafBindError(DirectoryError):
    pass


class DirectoryLookupError(DirectoryError):
    pass


class ContextUnavailableError(DirectoryError):
    """The root context could not be obtained from the configuration."""
