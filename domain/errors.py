from __future__ import annotations


class DomainError(Exception):
    """Base exception for expense tracker errors."""


class StorageError(DomainError):
    """Raised when a storage medium fails.

    Covers unreadable or corrupt files, refused connections and constraint
    violations. A lookup miss is never a ``StorageError``.
    """

    def __init__(self, message: str, *, backend: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.backend = backend

    def __str__(self) -> str:
        cause = self.__cause__
        prefix = f"[{self.backend}] " if self.backend else ""
        if cause is not None:
            return f"{prefix}{self.message} (caused by {type(cause).__name__}: {cause})"
        return f"{prefix}{self.message}"
