"""Error hierarchy for storage operations."""

from __future__ import annotations


class StorageError(Exception):
    """Base exception for all provider errors.

    ``os_error`` is the filesystem error that caused this one, if any.
    ``cleanup_error`` is set when removing a partial file failed while
    recovering from this error.
    """

    def __init__(
        self,
        message: str,
        details: dict[str, str] | None = None,
        os_error: OSError | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.os_error = os_error
        self.cleanup_error: OSError | None = None


class UnsupportedScheme(StorageError):
    """Raised when a locator's scheme is not handled by this provider."""
    pass


class InvalidLocator(StorageError):
    """Raised when a locator is malformed or empty."""
    pass


class PathOutsideBaseDirectory(InvalidLocator):
    """Raised when a locator resolves outside the base directory."""
    pass


class NotFound(StorageError):
    """Raised when the target file does not exist."""
    pass


class AccessDenied(StorageError):
    """Raised on permission faults."""
    pass


class ReadFailed(StorageError):
    """Raised when reading a file fails."""
    pass


class WriteFailed(StorageError):
    """Raised when writing a file fails. Partial output is removed."""
    pass


class InvalidPlacement(WriteFailed):
    """Raised when placement options can't be validated."""
    pass


class DirectoryCreateFailed(StorageError):
    """Raised when the parent directories of a target cannot be created."""
    pass


class DeleteFailed(StorageError):
    """Raised when removing a file fails for a reason other than it being gone."""
    pass
