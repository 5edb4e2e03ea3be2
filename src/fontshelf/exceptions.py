"""Exception hierarchy for fontshelf.

Every request-level error carries the HTTP status it maps to. The
version-control warning never leaves the git sync step.
"""

from __future__ import annotations


class FontShelfError(Exception):
    """Base exception for all fontshelf errors."""

    status = 500


class ValidationError(FontShelfError):
    """Missing or malformed request input."""

    status = 400


class AuthError(FontShelfError):
    """Missing or invalid bearer token on a protected route."""

    status = 401


class NotFoundError(FontShelfError):
    """A referenced font folder or file does not exist."""

    status = 404


class ProcessingError(FontShelfError):
    """The external subsetting tool failed."""

    def __init__(self, message: str, stdout: str = "", stderr: str = "") -> None:
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(message)

    def __str__(self) -> str:
        base = super().__str__()
        if self.stderr:
            return f"{base}\nSTDERR: {self.stderr}"
        return base


class StorageError(FontShelfError):
    """A filesystem operation failed."""

    def __init__(self, action: str, path: str, reason: str) -> None:
        self.action = action
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to {action} '{path}': {reason}")


class VersionControlWarning(Exception):
    """A git step failed after the filesystem change already succeeded."""
