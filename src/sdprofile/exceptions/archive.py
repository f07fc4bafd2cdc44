"""Archive-related exceptions.

This module defines exceptions for profile archive errors:
- ArchiveError: Base class for archive errors
- InvalidArchiveError: Container is malformed or incomplete
- ArchiveSaveError: Staging or repackaging failed
"""

from .base import SDProfileError


class ArchiveError(SDProfileError):
    """Profile archive could not be read or written."""

    def __init__(self, user_message: str, path: str | None = None, **kwargs):
        """
        Initialize archive error.

        Args:
            user_message: User-friendly error message
            path: The archive path involved (if known)
        """
        super().__init__(user_message, **kwargs)
        self.path = path


class InvalidArchiveError(ArchiveError):
    """Archive container is missing a required part or cannot be parsed."""

    def __init__(self, reason: str, path: str | None = None, original_error: str | None = None):
        """
        Initialize invalid-archive error.

        Args:
            reason: Which part of the container is missing or broken
            path: Path of the archive being loaded
            original_error: Underlying parse or I/O error message
        """
        tech_msg = reason if path is None else f"{reason} ({path})"
        if original_error:
            tech_msg += f"\nOriginal error: {original_error}"

        super().__init__(
            user_message=reason,
            path=path,
            technical_message=tech_msg,
            recoverable=True,
            recovery_hint="Export the profile again from the Stream Deck application and retry.",
        )
        self.reason = reason


class ArchiveSaveError(ArchiveError):
    """Profile could not be staged or repackaged."""

    def __init__(self, path: str, original_error: str):
        """
        Initialize archive save error.

        Args:
            path: Output path that could not be written
            original_error: Underlying I/O error message
        """
        super().__init__(
            user_message=f"Failed to save profile to {path}",
            path=path,
            technical_message=f"Failed to save profile to {path}: {original_error}",
            recoverable=True,
            recovery_hint="Check that the output folder exists and is writable.",
        )
        self.original_error = original_error
