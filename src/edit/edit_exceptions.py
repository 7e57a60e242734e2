"""Custom exceptions for edit operations."""

from typing import Any

from edit.edit_types import EditFailureKind


class EditError(Exception):
    """Base exception for edit operations."""

    def __init__(self, message: str, error_details: dict[str, Any] | None = None):
        """
        Initialize the exception.

        Args:
            message: Error message
            error_details: Optional dictionary with detailed error information
        """
        super().__init__(message)
        self.error_details = error_details


class EditParseError(EditError):
    """Raised when an LLM response cannot be parsed at all."""


class EditBlockError(EditError):
    """Base for failures tied to a single edit block."""

    def __init__(
        self,
        message: str,
        kind: EditFailureKind,
        error_details: dict[str, Any] | None = None
    ):
        """
        Initialize the exception.

        Args:
            message: Human-readable failure reason
            kind: Failure classification reported back to the caller
            error_details: Optional dictionary with detailed error information
        """
        super().__init__(message, error_details)
        self.kind = kind


class EditLocateError(EditBlockError):
    """Raised when a search snippet is missing from, or ambiguous in, the document."""


class EditRegexError(EditBlockError):
    """Raised when a regex block has no match, several matches, or an invalid pattern."""


class EditRangeError(EditBlockError):
    """Raised when a line range cannot be interpreted at all."""


class EditSettingsError(EditError):
    """Raised when edit settings are invalid."""
