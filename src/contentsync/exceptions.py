"""Exception hierarchy for contentsync.

All exceptions inherit from :class:`ContentSyncError`, which carries an
``exit_code`` attribute mapped to a constant from
:mod:`contentsync.exit_codes` and optional ``details`` text.

Exceptions never cross a component boundary: the import and lint
operations catch them at their entry point and convert them to a single
``error`` :class:`~contentsync.models.ResultEvent` via
:meth:`ContentSyncError.to_event`. The top-level handler in
:func:`contentsync.app.main` only sees errors raised while the CLI itself
is being set up (bad config file, unreadable source).

Subclass hierarchy::

    ContentSyncError (exit 1)
    +-- InvalidUsageError    (exit 2)
    +-- ConfigError          (exit 1)
    +-- FormatError          (exit 7)
    |   +-- FormatMismatchError (exit 7)
    +-- NetworkError         (exit 6)
    +-- ValidationError      (exit 8)
"""

from __future__ import annotations

from typing import Optional

from contentsync.exit_codes import (
    EXIT_CONNECTION_ERROR,
    EXIT_FORMAT_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_RESULT_ERRORS,
)
from contentsync.models import ResultEvent


class ContentSyncError(Exception):
    """Base exception for all contentsync errors.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
        details: Optional supporting text (offending snippet, remediation
            hint) carried into the result event.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(
        self,
        message: str,
        exit_code: Optional[int] = None,
        details: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details
        if exit_code is not None:
            self.exit_code = exit_code

    def to_event(self) -> ResultEvent:
        """Convert this error into an ``error`` result event."""
        return ResultEvent.error(self.message, self.details)


class InvalidUsageError(ContentSyncError):
    """Raised for invalid CLI arguments or missing required parameters."""

    exit_code = EXIT_INVALID_USAGE


class ConfigError(ContentSyncError):
    """Raised when no base URL can be resolved or the config file is invalid."""

    exit_code = EXIT_GENERIC_FAILURE


class FormatError(ContentSyncError):
    """Raised when an import source or schema has a JSON/YAML syntax error."""

    exit_code = EXIT_FORMAT_ERROR


class FormatMismatchError(FormatError):
    """Raised when the detected document shape does not match the import mode."""


class NetworkError(ContentSyncError):
    """Raised on a per-URL read or write failure."""

    exit_code = EXIT_CONNECTION_ERROR


class ValidationError(ContentSyncError):
    """Raised for schema lint violations."""

    exit_code = EXIT_RESULT_ERRORS
