"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~contentsync.exceptions.ContentSyncError` subclass.
CI scripts can inspect the exit code to tell a broken bootstrap file apart
from a content graph that merely has missing nodes.

Example::

    $ contentsync lint http://domain.com/_pages/index
    $ echo $?
    8   # EXIT_RESULT_ERRORS -- at least one node could not be read
"""

EXIT_SUCCESS = 0
"""The command completed successfully and produced no error events."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred (also used for configuration problems)."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

EXIT_FORMAT_ERROR = 7
"""The import source could not be parsed, or was supplied in the wrong mode."""

EXIT_RESULT_ERRORS = 8
"""The run completed but reported one or more ``error`` result events."""
