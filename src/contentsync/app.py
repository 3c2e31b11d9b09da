"""Typer application and CLI entry point for contentsync.

This module wires together the top-level Typer application and registers
the built-in sub-commands (``import``, ``lint``, ``lint-schema`` and the
``config`` group).

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs signal handlers, configures logging and
invokes the Typer app. Unhandled exceptions are written to a crash log
under the data directory.

See Also:
    :mod:`contentsync.config`: URL and key alias resolution.
    :mod:`contentsync.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from typing import Any

import typer

from contentsync import __version__
from contentsync.commands.config import config_app
from contentsync.commands.imports import import_command
from contentsync.commands.lint import lint_command, lint_schema_command
from contentsync.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="contentsync",
    help="Import content into, and lint content on, a component store.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command("import")(import_command)
app.command("lint")(lint_command)
app.command("lint-schema")(lint_schema_command)
app.add_typer(config_app, name="config", help="URL and key alias management.")


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"contentsync {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(
        False, "--json", help="One JSON object per result line."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Initialises the global :class:`~contentsync.output.OutputManager` from
    CLI flags and sets the log level of the ``contentsync`` logger.
    """
    from contentsync.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(
        OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose)
    )
    logging.getLogger("contentsync").setLevel(
        logging.DEBUG if verbose else logging.WARNING
    )


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _setup_logging() -> None:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    logger = logging.getLogger("contentsync")
    logger.addHandler(handler)
    logger.setLevel(logging.WARNING)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from contentsync.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``contentsync`` console script.

    Unhandled :class:`~contentsync.exceptions.ContentSyncError` instances
    cause a clean exit with the error's ``exit_code``. All other exceptions
    produce a crash log and a generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    _setup_logging()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from contentsync.exceptions import ContentSyncError
        from contentsync.output import error

        if isinstance(exc, ContentSyncError):
            error(exc.message)
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
