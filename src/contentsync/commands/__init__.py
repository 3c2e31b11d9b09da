"""Built-in CLI sub-commands for contentsync.

This package groups the Typer command modules that form the CLI:

* :mod:`~contentsync.commands.imports` -- ``import`` bootstrap or dispatch data.
* :mod:`~contentsync.commands.lint` -- ``lint`` a URL and ``lint-schema`` a file.
* :mod:`~contentsync.commands.config` -- view and edit URL/key aliases.
* :mod:`~contentsync.commands.report` -- shared event printing and input reading.

Each module either exports a :class:`typer.Typer` sub-application (for
the multi-command ``config`` group) or a plain callback function
registered directly on the root app.
"""
