"""Config commands -- view and edit URL and key aliases.

Provides the ``contentsync config`` sub-command group. Aliases let
``--url prod`` and ``--key prod`` stand in for a full site prefix and a
write key.
"""

from __future__ import annotations

import typer

from contentsync.exit_codes import EXIT_INVALID_USAGE
from contentsync.output import format_response, info, success


config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show(
    show_keys: bool = typer.Option(
        False, "--show-keys", help="Print write keys instead of masking them."
    ),
) -> None:
    """Show the current configuration.

    Write keys are masked unless ``--show-keys`` is given.
    """
    from contentsync.config import get_config_dir, load_config

    config = load_config()
    data = config.model_dump(mode="json")
    if not show_keys:
        data["keys"] = {name: _mask(value) for name, value in data["keys"].items()}

    info(f"Config directory: {get_config_dir()}")
    format_response(data)


@config_app.command("set-url")
def config_set_url(
    name: str = typer.Argument(help="Alias name."),
    url: str = typer.Argument(help="Site prefix, e.g. https://domain.com."),
) -> None:
    """Store a URL alias."""
    from contentsync.config import load_config, save_config

    config = load_config()
    config.urls[name] = url
    save_config(config)
    success(f"Set url {name} = {url}")


@config_app.command("set-key")
def config_set_key(
    name: str = typer.Argument(help="Alias name."),
    key: str = typer.Argument(help="Write key, or a source such as env:VAR or file:/path."),
) -> None:
    """Store a write key alias."""
    from contentsync.config import load_config, save_config

    config = load_config()
    config.keys[name] = key
    save_config(config)
    success(f"Set key {name}")


@config_app.command("unset")
def config_unset(
    name: str = typer.Argument(help="Alias name to remove from both urls and keys."),
) -> None:
    """Remove a URL and key alias."""
    from contentsync.config import load_config, save_config

    config = load_config()
    removed = config.urls.pop(name, None) is not None
    removed = config.keys.pop(name, None) is not None or removed
    if not removed:
        info(f"No alias named {name}")
        raise typer.Exit(code=EXIT_INVALID_USAGE)
    save_config(config)
    success(f"Removed alias {name}")


def _mask(value: str) -> str:
    if value.startswith(("env:", "file:")):
        return value
    return "****" if len(value) <= 4 else f"{value[:2]}****{value[-2:]}"
