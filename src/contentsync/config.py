"""Configuration management with XDG paths, atomic writes, and alias resolution.

This module handles all persistent configuration for contentsync:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.contentsync/`` on macOS and Windows. See :func:`get_config_dir`
  and :func:`get_data_dir`.
* **Global config** -- A single :class:`~contentsync.models.GlobalConfig`
  JSON file storing URL and key aliases, the default concurrency, and
  request settings.
* **Alias resolution** -- :func:`resolve_alias` maps a short name such as
  ``prod`` to the site prefix or write key stored for it.
* **Precedence resolution** -- :func:`resolve_url` and :func:`resolve_key`
  merge CLI flags, environment variables, and aliases.

All file writes use an atomic temp-file-then-rename strategy
(:func:`_atomic_write`).
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Literal, Optional

from contentsync.exceptions import ConfigError
from contentsync.models import GlobalConfig

_APP_NAME = "contentsync"
_CONFIG_FILENAME = "config.json"

URL_ENV_VAR = "CONTENTSYNC_URL"
KEY_ENV_VAR = "CONTENTSYNC_KEY"

AliasKind = Literal["url", "key"]


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/contentsync/`` (default
    ``~/.config/contentsync/``). On macOS/Windows: ``~/.contentsync/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/contentsync/`` (default
    ``~/.local/share/contentsync/``). On macOS/Windows: ``~/.contentsync/logs/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Global config ---


def _config_path() -> Path:
    return get_config_dir() / _CONFIG_FILENAME


def load_config() -> GlobalConfig:
    """Load the global configuration.

    Returns:
        The deserialised :class:`~contentsync.models.GlobalConfig`, or a
        default instance if the file does not exist.

    Raises:
        ConfigError: If the file contains invalid JSON or fails validation.
    """
    path = _config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return GlobalConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid config at {path}: {exc}") from exc


def save_config(config: GlobalConfig) -> None:
    """Persist the global configuration atomically to disk."""
    data = config.model_dump(mode="json")
    _atomic_write(_config_path(), json.dumps(data, indent=2) + "\n")


# --- Alias resolution ---


def resolve_alias(
    kind: AliasKind,
    raw: Optional[str],
    config: Optional[GlobalConfig] = None,
) -> Optional[str]:
    """Resolve *raw* through the ``urls`` or ``keys`` alias table.

    Values that are not a known alias are returned unchanged, so a literal
    URL or key can always be passed where an alias is accepted.

    Args:
        kind: ``"url"`` or ``"key"``.
        raw: Alias name or literal value. ``None`` and empty strings
            resolve to ``None``.
        config: Config to read aliases from; loaded from disk when omitted.
    """
    if not raw:
        return None
    config = config if config is not None else load_config()
    table = config.urls if kind == "url" else config.keys
    return table.get(raw, raw)


def resolve_url(
    cli_url: Optional[str],
    config: Optional[GlobalConfig] = None,
) -> Optional[str]:
    """Resolve the site prefix: CLI flag, then ``$CONTENTSYNC_URL``, then alias lookup.

    Returns ``None`` when nothing is configured; callers report that as a
    :class:`~contentsync.exceptions.ConfigError` event.
    """
    raw = cli_url or os.environ.get(URL_ENV_VAR)
    return resolve_alias("url", raw, config)


def resolve_key(
    cli_key: Optional[str],
    config: Optional[GlobalConfig] = None,
) -> Optional[str]:
    """Resolve the write key: CLI flag, then ``$CONTENTSYNC_KEY``, then alias lookup.

    The resolved value may itself be a credential source descriptor
    (``env:VAR`` or ``file:/path``); see :func:`resolve_credential`.
    """
    raw = cli_key or os.environ.get(KEY_ENV_VAR)
    value = resolve_alias("key", raw, config)
    if value is None:
        return None
    return resolve_credential(value)


def resolve_credential(source: str) -> str:
    """Resolve a credential from its source descriptor.

    Supported formats:
        - ``"env:VAR_NAME"`` -- reads ``os.environ["VAR_NAME"]``
        - ``"file:/path/to/file"`` -- reads file content, stripped of whitespace
        - anything else -- returned as the literal credential

    Raises:
        ConfigError: If the variable is unset or the file can't be read.
    """
    if source.startswith("env:"):
        var_name = source[4:]
        value = os.environ.get(var_name)
        if value is None:
            raise ConfigError(
                f"Environment variable '{var_name}' is not set (source: {source})"
            )
        return value

    if source.startswith("file:"):
        path = Path(source[5:]).expanduser()
        if not path.is_file():
            raise ConfigError(f"Credential file not found: {path} (source: {source})")
        try:
            return path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise ConfigError(f"Cannot read credential file {path}: {exc}") from exc

    return source
