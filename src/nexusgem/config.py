"""Configuration paths, atomic JSON persistence, and option precedence.

This module handles the file-level side of nexusgem's configuration:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.nexusgem/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **Mapping files** -- :func:`load_mapping` and :func:`save_mapping` read
  and write a whole JSON object. The credential stores in
  :mod:`nexusgem.auth.credential_store` build their per-scope views on top
  of these two functions.
* **Precedence resolution** -- :func:`resolve_options` merges CLI flags,
  environment variables, and defaults into
  :class:`~nexusgem.models.SetupOptions`.

All file writes use an atomic temp-file-then-rename strategy
(:func:`_atomic_write`) with ``0o600`` permissions, because the config file
holds credentials.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from nexusgem.exceptions import ConfigError
from nexusgem.models import SetupOptions

_APP_NAME = "nexusgem"
_CONFIG_FILENAME = "nexus.json"

ENV_CONFIG = "NEXUSGEM_CONFIG"
ENV_REPO = "NEXUSGEM_REPO"
ENV_SECRETS = "NEXUSGEM_SECRETS"


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

    On Linux/BSD: ``$XDG_CONFIG_HOME/nexusgem/`` (default ``~/.config/nexusgem/``).
    On macOS/Windows: ``~/.nexusgem/``.
    """
    if _is_xdg_platform():
        base = _xdg_base("XDG_CONFIG_HOME", (".config",))
        path = base / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/nexusgem/`` (default ``~/.local/share/nexusgem/``).
    On macOS/Windows: ``~/.nexusgem/data/``.
    """
    if _is_xdg_platform():
        base = _xdg_base("XDG_DATA_HOME", (".local", "share"))
        path = base / _APP_NAME
    else:
        path = _fallback_base_dir() / "data"
    path.mkdir(parents=True, exist_ok=True)
    return path


def default_config_path() -> Path:
    """Return the default config file location (``<config_dir>/nexus.json``)."""
    return get_config_dir() / _CONFIG_FILENAME


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. Permissions are
    restricted to the owner before any content is written.
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
        os.chmod(tmp_path, 0o600)
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close below
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


# --- Mapping files ---


def load_mapping(path: Path) -> dict[str, Any]:
    """Load a whole JSON object from *path*.

    Args:
        path: The file to read.

    Returns:
        The parsed mapping, or an empty dict when the file does not exist
        or is empty.

    Raises:
        ConfigError: If the file exists but is not valid JSON or does not
            contain a JSON object.
    """
    if not path.is_file():
        return {}
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid config file at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid config file at {path}: expected a JSON object")
    return data


def save_mapping(path: Path, data: dict[str, Any]) -> None:
    """Persist a whole JSON object atomically to *path*."""
    _atomic_write(path, json.dumps(data, indent=2, sort_keys=True) + "\n")


# --- Precedence resolution ---


def _env_path(var: str) -> Optional[Path]:
    value = os.environ.get(var)
    if value:
        return Path(value).expanduser()
    return None


def resolve_options(
    cli_config: Optional[Path] = None,
    cli_repo: Optional[str] = None,
    cli_secrets: Optional[Path] = None,
    password: bool = False,
    encrypt: bool = False,
    clear: bool = False,
) -> SetupOptions:
    """Resolve the effective :class:`~nexusgem.models.SetupOptions`.

    Precedence (high to low) for the file and scope settings:
        1. CLI flags (``--nexus-config``, ``--repo``, ``--secrets``)
        2. Environment variables (``NEXUSGEM_CONFIG``, ``NEXUSGEM_REPO``,
           ``NEXUSGEM_SECRETS``)
        3. Defaults (:func:`default_config_path`, no scope, no secrets file)

    The boolean behaviour flags only come from the command line.
    """
    config_path = cli_config or _env_path(ENV_CONFIG) or default_config_path()
    repo = cli_repo if cli_repo is not None else (os.environ.get(ENV_REPO) or None)
    secrets_path = cli_secrets or _env_path(ENV_SECRETS)

    return SetupOptions(
        config_path=Path(config_path).expanduser().absolute(),
        repo=repo,
        secrets_path=Path(secrets_path).expanduser().absolute() if secrets_path else None,
        password=password,
        encrypt=encrypt,
        clear=clear,
    )
