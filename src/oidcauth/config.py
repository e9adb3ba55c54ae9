"""Settings management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for oidcauth:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.oidcauth/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **Settings file** -- a single :class:`~oidcauth.models.Settings` document
  holding the provider table and strategy defaults. JSON by default; a
  ``.yaml``/``.yml`` path is read with PyYAML.
* **Precedence resolution** -- :func:`resolve_settings` layers CLI flags and
  environment variables over the file.
* **Credential resolution** -- :func:`resolve_credential` reads client
  secrets from env vars or files so they never live in the settings file.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

import yaml

from oidcauth.exceptions import SettingsError
from oidcauth.models import Settings

_APP_NAME = "oidcauth"
_SETTINGS_FILENAME = "config.json"

ENV_CONFIG = "OIDCAUTH_CONFIG"
ENV_BASE_URL = "OIDCAUTH_BASE_URL"
ENV_DEFAULT_PROVIDER = "OIDCAUTH_DEFAULT_PROVIDER"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
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

    On Linux/BSD: ``$XDG_CONFIG_HOME/oidcauth/`` (default ``~/.config/oidcauth/``).
    On macOS/Windows: ``~/.oidcauth/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/oidcauth/`` (default ``~/.local/share/oidcauth/``).
    On macOS/Windows: ``~/.oidcauth/data/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "data"
    path.mkdir(parents=True, exist_ok=True)
    return path


def default_settings_path() -> Path:
    return get_config_dir() / _SETTINGS_FILENAME


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file lives in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. On any failure the
    temp file is removed and the original left untouched.
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


# --- Settings file ---


def _is_yaml(path: Path) -> bool:
    return path.suffix.lower() in (".yaml", ".yml")


def _parse_settings_text(path: Path, text: str) -> dict[str, Any]:
    if _is_yaml(path):
        data = yaml.safe_load(text)
    else:
        data = json.loads(text)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise SettingsError(f"Settings at {path} must be a mapping, got {type(data).__name__}")
    return data


def load_settings(path: Optional[Path] = None) -> Settings:
    """Load settings from *path* (default: the XDG config file).

    Returns:
        The deserialised :class:`~oidcauth.models.Settings`. A missing
        default file yields default settings; a missing explicit path is an
        error.

    Raises:
        SettingsError: If the file is unreadable, malformed, or fails
            Pydantic validation.
    """
    explicit = path is not None
    path = path if path is not None else default_settings_path()
    if not path.is_file():
        if explicit:
            raise SettingsError(f"Settings file not found: {path}")
        return Settings()
    try:
        text = path.read_text(encoding="utf-8")
        data = _parse_settings_text(path, text)
        return Settings.model_validate(data)
    except (json.JSONDecodeError, yaml.YAMLError, ValueError) as exc:
        raise SettingsError(f"Invalid settings at {path}: {exc}") from exc
    except OSError as exc:
        raise SettingsError(f"Cannot read settings at {path}: {exc}") from exc


def save_settings(settings: Settings, path: Optional[Path] = None) -> Path:
    """Persist *settings* atomically and return the path written.

    YAML paths are written as YAML, everything else as indented JSON.
    """
    path = path if path is not None else default_settings_path()
    data = settings.model_dump(mode="json", exclude_none=True)
    if _is_yaml(path):
        text = yaml.safe_dump(data, sort_keys=False)
    else:
        text = json.dumps(data, indent=2) + "\n"
    _atomic_write(path, text)
    return path


# --- Precedence resolution ---


def settings_path(cli_config: Optional[str] = None) -> Path:
    """Return the settings path after applying CLI and environment overrides."""
    if cli_config:
        return Path(cli_config).expanduser()
    env_config = os.environ.get(ENV_CONFIG)
    if env_config:
        return Path(env_config).expanduser()
    return default_settings_path()


def resolve_settings(
    cli_config: Optional[str] = None,
    cli_base_url: Optional[str] = None,
) -> Settings:
    """Resolve settings with the full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_config``, ``cli_base_url``)
        2. Environment variables (``OIDCAUTH_CONFIG``, ``OIDCAUTH_BASE_URL``,
           ``OIDCAUTH_DEFAULT_PROVIDER``)
        3. Settings file
        4. Defaults
    """
    explicit = bool(cli_config or os.environ.get(ENV_CONFIG))
    path = settings_path(cli_config)
    settings = load_settings(path if explicit else None)

    env_base_url = os.environ.get(ENV_BASE_URL)
    if cli_base_url is not None:
        settings.base_url = cli_base_url
    elif env_base_url:
        settings.base_url = env_base_url

    env_provider = os.environ.get(ENV_DEFAULT_PROVIDER)
    if env_provider:
        settings.default_provider = env_provider

    return settings


# --- Credential source resolution ---


def resolve_credential(source: str) -> str:
    """Resolve a secret from its source descriptor.

    Supported formats:
        - ``"env:VAR_NAME"`` -- reads ``os.environ["VAR_NAME"]``
        - ``"file:/path/to/file"`` -- reads file content, stripped of whitespace

    Raises:
        SettingsError: If the source can't be resolved.
    """
    if source.startswith("env:"):
        var_name = source[4:]
        value = os.environ.get(var_name)
        if value is None:
            raise SettingsError(
                f"Environment variable '{var_name}' is not set (source: {source})"
            )
        return value

    if source.startswith("file:"):
        path = Path(source[5:]).expanduser()
        if not path.is_file():
            raise SettingsError(f"Credential file not found: {path} (source: {source})")
        try:
            return path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise SettingsError(f"Cannot read credential file {path}: {exc}") from exc

    raise SettingsError(f"Unknown credential source format: {source}")
