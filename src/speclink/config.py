"""Configuration loading with XDG paths and precedence resolution.

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.speclink/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **Global config** -- a single :class:`~speclink.models.GlobalConfig`
  JSON file storing defaults (encoding, output format, link settings).
* **Project config** -- an optional ``./speclink.json`` with the same
  shape, merged over the global config.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables, project-local config, and global config into the
  final effective configuration.
"""

from __future__ import annotations

import json
import os
import platform
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from speclink.exceptions import ConfigError
from speclink.models import GlobalConfig

_APP_NAME = "speclink"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "speclink.json"

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off", ""})


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
    """Return the configuration directory (not created).

    On Linux/BSD: ``$XDG_CONFIG_HOME/speclink/`` (default ``~/.config/speclink/``).
    On macOS/Windows: ``~/.speclink/``.
    """
    if _is_xdg_platform():
        return _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    return _fallback_base_dir()


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/speclink/`` (default ``~/.local/share/speclink/``).
    On macOS/Windows: ``~/.speclink/logs/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Config files ---


def _read_json(path: Path, kind: str) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Invalid {kind} config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid {kind} config at {path}: expected a JSON object")
    return data


def load_global_config() -> GlobalConfig:
    """Load the global configuration from the config directory.

    Returns:
        The deserialised :class:`~speclink.models.GlobalConfig`, or a
        default instance when the file does not exist.

    Raises:
        ConfigError: If the file contains invalid JSON or fails validation.
    """
    path = get_config_dir() / _CONFIG_FILENAME
    if not path.is_file():
        return GlobalConfig()
    try:
        return GlobalConfig.model_validate(_read_json(path, "global"))
    except ValidationError as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def load_project_config() -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``./speclink.json``.

    Returns:
        The parsed JSON object, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file exists but contains invalid JSON.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    return _read_json(path, "project")


def _merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge *overlay* into a copy of *base*."""
    merged = dict(base)
    for key, value in overlay.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _env_bool(name: str) -> Optional[bool]:
    value = os.environ.get(name)
    if value is None:
        return None
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigError(f"Invalid boolean in {name}: {value!r}")


# --- Precedence resolution ---


def resolve_config(
    cli_encoding: Optional[str] = None,
    cli_format: Optional[str] = None,
    cli_strict: Optional[bool] = None,
    cli_description: Optional[str] = None,
    cli_validate_output: Optional[bool] = None,
) -> GlobalConfig:
    """Resolve config with full precedence chain.

    Precedence (high to low):
        1. CLI flags
        2. Environment variables (``SPECLINK_ENCODING``, ``SPECLINK_FORMAT``,
           ``SPECLINK_STRICT``)
        3. Project config (``./speclink.json``)
        4. User config (``~/.config/speclink/config.json``)
        5. Defaults

    Raises:
        ConfigError: If any layer holds an invalid value.
    """
    # 5 + 4. Global config (fills in defaults automatically)
    data = load_global_config().model_dump()

    # 3. Project-local config
    project = load_project_config()
    if project is not None:
        try:
            data = GlobalConfig.model_validate(_merge(data, project)).model_dump()
        except ValidationError as exc:
            raise ConfigError(f"Invalid project config: {exc}") from exc

    # 2. Environment variables
    env_encoding = os.environ.get("SPECLINK_ENCODING")
    if env_encoding:
        data["encoding"] = env_encoding
    env_format = os.environ.get("SPECLINK_FORMAT")
    if env_format:
        data["output"]["format"] = env_format.lower()
    env_strict = _env_bool("SPECLINK_STRICT")
    if env_strict is not None:
        data["links"]["strict"] = env_strict

    # 1. CLI flags
    if cli_encoding is not None:
        data["encoding"] = cli_encoding
    if cli_format is not None:
        data["output"]["format"] = cli_format
    if cli_strict is not None:
        data["links"]["strict"] = cli_strict
    if cli_description is not None:
        data["links"]["description"] = cli_description
    if cli_validate_output is not None:
        data["validate_output"] = cli_validate_output

    try:
        return GlobalConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
