"""Configuration loading with XDG paths, atomic writes and precedence resolution.

This module is the only place that reads the environment or the settings
file. The library core (:class:`~onecrm.client.Client`,
:class:`~onecrm.auth.flow.AuthFlow`) receives fully resolved values.

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.onecrm/`` on macOS and Windows. See :func:`get_config_dir`.
* **Settings file** -- a single :class:`~onecrm.models.Settings` JSON file,
  managed via :func:`load_settings` and :func:`save_settings`.
* **Flow configuration** -- :func:`load_flow_config` resolves OAuth2
  parameters once: defaults, then the settings file, then ``ONECRM_*``
  environment variables, then explicit overrides.

All file writes use an atomic temp-file-then-rename strategy
(:func:`_atomic_write`).
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Mapping, Optional

from pydantic import ValidationError

from onecrm.exceptions import ConfigError
from onecrm.models import FlowConfig, Settings

_APP_NAME = "onecrm"
_CONFIG_FILENAME = "config.json"

ENV_URL = "ONECRM_URL"
ENV_ACCESS_TOKEN = "ONECRM_ACCESS_TOKEN"

# FlowConfig field -> environment variable
FLOW_ENV_VARS: dict[str, str] = {
    "client_id": "ONECRM_CLIENT_ID",
    "client_secret": "ONECRM_CLIENT_SECRET",
    "redirect_uri": "ONECRM_REDIRECT_URI",
    "username": "ONECRM_USERNAME",
    "password": "ONECRM_PASSWORD",
}


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True on platforms following the XDG Base Directory spec (Linux/BSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/onecrm/`` (default ``~/.config/onecrm/``).
    On macOS/Windows: ``~/.onecrm/``.
    """
    if _is_xdg_platform():
        env_value = os.environ.get("XDG_CONFIG_HOME", "")
        base = Path(env_value) if env_value else Path.home() / ".config"
        path = base / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}"
    path.mkdir(parents=True, exist_ok=True)
    return path


def settings_path() -> Path:
    return get_config_dir() / _CONFIG_FILENAME


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write *data* to *path* atomically using a temp file in the same directory."""
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


def load_settings() -> Settings:
    """Load the settings file.

    Returns:
        The validated :class:`~onecrm.models.Settings`, or defaults when
        the file does not exist.

    Raises:
        ConfigError: If the file contains invalid JSON or fails validation.
    """
    path = settings_path()
    if not path.is_file():
        return Settings()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return Settings.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid settings at {path}: {exc}") from exc


def save_settings(settings: Settings) -> None:
    """Persist *settings* atomically. Secrets are stored as given."""
    data = settings.model_dump(mode="json")
    _atomic_write(settings_path(), json.dumps(data, indent=2) + "\n")


# --- Precedence resolution ---


def load_flow_config(
    environ: Optional[Mapping[str, str]] = None,
    base: Optional[FlowConfig] = None,
    **overrides: Any,
) -> FlowConfig:
    """Resolve OAuth2 flow parameters once.

    Precedence (high to low):
        1. *overrides* whose value is not ``None``
        2. ``ONECRM_CLIENT_ID``, ``ONECRM_CLIENT_SECRET``,
           ``ONECRM_REDIRECT_URI``, ``ONECRM_USERNAME``, ``ONECRM_PASSWORD``
           (set but empty counts as set)
        3. *base*, usually ``load_settings().flow``
        4. :class:`~onecrm.models.FlowConfig` defaults
           (``scope="profile"``, ``owner_type="user"``)

    Args:
        environ: Environment mapping; ``os.environ`` when omitted.
        base: Lower-precedence configuration to start from.
        **overrides: Explicit values, e.g. ``client_id="abc"``.

    Returns:
        A frozen :class:`~onecrm.models.FlowConfig`.

    Raises:
        ConfigError: If an override names an unknown field or fails
            validation.
    """
    env = os.environ if environ is None else environ
    values: dict[str, Any] = (base or FlowConfig()).model_dump()

    for field_name, var in FLOW_ENV_VARS.items():
        if var in env:
            values[field_name] = env[var]

    unknown = sorted(set(overrides) - set(FlowConfig.model_fields))
    if unknown:
        raise ConfigError(f"Unknown flow option(s): {', '.join(unknown)}")
    for key, value in overrides.items():
        if value is not None:
            values[key] = value

    try:
        return FlowConfig.model_validate(values)
    except ValidationError as exc:
        raise ConfigError(f"Invalid flow configuration: {exc}") from exc


def resolve_base_url(
    cli_value: Optional[str] = None,
    settings: Optional[Settings] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Optional[str]:
    """Resolve the API base URL: CLI flag, then ``ONECRM_URL``, then settings."""
    if cli_value:
        return cli_value
    env = os.environ if environ is None else environ
    if env.get(ENV_URL):
        return env[ENV_URL]
    if settings is not None:
        return settings.base_url
    return None
