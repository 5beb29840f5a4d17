"""Config commands -- view and modify the settings file.

The settings file holds the API base URL and default OAuth2 flow
parameters (:class:`~onecrm.models.Settings`). Environment variables and
command-line options still take precedence over it.
"""

from __future__ import annotations

from typing import Any

import typer

from onecrm.exit_codes import EXIT_INVALID_USAGE
from onecrm.output import error, format_response, info, success


config_app = typer.Typer(no_args_is_help=True)

_SECRET_KEYS = frozenset({"client_secret", "password"})


def _mask(data: dict[str, Any]) -> dict[str, Any]:
    masked: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, dict):
            masked[key] = _mask(value)
        elif key in _SECRET_KEYS and value:
            masked[key] = "********"
        else:
            masked[key] = value
    return masked


def _flatten(data: dict[str, Any], prefix: str = "") -> dict[str, Any]:
    flat: dict[str, Any] = {}
    for key, value in data.items():
        name = f"{prefix}{key}"
        if isinstance(value, dict):
            flat.update(_flatten(value, f"{name}."))
        else:
            flat[name] = value
    return flat


@config_app.command("show")
def config_show() -> None:
    """Show the current settings with secrets masked.

    Example::

        onecrm config show
        onecrm --json config show
    """
    from onecrm.commands.common import handle_errors
    from onecrm.config import get_config_dir, load_settings

    with handle_errors():
        settings = load_settings()
    info(f"Config directory: {get_config_dir()}")
    format_response(_flatten(_mask(settings.model_dump(mode="json"))))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(help="Settings key (dot notation, e.g. 'flow.client_id')."),
    value: str = typer.Argument(help="Value to set."),
) -> None:
    """Set a settings value.

    Example::

        onecrm config set base_url https://crm.example.com/api.php
        onecrm config set flow.client_id abc
        onecrm config set flow.owner_type contact
    """
    from pydantic import ValidationError

    from onecrm.commands.common import handle_errors
    from onecrm.config import load_settings, save_settings
    from onecrm.models import Settings

    with handle_errors():
        settings = load_settings()
    data = settings.model_dump(mode="json")

    keys = key.split(".")
    target = data
    for k in keys[:-1]:
        if k not in target or not isinstance(target[k], dict):
            error(f"Invalid settings key: {key}")
            raise typer.Exit(code=EXIT_INVALID_USAGE)
        target = target[k]

    final_key = keys[-1]
    if final_key not in target or isinstance(target[final_key], dict):
        error(f"Unknown settings key: {key}")
        raise typer.Exit(code=EXIT_INVALID_USAGE)
    target[final_key] = value

    try:
        new_settings = Settings.model_validate(data)
    except ValidationError as exc:
        error(f"Validation error: {exc}")
        raise typer.Exit(code=EXIT_INVALID_USAGE) from None

    save_settings(new_settings)
    shown = "********" if final_key in _SECRET_KEYS else value
    success(f"Set {key} = {shown}")
