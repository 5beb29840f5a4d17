"""Helpers shared by the CLI command modules."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator, Optional

import typer

from onecrm.exceptions import APIError, OneCRMError
from onecrm.exit_codes import EXIT_INVALID_USAGE
from onecrm.output import error


@contextmanager
def handle_errors() -> Iterator[None]:
    """Print a :class:`~onecrm.exceptions.OneCRMError` and exit with its code."""
    try:
        yield
    except APIError as exc:
        error(f"HTTP {exc.code}: {exc.body}" if exc.body else f"HTTP {exc.code}")
        raise typer.Exit(code=exc.exit_code) from None
    except OneCRMError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


def require_base_url(ctx: typer.Context) -> str:
    """Resolve the API base URL from ``--base-url``, ``ONECRM_URL`` or settings."""
    from onecrm.config import load_settings, resolve_base_url

    cli_value = ctx.obj.get("base_url") if ctx.obj else None
    with handle_errors():
        url = resolve_base_url(cli_value, load_settings())
    if not url:
        error("No API base URL. Pass --base-url, set ONECRM_URL or run: onecrm config set base_url URL")
        raise typer.Exit(code=EXIT_INVALID_USAGE)
    return url


def build_flow(ctx: typer.Context, **overrides: Optional[Any]):
    """Build an :class:`~onecrm.auth.flow.AuthFlow`: settings file, then
    environment, then the command-line *overrides*."""
    from onecrm.auth.flow import AuthFlow
    from onecrm.config import load_flow_config, load_settings

    url = require_base_url(ctx)
    with handle_errors():
        config = load_flow_config(base=load_settings().flow, **overrides)
    timeout = ctx.obj.get("timeout") if ctx.obj else None
    return AuthFlow(url, config, timeout=timeout)


def require_token(token: Optional[str]):
    """Wrap an access token for use as request auth."""
    from onecrm.auth.oauth2 import OAuth2AccessToken

    if not token:
        error("No access token. Pass --token or set ONECRM_ACCESS_TOKEN (see: onecrm auth token)")
        raise typer.Exit(code=EXIT_INVALID_USAGE)
    return OAuth2AccessToken(access_token=token, token_type="Bearer")
