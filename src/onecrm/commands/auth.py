"""Auth commands -- run OAuth2 flows against the configured API.

Typical workflows::

    # machine-to-machine
    onecrm auth token --grant client_credentials

    # interactive authorization code flow
    onecrm auth url --state xyz        # open the printed URL in a browser
    onecrm auth token --grant authorization_code --code <code from redirect>
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

import typer

from onecrm.commands.common import build_flow, handle_errors
from onecrm.exit_codes import EXIT_INVALID_USAGE
from onecrm.output import error, format_response, print_data, success


auth_app = typer.Typer(no_args_is_help=True)


class Grant(str, Enum):
    CLIENT_CREDENTIALS = "client_credentials"
    PASSWORD = "password"
    AUTHORIZATION_CODE = "authorization_code"


@auth_app.command("url")
def auth_url(
    ctx: typer.Context,
    client_id: Optional[str] = typer.Option(None, help="OAuth2 client id."),
    redirect_uri: Optional[str] = typer.Option(None, help="Redirect URI registered for the client."),
    state: Optional[str] = typer.Option(None, help="Opaque value echoed back on redirect."),
    owner_type: Optional[str] = typer.Option(None, help="Principal kind: user or contact."),
) -> None:
    """Print the authorization URL for the authorization code flow.

    No request is sent; open the URL in a browser and pass the ``code``
    from the redirect to ``onecrm auth token --grant authorization_code``.
    """
    flow = build_flow(
        ctx,
        client_id=client_id,
        redirect_uri=redirect_uri,
        state=state,
        owner_type=owner_type,
    )
    with handle_errors():
        print_data(flow.init_auth_code())


@auth_app.command("token")
def auth_token(
    ctx: typer.Context,
    grant: Grant = typer.Option(Grant.CLIENT_CREDENTIALS, "--grant", "-g", help="OAuth2 grant type."),
    code: Optional[str] = typer.Option(None, help="Authorization code (authorization_code grant)."),
    client_id: Optional[str] = typer.Option(None, help="OAuth2 client id."),
    client_secret: Optional[str] = typer.Option(None, help="OAuth2 client secret."),
    username: Optional[str] = typer.Option(None, help="Resource owner name (password grant)."),
    password: Optional[str] = typer.Option(None, help="Resource owner password (password grant)."),
    scope: Optional[str] = typer.Option(None, help="Requested scope."),
    redirect_uri: Optional[str] = typer.Option(None, help="Redirect URI (authorization_code grant)."),
    owner_type: Optional[str] = typer.Option(None, help="Principal kind: user or contact."),
) -> None:
    """Obtain an access token and print it.

    Unset options fall back to ``ONECRM_*`` environment variables, then to
    the settings file. Export the printed ``access_token`` as
    ``ONECRM_ACCESS_TOKEN`` to use it with other commands.
    """
    if grant == Grant.AUTHORIZATION_CODE and not code:
        error("--code is required for the authorization_code grant")
        raise typer.Exit(code=EXIT_INVALID_USAGE)

    flow = build_flow(
        ctx,
        client_id=client_id,
        client_secret=client_secret,
        username=username,
        password=password,
        scope=scope,
        redirect_uri=redirect_uri,
        owner_type=owner_type,
    )
    with handle_errors():
        if grant == Grant.AUTHORIZATION_CODE:
            token = flow.finalize_auth_code(code or "")
        elif grant == Grant.PASSWORD:
            token = flow.init_resource_owner()
        else:
            token = flow.init_client_credentials()

    success(f"Obtained {token.token_type or 'access'} token ({grant.value} grant).")
    format_response(token.model_dump())
