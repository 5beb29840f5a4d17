"""Endpoint commands -- ``me`` and the ``files`` group.

All commands authenticate with a bearer token from ``--token`` or
``ONECRM_ACCESS_TOKEN``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from onecrm.commands.common import handle_errors, require_base_url, require_token
from onecrm.config import ENV_ACCESS_TOKEN
from onecrm.output import format_response, info, print_data, success


files_app = typer.Typer(no_args_is_help=True)

_TOKEN_OPTION = typer.Option(
    None, "--token", "-t", envvar=ENV_ACCESS_TOKEN, help="Bearer access token."
)


def _endpoint_client(ctx: typer.Context, token: Optional[str]):
    from onecrm.endpoints import EndpointClient

    timeout = ctx.obj.get("timeout") if ctx.obj else None
    return EndpointClient(require_base_url(ctx), auth=require_token(token), timeout=timeout)


def me_command(ctx: typer.Context, token: Optional[str] = _TOKEN_OPTION) -> None:
    """Show the user the access token belongs to."""
    with _endpoint_client(ctx, token) as api, handle_errors():
        format_response(api.me().model_dump())


@files_app.command("info")
def files_info(
    ctx: typer.Context,
    model: str = typer.Argument(help="Owning model: Document, DocumentRevision or Note."),
    record_id: str = typer.Argument(help="Record id."),
    token: Optional[str] = _TOKEN_OPTION,
) -> None:
    """Show file metadata of a record."""
    with _endpoint_client(ctx, token) as api, handle_errors():
        format_response(api.files.metadata(model, record_id).model_dump())


@files_app.command("download")
def files_download(
    ctx: typer.Context,
    model: str = typer.Argument(help="Owning model: Document, DocumentRevision or Note."),
    record_id: str = typer.Argument(help="Record id."),
    dest: Path = typer.Option(..., "--dest", "-d", help="Destination file."),
    token: Optional[str] = _TOKEN_OPTION,
) -> None:
    """Download the file attached to a record."""
    written = 0
    with _endpoint_client(ctx, token) as api, handle_errors():
        with api.files.download(model, record_id) as res, open(dest, "wb") as out:
            for chunk in res.iter_bytes():
                out.write(chunk)
                written += len(chunk)
    success(f"Saved {written} bytes to {dest}")


@files_app.command("upload")
def files_upload(
    ctx: typer.Context,
    path: Path = typer.Argument(exists=True, dir_okay=False, help="File to upload."),
    name: Optional[str] = typer.Option(None, help="File name sent to the API (default: base name)."),
    token: Optional[str] = _TOKEN_OPTION,
) -> None:
    """Upload a file and print the temporary file id."""
    filename = name or path.name
    info(f"Uploading {path} as {filename}")
    with _endpoint_client(ctx, token) as api, handle_errors():
        file_id = api.files.upload(filename, open(path, "rb"))
    print_data(file_id)
