"""Typer application and CLI entry point for onecrm.

This module wires the top-level Typer application and registers the
built-in sub-commands (``auth``, ``me``, ``files``, ``config``).

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs a signal handler, invokes the Typer app and
turns library exceptions into exit codes. Unexpected exceptions are written
to a crash log under the config directory.

See Also:
    :mod:`onecrm.config`: Settings and environment resolution.
    :mod:`onecrm.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from onecrm import __version__
from onecrm.commands.api import files_app, me_command
from onecrm.commands.auth import auth_app
from onecrm.commands.config import config_app
from onecrm.exit_codes import EXIT_CANCELLED, EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="onecrm",
    help="Command-line client for the 1CRM REST API.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.add_typer(auth_app, name="auth", help="Run OAuth2 flows and print tokens.")
app.add_typer(files_app, name="files", help="Upload and download files.")
app.add_typer(config_app, name="config", help="Settings management.")
app.command("me")(me_command)


class _OutputHandler(logging.Handler):
    """Forward library log records to the stderr debug channel."""

    def emit(self, record: logging.LogRecord) -> None:
        from onecrm.output import debug

        try:
            debug(f"{record.name}: {record.getMessage()}")
        except Exception:
            self.handleError(record)


def _configure_logging(verbose: bool) -> None:
    logger = logging.getLogger("onecrm")
    for handler in list(logger.handlers):
        if isinstance(handler, _OutputHandler):
            logger.removeHandler(handler)
    if verbose:
        logger.addHandler(_OutputHandler())
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(logging.WARNING)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"onecrm {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    base_url: Optional[str] = typer.Option(
        None, "--base-url", "-u", help="API base URL (overrides ONECRM_URL and settings)."
    ),
    timeout: float = typer.Option(
        30.0, "--timeout", help="Per-request timeout in seconds."
    ),
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Initialises the global :class:`~onecrm.output.OutputManager` from CLI
    flags, routes ``onecrm.*`` log records to it when ``--verbose`` is
    given, and stores shared options in ``ctx.obj``.
    """
    from onecrm.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))
    _configure_logging(verbose)

    ctx.ensure_object(dict)
    ctx.obj["base_url"] = base_url
    ctx.obj["timeout"] = timeout
    ctx.obj["verbose"] = verbose


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_CANCELLED)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write the current traceback to disk and return the log file path."""
    from onecrm.config import get_config_dir

    logs_dir = get_config_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(f"{type(exc).__name__}: {exc}\n\n{traceback.format_exc()}")
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``onecrm`` console script.

    Unhandled :class:`~onecrm.exceptions.OneCRMError` instances cause a
    clean exit with the error's ``exit_code``. All other exceptions
    produce a crash log and a generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_CANCELLED)
    except Exception as exc:
        from onecrm.exceptions import OneCRMError
        from onecrm.output import error

        if isinstance(exc, OneCRMError):
            error(str(exc))
            sys.exit(exc.exit_code)
        log_path = _write_crash_log(exc)
        error(f"Unexpected error. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)
