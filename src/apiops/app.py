"""Typer application and CLI entry point for apiops.

This module wires together the top-level Typer application and registers
the built-in commands (``extract``, ``check``).

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs the Ctrl-C handler and invokes the Typer
app. :class:`~apiops.exceptions.ApiopsError` instances exit with their
``exit_code``; anything else exits with
:data:`~apiops.exit_codes.EXIT_GENERIC_FAILURE`.

See Also:
    :mod:`apiops.config`: Configuration resolution for ``extract``.
    :mod:`apiops.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import signal
import sys
import traceback
from typing import Any

import typer

from apiops import __version__
from apiops.commands.check import check_command
from apiops.commands.extract import cancel_active_run, extract_command
from apiops.exit_codes import EXIT_CANCELLED, EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="apiops",
    help="Extract Azure API Management APIs into a version-controllable artifact tree.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command("extract")(extract_command)
app.command("check")(check_command)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"apiops {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
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
    """Root callback executed before every command.

    Installs the global :class:`~apiops.output.OutputManager` built from
    the CLI flags and routes library logging through it.
    """
    from apiops.output import OutputManager, configure_logging, set_output

    output = OutputManager(no_color=no_color, quiet=quiet, verbose=verbose)
    set_output(output)
    configure_logging(output)


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler.

    The first Ctrl-C cancels a running extraction, which then exits with
    code 130 once in-flight work has stopped. A second Ctrl-C, or one
    outside an extraction, exits immediately.
    """

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        if cancel_active_run():
            sys.stderr.write("\nCancelling...\n")
            return
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_CANCELLED)

    signal.signal(signal.SIGINT, _handler)


def main() -> None:
    """CLI entry point invoked by the ``apiops`` console script.

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
        from apiops.exceptions import ApiopsError
        from apiops.output import debug, error

        if isinstance(exc, ApiopsError):
            error(str(exc))
            sys.exit(exc.exit_code)
        debug(traceback.format_exc())
        error(f"Unexpected error: {exc}")
        sys.exit(EXIT_GENERIC_FAILURE)
