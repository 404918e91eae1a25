"""The ``specedit`` command line.

Commands are registered on :data:`app` here and implemented in
:mod:`specedit.commands`. :func:`main_callback` runs before every command
and installs the output manager and log handler; :func:`main` is the
console script. A library error that escapes a command exits with that
error's code, and anything unexpected leaves a crash log under the data
directory.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from specedit import __version__
from specedit.commands.document import (
    export_command,
    import_command,
    info_app,
    new_command,
    show_command,
    validate_command,
)
from specedit.commands.config import config_app
from specedit.commands.endpoint import endpoint_app
from specedit.commands.schema import schema_app
from specedit.commands.security import security_app
from specedit.commands.tag import tag_app
from specedit.exit_codes import EXIT_GENERIC_FAILURE, EXIT_INTERRUPTED


app = typer.Typer(
    name="specedit",
    help="Edit OpenAPI 3.1 documents from the command line.",
    no_args_is_help=True,
    add_completion=True,
    rich_markup_mode="rich",
)

app.command("new")(new_command)
app.command("import")(import_command)
app.command("export")(export_command)
app.command("validate")(validate_command)
app.command("show")(show_command)
app.add_typer(info_app, name="info", help="API title, version, description and base URL.")
app.add_typer(endpoint_app, name="endpoint", help="Add, update, list and delete endpoints.")
app.add_typer(tag_app, name="tag", help="Declare, rename and delete tags.")
app.add_typer(schema_app, name="schema", help="Reusable schema components.")
app.add_typer(security_app, name="security", help="Security schemes and global security.")
app.add_typer(config_app, name="config", help="Configuration management.")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"specedit {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    """Send ``specedit.*`` log records to the output manager's stderr channel."""
    from specedit.output import OutputLogHandler

    package_logger = logging.getLogger("specedit")
    # One handler per process, even when the app is invoked repeatedly in tests
    for handler in [h for h in package_logger.handlers if isinstance(h, OutputLogHandler)]:
        package_logger.removeHandler(handler)
    package_logger.addHandler(OutputLogHandler())
    package_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


def _requested_format(json_output: bool, plain_output: bool) -> Any:
    from specedit.output import OutputFormat

    if json_output:
        return OutputFormat.JSON
    if plain_output:
        return OutputFormat.PLAIN
    return OutputFormat.AUTO


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True,
        help="Show version and exit.",
    ),
    store: Optional[str] = typer.Option(
        None, "--store", help="Snapshot store directory (overrides SPECEDIT_STORE)."
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress status messages."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug messages."),
    force: bool = typer.Option(
        False, "--force", "-f", help="Replace a stored document and skip confirmations."
    ),
) -> None:
    """Set up output and logging, then hand shared options to the sub-command.

    ``store`` and ``force`` travel in ``ctx.obj``; commands read them through
    :func:`specedit.commands.context_option`.
    """
    from specedit.output import OutputManager, set_output

    set_output(
        OutputManager(
            format=_requested_format(json_output, plain_output),
            no_color=no_color,
            quiet=quiet,
            verbose=verbose,
        )
    )
    _configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj.update(store=store, force=force, verbose=verbose)


def _cancel(*_: Any) -> None:
    sys.stderr.write("\nCancelled.\n")
    sys.exit(EXIT_INTERRUPTED)


def _write_crash_log(exc: Exception) -> str:
    """Save the active traceback under ``<data dir>/logs`` and return its path."""
    from specedit.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_path = logs_dir / f"crash-{datetime.now():%Y%m%d-%H%M%S}.log"
    log_path.write_text(
        f"{type(exc).__name__}: {exc}\n\n{traceback.format_exc()}", encoding="utf-8"
    )
    return str(log_path)


def main() -> None:
    """Console-script entry point.

    Library errors that escape a command exit with their own code; anything
    else is written to a crash log and exits with the generic failure code.
    """
    from specedit.exceptions import SpeceditError
    from specedit.output import error

    signal.signal(signal.SIGINT, _cancel)
    try:
        app()
    except KeyboardInterrupt:
        _cancel()
    except SpeceditError as exc:
        error(str(exc))
        sys.exit(exc.exit_code)
    except Exception as exc:
        error(f"Unexpected error. Debug log: {_write_crash_log(exc)}")
        sys.exit(EXIT_GENERIC_FAILURE)
