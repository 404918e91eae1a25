"""Terminal output for specedit.

Documents and listings go to stdout so they can be piped (``specedit show
> openapi.json``); every status line, warning and error goes to stderr.
Rich styling is used only when stdout is a terminal and colour is allowed
(``NO_COLOR``, ``TERM=dumb`` and ``--no-color`` all turn it off).

Commands never hold an :class:`OutputManager` themselves. The root callback
in :mod:`specedit.app` installs one with :func:`set_output` and the
module-level helpers (:func:`info`, :func:`success`, :func:`print_document`,
...) reach it through :func:`get_output`. Library modules log through
:mod:`logging`; :class:`OutputLogHandler` feeds those records into the same
stderr channel.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from enum import Enum
from typing import Any, Optional

from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table


class OutputFormat(str, Enum):
    """How data written to stdout is rendered.

    ``AUTO`` becomes ``RICH`` on a colour-capable terminal and ``PLAIN``
    everywhere else.
    """

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class OutputManager:
    """Route document data to stdout and diagnostics to stderr.

    Args:
        format: Requested stdout format; ``AUTO`` is resolved on creation.
        no_color: Turn off colour and Rich markup on both streams.
        quiet: Hide info, success and suggestion lines.
        verbose: Show debug lines.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose
        self._format = _resolve_format(format, self._no_color)

        rich_stdout = self._format == OutputFormat.RICH
        self._stdout = Console(file=sys.stdout, no_color=self._no_color, force_terminal=rich_stdout)
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        return self._format

    @property
    def is_quiet(self) -> bool:
        return self._quiet

    @property
    def is_verbose(self) -> bool:
        return self._verbose

    # ------------------------------------------------------------------ #
    # stdout
    # ------------------------------------------------------------------ #

    def print_data(self, text: str) -> None:
        print(text, file=sys.stdout, flush=True)

    def print_document(self, data: Any) -> None:
        """Print *data* as indented JSON, highlighted in Rich mode.

        Keys are written in the order given, so an exported document keeps
        its canonical layout.
        """
        text = json.dumps(data, indent=2, ensure_ascii=False, default=str)
        if self._format == OutputFormat.RICH:
            self._stdout.print(Syntax(text, "json", theme="monokai", word_wrap=True))
            return
        self.print_data(text)

    def print_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        title: Optional[str] = None,
    ) -> None:
        """Print rows as JSON records, tab-separated lines or a Rich table.

        The *title* is only shown by the Rich renderer.
        """
        if self._format == OutputFormat.JSON:
            records = [dict(zip(headers, row)) for row in rows]
            self.print_data(json.dumps(records, indent=2, ensure_ascii=False))
        elif self._format == OutputFormat.PLAIN:
            for line in [headers, *rows]:
                self.print_data("\t".join(line))
        else:
            self._stdout.print(_rich_table(headers, rows, title))

    # ------------------------------------------------------------------ #
    # stderr
    # ------------------------------------------------------------------ #

    def _emit(self, message: str, prefix: str = "", markup: str = "") -> None:
        # Rich markup wraps the prefix only, never the user's text
        if self._no_color:
            print(f"{prefix}{message}", file=sys.stderr, flush=True)
        elif markup:
            self._stderr.print(f"[{markup}]{prefix}[/{markup}]{message}")
        else:
            self._stderr.print(f"{prefix}{message}")

    def info(self, message: str) -> None:
        if not self._quiet:
            self._emit(message)

    def success(self, message: str) -> None:
        if not self._quiet:
            if self._no_color:
                self._emit(message)
            else:
                self._stderr.print(f"[green]{message}[/green]")

    def warning(self, message: str) -> None:
        """Always shown, even with ``--quiet``."""
        self._emit(message, prefix="Warning: ", markup="yellow")

    def error(self, message: str) -> None:
        """Always shown, even with ``--quiet``."""
        self._emit(message, prefix="Error: ", markup="bold red")

    def suggest(self, message: str) -> None:
        """Hint at a likely next command."""
        if not self._quiet:
            self._emit(message, prefix="→ ", markup="dim")

    def debug(self, message: str) -> None:
        if self._verbose:
            self._emit(message, prefix="[debug] " if self._no_color else "\\[debug] ", markup="dim")


class OutputLogHandler(logging.Handler):
    """Send log records to the installed :class:`OutputManager`.

    ``ERROR`` and ``WARNING`` records map onto :meth:`OutputManager.error`
    and :meth:`OutputManager.warning`; lower levels become debug lines.
    """

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = self.format(record)
            output = get_output()
            if record.levelno >= logging.ERROR:
                output.error(message)
            elif record.levelno >= logging.WARNING:
                output.warning(message)
            else:
                output.debug(message)
        except Exception:
            self.handleError(record)


def _rich_table(headers: list[str], rows: list[list[str]], title: Optional[str]) -> Table:
    table = Table(title=title, show_header=True, header_style="bold cyan")
    for header in headers:
        table.add_column(header)
    for row in rows:
        table.add_row(*row)
    return table


def _resolve_format(requested: OutputFormat, no_color: bool) -> OutputFormat:
    if requested != OutputFormat.AUTO:
        return requested
    return OutputFormat.RICH if _is_tty() and not no_color else OutputFormat.PLAIN


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """True when ``NO_COLOR`` is set to anything or ``TERM`` is ``dumb``."""
    return "NO_COLOR" in os.environ or os.environ.get("TERM") == "dumb"


# ------------------------------------------------------------------ #
# Installed instance and shortcuts
# ------------------------------------------------------------------ #

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the installed manager, creating an ``AUTO`` one on first use."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Forget the installed manager (used between tests)."""
    global _output
    _output = None


def print_document(data: Any) -> None:
    get_output().print_document(data)


def info(message: str) -> None:
    get_output().info(message)


def success(message: str) -> None:
    get_output().success(message)


def error(message: str) -> None:
    get_output().error(message)


def suggest(message: str) -> None:
    get_output().suggest(message)
