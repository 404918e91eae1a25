"""Built-in CLI sub-commands for specedit.

This package groups the Typer modules that form the CLI's command tree:

* :mod:`~specedit.commands.document` -- ``new``, ``import``, ``export``,
  ``validate``, ``show`` and ``info show|set``.
* :mod:`~specedit.commands.endpoint` -- add, update, list, show and delete
  operations.
* :mod:`~specedit.commands.tag` -- declare, rename and delete tags.
* :mod:`~specedit.commands.schema` -- reusable schemas under
  ``components.schemas``.
* :mod:`~specedit.commands.security` -- security schemes and the global
  security requirement.
* :mod:`~specedit.commands.config` -- view and modify global settings.

Every command restores the persisted document through
:func:`open_session`, applies its edit, and saves the result back.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator

import typer

from specedit.exceptions import SpeceditError
from specedit.output import error


def context_option(ctx: typer.Context, name: str, default: Any = None) -> Any:
    """Read a root-callback option from ``ctx.obj`` (absent in bare sub-apps)."""
    obj = ctx.obj if isinstance(ctx.obj, dict) else {}
    return obj.get(name, default)


@contextmanager
def reporting_errors() -> Iterator[None]:
    """Print a :class:`~specedit.exceptions.SpeceditError` and exit with its code."""
    try:
        yield
    except SpeceditError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


@contextmanager
def open_session(ctx: typer.Context, save: bool = True) -> Iterator[Any]:
    """Restore the stored document, yield an :class:`~specedit.session.EditorSession`, save it.

    Errors are reported through :func:`reporting_errors`; nothing is saved
    when the block raises.

    Args:
        ctx: Typer context; ``ctx.obj["store"]`` overrides the store
            directory.
        save: Persist the document when the block completes. Read-only
            commands pass ``False``.
    """
    from specedit.config import resolve_config
    from specedit.session import EditorSession

    with reporting_errors():
        config = resolve_config(cli_store=context_option(ctx, "store"))
        with EditorSession.from_config(config) as session:
            session.open()
            yield session
            if save:
                session.save()
