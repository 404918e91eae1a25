"""Document commands -- whole-document lifecycle and API info.

Implements the top-level ``specedit new``, ``import``, ``export``,
``validate`` and ``show`` commands, plus the ``specedit info`` group for the
API title, version, description and base URL.
"""

from __future__ import annotations

from typing import Optional

import typer

from specedit.commands import context_option, open_session
from specedit.exit_codes import EXIT_INVALID_DOCUMENT
from specedit.output import get_output, info, print_document, success, suggest


info_app = typer.Typer(no_args_is_help=True)


def new_command(
    ctx: typer.Context,
    force: bool = typer.Option(
        False, "--force", "-f", help="Discard the stored document without asking."
    ),
) -> None:
    """Start a new document from the default skeleton.

    Example::

        specedit new
        specedit new --force
    """
    from specedit.exceptions import OverwriteRefusedError

    force = force or context_option(ctx, "force", False)
    with open_session(ctx) as session:
        if session.store.exists() and not force:
            raise OverwriteRefusedError(
                "A document is already stored. Use --force to start over."
            )
        session.clear()
    success("Started a new document.")
    suggest("Add an endpoint: specedit endpoint add get /users")


def import_command(
    ctx: typer.Context,
    source: str = typer.Argument(
        help="OpenAPI document file path or URL (use '-' for stdin)."
    ),
    force: bool = typer.Option(
        False, "--force", "-f", help="Replace the stored document without asking."
    ),
) -> None:
    """Import an OpenAPI document (JSON or YAML), replacing the stored one.

    Only ``openapi``, ``info`` and ``paths`` are required; everything else is
    kept as-is. On failure the stored document is left untouched.

    Example::

        specedit import ./openapi.yaml
        specedit import https://api.example.com/openapi.json --force
        cat openapi.json | specedit import - --force
    """
    force = force or context_option(ctx, "force", False)
    info(f"Importing document from: {source}")
    with open_session(ctx, save=False) as session:
        session.import_file(source, overwrite=force)
        api = session.document.get_api_info()
        count = len(session.document.get_all_endpoints())
    success(f"Imported {api['title'] or 'document'} v{api['version']} ({count} endpoint(s)).")


def export_command(
    ctx: typer.Context,
    path: Optional[str] = typer.Argument(
        None, help="Target file (defaults to the configured export filename)."
    ),
) -> None:
    """Export the document as indented JSON.

    Example::

        specedit export
        specedit export build/openapi.json
    """
    with open_session(ctx, save=False) as session:
        target = session.export_file(path)
    success(f"Exported document to {target}")


def validate_command(
    ctx: typer.Context,
    source: Optional[str] = typer.Argument(
        None, help="Validate this file or URL instead of the stored document."
    ),
) -> None:
    """Check the document against the OpenAPI 3.1 rules.

    Prints every violation as a JSON-pointer/message pair and exits with
    code 8 when there is at least one.

    Example::

        specedit validate
        specedit validate ./openapi.json --json
    """
    from specedit.loader import load_document
    from specedit.validation import validate

    with open_session(ctx, save=False) as session:
        if source is None:
            result = session.validate()
        else:
            result = validate(load_document(source))

    if result.valid:
        success("Document is valid.")
        return

    rows = [[violation.pointer, violation.message] for violation in result.violations]
    get_output().print_table(
        ["Pointer", "Message"], rows, title=f"Violations ({len(rows)})"
    )
    raise typer.Exit(code=EXIT_INVALID_DOCUMENT)


def show_command(
    ctx: typer.Context,
    section: Optional[str] = typer.Option(
        None, "--section", "-s", help="Only print this root key (e.g. paths, components)."
    ),
) -> None:
    """Print the canonical document.

    Example::

        specedit show
        specedit show --section components
    """
    from specedit.exceptions import NotFoundError

    with open_session(ctx, save=False) as session:
        document = session.document.export()
        if section is not None:
            if section not in document:
                raise NotFoundError(f"Document has no '{section}' section")
            document = document[section]
    print_document(document)


@info_app.command("show")
def info_show(ctx: typer.Context) -> None:
    """Show the API title, version, description and base URL."""
    with open_session(ctx, save=False) as session:
        api = session.document.get_api_info()
    get_output().print_table(
        ["Field", "Value"], [[key, value] for key, value in api.items()], title="API info"
    )


@info_app.command("set")
def info_set(
    ctx: typer.Context,
    field: str = typer.Argument(help="One of: title, version, description, baseUrl."),
    value: str = typer.Argument(help="New value."),
) -> None:
    """Set an API info field.

    Example::

        specedit info set title "Pet Store"
        specedit info set baseUrl https://api.petstore.dev/v1
    """
    with open_session(ctx) as session:
        session.document.update_api_info(field, value)
    success(f"Set {field}.")
