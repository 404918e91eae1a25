"""Tag commands -- declare, rename, delete and list tags.

Provides the ``specedit tag`` sub-command group. Renaming or deleting a tag
rewrites every endpoint that uses it.
"""

from __future__ import annotations

from typing import Optional

import typer

from specedit.commands import open_session
from specedit.output import get_output, info, success

tag_app = typer.Typer(no_args_is_help=True)


@tag_app.command("add")
def tag_add(
    ctx: typer.Context,
    name: str = typer.Argument(help="Tag name (letters, digits, '_' and '-')."),
    description: str = typer.Option("", "--description", "-d", help="Tag description."),
) -> None:
    """Declare a tag.

    Example::

        specedit tag add users --description "User management"
    """
    with open_session(ctx) as session:
        session.document.add_tag(name, description)
    success(f'Added tag "{name}".')


@tag_app.command("rename")
def tag_rename(
    ctx: typer.Context,
    old_name: str = typer.Argument(help="Current tag name."),
    new_name: str = typer.Argument(help="New tag name (may equal the old one)."),
    description: Optional[str] = typer.Option(
        None, "--description", "-d", help="New description (kept when omitted)."
    ),
) -> None:
    """Rename a tag and update every endpoint that uses it.

    Example::

        specedit tag rename users accounts
        specedit tag rename users users --description "People"
    """
    with open_session(ctx) as session:
        if description is None:
            current = session.document.get_tag(old_name) or {}
            description = current.get("description") or ""
        session.document.update_tag(old_name, new_name, description)
    success(f'Renamed tag "{old_name}" to "{new_name}".')


@tag_app.command("delete")
def tag_delete(
    ctx: typer.Context,
    name: str = typer.Argument(help="Tag name."),
) -> None:
    """Delete a tag and remove it from every endpoint."""
    with open_session(ctx) as session:
        session.document.delete_tag(name)
    success(f'Deleted tag "{name}".')


@tag_app.command("list")
def tag_list(ctx: typer.Context) -> None:
    """List declared tags with the number of endpoints using each."""
    from specedit.document import UNTAGGED

    with open_session(ctx, save=False) as session:
        tags = session.document.get_all_tags()
        groups = session.document.get_endpoints_by_tag()

    declared = {tag.get("name") for tag in tags}
    rows = []
    for tag in tags:
        name = str(tag.get("name", ""))
        count = len(groups.get(name, []))
        rows.append([name, str(tag.get("description") or ""), str(count)])
    # Names used by endpoints but never declared
    for name, endpoints in groups.items():
        if name != UNTAGGED and name not in declared:
            rows.append([name, "(undeclared)", str(len(endpoints))])

    if not rows:
        info("No tags defined.")
        return
    get_output().print_table(["Tag", "Description", "Endpoints"], rows, title=f"Tags ({len(rows)})")
