"""Schema commands -- reusable schemas under ``components.schemas``.

Provides the ``specedit schema`` sub-command group. ``schema add`` builds the
schema through the typed variants in :mod:`specedit.components`, so each
option is only accepted for the types it applies to.
"""

from __future__ import annotations

from typing import Any, Optional

import typer

from specedit.commands import open_session
from specedit.output import get_output, info, print_document, success

schema_app = typer.Typer(no_args_is_help=True)


def _only_for(option: str, value: Any, schema_type: str, allowed: tuple[str, ...]) -> None:
    from specedit.exceptions import InvalidValueError

    if value and schema_type not in allowed:
        raise InvalidValueError(
            f"{option} only applies to {' and '.join(allowed)} schemas, not {schema_type}"
        )


def _parse_property(spec: str) -> tuple[str, dict[str, Any]]:
    from specedit.components import SCHEMA_TYPES
    from specedit.exceptions import InvalidValueError

    name, _, prop_type = spec.partition(":")
    prop_type = prop_type or "string"
    if not name or prop_type not in SCHEMA_TYPES:
        raise InvalidValueError(
            f"Invalid property '{spec}'. Expected NAME[:TYPE] with TYPE one of: "
            + ", ".join(SCHEMA_TYPES)
        )
    return name, {"type": prop_type}


def _build_schema(
    schema_type: str,
    description: Optional[str],
    default: Optional[str],
    enum: Optional[list[str]],
    minimum: Optional[int],
    maximum: Optional[int],
    items: Optional[str],
    properties: Optional[list[str]],
    required: Optional[list[str]],
) -> Any:
    from specedit.components import parse_default, parse_schema

    _only_for("--enum", enum, schema_type, ("string",))
    _only_for("--minimum", minimum is not None, schema_type, ("integer",))
    _only_for("--maximum", maximum is not None, schema_type, ("integer",))
    _only_for("--items", items, schema_type, ("array",))
    _only_for("--property", properties, schema_type, ("object",))
    _only_for("--required", required, schema_type, ("object",))

    raw: dict[str, Any] = {"type": schema_type}
    if description:
        raw["description"] = description
    if default is not None:
        raw["default"] = parse_default(schema_type, default)
    if enum:
        raw["enum"] = enum
    if minimum is not None:
        raw["minimum"] = minimum
    if maximum is not None:
        raw["maximum"] = maximum
    if schema_type == "array":
        raw["items"] = {"type": items or "string"}
    if properties:
        raw["properties"] = dict(_parse_property(p) for p in properties)
    if required:
        raw["required"] = required
    return parse_schema(raw)


@schema_app.command("add")
def schema_add(
    ctx: typer.Context,
    name: str = typer.Argument(help="Component name, e.g. User."),
    schema_type: str = typer.Option(
        "object", "--type", help="string, integer, number, boolean, array or object."
    ),
    description: Optional[str] = typer.Option(None, "--description", "-d", help="Description."),
    default: Optional[str] = typer.Option(
        None, "--default", help="Default value; arrays and objects as JSON."
    ),
    enum: Optional[list[str]] = typer.Option(None, "--enum", help="Allowed value (strings, repeatable)."),
    minimum: Optional[int] = typer.Option(None, "--minimum", help="Minimum (integers)."),
    maximum: Optional[int] = typer.Option(None, "--maximum", help="Maximum (integers)."),
    items: Optional[str] = typer.Option(None, "--items", help="Item type (arrays)."),
    properties: Optional[list[str]] = typer.Option(
        None, "--property", "-p", help="Property as NAME[:TYPE] (objects, repeatable)."
    ),
    required: Optional[list[str]] = typer.Option(
        None, "--required", help="Required property name (objects, repeatable)."
    ),
) -> None:
    """Add or replace a schema component.

    Example::

        specedit schema add User -p id:integer -p name --required id
        specedit schema add Status --type string --enum active --enum disabled
        specedit schema add Tags --type array --items string --default '["new"]'
    """
    with open_session(ctx) as session:
        schema = _build_schema(
            schema_type, description, default, enum, minimum, maximum, items, properties, required
        )
        session.document.add_schema(name, schema)
    success(f'Saved schema "{name}".')


@schema_app.command("list")
def schema_list(ctx: typer.Context) -> None:
    """List schema components with their type and first properties."""
    with open_session(ctx, save=False) as session:
        schemas = session.document.get_all_schemas()

    if not schemas:
        info("No schemas defined.")
        return

    rows: list[list[str]] = []
    for name, schema in schemas.items():
        schema_type = schema.get("type", "-") if isinstance(schema, dict) else "-"
        props = list((schema.get("properties") or {}) if isinstance(schema, dict) else {})
        summary = ", ".join(props[:5]) + ("..." if len(props) > 5 else "")
        rows.append([str(name), str(schema_type), summary])
    get_output().print_table(["Schema", "Type", "Properties"], rows, title=f"Schemas ({len(rows)})")


@schema_app.command("show")
def schema_show(
    ctx: typer.Context,
    name: str = typer.Argument(help="Component name."),
) -> None:
    """Print one schema component."""
    from specedit.exceptions import NotFoundError

    with open_session(ctx, save=False) as session:
        schema = session.document.get_schema(name)
        if schema is None:
            raise NotFoundError(f"Schema not found: {name}")
    print_document(schema)


@schema_app.command("delete")
def schema_delete(
    ctx: typer.Context,
    name: str = typer.Argument(help="Component name."),
) -> None:
    """Delete a schema component. References to it are left as they are."""
    with open_session(ctx) as session:
        session.document.delete_schema(name)
    success(f'Deleted schema "{name}".')
