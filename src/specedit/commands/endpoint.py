"""Endpoint commands -- add, update, list, show and delete operations.

Provides the ``specedit endpoint`` sub-command group. Endpoints are
addressed by their session-local identifiers (``endpoint_1``,
``endpoint_2``, ...) as printed by ``specedit endpoint list``. Identifiers
are assigned in document order each time the stored document is restored,
so they stay stable as long as the document is not re-ordered by an
import.
"""

from __future__ import annotations

from typing import Any, Optional

import typer

from specedit.commands import open_session
from specedit.output import get_output, info, print_document, success

endpoint_app = typer.Typer(no_args_is_help=True)


def _parse_parameter(spec: str) -> dict[str, Any]:
    """Turn ``location:name`` into an OpenAPI parameter; path parameters are required."""
    from specedit.exceptions import InvalidValueError
    from specedit.models import ParameterLocation

    location, sep, name = spec.partition(":")
    if not sep or not name:
        raise InvalidValueError(
            f"Invalid parameter '{spec}'. Expected LOCATION:NAME, e.g. query:limit"
        )
    try:
        location = ParameterLocation(location.lower()).value
    except ValueError:
        raise InvalidValueError(
            f"Invalid parameter location '{location}'. Expected one of: "
            + ", ".join(loc.value for loc in ParameterLocation)
        ) from None
    parameter: dict[str, Any] = {"name": name, "in": location, "schema": {"type": "string"}}
    if location == "path":
        parameter["required"] = True
    return parameter


def _parse_response(spec: str) -> tuple[str, dict[str, Any]]:
    """Turn ``CODE=DESCRIPTION`` (or a bare ``CODE``) into a response entry."""
    code, _, description = spec.partition("=")
    return code.strip(), {"description": description.strip() or "Success"}


def _request_body(schema_name: str) -> dict[str, Any]:
    return {
        "required": True,
        "content": {
            "application/json": {
                "schema": {"$ref": f"#/components/schemas/{schema_name}"}
            }
        },
    }


def _apply_options(
    data: dict[str, Any],
    summary: Optional[str],
    description: Optional[str],
    tags: Optional[list[str]],
    params: Optional[list[str]],
    responses: Optional[list[str]],
    security: Optional[list[str]],
    body_schema: Optional[str],
) -> dict[str, Any]:
    if summary is not None:
        data["summary"] = summary
    if description is not None:
        data["description"] = description
    if tags:
        data["tags"] = list(dict.fromkeys(tags))
    if params:
        data["parameters"] = [_parse_parameter(p) for p in params]
    if responses:
        data["responses"] = dict(_parse_response(r) for r in responses)
    if security:
        data["security"] = [{name: []} for name in security]
    if body_schema:
        data["requestBody"] = _request_body(body_schema)
    return data


def _saved_id(session: Any, method: str, path: str) -> str:
    """Save, then return the id the endpoint will have in the next session."""
    session.save()
    session.reload()
    return session.document.find_endpoint(method, path) or "?"


@endpoint_app.command("add")
def endpoint_add(
    ctx: typer.Context,
    method: str = typer.Argument(help="HTTP method (get, post, put, patch, delete, head, options)."),
    path: str = typer.Argument(help="URL path template, e.g. /users/{id}."),
    summary: Optional[str] = typer.Option(None, "--summary", help="Short summary."),
    description: Optional[str] = typer.Option(None, "--description", "-d", help="Long description."),
    tags: Optional[list[str]] = typer.Option(None, "--tag", "-t", help="Tag name (repeatable)."),
    params: Optional[list[str]] = typer.Option(
        None, "--param", help="Parameter as LOCATION:NAME, e.g. query:limit (repeatable)."
    ),
    responses: Optional[list[str]] = typer.Option(
        None, "--response", "-r", help="Response as CODE=DESCRIPTION (repeatable)."
    ),
    security: Optional[list[str]] = typer.Option(
        None, "--security", help="Security scheme required by this endpoint (repeatable)."
    ),
    body_schema: Optional[str] = typer.Option(
        None, "--body-schema", help="Name of a component schema used as JSON request body."
    ),
) -> None:
    """Add an endpoint.

    Without ``--response`` the endpoint gets a single ``200 Success``
    response.

    Example::

        specedit endpoint add get /users --summary "List users" --tag users
        specedit endpoint add get /users/{id} --param path:id -r "200=User" -r "404=Not found"
        specedit endpoint add post /users --body-schema User --security bearerAuth
    """
    with open_session(ctx, save=False) as session:
        data = _apply_options(
            {"method": method, "path": path},
            summary, description, tags, params, responses, security, body_schema,
        )
        session.document.add_endpoint(data)
        endpoint_id = _saved_id(session, method, path)
    success(f"Added {method.upper()} {path} as {endpoint_id}.")


@endpoint_app.command("update")
def endpoint_update(
    ctx: typer.Context,
    endpoint_id: str = typer.Argument(help="Endpoint id, as shown by 'endpoint list'."),
    method: Optional[str] = typer.Option(None, "--method", "-m", help="New HTTP method."),
    path: Optional[str] = typer.Option(None, "--path", help="New URL path."),
    summary: Optional[str] = typer.Option(None, "--summary", help="Short summary."),
    description: Optional[str] = typer.Option(None, "--description", "-d", help="Long description."),
    tags: Optional[list[str]] = typer.Option(None, "--tag", "-t", help="Replace tags (repeatable)."),
    clear_tags: bool = typer.Option(False, "--clear-tags", help="Remove all tags."),
    params: Optional[list[str]] = typer.Option(
        None, "--param", help="Replace parameters, LOCATION:NAME (repeatable)."
    ),
    responses: Optional[list[str]] = typer.Option(
        None, "--response", "-r", help="Replace responses, CODE=DESCRIPTION (repeatable)."
    ),
    security: Optional[list[str]] = typer.Option(
        None, "--security", help="Replace endpoint security (repeatable)."
    ),
    body_schema: Optional[str] = typer.Option(
        None, "--body-schema", help="Replace the request body with a component schema reference."
    ),
) -> None:
    """Change fields of an existing endpoint. Options not given are kept.

    Example::

        specedit endpoint update endpoint_1 --summary "List all users"
        specedit endpoint update endpoint_2 --method put --tag admin
    """
    from specedit.exceptions import NotFoundError

    with open_session(ctx, save=False) as session:
        current = session.document.get_endpoint(endpoint_id)
        if current is None:
            raise NotFoundError(f"Endpoint not found: {endpoint_id}")
        data = current.model_dump(by_alias=True)
        if method is not None:
            data["method"] = method
        if path is not None:
            data["path"] = path
        if clear_tags:
            data["tags"] = []
        data = _apply_options(
            data, summary, description, tags, params, responses, security, body_schema
        )
        session.document.update_endpoint(endpoint_id, data)
        new_id = _saved_id(session, data["method"], data["path"])
    if new_id != endpoint_id:
        success(f"Updated {endpoint_id}; it is now {new_id}.")
    else:
        success(f"Updated {endpoint_id}.")


@endpoint_app.command("list")
def endpoint_list(
    ctx: typer.Context,
    tag: Optional[str] = typer.Option(None, "--tag", "-t", help="Only endpoints with this tag."),
    grouped: bool = typer.Option(False, "--grouped", "-g", help="Group rows by tag."),
) -> None:
    """List endpoints with their identifiers.

    Example::

        specedit endpoint list
        specedit endpoint list --grouped
        specedit endpoint list --tag users --json
    """
    from specedit.document import UNTAGGED

    with open_session(ctx, save=False) as session:
        if grouped:
            groups = session.document.get_endpoints_by_tag()
        else:
            groups = {"": session.document.get_all_endpoints()}

    rows: list[list[str]] = []
    for group, endpoints in groups.items():
        for endpoint in endpoints:
            if tag is not None and tag not in endpoint.tag_names:
                continue
            row = [
                endpoint.id or "",
                endpoint.method.value.upper(),
                endpoint.path,
                str(endpoint.summary or "-"),
                ", ".join(endpoint.tag_names),
            ]
            if grouped:
                row.insert(0, "(untagged)" if group == UNTAGGED else group)
            rows.append(row)

    if not rows:
        info("No endpoints.")
        return

    headers = ["ID", "Method", "Path", "Summary", "Tags"]
    if grouped:
        headers.insert(0, "Group")
    get_output().print_table(headers, rows, title=f"Endpoints ({len(rows)})")


@endpoint_app.command("show")
def endpoint_show(
    ctx: typer.Context,
    endpoint_id: str = typer.Argument(help="Endpoint id."),
) -> None:
    """Print one endpoint as its OpenAPI operation object."""
    from specedit.exceptions import NotFoundError

    with open_session(ctx, save=False) as session:
        endpoint = session.document.get_endpoint(endpoint_id)
        if endpoint is None:
            raise NotFoundError(f"Endpoint not found: {endpoint_id}")
    print_document(
        {"method": endpoint.method.value, "path": endpoint.path, **endpoint.to_operation()}
    )


@endpoint_app.command("delete")
def endpoint_delete(
    ctx: typer.Context,
    endpoint_id: str = typer.Argument(help="Endpoint id."),
) -> None:
    """Delete an endpoint.

    Example::

        specedit endpoint delete endpoint_3
    """
    with open_session(ctx) as session:
        session.document.delete_endpoint(endpoint_id)
    success(f"Deleted {endpoint_id}.")
