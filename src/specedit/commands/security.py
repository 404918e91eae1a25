"""Security commands -- security schemes and the global requirement.

Provides the ``specedit security`` sub-command group. One ``add-*`` command
exists per scheme type so that each only takes the options its type needs;
the scheme is built and checked through :mod:`specedit.components` before
it is stored. ``security rename`` keeps every endpoint-level and global
requirement pointing at the renamed scheme.
"""

from __future__ import annotations

from typing import Any, Optional

import typer

from specedit.commands import open_session
from specedit.output import get_output, info, print_document, success

security_app = typer.Typer(no_args_is_help=True)

_OAUTH2_FLOWS = ("implicit", "password", "clientCredentials", "authorizationCode")


def _store(ctx: typer.Context, name: str, raw: dict[str, Any]) -> None:
    from specedit.components import parse_security_scheme

    with open_session(ctx) as session:
        session.document.add_security_scheme(name, parse_security_scheme(raw))
    success(f'Saved security scheme "{name}".')


def _with_description(raw: dict[str, Any], description: Optional[str]) -> dict[str, Any]:
    if description:
        raw["description"] = description
    return raw


@security_app.command("add-api-key")
def security_add_api_key(
    ctx: typer.Context,
    name: str = typer.Argument(help="Scheme name, e.g. apiKeyAuth."),
    param_name: str = typer.Option(..., "--param-name", help="Header, query or cookie name, e.g. X-API-Key."),
    location: str = typer.Option("header", "--in", help="header, query or cookie."),
    description: Optional[str] = typer.Option(None, "--description", "-d", help="Description."),
) -> None:
    """Add an API key scheme.

    Example::

        specedit security add-api-key apiKeyAuth --param-name X-API-Key
    """
    raw = {"type": "apiKey", "name": param_name, "in": location}
    _store(ctx, name, _with_description(raw, description))


@security_app.command("add-http")
def security_add_http(
    ctx: typer.Context,
    name: str = typer.Argument(help="Scheme name, e.g. bearerAuth."),
    scheme: str = typer.Option("bearer", "--scheme", help="HTTP auth scheme, e.g. bearer or basic."),
    bearer_format: Optional[str] = typer.Option(
        None, "--bearer-format", help="Token format hint (bearer only), e.g. JWT."
    ),
    description: Optional[str] = typer.Option(None, "--description", "-d", help="Description."),
) -> None:
    """Add an HTTP authentication scheme.

    Example::

        specedit security add-http bearerAuth --bearer-format JWT
        specedit security add-http basicAuth --scheme basic
    """
    raw: dict[str, Any] = {"type": "http", "scheme": scheme}
    if bearer_format:
        raw["bearerFormat"] = bearer_format
    _store(ctx, name, _with_description(raw, description))


@security_app.command("add-oidc")
def security_add_oidc(
    ctx: typer.Context,
    name: str = typer.Argument(help="Scheme name."),
    url: str = typer.Option(..., "--url", help="OpenID Connect discovery URL."),
    description: Optional[str] = typer.Option(None, "--description", "-d", help="Description."),
) -> None:
    """Add an OpenID Connect scheme."""
    raw = {"type": "openIdConnect", "openIdConnectUrl": url}
    _store(ctx, name, _with_description(raw, description))


@security_app.command("add-oauth2")
def security_add_oauth2(
    ctx: typer.Context,
    name: str = typer.Argument(help="Scheme name."),
    flow: str = typer.Option(
        "authorizationCode", "--flow", help="implicit, password, clientCredentials or authorizationCode."
    ),
    authorization_url: Optional[str] = typer.Option(None, "--authorization-url", help="Authorization URL."),
    token_url: Optional[str] = typer.Option(None, "--token-url", help="Token URL."),
    refresh_url: Optional[str] = typer.Option(None, "--refresh-url", help="Refresh URL."),
    scopes: Optional[list[str]] = typer.Option(
        None, "--scope", help="Scope as NAME=DESCRIPTION (repeatable)."
    ),
    description: Optional[str] = typer.Option(None, "--description", "-d", help="Description."),
) -> None:
    """Add an OAuth2 scheme with one flow.

    Example::

        specedit security add-oauth2 oauth --flow clientCredentials \\
            --token-url https://auth.example.com/token --scope read=Read access
    """
    from specedit.components import parse_security_scheme
    from specedit.exceptions import InvalidValueError

    flow_data: dict[str, Any] = {"scopes": {}}
    if authorization_url:
        flow_data["authorizationUrl"] = authorization_url
    if token_url:
        flow_data["tokenUrl"] = token_url
    if refresh_url:
        flow_data["refreshUrl"] = refresh_url
    for scope in scopes or []:
        scope_name, _, scope_description = scope.partition("=")
        flow_data["scopes"][scope_name.strip()] = scope_description.strip()
    raw = _with_description({"type": "oauth2", "flows": {flow: flow_data}}, description)

    with open_session(ctx) as session:
        if flow not in _OAUTH2_FLOWS:
            raise InvalidValueError(
                f"Unknown OAuth2 flow '{flow}'. Expected one of: {', '.join(_OAUTH2_FLOWS)}"
            )
        session.document.add_security_scheme(name, parse_security_scheme(raw))
    success(f'Saved security scheme "{name}".')


@security_app.command("rename")
def security_rename(
    ctx: typer.Context,
    old_name: str = typer.Argument(help="Current scheme name."),
    new_name: str = typer.Argument(help="New scheme name."),
) -> None:
    """Rename a scheme and every requirement that uses it."""
    with open_session(ctx) as session:
        session.document.rename_security_scheme(old_name, new_name)
    success(f'Renamed security scheme "{old_name}" to "{new_name}".')


@security_app.command("delete")
def security_delete(
    ctx: typer.Context,
    name: str = typer.Argument(help="Scheme name."),
) -> None:
    """Delete a scheme. Requirements naming it are left for the validator to report."""
    with open_session(ctx) as session:
        session.document.delete_security_scheme(name)
    success(f'Deleted security scheme "{name}".')


@security_app.command("list")
def security_list(ctx: typer.Context) -> None:
    """List security schemes."""
    with open_session(ctx, save=False) as session:
        schemes = session.document.get_all_security_schemes()
        global_names = {
            name
            for requirement in session.document.get_global_security()
            if isinstance(requirement, dict)
            for name in requirement
        }

    if not schemes:
        info("No security schemes defined.")
        return

    rows: list[list[str]] = []
    for name, scheme in schemes.items():
        scheme = scheme if isinstance(scheme, dict) else {}
        scheme_type = str(scheme.get("type", "-"))
        detail = ""
        if scheme_type == "apiKey":
            detail = f"{scheme.get('in', '?')}: {scheme.get('name', '?')}"
        elif scheme_type == "http":
            detail = str(scheme.get("scheme", ""))
        elif scheme_type == "oauth2":
            detail = ", ".join((scheme.get("flows") or {}).keys())
        elif scheme_type == "openIdConnect":
            detail = str(scheme.get("openIdConnectUrl", ""))
        rows.append([str(name), scheme_type, detail, "Yes" if name in global_names else ""])
    get_output().print_table(
        ["Scheme", "Type", "Details", "Global"], rows, title=f"Security schemes ({len(rows)})"
    )


@security_app.command("global")
def security_global(
    ctx: typer.Context,
    requirements: Optional[list[str]] = typer.Argument(
        None, help="Requirement as NAME or NAME:scope1,scope2. Omit to show the current list."
    ),
    clear: bool = typer.Option(False, "--clear", help="Remove the global requirement."),
) -> None:
    """Show or replace the document-wide security requirement.

    Each argument becomes one alternative requirement object.

    Example::

        specedit security global
        specedit security global bearerAuth apiKeyAuth
        specedit security global oauth:read,write
        specedit security global --clear
    """
    if not requirements and not clear:
        with open_session(ctx, save=False) as session:
            current = session.document.get_global_security()
        print_document(current)
        return

    parsed: list[dict[str, list[str]]] = []
    for requirement in requirements or []:
        name, _, scopes = requirement.partition(":")
        parsed.append({name: [s for s in scopes.split(",") if s]})

    with open_session(ctx) as session:
        session.document.set_global_security(parsed)
    if parsed:
        success(f"Global security set to: {', '.join(requirements or [])}")
    else:
        success("Global security cleared.")
