"""Structural validation of OpenAPI 3.1 documents.

:func:`validate` runs a fixed battery of checks over an exported document and
collects every problem it finds instead of stopping at the first one. The
checks are a practical subset of the OpenAPI 3.1 rules:

1. ``openapi`` is present and is a 3.1.x version.
2. ``info`` is present with a ``title`` and a ``version``.
3. Every path starts with ``/``; every operation has non-empty
   ``responses``, well-formed ``parameters``, a ``requestBody`` with
   content, and a well-formed ``security`` list.
4. Every server has a ``url`` that is absolute, relative (``/...``) or
   templated (contains ``{``).
5. Every security scheme has a known ``type`` and its type-specific fields.
6. OAuth2 flows declare at least one flow and the URLs each flow needs.
7. Security requirement lists are lists of mappings from scheme name to a
   list of scopes. Only the *global* list is cross-checked against
   ``components.securitySchemes``; operation-level lists are not.

Violations are data (:class:`~specedit.models.Violation`), never
exceptions. Each carries an RFC 6901 JSON Pointer, so a path ``/users``
shows up as ``/paths/~1users``.

The document is never modified.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Mapping
from urllib.parse import urlsplit

from specedit.exceptions import FormatError
from specedit.models import ValidationResult, Violation

logger = logging.getLogger(__name__)

OPERATION_METHODS = frozenset(
    ("get", "post", "put", "patch", "delete", "head", "options", "trace")
)
PARAMETER_LOCATIONS = ("query", "header", "path", "cookie")
API_KEY_LOCATIONS = ("query", "header", "cookie")
OAUTH2_FLOWS = ("implicit", "password", "clientCredentials", "authorizationCode")

_VERSION_RE = re.compile(r"^3\.1\.")
_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*$")


def validate(document: Mapping[str, Any]) -> ValidationResult:
    """Check *document* against the structural rules listed in the module docstring.

    Args:
        document: An OpenAPI document, typically the result of
            :meth:`~specedit.document.OpenAPIDocument.export`.

    Returns:
        A :class:`~specedit.models.ValidationResult`; ``valid`` is ``True``
        exactly when ``violations`` is empty.

    Raises:
        FormatError: If *document* is not a mapping at all.

    Example::

        result = validate(doc.export())
        for violation in result.violations:
            print(violation.pointer, violation.message)
    """
    if not isinstance(document, Mapping):
        raise FormatError(
            f"Cannot validate: document must be an object, got {type(document).__name__}"
        )

    violations: list[Violation] = []

    _check_version(document, violations)
    _check_info(document, violations)

    if _is_set(document.get("paths")):
        _check_paths(document["paths"], violations)

    if _is_set(document.get("servers")):
        _check_servers(document["servers"], violations)

    components = document.get("components")
    declared_schemes = None
    if isinstance(components, Mapping):
        schemes = components.get("securitySchemes")
        if _is_set(schemes):
            _check_security_schemes(schemes, violations)
        if isinstance(schemes, Mapping):
            declared_schemes = schemes

    if document.get("security") is not None:
        _check_security(document["security"], declared_schemes, "/security", violations)

    logger.debug("Validation finished with %d violation(s)", len(violations))
    return ValidationResult(valid=not violations, violations=violations)


# ------------------------------------------------------------------ #
# Helpers
# ------------------------------------------------------------------ #


def _is_set(value: Any) -> bool:
    """Presence test: ``None``, ``False``, ``""`` and ``0`` are unset; empty containers are set."""
    if value is None or value is False:
        return False
    if isinstance(value, str):
        return value != ""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value != 0
    return True


def _pointer(*segments: Any) -> str:
    """Build an RFC 6901 JSON Pointer from raw segments."""
    escaped = (str(s).replace("~", "~0").replace("/", "~1") for s in segments)
    return "".join("/" + s for s in escaped)


def _add(violations: list[Violation], pointer: str, message: str) -> None:
    violations.append(Violation(pointer=pointer, message=message))


def _is_absolute_url(url: str) -> bool:
    try:
        parts = urlsplit(url)
    except ValueError:
        return False
    if not parts.scheme or not _SCHEME_RE.match(parts.scheme):
        return False
    return bool(parts.netloc or parts.path)


# ------------------------------------------------------------------ #
# Root checks
# ------------------------------------------------------------------ #


def _check_version(document: Mapping[str, Any], violations: list[Violation]) -> None:
    version = document.get("openapi")
    if not _is_set(version):
        _add(violations, "/openapi", 'must have required property "openapi"')
    elif not isinstance(version, str) or not _VERSION_RE.match(version):
        _add(violations, "/openapi", "must be OpenAPI version 3.1.x")


def _check_info(document: Mapping[str, Any], violations: list[Violation]) -> None:
    info = document.get("info")
    if not _is_set(info):
        _add(violations, "/info", 'must have required property "info"')
        return
    if not isinstance(info, Mapping):
        _add(violations, "/info", "info must be an object")
        return
    if not _is_set(info.get("title")):
        _add(violations, "/info/title", 'must have required property "title"')
    if not _is_set(info.get("version")):
        _add(violations, "/info/version", 'must have required property "version"')


def _check_servers(servers: Any, violations: list[Violation]) -> None:
    if not isinstance(servers, list):
        _add(violations, "/servers", "servers must be an array")
        return
    for index, server in enumerate(servers):
        if not isinstance(server, Mapping):
            _add(violations, _pointer("servers", index), "server must be an object")
            continue
        url = server.get("url")
        pointer = _pointer("servers", index, "url")
        if not _is_set(url):
            _add(violations, pointer, 'must have required property "url"')
        elif not isinstance(url, str) or not (
            _is_absolute_url(url) or url.startswith("/") or "{" in url
        ):
            _add(violations, pointer, "must be a valid URL or relative path")


# ------------------------------------------------------------------ #
# Paths and operations
# ------------------------------------------------------------------ #


def _check_paths(paths: Any, violations: list[Violation]) -> None:
    if not isinstance(paths, Mapping):
        _add(violations, "/paths", "paths must be an object")
        return
    for path, path_item in paths.items():
        if not isinstance(path, str) or not path.startswith("/"):
            _add(violations, _pointer("paths", path), 'path must start with "/"')
        if not isinstance(path_item, Mapping):
            _add(violations, _pointer("paths", path), "path item must be an object")
            continue
        for method, operation in path_item.items():
            if method in OPERATION_METHODS:
                _check_operation(operation, ("paths", path, method), violations)


def _check_operation(
    operation: Any, base: tuple[Any, ...], violations: list[Violation]
) -> None:
    if not isinstance(operation, Mapping):
        _add(violations, _pointer(*base), "operation must be an object")
        return

    responses = operation.get("responses")
    pointer = _pointer(*base, "responses")
    if not _is_set(responses):
        _add(violations, pointer, 'must have required property "responses"')
    elif not isinstance(responses, Mapping):
        _add(violations, pointer, "responses must be an object")
    elif not responses:
        _add(violations, pointer, "must have at least one response")

    parameters = operation.get("parameters")
    if _is_set(parameters):
        if not isinstance(parameters, list):
            _add(violations, _pointer(*base, "parameters"), "parameters must be an array")
        else:
            for index, parameter in enumerate(parameters):
                _check_parameter(parameter, (*base, "parameters", index), violations)

    request_body = operation.get("requestBody")
    if _is_set(request_body):
        _check_request_body(request_body, (*base, "requestBody"), violations)

    if operation.get("security") is not None:
        # Operation-level requirements are not cross-checked against
        # components.securitySchemes.
        _check_security(operation["security"], None, _pointer(*base, "security"), violations)


def _check_parameter(
    parameter: Any, base: tuple[Any, ...], violations: list[Violation]
) -> None:
    if not isinstance(parameter, Mapping):
        _add(violations, _pointer(*base), "parameter must be an object")
        return

    if not _is_set(parameter.get("name")):
        _add(violations, _pointer(*base, "name"), 'must have required property "name"')

    location = parameter.get("in")
    if not _is_set(location):
        _add(violations, _pointer(*base, "in"), 'must have required property "in"')
    elif location not in PARAMETER_LOCATIONS:
        _add(violations, _pointer(*base, "in"), "must be one of: query, header, path, cookie")

    if location == "path" and not _is_set(parameter.get("required")):
        _add(violations, _pointer(*base, "required"), "path parameters must be required")

    if not _is_set(parameter.get("schema")):
        _add(violations, _pointer(*base, "schema"), 'must have required property "schema"')


def _check_request_body(
    request_body: Any, base: tuple[Any, ...], violations: list[Violation]
) -> None:
    if not isinstance(request_body, Mapping):
        _add(violations, _pointer(*base), "requestBody must be an object")
        return
    content = request_body.get("content")
    pointer = _pointer(*base, "content")
    if not _is_set(content):
        _add(violations, pointer, 'must have required property "content"')
    elif not isinstance(content, Mapping):
        _add(violations, pointer, "content must be an object")
    elif not content:
        _add(violations, pointer, "must have at least one media type")


# ------------------------------------------------------------------ #
# Security
# ------------------------------------------------------------------ #


def _check_security_schemes(schemes: Any, violations: list[Violation]) -> None:
    if not isinstance(schemes, Mapping):
        _add(violations, "/components/securitySchemes", "securitySchemes must be an object")
        return
    for name, scheme in schemes.items():
        base = ("components", "securitySchemes", name)
        if not isinstance(scheme, Mapping):
            _add(violations, _pointer(*base), "security scheme must be an object")
            continue

        scheme_type = scheme.get("type")
        if not _is_set(scheme_type):
            _add(violations, _pointer(*base, "type"), 'must have required property "type"')
            continue

        if scheme_type == "apiKey":
            if not _is_set(scheme.get("name")):
                _add(
                    violations,
                    _pointer(*base, "name"),
                    'must have required property "name" for apiKey security scheme',
                )
            if scheme.get("in") not in API_KEY_LOCATIONS:
                _add(
                    violations,
                    _pointer(*base, "in"),
                    'must have valid "in" property (query, header, or cookie) '
                    "for apiKey security scheme",
                )
        elif scheme_type == "http":
            if not _is_set(scheme.get("scheme")):
                _add(
                    violations,
                    _pointer(*base, "scheme"),
                    'must have required property "scheme" for http security scheme',
                )
        elif scheme_type == "oauth2":
            flows = scheme.get("flows")
            if not _is_set(flows):
                _add(
                    violations,
                    _pointer(*base, "flows"),
                    'must have required property "flows" for oauth2 security scheme',
                )
            else:
                _check_oauth2_flows(flows, (*base, "flows"), violations)
        elif scheme_type == "openIdConnect":
            if not _is_set(scheme.get("openIdConnectUrl")):
                _add(
                    violations,
                    _pointer(*base, "openIdConnectUrl"),
                    'must have required property "openIdConnectUrl" '
                    "for openIdConnect security scheme",
                )
        else:
            _add(
                violations,
                _pointer(*base, "type"),
                f"unsupported security scheme type: {scheme_type}",
            )


def _check_oauth2_flows(
    flows: Any, base: tuple[Any, ...], violations: list[Violation]
) -> None:
    if not isinstance(flows, Mapping):
        _add(violations, _pointer(*base), "flows must be an object")
        return
    if not any(_is_set(flows.get(flow_type)) for flow_type in OAUTH2_FLOWS):
        _add(violations, _pointer(*base), "must have at least one OAuth2 flow defined")
        return

    for flow_type in OAUTH2_FLOWS:
        flow = flows.get(flow_type)
        if not _is_set(flow):
            continue
        flow_base = (*base, flow_type)
        if not isinstance(flow, Mapping):
            _add(violations, _pointer(*flow_base), "flow must be an object")
            continue
        if flow_type in ("implicit", "authorizationCode") and not _is_set(
            flow.get("authorizationUrl")
        ):
            _add(
                violations,
                _pointer(*flow_base, "authorizationUrl"),
                f'must have required property "authorizationUrl" for {flow_type} flow',
            )
        if flow_type != "implicit" and not _is_set(flow.get("tokenUrl")):
            _add(
                violations,
                _pointer(*flow_base, "tokenUrl"),
                f'must have required property "tokenUrl" for {flow_type} flow',
            )
        scopes = flow.get("scopes")
        if scopes is not None and not isinstance(scopes, Mapping):
            _add(violations, _pointer(*flow_base, "scopes"), "scopes must be an object")


def _check_security(
    security: Any,
    declared_schemes: Mapping[str, Any] | None,
    pointer: str,
    violations: list[Violation],
) -> None:
    """Check a requirement list; cross-reference names only when *declared_schemes* is given."""
    if not isinstance(security, list):
        _add(violations, pointer, "security must be an array")
        return

    for index, requirement in enumerate(security):
        entry_pointer = f"{pointer}/{index}"
        if not isinstance(requirement, Mapping):
            _add(violations, entry_pointer, "security requirement must be an object")
            continue
        for scheme_name, scopes in requirement.items():
            scheme_pointer = entry_pointer + _pointer(scheme_name)
            if declared_schemes is not None and scheme_name not in declared_schemes:
                _add(
                    violations,
                    scheme_pointer,
                    f'security scheme "{scheme_name}" is not defined in '
                    "components/securitySchemes",
                )
            if not isinstance(scopes, list):
                _add(violations, scheme_pointer, "security requirement scopes must be an array")
            elif not all(isinstance(scope, str) for scope in scopes):
                _add(violations, scheme_pointer, "security requirement scopes must be strings")
