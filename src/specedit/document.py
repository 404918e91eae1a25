"""The OpenAPI document model and its reference tracker.

:class:`OpenAPIDocument` is the single source of truth for the document being
edited. It keeps two synchronised views:

* the **canonical document** -- a nested OpenAPI dict (``openapi``, ``info``,
  ``servers``, ``paths``, ``components``, ``tags``, ``security``, plus any
  unknown root keys adopted on import), and
* the **endpoint index** -- a flat ``id -> Endpoint`` map used for
  per-endpoint edits.

Endpoint edits only reach ``paths`` when the index is written back, which
happens on :meth:`~OpenAPIDocument.export` and after security-scheme renames.

Identifiers are session-local: they are assigned from a per-instance counter
when an endpoint is created or imported, are never exported, and are
discarded on every import. Do not persist them.

Tags and security schemes are referenced *by name* from endpoints and from
global security requirements. Nothing stores back-pointers; renames and
deletions scan every holder and rewrite or drop the name
(:meth:`~OpenAPIDocument.update_tag`, :meth:`~OpenAPIDocument.delete_tag`,
:meth:`~OpenAPIDocument.update_security_scheme_references`).

All mutators validate their input before touching state, so a rejected call
leaves the document exactly as it was. Getters return copies.
"""

from __future__ import annotations

import copy
import itertools
import logging
from typing import Any, Mapping, Optional

from pydantic import ValidationError

from specedit.components import to_component
from specedit.exceptions import DuplicateError, FormatError, InvalidValueError, NotFoundError
from specedit.models import Endpoint, HTTPMethod, Tag
from specedit.serializer import COMPONENTS_ORDER, sort_openapi_spec

logger = logging.getLogger(__name__)

UNTAGGED = "__untagged__"
"""Group key used by :meth:`OpenAPIDocument.get_endpoints_by_tag` for endpoints without tags."""

_METHODS = tuple(m.value for m in HTTPMethod)
_REQUIRED_ROOT_KEYS = ("openapi", "info", "paths")
_API_INFO_FIELDS = ("title", "version", "description", "baseUrl")


def _empty_skeleton() -> dict[str, Any]:
    return {
        "openapi": "3.1.1",
        "info": {
            "title": "My API",
            "version": "1.0.0",
            "description": "",
        },
        "servers": [
            {
                "url": "https://api.example.com",
                "description": "Production server",
            }
        ],
        "paths": {},
        "components": {category: {} for category in COMPONENTS_ORDER},
    }


def _is_absent(value: Any) -> bool:
    # An empty ``paths: {}`` is present; an empty version string is not.
    return value is None or (isinstance(value, str) and not value.strip())


def _rename_requirement_key(
    requirements: Any, old_name: str, new_name: str
) -> Any:
    """Return *requirements* with ``old_name`` keys renamed, scopes kept."""
    if not isinstance(requirements, list):
        return requirements
    renamed = []
    for requirement in requirements:
        if isinstance(requirement, dict) and old_name in requirement:
            requirement = dict(requirement)
            requirement[new_name] = requirement.pop(old_name)
        renamed.append(requirement)
    return renamed


class OpenAPIDocument:
    """An OpenAPI 3.1 document under edit.

    A new instance starts from the default skeleton (see
    :meth:`initialize_empty`). Replace the whole state with
    :meth:`import_document`; read it back with :meth:`export`.

    Example::

        doc = OpenAPIDocument()
        endpoint_id = doc.add_endpoint({"method": "get", "path": "/users"})
        doc.add_tag("users", "User management")
        doc.update_endpoint(
            endpoint_id, {"method": "get", "path": "/users", "tags": ["users"]}
        )
        canonical = doc.export()
    """

    def __init__(self) -> None:
        self._spec: dict[str, Any] = {}
        self._endpoints: dict[str, Endpoint] = {}
        self._ids = itertools.count(1)
        self.initialize_empty()

    # ------------------------------------------------------------------ #
    # Whole-document lifecycle
    # ------------------------------------------------------------------ #

    def initialize_empty(self) -> None:
        """Reset to the default skeleton and clear the endpoint index."""
        self._spec = _empty_skeleton()
        self._endpoints.clear()
        logger.debug("Initialised empty document")

    def import_document(self, doc: Mapping[str, Any]) -> None:
        """Replace the whole document with *doc*.

        Only ``openapi``, ``info`` and ``paths`` are required; everything
        else is adopted as-is. The endpoint index is rebuilt from ``paths``
        with fresh identifiers.

        Args:
            doc: A parsed OpenAPI document.

        Raises:
            FormatError: If *doc* is not a mapping or lacks a required root
                key. The current document is left untouched.
        """
        if not isinstance(doc, Mapping):
            raise FormatError(
                f"Invalid OpenAPI specification format: expected an object, got {type(doc).__name__}"
            )
        missing = [key for key in _REQUIRED_ROOT_KEYS if _is_absent(doc.get(key))]
        if missing:
            raise FormatError(
                "Invalid OpenAPI specification format: missing " + ", ".join(missing)
            )
        paths = doc["paths"]
        if not isinstance(paths, Mapping):
            raise FormatError("Invalid OpenAPI specification format: 'paths' must be an object")

        spec = copy.deepcopy(dict(doc))
        endpoints = self._index_paths(spec["paths"])

        self._spec = spec
        self._endpoints = endpoints
        logger.debug("Imported document with %d endpoint(s)", len(endpoints))

    def export(self) -> dict[str, Any]:
        """Write the endpoint index back to ``paths`` and return the canonical document.

        The result is a new, canonically ordered dict (see
        :func:`~specedit.serializer.sort_openapi_spec`); mutating it does not
        affect the model. Calling ``export`` twice without a mutation in
        between yields equal results.
        """
        self._sync_paths()
        return sort_openapi_spec(self._spec)

    def _index_paths(self, paths: Mapping[str, Any]) -> dict[str, Endpoint]:
        endpoints: dict[str, Endpoint] = {}
        for path, path_item in paths.items():
            if not isinstance(path_item, Mapping):
                continue
            for method, operation in path_item.items():
                if method not in _METHODS:
                    continue
                if not isinstance(operation, Mapping):
                    operation = {}
                data = {key: value for key, value in operation.items() if key != "id"}
                data["method"] = method
                data["path"] = str(path)
                data["responses"] = operation.get("responses") or {}
                endpoints[self._next_id()] = Endpoint.model_validate(data)
        return endpoints

    def _sync_paths(self) -> None:
        paths: dict[str, Any] = {}
        for endpoint in self._endpoints.values():
            operations = paths.setdefault(endpoint.path, {})
            operations[endpoint.method.value] = copy.deepcopy(endpoint.to_operation())
        self._spec["paths"] = paths

    # ------------------------------------------------------------------ #
    # API info
    # ------------------------------------------------------------------ #

    def update_api_info(self, field: str, value: str) -> None:
        """Set ``title``, ``version``, ``description`` or ``baseUrl``.

        ``baseUrl`` is the URL of the first server; a server entry is
        created when the document has none.

        Raises:
            InvalidValueError: If *field* is not one of the four above.
        """
        if field not in _API_INFO_FIELDS:
            raise InvalidValueError(
                f"Unknown API info field '{field}'. Expected one of: {', '.join(_API_INFO_FIELDS)}"
            )
        if field == "baseUrl":
            servers = self._spec.get("servers")
            if not isinstance(servers, list) or not servers:
                self._spec["servers"] = [{"url": value}]
            else:
                servers[0] = {**servers[0], "url": value}
            return
        info = self._spec.get("info")
        if not isinstance(info, dict):
            info = self._spec["info"] = {}
        info[field] = value

    def get_api_info(self) -> dict[str, str]:
        """Return title, version, description and base URL (empty strings when unset)."""
        info = self._spec.get("info") or {}
        servers = self._spec.get("servers") or []
        base_url = ""
        if isinstance(servers, list) and servers and isinstance(servers[0], dict):
            base_url = servers[0].get("url") or ""
        return {
            "title": info.get("title") or "",
            "version": info.get("version") or "",
            "description": info.get("description") or "",
            "baseUrl": base_url,
        }

    # ------------------------------------------------------------------ #
    # Endpoints
    # ------------------------------------------------------------------ #

    def _next_id(self) -> str:
        return f"endpoint_{next(self._ids)}"

    @staticmethod
    def _build_endpoint(data: Mapping[str, Any] | Endpoint) -> Endpoint:
        if isinstance(data, Endpoint):
            data = data.model_dump(by_alias=True)
        payload = {key: value for key, value in data.items() if key != "id"}
        try:
            return Endpoint.model_validate(copy.deepcopy(payload))
        except ValidationError as exc:
            raise InvalidValueError(f"Invalid endpoint data: {exc}") from exc

    def add_endpoint(self, data: Mapping[str, Any] | Endpoint) -> str:
        """Create an endpoint and return its session-local identifier.

        Raises:
            InvalidValueError: If ``method`` or ``path`` is missing or the
                method is not one of :class:`~specedit.models.HTTPMethod`.
        """
        endpoint = self._build_endpoint(data)
        endpoint_id = self._next_id()
        self._endpoints[endpoint_id] = endpoint
        logger.debug("Added endpoint %s %s as %s", endpoint.method.value, endpoint.path, endpoint_id)
        return endpoint_id

    def update_endpoint(self, endpoint_id: str, data: Mapping[str, Any] | Endpoint) -> None:
        """Replace the endpoint stored under *endpoint_id* with one built from *data*.

        Raises:
            NotFoundError: If no endpoint has this identifier.
            InvalidValueError: If *data* does not describe a valid endpoint.
        """
        if endpoint_id not in self._endpoints:
            raise NotFoundError(f"Endpoint not found: {endpoint_id}")
        self._endpoints[endpoint_id] = self._build_endpoint(data)
        logger.debug("Updated endpoint %s", endpoint_id)

    def delete_endpoint(self, endpoint_id: str) -> None:
        """Remove an endpoint.

        Raises:
            NotFoundError: If no endpoint has this identifier.
        """
        if endpoint_id not in self._endpoints:
            raise NotFoundError(f"Endpoint not found: {endpoint_id}")
        del self._endpoints[endpoint_id]
        logger.debug("Deleted endpoint %s", endpoint_id)

    def get_endpoint(self, endpoint_id: str) -> Optional[Endpoint]:
        """Return a copy of the endpoint (with ``id`` set), or ``None``."""
        endpoint = self._endpoints.get(endpoint_id)
        if endpoint is None:
            return None
        return endpoint.model_copy(update={"id": endpoint_id}, deep=True)

    def get_all_endpoints(self) -> list[Endpoint]:
        """Return copies of every endpoint in creation/import order."""
        return [
            endpoint.model_copy(update={"id": endpoint_id}, deep=True)
            for endpoint_id, endpoint in self._endpoints.items()
        ]

    def find_endpoint(self, method: str, path: str) -> Optional[str]:
        """Return the identifier of the first endpoint at *method* and *path*."""
        method = method.lower()
        for endpoint_id, endpoint in self._endpoints.items():
            if endpoint.method.value == method and endpoint.path == path:
                return endpoint_id
        return None

    def get_endpoints_by_tag(self) -> dict[str, list[Endpoint]]:
        """Group endpoints by tag name.

        Declared tags come first (in declaration order) and appear even when
        no endpoint uses them. Undeclared tag names used by endpoints follow
        in order of first use. An endpoint with several tags is listed under
        each of them. Endpoints without tags are collected under
        :data:`UNTAGGED`, which is only present when non-empty.
        """
        groups: dict[str, list[Endpoint]] = {
            tag.get("name"): [] for tag in self._tags() if isinstance(tag, dict)
        }
        untagged: list[Endpoint] = []
        for endpoint in self.get_all_endpoints():
            if not endpoint.tag_names:
                untagged.append(endpoint)
                continue
            for tag_name in endpoint.tag_names:
                groups.setdefault(tag_name, []).append(endpoint)
        if untagged:
            groups[UNTAGGED] = untagged
        return groups

    # ------------------------------------------------------------------ #
    # Components (schemas, responses, security schemes)
    # ------------------------------------------------------------------ #

    def _category(self, category: str, create: bool = False) -> Optional[dict[str, Any]]:
        components = self._spec.get("components")
        if not isinstance(components, dict):
            if not create:
                return None
            components = self._spec["components"] = {}
        entries = components.get(category)
        if not isinstance(entries, dict):
            if not create:
                return None
            entries = components[category] = {}
        return entries

    def _add_component(self, category: str, name: str, value: Any) -> None:
        component = copy.deepcopy(to_component(value))
        self._category(category, create=True)[name] = component
        logger.debug("Added %s/%s", category, name)

    def _update_component(self, category: str, name: str, value: Any) -> None:
        component = copy.deepcopy(to_component(value))
        entries = self._category(category)
        if entries is None or name not in entries:
            return
        entries[name] = component

    def _delete_component(self, category: str, name: str) -> None:
        entries = self._category(category)
        if entries is not None:
            entries.pop(name, None)

    def _get_component(self, category: str, name: str) -> Optional[dict[str, Any]]:
        entries = self._category(category) or {}
        return copy.deepcopy(entries.get(name))

    def _get_all_components(self, category: str) -> dict[str, Any]:
        return copy.deepcopy(self._category(category) or {})

    def add_schema(self, name: str, schema: Any) -> None:
        """Add or replace ``components.schemas[name]``.

        *schema* may be a raw mapping or a builder from
        :mod:`specedit.components`.
        """
        self._add_component("schemas", name, schema)

    def update_schema(self, name: str, schema: Any) -> None:
        """Replace an existing schema; silently ignored when *name* is absent."""
        self._update_component("schemas", name, schema)

    def delete_schema(self, name: str) -> None:
        self._delete_component("schemas", name)

    def get_schema(self, name: str) -> Optional[dict[str, Any]]:
        return self._get_component("schemas", name)

    def get_all_schemas(self) -> dict[str, Any]:
        return self._get_all_components("schemas")

    def add_response(self, name: str, response: Any) -> None:
        self._add_component("responses", name, response)

    def update_response(self, name: str, response: Any) -> None:
        """Replace an existing response; silently ignored when *name* is absent."""
        self._update_component("responses", name, response)

    def delete_response(self, name: str) -> None:
        self._delete_component("responses", name)

    def get_response(self, name: str) -> Optional[dict[str, Any]]:
        return self._get_component("responses", name)

    def get_all_responses(self) -> dict[str, Any]:
        return self._get_all_components("responses")

    def add_security_scheme(self, name: str, scheme: Any) -> None:
        """Add or replace ``components.securitySchemes[name]``.

        Existing references to *name* are not touched; use
        :meth:`rename_security_scheme` to rename a scheme in use.
        """
        self._add_component("securitySchemes", name, scheme)

    def update_security_scheme(self, name: str, scheme: Any) -> None:
        """Replace an existing scheme; silently ignored when *name* is absent."""
        self._update_component("securitySchemes", name, scheme)

    def delete_security_scheme(self, name: str) -> None:
        self._delete_component("securitySchemes", name)

    def get_security_scheme(self, name: str) -> Optional[dict[str, Any]]:
        return self._get_component("securitySchemes", name)

    def get_all_security_schemes(self) -> dict[str, Any]:
        return self._get_all_components("securitySchemes")

    def rename_security_scheme(
        self, old_name: str, new_name: str, scheme: Any = None
    ) -> None:
        """Rename a security scheme and keep every requirement pointing at it.

        The entry is re-added under *new_name* (with *scheme* as its new
        definition when given) and every endpoint-level and global
        requirement keyed by *old_name* is rewritten. With an unchanged name
        this is a plain :meth:`update_security_scheme`.

        Raises:
            NotFoundError: If *old_name* is not a declared scheme.
            DuplicateError: If *new_name* is another declared scheme. Nothing
                is changed.
        """
        current = self.get_security_scheme(old_name)
        if current is None:
            raise NotFoundError(f"Security scheme not found: {old_name}")
        if new_name != old_name and self.get_security_scheme(new_name) is not None:
            raise DuplicateError(f"Security scheme already exists: {new_name}")
        definition = to_component(scheme) if scheme is not None else current
        if new_name == old_name:
            self.update_security_scheme(old_name, definition)
            return
        self.delete_security_scheme(old_name)
        self.add_security_scheme(new_name, definition)
        self.update_security_scheme_references(old_name, new_name)

    def update_security_scheme_references(self, old_name: str, new_name: str) -> None:
        """Re-key every security requirement that names *old_name*.

        Endpoint-level and global requirement lists are both rewritten; the
        scope list moves with the key. ``paths`` is re-synchronised
        afterwards.
        """
        for endpoint in self._endpoints.values():
            if endpoint.security:
                endpoint.security = _rename_requirement_key(endpoint.security, old_name, new_name)
        if self._spec.get("security"):
            self._spec["security"] = _rename_requirement_key(
                self._spec["security"], old_name, new_name
            )
        self._sync_paths()
        logger.debug("Renamed security scheme references %s -> %s", old_name, new_name)

    def set_global_security(self, requirements: list[dict[str, list[str]]]) -> None:
        """Replace the document-wide security requirement list."""
        self._spec["security"] = copy.deepcopy(list(requirements))

    def get_global_security(self) -> list[dict[str, list[str]]]:
        return copy.deepcopy(self._spec.get("security") or [])

    # ------------------------------------------------------------------ #
    # Tags
    # ------------------------------------------------------------------ #

    def _tags(self) -> list[Any]:
        tags = self._spec.get("tags")
        return tags if isinstance(tags, list) else []

    def _tag_index(self, name: str) -> int:
        for index, tag in enumerate(self._tags()):
            if isinstance(tag, dict) and tag.get("name") == name:
                return index
        return -1

    @staticmethod
    def _check_tag(name: str, description: str) -> Tag:
        try:
            return Tag(name=name, description=description or "")
        except ValidationError:
            raise InvalidValueError(
                f"Invalid tag name '{name}': tag names can only contain letters, "
                "numbers, underscores, and hyphens"
            ) from None

    def add_tag(self, name: str, description: str = "") -> None:
        """Declare a new tag.

        Raises:
            InvalidValueError: If *name* is empty or has characters outside
                letters, digits, ``_`` and ``-``.
            DuplicateError: If a tag with this name already exists.
        """
        tag = self._check_tag(name, description)
        if self._tag_index(name) != -1:
            raise DuplicateError(f"Tag with this name already exists: {name}")
        if not isinstance(self._spec.get("tags"), list):
            self._spec["tags"] = []
        self._spec["tags"].append(tag.model_dump())
        logger.debug("Added tag %s", name)

    def update_tag(self, old_name: str, new_name: str, description: str = "") -> None:
        """Rename and/or redescribe a tag, rewriting it on every endpoint.

        The name rules only apply to a new name, so an imported tag such as
        ``"User Management"`` can still be redescribed.

        Raises:
            NotFoundError: If *old_name* is not declared.
            DuplicateError: If *new_name* is another declared tag.
            InvalidValueError: If *new_name* is not a valid tag name.
        """
        index = self._tag_index(old_name)
        if index == -1:
            raise NotFoundError(f"Tag not found: {old_name}")
        renaming = new_name != old_name
        if renaming:
            self._check_tag(new_name, description)
            if self._tag_index(new_name) != -1:
                raise DuplicateError(f"Tag with this name already exists: {new_name}")

        self._spec["tags"][index] = {
            **self._spec["tags"][index],
            "name": new_name,
            "description": description or "",
        }
        if renaming:
            for endpoint in self._endpoints.values():
                if old_name not in endpoint.tag_names:
                    continue
                renamed: list[str] = []
                for tag_name in endpoint.tag_names:
                    tag_name = new_name if tag_name == old_name else tag_name
                    if tag_name not in renamed:
                        renamed.append(tag_name)
                endpoint.tags = renamed
        logger.debug("Updated tag %s -> %s", old_name, new_name)

    def delete_tag(self, name: str) -> None:
        """Remove a tag declaration and strip the name from every endpoint."""
        if isinstance(self._spec.get("tags"), list):
            self._spec["tags"] = [
                tag for tag in self._spec["tags"]
                if not (isinstance(tag, dict) and tag.get("name") == name)
            ]
        for endpoint in self._endpoints.values():
            if name in endpoint.tag_names:
                endpoint.tags = [tag_name for tag_name in endpoint.tags if tag_name != name]

    def get_tag(self, name: str) -> Optional[dict[str, Any]]:
        index = self._tag_index(name)
        if index == -1:
            return None
        return copy.deepcopy(self._tags()[index])

    def get_all_tags(self) -> list[dict[str, Any]]:
        return copy.deepcopy(self._tags())
