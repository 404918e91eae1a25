"""Deterministic key ordering for stable OpenAPI JSON output.

Two documents with the same content must serialise to byte-identical JSON no
matter in which order their keys were inserted. This module provides the two
pure transforms used by :meth:`specedit.document.OpenAPIDocument.export`:

* :func:`sort_object_keys` -- recursive lexicographic key ordering.
* :func:`sort_openapi_spec` -- the same, except that the root and the
  ``components`` block follow the conventional OpenAPI section order.

Neither function mutates its input; both return new containers.
"""

from __future__ import annotations

from typing import Any

TOP_LEVEL_ORDER = (
    "openapi",
    "info",
    "servers",
    "paths",
    "components",
    "security",
    "tags",
    "externalDocs",
)

COMPONENTS_ORDER = (
    "schemas",
    "responses",
    "parameters",
    "examples",
    "requestBodies",
    "headers",
    "securitySchemes",
    "links",
    "callbacks",
)


def sort_object_keys(value: Any) -> Any:
    """Return a copy of *value* with every mapping's keys in ascending order.

    Keys compare as strings, so integer keys loaded from YAML sort among
    the rest. Lists keep their element order but each element is recursed
    into. Scalars are returned unchanged.

    Args:
        value: Any JSON-representable value (assumed acyclic).

    Returns:
        The reordered copy.

    Example::

        >>> sort_object_keys({"b": 1, "a": [{"d": 2, "c": 3}]})
        {'a': [{'c': 3, 'd': 2}], 'b': 1}
    """
    if isinstance(value, dict):
        return {key: sort_object_keys(value[key]) for key in sorted(value, key=str)}
    if isinstance(value, (list, tuple)):
        return [sort_object_keys(item) for item in value]
    return value


def _ordered(mapping: dict[str, Any], preferred: tuple[str, ...]) -> dict[str, Any]:
    """Order *mapping* by *preferred* first, then the remaining keys alphabetically."""
    result: dict[str, Any] = {}
    for key in preferred:
        if key in mapping:
            result[key] = sort_object_keys(mapping[key])
    for key in sorted((k for k in mapping if k not in preferred), key=str):
        result[key] = sort_object_keys(mapping[key])
    return result


def sort_openapi_spec(spec: Any) -> Any:
    """Canonically order a whole OpenAPI document.

    The root follows :data:`TOP_LEVEL_ORDER` and ``components`` follows
    :data:`COMPONENTS_ORDER`; unlisted keys at either level are appended
    alphabetically. Every other level, including the entries inside each
    components category and the ``paths`` map, is ordered alphabetically.

    Args:
        spec: The document. A non-mapping root is ordered with
            :func:`sort_object_keys`.

    Returns:
        A new, canonically ordered document.
    """
    if not isinstance(spec, dict):
        return sort_object_keys(spec)

    result = _ordered(spec, TOP_LEVEL_ORDER)
    components = spec.get("components")
    if isinstance(components, dict):
        result["components"] = _ordered(components, COMPONENTS_ORDER)
    return result
