"""Canonical Pydantic models shared across all specedit modules.

This is the single source of truth for data shapes in the project. Every other
module imports from here rather than defining its own models. The models fall
into three groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`StorageConfig`, :class:`ExportConfig`, :class:`OutputConfig`,
    and :class:`GlobalConfig`.

**Editing models** -- the records the document model hands out and accepts:
    :class:`HTTPMethod`, :class:`ParameterLocation`, :class:`Endpoint`, and
    :class:`Tag`.

**Validation models** -- produced by :func:`specedit.validation.validate`:
    :class:`Violation` and :class:`ValidationResult`.

Typed component builders (schemas and security schemes) live in
:mod:`specedit.components` because they render to raw OpenAPI dicts rather
than being stored as models.
"""

from __future__ import annotations

import enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# --- Config ---


class StorageConfig(BaseModel):
    """Where the persisted document snapshot lives.

    The snapshot is one JSON value stored under ``key`` in a
    :mod:`diskcache` directory inside the data directory, unless ``path``
    points at another store directory.
    """

    key: str = Field(
        default="openapi_editor_schema",
        description="Key the snapshot is stored under",
    )
    path: Optional[str] = Field(
        default=None, description="Explicit snapshot store directory"
    )


class ExportConfig(BaseModel):
    """Defaults for ``specedit export``."""

    filename: str = Field(default="openapi.json", description="Export file name")
    indent: int = Field(default=2, description="JSON indentation width")


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/specedit/config.json``.

    Loaded and saved by :func:`~specedit.config.load_global_config` and
    :func:`~specedit.config.save_global_config`. See
    :func:`~specedit.config.resolve_config` for how environment variables
    layer on top.
    """

    storage: StorageConfig = Field(default_factory=StorageConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)


# --- Editing models ---


class HTTPMethod(str, enum.Enum):
    """HTTP methods an endpoint can be created with.

    ``trace`` is deliberately absent: the editor never creates trace
    operations, and import ignores them.
    """

    GET = "get"
    POST = "post"
    PUT = "put"
    PATCH = "patch"
    DELETE = "delete"
    HEAD = "head"
    OPTIONS = "options"


class ParameterLocation(str, enum.Enum):
    """Locations where an API parameter can appear, per OpenAPI ``in`` field."""

    QUERY = "query"
    HEADER = "header"
    PATH = "path"
    COOKIE = "cookie"


def _default_responses() -> dict[str, Any]:
    return {"200": {"description": "Success"}}


class Endpoint(BaseModel):
    """One operation (path + method) held in the document model's index.

    Construction normalises the optional fields: missing ``summary`` and
    ``description`` become empty strings, missing ``parameters`` and
    ``tags`` become empty lists, and missing ``responses`` become a single
    ``200 Success`` entry. ``request_body`` and ``security`` stay ``None``
    unless supplied.

    Apart from ``method`` and ``path`` the fields are loosely typed so that
    an imported work-in-progress document is adopted as-is (a ``tags``
    string, a ``parameters`` object); the validator reports such problems.
    Tag logic reads :attr:`tag_names`, which ignores malformed entries.

    Operation fields the editor does not manage (``operationId``,
    ``deprecated``, ``x-*`` extensions, ...) are preserved in
    ``model_extra`` and written back on export.

    ``id`` is the session-local identifier. It is only set on the copies
    returned by the document model's getters and is never exported.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: Optional[str] = Field(default=None, exclude=True)
    method: HTTPMethod
    path: str
    summary: Any = ""
    description: Any = ""
    parameters: Any = Field(default_factory=list)
    responses: Any = Field(default_factory=_default_responses)
    request_body: Optional[Any] = Field(default=None, alias="requestBody")
    tags: Any = Field(default_factory=list)
    security: Optional[Any] = None

    @field_validator("method", mode="before")
    @classmethod
    def _lowercase_method(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.lower()
        return value

    @field_validator("summary", "description", mode="before")
    @classmethod
    def _empty_text(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("parameters", "tags", mode="before")
    @classmethod
    def _empty_list(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("responses", mode="before")
    @classmethod
    def _default_when_missing(cls, value: Any) -> Any:
        return _default_responses() if value is None else value

    @property
    def tag_names(self) -> list[str]:
        """The string entries of ``tags``; empty when ``tags`` is not a list."""
        if not isinstance(self.tags, list):
            return []
        return [tag for tag in self.tags if isinstance(tag, str)]

    def to_operation(self) -> dict[str, Any]:
        """Render the OpenAPI *Operation Object* written under ``paths``.

        Empty parameter and tag lists, empty or absent security, and an
        absent request body are omitted rather than written as placeholders.
        """
        operation: dict[str, Any] = dict(self.model_extra or {})
        operation["summary"] = self.summary
        operation["description"] = self.description
        operation["responses"] = self.responses
        if self.parameters:
            operation["parameters"] = self.parameters
        if self.tags:
            operation["tags"] = self.tags
        if self.security:
            operation["security"] = self.security
        if self.request_body is not None:
            operation["requestBody"] = self.request_body
        return operation


TAG_NAME_PATTERN = r"^[A-Za-z0-9_-]+$"


class Tag(BaseModel):
    """A declared tag. Names are limited to letters, digits, ``_`` and ``-``."""

    name: str = Field(pattern=TAG_NAME_PATTERN)
    description: str = ""


# --- Validation models ---


class Violation(BaseModel):
    """A single structural problem found by the validator.

    ``pointer`` is an RFC 6901 JSON Pointer into the exported document
    (``/paths/~1users/get/responses``).
    """

    pointer: str
    message: str


class ValidationResult(BaseModel):
    """Outcome of :func:`specedit.validation.validate`."""

    valid: bool
    violations: list[Violation] = Field(default_factory=list)
