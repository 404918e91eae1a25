"""Typed builders for schema and security-scheme components.

The document model stores components as raw OpenAPI dicts so that imported
documents are adopted untouched. When a component is *authored* through the
editor, it is built from one of the tagged variants below instead, which only
carry the fields that apply to their type:

* Schemas: :class:`StringSchema`, :class:`IntegerSchema`,
  :class:`NumberSchema`, :class:`BooleanSchema`, :class:`ArraySchema`,
  :class:`ObjectSchema` -- discriminated by ``type``.
* Security schemes: :class:`ApiKeyScheme`, :class:`HttpScheme`,
  :class:`OAuth2Scheme`, :class:`OpenIdConnectScheme` -- discriminated by
  ``type``.

Every variant renders itself with ``to_openapi()``. :func:`parse_schema` and
:func:`parse_security_scheme` go the other way, turning a raw dict into the
matching variant.

Example::

    pet = ObjectSchema(
        properties={
            "name": StringSchema(description="Pet name"),
            "age": IntegerSchema(minimum=0),
        },
        required=["name"],
    )
    document.add_schema("Pet", pet)
"""

from __future__ import annotations

import json
from typing import Annotated, Any, Literal, Mapping, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
    model_validator,
)

from specedit.exceptions import InvalidValueError


# --- Schemas ---


class _SchemaBase(BaseModel):
    """Fields shared by every schema variant."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    description: Optional[str] = None
    example: Any = None

    def to_openapi(self) -> dict[str, Any]:
        """Render the OpenAPI *Schema Object* for this variant."""
        return self.model_dump(by_alias=True, exclude_none=True)


class StringSchema(_SchemaBase):
    type: Literal["string"] = "string"
    default: Optional[str] = None
    enum: Optional[list[str]] = None

    @field_validator("enum", mode="before")
    @classmethod
    def _drop_empty_enum(cls, value: Any) -> Any:
        return value or None


class IntegerSchema(_SchemaBase):
    type: Literal["integer"] = "integer"
    default: Optional[int] = None
    minimum: Optional[int] = None
    maximum: Optional[int] = None
    multiple_of: Optional[int] = Field(default=None, alias="multipleOf")


class NumberSchema(_SchemaBase):
    type: Literal["number"] = "number"
    default: Optional[Union[int, float]] = None


class BooleanSchema(_SchemaBase):
    type: Literal["boolean"] = "boolean"
    default: Optional[bool] = None


class ArraySchema(_SchemaBase):
    type: Literal["array"] = "array"
    items: Schema = Field(default_factory=StringSchema)
    default: Optional[list[Any]] = None


class ObjectSchema(_SchemaBase):
    """An object schema. ``required`` names must be declared properties."""

    type: Literal["object"] = "object"
    properties: dict[str, Schema] = Field(default_factory=dict)
    required: Optional[list[str]] = None
    default: Optional[dict[str, Any]] = None

    @field_validator("required", mode="before")
    @classmethod
    def _drop_empty_required(cls, value: Any) -> Any:
        return value or None

    @model_validator(mode="after")
    def _required_are_properties(self) -> ObjectSchema:
        unknown = [name for name in self.required or [] if name not in self.properties]
        if unknown:
            raise ValueError(f"required names are not properties: {', '.join(unknown)}")
        return self


Schema = Annotated[
    Union[
        StringSchema,
        IntegerSchema,
        NumberSchema,
        BooleanSchema,
        ArraySchema,
        ObjectSchema,
    ],
    Field(discriminator="type"),
]

ArraySchema.model_rebuild()
ObjectSchema.model_rebuild()

SCHEMA_TYPES = ("string", "integer", "number", "boolean", "array", "object")

_schema_adapter: TypeAdapter[Any] = TypeAdapter(Schema)


def parse_schema(raw: Mapping[str, Any]) -> Any:
    """Build the schema variant matching ``raw["type"]``.

    Raises:
        InvalidValueError: If the type is missing or unknown, or a field does
            not fit the declared type.
    """
    try:
        return _schema_adapter.validate_python(dict(raw))
    except ValidationError as exc:
        raise InvalidValueError(f"Invalid schema: {exc}") from exc


def parse_default(schema_type: str, text: str) -> Any:
    """Coerce a textual default value to *schema_type*.

    Empty text means "no default" and yields ``None``. Booleans accept
    ``true``/``false`` in any case; arrays and objects must be JSON of the
    matching shape; any other type keeps the text as a string.

    Raises:
        InvalidValueError: If *text* does not parse as the declared type.

    Example::

        >>> parse_default("integer", "42")
        42
        >>> parse_default("array", '["a", "b"]')
        ['a', 'b']
    """
    text = text.strip()
    if not text:
        return None

    if schema_type == "boolean":
        if text.lower() == "true":
            return True
        if text.lower() == "false":
            return False
        raise InvalidValueError(f"Invalid boolean value: {text}")

    if schema_type == "integer":
        try:
            return int(text)
        except ValueError:
            raise InvalidValueError(f"Invalid integer value: {text}") from None

    if schema_type == "number":
        try:
            return float(text)
        except ValueError:
            raise InvalidValueError(f"Invalid number value: {text}") from None

    if schema_type in ("array", "object"):
        expected = list if schema_type == "array" else dict
        try:
            value = json.loads(text)
        except json.JSONDecodeError:
            value = None
        if not isinstance(value, expected):
            raise InvalidValueError(
                f"Invalid {schema_type} value - must be a valid JSON {schema_type}"
            )
        return value

    return text


# --- Security schemes ---


class _SchemeBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    description: Optional[str] = None

    def to_openapi(self) -> dict[str, Any]:
        """Render the OpenAPI *Security Scheme Object* for this variant."""
        return self.model_dump(by_alias=True, exclude_none=True)


class ApiKeyScheme(_SchemeBase):
    type: Literal["apiKey"] = "apiKey"
    name: str = Field(min_length=1)
    location: Literal["query", "header", "cookie"] = Field(default="header", alias="in")


class HttpScheme(_SchemeBase):
    """HTTP authentication. ``bearerFormat`` is only kept for the bearer scheme."""

    type: Literal["http"] = "http"
    scheme: str = Field(min_length=1)
    bearer_format: Optional[str] = Field(default=None, alias="bearerFormat")

    @model_validator(mode="after")
    def _bearer_format_only_for_bearer(self) -> HttpScheme:
        if self.scheme.lower() != "bearer":
            self.bearer_format = None
        return self


class OAuthFlow(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    authorization_url: Optional[str] = Field(default=None, alias="authorizationUrl")
    token_url: Optional[str] = Field(default=None, alias="tokenUrl")
    refresh_url: Optional[str] = Field(default=None, alias="refreshUrl")
    scopes: dict[str, str] = Field(default_factory=dict)


class OAuthFlows(BaseModel):
    """The four OAuth2 flows; at least one must be configured."""

    model_config = ConfigDict(populate_by_name=True)

    implicit: Optional[OAuthFlow] = None
    password: Optional[OAuthFlow] = None
    client_credentials: Optional[OAuthFlow] = Field(default=None, alias="clientCredentials")
    authorization_code: Optional[OAuthFlow] = Field(default=None, alias="authorizationCode")

    @model_validator(mode="after")
    def _check_flows(self) -> OAuthFlows:
        configured = {
            "implicit": self.implicit,
            "password": self.password,
            "clientCredentials": self.client_credentials,
            "authorizationCode": self.authorization_code,
        }
        if not any(configured.values()):
            raise ValueError("at least one OAuth2 flow must be configured")
        for flow_name, flow in configured.items():
            if flow is None:
                continue
            if flow_name in ("implicit", "authorizationCode") and not flow.authorization_url:
                raise ValueError(f"{flow_name} flow requires authorizationUrl")
            if flow_name != "implicit" and not flow.token_url:
                raise ValueError(f"{flow_name} flow requires tokenUrl")
        return self


class OAuth2Scheme(_SchemeBase):
    type: Literal["oauth2"] = "oauth2"
    flows: OAuthFlows


class OpenIdConnectScheme(_SchemeBase):
    type: Literal["openIdConnect"] = "openIdConnect"
    open_id_connect_url: str = Field(min_length=1, alias="openIdConnectUrl")


SecurityScheme = Annotated[
    Union[ApiKeyScheme, HttpScheme, OAuth2Scheme, OpenIdConnectScheme],
    Field(discriminator="type"),
]

SECURITY_SCHEME_TYPES = ("apiKey", "http", "oauth2", "openIdConnect")

_scheme_adapter: TypeAdapter[Any] = TypeAdapter(SecurityScheme)


def parse_security_scheme(raw: Mapping[str, Any]) -> Any:
    """Build the security-scheme variant matching ``raw["type"]``.

    Raises:
        InvalidValueError: If the type is unknown or a type-specific field
            is missing.
    """
    try:
        return _scheme_adapter.validate_python(dict(raw))
    except ValidationError as exc:
        raise InvalidValueError(f"Invalid security scheme: {exc}") from exc


def to_component(value: Any) -> dict[str, Any]:
    """Return the raw component dict for a builder model or a plain mapping."""
    if isinstance(value, (_SchemaBase, _SchemeBase)):
        return value.to_openapi()
    if isinstance(value, Mapping):
        return dict(value)
    raise InvalidValueError(
        f"Component must be a mapping or a builder model, got {type(value).__name__}"
    )
