"""Tests for specedit.document -- the document model and reference tracker."""

from __future__ import annotations

import copy
import json
from typing import Any

import pytest

from specedit.components import ApiKeyScheme, IntegerSchema, ObjectSchema, StringSchema
from specedit.document import UNTAGGED, OpenAPIDocument
from specedit.exceptions import DuplicateError, FormatError, InvalidValueError, NotFoundError
from specedit.models import Endpoint, HTTPMethod
from specedit.serializer import COMPONENTS_ORDER
from specedit.validation import validate


def _minimal(**extra: Any) -> dict[str, Any]:
    doc = {"openapi": "3.1.0", "info": {"title": "T", "version": "1"}, "paths": {}}
    doc.update(extra)
    return doc


# ---------------------------------------------------------------------------
# Skeleton and lifecycle
# ---------------------------------------------------------------------------


class TestEmptyDocument:
    """A new document holds the default skeleton."""

    def test_skeleton_export(self, document: OpenAPIDocument) -> None:
        exported = document.export()
        assert exported["openapi"] == "3.1.1"
        assert exported["info"] == {"description": "", "title": "My API", "version": "1.0.0"}
        assert exported["servers"] == [
            {"description": "Production server", "url": "https://api.example.com"}
        ]
        assert exported["paths"] == {}
        assert list(exported["components"]) == list(COMPONENTS_ORDER)
        assert all(value == {} for value in exported["components"].values())
        assert "security" not in exported
        assert "tags" not in exported

    def test_skeleton_is_valid(self, document: OpenAPIDocument) -> None:
        assert validate(document.export()).valid

    def test_initialize_empty_discards_everything(
        self, petstore_document: OpenAPIDocument
    ) -> None:
        petstore_document.initialize_empty()
        assert petstore_document.get_all_endpoints() == []
        assert petstore_document.export() == OpenAPIDocument().export()


class TestEndToEnd:
    """Empty -> add GET /users -> export -> validate."""

    def test_add_single_endpoint(self, document: OpenAPIDocument) -> None:
        document.add_endpoint({"method": "GET", "path": "/users"})

        endpoints = document.get_all_endpoints()
        assert len(endpoints) == 1
        assert endpoints[0].method == HTTPMethod.GET

        operation = document.export()["paths"]["/users"]["get"]
        assert operation == {
            "description": "",
            "responses": {"200": {"description": "Success"}},
            "summary": "",
        }
        assert "parameters" not in operation
        assert "tags" not in operation
        assert "security" not in operation

        assert validate(document.export()).valid


# ---------------------------------------------------------------------------
# Import / export
# ---------------------------------------------------------------------------


class TestImport:
    """import_document adopts a document and rebuilds the endpoint index."""

    def test_indexes_every_operation(self, petstore_document: OpenAPIDocument) -> None:
        endpoints = petstore_document.get_all_endpoints()
        assert [(e.method.value, e.path) for e in endpoints] == [
            ("get", "/pets"),
            ("post", "/pets"),
            ("get", "/pets/{petId}"),
            ("get", "/health"),
        ]
        assert [e.id for e in endpoints] == [
            "endpoint_1",
            "endpoint_2",
            "endpoint_3",
            "endpoint_4",
        ]

    @pytest.mark.parametrize("missing", ["openapi", "info", "paths"])
    def test_missing_required_key_raises(self, missing: str) -> None:
        doc = _minimal()
        del doc[missing]
        with pytest.raises(FormatError, match=missing):
            OpenAPIDocument().import_document(doc)

    def test_blank_version_counts_as_missing(self) -> None:
        with pytest.raises(FormatError, match="openapi"):
            OpenAPIDocument().import_document(_minimal(openapi="  "))

    def test_non_mapping_raises(self) -> None:
        with pytest.raises(FormatError):
            OpenAPIDocument().import_document(["not", "a", "document"])  # type: ignore[arg-type]

    def test_paths_must_be_mapping(self) -> None:
        with pytest.raises(FormatError, match="paths"):
            OpenAPIDocument().import_document(_minimal(paths=["/users"]))

    def test_failed_import_leaves_state_unchanged(
        self, petstore_document: OpenAPIDocument
    ) -> None:
        before = petstore_document.export()
        with pytest.raises(FormatError):
            petstore_document.import_document({"openapi": "3.1.0"})
        assert petstore_document.export() == before
        assert len(petstore_document.get_all_endpoints()) == 4

    def test_unknown_root_keys_and_operation_fields_survive(
        self, petstore_document: OpenAPIDocument
    ) -> None:
        exported = petstore_document.export()
        assert exported["x-internal-id"] == "petstore-42"
        assert exported["paths"]["/pets"]["get"]["operationId"] == "listPets"

    def test_stored_ids_are_ignored(self) -> None:
        doc = OpenAPIDocument()
        doc.import_document(
            _minimal(paths={"/a": {"get": {"id": "custom", "responses": {"200": {"description": "ok"}}}}})
        )
        assert doc.get_endpoint("custom") is None
        assert "id" not in doc.export()["paths"]["/a"]["get"]

    def test_missing_responses_become_empty(self) -> None:
        doc = OpenAPIDocument()
        doc.import_document(_minimal(paths={"/a": {"get": {"summary": "no responses"}}}))
        assert doc.export()["paths"]["/a"]["get"]["responses"] == {}

    def test_non_operation_keys_are_skipped(self) -> None:
        doc = OpenAPIDocument()
        doc.import_document(
            _minimal(
                paths={
                    "/a": {
                        "summary": "path-level text",
                        "trace": {"responses": {"200": {"description": "ok"}}},
                        "get": {"responses": {"200": {"description": "ok"}}},
                    }
                }
            )
        )
        assert len(doc.get_all_endpoints()) == 1
        assert list(doc.export()["paths"]["/a"]) == ["get"]

    def test_wrong_typed_operation_fields_are_adopted(self) -> None:
        doc = OpenAPIDocument()
        doc.import_document(
            _minimal(
                paths={
                    "/u": {"get": {"parameters": {"name": "x"}, "responses": {}}},
                    "/v": {"get": {"tags": "users", "summary": 5, "responses": {}}},
                }
            )
        )
        assert len(doc.get_all_endpoints()) == 2

        exported = doc.export()
        assert exported["paths"]["/u"]["get"]["parameters"] == {"name": "x"}
        assert exported["paths"]["/v"]["get"]["summary"] == 5

        result = validate(exported)
        assert not result.valid
        assert any(
            v.pointer == "/paths/~1u/get/parameters" and "parameters must be an array" in v.message
            for v in result.violations
        )

    def test_string_tags_count_as_untagged(self) -> None:
        doc = OpenAPIDocument()
        doc.import_document(
            _minimal(paths={"/v": {"get": {"tags": "users", "responses": {}}}})
        )
        endpoint = doc.get_endpoint("endpoint_1")
        assert endpoint.tag_names == []
        assert list(doc.get_endpoints_by_tag()) == [UNTAGGED]
        doc.delete_tag("users")
        assert doc.export()["paths"]["/v"]["get"]["tags"] == "users"

    def test_reimport_discards_old_identifiers(
        self, petstore_document: OpenAPIDocument, petstore_raw: dict[str, Any]
    ) -> None:
        petstore_document.import_document(petstore_raw)
        assert petstore_document.get_endpoint("endpoint_1") is None
        assert len(petstore_document.get_all_endpoints()) == 4

    def test_import_does_not_alias_input(self, petstore_raw: dict[str, Any]) -> None:
        doc = OpenAPIDocument()
        doc.import_document(petstore_raw)
        petstore_raw["info"]["title"] = "Changed"
        petstore_raw["paths"]["/pets"]["get"]["summary"] = "Changed"
        exported = doc.export()
        assert exported["info"]["title"] == "Petstore"
        assert exported["paths"]["/pets"]["get"]["summary"] == "List all pets"


class TestExport:
    """export writes the index back to paths and orders keys canonically."""

    def test_round_trip_is_stable(self, petstore_document: OpenAPIDocument) -> None:
        first = petstore_document.export()
        other = OpenAPIDocument()
        other.import_document(first)
        assert json.dumps(other.export()) == json.dumps(first)

    def test_repeated_export_is_identical(self, petstore_document: OpenAPIDocument) -> None:
        assert json.dumps(petstore_document.export()) == json.dumps(petstore_document.export())

    def test_export_returns_independent_copy(self, petstore_document: OpenAPIDocument) -> None:
        exported = petstore_document.export()
        exported["paths"]["/pets"]["get"]["summary"] = "mutated"
        exported["info"]["title"] = "mutated"
        again = petstore_document.export()
        assert again["paths"]["/pets"]["get"]["summary"] == "List all pets"
        assert again["info"]["title"] == "Petstore"

    def test_insertion_order_does_not_matter(self) -> None:
        first = OpenAPIDocument()
        first.add_endpoint({"method": "post", "path": "/b"})
        first.add_endpoint({"method": "get", "path": "/a"})
        second = OpenAPIDocument()
        second.add_endpoint({"method": "get", "path": "/a"})
        second.add_endpoint({"method": "post", "path": "/b"})
        assert json.dumps(first.export()) == json.dumps(second.export())

    def test_deleted_endpoint_disappears_from_paths(
        self, petstore_document: OpenAPIDocument
    ) -> None:
        petstore_document.delete_endpoint("endpoint_4")
        assert "/health" not in petstore_document.export()["paths"]


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


class TestEndpoints:
    """Endpoint CRUD through session-local identifiers."""

    def test_ids_are_sequential_and_never_reused(self, document: OpenAPIDocument) -> None:
        first = document.add_endpoint({"method": "get", "path": "/a"})
        second = document.add_endpoint({"method": "get", "path": "/b"})
        document.delete_endpoint(first)
        third = document.add_endpoint({"method": "get", "path": "/c"})
        assert (first, second, third) == ("endpoint_1", "endpoint_2", "endpoint_3")

    def test_accepts_endpoint_model(self, document: OpenAPIDocument) -> None:
        endpoint_id = document.add_endpoint(Endpoint(method="delete", path="/a"))
        assert document.get_endpoint(endpoint_id).method == HTTPMethod.DELETE

    @pytest.mark.parametrize(
        "data",
        [
            {"path": "/a"},
            {"method": "get"},
            {"method": "trace", "path": "/a"},
            {"method": "fetch", "path": "/a"},
        ],
    )
    def test_invalid_endpoint_rejected(self, document: OpenAPIDocument, data: dict) -> None:
        with pytest.raises(InvalidValueError):
            document.add_endpoint(data)
        assert document.get_all_endpoints() == []

    def test_optional_fields_are_normalised(self, document: OpenAPIDocument) -> None:
        endpoint_id = document.add_endpoint(
            {"method": "get", "path": "/a", "summary": None, "tags": None, "responses": None}
        )
        endpoint = document.get_endpoint(endpoint_id)
        assert endpoint.summary == ""
        assert endpoint.tags == []
        assert endpoint.responses == {"200": {"description": "Success"}}
        assert endpoint.request_body is None

    def test_update_replaces_endpoint(self, petstore_document: OpenAPIDocument) -> None:
        petstore_document.update_endpoint(
            "endpoint_4", {"method": "head", "path": "/status", "summary": "Status"}
        )
        paths = petstore_document.export()["paths"]
        assert "/health" not in paths
        assert paths["/status"]["head"]["summary"] == "Status"

    def test_update_unknown_id_raises(self, document: OpenAPIDocument) -> None:
        with pytest.raises(NotFoundError):
            document.update_endpoint("endpoint_99", {"method": "get", "path": "/a"})

    def test_update_with_invalid_data_keeps_old(self, petstore_document: OpenAPIDocument) -> None:
        with pytest.raises(InvalidValueError):
            petstore_document.update_endpoint("endpoint_1", {"method": "nope", "path": "/a"})
        assert petstore_document.get_endpoint("endpoint_1").path == "/pets"

    def test_delete_unknown_id_raises(self, document: OpenAPIDocument) -> None:
        with pytest.raises(NotFoundError):
            document.delete_endpoint("endpoint_99")

    def test_get_endpoint_returns_copy(self, petstore_document: OpenAPIDocument) -> None:
        endpoint = petstore_document.get_endpoint("endpoint_1")
        assert endpoint.id == "endpoint_1"
        endpoint.summary = "mutated"
        endpoint.tags.append("mutated")
        fresh = petstore_document.get_endpoint("endpoint_1")
        assert fresh.summary == "List all pets"
        assert fresh.tags == ["pets"]

    def test_get_unknown_endpoint_is_none(self, document: OpenAPIDocument) -> None:
        assert document.get_endpoint("endpoint_1") is None

    def test_find_endpoint(self, petstore_document: OpenAPIDocument) -> None:
        assert petstore_document.find_endpoint("POST", "/pets") == "endpoint_2"
        assert petstore_document.find_endpoint("put", "/pets") is None

    def test_id_is_never_exported(self, document: OpenAPIDocument) -> None:
        document.add_endpoint({"method": "get", "path": "/a", "id": "manual"})
        assert "id" not in document.export()["paths"]["/a"]["get"]


class TestEndpointsByTag:
    """Grouping endpoints by tag."""

    def test_groups_declared_then_untagged(self, petstore_document: OpenAPIDocument) -> None:
        groups = petstore_document.get_endpoints_by_tag()
        assert list(groups) == ["pets", "store", UNTAGGED]
        assert [e.path for e in groups["pets"]] == ["/pets", "/pets", "/pets/{petId}"]
        assert [e.path for e in groups["store"]] == ["/pets/{petId}"]
        assert [e.path for e in groups[UNTAGGED]] == ["/health"]

    def test_declared_tag_without_endpoints_is_listed(self, document: OpenAPIDocument) -> None:
        document.add_tag("empty")
        assert document.get_endpoints_by_tag() == {"empty": []}

    def test_undeclared_tag_is_appended(self, document: OpenAPIDocument) -> None:
        document.add_tag("declared")
        document.add_endpoint({"method": "get", "path": "/a", "tags": ["ad-hoc"]})
        assert list(document.get_endpoints_by_tag()) == ["declared", "ad-hoc"]

    def test_untagged_only_when_present(self, document: OpenAPIDocument) -> None:
        document.add_endpoint({"method": "get", "path": "/a", "tags": ["x"]})
        assert UNTAGGED not in document.get_endpoints_by_tag()


# ---------------------------------------------------------------------------
# API info
# ---------------------------------------------------------------------------


class TestApiInfo:
    def test_update_info_fields(self, document: OpenAPIDocument) -> None:
        document.update_api_info("title", "Pets")
        document.update_api_info("version", "2.0.0")
        document.update_api_info("description", "All about pets")
        info = document.export()["info"]
        assert info == {"description": "All about pets", "title": "Pets", "version": "2.0.0"}

    def test_base_url_sets_first_server(self, document: OpenAPIDocument) -> None:
        document.update_api_info("baseUrl", "https://pets.example.com")
        servers = document.export()["servers"]
        assert servers == [
            {"description": "Production server", "url": "https://pets.example.com"}
        ]
        assert document.get_api_info()["baseUrl"] == "https://pets.example.com"

    def test_base_url_creates_server_when_missing(self) -> None:
        doc = OpenAPIDocument()
        doc.import_document(_minimal())
        doc.update_api_info("baseUrl", "/v1")
        assert doc.export()["servers"] == [{"url": "/v1"}]

    def test_unknown_field_raises(self, document: OpenAPIDocument) -> None:
        with pytest.raises(InvalidValueError, match="contact"):
            document.update_api_info("contact", "x")

    def test_get_api_info(self, petstore_document: OpenAPIDocument) -> None:
        assert petstore_document.get_api_info() == {
            "title": "Petstore",
            "version": "1.0.0",
            "description": "A sample pet store API",
            "baseUrl": "https://petstore.example.com/v1",
        }


# ---------------------------------------------------------------------------
# Components
# ---------------------------------------------------------------------------


class TestComponents:
    """Schemas, responses and security schemes keyed by name."""

    def test_add_schema_from_builder(self, document: OpenAPIDocument) -> None:
        document.add_schema(
            "User",
            ObjectSchema(
                properties={"id": IntegerSchema(), "name": StringSchema()},
                required=["id"],
            ),
        )
        assert document.get_schema("User") == {
            "type": "object",
            "properties": {"id": {"type": "integer"}, "name": {"type": "string"}},
            "required": ["id"],
        }

    def test_add_schema_from_mapping_is_copied(self, document: OpenAPIDocument) -> None:
        raw = {"type": "string", "enum": ["a"]}
        document.add_schema("Letter", raw)
        raw["enum"].append("b")
        assert document.get_schema("Letter") == {"type": "string", "enum": ["a"]}

    def test_add_replaces_existing(self, document: OpenAPIDocument) -> None:
        document.add_schema("A", {"type": "string"})
        document.add_schema("A", {"type": "integer"})
        assert document.get_all_schemas() == {"A": {"type": "integer"}}

    def test_update_missing_is_noop(self, document: OpenAPIDocument) -> None:
        document.update_schema("Ghost", {"type": "string"})
        assert document.get_schema("Ghost") is None

    def test_update_existing(self, document: OpenAPIDocument) -> None:
        document.add_response("NotFound", {"description": "Missing"})
        document.update_response("NotFound", {"description": "Gone"})
        assert document.get_response("NotFound") == {"description": "Gone"}

    def test_delete(self, petstore_document: OpenAPIDocument) -> None:
        petstore_document.delete_schema("Pet")
        petstore_document.delete_schema("Pet")
        assert petstore_document.get_all_schemas() == {}

    def test_getters_return_copies(self, petstore_document: OpenAPIDocument) -> None:
        schemas = petstore_document.get_all_schemas()
        schemas["Pet"]["type"] = "string"
        assert petstore_document.get_schema("Pet")["type"] == "object"

    def test_add_creates_missing_components(self) -> None:
        doc = OpenAPIDocument()
        doc.import_document(_minimal())
        doc.add_response("Error", {"description": "Error"})
        assert doc.export()["components"] == {"responses": {"Error": {"description": "Error"}}}

    def test_rejects_non_mapping_component(self, document: OpenAPIDocument) -> None:
        with pytest.raises(InvalidValueError):
            document.add_schema("Bad", "string")

    def test_security_scheme_from_builder(self, document: OpenAPIDocument) -> None:
        document.add_security_scheme("key", ApiKeyScheme(name="X-Key", location="query"))
        assert document.get_all_security_schemes() == {
            "key": {"type": "apiKey", "name": "X-Key", "in": "query"}
        }
        document.delete_security_scheme("key")
        assert document.get_security_scheme("key") is None


# ---------------------------------------------------------------------------
# Security references
# ---------------------------------------------------------------------------


class TestSecurityReferences:
    """Renaming a security scheme keeps every requirement pointing at it."""

    def test_rename_endpoint_level_reference(self, petstore_document: OpenAPIDocument) -> None:
        petstore_document.rename_security_scheme("petstore_auth", "oauth")

        exported = petstore_document.export()
        schemes = exported["components"]["securitySchemes"]
        assert "petstore_auth" not in schemes
        assert schemes["oauth"]["type"] == "oauth2"
        assert exported["paths"]["/pets"]["post"]["security"] == [{"oauth": ["write:pets"]}]
        assert exported["security"] == [{"api_key": []}]

    def test_rename_global_reference(self, petstore_document: OpenAPIDocument) -> None:
        petstore_document.rename_security_scheme("api_key", "apiKeyAuth")
        exported = petstore_document.export()
        assert exported["security"] == [{"apiKeyAuth": []}]
        assert validate(exported).valid

    def test_rename_with_new_definition(self, petstore_document: OpenAPIDocument) -> None:
        petstore_document.rename_security_scheme(
            "api_key", "cookieKey", ApiKeyScheme(name="session", location="cookie")
        )
        assert petstore_document.get_security_scheme("cookieKey") == {
            "type": "apiKey",
            "name": "session",
            "in": "cookie",
        }

    def test_rename_to_same_name_updates(self, petstore_document: OpenAPIDocument) -> None:
        petstore_document.rename_security_scheme(
            "api_key", "api_key", {"type": "http", "scheme": "basic"}
        )
        assert petstore_document.get_security_scheme("api_key") == {
            "type": "http",
            "scheme": "basic",
        }
        assert petstore_document.get_global_security() == [{"api_key": []}]

    def test_rename_unknown_raises(self, petstore_document: OpenAPIDocument) -> None:
        with pytest.raises(NotFoundError):
            petstore_document.rename_security_scheme("ghost", "spirit")

    def test_rename_onto_other_scheme_rejected(self, petstore_document: OpenAPIDocument) -> None:
        before = petstore_document.export()
        with pytest.raises(DuplicateError, match="api_key"):
            petstore_document.rename_security_scheme("petstore_auth", "api_key")
        assert petstore_document.export() == before

    def test_update_references_keeps_other_keys(self, document: OpenAPIDocument) -> None:
        document.add_endpoint(
            {
                "method": "get",
                "path": "/a",
                "security": [{"old": ["s1"], "other": []}, {"unrelated": []}],
            }
        )
        document.set_global_security([{"old": []}])
        document.update_security_scheme_references("old", "new")

        exported = document.export()
        assert exported["paths"]["/a"]["get"]["security"] == [
            {"new": ["s1"], "other": []},
            {"unrelated": []},
        ]
        assert exported["security"] == [{"new": []}]

    def test_global_security_copies(self, document: OpenAPIDocument) -> None:
        requirements = [{"a": ["read"]}]
        document.set_global_security(requirements)
        requirements[0]["a"].append("write")
        got = document.get_global_security()
        assert got == [{"a": ["read"]}]
        got.append({"b": []})
        assert document.get_global_security() == [{"a": ["read"]}]

    def test_global_security_defaults_to_empty(self, document: OpenAPIDocument) -> None:
        assert document.get_global_security() == []


# ---------------------------------------------------------------------------
# Tags
# ---------------------------------------------------------------------------


class TestTags:
    """Tag declarations and their propagation to endpoints."""

    def test_add_tag(self, document: OpenAPIDocument) -> None:
        document.add_tag("users", "User management")
        assert document.get_all_tags() == [{"name": "users", "description": "User management"}]
        assert document.export()["tags"] == [{"description": "User management", "name": "users"}]

    def test_duplicate_tag_rejected_without_change(
        self, petstore_document: OpenAPIDocument
    ) -> None:
        before = copy.deepcopy(petstore_document.get_all_tags())
        with pytest.raises(DuplicateError):
            petstore_document.add_tag("pets", "again")
        assert petstore_document.get_all_tags() == before

    @pytest.mark.parametrize("name", ["", "has space", "dots.not.allowed", "émoji"])
    def test_invalid_names_rejected(self, document: OpenAPIDocument, name: str) -> None:
        with pytest.raises(InvalidValueError):
            document.add_tag(name)
        assert document.get_all_tags() == []

    def test_valid_name_charset(self, document: OpenAPIDocument) -> None:
        document.add_tag("Admin_v2-beta")
        assert document.get_tag("Admin_v2-beta") == {"name": "Admin_v2-beta", "description": ""}

    def test_rename_propagates_to_endpoints(self, petstore_document: OpenAPIDocument) -> None:
        petstore_document.update_tag("pets", "animals", "Animal things")

        assert petstore_document.get_tag("pets") is None
        assert petstore_document.get_tag("animals") == {
            "name": "animals",
            "description": "Animal things",
        }
        paths = petstore_document.export()["paths"]
        assert paths["/pets"]["get"]["tags"] == ["animals"]
        assert paths["/pets"]["post"]["tags"] == ["animals"]
        assert paths["/pets/{petId}"]["get"]["tags"] == ["animals", "store"]
        assert all("pets" not in e.tags for e in petstore_document.get_all_endpoints())

    def test_rename_keeps_declaration_position(self, petstore_document: OpenAPIDocument) -> None:
        petstore_document.update_tag("pets", "animals")
        assert [t["name"] for t in petstore_document.get_all_tags()] == ["animals", "store"]

    def test_rename_onto_existing_tag_rejected(self, petstore_document: OpenAPIDocument) -> None:
        with pytest.raises(DuplicateError):
            petstore_document.update_tag("store", "pets")
        assert petstore_document.get_endpoint("endpoint_3").tags == ["pets", "store"]

    def test_rename_unknown_tag_raises(self, document: OpenAPIDocument) -> None:
        with pytest.raises(NotFoundError):
            document.update_tag("ghost", "spirit")

    def test_rename_to_invalid_name_rejected(self, petstore_document: OpenAPIDocument) -> None:
        with pytest.raises(InvalidValueError):
            petstore_document.update_tag("pets", "not valid")
        assert petstore_document.get_tag("pets") is not None

    def test_redescribe_without_rename(self, petstore_document: OpenAPIDocument) -> None:
        petstore_document.update_tag("pets", "pets", "New text")
        assert petstore_document.get_tag("pets")["description"] == "New text"
        assert petstore_document.get_endpoint("endpoint_1").tags == ["pets"]

    def test_redescribe_imported_name_outside_charset(self) -> None:
        doc = OpenAPIDocument()
        doc.import_document(
            _minimal(
                tags=[{"name": "User Management", "x-order": 1}],
                paths={"/u": {"get": {"tags": ["User Management"], "responses": {}}}},
            )
        )
        doc.update_tag("User Management", "User Management", "Accounts")
        assert doc.get_tag("User Management") == {
            "name": "User Management",
            "description": "Accounts",
            "x-order": 1,
        }
        assert doc.get_endpoint("endpoint_1").tags == ["User Management"]

    def test_rename_onto_undeclared_name_dedupes(self, document: OpenAPIDocument) -> None:
        document.add_tag("a")
        endpoint_id = document.add_endpoint(
            {"method": "get", "path": "/x", "tags": ["a", "legacy"]}
        )
        document.update_tag("a", "legacy")
        assert document.get_endpoint(endpoint_id).tags == ["legacy"]

    def test_delete_strips_from_endpoints(self, petstore_document: OpenAPIDocument) -> None:
        petstore_document.delete_tag("pets")
        assert [t["name"] for t in petstore_document.get_all_tags()] == ["store"]
        paths = petstore_document.export()["paths"]
        assert "tags" not in paths["/pets"]["get"]
        assert paths["/pets/{petId}"]["get"]["tags"] == ["store"]

    def test_delete_undeclared_name_still_strips(self, document: OpenAPIDocument) -> None:
        endpoint_id = document.add_endpoint({"method": "get", "path": "/x", "tags": ["ad-hoc"]})
        document.delete_tag("ad-hoc")
        assert document.get_endpoint(endpoint_id).tags == []

    def test_get_all_tags_returns_copy(self, petstore_document: OpenAPIDocument) -> None:
        tags = petstore_document.get_all_tags()
        tags[0]["name"] = "mutated"
        assert petstore_document.get_tag("pets") is not None
