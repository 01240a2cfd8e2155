"""Tests for speclink.links.synthesizer (end-to-end link generation)."""

from __future__ import annotations

import copy
from typing import Any, Callable

import pytest

from speclink.exceptions import InvalidReferenceError
from speclink.links import DEFAULT_DESCRIPTION, Diagnostics, add_link_definitions
from speclink.links.models import ValidatedLink
from speclink.links.synthesizer import build_link_object, link_base_name, successful_responses

CATEGORY = "/categories/{categoryId}"
CATEGORY_CHILDREN = ["contributors", "followers", "requirements", "statistics"]


def _response(document: dict[str, Any], path: str, code: str) -> dict[str, Any]:
    return document["paths"][path]["get"]["responses"][code]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class TestLinkBaseName:
    def test_last_segment(self) -> None:
        assert link_base_name("/projects/{projectId}/categories") == "categories"

    def test_trailing_slash(self) -> None:
        assert link_base_name("/projects/{projectId}/") == "_projectId_"

    def test_sanitized(self) -> None:
        assert link_base_name("/a/{id}") == "_id_"


class TestBuildLinkObject:
    def test_operation_id(self, reqbaz_doc: dict[str, Any]) -> None:
        param = reqbaz_doc["components"]["parameters"]["categoryId"]
        link = ValidatedLink(
            from_path=CATEGORY,
            to_path=CATEGORY + "/statistics",
            parameter_map=((param, param),),
        )
        assert build_link_object(reqbaz_doc, link) == {
            "description": DEFAULT_DESCRIPTION,
            "operationId": "getStatisticsForCategory",
            "parameters": {"categoryId": "$request.path.categoryId"},
        }

    def test_runtime_expression_uses_ancestor_location(self, reqbaz_doc: dict[str, Any]) -> None:
        from_param = {"name": "page", "in": "query", "schema": {"type": "integer"}}
        to_param = {"name": "page", "in": "header", "schema": {"type": "integer"}}
        link = ValidatedLink("/projects", "/projects/{projectId}", ((from_param, to_param),))
        result = build_link_object(reqbaz_doc, link, description="Next")
        assert result["description"] == "Next"
        assert result["parameters"] == {"page": "$request.query.page"}


class TestSuccessfulResponses:
    def test_dedup_shared_reference(
        self,
        make_document: Callable[..., dict[str, Any]],
        get_op: Callable[..., dict[str, Any]],
    ) -> None:
        shared = {"description": "OK"}
        document = make_document(
            {
                "/a": {
                    "get": get_op(
                        responses={
                            "200": {"$ref": "#/components/responses/Ok"},
                            "201": {"$ref": "#/components/responses/Ok"},
                            "404": {"description": "Missing"},
                        }
                    )
                }
            },
            components={"responses": {"Ok": shared}},
        )
        result = successful_responses(document, "/a")
        assert len(result) == 1
        assert result[0] is shared

    def test_equal_but_distinct_responses_kept(
        self,
        make_document: Callable[..., dict[str, Any]],
        get_op: Callable[..., dict[str, Any]],
    ) -> None:
        document = make_document(
            {"/a": {"get": get_op(responses={"200": {"description": "OK"}, "203": {"description": "OK"}})}}
        )
        assert len(successful_responses(document, "/a")) == 2


# ---------------------------------------------------------------------------
# add_link_definitions on the Requirements Bazaar document
# ---------------------------------------------------------------------------


class TestAddLinkDefinitionsReqbaz:
    def test_links_added(self, reqbaz_doc: dict[str, Any]) -> None:
        result = add_link_definitions(reqbaz_doc)
        # 4 links on 2 category responses, 1 project link, 2 requirement links.
        assert result.links_added == 11

    def test_component_links_for_multiple_responses(self, reqbaz_doc: dict[str, Any]) -> None:
        document = add_link_definitions(reqbaz_doc).document
        links = document["components"]["links"]
        assert sorted(links) == CATEGORY_CHILDREN
        assert links["contributors"] == {
            "description": DEFAULT_DESCRIPTION,
            "operationId": "getContributorsForCategory",
            "parameters": {"categoryId": "$request.path.categoryId"},
        }
        for code in ("200", "203"):
            response = _response(document, CATEGORY, code)
            assert response["links"] == {
                name: {"$ref": f"#/components/links/{name}"} for name in CATEGORY_CHILDREN
            }

    def test_default_response_untouched(self, reqbaz_doc: dict[str, Any]) -> None:
        document = add_link_definitions(reqbaz_doc).document
        assert "links" not in _response(document, CATEGORY, "default")

    def test_operation_ref_points_at_descendant(self, reqbaz_doc: dict[str, Any]) -> None:
        document = add_link_definitions(reqbaz_doc).document
        links = _response(document, "/projects/{projectId}", "200")["links"]
        assert links == {
            "categories": {
                "description": DEFAULT_DESCRIPTION,
                "operationRef": "#/paths/~1projects~1{projectId}~1categories/get",
                "parameters": {"projectId": "$request.path.projectId"},
            }
        }
        assert "operationId" not in links["categories"]

    def test_unmet_required_parameter_not_linked(self, reqbaz_doc: dict[str, Any]) -> None:
        document = add_link_definitions(reqbaz_doc).document
        assert "statistics" not in _response(document, "/projects/{projectId}", "200")["links"]
        assert "links" not in _response(document, "/projects", "200")

    def test_existing_link_preserved(self, reqbaz_doc: dict[str, Any]) -> None:
        original = copy.deepcopy(_response(reqbaz_doc, "/requirements/{requirementId}", "200")["links"])
        document = add_link_definitions(reqbaz_doc).document
        links = _response(document, "/requirements/{requirementId}", "200")["links"]
        assert links["attachments"] == original["attachments"]
        assert links["attachments1"]["operationId"] == "getAttachmentsForRequirement"
        assert links["attachments1"]["parameters"] == {
            "requirementId": "$request.path.requirementId"
        }

    def test_cookie_parameter_does_not_block(self, reqbaz_doc: dict[str, Any]) -> None:
        document = add_link_definitions(reqbaz_doc).document
        links = _response(document, "/requirements/{requirementId}", "200")["links"]
        assert links["followers"]["operationId"] == "getFollowersForRequirement"
        assert links["followers"]["parameters"] == {
            "requirementId": "$request.path.requirementId"
        }

    def test_input_not_modified(self, reqbaz_doc: dict[str, Any]) -> None:
        snapshot = copy.deepcopy(reqbaz_doc)
        result = add_link_definitions(reqbaz_doc)
        assert result.document is not reqbaz_doc
        assert reqbaz_doc == snapshot

    def test_removing_added_keys_restores_input(self, reqbaz_doc: dict[str, Any]) -> None:
        snapshot = copy.deepcopy(reqbaz_doc)
        document = add_link_definitions(reqbaz_doc).document

        del document["components"]["links"]
        for path, item in document["paths"].items():
            for code, response in item["get"]["responses"].items():
                before = _response(snapshot, path, code).get("links")
                if before is None:
                    response.pop("links", None)
                else:
                    response["links"] = {k: v for k, v in response["links"].items() if k in before}
        assert document == snapshot

    def test_custom_description(self, reqbaz_doc: dict[str, Any]) -> None:
        document = add_link_definitions(reqbaz_doc, description="Follow me").document
        assert document["components"]["links"]["followers"]["description"] == "Follow me"

    def test_diagnostics(self, reqbaz_doc: dict[str, Any]) -> None:
        received: list[str] = []
        result = add_link_definitions(reqbaz_doc, diagnostics=Diagnostics(callback=received.append))
        assert received == result.messages
        assert "Found 11 potential link candidates" in result.messages
        assert "Found 7 valid link candidates" in result.messages
        assert result.messages[-1] == "Added 11 links to response definitions"


# ---------------------------------------------------------------------------
# add_link_definitions on small inline documents
# ---------------------------------------------------------------------------


class TestAddLinkDefinitions:
    def test_path_boundary(
        self,
        make_document: Callable[..., dict[str, Any]],
        get_op: Callable[..., dict[str, Any]],
    ) -> None:
        document = make_document(
            {
                "/a": {"get": get_op()},
                "/a/b": {"get": get_op(operation_id="getB")},
                "/ab": {"get": get_op(operation_id="getAb")},
            }
        )
        result = add_link_definitions(document)
        assert result.links_added == 1
        assert list(_response(result.document, "/a", "200")["links"]) == ["b"]

    def test_colliding_names_suffixed(
        self,
        make_document: Callable[..., dict[str, Any]],
        get_op: Callable[..., dict[str, Any]],
    ) -> None:
        document = make_document(
            {
                "/a": {"get": get_op()},
                "/a/test": {"get": get_op(operation_id="first")},
                "/a/b/test": {"get": get_op(operation_id="second")},
            }
        )
        links = _response(add_link_definitions(document).document, "/a", "200")["links"]
        assert links["test"]["operationId"] == "first"
        assert links["test1"]["operationId"] == "second"

    def test_existing_component_link_not_overwritten(
        self,
        make_document: Callable[..., dict[str, Any]],
        get_op: Callable[..., dict[str, Any]],
    ) -> None:
        existing = {"operationId": "somethingElse"}
        document = make_document(
            {
                "/a": {
                    "get": get_op(
                        responses={"200": {"description": "OK"}, "201": {"description": "Created"}}
                    )
                },
                "/a/test": {"get": get_op(operation_id="getTest")},
            },
            components={"links": {"test": existing}},
        )
        result = add_link_definitions(document).document
        assert result["components"]["links"]["test"] == existing
        assert result["components"]["links"]["test1"]["operationId"] == "getTest"
        for code in ("200", "201"):
            assert _response(result, "/a", code)["links"] == {
                "test": {"$ref": "#/components/links/test1"}
            }

    def test_shared_response_written_once(
        self,
        make_document: Callable[..., dict[str, Any]],
        get_op: Callable[..., dict[str, Any]],
    ) -> None:
        document = make_document(
            {
                "/a": {
                    "get": get_op(
                        responses={
                            "200": {"$ref": "#/components/responses/Ok"},
                            "203": {"$ref": "#/components/responses/Ok"},
                        }
                    )
                },
                "/a/b": {"get": get_op(operation_id="getB")},
            },
            components={"responses": {"Ok": {"description": "OK"}}},
        )
        result = add_link_definitions(document)
        assert result.links_added == 1
        assert result.document["components"]["responses"]["Ok"]["links"]["b"]["operationId"] == "getB"
        assert "links" not in result.document["components"]
        assert _response(result.document, "/a", "200") == {"$ref": "#/components/responses/Ok"}

    def test_external_descendant_parameter_drops_link(
        self,
        make_document: Callable[..., dict[str, Any]],
        get_op: Callable[..., dict[str, Any]],
        path_param: Callable[..., dict[str, Any]],
    ) -> None:
        document = make_document(
            {
                "/a/{id}": {"get": get_op([path_param("id")])},
                "/a/{id}/b": {
                    "get": get_op(
                        [path_param("id"), {"$ref": "shared.yaml#/components/parameters/x"}],
                        operation_id="getB",
                    )
                },
            }
        )
        result = add_link_definitions(document)
        assert result.links_added == 0
        assert result.document == document

    def test_broken_response_reference_skipped(
        self,
        make_document: Callable[..., dict[str, Any]],
        get_op: Callable[..., dict[str, Any]],
    ) -> None:
        document = make_document(
            {
                "/a": {"get": get_op(responses={"200": {"$ref": "#/components/responses/Missing"}})},
                "/a/b": {"get": get_op(operation_id="getB")},
                "/c": {"get": get_op()},
                "/c/d": {"get": get_op(operation_id="getD")},
            }
        )
        result = add_link_definitions(document)
        assert result.links_added == 1
        assert "links" in _response(result.document, "/c", "200")
        assert any("Skipping link '/a' => '/a/b'" in m for m in result.messages)

    def test_strict_raises(
        self,
        make_document: Callable[..., dict[str, Any]],
        get_op: Callable[..., dict[str, Any]],
    ) -> None:
        document = make_document(
            {
                "/a": {"get": get_op(responses={"200": {"$ref": "#/components/responses/Missing"}})},
                "/a/b": {"get": get_op(operation_id="getB")},
            }
        )
        with pytest.raises(InvalidReferenceError):
            add_link_definitions(document, strict=True)

    def test_no_paths_linked(
        self,
        make_document: Callable[..., dict[str, Any]],
        get_op: Callable[..., dict[str, Any]],
    ) -> None:
        document = make_document({"/a": {"get": get_op()}})
        result = add_link_definitions(document)
        assert result.links_added == 0
        assert result.document == document
