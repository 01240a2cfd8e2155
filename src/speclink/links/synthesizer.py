"""Write link definitions into a copy of the OpenAPI document.

For every validated candidate ``from -> to`` a Link Object is built::

    {
        "description": "Automatically generated link definition",
        "operationId": "getMembersForProject",          # or operationRef
        "parameters": {"projectId": "$request.path.projectId"},
    }

and attached to the successful responses of the ``from`` GET operation.
When there is a single such response the link is written inline; when there
are several, it is stored once under ``components.links`` and each response
gets a ``$ref`` to it.  Existing entries are never overwritten: colliding
names are suffixed with ``1`` until they are free.
"""

from __future__ import annotations

import copy
from typing import Any, Optional

from speclink.exceptions import LinkError
from speclink.links.finder import find_potential_links, get_operation, success_status_keys
from speclink.links.models import Diagnostics, LinkResult, ValidatedLink
from speclink.links.names import dedupe_name, sanitize_component_name
from speclink.links.params import process_link_parameters
from speclink.links.pointer import serialize_pointer
from speclink.links.references import as_reference, resolve_component_ref

DEFAULT_DESCRIPTION = "Automatically generated link definition"


def add_link_definitions(
    document: dict[str, Any],
    *,
    description: str = DEFAULT_DESCRIPTION,
    strict: bool = False,
    diagnostics: Optional[Diagnostics] = None,
) -> LinkResult:
    """Add heuristic link definitions to an OpenAPI 3.0 document.

    A link from path ``p1`` to path ``p2`` is added when:

    * ``p2`` is nested below ``p1`` (``/a`` -> ``/a/b``, never ``/a`` -> ``/ab``);
    * both define a GET operation with at least one 2xx response;
    * every required parameter of ``p2`` has a parameter of ``p1`` with the
      same name and schema (cookie parameters are ignored).

    The input is not modified; all changes are made on a deep copy.

    Args:
        document: A validated OpenAPI 3.0 document.  ``paths`` must exist.
        description: Description put on every generated Link Object.
        strict: Re-raise link errors instead of skipping the candidate.
        diagnostics: Sink for trace messages.  A fresh one is used if omitted.

    Returns:
        A :class:`~speclink.links.models.LinkResult` with the augmented copy
        and the number of response-level link entries written.

    Example::

        result = add_link_definitions(doc)
        print(f"Added {result.links_added} links")
    """
    diagnostics = diagnostics or Diagnostics()
    document = copy.deepcopy(document)

    candidates = find_potential_links(document, diagnostics)
    validated = process_link_parameters(document, candidates, diagnostics, strict=strict)

    added = 0
    for link in validated:
        try:
            added += _write_link(document, link, description)
        except LinkError as exc:
            if strict:
                raise
            diagnostics.trace(
                f"  Skipping link '{link.from_path}' => '{link.to_path}': {exc}"
            )

    diagnostics.trace(f"Added {added} links to response definitions")
    return LinkResult(document=document, links_added=added, messages=list(diagnostics.messages))


def build_link_object(
    document: dict[str, Any],
    link: ValidatedLink,
    description: str = DEFAULT_DESCRIPTION,
) -> dict[str, Any]:
    """Build the Link Object for *link*.

    The target is the ``to`` operation: by ``operationId`` when it has one,
    otherwise by an ``operationRef`` pointing at ``#/paths/<to>/get``.
    """
    parameters: dict[str, str] = {}
    for from_param, to_param in link.parameter_map:
        # Cookie parameters were filtered out, so "in" is query, header or path.
        parameters[to_param["name"]] = f"$request.{from_param['in']}.{from_param['name']}"

    target = get_operation(document, link.to_path) or {}
    result: dict[str, Any] = {"description": description}
    if target.get("operationId") is not None:
        result["operationId"] = target["operationId"]
    else:
        result["operationRef"] = "#" + serialize_pointer(["paths", link.to_path, "get"])
    result["parameters"] = parameters
    return result


def link_base_name(to_path: str) -> str:
    """Derive a link name from the last non-empty segment of *to_path*."""
    segments = [segment for segment in to_path.split("/") if segment]
    return sanitize_component_name(segments[-1] if segments else "")


def successful_responses(document: dict[str, Any], path: str) -> list[dict[str, Any]]:
    """Return the dereferenced 2xx responses of the GET on *path*.

    Responses reached through several status codes (e.g. two ``$ref`` to
    the same component) are returned once.
    """
    operation = get_operation(document, path) or {}
    responses = operation.get("responses") or {}
    result: list[dict[str, Any]] = []
    seen: set[int] = set()
    for key in success_status_keys(responses):
        response = responses[key]
        ref = as_reference(response)
        if ref is not None:
            response = resolve_component_ref(document, ref, "responses")
        if id(response) not in seen:
            seen.add(id(response))
            result.append(response)
    return result


def _write_link(document: dict[str, Any], link: ValidatedLink, description: str) -> int:
    """Attach *link* to its responses and return the number of entries written.

    Everything that can fail is computed before the document is touched.
    """
    responses = successful_responses(document, link.from_path)
    link_object = build_link_object(document, link, description)
    name = link_base_name(link.to_path)
    entry_names = [
        dedupe_name(name, lambda n, r=response: n in (r.get("links") or {}))
        for response in responses
    ]

    if not responses:
        return 0
    if len(responses) == 1:
        responses[0].setdefault("links", {})[entry_names[0]] = link_object
        return 1

    existing = (document.get("components") or {}).get("links") or {}
    component_name = dedupe_name(name, lambda n: n in existing)
    components = document.setdefault("components", {})
    components.setdefault("links", {})[component_name] = link_object
    reference = "#" + serialize_pointer(["components", "links", component_name])
    for response, entry_name in zip(responses, entry_names):
        response.setdefault("links", {})[entry_name] = {"$ref": reference}
    return len(responses)
