"""Filter link candidates by comparing the parameters of both operations.

The heuristic: parameters with the same name and the same schema mean the
same thing across operations.  A candidate ``from -> to`` survives if every
*required* parameter of the ``to`` operation has such a counterpart among
the ``from`` parameters; the matched pairs become the link's parameter map.

Cookie parameters are ignored on both sides, since the client conveys them
on its own.
"""

from __future__ import annotations

from typing import Any, Optional

from speclink.exceptions import ExternalReferenceError, LinkError
from speclink.links.equivalence import parameters_equal
from speclink.links.finder import get_operation
from speclink.links.models import Diagnostics, PotentialLink, ValidatedLink
from speclink.links.references import as_reference, is_external_ref, resolve_component_ref


def raw_parameters(document: dict[str, Any], path: str) -> tuple[list[Any], list[Any]]:
    """Return the ``(operation_level, path_level)`` parameter lists of the GET on *path*."""
    path_item = document["paths"][path]
    operation = get_operation(document, path) or {}
    return list(operation.get("parameters") or []), list(path_item.get("parameters") or [])


def effective_parameters(
    document: dict[str, Any],
    operation_params: list[Any],
    path_params: list[Any],
) -> list[dict[str, Any]]:
    """Merge and dereference operation- and path-level parameters.

    Operation-level parameters come first; path-level parameters are added
    only when no operation-level parameter has the same name.  Cookie
    parameters are dropped after merging.

    Raises:
        ReferenceResolutionError: If a parameter reference cannot be resolved.
    """
    params = [_dereference(document, param) for param in operation_params]
    names = {param.get("name") for param in params}
    params.extend(
        param
        for param in (_dereference(document, p) for p in path_params)
        if param.get("name") not in names
    )
    return [param for param in params if param.get("in") != "cookie"]


def _dereference(document: dict[str, Any], param: Any) -> dict[str, Any]:
    ref = as_reference(param)
    if ref is not None:
        return resolve_component_ref(document, ref, "parameters")
    return param


def _local_parameters(
    document: dict[str, Any],
    params: list[Any],
    diagnostics: Diagnostics,
) -> list[dict[str, Any]]:
    """Dereference *params*, leaving out those that resolve outside *document*."""
    result: list[dict[str, Any]] = []
    for param in params:
        if is_external_ref(param):
            continue
        try:
            result.append(_dereference(document, param))
        except ExternalReferenceError as exc:
            diagnostics.trace(f"  Ignoring ancestor parameter: {exc}")
    return result


def match_parameters(
    document: dict[str, Any],
    from_params: list[dict[str, Any]],
    to_params: list[dict[str, Any]],
) -> Optional[list[tuple[dict[str, Any], dict[str, Any]]]]:
    """Pair every ``to`` parameter with an equal ``from`` parameter.

    Returns:
        The ``(from_param, to_param)`` pairs, or ``None`` if a required
        ``to`` parameter has no counterpart.
    """
    pairs: list[tuple[dict[str, Any], dict[str, Any]]] = []
    for to_param in to_params:
        match = next(
            (p for p in from_params if parameters_equal(document, to_param, p)),
            None,
        )
        if match is not None:
            pairs.append((match, to_param))
        elif to_param.get("required") not in (None, False):
            return None
    return pairs


def process_link_parameters(
    document: dict[str, Any],
    links: list[PotentialLink],
    diagnostics: Optional[Diagnostics] = None,
    strict: bool = False,
) -> list[ValidatedLink]:
    """Keep the candidates whose ``to`` parameters are covered by ``from``.

    Args:
        document: The working copy of the OpenAPI document.
        links: Candidates from :func:`~speclink.links.finder.find_potential_links`.
        diagnostics: Sink for trace messages.
        strict: Re-raise :class:`~speclink.exceptions.LinkError` instead of
            dropping the offending candidate.

    Returns:
        The accepted candidates with their parameter maps, in input order.
    """
    diagnostics = diagnostics or Diagnostics()
    diagnostics.trace("Processing potential link candidates")
    result: list[ValidatedLink] = []

    for link in links:
        label = f"'{link.from_path}' => '{link.to_path}'"
        try:
            validated = _validate(document, link, diagnostics, label)
        except LinkError as exc:
            if strict:
                raise
            diagnostics.trace(f"  Dropping link candidate {label}: {exc}")
            continue
        if validated is not None:
            result.append(validated)
            diagnostics.trace(
                f"  Valid link candidate found: {label}, "
                f"{len(validated.parameter_map)} parameter(s)"
            )

    diagnostics.trace(f"Found {len(result)} valid link candidates")
    return result


def _validate(
    document: dict[str, Any],
    link: PotentialLink,
    diagnostics: Diagnostics,
    label: str,
) -> Optional[ValidatedLink]:
    to_op_params, to_path_params = raw_parameters(document, link.to_path)
    if any(is_external_ref(param) for param in to_op_params + to_path_params):
        diagnostics.trace(f"  Dropping link candidate due to external parameter reference: {label}")
        return None

    from_op_params, from_path_params = raw_parameters(document, link.from_path)
    from_params = effective_parameters(
        document,
        _local_parameters(document, from_op_params, diagnostics),
        _local_parameters(document, from_path_params, diagnostics),
    )
    to_params = effective_parameters(document, to_op_params, to_path_params)

    pairs = match_parameters(document, from_params, to_params)
    if pairs is None:
        diagnostics.trace(f"  Required parameter not satisfied, skipping: {label}")
        return None
    return ValidatedLink(
        from_path=link.from_path, to_path=link.to_path, parameter_map=tuple(pairs)
    )
