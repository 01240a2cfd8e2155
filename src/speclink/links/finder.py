"""Find pairs of GET operations that could be linked.

A pair ``(from, to)`` qualifies when both paths define a GET operation with
at least one successful (2xx) response and ``to`` is a hierarchical
extension of ``from``: ``/projects/{id}/members`` extends ``/projects/{id}``,
while ``/projectsArchive`` does not extend ``/projects``.
"""

from __future__ import annotations

import re
from typing import Any, Iterable, Optional

from speclink.links.models import Diagnostics, PotentialLink

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def parse_status_code(key: Any) -> Optional[int]:
    """Parse a response key the way a leading-integer parse would.

    ``"200"`` and ``200`` give ``200``; ``"2XX"`` gives ``2``; ``"default"``
    gives ``None``.
    """
    match = _LEADING_INT.match(str(key))
    return int(match.group(1)) if match else None


def success_status_keys(responses: Any) -> list[Any]:
    """Return the keys of *responses* whose status code is in ``[200, 300)``."""
    if not isinstance(responses, dict):
        return []
    keys = []
    for key in responses:
        code = parse_status_code(key)
        if code is not None and 200 <= code < 300:
            keys.append(key)
    return keys


def get_operation(document: dict[str, Any], path: str) -> Optional[dict[str, Any]]:
    """Return the GET operation of *path*, or ``None``."""
    path_item = document["paths"].get(path)
    if not isinstance(path_item, dict):
        return None
    operation = path_item.get("get")
    return operation if isinstance(operation, dict) else None


def is_path_extension(parent: str, child: str) -> bool:
    """Return ``True`` if *child* is nested below *parent* in the path hierarchy."""
    if parent == child:
        return False
    if parent.endswith("/"):
        return child.startswith(parent)
    return child.startswith(parent + "/")


def find_potential_links(
    document: dict[str, Any],
    diagnostics: Optional[Diagnostics] = None,
) -> list[PotentialLink]:
    """Return all candidate ``(from, to)`` pairs of *document*.

    Candidates are ordered by the position of ``from`` and then ``to`` in
    the document's ``paths`` mapping, which keeps generated names stable.
    """
    eligible = [path for path in document["paths"] if _has_successful_get(document, path)]
    result = [
        PotentialLink(from_path=parent, to_path=child)
        for parent, child in _pairs(eligible)
        if is_path_extension(parent, child)
    ]
    if diagnostics is not None:
        diagnostics.trace(f"Found {len(result)} potential link candidates")
    return result


def _has_successful_get(document: dict[str, Any], path: str) -> bool:
    operation = get_operation(document, path)
    return operation is not None and bool(success_status_keys(operation.get("responses")))


def _pairs(paths: list[str]) -> Iterable[tuple[str, str]]:
    for parent in paths:
        for child in paths:
            yield parent, child
