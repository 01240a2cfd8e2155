"""JSON Pointer (RFC 6901) encoding and decoding.

OpenAPI references and ``operationRef`` values address locations in the
document with JSON pointers such as ``/paths/~1pets~1{petId}/get``.  Path
keys routinely contain ``/`` (and occasionally ``~``), so every segment has
to be escaped: ``~`` becomes ``~0`` and ``/`` becomes ``~1``.

The two functions are inverses of each other::

    parse_pointer(serialize_pointer(["paths", "/pets", "get"]))
    # ['paths', '/pets', 'get']
"""

from __future__ import annotations

from typing import Iterable

from speclink.exceptions import MalformedPointerError


def _escape(segment: str) -> str:
    # Order matters: "~" first so the "~" introduced for "/" is not re-escaped.
    return segment.replace("~", "~0").replace("/", "~1")


def _unescape(segment: str) -> str:
    # Order matters: "~1" first so "~01" decodes to "~1", not "/".
    return segment.replace("~1", "/").replace("~0", "~")


def serialize_pointer(segments: Iterable[str]) -> str:
    """Join *segments* into an escaped JSON pointer.

    Args:
        segments: Path segments, unescaped (e.g. ``["paths", "/pets", "get"]``).

    Returns:
        The pointer string, always starting with ``/``.  An empty sequence
        yields ``"/"``.

    Example::

        >>> serialize_pointer(["components", "~ab-c"])
        '/components/~0ab-c'
    """
    return "/" + "/".join(_escape(segment) for segment in segments)


def parse_pointer(pointer: str) -> list[str]:
    """Split a JSON pointer into its unescaped segments.

    Args:
        pointer: A pointer string such as ``/components/schemas/Pet``.  The
            leading ``#`` of a URI fragment must already be stripped.

    Returns:
        The list of segments.  ``"/"`` yields an empty list.

    Raises:
        MalformedPointerError: If *pointer* does not start with ``/``.
    """
    if not pointer.startswith("/"):
        raise MalformedPointerError(f"JSON pointer must start with '/': {pointer!r}")
    if pointer == "/":
        return []
    return [_unescape(segment) for segment in pointer.split("/")[1:]]
