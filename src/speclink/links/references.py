"""Classify and resolve ``$ref`` objects inside an OpenAPI 3.0 document.

Every resolvable entity in the document (parameter, schema, response, link)
is either a concrete object or a Reference Object of the form
``{"$ref": "<uri>"}``.  :func:`as_reference` turns the latter into a
:class:`Reference` value so callers can branch on it explicitly, and
:func:`resolve_component_ref` follows an internal reference into the
``components`` section.

Only **internal** references (URI fragments starting with ``#``) are
dereferenced.  Anything else (``other.yaml#/...``, ``https://...``) is
*external* and raises :class:`~speclink.exceptions.ExternalReferenceError`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

from speclink.exceptions import (
    ExternalReferenceError,
    InvalidReferenceError,
    MalformedPointerError,
)
from speclink.links.pointer import parse_pointer

ComponentType = Literal["parameters", "schemas", "responses"]

MAX_REFERENCE_DEPTH = 32
"""Maximum number of ``$ref`` hops followed before giving up (cycle guard)."""


@dataclass(frozen=True)
class Reference:
    """A Reference Object found in the document.

    Attributes:
        pointer: The raw ``$ref`` string, e.g. ``#/components/schemas/Pet``.
    """

    pointer: str

    @property
    def is_external(self) -> bool:
        """``True`` when the reference points outside the current document."""
        return not self.pointer.startswith("#")


def as_reference(obj: Any) -> Reference | None:
    """Return a :class:`Reference` if *obj* is a Reference Object, else ``None``."""
    if isinstance(obj, dict) and "$ref" in obj:
        return Reference(str(obj["$ref"]))
    return None


def is_external_ref(obj: Any) -> bool:
    """Return ``True`` if *obj* is a Reference Object pointing outside the document."""
    ref = as_reference(obj)
    return ref is not None and ref.is_external


def resolve_component_ref(
    document: dict[str, Any],
    reference: Reference | dict[str, Any],
    component_type: ComponentType,
) -> dict[str, Any]:
    """Resolve an internal reference to a component of *component_type*.

    Chains of references (a component that is itself a ``$ref``) are
    followed until a concrete object is reached.

    Args:
        document: The OpenAPI 3.0 document the reference lives in.
        reference: A :class:`Reference` or a raw ``{"$ref": ...}`` dict.
        component_type: The expected section under ``components``.

    Returns:
        The referenced object (the same object stored in *document*, not a
        copy).

    Raises:
        ExternalReferenceError: If the reference points outside *document*.
        InvalidReferenceError: If the reference does not target
            ``#/components/<component_type>/<name>``, the target does not
            exist, or the chain is longer than :data:`MAX_REFERENCE_DEPTH`.

    Example::

        resolve_component_ref(doc, {"$ref": "#/components/schemas/Pet"}, "schemas")
    """
    ref = reference if isinstance(reference, Reference) else as_reference(reference)
    if ref is None:
        raise InvalidReferenceError(f"Not a reference object: {reference!r}")

    seen: list[str] = []
    while True:
        if ref.pointer in seen:
            raise InvalidReferenceError(
                f"Circular reference: {' -> '.join(seen + [ref.pointer])}"
            )
        if len(seen) >= MAX_REFERENCE_DEPTH:
            raise InvalidReferenceError(
                f"Reference chain longer than {MAX_REFERENCE_DEPTH}: {seen[0]}"
            )
        seen.append(ref.pointer)

        target = _lookup(document, ref, component_type)
        next_ref = as_reference(target)
        if next_ref is None:
            if not isinstance(target, dict):
                raise InvalidReferenceError(
                    f"Reference {ref.pointer} does not point at an object"
                )
            return target
        ref = next_ref


def _lookup(
    document: dict[str, Any],
    ref: Reference,
    component_type: ComponentType,
) -> Any:
    """Return the value at *ref* without following further references."""
    if ref.is_external:
        raise ExternalReferenceError(f"External references are not supported: {ref.pointer}")

    try:
        segments = parse_pointer(ref.pointer[1:])
    except MalformedPointerError as exc:
        raise InvalidReferenceError(f"Invalid components reference: {ref.pointer}") from exc

    if len(segments) < 3 or segments[0] != "components":
        raise InvalidReferenceError(f"Invalid components reference: {ref.pointer}")
    if segments[1] != component_type:
        raise InvalidReferenceError(
            f"Invalid reference type: expected {component_type}, got {segments[1]} ({ref.pointer})"
        )

    current: Any = document.get("components")
    for segment in segments[1:]:
        if isinstance(current, dict) and segment in current:
            current = current[segment]
        elif isinstance(current, list) and segment.isdigit() and int(segment) < len(current):
            current = current[int(segment)]
        else:
            raise InvalidReferenceError(f"Could not resolve reference: {ref.pointer}")
    return current
