"""Heuristic equality of schemas and parameters.

The link generator assumes that two parameters with the same name and the
same schema carry the same value, wherever they appear in the API.  This
module decides what "the same schema" means:

* both schemas absent -- equal;
* exactly one absent -- not equal;
* both references -- equal iff the ``$ref`` strings are identical;
* exactly one external reference -- not equal (its content is unknown);
* otherwise internal references are dereferenced and the resulting JSON
  values are compared structurally with :func:`json_equal`.

Parameter locations are deliberately ignored: a ``projectId`` path
parameter can feed a ``projectId`` query parameter.
"""

from __future__ import annotations

from typing import Any, Optional

from speclink.links.references import as_reference, resolve_component_ref


def json_equal(first: Any, second: Any) -> bool:
    """Structural equality of two JSON values.

    Unlike ``==`` this keeps JSON types apart: ``true`` never equals ``1``.
    Numbers compare by value (JSON has a single number type, so ``1`` equals
    ``1.0``).  Mappings compare key sets and values, arrays compare
    element-wise in order.
    """
    if isinstance(first, bool) or isinstance(second, bool):
        return isinstance(first, bool) and isinstance(second, bool) and first == second
    if isinstance(first, dict):
        if not isinstance(second, dict) or first.keys() != second.keys():
            return False
        return all(json_equal(value, second[key]) for key, value in first.items())
    if isinstance(first, (list, tuple)):
        if not isinstance(second, (list, tuple)) or len(first) != len(second):
            return False
        return all(json_equal(a, b) for a, b in zip(first, second))
    if isinstance(first, (int, float)):
        return isinstance(second, (int, float)) and first == second
    if isinstance(second, (dict, list, tuple, int, float)):
        return False
    return first == second


def schemas_equal(
    document: dict[str, Any],
    first: Optional[dict[str, Any]],
    second: Optional[dict[str, Any]],
) -> bool:
    """Return ``True`` if *first* and *second* describe the same schema.

    Raises:
        InvalidReferenceError: If an internal reference cannot be resolved.
    """
    if first is None and second is None:
        return True
    if first is None or second is None:
        return False

    first_ref = as_reference(first)
    second_ref = as_reference(second)
    if first_ref is not None and second_ref is not None:
        return first_ref.pointer == second_ref.pointer

    # At most one side is a reference now; we cannot look inside external ones.
    if (first_ref is not None and first_ref.is_external) or (
        second_ref is not None and second_ref.is_external
    ):
        return False

    if first_ref is not None:
        first = resolve_component_ref(document, first_ref, "schemas")
    if second_ref is not None:
        second = resolve_component_ref(document, second_ref, "schemas")
    return json_equal(first, second)


def parameters_equal(
    document: dict[str, Any],
    first: dict[str, Any],
    second: dict[str, Any],
) -> bool:
    """Return ``True`` if two (dereferenced) parameters share name and schema."""
    if first.get("name") != second.get("name"):
        return False
    return schemas_equal(document, first.get("schema"), second.get("schema"))
