"""Identifier helpers for link and component names.

OpenAPI restricts the keys of ``components`` maps to ``^[a-zA-Z0-9.\\-_]+$``.
Link names are derived from path segments such as ``{categoryId}`` or
``user-settings``, so they have to be sanitised before use, and a sanitised
name may collide with an existing entry.
"""

from __future__ import annotations

import re
from typing import Callable

from speclink.exceptions import EmptyNameError, LinkError

_FORBIDDEN = re.compile(r"[^A-Za-z0-9.\-_]")

MAX_NAME_ATTEMPTS = 1000


def sanitize_component_name(name: str) -> str:
    """Replace every character that is not legal in a component name with ``_``.

    Raises:
        EmptyNameError: If *name* is empty.

    Example::

        >>> sanitize_component_name("comp$o|nent")
        'comp_o_nent'
    """
    if not name:
        raise EmptyNameError("Component name must not be empty")
    return _FORBIDDEN.sub("_", name)


def dedupe_name(
    name: str,
    is_taken: Callable[[str], bool],
    max_attempts: int = MAX_NAME_ATTEMPTS,
) -> str:
    """Return *name*, suffixed with ``1`` as often as needed to be free.

    ``test`` becomes ``test1``, then ``test11``, and so on.

    Args:
        name: The preferred name.
        is_taken: Predicate telling whether a candidate is already in use.
        max_attempts: Upper bound on the number of candidates tried.

    Raises:
        LinkError: If no free name was found within *max_attempts*.
    """
    candidate = name
    for _ in range(max_attempts):
        if not is_taken(candidate):
            return candidate
        candidate += "1"
    raise LinkError(f"No free name for '{name}' after {max_attempts} attempts")
