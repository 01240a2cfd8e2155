"""Records passed between the stages of the link pipeline.

:class:`PotentialLink` and :class:`ValidatedLink` only live for the duration
of one :func:`~speclink.links.add_link_definitions` call.  Parameter dicts
held by a :class:`ValidatedLink` are the objects stored in the working copy
of the document, not copies.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Optional


@dataclass(frozen=True)
class PotentialLink:
    """A pair of paths where the ``to`` path extends the ``from`` path."""

    from_path: str
    to_path: str


@dataclass(frozen=True)
class ValidatedLink(PotentialLink):
    """A :class:`PotentialLink` whose descendant parameters can all be satisfied.

    Attributes:
        parameter_map: ``(ancestor_param, descendant_param)`` pairs, in the
            order the descendant parameters were matched.  Excluded from the
            hash, so links hash by their paths.
    """

    parameter_map: tuple[tuple[dict[str, Any], dict[str, Any]], ...] = field(
        default=(), hash=False
    )


class Diagnostics:
    """Collects trace messages emitted by the link pipeline.

    The pipeline never touches logging configuration.  Callers that want the
    messages live pass a *callback* (the CLI forwards them to
    :func:`speclink.output.debug`); everything is also kept in
    :attr:`messages`.

    Args:
        callback: Optional function invoked with every message.
    """

    def __init__(self, callback: Optional[Callable[[str], None]] = None) -> None:
        self.messages: list[str] = []
        self._callback = callback

    def trace(self, message: str) -> None:
        """Record *message* and forward it to the callback, if any."""
        self.messages.append(message)
        if self._callback is not None:
            self._callback(message)


@dataclass
class LinkResult:
    """Outcome of :func:`~speclink.links.add_link_definitions`.

    Attributes:
        document: The augmented deep copy of the input document.
        links_added: Number of response-level link entries written.
        messages: Diagnostic trace of the run.
    """

    document: dict[str, Any]
    links_added: int
    messages: list[str] = field(default_factory=list)
