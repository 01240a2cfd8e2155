"""Heuristic link generation for OpenAPI 3.0 documents.

The pipeline has three stages, all operating on a private deep copy of the
input document:

1. :func:`~speclink.links.finder.find_potential_links` -- pairs of GET
   operations whose paths are hierarchically nested.
2. :func:`~speclink.links.params.process_link_parameters` -- keeps the pairs
   whose descendant parameters can be filled from the ancestor.
3. :func:`~speclink.links.synthesizer.add_link_definitions` -- writes the
   Link Objects into the ancestor's successful responses.

Typical usage::

    from speclink.links import add_link_definitions

    result = add_link_definitions(openapi_doc)
    result.document      # augmented copy
    result.links_added   # number of response-level entries written

Shared helpers live in :mod:`~speclink.links.pointer` (JSON pointers),
:mod:`~speclink.links.references` (``$ref`` resolution),
:mod:`~speclink.links.names` (identifier sanitising) and
:mod:`~speclink.links.equivalence` (schema/parameter equality).
"""

from speclink.links.models import Diagnostics, LinkResult, PotentialLink, ValidatedLink
from speclink.links.synthesizer import DEFAULT_DESCRIPTION, add_link_definitions

__all__ = [
    "add_link_definitions",
    "DEFAULT_DESCRIPTION",
    "Diagnostics",
    "LinkResult",
    "PotentialLink",
    "ValidatedLink",
]
