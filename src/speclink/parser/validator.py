"""Structural validation of OpenAPI 3.0 documents.

Thin wrapper around :mod:`openapi_spec_validator` so the rest of the package
deals only in :class:`~speclink.exceptions.ValidationFailedError`.
"""

from __future__ import annotations

import logging
from typing import Any

from openapi_spec_validator import OpenAPIV30SpecValidator

from speclink.exceptions import ValidationFailedError

logger = logging.getLogger(__name__)

MAX_REPORTED_ERRORS = 5


def collect_errors(document: dict[str, Any]) -> list[str]:
    """Return the validator's error messages for *document* (empty when valid).

    Raises:
        ValidationFailedError: If the validator itself cannot process the
            document (e.g. a ``$ref`` it cannot resolve).
    """
    try:
        errors = list(OpenAPIV30SpecValidator(document).iter_errors())
    except Exception as exc:
        raise ValidationFailedError(f"Failed to validate the OpenAPI document: {exc}") from exc
    return [getattr(err, "message", str(err)) for err in errors]


def is_valid(document: dict[str, Any]) -> bool:
    """Return ``True`` if *document* is a structurally valid OpenAPI 3.0 document."""
    try:
        return not collect_errors(document)
    except ValidationFailedError:
        return False


def validate_document(document: dict[str, Any]) -> None:
    """Validate *document*, raising on the first problems found.

    Raises:
        ValidationFailedError: With up to :data:`MAX_REPORTED_ERRORS`
            messages in the error text and all of them on ``errors``.
    """
    logger.debug("Validating OpenAPI 3.0 document")
    errors = collect_errors(document)
    if not errors:
        return

    shown = "\n  ".join(errors[:MAX_REPORTED_ERRORS])
    more = len(errors) - MAX_REPORTED_ERRORS
    suffix = f"\n  ... and {more} more" if more > 0 else ""
    raise ValidationFailedError(
        f"Failed to validate the OpenAPI document:\n  {shown}{suffix}", errors=errors
    )
