"""Swagger/OpenAPI input pipeline -- load, convert, and validate.

This sub-package turns a raw Swagger 2.0 or OpenAPI 3.0 document (JSON or
YAML, local file, URL or stdin) into a validated OpenAPI 3.0 dictionary that
:func:`~speclink.links.add_link_definitions` can consume.

Typical usage::

    from speclink.parser import load_document

    document = load_document("swagger.yaml", encoding="utf-8")

Sub-modules:

* :mod:`~speclink.parser.loader` -- I/O layer plus format and version
  detection.
* :mod:`~speclink.parser.converter` -- Swagger 2.0 to OpenAPI 3.0.3.
* :mod:`~speclink.parser.validator` -- structural validation.
"""

from __future__ import annotations

import copy
import logging
from typing import Any

from speclink.parser.converter import convert_swagger2, normalize_status_codes
from speclink.parser.loader import SWAGGER_VERSION, detect_version, load_spec
from speclink.parser.validator import is_valid, validate_document

logger = logging.getLogger(__name__)

__all__ = [
    "load_document",
    "parse_document",
    "load_spec",
    "detect_version",
    "convert_swagger2",
    "validate_document",
    "is_valid",
]


def parse_document(raw: dict[str, Any]) -> dict[str, Any]:
    """Convert *raw* to OpenAPI 3.0 if needed and validate it.

    ``$ref`` pointers are left unresolved.  *raw* is not modified.

    Raises:
        UnsupportedVersionError: If *raw* is neither Swagger 2.0 nor OpenAPI 3.0.x.
        ValidationFailedError: If the resulting document is invalid.
    """
    version = detect_version(raw)
    if version == SWAGGER_VERSION:
        logger.debug("Converting Swagger 2.0 document to OpenAPI 3.0")
        document = convert_swagger2(raw)
    else:
        document = copy.deepcopy(raw)
    normalize_status_codes(document)
    validate_document(document)
    return document


def load_document(source: str, encoding: str = "utf-8") -> dict[str, Any]:
    """Load *source*, convert it to OpenAPI 3.0 and validate it.

    Raises:
        SpecParseError: If the document cannot be loaded, has an unsupported
            version, or fails validation.
    """
    return parse_document(load_spec(source, encoding))
