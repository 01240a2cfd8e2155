"""Load Swagger/OpenAPI documents from a URL, local file, or stdin.

This module handles all I/O for fetching raw documents and converting them
into Python dictionaries.  It supports both JSON and YAML with automatic
format detection, reads files with an explicit text encoding, and
identifies which specification version a document declares.

The public functions are:

* :func:`load_spec` -- Load and parse a document from any supported source.
* :func:`detect_version` -- Return ``"2.0"`` for Swagger 2.0 or the
  ``3.0.x`` version string, rejecting everything else.

After loading, the raw dict is handed to
:func:`~speclink.parser.parse_document`, which converts and validates it.
"""

from __future__ import annotations

import codecs
import json
import logging
import sys
from pathlib import Path
from typing import Any

import httpx
import yaml

from speclink.exceptions import SpecParseError, UnsupportedVersionError

logger = logging.getLogger(__name__)

SWAGGER_VERSION = "2.0"


class _DocumentLoader(yaml.SafeLoader):
    """SafeLoader that leaves date and timestamp scalars as strings."""


_DocumentLoader.yaml_implicit_resolvers = {
    first: [
        (tag, regexp)
        for tag, regexp in resolvers
        if tag != "tag:yaml.org,2002:timestamp"
    ]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def load_spec(source: str, encoding: str = "utf-8") -> dict[str, Any]:
    """Load a Swagger/OpenAPI document from URL, file path, or stdin ('-').

    Supports JSON and YAML formats.
    Auto-detects format from content/extension.

    Args:
        source: A URL (http/https), file path, or '-' for stdin.
        encoding: Text encoding of the file.  Ignored for URLs, where the
            HTTP response declares its own charset.

    Returns:
        The parsed document as a dictionary.

    Raises:
        SpecParseError: If the source cannot be loaded or parsed.
    """
    _check_encoding(encoding)
    if source == "-":
        return _load_from_stdin(encoding)
    elif source.startswith(("http://", "https://")):
        return _load_from_url(source)
    else:
        return _load_from_file(source, encoding)


def _check_encoding(encoding: str) -> None:
    try:
        codecs.lookup(encoding)
    except LookupError as exc:
        raise SpecParseError(f"Unknown text encoding: {encoding}") from exc


def _load_from_stdin(encoding: str) -> dict[str, Any]:
    """Read a document from stdin.

    Bytes are decoded with *encoding* when stdin exposes a binary buffer.

    Raises:
        SpecParseError: If stdin is empty or content cannot be parsed.
    """
    try:
        stream = getattr(sys.stdin, "buffer", None)
        content = stream.read().decode(encoding) if stream is not None else sys.stdin.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise SpecParseError(f"Failed to read from stdin: {exc}") from exc

    if not content.strip():
        raise SpecParseError("No input received from stdin")

    return _parse_content(content, hint="stdin")


def _load_from_url(url: str) -> dict[str, Any]:
    """Fetch a document from URL. Supports JSON and YAML responses.

    Raises:
        SpecParseError: If the URL cannot be fetched or content cannot be parsed.
    """
    logger.debug("Fetching %s", url)
    try:
        response = httpx.get(url, timeout=30.0, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise SpecParseError(
            f"HTTP {exc.response.status_code} fetching spec from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise SpecParseError(f"Failed to fetch spec from {url}: {exc}") from exc

    content_type = response.headers.get("content-type", "")
    hint = ""
    if "json" in content_type:
        hint = "json"
    elif "yaml" in content_type or "yml" in content_type:
        hint = "yaml"

    return _parse_content(response.text, hint=hint)


def _load_from_file(path: str, encoding: str) -> dict[str, Any]:
    """Load a document from a local file.

    Supports .json, .yaml, and .yml extensions. Falls back to content-based
    detection if the extension is not recognized.

    Raises:
        SpecParseError: If the file cannot be read or content cannot be parsed.
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise SpecParseError(f"Spec file not found: {path}")

    logger.debug("Reading file '%s' with encoding %s", path, encoding)
    try:
        content = file_path.read_text(encoding=encoding)
    except (OSError, UnicodeDecodeError) as exc:
        raise SpecParseError(f"Failed to read spec file {path}: {exc}") from exc

    if not content.strip():
        raise SpecParseError(f"Spec file is empty: {path}")

    suffix = file_path.suffix.lower()
    hint = ""
    if suffix == ".json":
        hint = "json"
    elif suffix in (".yaml", ".yml"):
        hint = "yaml"

    return _parse_content(content, hint=hint)


def _parse_content(content: str, hint: str = "") -> dict[str, Any]:
    """Parse content as JSON or YAML.

    Tries JSON first (unless hint is 'yaml'), then falls back to YAML.
    Valid JSON is also valid YAML, but JSON parsing is stricter and faster.

    Raises:
        SpecParseError: If the content cannot be parsed as either format.
    """
    json_error: Exception | None = None
    yaml_error: Exception | None = None

    if hint != "yaml":
        try:
            result = json.loads(content)
            if not isinstance(result, dict):
                raise SpecParseError(
                    "Spec must be a JSON/YAML object (got "
                    f"{type(result).__name__})"
                )
            return result
        except json.JSONDecodeError as exc:
            json_error = exc
            if hint == "json":
                raise SpecParseError(f"Invalid JSON: {exc}") from exc

    try:
        result = yaml.load(content, Loader=_DocumentLoader)
        if not isinstance(result, dict):
            raise SpecParseError(
                "Spec must be a JSON/YAML object (got "
                f"{type(result).__name__ if result is not None else 'empty document'})"
            )
        return result
    except yaml.YAMLError as exc:
        yaml_error = exc

    msg = "Failed to parse spec as JSON or YAML"
    if json_error:
        msg += f"\n  JSON error: {json_error}"
    if yaml_error:
        msg += f"\n  YAML error: {yaml_error}"
    raise SpecParseError(msg)


def detect_version(spec: dict[str, Any]) -> str:
    """Return the declared specification version.

    Swagger 2.0 documents yield ``"2.0"``; OpenAPI 3.0.x documents yield
    their ``openapi`` string (e.g. ``"3.0.3"``).

    Raises:
        UnsupportedVersionError: For any other version (including 3.1.x),
            a missing version field, or a document declaring both.
    """
    has_swagger = "swagger" in spec
    has_openapi = "openapi" in spec
    if has_swagger and has_openapi:
        raise UnsupportedVersionError(
            "Document declares both 'swagger' and 'openapi' versions"
        )

    if has_swagger:
        version_str = str(spec["swagger"])
        if version_str == SWAGGER_VERSION:
            return version_str
        raise UnsupportedVersionError(
            f"Unsupported Swagger version: {version_str}. Only Swagger 2.0 is supported."
        )

    if not has_openapi:
        raise UnsupportedVersionError(
            "Missing 'swagger' or 'openapi' field. Is this a Swagger/OpenAPI document?"
        )

    version_str = str(spec["openapi"])
    parts = version_str.split(".")
    if len(parts) == 3 and parts[:2] == ["3", "0"] and parts[2].isdigit():
        return version_str

    raise UnsupportedVersionError(
        f"Unsupported OpenAPI version: {version_str}. "
        "Only Swagger 2.0 and OpenAPI 3.0.x are supported."
    )
