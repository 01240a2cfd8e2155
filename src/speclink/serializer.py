"""Render OpenAPI documents as JSON or YAML and write them to disk.

Writes go through :func:`atomic_write` (temp file in the target directory,
then ``os.replace``), so a failed run never leaves a truncated output file
behind.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Optional

import yaml

from speclink.exceptions import InvalidUsageError, SpeclinkError

SUPPORTED_FORMATS = ("json", "yaml")


class _DocumentDumper(yaml.SafeDumper):
    """SafeDumper that never emits anchors/aliases for shared objects."""

    def ignore_aliases(self, data: Any) -> bool:
        return True


def serialize_document(document: dict[str, Any], fmt: str = "json", indent: int = 2) -> str:
    """Serialise *document* in the given format.

    Args:
        document: The OpenAPI document.
        fmt: ``"json"`` or ``"yaml"``.
        indent: JSON indentation; ``0`` produces compact single-line JSON.

    Raises:
        InvalidUsageError: If *fmt* is not supported.
    """
    if fmt == "json":
        if indent:
            return json.dumps(document, indent=indent, ensure_ascii=False) + "\n"
        return json.dumps(document, separators=(",", ":"), ensure_ascii=False) + "\n"
    if fmt == "yaml":
        return yaml.dump(
            document,
            Dumper=_DocumentDumper,
            sort_keys=False,
            allow_unicode=True,
            default_flow_style=False,
        )
    raise InvalidUsageError(
        f"Unsupported output format: {fmt!r} (expected one of {', '.join(SUPPORTED_FORMATS)})"
    )


def atomic_write(path: Path, data: str, encoding: str = "utf-8") -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is guaranteed to be an atomic rename on POSIX systems.
    On any failure the temp file is removed and *path* is left untouched.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding=encoding,
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close below
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


def save_document(
    document: dict[str, Any],
    filename: str,
    fmt: str = "json",
    encoding: str = "utf-8",
    indent: int = 2,
) -> None:
    """Serialise *document* and write it atomically to *filename*.

    Raises:
        SpeclinkError: If the file cannot be written or the document cannot
            be encoded with *encoding*.
    """
    text = serialize_document(document, fmt, indent=indent)
    try:
        atomic_write(Path(filename), text, encoding=encoding)
    except (OSError, UnicodeError, LookupError) as exc:
        raise SpeclinkError(f"Failed to write {filename}: {exc}") from exc
