"""Shared test fixtures for speclink.

Provides reusable fixtures for loading fixture documents, building small
OpenAPI documents inline, isolating configuration, managing output state,
and running the CLI.  These fixtures are automatically discovered by pytest
and available to all test modules without explicit imports.
"""

from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any, Callable, Optional

import pytest
import yaml

from speclink.output import reset_output


FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time.  When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale
    ("I/O operation on closed file").  Resetting forces a fresh manager
    to be created on next use.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Fixture documents
# ---------------------------------------------------------------------------


@pytest.fixture
def reqbaz_doc() -> dict[str, Any]:
    """Load the Requirements Bazaar OpenAPI 3.0 document."""
    with open(FIXTURES_DIR / "reqbaz.json", encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def petstore_swagger_raw() -> dict[str, Any]:
    """Load the raw Swagger 2.0 petstore document."""
    with open(FIXTURES_DIR / "petstore_swagger.yaml", encoding="utf-8") as f:
        return yaml.safe_load(f)


# ---------------------------------------------------------------------------
# Inline document builders
# ---------------------------------------------------------------------------


def _get_operation(
    parameters: Optional[list[Any]] = None,
    operation_id: Optional[str] = None,
    responses: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    operation: dict[str, Any] = {}
    if operation_id is not None:
        operation["operationId"] = operation_id
    if parameters:
        operation["parameters"] = parameters
    operation["responses"] = responses or {"200": {"description": "OK"}}
    return operation


@pytest.fixture
def get_op() -> Callable[..., dict[str, Any]]:
    """Factory for a GET operation: ``get_op(parameters, operation_id, responses)``.

    Without *responses* the operation has a single ``200`` response.
    """
    return _get_operation


@pytest.fixture
def path_param() -> Callable[..., dict[str, Any]]:
    """Factory for a parameter: ``path_param("id", location="path", schema=...)``."""

    def _make(
        name: str,
        location: str = "path",
        schema: Optional[dict[str, Any]] = None,
        required: Optional[bool] = None,
    ) -> dict[str, Any]:
        param: dict[str, Any] = {"name": name, "in": location}
        if required is None:
            required = location == "path"
        if required:
            param["required"] = True
        param["schema"] = copy.deepcopy(schema) if schema is not None else {"type": "integer"}
        return param

    return _make


@pytest.fixture
def make_document() -> Callable[..., dict[str, Any]]:
    """Factory for a minimal OpenAPI 3.0 document.

    ``make_document({"/a": {"get": ...}}, components={...})``
    """

    def _make(
        paths: dict[str, Any],
        components: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        document: dict[str, Any] = {
            "openapi": "3.0.3",
            "info": {"title": "Test API", "version": "1.0.0"},
            "paths": paths,
        }
        if components is not None:
            document["components"] = components
        return document

    return _make


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME and XDG_DATA_HOME to subdirectories of tmp_path
    so that tests never touch real user config. Clears all SPECLINK_*
    environment variables and changes the working directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))

    for var in ["SPECLINK_ENCODING", "SPECLINK_FORMAT", "SPECLINK_STRICT"]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner.

    Returns a CliRunner instance that captures stdout/stderr and
    provides a consistent interface for invoking Typer apps in tests.
    """
    from typer.testing import CliRunner

    return CliRunner()
