"""speclink -- add OpenAPI link definitions between related operations.

This package reads a Swagger 2.0 or OpenAPI 3.0 document, normalises it to
OpenAPI 3.0, and infers Link Objects between GET operations whose paths are
nested (``/projects/{projectId}`` -> ``/projects/{projectId}/members``) and
whose parameters line up.  The result is written back as JSON or YAML.

Typical workflow::

    speclink swagger.yaml -o openapi.json

Modules:
    app: Typer application and CLI entry point.
    links: The link-inference pipeline (pure, operates on a deep copy).
    parser: Loading, Swagger 2.0 conversion, and validation.
    serializer: JSON/YAML rendering and atomic file writes.
    config: XDG-aware configuration and precedence resolution.
    models: Pydantic configuration models.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr discipline with Rich support.
"""

__version__ = "0.1.0"
