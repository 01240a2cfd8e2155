"""Exception hierarchy for speclink.

All exceptions inherit from :class:`SpeclinkError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`speclink.exit_codes`.
The command in :mod:`speclink.app` catches ``SpeclinkError`` and exits with
the appropriate code, while unexpected exceptions produce a crash log and
exit with :data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    SpeclinkError (exit 1)
    +-- InvalidUsageError            (exit 2)
    +-- ConfigError                  (exit 1)
    +-- SpecParseError               (exit 7)
    |   +-- UnsupportedVersionError  (exit 7)
    |   +-- ValidationFailedError    (exit 7)
    +-- LinkError                    (exit 8)
        +-- MalformedPointerError
        +-- EmptyNameError
        +-- ReferenceResolutionError
            +-- InvalidReferenceError
            +-- ExternalReferenceError

The :class:`LinkError` branch is raised by :mod:`speclink.links`. The link
pipeline catches it per candidate so that a single broken candidate never
aborts the whole pass (unless running in strict mode).
"""

from speclink.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_LINK_ERROR,
    EXIT_SPEC_PARSE_ERROR,
)


class SpeclinkError(Exception):
    """Base exception for all speclink errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`speclink.exit_codes`.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(SpeclinkError):
    """Raised for invalid CLI arguments."""

    exit_code = EXIT_INVALID_USAGE


class ConfigError(SpeclinkError):
    """Raised for configuration problems (invalid JSON, bad values)."""

    exit_code = EXIT_GENERIC_FAILURE


class SpecParseError(SpeclinkError):
    """Raised when the input document cannot be read or parsed."""

    exit_code = EXIT_SPEC_PARSE_ERROR


class UnsupportedVersionError(SpecParseError):
    """Raised when the document is neither Swagger 2.0 nor OpenAPI 3.0.x."""


class ValidationFailedError(SpecParseError):
    """Raised when the structural validator rejects the OpenAPI 3.0 document.

    Args:
        message: Summary of the failure.
        errors: Individual validator messages, most relevant first.
    """

    def __init__(self, message: str, errors: list[str] | None = None):
        super().__init__(message)
        self.errors = list(errors or [])


class LinkError(SpeclinkError):
    """Base class for errors raised by the link generator."""

    exit_code = EXIT_LINK_ERROR


class MalformedPointerError(LinkError):
    """Raised when a JSON pointer does not start with ``/``."""


class EmptyNameError(LinkError):
    """Raised when an empty string is passed as a component or link name."""


class ReferenceResolutionError(LinkError):
    """Base class for ``$ref`` resolution failures."""


class InvalidReferenceError(ReferenceResolutionError):
    """Raised when a ``$ref`` does not point at an existing component of the expected type."""


class ExternalReferenceError(ReferenceResolutionError):
    """Raised when asked to dereference a ``$ref`` that points outside the document."""
