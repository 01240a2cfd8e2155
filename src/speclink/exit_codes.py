"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~speclink.exceptions.SpeclinkError` subclass.
Build scripts and CI jobs can inspect the exit code to tell a broken input
document apart from a broken link graph without parsing stderr.

Example::

    $ speclink swagger.yaml -o openapi.json
    $ echo $?
    7   # EXIT_SPEC_PARSE_ERROR -- the input could not be loaded or validated
"""

EXIT_SUCCESS = 0
"""The document was processed and written successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments."""

EXIT_SPEC_PARSE_ERROR = 7
"""The Swagger/OpenAPI document could not be loaded, converted, or validated."""

EXIT_LINK_ERROR = 8
"""Link generation hit an unresolvable reference or an invalid identifier."""
