"""Typer application and CLI entry point for speclink.

The single command loads a Swagger 2.0 or OpenAPI 3.0 document, converts and
validates it, adds heuristic link definitions between GET operations, and
writes the result as JSON or YAML::

    speclink api.yaml                     # JSON on stdout
    speclink api.yaml -f yaml -o out.yaml # YAML into a file

:func:`main` is the console-script entry point declared in
``pyproject.toml``.  It installs signal handlers and writes a crash log
under the data directory for unexpected exceptions.

See Also:
    :mod:`speclink.config`: Configuration precedence.
    :mod:`speclink.output`: Output formatting initialised per invocation.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from enum import Enum
from typing import Any, Optional

import typer
from rich.logging import RichHandler

from speclink import __version__
from speclink.exit_codes import EXIT_GENERIC_FAILURE


class OutputFormat(str, Enum):
    """Serialisation formats accepted by ``--format``."""

    JSON = "json"
    YAML = "yaml"


app = typer.Typer(
    name="speclink",
    help="Add OpenAPI link definitions between related GET operations.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"speclink {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    """Route the package loggers to stderr through Rich."""
    from speclink.output import get_output

    logger = logging.getLogger("speclink")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    handler = RichHandler(
        console=get_output().stderr_console,
        show_time=False,
        show_path=False,
    )
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.propagate = False


@app.command()
def generate(
    filename: str = typer.Argument(
        ..., help="Swagger/OpenAPI document: file path, http(s) URL, or '-' for stdin."
    ),
    encoding: Optional[str] = typer.Option(
        None, "--encoding", "-e", help="Encoding of the input and output files [default: utf-8]."
    ),
    output_file: Optional[str] = typer.Option(
        None, "--output", "-o", help="Output file. Writes to stdout when omitted."
    ),
    fmt: Optional[OutputFormat] = typer.Option(
        None, "--format", "-f", case_sensitive=False, help="Output format [default: json]."
    ),
    description: Optional[str] = typer.Option(
        None, "--description", "-d", help="Description put on every generated link."
    ),
    strict: Optional[bool] = typer.Option(
        None, "--strict/--no-strict", help="Abort on the first unresolvable reference."
    ),
    validate_output: Optional[bool] = typer.Option(
        None,
        "--validate-output/--no-validate-output",
        help="Validate the augmented document before writing it.",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-essential output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Add link definitions to a Swagger 2.0 / OpenAPI 3.0 document.

    A link from GET ``/a`` to GET ``/a/b`` is added to the successful
    responses of ``/a`` when every required parameter of ``/a/b`` has a
    parameter with the same name and schema on ``/a``.

    Example::

        speclink openapi.json -o openapi.linked.json
        speclink swagger.yaml --format yaml --verbose
    """
    from speclink.config import resolve_config
    from speclink.exceptions import SpeclinkError
    from speclink.links import Diagnostics, add_link_definitions
    from speclink.output import OutputManager, debug, error, set_output, success
    from speclink.parser import load_document, validate_document
    from speclink.serializer import save_document, serialize_document

    output = OutputManager(no_color=no_color, quiet=quiet, verbose=verbose)
    set_output(output)
    _configure_logging(verbose)

    try:
        config = resolve_config(
            cli_encoding=encoding,
            cli_format=fmt.value if fmt is not None else None,
            cli_strict=strict,
            cli_description=description,
            cli_validate_output=validate_output,
        )
        debug(f"Reading '{filename}' with encoding {config.encoding}")
        document = load_document(filename, config.encoding)

        result = add_link_definitions(
            document,
            description=config.links.description,
            strict=config.links.strict,
            diagnostics=Diagnostics(callback=debug),
        )
        if config.validate_output:
            validate_document(result.document)

        out_format = config.output.format
        if output_file is not None:
            debug(f"Writing file {output_file} with encoding {config.encoding}")
            save_document(
                result.document,
                output_file,
                out_format,
                encoding=config.encoding,
                indent=config.output.indent,
            )
        else:
            output.print_document(
                serialize_document(result.document, out_format, indent=config.output.indent),
                out_format,
            )
    except SpeclinkError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    success(f"Added {result.links_added} link definition(s)")


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from speclink.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(
        "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    )
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``speclink`` console script.

    :class:`~speclink.exceptions.SpeclinkError` instances are reported by
    the command itself. All other exceptions produce a crash log and a
    generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from speclink.output import error

        log_path = _write_crash_log(exc)
        error(f"Unexpected error. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)
