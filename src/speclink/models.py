"""Configuration models for speclink.

The models are serialised as JSON in the user's config directory
(``config.json``) or in a project-local ``speclink.json``.  All use
Pydantic v2; unknown keys are rejected so that typos surface as
:class:`~speclink.exceptions.ConfigError` instead of being ignored.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from speclink.links import DEFAULT_DESCRIPTION

OutputFormatName = Literal["json", "yaml"]


class OutputConfig(BaseModel):
    """Serialisation preferences for the augmented document."""

    model_config = ConfigDict(extra="forbid")

    format: OutputFormatName = Field(
        default="json", description="Output format: json or yaml"
    )
    indent: int = Field(
        default=2, ge=0, description="JSON indentation (0 for compact output)"
    )


class LinkConfig(BaseModel):
    """Settings passed through to :func:`~speclink.links.add_link_definitions`."""

    model_config = ConfigDict(extra="forbid")

    description: str = Field(
        default=DEFAULT_DESCRIPTION,
        description="Description put on every generated link",
    )
    strict: bool = Field(
        default=False,
        description="Abort on unresolvable references instead of skipping the link",
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/speclink/config.json``.

    Loaded by :func:`~speclink.config.load_global_config`.  Fields here have
    the lowest precedence and can be overridden by project config,
    environment variables, or CLI flags.  See
    :func:`~speclink.config.resolve_config` for the full precedence chain.

    Example::

        {
            "encoding": "utf-8",
            "output": {"format": "yaml"},
            "links": {"description": "Follow-up request"}
        }
    """

    model_config = ConfigDict(extra="forbid")

    encoding: str = Field(default="utf-8", description="Text encoding for input and output files")
    validate_output: bool = Field(
        default=False, description="Validate the augmented document before writing it"
    )
    output: OutputConfig = Field(default_factory=OutputConfig)
    links: LinkConfig = Field(default_factory=LinkConfig)
