"""Jinja2 Environment factory."""

from dataclasses import dataclass

from jinja2 import Environment, StrictUndefined, Undefined


@dataclass(slots=True, frozen=True)
class EnvironmentConfig:
    """Configuration for the Jinja2 Environment.

    Attributes:
        autoescape: Escape interpolated values for HTML (default: True).
        strict_undefined: Raise on undefined variables and attributes instead
            of rendering them as empty strings.
        trim_blocks: Remove first newline after a block tag.
        lstrip_blocks: Strip leading whitespace before block tags.
        keep_trailing_newline: Preserve trailing newline in templates.
    """

    autoescape: bool = True
    strict_undefined: bool = True
    trim_blocks: bool = False
    lstrip_blocks: bool = False
    keep_trailing_newline: bool = False


def create_environment(config: EnvironmentConfig | None = None) -> Environment:
    """Create the Jinja2 Environment used to compile module and layout files.

    The environment has no loader: templates are compiled from source by
    `BlockSet`, and cross-file references go through the ``render_block``
    global that each compiled set binds at execution time.

    Args:
        config: Optional environment configuration. If None, uses defaults.

    Returns:
        Configured Jinja2 Environment.
    """
    if config is None:
        config = EnvironmentConfig()

    undefined: type[Undefined] = StrictUndefined if config.strict_undefined else Undefined
    return Environment(
        autoescape=config.autoescape,
        undefined=undefined,
        trim_blocks=config.trim_blocks,
        lstrip_blocks=config.lstrip_blocks,
        keep_trailing_newline=config.keep_trailing_newline,
    )
