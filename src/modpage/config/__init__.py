"""Configuration for modpage.

Values come from, lowest precedence first: built-in defaults, a
``modpage.toml`` file in the project root, ``MODPAGE_*`` environment
variables (``MODPAGE_SERVER__PORT=9000`` sets ``server.port``), and CLI
overrides.

Example:
    >>> from modpage.config import Config
    >>> Config.from_dict({"server": {"port": 9000}}).server.port
    9000
"""

from ._defaults import CONFIG_FILENAME, DEFAULT_CONFIG
from ._load import safe_load_config
from ._loader import (
    ENV_PREFIX,
    copy_value,
    deep_merge,
    parse_env_vars,
    parse_string_value,
    read_toml_file,
    set_nested_key,
)
from ._models import (
    Config,
    ConfigSource,
    ConfigSourceName,
    LogFormat,
    LoggingConfig,
    LogLevel,
    PathsConfig,
    ServerConfig,
    TemplatingConfig,
)

__all__ = [
    "CONFIG_FILENAME",
    "DEFAULT_CONFIG",
    "ENV_PREFIX",
    "Config",
    "ConfigSource",
    "ConfigSourceName",
    "LogFormat",
    "LogLevel",
    "LoggingConfig",
    "PathsConfig",
    "ServerConfig",
    "TemplatingConfig",
    "copy_value",
    "deep_merge",
    "parse_env_vars",
    "parse_string_value",
    "read_toml_file",
    "safe_load_config",
    "set_nested_key",
]
