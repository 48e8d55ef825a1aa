# pyright: reportExplicitAny=false, reportAny=false
"""Configuration models."""

from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import Any, ClassVar, Self, TypeVar, overload

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, ValidationError

from modpage.config._defaults import CONFIG_FILENAME, DEFAULT_CONFIG
from modpage.config._loader import deep_merge, parse_env_vars, read_toml_file
from modpage.exceptions import ConfigValidationError

T = TypeVar("T")


class LogLevel(StrEnum):
    """Log level threshold values, most verbose first."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class LogFormat(StrEnum):
    JSON = "json"
    TEXT = "text"


class ConfigSourceName(StrEnum):
    """Configuration sources, highest precedence first."""

    CLI = "cli"
    ENV = "env"
    PROJECT = "project"
    DEFAULT = "default"


@dataclass(frozen=True, slots=True)
class ConfigSource:
    """A source that contributed configuration values.

    Attributes:
        name: The source type.
        path: Config file path, or None for non-file sources.
        exists: Whether the source had values.
        values: Values read from this source.
    """

    name: ConfigSourceName
    path: Path | None
    exists: bool
    values: dict[str, Any]


class PathsConfig(BaseModel):
    """Filesystem layout of a site.

    Relative directories resolve against ``project_root``.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    project_root: Path = Path()
    layouts_dir: Path = Path("web/templates")
    modules_dir: Path = Path("modules")
    metadata_dir: Path = Path(".module_metadata")
    static_dir: Path = Path("web/static")

    def resolve(self, path: Path) -> Path:
        return path if path.is_absolute() else self.project_root / path

    @property
    def layouts_path(self) -> Path:
        return self.resolve(self.layouts_dir)

    @property
    def modules_path(self) -> Path:
        return self.resolve(self.modules_dir)

    @property
    def metadata_path(self) -> Path:
        return self.resolve(self.metadata_dir)

    @property
    def static_path(self) -> Path:
        return self.resolve(self.static_dir)


class ServerConfig(BaseModel):
    """HTTP server settings.

    Attributes:
        host: Interface to bind.
        port: Port to bind.
        module_list_enabled: Serve ``/modules/list`` and tell layouts about it.
        admin_enabled: Mount the template editing API.
        ssl_certfile: TLS certificate path; empty serves plain HTTP.
        ssl_keyfile: TLS key path.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    host: str = "127.0.0.1"
    port: int = Field(default=8443, ge=0, le=65535)
    module_list_enabled: bool = False
    admin_enabled: bool = False
    ssl_certfile: str = ""
    ssl_keyfile: str = ""


class TemplatingConfig(BaseModel):
    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    autoescape: bool = True
    strict_undefined: bool = True


class LoggingConfig(BaseModel):
    """Logging configuration section.

    Attributes:
        level: Log level threshold.
        format: Log output format.
        file: Path to log file (empty logs to stderr).
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.TEXT
    file: str = ""


class Config(BaseModel):
    """Immutable, typed configuration.

    Use the factory methods rather than the constructor.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    paths: PathsConfig = Field(default_factory=PathsConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    templating: TemplatingConfig = Field(default_factory=TemplatingConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    _data: dict[str, Any] = PrivateAttr(default_factory=dict)
    _sources: tuple[ConfigSource, ...] = PrivateAttr(default=())

    @classmethod
    def _build(
        cls,
        merged: dict[str, Any],
        *,
        sources: tuple[ConfigSource, ...] = (),
        source_label: str | None = None,
    ) -> Self:
        try:
            config = cls.model_validate(merged)
        except ValidationError as e:
            error = e.errors()[0]
            key = ".".join(str(part) for part in error["loc"])
            msg = f"Invalid configuration value for {key}: {error['msg']}"
            raise ConfigValidationError(
                msg,
                key=key,
                value=error.get("input"),
                expected=error["type"],
                source=source_label,
            ) from e
        config._data = merged
        config._sources = sources
        return config

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Create configuration from a dictionary merged over the defaults.

        Raises:
            ConfigValidationError: If a value is invalid.
        """
        return cls._build(deep_merge(DEFAULT_CONFIG, data))

    @classmethod
    def from_file(cls, path: Path) -> Self:
        """Load configuration from one TOML file merged over the defaults.

        Relative paths in the file resolve against the file's directory unless
        the file sets ``paths.project_root``.

        Raises:
            FileNotFoundError: If the file does not exist.
            ConfigLoadError: If the file cannot be parsed.
            ConfigValidationError: If a value is invalid.
        """
        data = read_toml_file(path)
        source = ConfigSource(ConfigSourceName.PROJECT, path, exists=True, values=data)
        root = {"paths": {"project_root": str(path.parent)}}
        merged = deep_merge(deep_merge(DEFAULT_CONFIG, root), data)
        return cls._build(merged, sources=(source,), source_label=str(path))

    @classmethod
    def load(
        cls,
        *,
        project_root: Path | None = None,
        include_env: bool = True,
        cli_overrides: dict[str, Any] | None = None,
    ) -> Self:
        """Load merged configuration from all sources.

        Precedence, lowest first: defaults, ``modpage.toml`` in the project
        root, ``MODPAGE_*`` environment variables, CLI overrides.

        Args:
            project_root: Project root. Defaults to the working directory.
            include_env: Include environment variables.
            cli_overrides: Nested CLI overrides.

        Raises:
            ConfigLoadError: If the config file cannot be parsed.
            ConfigValidationError: If the merged config is invalid.
        """
        root = project_root if project_root is not None else Path.cwd()
        config_path = root / CONFIG_FILENAME

        defaults = deep_merge(DEFAULT_CONFIG, {"paths": {"project_root": str(root)}})
        project_values = read_toml_file(config_path) if config_path.is_file() else {}
        env_values = parse_env_vars() if include_env else {}
        cli_values = cli_overrides or {}

        loaded = [
            ConfigSource(ConfigSourceName.DEFAULT, None, exists=True, values=defaults),
            ConfigSource(
                ConfigSourceName.PROJECT,
                config_path,
                exists=bool(project_values),
                values=project_values,
            ),
            ConfigSource(
                ConfigSourceName.ENV, None, exists=bool(env_values), values=env_values
            ),
            ConfigSource(
                ConfigSourceName.CLI, None, exists=bool(cli_values), values=cli_values
            ),
        ]

        merged: dict[str, Any] = {}
        for source in loaded:
            if source.values:
                merged = deep_merge(merged, source.values)

        return cls._build(merged, sources=tuple(reversed(loaded)))

    def with_overrides(self, overrides: dict[str, Any]) -> Self:
        """Return a copy with nested ``overrides`` merged on top.

        Raises:
            ConfigValidationError: If an override is invalid.
        """
        if not overrides:
            return self
        cli = ConfigSource(ConfigSourceName.CLI, None, exists=True, values=overrides)
        merged = deep_merge(self.model_dump(mode="json"), overrides)
        return self._build(merged, sources=(cli, *self._sources))

    @property
    def sources(self) -> list[ConfigSource]:
        """Sources that contributed, highest precedence first."""
        return list(self._sources)

    @overload
    def get(self, key: str) -> Any: ...

    @overload
    def get(self, key: str, default: T) -> T: ...

    def get(self, key: str, default: Any = None) -> Any:
        """Get a raw merged value by dot-notation key.

        Examples:
            >>> Config.from_dict({}).get("server.port")
            8443
        """
        current: Any = self._data
        for part in key.split("."):
            if not isinstance(current, dict) or part not in current:
                return default
            current = current[part]
        return current
