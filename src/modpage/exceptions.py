"""modpage exceptions."""

from pathlib import Path


class ModpageError(Exception):
    """Base exception for modpage errors."""


class ConfigError(ModpageError):
    """Base exception for configuration errors."""


class ConfigLoadError(ConfigError):
    """Raised when configuration cannot be loaded or parsed."""

    def __init__(
        self,
        message: str,
        *,
        path: Path | None = None,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        """Initialize with error message and location context."""
        super().__init__(message)
        self.path: Path | None = path
        self.line: int | None = line
        self.column: int | None = column


class ConfigValidationError(ConfigError):
    """Raised when configuration fails validation."""

    def __init__(
        self,
        message: str,
        *,
        key: str,
        value: object,
        expected: str,
        source: str | None = None,
    ) -> None:
        """Initialize with error message and validation context."""
        super().__init__(message)
        self.key: str = key
        self.value: object = value
        self.expected: str = expected
        self.source: str | None = source


# -----------------------------------------------------------------------------
# Module metadata
# -----------------------------------------------------------------------------


class ModuleStoreError(ModpageError):
    """Raised when module metadata cannot be read or written."""

    def __init__(self, message: str, *, path: Path | None = None) -> None:
        super().__init__(message)
        self.path: Path | None = path


class UnknownModuleError(ModpageError):
    """Raised when a module cannot be found by id or slug."""

    def __init__(self, module_ref: str) -> None:
        super().__init__(f"Module not found: {module_ref}")
        self.module_ref: str = module_ref


class ModuleUnavailableError(ModpageError):
    """Raised when a module exists but is inactive."""

    def __init__(self, module_id: str) -> None:
        super().__init__(f"Module not available: {module_id}")
        self.module_id: str = module_id


class UnknownTemplateError(ModpageError):
    """Raised when a filename is not listed in a module's metadata."""

    def __init__(self, module_id: str, filename: str) -> None:
        super().__init__(f"Template {filename!r} is not part of module {module_id}")
        self.module_id: str = module_id
        self.filename: str = filename


# -----------------------------------------------------------------------------
# Templating
# -----------------------------------------------------------------------------


class TemplateError(ModpageError):
    """Base exception for template composition and rendering errors."""


class TemplateParseError(TemplateError):
    """Raised when a template file fails to compile."""

    def __init__(
        self,
        message: str,
        *,
        filename: str,
        line: int | None = None,
    ) -> None:
        location = f"{filename}:{line}" if line is not None else filename
        super().__init__(f"{location}: {message}")
        self.filename: str = filename
        self.line: int | None = line
        self.reason: str = message


class BlockNotFoundError(TemplateError):
    """Raised when a named block is absent from a compiled set."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Block {name!r} is not defined")
        self.name: str = name


class BaseTemplateError(TemplateError):
    """Raised when the shared layout set cannot be loaded."""

    def __init__(self, message: str, *, directory: Path) -> None:
        super().__init__(message)
        self.directory: Path = directory


class ModuleBuildError(TemplateError):
    """Raised when a module's compiled set cannot be produced."""

    def __init__(
        self,
        message: str,
        *,
        module_id: str,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.module_id: str = module_id
        self.cause: Exception | None = cause


class ModuleNotLoadedError(TemplateError):
    """Raised when no compiled set is cached for an active module."""

    def __init__(self, module_id: str) -> None:
        super().__init__(f"Templates not loaded for module {module_id}")
        self.module_id: str = module_id


class TemplateMissingError(TemplateError):
    """Raised when the entry-point or layout block is missing at render time."""

    def __init__(self, block: str, *, module_id: str | None = None) -> None:
        target = f" for module {module_id}" if module_id else ""
        super().__init__(f"Template {block!r} is missing{target}")
        self.block: str = block
        self.module_id: str | None = module_id


class RenderError(TemplateError):
    """Raised when executing a block fails."""

    def __init__(
        self,
        message: str,
        *,
        block: str,
        module_id: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.block: str = block
        self.module_id: str | None = module_id
        self.cause: Exception | None = cause


class UnsupportedPreviewError(TemplateError):
    """Raised when a preview is requested for a file type that cannot render."""

    def __init__(self, filename: str) -> None:
        super().__init__(f"Unsupported file type for preview: {filename}")
        self.filename: str = filename
