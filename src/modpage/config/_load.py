"""Configuration loading with error reporting for entry points."""

import os
import sys
from pathlib import Path
from typing import Any

from modpage.exceptions import ConfigError

from ._models import Config


def _report(message: str, *, strict: bool) -> None:
    if strict:
        print(f"Error: {message}", file=sys.stderr)  # noqa: T201
        sys.exit(1)
    print(f"Warning: {message}", file=sys.stderr)  # noqa: T201


def _fallback(project_root: Path | None) -> Config:
    if project_root is None:
        return Config.from_dict({})
    return Config.from_dict({"paths": {"project_root": str(project_root)}})


def safe_load_config(
    *,
    config_path: Path | None = None,
    project_root: Path | None = None,
    cli_overrides: dict[str, Any] | None = None,  # pyright: ignore[reportExplicitAny]
) -> tuple[Config, str | None]:
    """Load configuration with error handling.

    Behaviour on error depends on the MODPAGE_STRICT_CONFIG environment
    variable:
    - If unset or "0": warn to stderr and return the default config
    - If "1": fail fast with sys.exit(1)

    When config_path is provided, the file must exist.

    Args:
        config_path: Explicit path to config file (--config flag).
        project_root: Project root directory override.
        cli_overrides: CLI argument overrides, merged last.

    Returns:
        Tuple of (Config, error_message). On success, error_message is None.
    """
    strict_mode = os.environ.get("MODPAGE_STRICT_CONFIG", "0") == "1"

    try:
        if config_path is not None:
            if not config_path.exists():
                print(  # noqa: T201
                    f"Error: Config file not found: {config_path}", file=sys.stderr
                )
                sys.exit(1)
            config = Config.from_file(config_path)
            if cli_overrides:
                config = config.with_overrides(cli_overrides)
            return config, None

        config = Config.load(project_root=project_root, cli_overrides=cli_overrides)
    except ConfigError as e:
        error_msg = str(e)
        _report(f"Failed to load config: {error_msg}", strict=strict_mode)
        return _fallback(project_root), error_msg
    except OSError as e:
        error_msg = f"Failed to load config: {e}"
        _report(error_msg, strict=strict_mode)
        return _fallback(project_root), error_msg
    else:
        return config, None
