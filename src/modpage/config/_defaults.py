"""Built-in configuration values used when no other source sets a key."""

from typing import Any

CONFIG_FILENAME = "modpage.toml"

DEFAULT_CONFIG: dict[str, Any] = {  # pyright: ignore[reportExplicitAny]
    "paths": {
        "project_root": ".",
        "layouts_dir": "web/templates",
        "modules_dir": "modules",
        "metadata_dir": ".module_metadata",
        "static_dir": "web/static",
    },
    "server": {
        "host": "127.0.0.1",
        "port": 8443,
        "module_list_enabled": False,
        "admin_enabled": False,
        "ssl_certfile": "",
        "ssl_keyfile": "",
    },
    "templating": {
        "autoescape": True,
        "strict_undefined": True,
    },
    "logging": {
        "level": "info",
        "format": "text",
        "file": "",
    },
}
