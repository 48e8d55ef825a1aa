"""JSON-backed module metadata store.

Each module is stored as ``<metadata_dir>/<module_id>.json``. Template
content lives in the module's own directory; only metadata is stored here.
"""

from pathlib import Path
from typing import Protocol

import orjson
from pydantic import ValidationError

from modpage.exceptions import ModuleStoreError, UnknownModuleError
from modpage.modules._models import Module

__all__ = ["JsonModuleStore", "ModuleStore"]


class ModuleStore(Protocol):
    """Operations needed for persisting module metadata."""

    def load(self, module_id: str) -> Module: ...

    def save(self, module: Module) -> None: ...

    def list_ids(self) -> list[str]: ...

    def read_all(self) -> list[Module]: ...

    def delete(self, module_id: str) -> None: ...


class JsonModuleStore:
    """Module metadata stored as one JSON file per module.

    Attributes:
        base_path: Directory holding the ``*.json`` metadata files.
    """

    __slots__ = ("base_path",)

    def __init__(self, base_path: Path) -> None:
        self.base_path: Path = base_path

    def _path_for(self, module_id: str) -> Path:
        if not module_id:
            msg = "Module ID cannot be empty"
            raise ModuleStoreError(msg)
        return self.base_path / f"{module_id}.json"

    def load(self, module_id: str) -> Module:
        """Load a module's metadata.

        Raises:
            UnknownModuleError: If no metadata file exists for the id.
            ModuleStoreError: If the file cannot be read or is invalid.
        """
        path = self._path_for(module_id)
        try:
            data = path.read_bytes()
        except FileNotFoundError as e:
            raise UnknownModuleError(module_id) from e
        except OSError as e:
            msg = f"Failed to read module file {path}: {e}"
            raise ModuleStoreError(msg, path=path) from e

        try:
            return Module.model_validate(orjson.loads(data))
        except (orjson.JSONDecodeError, ValidationError) as e:
            msg = f"Failed to parse module data from {path}: {e}"
            raise ModuleStoreError(msg, path=path) from e

    def save(self, module: Module) -> None:
        """Persist a module's metadata, creating the directory if needed."""
        path = self._path_for(module.id)
        payload = orjson.dumps(
            module.model_dump(mode="json", by_alias=True),
            option=orjson.OPT_INDENT_2,
        )
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            _ = path.write_bytes(payload)
        except OSError as e:
            msg = f"Failed to write module file {path}: {e}"
            raise ModuleStoreError(msg, path=path) from e

    def list_ids(self) -> list[str]:
        """Return the ids of all stored modules, sorted."""
        if not self.base_path.is_dir():
            return []
        return sorted(p.stem for p in self.base_path.glob("*.json") if p.is_file())

    def read_all(self) -> list[Module]:
        """Load every stored module.

        Raises:
            ModuleStoreError: If any module fails to load.
        """
        modules: list[Module] = []
        for module_id in self.list_ids():
            try:
                modules.append(self.load(module_id))
            except UnknownModuleError as e:
                msg = f"Module {module_id} disappeared during read"
                raise ModuleStoreError(msg) from e
        return modules

    def delete(self, module_id: str) -> None:
        """Remove a module's metadata file. Missing files are ignored."""
        path = self._path_for(module_id)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            msg = f"Failed to delete module file {path}: {e}"
            raise ModuleStoreError(msg, path=path) from e
