"""JSON file persistence for the project registry."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Protocol

from pydantic import ValidationError

from devman.errors import ProjectNotFoundError, RegistryError
from devman.models.project import ProjectRecord, ProjectStatus

logger = logging.getLogger(__name__)

type Registry = dict[str, ProjectRecord]


class ProjectRepository(Protocol):
    """Storage interface used by the project and runtime managers."""

    def load(self) -> Registry: ...

    def get(self, name: str) -> ProjectRecord | None: ...

    def list(self) -> list[ProjectRecord]: ...

    def upsert(self, record: ProjectRecord) -> None: ...

    def update_status(self, name: str, status: ProjectStatus) -> ProjectRecord: ...

    def remove(self, name: str) -> None: ...

    def ports(self) -> set[int]: ...


class JsonFileRegistry:
    """Registry stored as a single JSON object keyed by project name.

    Every mutation reloads the whole document, edits it in memory and
    atomically replaces the file. There is no locking, so two concurrent
    writers can lose an update.
    """

    def __init__(self, path: Path) -> None:
        self._path = path

    def load(self) -> Registry:
        if not self._path.exists():
            self._write_document({})
            return {}

        document = self._read_document()
        registry: Registry = {}
        for name, payload in document.items():
            if not isinstance(payload, dict):
                msg = f"Invalid registry entry for {name!r} in {self._path}"
                raise RegistryError(msg)
            try:
                registry[name] = ProjectRecord.from_document(name, payload)
            except ValidationError as exc:
                msg = f"Invalid registry entry for {name!r} in {self._path}: {exc}"
                raise RegistryError(msg) from exc
        return registry

    def get(self, name: str) -> ProjectRecord | None:
        return self.load().get(name)

    def list(self) -> list[ProjectRecord]:
        return list(self.load().values())

    def ports(self) -> set[int]:
        return {record.port for record in self.load().values()}

    def upsert(self, record: ProjectRecord) -> None:
        registry = self.load()
        registry[record.name] = record
        self._save(registry)
        logger.debug("Stored project %s in %s", record.name, self._path)

    def update_status(self, name: str, status: ProjectStatus) -> ProjectRecord:
        registry = self.load()
        current = registry.get(name)
        if current is None:
            raise ProjectNotFoundError(name)
        updated = current.model_copy(update={"status": status})
        registry[name] = updated
        self._save(registry)
        logger.debug("Project %s status -> %s", name, status.value)
        return updated

    def remove(self, name: str) -> None:
        registry = self.load()
        if name not in registry:
            raise ProjectNotFoundError(name)
        del registry[name]
        self._save(registry)
        logger.debug("Removed project %s from %s", name, self._path)

    def _save(self, registry: Registry) -> None:
        self._write_document({name: record.to_document() for name, record in registry.items()})

    def _read_document(self) -> dict[str, Any]:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except OSError as exc:
            msg = f"Failed to read {self._path}: {exc}"
            raise RegistryError(msg) from exc

        if not raw.strip():
            return {}
        try:
            document = json.loads(raw)
        except json.JSONDecodeError as exc:
            msg = f"Registry file {self._path} is not valid JSON: {exc}"
            raise RegistryError(msg) from exc
        if not isinstance(document, dict):
            msg = f"Registry file {self._path} must contain a JSON object"
            raise RegistryError(msg)
        return document

    def _write_document(self, document: dict[str, Any]) -> None:
        temp_path: Path | None = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, temp_name = tempfile.mkstemp(
                dir=self._path.parent,
                prefix=f".{self._path.name}.",
                suffix=".tmp",
            )
            temp_path = Path(temp_name)
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(document, handle, indent=2)
                handle.write("\n")
            os.replace(temp_path, self._path)
        except OSError as exc:
            if temp_path is not None and temp_path.exists():
                temp_path.unlink()
            msg = f"Failed to write {self._path}: {exc}"
            raise RegistryError(msg) from exc
