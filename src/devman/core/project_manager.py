"""Project creation and lookup."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from devman.core.drivers import ProjectDriver
from devman.db.registry import ProjectRepository
from devman.errors import ProjectExistsError
from devman.models.project import ProjectRecord, ProjectStatus, ProjectType, validate_project_name

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CreateProjectInput:
    """Input payload for project creation."""

    name: str
    project_type: ProjectType


@dataclass(slots=True)
class CreatedProject:
    """Registered record plus ports that are not persisted."""

    record: ProjectRecord
    extra_ports: dict[str, int] = field(default_factory=dict)


class ProjectManager:
    """Scaffold new projects and read the registry."""

    def __init__(
        self,
        registry: ProjectRepository,
        drivers: Mapping[ProjectType, ProjectDriver],
        projects_dir: Path,
    ) -> None:
        self._registry = registry
        self._drivers = drivers
        self._projects_dir = projects_dir

    def project_dir(self, name: str, project_type: ProjectType) -> Path:
        return (self._projects_dir / project_type.value / name).absolute()

    def create(self, payload: CreateProjectInput) -> CreatedProject:
        name = validate_project_name(payload.name)
        directory = self.project_dir(name, payload.project_type)

        if directory.exists():
            msg = f"Project {name} already exists at {directory}"
            raise ProjectExistsError(msg)
        registry = self._registry.load()
        if name in registry:
            msg = f"Project {name} is already registered at {registry[name].directory}"
            raise ProjectExistsError(msg)

        logger.info("Creating %s project %s in %s", payload.project_type.value, name, directory)
        driver = self._drivers[payload.project_type]
        result = driver.scaffold(
            name,
            directory,
            reserved_ports={record.port for record in registry.values()},
        )

        record = ProjectRecord(
            name=name,
            type=payload.project_type,
            directory=directory,
            port=result.port,
            status=ProjectStatus.CREATED,
        )
        self._registry.upsert(record)
        return CreatedProject(record=record, extra_ports=dict(result.extra_ports))

    def list(self) -> list[ProjectRecord]:
        return self._registry.list()

    def get(self, name: str) -> ProjectRecord | None:
        return self._registry.get(name)
