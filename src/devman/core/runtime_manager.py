"""Container lifecycle for registered projects."""

from __future__ import annotations

import logging
import shutil
from collections.abc import Callable, Mapping

from devman.core.drivers import ProjectDriver
from devman.db.registry import ProjectRepository
from devman.errors import CommandError, DevmanError, ProjectNotFoundError
from devman.models.project import ProjectRecord, ProjectStatus, ProjectType, require_project_name

logger = logging.getLogger(__name__)

type ConfirmRemoval = Callable[[ProjectRecord], bool]


class RuntimeManager:
    """Start, stop, shell into and remove registered projects.

    The stored status is the last state commanded through this manager; it is
    written after the external command exits successfully and is never
    reconciled with the container engine.
    """

    def __init__(
        self,
        registry: ProjectRepository,
        drivers: Mapping[ProjectType, ProjectDriver],
    ) -> None:
        self._registry = registry
        self._drivers = drivers

    def start(self, name: str | None) -> ProjectRecord:
        record = self._require(name)
        self.driver_for(record).start(record)
        return self._registry.update_status(record.name, ProjectStatus.RUNNING)

    def stop(self, name: str | None) -> ProjectRecord:
        record = self._require(name)
        self.driver_for(record).stop(record)
        return self._registry.update_status(record.name, ProjectStatus.STOPPED)

    def restart(self, name: str | None) -> ProjectRecord:
        self.stop(name)
        return self.start(name)

    def shell(self, name: str | None) -> int:
        record = self._require(name)
        return self.driver_for(record).shell(record)

    def remove(self, name: str | None, confirm: ConfirmRemoval) -> bool:
        """Delete the project's containers, directory and registry entry.

        Returns ``False`` without side effects when ``confirm`` declines.
        """
        record = self._require(name)
        if not confirm(record):
            return False

        if record.directory.is_dir():
            try:
                self.driver_for(record).clean(record)
            except CommandError as exc:
                logger.warning("Ignoring cleanup failure for %s: %s", record.name, exc)
            try:
                shutil.rmtree(record.directory)
            except OSError as exc:
                msg = f"Failed to delete {record.directory}: {exc}"
                raise DevmanError(msg) from exc

        self._registry.remove(record.name)
        return True

    def driver_for(self, record: ProjectRecord) -> ProjectDriver:
        return self._drivers[record.type]

    def _require(self, name: str | None) -> ProjectRecord:
        project_name = require_project_name(name)
        record = self._registry.get(project_name)
        if record is None:
            raise ProjectNotFoundError(project_name)
        return record
