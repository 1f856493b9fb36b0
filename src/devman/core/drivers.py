"""Per-type scaffolding and container tooling."""

from __future__ import annotations

import logging
import shutil
import stat
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import ClassVar

from devman.config import Settings
from devman.core.command_runner import CommandRunner
from devman.core.git_manager import GitManager
from devman.core.port_allocator import PortAllocator
from devman.core.templates import render_python_project
from devman.errors import ScaffoldError
from devman.models.project import ProjectRecord, ProjectType

logger = logging.getLogger(__name__)

SHELL_NOT_FOUND_CODES = frozenset({126, 127})


@dataclass(slots=True)
class ScaffoldResult:
    """Ports chosen while scaffolding a project."""

    port: int
    extra_ports: dict[str, int] = field(default_factory=dict)


class ProjectDriver(ABC):
    """Capabilities of one project type."""

    project_type: ClassVar[ProjectType]

    def __init__(
        self,
        *,
        runner: CommandRunner,
        git: GitManager,
        allocator: PortAllocator,
        settings: Settings,
    ) -> None:
        self._runner = runner
        self._git = git
        self._allocator = allocator
        self._settings = settings

    @abstractmethod
    def scaffold(
        self, name: str, directory: Path, *, reserved_ports: Iterable[int] = ()
    ) -> ScaffoldResult: ...

    @abstractmethod
    def start(self, record: ProjectRecord) -> None: ...

    @abstractmethod
    def stop(self, record: ProjectRecord) -> None: ...

    @abstractmethod
    def shell(self, record: ProjectRecord) -> int: ...

    @abstractmethod
    def clean(self, record: ProjectRecord) -> None: ...

    def access_notes(self, record: ProjectRecord) -> list[str]:
        del record
        return []


class FrappeDriver(ProjectDriver):
    """Frappe projects cloned from a template and driven by its ``fh`` helper."""

    project_type = ProjectType.FRAPPE

    HELPER = "./fh"
    INSTALLER = "./install.sh"
    EXECUTABLES = ("fh", "install.sh")

    def scaffold(
        self, name: str, directory: Path, *, reserved_ports: Iterable[int] = ()
    ) -> ScaffoldResult:
        port = self._allocator.allocate(self._settings.frappe_base_port, reserved=reserved_ports)

        self._git.clone(self._settings.frappe_template_url, directory)
        shutil.rmtree(directory / ".git", ignore_errors=True)
        self._git.init(directory)
        self._git.commit(directory, "Initial commit")

        for executable in self.EXECUTABLES:
            path = directory / executable
            if not path.is_file():
                msg = f"Frappe template is missing {executable} in {directory}"
                raise ScaffoldError(msg)
            path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)

        self._runner.run(
            [self.INSTALLER],
            cwd=directory,
            input_text=installer_answers(name, port),
        )
        return ScaffoldResult(port=port)

    def start(self, record: ProjectRecord) -> None:
        self._runner.run([self.HELPER, "up"], cwd=record.directory)
        self._runner.spawn([self.HELPER, "start"], cwd=record.directory)

    def stop(self, record: ProjectRecord) -> None:
        self._runner.run([self.HELPER, "down"], cwd=record.directory)

    def shell(self, record: ProjectRecord) -> int:
        return self._runner.run_interactive([self.HELPER, "shell"], cwd=record.directory)

    def clean(self, record: ProjectRecord) -> None:
        self._runner.run([self.HELPER, "clean"], cwd=record.directory, capture=True)

    def access_notes(self, record: ProjectRecord) -> list[str]:
        del record
        return ["Default login: Administrator / admin"]


def installer_answers(name: str, port: int) -> str:
    """Answers for the template's interactive ``install.sh``, one per prompt."""
    return "\n".join((name, "1", str(port), "y")) + "\n"


class PythonDriver(ProjectDriver):
    """FastAPI + PostgreSQL projects managed with docker compose."""

    project_type = ProjectType.PYTHON

    COMPOSE = ("docker", "compose")
    SHELLS = ("/bin/bash", "/bin/sh")

    def scaffold(
        self, name: str, directory: Path, *, reserved_ports: Iterable[int] = ()
    ) -> ScaffoldResult:
        reserved = set(reserved_ports)
        python_port = self._allocator.allocate(self._settings.python_base_port, reserved=reserved)
        reserved.add(python_port)
        postgres_port = self._allocator.allocate(
            self._settings.postgres_base_port, reserved=reserved
        )

        files = render_python_project(name, python_port=python_port, postgres_port=postgres_port)
        try:
            directory.mkdir(parents=True)
            for relative, content in files.items():
                (directory / relative).write_text(content, encoding="utf-8")
        except OSError as exc:
            msg = f"Failed to write project files in {directory}: {exc}"
            raise ScaffoldError(msg) from exc

        self._git.init(directory)
        self._git.commit(directory, "Initial Python project setup")
        return ScaffoldResult(port=python_port, extra_ports={"postgres": postgres_port})

    def start(self, record: ProjectRecord) -> None:
        self._runner.run([*self.COMPOSE, "up", "-d", "--build"], cwd=record.directory)

    def stop(self, record: ProjectRecord) -> None:
        self._runner.run([*self.COMPOSE, "down"], cwd=record.directory)

    def shell(self, record: ProjectRecord) -> int:
        container = app_container_name(record.name)
        returncode = 0
        for shell in self.SHELLS:
            returncode = self._runner.run_interactive(["docker", "exec", "-it", container, shell])
            if returncode not in SHELL_NOT_FOUND_CODES:
                return returncode
            logger.debug("%s not available in %s", shell, container)
        return returncode

    def clean(self, record: ProjectRecord) -> None:
        self._runner.run([*self.COMPOSE, "down", "-v"], cwd=record.directory, capture=True)


def app_container_name(project_name: str) -> str:
    return f"{project_name}_python"


DRIVER_TYPES: Mapping[ProjectType, type[ProjectDriver]] = {
    ProjectType.FRAPPE: FrappeDriver,
    ProjectType.PYTHON: PythonDriver,
}


def build_drivers(
    *,
    runner: CommandRunner,
    git: GitManager,
    allocator: PortAllocator,
    settings: Settings,
) -> dict[ProjectType, ProjectDriver]:
    return {
        project_type: driver_type(runner=runner, git=git, allocator=allocator, settings=settings)
        for project_type, driver_type in DRIVER_TYPES.items()
    }
