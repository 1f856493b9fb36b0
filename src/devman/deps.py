"""Shared dependency providers for the CLI."""

from __future__ import annotations

from devman.config import Settings
from devman.core.command_runner import CommandRunner
from devman.core.drivers import ProjectDriver, build_drivers
from devman.core.git_manager import GitManager
from devman.core.port_allocator import PortAllocator
from devman.core.project_manager import ProjectManager
from devman.core.runtime_manager import RuntimeManager
from devman.db.registry import JsonFileRegistry
from devman.models.project import ProjectType


def get_settings() -> Settings:
    return Settings()


def get_registry(settings: Settings) -> JsonFileRegistry:
    return JsonFileRegistry(settings.registry_path)


def get_command_runner() -> CommandRunner:
    return CommandRunner()


def get_port_allocator() -> PortAllocator:
    return PortAllocator()


def get_drivers(settings: Settings) -> dict[ProjectType, ProjectDriver]:
    runner = get_command_runner()
    return build_drivers(
        runner=runner,
        git=GitManager(runner),
        allocator=get_port_allocator(),
        settings=settings,
    )


def get_project_manager(settings: Settings) -> ProjectManager:
    return ProjectManager(
        registry=get_registry(settings),
        drivers=get_drivers(settings),
        projects_dir=settings.projects_dir,
    )


def get_runtime_manager(settings: Settings) -> RuntimeManager:
    return RuntimeManager(registry=get_registry(settings), drivers=get_drivers(settings))
