"""Exception hierarchy for devman operations."""

from __future__ import annotations

from collections.abc import Sequence


class DevmanError(Exception):
    """Base class for errors reported to the operator."""


class InvalidProjectNameError(DevmanError, ValueError):
    """Project name is empty or not usable as a directory/container name."""


class UnsupportedProjectTypeError(DevmanError, ValueError):
    """Requested project type is not one of the supported kinds."""


class ProjectNotFoundError(DevmanError, LookupError):
    """No registry entry exists for the requested project."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Project {name} not found")
        self.name = name


class ProjectExistsError(DevmanError):
    """A project with the same name or target directory already exists."""


class RegistryError(DevmanError):
    """The registry document cannot be read or written."""


class PortAllocationError(DevmanError):
    """No free port could be determined."""


class CommandError(DevmanError, RuntimeError):
    """An external command exited with a non-zero status."""

    def __init__(self, command: Sequence[str], returncode: int, output: str = "") -> None:
        self.command = tuple(command)
        self.returncode = returncode
        self.output = output
        msg = f"{' '.join(self.command)} failed with exit code {returncode}"
        if output:
            msg = f"{msg}: {output}"
        super().__init__(msg)


class ScaffoldError(DevmanError):
    """Project files could not be generated."""
