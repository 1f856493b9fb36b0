"""Project domain models."""

from __future__ import annotations

import re
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from devman.errors import InvalidProjectNameError, UnsupportedProjectTypeError

PROJECT_NAME_PATTERN = r"^[A-Za-z0-9][A-Za-z0-9_.-]*$"
_PROJECT_NAME_RE = re.compile(PROJECT_NAME_PATTERN)


class ProjectType(str, Enum):
    """Supported project kinds."""

    FRAPPE = "frappe"
    PYTHON = "python"

    @classmethod
    def parse(cls, value: str) -> ProjectType:
        try:
            return cls(value.strip().lower())
        except ValueError:
            supported = ", ".join(member.value for member in cls)
            msg = f"Unsupported project type: {value!r}. Supported types: {supported}"
            raise UnsupportedProjectTypeError(msg) from None


class ProjectStatus(str, Enum):
    """Last lifecycle command issued for a project.

    This is not verified against the container engine: a project marked
    ``running`` may have exited since.
    """

    CREATED = "created"
    RUNNING = "running"
    STOPPED = "stopped"


class ProjectRecord(BaseModel):
    """Registered project metadata."""

    name: str = Field(min_length=1)
    type: ProjectType
    directory: Path
    port: int = Field(ge=1, le=65535)
    status: ProjectStatus = ProjectStatus.CREATED

    def to_document(self) -> dict[str, Any]:
        """Return the registry representation (the name is the document key)."""
        return {
            "type": self.type.value,
            "directory": str(self.directory),
            "port": self.port,
            "status": self.status.value,
        }

    @classmethod
    def from_document(cls, name: str, payload: dict[str, Any]) -> ProjectRecord:
        fields = {key: value for key, value in payload.items() if key != "name"}
        return cls(name=name, **fields)


def require_project_name(name: str | None) -> str:
    """Return ``name`` unless it is missing or blank."""
    if name is None or not name.strip():
        msg = "Project name is required"
        raise InvalidProjectNameError(msg)
    return name


def validate_project_name(name: str | None) -> str:
    """Return ``name`` if it is usable for a new project.

    Only applied on creation; registered names are accepted as stored.
    """
    name = require_project_name(name)
    if not _PROJECT_NAME_RE.match(name):
        msg = (
            f"Invalid project name: {name!r}. Use letters, digits, '.', '_' or '-', "
            "starting with a letter or digit"
        )
        raise InvalidProjectNameError(msg)
    return name
