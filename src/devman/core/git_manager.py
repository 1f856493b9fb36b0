"""Git operations used while scaffolding projects."""

from __future__ import annotations

from pathlib import Path

from devman.core.command_runner import CommandResult, CommandRunner


class GitManager:
    """Thin wrapper around git CLI."""

    def __init__(self, runner: CommandRunner) -> None:
        self._runner = runner

    def clone(self, remote: str, destination: Path) -> CommandResult:
        return self._runner.run(["git", "clone", remote, str(destination)], capture=True)

    def init(self, project_path: Path) -> CommandResult:
        return self._run_git(project_path, "init")

    def commit(self, project_path: Path, message: str) -> CommandResult:
        self._run_git(project_path, "add", ".")
        return self._run_git(project_path, "commit", "-m", message)

    def _run_git(self, project_path: Path, *args: str) -> CommandResult:
        return self._runner.run(["git", *args], cwd=project_path, capture=True)
