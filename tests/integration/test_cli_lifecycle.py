from __future__ import annotations

import json
from pathlib import Path

import pytest

from devman import cli
from tests.support.fakes import FakeRunner, fixed_allocator


@pytest.fixture
def runner(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> FakeRunner:
    fake = FakeRunner()
    allocator = fixed_allocator()
    monkeypatch.setenv("DEVMAN_REGISTRY_PATH", str(tmp_path / "registry.json"))
    monkeypatch.setenv("DEVMAN_PROJECTS_DIR", str(tmp_path / "Development"))
    monkeypatch.setattr("devman.deps.get_command_runner", lambda: fake)
    monkeypatch.setattr("devman.deps.get_port_allocator", lambda: allocator)
    return fake


def _status(tmp_path: Path, name: str) -> str | None:
    document = json.loads((tmp_path / "registry.json").read_text(encoding="utf-8"))
    entry = document.get(name)
    return None if entry is None else entry["status"]


def test_python_project_lifecycle(
    monkeypatch: pytest.MonkeyPatch,
    runner: FakeRunner,
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    project_dir = tmp_path / "Development" / "python" / "demo1"

    assert cli.main(["create", "demo1", "python"]) == 0
    assert (project_dir / "docker-compose.yml").is_file()
    assert "POSTGRES_PORT=5432" in (project_dir / ".env").read_text(encoding="utf-8")
    document = json.loads((tmp_path / "registry.json").read_text(encoding="utf-8"))
    assert document == {
        "demo1": {
            "type": "python",
            "directory": str(project_dir),
            "port": 8000,
            "status": "created",
        }
    }

    assert cli.main(["start", "demo1"]) == 0
    assert _status(tmp_path, "demo1") == "running"
    assert "Access at: http://localhost:8000" in capsys.readouterr().out

    assert cli.main(["stop", "demo1"]) == 0
    assert _status(tmp_path, "demo1") == "stopped"

    assert cli.main(["restart", "demo1"]) == 0
    assert _status(tmp_path, "demo1") == "running"

    monkeypatch.setattr("devman.cli.Confirm.ask", lambda *args, **kwargs: True)
    assert cli.main(["remove", "demo1"]) == 0
    assert _status(tmp_path, "demo1") is None
    assert not project_dir.exists()

    compose = [command for command in runner.commands("run") if command[:2] == ("docker", "compose")]
    assert compose == [
        ("docker", "compose", "up", "-d", "--build"),
        ("docker", "compose", "down"),
        ("docker", "compose", "down"),
        ("docker", "compose", "up", "-d", "--build"),
        ("docker", "compose", "down", "-v"),
    ]


def test_second_project_gets_next_port(runner: FakeRunner, tmp_path: Path) -> None:
    assert cli.main(["create", "first", "python"]) == 0
    assert cli.main(["create", "second", "python"]) == 0

    document = json.loads((tmp_path / "registry.json").read_text(encoding="utf-8"))
    assert document["first"]["port"] == 8000
    assert document["second"]["port"] == 8001


def test_commands_after_remove_report_not_found(
    runner: FakeRunner, capsys: pytest.CaptureFixture[str]
) -> None:
    assert cli.main(["create", "gone", "python"]) == 0
    assert cli.main(["remove", "gone", "--yes"]) == 0
    capsys.readouterr()

    for command in ("start", "stop", "restart", "shell"):
        assert cli.main([command, "gone"]) == 1
        assert "Project gone not found" in capsys.readouterr().err
