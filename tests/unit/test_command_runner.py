from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from devman.core.command_runner import CommandRunner
from devman.errors import CommandError


def test_run_returns_captured_output(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    seen: dict[str, object] = {}

    def fake_run(args, **kwargs):  # type: ignore[no-untyped-def]
        seen["args"] = args
        seen.update(kwargs)
        return subprocess.CompletedProcess(args=args, returncode=0, stdout="out\n", stderr="err\n")

    monkeypatch.setattr("devman.core.command_runner.subprocess.run", fake_run)

    result = CommandRunner().run(["git", "status"], cwd=tmp_path, capture=True)

    assert result.command == "git status"
    assert result.returncode == 0
    assert result.output == "out\nerr"
    assert seen["args"] == ["git", "status"]
    assert seen["cwd"] == tmp_path
    assert seen["capture_output"] is True


def test_run_passes_input_text(monkeypatch: pytest.MonkeyPatch) -> None:
    seen: dict[str, object] = {}

    def fake_run(args, **kwargs):  # type: ignore[no-untyped-def]
        seen.update(kwargs)
        return subprocess.CompletedProcess(args=args, returncode=0)

    monkeypatch.setattr("devman.core.command_runner.subprocess.run", fake_run)

    CommandRunner().run(["./install.sh"], input_text="demo\ny\n")

    assert seen["input"] == "demo\ny\n"
    assert seen["capture_output"] is False


def test_run_raises_on_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_run(args, **kwargs):  # type: ignore[no-untyped-def]
        del kwargs
        return subprocess.CompletedProcess(args=args, returncode=3, stdout="", stderr="boom")

    monkeypatch.setattr("devman.core.command_runner.subprocess.run", fake_run)

    with pytest.raises(CommandError, match="docker compose down failed with exit code 3: boom") as info:
        CommandRunner().run(["docker", "compose", "down"], capture=True)

    assert info.value.returncode == 3
    assert info.value.command == ("docker", "compose", "down")


def test_run_without_check_returns_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_run(args, **kwargs):  # type: ignore[no-untyped-def]
        del kwargs
        return subprocess.CompletedProcess(args=args, returncode=1)

    monkeypatch.setattr("devman.core.command_runner.subprocess.run", fake_run)

    result = CommandRunner().run(["false"], check=False)
    assert result.returncode == 1


def test_run_missing_binary(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_run(args, **kwargs):  # type: ignore[no-untyped-def]
        del kwargs
        raise FileNotFoundError(2, "No such file or directory", args[0])

    monkeypatch.setattr("devman.core.command_runner.subprocess.run", fake_run)

    with pytest.raises(CommandError) as info:
        CommandRunner().run(["docker", "compose", "up"])
    assert info.value.returncode == 127


@pytest.mark.parametrize(
    "error",
    [PermissionError(13, "Permission denied"), NotADirectoryError(20, "Not a directory")],
)
def test_run_unlaunchable_command(monkeypatch: pytest.MonkeyPatch, error: OSError) -> None:
    def fake_run(args, **kwargs):  # type: ignore[no-untyped-def]
        del args, kwargs
        raise error

    monkeypatch.setattr("devman.core.command_runner.subprocess.run", fake_run)

    with pytest.raises(CommandError) as info:
        CommandRunner().run(["./fh", "clean"])
    assert info.value.returncode == 126
    assert info.value.command == ("./fh", "clean")

    with pytest.raises(CommandError):
        CommandRunner().run_interactive(["./fh", "shell"])


def test_spawn_unlaunchable_command(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    def fake_popen(args, **kwargs):  # type: ignore[no-untyped-def]
        del args, kwargs
        raise PermissionError(13, "Permission denied")

    monkeypatch.setattr("devman.core.command_runner.subprocess.Popen", fake_popen)

    with pytest.raises(CommandError, match="failed with exit code 126"):
        CommandRunner().spawn(["./fh", "start"], cwd=tmp_path)


def test_run_non_executable_script(tmp_path: Path) -> None:
    (tmp_path / "fh").write_text("#!/bin/sh\n", encoding="utf-8")

    with pytest.raises(CommandError) as info:
        CommandRunner().run(["./fh", "clean"], cwd=tmp_path, capture=True)
    assert info.value.returncode == 126


def test_run_interactive_returns_exit_code(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_run(args, **kwargs):  # type: ignore[no-untyped-def]
        assert "capture_output" not in kwargs
        return subprocess.CompletedProcess(args=args, returncode=126)

    monkeypatch.setattr("devman.core.command_runner.subprocess.run", fake_run)

    assert CommandRunner().run_interactive(["docker", "exec", "-it", "x", "/bin/bash"]) == 126


def test_spawn_detaches_process(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    seen: dict[str, object] = {}

    class _Process:
        pid = 999

    def fake_popen(args, **kwargs):  # type: ignore[no-untyped-def]
        seen["args"] = args
        seen.update(kwargs)
        return _Process()

    monkeypatch.setattr("devman.core.command_runner.subprocess.Popen", fake_popen)

    pid = CommandRunner().spawn(["./fh", "start"], cwd=tmp_path)

    assert pid == 999
    assert seen["args"] == ["./fh", "start"]
    assert seen["cwd"] == tmp_path
    assert seen["start_new_session"] is True


def test_spawn_releases_handle_without_resource_warning(
    recwarn: pytest.WarningsRecorder, tmp_path: Path
) -> None:
    pid = CommandRunner().spawn(["sleep", "1"], cwd=tmp_path)

    assert pid > 0
    assert not [warning for warning in recwarn if issubclass(warning.category, ResourceWarning)]
