"""External process execution."""

from __future__ import annotations

import logging
import subprocess
import warnings
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from devman.errors import CommandError

logger = logging.getLogger(__name__)

COMMAND_NOT_FOUND = 127
COMMAND_NOT_EXECUTABLE = 126


@dataclass(slots=True)
class CommandResult:
    """Result from running an external command."""

    command: str
    returncode: int
    output: str = ""


class CommandRunner:
    """Run external commands synchronously.

    ``run`` streams to the terminal unless ``capture`` is set; ``run_interactive``
    hands the terminal to the child; ``spawn`` starts a detached process and
    does not wait for it.
    """

    def run(
        self,
        command: Sequence[str],
        *,
        cwd: Path | None = None,
        input_text: str | None = None,
        capture: bool = False,
        check: bool = True,
    ) -> CommandResult:
        args = list(command)
        logger.debug("Running %s (cwd=%s)", " ".join(args), cwd)
        try:
            completed = subprocess.run(
                args,
                cwd=cwd,
                input=input_text,
                capture_output=capture,
                text=True,
                check=False,
            )
        except OSError as exc:
            raise _launch_error(args, exc) from exc

        output = ""
        if capture:
            output = ((completed.stdout or "") + (completed.stderr or "")).strip()
        if check and completed.returncode != 0:
            raise CommandError(args, completed.returncode, output)
        return CommandResult(command=" ".join(args), returncode=completed.returncode, output=output)

    def run_interactive(self, command: Sequence[str], *, cwd: Path | None = None) -> int:
        args = list(command)
        logger.debug("Running interactive %s (cwd=%s)", " ".join(args), cwd)
        try:
            completed = subprocess.run(args, cwd=cwd, check=False)
        except OSError as exc:
            raise _launch_error(args, exc) from exc
        return completed.returncode

    def spawn(self, command: Sequence[str], *, cwd: Path | None = None) -> int:
        args = list(command)
        logger.debug("Spawning %s in background (cwd=%s)", " ".join(args), cwd)
        try:
            process = subprocess.Popen(
                args,
                cwd=cwd,
                stdin=subprocess.DEVNULL,
                start_new_session=True,
            )
        except OSError as exc:
            raise _launch_error(args, exc) from exc
        # The child outlives this process; drop the handle without waiting.
        pid = process.pid
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", ResourceWarning)
            del process
        return pid


def _launch_error(args: list[str], exc: OSError) -> CommandError:
    """Map a failure to start ``args`` to the shell's exit code convention."""
    returncode = COMMAND_NOT_FOUND if isinstance(exc, FileNotFoundError) else COMMAND_NOT_EXECUTABLE
    return CommandError(args, returncode, str(exc))
