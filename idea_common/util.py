from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass
from pathlib import Path

from idea_common.exec.command import CommandLine
from idea_common.exec.process import ProcessLauncher, StdinWriteError


def xdg_config_home() -> Path:
    return Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))


def expand_path(s: str) -> Path:
    # Expand ~ and $VARS
    return Path(os.path.expandvars(os.path.expanduser(s)))


@dataclass(frozen=True)
class RunResult:
    args: list[str]
    returncode: int
    stdout: str
    stderr: str


class CommandRunner:
    """Run a CommandLine to completion and collect its output."""

    def __init__(
        self,
        *,
        dry_run: bool = False,
        logger: logging.Logger | None = None,
        launcher: ProcessLauncher | None = None,
    ) -> None:
        self._dry_run = dry_run
        self._logger = logger or logging.getLogger(__name__)
        self._launcher = launcher

    @property
    def dry_run(self) -> bool:
        return self._dry_run

    def run(
        self,
        command: CommandLine,
        *,
        check: bool = False,
        timeout: float | None = None,
    ) -> RunResult:
        try:
            argv = command.argv
        except ValueError:
            command.clear_input()
            raise
        self._logger.debug("RUN %s", command.command_line_string)
        if self._dry_run:
            # The input is never sent, but it must not linger either.
            command.clear_input()
            return RunResult(args=argv, returncode=0, stdout="", stderr="")

        try:
            process = command.create_process(launcher=self._launcher)
        except StdinWriteError as e:
            # The child was started; reap it.
            e.process.kill()
            e.process.wait()
            raise
        try:
            out, err = process.communicate(timeout=timeout)
        except subprocess.TimeoutExpired:
            process.kill()
            process.communicate()
            raise RuntimeError(
                f"Command timed out after {timeout}s: {command.command_line_string}"
            ) from None
        returncode = process.wait()
        stdout = (out or b"").decode("utf-8", errors="replace")
        stderr = (err or b"").decode("utf-8", errors="replace")
        if check and returncode != 0:
            raise RuntimeError(
                f"Command failed ({returncode}): {command.command_line_string}\n{stderr}"
            )
        return RunResult(args=argv, returncode=returncode, stdout=stdout, stderr=stderr)
