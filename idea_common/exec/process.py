from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path
from typing import IO, Mapping, Protocol, Sequence

from idea_common.exec.quoting import join

logger = logging.getLogger(__name__)


class ProcessHandle(Protocol):
    """The parts of subprocess.Popen that callers rely on."""

    pid: int
    returncode: int | None
    stdin: IO[bytes] | None
    stdout: IO[bytes] | None
    stderr: IO[bytes] | None

    def wait(self, timeout: float | None = None) -> int: ...

    def communicate(
        self, input: bytes | None = None, timeout: float | None = None
    ) -> tuple[bytes, bytes]: ...

    def kill(self) -> None: ...


class ProcessLauncher(Protocol):
    """
    Starts an external process from a finalized argument vector.

    A launcher must be able to open stdin as a pipe before the process is
    started, and must never log or echo the bytes written to it.
    """

    def launch(
        self,
        argv: Sequence[str],
        *,
        env: Mapping[str, str],
        cwd: Path | None,
        stdin_pipe: bool,
    ) -> ProcessHandle: ...


class SpawnError(OSError):
    """The process could not be started (not found, permission denied, ...)."""


def as_spawn_error(exc: OSError, exe: str) -> SpawnError:
    if isinstance(exc, SpawnError):
        return exc
    msg = f"Failed to start {exe}: {exc.strerror or exc}"
    if exc.errno is None:
        return SpawnError(msg)
    return SpawnError(exc.errno, msg)


class StdinWriteError(OSError):
    """
    Input could not be written to a started process.

    The process itself was created and is available as `process`, e.g. to
    read partial output or its exit code.
    """

    def __init__(self, process: ProcessHandle, cause: OSError) -> None:
        msg = f"Failed to write process input: {cause.strerror or cause}"
        if cause.errno is None:
            super().__init__(msg)
        else:
            super().__init__(cause.errno, msg)
        self.process = process


class SubprocessLauncher:
    def launch(
        self,
        argv: Sequence[str],
        *,
        env: Mapping[str, str],
        cwd: Path | None,
        stdin_pipe: bool,
    ) -> ProcessHandle:
        argv = list(argv)
        logger.debug("RUN %s", join(argv))

        merged_env = None
        if env:
            merged_env = dict(os.environ)
            merged_env.update(dict(env))

        try:
            return subprocess.Popen(
                argv,
                stdin=subprocess.PIPE if stdin_pipe else subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                cwd=str(cwd) if cwd is not None else None,
                env=merged_env,
            )
        except OSError as e:
            raise as_spawn_error(e, argv[0]) from e
