"""In-memory stand-ins for the process launcher."""

from __future__ import annotations

from pathlib import Path
from typing import Mapping, Sequence


class FakeStdin:
    def __init__(self, *, fail_write: OSError | None = None, fail_close: OSError | None = None) -> None:
        self.fail_write = fail_write
        self.fail_close = fail_close
        self.received: bytearray | None = None
        self.written = b""
        self.closed = False

    def write(self, data: bytearray) -> int:
        self.received = data
        if self.fail_write is not None:
            raise self.fail_write
        self.written += bytes(data)
        return len(data)

    def flush(self) -> None:
        if self.closed:
            raise ValueError("flush of closed file")

    def close(self) -> None:
        self.closed = True
        if self.fail_close is not None:
            raise self.fail_close


class FakeProcess:
    def __init__(self, *, stdin: FakeStdin | None, returncode: int = 0) -> None:
        self.pid = 4242
        self.returncode: int | None = None
        self.stdin = stdin
        self.stdout = None
        self.stderr = None
        self.killed = False
        self.waited = False
        self._exit = returncode

    def wait(self, timeout: float | None = None) -> int:
        self.waited = True
        self.returncode = self._exit
        return self._exit

    def communicate(self, input: bytes | None = None, timeout: float | None = None) -> tuple[bytes, bytes]:
        # Popen.communicate() flushes an attached stdin before reading.
        if self.stdin is not None:
            self.stdin.flush()
        self.returncode = self._exit
        return b"", b""

    def kill(self) -> None:
        self.killed = True
        self._exit = -9


class FakeLauncher:
    """Records launch() calls and hands out FakeProcess objects."""

    def __init__(
        self,
        *,
        spawn_error: OSError | None = None,
        stdin_write_error: OSError | None = None,
        stdin_close_error: OSError | None = None,
        without_stdin: bool = False,
        returncode: int = 0,
    ) -> None:
        self.spawn_error = spawn_error
        self.stdin_write_error = stdin_write_error
        self.stdin_close_error = stdin_close_error
        self.without_stdin = without_stdin
        self.returncode = returncode
        self.calls: list[dict] = []
        self.processes: list[FakeProcess] = []
        self.stdins: list[FakeStdin] = []

    def launch(
        self,
        argv: Sequence[str],
        *,
        env: Mapping[str, str],
        cwd: Path | None,
        stdin_pipe: bool,
    ) -> FakeProcess:
        self.calls.append({"argv": list(argv), "env": dict(env), "cwd": cwd, "stdin_pipe": stdin_pipe})
        if self.spawn_error is not None:
            raise self.spawn_error
        stdin = None
        if stdin_pipe and not self.without_stdin:
            stdin = FakeStdin(fail_write=self.stdin_write_error, fail_close=self.stdin_close_error)
            self.stdins.append(stdin)
        process = FakeProcess(stdin=stdin, returncode=self.returncode)
        self.processes.append(process)
        return process
