"""
Execute an external process via the command line.

To protect potentially sensitive data, input for the external command can
be passed via an in-memory buffer that is cleared when the command is
executed.
"""

from __future__ import annotations

import os
import threading
from pathlib import Path
from typing import Any, Iterable, Mapping, Sequence

from idea_common.exec.options import OptionEmitter, emitter_for, expand_options
from idea_common.exec.process import (
    ProcessHandle,
    ProcessLauncher,
    SpawnError,
    StdinWriteError,
    SubprocessLauncher,
    as_spawn_error,
)
from idea_common.exec.quoting import join, split

# Rendered in place of an executable that was never set. Arguably a blank
# string would be more intuitive, but existing callers expect this.
NULL_EXE = "<null>"


def _as_parameter(value: Any) -> str:
    param = str(value)
    if "\0" in param:
        raise ValueError(f"Command line parameter contains a NUL character: {param!r}")
    return param


def _as_env_value(value: Any) -> str:
    # Per convention booleans are "1" and "0".
    if value is True:
        return "1"
    if value is False:
        return "0"
    return str(value)


class CommandLine:
    """
    An external command: executable, parameters, environment, and input.

    Parameters are either given raw, `CommandLine("cat", "--on", "one", 2)`,
    or structured as positional `arguments` plus named `options`; options
    are emitted first using the syntax of `platform` ("posix", "windows",
    or None for the host platform).
    """

    def __init__(
        self,
        exe_path: str | os.PathLike[str] | None = None,
        *parameters: Any,
        arguments: Iterable[Any] = (),
        options: Mapping[str, Any] | None = None,
        platform: str | None = None,
    ) -> None:
        self._emitter: OptionEmitter = emitter_for(platform)
        self._platform = platform
        self._exe_path: str | None = None
        self._parameters: list[str] = []
        self._environment: dict[str, str] = {}
        self._cwd: Path | None = None
        self._input: bytearray | None = None
        self._lock = threading.Lock()
        if exe_path is not None:
            self.set_exe_path(exe_path)
        self.add_parameters(*parameters)
        self.add_options(options)
        for arg in arguments:
            self.add_parameter(arg)

    @classmethod
    def posix(cls, exe_path: str | None = None, *parameters: Any, **kwargs: Any) -> CommandLine:
        return cls(exe_path, *parameters, platform="posix", **kwargs)

    @classmethod
    def windows(cls, exe_path: str | None = None, *parameters: Any, **kwargs: Any) -> CommandLine:
        return cls(exe_path, *parameters, platform="windows", **kwargs)

    @classmethod
    def from_string(cls, command: str, *, platform: str | None = None) -> CommandLine:
        """Parse a command line string, e.g. from a text field in a settings dialog."""
        argv = split(command, strict=True)
        if not argv:
            return cls(platform=platform)
        return cls(argv[0], *argv[1:], platform=platform)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.command_line_string!r})"

    @property
    def platform(self) -> str | None:
        return self._platform

    @property
    def exe_path(self) -> str | None:
        return self._exe_path

    def set_exe_path(self, exe_path: str | os.PathLike[str]) -> None:
        self._exe_path = _as_parameter(os.fspath(exe_path))

    def with_exe_path(self, exe_path: str | os.PathLike[str]) -> CommandLine:
        self.set_exe_path(exe_path)
        return self

    @property
    def parameters(self) -> list[str]:
        return list(self._parameters)

    @property
    def argv(self) -> list[str]:
        if self._exe_path is None:
            raise ValueError("Executable path is not set")
        return [self._exe_path, *self._parameters]

    @property
    def command_line_string(self) -> str:
        exe = self._exe_path if self._exe_path is not None else NULL_EXE
        return join([exe, *self._parameters])

    def add_parameter(self, parameter: Any) -> None:
        self._parameters.append(_as_parameter(parameter))

    def add_parameters(self, *parameters: Any) -> None:
        for param in parameters:
            self.add_parameter(param)

    def with_parameters(self, *parameters: Any) -> CommandLine:
        self.add_parameters(*parameters)
        return self

    def add_option(self, name: str, value: Any) -> None:
        self.add_parameters(*expand_options(self._emitter, {name: value}))

    def add_options(self, options: Mapping[str, Any] | None = None) -> None:
        """
        Append options to the command line.

        None and False values are ignored, True is emitted as a switch, and a
        sequence value repeats the option for each of its elements.
        """
        self.add_parameters(*expand_options(self._emitter, options))

    def with_options(self, options: Mapping[str, Any] | None = None) -> CommandLine:
        self.add_options(options)
        return self

    @property
    def environment(self) -> dict[str, str]:
        return dict(self._environment)

    def with_environment(self, environment: Mapping[str, Any]) -> CommandLine:
        """
        Pass environment variables to the external command.

        These are added to the inherited environment. Booleans are converted
        to "1" (True) or "0" (False), and None values are ignored.
        """
        for name, value in environment.items():
            if value is None:
                continue
            self._environment[str(name)] = _as_env_value(value)
        return self

    @property
    def working_directory(self) -> Path | None:
        return self._cwd

    def with_working_directory(self, path: str | os.PathLike[str] | None) -> CommandLine:
        self._cwd = Path(path) if path is not None else None
        return self

    @property
    def has_input(self) -> bool:
        return self._input is not None

    def with_input(self, data: str | bytes | bytearray | memoryview | os.PathLike[str]) -> CommandLine:
        """
        Send input to the external command via STDIN.

        The input buffer is cleared after the command is executed, so this
        must be called prior to each invocation. Text is encoded as UTF-8,
        and a path sends the contents of that file.
        """
        if isinstance(data, str):
            buffer = bytearray(data.encode("utf-8"))
        elif isinstance(data, os.PathLike):
            buffer = bytearray(Path(data).read_bytes())
        else:
            buffer = bytearray(data)
        with self._lock:
            self._clear_buffer(self._input)
            self._input = buffer
        return self

    def clear_input(self) -> None:
        """Discard pending input without executing the command."""
        with self._lock:
            buffer, self._input = self._input, None
        self._clear_buffer(buffer)

    @staticmethod
    def _clear_buffer(buffer: bytearray | None) -> None:
        if buffer is not None:
            buffer[:] = bytes(len(buffer))

    def create_process(self, launcher: ProcessLauncher | None = None) -> ProcessHandle:
        """
        Create and start the external process.

        Pending input is written to the process and the stream is closed.
        The input buffer is zeroed and released whether or not the process
        starts and the write succeeds. A failed write raises StdinWriteError,
        which carries the started process.

        The closed stream is detached from the returned process (its `stdin`
        is None), so `communicate()` does not touch it again.
        """
        with self._lock:
            buffer, self._input = self._input, None
        launcher = launcher or SubprocessLauncher()
        try:
            argv = self.argv
            try:
                process = launcher.launch(
                    argv,
                    env=dict(self._environment),
                    cwd=self._cwd,
                    stdin_pipe=buffer is not None,
                )
            except SpawnError:
                raise
            except OSError as e:
                raise as_spawn_error(e, argv[0]) from e
            if buffer is not None:
                self._write_input(process, buffer)
        finally:
            self._clear_buffer(buffer)
        return process

    @staticmethod
    def _write_input(process: ProcessHandle, buffer: bytearray) -> None:
        stdin = process.stdin
        if stdin is None:
            raise StdinWriteError(process, OSError("process was started without a stdin pipe"))
        process.stdin = None
        error: OSError | None = None
        try:
            stdin.write(buffer)
        except OSError as e:
            error = e
        # Close even after a failed write so the process sees EOF.
        try:
            stdin.close()
        except OSError as e:
            error = error or e
        if error is not None:
            raise StdinWriteError(process, error) from error

    @staticmethod
    def and_(commands: Sequence[CommandLine], *, platform: str | None = None) -> CommandLine:
        from idea_common.exec.compose import and_

        return and_(commands, platform=platform)

    @staticmethod
    def or_(commands: Sequence[CommandLine], *, platform: str | None = None) -> CommandLine:
        from idea_common.exec.compose import or_

        return or_(commands, platform=platform)

    @staticmethod
    def sequence(commands: Sequence[CommandLine], *, platform: str | None = None) -> CommandLine:
        from idea_common.exec.compose import sequence

        return sequence(commands, platform=platform)
