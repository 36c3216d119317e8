"""
Command line utilities.

Callers should only need the names exported here.
"""

from __future__ import annotations

from idea_common.exec.command import NULL_EXE, CommandLine
from idea_common.exec.compose import and_, or_, sequence
from idea_common.exec.options import (
    POSIX,
    WINDOWS,
    OptionEmitter,
    OptionError,
    PosixOptionEmitter,
    WindowsOptionEmitter,
    emitter_for,
    expand_options,
    host_platform,
    register_emitter,
)
from idea_common.exec.process import (
    ProcessHandle,
    ProcessLauncher,
    SpawnError,
    StdinWriteError,
    SubprocessLauncher,
)
from idea_common.exec.quoting import ParseError, join, split

__all__ = [
    "NULL_EXE",
    "CommandLine",
    "and_",
    "or_",
    "sequence",
    "POSIX",
    "WINDOWS",
    "OptionEmitter",
    "OptionError",
    "PosixOptionEmitter",
    "WindowsOptionEmitter",
    "emitter_for",
    "expand_options",
    "host_platform",
    "register_emitter",
    "ProcessHandle",
    "ProcessLauncher",
    "SpawnError",
    "StdinWriteError",
    "SubprocessLauncher",
    "ParseError",
    "join",
    "split",
]
