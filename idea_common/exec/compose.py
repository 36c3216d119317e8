"""
Combine commands into a single shell invocation.

The operator semantics (short-circuiting, exit status) belong to the shell
that runs the composed command; here they are only string concatenation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from idea_common.exec.command import CommandLine
from idea_common.exec.options import POSIX, WINDOWS, host_platform


@dataclass(frozen=True)
class Shell:
    argv: tuple[str, ...]
    and_op: str
    or_op: str
    sequence_op: str


SHELLS: dict[str, Shell] = {
    POSIX: Shell(argv=("sh", "-c"), and_op=" && ", or_op=" || ", sequence_op="; "),
    WINDOWS: Shell(argv=("cmd", "/c"), and_op=" && ", or_op=" || ", sequence_op=" & "),
}


def _shell(platform: str | None) -> Shell:
    key = platform or host_platform()
    shell = SHELLS.get(key)
    if shell is None:
        raise ValueError(f"No shell known for platform: {key}")
    return shell


def compose(commands: Sequence[CommandLine], operator: str, *, platform: str | None = None) -> CommandLine:
    commands = list(commands)
    if not commands:
        raise ValueError("At least one command is required")
    shell = _shell(platform)
    script = operator.join(cmd.command_line_string for cmd in commands)
    return CommandLine(shell.argv[0], *shell.argv[1:], script, platform=platform)


def and_(commands: Sequence[CommandLine], *, platform: str | None = None) -> CommandLine:
    """Run commands until one fails."""
    return compose(commands, _shell(platform).and_op, platform=platform)


def or_(commands: Sequence[CommandLine], *, platform: str | None = None) -> CommandLine:
    """Run commands until one succeeds."""
    return compose(commands, _shell(platform).or_op, platform=platform)


def sequence(commands: Sequence[CommandLine], *, platform: str | None = None) -> CommandLine:
    """Run all commands regardless of exit status."""
    return compose(commands, _shell(platform).sequence_op, platform=platform)


OPERATORS = {
    "and": and_,
    "or": or_,
    "sequence": sequence,
}
