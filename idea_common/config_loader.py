from __future__ import annotations

import json
import tomllib
from dataclasses import dataclass, field
from json import JSONDecodeError
from pathlib import Path
from typing import Any

import yaml

from idea_common.exec.command import CommandLine
from idea_common.exec.compose import OPERATORS
from idea_common.exec.options import emitter_for
from idea_common.util import expand_path

_TOP_LEVEL_KEYS = {"version", "description", "compose", "platform"}
_COMMAND_KEYS = {"exe", "arguments", "parameters", "options", "environment", "cwd", "input"}


@dataclass(frozen=True)
class CommandSpec:
    exe: str
    arguments: list[Any] = field(default_factory=list)
    parameters: list[Any] = field(default_factory=list)
    options: dict[str, Any] = field(default_factory=dict)
    environment: dict[str, Any] = field(default_factory=dict)
    cwd: Path | None = None
    input: str | None = None

    def build(self, *, platform: str | None = None) -> CommandLine:
        cmd = CommandLine(
            self.exe,
            *self.parameters,
            arguments=self.arguments,
            options=self.options,
            platform=platform,
        )
        cmd.with_environment(self.environment)
        if self.cwd is not None:
            cmd.with_working_directory(self.cwd)
        if self.input is not None:
            cmd.with_input(self.input)
        return cmd


@dataclass(frozen=True)
class LoadedConfig:
    path: Path
    version: int | None
    description: str | None
    compose: str | None
    platform: str | None
    commands: list[CommandSpec]

    def build(self, *, platform: str | None = None) -> CommandLine:
        """
        Build the configured command.

        Several commands are combined with the `compose` operator; they must
        not take input, because only the composed shell would receive it.
        """
        platform = platform or self.platform
        built = [spec.build(platform=platform) for spec in self.commands]
        if len(built) == 1:
            return built[0]
        if self.compose is None:
            raise ValueError(
                f"{self.path}: {len(built)} commands defined; set 'compose' to one of: "
                + ", ".join(sorted(OPERATORS))
            )
        with_input = [i for i, cmd in enumerate(built, start=1) if cmd.has_input]
        if with_input:
            for cmd in built:
                cmd.clear_input()
            raise ValueError(
                f"{self.path}: 'input' is not supported with 'compose' (commands: "
                + ", ".join(str(i) for i in with_input)
                + ")"
            )
        return OPERATORS[self.compose](built, platform=platform)


def _require_int(value: Any, *, what: str) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValueError(f"'{what}' must be an integer if present")
    return value


def _require_str(value: Any, *, what: str) -> str:
    if not isinstance(value, str) or not value:
        raise ValueError(f"'{what}' must be a non-empty string")
    return value


def _optional_str(value: Any, *, what: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"'{what}' must be a string if present")
    return value


def _as_list(value: Any, *, what: str) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    raise ValueError(f"'{what}' must be an array")


def _as_table(value: Any, *, what: str) -> dict[str, Any]:
    if value is None:
        return {}
    if isinstance(value, dict):
        return value
    raise ValueError(f"'{what}' must be a table")


def _parse_command(raw: Any, *, index: int) -> CommandSpec:
    if not isinstance(raw, dict):
        raise ValueError(f"Command {index} must be an object")
    unknown = set(raw.keys()) - _COMMAND_KEYS
    if unknown:
        raise ValueError(f"Command {index} has unknown keys: {', '.join(sorted(unknown))}")
    cwd = _optional_str(raw.get("cwd"), what=f"command {index} cwd")
    return CommandSpec(
        exe=_require_str(raw.get("exe"), what=f"command {index} exe"),
        arguments=_as_list(raw.get("arguments"), what=f"command {index} arguments"),
        parameters=_as_list(raw.get("parameters"), what=f"command {index} parameters"),
        options=_as_table(raw.get("options"), what=f"command {index} options"),
        environment=_as_table(raw.get("environment"), what=f"command {index} environment"),
        cwd=expand_path(cwd) if cwd else None,
        input=_optional_str(raw.get("input"), what=f"command {index} input"),
    )


def _normalize_top_level(
    obj: Any,
) -> tuple[int | None, str | None, str | None, str | None, list[Any]]:
    if isinstance(obj, list):
        return None, None, None, None, obj
    if not isinstance(obj, dict):
        raise ValueError("Config must be a list of command objects or {version, commands:[...]}.")

    version = obj.get("version")
    if version is not None:
        _require_int(version, what="version")
    description = _optional_str(obj.get("description"), what="description")

    compose = _optional_str(obj.get("compose"), what="compose")
    if compose is not None and compose not in OPERATORS:
        raise ValueError(f"'compose' must be one of: {', '.join(sorted(OPERATORS))}")

    platform = _optional_str(obj.get("platform"), what="platform")
    if platform is not None:
        emitter_for(platform)  # raises for unknown platforms

    # JSON/YAML use "commands", TOML reads better as [[command]].
    cmds = obj.get("commands")
    key = "commands"
    if cmds is None:
        cmds = obj.get("command")
        key = "command"
    if isinstance(cmds, dict):
        cmds = [cmds]
    if not isinstance(cmds, list) or not cmds:
        raise ValueError("Config must define a non-empty 'commands' list (or [[command]] tables).")

    extra_keys = set(obj.keys()) - _TOP_LEVEL_KEYS - {key}
    if extra_keys:
        extra = ", ".join(sorted(extra_keys))
        raise ValueError(f"Unknown top-level keys: {extra}")
    return version, description, compose, platform, cmds


def _load_json(text: str, path: Path) -> Any:
    try:
        return json.loads(text)
    except JSONDecodeError as e:
        raise ValueError(
            f"Invalid JSON in {path} at line {e.lineno}, column {e.colno}: {e.msg}"
        ) from e


def _load_toml(text: str, path: Path) -> Any:
    try:
        return tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        raise ValueError(f"Invalid TOML in {path}: {e}") from e


def _load_yaml(text: str, path: Path) -> Any:
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as e:
        mark = getattr(e, "problem_mark", None)
        if mark is not None and hasattr(mark, "line") and hasattr(mark, "column"):
            line = int(mark.line) + 1
            col = int(mark.column) + 1
            raise ValueError(f"Invalid YAML in {path} at line {line}, column {col}: {e}") from e
        raise ValueError(f"Invalid YAML in {path}: {e}") from e


def load_config_file(path: Path) -> LoadedConfig:
    text = path.read_text(encoding="utf-8")
    suffix = path.suffix.lower()
    if suffix == ".json":
        raw = _load_json(text, path)
    elif suffix == ".toml":
        raw = _load_toml(text, path)
    elif suffix in (".yaml", ".yml"):
        raw = _load_yaml(text, path)
    else:
        raise ValueError(
            f"Unsupported config format for {path} (expected .json, .toml, .yaml, .yml)."
        )
    try:
        version, description, compose, platform, cmds = _normalize_top_level(raw)
        commands = [_parse_command(item, index=i) for i, item in enumerate(cmds, start=1)]
    except ValueError as e:
        raise ValueError(f"{path}: {e}") from e
    return LoadedConfig(
        path=path,
        version=version,
        description=description,
        compose=compose,
        platform=platform,
        commands=commands,
    )
