from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Protocol

POSIX = "posix"
WINDOWS = "windows"


class OptionError(TypeError):
    """Raised for option values that cannot be emitted."""


class OptionEmitter(Protocol):
    """
    Turns one named option into zero or more command line parameters.

    An emitter must:
    - ignore None and False (switch is off)
    - emit only a flag for True (switch is on)
    - emit a flag and a value for anything else

    Emitters never see sequence values; those are expanded by
    expand_options() into one emit() call per element.
    """

    def emit(self, name: str, value: Any) -> list[str]: ...


@dataclass(frozen=True)
class PosixOptionEmitter:
    """POSIX long-style options, `--flag [value]`, or `-f [value]`."""

    def emit(self, name: str, value: Any) -> list[str]:
        # The `--flag=value` style is not used because it is not as widely
        # supported, and split() cannot parse it back.
        if value is None or value is False:
            return []
        flag = f"-{name}" if len(name) == 1 else f"--{name}"
        if value is True:
            return [flag]
        return [flag, str(value)]


@dataclass(frozen=True)
class WindowsOptionEmitter:
    """Windows-style options, `/flag[:value]`."""

    def emit(self, name: str, value: Any) -> list[str]:
        if value is None or value is False:
            return []
        if value is True:
            return [f"/{name}"]
        return [f"/{name}:{value}"]


def _is_sequence(value: Any) -> bool:
    if isinstance(value, (str, bytes, bytearray)):
        return False
    return isinstance(value, Iterable)


def _check_scalar(name: str, value: Any) -> None:
    if isinstance(value, Mapping):
        raise OptionError(f"Option {name!r} has a mapping value: {value!r}")
    if _is_sequence(value):
        raise OptionError(f"Option {name!r} has a nested sequence value: {value!r}")


def expand_options(emitter: OptionEmitter, options: Mapping[str, Any] | None) -> list[str]:
    """
    Emit parameters for every option, in mapping order.

    Use a sequence (list, tuple, generator, ...) as a value to repeat that
    option once per element, e.g. `--flag val1 --flag val2`.
    """
    params: list[str] = []
    if not options:
        return params
    for name, value in options.items():
        if isinstance(value, Mapping):
            _check_scalar(name, value)
        if _is_sequence(value):
            for item in value:
                _check_scalar(name, item)
                params.extend(emitter.emit(name, item))
        else:
            params.extend(emitter.emit(name, value))
    return params


_EMITTERS: dict[str, OptionEmitter] = {
    POSIX: PosixOptionEmitter(),
    WINDOWS: WindowsOptionEmitter(),
}


def register_emitter(platform: str, emitter: OptionEmitter) -> None:
    if not isinstance(platform, str) or not platform:
        raise ValueError(f"Invalid platform name: {platform!r}")
    if platform in _EMITTERS:
        raise ValueError(f"Duplicate option emitter for platform {platform}")
    _EMITTERS[platform] = emitter


def registered_platforms() -> list[str]:
    return sorted(_EMITTERS)


def host_platform() -> str:
    return WINDOWS if os.name == "nt" else POSIX


def emitter_for(platform: str | None = None) -> OptionEmitter:
    """Look up the emitter for a platform name; None means the host platform."""
    key = platform or host_platform()
    emitter = _EMITTERS.get(key)
    if emitter is None:
        known = ", ".join(registered_platforms())
        raise ValueError(f"Unknown platform: {key} (known: {known})")
    return emitter
