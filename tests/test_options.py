"""Tests for POSIX and Windows option emitters."""

from __future__ import annotations

import pytest

from idea_common.exec.options import (
    POSIX,
    WINDOWS,
    OptionError,
    PosixOptionEmitter,
    WindowsOptionEmitter,
    emitter_for,
    expand_options,
    host_platform,
    register_emitter,
    registered_platforms,
)

pytestmark = pytest.mark.unit


class TestPosixOptionEmitter:
    emitter = PosixOptionEmitter()

    @pytest.mark.parametrize(
        ("name", "value", "expected"),
        [
            ("on", True, ["--on"]),
            ("off", False, []),
            ("null", None, []),
            ("blank", "", ["--blank", ""]),
            ("value", 1, ["--value", "1"]),
            ("zero", 0, ["--zero", "0"]),
            ("s", "short", ["-s", "short"]),
            ("v", True, ["-v"]),
        ],
    )
    def test_emit(self, name: str, value: object, expected: list[str]) -> None:
        assert self.emitter.emit(name, value) == expected


class TestWindowsOptionEmitter:
    emitter = WindowsOptionEmitter()

    @pytest.mark.parametrize(
        ("name", "value", "expected"),
        [
            ("on", True, ["/on"]),
            ("off", False, []),
            ("null", None, []),
            ("blank", "", ["/blank:"]),
            ("value", 1, ["/value:1"]),
            ("s", "short", ["/s:short"]),
        ],
    )
    def test_emit(self, name: str, value: object, expected: list[str]) -> None:
        assert self.emitter.emit(name, value) == expected


class TestExpandOptions:
    def test_preserves_mapping_order(self) -> None:
        options = {"z": 1, "a": 2, "m": True}
        assert expand_options(PosixOptionEmitter(), options) == ["-z", "1", "-a", "2", "-m"]

    def test_sequence_repeats_option(self) -> None:
        options = {"list": ["a", "b"], "tuple": ("c",), "gen": (x for x in "de")}
        assert expand_options(PosixOptionEmitter(), options) == [
            "--list", "a", "--list", "b",
            "--tuple", "c",
            "--gen", "d", "--gen", "e",
        ]

    def test_sequence_of_switches(self) -> None:
        assert expand_options(PosixOptionEmitter(), {"v": [True, False, True]}) == ["-v", "-v"]

    def test_windows_sequence(self) -> None:
        assert expand_options(WindowsOptionEmitter(), {"list": ["a", "b"]}) == ["/list:a", "/list:b"]

    def test_strings_are_scalars(self) -> None:
        assert expand_options(PosixOptionEmitter(), {"name": "ab"}) == ["--name", "ab"]

    @pytest.mark.parametrize("options", [None, {}])
    def test_empty(self, options: dict | None) -> None:
        assert expand_options(PosixOptionEmitter(), options) == []

    def test_nested_sequence_rejected(self) -> None:
        with pytest.raises(OptionError, match="nested sequence"):
            expand_options(PosixOptionEmitter(), {"list": [["a"], "b"]})

    def test_mapping_value_rejected(self) -> None:
        with pytest.raises(OptionError, match="mapping"):
            expand_options(PosixOptionEmitter(), {"opt": {"a": 1}})

    def test_option_error_is_type_error(self) -> None:
        assert issubclass(OptionError, TypeError)


class TestRegistry:
    def test_builtin_platforms(self) -> None:
        assert registered_platforms() == [POSIX, WINDOWS]
        assert isinstance(emitter_for(POSIX), PosixOptionEmitter)
        assert isinstance(emitter_for(WINDOWS), WindowsOptionEmitter)

    def test_default_is_host_platform(self) -> None:
        assert emitter_for(None) is emitter_for(host_platform())

    def test_unknown_platform(self) -> None:
        with pytest.raises(ValueError, match="Unknown platform: vms"):
            emitter_for("vms")

    def test_duplicate_registration(self) -> None:
        with pytest.raises(ValueError, match="Duplicate"):
            register_emitter(POSIX, PosixOptionEmitter())

    def test_register_custom(self, monkeypatch: pytest.MonkeyPatch) -> None:
        from idea_common.exec import options as options_mod

        monkeypatch.setattr(options_mod, "_EMITTERS", dict(options_mod._EMITTERS))

        class PlusEmitter:
            def emit(self, name: str, value: object) -> list[str]:
                return [] if value in (None, False) else [f"+{name}"]

        register_emitter("plus", PlusEmitter())
        assert expand_options(emitter_for("plus"), {"x": True}) == ["+x"]
