"""Tests for the reader primitives (ask, asks, local) and their aliases.

1. ask returns the environment, optionally declaring a shape
2. asks reads one field or projects the environment
3. local runs a sub-reader against an updated environment
"""

from typing import TypedDict

import pytest

from doreader import (
    Ask,
    Asks,
    FrozenDict,
    Local,
    MissingDependencyError,
    Pure,
    ask,
    asks,
    local,
    run,
    widen,
)


class Deps(TypedDict):
    greeting: str


class Deps2(Deps):
    punctuation: str


# ============================================================================
# ask
# ============================================================================


class TestAsk:
    def test_ask_returns_environment(self, env_factory) -> None:
        env = env_factory({"greeting": "hi"})

        assert run(ask(), env) == env

    def test_ask_returns_frozen_environment(self) -> None:
        assert isinstance(run(ask(), {"a": 1}), FrozenDict)

    def test_ask_with_shape_declares_requirements(self) -> None:
        prog = ask(Deps2)

        assert prog.requires.field_names == {"greeting", "punctuation"}
        with pytest.raises(MissingDependencyError) as exc_info:
            run(prog, {"greeting": "hi"})
        assert exc_info.value.key == "punctuation"

    def test_ask_after_widening_returns_wide_environment(self) -> None:
        narrow = {"greeting": "hi"}
        wide = widen(narrow, punctuation="!")

        assert run(ask(Deps), wide) == wide
        assert run(ask(Deps2), wide) == {"greeting": "hi", "punctuation": "!"}

    def test_ask_alias(self) -> None:
        assert run(Ask(), {"a": 1}) == {"a": 1}


# ============================================================================
# asks
# ============================================================================


class TestAsks:
    def test_asks_key(self) -> None:
        assert run(asks("greeting"), {"greeting": "hi"}) == "hi"

    def test_asks_missing_key_raises(self) -> None:
        with pytest.raises(MissingDependencyError) as exc_info:
            run(asks("missing_key"), {})

        assert exc_info.value.key == "missing_key"
        assert "missing_key" in str(exc_info.value)
        assert isinstance(exc_info.value, KeyError)

    def test_asks_none_value_succeeds(self) -> None:
        assert run(asks("nullable_key"), {"nullable_key": None}) is None

    def test_asks_projection(self) -> None:
        prog = asks(lambda env: env["greeting"].upper())

        assert run(prog, {"greeting": "hi"}) == "HI"

    def test_asks_projection_with_shape(self) -> None:
        prog = asks(lambda env: env["greeting"] + env["punctuation"], Deps2)

        assert run(prog, {"greeting": "hi", "punctuation": "!"}) == "hi!"
        with pytest.raises(MissingDependencyError):
            run(prog, {"greeting": "hi"})

    def test_asks_key_with_shape_merges(self) -> None:
        prog = asks("punctuation", Deps)

        assert prog.requires.field_names == {"greeting", "punctuation"}

    def test_asks_rejects_non_callable_selector(self) -> None:
        with pytest.raises(TypeError, match="selector must be callable"):
            asks(42)

    def test_asks_alias(self) -> None:
        assert run(Asks("a"), {"a": 1}) == 1


# ============================================================================
# local
# ============================================================================


class TestLocal:
    def test_local_overrides_ask_inside_scope(self) -> None:
        prog = local({"key": "overridden"}, asks("key"))

        assert run(prog, {"key": "original"}) == "overridden"

    def test_local_adds_fields_for_sub_reader(self) -> None:
        prog = local({"punctuation": "?"}, asks(lambda env: env["greeting"] + env["punctuation"], Deps2))

        assert run(prog, {"greeting": "hi"}) == "hi?"

    def test_local_does_not_leak(self) -> None:
        prog = local({"key": "inner"}, asks("key")).flat_map(
            lambda inner: asks("key").map(lambda outer: f"{inner}/{outer}")
        )

        assert run(prog, {"key": "outer"}) == "inner/outer"

    def test_local_requires_reader(self) -> None:
        with pytest.raises(TypeError, match="sub_reader must be a Reader"):
            local({"a": 1}, "not a reader")

    def test_local_requires_string_keys(self) -> None:
        with pytest.raises(TypeError, match="keys must be str"):
            local({1: "a"}, asks("a"))

    def test_local_alias(self) -> None:
        assert run(Local({"a": 2}, asks("a")), {"a": 1}) == 2


def test_pure_alias() -> None:
    assert run(Pure("value"), {}) == "value"
