"""
Functor and monad laws for Reader, checked against several environments.

Two readers are considered equal when they produce equal results for every
environment they are run against.
"""

from typing import Any

import pytest

from doreader import Reader, ask, asks, chain, map_, of, reader, run

ENVIRONMENTS = [
    {"x": 1, "name": "a"},
    {"x": 10, "name": "bb", "extra": True},
    {"x": -3, "name": ""},
]


def sample_readers() -> list[Reader[Any, Any]]:
    return [
        of(42),
        asks("x"),
        ask().map(lambda env: sorted(env)),
        reader(lambda env: env["x"] * len(env["name"]), ["x", "name"]),
    ]


def f(value: Any) -> Reader[Any, Any]:
    return asks("x").map(lambda x: (value, x))


def g(value: Any) -> Reader[Any, Any]:
    return asks("name").map(lambda name: f"{value}:{name}")


def assert_equivalent(left: Reader[Any, Any], right: Reader[Any, Any]) -> None:
    for env in ENVIRONMENTS:
        assert run(left, env) == run(right, env)


@pytest.mark.parametrize("r", sample_readers())
def test_functor_identity(r):
    assert_equivalent(map_(r, lambda x: x), r)


@pytest.mark.parametrize("r", sample_readers())
def test_functor_composition(r):
    first = repr
    second = len
    assert_equivalent(
        map_(map_(r, first), second),
        map_(r, lambda x: second(first(x))),
    )


@pytest.mark.parametrize("a", [0, "text", None, (1, 2)])
def test_monad_left_identity(a):
    assert_equivalent(chain(of(a), f), f(a))


@pytest.mark.parametrize("r", sample_readers())
def test_monad_right_identity(r):
    assert_equivalent(chain(r, of), r)


@pytest.mark.parametrize("r", sample_readers())
def test_monad_associativity(r):
    assert_equivalent(
        chain(chain(r, f), g),
        chain(r, lambda x: chain(f(x), g)),
    )


def test_map_of_pure_matches_pure_of_applied():
    assert_equivalent(map_(of(3), lambda n: n * 2), of(6))


@pytest.mark.parametrize("env", ENVIRONMENTS)
def test_ask_returns_environment(env):
    assert run(ask(), env) == env


def test_run_is_repeatable():
    r = reader(lambda env: [env["x"], env["name"]], ["x", "name"])
    env = ENVIRONMENTS[1]

    assert run(r, env) == run(r, env)


def test_method_and_function_forms_agree():
    r = asks("x")

    assert_equivalent(r.map(str), map_(r, str))
    assert_equivalent(r.flat_map(f), chain(r, f))
    assert_equivalent(r.chain(f), r.and_then_k(f))
