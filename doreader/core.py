"""
Function-style API over Reader.

``of``, ``run``, ``map_``, ``chain`` and ``ask`` mirror the methods on
Reader for call sites that prefer free functions. ``map_`` carries a trailing
underscore so it does not shadow the builtin.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

from doreader.effects import ask, asks, local, pure
from doreader.env import EnvSchema, FrozenDict, ShapeLike, freeze_env, override
from doreader.program import Reader
from doreader.types import Environment

E = TypeVar("E")
T = TypeVar("T")
U = TypeVar("U")


def of(value: T) -> Reader[Any, T]:
    """Reader that ignores the environment and yields ``value``."""

    return pure(value)


def reader(func: Callable[[FrozenDict], T], shape: ShapeLike = None) -> Reader[Any, T]:
    """Build a leaf reader from a raw ``env -> value`` function."""

    return Reader.from_env(func, shape)


def map_(r: Reader[E, T], f: Callable[[T], U]) -> Reader[E, U]:
    return r.map(f)


def chain(r: Reader[E, T], f: Callable[[T], Reader[E, U]]) -> Reader[E, U]:
    return r.flat_map(f)


def run(r: Reader[E, T], env: Environment, /, *, shape: ShapeLike = None, **overrides: Any) -> T:
    """Run ``r`` against ``env``.

    Keyword overrides replace existing fields on a copy of ``env`` first, so
    one composition can be run with different settings at different call
    sites. ``shape`` adds an explicit shape check on top of the fields the
    reader already declares.
    """

    if not isinstance(r, Reader):
        raise TypeError(f"run expects a Reader, got {type(r).__name__}")
    frozen = freeze_env(env)
    if overrides:
        frozen = override(frozen, overrides)
    if shape is not None:
        EnvSchema.of(shape).validate(frozen, created_at=r.created_at)
    return r.run(frozen)


__all__ = [
    "ask",
    "asks",
    "chain",
    "local",
    "map_",
    "of",
    "reader",
    "run",
]
