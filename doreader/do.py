"""
The do decorator for the doreader system.

This module provides the @do decorator that converts generator functions
into KleisliReaders, enabling do-notation for environment-dependent code.
"""

from __future__ import annotations

import inspect
from collections.abc import Callable
from functools import wraps
from typing import Any, ParamSpec, TypeVar

from doreader.env import EMPTY_SCHEMA, FrozenDict
from doreader.kleisli import KleisliReader
from doreader.program import Reader
from doreader.types import ReaderGenerator

P = ParamSpec("P")
T = TypeVar("T")


def _drive(gen_or_value: Any, env: FrozenDict) -> Any:
    if not inspect.isgenerator(gen_or_value):
        return gen_or_value

    gen = gen_or_value
    try:
        try:
            current = next(gen)
        except StopIteration as stop_exc:
            return stop_exc.value

        while True:
            if not isinstance(current, Reader):
                raise TypeError(
                    f"@do functions must yield Readers, got {type(current).__name__}"
                )
            value = current.run(env)
            try:
                current = gen.send(value)
            except StopIteration as stop_exc:
                return stop_exc.value
    finally:
        gen.close()


class DoReaderFunction(KleisliReader[P, T]):
    """Specialised KleisliReader for generator-based @do functions."""

    def __init__(self, func: Callable[P, ReaderGenerator[T]]) -> None:
        @wraps(func)
        def generator_wrapper(*args: P.args, **kwargs: P.kwargs) -> Reader[Any, T]:
            # A fresh generator per run: generators are single-use, readers are not.
            def body(env: FrozenDict) -> T:
                return _drive(func(*args, **kwargs), env)

            return Reader(body, EMPTY_SCHEMA, func.__name__)

        super().__init__(generator_wrapper)
        self.original_func = func

    @property
    def original_generator(self) -> Callable[P, ReaderGenerator[T]]:
        """Expose the user-defined generator for downstream tooling."""

        return self.original_func


def do(
    func: Callable[P, ReaderGenerator[T]],
) -> KleisliReader[P, T]:
    """
    Decorator that converts a generator function into a KleisliReader.

    Each yielded Reader runs against the environment the resulting Reader is
    eventually run with, and its value is sent back into the generator. The
    generator's return value is the result. Nothing runs until ``run``.

    Usage:
        @do
        def greet(name: str) -> ReaderGenerator[str]:
            greeting = yield asks("greeting")
            punctuation = yield asks("punctuation")
            return f"{greeting}, {name}{punctuation}"

        run(greet("Ada"), {"greeting": "Hello", "punctuation": "!"})  # "Hello, Ada!"

    Args:
        func: A generator function that yields Readers and returns T

    Returns:
        KleisliReader wrapping the generator function, with automatic
        unwrapping of Reader arguments.
    """

    return DoReaderFunction(func)


__all__ = ["DoReaderFunction", "do"]
