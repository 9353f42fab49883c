"""
Reader class for the doreader system.

This module contains the Reader wrapper class that represents a computation
deferred until an environment is supplied.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from doreader._validators import ensure_callable, ensure_env_update
from doreader.env import EMPTY_SCHEMA, EnvSchema, FrozenDict, ShapeLike, freeze_env, with_fields
from doreader.types import CreationContext, Environment
from doreader.utils import capture_creation_context

logger = logging.getLogger(__name__)

E = TypeVar("E")
T = TypeVar("T")
U = TypeVar("U")
V = TypeVar("V")


@dataclass(frozen=True)
class Reader(Generic[E, T]):
    """A value of type ``T`` waiting for an environment of shape ``E``.

    ``func`` is never called at construction time. ``requires`` lists the
    fields this reader is known to read before it runs; composition merges
    them so ``run`` can reject an incomplete environment up front.
    """

    func: Callable[[FrozenDict], T]
    requires: EnvSchema = EMPTY_SCHEMA
    name: str = "<reader>"
    created_at: CreationContext | None = field(default=None, compare=False, repr=False)

    def run(self, env: Environment) -> T:
        """Supply the environment and evaluate."""

        frozen = freeze_env(env)
        self.requires.validate(frozen, created_at=self.created_at)
        logger.debug(f"run: {self.name}")
        return self.func(frozen)

    def __call__(self, env: Environment) -> T:
        return self.run(env)

    def __getitem__(self, key: Any) -> "Reader[E, Any]":
        """Lazily project an item from the eventual result."""

        return self.map(lambda value: value[key])

    def map(self, f: Callable[[T], U]) -> "Reader[E, U]":
        """Map a function over this reader's result."""

        ensure_callable(f, name="mapper")
        source = self.func

        def mapped(env: FrozenDict) -> U:
            return f(source(env))

        return Reader(mapped, self.requires, self.name, self.created_at)

    def flat_map(self, f: Callable[[T], "Reader[E, U]"]) -> "Reader[E, U]":
        """Monadic bind: feed the result to ``f`` and run its reader on the same environment."""

        ensure_callable(f, name="binder")
        source = self.func

        def bound(env: FrozenDict) -> U:
            value = source(env)
            next_reader = f(value)
            if not isinstance(next_reader, Reader):
                raise TypeError(
                    "binder must return a Reader; got "
                    f"{type(next_reader).__name__}"
                )
            return next_reader.run(env)

        return Reader(bound, self.requires, self.name, self.created_at)

    def chain(self, f: Callable[[T], "Reader[E, U]"]) -> "Reader[E, U]":
        """Alias for flat_map."""

        return self.flat_map(f)

    def and_then_k(self, binder: Callable[[T], "Reader[E, U]"]) -> "Reader[E, U]":
        """Alias for flat_map for Kleisli-style composition."""

        return self.flat_map(binder)

    def local(
        self, update: Mapping[str, Any] | Callable[[FrozenDict], Mapping[str, Any]]
    ) -> "Reader[E, T]":
        """Run this reader against a modified copy of the environment."""

        ensure_env_update(update, name="update")
        inner = self

        def localized(env: FrozenDict) -> T:
            patch = update(env) if callable(update) else update
            if not isinstance(patch, Mapping):
                raise TypeError(
                    f"local update must produce a Mapping, got {type(patch).__name__}"
                )
            return inner.run(with_fields(env, patch))

        if callable(update):
            requires = EMPTY_SCHEMA
        else:
            requires = self.requires.without(*update)
        return Reader(localized, requires, self.name, self.created_at)

    def tap(self, f: Callable[[T], Any]) -> "Reader[E, T]":
        """Call ``f`` with the result and pass the result through unchanged."""

        ensure_callable(f, name="tap")

        def passthrough(value: T) -> T:
            f(value)
            return value

        return self.map(passthrough)

    @staticmethod
    def from_env(
        func: Callable[[FrozenDict], T],
        shape: ShapeLike = None,
        name: str | None = None,
    ) -> "Reader[Any, T]":
        """Build a reader from a raw ``env -> value`` function."""

        ensure_callable(func, name="func")
        return Reader(
            func,
            EnvSchema.of(shape),
            name or getattr(func, "__name__", "<reader>"),
            capture_creation_context(),
        )

    @staticmethod
    def pure(value: T) -> "Reader[Any, T]":
        from doreader.effects.pure import Pure

        return Pure(value)

    @staticmethod
    def of(value: T) -> "Reader[Any, T]":
        return Reader.pure(value)

    @staticmethod
    def lift(value: "Reader[E, U]" | U) -> "Reader[E, U]":
        if isinstance(value, Reader):
            return value
        return Reader.pure(value)

    @staticmethod
    def sequence(readers: Iterable["Reader[E, T]" | T]) -> "Reader[E, list[T]]":
        """Run every reader against one environment and collect the results."""

        lifted = [Reader.lift(item) for item in readers]
        requires = EMPTY_SCHEMA
        for item in lifted:
            requires = requires.merge(item.requires)
        funcs = [item.func for item in lifted]

        def sequenced(env: FrozenDict) -> list[T]:
            return [func(env) for func in funcs]

        return Reader(sequenced, requires, "sequence", capture_creation_context())

    @staticmethod
    def traverse(
        items: Iterable[T],
        func: Callable[[T], "Reader[E, U]"],
    ) -> "Reader[E, list[U]]":
        ensure_callable(func, name="func")
        return Reader.sequence([func(item) for item in items])

    @staticmethod
    def list(*values: "Reader[E, U]" | U) -> "Reader[E, list[U]]":
        return Reader.sequence(values)

    @staticmethod
    def tuple(*values: "Reader[E, U]" | U) -> "Reader[E, tuple[U, ...]]":
        return Reader.sequence(values).map(lambda items: tuple(items))

    @staticmethod
    def dict(
        *mapping: Mapping[Any, "Reader[E, V]" | V] | Iterable[tuple[Any, "Reader[E, V]" | V]],
        **kwargs: "Reader[E, V]" | V,
    ) -> "Reader[E, dict[Any, V]]":
        raw = dict(*mapping, **kwargs)
        keys = list(raw)
        return Reader.sequence(raw[key] for key in keys).map(
            lambda values: dict(zip(keys, values))
        )


__all__ = ["Reader"]
