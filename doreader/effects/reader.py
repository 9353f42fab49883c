"""Reader primitives: ask, asks and local."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from doreader._validators import ensure_callable, ensure_env_update, ensure_reader
from doreader.env import EnvSchema, FrozenDict, ShapeLike
from doreader.program import Reader
from doreader.types import EnvKey
from doreader.utils import capture_creation_context


def ask(shape: ShapeLike = None) -> Reader[Any, FrozenDict]:
    """Yield the environment itself.

    With ``shape`` the reader declares that shape as its requirement, so a
    run against an environment missing one of its fields fails before any
    value is produced.
    """

    def identity(env: FrozenDict) -> FrozenDict:
        return env

    return Reader(identity, EnvSchema.of(shape), "ask", capture_creation_context())


def asks(
    selector: EnvKey | Callable[[FrozenDict], Any], shape: ShapeLike = None
) -> Reader[Any, Any]:
    """Yield one field (``selector`` is a key) or a projection of the environment."""

    created_at = capture_creation_context()
    if isinstance(selector, str):
        key = selector
        requires = EnvSchema.of(shape).merge(EnvSchema.of([key]))

        def lookup(env: FrozenDict) -> Any:
            return env[key]

        return Reader(lookup, requires, f"asks({key!r})", created_at)

    ensure_callable(selector, name="selector")
    return Reader(
        selector,
        EnvSchema.of(shape),
        f"asks({getattr(selector, '__name__', 'selector')})",
        created_at,
    )


def local(
    env_update: Mapping[EnvKey, Any] | Callable[[FrozenDict], Mapping[EnvKey, Any]],
    sub_reader: Reader[Any, Any],
) -> Reader[Any, Any]:
    """Run ``sub_reader`` against an updated copy of the environment."""

    ensure_env_update(env_update, name="env_update")
    ensure_reader(sub_reader, name="sub_reader")
    return sub_reader.local(env_update)


def Ask(shape: ShapeLike = None) -> Reader[Any, FrozenDict]:  # noqa: N802
    return ask(shape)


def Asks(  # noqa: N802
    selector: EnvKey | Callable[[FrozenDict], Any], shape: ShapeLike = None
) -> Reader[Any, Any]:
    return asks(selector, shape)


def Local(  # noqa: N802
    env_update: Mapping[EnvKey, Any] | Callable[[FrozenDict], Mapping[EnvKey, Any]],
    sub_reader: Reader[Any, Any],
) -> Reader[Any, Any]:
    return local(env_update, sub_reader)


__all__ = [
    "Ask",
    "Asks",
    "Local",
    "ask",
    "asks",
    "local",
]
