"""
Kleisli arrow implementation for the doreader system.

This module contains the KleisliReader class: a function returning a Reader,
with automatic unwrapping of Reader arguments so arrows compose naturally.
"""

from __future__ import annotations

import inspect
import types
from collections.abc import Callable
from dataclasses import dataclass
from functools import wraps
from typing import Annotated, Any, ForwardRef, Generic, ParamSpec, TypeVar, Union, get_args, get_origin

from doreader.env import EMPTY_SCHEMA, FrozenDict
from doreader.program import Reader
from doreader.utils import capture_creation_context

P = ParamSpec("P")
T = TypeVar("T")
U = TypeVar("U")


class _AutoUnwrapStrategy:
    """Describe which arguments should be auto-unwrapped for a Kleisli call."""

    __slots__ = ("positional", "var_positional", "keyword", "var_keyword")

    def __init__(self) -> None:
        self.positional: list[bool] = []
        self.var_positional: bool | None = None
        self.keyword: dict[str, bool] = {}
        self.var_keyword: bool | None = None

    def should_unwrap_positional(self, index: int) -> bool:
        if index < len(self.positional):
            return self.positional[index]
        if self.var_positional is not None:
            return self.var_positional
        return True

    def should_unwrap_keyword(self, name: str) -> bool:
        if name in self.keyword:
            return self.keyword[name]
        if self.var_keyword is not None:
            return self.var_keyword
        return True


def _string_annotation_is_reader(annotation_text: str) -> bool:
    stripped = annotation_text.strip()
    if not stripped:
        return False
    if "|" in stripped:
        return any(_string_annotation_is_reader(part) for part in stripped.split("|"))
    if stripped.startswith("Optional[") and stripped.endswith("]"):
        return _string_annotation_is_reader(stripped[len("Optional["):-1])
    if stripped.startswith("Annotated[") and stripped.endswith("]"):
        inner = stripped[len("Annotated["):-1]
        return _string_annotation_is_reader(inner.split(",", 1)[0])
    normalized = stripped.replace(" ", "")
    return (
        normalized == "Reader"
        or normalized.startswith("Reader[")
        or normalized.startswith("doreader.program.Reader")
    )


def _annotation_is_reader(annotation: Any) -> bool:
    if annotation is inspect.Parameter.empty:
        return False
    if annotation is Reader:
        return True
    if isinstance(annotation, ForwardRef):
        return _string_annotation_is_reader(annotation.__forward_arg__)
    if isinstance(annotation, str):
        return _string_annotation_is_reader(annotation)
    origin = get_origin(annotation)
    if origin is Reader:
        return True
    if origin is Annotated:
        args = get_args(annotation)
        return bool(args) and _annotation_is_reader(args[0])
    if origin is Union or origin is types.UnionType:
        return any(_annotation_is_reader(arg) for arg in get_args(annotation))
    return False


def _safe_signature(target: Any) -> inspect.Signature | None:
    try:
        return inspect.signature(target)
    except (TypeError, ValueError):
        return None


def _build_auto_unwrap_strategy(func: Callable[..., Any]) -> _AutoUnwrapStrategy:
    """Parameters annotated as Reader receive the Reader itself, not its value."""

    strategy = _AutoUnwrapStrategy()
    signature = _safe_signature(func)
    if signature is None:
        return strategy
    for param in signature.parameters.values():
        should_unwrap = not _annotation_is_reader(param.annotation)
        if param.kind in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
        ):
            strategy.positional.append(should_unwrap)
            if param.kind == inspect.Parameter.POSITIONAL_OR_KEYWORD:
                strategy.keyword[param.name] = should_unwrap
        elif param.kind == inspect.Parameter.KEYWORD_ONLY:
            strategy.keyword[param.name] = should_unwrap
        elif param.kind == inspect.Parameter.VAR_POSITIONAL:
            strategy.var_positional = should_unwrap
        elif param.kind == inspect.Parameter.VAR_KEYWORD:
            strategy.var_keyword = should_unwrap
    return strategy


@dataclass
class KleisliReader(Generic[P, T]):
    """
    Thin wrapper around a callable representing a Kleisli arrow.

    The callable stored in ``func`` produces a Reader (or a plain value, which
    is lifted) when invoked with fully unwrapped arguments. Reader arguments
    are run against the caller's environment when the resulting Reader runs,
    so a single environment flows through the whole call.
    """

    func: Callable[P, Reader[Any, T] | T]

    def __post_init__(self) -> None:
        wrapped = getattr(self.func, "__wrapped__", self.func)
        self._strategy = _build_auto_unwrap_strategy(wrapped)

        signature = _safe_signature(wrapped)
        if signature is not None:
            self.__signature__ = signature  # type: ignore[attr-defined]

        for attr in ("__name__", "__qualname__", "__doc__", "__module__"):
            value = getattr(wrapped, attr, None)
            if value is not None:
                setattr(self, attr, value)

    def __get__(self, instance: Any, owner: type | None = None) -> Any:
        if instance is None:
            return self
        return types.MethodType(self, instance)

    def __call__(self, *args: Any, **kwargs: Any) -> Reader[Any, T]:
        strategy = self._strategy
        kernel = self.func

        unwrap_args = [
            strategy.should_unwrap_positional(index) and isinstance(arg, Reader)
            for index, arg in enumerate(args)
        ]
        unwrap_kwargs = {
            key: strategy.should_unwrap_keyword(key) and isinstance(value, Reader)
            for key, value in kwargs.items()
        }

        requires = EMPTY_SCHEMA
        for arg, unwrap in zip(args, unwrap_args):
            if unwrap:
                requires = requires.merge(arg.requires)
        for key, value in kwargs.items():
            if unwrap_kwargs[key]:
                requires = requires.merge(value.requires)

        def call(env: FrozenDict) -> T:
            resolved_args = tuple(
                arg.func(env) if unwrap else arg
                for arg, unwrap in zip(args, unwrap_args)
            )
            resolved_kwargs = {
                key: value.func(env) if unwrap_kwargs[key] else value
                for key, value in kwargs.items()
            }
            result = kernel(*resolved_args, **resolved_kwargs)
            if isinstance(result, Reader):
                return result.run(env)
            return result

        return Reader(
            call,
            requires,
            getattr(self, "__name__", "<kleisli>"),
            capture_creation_context(),
        )

    def partial(
        self, /, *args: P.args, **kwargs: P.kwargs
    ) -> "PartiallyAppliedKleisliReader[P, T]":
        return PartiallyAppliedKleisliReader(self, args, kwargs)

    def and_then_k(
        self,
        binder: Callable[[T], Reader[Any, U]],
    ) -> "KleisliReader[P, U]":
        if not callable(binder):
            raise TypeError("binder must be callable returning a Reader")

        @wraps(self.func)
        def composed(*args: P.args, **kwargs: P.kwargs) -> Reader[Any, U]:
            return self(*args, **kwargs).and_then_k(binder)

        return KleisliReader(composed)

    def __rshift__(
        self,
        binder: Callable[[T], Reader[Any, U]],
    ) -> "KleisliReader[P, U]":
        return self.and_then_k(binder)

    def fmap(
        self,
        mapper: Callable[[T], U],
    ) -> "KleisliReader[P, U]":
        if not callable(mapper):
            raise TypeError("mapper must be callable")

        @wraps(self.func)
        def mapped(*args: P.args, **kwargs: P.kwargs) -> Reader[Any, U]:
            return self(*args, **kwargs).map(mapper)

        return KleisliReader(mapped)


class PartiallyAppliedKleisliReader(KleisliReader[P, T]):
    """Lightweight wrapper returned by ``KleisliReader.partial``."""

    def __init__(
        self,
        base: KleisliReader[P, T],
        pre_args: tuple[Any, ...],
        pre_kwargs: dict[str, Any],
    ) -> None:
        self._base = base
        self._pre_args = pre_args
        self._pre_kwargs = dict(pre_kwargs)
        for attr in ("__name__", "__qualname__", "__doc__", "__module__"):
            value = getattr(base, attr, None)
            if value is not None:
                setattr(self, attr, value)

    @property
    def func(self) -> Callable[P, Reader[Any, T] | T]:  # type: ignore[override]
        return self._base.func

    def __call__(self, *args: Any, **kwargs: Any) -> Reader[Any, T]:
        merged_args = self._pre_args + args
        merged_kwargs = {**self._pre_kwargs, **kwargs}
        return self._base(*merged_args, **merged_kwargs)

    def partial(
        self, /, *args: Any, **kwargs: Any
    ) -> "PartiallyAppliedKleisliReader[P, T]":
        merged_args = self._pre_args + args
        merged_kwargs = {**self._pre_kwargs, **kwargs}
        return PartiallyAppliedKleisliReader(self._base, merged_args, merged_kwargs)


__all__ = ["KleisliReader", "PartiallyAppliedKleisliReader"]
