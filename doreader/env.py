"""
Environment shapes and environment values.

An environment is any ``Mapping[str, object]``. Readers never see the mapping
they were handed: ``freeze_env`` turns it into a ``FrozenEnv`` first, freezing
nested mappings, lists and sets along the way. The helpers here (``override``,
``widen``, ``merge_envs``) always return a new frozen environment instead of
touching the original.

``EnvSchema`` is the runtime description of an environment shape. It is built
from a ``TypedDict`` (subclassing a TypedDict is how a shape is widened), from
a mapping of field name to type hint, or from a plain list of field names.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from collections.abc import Set as AbstractSet
from dataclasses import dataclass, field
from typing import Any, get_args, get_origin, get_type_hints, is_typeddict

from beartype.door import is_bearable
from frozendict import frozendict

from doreader import utils
from doreader.errors import EnvironmentTypeError, MissingDependencyError, SchemaConflictError
from doreader.types import CreationContext, EnvKey, Environment

logger = logging.getLogger(__name__)

FrozenDict = frozendict


class FrozenEnv(frozendict):
    """Frozen environment; reading an absent field raises MissingDependencyError."""

    __slots__ = ()

    def __getitem__(self, key: EnvKey) -> Any:
        try:
            return super().__getitem__(key)
        except KeyError:
            raise MissingDependencyError(key) from None


ShapeLike = Any  # EnvSchema | TypedDict class | Mapping[str, hint] | Iterable[str] | str | None


def _typeddict_fields(shape: type) -> dict[EnvKey, Any]:
    try:
        hints = get_type_hints(shape)
    except Exception:
        # Unresolvable forward references: keep the raw annotations and skip
        # type checks for the string ones.
        hints = {}
        for klass in reversed(shape.__mro__):
            hints.update(getattr(klass, "__annotations__", {}))
    return {key: hints.get(key, Any) for key in sorted(shape.__required_keys__)}


# Frozen environments hold read-only counterparts of these containers.
_FROZEN_COUNTERPARTS: dict[Any, Any] = {
    dict: Mapping,
    list: Sequence,
    set: AbstractSet,
}


def _relax_hint(hint: Any) -> Any:
    origin = get_origin(hint)
    if origin is None:
        return _FROZEN_COUNTERPARTS.get(hint, hint)
    if origin not in _FROZEN_COUNTERPARTS:
        return hint
    counterpart = _FROZEN_COUNTERPARTS[origin]
    args = tuple(_relax_hint(arg) for arg in get_args(hint))
    return counterpart[args] if args else counterpart


def _compatible(left: Any, right: Any) -> bool:
    return left == right or left is Any or right is Any or left is object or right is object


@dataclass(frozen=True)
class EnvSchema:
    """Immutable description of the fields an environment must carry."""

    name: str
    fields: FrozenDict = field(default_factory=FrozenDict)

    @classmethod
    def of(cls, shape: ShapeLike = None, *, name: str | None = None) -> "EnvSchema":
        """Normalize a TypedDict, mapping, iterable of names or schema."""

        if shape is None:
            return EMPTY_SCHEMA if name is None else cls(name)
        if isinstance(shape, EnvSchema):
            return shape if name is None else cls(name, shape.fields)
        if isinstance(shape, type) and is_typeddict(shape):
            return cls(name or shape.__name__, FrozenDict(_typeddict_fields(shape)))
        if isinstance(shape, str):
            return cls(name or "Environment", FrozenDict({shape: Any}))
        if isinstance(shape, Mapping):
            return cls(name or "Environment", FrozenDict(shape))
        if isinstance(shape, Iterable):
            names = list(shape)
            for item in names:
                if not isinstance(item, str):
                    raise TypeError(
                        f"environment field names must be str, got {type(item).__name__}"
                    )
            return cls(name or "Environment", FrozenDict({item: Any for item in names}))
        raise TypeError(
            "shape must be EnvSchema, TypedDict class, mapping, or iterable of field names, "
            f"got {type(shape).__name__}"
        )

    def __contains__(self, key: object) -> bool:
        return key in self.fields

    def __iter__(self):
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    @property
    def field_names(self) -> frozenset[EnvKey]:
        return frozenset(self.fields)

    def extend(self, name: str | None = None, **fields: Any) -> "EnvSchema":
        """Widen the shape with new fields; redefining a field is an error."""

        for key, hint in fields.items():
            if key in self.fields:
                raise SchemaConflictError(key, self.fields[key], hint)
        return EnvSchema(name or self.name, FrozenDict({**self.fields, **fields}))

    def merge(self, other: "EnvSchema") -> "EnvSchema":
        """Union of two shapes, as needed by a composition reading both."""

        if other is self or not other.fields:
            return self
        if not self.fields:
            return other
        merged = dict(self.fields)
        for key, hint in other.fields.items():
            if key not in merged or merged[key] is Any or merged[key] is object:
                merged[key] = hint
            elif not _compatible(merged[key], hint):
                raise SchemaConflictError(key, merged[key], hint)
        if self.widens(other):
            name = self.name
        elif other.widens(self):
            name = other.name
        else:
            name = f"{self.name} & {other.name}"
        return EnvSchema(name, FrozenDict(merged))

    def without(self, *keys: EnvKey) -> "EnvSchema":
        if not any(key in self.fields for key in keys):
            return self
        remaining = {key: hint for key, hint in self.fields.items() if key not in keys}
        return EnvSchema(self.name, FrozenDict(remaining))

    def widens(self, other: "EnvSchema | ShapeLike") -> bool:
        """True when every field of ``other`` is present here with a compatible hint."""

        narrow = EnvSchema.of(other)
        return all(
            key in self.fields and _compatible(self.fields[key], hint)
            for key, hint in narrow.fields.items()
        )

    def missing(self, env: Environment) -> tuple[EnvKey, ...]:
        return tuple(key for key in self.fields if key not in env)

    def validate(self, env: Environment, *, created_at: CreationContext | None = None) -> None:
        """Fail fast when ``env`` does not structurally satisfy this shape."""

        self._validate(env, "", created_at)

    def _validate(self, env: Environment, prefix: str, created_at: CreationContext | None) -> None:
        for key, hint in self.fields.items():
            path = f"{prefix}{key}"
            if key not in env:
                logger.debug(f"missing dependency {path!r} for {self.name}")
                raise MissingDependencyError(path, self.name, created_at)
            if utils.CHECK_FIELD_TYPES:
                _check_value(path, hint, env[key], self.name, created_at)


def _check_value(
    path: str,
    hint: Any,
    value: Any,
    schema_name: str,
    created_at: CreationContext | None,
) -> None:
    if hint is Any or hint is object or isinstance(hint, str):
        return
    if isinstance(hint, type) and is_typeddict(hint):
        if not isinstance(value, Mapping):
            raise EnvironmentTypeError(path, hint, value, schema_name)
        EnvSchema.of(hint)._validate(value, f"{path}.", created_at)
        return
    if not is_bearable(value, _relax_hint(hint)):
        raise EnvironmentTypeError(path, hint, value, schema_name)


EMPTY_SCHEMA = EnvSchema("Environment")


def _freeze_value(value: Any) -> Any:
    # frozendict.deepfreeze would also turn any object with a __dict__
    # (functions, clients, loggers) into a frozendict; only containers change here.
    if isinstance(value, Mapping):
        return FrozenDict({key: _freeze_value(item) for key, item in value.items()})
    if isinstance(value, list) or type(value) is tuple:
        return tuple(_freeze_value(item) for item in value)
    if isinstance(value, set):
        return frozenset(value)
    return value


def freeze_env(env: Environment) -> FrozenEnv:
    """Return ``env`` as a deeply frozen FrozenEnv, copying only when necessary."""

    if isinstance(env, FrozenEnv):
        return env
    if not isinstance(env, Mapping):
        raise TypeError(f"environment must be a Mapping, got {type(env).__name__}")
    return FrozenEnv({key: _freeze_value(value) for key, value in env.items()})


def with_fields(env: FrozenEnv, updates: Mapping[EnvKey, Any]) -> FrozenEnv:
    """Copy a frozen environment with ``updates`` frozen and merged on top."""

    frozen_updates = {key: _freeze_value(value) for key, value in updates.items()}
    return FrozenEnv({**env, **frozen_updates})


def override(
    env: Environment, changes: Mapping[EnvKey, Any] | None = None, /, **fields: Any
) -> FrozenEnv:
    """Copy ``env`` with existing fields replaced.

    Overrides only replace; a field the environment does not carry raises
    MissingDependencyError (use ``widen`` to add one).
    """

    frozen = freeze_env(env)
    updates = {**(changes or {}), **fields}
    for key in updates:
        if key not in frozen:
            raise MissingDependencyError(key)
    if not updates:
        return frozen
    logger.debug(f"override: {sorted(updates)}")
    return with_fields(frozen, updates)


def widen(
    env: Environment, additions: Mapping[EnvKey, Any] | None = None, /, **fields: Any
) -> FrozenEnv:
    """Copy ``env`` with new fields added; existing fields are never replaced."""

    frozen = freeze_env(env)
    updates = {**(additions or {}), **fields}
    for key, value in updates.items():
        if key in frozen:
            raise SchemaConflictError(key, type(frozen[key]), type(value))
    if not updates:
        return frozen
    logger.debug(f"widen: {sorted(updates)}")
    return with_fields(frozen, updates)


def merge_envs(*envs: Environment) -> FrozenEnv:
    """Merge environments left to right; later values win."""

    merged: dict[EnvKey, Any] = {}
    for env in envs:
        merged.update(freeze_env(env))
    return FrozenEnv(merged)


__all__ = [
    "EMPTY_SCHEMA",
    "EnvSchema",
    "FrozenDict",
    "FrozenEnv",
    "freeze_env",
    "merge_envs",
    "override",
    "widen",
    "with_fields",
]
