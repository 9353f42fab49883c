"""
Run readers against environments assembled from several sources.

Example:
    >>> from doreader.runner import run_reader
    >>> result = run_reader(
    ...     h("foo"),
    ...     envs=["myapp.settings.base_env", {"lower_bound": 4}],
    ... )
    >>> result.value
    'falso'

Sources merge left to right, later values winning; ``overrides`` are applied
last and may only replace fields some source already provided.
"""

from __future__ import annotations

import importlib
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from loguru import logger

from doreader.env import EnvSchema, FrozenDict, ShapeLike, freeze_env, override, with_fields
from doreader.program import Reader

T = TypeVar("T")

# A Mapping, a Reader yielding a Mapping, or an import path to either.
EnvLike = str | Reader[Any, Mapping[str, Any]] | Mapping[str, Any]

logger = logger.bind(component="doreader.runner")


@dataclass(frozen=True)
class ReaderRunResult(Generic[T]):
    value: T
    env: FrozenDict
    env_sources: tuple[str, ...]


class SymbolResolver:
    """Helper for importing symbols while caching module lookups."""

    def __init__(self) -> None:
        self._cache: dict[str, Any] = {}

    def resolve(self, path: str) -> Any:
        if path not in self._cache:
            self._cache[path] = _import_symbol(path)
        return self._cache[path]


def _import_symbol(path: str) -> Any:
    if ":" in path:
        module_name, attr_path = path.split(":", 1)
        module = importlib.import_module(module_name)
        return _resolve_attr(module, attr_path)
    parts = path.split(".")
    if len(parts) < 2:
        raise ValueError(
            f"'{path}' is not a fully-qualified symbol. Use module.symbol format."
        )
    module = importlib.import_module(".".join(parts[:-1]))
    return getattr(module, parts[-1])


def _resolve_attr(obj: Any, attr_path: str) -> Any:
    current = obj
    for attr in attr_path.split("."):
        current = getattr(current, attr)
    return current


def _load_source(source: Any, merged: FrozenDict, label: str) -> Mapping[str, Any]:
    if isinstance(source, Reader):
        value = source.run(merged)
        if not isinstance(value, Mapping):
            raise TypeError(
                f"Environment Reader {label} must yield a Mapping, got {type(value).__name__}"
            )
        return value
    if isinstance(source, Mapping):
        return source
    raise TypeError(f"env source {label} must be Reader or Mapping, got {type(source).__name__}")


def merge_sources(
    envs: Sequence[EnvLike], resolver: SymbolResolver | None = None
) -> tuple[FrozenDict, tuple[str, ...]]:
    """Merge environment sources left to right; later values win."""

    resolver = resolver or SymbolResolver()
    merged = freeze_env({})
    sources: list[str] = []

    for env in envs:
        if isinstance(env, str):
            label = env
            loaded = _load_source(resolver.resolve(env), merged, label)
        elif isinstance(env, Reader):
            label = "<Reader[Mapping]>"
            loaded = _load_source(env, merged, label)
        elif isinstance(env, Mapping):
            label = "<dict>"
            loaded = env
        else:
            raise TypeError(f"env must be str, Reader[Mapping], or Mapping, got {type(env).__name__}")

        merged = with_fields(merged, loaded)
        sources.append(label)
        logger.debug("Loaded env source {} ({} fields)", label, len(loaded))

    return merged, tuple(sources)


def run_reader(
    reader: Reader[Any, T],
    *,
    envs: Sequence[EnvLike] = (),
    overrides: Mapping[str, Any] | None = None,
    shape: ShapeLike = None,
) -> ReaderRunResult[T]:
    """Merge ``envs``, apply ``overrides`` and run ``reader`` against the result.

    Args:
        reader: The Reader to run.
        envs: Environment sources. Each item can be:
              - A Mapping
              - A Reader yielding a Mapping; it runs against the sources merged so far
              - An import path (``"pkg.mod.symbol"`` or ``"pkg.mod:attr.path"``) to either
        overrides: Field replacements applied after merging.
        shape: Optional explicit shape the final environment must satisfy.

    Returns:
        ReaderRunResult with the value, the final environment and the source labels.

    Raises:
        TypeError: If a source is not a Mapping or a Reader of one.
        MissingDependencyError: If the final environment lacks a required field,
            or an override names a field no source provided.
    """

    if not isinstance(reader, Reader):
        raise TypeError(f"run_reader expects a Reader, got {type(reader).__name__}")

    env, sources = merge_sources(envs)
    if overrides:
        env = override(env, overrides)
        logger.debug("Applied overrides: {}", sorted(overrides))
    if shape is not None:
        EnvSchema.of(shape).validate(env, created_at=reader.created_at)

    value = reader.run(env)
    return ReaderRunResult(value=value, env=env, env_sources=sources)


__all__ = ["EnvLike", "ReaderRunResult", "SymbolResolver", "merge_sources", "run_reader"]
