"""
doreader - Reader composition with environment shapes for Python.

A Reader is a computation that needs an environment before it can produce a
value. Readers are built, mapped and chained before any environment exists;
``run`` supplies one, checks it carries every field the composition declared,
and evaluates.

Example:
    >>> from typing import TypedDict
    >>> from doreader import ask, reader, run
    >>>
    >>> class Deps(TypedDict):
    ...     i18n: dict
    >>>
    >>> class Deps2(Deps):
    ...     lower_bound: int
    >>>
    >>> def f(b):
    ...     return reader(lambda deps: deps["i18n"][b], Deps)
    >>>
    >>> def g(n):
    ...     return ask(Deps2).flat_map(lambda deps: f(n > deps["lower_bound"]))
    >>>
    >>> env = {"i18n": {True: "vero", False: "falso"}, "lower_bound": 2}
    >>> run(g(4), env, lower_bound=4)
    'falso'
"""

from doreader.core import chain, map_, of, reader, run
from doreader.do import do
from doreader.effects import Ask, Asks, Local, Pure, ask, asks, local, pure
from doreader.env import (
    EMPTY_SCHEMA,
    EnvSchema,
    FrozenDict,
    FrozenEnv,
    freeze_env,
    merge_envs,
    override,
    widen,
)
from doreader.errors import EnvironmentTypeError, MissingDependencyError, SchemaConflictError
from doreader.kleisli import KleisliReader, PartiallyAppliedKleisliReader
from doreader.program import Reader
from doreader.runner import ReaderRunResult, run_reader
from doreader.types import CreationContext, EnvKey, Environment, ReaderGenerator

__version__ = "0.1.0"

__all__ = [
    "Ask",
    "Asks",
    "CreationContext",
    "EMPTY_SCHEMA",
    "EnvKey",
    "EnvSchema",
    "Environment",
    "EnvironmentTypeError",
    "FrozenDict",
    "FrozenEnv",
    "KleisliReader",
    "Local",
    "MissingDependencyError",
    "PartiallyAppliedKleisliReader",
    "Pure",
    "Reader",
    "ReaderGenerator",
    "ReaderRunResult",
    "SchemaConflictError",
    "ask",
    "asks",
    "chain",
    "do",
    "freeze_env",
    "local",
    "map_",
    "merge_envs",
    "of",
    "override",
    "pure",
    "reader",
    "run",
    "run_reader",
    "widen",
]
