"""Pure reader - an immediate value that ignores the environment."""

from __future__ import annotations

from typing import Any

from doreader.env import EMPTY_SCHEMA
from doreader.program import Reader
from doreader.utils import capture_creation_context


def pure(value: Any) -> Reader[Any, Any]:
    """
    Create a reader that yields ``value`` for every environment.

    Args:
        value: The value to wrap

    Returns:
        Reader with an empty requirement set
    """

    def constant(_env: Any) -> Any:
        return value

    return Reader(constant, EMPTY_SCHEMA, "pure", capture_creation_context())


def Pure(value: Any) -> Reader[Any, Any]:  # noqa: N802
    return pure(value)


__all__ = [
    "Pure",
    "pure",
]
