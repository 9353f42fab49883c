"""Runtime validators for reader construction arguments."""

from __future__ import annotations

from collections.abc import Mapping


def _type_name(value: object) -> str:
    return type(value).__name__


def ensure_callable(value: object, *, name: str) -> None:
    if not callable(value):
        raise TypeError(f"{name} must be callable, got {_type_name(value)}")


def ensure_reader(value: object, *, name: str) -> None:
    from doreader.program import Reader

    if not isinstance(value, Reader):
        raise TypeError(f"{name} must be a Reader, got {_type_name(value)}")


def ensure_env_mapping(value: object, *, name: str) -> None:
    if not isinstance(value, Mapping):
        raise TypeError(f"{name} must be Mapping, got {_type_name(value)}")
    for key in value:
        if not isinstance(key, str):
            raise TypeError(f"{name} keys must be str, got {_type_name(key)}")


def ensure_env_update(value: object, *, name: str) -> None:
    if callable(value):
        return
    ensure_env_mapping(value, name=name)


__all__ = [
    "ensure_callable",
    "ensure_env_mapping",
    "ensure_env_update",
    "ensure_reader",
]
