from __future__ import annotations

from typing import Any


class MissingDependencyError(KeyError):
    """Raised when an environment lacks a field a reader depends on."""

    def __init__(self, key: Any, schema_name: str | None = None, created_at: Any = None) -> None:
        self.key = key
        self.schema_name = schema_name
        self.created_at = created_at
        shape = f" (required by {schema_name})" if schema_name else ""
        message = (
            f"Environment field not found: {key!r}{shape}\n"
            f"Hint: Provide this field via `run(reader, {{'{key}': value, ...}})` "
            f"or widen the environment with `widen(env, {key}=value)`"
        )
        if created_at is not None:
            message += f"\nReader created at {created_at.format_location()}"
        super().__init__(message)

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return str(self.args[0])


class EnvironmentTypeError(TypeError):
    """Raised when an environment field holds a value of the wrong type."""

    def __init__(self, key: Any, expected: Any, actual: Any, schema_name: str | None = None) -> None:
        self.key = key
        self.expected = expected
        self.actual = actual
        self.schema_name = schema_name
        shape = f" in {schema_name}" if schema_name else ""
        super().__init__(
            f"Environment field {key!r}{shape} expected {_hint_name(expected)}, "
            f"got {type(actual).__name__}: {actual!r}"
        )


class SchemaConflictError(TypeError):
    """Raised when two environment shapes disagree on a field."""

    def __init__(self, key: Any, existing: Any, incoming: Any) -> None:
        self.key = key
        self.existing = existing
        self.incoming = incoming
        super().__init__(
            f"Conflicting definitions for environment field {key!r}: "
            f"{_hint_name(existing)} vs {_hint_name(incoming)}"
        )


def _hint_name(hint: Any) -> str:
    return getattr(hint, "__name__", None) or repr(hint)


__all__ = ["EnvironmentTypeError", "MissingDependencyError", "SchemaConflictError"]
