"""
Core types shared across the doreader modules.
"""

from __future__ import annotations

from collections.abc import Generator, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, TypeVar

if TYPE_CHECKING:
    from doreader.program import Reader

T = TypeVar("T")

EnvKey = str
Environment = Mapping[EnvKey, Any]

# Generator type accepted by @do: yields readers, receives their values.
ReaderGenerator = Generator["Reader[Any, Any]", Any, T]


@dataclass(frozen=True)
class CreationContext:
    """Where a reader was built."""

    filename: str
    line: int
    function: str
    code: str | None = None
    stack_trace: list[dict[str, Any]] = field(default_factory=list, compare=False)

    def format_location(self) -> str:
        """Format the creation location as a string."""
        return f"{self.filename}:{self.line} in {self.function}"

    def format_full(self) -> str:
        """Format the full creation context with stack trace."""
        lines = [f"Reader created at {self.format_location()}"]
        if self.code:
            lines.append(f"    {self.code}")
        if self.stack_trace:
            lines.append("\nCreation stack trace:")
            for frame in self.stack_trace:
                lines.append(
                    f'  File "{frame["filename"]}", line {frame["line"]}, in {frame["function"]}'
                )
                if frame.get("code"):
                    lines.append(f"    {frame['code']}")
        return "\n".join(lines)


__all__ = [
    "CreationContext",
    "EnvKey",
    "Environment",
    "ReaderGenerator",
]
