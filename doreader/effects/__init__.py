"""
Reader primitives for the doreader system.

Each primitive is a plain ``Reader``; capitalized names are aliases kept for
call sites that read like effect declarations.
"""

from .pure import Pure, pure
from .reader import Ask, Asks, Local, ask, asks, local

__all__ = [
    "Ask",
    "Asks",
    "Local",
    "Pure",
    "ask",
    "asks",
    "local",
    "pure",
]
