"""
Utility functions for the doreader library.
"""

import linecache
import os
import sys
from typing import Optional


def _flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes")


_PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__)) + os.sep


def _is_doreader_internal(path: str) -> bool:
    if path.startswith("<"):
        return False
    return os.path.abspath(path).startswith(_PACKAGE_DIR)


# Environment variables controlling debug capture and field type checks
DEBUG_READERS = _flag("DOREADER_DEBUG", False)
CHECK_FIELD_TYPES = _flag("DOREADER_CHECK_TYPES", True)


def capture_creation_context(skip_frames: int = 2) -> Optional["CreationContext"]:
    """
    Capture the stack context where a reader is being built.

    Args:
        skip_frames: Number of frames to skip (default 2 to skip this function and caller)

    Returns:
        CreationContext with frame info, or None when frames are unavailable
    """
    from doreader.types import CreationContext

    try:
        frame = sys._getframe(skip_frames)
    except ValueError:
        return None

    # Walk out of library frames so the location points at user code.
    while frame.f_back is not None and _is_doreader_internal(frame.f_code.co_filename):
        frame = frame.f_back

    filename = frame.f_code.co_filename
    line = frame.f_lineno
    code = linecache.getline(filename, line).strip() or None

    stack_data = []
    current_frame = frame.f_back
    max_depth = 12 if DEBUG_READERS else 0

    while current_frame is not None and len(stack_data) < max_depth:
        frame_filename = current_frame.f_code.co_filename
        frame_data = {
            "filename": frame_filename,
            "line": current_frame.f_lineno,
            "function": current_frame.f_code.co_name,
        }
        code_line = linecache.getline(frame_filename, current_frame.f_lineno)
        if code_line:
            frame_data["code"] = code_line.strip()
        stack_data.append(frame_data)
        current_frame = current_frame.f_back

    return CreationContext(
        filename=filename,
        line=line,
        function=frame.f_code.co_name,
        code=code,
        stack_trace=stack_data,
    )


__all__ = [
    "CHECK_FIELD_TYPES",
    "DEBUG_READERS",
    "capture_creation_context",
]
