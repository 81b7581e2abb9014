"""Creation-site capture for promises, enabled by ``APROMISE_DEBUG``."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass


@dataclass(frozen=True)
class CodeLocation:
    """
    Location information for a code point.

    Attributes:
        filename: Source file path.
        line: Line number in the source file.
        function: Function name where the code is located.
    """

    filename: str
    line: int
    function: str

    def format(self) -> str:
        """Format as 'filename:line in function'."""
        return f"{self.filename}:{self.line} in {self.function}"


_PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__)) + os.sep


def _is_apromise_internal(path: str) -> bool:
    return os.path.abspath(path).startswith(_PACKAGE_DIR)


def capture_creation_site(skip_frames: int = 2) -> CodeLocation | None:
    """Return the first frame outside apromise, starting ``skip_frames`` up the stack."""

    try:
        frame = sys._getframe(skip_frames)
    except ValueError:
        return None

    while frame is not None and _is_apromise_internal(frame.f_code.co_filename):
        frame = frame.f_back
    if frame is None:
        return None
    return CodeLocation(
        filename=frame.f_code.co_filename,
        line=frame.f_lineno,
        function=frame.f_code.co_name,
    )


__all__ = ["CodeLocation", "capture_creation_site"]
