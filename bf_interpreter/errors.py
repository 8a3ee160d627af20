"""
Error types shared by the loader, the tape and the engine.

Every error is raised where it is detected and never retried. Callers
(normally the CLI) catch the specific class and report one line.
"""

from __future__ import annotations


class BFError(Exception):
    """Base class for all interpreter errors."""


class StructuralError(BFError):
    """Unmatched bracket found while validating the source."""

    def __init__(self, message: str, line: int, bracket: str):
        self.line = line
        self.bracket = bracket
        super().__init__(f"{message} '{bracket}' on line {line}")


class ResourceError(BFError):
    """Memory could not be allocated for the source, program or tape."""

    def __init__(self, message: str = "Insufficient memory"):
        super().__init__(message)


class SourceReadError(BFError):
    def __init__(self, path: str, reason: str = ""):
        self.path = path
        self.reason = reason
        detail = f": {reason}" if reason else ""
        super().__init__(f"Could not read file \"{path}\"{detail}")
