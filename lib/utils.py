# =============================================================================
# lib/utils.py - Shared Utilities
# =============================================================================
# Common utilities used across the engine: the base error class and the
# path normalization shared by discovery and publishing.
# =============================================================================

import os
from typing import Any


# =============================================================================
# Path Utilities
# =============================================================================

def normalize_path(path: str | os.PathLike) -> str:
    """
    Normalize a filesystem path to an absolute string.

    Expands a leading "~" and collapses redundant separators so that the same
    file always produces the same string, which matters for deduplication and
    for the file lists stored in schema settings.

    Example:
        normalize_path("~/data/../data/a.csv")  # "/home/me/data/a.csv"
    """
    return os.path.abspath(os.path.expanduser(os.fspath(path)))


# =============================================================================
# Base Error Class
# =============================================================================

class EngineError(Exception):
    """
    Base class for recoverable engine failures.

    Subclasses describe one failure category (a glob, a file, a value, a
    settings string) and are caught at the narrowest scope that can recover:
    a bad value becomes an invalid record, a bad file is skipped, and only a
    request that cannot be served at all reaches the RPC layer.

    Following the principle:
    "Errors should tell HOW to fix, not just WHAT failed."

    Attributes:
        code: Stable error code, e.g. "FILE_EMPTY_FILE"
        message: Human-readable description including the path or value
        suggestion: What the user can do about it
        details: Structured context for logs

    Example:
        raise FileError(FileErrorKind.EMPTY_FILE, "/data/a.csv", "no header line")
    """

    def __init__(
        self,
        message: str,
        code: str = "ENGINE_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        # Single line: these end up in log records
        if self.suggestion:
            return f"[{self.code}] {self.message} ({self.suggestion})"
        return f"[{self.code}] {self.message}"
