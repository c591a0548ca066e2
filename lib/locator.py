# =============================================================================
# lib/locator.py - File Locator
# =============================================================================
# Expands the glob pattern from the discovery settings into the concrete set of
# candidate CSV files.
#
# Rules:
#   - "*" matches within one path segment, "**" matches across segments
#   - Only regular files that exist at match time are returned
#   - Paths are absolute, deduplicated and sorted (stable across runs)
#   - No matches is a valid result unless the caller asks otherwise
# =============================================================================

import glob
import logging
import os
from enum import Enum
from typing import Iterator

from lib.utils import EngineError, normalize_path

logger = logging.getLogger(__name__)


class DiscoveryErrorKind(str, Enum):
    """Why discovery produced nothing usable."""
    NO_MATCHES = "no_matches"                    # Glob matched no files
    NO_READABLE_HEADERS = "no_readable_headers"  # Files matched, none had a header


class DiscoveryError(EngineError):
    """Raised when discovery cannot produce any candidate files."""

    def __init__(self, kind: DiscoveryErrorKind, pattern: str):
        if kind == DiscoveryErrorKind.NO_MATCHES:
            message = f"No files match pattern: {pattern}"
            suggestion = "Check that the glob is an absolute path like /data/*/*.csv"
        else:
            message = f"No file matching {pattern} has a readable header"
            suggestion = "Check that the files are UTF-8 CSV files with a header row"

        super().__init__(
            message,
            code=f"DISCOVERY_{kind.value.upper()}",
            suggestion=suggestion,
            details={"pattern": pattern, "kind": kind.value},
        )
        self.kind = kind
        self.pattern = pattern


def iter_matches(pattern: str) -> Iterator[str]:
    """
    Lazily yield absolute paths of regular files matching a glob pattern.

    Duplicates (the same file reached through ".." segments or a symlinked
    directory) are yielded once, keyed by their real path. Order follows the
    filesystem; use locate_files() for a stable order.
    """
    if not pattern or not pattern.strip():
        return

    seen: set[str] = set()
    for match in glob.iglob(os.path.expanduser(pattern), recursive=True):
        path = normalize_path(match)
        # isfile() follows symlinks, so broken links and directories drop out
        if not os.path.isfile(path):
            continue
        real_path = os.path.realpath(path)
        if real_path in seen:
            continue
        seen.add(real_path)
        yield path


def locate_files(pattern: str, require_matches: bool = False) -> list[str]:
    """
    Resolve a glob pattern into a sorted list of candidate files.

    Args:
        pattern: Glob such as "/src/data/*/*.csv" or "/src/data/**/*.csv"
        require_matches: Raise DiscoveryError when nothing matches

    Returns:
        Sorted, deduplicated absolute file paths

    Raises:
        DiscoveryError: If require_matches is set and nothing matched
    """
    files = sorted(iter_matches(pattern))
    logger.info(f"Pattern {pattern!r} matched {len(files)} files")

    if not files and require_matches:
        raise DiscoveryError(DiscoveryErrorKind.NO_MATCHES, pattern)

    return files
