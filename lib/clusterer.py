# =============================================================================
# lib/clusterer.py - Schema Clustering
# =============================================================================
# Groups candidate files into schemas by structural identity: two files
# belong to the same schema when their headers are exactly equal, same names
# in the same order.
#
# Output is deterministic for a given file set:
#   - member paths within a group are sorted
#   - groups are ordered by their first member path
#   - names come from the files themselves where possible
#
# Naming (first rule that applies):
#   1. Common filename stem  - sales_2019.csv, sales_2020.csv -> "sales"
#   2. Shared directory name - /data/orders/a.csv, /data/orders/b.csv -> "orders"
#   3. Positional fallback   - "schema_3"
# Collisions within one response get a numeric suffix ("sales_2").
# =============================================================================

import logging
import os
from dataclasses import dataclass, field

from core.models.schema import CandidateFile

logger = logging.getLogger(__name__)

# Trailing digits and separators, e.g. "_2019-01-31", "-02", "3"
_TRAILING_SUFFIX_CHARS = "0123456789 ._-"
_EDGE_SEPARATORS = " ._-"

FALLBACK_PREFIX = "schema"


@dataclass
class SchemaGroup:
    """Files sharing one header, plus the name chosen for them."""

    header: tuple[str, ...]
    files: list[str] = field(default_factory=list)
    name: str = ""


# =============================================================================
# Naming Helpers
# =============================================================================

def file_stem(path: str) -> str:
    """
    Base filename with extension, numbering and date suffixes removed.

    Example:
        file_stem("/data/sales_2019-01.csv")  # "sales"
        file_stem("/data/2019.csv")           # ""
    """
    stem = os.path.splitext(os.path.basename(path))[0]
    stem = stem.rstrip(_TRAILING_SUFFIX_CHARS)
    return stem.strip(_EDGE_SEPARATORS)


def suggest_name(files: list[str]) -> str | None:
    """
    Derive a human-stable name from a group's member files.

    Returns None when the files share neither a stem nor a directory.
    """
    stems = {file_stem(path) for path in files}
    if len(stems) == 1:
        stem = stems.pop()
        if stem:
            return stem

    directories = {os.path.dirname(path) for path in files}
    if len(directories) == 1:
        directory = os.path.basename(directories.pop())
        if directory:
            return directory

    return None


def _unique_name(candidate: str, taken: set[str]) -> str:
    if candidate not in taken:
        return candidate
    suffix = 2
    while f"{candidate}_{suffix}" in taken:
        suffix += 1
    return f"{candidate}_{suffix}"


# =============================================================================
# Clustering
# =============================================================================

def cluster_files(candidates: list[CandidateFile]) -> list[SchemaGroup]:
    """
    Group candidate files by exact header equality and name each group.

    Args:
        candidates: Files with their parsed headers

    Returns:
        One SchemaGroup per distinct header, in a stable order
    """
    groups: dict[tuple[str, ...], SchemaGroup] = {}
    for candidate in candidates:
        group = groups.setdefault(candidate.header, SchemaGroup(header=candidate.header))
        if candidate.path not in group.files:
            group.files.append(candidate.path)

    ordered = sorted(groups.values(), key=lambda g: min(g.files))

    taken: set[str] = set()
    for position, group in enumerate(ordered, start=1):
        group.files.sort()
        candidate_name = suggest_name(group.files) or f"{FALLBACK_PREFIX}_{position}"
        group.name = _unique_name(candidate_name, taken)
        taken.add(group.name)
        logger.debug(
            f"Schema '{group.name}': {len(group.header)} columns, {len(group.files)} files"
        )

    logger.info(f"Clustered {len(candidates)} files into {len(ordered)} schemas")
    return ordered
