# =============================================================================
# lib/type_inference.py - Column Type Inference and Coercion
# =============================================================================
# CSV files carry no type information, so the plugin samples data rows and
# picks, for every column, the most specific type that explains all of the
# sampled values.
#
# Candidate types are TypeChecker classes held in an ordered registry. The
# order is the precedence, most specific first:
#
#   boolean -> integer -> number -> datetime -> string
#
# A column gets the first type that every non-empty sample satisfies. Empty
# values are ignored. A column with no non-empty samples is "unknown".
#
# The same checkers coerce raw values at publish time, so inference and
# validation can never disagree about what a value means. Adding a type
# (uuid, currency, ...) is one new registered class.
# =============================================================================

import logging
import math
import re
from contextlib import closing
from datetime import date, datetime
from typing import Any

import pandas as pd

from core.models.schema import PropertyType
from lib.csv_reader import FileError, iter_rows
from lib.utils import EngineError

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

DEFAULT_SAMPLE_SIZE = 1000

TRUE_LITERALS = frozenset({"true", "t", "yes", "y"})
FALSE_LITERALS = frozenset({"false", "f", "no", "n"})

INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")
NUMBER_PATTERN = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")

# Python's default limit for str -> int conversion (sys.get_int_max_str_digits)
MAX_INTEGER_LENGTH = 4300

# Tried in order; the first format that parses wins
DATETIME_FORMATS = [
    "%Y-%m-%d",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y-%m-%d %H:%M:%S.%f",
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y-%m-%d %H:%M:%S%z",
    "%Y-%m-%dT%H:%M",
    "%Y-%m-%d %H:%M",
    "%Y/%m/%d",
    "%Y/%m/%d %H:%M:%S",
    "%m/%d/%Y",
    "%m/%d/%Y %H:%M",
    "%m/%d/%Y %H:%M:%S",
    "%d.%m.%Y",
]

# Dates with English month abbreviations ("15-Mar-2024", "Mar 15, 2024").
# Matched here rather than with strptime's %b, which follows LC_TIME.
MONTH_ABBREVIATIONS = {
    name: number
    for number, name in enumerate(
        ["jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov", "dec"],
        start=1,
    )
}
MONTH_NAME_PATTERNS = [
    re.compile(r"(?P<day>[0-9]{1,2})-(?P<month>[A-Za-z]{3})-(?P<year>[0-9]{4})"),
    re.compile(r"(?P<month>[A-Za-z]{3}) (?P<day>[0-9]{1,2}), (?P<year>[0-9]{4})"),
]


class CoercionError(EngineError):
    """Raised when a raw CSV value cannot be read as a property's type."""

    def __init__(self, raw: str, property_type: PropertyType):
        super().__init__(
            f"cannot parse '{raw}' as {property_type.value}",
            code="COERCION_FAILED",
            details={"raw": raw, "type": property_type.value},
        )
        self.raw = raw
        self.property_type = property_type


# =============================================================================
# Checker Registry
# =============================================================================

# Global registry: property type -> checker instance
TYPE_CHECKERS: dict[PropertyType, "TypeChecker"] = {}


def register_checker(cls: type["TypeChecker"]) -> type["TypeChecker"]:
    """
    Decorator to register a type checker.

    Usage:
        @register_checker
        class UuidChecker(TypeChecker):
            property_type = PropertyType.UUID
            precedence = 35
            ...

    Lower precedence values are tried first during inference.
    """
    if cls.property_type in TYPE_CHECKERS:
        raise ValueError(f"Checker for '{cls.property_type.value}' is already registered")

    TYPE_CHECKERS[cls.property_type] = cls()
    return cls


def ordered_checkers() -> list["TypeChecker"]:
    """All registered checkers, most specific first."""
    return sorted(TYPE_CHECKERS.values(), key=lambda checker: checker.precedence)


def get_checker(property_type: PropertyType) -> "TypeChecker | None":
    """Checker for a type, or None when values are passed through untouched."""
    return TYPE_CHECKERS.get(property_type)


class TypeChecker:
    """
    Base class for one candidate type.

    Subclasses implement coerce(); matches() is derived from it and can be
    overridden with a vectorized version for speed.
    """

    property_type: PropertyType = PropertyType.STRING
    precedence: int = 100

    def coerce(self, raw: str) -> Any:
        """Convert a stripped, non-empty raw value; raise CoercionError on failure."""
        raise NotImplementedError

    def accepts(self, raw: str) -> bool:
        try:
            self.coerce(raw)
        except CoercionError:
            return False
        return True

    def mask(self, values: pd.Series) -> pd.Series:
        """Boolean Series: which values this type can represent.

        `values` must be stripped, non-empty strings (no NaN).
        """
        return values.map(self.accepts).astype(bool)

    def matches(self, values: pd.Series) -> bool:
        """True when every value in `values` is acceptable for this type."""
        return bool(self.mask(values).all())


@register_checker
class BooleanChecker(TypeChecker):
    """Exact, case-insensitive match against a fixed set of literals."""

    property_type = PropertyType.BOOLEAN
    precedence = 10

    def coerce(self, raw: str) -> bool:
        lowered = raw.lower()
        if lowered in TRUE_LITERALS:
            return True
        if lowered in FALSE_LITERALS:
            return False
        raise CoercionError(raw, self.property_type)

    def mask(self, values: pd.Series) -> pd.Series:
        return values.str.lower().isin(TRUE_LITERALS | FALSE_LITERALS)


@register_checker
class IntegerChecker(TypeChecker):
    """Whole numbers: optional sign and digits, no fraction or exponent."""

    property_type = PropertyType.INTEGER
    precedence = 20

    def coerce(self, raw: str) -> int:
        if not INTEGER_PATTERN.fullmatch(raw) or len(raw) > MAX_INTEGER_LENGTH:
            raise CoercionError(raw, self.property_type)
        try:
            return int(raw)
        except ValueError:
            # Interpreter configured with a lower int conversion limit
            raise CoercionError(raw, self.property_type) from None

    def mask(self, values: pd.Series) -> pd.Series:
        matches = values.str.fullmatch(INTEGER_PATTERN.pattern).astype(bool)
        return matches & (values.str.len() <= MAX_INTEGER_LENGTH)


@register_checker
class NumberChecker(TypeChecker):
    """Any standard decimal or exponent literal with a finite value."""

    property_type = PropertyType.NUMBER
    precedence = 30

    def coerce(self, raw: str) -> float:
        if not NUMBER_PATTERN.fullmatch(raw):
            raise CoercionError(raw, self.property_type)
        value = float(raw)
        # "1e999" parses to inf, which has no JSON representation
        if not math.isfinite(value):
            raise CoercionError(raw, self.property_type)
        return value


@register_checker
class DatetimeChecker(TypeChecker):
    """Dates and timestamps in one of DATETIME_FORMATS; published as ISO-8601."""

    property_type = PropertyType.DATETIME
    precedence = 40

    def coerce(self, raw: str) -> str:
        parsed = parse_datetime(raw)
        if parsed is None:
            raise CoercionError(raw, self.property_type)
        return parsed


@register_checker
class StringChecker(TypeChecker):
    """Always matches; values are published as the raw text."""

    property_type = PropertyType.STRING
    precedence = 100

    def coerce(self, raw: str) -> str:
        return raw

    def mask(self, values: pd.Series) -> pd.Series:
        return pd.Series(True, index=values.index)


def _parse_month_name_date(raw: str) -> str | None:
    for pattern in MONTH_NAME_PATTERNS:
        match = pattern.fullmatch(raw)
        if not match:
            continue
        month = MONTH_ABBREVIATIONS.get(match["month"].lower())
        if month is None:
            return None
        try:
            return date(int(match["year"]), month, int(match["day"])).isoformat()
        except ValueError:
            return None
    return None


def parse_datetime(raw: str) -> str | None:
    """
    Parse a date/time string against DATETIME_FORMATS, then against the
    English month-name forms in MONTH_NAME_PATTERNS.

    Returns:
        ISO-8601 text (date only when the format has no time part),
        or None if no format matches

    Example:
        parse_datetime("03/15/2024")           # "2024-03-15"
        parse_datetime("2024-03-15 08:30:00")  # "2024-03-15T08:30:00"
        parse_datetime("Mar 15, 2024")         # "2024-03-15"
    """
    for fmt in DATETIME_FORMATS:
        try:
            parsed = datetime.strptime(raw, fmt)
        except ValueError:
            continue
        if "%H" in fmt:
            return parsed.isoformat()
        return parsed.date().isoformat()
    return _parse_month_name_date(raw)


# =============================================================================
# Inference
# =============================================================================

def infer_column_type(values: pd.Series) -> PropertyType:
    """
    Infer the most specific type explaining every non-empty value.

    Args:
        values: Raw sampled values for one column

    Returns:
        The first PropertyType (in precedence order) whose checker accepts
        all non-empty values, or UNKNOWN if there are none
    """
    cleaned = values.dropna().astype(str).str.strip()
    cleaned = cleaned[cleaned != ""]

    if cleaned.empty:
        return PropertyType.UNKNOWN

    for checker in ordered_checkers():
        if checker.matches(cleaned):
            return checker.property_type

    return PropertyType.STRING


def sample_rows(
    header: tuple[str, ...] | list[str],
    files: list[str],
    sample_size: int = DEFAULT_SAMPLE_SIZE,
) -> pd.DataFrame:
    """
    Collect up to `sample_size` data rows across a schema's files.

    Files are read in order. Rows whose column count differs from the
    header, and lines that are not valid UTF-8, are left out. Unreadable
    files are skipped with a warning.

    Returns:
        DataFrame of raw strings with positional (integer) columns, so
        duplicate header names stay distinct
    """
    width = len(header)
    rows: list[list[str]] = []

    for path in files:
        if len(rows) >= sample_size:
            break
        try:
            with closing(iter_rows(path)) as file_rows:
                for row in file_rows:
                    if row.decode_error or len(row.values) != width:
                        continue
                    rows.append(row.values)
                    if len(rows) >= sample_size:
                        break
        except FileError as e:
            logger.warning(f"Skipping {path} while sampling: {e.message}")

    return pd.DataFrame(rows, columns=list(range(width)), dtype=object)


def infer_types(
    header: tuple[str, ...] | list[str],
    files: list[str],
    sample_size: int = DEFAULT_SAMPLE_SIZE,
) -> list[PropertyType]:
    """
    Infer one PropertyType per header column from sampled rows.

    Args:
        header: Column names shared by all files
        files: Member files of the schema, in order
        sample_size: Maximum number of rows to sample in total

    Returns:
        Types in column order
    """
    sample = sample_rows(header, files, sample_size)
    types = [infer_column_type(sample[position]) for position in range(len(header))]

    logger.debug(
        f"Inferred types from {len(sample)} sampled rows: "
        + ", ".join(f"{name}={t.value}" for name, t in zip(header, types))
    )
    return types
