# =============================================================================
# lib/record_streamer.py - Record Validation and Streaming
# =============================================================================
# Turns the rows of a schema's member files into published Records.
#
# Per call the streamer walks the files in the order stored in the schema:
#
#   Opening(file) -> StreamingRows(file) -> next file | done
#
# Every data row produces exactly one Record. Values are coerced to their
# property's type with the same checkers used for inference. A row that does
# not fit is still published, flagged invalid, with the failing positions
# set to null and an error naming the property and its raw value.
#
# Failures are contained at the narrowest scope:
#   - bad value     -> invalid record, stream continues
#   - bad bytes     -> invalid record with all values null, stream continues
#   - bad file      -> file skipped with a warning, stream continues
#   - no good files -> PublishError once nothing at all could be read
#
# The producer checks `is_cancelled()` between rows and closes the open file
# as soon as the consumer goes away or the process is shutting down.
# =============================================================================

import logging
from contextlib import closing
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Sequence

from core.models.schema import Property, PropertyType, Record
from lib.csv_reader import FileError, FileErrorKind, iter_rows, read_header
from lib.type_inference import CoercionError, get_checker
from lib.utils import EngineError

logger = logging.getLogger(__name__)

# Types published as the raw text without validation
PASSTHROUGH_TYPES = frozenset({PropertyType.STRING, PropertyType.UNKNOWN})

ERROR_SEPARATOR = "; "


class PublishError(EngineError):
    """Raised when none of a schema's files could be read."""

    def __init__(self, files: list[str]):
        super().__init__(
            f"None of the {len(files)} files for this schema could be read",
            code="NO_READABLE_FILES",
            suggestion="Check that the files still exist and run Discover again if they moved",
            details={"files": files},
        )
        self.files = files


@dataclass
class PublishStats:
    """Counters for one publish call, filled in while streaming."""

    records: int = 0
    invalid_records: int = 0
    files_read: int = 0
    files_skipped: int = 0
    cancelled: bool = False


def _never_cancelled() -> bool:
    return False


# =============================================================================
# Row Validation
# =============================================================================

def coerce_value(prop: Property, raw: str) -> Any:
    """
    Convert one raw CSV value to its property's JSON type.

    Empty values become None for typed columns and stay "" for string or
    untyped columns.

    Raises:
        CoercionError: If the value does not parse as the property's type
    """
    checker = get_checker(prop.type)
    if checker is None or prop.type in PASSTHROUGH_TYPES:
        return raw

    stripped = raw.strip()
    if not stripped:
        return None
    return checker.coerce(stripped)


def build_record(
    properties: Sequence[Property],
    values: list[str],
    line_number: int | None = None,
) -> Record:
    """
    Validate one row against the schema and build its Record.

    Args:
        properties: Schema properties in column order
        values: Raw values from the CSV row
        line_number: Source line, used in column-count errors

    Returns:
        A Record with one data entry per property
    """
    errors: list[str] = []

    if len(values) != len(properties):
        where = f"line {line_number}: " if line_number is not None else ""
        errors.append(f"{where}expected {len(properties)} values, found {len(values)}")

    data: list[Any] = []
    for position, prop in enumerate(properties):
        if position >= len(values):
            data.append(None)
            continue

        raw = values[position]
        try:
            data.append(coerce_value(prop, raw))
        except CoercionError as e:
            errors.append(f"{prop.name}: cannot parse '{raw}' as {e.property_type.value}")
            data.append(None)

    return Record(
        invalid=bool(errors),
        error=ERROR_SEPARATOR.join(errors),
        data=tuple(data),
    )


def undecodable_record(properties: Sequence[Property], line_number: int, reason: str) -> Record:
    """Invalid Record for a line whose bytes are not valid UTF-8; every value is null."""
    return Record(
        invalid=True,
        error=f"line {line_number}: {reason}",
        data=(None,) * len(properties),
    )


# =============================================================================
# Streaming
# =============================================================================

def stream_records(
    properties: Sequence[Property],
    files: list[str],
    is_cancelled: Callable[[], bool] = _never_cancelled,
    stats: PublishStats | None = None,
) -> Iterator[Record]:
    """
    Yield one Record per data row across `files`, file order then row order.

    Args:
        properties: Schema properties in column order
        files: Member files, in the order to publish them
        is_cancelled: Polled between rows; streaming stops when it returns True
        stats: Optional counters updated as records are produced

    Yields:
        Record for every data row

    Raises:
        PublishError: If files were given but none of them could be read
    """
    stats = stats if stats is not None else PublishStats()
    expected_header = [prop.name for prop in properties]

    for path in files:
        if is_cancelled():
            stats.cancelled = True
            logger.info(f"Publish cancelled before opening {path}")
            return

        # Opening
        try:
            header = read_header(path)
        except FileError as e:
            stats.files_skipped += 1
            logger.warning(f"Skipping {path}: {e.message}")
            continue

        if header != expected_header:
            logger.warning(
                f"Header of {path} no longer matches the schema "
                f"(expected {expected_header}, found {header}); rows are validated as is"
            )

        # StreamingRows
        try:
            with closing(iter_rows(path)) as rows:
                for row in rows:
                    if is_cancelled():
                        stats.cancelled = True
                        logger.info(f"Publish cancelled at {path}:{row.line_number}")
                        return

                    if row.decode_error:
                        record = undecodable_record(properties, row.line_number, row.decode_error)
                    else:
                        record = build_record(properties, row.values, row.line_number)
                    stats.records += 1
                    if record.invalid:
                        stats.invalid_records += 1
                        logger.debug(f"Invalid row {path}:{row.line_number}: {record.error}")
                    yield record
        except FileError as e:
            if e.kind == FileErrorKind.TRUNCATED:
                # Rows before the failure were already published
                stats.files_read += 1
            else:
                stats.files_skipped += 1
            logger.warning(f"Stopped reading {path}: {e.message}")
            continue

        stats.files_read += 1
        logger.debug(f"Finished {path}")

    if files and stats.files_read == 0:
        raise PublishError(files)
