# =============================================================================
# lib/csv_reader.py - CSV Header and Row Reading
# =============================================================================
# Low-level reading of the CSV files the plugin works with. Files are
# comma-delimited, UTF-8, with a header line and one record per line.
#
# Two entry points:
#   - read_header(): parse only the first line into ordered column names
#   - iter_rows():   stream the data rows after the header
#
# Files are read as bytes and every line is decoded on its own, so a bad
# byte only affects the line it sits on: an undecodable header makes the
# file unreadable, an undecodable data row is reported as a CsvRow with
# `decode_error` set and the rows around it are still read.
#
# Every file is opened in a `with` block, so handles are released on every
# exit path, including a consumer that stops iterating early.
# =============================================================================

import codecs
import csv
import logging
from enum import Enum
from typing import Iterator, NamedTuple

from lib.utils import EngineError

logger = logging.getLogger(__name__)

ENCODING = "utf-8"
DELIMITER = ","

# Characters trimmed from both ends of a header name
HEADER_TRIM_CHARS = " \t\r\n\"'"


class FileErrorKind(str, Enum):
    """Per-file failure categories."""
    UNREADABLE = "unreadable"    # Could not open or decode the file
    EMPTY_FILE = "empty_file"    # No header line
    TRUNCATED = "truncated"      # Failed part-way through the data rows


class FileError(EngineError):
    """Raised when a single CSV file cannot be used."""

    def __init__(self, kind: FileErrorKind, path: str, cause: str):
        suggestions = {
            FileErrorKind.UNREADABLE: "Check that the file exists, is readable and is UTF-8 encoded",
            FileErrorKind.EMPTY_FILE: "Add a header row to the file or remove it from the glob",
            FileErrorKind.TRUNCATED: "Check whether the file is still being written or is corrupted",
        }
        super().__init__(
            f"{kind.value.replace('_', ' ').capitalize()} file {path}: {cause}",
            code=f"FILE_{kind.value.upper()}",
            suggestion=suggestions[kind],
            details={"path": path, "kind": kind.value, "cause": cause},
        )
        self.kind = kind
        self.path = path
        self.cause = cause


class CsvRow(NamedTuple):
    """
    One data line of a CSV file.

    `values` is empty and `decode_error` explains why when the line is not
    valid UTF-8.
    """

    line_number: int
    values: list[str]
    decode_error: str | None = None


def parse_line(line: str) -> list[str]:
    """
    Split one CSV line into raw values.

    Quoted values may contain commas; embedded newlines are not supported.

    Example:
        parse_line('1,"Smith, Ann",true')  # ["1", "Smith, Ann", "true"]
    """
    return next(csv.reader([line], delimiter=DELIMITER), [])


def clean_header_name(name: str) -> str:
    """Trim surrounding whitespace and quote characters from a header name."""
    return name.strip(HEADER_TRIM_CHARS)


def decode_line(raw: bytes) -> str:
    """Decode one line without its line break. Raises UnicodeDecodeError."""
    return raw.rstrip(b"\r\n").decode(ENCODING)


def _decode_header(raw: bytes) -> str:
    if raw.startswith(codecs.BOM_UTF8):
        raw = raw[len(codecs.BOM_UTF8):]
    return decode_line(raw)


def read_header(path: str) -> list[str]:
    """
    Read and parse the header row of a CSV file.

    Column order is preserved. Duplicate and empty names are kept in place.
    A leading UTF-8 byte order mark is ignored.

    Args:
        path: Path to the CSV file

    Returns:
        Ordered list of column names

    Raises:
        FileError: UNREADABLE on I/O errors or an undecodable header line,
            EMPTY_FILE if there is no header line
    """
    try:
        with open(path, "rb") as f:
            first_line = _decode_header(f.readline())
    except (OSError, UnicodeDecodeError) as e:
        raise FileError(FileErrorKind.UNREADABLE, path, str(e)) from e

    if not first_line.strip():
        raise FileError(FileErrorKind.EMPTY_FILE, path, "no header line")

    header = [clean_header_name(name) for name in parse_line(first_line)]
    logger.debug(f"Header for {path}: {header}")
    return header


def iter_rows(path: str) -> Iterator[CsvRow]:
    """
    Stream the data rows of a CSV file.

    Yields a CsvRow for every non-blank line after the header. Line numbers
    are 1-based and count the header as line 1. A line that is not valid
    UTF-8 is yielded with `decode_error` set; reading goes on after it.

    Raises:
        FileError: UNREADABLE if the file cannot be opened or its header
            line cannot be read, TRUNCATED on an I/O error after rows started
    """
    try:
        f = open(path, "rb")
    except OSError as e:
        raise FileError(FileErrorKind.UNREADABLE, path, str(e)) from e

    with f:
        try:
            header_line = f.readline()
        except OSError as e:
            raise FileError(FileErrorKind.UNREADABLE, path, str(e)) from e

        if not header_line:
            return

        line_number = 1
        while True:
            try:
                raw = f.readline()
            except OSError as e:
                raise FileError(
                    FileErrorKind.TRUNCATED, path, f"after line {line_number}: {e}"
                ) from e

            if not raw:
                return

            line_number += 1
            if not raw.strip():
                continue

            try:
                line = decode_line(raw)
            except UnicodeDecodeError as e:
                logger.debug(f"Undecodable line {path}:{line_number}: {e}")
                yield CsvRow(line_number, [], f"not valid UTF-8 ({e.reason} at byte {e.start})")
                continue

            yield CsvRow(line_number, parse_line(line))
