# =============================================================================
# tests/test_type_inference.py - Type Inference Tests
# =============================================================================
# Tests for the type checker registry, column inference and coercion
# (lib/type_inference.py).
#
# Run with: poetry run pytest tests/test_type_inference.py -v
# =============================================================================

import pandas as pd
import pytest

from core.models import PropertyType
from lib.type_inference import (
    DATETIME_FORMATS,
    MAX_INTEGER_LENGTH,
    TYPE_CHECKERS,
    CoercionError,
    TypeChecker,
    get_checker,
    infer_column_type,
    infer_types,
    ordered_checkers,
    parse_datetime,
    register_checker,
    sample_rows,
)


def column(*values) -> pd.Series:
    return pd.Series(list(values), dtype=object)


# =============================================================================
# Registry Tests
# =============================================================================

class TestRegistry:
    """Tests for the ordered checker registry."""

    def test_precedence_order(self):
        order = [checker.property_type for checker in ordered_checkers()]

        assert order == [
            PropertyType.BOOLEAN,
            PropertyType.INTEGER,
            PropertyType.NUMBER,
            PropertyType.DATETIME,
            PropertyType.STRING,
        ]

    def test_unknown_has_no_checker(self):
        assert get_checker(PropertyType.UNKNOWN) is None

    def test_duplicate_registration_is_rejected(self):
        class AnotherString(TypeChecker):
            property_type = PropertyType.STRING

        with pytest.raises(ValueError):
            register_checker(AnotherString)

        assert type(TYPE_CHECKERS[PropertyType.STRING]).__name__ == "StringChecker"


# =============================================================================
# Coercion Tests
# =============================================================================

class TestCoercion:
    """Tests for the individual checkers' coerce()."""

    @pytest.mark.parametrize("raw,expected", [
        ("true", True), ("T", True), ("Yes", True), ("y", True),
        ("FALSE", False), ("f", False), ("no", False), ("N", False),
    ])
    def test_boolean_literals(self, raw, expected):
        assert get_checker(PropertyType.BOOLEAN).coerce(raw) is expected

    @pytest.mark.parametrize("raw", ["1", "0", "on", "maybe"])
    def test_boolean_rejects_other_values(self, raw):
        with pytest.raises(CoercionError):
            get_checker(PropertyType.BOOLEAN).coerce(raw)

    @pytest.mark.parametrize("raw,expected", [
        ("17", 17), ("-3", -3), ("+4", 4), ("007", 7),
    ])
    def test_integers(self, raw, expected):
        assert get_checker(PropertyType.INTEGER).coerce(raw) == expected

    @pytest.mark.parametrize("raw", ["1.5", "1e3", "12a", "1 000"])
    def test_integer_rejects_non_integers(self, raw):
        with pytest.raises(CoercionError):
            get_checker(PropertyType.INTEGER).coerce(raw)

    def test_integer_rejects_oversized_values(self):
        huge = "9" * 5000

        with pytest.raises(CoercionError):
            get_checker(PropertyType.INTEGER).coerce(huge)

        assert get_checker(PropertyType.INTEGER).coerce("9" * MAX_INTEGER_LENGTH) > 0

    @pytest.mark.parametrize("raw,expected", [
        ("3.14", 3.14), ("-0.5", -0.5), (".5", 0.5), ("1e3", 1000.0), ("10", 10.0),
    ])
    def test_numbers(self, raw, expected):
        assert get_checker(PropertyType.NUMBER).coerce(raw) == expected

    @pytest.mark.parametrize("raw", ["nan", "inf", "1e999", "1,5", "abc"])
    def test_number_rejects_non_finite_and_text(self, raw):
        with pytest.raises(CoercionError):
            get_checker(PropertyType.NUMBER).coerce(raw)

    def test_coercion_error_message(self):
        with pytest.raises(CoercionError) as exc_info:
            get_checker(PropertyType.INTEGER).coerce("abc")

        assert exc_info.value.message == "cannot parse 'abc' as integer"
        assert exc_info.value.raw == "abc"
        assert exc_info.value.property_type == PropertyType.INTEGER


class TestParseDatetime:
    """Tests for parse_datetime()."""

    @pytest.mark.parametrize("raw,expected", [
        ("2024-03-15", "2024-03-15"),
        ("2024-03-15T08:30:00", "2024-03-15T08:30:00"),
        ("2024-03-15 08:30:00", "2024-03-15T08:30:00"),
        ("2024/03/15", "2024-03-15"),
        ("03/15/2024", "2024-03-15"),
        ("15.03.2024", "2024-03-15"),
        ("15-Mar-2024", "2024-03-15"),
        ("Mar 15, 2024", "2024-03-15"),
    ])
    def test_supported_formats(self, raw, expected):
        assert parse_datetime(raw) == expected

    def test_keeps_timezone_offset(self):
        assert parse_datetime("2024-03-15T08:30:00+0200") == "2024-03-15T08:30:00+02:00"

    @pytest.mark.parametrize("raw", ["15-mar-2024", "15-MAR-2024", "mar 15, 2024"])
    def test_month_names_ignore_case(self, raw):
        assert parse_datetime(raw) == "2024-03-15"

    def test_formats_do_not_depend_on_locale(self):
        # %a, %A, %b, %B and %p follow LC_TIME
        locale_directives = ("%a", "%A", "%b", "%B", "%p", "%c", "%x", "%X")

        assert not any(
            directive in fmt for fmt in DATETIME_FORMATS for directive in locale_directives
        )

    @pytest.mark.parametrize("raw", [
        "2024-13-01", "yesterday", "12", "", "15-Foo-2024", "Feb 30, 2024",
    ])
    def test_rejects_non_dates(self, raw):
        assert parse_datetime(raw) is None


# =============================================================================
# Inference Tests
# =============================================================================

class TestInferColumnType:
    """Tests for infer_column_type()."""

    def test_booleans(self):
        assert infer_column_type(column("true", "FALSE", "yes", "n")) == PropertyType.BOOLEAN

    def test_integers(self):
        assert infer_column_type(column("1", "0", "-42")) == PropertyType.INTEGER

    def test_integers_widen_to_number(self):
        assert infer_column_type(column("1", "2.5", "3")) == PropertyType.NUMBER

    def test_datetimes(self):
        assert infer_column_type(column("2024-01-01", "2024-02-29")) == PropertyType.DATETIME

    def test_mixed_values_fall_back_to_string(self):
        assert infer_column_type(column("1", "Alabama", "true")) == PropertyType.STRING

    def test_empty_values_are_ignored(self):
        assert infer_column_type(column("", "12", "  ", None, "7")) == PropertyType.INTEGER

    def test_no_values_is_unknown(self):
        assert infer_column_type(column("", "  ")) == PropertyType.UNKNOWN
        assert infer_column_type(column()) == PropertyType.UNKNOWN

    def test_surrounding_whitespace_is_ignored(self):
        assert infer_column_type(column(" 1 ", "2")) == PropertyType.INTEGER

    def test_oversized_integer_is_not_integer(self):
        assert infer_column_type(column("1", "9" * 5000)) == PropertyType.STRING


class TestSampling:
    """Tests for sample_rows() and infer_types()."""

    def test_samples_across_files_up_to_limit(self, write_csv):
        a = write_csv("a.csv", "id,name\n1,Ann\n2,Bob\n")
        b = write_csv("b.csv", "id,name\n3,Cy\n4,Di\n")

        sample = sample_rows(("id", "name"), [str(a), str(b)], sample_size=3)

        assert len(sample) == 3
        assert list(sample[0]) == ["1", "2", "3"]

    def test_rows_with_wrong_width_are_left_out(self, write_csv):
        path = write_csv("a.csv", "id,name\n1,Ann\noops\n2,Bob,extra\n3,Cy\n")

        sample = sample_rows(("id", "name"), [str(path)])

        assert list(sample[0]) == ["1", "3"]

    def test_unreadable_files_are_skipped(self, tmp_path, write_csv):
        path = write_csv("a.csv", "id\n1\n")

        sample = sample_rows(("id",), [str(tmp_path / "gone.csv"), str(path)])

        assert list(sample[0]) == ["1"]

    def test_undecodable_lines_are_left_out(self, write_csv):
        path = write_csv("a.csv", b"id,name\n1,Ann\n2,\xffBob\n3,Cy\n")

        sample = sample_rows(("id", "name"), [str(path)])

        assert list(sample[0]) == ["1", "3"]

    def test_duplicate_header_names_stay_distinct(self, write_csv):
        path = write_csv("a.csv", "id,id\n1,x\n")

        types = infer_types(("id", "id"), [str(path)])

        assert types == [PropertyType.INTEGER, PropertyType.STRING]

    def test_infer_types_per_column(self, write_csv):
        path = write_csv(
            "a.csv",
            "id,name,score,active,joined,notes\n"
            "1,Ann,9.5,true,2024-01-02,\n"
            "2,Bob,7,false,2024-02-03,\n",
        )

        types = infer_types(
            ("id", "name", "score", "active", "joined", "notes"), [str(path)]
        )

        assert types == [
            PropertyType.INTEGER,
            PropertyType.STRING,
            PropertyType.NUMBER,
            PropertyType.BOOLEAN,
            PropertyType.DATETIME,
            PropertyType.UNKNOWN,
        ]

    def test_header_only_files_are_unknown(self, write_csv):
        path = write_csv("a.csv", "id,name\n")

        types = infer_types(("id", "name"), [str(path)])

        assert types == [PropertyType.UNKNOWN, PropertyType.UNKNOWN]
