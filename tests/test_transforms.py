"""
Unit tests for the value transformations.
"""

from __future__ import annotations

from datetime import date, datetime

import pytest

from column_mapper.config import MappingConfig, NumberFormat
from column_mapper.transforms import (
    apply_transform,
    compile_date_format,
    normalize_text,
    parse_date,
    parse_number,
)


# ======================================================================
# Numbers
# ======================================================================

class TestParseNumber:
    @pytest.mark.parametrize("raw,expected", [
        ("1.234,56", 1234.56),
        ("1234", 1234.0),
        ("-1.234,56", -1234.56),
        ("1.234.567", 1234567.0),
        ("1.234", 1234.0),
        ("1.5", 1.5),
        ("R$ 1.234,56", 1234.56),
        ("(1.234,50)", -1234.50),
        ("0,5", 0.5),
    ])
    def test_brazilian_format(self, raw: str, expected: float) -> None:
        assert parse_number(raw, ",", ".") == pytest.approx(expected)

    def test_english_format(self) -> None:
        assert parse_number("1,234.56", ".", ",") == pytest.approx(1234.56)
        assert parse_number("1,234,567", ".", ",") == pytest.approx(1234567.0)

    def test_unparseable_returns_none(self) -> None:
        assert parse_number("abc", ",", ".") is None
        assert parse_number("", ",", ".") is None
        assert parse_number("   ", ",", ".") is None

    def test_native_numbers_pass_through(self) -> None:
        assert parse_number(42) == 42
        assert parse_number(-3.5) == -3.5

    def test_bool_rejected(self) -> None:
        assert parse_number(True) is None

    def test_deterministic(self) -> None:
        assert parse_number("9.876,54") == parse_number("9.876,54")


# ======================================================================
# Dates
# ======================================================================

FORMATS = ("DD/MM/YYYY", "YYYY-MM-DD")


class TestParseDate:
    def test_format_candidate(self) -> None:
        assert parse_date("31/01/2024", FORMATS) == date(2024, 1, 31)

    def test_iso(self) -> None:
        assert parse_date("2024-01-31", FORMATS) == date(2024, 1, 31)

    def test_iso_without_candidates(self) -> None:
        assert parse_date("2024-01-31") == date(2024, 1, 31)

    def test_iso_datetime(self) -> None:
        assert parse_date("2024-01-31T10:30:00") == datetime(2024, 1, 31, 10, 30)

    def test_not_a_date(self) -> None:
        assert parse_date("not-a-date", FORMATS) is None
        assert parse_date("", FORMATS) is None

    def test_first_listed_format_wins(self) -> None:
        assert parse_date("03/04/2024", ("DD/MM/YYYY", "MM/DD/YYYY")) == date(2024, 4, 3)
        assert parse_date("03/04/2024", ("MM/DD/YYYY", "DD/MM/YYYY")) == date(2024, 3, 4)

    def test_invalid_calendar_date_falls_through(self) -> None:
        assert parse_date("02/25/2024", ("DD/MM/YYYY", "MM/DD/YYYY")) == date(2024, 2, 25)

    def test_no_rollover(self) -> None:
        assert parse_date("31/02/2024", ("DD/MM/YYYY", "MM/DD/YYYY")) is None

    def test_leap_day(self) -> None:
        assert parse_date("29/02/2024", FORMATS) == date(2024, 2, 29)
        assert parse_date("29/02/2023", FORMATS) is None

    def test_slash_iso_order(self) -> None:
        assert parse_date("2024/01/31", ("YYYY/MM/DD",)) == date(2024, 1, 31)

    def test_date_objects_pass_through(self) -> None:
        d = date(2024, 5, 1)
        assert parse_date(d, FORMATS) is d

    def test_unsupported_token_skipped(self) -> None:
        assert compile_date_format("Q1-YYYY") is None
        assert parse_date("31.01.2024", ("Q1-YYYY", "DD.MM.YYYY")) == date(2024, 1, 31)

    @pytest.mark.parametrize("raw,expected", [
        ("2024", date(2024, 1, 1)),
        ("2024-01", date(2024, 1, 1)),
        ("2024/11", date(2024, 11, 1)),
        (2024, date(2024, 1, 1)),
        (2024.0, date(2024, 1, 1)),
    ])
    def test_reduced_precision_period(self, raw, expected: date) -> None:
        assert parse_date(raw, FORMATS) == expected

    def test_reduced_precision_out_of_range(self) -> None:
        assert parse_date("2024-13", FORMATS) is None
        assert parse_date("0000", FORMATS) is None
        assert parse_date(True, FORMATS) is None


# ======================================================================
# Text
# ======================================================================

class TestNormalizeText:
    def test_trim_and_collapse(self) -> None:
        assert normalize_text("  Caixa \t  Geral ") == "Caixa Geral"

    def test_invisible_characters(self) -> None:
        assert normalize_text("\ufeffACME\u200b") == "ACME"

    def test_none_is_empty(self) -> None:
        assert normalize_text(None) == ""

    def test_non_string(self) -> None:
        assert normalize_text(1001) == "1001"


# ======================================================================
# Dispatch
# ======================================================================

class TestApplyTransform:
    def test_uses_config_separators(self) -> None:
        config = MappingConfig(number_format=NumberFormat(".", ","))
        assert apply_transform("1,234.56", "parse_number", config) == pytest.approx(1234.56)

    def test_uses_config_date_formats(self) -> None:
        config = MappingConfig(date_formats=("MM/DD/YYYY",))
        assert apply_transform("03/04/2024", "parse_date", config) == date(2024, 3, 4)

    def test_camel_case_alias(self) -> None:
        assert apply_transform(" a  b ", "normalizeText", MappingConfig()) == "a b"

    def test_unknown_transform_passes_through(self) -> None:
        assert apply_transform("x", "uppercase", MappingConfig()) == "x"
