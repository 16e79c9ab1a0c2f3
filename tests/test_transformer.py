"""
Unit tests for the ValueTransformer.
"""

from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from column_mapper.config import MappingConfig, NumberFormat
from column_mapper.pipeline import resolve_mapping
from column_mapper.registry import NORMALIZE_TEXT, PARSE_DATE, PARSE_NUMBER
from column_mapper.schema import Column, ColumnMapping, ColumnType
from column_mapper.transformer import IMPORT_SOURCE, ValueTransformer

FIXED_NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def transformer() -> ValueTransformer:
    return ValueTransformer(clock=lambda: FIXED_NOW)


@pytest.fixture
def mappings() -> list[ColumnMapping]:
    return [
        ColumnMapping("Empresa", 0, "entity", 0.9, NORMALIZE_TEXT),
        ColumnMapping("Conta", 1, "account", 1.0, NORMALIZE_TEXT),
        ColumnMapping("Valor", 2, "value", 0.8, PARSE_NUMBER),
        ColumnMapping("Data", 3, "period", 0.9, PARSE_DATE),
    ]


ROWS = [
    [" ACME ", "1.01.001", "1.234,56", "31/01/2024"],
    ["ACME", "1.02.002", "-500,00", "2024-02-29"],
]


# ======================================================================
# Record construction
# ======================================================================

class TestApply:
    def test_one_record_per_row_in_order(
        self, transformer: ValueTransformer, mappings: list[ColumnMapping]
    ) -> None:
        records = transformer.apply(ROWS, mappings)
        assert len(records) == 2
        assert records[0]["account"] == "1.01.001"
        assert records[1]["account"] == "1.02.002"

    def test_values_transformed(
        self, transformer: ValueTransformer, mappings: list[ColumnMapping]
    ) -> None:
        first, second = transformer.apply(ROWS, mappings)
        assert first["entity"] == "ACME"
        assert first["value"] == pytest.approx(1234.56)
        assert first["period"] == date(2024, 1, 31)
        assert second["value"] == pytest.approx(-500.0)
        assert second["period"] == date(2024, 2, 29)

    def test_audit_stamp(
        self, transformer: ValueTransformer, mappings: list[ColumnMapping]
    ) -> None:
        record = transformer.apply(ROWS[:1], mappings)[0]
        assert record["created_at"] == FIXED_NOW.isoformat()
        assert record["source"] == IMPORT_SOURCE
        assert set(record) == {"entity", "account", "value", "period", "created_at", "source"}

    def test_idempotent(
        self, transformer: ValueTransformer, mappings: list[ColumnMapping]
    ) -> None:
        assert transformer.apply(ROWS, mappings) == transformer.apply(ROWS, mappings)

    def test_idempotent_ignoring_timestamp(self, mappings: list[ColumnMapping]) -> None:
        live = ValueTransformer()

        def strip(records):
            return [{k: v for k, v in r.items() if k != "created_at"} for r in records]

        assert strip(live.apply(ROWS, mappings)) == strip(live.apply(ROWS, mappings))

    def test_no_transform_keeps_raw(self, transformer: ValueTransformer) -> None:
        mappings = [ColumnMapping("Valor", 0, "value", 1.0)]
        record = transformer.apply([[99.5]], mappings)[0]
        assert record["value"] == 99.5

    def test_empty_rows(
        self, transformer: ValueTransformer, mappings: list[ColumnMapping]
    ) -> None:
        assert transformer.apply([], mappings) == []


# ======================================================================
# Bad cells
# ======================================================================

class TestBadCells:
    def test_unparseable_cell_becomes_none(
        self, transformer: ValueTransformer, mappings: list[ColumnMapping]
    ) -> None:
        rows = [["ACME", "1.01", "n/a", "not a date"]]
        record = transformer.apply(rows, mappings)[0]
        assert record["value"] is None
        assert record["period"] is None
        assert record["entity"] == "ACME"

    def test_short_row_yields_none(
        self, transformer: ValueTransformer, mappings: list[ColumnMapping]
    ) -> None:
        record = transformer.apply([["ACME", "1.01"]], mappings)[0]
        assert record["value"] is None
        assert record["period"] is None

    def test_null_cell_not_transformed(
        self, transformer: ValueTransformer, mappings: list[ColumnMapping]
    ) -> None:
        record = transformer.apply([[None, "1.01", "10", "2024-01-01"]], mappings)[0]
        assert record["entity"] is None


# ======================================================================
# Defaults
# ======================================================================

class TestDefaults:
    def test_defaults_fill_blank_keys(self, transformer: ValueTransformer) -> None:
        config = MappingConfig(entity_default="system", account_default="GENERAL")
        mappings = [
            ColumnMapping("Empresa", 0, "entity", 0.9, NORMALIZE_TEXT),
            ColumnMapping("Valor", 1, "value", 0.9, PARSE_NUMBER),
        ]
        records = transformer.apply([["   ", "10"], ["ACME", "20"]], mappings, config)
        assert records[0]["entity"] == "system"
        assert records[1]["entity"] == "ACME"
        # account has no mapping at all; the default still applies
        assert records[0]["account"] == "GENERAL"

    def test_no_default_leaves_field_absent(self, transformer: ValueTransformer) -> None:
        mappings = [ColumnMapping("Valor", 0, "value", 0.9, PARSE_NUMBER)]
        record = transformer.apply([["10"]], mappings)[0]
        assert "entity" not in record

    def test_separators_from_config(self, transformer: ValueTransformer) -> None:
        config = MappingConfig(number_format=NumberFormat(".", ","))
        mappings = [ColumnMapping("Amount", 0, "value", 0.9, PARSE_NUMBER)]
        record = transformer.apply([["1,234.56"]], mappings, config)[0]
        assert record["value"] == pytest.approx(1234.56)


# ======================================================================
# Reduced-precision periods
# ======================================================================

class TestPeriodColumns:
    def test_year_column(self, transformer: ValueTransformer) -> None:
        mappings, _ = resolve_mapping([Column("Ano", 0, ColumnType.NUMBER, [2023, 2024])])
        assert [(m.target_field, m.transform) for m in mappings] == [("period", PARSE_DATE)]
        records = transformer.apply([[2023], [2024]], mappings)
        assert [r["period"] for r in records] == [date(2023, 1, 1), date(2024, 1, 1)]

    def test_year_month_column(self, transformer: ValueTransformer) -> None:
        column = Column("Competência", 0, ColumnType.TEXT, ["2024-01", "2024-02"])
        mappings, _ = resolve_mapping([column])
        assert mappings[0].target_field == "period"
        records = transformer.apply([["2024-01"], ["2024-02"]], mappings)
        assert [r["period"] for r in records] == [date(2024, 1, 1), date(2024, 2, 1)]
