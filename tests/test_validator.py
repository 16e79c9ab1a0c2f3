"""
Unit tests for the Validator and the saved-configuration check.
"""

from __future__ import annotations

import pytest

from column_mapper.config import MappingConfig
from column_mapper.schema import CORE_FIELDS, ColumnMapping
from column_mapper.validator import LOW_CONFIDENCE, Validator, check_mapping_set


def _make_mapping(
    target: str = "value",
    source: str = "Valor",
    index: int = 0,
    confidence: float = 0.9,
    **kwargs,
) -> ColumnMapping:
    return ColumnMapping(
        source_column=source,
        source_index=index,
        target_field=target,
        confidence=confidence,
        **kwargs,
    )


@pytest.fixture
def validator() -> Validator:
    return Validator()


@pytest.fixture
def complete() -> list[ColumnMapping]:
    return [_make_mapping(f, f.title(), i) for i, f in enumerate(CORE_FIELDS)]


# ======================================================================
# Required fields
# ======================================================================

class TestRequiredFields:
    def test_all_present(self, validator: Validator, complete: list[ColumnMapping]) -> None:
        summary = validator.summarize(complete, CORE_FIELDS)
        assert summary.is_valid
        assert summary.missing_required_fields == ()
        assert summary.required_fields_mapped == CORE_FIELDS

    def test_missing_reported_in_required_order(self, validator: Validator) -> None:
        summary = validator.summarize([_make_mapping("account")], CORE_FIELDS)
        assert summary.missing_required_fields == ("entity", "scenario", "period", "value")
        assert summary.required_fields_mapped == ("account",)
        assert not summary.is_valid

    def test_no_required_fields(self, validator: Validator) -> None:
        assert validator.summarize([], ()).is_valid


# ======================================================================
# Duplicates
# ======================================================================

class TestDuplicates:
    def test_no_duplicates_clean(
        self, validator: Validator, complete: list[ColumnMapping]
    ) -> None:
        assert validator.summarize(complete, CORE_FIELDS).duplicate_target_fields == ()

    def test_duplicate_detected(self, validator: Validator) -> None:
        mappings = [
            _make_mapping("value", "Débito", 0),
            _make_mapping("value", "Crédito", 1),
        ]
        summary = validator.summarize(mappings, ("value",))
        assert summary.duplicate_target_fields == ("value",)
        assert not summary.is_valid

    def test_duplicate_listed_once(self, validator: Validator) -> None:
        mappings = [_make_mapping("value", f"V{i}", i) for i in range(3)]
        summary = validator.summarize(mappings, ())
        assert summary.duplicate_target_fields == ("value",)


# ======================================================================
# Low confidence
# ======================================================================

class TestLowConfidence:
    def test_below_threshold_listed(self, validator: Validator) -> None:
        mappings = [
            _make_mapping("entity", "A", 0, confidence=0.35),
            _make_mapping("value", "B", 1, confidence=LOW_CONFIDENCE),
        ]
        summary = validator.summarize(mappings, ())
        assert summary.low_confidence_fields == ("entity",)

    def test_low_confidence_does_not_invalidate(self, validator: Validator) -> None:
        summary = validator.summarize([_make_mapping(confidence=0.31)], ("value",))
        assert summary.low_confidence_fields == ("value",)
        assert summary.is_valid

    def test_summary_to_dict(self, validator: Validator) -> None:
        d = validator.summarize([_make_mapping()], ("value", "entity")).to_dict()
        assert d["is_valid"] is False
        assert d["missing_required_fields"] == ["entity"]


# ======================================================================
# Saved configuration check
# ======================================================================

class TestCheckMappingSet:
    def test_clean_set(self, complete: list[ColumnMapping]) -> None:
        assert check_mapping_set(MappingConfig(), complete) == []

    def test_requires_required_fields(self, complete: list[ColumnMapping]) -> None:
        errors = check_mapping_set(MappingConfig(required_fields=()), complete)
        assert "Required fields must be specified" in errors

    def test_requires_mappings(self) -> None:
        errors = check_mapping_set(MappingConfig(), [])
        assert "At least one column mapping must be provided" in errors
        assert any(e.startswith("Missing required field mappings:") for e in errors)

    def test_duplicates(self, complete: list[ColumnMapping]) -> None:
        mappings = complete + [_make_mapping("value", "Total", 9)]
        errors = check_mapping_set(MappingConfig(), mappings)
        assert errors == ["Duplicate field mappings: value"]

    def test_low_confidence(self, complete: list[ColumnMapping]) -> None:
        mappings = complete + [_make_mapping("description", "Obs", 9, confidence=0.2)]
        errors = check_mapping_set(MappingConfig(), mappings)
        assert errors == ["Low confidence mappings detected: description"]
