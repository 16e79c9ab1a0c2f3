"""
Canonical field ids and data models.

Defines the target slots every imported fact must populate and the typed
structures passed between the registry, scorer, resolver, transformer and
report generator.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Sequence


# ---------------------------------------------------------------------------
# Canonical fields
# ---------------------------------------------------------------------------

class FinancialField(str, Enum):
    """Ids of the canonical fields of a financial fact record.

    The first five are the ones every import must populate; the audit keys
    are stamped by the transformer and never scored against columns.
    """

    ENTITY = "entity"
    ACCOUNT = "account"
    SCENARIO = "scenario"
    PERIOD = "period"
    VALUE = "value"

    DESCRIPTION = "description"
    CURRENCY = "currency"
    UNIT = "unit"
    CATEGORY = "category"
    SUBCATEGORY = "subcategory"
    COST_CENTER = "cost_center"
    PROJECT = "project"
    DEPARTMENT = "department"

    # Audit
    CREATED_AT = "created_at"
    SOURCE = "source"


CORE_FIELDS: tuple[str, ...] = (
    FinancialField.ENTITY.value,
    FinancialField.ACCOUNT.value,
    FinancialField.SCENARIO.value,
    FinancialField.PERIOD.value,
    FinancialField.VALUE.value,
)


class ColumnType(str, Enum):
    """Primitive type inferred for a source column by the file parser."""

    TEXT = "text"
    NUMBER = "number"
    DATE = "date"


class UnknownFieldError(ValueError):
    """A configuration references a target field id that is not registered."""

    def __init__(self, field_id: str, suggestion: Optional[str] = None) -> None:
        self.field_id = field_id
        self.suggestion = suggestion
        msg = f"Unknown target field {field_id!r}"
        if suggestion:
            msg += f" (did you mean {suggestion!r}?)"
        super().__init__(msg)


# ---------------------------------------------------------------------------
# Mapping data models
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Column:
    """One vertical slice of a source sheet as described by the parser."""

    name: str
    index: int
    inferred_type: ColumnType = ColumnType.TEXT
    samples: Sequence[Any] = ()

    def __post_init__(self) -> None:
        if self.index < 0:
            raise ValueError(f"Column index must be >= 0, got {self.index}")
        # Accept plain strings for the type and any iterable for samples.
        object.__setattr__(self, "inferred_type", ColumnType(self.inferred_type))
        object.__setattr__(self, "samples", tuple(self.samples))

    def non_null_samples(self) -> list[Any]:
        return [s for s in self.samples if s is not None]


@dataclass(frozen=True)
class ColumnMapping:
    """An accepted source column → canonical field association."""

    source_column: str
    source_index: int
    target_field: str
    confidence: float  # 0.0 – 1.0
    transform: Optional[str] = None
    validation_rules: tuple[str, ...] = ()
    method: str = "auto"  # "auto" | "manual"

    def to_dict(self) -> dict[str, Any]:
        return {
            "source_column": self.source_column,
            "source_index": self.source_index,
            "target_field": self.target_field,
            "confidence": round(self.confidence, 4),
            "transform": self.transform,
            "validation_rules": list(self.validation_rules),
            "method": self.method,
        }


@dataclass(frozen=True)
class ValidationSummary:
    """Problems found in a resolved mapping set.

    Invalidity is reported here, never raised.
    """

    missing_required_fields: tuple[str, ...] = ()
    duplicate_target_fields: tuple[str, ...] = ()
    low_confidence_fields: tuple[str, ...] = ()
    required_fields_mapped: tuple[str, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.missing_required_fields and not self.duplicate_target_fields

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "missing_required_fields": list(self.missing_required_fields),
            "duplicate_target_fields": list(self.duplicate_target_fields),
            "low_confidence_fields": list(self.low_confidence_fields),
            "required_fields_mapped": list(self.required_fields_mapped),
        }


@dataclass
class ImportResult:
    """Aggregate result of resolving and applying a mapping to one table."""

    mappings: list[ColumnMapping] = field(default_factory=list)
    summary: ValidationSummary = field(default_factory=ValidationSummary)
    records: list[dict[str, Any]] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.summary.is_valid

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "mappings": [m.to_dict() for m in self.mappings],
            "summary": self.summary.to_dict(),
            "records": self.records,
        }
