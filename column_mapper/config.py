"""
Configuration module for Column Mapper.

Per-request mapping options and pipeline-level settings live here.  The
scoring rubric itself (weights and thresholds) is fixed and lives in
``column_mapper.scorer`` as named constants.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from column_mapper.schema import CORE_FIELDS


DEFAULT_DATE_FORMATS: tuple[str, ...] = (
    "DD/MM/YYYY",
    "MM/DD/YYYY",
    "YYYY-MM-DD",
    "DD-MM-YYYY",
    "MM-DD-YYYY",
    "YYYY/MM/DD",
)


@dataclass(frozen=True)
class NumberFormat:
    """Separators used by the source sheet for numeric cells."""

    decimal_separator: str = ","
    thousands_separator: str = "."

    def __post_init__(self) -> None:
        for name in ("decimal_separator", "thousands_separator"):
            sep = getattr(self, name)
            if not isinstance(sep, str) or len(sep) != 1:
                raise ValueError(f"{name} must be a single character, got {sep!r}")
        if self.decimal_separator == self.thousands_separator:
            raise ValueError(
                "decimal_separator and thousands_separator must differ "
                f"(both are {self.decimal_separator!r})"
            )


@dataclass(frozen=True)
class MappingConfig:
    """Options for one mapping request.

    ``custom_mappings`` maps a literal source column name to a target field
    id; those mappings always win over auto-detection.
    """

    auto_detect: bool = True
    custom_mappings: Mapping[str, str] = field(default_factory=dict)
    required_fields: tuple[str, ...] = CORE_FIELDS
    date_formats: tuple[str, ...] = DEFAULT_DATE_FORMATS
    number_format: NumberFormat = field(default_factory=NumberFormat)

    # Injected when ``entity`` / ``account`` are blank after mapping
    entity_default: Optional[str] = None
    account_default: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "custom_mappings", dict(self.custom_mappings))
        object.__setattr__(self, "required_fields", tuple(self.required_fields))
        object.__setattr__(self, "date_formats", tuple(self.date_formats))

    @property
    def decimal_separator(self) -> str:
        return self.number_format.decimal_separator

    @property
    def thousands_separator(self) -> str:
        return self.number_format.thousands_separator

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "MappingConfig":
        """Build a config from a stored record.

        Accepts the camelCase shape kept by the configuration store
        (``autoDetectFinancialFields``, ``numberFormats``, ``entityMapping``…)
        as well as this class's own snake_case field names.
        """

        def pick(*keys: str, default: Any = None) -> Any:
            for key in keys:
                if key in data and data[key] is not None:
                    return data[key]
            return default

        numbers = pick("numberFormats", "number_format", default={})
        if isinstance(numbers, NumberFormat):
            number_format = numbers
        else:
            number_format = NumberFormat(
                decimal_separator=numbers.get(
                    "decimalSeparator", numbers.get("decimal_separator", ",")
                ),
                thousands_separator=numbers.get(
                    "thousandsSeparator", numbers.get("thousands_separator", ".")
                ),
            )

        entity_mapping = pick("entityMapping", default={})
        account_mapping = pick("accountMapping", default={})

        return cls(
            auto_detect=bool(pick("autoDetectFinancialFields", "auto_detect", default=True)),
            custom_mappings=pick("customMappings", "custom_mappings", default={}),
            required_fields=pick("requiredFields", "required_fields", default=CORE_FIELDS),
            date_formats=pick("dateFormats", "date_formats", default=DEFAULT_DATE_FORMATS),
            number_format=number_format,
            entity_default=pick(
                "entity_default", default=entity_mapping.get("defaultValue")
            ),
            account_default=pick(
                "account_default", default=account_mapping.get("defaultValue")
            ),
        )


@dataclass(frozen=True)
class PipelineConfig:
    """Top-level configuration for ``ColumnMappingPipeline``."""

    mapping: MappingConfig = field(default_factory=MappingConfig)

    # Logging level for the mapping audit trail
    log_level: int = logging.INFO

    # Number of non-blank values kept per column when profiling raw tables
    sample_size: int = 10
