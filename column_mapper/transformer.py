"""
Value Transformer.

Applies a resolved mapping set to raw rows and produces canonical fact
records, one per input row and in the same order:

    row  →  pick cell per mapping  →  transform  →  defaults  →  audit stamp

A cell that fails to parse becomes ``None``; the row is still emitted so
that row-level validation downstream can point at the offending cell.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence

from column_mapper.config import MappingConfig
from column_mapper.logging_setup import get_logger
from column_mapper.schema import ColumnMapping, FinancialField
from column_mapper.transforms import apply_transform

logger = get_logger("transformer")

IMPORT_SOURCE = "file_import"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ValueTransformer:
    """Turns raw rows into canonical records.

    Parameters
    ----------
    clock:
        Returns the timestamp stamped as ``created_at``.  Injected so tests
        can pin it; defaults to the current UTC time.
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None) -> None:
        self._clock = clock or _utc_now

    def apply(
        self,
        rows: Sequence[Sequence[Any]],
        mappings: Sequence[ColumnMapping],
        config: Optional[MappingConfig] = None,
    ) -> List[Dict[str, Any]]:
        """Transform every row; never raises for a bad cell."""
        config = config or MappingConfig()
        records: list[dict[str, Any]] = []
        failures = 0

        for row_number, row in enumerate(rows):
            record, row_failures = self._transform_row(row, mappings, config)
            if row_failures:
                failures += row_failures
                logger.debug("Row %d: %d cell(s) failed to parse", row_number, row_failures)
            self._fill_defaults(record, config)
            self._stamp(record)
            records.append(record)

        if failures:
            logger.warning(
                "%d cell(s) could not be parsed and were set to None "
                "(%d rows, %d mappings)",
                failures,
                len(records),
                len(mappings),
            )
        logger.info("Transformed %d rows with %d mappings", len(records), len(mappings))
        return records

    # ------------------------------------------------------------------ #
    # Steps
    # ------------------------------------------------------------------ #

    @staticmethod
    def _transform_row(
        row: Sequence[Any],
        mappings: Sequence[ColumnMapping],
        config: MappingConfig,
    ) -> tuple[dict[str, Any], int]:
        record: dict[str, Any] = {}
        failures = 0
        for mapping in mappings:
            index = mapping.source_index
            raw = row[index] if index < len(row) else None

            value = raw
            if raw is not None and mapping.transform:
                value = apply_transform(raw, mapping.transform, config)
                if value is None:
                    failures += 1
            record[mapping.target_field] = value
        return record, failures

    @staticmethod
    def _fill_defaults(record: dict[str, Any], config: MappingConfig) -> None:
        defaults = (
            (FinancialField.ENTITY.value, config.entity_default),
            (FinancialField.ACCOUNT.value, config.account_default),
        )
        for field_id, default in defaults:
            if default is not None and record.get(field_id) in (None, ""):
                record[field_id] = default

    def _stamp(self, record: dict[str, Any]) -> None:
        record[FinancialField.CREATED_AT.value] = self._clock().isoformat()
        record[FinancialField.SOURCE.value] = IMPORT_SOURCE
