"""
Validation Layer.

Post-resolution checks on a mapping set.  Nothing here raises: problems are
returned as data so a caller can still show a partially valid mapping to
the user.

Checks performed
----------------
1. **Required fields** — every configured required field id must be the
   target of some mapping.
2. **Duplicate targets** — the same target field must not be claimed by
   more than one column.
3. **Low confidence** — mappings below ``LOW_CONFIDENCE`` are listed for
   manual review (reported, but they do not make the set invalid).
"""

from __future__ import annotations

from collections import Counter
from typing import Iterable, List, Sequence

from column_mapper.config import MappingConfig
from column_mapper.logging_setup import get_logger
from column_mapper.schema import ColumnMapping, ValidationSummary
from column_mapper.scorer import MIN_CONFIDENCE

logger = get_logger("validator")

LOW_CONFIDENCE = 0.5


class Validator:
    """Builds a ``ValidationSummary`` for a resolved mapping set."""

    def summarize(
        self,
        mappings: Sequence[ColumnMapping],
        required_fields: Iterable[str],
    ) -> ValidationSummary:
        """Run all checks and return the summary."""
        required = list(dict.fromkeys(required_fields))
        mapped = [m.target_field for m in mappings]
        mapped_set = set(mapped)

        missing = tuple(f for f in required if f not in mapped_set)
        present = tuple(f for f in required if f in mapped_set)

        counts = Counter(mapped)
        duplicates = tuple(f for f in dict.fromkeys(mapped) if counts[f] > 1)

        low = tuple(m.target_field for m in mappings if m.confidence < LOW_CONFIDENCE)

        summary = ValidationSummary(
            missing_required_fields=missing,
            duplicate_target_fields=duplicates,
            low_confidence_fields=low,
            required_fields_mapped=present,
        )
        self._log(summary)
        return summary

    @staticmethod
    def _log(summary: ValidationSummary) -> None:
        for f in summary.missing_required_fields:
            logger.error("Validation ERROR: required field missing: '%s'", f)
        for f in summary.duplicate_target_fields:
            logger.error("Validation ERROR: field '%s' mapped more than once", f)
        for f in summary.low_confidence_fields:
            logger.warning("Validation WARNING: low-confidence mapping to '%s'", f)


def check_mapping_set(
    config: MappingConfig,
    mappings: Sequence[ColumnMapping],
) -> List[str]:
    """Check a mapping set before it is saved as a named configuration.

    Stricter than ``Validator.summarize``: a saved configuration must name
    its required fields, carry at least one mapping, and contain no mapping
    below the auto-detection threshold.

    Returns
    -------
    list[str]
        Human-readable errors; empty when the set can be saved.
    """
    errors: list[str] = []

    if not config.required_fields:
        errors.append("Required fields must be specified")

    if not mappings:
        errors.append("At least one column mapping must be provided")

    summary = Validator().summarize(mappings, config.required_fields)
    if summary.missing_required_fields:
        errors.append(
            "Missing required field mappings: "
            + ", ".join(summary.missing_required_fields)
        )
    if summary.duplicate_target_fields:
        errors.append(
            "Duplicate field mappings: " + ", ".join(summary.duplicate_target_fields)
        )

    weak = [m.target_field for m in mappings if m.confidence < MIN_CONFIDENCE]
    if weak:
        errors.append("Low confidence mappings detected: " + ", ".join(weak))

    return errors
