"""
Mapping Resolver.

Merges explicit (manual) mappings with auto-detected ones into a single
conflict-free mapping set and validates it:

    custom mappings  →  manual pass  →  auto pass (scorer)  →  validator

Conflict policy
---------------
* Manual mappings always win and are never overridden.
* An auto candidate is dropped when its source column or its target field
  is already claimed.  Columns are processed in index order, so the first
  column wins a target-field collision.
* Two manual mappings may target the same field; both are kept and the
  validator reports the duplicate.
"""

from __future__ import annotations

from typing import Optional, Sequence

from column_mapper.config import MappingConfig
from column_mapper.fuzzy_matcher import FuzzyMatcher
from column_mapper.logging_setup import get_logger
from column_mapper.normalizer import LabelNormalizer
from column_mapper.schema import Column, ColumnMapping, ValidationSummary
from column_mapper.scorer import MIN_CONFIDENCE, CandidateScorer
from column_mapper.validator import Validator

logger = get_logger("resolver")

MANUAL_CONFIDENCE = 1.0


class MappingResolver:
    """Resolve the columns of one sheet into canonical field mappings.

    Parameters
    ----------
    scorer:
        Scores auto-detection candidates; its registry is also used to
        look up manual targets.
    validator:
        Produces the ``ValidationSummary`` of the merged set.
    """

    def __init__(
        self,
        scorer: Optional[CandidateScorer] = None,
        validator: Optional[Validator] = None,
    ) -> None:
        self._scorer = scorer or CandidateScorer()
        self._registry = self._scorer.registry
        self._validator = validator or Validator()
        self._normalizer = LabelNormalizer()

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    def resolve(
        self,
        columns: Sequence[Column],
        config: Optional[MappingConfig] = None,
    ) -> tuple[list[ColumnMapping], ValidationSummary]:
        """Resolve *columns* into mappings and a validation summary.

        Raises
        ------
        UnknownFieldError
            If a custom mapping targets an unregistered field id.  This is
            the only failure; an invalid result is reported in the summary.
        """
        config = config or MappingConfig()
        ordered = sorted(columns, key=lambda c: c.index)

        mappings = self._manual_pass(ordered, config)
        if config.auto_detect:
            mappings.extend(self._auto_pass(ordered, mappings))

        summary = self._validator.summarize(mappings, config.required_fields)

        logger.info(
            "Column mapping complete — columns=%d, mapped=%d (manual=%d), "
            "missing=%d, duplicates=%d, valid=%s",
            len(ordered),
            len(mappings),
            sum(1 for m in mappings if m.method == "manual"),
            len(summary.missing_required_fields),
            len(summary.duplicate_target_fields),
            summary.is_valid,
        )
        return mappings, summary

    # ------------------------------------------------------------------ #
    # Passes
    # ------------------------------------------------------------------ #

    def _manual_pass(
        self,
        columns: Sequence[Column],
        config: MappingConfig,
    ) -> list[ColumnMapping]:
        mappings: list[ColumnMapping] = []
        claimed: set[int] = set()

        for source_name, target_id in config.custom_mappings.items():
            field = self._registry.lookup(target_id)

            column = self._find_column(columns, source_name)
            if column is None:
                suggestion = FuzzyMatcher(c.name for c in columns).suggest(source_name)
                logger.warning(
                    "Custom mapping %r → '%s' ignored: no such column%s",
                    source_name,
                    field.field_id,
                    f" (did you mean {suggestion!r}?)" if suggestion else "",
                )
                continue

            if column.index in claimed:
                logger.warning(
                    "Custom mapping %r → '%s' ignored: column %d already mapped",
                    source_name,
                    field.field_id,
                    column.index,
                )
                continue

            claimed.add(column.index)
            mappings.append(ColumnMapping(
                source_column=column.name,
                source_index=column.index,
                target_field=field.field_id,
                confidence=MANUAL_CONFIDENCE,
                transform=field.transform_for(column.inferred_type),
                validation_rules=field.validation_rules,
                method="manual",
            ))
            logger.info("MAPPED: %r → '%s' [manual]", column.name, field.field_id)

        return mappings

    def _auto_pass(
        self,
        columns: Sequence[Column],
        existing: Sequence[ColumnMapping],
    ) -> list[ColumnMapping]:
        claimed_indexes = {m.source_index for m in existing}
        claimed_fields = {m.target_field: m.source_column for m in existing}
        accepted: list[ColumnMapping] = []

        for column in columns:
            if column.index in claimed_indexes:
                continue

            field, score = self._scorer.find_best_field(column)
            if score < MIN_CONFIDENCE:
                logger.info(
                    "UNMAPPED: %r — best field '%s' scored %.3f < %.2f",
                    column.name,
                    field.field_id,
                    score,
                    MIN_CONFIDENCE,
                )
                continue

            if field.field_id in claimed_fields:
                logger.warning(
                    "Dropped %r → '%s' (score=%.3f): field already mapped from %r",
                    column.name,
                    field.field_id,
                    score,
                    claimed_fields[field.field_id],
                )
                continue

            claimed_indexes.add(column.index)
            claimed_fields[field.field_id] = column.name
            accepted.append(ColumnMapping(
                source_column=column.name,
                source_index=column.index,
                target_field=field.field_id,
                confidence=score,
                transform=field.transform_for(column.inferred_type),
                validation_rules=field.validation_rules,
                method="auto",
            ))
            logger.info(
                "MAPPED: %r → '%s' [auto] confidence=%.3f",
                column.name,
                field.field_id,
                score,
            )

        return accepted

    def _find_column(
        self, columns: Sequence[Column], name: str
    ) -> Optional[Column]:
        for column in columns:
            if self._normalizer.same_name(column.name, name):
                return column
        return None
