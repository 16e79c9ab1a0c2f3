"""
Candidate Scorer.

Scores how likely a source column represents a canonical field by combining
three weak signals into one confidence in ``[0, 1]``:

* **name**   (weight 0.60) — any of the field's name patterns matches the
  column header (as given or accent-folded);
* **type**   (weight 0.25) — the field's affinity for the column's inferred
  primitive type;
* **sample** (weight 0.15) — how well the column's sample values fit the
  field's content heuristic.

``find_best_field`` picks the highest-scoring field over the whole registry.
Ties go to the first-registered field, so results are deterministic.
Callers reject a best candidate scoring below ``MIN_CONFIDENCE``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from column_mapper.logging_setup import get_logger
from column_mapper.normalizer import LabelNormalizer
from column_mapper.registry import DEFAULT_REGISTRY, FieldDefinition, FieldRegistry
from column_mapper.schema import Column

logger = get_logger("scorer")

NAME_WEIGHT = 0.60
TYPE_WEIGHT = 0.25
SAMPLE_WEIGHT = 0.15

# Best candidates below this are not auto-mapped
MIN_CONFIDENCE = 0.3


@dataclass(frozen=True)
class ScoreBreakdown:
    """Per-signal explanation of one column/field score."""

    field_id: str
    name_signal: float
    type_signal: float
    sample_signal: float

    @property
    def score(self) -> float:
        raw = (
            NAME_WEIGHT * self.name_signal
            + TYPE_WEIGHT * self.type_signal
            + SAMPLE_WEIGHT * self.sample_signal
        )
        return min(max(raw, 0.0), 1.0)

    def to_dict(self) -> dict[str, float | str]:
        return {
            "field": self.field_id,
            "name": self.name_signal,
            "type": self.type_signal,
            "sample": round(self.sample_signal, 4),
            "score": round(self.score, 4),
        }


class CandidateScorer:
    """Score columns against the entries of a ``FieldRegistry``.

    Parameters
    ----------
    registry:
        The field table to score against.  Defaults to the built-in one.
    """

    def __init__(self, registry: Optional[FieldRegistry] = None) -> None:
        self._registry = registry if registry is not None else DEFAULT_REGISTRY
        self._normalizer = LabelNormalizer()

    @property
    def registry(self) -> FieldRegistry:
        return self._registry

    # ------------------------------------------------------------------ #
    # Scoring
    # ------------------------------------------------------------------ #

    def breakdown(self, column: Column, field: FieldDefinition) -> ScoreBreakdown:
        names = self._normalizer.name_variants(column.name)
        return ScoreBreakdown(
            field_id=field.field_id,
            name_signal=1.0 if field.matches_name(names) else 0.0,
            type_signal=field.type_affinity(column.inferred_type),
            sample_signal=field.sample_affinity(column.samples),
        )

    def score(self, column: Column, field: FieldDefinition) -> float:
        """Confidence in ``[0, 1]`` that *column* represents *field*."""
        return self.breakdown(column, field).score

    def rank(self, column: Column) -> list[ScoreBreakdown]:
        """Every registry field scored for *column*, best first.

        The sort is stable, so equal scores keep registry order.
        """
        scored = [self.breakdown(column, f) for f in self._registry.all()]
        return sorted(scored, key=lambda b: b.score, reverse=True)

    def find_best_field(self, column: Column) -> tuple[FieldDefinition, float]:
        """Highest-scoring field for *column* and its score.

        Only a strictly greater score displaces the current best, so the
        first-registered field wins a tie.
        """
        best: Optional[FieldDefinition] = None
        best_score = -1.0
        for field in self._registry.all():
            s = self.score(column, field)
            if s > best_score:
                best, best_score = field, s

        if best is None:
            raise ValueError("Cannot score against an empty field registry")

        logger.debug(
            "Best field for %r (index=%d): %s (score=%.3f)",
            column.name,
            column.index,
            best.field_id,
            best_score,
        )
        return best, best_score
