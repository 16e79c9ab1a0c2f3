"""
Fuzzy Suggestion Layer.

Resolution never guesses through fuzzy matching: manual mappings require an
exact (case-insensitive) column name and target ids must be registered.
When either lookup misses, this layer uses ``rapidfuzz`` to find the closest
known name so the error message or log line can say what was probably
meant.  Suggestions below ``threshold`` are not offered.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional

from rapidfuzz import fuzz, process

from column_mapper.logging_setup import get_logger
from column_mapper.normalizer import LabelNormalizer

logger = get_logger("fuzzy_matcher")

DEFAULT_THRESHOLD = 75.0


@dataclass
class FuzzyCandidate:
    """A single candidate returned by the fuzzy matcher."""

    name: str
    score: float  # 0–100


class FuzzyMatcher:
    """Fuzzy-match a free-form name against a fixed pool of known names.

    The pool is normalised once (casefold, accents folded, punctuation
    removed) so that ``"Centro de Custo"`` and ``"centro_custo"`` compare
    on equal terms.

    Parameters
    ----------
    choices:
        Known names to match against, e.g. registry field ids or the column
        headers of a sheet.
    threshold:
        Minimum similarity score (0–100) for a suggestion.
    """

    def __init__(
        self,
        choices: Iterable[str],
        threshold: float = DEFAULT_THRESHOLD,
    ) -> None:
        self._normalizer = LabelNormalizer()
        self._threshold = threshold

        # normalised → original; first occurrence wins
        self._targets: dict[str, str] = {}
        for name in choices:
            self._targets.setdefault(self._normalizer.normalize_label(name), name)
        self._target_keys: list[str] = list(self._targets.keys())

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    def candidates(self, name: str, limit: int = 3) -> List[FuzzyCandidate]:
        """Best pool entries for *name* at or above the threshold."""
        query = self._normalizer.normalize_label(name)
        if not query or not self._target_keys:
            return []

        # token_sort_ratio: word order does not matter
        # ("custo centro" vs "centro custo").
        results = process.extract(
            query,
            self._target_keys,
            scorer=fuzz.token_sort_ratio,
            limit=limit,
        )
        return [
            FuzzyCandidate(name=self._targets[key], score=score)
            for key, score, _ in results
            if score >= self._threshold
        ]

    def suggest(self, name: str) -> Optional[str]:
        """Closest known name, or ``None`` when nothing is close enough."""
        found = self.candidates(name, limit=1)
        if not found:
            logger.debug("No suggestion for %r", name)
            return None
        best = found[0]
        logger.debug("Suggestion for %r: %r (score=%.1f)", name, best.name, best.score)
        return best.name
