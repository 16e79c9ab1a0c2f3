"""
Column Name Normalization.

Source sheets arrive with headers in Portuguese and English, with or without
accents, and with arbitrary spacing.  The registry's name patterns are
written without accents, so names are tried both as given and in their
accent-folded form.

Transformations applied by ``normalize_label`` (in order):
1. Strip leading / trailing whitespace
2. Casefold
3. Fold accents (``Contábil`` → ``contabil``)
4. Replace punctuation and underscores with spaces
5. Collapse whitespace runs
"""

from __future__ import annotations

import re
import unicodedata

from column_mapper.logging_setup import get_logger

logger = get_logger("normalizer")


class LabelNormalizer:
    """Stateless column-name normaliser.  All methods are pure functions."""

    # Anything other than letters, digits and whitespace becomes a space
    _PUNCT_RE = re.compile(r"[^\w\s]|_")

    _MULTI_SPACE_RE = re.compile(r"\s+")

    @staticmethod
    def fold_accents(text: str) -> str:
        """Remove combining marks: ``"Período"`` → ``"Periodo"``."""
        decomposed = unicodedata.normalize("NFKD", text)
        return "".join(ch for ch in decomposed if not unicodedata.combining(ch))

    def normalize_label(self, raw: str) -> str:
        """Return the comparable form of a raw header string."""
        text = raw.strip().casefold()
        text = self.fold_accents(text)
        text = self._PUNCT_RE.sub(" ", text)
        text = self._MULTI_SPACE_RE.sub(" ", text).strip()

        logger.debug("normalize_label: %r -> %r", raw, text)
        return text

    def name_variants(self, raw: str) -> tuple[str, ...]:
        """Forms of a header that name patterns are tested against."""
        folded = self.fold_accents(raw)
        if folded == raw:
            return (raw,)
        return (raw, folded)

    @staticmethod
    def same_name(a: str, b: str) -> bool:
        """Case-insensitive exact comparison used for manual mappings."""
        return a.casefold() == b.casefold()
