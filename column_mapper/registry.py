"""
Field Registry.

A static, read-only table describing every canonical field a column can be
mapped to.  Each entry is plain data: name patterns, a type-affinity table,
a per-sample content heuristic, the default transformation and the
validation rule ids handed to row-level validation.

Design decisions
----------------
* Entries are ``FieldDefinition`` records, not subclasses.  Per-field
  behaviour lives in the data and in small pure heuristic functions.
* ``DEFAULT_REGISTRY`` is built once at import time and has no mutation API.
  Callers that need a different table construct their own ``FieldRegistry``
  and pass it explicitly.
* Registration order is significant: it breaks scoring ties (the
  first-registered field wins).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterable, Iterator, Mapping, Optional, Sequence

from column_mapper.fuzzy_matcher import FuzzyMatcher
from column_mapper.logging_setup import get_logger
from column_mapper.normalizer import LabelNormalizer
from column_mapper.schema import ColumnType, FinancialField, UnknownFieldError

logger = get_logger("registry")


# ---------------------------------------------------------------------------
# Transformation ids
# ---------------------------------------------------------------------------

PARSE_NUMBER = "parse_number"
PARSE_DATE = "parse_date"
NORMALIZE_TEXT = "normalize_text"

NEUTRAL_SAMPLE_SCORE = 0.5


class TransformPolicy(str, Enum):
    """When a field's default transform applies to a given column type."""

    ALWAYS = "always"
    # Conversion into the natural type; skipped when the column already has it
    CONVERT = "convert"
    # Cleanup that only makes sense for columns already of the natural type
    SAME_TYPE = "same_type"


# ---------------------------------------------------------------------------
# Registry entry
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FieldDefinition:
    """One canonical field and everything needed to score and transform it."""

    field_id: str
    name_patterns: tuple[re.Pattern, ...]
    type_scores: Mapping[ColumnType, float]
    sample_heuristic: Callable[[str], float]
    natural_type: ColumnType = ColumnType.TEXT
    default_transform: Optional[str] = None
    transform_policy: TransformPolicy = TransformPolicy.ALWAYS
    validation_rules: tuple[str, ...] = ()
    # Score for column types absent from ``type_scores``
    fallback_type_score: float = 0.0

    def matches_name(self, names: Iterable[str]) -> bool:
        """True if any pattern is found in any of the given name variants."""
        return any(p.search(n) for n in names for p in self.name_patterns)

    def type_affinity(self, column_type: ColumnType) -> float:
        return self.type_scores.get(ColumnType(column_type), self.fallback_type_score)

    def sample_affinity(self, samples: Sequence[Any]) -> float:
        """Mean heuristic score over the non-null samples.

        A column without any non-null sample is neither rewarded nor
        penalised and scores ``NEUTRAL_SAMPLE_SCORE``.
        """
        present = [s for s in samples if s is not None]
        if not present:
            return NEUTRAL_SAMPLE_SCORE
        total = sum(self.sample_heuristic(_sample_text(s)) for s in present)
        return total / len(present)

    def transform_for(self, column_type: ColumnType) -> Optional[str]:
        """The default transform adjusted for the column's inferred type."""
        if self.default_transform is None:
            return None
        same = ColumnType(column_type) == self.natural_type
        if self.transform_policy is TransformPolicy.CONVERT and same:
            return None
        if self.transform_policy is TransformPolicy.SAME_TYPE and not same:
            return None
        return self.default_transform


def _sample_text(sample: Any) -> str:
    """Lowercased, accent-folded string form of a sample value."""
    if hasattr(sample, "isoformat"):
        text = sample.isoformat()
    else:
        text = str(sample)
    return LabelNormalizer.fold_accents(text.strip()).lower()


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

class FieldRegistry:
    """Immutable, ordered lookup table of ``FieldDefinition`` entries."""

    def __init__(self, definitions: Iterable[FieldDefinition]) -> None:
        self._order: tuple[FieldDefinition, ...] = tuple(definitions)
        self._by_id: dict[str, FieldDefinition] = {}
        for definition in self._order:
            if definition.field_id in self._by_id:
                raise ValueError(f"Field {definition.field_id!r} registered twice")
            self._by_id[definition.field_id] = definition
        self._suggester = FuzzyMatcher(self._by_id.keys())
        logger.debug("Field registry built: %s", ", ".join(self._by_id))

    def lookup(self, field_id: str) -> FieldDefinition:
        """Return the entry for *field_id*.

        Raises
        ------
        UnknownFieldError
            If the id is not registered.
        """
        key = field_id.value if isinstance(field_id, FinancialField) else field_id
        try:
            return self._by_id[key]
        except KeyError:
            suggestion = self._suggester.suggest(str(key))
            raise UnknownFieldError(str(key), suggestion) from None

    def all(self) -> tuple[FieldDefinition, ...]:
        """Every entry in registration order."""
        return self._order

    def ids(self) -> tuple[str, ...]:
        return tuple(d.field_id for d in self._order)

    def __contains__(self, field_id: object) -> bool:
        if isinstance(field_id, FinancialField):
            field_id = field_id.value
        return field_id in self._by_id

    def __iter__(self) -> Iterator[FieldDefinition]:
        return iter(self._order)

    def __len__(self) -> int:
        return len(self._order)


# ---------------------------------------------------------------------------
# Built-in table
# ---------------------------------------------------------------------------

def _patterns(*sources: str) -> tuple[re.Pattern, ...]:
    return tuple(re.compile(s, re.IGNORECASE) for s in sources)


def _word(token: str) -> str:
    """Match *token* only when not glued to other letters."""
    return rf"(?<![a-z]){token}(?![a-z])"


def _regex_heuristic(*sources: str) -> Callable[[str], float]:
    compiled = _patterns(*sources)

    def heuristic(text: str) -> float:
        return 1.0 if any(p.search(text) for p in compiled) else 0.0

    return heuristic


def _non_blank(text: str) -> float:
    return NEUTRAL_SAMPLE_SCORE if text else 0.0


_VALUE_SAMPLE = _regex_heuristic(r"^-?[0-9.,]+$")

_PERIOD_SAMPLE = _regex_heuristic(
    r"\d{1,4}[/-]\d{1,2}[/-]\d{1,4}",
    r"\d{4}",
    r"(jan|feb|fev|mar|apr|abr|may|mai|jun|jul|aug|ago|sep|set|oct|out|nov|dec|dez)",
)

_SCENARIO_SAMPLE = _regex_heuristic(r"(real|actual|budget|orcamento|forecast|previsao)")

_ACCOUNT_SAMPLE = _regex_heuristic(r"^\d+(\.\d+)*$", r"^[a-z]\d+")

_KEY_TYPE_SCORES = {ColumnType.TEXT: 1.0}
_FREE_TEXT_TYPE_SCORES = {ColumnType.TEXT: 0.8}

_KEY_RULES = ("required", "notEmpty", "maxLength:100")


def _key_field(field_id: FinancialField, patterns: tuple[re.Pattern, ...],
               heuristic: Callable[[str], float]) -> FieldDefinition:
    """Entity, account and scenario: text identifiers, always normalised."""
    return FieldDefinition(
        field_id=field_id.value,
        name_patterns=patterns,
        type_scores=_KEY_TYPE_SCORES,
        fallback_type_score=0.4,
        sample_heuristic=heuristic,
        default_transform=NORMALIZE_TEXT,
        transform_policy=TransformPolicy.ALWAYS,
        validation_rules=_KEY_RULES,
    )


def _free_text_field(field_id: FinancialField, patterns: tuple[re.Pattern, ...],
                     rules: tuple[str, ...] = ("maxLength:255",)) -> FieldDefinition:
    return FieldDefinition(
        field_id=field_id.value,
        name_patterns=patterns,
        type_scores=_FREE_TEXT_TYPE_SCORES,
        fallback_type_score=0.5,
        sample_heuristic=_non_blank,
        default_transform=NORMALIZE_TEXT,
        transform_policy=TransformPolicy.SAME_TYPE,
        validation_rules=rules,
    )


def build_default_registry() -> FieldRegistry:
    """Construct the built-in table of canonical financial fields."""
    return FieldRegistry([
        _key_field(
            FinancialField.ENTITY,
            _patterns(
                r"entidade", r"entity", r"empresa", r"company", r"organizacao",
                r"organization", r"filial", r"subsidiary",
                r"unidade\s+de\s+negocio", r"business\s*unit",
            ),
            _non_blank,
        ),
        _key_field(
            FinancialField.ACCOUNT,
            _patterns(
                r"conta", r"account", r"codigo.*conta", r"account.*code",
                r"plano.*conta", r"chart.*account", r"gl.*account", r"contabil",
            ),
            _ACCOUNT_SAMPLE,
        ),
        _key_field(
            FinancialField.SCENARIO,
            _patterns(
                r"cenario", r"scenario", r"versao", r"version", r"orcamento",
                r"budget", r"real", r"actual", r"forecast", r"previsao",
            ),
            _SCENARIO_SAMPLE,
        ),
        FieldDefinition(
            field_id=FinancialField.PERIOD.value,
            name_patterns=_patterns(
                r"periodo", r"period", r"data", r"date", _word("mes"), r"month",
                _word("ano"), r"year", r"trimestre", r"quarter", r"semestre",
                r"semester", r"competencia",
            ),
            type_scores={ColumnType.DATE: 1.0, ColumnType.TEXT: 0.7},
            fallback_type_score=0.2,
            sample_heuristic=_PERIOD_SAMPLE,
            natural_type=ColumnType.DATE,
            default_transform=PARSE_DATE,
            transform_policy=TransformPolicy.CONVERT,
            validation_rules=("required", "validDate"),
        ),
        FieldDefinition(
            field_id=FinancialField.VALUE.value,
            name_patterns=_patterns(
                r"valor", r"value", r"amount", r"montante", r"saldo", r"balance",
                r"debito", r"debit", r"credito", r"credit", r"total",
            ),
            type_scores={ColumnType.NUMBER: 1.0},
            fallback_type_score=0.3,
            sample_heuristic=_VALUE_SAMPLE,
            natural_type=ColumnType.NUMBER,
            default_transform=PARSE_NUMBER,
            transform_policy=TransformPolicy.CONVERT,
            validation_rules=("required", "numeric", "finite"),
        ),
        _free_text_field(
            FinancialField.DESCRIPTION,
            _patterns(
                r"descricao", r"description", r"historico", r"history", r"memo",
                r"observacao", r"observation", r"comentario", r"comment",
            ),
            rules=("maxLength:500",),
        ),
        _free_text_field(
            FinancialField.CURRENCY,
            _patterns(r"moeda", r"currency", _word("coin"), _word("brl"),
                      _word("usd"), _word("eur")),
        ),
        _free_text_field(
            FinancialField.UNIT,
            _patterns(r"unidade", _word("unit"), r"medida", r"measure", _word("qty"),
                      r"quantidade", r"quantity"),
        ),
        _free_text_field(
            FinancialField.CATEGORY,
            _patterns(
                r"(?<!sub)categor", r"(?<!sub)class", r"(?<!sub)grupo",
                r"(?<!sub)group", r"(?<!sub)tipo", r"(?<!sub)type",
            ),
        ),
        _free_text_field(
            FinancialField.SUBCATEGORY,
            _patterns(
                r"subcategor", r"subclass", r"subgrupo", r"subgroup",
                r"subtipo", r"subtype",
            ),
        ),
        _free_text_field(
            FinancialField.COST_CENTER,
            _patterns(
                r"centro.*custo", r"cost.*cent(er|re)", _word("cc"),
                r"centro.*responsabilidade", r"responsibility.*center",
            ),
        ),
        _free_text_field(
            FinancialField.PROJECT,
            _patterns(r"projeto", r"project", r"obra", _word("job"), r"contrato",
                      r"contract"),
        ),
        _free_text_field(
            FinancialField.DEPARTMENT,
            _patterns(r"departamento", r"department", r"setor", r"sector",
                      _word("area"), r"divisao", r"division"),
        ),
    ])


DEFAULT_REGISTRY: FieldRegistry = build_default_registry()
