"""
Mapping templates and saved-configuration selection.

Built-in templates are starting points for common sheet families.  Saved
configurations live in an external store; this module only decides which
of them applies to an incoming file, by matching the file name against each
configuration's ``file_pattern`` regular expression.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from column_mapper.config import MappingConfig
from column_mapper.logging_setup import get_logger
from column_mapper.schema import CORE_FIELDS, FinancialField

logger = get_logger("templates")


@dataclass(frozen=True)
class MappingTemplate:
    id: str
    name: str
    description: str
    category: str  # "financial" | "accounting" | "budget" | "custom"
    config: MappingConfig


@dataclass(frozen=True)
class SavedMappingConfig:
    """A named configuration as kept by the configuration store."""

    name: str
    config: MappingConfig = field(default_factory=MappingConfig)
    file_pattern: Optional[str] = None
    description: Optional[str] = None

    def matches(self, filename: str) -> bool:
        """True if ``file_pattern`` matches *filename* (case-insensitive).

        A configuration without a pattern, or with an invalid one, never
        matches.
        """
        if not self.file_pattern:
            return False
        try:
            return re.search(self.file_pattern, filename, re.IGNORECASE) is not None
        except re.error as exc:
            logger.warning(
                "Invalid file pattern %r on config %r: %s",
                self.file_pattern,
                self.name,
                exc,
            )
            return False


# ---------------------------------------------------------------------------
# Built-in templates
# ---------------------------------------------------------------------------

_BUILTIN_TEMPLATES: tuple[MappingTemplate, ...] = (
    MappingTemplate(
        id="financial-standard",
        name="Financial standard",
        description="Entity, account, scenario, period and value per row",
        category="financial",
        config=MappingConfig(
            required_fields=CORE_FIELDS,
            date_formats=("DD/MM/YYYY", "MM/DD/YYYY", "YYYY-MM-DD"),
        ),
    ),
    MappingTemplate(
        id="budget-planning",
        name="Budget planning",
        description="Budget data with several scenarios",
        category="budget",
        config=MappingConfig(
            required_fields=CORE_FIELDS,
            date_formats=("DD/MM/YYYY", "YYYY-MM-DD"),
            entity_default="system",
            account_default="GENERAL",
        ),
    ),
    MappingTemplate(
        id="accounting-entries",
        name="Accounting entries",
        description="Journal entries with debit and credit lines",
        category="accounting",
        config=MappingConfig(
            required_fields=(
                FinancialField.ACCOUNT.value,
                FinancialField.PERIOD.value,
                FinancialField.VALUE.value,
                FinancialField.DESCRIPTION.value,
            ),
            date_formats=("DD/MM/YYYY",),
        ),
    ),
)


def list_templates(category: Optional[str] = None) -> List[MappingTemplate]:
    """Built-in templates, optionally filtered by category."""
    return [t for t in _BUILTIN_TEMPLATES if category is None or t.category == category]


def get_template(template_id: str) -> MappingTemplate:
    """Return a built-in template by id.

    Raises
    ------
    ValueError
        If no template has that id.
    """
    for template in _BUILTIN_TEMPLATES:
        if template.id == template_id:
            return template
    known = ", ".join(t.id for t in _BUILTIN_TEMPLATES)
    raise ValueError(f"Unknown template {template_id!r}. Known templates: {known}")


def find_config_for_file(
    filename: str, saved: Iterable[SavedMappingConfig]
) -> Optional[SavedMappingConfig]:
    """First saved configuration whose file pattern matches *filename*.

    *saved* should already be in the caller's preferred order (the store
    returns newest first).
    """
    for candidate in saved:
        if candidate.matches(filename):
            logger.info("File %r matched saved config %r", filename, candidate.name)
            return candidate
    logger.info("No saved config matches file %r", filename)
    return None
