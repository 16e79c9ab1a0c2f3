"""
Column Mapper — column-to-field mapping engine for financial fact imports.

Assigns each column of a spreadsheet with an unknown schema to a canonical
financial field (entity, account, scenario, period, value, ...), scoring
every candidate from its header, inferred type and sample values, and then
converts the raw rows into canonical records.

Every mapping carries an explainable confidence score.  Invalid mapping sets
are reported through a ``ValidationSummary``, never raised.
"""

__version__ = "1.0.0"

from column_mapper.config import MappingConfig, NumberFormat, PipelineConfig  # noqa: F401
from column_mapper.pipeline import (  # noqa: F401
    ColumnMappingPipeline,
    apply_mapping,
    render_report,
    resolve_mapping,
)
from column_mapper.schema import (  # noqa: F401
    Column,
    ColumnMapping,
    ColumnType,
    FinancialField,
    UnknownFieldError,
    ValidationSummary,
)
from column_mapper.templates import (  # noqa: F401
    MappingTemplate,
    SavedMappingConfig,
    find_config_for_file,
    get_template,
    list_templates,
)
