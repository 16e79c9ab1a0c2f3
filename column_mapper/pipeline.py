"""
Pipeline Orchestrator.

The central entry point that wires together every layer:

    Columns  →  Candidate Scorer  →  Mapping Resolver  →  Validator
    Rows     →  Value Transformer  →  canonical records
    Result   →  Report Generator

Usage
-----
>>> from column_mapper.pipeline import ColumnMappingPipeline
>>> from column_mapper.readers import read_csv
>>>
>>> pipe = ColumnMappingPipeline()
>>> result = pipe.map_table(read_csv("Empresa;Conta;Valor\\nACME;1.01;1.234,56\\n"))
>>> print(pipe.report(result.mappings, result.summary))

The module-level ``resolve_mapping`` / ``apply_mapping`` / ``render_report``
functions are the stateless equivalents over the built-in field registry.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Union

from column_mapper.config import MappingConfig, PipelineConfig
from column_mapper.logging_setup import configure_logging, get_logger
from column_mapper.readers import ParsedTable, read_csv, read_dataframe, read_excel
from column_mapper.registry import FieldRegistry
from column_mapper.report import render_report as _render
from column_mapper.resolver import MappingResolver
from column_mapper.schema import Column, ColumnMapping, ImportResult, ValidationSummary
from column_mapper.scorer import CandidateScorer
from column_mapper.templates import SavedMappingConfig, find_config_for_file, get_template
from column_mapper.transformer import ValueTransformer

logger = get_logger("pipeline")


class ColumnMappingPipeline:
    """Resolves, applies and reports column mappings.

    Parameters
    ----------
    config:
        Pipeline settings; ``config.mapping`` is used whenever a call does
        not pass its own ``MappingConfig``.
    registry:
        Field table to map into.  Defaults to the built-in registry.
    clock:
        Source of the ``created_at`` audit timestamp.
    template:
        Id of a built-in mapping template.  When given, its config replaces
        ``config.mapping`` as the default for every call.
    """

    def __init__(
        self,
        config: Optional[PipelineConfig] = None,
        registry: Optional[FieldRegistry] = None,
        clock: Optional[Callable[[], datetime]] = None,
        template: Optional[str] = None,
    ) -> None:
        self._config = config or PipelineConfig()
        if template is not None:
            self._config = replace(self._config, mapping=get_template(template).config)

        # Bootstrap logging before anything else
        configure_logging(level=self._config.log_level)

        self._scorer = CandidateScorer(registry)
        self._resolver = MappingResolver(self._scorer)
        self._transformer = ValueTransformer(clock)

        logger.info(
            "Pipeline initialised — fields=%d, auto_detect=%s, required=%s",
            len(self._scorer.registry),
            self._config.mapping.auto_detect,
            ", ".join(self._config.mapping.required_fields),
        )

    @property
    def scorer(self) -> CandidateScorer:
        return self._scorer

    # ------------------------------------------------------------------ #
    # Core operations
    # ------------------------------------------------------------------ #

    def resolve(
        self,
        columns: Sequence[Column],
        config: Optional[MappingConfig] = None,
    ) -> tuple[list[ColumnMapping], ValidationSummary]:
        return self._resolver.resolve(columns, config or self._config.mapping)

    def apply(
        self,
        rows: Sequence[Sequence[Any]],
        mappings: Sequence[ColumnMapping],
        config: Optional[MappingConfig] = None,
    ) -> List[Dict[str, Any]]:
        return self._transformer.apply(rows, mappings, config or self._config.mapping)

    @staticmethod
    def report(
        mappings: Sequence[ColumnMapping], summary: ValidationSummary
    ) -> str:
        return _render(mappings, summary)

    # ------------------------------------------------------------------ #
    # Convenience entry points (one per input format)
    # ------------------------------------------------------------------ #

    def map_table(
        self,
        table: ParsedTable,
        config: Optional[MappingConfig] = None,
    ) -> ImportResult:
        """Resolve the table's columns, then transform its rows."""
        config = config or self._config.mapping
        mappings, summary = self.resolve(table.columns, config)
        records = self.apply(table.rows, mappings, config)
        logger.info(
            "Import complete — rows=%d, mappings=%d, valid=%s",
            len(records),
            len(mappings),
            summary.is_valid,
        )
        return ImportResult(mappings=mappings, summary=summary, records=records)

    def map_csv(
        self,
        source: Union[str, Path],
        config: Optional[MappingConfig] = None,
        delimiter: Optional[str] = None,
    ) -> ImportResult:
        """Map a CSV file or CSV string."""
        table = read_csv(source, delimiter=delimiter, sample_size=self._config.sample_size)
        return self.map_table(table, config)

    def map_excel(
        self,
        source: Union[str, Path],
        config: Optional[MappingConfig] = None,
        sheet_name: Optional[str] = None,
    ) -> ImportResult:
        """Map one worksheet of an ``.xlsx`` file."""
        table = read_excel(source, sheet_name=sheet_name, sample_size=self._config.sample_size)
        return self.map_table(table, config)

    def map_dataframe(
        self,
        df: Any,
        config: Optional[MappingConfig] = None,
    ) -> ImportResult:
        """Map a pandas DataFrame."""
        table = read_dataframe(df, sample_size=self._config.sample_size)
        return self.map_table(table, config)

    def map_file(
        self,
        path: Union[str, Path],
        saved: Iterable[SavedMappingConfig] = (),
        sheet_name: Optional[str] = None,
    ) -> ImportResult:
        """Map a ``.csv`` or ``.xlsx`` file.

        The first saved configuration whose file pattern matches the file
        name is used; without a match the pipeline default applies.
        """
        path = Path(path)
        match = find_config_for_file(path.name, saved)
        config = match.config if match is not None else None

        if path.suffix.lower() == ".csv":
            return self.map_csv(path, config)
        if path.suffix.lower() in (".xlsx", ".xlsm"):
            return self.map_excel(path, config, sheet_name)
        raise ValueError(f"Unsupported file type: {path.suffix or path.name!r}")


# ---------------------------------------------------------------------------
# Stateless entry points
# ---------------------------------------------------------------------------

_default_resolver = MappingResolver()
_default_transformer = ValueTransformer()


def resolve_mapping(
    columns: Sequence[Column],
    config: Optional[MappingConfig] = None,
) -> tuple[list[ColumnMapping], ValidationSummary]:
    """Resolve *columns* against the built-in registry."""
    return _default_resolver.resolve(columns, config)


def apply_mapping(
    rows: Sequence[Sequence[Any]],
    mappings: Sequence[ColumnMapping],
    config: Optional[MappingConfig] = None,
) -> List[Dict[str, Any]]:
    """Transform *rows* into canonical records."""
    return _default_transformer.apply(rows, mappings, config)


def render_report(
    mappings: Sequence[ColumnMapping], summary: ValidationSummary
) -> str:
    """Plain-text diagnostic report."""
    return _render(mappings, summary)
