"""
Input Readers.

Turn tabular sources (in-memory rows, CSV text or files, ``.xlsx``
workbooks, pandas DataFrames) into a uniform ``ParsedTable``: header names,
raw rows, and the per-column metadata (inferred type plus a bounded sample
of values) that the resolver consumes.

Production imports get their columns from the upstream spreadsheet parser;
these readers cover local use, diagnostics and tests with the same shape.
"""

from __future__ import annotations

import csv
from dataclasses import dataclass, field
from datetime import date
from io import StringIO
from pathlib import Path
from typing import Any, List, Optional, Sequence, Union

import openpyxl

from column_mapper.logging_setup import get_logger
from column_mapper.schema import Column, ColumnType

logger = get_logger("readers")

DEFAULT_SAMPLE_SIZE = 10

# Values inspected per column for type inference
_TYPE_SCAN_LIMIT = 100

_CSV_DELIMITERS = (",", ";", "\t", "|")


@dataclass
class ParsedTable:
    """Headers, raw rows and column metadata of one sheet."""

    headers: List[str] = field(default_factory=list)
    rows: List[List[Any]] = field(default_factory=list)
    columns: List[Column] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Profiling
# ---------------------------------------------------------------------------

def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _value_kind(value: Any) -> Optional[ColumnType]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return ColumnType.NUMBER
    if isinstance(value, date):
        return ColumnType.DATE
    return ColumnType.TEXT


def infer_column_type(values: Sequence[Any]) -> ColumnType:
    """Primitive type of a column's non-blank values.

    Only native values are typed: a column is ``number`` or ``date`` when
    every inspected value is an int/float or a date/datetime.  Strings stay
    ``text`` whatever they look like, so that ``"1.234"`` or ``"03/04/2024"``
    are read later with the separators and date formats of the mapping
    config.  Booleans, mixtures and empty columns are ``text``.
    """
    kinds = {_value_kind(v) for v in list(values)[:_TYPE_SCAN_LIMIT] if not _is_blank(v)}
    if len(kinds) == 1:
        kind = kinds.pop()
        if kind is not None:
            return kind
    return ColumnType.TEXT


def profile_columns(
    headers: Sequence[Any],
    rows: Sequence[Sequence[Any]],
    sample_size: int = DEFAULT_SAMPLE_SIZE,
) -> List[Column]:
    """Build ``Column`` metadata for every header."""
    columns: list[Column] = []
    for index, header in enumerate(headers):
        name = str(header).strip() if not _is_blank(header) else f"Column {index + 1}"
        values = [
            row[index] for row in rows
            if index < len(row) and not _is_blank(row[index])
        ]
        columns.append(Column(
            name=name,
            index=index,
            inferred_type=infer_column_type(values),
            samples=values[:sample_size],
        ))
        logger.debug(
            "Column %d %r: type=%s, non-blank=%d",
            index, name, columns[-1].inferred_type.value, len(values),
        )
    return columns


# ---------------------------------------------------------------------------
# Readers
# ---------------------------------------------------------------------------

def _clean_cell(value: Any) -> Any:
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


def read_rows(
    headers: Sequence[Any],
    rows: Sequence[Sequence[Any]],
    sample_size: int = DEFAULT_SAMPLE_SIZE,
) -> ParsedTable:
    """Wrap in-memory rows; fully blank rows are skipped."""
    kept = [
        [_clean_cell(v) for v in row]
        for row in rows
        if not all(_is_blank(v) for v in row)
    ]
    return ParsedTable(
        headers=[str(h) if h is not None else "" for h in headers],
        rows=kept,
        columns=profile_columns(headers, kept, sample_size),
    )


def detect_delimiter(sample: str) -> str:
    """Pick the candidate delimiter that occurs most in the first line."""
    first_line = sample.splitlines()[0] if sample else ""
    counts = {d: first_line.count(d) for d in _CSV_DELIMITERS}
    best = max(counts, key=lambda d: counts[d])
    return best if counts[best] else ","


# Longest string still tried as a file name
_MAX_PATH_LENGTH = 4096


def _is_file_path(source: Union[str, Path]) -> bool:
    if isinstance(source, Path):
        return True
    if not source or "\n" in source or len(source) >= _MAX_PATH_LENGTH:
        return False
    try:
        return Path(source).is_file()
    except OSError:
        # Too long for the OS, or otherwise not a usable path: CSV text
        return False


def read_csv(
    source: Union[str, Path],
    delimiter: Optional[str] = None,
    sample_size: int = DEFAULT_SAMPLE_SIZE,
) -> ParsedTable:
    """Read a CSV file or CSV text whose first row holds the headers."""
    if _is_file_path(source):
        text = Path(source).read_text(encoding="utf-8-sig")
    else:
        text = source

    delimiter = delimiter or detect_delimiter(text)
    rows = list(csv.reader(StringIO(text), delimiter=delimiter))
    if not rows:
        raise ValueError("CSV source has no header row")

    logger.info("Read CSV: %d data rows, delimiter=%r", len(rows) - 1, delimiter)
    return read_rows(rows[0], rows[1:], sample_size)


def read_excel(
    path: Union[str, Path],
    sheet_name: Optional[str] = None,
    sample_size: int = DEFAULT_SAMPLE_SIZE,
) -> ParsedTable:
    """Read one worksheet of an ``.xlsx`` file.

    The first non-blank row is the header row.  Cached formula results are
    read (``data_only=True``), not the formulas themselves.
    """
    wb = openpyxl.load_workbook(Path(path), data_only=True, read_only=True)
    try:
        if sheet_name is not None and sheet_name not in wb.sheetnames:
            raise ValueError(
                f"Sheet {sheet_name!r} not found; available: {wb.sheetnames}"
            )
        ws = wb[sheet_name] if sheet_name is not None else wb.active
        grid = [
            list(row) for row in ws.iter_rows(values_only=True)
            if not all(_is_blank(v) for v in row)
        ]
        logger.info("Read sheet '%s': %d non-blank rows", ws.title, len(grid))
    finally:
        wb.close()

    if not grid:
        raise ValueError(f"Worksheet in {path} is empty")
    return read_rows(grid[0], grid[1:], sample_size)


def read_dataframe(df: Any, sample_size: int = DEFAULT_SAMPLE_SIZE) -> ParsedTable:
    """Read a pandas DataFrame; its column labels are the headers."""
    try:
        import pandas as pd  # noqa: F811
    except ImportError as exc:
        raise ImportError(
            "pandas is required to use read_dataframe"
        ) from exc

    if not isinstance(df, pd.DataFrame):
        raise TypeError(f"Expected pandas DataFrame, got {type(df).__name__}")

    cleaned = df.astype(object).where(pd.notna(df), None)
    return read_rows(
        [str(c) for c in df.columns],
        cleaned.values.tolist(),
        sample_size,
    )
