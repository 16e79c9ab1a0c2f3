"""
Value Transformations.

Pure, deterministic functions that turn raw cell values into the canonical
representation of their target field.  None of them raises for a bad cell:
a value that cannot be parsed becomes ``None`` and is left for row-level
validation to report.

* ``parse_number`` — locale-aware numeric parsing driven by the configured
  decimal / thousands separators.
* ``parse_date``   — ISO-8601 (including ``2024`` and ``2024-01`` periods)
  first, then each format token in the declared order; the first
  calendar-valid match wins.
* ``normalize_text`` — trim, collapse whitespace, drop invisible characters.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from functools import lru_cache
from typing import Any, Iterable, Optional, Union

from column_mapper.config import MappingConfig
from column_mapper.logging_setup import get_logger
from column_mapper.registry import NORMALIZE_TEXT, PARSE_DATE, PARSE_NUMBER

logger = get_logger("transforms")


# ---------------------------------------------------------------------------
# Numbers
# ---------------------------------------------------------------------------

_NUMBER_CHARS_RE = re.compile(r"[^\d.,\-+]")

# Accounting-style negative: ``(1.234,56)``
_PAREN_NEG_RE = re.compile(r"^\((.+)\)$")


def parse_number(
    raw: Any,
    decimal_separator: str = ",",
    thousands_separator: str = ".",
) -> Optional[float]:
    """Parse a numeric cell written with the given separators.

    * Ints and floats pass through unchanged.
    * If the decimal separator is present, its *last* occurrence splits the
      fraction off and every thousands separator is removed from the
      integer part.
    * Otherwise a thousands separator that occurs more than once, or once
      with more than two digits after it, is grouping and is removed; a
      single one with at most two trailing digits is read as a decimal
      point.

    Returns ``None`` when the value cannot be parsed.
    """
    if isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        return raw

    text = str(raw).strip()
    if not text:
        return None

    negative = False
    m = _PAREN_NEG_RE.match(text)
    if m:
        negative = True
        text = m.group(1)

    cleaned = _NUMBER_CHARS_RE.sub("", text)

    if decimal_separator in cleaned:
        integer, _, fraction = cleaned.rpartition(decimal_separator)
        integer = integer.replace(thousands_separator, "")
        cleaned = f"{integer}.{fraction}"
    else:
        count = cleaned.count(thousands_separator)
        trailing = cleaned.rsplit(thousands_separator, 1)[-1] if count else ""
        if count > 1 or (count == 1 and len(trailing) > 2):
            cleaned = cleaned.replace(thousands_separator, "")
        elif count == 1:
            cleaned = cleaned.replace(thousands_separator, ".")

    try:
        value = float(cleaned)
    except ValueError:
        logger.debug("parse_number: cannot parse %r (cleaned=%r)", raw, cleaned)
        return None

    return -value if negative else value


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------

_FORMAT_TOKEN_RE = re.compile(r"YYYY|DD|MM")

_TOKEN_GROUPS = {
    "YYYY": r"(?P<year>\d{4})",
    "MM": r"(?P<month>\d{1,2})",
    "DD": r"(?P<day>\d{1,2})",
}


@lru_cache(maxsize=64)
def compile_date_format(fmt: str) -> Optional[re.Pattern]:
    """Turn a token such as ``"DD/MM/YYYY"`` into an anchored regex.

    ``DD``, ``MM`` and ``YYYY`` must each appear exactly once; everything
    else is matched literally.  Returns ``None`` for unsupported tokens.
    """
    found = _FORMAT_TOKEN_RE.findall(fmt)
    if sorted(found) != ["DD", "MM", "YYYY"]:
        return None

    parts: list[str] = []
    pos = 0
    for m in _FORMAT_TOKEN_RE.finditer(fmt):
        parts.append(re.escape(fmt[pos:m.start()]))
        parts.append(_TOKEN_GROUPS[m.group()])
        pos = m.end()
    parts.append(re.escape(fmt[pos:]))
    return re.compile("^" + "".join(parts) + "$")


def parse_date_with_format(text: str, fmt: str) -> Optional[date]:
    """Parse *text* with a single format token, or return ``None``.

    A structural match that is not a real calendar date (``31/02/2024``)
    is rejected rather than rolled over into the next month.
    """
    pattern = compile_date_format(fmt)
    if pattern is None:
        logger.debug("Unsupported date format token %r skipped", fmt)
        return None

    m = pattern.match(text)
    if not m:
        return None

    try:
        return date(int(m.group("year")), int(m.group("month")), int(m.group("day")))
    except ValueError:
        logger.debug("parse_date: %r matches %r but is not a valid date", text, fmt)
        return None


# Reduced-precision ISO-8601 periods: ``2024``, ``2024-01``, ``2024/01``
_PARTIAL_ISO_RE = re.compile(r"^(?P<year>\d{4})(?:[-/](?P<month>\d{1,2}))?$")


def _parse_iso(text: str) -> Optional[Union[date, datetime]]:
    m = _PARTIAL_ISO_RE.match(text)
    if m:
        try:
            return date(int(m.group("year")), int(m.group("month") or 1), 1)
        except ValueError:
            return None
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def parse_date(
    raw: Any,
    format_candidates: Iterable[str] = (),
) -> Optional[Union[date, datetime]]:
    """Parse a date cell.

    Tries an ISO-8601 parse first, then every entry of *format_candidates*
    in declared order.  Year-only and year-month periods (``2024``,
    ``2024-01``, or a whole-number year cell) resolve to the first day of
    the period.  Day/month ambiguity (``03/04/2024``) is settled by
    whichever format is listed first and matches.
    """
    if isinstance(raw, (date, datetime)):
        return raw
    if isinstance(raw, bool):
        return None
    # Whole-number cells such as a year typed as 2024 or 2024.0
    if isinstance(raw, float) and raw.is_integer():
        raw = int(raw)

    text = str(raw).strip()
    if not text:
        return None

    direct = _parse_iso(text)
    if direct is not None:
        return direct

    for fmt in format_candidates:
        parsed = parse_date_with_format(text, fmt)
        if parsed is not None:
            logger.debug("parse_date: %r → %s via %r", raw, parsed, fmt)
            return parsed

    logger.debug("parse_date: no format matched %r", raw)
    return None


# ---------------------------------------------------------------------------
# Text
# ---------------------------------------------------------------------------

_INVISIBLE_RE = re.compile(r"[\u200B-\u200D\u2060\uFEFF]")
_WHITESPACE_RE = re.compile(r"\s+")


def normalize_text(raw: Any) -> str:
    """Trim, collapse whitespace runs, strip zero-width characters."""
    if raw is None:
        return ""
    text = _INVISIBLE_RE.sub("", str(raw))
    return _WHITESPACE_RE.sub(" ", text).strip()


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------

# Stored configurations use the camelCase names
TRANSFORM_ALIASES = {
    "parseNumber": PARSE_NUMBER,
    "parseDate": PARSE_DATE,
    "normalizeText": NORMALIZE_TEXT,
}


def apply_transform(value: Any, transform: str, config: MappingConfig) -> Any:
    """Run the named transformation on *value*.

    Unknown transform ids leave the value unchanged.
    """
    name = TRANSFORM_ALIASES.get(transform, transform)
    if name == PARSE_NUMBER:
        return parse_number(value, config.decimal_separator, config.thousands_separator)
    if name == PARSE_DATE:
        return parse_date(value, config.date_formats)
    if name == NORMALIZE_TEXT:
        return normalize_text(value)

    logger.warning("Unknown transform %r; value passed through unchanged", transform)
    return value
