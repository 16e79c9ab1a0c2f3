"""
Report Generator.

Renders a resolved mapping set and its ``ValidationSummary`` for humans
(plain text) and tools (JSON / CSV).  Pure formatting with no effect on
control flow.
"""

from __future__ import annotations

import csv
import json
from io import StringIO
from typing import Sequence

from column_mapper.schema import ColumnMapping, ValidationSummary

HIGH_CONFIDENCE = 0.8
MEDIUM_CONFIDENCE = 0.5

# Below this average the whole mapping is flagged for review
REVIEW_AVERAGE = 0.7


def confidence_tier(confidence: float) -> str:
    """``high`` (≥ 0.8), ``medium`` (≥ 0.5) or ``low``."""
    if confidence >= HIGH_CONFIDENCE:
        return "high"
    if confidence >= MEDIUM_CONFIDENCE:
        return "medium"
    return "low"


def _recommendations(
    mappings: Sequence[ColumnMapping], summary: ValidationSummary
) -> list[str]:
    recs: list[str] = []
    if summary.is_valid:
        recs.append("Mapping is ready for data processing")
    else:
        if summary.missing_required_fields:
            recs.append("Map missing required fields before processing")
        if summary.duplicate_target_fields:
            recs.append("Resolve duplicate field mappings")

    if summary.low_confidence_fields:
        recs.append("Review low confidence mappings manually")

    if mappings:
        average = sum(m.confidence for m in mappings) / len(mappings)
        if average < REVIEW_AVERAGE:
            recs.append("Consider manual mapping review due to low average confidence")
    else:
        recs.append("No columns were mapped; add custom mappings for this file")
    return recs


def render_report(
    mappings: Sequence[ColumnMapping], summary: ValidationSummary
) -> str:
    """Plain-text report of *mappings* and *summary*."""
    lines: list[str] = ["=== COLUMN MAPPING REPORT ===", ""]

    lines.append(f"MAPPING STATUS: {'VALID' if summary.is_valid else 'INVALID'}")
    lines.append(f"TOTAL MAPPINGS: {len(mappings)}")
    lines.append(f"REQUIRED FIELDS MAPPED: {len(summary.required_fields_mapped)}")
    lines.append("")

    if mappings:
        lines.append("COLUMN MAPPINGS:")
        for i, m in enumerate(mappings, start=1):
            lines.append(
                f"{i}. {m.source_column} -> {m.target_field} "
                f"[{confidence_tier(m.confidence)}]"
            )
            lines.append(f"   Confidence: {m.confidence * 100:.1f}% ({m.method})")
            if m.transform:
                lines.append(f"   Transform: {m.transform}")
            if m.validation_rules:
                lines.append(f"   Validation: {', '.join(m.validation_rules)}")
            lines.append("")

    sections = (
        ("MISSING REQUIRED FIELDS:", summary.missing_required_fields),
        ("DUPLICATE FIELD MAPPINGS:", summary.duplicate_target_fields),
        ("LOW CONFIDENCE MAPPINGS:", summary.low_confidence_fields),
    )
    for title, fields in sections:
        if fields:
            lines.append(title)
            lines.extend(f"- {f}" for f in fields)
            lines.append("")

    lines.append("RECOMMENDATIONS:")
    lines.extend(f"- {r}" for r in _recommendations(mappings, summary))

    return "\n".join(lines) + "\n"


def report_to_json(
    mappings: Sequence[ColumnMapping],
    summary: ValidationSummary,
    indent: int = 2,
) -> str:
    """Serialise the mapping set, summary and recommendations to JSON."""
    payload = {
        "summary": summary.to_dict(),
        "mappings": [
            {**m.to_dict(), "tier": confidence_tier(m.confidence)} for m in mappings
        ],
        "recommendations": _recommendations(mappings, summary),
    }
    return json.dumps(payload, indent=indent, ensure_ascii=False)


def mappings_to_csv(mappings: Sequence[ColumnMapping]) -> str:
    """Serialise mappings to CSV text."""
    buf = StringIO()
    writer = csv.writer(buf)
    writer.writerow([
        "source_column", "source_index", "target_field",
        "confidence", "tier", "transform", "validation_rules", "method",
    ])
    for m in mappings:
        writer.writerow([
            m.source_column,
            m.source_index,
            m.target_field,
            round(m.confidence, 4),
            confidence_tier(m.confidence),
            m.transform or "",
            "; ".join(m.validation_rules),
            m.method,
        ])
    return buf.getvalue()
