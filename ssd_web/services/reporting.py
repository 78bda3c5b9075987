"""
Reporting surface: flattens a BatchResult into rows for tables, CSV and JSON,
and the frequency breakdown used by the chart.
"""
from __future__ import annotations

import csv
import io
from dataclasses import asdict
from typing import Any, Dict, List, Sequence

from ssd_web.domain.models import BatchResult, BatchSummary, DetectionResult
from ssd_web.services.software_catalog import catalog_entry

NONE_DETECTED = "None detected"
INVALID_LABEL = "Invalid"

TABLE_COLUMNS = (
    "Input ID",
    "PMCID",
    "Text Accessible",
    "Detected Software",
    "Error",
    "Processing Time (s)",
)


def software_label(detections: Sequence[DetectionResult]) -> str:
    if not detections:
        return NONE_DETECTED
    return ", ".join(
        f"{d.display_name} ({d.version})" if d.version else d.display_name
        for d in detections
    )


def table_rows(batch: BatchResult) -> List[Dict[str, Any]]:
    return [
        {
            "Input ID": r.input_identifier,
            "PMCID": r.canonical_identifier or INVALID_LABEL,
            "Text Accessible": "Yes" if r.text_accessible else "No",
            "Detected Software": software_label(r.detections),
            "Error": r.error_message,
            "Processing Time (s)": round(r.processing_seconds, 2),
        }
        for r in batch.records
    ]


def frequency_rows(summary: BatchSummary) -> List[Dict[str, Any]]:
    rows = []
    for key, count in summary.frequency.items():
        entry = catalog_entry(key)
        rows.append(
            {
                "key": key,
                "name": entry.display_name if entry else key,
                "count": count,
                "color": entry.color_tag if entry else "#999999",
                "percent": round(100.0 * count / summary.total_count, 1) if summary.total_count else 0.0,
            }
        )
    return rows


def to_csv(batch: BatchResult) -> str:
    buf = io.StringIO()
    writer = csv.DictWriter(buf, fieldnames=list(TABLE_COLUMNS))
    writer.writeheader()
    writer.writerows(table_rows(batch))
    return buf.getvalue()


def to_dict(batch: BatchResult, summary: BatchSummary) -> Dict[str, Any]:
    return {
        "generated_at": batch.generated_at,
        "summary": asdict(summary),
        "records": [asdict(r) for r in batch.records],
        "log": list(batch.log_entries),
    }
