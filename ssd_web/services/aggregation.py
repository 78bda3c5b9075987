from __future__ import annotations

from collections import Counter

from ssd_web.domain.models import BatchResult, BatchSummary


def summarize(batch: BatchResult) -> BatchSummary:
    """Pure reduction of a batch into counters; safe to call any number of times."""
    records = batch.records

    counts = Counter()
    for r in records:
        counts.update(set(r.detected_keys))

    # Most frequent first, ties broken by key so the order is stable
    frequency = dict(sorted(counts.items(), key=lambda kv: (-kv[1], kv[0])))

    return BatchSummary(
        total_count=len(records),
        accessible_count=sum(1 for r in records if r.text_accessible),
        software_detected_count=sum(1 for r in records if r.has_detections),
        total_processing_seconds=sum(r.processing_seconds for r in records),
        frequency=frequency,
    )
