from __future__ import annotations

import re
import threading
import time
from typing import Dict, List, Union

import pytest
from bs4 import BeautifulSoup

from ssd_web.domain.errors import FetchFailure
from ssd_web.services.batch_service import (
    EMPTY_TEXT_MESSAGE,
    INVALID_IDENTIFIER_MESSAGE,
    BatchLog,
    BatchService,
    RequestPacer,
)
from ssd_web.services.detector import SoftwareDetector
from ssd_web.services.identifier_normalization import PmcIdentifierNormalizer

R_ARTICLE = "<article><body><p>analyses were performed using R version 4.1.2</p></body></article>"
SPSS_ARTICLE = "<article><body><p>Data were analysed in SPSS 25.</p></body></article>"
NO_SOFTWARE_ARTICLE = "<article><body><p>We counted the birds by hand.</p></body></article>"
EMPTY_ARTICLE = "<article><body/></article>"


# -----------------------------
# Test doubles
# -----------------------------
class FakeFetcher:
    """Returns canned XML per canonical id; Exception values are raised instead."""

    def __init__(self, documents: Dict[str, Union[str, Exception]], delay: float = 0.0):
        self._documents = documents
        self._delay = delay
        self.calls: List[str] = []
        self._lock = threading.Lock()

    def fetch(self, canonical_id: str) -> BeautifulSoup:
        with self._lock:
            self.calls.append(canonical_id)
        if self._delay:
            time.sleep(self._delay)
        doc = self._documents.get(canonical_id)
        if doc is None:
            raise FetchFailure(f"{canonical_id} not found", FetchFailure.NOT_FOUND)
        if isinstance(doc, Exception):
            raise doc
        return BeautifulSoup(doc, "xml")


class RecordingSleep:
    def __init__(self):
        self.calls: List[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


# -----------------------------
# Helpers
# -----------------------------
def make_service(fetcher, *, max_workers: int = 1, sleep=None, **kwargs) -> BatchService:
    return BatchService(
        normalizer=PmcIdentifierNormalizer(),
        fetcher=fetcher,
        detector=SoftwareDetector(),
        request_delay_seconds=0.2,
        max_workers=max_workers,
        sleep=sleep or RecordingSleep(),
        **kwargs,
    )


# -----------------------------
# Tests
# -----------------------------
def test_batch_preserves_order_and_marks_invalid_item():
    fetcher = FakeFetcher({"PMC1": R_ARTICLE, "PMC2": SPSS_ARTICLE})
    result = make_service(fetcher).run(["PMC1", "bad id", "PMC2"])

    assert [r.input_identifier for r in result.records] == ["PMC1", "bad id", "PMC2"]

    first, invalid, third = result.records
    assert invalid.canonical_identifier is None
    assert invalid.error_message == INVALID_IDENTIFIER_MESSAGE
    assert invalid.text_accessible is False
    assert invalid.detections == ()

    assert fetcher.calls == ["PMC1", "PMC2"]
    assert first.detected_keys == ("R",)
    assert first.detections[0].version == "4.1.2"
    assert third.detected_keys == ("SPSS",)
    assert first.error_message == third.error_message == ""
    assert first.text_accessible and third.text_accessible


def test_fetch_failure_is_recorded_and_truncated():
    long_message = "upstream exploded " * 20
    fetcher = FakeFetcher({"PMC5": FetchFailure(long_message), "PMC6": R_ARTICLE})
    result = make_service(fetcher, error_message_limit=100).run(["5", "PMC6"])

    failed, ok = result.records
    assert failed.canonical_identifier == "PMC5"
    assert failed.text_accessible is False
    assert failed.error_message.startswith("Fetch failed: upstream exploded")
    assert len(failed.error_message) == len("Fetch failed: ") + 100
    assert ok.detected_keys == ("R",)


def test_not_found_is_a_fetch_failure():
    result = make_service(FakeFetcher({})).run(["PMC404"])
    record = result.records[0]
    assert record.text_accessible is False
    assert record.error_message == "Fetch failed: PMC404 not found"


def test_empty_extraction_is_accessible_with_error():
    result = make_service(FakeFetcher({"PMC7": EMPTY_ARTICLE})).run(["PMC7"])
    record = result.records[0]
    assert record.text_accessible is True
    assert record.error_message == EMPTY_TEXT_MESSAGE
    assert record.detections == ()


def test_accessible_article_without_software():
    result = make_service(FakeFetcher({"PMC8": NO_SOFTWARE_ARTICLE})).run(["PMC8"])
    record = result.records[0]
    assert record.text_accessible is True
    assert record.error_message == ""
    assert record.detections == ()
    assert any("no statistical software detected" in line for line in result.log_entries)


def test_unexpected_error_does_not_abort_batch():
    fetcher = FakeFetcher({"PMC1": RuntimeError("boom"), "PMC2": SPSS_ARTICLE})
    result = make_service(fetcher).run(["PMC1", "PMC2"])

    broken, ok = result.records
    assert broken.error_message == "Unexpected error: boom"
    assert ok.detected_keys == ("SPSS",)


def test_every_item_fails_batch_still_returns():
    result = make_service(FakeFetcher({})).run(["x", "y", "PMC1"])
    assert len(result.records) == 3
    assert all(r.error_message for r in result.records)


def test_pacing_sleeps_before_each_fetch_only():
    sleep = RecordingSleep()
    fetcher = FakeFetcher({"PMC1": R_ARTICLE, "PMC2": R_ARTICLE})
    make_service(fetcher, sleep=sleep).run(["PMC1", "invalid!", "PMC2"])
    assert sleep.calls == [0.2, 0.2]


def test_zero_delay_never_sleeps():
    sleep = RecordingSleep()
    service = make_service(FakeFetcher({"PMC1": R_ARTICLE}), sleep=sleep)
    service.request_delay_seconds = 0
    service.run(["PMC1"])
    assert sleep.calls == []


def test_processing_time_recorded_for_every_outcome():
    ticks = iter(float(i) for i in range(100))
    service = make_service(FakeFetcher({"PMC1": R_ARTICLE}), timer=lambda: next(ticks))
    result = service.run(["PMC1", "bad"])
    assert all(r.processing_seconds > 0 for r in result.records)


def test_log_lines_are_timestamped_and_identify_items():
    result = make_service(FakeFetcher({"PMC1": R_ARTICLE})).run(["PMC1", "nope"])

    assert result.log_entries
    assert all(re.match(r"^\[\d{2}:\d{2}:\d{2}\] ", line) for line in result.log_entries)
    assert any("PMC1: detected R (4.1.2)" in line for line in result.log_entries)
    assert any(f"nope: {INVALID_IDENTIFIER_MESSAGE}" in line for line in result.log_entries)
    assert result.log_entries[0].endswith("Starting batch of 2 identifier(s)")
    assert "Batch complete" in result.log_entries[-1]


def test_full_length_batch_is_processed():
    ids = [f"PMC{i}" for i in range(1, 21)]
    fetcher = FakeFetcher({i: R_ARTICLE for i in ids})
    result = make_service(fetcher).run(ids)
    assert [r.canonical_identifier for r in result.records] == ids
    assert all(r.detected_keys == ("R",) for r in result.records)


@pytest.mark.parametrize("workers", [2, 4])
def test_parallel_run_keeps_input_order(workers):
    ids = [f"PMC{i}" for i in range(1, 9)]
    docs = {i: (SPSS_ARTICLE if n % 2 else R_ARTICLE) for n, i in enumerate(ids)}
    docs["PMC3"] = FetchFailure("gone")
    fetcher = FakeFetcher(docs, delay=0.01)

    result = make_service(fetcher, max_workers=workers).run(ids + ["bad"])

    assert [r.input_identifier for r in result.records] == ids + ["bad"]
    assert result.records[2].error_message == "Fetch failed: gone"
    assert result.records[-1].error_message == INVALID_IDENTIFIER_MESSAGE
    assert sorted(fetcher.calls) == sorted(ids)

    # each item's own lines stay in stage order even when workers interleave
    pmc1_lines = [line for line in result.log_entries if "] PMC1:" in line]
    assert "processing" in pmc1_lines[0]
    assert "finished in" in pmc1_lines[-1]


def test_batch_log_is_append_only_snapshot():
    log = BatchLog()
    log.append("one")
    snapshot = log.entries()
    log.append("two")
    assert len(snapshot) == 1
    assert len(log.entries()) == 2


def test_request_pacer_serializes_sleeps():
    sleep = RecordingSleep()
    pacer = RequestPacer(0.5, sleep=sleep)
    threads = [threading.Thread(target=pacer.wait) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert sleep.calls == [0.5] * 4


def test_extraction_fault_is_reported_as_empty_text(monkeypatch):
    from ssd_web.services import text_extraction

    def _broken(root):
        raise RuntimeError("tree walk failed")

    monkeypatch.setattr(text_extraction, "select_content_elements", _broken)
    result = make_service(FakeFetcher({"PMC1": SPSS_ARTICLE})).run(["PMC1"])

    record = result.records[0]
    assert record.text_accessible is True
    assert record.error_message == EMPTY_TEXT_MESSAGE
    assert record.detections == ()
