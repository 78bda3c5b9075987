from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Optional, Sequence, Tuple

from ssd_web.adapters.pmc_fetcher import DocumentFetcher
from ssd_web.domain.errors import EmptyExtraction, FetchFailure, InvalidIdentifier
from ssd_web.domain.models import ArticleRecord, BatchResult, DetectionResult
from ssd_web.services.detector import SoftwareDetector
from ssd_web.services.identifier_normalization import IdentifierNormalizer
from ssd_web.services.reporting import software_label
from ssd_web.services.text_extraction import extract_text

logger = logging.getLogger(__name__)

INVALID_IDENTIFIER_MESSAGE = "Invalid identifier format"
EMPTY_TEXT_MESSAGE = "No extractable text content"


class BatchLog:
    """Append-only, timestamped log owned by one batch run."""

    def __init__(self, clock: Callable[[], datetime] = datetime.now):
        self._clock = clock
        self._lines: List[str] = []
        self._lock = threading.Lock()

    def append(self, message: str) -> None:
        line = f"[{self._clock().strftime('%H:%M:%S')}] {message}"
        with self._lock:
            self._lines.append(line)
        logger.info(message)

    def entries(self) -> Tuple[str, ...]:
        with self._lock:
            return tuple(self._lines)


class RequestPacer:
    """
    Sleeps a fixed interval before every upstream request. The lock serializes
    the pauses, so fetch starts stay at least `interval` apart across workers.
    """

    def __init__(self, interval: float, sleep: Callable[[float], None] = time.sleep):
        self.interval = interval
        self._sleep = sleep
        self._lock = threading.Lock()

    def wait(self) -> None:
        if self.interval <= 0:
            return
        with self._lock:
            self._sleep(self.interval)


@dataclass
class _ItemState:
    input_identifier: str
    canonical_identifier: Optional[str] = None
    text_accessible: bool = False
    detections: Tuple[DetectionResult, ...] = ()
    error_message: str = ""

    @property
    def label(self) -> str:
        return self.canonical_identifier or self.input_identifier or "<blank>"

    def finalize(self, processing_seconds: float) -> ArticleRecord:
        return ArticleRecord(
            input_identifier=self.input_identifier,
            canonical_identifier=self.canonical_identifier,
            text_accessible=self.text_accessible,
            detections=self.detections,
            error_message=self.error_message,
            processing_seconds=processing_seconds,
        )


@dataclass
class BatchService:
    """
    Service layer: runs normalize -> fetch -> extract -> detect for every
    identifier and collects one ArticleRecord per input, in input order.
    A failing item is recorded and the batch moves on; run() never raises
    for per-item problems.
    """
    normalizer: IdentifierNormalizer
    fetcher: DocumentFetcher
    detector: SoftwareDetector = field(default_factory=SoftwareDetector)
    request_delay_seconds: float = 0.2
    max_workers: int = 1
    error_message_limit: int = 100
    sleep: Callable[[float], None] = time.sleep
    timer: Callable[[], float] = time.perf_counter

    def run(self, identifiers: Sequence[str]) -> BatchResult:
        items = list(identifiers)
        log = BatchLog()
        pacer = RequestPacer(self.request_delay_seconds, sleep=self.sleep)
        started = self.timer()

        log.append(f"Starting batch of {len(items)} identifier(s)")

        workers = max(1, min(self.max_workers, len(items)))
        if workers == 1:
            records = [self.process_item(raw, log, pacer) for raw in items]
        else:
            with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="ssd-batch") as pool:
                # map() yields in submission order regardless of completion order
                records = list(pool.map(lambda raw: self.process_item(raw, log, pacer), items))

        with_software = sum(1 for r in records if r.has_detections)
        log.append(
            f"Batch complete: {len(records)} processed, {with_software} with software detected "
            f"({self.timer() - started:.2f}s)"
        )

        return BatchResult(
            records=tuple(records),
            log_entries=log.entries(),
            generated_at=datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
        )

    def process_item(self, raw: str, log: BatchLog, pacer: RequestPacer) -> ArticleRecord:
        state = _ItemState(input_identifier=raw)
        started = self.timer()
        log.append(f"{state.label}: processing")

        try:
            self._run_stages(state, log, pacer)
        except InvalidIdentifier:
            state.error_message = INVALID_IDENTIFIER_MESSAGE
            state.text_accessible = False
            log.append(f"{state.label}: {INVALID_IDENTIFIER_MESSAGE}")
        except FetchFailure as e:
            state.error_message = f"Fetch failed: {self._truncate(e.message)}"
            state.text_accessible = False
            log.append(f"{state.label}: {state.error_message}")
        except EmptyExtraction:
            state.error_message = EMPTY_TEXT_MESSAGE
            state.text_accessible = True
            state.detections = ()
            log.append(f"{state.label}: {EMPTY_TEXT_MESSAGE}")
        except Exception as e:
            logger.exception("Unexpected failure while processing %s", state.label)
            state.error_message = f"Unexpected error: {self._truncate(str(e))}"
            log.append(f"{state.label}: {state.error_message}")

        elapsed = self.timer() - started
        log.append(f"{state.label}: finished in {elapsed:.2f}s")
        return state.finalize(elapsed)

    def _run_stages(self, state: _ItemState, log: BatchLog, pacer: RequestPacer) -> None:
        state.canonical_identifier = self.normalizer.normalize(state.input_identifier)
        log.append(f"{state.label}: identifier normalized, fetching document")

        pacer.wait()
        document = self.fetcher.fetch(state.canonical_identifier)
        log.append(f"{state.label}: document retrieved")

        text = extract_text(document)
        state.text_accessible = True
        if not text:
            raise EmptyExtraction(state.canonical_identifier)
        log.append(f"{state.label}: extracted {len(text)} characters of text")

        state.detections = self.detector.detect(text)
        if state.detections:
            log.append(f"{state.label}: detected {software_label(state.detections)}")
        else:
            log.append(f"{state.label}: no statistical software detected")

    def _truncate(self, message: str) -> str:
        message = (message or "").strip()
        if len(message) <= self.error_message_limit:
            return message
        return message[: self.error_message_limit]
