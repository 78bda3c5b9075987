from __future__ import annotations

import itertools
import threading
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional

from ssd_web.domain.models import BatchResult


@dataclass
class BatchRepository:
    """
    Repository pattern: keeps the most recent batch results in memory, keyed by run id.
    With the default max_runs=1 a new batch replaces the previous one.
    """
    max_runs: int = 1
    clock: Callable[[], datetime] = datetime.now
    _runs: "OrderedDict[str, BatchResult]" = field(default_factory=OrderedDict, init=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)
    _seq: itertools.count = field(default_factory=lambda: itertools.count(1), init=False, repr=False)

    def save(self, result: BatchResult) -> str:
        run_id = f"{self.clock().strftime('%Y%m%d_%H%M%S')}_{next(self._seq)}"
        with self._lock:
            self._runs[run_id] = result
            while len(self._runs) > max(1, self.max_runs):
                self._runs.popitem(last=False)
        return run_id

    def get(self, run_id: str) -> Optional[BatchResult]:
        with self._lock:
            return self._runs.get(run_id)

    def latest(self) -> Optional[tuple[str, BatchResult]]:
        with self._lock:
            if not self._runs:
                return None
            run_id = next(reversed(self._runs))
            return run_id, self._runs[run_id]

    def clear(self) -> None:
        with self._lock:
            self._runs.clear()
