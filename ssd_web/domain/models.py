######## models.py
########

import re
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple


@dataclass(frozen=True)
class SoftwareEntry:
    key: str
    display_name: str
    presence_pattern: re.Pattern
    version_pattern: Optional[re.Pattern]
    color_tag: str              # decorative only (charts / badges)


@dataclass(frozen=True)
class DetectionResult:
    software_key: str
    display_name: str
    version: Optional[str] = None


@dataclass(frozen=True)
class ArticleRecord:
    input_identifier: str
    canonical_identifier: Optional[str]
    text_accessible: bool
    detections: Tuple[DetectionResult, ...]
    error_message: str          # "" when the item completed cleanly
    processing_seconds: float

    @property
    def detected_keys(self) -> Tuple[str, ...]:
        return tuple(d.software_key for d in self.detections)

    @property
    def has_detections(self) -> bool:
        return bool(self.detections)


@dataclass(frozen=True)
class BatchResult:
    records: Tuple[ArticleRecord, ...]
    log_entries: Tuple[str, ...]
    generated_at: str = ""


@dataclass(frozen=True)
class BatchSummary:
    total_count: int
    accessible_count: int
    software_detected_count: int
    total_processing_seconds: float
    frequency: Dict[str, int] = field(default_factory=dict)
