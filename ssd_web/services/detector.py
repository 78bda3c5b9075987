from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from ssd_web.domain.models import DetectionResult, SoftwareEntry
from ssd_web.services.software_catalog import SOFTWARE_CATALOG


def extract_version(entry: SoftwareEntry, text: str) -> Optional[str]:
    if entry.version_pattern is None:
        return None
    m = entry.version_pattern.search(text)
    return m.group(1) if m else None


@dataclass(frozen=True)
class SoftwareDetector:
    """
    Applies the catalog to extracted article text.

    Results follow catalog declaration order and hold at most one entry per
    software key, however many times the product is mentioned. The detector
    keeps no state between calls.
    """
    catalog: Tuple[SoftwareEntry, ...] = SOFTWARE_CATALOG

    def detect(self, text: str) -> Tuple[DetectionResult, ...]:
        if not text:
            return ()

        return tuple(
            DetectionResult(
                software_key=entry.key,
                display_name=entry.display_name,
                version=extract_version(entry, text),
            )
            for entry in self.catalog
            if entry.presence_pattern.search(text)
        )
