from .aggregation import summarize
from .batch_service import BatchLog, BatchService, RequestPacer
from .detector import SoftwareDetector
from .identifier_normalization import IdentifierNormalizer, PmcIdentifierNormalizer, cap_batch, split_identifiers
from .software_catalog import SOFTWARE_CATALOG, build_catalog, catalog_entry
from .text_extraction import extract_text

__all__ = [
    "BatchLog",
    "BatchService",
    "RequestPacer",
    "SoftwareDetector",
    "IdentifierNormalizer",
    "PmcIdentifierNormalizer",
    "cap_batch",
    "split_identifiers",
    "SOFTWARE_CATALOG",
    "build_catalog",
    "catalog_entry",
    "extract_text",
    "summarize",
]
