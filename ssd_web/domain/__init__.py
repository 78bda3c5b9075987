from .errors import (
    CatalogCompileError,
    DetectionError,
    EmptyExtraction,
    FetchFailure,
    InvalidIdentifier,
)
from .models import ArticleRecord, BatchResult, BatchSummary, DetectionResult, SoftwareEntry

__all__ = [
    "ArticleRecord",
    "BatchResult",
    "BatchSummary",
    "DetectionResult",
    "SoftwareEntry",
    "DetectionError",
    "InvalidIdentifier",
    "FetchFailure",
    "EmptyExtraction",
    "CatalogCompileError",
]
