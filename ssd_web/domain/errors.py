######## errors.py
########
# Per-item conditions (InvalidIdentifier, FetchFailure, EmptyExtraction) are
# recoverable: BatchService catches them at the item boundary and turns them
# into ArticleRecord fields. CatalogCompileError is raised at import time only.


class DetectionError(Exception):
    """Base class for all detection pipeline errors."""


class InvalidIdentifier(DetectionError):
    def __init__(self, raw: str):
        self.raw = raw
        super().__init__(f"Invalid identifier format: {raw!r}")


class FetchFailure(DetectionError):
    NETWORK = "network"
    TIMEOUT = "timeout"
    NOT_FOUND = "not_found"
    ACCESS_RESTRICTED = "access_restricted"

    def __init__(self, message: str, reason: str = NETWORK):
        self.message = message
        self.reason = reason
        super().__init__(message)


class EmptyExtraction(DetectionError):
    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(f"No extractable text content for {identifier}")


class CatalogCompileError(DetectionError):
    pass
