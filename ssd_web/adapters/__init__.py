from .pmc_fetcher import DocumentFetcher, PmcEfetchFetcher, build_session

__all__ = [
    "DocumentFetcher",
    "PmcEfetchFetcher",
    "build_session",
]
