from __future__ import annotations


class ScrapeError(Exception):
    """Base scraping error."""


class FetchError(ScrapeError):
    """Listing page could not be retrieved; callers fall back to synthetic data."""


class FetchNetworkError(FetchError):
    pass


class FetchTimeoutError(FetchError):
    pass


class FetchHTTPError(FetchError):
    def __init__(self, status: int, message: str):
        super().__init__(message)
        self.status = status
        self.message = message


class ExtractionFailure(ScrapeError):
    """A single candidate element could not be turned into a record."""


class PersistenceFailure(ScrapeError):
    def __init__(self, source_url: str | None, message: str):
        super().__init__(message)
        self.source_url = source_url
        self.message = message
