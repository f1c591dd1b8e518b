"""Job scraper package public API."""
from importlib import metadata as _metadata

try:
    __version__ = _metadata.version("jobscraper")
except _metadata.PackageNotFoundError:  # fallback when not installed
    __version__ = "0.1.0"

from .harvest.db import JobDB  # re-export
from .harvest.models import JobRecord  # re-export
from .harvest.service import JobScrapingService  # re-export

__all__ = ["__version__", "JobDB", "JobRecord", "JobScrapingService"]
