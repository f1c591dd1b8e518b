from __future__ import annotations
from pathlib import Path
from typing import List, Optional
import logging

from .db import JobDB
from .exporter import SqlExporter, export_csv
from .models import JobRecord, ScrapeResponse
from .pipeline import DocumentSource, scrape_jobs
from .settings import SETTINGS, Settings

logger = logging.getLogger(__name__)

# Advertised to callers; scrape() accepts any string.
JOB_FUNCTIONS = [
    "Software Engineering",
    "Product Management",
    "Marketing",
    "Sales",
    "Operations",
    "Data Science",
    "Design",
    "Business Development",
    "Finance",
    "Customer Success",
]


class JobScrapingService:
    """Caller-facing operations over one store."""

    def __init__(self, db: Optional[JobDB] = None, source: Optional[DocumentSource] = None,
                 settings: Settings = SETTINGS):
        self.settings = settings
        self.db = db or JobDB(settings.db_path)
        self.source = source

    def scrape(self, labor_function: str) -> List[JobRecord]:
        return scrape_jobs(self.db, labor_function, source=self.source, settings=self.settings)

    def scrape_response(self, labor_function: str) -> ScrapeResponse:
        try:
            records = self.scrape(labor_function)
        except Exception as e:
            logger.exception("Scrape failed for function %s", labor_function)
            return ScrapeResponse(
                success=False,
                record_count=0,
                job_function=labor_function,
                message=f"Failed to scrape jobs: {e}",
            )
        return ScrapeResponse(
            success=True,
            record_count=len(records),
            job_function=labor_function,
            message=f"Successfully scraped {len(records)} jobs",
            records=records,
        )

    def job_functions(self) -> List[str]:
        return list(JOB_FUNCTIONS)

    def list_all(self) -> List[JobRecord]:
        return self.db.fetch_all()

    def list_by_function(self, labor_function: str) -> List[JobRecord]:
        return self.db.fetch_by_function(labor_function)

    def export_sql(self) -> str:
        return SqlExporter(self.db.fetch_all()).generate_sql_dump()

    def export_csv(self, path: Optional[Path] = None) -> Optional[Path]:
        return export_csv(self.db.fetch_all(), path or self.settings.export_dir / "jobs.csv")
