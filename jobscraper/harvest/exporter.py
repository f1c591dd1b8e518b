from __future__ import annotations
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterable, List, Optional
import pandas as pd

from .models import Company, JobRecord, Tag

EXPORT_COLUMNS = [
    'title', 'company', 'company_website', 'location', 'labor_function', 'posted_at_epoch',
    'status', 'origin', 'tags', 'source_url',
]


def escape_sql(value: Optional[str]) -> str:
    """Double single quotes for a single-quoted SQL literal.

    Only safe for the target dialect's '...' strings; not a general injection defense.
    """
    return (value or "").replace("'", "''")


class SqlExporter:
    """Render jobs as a self-contained schema + data dump.

    Statement order is load order: tables, companies, tags, jobs, job_tags. Foreign keys
    are written as nested selects on natural keys because ids differ per database.
    """

    def __init__(self, jobs: Iterable[JobRecord]):
        self.jobs: List[JobRecord] = list(jobs)
        self._lines: List[str] = []

    def generate_sql_dump(self, generated_at: Optional[datetime] = None) -> str:
        self._lines = []
        self._append_header(generated_at or datetime.now(timezone.utc))
        self._append_schema()
        self._append_companies()
        self._append_tags()
        self._append_jobs()
        self._append_job_tags()
        return "".join(self._lines)

    def _emit(self, text: str):
        self._lines.append(text)

    def _append_header(self, generated_at: datetime):
        self._emit("-- TechStars Job Scraper Database Export\n")
        self._emit(f"-- Generated: {generated_at.isoformat(timespec='seconds')}\n\n")

    def _append_schema(self):
        self._emit(
            "CREATE TABLE IF NOT EXISTS companies (\n"
            "  id BIGSERIAL PRIMARY KEY,\n"
            "  title VARCHAR(255) UNIQUE NOT NULL,\n"
            "  website_url VARCHAR(255),\n"
            "  logo_url VARCHAR(255)\n"
            ");\n\n"
        )
        self._emit(
            "CREATE TABLE IF NOT EXISTS tags (\n"
            "  id BIGSERIAL PRIMARY KEY,\n"
            "  name VARCHAR(255) UNIQUE NOT NULL\n"
            ");\n\n"
        )
        self._emit(
            "CREATE TABLE IF NOT EXISTS jobs (\n"
            "  id BIGSERIAL PRIMARY KEY,\n"
            "  position_name VARCHAR(255),\n"
            "  job_page_url VARCHAR(255),\n"
            "  labor_function VARCHAR(255),\n"
            "  location VARCHAR(255),\n"
            "  posted_date_unix BIGINT,\n"
            "  description TEXT,\n"
            "  status VARCHAR(50),\n"
            "  company_id BIGINT REFERENCES companies(id)\n"
            ");\n\n"
        )
        self._emit(
            "CREATE TABLE IF NOT EXISTS job_tags (\n"
            "  job_id BIGINT REFERENCES jobs(id),\n"
            "  tag_id BIGINT REFERENCES tags(id),\n"
            "  PRIMARY KEY (job_id, tag_id)\n"
            ");\n\n"
        )

    def distinct_companies(self) -> List[Company]:
        seen: Dict[str, Company] = {}
        for job in self.jobs:
            if job.company is not None and job.company.title not in seen:
                seen[job.company.title] = job.company
        return list(seen.values())

    def distinct_tags(self) -> List[Tag]:
        seen: Dict[str, Tag] = {}
        for job in self.jobs:
            for tag in job.tags:
                seen.setdefault(tag.name, tag)
        return list(seen.values())

    def _append_companies(self):
        for c in self.distinct_companies():
            self._emit(
                "INSERT INTO companies (title, website_url, logo_url) VALUES "
                f"('{escape_sql(c.title)}', '{escape_sql(c.website_url)}', '{escape_sql(c.logo_url)}') "
                "ON CONFLICT (title) DO NOTHING;\n"
            )
        self._emit("\n")

    def _append_tags(self):
        for t in self.distinct_tags():
            self._emit(f"INSERT INTO tags (name) VALUES ('{escape_sql(t.name)}') ON CONFLICT (name) DO NOTHING;\n")
        self._emit("\n")

    def _append_jobs(self):
        for j in self.jobs:
            if j.company is not None:
                company_ref = f"(SELECT id FROM companies WHERE title = '{escape_sql(j.company.title)}')"
            else:
                company_ref = "NULL"
            self._emit(
                "INSERT INTO jobs (position_name, job_page_url, labor_function, location, posted_date_unix, "
                "description, status, company_id) VALUES ("
                f"'{escape_sql(j.title)}', '{escape_sql(j.source_url)}', '{escape_sql(j.labor_function)}', "
                f"'{escape_sql(j.location)}', {int(j.posted_at_epoch)}, '{escape_sql(j.description)}', "
                f"'{j.status.value}', {company_ref});\n"
            )
        self._emit("\n")

    def _append_job_tags(self):
        for j in self.jobs:
            for t in j.tags:
                self._emit(
                    "INSERT INTO job_tags (job_id, tag_id) VALUES ("
                    f"(SELECT id FROM jobs WHERE job_page_url = '{escape_sql(j.source_url)}'), "
                    f"(SELECT id FROM tags WHERE name = '{escape_sql(t.name)}'));\n"
                )


def job_row(j: JobRecord) -> dict:
    return {
        'title': j.title,
        'company': j.company.title if j.company else None,
        'company_website': j.company.website_url if j.company else None,
        'location': j.location,
        'labor_function': j.labor_function,
        'posted_at_epoch': j.posted_at_epoch,
        'status': j.status.value,
        'origin': j.origin.value,
        'tags': ", ".join(j.tag_names) if j.tags else None,
        'source_url': j.source_url,
    }


def export_csv(jobs: Iterable[JobRecord], path: Path) -> Optional[Path]:
    """Write a flat one-row-per-job listing; returns None when there is nothing to write."""
    rows = [job_row(j) for j in jobs]
    if not rows:
        return None
    path.parent.mkdir(parents=True, exist_ok=True)
    df = pd.DataFrame(rows, columns=EXPORT_COLUMNS)
    df.to_csv(path, index=False)
    return path
