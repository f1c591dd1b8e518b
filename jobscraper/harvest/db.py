from __future__ import annotations
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterator, List, Optional
from .errors import PersistenceFailure
from .models import Company, JobRecord, ProcessingStatus, RecordOrigin, Tag
from .settings import SCHEMA_VERSION, SETTINGS

DB_FILE = SETTINGS.db_path

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS companies (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    title TEXT NOT NULL UNIQUE,
    website_url TEXT,
    logo_url TEXT,
    created_at TEXT
);
CREATE TABLE IF NOT EXISTS tags (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL UNIQUE
);
CREATE TABLE IF NOT EXISTS jobs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    position_name TEXT,
    job_page_url TEXT NOT NULL UNIQUE,
    labor_function TEXT,
    location TEXT,
    posted_date_unix INTEGER,
    description TEXT,
    status TEXT,
    origin TEXT,
    company_id INTEGER REFERENCES companies(id),
    created_at TEXT
);
CREATE TABLE IF NOT EXISTS job_tags (
    job_id INTEGER NOT NULL REFERENCES jobs(id) ON DELETE CASCADE,
    tag_id INTEGER NOT NULL REFERENCES tags(id),
    PRIMARY KEY (job_id, tag_id)
);
CREATE INDEX IF NOT EXISTS idx_jobs_function ON jobs(labor_function);
"""

META_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS meta (
    key TEXT PRIMARY KEY,
    value TEXT
);
"""

_JOB_COLUMNS = "j.id, j.position_name, j.job_page_url, j.labor_function, j.location, j.posted_date_unix, " \
               "j.description, j.status, j.origin, j.created_at, c.id, c.title, c.website_url, c.logo_url"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class JobDB:
    """sqlite-backed store for jobs, companies and tags.

    Companies and tags are keyed by title/name; find-or-create runs as a single
    INSERT ... ON CONFLICT DO NOTHING followed by a select in one transaction, so two
    writers racing on the same new key end up sharing one row.
    """

    def __init__(self, db_path: Path | None = None, timeout: float = 30.0):
        self.db_path = Path(db_path or DB_FILE)
        self.timeout = timeout
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        with self._tx() as conn:
            conn.executescript(SCHEMA_SQL)
            conn.execute(META_TABLE_SQL)
            row = conn.execute("SELECT value FROM meta WHERE key='schema_version'").fetchone()
            current_version = int(row[0]) if row else None
            if current_version != SCHEMA_VERSION:
                conn.execute(
                    "INSERT INTO meta(key,value) VALUES('schema_version', ?) ON CONFLICT(key) DO UPDATE SET value=excluded.value",
                    (str(SCHEMA_VERSION),),
                )

    @contextmanager
    def _tx(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(self.db_path, timeout=self.timeout)
        try:
            conn.execute("PRAGMA foreign_keys = ON")
            with conn:  # commit on success, rollback on error
                yield conn
        finally:
            conn.close()

    def close(self):
        # no persistent connection; kept for API symmetry with context-manager use in tests
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    # -------- Companies / tags --------
    def find_company_by_title(self, title: str) -> Optional[Company]:
        with self._tx() as conn:
            return self._company_by_title(conn, title)

    def find_tag_by_name(self, name: str) -> Optional[Tag]:
        with self._tx() as conn:
            return self._tag_by_name(conn, name)

    def find_or_create_company(self, company: Company) -> Company:
        try:
            with self._tx() as conn:
                conn.execute(
                    "INSERT INTO companies(title, website_url, logo_url, created_at) VALUES (?,?,?,?) ON CONFLICT(title) DO NOTHING",
                    (company.title, company.website_url, company.logo_url, _now_iso()),
                )
                return self._company_by_title(conn, company.title)
        except sqlite3.Error as e:
            raise PersistenceFailure(None, f"Failed to resolve company {company.title!r}: {e}") from e

    def find_or_create_tag(self, tag: Tag) -> Tag:
        try:
            with self._tx() as conn:
                conn.execute("INSERT INTO tags(name) VALUES (?) ON CONFLICT(name) DO NOTHING", (tag.name,))
                return self._tag_by_name(conn, tag.name)
        except sqlite3.Error as e:
            raise PersistenceFailure(None, f"Failed to resolve tag {tag.name!r}: {e}") from e

    def fetch_companies(self) -> List[Company]:
        with self._tx() as conn:
            rows = conn.execute("SELECT id, title, website_url, logo_url FROM companies ORDER BY id").fetchall()
            return [Company(id=r[0], title=r[1], website_url=r[2], logo_url=r[3]) for r in rows]

    def fetch_tags(self) -> List[Tag]:
        with self._tx() as conn:
            return [Tag(id=r[0], name=r[1]) for r in conn.execute("SELECT id, name FROM tags ORDER BY id")]

    def _company_by_title(self, conn, title: str) -> Optional[Company]:
        r = conn.execute("SELECT id, title, website_url, logo_url FROM companies WHERE title=?", (title,)).fetchone()
        return Company(id=r[0], title=r[1], website_url=r[2], logo_url=r[3]) if r else None

    def _tag_by_name(self, conn, name: str) -> Optional[Tag]:
        r = conn.execute("SELECT id, name FROM tags WHERE name=?", (name,)).fetchone()
        return Tag(id=r[0], name=r[1]) if r else None

    # -------- Jobs --------
    def exists_by_source_url(self, source_url: str) -> bool:
        with self._tx() as conn:
            return conn.execute("SELECT 1 FROM jobs WHERE job_page_url=?", (source_url,)).fetchone() is not None

    def save_job(self, record: JobRecord) -> JobRecord:
        """Upsert a resolved record by source URL and rewrite its tag links.

        Company and tags must already carry store ids (see EntityResolver).
        """
        if record.company is None or record.company.id is None:
            raise PersistenceFailure(record.source_url, "company is not resolved")
        if any(t.id is None for t in record.tags):
            raise PersistenceFailure(record.source_url, "tags are not resolved")
        try:
            with self._tx() as conn:
                conn.execute("""
                    INSERT INTO jobs (
                        position_name, job_page_url, labor_function, location, posted_date_unix,
                        description, status, origin, company_id, created_at
                    ) VALUES (?,?,?,?,?,?,?,?,?,?)
                    ON CONFLICT(job_page_url) DO UPDATE SET
                        position_name=excluded.position_name,
                        labor_function=excluded.labor_function,
                        location=excluded.location,
                        posted_date_unix=excluded.posted_date_unix,
                        description=excluded.description,
                        status=excluded.status,
                        origin=excluded.origin,
                        company_id=excluded.company_id
                """, self._job_to_row(record))
                job_id, created_at = conn.execute(
                    "SELECT id, created_at FROM jobs WHERE job_page_url=?", (record.source_url,)
                ).fetchone()
                conn.execute("DELETE FROM job_tags WHERE job_id=?", (job_id,))
                conn.executemany(
                    "INSERT OR IGNORE INTO job_tags(job_id, tag_id) VALUES (?,?)",
                    [(job_id, t.id) for t in record.tags],
                )
        except sqlite3.Error as e:
            raise PersistenceFailure(record.source_url, f"Failed to save job: {e}") from e
        return record.model_copy(update={"id": job_id, "created_at": datetime.fromisoformat(created_at)})

    def mark_failed(self, record: JobRecord) -> JobRecord:
        """Status-only save: flag an existing row FAILED, or insert a bare FAILED row."""
        company_id = record.company.id if record.company is not None else None
        try:
            with self._tx() as conn:
                cur = conn.execute(
                    "UPDATE jobs SET status=? WHERE job_page_url=?",
                    (ProcessingStatus.FAILED.value, record.source_url),
                )
                if cur.rowcount == 0:
                    conn.execute(
                        "INSERT INTO jobs (position_name, job_page_url, labor_function, location, posted_date_unix, "
                        "description, status, origin, company_id, created_at) VALUES (?,?,?,?,?,?,?,?,?,?)",
                        self._job_to_row(record.with_status(ProcessingStatus.FAILED), company_id=company_id),
                    )
        except sqlite3.Error as e:
            raise PersistenceFailure(record.source_url, f"Failed to mark job failed: {e}") from e
        return record.with_status(ProcessingStatus.FAILED)

    def find_job_by_source_url(self, source_url: str) -> Optional[JobRecord]:
        jobs = self._select_jobs("WHERE j.job_page_url=?", (source_url,))
        return jobs[0] if jobs else None

    def fetch_all(self) -> List[JobRecord]:
        return self._select_jobs("", ())

    def fetch_by_function(self, labor_function: str) -> List[JobRecord]:
        return self._select_jobs("WHERE j.labor_function=?", (labor_function,))

    def counts(self) -> Dict[str, int]:
        with self._tx() as conn:
            out = {}
            for table in ("jobs", "companies", "tags", "job_tags"):
                out[table] = conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
            out["fallback_jobs"] = conn.execute(
                "SELECT COUNT(*) FROM jobs WHERE origin=?", (RecordOrigin.FALLBACK.value,)
            ).fetchone()[0]
            return out

    def _select_jobs(self, where: str, params: tuple) -> List[JobRecord]:
        with self._tx() as conn:
            rows = conn.execute(
                f"SELECT {_JOB_COLUMNS} FROM jobs j LEFT JOIN companies c ON c.id = j.company_id {where} ORDER BY j.id",
                params,
            ).fetchall()
            tag_rows = conn.execute(
                "SELECT jt.job_id, t.id, t.name FROM job_tags jt JOIN tags t ON t.id = jt.tag_id "
                f"JOIN jobs j ON j.id = jt.job_id {where} ORDER BY jt.rowid",
                params,
            ).fetchall()
        tags_by_job: Dict[int, List[Tag]] = {}
        for job_id, tag_id, name in tag_rows:
            tags_by_job.setdefault(job_id, []).append(Tag(id=tag_id, name=name))
        return [self._row_to_job(r, tags_by_job.get(r[0], [])) for r in rows]

    def _job_to_row(self, job: JobRecord, company_id: int | None = None):
        if company_id is None and job.company is not None:
            company_id = job.company.id
        return (
            job.title,
            job.source_url,
            job.labor_function,
            job.location,
            job.posted_at_epoch,
            job.description,
            job.status.value,
            job.origin.value,
            company_id,
            _now_iso(),
        )

    def _row_to_job(self, row: tuple, tags: List[Tag]) -> JobRecord:
        company = Company(id=row[10], title=row[11], website_url=row[12], logo_url=row[13]) if row[10] is not None else None
        return JobRecord(
            id=row[0],
            title=row[1],
            source_url=row[2],
            labor_function=row[3],
            location=row[4],
            posted_at_epoch=row[5],
            description=row[6],
            status=ProcessingStatus(row[7]) if row[7] else ProcessingStatus.PENDING,
            origin=RecordOrigin(row[8]) if row[8] else RecordOrigin.LIVE,
            created_at=datetime.fromisoformat(row[9]) if row[9] else None,
            company=company,
            tags=tags,
        )
