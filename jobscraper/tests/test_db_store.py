import sqlite3
from contextlib import contextmanager

import pytest

from jobscraper.harvest.db import JobDB
from jobscraper.harvest.errors import PersistenceFailure
from jobscraper.harvest.models import Company, JobRecord, ProcessingStatus, RecordOrigin, Tag
from jobscraper.harvest.resolver import EntityResolver
from jobscraper.harvest.settings import SCHEMA_VERSION


def resolved(db, url, title="Backend Engineer", function="Software Engineering", tags=("Software Engineering", "Startup"),
             origin=RecordOrigin.LIVE):
    draft = JobRecord(
        title=title,
        source_url=url,
        labor_function=function,
        location="Boston",
        description="<p>desc</p>",
        posted_at_epoch=1_700_000_000,
        status=ProcessingStatus.COMPLETED,
        origin=origin,
        company=Company(title="Acme (TechStars)", website_url="https://techstars.com"),
        tags=list(tags),
    )
    return EntityResolver(db).resolve(draft)


def test_schema_version_recorded(tmp_path):
    path = tmp_path / "fresh.sqlite"
    JobDB(path)
    with sqlite3.connect(path) as conn:
        row = conn.execute("SELECT value FROM meta WHERE key='schema_version'").fetchone()
        cols = [r[1] for r in conn.execute("PRAGMA table_info(jobs)")]
    assert int(row[0]) == SCHEMA_VERSION
    assert {"job_page_url", "posted_date_unix", "origin", "company_id"} <= set(cols)


def test_save_and_read_back(db):
    saved = db.save_job(resolved(db, "https://x/job/1"))
    assert saved.id is not None
    assert saved.created_at is not None
    got = db.find_job_by_source_url("https://x/job/1")
    assert got.title == "Backend Engineer"
    assert got.company.title == "Acme (TechStars)"
    assert got.company.website_url == "https://techstars.com"
    assert got.tag_names == ["Software Engineering", "Startup"]
    assert got.status == ProcessingStatus.COMPLETED
    assert got.origin == RecordOrigin.LIVE
    assert db.exists_by_source_url("https://x/job/1")
    assert not db.exists_by_source_url("https://x/job/2")
    assert db.find_job_by_source_url("https://x/job/2") is None


def test_save_is_upsert_on_source_url(db):
    first = db.save_job(resolved(db, "https://x/job/1"))
    second = db.save_job(resolved(db, "https://x/job/1", title="Senior Backend Engineer", tags=("Remote",)))
    assert second.id == first.id
    jobs = db.fetch_all()
    assert len(jobs) == 1
    assert jobs[0].title == "Senior Backend Engineer"
    assert jobs[0].tag_names == ["Remote"]
    assert db.counts()["job_tags"] == 1


def test_save_requires_resolved_entities(db):
    draft = JobRecord(title="Backend Engineer", source_url="https://x/job/1", labor_function="Sales",
                      posted_at_epoch=0, company=Company(title="Acme"))
    with pytest.raises(PersistenceFailure) as ei:
        db.save_job(draft)
    assert ei.value.source_url == "https://x/job/1"
    rec = resolved(db, "https://x/job/2").model_copy(update={"tags": [Tag(name="Unresolved")]})
    with pytest.raises(PersistenceFailure):
        db.save_job(rec)
    assert db.fetch_all() == []


def test_mark_failed_updates_or_inserts(db):
    db.save_job(resolved(db, "https://x/job/1"))
    out = db.mark_failed(resolved(db, "https://x/job/1"))
    assert out.status == ProcessingStatus.FAILED
    assert db.find_job_by_source_url("https://x/job/1").status == ProcessingStatus.FAILED
    assert db.find_job_by_source_url("https://x/job/1").tag_names == ["Software Engineering", "Startup"]

    bare = JobRecord(title="Orphan Engineer", source_url="https://x/job/9", labor_function="Sales",
                     posted_at_epoch=0, company=Company(title="Unsaved"))
    db.mark_failed(bare)
    row = db.find_job_by_source_url("https://x/job/9")
    assert row.status == ProcessingStatus.FAILED
    assert row.company is None
    assert row.tags == []


def test_fetch_by_function_and_counts(db):
    db.save_job(resolved(db, "https://x/job/1"))
    db.save_job(resolved(db, "https://x/job/2", function="Marketing", origin=RecordOrigin.FALLBACK))
    db.save_job(resolved(db, "https://x/job/3", function="Marketing", origin=RecordOrigin.FALLBACK))
    assert [j.source_url for j in db.fetch_by_function("Marketing")] == ["https://x/job/2", "https://x/job/3"]
    assert db.fetch_by_function("Finance") == []
    counts = db.counts()
    assert counts == {"jobs": 3, "companies": 1, "tags": 2, "job_tags": 6, "fallback_jobs": 2}


def test_find_or_create_is_idempotent(db):
    a = db.find_or_create_company(Company(title="Orbit", website_url="https://orbit.io"))
    b = db.find_or_create_company(Company(title="Orbit", website_url="https://changed.example"))
    assert a.id == b.id
    # first writer's attributes are kept
    assert b.website_url == "https://orbit.io"
    assert db.find_company_by_title("Orbit") == a
    t1 = db.find_or_create_tag(Tag(name="Remote"))
    t2 = db.find_or_create_tag(Tag(name="Remote"))
    assert t1.id == t2.id
    assert db.find_tag_by_name("Remote").id == t1.id
    assert db.find_tag_by_name("remote") is None
    assert [t.name for t in db.fetch_tags()] == ["Remote"]


class TracingDB(JobDB):
    def __init__(self, *args, **kwargs):
        self.statements = []
        super().__init__(*args, **kwargs)

    @contextmanager
    def _tx(self):
        with super()._tx() as conn:
            conn.set_trace_callback(self.statements.append)
            yield conn


def test_reads_only_load_tags_of_selected_jobs(tmp_path):
    db = TracingDB(tmp_path / "trace.sqlite")
    db.save_job(resolved(db, "https://x/job/1", tags=("Software Engineering",)))
    db.save_job(resolved(db, "https://x/job/2", function="Marketing", tags=("Marketing", "Remote")))
    db.statements.clear()

    jobs = db.fetch_by_function("Marketing")
    assert [j.tag_names for j in jobs] == [["Marketing", "Remote"]]
    tag_queries = [s for s in db.statements if "FROM job_tags" in s]
    assert len(tag_queries) == 1
    assert "WHERE j.labor_function=" in tag_queries[0]

    assert db.find_job_by_source_url("https://x/job/1").tag_names == ["Software Engineering"]
    assert len(db.fetch_all()) == 2
