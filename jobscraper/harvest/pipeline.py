from __future__ import annotations
from typing import Callable, Iterator, List, Optional, Protocol, Union
import logging
import time

from bs4 import BeautifulSoup

from .builder import RecordBuilder
from .db import JobDB
from .errors import ExtractionFailure, FetchError, PersistenceFailure
from .logging_config import log_event
from .models import JobRecord, ProcessingStatus
from .resolver import EntityResolver
from .selector import select_candidates
from .settings import SETTINGS, Settings
from .sources.fallback_source import FallbackJobSource
from .sources.page_source import PageSource
from .validator import RecordFilter

logger = logging.getLogger(__name__)


class DocumentSource(Protocol):
    def fetch(self) -> Union[BeautifulSoup, str]:  # pragma: no cover - interface definition
        ...


def persist_record(db: JobDB, resolver: EntityResolver, draft: JobRecord) -> Optional[JobRecord]:
    """Resolve + save one record.

    On failure the record is flagged FAILED with a status-only save and still returned;
    if that also fails it is logged and dropped (None).
    """
    record = draft
    try:
        record = resolver.resolve(draft)
        return db.save_job(record)
    except PersistenceFailure as e:
        logger.error("Failed to save job: %s (%s)", draft.title, e)
        log_event("save_failed", title=draft.title, source_url=draft.source_url, error=str(e))
        try:
            return db.mark_failed(record)
        except PersistenceFailure:
            logger.error("Critical: failed to save job with FAILED status: %s", draft.source_url, exc_info=True)
            return None


def _build_drafts(builder: RecordBuilder, elements) -> Iterator[Optional[JobRecord]]:
    for el in elements:
        try:
            yield builder.build(el)
        except ExtractionFailure:
            logger.debug("Failed to create job from element", exc_info=True)
            yield None


def scrape_live(
    db: JobDB,
    resolver: EntityResolver,
    labor_function: str,
    source: DocumentSource,
    limit: int,
    clock: Callable[[], float] = time.time,
    base_url: Optional[str] = None,
) -> tuple[int, List[JobRecord]]:
    """Run fetch -> select -> build -> filter -> persist.

    Returns (accepted, saved). `accepted` counts records that passed validation, which
    is what decides whether the fallback runs; `saved` excludes records dropped after a
    double persistence failure.
    """
    try:
        document = source.fetch()
    except FetchError as e:
        logger.warning("Live scraping failed: %s", e)
        log_event("fetch_failed", job_function=labor_function, error=str(e))
        return 0, []
    selection = select_candidates(document, limit=limit)
    log_event("candidates_selected", job_function=labor_function, strategy=selection.strategy, count=len(selection))
    builder = RecordBuilder(labor_function, base_url=base_url, clock=clock)
    record_filter = RecordFilter(db.exists_by_source_url, limit=limit)
    accepted = 0
    saved: List[JobRecord] = []
    # Filtering is lazy: each record is saved before the next one is checked against the store.
    for draft in record_filter.filter(_build_drafts(builder, selection.elements)):
        accepted += 1
        rec = persist_record(db, resolver, draft)
        if rec is not None:
            saved.append(rec)
    logger.info("Live extraction: strategy=%s candidates=%d accepted=%d rejected=%d",
                selection.strategy, len(selection), accepted, record_filter.rejected)
    return accepted, saved


def scrape_fallback(db: JobDB, resolver: EntityResolver, labor_function: str,
                    clock: Callable[[], float] = time.time, base_url: Optional[str] = None) -> List[JobRecord]:
    drafts = FallbackJobSource(labor_function, base_url=base_url, clock=clock).fetch()
    out = []
    for draft in drafts:
        rec = persist_record(db, resolver, draft)
        if rec is not None:
            out.append(rec)
    return out


def scrape_jobs(
    db: JobDB,
    labor_function: str,
    source: Optional[DocumentSource] = None,
    settings: Settings = SETTINGS,
    clock: Callable[[], float] = time.time,
) -> List[JobRecord]:
    t_start = time.time()
    logger.info("Starting job scraping for function: %s", labor_function)
    log_event("scrape_start", job_function=labor_function)
    if source is None:
        source = PageSource(url=settings.base_url, user_agent=settings.user_agent, timeout=settings.fetch_timeout)
    resolver = EntityResolver(db)
    accepted, records = scrape_live(db, resolver, labor_function, source, settings.max_jobs_per_scrape,
                                    clock=clock, base_url=settings.base_url)
    used_fallback = False
    if accepted == 0 and settings.fallback_enabled:
        logger.info("No live jobs for %s; using fallback set", labor_function)
        records = scrape_fallback(db, resolver, labor_function, clock=clock, base_url=settings.base_url)
        used_fallback = True
        log_event("fallback_used", job_function=labor_function, count=len(records))
    failed = sum(1 for r in records if r.status == ProcessingStatus.FAILED)
    log_event(
        "scrape_complete",
        job_function=labor_function,
        count=len(records),
        failed=failed,
        fallback=used_fallback,
        elapsed_s=round(time.time() - t_start, 3),
    )
    return records
