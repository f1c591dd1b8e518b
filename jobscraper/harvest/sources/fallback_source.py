from __future__ import annotations
from typing import Callable, List, Optional
import re
import time

from ..models import Company, JobRecord, ProcessingStatus, RecordOrigin, Tag
from ..settings import SETTINGS

FALLBACK_COMPANIES = (
    "DigitalOcean",
    "SendGrid",
    "ClassPass",
    "TradingView",
    "Trust & Will",
    "Sphero",
    "Twelve Labs",
    "SketchFab",
)
FALLBACK_POSITIONS = (
    "Senior Software Engineer",
    "Backend Developer",
    "Full Stack Engineer",
    "Platform Engineer",
    "DevOps Engineer",
    "Frontend Developer",
)
FALLBACK_LOCATIONS = ("San Francisco, CA", "New York, NY", "Remote", "Austin, TX", "Boston, MA")

PORTFOLIO_TAG = "TechStars Portfolio"
DAY_SECONDS = 86400

DESCRIPTION_TEMPLATE = (
    "<p>{position} position at {company}, a leading TechStars portfolio company. "
    "Join a fast-growing startup backed by one of the world's top accelerators.</p>"
)

_SLUG_RE = re.compile(r"[^a-z0-9]+")


def _slug(name: str) -> str:
    return _SLUG_RE.sub("-", name.lower()).strip("-")


class FallbackJobSource:
    """Deterministic synthetic postings used when the live page yields nothing.

    Record i pairs company i with position i % 6 and location i % 5 and is dated i days
    back. Every record is tagged origin=fallback so callers can tell it apart from
    extracted data.
    """

    def __init__(self, labor_function: str, base_url: Optional[str] = None,
                 clock: Callable[[], float] = time.time, name: str = "fallback"):
        self.name = name
        self.labor_function = labor_function
        self.base_url = (base_url or SETTINGS.base_url).rstrip("/")
        self._function_slug = _slug(labor_function) or "any"
        self.clock = clock

    def fetch(self) -> List[JobRecord]:
        now = self.clock()
        now_ms = int(now * 1000)
        return [self._record(i, company, int(now), now_ms) for i, company in enumerate(FALLBACK_COMPANIES)]

    def _record(self, index: int, company_name: str, now_s: int, now_ms: int) -> JobRecord:
        position = FALLBACK_POSITIONS[index % len(FALLBACK_POSITIONS)]
        return JobRecord(
            title=position,
            source_url=f"{self.base_url}/portfolio-job-{_slug(company_name)}-{self._function_slug}-{now_ms}",
            labor_function=self.labor_function,
            location=FALLBACK_LOCATIONS[index % len(FALLBACK_LOCATIONS)],
            description=DESCRIPTION_TEMPLATE.format(position=position, company=company_name),
            posted_at_epoch=now_s - index * DAY_SECONDS,
            status=ProcessingStatus.COMPLETED,
            origin=RecordOrigin.FALLBACK,
            company=Company(
                title=company_name,
                website_url="https://" + company_name.lower().replace(" ", "") + ".com",
            ),
            tags=self._tags(index),
        )

    def _tags(self, index: int) -> List[Tag]:
        names = [self.labor_function, PORTFOLIO_TAG, "Startup"]
        if index % 3 == 0:
            names.append("Senior")
        if index % 2 == 0:
            names.append("Remote")
        return [Tag(name=n) for n in names]


def generate_fallback(labor_function: str, **kwargs) -> List[JobRecord]:
    return FallbackJobSource(labor_function, **kwargs).fetch()
