"""Turn one candidate element into a draft JobRecord.

Every field is derived independently by an ordered list of extractors; the first
extractor returning a value wins. The record comes back with transient Company/Tag
values (no ids) that the resolver later swaps for stored ones.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Optional, Sequence
from urllib.parse import urljoin
import logging
import time
import zlib

from bs4.element import Tag as Element

from .errors import ExtractionFailure
from .models import Company, JobRecord, ProcessingStatus, RecordOrigin, Tag
from .patterns import (
    DEFAULT_LOCATION, GENERIC_TITLE, is_company_token, is_record_url, keyword_title, match_location, match_title,
)
from .settings import SETTINGS

logger = logging.getLogger(__name__)

DESCRIPTION_MAX_CHARS = 300
ORG_NAME = "TechStars"
ORG_WEBSITE = "https://techstars.com"
FALLBACK_COMPANY_NAME = "TechStars Portfolio Company"


@dataclass(frozen=True)
class ElementContext:
    element: Element
    text: str  # whitespace-normalized text of element + descendants
    href: str
    base_url: str
    site_root: str

    @classmethod
    def of(cls, element: Element, base_url: str, site_root: str) -> "ElementContext":
        text = " ".join(element.get_text(" ").split())
        href = element.get("href") or ""
        if isinstance(href, list):
            href = " ".join(href)
        return cls(element=element, text=text, href=href, base_url=base_url.rstrip("/"), site_root=site_root)


Extractor = Callable[[ElementContext], Optional[str]]


def constant(value: str) -> Extractor:
    return lambda ctx: value


def first_match(extractors: Sequence[Extractor], ctx: ElementContext, field_name: str) -> str:
    for extract in extractors:
        value = extract(ctx)
        if value is not None:
            return value
    raise ExtractionFailure(f"no extractor produced {field_name}")


def stable_text_hash(text: str) -> int:
    """Deterministic across processes (unlike hash()); not a security property."""
    return zlib.crc32(text.encode("utf-8"))


def title_from_pattern(ctx: ElementContext) -> Optional[str]:
    return match_title(ctx.text)


def title_from_keyword(ctx: ElementContext) -> Optional[str]:
    return keyword_title(ctx.text)


def url_from_link(ctx: ElementContext) -> Optional[str]:
    if not is_record_url(ctx.href):
        return None
    if ctx.href.startswith("http"):
        return ctx.href
    return urljoin(ctx.site_root + "/", ctx.href)


def url_from_text_hash(ctx: ElementContext) -> Optional[str]:
    return f"{ctx.base_url}/job/{stable_text_hash(ctx.text)}"


def location_from_pattern(ctx: ElementContext) -> Optional[str]:
    return match_location(ctx.text)


def company_from_tokens(ctx: ElementContext) -> Optional[str]:
    for word in ctx.text.split():
        if is_company_token(word):
            return f"{word} ({ORG_NAME})"
    return None


TITLE_EXTRACTORS: Sequence[Extractor] = (title_from_pattern, title_from_keyword, constant(GENERIC_TITLE))
URL_EXTRACTORS: Sequence[Extractor] = (url_from_link, url_from_text_hash)
LOCATION_EXTRACTORS: Sequence[Extractor] = (location_from_pattern, constant(DEFAULT_LOCATION))
COMPANY_EXTRACTORS: Sequence[Extractor] = (company_from_tokens, constant(FALLBACK_COMPANY_NAME))


def truncate_description(text: str, limit: int = DESCRIPTION_MAX_CHARS) -> str:
    body = text[:limit] + "..." if len(text) > limit else text
    return f"<p>{body}</p>"


def build_tags(labor_function: str, text: str) -> list[Tag]:
    low = text.lower()
    names = [labor_function, ORG_NAME]
    if "senior" in low:
        names.append("Senior")
    if "remote" in low:
        names.append("Remote")
    names.append("Startup")
    return [Tag(name=n) for n in names]


class RecordBuilder:
    """Builds draft records for one labor function."""

    def __init__(self, labor_function: str, base_url: str | None = None, site_root: str | None = None,
                 clock: Callable[[], float] = time.time):
        self.labor_function = labor_function
        self.base_url = base_url or SETTINGS.base_url
        self.site_root = site_root or SETTINGS.site_root
        self.clock = clock

    def build(self, element: Element) -> JobRecord:
        ctx = ElementContext.of(element, self.base_url, self.site_root)
        try:
            return JobRecord(
                title=first_match(TITLE_EXTRACTORS, ctx, "title"),
                source_url=first_match(URL_EXTRACTORS, ctx, "source_url"),
                labor_function=self.labor_function,
                location=first_match(LOCATION_EXTRACTORS, ctx, "location"),
                description=truncate_description(ctx.text),
                posted_at_epoch=int(self.clock()),
                status=ProcessingStatus.COMPLETED,
                origin=RecordOrigin.LIVE,
                company=Company(title=first_match(COMPANY_EXTRACTORS, ctx, "company"), website_url=ORG_WEBSITE),
                tags=build_tags(self.labor_function, ctx.text),
            )
        except ExtractionFailure:
            raise
        except (ValueError, TypeError) as e:
            raise ExtractionFailure(f"could not build record: {e}") from e
