"""Candidate selection: find the elements of a listing page that look like job postings.

Strategies are tried in priority order and the first one that matches anything wins:

    1. structural  - job/posting/opening card classes and data attributes
    2. semantic    - test-id / QA hooks and opening/position classes
    3. job_links   - anchors pointing at /job/, /position/ or /career/ pages
    4. keyword_scan - full-tree scan on own text, link target and class name

Markup for the same logical page drifts between deployments, so the last strategy
trades precision for never coming back empty-handed on a page that does list jobs.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional, Protocol, Sequence, Union
import logging

from bs4 import BeautifulSoup
from bs4.element import NavigableString, PreformattedString, Tag as Element

from .patterns import has_job_keywords, has_job_url, has_job_class

logger = logging.getLogger(__name__)

MAX_CANDIDATES = 15


class SelectionStrategy(Protocol):
    name: str
    def select(self, document: BeautifulSoup) -> List[Element]:  # pragma: no cover - interface definition
        ...


@dataclass(frozen=True)
class CssSelectorGroup:
    name: str
    css: str

    def select(self, document: BeautifulSoup) -> List[Element]:
        return document.select(self.css)


def own_text(element: Element) -> str:
    """Text directly inside element, excluding descendants and comments."""
    parts = [
        str(s) for s in element.children
        if isinstance(s, NavigableString) and not isinstance(s, PreformattedString)
    ]
    return " ".join("".join(parts).split())


def class_name(element: Element) -> str:
    cls = element.get("class")
    if isinstance(cls, (list, tuple)):
        return " ".join(cls)
    return cls or ""


def is_job_like(element: Element) -> bool:
    return (
        has_job_keywords(own_text(element))
        or has_job_url(element.get("href"))
        or has_job_class(class_name(element))
    )


@dataclass(frozen=True)
class KeywordScan:
    name: str = "keyword_scan"

    def select(self, document: BeautifulSoup) -> List[Element]:
        return [el for el in document.find_all(True) if is_job_like(el)]


DEFAULT_STRATEGIES: Sequence[SelectionStrategy] = (
    CssSelectorGroup("structural", ".job-item, .job-card, .job-posting, [data-job], .posting"),
    CssSelectorGroup("semantic", "[data-qa='job'], [data-testid*='job'], .opening, .position"),
    CssSelectorGroup("job_links", "a[href*='/job/'], a[href*='/position/'], a[href*='/career/']"),
    KeywordScan(),
)


@dataclass
class Selection:
    strategy: Optional[str] = None
    elements: List[Element] = field(default_factory=list)

    def __len__(self):
        return len(self.elements)


def parse_document(html: Union[str, bytes]) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def select_candidates(
    document: Union[BeautifulSoup, str, bytes],
    limit: int = MAX_CANDIDATES,
    strategies: Sequence[SelectionStrategy] = DEFAULT_STRATEGIES,
) -> Selection:
    """Return up to `limit` candidate elements from the first strategy that matches."""
    if not isinstance(document, BeautifulSoup):
        document = parse_document(document)
    for strategy in strategies:
        found = strategy.select(document)
        if found:
            logger.debug("strategy %s matched %d elements", strategy.name, len(found))
            return Selection(strategy=strategy.name, elements=found[:limit])
    return Selection()
