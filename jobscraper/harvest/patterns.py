"""Regex + keyword tables used to recognise job postings in free text.

All tables are module constants built once at import; nothing here mutates them.
"""
from __future__ import annotations
import re
from typing import Optional

# Seniority is optional; a stack word is required so bare "engineer" mentions fall through
# to the keyword titles below.
JOB_TITLE_RGX = re.compile(
    r"(Senior|Junior|Lead|Staff|Principal)?\s*(Software|Backend|Frontend|Full.?Stack|Platform|DevOps)\s*(Engineer|Developer)",
    re.I,
)

LOCATION_RGX = re.compile(
    r"\b(Remote|San Francisco|New York|NYC|Boston|Austin|Seattle|Los Angeles|LA|Denver|Chicago|Toronto|London|California|Texas|Massachusetts)\b",
    re.I,
)

# (keyword, title) checked in order when JOB_TITLE_RGX does not match
KEYWORD_TITLES = (
    ("engineer", "Software Engineer"),
    ("developer", "Software Developer"),
)
GENERIC_TITLE = "Software Engineering Position"
DEFAULT_LOCATION = "Remote"

JOB_TEXT_KEYWORDS = ("engineer", "developer", "software")
JOB_URL_HINTS = ("/job", "/position", "/career")
JOB_CLASS_HINTS = ("job", "position", "career")
RECORD_URL_HINTS = ("/job", "/position")

MIN_KEYWORD_TEXT_LEN = 10

COMPANY_STOP_WORDS = frozenset({
    "software", "engineer", "developer", "senior", "junior", "lead",
    "at", "in", "for", "the", "and", "or", "with", "to", "from",
})


def match_title(text: str) -> Optional[str]:
    m = JOB_TITLE_RGX.search(text or "")
    return m.group(0).strip() if m else None


def keyword_title(text: str) -> Optional[str]:
    low = (text or "").lower()
    for kw, title in KEYWORD_TITLES:
        if kw in low:
            return title
    return None


def match_location(text: str) -> Optional[str]:
    m = LOCATION_RGX.search(text or "")
    return m.group(0) if m else None


def has_job_keywords(text: Optional[str]) -> bool:
    if not text or len(text) <= MIN_KEYWORD_TEXT_LEN:
        return False
    low = text.lower()
    return any(kw in low for kw in JOB_TEXT_KEYWORDS)


def has_job_url(href: Optional[str]) -> bool:
    return bool(href) and any(h in href for h in JOB_URL_HINTS)


def has_job_class(class_name: Optional[str]) -> bool:
    return bool(class_name) and any(h in class_name for h in JOB_CLASS_HINTS)


def is_record_url(href: Optional[str]) -> bool:
    """True when a link target is specific enough to identify a single posting."""
    return bool(href) and any(h in href for h in RECORD_URL_HINTS)


def is_company_token(word: str) -> bool:
    return len(word) > 2 and word[0].isupper() and word.lower() not in COMPANY_STOP_WORDS


__all__ = [
    "JOB_TITLE_RGX", "LOCATION_RGX", "GENERIC_TITLE", "DEFAULT_LOCATION", "COMPANY_STOP_WORDS",
    "match_title", "keyword_title", "match_location", "has_job_keywords", "has_job_url",
    "has_job_class", "is_record_url", "is_company_token",
]
