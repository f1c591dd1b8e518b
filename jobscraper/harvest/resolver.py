from __future__ import annotations
from typing import Dict, List, Optional, Protocol
import logging

from .models import Company, JobRecord, Tag

logger = logging.getLogger(__name__)


class EntityStore(Protocol):
    def find_or_create_company(self, company: Company) -> Company:  # pragma: no cover - interface definition
        ...
    def find_or_create_tag(self, tag: Tag) -> Tag:  # pragma: no cover - interface definition
        ...


class EntityResolver:
    """Swap the transient Company/Tag values on a draft record for stored ones.

    Returns a new record; the draft is left untouched. Resolved entities are memoized
    by natural key for the lifetime of the resolver (one scrape run), so a company seen
    on several candidates costs one store round trip.
    """

    def __init__(self, store: EntityStore):
        self.store = store
        self._companies: Dict[str, Company] = {}
        self._tags: Dict[str, Tag] = {}

    def resolve_company(self, company: Optional[Company]) -> Optional[Company]:
        if company is None:
            return None
        canonical = self._companies.get(company.natural_key)
        if canonical is None:
            canonical = self.store.find_or_create_company(company)
            self._companies[canonical.natural_key] = canonical
        return canonical

    def resolve_tags(self, tags: List[Tag]) -> List[Tag]:
        out = []
        for tag in tags:
            canonical = self._tags.get(tag.natural_key)
            if canonical is None:
                canonical = self.store.find_or_create_tag(tag)
                self._tags[canonical.natural_key] = canonical
            out.append(canonical)
        return out

    def resolve(self, draft: JobRecord) -> JobRecord:
        return draft.model_copy(update={
            "company": self.resolve_company(draft.company),
            "tags": self.resolve_tags(draft.tags),
        })
