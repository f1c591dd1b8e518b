from __future__ import annotations
from typing import Callable, Iterable, Iterator, Optional, Set
import logging

from .models import JobRecord

logger = logging.getLogger(__name__)

MIN_TITLE_LEN = 5


def is_valid(record: Optional[JobRecord]) -> bool:
    return (
        record is not None
        and record.title is not None
        and len(record.title) >= MIN_TITLE_LEN
        and record.source_url is not None
        and record.company is not None
    )


class RecordFilter:
    """Drop incomplete records and records whose source URL is already known.

    `exists` is the store lookup; URLs accepted earlier in the same run are also
    treated as known so one page listing a posting twice yields one record.
    Rejections are silent apart from a debug log line.
    """

    def __init__(self, exists: Callable[[str], bool], limit: int = 15):
        self.exists = exists
        self.limit = limit
        self._seen: Set[str] = set()
        self.rejected = 0

    def accepts(self, record: Optional[JobRecord]) -> bool:
        if not is_valid(record):
            self.rejected += 1
            logger.debug("rejected incomplete record: %r", getattr(record, "title", None))
            return False
        if record.source_url in self._seen or self.exists(record.source_url):
            self.rejected += 1
            logger.debug("rejected known source_url: %s", record.source_url)
            return False
        self._seen.add(record.source_url)
        return True

    def filter(self, records: Iterable[Optional[JobRecord]]) -> Iterator[JobRecord]:
        """Yield accepted records lazily, stopping after `limit` acceptances."""
        if self.limit <= 0:
            return
        accepted = 0
        for record in records:
            if self.accepts(record):
                accepted += 1
                yield record
                if accepted >= self.limit:
                    return
