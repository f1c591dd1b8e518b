from __future__ import annotations
from datetime import datetime
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class ProcessingStatus(str, Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class RecordOrigin(str, Enum):
    LIVE = "live"          # extracted from the fetched listing page
    FALLBACK = "fallback"  # synthesized when live extraction produced nothing


class Company(BaseModel):
    """Employer; identity is the exact, case-sensitive title."""
    id: Optional[int] = None  # surrogate, assigned by the store
    title: str
    website_url: Optional[str] = None
    logo_url: Optional[str] = None

    @property
    def natural_key(self) -> str:
        return self.title

    def __eq__(self, other):
        if not isinstance(other, Company):
            return NotImplemented
        return self.title == other.title

    def __hash__(self):
        return hash(self.title)


class Tag(BaseModel):
    id: Optional[int] = None
    name: str

    @property
    def natural_key(self) -> str:
        return self.name

    def __eq__(self, other):
        if not isinstance(other, Tag):
            return NotImplemented
        return self.name == other.name

    def __hash__(self):
        return hash(self.name)


class JobRecord(BaseModel):
    id: Optional[int] = None
    title: str
    source_url: Optional[str] = None  # natural key
    labor_function: str
    location: str = "Remote"
    description: Optional[str] = None  # HTML paragraph
    posted_at_epoch: int
    status: ProcessingStatus = ProcessingStatus.PENDING
    origin: RecordOrigin = RecordOrigin.LIVE
    company: Optional[Company] = None
    tags: List[Tag] = Field(default_factory=list)  # unique by name, insertion ordered
    created_at: Optional[datetime] = None

    @field_validator("tags", mode="before")
    @classmethod
    def unique_tags(cls, v):
        if v is None:
            return []
        out = []
        seen = set()
        for t in v:
            if isinstance(t, str):
                t = {"name": t}
            name = t.name if isinstance(t, Tag) else t.get("name")
            if name in seen:
                continue
            seen.add(name)
            out.append(t)
        return out

    @property
    def tag_names(self) -> List[str]:
        return [t.name for t in self.tags]

    def with_status(self, status: ProcessingStatus) -> "JobRecord":
        return self.model_copy(update={"status": status})

    def __eq__(self, other):
        if not isinstance(other, JobRecord):
            return NotImplemented
        return self.source_url == other.source_url

    def __hash__(self):
        return hash(self.source_url)


class ScrapeResponse(BaseModel):
    """Outcome of one scrape invocation as reported to callers."""
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    record_count: int = Field(0, alias="recordCount")
    job_function: str = Field(alias="jobFunction")
    message: str
    records: List[JobRecord] = Field(default_factory=list)
