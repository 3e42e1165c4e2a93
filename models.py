# models.py — typed records for crawled content and the on-disk cache envelope
"""
Pydantic schema for everything the crawler produces.

Every field except the identifying ``url`` carries a default, so cache files
written by an older schema version still validate; unknown keys are ignored.
Bump ``SCHEMA_VERSION`` when a field changes meaning.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field

SCHEMA_VERSION = 1


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LinkType(str, Enum):
    INTERNAL = "internal"
    EXTERNAL = "external"


class ContentType(str, Enum):
    """Coarse category of a linked page, derived from its URL."""

    PROFESSIONAL = "professional"
    BLOG = "blog"
    PROJECT = "project"
    TECHNICAL = "technical"
    GENERAL = "general"


class _Record(BaseModel):
    model_config = ConfigDict(extra="ignore")


class Link(_Record):
    url: str
    title: str = ""
    type: LinkType = LinkType.INTERNAL


class DocumentRecord(_Record):
    """Text pulled out of a pdf / office file linked from a page."""

    url: str
    file_kind: str = ""
    title: str = ""
    text: str = ""
    metadata: Dict[str, str] = Field(default_factory=dict)
    page_count: int = 0            # pages, sheets (xlsx) or rows (csv)
    last_updated: datetime = Field(default_factory=utcnow)


class LinkedPageRecord(_Record):
    url: str
    title: str = ""
    description: str = ""
    keywords: List[str] = Field(default_factory=list)
    text: str = ""
    content_type: ContentType = ContentType.GENERAL
    relevance: int = Field(default=0, ge=0, le=10)
    content_hash: str = ""
    last_updated: datetime = Field(default_factory=utcnow)


class PageRecord(_Record):
    """Root aggregate: one per crawled origin URL."""

    url: str = ""
    title: str = ""
    description: str = ""
    text: str = ""
    links: List[Link] = Field(default_factory=list)
    metadata: Dict[str, str] = Field(default_factory=dict)
    documents: Dict[str, DocumentRecord] = Field(default_factory=dict)
    linked_pages: Dict[str, LinkedPageRecord] = Field(default_factory=dict)
    content_hash: str = ""
    last_updated: datetime = Field(default_factory=utcnow)

    def age_seconds(self, now: datetime | None = None) -> float:
        return ((now or utcnow()) - self.last_updated).total_seconds()

    def find_linked_by_hash(self, digest: str) -> LinkedPageRecord | None:
        for linked in self.linked_pages.values():
            if linked.content_hash == digest:
                return linked
        return None


class CacheEnvelope(_Record):
    """What actually lands in ``<cache_dir>/<name>/content.json``."""

    schema_version: int = SCHEMA_VERSION
    url: str
    saved_at: datetime = Field(default_factory=utcnow)
    content: PageRecord
