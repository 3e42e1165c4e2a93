# memory.py — in-process caches for crawled pages and extracted documents
"""
Keeps the latest PageRecord per root URL and DocumentRecord per document URL
for the lifetime of the process.  Entries are only handed back while they are
younger than the configured window; the disk cache outlives this one.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Dict, Optional

from models import DocumentRecord, PageRecord, utcnow


class Memory:
    """Caches page snapshots and document extractions, keyed by URL."""

    def __init__(self,
                 page_ttl: timedelta = timedelta(hours=1),
                 document_ttl: timedelta = timedelta(hours=24)) -> None:
        self.page_ttl = page_ttl
        self.document_ttl = document_ttl
        self.pages: Dict[str, PageRecord] = {}          # url → snapshot
        self.documents: Dict[str, DocumentRecord] = {}  # absolute url → extraction

    @staticmethod
    def _fresh(stamp: datetime, ttl: timedelta, now: datetime | None) -> bool:
        return (now or utcnow()) - stamp <= ttl

    # ---------- pages ----------
    def put_page(self, url: str, record: PageRecord) -> None:
        self.pages[url] = record

    def get_page(self, url: str, now: datetime | None = None) -> Optional[PageRecord]:
        record = self.pages.get(url)
        if record is None or not self._fresh(record.last_updated, self.page_ttl, now):
            return None
        return record

    # ---------- documents ----------
    def put_document(self, url: str, record: DocumentRecord) -> None:
        self.documents[url] = record

    def get_document(self, url: str, now: datetime | None = None) -> Optional[DocumentRecord]:
        record = self.documents.get(url)
        if record is None or not self._fresh(record.last_updated, self.document_ttl, now):
            return None
        return record

    def clear(self) -> None:
        self.pages.clear()
        self.documents.clear()
