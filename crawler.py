# crawler.py — recursive, depth/budget-bounded crawl with disk + memory + hash caches
"""
Crawl a root URL and the profile / navigation pages it links to.

* The root page is served from the disk snapshot, then the in-memory cache,
  before any network I/O (both skipped on refresh).
* Linked pages are followed up to ``max_depth`` hops from the root and at
  most ``max_pages_per_session`` fetches per session; every linked page,
  however deep, is flattened into ``root.linked_pages``.
* Identical raw bytes under another URL reuse the stored record instead of
  extracting again.

Only a failure on the root page raises; anything below it is recorded in the
session audit log and skipped.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

import requests

import links
import parser
from cache import DiskCache
from config import LINKED_TIMEOUT, ROOT_TIMEOUT, Settings
from documents import DocumentError, ExtractFn
from fetcher import FetchFn, FetchResult, Fetcher
from memory import Memory
from models import LinkType, LinkedPageRecord, PageRecord, utcnow
from parser import Summarizer
from session import CrawlSession, CrawlState
from utils import is_http, is_same_domain, resolve_url

logger = logging.getLogger(__name__)


# ─────────────────────────── errors ──────────────────────────────
class CrawlError(Exception):
    """Root page could not be crawled."""


class DisallowedURLError(CrawlError):
    def __init__(self, url: str) -> None:
        super().__init__(f"URL not allowed for scraping: {url}")
        self.url = url


class FetchError(CrawlError):
    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"failed to fetch {url}: {reason}")
        self.url = url
        self.reason = reason


class CrawlCancelled(CrawlError):
    pass


def _cancelled(cancel: Optional[threading.Event]) -> bool:
    return cancel is not None and cancel.is_set()


class Crawler:
    def __init__(self,
                 settings: Settings | None = None,
                 *,
                 fetch: FetchFn | None = None,
                 store: DiskCache | None = None,
                 memory: Memory | None = None,
                 summarizer: Summarizer | None = None,
                 extract_document: ExtractFn | None = None) -> None:
        self.settings = settings or Settings()
        self.fetch = fetch or Fetcher()
        self.store = store or DiskCache(self.settings.cache_dir)
        self.memory = memory or Memory(page_ttl=self.settings.memory_cache_duration,
                                       document_ttl=self.settings.cache_duration)
        self.summarizer = summarizer
        self.extract_document = extract_document

    def new_session(self) -> CrawlSession:
        return CrawlSession(page_budget=self.settings.max_pages_per_session)

    def close(self) -> None:
        """Release the HTTP sessions held by the fetcher and document extractor."""
        for part in (self.fetch, self.extract_document):
            close = getattr(part, "close", None)
            if close is not None:
                close()

    # ───────────────────────── root page ──────────────────────────
    def crawl(self,
              url: str,
              session: CrawlSession | None = None,
              *,
              refresh: bool | None = None,
              cancel: threading.Event | None = None) -> PageRecord:
        """
        Crawl `url` as the root of a session.

        Raises DisallowedURLError / FetchError / CrawlCancelled when the root
        itself cannot be produced; linked-page problems never escape.
        """
        session = session if session is not None else self.new_session()
        refresh = self.settings.refresh_content if refresh is None else refresh

        if not links.is_url_allowed(url, self.settings.allowed_url_patterns):
            err = DisallowedURLError(url)
            session.audit.record(url, "main", success=False, error=err)
            session.set_state(url, CrawlState.SKIPPED_DISALLOWED)
            raise err

        if not refresh:
            cached = self._cached_root(url, session)
            if cached is not None:
                return cached

        if _cancelled(cancel):
            session.set_state(url, CrawlState.SKIPPED_CANCELLED)
            raise CrawlCancelled(f"crawl of {url} cancelled before fetch")

        # the root never draws on the page budget
        session.mark_visited(url)
        session.set_state(url, CrawlState.FETCHING)
        logger.info("Scraping main page: %s", url)
        result = self._fetch(url, ROOT_TIMEOUT)
        if not result.ok:
            session.audit.record(url, "main", success=False, error=result.error)
            session.set_state(url, CrawlState.FETCH_FAILED)
            raise FetchError(url, result.error or "unknown error")

        if self.settings.reuse_by_hash and not refresh:
            reused = self._reuse_root(url, result, session)
            if reused is not None:
                return reused

        record = self._build_page(url, result)
        session.set_state(url, CrawlState.EXTRACTED)

        self._process_documents(record, url, session, cancel)

        session.set_state(url, CrawlState.RECURSING)
        self._expand_root(record, url, session, cancel)

        session.audit.record(url, "main", record.title, True, content_type="website")
        session.set_state(url, CrawlState.DONE)
        self.store.save(url, record)
        self.memory.put_page(url, record)
        logger.info("Crawl of %s done: %d linked pages, %d documents, %d fetches",
                    url, len(record.linked_pages), len(record.documents), session.pages_fetched)
        return record

    def _cached_root(self, url: str, session: CrawlSession) -> PageRecord | None:
        on_disk = self.store.load(url)
        if on_disk is not None and on_disk.age_seconds() <= self.settings.cache_duration.total_seconds():
            session.audit.record(url, "main", on_disk.title, True, content_type="disk_cached")
            session.set_state(url, CrawlState.CACHED)
            self.memory.put_page(url, on_disk)
            return on_disk

        in_memory = self.memory.get_page(url)
        if in_memory is not None:
            session.audit.record(url, "main", in_memory.title, True, content_type="memory_cached")
            session.set_state(url, CrawlState.CACHED)
            return in_memory
        return None

    def _reuse_root(self, url: str, result: FetchResult,
                    session: CrawlSession) -> PageRecord | None:
        match = self.store.find_by_hash(result.content_hash, exclude_url=url)
        if match is None:
            return None
        original_url, existing = match
        record = existing.model_copy(deep=True, update={"url": url, "last_updated": utcnow()})
        self.store.save(url, record)
        self.memory.put_page(url, record)
        session.audit.record(url, "main", record.title, True, content_type="content_reused")
        session.set_state(url, CrawlState.REUSED)
        logger.info("Reused existing content for: %s (hash: %s, from %s)",
                    url, result.content_hash[:8], original_url)
        return record

    def _build_page(self, url: str, result: FetchResult) -> PageRecord:
        soup = result.soup
        description, metadata = parser.extract_meta(soup)
        full_text = parser.extract_text(soup)
        return PageRecord(
            url=url,
            title=result.title,
            description=description,
            metadata=metadata,
            text=parser.condense(result.title, full_text,
                                 self.settings.max_content_length, self.summarizer),
            links=parser.extract_links(soup),
            content_hash=result.content_hash,
            last_updated=utcnow(),
        )

    # ───────────────────────── documents ──────────────────────────
    def _process_documents(self, record: PageRecord, base_url: str,
                           session: CrawlSession,
                           cancel: threading.Event | None) -> None:
        if self.extract_document is None:
            return
        for link in record.links:
            full_url = resolve_url(base_url, link.url)
            kind = links.document_kind(full_url)
            if kind is None:
                continue
            audit_kind = "pdf" if kind == "pdf" else "file"

            cached = self.memory.get_document(full_url)
            if cached is not None:
                record.documents[link.url] = cached
                continue
            if _cancelled(cancel):
                return

            try:
                doc = self.extract_document(full_url)
            except DocumentError as exc:
                logger.warning("Document extraction failed for %s: %s", full_url, exc)
                session.audit.record(full_url, audit_kind, link.title, False, exc,
                                     content_type=kind)
                continue
            session.audit.record(full_url, audit_kind, doc.title, True, content_type=kind)
            self.memory.put_document(full_url, doc)
            record.documents[link.url] = doc

    # ──────────────────────── linked pages ────────────────────────
    def _expand_root(self, root: PageRecord, base_url: str,
                     session: CrawlSession,
                     cancel: threading.Event | None) -> None:
        if self.settings.max_depth < 1 or not session.can_fetch_more():
            return
        for link in root.links:
            full_url = link.url
            if link.type == LinkType.INTERNAL or link.url.startswith("/"):
                full_url = resolve_url(base_url, link.url)
            kind = links.classify(full_url, link.type,
                                  internal_enabled=self.settings.enable_internal_links,
                                  allowed=self.settings.allowed_url_patterns)
            if kind == links.LinkKind.SKIP:
                continue
            if _cancelled(cancel):
                session.note_skip(full_url, CrawlState.SKIPPED_CANCELLED)
                break
            self._crawl_linked(full_url, 1, root, session, cancel)

    def _crawl_linked(self, url: str, depth: int, root: PageRecord,
                      session: CrawlSession,
                      cancel: threading.Event | None) -> LinkedPageRecord | None:
        """
        Fetch one linked page at `depth` hops from the root and keep
        expanding from it.  Every outcome other than success is recorded and
        turned into None.
        """
        if depth > self.settings.max_depth:
            session.note_skip(url, CrawlState.SKIPPED_DEPTH)
            return None
        if session.is_visited(url):
            return None
        if not session.can_fetch_more():
            session.note_skip(url, CrawlState.SKIPPED_BUDGET)
            return None
        if not links.is_url_allowed(url, self.settings.allowed_url_patterns):
            session.audit.record(url, "linked", success=False,
                                 error=f"URL not allowed for scraping: {url}")
            session.set_state(url, CrawlState.SKIPPED_DISALLOWED)
            return None
        if _cancelled(cancel):
            session.note_skip(url, CrawlState.SKIPPED_CANCELLED)
            return None

        session.mark_visited(url)
        session.consume_page()
        session.set_state(url, CrawlState.FETCHING)
        logger.info("Scraping linked page (depth %d): %s", depth, url)

        result = self._fetch(url, LINKED_TIMEOUT)
        if not result.ok:
            logger.warning("Failed to scrape linked page %s: %s", url, result.error)
            session.audit.record(url, "linked", success=False, error=result.error)
            session.set_state(url, CrawlState.FETCH_FAILED)
            return None

        if self.settings.reuse_by_hash:
            reused = self._reuse_linked(url, result, root, session)
            if reused is not None:
                return reused

        record = self._build_linked(url, result)
        root.linked_pages[url] = record
        session.set_state(url, CrawlState.EXTRACTED)

        if depth < self.settings.max_depth and session.can_fetch_more():
            session.set_state(url, CrawlState.RECURSING)
            for href in parser.raw_hrefs(result.soup):
                if _cancelled(cancel):
                    break
                nested = href
                if href.startswith("/") or href.startswith("./"):
                    nested = resolve_url(url, href)
                if not is_http(nested) or is_same_domain(url, nested):
                    continue
                if session.is_visited(nested):
                    continue
                if not links.is_url_allowed(nested, self.settings.allowed_url_patterns):
                    continue
                self._crawl_linked(nested, depth + 1, root, session, cancel)

        session.audit.record(url, "linked", record.title, True,
                             relevance=record.relevance,
                             content_type=record.content_type.value)
        session.set_state(url, CrawlState.DONE)
        return record

    def _reuse_linked(self, url: str, result: FetchResult, root: PageRecord,
                      session: CrawlSession) -> LinkedPageRecord | None:
        existing = root.find_linked_by_hash(result.content_hash) \
            or self.store.find_linked_by_hash(result.content_hash)
        if existing is None:
            return None
        record = existing.model_copy(deep=True, update={"url": url, "last_updated": utcnow()})
        root.linked_pages[url] = record
        session.audit.record(url, "linked", record.title, True,
                             relevance=record.relevance, content_type="content_reused")
        session.set_state(url, CrawlState.REUSED)
        logger.info("Reused existing linked content for: %s (hash: %s)",
                    url, result.content_hash[:8])
        return record

    def _build_linked(self, url: str, result: FetchResult) -> LinkedPageRecord:
        soup = result.soup
        full_text = parser.extract_text(soup)
        if not full_text:
            full_text = parser.platform_text(url, soup, self.settings.min_text_length)
        return LinkedPageRecord(
            url=url,
            title=result.title,
            description=parser.extract_linked_description(soup),
            keywords=parser.extract_keywords(soup),
            text=parser.condense(result.title, full_text,
                                 self.settings.max_content_length, self.summarizer),
            content_type=links.content_type(url),
            content_hash=result.content_hash,
            last_updated=utcnow(),
        )

    # ─────────────────────────── misc ─────────────────────────────
    def _fetch(self, url: str, timeout: float) -> FetchResult:
        try:
            return self.fetch(url, timeout)
        except requests.RequestException as exc:
            return FetchResult(url=url, error=str(exc))
