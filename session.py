# session.py — per-refresh crawl state: visited set, page budget, audit trail
from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from models import utcnow
from utils import normalize_url

logger = logging.getLogger(__name__)

DEFAULT_PAGE_BUDGET = 100


class CrawlState(str, Enum):
    """Where a URL ended up during one session."""

    FETCHING = "fetching"
    EXTRACTED = "extracted"
    RECURSING = "recursing"
    DONE = "done"
    CACHED = "cached"
    REUSED = "reused"
    SKIPPED_DISALLOWED = "skipped:disallowed"
    SKIPPED_BUDGET = "skipped:budget-exhausted"
    SKIPPED_VISITED = "skipped:already-visited"
    SKIPPED_DEPTH = "skipped:depth"
    SKIPPED_CANCELLED = "skipped:cancelled"
    FETCH_FAILED = "error:fetch-failed"

    @property
    def terminal(self) -> bool:
        return self not in (CrawlState.FETCHING, CrawlState.EXTRACTED, CrawlState.RECURSING)


@dataclass
class AuditEntry:
    url: str
    kind: str                    # main / linked / pdf / file
    title: str = ""
    success: bool = True
    error: Optional[str] = None
    relevance: int = 0
    content_type: str = ""
    timestamp: datetime = field(default_factory=utcnow)


@dataclass
class AuditSummary:
    total: int
    succeeded: int
    failed: int
    by_kind: Dict[str, int]


class ScrapeAuditLog:
    """Append-only record of every URL the crawler touched, in processing order."""

    def __init__(self) -> None:
        self._entries: List[AuditEntry] = []

    def record(self,
               url: str,
               kind: str,
               title: str = "",
               success: bool = True,
               error: BaseException | str | None = None,
               relevance: int = 0,
               content_type: str = "") -> AuditEntry:
        entry = AuditEntry(
            url=url, kind=kind, title=title, success=success,
            error=str(error) if error is not None else None,
            relevance=relevance, content_type=content_type,
        )
        self._entries.append(entry)
        return entry

    @property
    def entries(self) -> List[AuditEntry]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def failures(self) -> List[AuditEntry]:
        return [e for e in self._entries if not e.success]

    def summary(self) -> AuditSummary:
        ok = sum(1 for e in self._entries if e.success)
        return AuditSummary(
            total=len(self._entries),
            succeeded=ok,
            failed=len(self._entries) - ok,
            by_kind=dict(Counter(e.kind for e in self._entries)),
        )

    def format_report(self) -> str:
        s = self.summary()
        by_kind = ", ".join(f"{k}: {n}" for k, n in s.by_kind.items())
        lines = [
            "=== SCRAPING SUMMARY ===",
            f"Total URLs processed: {s.total}",
            f"Successful: {s.succeeded}, Failed: {s.failed}",
            f"By type: {by_kind}",
            "",
            "Detailed scraping log:",
        ]
        for i, e in enumerate(self._entries, 1):
            title = e.title or "(no title)"
            if len(title) > 50:
                title = title[:50] + "..."
            line = f"{i}. {'✓' if e.success else '✗'} [{e.kind}] {e.url} - {title}"
            if e.relevance > 0:
                line += f" (relevance: {e.relevance})"
            if e.content_type:
                line += f" [{e.content_type}]"
            if not e.success and e.error:
                line += f" - Error: {e.error}"
            lines.append(line)
        lines.append("========================")
        return "\n".join(lines)

    def clear(self) -> None:
        self._entries.clear()


class CrawlSession:
    """
    Mutable state for one refresh cycle.

    Passed explicitly through every recursive crawl call; a new refresh gets
    a new session (or `clear()`), never shared globals.
    """

    def __init__(self, page_budget: int = DEFAULT_PAGE_BUDGET,
                 audit: ScrapeAuditLog | None = None) -> None:
        self.page_budget = max(0, page_budget)
        self.pages_remaining = self.page_budget
        self.visited: set[str] = set()
        self.states: Dict[str, CrawlState] = {}
        self.audit = audit if audit is not None else ScrapeAuditLog()

    # ---------- state machine bookkeeping ----------
    def set_state(self, url: str, state: CrawlState) -> None:
        self.states[normalize_url(url)] = state

    def note_skip(self, url: str, state: CrawlState) -> None:
        """Remember why a URL was passed over, unless it already has a state."""
        self.states.setdefault(normalize_url(url), state)

    def state_of(self, url: str) -> Optional[CrawlState]:
        return self.states.get(normalize_url(url))

    # ---------- loop detection ----------
    def is_visited(self, url: str) -> bool:
        return normalize_url(url) in self.visited

    def mark_visited(self, url: str) -> None:
        self.visited.add(normalize_url(url))

    # ---------- page budget ----------
    def can_fetch_more(self) -> bool:
        return self.pages_remaining > 0

    def consume_page(self) -> bool:
        """Take one page from the budget; False (and no change) once it is spent."""
        if self.pages_remaining <= 0:
            return False
        self.pages_remaining -= 1
        return True

    @property
    def pages_fetched(self) -> int:
        return self.page_budget - self.pages_remaining

    def clear(self) -> None:
        """Session boundary: audit log, visited set and budget reset together."""
        self.audit.clear()
        self.visited = set()
        self.states = {}
        self.pages_remaining = self.page_budget
        logger.debug("crawl session reset (budget %d)", self.page_budget)
