# chatbot.py — refresh the crawled profile, then answer questions about it
"""
Glue between the crawler and the LLM.  One refresh cycle = one fresh
CrawlSession; the resulting PageRecord is kept for an hour and fed to the
model with every question.  When the root page cannot be crawled or the model
is down, answers degrade to a short summary of whatever is known.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import List, Optional

from config import Settings
from crawler import CrawlError, Crawler
from links import is_professional_link
from llm_interface import LLMError, OllamaClient
from models import PageRecord, utcnow
from session import CrawlSession

logger = logging.getLogger(__name__)

# ─────────────────────────── tunables ────────────────────────────
DATA_MAX_AGE   = timedelta(hours=1)
FALLBACK_LINKS = 8
# ──────────────────────────────────────────────────────────────────


@dataclass
class ChatMessage:
    message: str
    response: str
    timestamp: datetime = field(default_factory=utcnow)
    degraded: bool = False


class Chatbot:
    def __init__(self,
                 settings: Settings,
                 crawler: Crawler | None = None,
                 llm: OllamaClient | None = None) -> None:
        self.settings = settings
        self.crawler = crawler or Crawler(settings)
        self.llm = llm
        self.website_url = settings.website_url
        self.website_data: Optional[PageRecord] = None
        self.last_fetch: Optional[datetime] = None
        self.session: Optional[CrawlSession] = None

    def close(self) -> None:
        self.crawler.close()
        if self.llm is not None:
            self.llm.close()

    def _llm_up(self) -> bool:
        return self.llm is not None and self.llm.is_available()

    # ---------- refresh cycle ----------
    def refresh(self, force: bool = False) -> PageRecord:
        """Re-crawl unless the data is younger than an hour.  Root failures raise CrawlError."""
        if (not force and self.website_data is not None and self.last_fetch is not None
                and utcnow() - self.last_fetch < DATA_MAX_AGE):
            return self.website_data

        self.session = self.crawler.new_session()
        if self.settings.enable_summarization and self._llm_up():
            self.crawler.summarizer = self.llm.summarize
        else:
            self.crawler.summarizer = None

        record = self.crawler.crawl(self.website_url, self.session,
                                    refresh=force or self.settings.refresh_content)
        logger.info("\n%s", self.session.audit.format_report())
        self.website_data = record
        self.last_fetch = utcnow()
        return record

    # ---------- answering ----------
    def ask(self, message: str) -> ChatMessage:
        try:
            self.refresh()
        except CrawlError as exc:
            logger.error("Failed to refresh website data: %s", exc)
            return ChatMessage(message=message, degraded=True,
                               response=self.fallback_response(message, exc))

        if self._llm_up():
            try:
                text = self.llm.answer(self.website_data, message,
                                       max_context=self.settings.max_context_length)
                return ChatMessage(message=message, response=text)
            except LLMError as exc:
                logger.warning("Ollama service error: %s", exc)

        return ChatMessage(message=message, degraded=True,
                           response=self.fallback_response(message))

    def profile_links(self) -> List[str]:
        if self.website_data is None:
            return []
        return [l.url for l in self.website_data.links if is_professional_link(l.url)]

    def fallback_response(self, message: str, error: Exception | None = None) -> str:
        """What we can say without the model: title, description and profile links."""
        if self.website_data is None:
            reason = f" ({error})" if error else ""
            return f"Sorry, the website could not be loaded right now{reason}. Please try again later."
        data = self.website_data
        lines = ["The language model is unavailable, so here is what the website says:"]
        if data.title:
            lines.append(f"Title: {data.title}")
        if data.description:
            lines.append(f"Description: {data.description}")
        profiles = self.profile_links()[:FALLBACK_LINKS]
        if profiles:
            lines.append("Profiles: " + ", ".join(profiles))
        if data.documents:
            lines.append("Documents: " + ", ".join(data.documents))
        return "\n".join(lines)
