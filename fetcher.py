#fetcher.py — single bounded GET → parsed soup + title + content hash
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

import requests
from bs4 import BeautifulSoup

from config import ROOT_TIMEOUT
from utils import content_hash

logger = logging.getLogger(__name__)

USER_AGENT = "Mozilla/5.0 (compatible; WebSiteAssistantBot/1.0)"


@dataclass
class FetchResult:
    url: str
    soup: Optional[BeautifulSoup] = None
    title: str = ""
    content_hash: str = ""
    raw: bytes = b""
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


# (url, timeout) → FetchResult; the crawler accepts any callable of this shape
FetchFn = Callable[[str, float], FetchResult]


def parse_document(url: str, raw: bytes) -> FetchResult:
    """Hash + parse an already-downloaded body."""
    soup = BeautifulSoup(raw, "html.parser")
    tag = soup.find("title")
    title = tag.get_text().strip() if tag else ""
    return FetchResult(url=url, soup=soup, title=title,
                       content_hash=content_hash(raw), raw=raw)


def fetch_page(url: str,
               timeout: float = ROOT_TIMEOUT,
               session: requests.Session | None = None) -> FetchResult:
    """
    One GET, no retries.  Network errors and non-200 answers come back as
    ``FetchResult.error``; this never raises for an unreachable page.
    """
    getter = session.get if session is not None else requests.get
    logger.debug("FETCH %s  (timeout %ss)", url, timeout)
    try:
        r = getter(url, headers={"User-Agent": USER_AGENT}, timeout=timeout)
    except requests.RequestException as exc:
        logger.warning("  ↳ error fetching %s: %s", url, exc)
        return FetchResult(url=url, error=f"failed to fetch URL {url}: {exc}")

    if r.status_code != 200:
        logger.warning("  ↳ %s answered HTTP %d", url, r.status_code)
        return FetchResult(url=url, error=f"HTTP {r.status_code}")

    raw = r.content
    try:
        return parse_document(url, raw)
    except Exception as exc:  # bs4 surfaces parser problems as assorted types
        logger.warning("  ↳ failed to parse HTML from %s: %s", url, exc)
        return FetchResult(url=url, raw=raw, content_hash=content_hash(raw),
                           error=f"failed to parse HTML: {exc}")


class Fetcher:
    """`fetch_page` bound to one pooled `requests.Session`."""

    def __init__(self, session: requests.Session | None = None) -> None:
        self.session = session or requests.Session()

    def __call__(self, url: str, timeout: float = ROOT_TIMEOUT) -> FetchResult:
        return fetch_page(url, timeout=timeout, session=self.session)

    def close(self) -> None:
        self.session.close()
