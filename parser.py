#parser.py — soup → body text, meta tags, outbound links
from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional, Tuple

from bs4 import BeautifulSoup, Tag

from llm_interface import LLMError
from models import Link, LinkType

logger = logging.getLogger(__name__)

# anchors are left out because their text is kept as Link.title
SKIP_TAGS = frozenset({"script", "style", "noscript", "frame", "iframe", "a"})

_PLATFORM_SELECTORS = {
    "github.com":   ".user-profile-bio, .repository-description, .markdown-body, .readme",
    "linkedin.com": ".pv-about-section, .summary, .experience",
}

Summarizer = Callable[[str, str], str]


# ─────────────────────────── body text ───────────────────────────
def extract_text(soup: BeautifulSoup) -> str:
    """
    Depth-first walk of <body>.  Every element outside SKIP_TAGS contributes
    its stripped text as one space-prefixed line; skipped elements drop their
    whole subtree.
    """
    body = soup.find("body")
    if not isinstance(body, Tag):
        return ""
    out: List[str] = []
    stack: List[Tag] = [body]
    while stack:
        node = stack.pop()
        if node.name in SKIP_TAGS:
            continue
        text = node.get_text().strip()
        if text:
            out.append(text)
        children = [c for c in node.children if isinstance(c, Tag)]
        stack.extend(reversed(children))
    return "".join(" " + line + "\n" for line in out)


def truncate(text: str, max_length: int) -> str:
    if len(text) > max_length:
        return text[:max_length] + "..."
    return text


def condense(title: str, text: str, max_length: int,
             summarize: Optional[Summarizer] = None) -> str:
    """Summarise through the LLM when one is wired in; otherwise (or on failure) truncate."""
    if summarize is not None and text:
        try:
            return summarize(title, text)
        except LLMError as exc:
            logger.warning("Failed to summarize %r, falling back to truncation: %s", title, exc)
    return truncate(text, max_length)


def platform_text(url: str, soup: BeautifulSoup, min_length: int) -> str:
    """Profile-specific blocks for GitHub / LinkedIn pages, joined by blank lines."""
    lowered = url.lower()
    for domain, selector in _PLATFORM_SELECTORS.items():
        if domain in lowered:
            parts = [el.get_text().strip() for el in soup.select(selector)]
            return "\n\n".join(p for p in parts if p and len(p) > min_length)
    return ""


# ─────────────────────────── meta tags ───────────────────────────
def extract_meta(soup: BeautifulSoup) -> Tuple[str, Dict[str, str]]:
    """(description, metadata).  `name=` and `property=` metas both land in metadata."""
    description = ""
    metadata: Dict[str, str] = {}
    for meta in soup.find_all("meta"):
        content = meta.get("content")
        if content is None:
            continue
        name = meta.get("name")
        if name:
            if name == "description":
                description = content
            else:
                metadata[name] = content
        prop = meta.get("property")
        if prop:
            metadata[prop] = content
    return description, metadata


def extract_linked_description(soup: BeautifulSoup) -> str:
    for meta in soup.find_all("meta"):
        if meta.get("name") == "description" or meta.get("property") == "og:description":
            content = meta.get("content")
            if content:
                return content
    return ""


def extract_keywords(soup: BeautifulSoup) -> List[str]:
    keywords: List[str] = []
    for meta in soup.find_all("meta", attrs={"name": "keywords"}):
        content = meta.get("content")
        if content is not None:
            keywords = [k.strip() for k in content.split(",") if k.strip()]
    return keywords


# ──────────────────────────── links ──────────────────────────────
def extract_links(soup: BeautifulSoup) -> List[Link]:
    """Every <a href> in document order; `external` iff the raw href is absolute http(s)."""
    links: List[Link] = []
    for a in soup.find_all("a", href=True):
        href = a["href"]
        links.append(Link(
            url=href,
            title=a.get_text().strip(),
            type=LinkType.EXTERNAL if href.startswith("http") else LinkType.INTERNAL,
        ))
    return links


def raw_hrefs(soup: BeautifulSoup) -> List[str]:
    return [a["href"] for a in soup.find_all("a", href=True)]
