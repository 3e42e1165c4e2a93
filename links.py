# links.py — which discovered links are worth following, and what they are
from __future__ import annotations

from enum import Enum
from typing import Iterable, Optional
from urllib.parse import urlparse

from models import ContentType, LinkType

# ─────────────────────────── tables ──────────────────────────────
PROFESSIONAL_DOMAINS = (
    "linkedin.com", "github.com", "gitlab.com", "stackoverflow.com",
    "medium.com", "dev.to", "twitter.com", "x.com",
)

SKIP_PATTERNS = (
    "#", "mailto:", "tel:", "javascript:",
    ".css", ".js", ".ico", ".png", ".jpg", ".jpeg", ".gif", ".svg",
    "/admin", "/login", "/logout", "/cart", "/checkout",
    "?search", "?sort", "?filter",
)

# first match wins
_CONTENT_RULES = (
    (("github.com", "gitlab.com"),          ContentType.PROJECT),
    (("linkedin.com",),                     ContentType.PROFESSIONAL),
    (("medium.com", "dev.to", "blog"),      ContentType.BLOG),
    (("stackoverflow.com",),                ContentType.TECHNICAL),
)

DOCUMENT_EXTENSIONS = {".pdf": "pdf", ".docx": "docx", ".xlsx": "xlsx", ".csv": "csv"}
# ──────────────────────────────────────────────────────────────────


class LinkKind(str, Enum):
    PROFESSIONAL = "professional"
    INTERNAL_NAV = "internal_nav"
    SKIP = "skip"


def is_url_allowed(url: str, patterns: Iterable[str]) -> bool:
    """No patterns → everything allowed; otherwise any lower-cased substring hit."""
    patterns = list(patterns)
    if not patterns:
        return True
    lowered = url.lower()
    return any(p in lowered for p in patterns)


def _host(url: str) -> str:
    try:
        host = urlparse(url.strip().lower()).hostname or ""
    except ValueError:
        return ""
    return host


def is_professional_link(url: str) -> bool:
    """Host is one of PROFESSIONAL_DOMAINS or a subdomain of one."""
    host = _host(url)
    return any(host == d or host.endswith("." + d) for d in PROFESSIONAL_DOMAINS)


def is_internal_navigation_link(url: str, link_type: LinkType,
                                patterns: Iterable[str] = ()) -> bool:
    if link_type != LinkType.INTERNAL:
        return False
    if not is_url_allowed(url, patterns):
        return False
    lowered = url.lower()
    return not any(p in lowered for p in SKIP_PATTERNS)


def classify(url: str, link_type: LinkType, *,
             internal_enabled: bool = False,
             allowed: Iterable[str] = ()) -> LinkKind:
    if is_professional_link(url):
        return LinkKind.PROFESSIONAL
    if internal_enabled and is_internal_navigation_link(url, link_type, allowed):
        return LinkKind.INTERNAL_NAV
    return LinkKind.SKIP


def content_type(url: str) -> ContentType:
    lowered = url.lower()
    for needles, kind in _CONTENT_RULES:
        if any(n in lowered for n in needles):
            return kind
    return ContentType.GENERAL


def document_kind(url: str) -> Optional[str]:
    """'pdf' / 'docx' / 'xlsx' / 'csv' when the URL path ends in one, else None."""
    try:
        path = urlparse(url).path.lower()
    except ValueError:
        return None
    for ext, kind in DOCUMENT_EXTENSIONS.items():
        if path.endswith(ext):
            return kind
    return None
