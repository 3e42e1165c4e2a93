# utils.py — URL canonicalisation + content hashing
from __future__ import annotations

import hashlib
from urllib.parse import parse_qsl, urlencode, urljoin, urlparse, urlunparse

# ─────────────────────────── constants ────────────────────────────
TRACKING_PARAMS = {
    "utm_source", "utm_medium", "utm_campaign", "utm_term", "utm_content",
    "ref", "source",
}
_SAME_PLATFORM = ("github.com", "linkedin.com")
# ──────────────────────────────────────────────────────────────────


def _is_tracking(key: str) -> bool:
    return key in TRACKING_PARAMS or key.startswith("utm_")


# ───────────────────────── normalisation ─────────────────────────
def normalize_url(url: str) -> str:
    """
    Canonical form used for loop detection.

    Lower-cases, drops tracking parameters and the fragment, and strips the
    trailing slash from any path other than "/".  Never raises.
    """
    lowered = url.strip().lower()
    try:
        parts = urlparse(lowered)
        query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True)
                 if not _is_tracking(k)]
        path = parts.path
        if not path and parts.netloc:
            path = "/"
        elif len(path) > 1 and path.endswith("/"):
            path = path[:-1]
        return urlunparse((parts.scheme, parts.netloc, path, parts.params,
                           urlencode(sorted(query)), "")).lower()
    except ValueError:
        return lowered


def resolve_url(base_url: str, href: str) -> str:
    """Absolute `http…` hrefs pass through; everything else is joined onto `base_url`."""
    if href.startswith("http"):
        return href
    try:
        return urljoin(base_url, href)
    except ValueError:
        if href.startswith("/"):
            return base_url.rstrip("/") + href
        return base_url.rstrip("/") + "/" + href


def is_same_domain(url1: str, url2: str) -> bool:
    # only the big platforms count; a personal site may link to itself freely
    a, b = url1.lower(), url2.lower()
    return any(d in a and d in b for d in _SAME_PLATFORM)


def is_http(url: str) -> bool:
    return url.startswith("http")


# ─────────────────────────── hashing ─────────────────────────────
def content_hash(raw: bytes) -> str:
    """SHA-256 hex digest of the raw response body."""
    return hashlib.sha256(raw).hexdigest()


def short_hash(text: str, n: int = 8) -> str:
    return hashlib.md5(text.encode("utf-8")).hexdigest()[:n]
