"""Shared fixtures: an in-memory web the crawler can fetch from, and temp-dir settings."""

import sys
from pathlib import Path
from typing import Dict, List

import pytest

# make the flat top-level modules importable without installing
sys.path.insert(0, str(Path(__file__).parent.parent))

from config import Settings  # noqa: E402
from fetcher import FetchResult, parse_document  # noqa: E402


def page(title: str, body: str = "", links=(), meta: str = "") -> str:
    anchors = "".join(f'<a href="{href}">{text}</a>' for href, text in links)
    return (f"<html><head><title>{title}</title>{meta}</head>"
            f"<body><p>{body or title + ' body'}</p>{anchors}</body></html>")


class FakeWeb:
    """url → html.  Call it like `fetch_page(url, timeout)`; every call is logged."""

    def __init__(self) -> None:
        self.pages: Dict[str, bytes] = {}
        self.failing: Dict[str, str] = {}
        self.calls: List[str] = []

    def add(self, url: str, html: str) -> None:
        self.pages[url] = html.encode("utf-8")

    def fail(self, url: str, reason: str = "timeout") -> None:
        self.failing[url] = reason

    def __call__(self, url: str, timeout: float = 30) -> FetchResult:
        self.calls.append(url)
        if url in self.failing:
            return FetchResult(url=url, error=self.failing[url])
        if url not in self.pages:
            return FetchResult(url=url, error="HTTP 404")
        return parse_document(url, self.pages[url])


@pytest.fixture
def web():
    return FakeWeb()


@pytest.fixture
def settings(tmp_path):
    return Settings(cache_dir=str(tmp_path / "scraped_content"))
