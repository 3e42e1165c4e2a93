import pytest

from links import (LinkKind, classify, content_type, document_kind, is_internal_navigation_link,
                   is_professional_link, is_url_allowed)
from models import ContentType, LinkType


@pytest.mark.parametrize("url", [
    "https://github.com/alice",
    "https://www.linkedin.com/in/alice",
    "https://gitlab.com/alice",
    "https://stackoverflow.com/users/1/alice",
    "https://alice.medium.com/",
    "https://dev.to/alice",
    "https://twitter.com/alice",
    "https://x.com/alice",
])
def test_professional_domains(url):
    assert is_professional_link(url)
    assert classify(url, LinkType.EXTERNAL) == LinkKind.PROFESSIONAL


def test_lookalike_hosts_are_not_professional():
    assert not is_professional_link("https://dropbox.com/s/cv")
    assert not is_professional_link("https://example.com/github.com")


def test_internal_nav_needs_toggle():
    assert classify("https://example.com/about", LinkType.INTERNAL) == LinkKind.SKIP
    assert classify("https://example.com/about", LinkType.INTERNAL,
                    internal_enabled=True) == LinkKind.INTERNAL_NAV


@pytest.mark.parametrize("url", [
    "https://example.com/#contact",
    "mailto:alice@example.com",
    "tel:+100",
    "javascript:void(0)",
    "https://example.com/style.css",
    "https://example.com/logo.PNG",
    "https://example.com/admin/",
    "https://example.com/cart",
    "https://example.com/list?sort=asc",
])
def test_skip_list(url):
    assert not is_internal_navigation_link(url, LinkType.INTERNAL)


def test_internal_nav_respects_patterns_and_type():
    assert not is_internal_navigation_link("https://example.com/about", LinkType.EXTERNAL)
    assert not is_internal_navigation_link("https://example.com/about", LinkType.INTERNAL, ["blog"])
    assert is_internal_navigation_link("https://example.com/blog/1", LinkType.INTERNAL, ["blog"])


def test_allowed_patterns():
    assert is_url_allowed("https://anything.org", [])
    assert is_url_allowed("https://Example.com/Blog", ["example.com"])
    assert not is_url_allowed("https://other.org", ["example.com"])


@pytest.mark.parametrize("url, expected", [
    ("https://github.com/alice", ContentType.PROJECT),
    ("https://gitlab.com/alice", ContentType.PROJECT),
    ("https://linkedin.com/in/alice", ContentType.PROFESSIONAL),
    ("https://medium.com/@alice", ContentType.BLOG),
    ("https://dev.to/alice", ContentType.BLOG),
    ("https://alice.example.com/blog/post", ContentType.BLOG),
    ("https://stackoverflow.com/users/1", ContentType.TECHNICAL),
    ("https://example.com/about", ContentType.GENERAL),
    # first rule wins
    ("https://github.com/alice/blog", ContentType.PROJECT),
])
def test_content_type(url, expected):
    assert content_type(url) == expected


def test_document_kind():
    assert document_kind("https://example.com/files/CV.PDF") == "pdf"
    assert document_kind("https://example.com/data.csv?dl=1") == "csv"
    assert document_kind("https://example.com/report.xlsx") == "xlsx"
    assert document_kind("https://example.com/letter.docx") == "docx"
    assert document_kind("https://example.com/page.html") is None
