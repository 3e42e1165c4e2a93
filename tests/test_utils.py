import pytest

from utils import content_hash, is_same_domain, normalize_url, resolve_url

URLS = [
    "HTTPS://Example.com/Path/",
    "https://example.com",
    "https://example.com/",
    "https://example.com/page?utm_source=x&b=2&a=1#frag",
    "https://example.com/search?q=hello%20world&ref=home",
    "https://example.com/p?x=%2F&y=",
    "example.com/no-scheme/",
    "http://[::1/broken",
    "",
]


@pytest.mark.parametrize("url", URLS)
def test_normalize_is_idempotent(url):
    once = normalize_url(url)
    assert normalize_url(once) == once


def test_tracking_params_fragment_and_case_are_dropped():
    assert normalize_url("https://Example.com/Blog/?utm_campaign=x&ref=nav&source=tw&page=2#top") \
        == "https://example.com/blog?page=2"


def test_trailing_slash_removed_but_root_kept():
    assert normalize_url("https://example.com/about/") == "https://example.com/about"
    assert normalize_url("http://x.com/a//") == "http://x.com/a/"
    assert normalize_url("https://example.com/") == "https://example.com/"
    assert normalize_url("https://example.com") == normalize_url("https://example.com/")


def test_unparseable_url_falls_back_to_lowercase():
    assert normalize_url("HTTP://[::1/Broken") == "http://[::1/broken"


def test_resolve_url():
    assert resolve_url("https://example.com/blog/", "post-1") == "https://example.com/blog/post-1"
    assert resolve_url("https://example.com/blog/", "/cv.pdf") == "https://example.com/cv.pdf"
    assert resolve_url("https://example.com", "https://github.com/a") == "https://github.com/a"


def test_same_domain_only_for_big_platforms():
    assert is_same_domain("https://github.com/a", "https://github.com/a/repo")
    assert is_same_domain("https://www.linkedin.com/in/a", "https://linkedin.com/company/b")
    assert not is_same_domain("https://github.com/a", "https://gitlab.com/a")
    assert not is_same_domain("https://example.com/", "https://example.com/about")


def test_content_hash_depends_only_on_bytes():
    body = b"<html><body>same</body></html>"
    assert content_hash(body) == content_hash(bytes(body))
    assert content_hash(body) != content_hash(body + b" ")
    assert len(content_hash(body)) == 64
