import requests

import fetcher
from utils import content_hash


class _Response:
    def __init__(self, status_code=200, content=b""):
        self.status_code = status_code
        self.content = content


def test_fetch_page_parses_title_and_hashes_raw_bytes(monkeypatch):
    body = b"<html><head><title>\n  Alice  </title></head><body><p>hi</p></body></html>"
    seen = {}

    def fake_get(url, headers=None, timeout=None):
        seen.update(url=url, headers=headers, timeout=timeout)
        return _Response(200, body)

    monkeypatch.setattr(fetcher.requests, "get", fake_get)

    result = fetcher.fetch_page("https://example.com", timeout=15)

    assert result.ok
    assert result.title == "Alice"
    assert result.content_hash == content_hash(body)
    assert result.soup.find("p").get_text() == "hi"
    assert seen["timeout"] == 15
    assert seen["headers"]["User-Agent"] == fetcher.USER_AGENT


def test_missing_title_is_empty_string(monkeypatch):
    monkeypatch.setattr(fetcher.requests, "get",
                        lambda url, **kw: _Response(200, b"<html><body>x</body></html>"))
    assert fetcher.fetch_page("https://example.com").title == ""


def test_non_200_is_reported_not_raised(monkeypatch):
    monkeypatch.setattr(fetcher.requests, "get", lambda url, **kw: _Response(404))

    result = fetcher.fetch_page("https://example.com/missing")

    assert not result.ok
    assert result.error == "HTTP 404"
    assert result.soup is None


def test_network_error_is_reported_not_raised(monkeypatch):
    def timeout(url, **kw):
        raise requests.Timeout("read timed out")

    monkeypatch.setattr(fetcher.requests, "get", timeout)

    result = fetcher.fetch_page("https://slow.example")

    assert not result.ok
    assert "read timed out" in result.error


def test_fetcher_uses_its_session():
    class _Session:
        def __init__(self):
            self.calls = []

        def get(self, url, headers=None, timeout=None):
            self.calls.append((url, timeout))
            return _Response(200, b"<title>t</title>")

        def close(self):
            pass

    session = _Session()
    fetch = fetcher.Fetcher(session)

    assert fetch("https://example.com", 10).title == "t"
    assert session.calls == [("https://example.com", 10)]
