from click.testing import CliRunner

from cache import DiskCache
from main import cli
from models import PageRecord


def test_clear_cache_reports_count(tmp_path, monkeypatch):
    cache_dir = tmp_path / "snapshots"
    store = DiskCache(cache_dir)
    store.save("https://a.example/", PageRecord(title="A"))
    store.save("https://b.example/", PageRecord(title="B"))
    monkeypatch.setenv("CACHE_DIR", str(cache_dir))

    result = CliRunner().invoke(cli, ["clear-cache"])

    assert result.exit_code == 0
    assert "Removed 2 cached site(s)" in result.output
    assert list(store.entries()) == []


def test_crawl_without_site_is_a_usage_error(monkeypatch):
    monkeypatch.setenv("WEBSITE_URL", "")

    result = CliRunner().invoke(cli, ["crawl"])

    assert result.exit_code == 2
    assert "WEBSITE_URL" in result.output


def test_ask_requires_a_question():
    result = CliRunner().invoke(cli, ["ask"])
    assert result.exit_code == 2
