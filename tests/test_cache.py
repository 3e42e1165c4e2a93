import json
import os

from cache import DiskCache, safe_directory_name
from models import LinkedPageRecord, PageRecord, SCHEMA_VERSION
from utils import short_hash


def test_directory_names():
    assert safe_directory_name("https://www.example.com/") == "example.com"
    assert safe_directory_name("https://example.com") == "example.com"
    assert safe_directory_name("https://example.com/about?x=1") == \
        "example.com_" + short_hash("/about?x=1")
    assert safe_directory_name("http://localhost:8080/a") == "localhost_8080_" + short_hash("/a")
    # deterministic
    assert safe_directory_name("https://example.com/a") == safe_directory_name("https://example.com/a")


def test_save_then_load_round_trip(tmp_path):
    store = DiskCache(tmp_path)
    record = PageRecord(url="https://example.com/", title="Alice", content_hash="abc",
                        linked_pages={"https://github.com/a": LinkedPageRecord(url="https://github.com/a")})

    assert store.save("https://example.com/", record)
    loaded = store.load("https://example.com/")

    assert loaded.model_dump() == record.model_dump()
    raw = json.loads((tmp_path / "example.com" / "content.json").read_text(encoding="utf-8"))
    assert raw["url"] == "https://example.com/"
    assert raw["schema_version"] == SCHEMA_VERSION
    assert "saved_at" in raw
    assert raw["content"]["title"] == "Alice"


def test_save_overwrites(tmp_path):
    store = DiskCache(tmp_path)
    store.save("https://example.com/", PageRecord(title="old"))
    store.save("https://example.com/", PageRecord(title="new"))

    assert store.load("https://example.com/").title == "new"
    assert len(list(store.entries())) == 1


def test_load_missing_and_malformed(tmp_path):
    store = DiskCache(tmp_path)
    assert store.load("https://nowhere.example/") is None

    target = store.file_for("https://broken.example/")
    target.parent.mkdir(parents=True)
    target.write_text("{not json", encoding="utf-8")
    assert store.load("https://broken.example/") is None


def test_older_files_without_new_fields_still_load(tmp_path):
    store = DiskCache(tmp_path)
    target = store.file_for("https://example.com/")
    target.parent.mkdir(parents=True)
    target.write_text(json.dumps({
        "url": "https://example.com/",
        "saved_at": "2024-01-01T00:00:00Z",
        "content": {"title": "legacy", "last_updated": "2024-01-01T00:00:00Z", "extra": 1},
    }), encoding="utf-8")

    loaded = store.load("https://example.com/")
    assert loaded.title == "legacy"
    assert loaded.linked_pages == {}


def test_find_by_hash(tmp_path):
    store = DiskCache(tmp_path)
    store.save("https://a.example/", PageRecord(title="A", content_hash="h1"))
    store.save("https://b.example/x", PageRecord(
        title="B", content_hash="h2",
        linked_pages={"https://github.com/b": LinkedPageRecord(url="https://github.com/b",
                                                               content_hash="h3")}))

    url, record = store.find_by_hash("h2")
    assert url == "https://b.example/x"
    assert record.title == "B"
    assert store.find_by_hash("h2", exclude_url="https://B.example/x/") is None
    assert store.find_by_hash("h2", exclude_url="https://a.example/")[0] == "https://b.example/x"
    assert store.find_by_hash("h3") is None
    assert store.find_by_hash("") is None
    assert store.find_linked_by_hash("h3").url == "https://github.com/b"
    assert store.find_linked_by_hash("nope") is None


def test_write_failure_is_a_warning_not_an_error(tmp_path, monkeypatch, caplog):
    store = DiskCache(tmp_path)

    def boom(src, dst):
        raise PermissionError("read-only")

    monkeypatch.setattr(os, "replace", boom)

    assert store.save("https://example.com/", PageRecord(title="x")) is False
    assert "Failed to save content" in caplog.text
    # no stray temp files left behind
    assert list(store.path_for("https://example.com/").iterdir()) == []


def test_unwritable_cache_root_does_not_raise(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("x")
    store = DiskCache(blocker / "cache")

    assert store.save("https://example.com/", PageRecord()) is False
    assert store.load("https://example.com/") is None
    assert store.find_by_hash("h") is None


def test_clear(tmp_path):
    store = DiskCache(tmp_path)
    store.save("https://a.example/", PageRecord())
    store.save("https://b.example/", PageRecord())

    assert store.clear() == 2
    assert list(store.entries()) == []
