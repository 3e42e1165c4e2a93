from datetime import timedelta

from memory import Memory
from models import DocumentRecord, PageRecord, utcnow


def test_page_expires_only_once_older_than_ttl():
    stamp = utcnow()
    memory = Memory(page_ttl=timedelta(hours=1))
    memory.put_page("https://example.com/", PageRecord(title="A", last_updated=stamp))

    assert memory.get_page("https://example.com/", now=stamp + timedelta(hours=1)).title == "A"
    assert memory.get_page("https://example.com/",
                           now=stamp + timedelta(hours=1, seconds=1)) is None


def test_documents_use_their_own_ttl():
    stamp = utcnow()
    memory = Memory(page_ttl=timedelta(minutes=15), document_ttl=timedelta(hours=24))
    memory.put_document("https://example.com/cv.pdf",
                        DocumentRecord(url="https://example.com/cv.pdf", last_updated=stamp))

    assert memory.get_document("https://example.com/cv.pdf", now=stamp + timedelta(hours=2))
    assert memory.get_document("https://example.com/cv.pdf", now=stamp + timedelta(hours=25)) is None
    assert memory.get_document("https://example.com/other.pdf") is None


def test_clear_empties_both_caches():
    memory = Memory()
    memory.put_page("https://example.com/", PageRecord())
    memory.put_document("https://example.com/cv.pdf", DocumentRecord(url="https://example.com/cv.pdf"))

    memory.clear()

    assert memory.get_page("https://example.com/") is None
    assert memory.get_document("https://example.com/cv.pdf") is None
