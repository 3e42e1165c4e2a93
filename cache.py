# cache.py — on-disk snapshot store: one directory per crawled root URL
"""
Layout::

    <cache_dir>/
        example.com/content.json            # root path
        example.com_1a2b3c4d/content.json   # any other path/query

Each ``content.json`` is a pretty-printed :class:`models.CacheEnvelope`.
Persistence is best-effort: every I/O problem is logged and swallowed so a
read-only or full disk never stops a crawl.
"""

from __future__ import annotations

import hashlib
import logging
import os
import re
import shutil
import tempfile
from pathlib import Path
from typing import Iterator, Tuple
from urllib.parse import urlparse

from pydantic import ValidationError

from models import CacheEnvelope, LinkedPageRecord, PageRecord, utcnow
from utils import normalize_url, short_hash

logger = logging.getLogger(__name__)

CONTENT_FILE = "content.json"
_UNSAFE_RE   = re.compile(r"[^a-zA-Z0-9.-]")


def safe_directory_name(url: str) -> str:
    """`{host}_{8 hex of path+query}`, or the bare host for a root URL."""
    try:
        parts = urlparse(url)
    except ValueError:
        return hashlib.md5(url.encode("utf-8")).hexdigest()
    if not parts.netloc:
        return hashlib.md5(url.encode("utf-8")).hexdigest()

    host = parts.netloc
    if host.startswith("www."):
        host = host[4:]
    host = _UNSAFE_RE.sub("_", host)

    full_path = parts.path
    if parts.query:
        full_path += "?" + parts.query
    if full_path in ("", "/"):
        return host
    return f"{host}_{short_hash(full_path)}"


class DiskCache:
    def __init__(self, cache_dir: str | os.PathLike = "scraped_content") -> None:
        self.root = Path(cache_dir)
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            logger.warning("Could not create cache directory %s: %s", self.root, exc)

    # ---------- paths ----------
    def path_for(self, url: str) -> Path:
        return self.root / safe_directory_name(url)

    def file_for(self, url: str) -> Path:
        return self.path_for(url) / CONTENT_FILE

    # ---------- write ----------
    def save(self, url: str, record: PageRecord) -> bool:
        """Overwrite the snapshot for `url`.  Returns False (after logging) on any I/O error."""
        target = self.file_for(url)
        envelope = CacheEnvelope(url=url, saved_at=utcnow(), content=record)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            # temp file + rename so a concurrent reader never sees half a file
            fd, tmp = tempfile.mkstemp(dir=target.parent, prefix=".content-", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    fh.write(envelope.model_dump_json(indent=2))
                os.replace(tmp, target)
            except BaseException:
                Path(tmp).unlink(missing_ok=True)
                raise
        except OSError as exc:
            logger.warning("Failed to save content for %s to %s: %s", url, target, exc)
            return False
        logger.info("Content saved to: %s", target)
        return True

    # ---------- read ----------
    def _read(self, path: Path) -> CacheEnvelope | None:
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            logger.warning("Could not read cache file %s: %s", path, exc)
            return None
        try:
            return CacheEnvelope.model_validate_json(raw)
        except ValidationError as exc:
            logger.warning("Ignoring malformed cache file %s: %s", path, exc.errors()[:1])
            return None

    def load(self, url: str) -> PageRecord | None:
        """Snapshot for `url`, or None.  Freshness is the caller's business."""
        envelope = self._read(self.file_for(url))
        if envelope is None:
            return None
        logger.info("Content loaded from: %s (saved at %s)",
                    self.file_for(url), envelope.saved_at.strftime("%Y-%m-%d %H:%M:%S"))
        return envelope.content

    def entries(self) -> Iterator[CacheEnvelope]:
        if not self.root.is_dir():
            return
        for path in sorted(self.root.glob(f"*/{CONTENT_FILE}")):
            envelope = self._read(path)
            if envelope is not None:
                yield envelope

    def find_by_hash(self, digest: str,
                     exclude_url: str | None = None) -> Tuple[str, PageRecord] | None:
        """
        Linear scan for a root snapshot with `digest`; returns ``(original_url, record)``.
        The snapshot stored for `exclude_url` itself never matches.
        """
        if not digest:
            return None
        skip = normalize_url(exclude_url) if exclude_url else None
        for envelope in self.entries():
            if skip is not None and normalize_url(envelope.url) == skip:
                continue
            if envelope.content.content_hash == digest:
                logger.info("Found existing content with matching hash: %s (original URL: %s)",
                            digest[:8], envelope.url)
                return envelope.url, envelope.content
        return None

    def find_linked_by_hash(self, digest: str) -> LinkedPageRecord | None:
        """Same scan, but over the linked pages stored inside every snapshot."""
        if not digest:
            return None
        for envelope in self.entries():
            linked = envelope.content.find_linked_by_hash(digest)
            if linked is not None:
                logger.info("Found existing linked content with matching hash: %s (%s)",
                            digest[:8], linked.url)
                return linked
        return None

    def clear(self) -> int:
        """Remove every cached snapshot directory; returns how many were removed."""
        removed = 0
        if not self.root.is_dir():
            return removed
        for child in self.root.iterdir():
            if child.is_dir():
                try:
                    shutil.rmtree(child)
                    removed += 1
                except OSError as exc:
                    logger.warning("Could not remove %s: %s", child, exc)
        return removed
