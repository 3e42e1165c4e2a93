# documents.py — text out of pdf / docx / xlsx / csv files linked from a page
from __future__ import annotations

import io
import logging
from pathlib import PurePosixPath
from typing import Callable, Dict
from urllib.parse import unquote, urlparse

import docx
import pandas as pd
import pdfplumber
import requests

from config import DOCUMENT_TIMEOUT
from fetcher import USER_AGENT
from links import document_kind
from models import DocumentRecord, utcnow

logger = logging.getLogger(__name__)

_MAX_TABLE_ROWS = 500


class DocumentError(RuntimeError):
    """Download or parse failure for one linked document."""


# url → DocumentRecord; raises DocumentError
ExtractFn = Callable[[str], DocumentRecord]


# ───────────────────────── per-format parsers ─────────────────────
def _parse_pdf(data: bytes) -> Dict:
    parts = []
    with pdfplumber.open(io.BytesIO(data)) as pdf:
        meta = {k: str(v) for k, v in (pdf.metadata or {}).items()
                if k in ("Title", "Author", "Subject", "Keywords") and v}
        for page in pdf.pages:
            page_text = page.extract_text()
            if page_text:
                parts.append(page_text)
        pages = len(pdf.pages)
    return {"text": "\n\n".join(parts), "metadata": meta, "page_count": pages,
            "title": meta.get("Title", "")}


def _parse_docx(data: bytes) -> Dict:
    document = docx.Document(io.BytesIO(data))
    paragraphs = [p.text.strip() for p in document.paragraphs if p.text.strip()]
    for table in document.tables:
        for row in table.rows:
            cells = [c.text.strip() for c in row.cells]
            if any(cells):
                paragraphs.append(" | ".join(cells))
    props = document.core_properties
    meta = {k: v for k, v in (("Title", props.title), ("Author", props.author),
                              ("Subject", props.subject)) if v}
    return {"text": "\n".join(paragraphs), "metadata": meta,
            "page_count": len(document.paragraphs), "title": props.title or ""}


def _frame_text(frame: pd.DataFrame) -> str:
    return frame.head(_MAX_TABLE_ROWS).to_csv(index=False, sep="|")


def _parse_xlsx(data: bytes) -> Dict:
    sheets = pd.read_excel(io.BytesIO(data), sheet_name=None)
    parts = [f"Sheet: {name}\n{_frame_text(frame)}" for name, frame in sheets.items()]
    return {"text": "\n".join(parts),
            "metadata": {"sheets": ", ".join(sheets)},
            "page_count": len(sheets), "title": ""}


def _parse_csv(data: bytes) -> Dict:
    frame = pd.read_csv(io.BytesIO(data))
    return {"text": _frame_text(frame),
            "metadata": {"columns": ", ".join(str(c) for c in frame.columns)},
            "page_count": len(frame), "title": ""}


_PARSERS = {"pdf": _parse_pdf, "docx": _parse_docx, "xlsx": _parse_xlsx, "csv": _parse_csv}


# ───────────────────────────── public ─────────────────────────────
class DocumentExtractor:
    def __init__(self, timeout: float = DOCUMENT_TIMEOUT,
                 session: requests.Session | None = None) -> None:
        self.timeout = timeout
        self.session = session or requests.Session()

    def __call__(self, url: str) -> DocumentRecord:
        return self.extract(url)

    def extract(self, url: str) -> DocumentRecord:
        kind = document_kind(url)
        if kind is None:
            raise DocumentError(f"unsupported file type: {url}")
        try:
            r = self.session.get(url, headers={"User-Agent": USER_AGENT}, timeout=self.timeout)
        except requests.RequestException as exc:
            raise DocumentError(f"failed to fetch document from {url}: {exc}") from exc
        if r.status_code != 200:
            raise DocumentError(f"failed to download document: status code {r.status_code}")
        return self.parse(url, kind, r.content)

    def close(self) -> None:
        self.session.close()

    def parse(self, url: str, kind: str, data: bytes) -> DocumentRecord:
        try:
            parsed = _PARSERS[kind](data)
        except Exception as exc:  # each backend has its own exception zoo
            raise DocumentError(f"failed to parse {kind} from {url}: {exc}") from exc
        name = unquote(PurePosixPath(urlparse(url).path).name)
        logger.info("Extracted %s (%d chars) from %s", kind, len(parsed["text"]), url)
        return DocumentRecord(
            url=url,
            file_kind=kind,
            title=parsed["title"] or name,
            text=parsed["text"],
            metadata=parsed["metadata"],
            page_count=parsed["page_count"],
            last_updated=utcnow(),
        )
