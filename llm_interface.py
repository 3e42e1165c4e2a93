# llm_interface.py — local Ollama endpoint: liveness probe, completion, summaries
from __future__ import annotations

import logging
import textwrap
from typing import List

import requests

from config import (DEFAULT_OLLAMA_MODEL, DEFAULT_OLLAMA_URL, LLM_PROBE_TIMEOUT,
                    LLM_TIMEOUT, DEFAULT_SUMMARY_INPUT, DEFAULT_MAX_CONTEXT)
from models import PageRecord

logger = logging.getLogger(__name__)

SUMMARY_TARGET_CHARS = 1000


class LLMError(RuntimeError):
    """Model endpoint unreachable, unhappy, or silent."""


# ───────────────────────── prompt templates ───────────────────────
_SUMMARY_PROMPT = textwrap.dedent("""\
    Summarize the following web page content in at most {limit} characters.
    Keep every name, date, number, technology and project title exactly as written.
    Do not add information that is not in the text.

    Page title: {title}

    Content:
    {text}

    Summary:""")

_ANSWER_PROMPT = textwrap.dedent("""\
    You are an intelligent assistant with comprehensive information about the
    owner of the website below. You have access to the main website content and
    metadata, documents linked from it (CV/resume, spreadsheets), and pages from
    external profiles (GitHub, LinkedIn, blogs) with their content types.

    COMPREHENSIVE DATA AVAILABLE:
    {context}

    USER QUESTION: {question}

    INSTRUCTIONS:
    1. Answer using ALL available information: main website, documents and external profiles.
    2. Cross-reference sources and give specific details.
    3. For projects/code rely on project pages; for career questions rely on documents and professional profiles.
    4. Pay attention to content types (professional, blog, project, technical).
    5. If information is missing, say so clearly and point to the most relevant source.

    Answer:""")


# ─────────────────────── context assembly ─────────────────────────
def build_context(record: PageRecord, max_chars: int = DEFAULT_MAX_CONTEXT) -> str:
    """Flatten a PageRecord (+ linked pages + documents) into one prompt block."""
    out: List[str] = ["=== COMPREHENSIVE PROFILE ===", ""]
    if record.title:
        out.append(f"MAIN WEBSITE: {record.title}")
    if record.description:
        out.append(f"DESCRIPTION: {record.description}")
    if record.text:
        out += ["MAIN WEBSITE CONTENT:", record.text, ""]
    if record.metadata:
        out.append("WEBSITE METADATA:")
        out += [f"- {k}: {v}" for k, v in record.metadata.items()]
        out.append("")
    if record.links:
        out.append("LINKS AND PROFILES:")
        out += [f"- {l.title}: {l.url} (Type: {l.type.value})" for l in record.links]
        out.append("")
    if record.linked_pages:
        out.append("EXTERNAL PROFILE CONTENT:")
        for url, page in record.linked_pages.items():
            out.append(f"\n--- PROFILE: {url} ---")
            if page.title:
                out.append(f"Title: {page.title}")
            if page.description:
                out.append(f"Description: {page.description}")
            out.append(f"Content Type: {page.content_type.value}")
            if page.relevance > 0:
                out.append(f"Relevance Score: {page.relevance}/10")
            if page.keywords:
                out.append(f"Keywords: {', '.join(page.keywords)}")
            if page.text:
                out += ["Content:", page.text]
            out.append("--- END PROFILE ---")
        out.append("")
    if record.documents:
        out.append("LINKED DOCUMENTS:")
        for url, doc in record.documents.items():
            out += [f"\n--- {doc.file_kind.upper() or 'DOCUMENT'} FROM: {url} ---",
                    doc.text, "--- END DOCUMENT ---"]
    ctx = "\n".join(out)
    if len(ctx) > max_chars:
        ctx = ctx[:max_chars] + "..."
    return ctx


# ──────────────────────────── client ──────────────────────────────
class OllamaClient:
    def __init__(self,
                 base_url: str = DEFAULT_OLLAMA_URL,
                 model: str = DEFAULT_OLLAMA_MODEL,
                 timeout: float = LLM_TIMEOUT,
                 summary_input_chars: int = DEFAULT_SUMMARY_INPUT,
                 session: requests.Session | None = None) -> None:
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout
        self.summary_input_chars = summary_input_chars
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings) -> "OllamaClient":
        return cls(base_url=settings.ollama_url, model=settings.ollama_model,
                   summary_input_chars=settings.summary_input_chars)

    def close(self) -> None:
        self.session.close()

    def is_available(self) -> bool:
        """Cheap probe: does GET /api/tags answer 200 within a few seconds?"""
        try:
            r = self.session.get(f"{self.base_url}/api/tags", timeout=LLM_PROBE_TIMEOUT)
        except requests.RequestException as exc:
            logger.debug("Ollama probe failed: %s", exc)
            return False
        return r.status_code == 200

    def complete(self, prompt: str) -> str:
        payload = {"model": self.model, "prompt": prompt, "stream": False}
        logger.info("OLLAMA REQUEST - model %s, prompt %d chars", self.model, len(prompt))
        try:
            r = self.session.post(f"{self.base_url}/api/generate", json=payload,
                                  timeout=self.timeout)
        except requests.RequestException as exc:
            raise LLMError(f"Ollama API error: {exc}") from exc
        if r.status_code != 200:
            raise LLMError(f"Ollama API returned status code: {r.status_code}")
        try:
            text = r.json().get("response", "")
        except ValueError as exc:
            raise LLMError(f"failed to decode response: {exc}") from exc
        if not text:
            raise LLMError("no response from Ollama API")
        logger.info("OLLAMA RESPONSE - %d chars", len(text))
        return text.strip()

    def summarize(self, title: str, text: str) -> str:
        if len(text) > self.summary_input_chars:
            text = text[:self.summary_input_chars]
        summary = self.complete(_SUMMARY_PROMPT.format(
            limit=SUMMARY_TARGET_CHARS, title=title or "(untitled)", text=text))
        if len(summary) > SUMMARY_TARGET_CHARS * 2:
            summary = summary[:SUMMARY_TARGET_CHARS * 2] + "..."
        return summary

    def answer(self, record: PageRecord, question: str,
               max_context: int = DEFAULT_MAX_CONTEXT) -> str:
        return self.complete(_ANSWER_PROMPT.format(
            context=build_context(record, max_context), question=question))
