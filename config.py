# config.py — crawler / cache / LLM settings from the environment (+ optional .env)
"""
Configuration values.  Every knob can be set via an environment variable or a
``.env`` file in the working directory; bad values fall back to the default
rather than raising.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from datetime import timedelta
from typing import List, Mapping

from dotenv import load_dotenv

# ─────────────────────────── defaults ────────────────────────────
DEFAULT_CACHE_DIR        = "scraped_content"
DEFAULT_MIN_TEXT_LENGTH  = 10
DEFAULT_MAX_CONTENT      = 10_000
DEFAULT_MAX_DEPTH        = 2
MAX_DEPTH_LIMIT          = 10
DEFAULT_PAGE_BUDGET      = 100
DEFAULT_CACHE_HOURS      = 24
DEFAULT_MAX_CONTEXT      = 60_000
DEFAULT_SUMMARY_INPUT    = 8_000
DEFAULT_OLLAMA_URL       = "http://localhost:11434"
DEFAULT_OLLAMA_MODEL     = "codellama:13b"

ROOT_TIMEOUT       = 30
LINKED_TIMEOUT     = 15
DOCUMENT_TIMEOUT   = 60
LLM_TIMEOUT        = 60
LLM_PROBE_TIMEOUT  = 5
# ──────────────────────────────────────────────────────────────────


def _flag(env: Mapping[str, str], key: str, default: bool) -> bool:
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() == "true"


def _int(env: Mapping[str, str], key: str, default: int,
         lo: int | None = None, hi: int | None = None) -> int:
    try:
        value = int(env.get(key, ""))
    except ValueError:
        return default
    if (lo is not None and value < lo) or (hi is not None and value > hi):
        return default
    return value


def parse_patterns(raw: str | None) -> List[str]:
    if not raw:
        return []
    return [p.strip().lower() for p in raw.split(",") if p.strip()]


def memory_cache_duration(cache_duration: timedelta) -> timedelta:
    """In-process cache window: 1h, or 1/24 of a shorter disk window, never under 15 min."""
    if cache_duration >= timedelta(hours=24):
        return timedelta(hours=1)
    return max(cache_duration / 24, timedelta(minutes=15))


@dataclass(frozen=True)
class Settings:
    website_url: str = ""
    allowed_url_patterns: List[str] = field(default_factory=list)
    enable_internal_links: bool = False
    refresh_content: bool = False
    min_text_length: int = DEFAULT_MIN_TEXT_LENGTH
    max_content_length: int = DEFAULT_MAX_CONTENT
    max_depth: int = DEFAULT_MAX_DEPTH
    max_pages_per_session: int = DEFAULT_PAGE_BUDGET
    cache_duration: timedelta = timedelta(hours=DEFAULT_CACHE_HOURS)
    cache_dir: str = DEFAULT_CACHE_DIR
    reuse_by_hash: bool = True
    max_context_length: int = DEFAULT_MAX_CONTEXT
    enable_summarization: bool = True
    summary_input_chars: int = DEFAULT_SUMMARY_INPUT
    ollama_url: str = DEFAULT_OLLAMA_URL
    ollama_model: str = DEFAULT_OLLAMA_MODEL

    @property
    def memory_cache_duration(self) -> timedelta:
        return memory_cache_duration(self.cache_duration)

    def with_overrides(self, **changes) -> "Settings":
        """Copy with CLI overrides applied; `None` values are ignored."""
        changes = {k: v for k, v in changes.items() if v is not None}
        if "max_depth" in changes:
            changes["max_depth"] = min(max(int(changes["max_depth"]), 1), MAX_DEPTH_LIMIT)
        return replace(self, **changes)

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None,
                 dotenv: bool = True) -> "Settings":
        if env is None:
            if dotenv:
                load_dotenv()
            env = os.environ

        min_text = _int(env, "MIN_TEXT_LENGTH", DEFAULT_MIN_TEXT_LENGTH, lo=1)
        max_content = _int(env, "MAX_CONTENT_LENGTH", DEFAULT_MAX_CONTENT)
        if max_content <= min_text:
            max_content = DEFAULT_MAX_CONTENT

        return cls(
            website_url=env.get("WEBSITE_URL", "").strip(),
            allowed_url_patterns=parse_patterns(env.get("ALLOWED_SCRAPING_URL_PATTERNS")),
            enable_internal_links=_flag(env, "ENABLE_INTERNAL_LINK_SCRAPING", False),
            refresh_content=_flag(env, "REFRESH_CONTENT", False),
            min_text_length=min_text,
            max_content_length=max_content,
            max_depth=_int(env, "MAX_SCRAPING_DEPTH", DEFAULT_MAX_DEPTH, lo=1, hi=MAX_DEPTH_LIMIT),
            max_pages_per_session=_int(env, "MAX_PAGES_PER_SESSION", DEFAULT_PAGE_BUDGET, lo=1),
            cache_duration=timedelta(hours=_int(env, "CACHE_DURATION_HOURS", DEFAULT_CACHE_HOURS, lo=1)),
            cache_dir=env.get("CACHE_DIR", "").strip() or DEFAULT_CACHE_DIR,
            reuse_by_hash=_flag(env, "REUSE_CONTENT_BY_HASH", True),
            max_context_length=_int(env, "MAX_CONTEXT_LENGTH", DEFAULT_MAX_CONTEXT, lo=1),
            enable_summarization=_flag(env, "ENABLE_SUMMARIZATION", True),
            summary_input_chars=_int(env, "SUMMARY_INPUT_CHARS", DEFAULT_SUMMARY_INPUT, lo=1),
            ollama_url=(env.get("OLLAMA_URL", "").strip() or DEFAULT_OLLAMA_URL).rstrip("/"),
            ollama_model=env.get("OLLAMA_MODEL", "").strip() or DEFAULT_OLLAMA_MODEL,
        )
