# yt_digest/retrieval/channels/base.py
"""
Shared contract and utilities for transcript channels.

A channel is one end-to-end strategy for obtaining a transcript. It owns
its upstream calls, exhausts its own sub-strategies, and either returns a
TranscriptResult or raises ChannelError. Nothing else leaves a channel.
"""

from __future__ import annotations

import logging
import time
import uuid
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

from yt_digest.logging_core.logger import get_logger, log_event
from yt_digest.retrieval.errors import TranscriptTooShortError
from yt_digest.retrieval.http import HttpClient
from yt_digest.retrieval.schema import (
    RetrievalConfig,
    SourceChannel,
    TranscriptResult,
    is_valid_transcript,
    normalize_whitespace,
)

WATCH_URL = "https://www.youtube.com/watch"


@contextmanager
def timer() -> Iterator[Callable[[], float]]:
    """
    Yield a function returning milliseconds elapsed since entry.

    Usage:
        with timer() as elapsed:
            ...
        log(..., metadata={"elapsed_ms": elapsed()})
    """
    start = time.perf_counter()

    def elapsed() -> float:
        return round((time.perf_counter() - start) * 1000, 1)

    yield elapsed


class Channel(ABC):
    """Interface every channel adapter implements."""

    name: SourceChannel

    def __init__(self, http: HttpClient, config: Optional[RetrievalConfig] = None) -> None:
        self.http = http
        self.config = config or RetrievalConfig()

    @abstractmethod
    def fetch(
        self,
        video_id: str,
        preferred_language: Optional[str] = None,
        run_id: Optional[uuid.UUID] = None,
    ) -> TranscriptResult:
        """Return a transcript or raise ChannelError once every option is spent."""

    def logger(self, run_id: Optional[uuid.UUID]) -> logging.LoggerAdapter:
        return get_logger(run_id)

    def log_attempt_failure(self, logger: logging.LoggerAdapter, message: str, **metadata) -> None:
        log_event(
            logger,
            logging.WARNING,
            message,
            channel=self.name.value,
            event_type="attempt",
            metadata=metadata,
        )

    def fetch_watch_page(self, video_id: str) -> str:
        return self.http.get_text(
            WATCH_URL,
            params={"v": video_id},
            timeout=self.config.page_timeout,
        )

    def accept(self, text: str, what: str) -> str:
        """Normalize text, raising TranscriptTooShortError below the threshold."""
        if not is_valid_transcript(text, self.config.min_transcript_chars):
            raise TranscriptTooShortError(f"{what} produced too little text ({len(normalize_whitespace(text))} chars)")
        return normalize_whitespace(text)
