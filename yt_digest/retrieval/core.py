# yt_digest/retrieval/core.py
"""
Fallback orchestrator for transcript retrieval.
Single responsibility: try channels in fixed order, validate, map to outcome.

Idle -> TryChannel(i) -> Succeeded | NextChannel -> ... -> Exhausted
"""

from __future__ import annotations

import logging
import uuid
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Any, Callable, List, Optional, Sequence, Tuple

from yt_digest.logging_core.logger import get_logger, log_event
from yt_digest.retrieval.channels import DEFAULT_CHANNEL_TYPES, Channel
from yt_digest.retrieval.diagnostics import AttemptCollector
from yt_digest.retrieval.errors import ChannelError, InputError
from yt_digest.retrieval.http import HttpClient
from yt_digest.retrieval.schema import (
    EXHAUSTED_MESSAGE,
    UNKNOWN_TITLE,
    ChannelAttempt,
    FailureType,
    RetrievalConfig,
    RetrievalOutcome,
    TranscriptResult,
    is_valid_transcript,
    normalize_whitespace,
)
from yt_digest.retrieval.title import lookup_title
from yt_digest.retrieval.video_id import extract_video_id

INPUT_ERROR_MESSAGE = "Could not extract video ID from URL"

TitleLookup = Callable[[str, uuid.UUID], str]


class TranscriptRetriever:
    """
    Runs channel adapters in priority order and returns the first valid transcript.

    Holds no per-call state; one instance can serve concurrent calls.
    """

    def __init__(
        self,
        http: Optional[HttpClient] = None,
        config: Optional[RetrievalConfig] = None,
        channels: Optional[Sequence[Channel]] = None,
        title_lookup: Optional[TitleLookup] = None,
    ) -> None:
        self.config = config or RetrievalConfig()
        self._owns_http = http is None
        self.http = http or HttpClient.from_config(self.config)
        if channels is None:
            channels = [channel_type(self.http, self.config) for channel_type in DEFAULT_CHANNEL_TYPES]
        self.channels: List[Channel] = list(channels)
        self.title_lookup = title_lookup or self._default_title_lookup

    def _default_title_lookup(self, video_id: str, run_id: uuid.UUID) -> str:
        # one session per lookup, owned by the title worker thread
        http = HttpClient.from_config(self.config)
        try:
            return lookup_title(video_id, http, run_id, use_ytdlp=self.config.use_ytdlp_title)
        finally:
            http.close()

    def close(self) -> None:
        if self._owns_http:
            self.http.close()

    def retrieve(self, reference: Any, preferred_language: Optional[str] = None) -> RetrievalOutcome:
        """Resolve ``reference`` to an outcome. Never raises."""
        run_id = uuid.uuid4()
        logger = get_logger(run_id)
        safe_reference = reference if isinstance(reference, str) else None

        log_event(
            logger,
            logging.INFO,
            "Starting transcript retrieval",
            event_type="start",
            metadata={"reference": safe_reference},
        )

        try:
            return self._retrieve(safe_reference, preferred_language, run_id, logger)
        except InputError as exc:
            log_event(
                logger,
                logging.WARNING,
                "No video id in reference",
                event_type="failure",
                metadata={"reference": safe_reference},
            )
            return RetrievalOutcome.failed(str(exc), exc.failure_type, reference=safe_reference)
        except Exception as exc:  # pylint: disable=broad-except
            log_event(
                logger,
                logging.ERROR,
                "Unhandled exception during retrieval",
                event_type="failure",
                metadata={"exception": str(exc)},
                exc_info=True,
            )
            return RetrievalOutcome.failed(
                EXHAUSTED_MESSAGE,
                FailureType.CHANNELS_EXHAUSTED,
                reference=safe_reference,
                video_id=extract_video_id(safe_reference),
            )

    def _retrieve(
        self,
        reference: Optional[str],
        preferred_language: Optional[str],
        run_id: uuid.UUID,
        logger: logging.LoggerAdapter,
    ) -> RetrievalOutcome:
        video_id = extract_video_id(reference)
        if not video_id:
            raise InputError(INPUT_ERROR_MESSAGE)

        language = preferred_language or self.config.preferred_language

        # title lookup overlaps with the channel loop
        pool = ThreadPoolExecutor(max_workers=1) if self.config.lookup_title else None
        try:
            title_future = pool.submit(self._safe_title, video_id, run_id) if pool is not None else None
            result, attempts = self._run_channels(video_id, language, run_id, logger)
            title = self._await_title(title_future, logger)
        finally:
            if pool is not None:
                pool.shutdown(wait=False)

        if result is None:
            log_event(
                logger,
                logging.WARNING,
                "All channels exhausted",
                event_type="failure",
                metadata={"video_id": video_id, "attempts": [a.model_dump(mode="json") for a in attempts]},
            )
            return RetrievalOutcome.failed(
                EXHAUSTED_MESSAGE,
                FailureType.CHANNELS_EXHAUSTED,
                reference=reference,
                video_id=video_id,
                title=title,
                attempts=attempts,
            )

        log_event(
            logger,
            logging.INFO,
            "Transcript retrieved",
            channel=result.source_channel.value,
            event_type="success",
            metadata={
                "video_id": video_id,
                "language": result.language_code,
                "auto_generated": result.is_auto_generated,
                "chars": len(result.text),
            },
        )
        return RetrievalOutcome.succeeded(
            result,
            reference=reference,
            video_id=video_id,
            title=title,
            attempts=attempts,
        )

    def _safe_title(self, video_id: str, run_id: uuid.UUID) -> str:
        try:
            return self.title_lookup(video_id, run_id) or UNKNOWN_TITLE
        except Exception:  # pylint: disable=broad-except
            return UNKNOWN_TITLE

    def _await_title(self, title_future: Optional[Future], logger: logging.LoggerAdapter) -> str:
        if title_future is None:
            return UNKNOWN_TITLE
        try:
            return title_future.result(timeout=self.config.title_timeout)
        except FutureTimeoutError:
            log_event(
                logger,
                logging.WARNING,
                "Title lookup timed out, using placeholder",
                event_type="attempt",
                metadata={"timeout": self.config.title_timeout},
            )
            return UNKNOWN_TITLE

    def _run_channels(
        self,
        video_id: str,
        language: Optional[str],
        run_id: uuid.UUID,
        logger: logging.LoggerAdapter,
    ) -> Tuple[Optional[TranscriptResult], List[ChannelAttempt]]:
        collector = AttemptCollector(run_id)

        for channel in self.channels:
            channel_name = channel.name
            log_event(logger, logging.INFO, "Trying channel", channel=channel_name.value, event_type="start")

            try:
                result = channel.fetch(video_id, language, run_id)
            except ChannelError as exc:
                collector.add_failure(channel_name, exc.failure_type, str(exc))
                log_event(
                    logger,
                    logging.WARNING,
                    "Channel failed",
                    channel=channel_name.value,
                    event_type="failure",
                    metadata={"failure_type": exc.failure_type.value, "error": str(exc)},
                )
                continue
            except Exception as exc:  # pylint: disable=broad-except
                # unknown failures are treated like shape drift
                collector.add_failure(channel_name, FailureType.UPSTREAM_SHAPE, str(exc))
                log_event(
                    logger,
                    logging.ERROR,
                    "Channel raised unexpectedly",
                    channel=channel_name.value,
                    event_type="failure",
                    metadata={"exception": str(exc)},
                    exc_info=True,
                )
                continue

            if result is None or not is_valid_transcript(result.text, self.config.min_transcript_chars):
                collector.add_failure(channel_name, FailureType.TOO_SHORT, "Channel returned no usable transcript")
                log_event(
                    logger,
                    logging.WARNING,
                    "Channel returned invalid result",
                    channel=channel_name.value,
                    event_type="failure",
                )
                continue

            collector.add_success(channel_name)
            validated = result.model_copy(
                update={"text": normalize_whitespace(result.text), "source_channel": channel_name}
            )
            return validated, collector.build()

        log_event(logger, logging.INFO, "Channel summary", event_type="attempt", metadata=collector.summary())
        return None, collector.build()


def retrieve_transcript(
    reference: Any,
    preferred_language: Optional[str] = None,
    config: Optional[RetrievalConfig] = None,
    http: Optional[HttpClient] = None,
) -> RetrievalOutcome:
    """Retrieve a transcript for a URL or bare reference. Always returns an outcome."""
    retriever = TranscriptRetriever(http=http, config=config)
    try:
        return retriever.retrieve(reference, preferred_language)
    finally:
        retriever.close()


# High-Level Intent
# retrieve_transcript() is the only entry point collaborators need.
# Channels are tried strictly one after another; a later channel's cost is
# paid only when every earlier one failed.

# Edge Cases
# No video id → InputError → INPUT_ERROR, no channel attempted, no network call.
# Title lookup slower than title_timeout → placeholder title, outcome not delayed.
# Channel raises → recorded as an attempt, next channel tried.
# Channel returns < 20 chars after whitespace normalization → too_short.
# All channels fail → CHANNELS_EXHAUSTED with the generic captions message.
