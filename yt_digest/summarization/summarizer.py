# yt_digest/summarization/summarizer.py
"""
Transcript summarization with an OpenAI chat model.

Prompt versioned as a module constant, model call isolated in _call_llm,
transient API failures retried with tenacity. summarize() never raises.
"""

from __future__ import annotations

import logging
from typing import Any, Optional
from uuid import UUID

import openai
import tenacity
from openai import OpenAI
from pydantic import BaseModel, ConfigDict

from yt_digest.config import Settings, get_settings
from yt_digest.logging_core.logger import get_logger, log_event
from yt_digest.retrieval.schema import MIN_TRANSCRIPT_CHARS, is_valid_transcript

PROMPT_VERSION = "1"

SUMMARY_SYSTEM_PROMPT = """
You are a helpful assistant that summarizes YouTube video transcripts.
Create a concise yet comprehensive summary that captures the main points, key insights, and important details.
Format your summary with:
1. A brief overview (1-2 sentences)
2. Main points (bullet points)
3. Key takeaways (2-3 sentences)

If the transcript appears to be cut off or incomplete, mention this in your summary.
""".strip()

TRUNCATION_MARKER = "\n[...transcript truncated...]\n"
DEFAULT_TITLE = "YouTube Video"

TRANSIENT_ERRORS = (
    openai.APIConnectionError,
    openai.RateLimitError,
    openai.InternalServerError,
)
RETRY_WAIT = tenacity.wait_exponential(multiplier=1, min=1, max=10)


class SummaryResult(BaseModel):
    success: bool
    summary: Optional[str] = None
    error: Optional[str] = None
    truncated: bool = False

    model_config = ConfigDict(frozen=True)


def truncate_transcript(transcript: str, max_chars: int = 15000) -> str:
    """Keep the first 60% and last 40% of ``max_chars`` when the transcript is longer."""
    if len(transcript) <= max_chars:
        return transcript
    head = transcript[: int(max_chars * 0.6)]
    tail = transcript[len(transcript) - int(max_chars * 0.4):]
    return f"{head}{TRUNCATION_MARKER}{tail}"


def build_user_prompt(transcript: str, title: Optional[str]) -> str:
    return f"Title: {title or DEFAULT_TITLE}\n\nTranscript:\n{transcript}"


def _call_llm(client: Any, settings: Settings, user_prompt: str) -> str:
    """Isolated model invocation; retries transient API errors."""
    retrying = tenacity.Retrying(
        stop=tenacity.stop_after_attempt(settings.summary_max_attempts),
        wait=RETRY_WAIT,
        retry=tenacity.retry_if_exception_type(TRANSIENT_ERRORS),
        reraise=True,
    )
    for attempt in retrying:
        with attempt:
            response = client.chat.completions.create(
                model=settings.openai_model,
                messages=[
                    {"role": "system", "content": SUMMARY_SYSTEM_PROMPT},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=settings.summary_temperature,
                max_tokens=settings.summary_max_tokens,
            )

    choices = getattr(response, "choices", None) or []
    content = choices[0].message.content if choices else None
    if not content or not content.strip():
        raise RuntimeError("Failed to generate summary")
    return content.strip()


def summarize(
    transcript: Optional[str],
    title: Optional[str] = None,
    settings: Optional[Settings] = None,
    client: Any = None,
    run_id: Optional[UUID] = None,
) -> SummaryResult:
    settings = settings or get_settings()
    logger = get_logger(run_id)

    if not is_valid_transcript(transcript, MIN_TRANSCRIPT_CHARS):
        return SummaryResult(success=False, error="Transcript is too short or empty")

    prepared = truncate_transcript(transcript, settings.summary_max_chars)
    truncated = prepared != transcript
    if truncated:
        log_event(
            logger,
            logging.INFO,
            "Transcript truncated for summarization",
            event_type="progress",
            metadata={"original_chars": len(transcript), "max_chars": settings.summary_max_chars},
        )

    try:
        client = client or OpenAI(api_key=settings.openai_api_key or None)
        summary = _call_llm(client, settings, build_user_prompt(prepared, title))
    except Exception as exc:  # pylint: disable=broad-except
        log_event(
            logger,
            logging.ERROR,
            "Summary generation failed",
            event_type="failure",
            metadata={"exception": str(exc), "model": settings.openai_model},
        )
        return SummaryResult(success=False, error=str(exc) or "Unknown error occurred while generating summary")

    log_event(
        logger,
        logging.INFO,
        "Summary generated",
        event_type="success",
        metadata={"model": settings.openai_model, "prompt_version": PROMPT_VERSION, "chars": len(summary)},
    )
    return SummaryResult(success=True, summary=summary, truncated=truncated)
