# yt_digest/digest.py
"""
Retrieve a transcript, then summarize it.

A transcript failure ends the run with the retrieval error. A summary
failure keeps the transcript and records the summary error.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict

from yt_digest.config import Settings, get_settings
from yt_digest.retrieval.core import TranscriptRetriever
from yt_digest.retrieval.http import HttpClient
from yt_digest.retrieval.schema import RetrievalOutcome
from yt_digest.summarization.summarizer import summarize


class DigestResult(BaseModel):
    success: bool
    outcome: RetrievalOutcome
    summary: Optional[str] = None
    error: Optional[str] = None

    model_config = ConfigDict(frozen=True)


def run_digest(
    reference: str,
    preferred_language: Optional[str] = None,
    settings: Optional[Settings] = None,
    http: Optional[HttpClient] = None,
    llm_client: Any = None,
    retriever: Optional[TranscriptRetriever] = None,
) -> DigestResult:
    settings = settings or get_settings()
    owns_retriever = retriever is None
    retriever = retriever or TranscriptRetriever(http=http, config=settings.retrieval_config())

    try:
        outcome = retriever.retrieve(reference, preferred_language)
    finally:
        if owns_retriever:
            retriever.close()

    if not outcome.success:
        return DigestResult(success=False, outcome=outcome, error=outcome.error)

    result = summarize(outcome.transcript, outcome.title, settings=settings, client=llm_client)
    if not result.success:
        return DigestResult(
            success=True,
            outcome=outcome,
            error=f"Summary generation failed: {result.error}",
        )
    return DigestResult(success=True, outcome=outcome, summary=result.summary)
