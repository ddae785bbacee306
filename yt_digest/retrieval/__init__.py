# yt_digest/retrieval/__init__.py
"""Transcript retrieval core: identifier extraction, channels, fallback orchestration."""

from yt_digest.retrieval.core import TranscriptRetriever, retrieve_transcript
from yt_digest.retrieval.schema import (
    CaptionTrack,
    ChannelAttempt,
    FailureType,
    RetrievalConfig,
    RetrievalOutcome,
    SourceChannel,
    TrackKind,
    TranscriptResult,
)
from yt_digest.retrieval.video_id import extract_video_id

__all__ = [
    "CaptionTrack",
    "ChannelAttempt",
    "FailureType",
    "RetrievalConfig",
    "RetrievalOutcome",
    "SourceChannel",
    "TrackKind",
    "TranscriptResult",
    "TranscriptRetriever",
    "extract_video_id",
    "retrieve_transcript",
]
