# yt_digest/retrieval/schema.py
"""
Authoritative contracts for the transcript retrieval core.

Defines:
- Caption track descriptors produced by catalog parsing
- The uniform result every channel returns
- The outcome of a top-level retrieval call, with per-channel attempts
- Retrieval policy configuration

Every entity here is transient within one retrieval call.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

MIN_TRANSCRIPT_CHARS = 20
UNKNOWN_TITLE = "Unknown Title"
AUTO_CAPTION_PREFIX = "a."
ENGLISH_FAMILY: Tuple[str, ...] = ("en", "en-US", "en-GB")
DEFAULT_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
EXHAUSTED_MESSAGE = (
    "Could not retrieve transcript after trying multiple methods. "
    "The video may not have captions available."
)


class TrackKind(str, Enum):
    MANUAL = "manual"
    AUTO_GENERATED = "auto-generated"
    UNSPECIFIED = "unspecified"


class SourceChannel(str, Enum):
    CATALOG_API = "catalog-api"
    EMBEDDED_PAGE = "embedded-page"
    INTERNAL_API = "internal-api"


class FailureType(str, Enum):
    """Typed failure categories for machine-parsable diagnostics."""
    INPUT_ERROR = "input_error"
    CHANNELS_EXHAUSTED = "channels_exhausted"
    NO_TRACKS = "no_tracks"
    PARSE_FAILURE = "parse_failure"
    UPSTREAM_SHAPE = "upstream_shape"
    TRANSPORT_ERROR = "transport_error"
    TOO_SHORT = "too_short"


_AUTO_NAME_MARKERS = ("auto-generated", "automatic")


class CaptionTrack(BaseModel):
    """One caption stream listed by the platform."""
    language_code: str = Field(min_length=1)
    display_name: str = ""
    kind: TrackKind = TrackKind.UNSPECIFIED
    base_url: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    @property
    def is_auto_generated(self) -> bool:
        if self.kind is TrackKind.AUTO_GENERATED:
            return True
        name = self.display_name.lower()
        if any(marker in name for marker in _AUTO_NAME_MARKERS):
            return True
        return self.language_code.startswith(AUTO_CAPTION_PREFIX)

    @property
    def base_language(self) -> str:
        """Language code without the auto-caption prefix."""
        if self.language_code.startswith(AUTO_CAPTION_PREFIX):
            return self.language_code[len(AUTO_CAPTION_PREFIX):]
        return self.language_code


class TranscriptResult(BaseModel):
    """Terminal output of a successful channel call."""
    text: str
    language_code: str
    is_auto_generated: bool = False
    source_channel: SourceChannel

    model_config = ConfigDict(frozen=True)


class ChannelAttempt(BaseModel):
    """Diagnostics for one channel invoked during a retrieval call."""
    channel: SourceChannel
    success: bool
    failure_type: Optional[FailureType] = None
    detail: Optional[str] = None

    model_config = ConfigDict(frozen=True)


class RetrievalOutcome(BaseModel):
    """
    Result of retrieve_transcript().

    Either a success carrying the transcript and the channel that produced
    it, or a failure carrying a short human-readable error. Failures keep
    video_id and title when they are known so callers can render context.
    """
    success: bool
    reference: Optional[str] = None
    video_id: Optional[str] = None
    title: str = UNKNOWN_TITLE
    transcript: Optional[str] = None
    language_code: Optional[str] = None
    is_auto_generated: Optional[bool] = None
    channel_name: Optional[SourceChannel] = None
    error: Optional[str] = None
    failure_type: Optional[FailureType] = None
    attempts: List[ChannelAttempt] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def validate_variant(self) -> "RetrievalOutcome":
        if self.success:
            if not self.transcript or self.channel_name is None or self.language_code is None:
                raise ValueError("successful outcome requires transcript, language_code and channel_name")
            if self.error is not None:
                raise ValueError("successful outcome cannot carry an error")
        else:
            if not self.error:
                raise ValueError("failed outcome requires an error message")
            if self.transcript is not None or self.channel_name is not None:
                raise ValueError("failed outcome cannot carry transcript fields")
        return self

    @classmethod
    def succeeded(
        cls,
        result: TranscriptResult,
        *,
        reference: Optional[str],
        video_id: str,
        title: str,
        attempts: List[ChannelAttempt],
    ) -> "RetrievalOutcome":
        return cls(
            success=True,
            reference=reference,
            video_id=video_id,
            title=title,
            transcript=result.text,
            language_code=result.language_code,
            is_auto_generated=result.is_auto_generated,
            channel_name=result.source_channel,
            attempts=attempts,
        )

    @classmethod
    def failed(
        cls,
        error: str,
        failure_type: FailureType,
        *,
        reference: Optional[str],
        video_id: Optional[str] = None,
        title: str = UNKNOWN_TITLE,
        attempts: Optional[List[ChannelAttempt]] = None,
    ) -> "RetrievalOutcome":
        return cls(
            success=False,
            reference=reference,
            video_id=video_id,
            title=title,
            error=error,
            failure_type=failure_type,
            attempts=attempts or [],
        )


@dataclass
class RetrievalConfig:
    """Per-call retrieval policy."""
    preferred_language: Optional[str] = "en"
    fallback_languages: Tuple[str, ...] = ENGLISH_FAMILY
    # None is the wildcard: let the selector pick from whatever is listed
    catalog_languages: Tuple[Optional[str], ...] = ("en", "en-US", "en-GB", "es", "fr", "de", None)
    min_transcript_chars: int = MIN_TRANSCRIPT_CHARS
    request_timeout: float = 5.0
    page_timeout: float = 8.0
    lookup_title: bool = True
    use_ytdlp_title: bool = True
    title_timeout: float = 10.0
    user_agent: str = DEFAULT_USER_AGENT
    accept_language: str = "en-US,en;q=0.9"
    extra_headers: dict = field(default_factory=dict)


def normalize_whitespace(text: Optional[str]) -> str:
    return " ".join((text or "").split())


def is_valid_transcript(text: Optional[str], min_chars: int = MIN_TRANSCRIPT_CHARS) -> bool:
    return len(normalize_whitespace(text)) >= min_chars
