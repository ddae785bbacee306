# yt_digest/retrieval/errors.py
"""
Error taxonomy for transcript retrieval.

InputError is terminal for a call. Everything under ChannelError is
transient: it fails one attempt (or one channel) and triggers fallback.
"""

from __future__ import annotations

from typing import Optional

from yt_digest.retrieval.schema import FailureType


class TranscriptError(Exception):
    """Base class for all retrieval errors."""

    failure_type: FailureType = FailureType.CHANNELS_EXHAUSTED


class InputError(TranscriptError):
    """The reference string does not identify a video."""

    failure_type = FailureType.INPUT_ERROR


class ChannelError(TranscriptError):
    """A single attempt or a whole channel failed; never fatal to the call."""

    failure_type = FailureType.PARSE_FAILURE

    def __init__(self, message: str = "", failure_type: Optional[FailureType] = None) -> None:
        super().__init__(message)
        if failure_type is not None:
            self.failure_type = failure_type


class NoTracksError(ChannelError):
    failure_type = FailureType.NO_TRACKS


class ParseFailureError(ChannelError):
    failure_type = FailureType.PARSE_FAILURE


class UpstreamShapeError(ChannelError):
    """A structured response matched none of the known shapes."""

    failure_type = FailureType.UPSTREAM_SHAPE


class TranscriptTooShortError(ChannelError):
    failure_type = FailureType.TOO_SHORT


class TransportError(ChannelError):
    failure_type = FailureType.TRANSPORT_ERROR


class TransportTimeout(TransportError):
    pass


class UpstreamStatusError(TransportError):
    def __init__(self, status_code: int, url: str, message: Optional[str] = None) -> None:
        self.status_code = status_code
        self.url = url
        super().__init__(message or f"HTTP {status_code} from {url}")
