# yt_digest/retrieval/diagnostics.py
"""
Per-call aggregation of channel attempts.

Collects one ChannelAttempt per channel invoked and summarizes them for the
final log line of a retrieval run.
"""

from __future__ import annotations

from collections import Counter
from typing import Dict, List, Optional
from uuid import UUID

from yt_digest.retrieval.schema import ChannelAttempt, FailureType, SourceChannel


class AttemptCollector:
    """Accumulates channel attempts for one retrieval run. Not shared across runs."""

    def __init__(self, run_id: UUID) -> None:
        self.run_id = run_id
        self._attempts: List[ChannelAttempt] = []

    def add_success(self, channel: SourceChannel) -> None:
        self._attempts.append(ChannelAttempt(channel=channel, success=True))

    def add_failure(self, channel: SourceChannel, failure_type: FailureType, detail: Optional[str] = None) -> None:
        self._attempts.append(
            ChannelAttempt(channel=channel, success=False, failure_type=failure_type, detail=detail)
        )

    def build(self) -> List[ChannelAttempt]:
        return list(self._attempts)

    def summary(self) -> Dict[str, object]:
        failures = Counter(
            attempt.failure_type.value for attempt in self._attempts if attempt.failure_type is not None
        )
        return {
            "run_id": str(self.run_id),
            "channels_tried": [attempt.channel.value for attempt in self._attempts],
            "failures": dict(failures),
        }
