# yt_digest/retrieval/channels/catalog_api.py
"""
Catalog-API channel: list tracks, pick one, fetch its body.

For each candidate language the catalog is fetched and parsed, a track is
selected, and the body is requested as cue-timed JSON first and markup-tag
text second. When every candidate fails, auto captions are requested
directly (kind=asr) without listing, since listings sometimes omit them.
"""

from __future__ import annotations

import logging
import uuid
from typing import Dict, Iterator, List, Optional, Set, Tuple

from yt_digest.logging_core.logger import log_event
from yt_digest.retrieval.bodies import parse_cue_events, parse_text_markup
from yt_digest.retrieval.channels.base import Channel, timer
from yt_digest.retrieval.errors import ChannelError, NoTracksError
from yt_digest.retrieval.schema import CaptionTrack, FailureType, SourceChannel, TranscriptResult
from yt_digest.retrieval.tracks import ASR_KIND, parse_track_catalog, select_track

TIMEDTEXT_URL = "https://www.youtube.com/api/timedtext"


class CatalogApiChannel(Channel):
    name = SourceChannel.CATALOG_API

    def fetch(
        self,
        video_id: str,
        preferred_language: Optional[str] = None,
        run_id: Optional[uuid.UUID] = None,
    ) -> TranscriptResult:
        logger = self.logger(run_id)
        tried: Set[Tuple[str, bool]] = set()
        saw_tracks = False

        for language in self._candidate_languages(preferred_language):
            label = language or "any"
            with timer() as elapsed:
                try:
                    tracks = self._list_tracks(video_id)
                    saw_tracks = True
                    track = select_track(tracks, language, self.config.fallback_languages)
                    key = (track.base_language.lower(), track.is_auto_generated)
                    if key in tried:
                        continue
                    tried.add(key)

                    text = self._fetch_track_text(video_id, track, logger)
                    log_event(
                        logger,
                        logging.INFO,
                        "Catalog track fetched",
                        channel=self.name.value,
                        event_type="success",
                        metadata={
                            "language": track.language_code,
                            "auto_generated": track.is_auto_generated,
                            "elapsed_ms": elapsed(),
                        },
                    )
                    return TranscriptResult(
                        text=text,
                        language_code=track.base_language,
                        is_auto_generated=track.is_auto_generated,
                        source_channel=self.name,
                    )
                except ChannelError as exc:
                    self.log_attempt_failure(
                        logger,
                        "Catalog language attempt failed",
                        language=label,
                        failure_type=exc.failure_type.value,
                        error=str(exc),
                        elapsed_ms=elapsed(),
                    )

        try:
            return self._fetch_direct_auto_captions(video_id, preferred_language, logger)
        except ChannelError as exc:
            failure_type = exc.failure_type if saw_tracks else FailureType.NO_TRACKS
            raise ChannelError(f"Catalog API exhausted: {exc}", failure_type=failure_type) from exc

    def _candidate_languages(self, preferred_language: Optional[str]) -> Iterator[Optional[str]]:
        candidates: List[Optional[str]] = [preferred_language] if preferred_language else []
        candidates.extend(self.config.catalog_languages)

        seen: Set[Optional[str]] = set()
        for language in candidates:
            key = language.lower() if language else None
            if key in seen:
                continue
            seen.add(key)
            yield language

    def _list_tracks(self, video_id: str) -> List[CaptionTrack]:
        listing = self.http.get_text(
            TIMEDTEXT_URL,
            params={"v": video_id, "type": "list"},
            timeout=self.config.request_timeout,
        )
        tracks = parse_track_catalog(listing)
        if not tracks:
            raise NoTracksError("Catalog lists no caption tracks")
        return tracks

    def _fetch_track_text(self, video_id: str, track: CaptionTrack, logger: logging.LoggerAdapter) -> str:
        params: Dict[str, str] = {"v": video_id, "lang": track.base_language}
        if track.is_auto_generated:
            params["kind"] = ASR_KIND
        return self._fetch_body(params, logger, what=f"track {track.language_code}")

    def _fetch_body(self, params: Dict[str, str], logger: logging.LoggerAdapter, what: str) -> str:
        """Cue-timed format first, markup-tag format second."""
        try:
            payload = self.http.get_json(
                TIMEDTEXT_URL,
                params={**params, "fmt": "json3"},
                timeout=self.config.request_timeout,
            )
            return self.accept(parse_cue_events(payload), f"{what} (json3)")
        except ChannelError as exc:
            self.log_attempt_failure(
                logger,
                "Cue-timed format failed, trying markup format",
                target=what,
                failure_type=exc.failure_type.value,
                error=str(exc),
            )

        markup = self.http.get_text(TIMEDTEXT_URL, params=params, timeout=self.config.request_timeout)
        return self.accept(parse_text_markup(markup), f"{what} (xml)")

    def _fetch_direct_auto_captions(
        self,
        video_id: str,
        preferred_language: Optional[str],
        logger: logging.LoggerAdapter,
    ) -> TranscriptResult:
        languages: List[str] = []
        for language in (preferred_language, *self.config.fallback_languages[:1]):
            if language and language not in languages:
                languages.append(language)

        last_error: Optional[ChannelError] = None
        for language in languages:
            params = {"v": video_id, "lang": language, "kind": ASR_KIND}
            try:
                text = self._fetch_body(params, logger, what=f"direct auto captions {language}")
            except ChannelError as exc:
                last_error = exc
                self.log_attempt_failure(
                    logger,
                    "Direct auto-caption attempt failed",
                    language=language,
                    failure_type=exc.failure_type.value,
                    error=str(exc),
                )
                continue
            return TranscriptResult(
                text=text,
                language_code=language,
                is_auto_generated=True,
                source_channel=self.name,
            )

        raise last_error or NoTracksError("No language available for direct auto captions")
