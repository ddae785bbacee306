# yt_digest/retrieval/channels/embedded_page.py
"""
Embedded-page channel: caption tracks scraped from the watch page.

The page embeds a captionTracks array inside a script payload, sometimes
as plain JSON and sometimes escaped inside a string literal. Each
extraction step below returns None when the page does not have the
expected shape.
"""

from __future__ import annotations

import json
import logging
import re
import uuid
from typing import Any, List, Mapping, Optional

from yt_digest.logging_core.logger import log_event
from yt_digest.retrieval.bodies import parse_text_markup
from yt_digest.retrieval.channels.base import Channel, timer
from yt_digest.retrieval.errors import NoTracksError, UpstreamShapeError
from yt_digest.retrieval.schema import (
    AUTO_CAPTION_PREFIX,
    CaptionTrack,
    SourceChannel,
    TrackKind,
    TranscriptResult,
)
from yt_digest.retrieval.tracks import select_track, track_kind

SITE_ROOT = "https://www.youtube.com"
CAPTION_TRACKS_KEYS = ('"captionTracks":', '\\"captionTracks\\":')

ESCAPE_REPLACEMENTS = (
    ('\\"', '"'),
    ("\\u003c", "<"),
    ("\\u003e", ">"),
    ("\\u0026", "&"),
    ("\\r\\n", ""),
    ("\\n", ""),
    ("\\r", ""),
    ("\\/", "/"),
)
BARE_KEY = re.compile(r"([{,])\s*([A-Za-z_]\w*)\s*:")


def find_caption_tracks_blob(html: str) -> Optional[str]:
    """Return the bracket-balanced array following the captionTracks key."""
    if not html:
        return None
    index = -1
    for key in CAPTION_TRACKS_KEYS:
        index = html.find(key)
        if index != -1:
            break
    if index == -1:
        return None

    start = html.find("[", index)
    if start == -1:
        return None

    depth = 0
    in_string = False
    escape = False
    for position in range(start, len(html)):
        char = html[position]
        if in_string:
            if escape:
                escape = False
            elif char == "\\":
                escape = True
            elif char == '"':
                in_string = False
            continue
        if char == "\\":
            # escaped quote outside a JSON string: the blob is itself inside a string literal
            escape = not escape
            continue
        if char == '"' and not escape:
            in_string = True
        elif char == "[":
            depth += 1
        elif char == "]":
            depth -= 1
            if depth == 0:
                return html[start:position + 1]
        escape = False
    return None


def unescape_blob(blob: str) -> str:
    for escaped, plain in ESCAPE_REPLACEMENTS:
        blob = blob.replace(escaped, plain)
    return blob


def quote_bare_keys(blob: str) -> str:
    return BARE_KEY.sub(r'\1"\2":', blob)


def _load_list(text: str) -> Optional[List[Any]]:
    try:
        data = json.loads(text)
    except ValueError:
        return None
    return data if isinstance(data, list) else None


def decode_caption_tracks(blob: str) -> Optional[List[Any]]:
    """Parse the blob as-is, then unescaped, then with bare keys quoted."""
    data = _load_list(blob)
    if data is None:
        cleaned = unescape_blob(blob)
        data = _load_list(cleaned)
        if data is None:
            data = _load_list(quote_bare_keys(cleaned))
    return data


def _display_name(entry: Mapping[str, Any]) -> str:
    name = entry.get("name")
    if isinstance(name, str):
        return name
    if isinstance(name, Mapping):
        if isinstance(name.get("simpleText"), str):
            return name["simpleText"]
        runs = name.get("runs")
        if isinstance(runs, list):
            return "".join(str(run.get("text", "")) for run in runs if isinstance(run, Mapping))
    return ""


def to_caption_track(entry: Any) -> Optional[CaptionTrack]:
    if not isinstance(entry, Mapping):
        return None
    vss_id = str(entry.get("vssId") or "")
    language_code = str(entry.get("languageCode") or vss_id.lstrip(".")).strip()
    if not language_code:
        return None

    kind = track_kind(entry.get("kind"))
    if kind is TrackKind.UNSPECIFIED and vss_id.startswith(AUTO_CAPTION_PREFIX):
        kind = TrackKind.AUTO_GENERATED

    base_url = entry.get("baseUrl")
    if isinstance(base_url, str) and base_url:
        base_url = unescape_blob(base_url)
        if base_url.startswith("/"):
            base_url = SITE_ROOT + base_url
    else:
        base_url = None

    return CaptionTrack(
        language_code=language_code,
        display_name=_display_name(entry),
        kind=kind,
        base_url=base_url,
    )


class EmbeddedPageChannel(Channel):
    name = SourceChannel.EMBEDDED_PAGE

    def fetch(
        self,
        video_id: str,
        preferred_language: Optional[str] = None,
        run_id: Optional[uuid.UUID] = None,
    ) -> TranscriptResult:
        logger = self.logger(run_id)

        with timer() as elapsed:
            html = self.fetch_watch_page(video_id)

            blob = find_caption_tracks_blob(html)
            if blob is None:
                raise NoTracksError("No caption tracks found in watch page")

            entries = decode_caption_tracks(blob)
            if entries is None:
                raise UpstreamShapeError("Caption track data in watch page could not be parsed")

            tracks = [track for track in map(to_caption_track, entries) if track and track.base_url]
            if not tracks:
                raise NoTracksError("Watch page lists no fetchable caption tracks")

            track = select_track(tracks, preferred_language, self.config.fallback_languages)
            markup = self.http.get_text(track.base_url, timeout=self.config.request_timeout)
            text = self.accept(parse_text_markup(markup), f"embedded track {track.language_code}")

            log_event(
                logger,
                logging.INFO,
                "Embedded track fetched",
                channel=self.name.value,
                event_type="success",
                metadata={
                    "language": track.language_code,
                    "auto_generated": track.is_auto_generated,
                    "tracks_listed": len(tracks),
                    "elapsed_ms": elapsed(),
                },
            )

        return TranscriptResult(
            text=text,
            language_code=track.base_language,
            is_auto_generated=track.is_auto_generated,
            source_channel=self.name,
        )
